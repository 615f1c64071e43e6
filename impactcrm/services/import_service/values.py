"""Normalized field values produced by the import pipeline.

Every cell of an imported row ends up as exactly one of these variants, so
the row validator and the record store adapter share one contract instead
of passing untyped strings around.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Union


@dataclass(frozen=True)
class Text:
    value: str

    def to_storage(self) -> str:
        return self.value


@dataclass(frozen=True)
class Integer:
    value: int

    def to_storage(self) -> int:
        return self.value


@dataclass(frozen=True)
class Date:
    value: date

    def to_storage(self) -> str:
        return self.value.isoformat()


@dataclass(frozen=True)
class Currency:
    value: Decimal

    def to_storage(self) -> int | float:
        """Whole amounts are stored as int, fractional ones as float."""
        if self.value == self.value.to_integral_value():
            return int(self.value)
        return float(self.value)


@dataclass(frozen=True)
class Absent:
    """The field is unset (blank cell or missing column)."""

    def to_storage(self) -> None:
        return None


ABSENT = Absent()

NormalizedValue = Union[Text, Integer, Date, Currency, Absent]


@dataclass(frozen=True)
class FieldError:
    """A cell that could not be normalized; ``message`` omits the row prefix."""

    message: str


def to_storage_dict(values: dict[str, NormalizedValue]) -> dict[str, Any]:
    """Convert a normalized record to plain values for the record store."""
    return {name: value.to_storage() for name, value in values.items()}
