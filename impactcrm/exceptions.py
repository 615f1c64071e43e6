"""Exception hierarchy for ImpactCRM.

Validation problems found in uploaded files are never raised; they are
returned as data on the import outcome. The exceptions here cover
infrastructure failures and programming errors at the service seams.
"""


class ImpactCRMError(Exception):
    """Base class for all ImpactCRM errors."""


class RecordStoreError(ImpactCRMError):
    """The backing store rejected or failed to complete an operation."""

    def __init__(self, message: str, table: str | None = None):
        super().__init__(message)
        self.table = table


class UnknownRecordTypeError(ImpactCRMError, KeyError):
    """Raised when a record type key has no registered schema."""

    def __init__(self, record_type: str):
        super().__init__(record_type)
        self.record_type = record_type

    def __str__(self) -> str:
        return f"Unknown record type '{self.record_type}'"


class TenantResolutionError(ImpactCRMError):
    """The current user could not be mapped to an organization."""


class RecordValidationError(ImpactCRMError):
    """A single record submitted for create or edit failed validation."""

    def __init__(self, errors: list[str]):
        super().__init__("; ".join(errors))
        self.errors = errors
