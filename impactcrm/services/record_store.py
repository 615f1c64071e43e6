"""Record store adapters: tenant-scoped table reads and bulk writes.

The import pipeline depends only on the ``RecordStore`` protocol. The
MongoDB implementation maps table names to Beanie documents; the in-memory
implementation backs unit tests and CLI dry runs.
"""

import copy
import logging
import uuid
from collections.abc import Sequence
from typing import Any, Protocol

from beanie import PydanticObjectId
from bson.errors import InvalidDocument, InvalidId
from pydantic import ValidationError
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import BulkWriteError, PyMongoError

from impactcrm.exceptions import RecordStoreError
from impactcrm.models.records import TABLE_MODELS, TenantScopedDocument

logger = logging.getLogger(__name__)

# Sort keys: ["client_name"] or [("year", -1), ("client_name", 1)]
Order = Sequence[str | tuple[str, int]]


def _sort_spec(order: Order | None) -> list[tuple[str, int]]:
    spec: list[tuple[str, int]] = []
    for item in order or ():
        if isinstance(item, str):
            if item.startswith("-"):
                spec.append((item[1:], DESCENDING))
            else:
                spec.append((item, ASCENDING))
        else:
            spec.append((item[0], DESCENDING if item[1] < 0 else ASCENDING))
    return spec


def _to_row(document: TenantScopedDocument) -> dict[str, Any]:
    row = document.model_dump(mode="json")
    row.pop("revision_id", None)
    return row


class RecordStore(Protocol):
    """Table-oriented persistence used by imports, listings and exports."""

    async def insert(self, table: str, records: list[dict[str, Any]]) -> int:
        """Insert all records in one operation; all land or none do."""
        ...

    async def select(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        order: Order | None = None,
    ) -> list[dict[str, Any]]:
        """Return rows matching every equality filter, sorted by ``order``."""
        ...

    async def count(self, table: str, filters: dict[str, Any] | None = None) -> int:
        ...

    async def create(self, table: str, record: dict[str, Any]) -> dict[str, Any]:
        """Insert one record and return it as stored, id included."""
        ...

    async def update(
        self,
        table: str,
        record_id: str,
        changes: dict[str, Any],
        filters: dict[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        """Set ``changes`` on the record with ``record_id`` that also matches
        ``filters``; return the updated row, or None if there is no such record."""
        ...

    async def delete(
        self, table: str, record_id: str, filters: dict[str, Any] | None = None
    ) -> bool:
        """Delete the record with ``record_id`` that also matches ``filters``."""
        ...


def _id_query(record_id: str, filters: dict[str, Any] | None) -> dict[str, Any] | None:
    try:
        object_id = PydanticObjectId(record_id)
    except (InvalidId, TypeError):
        return None
    return {**(filters or {}), "_id": object_id}


class MongoRecordStore:
    """Record store over the Beanie document models."""

    def _model(self, table: str) -> type[TenantScopedDocument]:
        try:
            return TABLE_MODELS[table]
        except KeyError:
            raise RecordStoreError(f"No collection registered for table '{table}'", table) from None

    async def _rollback(
        self, model: type[TenantScopedDocument], table: str, ids: list[PydanticObjectId]
    ) -> None:
        if not ids:
            return
        try:
            await model.find({"_id": {"$in": ids}}).delete()
        except PyMongoError:
            logger.exception("Rollback of partial insert into %s failed", table)

    async def insert(self, table: str, records: list[dict[str, Any]]) -> int:
        if not records:
            return 0
        model = self._model(table)

        try:
            # Ids are assigned up front so a failed batch can be removed again
            documents = [model(**{"id": PydanticObjectId(), **record}) for record in records]
        except ValidationError as e:
            raise RecordStoreError(f"Records rejected by '{table}' schema: {e}", table) from e

        try:
            await model.insert_many(documents)
        except BulkWriteError as e:
            # Ordered inserts stop at the first failure; only the prefix landed
            landed = documents[: e.details.get("nInserted", 0)]
            await self._rollback(model, table, [doc.id for doc in landed])
            raise RecordStoreError(f"Insert into '{table}' failed: {e}", table) from e
        except (PyMongoError, InvalidDocument, OverflowError) as e:
            # BSON encoding errors (e.g. ints beyond 8 bytes) are not PyMongoErrors
            await self._rollback(model, table, [doc.id for doc in documents])
            raise RecordStoreError(f"Insert into '{table}' failed: {e}", table) from e

        return len(documents)

    async def select(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        order: Order | None = None,
    ) -> list[dict[str, Any]]:
        model = self._model(table)
        query = model.find(dict(filters or {}))
        sort = _sort_spec(order)
        if sort:
            query = query.sort(sort)
        try:
            documents = await query.to_list()
        except PyMongoError as e:
            raise RecordStoreError(f"Query on '{table}' failed: {e}", table) from e
        return [_to_row(doc) for doc in documents]

    async def count(self, table: str, filters: dict[str, Any] | None = None) -> int:
        model = self._model(table)
        try:
            return await model.find(dict(filters or {})).count()
        except PyMongoError as e:
            raise RecordStoreError(f"Count on '{table}' failed: {e}", table) from e

    async def create(self, table: str, record: dict[str, Any]) -> dict[str, Any]:
        model = self._model(table)
        try:
            document = model(**record)
        except ValidationError as e:
            raise RecordStoreError(f"Record rejected by '{table}' schema: {e}", table) from e
        try:
            await document.insert()
        except (PyMongoError, InvalidDocument, OverflowError) as e:
            raise RecordStoreError(f"Insert into '{table}' failed: {e}", table) from e
        return _to_row(document)

    async def update(
        self,
        table: str,
        record_id: str,
        changes: dict[str, Any],
        filters: dict[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        model = self._model(table)
        query = _id_query(record_id, filters)
        if query is None:
            return None
        try:
            document = await model.find_one(query)
            if document is None:
                return None
            await document.set(changes)
        except (PyMongoError, InvalidDocument, OverflowError) as e:
            raise RecordStoreError(f"Update of '{table}' record {record_id} failed: {e}", table) from e
        return _to_row(document)

    async def delete(
        self, table: str, record_id: str, filters: dict[str, Any] | None = None
    ) -> bool:
        model = self._model(table)
        query = _id_query(record_id, filters)
        if query is None:
            return False
        try:
            result = await model.find_one(query).delete()
        except PyMongoError as e:
            raise RecordStoreError(f"Delete of '{table}' record {record_id} failed: {e}", table) from e
        return bool(result and result.deleted_count)


class InMemoryRecordStore:
    """Dict-of-lists record store.

    Set ``fail_with`` to make the next ``insert`` raise, to exercise store
    failure handling.
    """

    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {}
        self.insert_calls = 0
        self.fail_with: Exception | None = None

    async def insert(self, table: str, records: list[dict[str, Any]]) -> int:
        self.insert_calls += 1
        if self.fail_with is not None:
            error, self.fail_with = self.fail_with, None
            raise RecordStoreError(f"Insert into '{table}' failed: {error}", table) from error
        rows = self.tables.setdefault(table, [])
        for record in records:
            rows.append({"id": uuid.uuid4().hex, **copy.deepcopy(record)})
        return len(records)

    async def select(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        order: Order | None = None,
    ) -> list[dict[str, Any]]:
        rows = [
            copy.deepcopy(row)
            for row in self.tables.get(table, [])
            if all(row.get(key) == value for key, value in (filters or {}).items())
        ]
        # Stable sorts applied last key first give multi-key ordering
        for key, direction in reversed(_sort_spec(order)):
            rows.sort(
                key=lambda row: (row.get(key) is None, row.get(key)),
                reverse=direction == DESCENDING,
            )
        return rows

    async def count(self, table: str, filters: dict[str, Any] | None = None) -> int:
        return len(await self.select(table, filters))

    def _find(
        self, table: str, record_id: str, filters: dict[str, Any] | None
    ) -> dict[str, Any] | None:
        for row in self.tables.get(table, []):
            if row["id"] == record_id and all(
                row.get(key) == value for key, value in (filters or {}).items()
            ):
                return row
        return None

    async def create(self, table: str, record: dict[str, Any]) -> dict[str, Any]:
        row = {"id": uuid.uuid4().hex, **copy.deepcopy(record)}
        self.tables.setdefault(table, []).append(row)
        return copy.deepcopy(row)

    async def update(
        self,
        table: str,
        record_id: str,
        changes: dict[str, Any],
        filters: dict[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        row = self._find(table, record_id, filters)
        if row is None:
            return None
        row.update(copy.deepcopy(changes))
        return copy.deepcopy(row)

    async def delete(
        self, table: str, record_id: str, filters: dict[str, Any] | None = None
    ) -> bool:
        row = self._find(table, record_id, filters)
        if row is None:
            return False
        self.tables[table].remove(row)
        return True


def get_record_store() -> RecordStore:
    """FastAPI dependency: the MongoDB-backed store of the running app."""
    return MongoRecordStore()
