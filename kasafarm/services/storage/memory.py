"""
In-Memory Storage Implementation

A process-local stand-in for the remote record store. It behaves like a
hosted table would: it assigns ids and timestamps, scopes every call to
an owner, and returns confirmed copies rather than references the caller
could share.

Used for tests and for running without any Google configuration.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional
from uuid import uuid4

from kasafarm.models.record import DraftRecord, FarmRecord
from kasafarm.services.storage.interface import (
    PROTECTED_FIELDS,
    NotFoundError,
    RecordStorageInterface,
    StorageError,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryRecordStorage(RecordStorageInterface):
    """Dictionary-backed record storage."""

    def __init__(self, records: Optional[list[FarmRecord]] = None):
        self._records: dict[str, FarmRecord] = {}
        # Insertion sequence breaks record_date ties (newest first)
        self._sequence: dict[str, int] = {}
        self._next_sequence = 0
        for record in records or []:
            self._put(record)

    def _put(self, record: FarmRecord) -> None:
        if record.id not in self._sequence:
            self._sequence[record.id] = self._next_sequence
            self._next_sequence += 1
        self._records[record.id] = record

    async def list_records(self, owner_id: str) -> list[FarmRecord]:
        owned = [r for r in self._records.values() if r.owner_id == owner_id]
        owned.sort(
            key=lambda r: (r.record_date, self._sequence[r.id]),
            reverse=True,
        )
        return owned

    async def insert_record(self, owner_id: str, draft: DraftRecord) -> FarmRecord:
        now = _utcnow()
        record = FarmRecord(
            id=str(uuid4()),
            owner_id=owner_id,
            created_at=now,
            updated_at=now,
            **draft.model_dump(),
        )
        self._put(record)
        return record

    async def update_record(
        self,
        owner_id: str,
        record_id: str,
        fields: dict[str, Any],
    ) -> FarmRecord:
        protected = PROTECTED_FIELDS.intersection(fields)
        if protected:
            raise StorageError(
                f"Fields cannot be updated: {', '.join(sorted(protected))}"
            )

        current = self._records.get(record_id)
        if current is None or current.owner_id != owner_id:
            raise NotFoundError(f"Record not found: {record_id}")

        # Keep updated_at strictly increasing even on coarse clocks
        now = _utcnow()
        if now <= current.updated_at:
            now = current.updated_at + timedelta(microseconds=1)

        try:
            updated = FarmRecord(
                **{**current.model_dump(), **fields, "updated_at": now}
            )
        except ValueError as e:
            raise StorageError(f"Invalid update for {record_id}: {e}") from e

        self._put(updated)
        return updated

    async def delete_record(self, owner_id: str, record_id: str) -> None:
        current = self._records.get(record_id)
        if current is not None and current.owner_id == owner_id:
            del self._records[record_id]
