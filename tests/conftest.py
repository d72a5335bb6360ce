"""
Shared fixtures for KasaFarm Records tests.

No test touches the network: the store runs against InMemoryRecordStorage
or the small fakes below.
"""

import asyncio
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Optional

import pytest

from kasafarm.audit import AuditLogger
from kasafarm.auth import Identity, SessionContext
from kasafarm.models.record import DraftRecord, FarmRecord, RecordCategory
from kasafarm.services.storage import (
    InMemoryRecordStorage,
    RecordStorageInterface,
    StorageConnectionError,
    StorageError,
)
from kasafarm.store import RecordStore


FARMER = Identity(user_id="farmer-1", email="farmer@example.com")
NEIGHBOUR = Identity(user_id="farmer-2", email="neighbour@example.com")


def make_draft(**overrides: Any) -> DraftRecord:
    """A valid expense draft; override any field."""
    fields = {
        "record_date": date(2024, 3, 10),
        "category": RecordCategory.EXPENSE,
        "description": "Layer feed",
        "total_amount": Decimal("2500"),
    }
    fields.update(overrides)
    return DraftRecord(**fields)


def make_record(**overrides: Any) -> FarmRecord:
    """A confirmed record as a backend would return it."""
    stamp = datetime(2024, 3, 10, 8, 0, tzinfo=timezone.utc)
    fields = {
        "id": "rec-1",
        "owner_id": FARMER.user_id,
        "record_date": date(2024, 3, 10),
        "category": RecordCategory.EXPENSE,
        "description": "Layer feed",
        "total_amount": Decimal("2500"),
        "created_at": stamp,
        "updated_at": stamp,
    }
    fields.update(overrides)
    return FarmRecord(**fields)


class CountingStorage(InMemoryRecordStorage):
    """In-memory storage that counts calls and can be told to fail."""

    def __init__(self, records: Optional[list[FarmRecord]] = None):
        super().__init__(records)
        self.calls: list[str] = []
        self.fail_with: Optional[Exception] = None

    def _maybe_fail(self, name: str) -> None:
        self.calls.append(name)
        if self.fail_with is not None:
            raise self.fail_with

    async def list_records(self, owner_id):
        self._maybe_fail("list")
        return await super().list_records(owner_id)

    async def insert_record(self, owner_id, draft):
        self._maybe_fail("insert")
        return await super().insert_record(owner_id, draft)

    async def update_record(self, owner_id, record_id, fields):
        self._maybe_fail("update")
        return await super().update_record(owner_id, record_id, fields)

    async def delete_record(self, owner_id, record_id):
        self._maybe_fail("delete")
        return await super().delete_record(owner_id, record_id)


class GatedStorage(RecordStorageInterface):
    """
    Wraps a backend and holds every call until release() is called.

    Lets a test change identity while a remote call is still in flight.
    """

    def __init__(self, inner: RecordStorageInterface):
        self._inner = inner
        self._gate = asyncio.Event()
        self.gated = True

    def release(self) -> None:
        self._gate.set()

    async def _wait(self) -> None:
        if self.gated:
            await self._gate.wait()

    async def list_records(self, owner_id):
        await self._wait()
        return await self._inner.list_records(owner_id)

    async def insert_record(self, owner_id, draft):
        await self._wait()
        return await self._inner.insert_record(owner_id, draft)

    async def update_record(self, owner_id, record_id, fields):
        await self._wait()
        return await self._inner.update_record(owner_id, record_id, fields)

    async def delete_record(self, owner_id, record_id):
        await self._wait()
        return await self._inner.delete_record(owner_id, record_id)


@pytest.fixture
def storage() -> CountingStorage:
    return CountingStorage()


@pytest.fixture
def audit_logger() -> AuditLogger:
    return AuditLogger()


@pytest.fixture
def session() -> SessionContext:
    return SessionContext(FARMER)


@pytest.fixture
def store(storage, session, audit_logger) -> RecordStore:
    record_store = RecordStore(storage, session, audit_logger=audit_logger)
    yield record_store
    record_store.close()


@pytest.fixture
def remote_error() -> StorageError:
    return StorageConnectionError("network unreachable")
