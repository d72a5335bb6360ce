"""
Record Store

The single in-process source of truth for the signed-in farmer's records.

DESIGN DECISION: The store is write-through. Every create/update/delete goes
to the remote store first; the cache changes only once the remote store has
confirmed, and then to exactly what it returned. There is never a
speculative record in the cache, so there is nothing to roll back.

GUARANTEES:
- Remote failures come back as OperationResult values, never as exceptions
- A failed operation leaves the cache exactly as it was
- Records are ordered by record_date descending; within a date, the most
  recently created/moved record comes first
- Responses that settle after the identity changed are discarded

Not safe against overlapping mutations of the same record: the remote
store's last writer wins and the cache follows whichever response settles
last. Single user, single cache.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Mapping, Optional, Union

import structlog
from pydantic import ValidationError

from kasafarm.audit import AuditLogger
from kasafarm.auth import Identity, SessionContext
from kasafarm.models.record import (
    DraftRecord,
    FarmRecord,
    RecordCategory,
    RecordUpdate,
)
from kasafarm.models.results import OperationResult
from kasafarm.reports import (
    CsvExport,
    RecordSummary,
    build_export,
    category_totals,
    net_profit,
    summarize,
)
from kasafarm.services.export import ExportDeliveryInterface
from kasafarm.services.storage import RecordStorageInterface
from kasafarm.store.errors import NotAuthenticatedError, RecordValidationError

logger = structlog.get_logger(__name__)

DraftInput = Union[DraftRecord, Mapping[str, Any]]
UpdateInput = Union[RecordUpdate, DraftRecord, Mapping[str, Any]]


class RecordStore:
    """
    Cache of one identity's farm records, synchronized with remote storage.

    The store subscribes to the session on construction and reloads on
    every identity change. Call close() to unsubscribe.
    """

    def __init__(
        self,
        storage: RecordStorageInterface,
        session: SessionContext,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._session = session
        self._audit = audit_logger or AuditLogger()

        self._records: list[FarmRecord] = []
        self._loading = False
        self._ready = False

        identity = session.identity
        self._owner_id: Optional[str] = identity.user_id if identity else None
        # Bumped on every identity change; responses from an older
        # generation are never applied
        self._generation = 0
        # Only the most recently issued load may replace the cache
        self._load_token = 0

        self._unsubscribe = session.subscribe(self.on_identity_changed)

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def records(self) -> list[FarmRecord]:
        """Snapshot of the cache. Mutating the list does not touch the store."""
        return list(self._records)

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def ready(self) -> bool:
        """A load for the current identity has completed successfully."""
        return self._ready

    @property
    def owner_id(self) -> Optional[str]:
        return self._owner_id

    def get(self, record_id: str) -> Optional[FarmRecord]:
        for record in self._records:
            if record.id == record_id:
                return record
        return None

    def close(self) -> None:
        """Stop following identity changes."""
        self._unsubscribe()

    # -------------------------------------------------------------------------
    # Identity changes and loading
    # -------------------------------------------------------------------------

    async def on_identity_changed(self, identity: Optional[Identity]) -> None:
        """
        React to sign-in/sign-out.

        A different identity invalidates everything cached for the previous
        one before the reload starts, so sign-out leaves an empty cache.
        """
        owner_id = identity.user_id if identity else None
        if owner_id != self._owner_id:
            self._audit.log_identity_changed(self._owner_id, owner_id)
            self._generation += 1
            self._owner_id = owner_id
            self._records = []
            self._ready = False
            self._loading = False
        await self.load()

    async def load(self) -> OperationResult:
        """
        Replace the cache with the current identity's records.

        Without an identity this is a no-op. On failure the previous cache
        is kept so a transient fetch error does not blank the dashboard.
        """
        owner_id = self._owner_id
        if owner_id is None:
            return OperationResult.ok(applied=False)

        generation = self._generation
        self._load_token += 1
        token = self._load_token
        self._loading = True

        try:
            records = await self._storage.list_records(owner_id)
        except Exception as e:
            if self._is_current_load(generation, token):
                self._loading = False
                self._audit.log_load_failed(owner_id, str(e))
            return OperationResult.failed(e)

        if generation != self._generation:
            self._audit.log_stale_response("load", owner_id)
            return OperationResult.ok(record_count=len(records), applied=False)
        if token != self._load_token:
            # A newer load for the same identity is in flight or done
            return OperationResult.ok(record_count=len(records), applied=False)

        self._records = [r for r in records if r.owner_id == owner_id]
        foreign = len(records) - len(self._records)
        if foreign:
            logger.warning(
                "foreign_records_dropped", owner_id=owner_id, count=foreign
            )
        self._loading = False
        self._ready = True
        self._audit.log_records_loaded(owner_id, len(self._records))
        return OperationResult.ok(record_count=len(self._records))

    def _is_current_load(self, generation: int, token: int) -> bool:
        return generation == self._generation and token == self._load_token

    # -------------------------------------------------------------------------
    # Mutations (write-through)
    # -------------------------------------------------------------------------

    async def create(self, draft: DraftInput) -> OperationResult:
        """
        Create a record remotely, then add the confirmed record to the cache.
        """
        try:
            draft = self._coerce_draft(draft)
        except RecordValidationError as e:
            self._audit.log_save_failed("create", self._owner_id, str(e))
            return OperationResult.failed(e)

        owner_id = self._owner_id
        if owner_id is None:
            error = NotAuthenticatedError("User not authenticated")
            self._audit.log_save_failed("create", None, str(error))
            return OperationResult.failed(error)

        generation = self._generation
        try:
            record = await self._storage.insert_record(owner_id, draft)
        except Exception as e:
            self._audit.log_save_failed("create", owner_id, str(e))
            return OperationResult.failed(e)

        if generation != self._generation:
            self._audit.log_stale_response("create", owner_id, record.id)
            return OperationResult.ok(record=record, applied=False)

        self._insert_in_order(record)
        self._audit.log_record_created(
            owner_id, record.id, record.category.value, str(record.total_amount)
        )
        return OperationResult.ok(record=record)

    async def update(self, record_id: str, updates: UpdateInput) -> OperationResult:
        """
        Update some fields of a record remotely, then swap in the confirmed
        version. A record_id missing from the cache is not an error; the
        cache simply has nothing to replace.
        """
        try:
            payload = self._coerce_update(updates)
        except RecordValidationError as e:
            self._audit.log_save_failed("update", self._owner_id, str(e), record_id)
            return OperationResult.failed(e)

        owner_id = self._owner_id
        if owner_id is None:
            error = NotAuthenticatedError("User not authenticated")
            self._audit.log_save_failed("update", None, str(error), record_id)
            return OperationResult.failed(error)

        generation = self._generation
        fields = payload.to_fields()
        try:
            record = await self._storage.update_record(owner_id, record_id, fields)
        except Exception as e:
            self._audit.log_save_failed("update", owner_id, str(e), record_id)
            return OperationResult.failed(e)

        if generation != self._generation:
            self._audit.log_stale_response("update", owner_id, record_id)
            return OperationResult.ok(record=record, applied=False)

        in_cache = self._replace(record_id, record)
        self._audit.log_record_updated(owner_id, record_id, sorted(fields), in_cache)
        return OperationResult.ok(record=record)

    async def delete(self, record_id: str) -> OperationResult:
        """Delete a record remotely, then drop it from the cache."""
        owner_id = self._owner_id
        if owner_id is None:
            error = NotAuthenticatedError("User not authenticated")
            self._audit.log_save_failed("delete", None, str(error), record_id)
            return OperationResult.failed(error)

        generation = self._generation
        try:
            await self._storage.delete_record(owner_id, record_id)
        except Exception as e:
            self._audit.log_save_failed("delete", owner_id, str(e), record_id)
            return OperationResult.failed(e)

        if generation != self._generation:
            self._audit.log_stale_response("delete", owner_id, record_id)
            return OperationResult.ok(applied=False)

        remaining = [r for r in self._records if r.id != record_id]
        in_cache = len(remaining) != len(self._records)
        self._records = remaining
        self._audit.log_record_deleted(owner_id, record_id, in_cache)
        return OperationResult.ok()

    # -------------------------------------------------------------------------
    # Derived views (pure, over a snapshot)
    # -------------------------------------------------------------------------

    def category_totals(self) -> dict[RecordCategory, Decimal]:
        return category_totals(self.records)

    def net_profit(self) -> Decimal:
        return net_profit(self.records)

    def summary(self) -> RecordSummary:
        return summarize(self.records)

    def export(
        self,
        delivery: ExportDeliveryInterface,
        export_date: Optional[date] = None,
    ) -> CsvExport:
        """
        Serialize the cache as CSV and hand it to the delivery.

        Raises:
            ExportDeliveryError: If the delivery fails
        """
        export = build_export(self.records, export_date)
        delivery.deliver(export.content, export.filename)
        self._audit.log_export_generated(
            self._owner_id, export.filename, export.record_count
        )
        return export

    # -------------------------------------------------------------------------
    # Cache helpers
    # -------------------------------------------------------------------------

    def _insert_in_order(self, record: FarmRecord) -> None:
        """Place a record first among records of the same or an older date."""
        records = [r for r in self._records if r.id != record.id]
        position = len(records)
        for idx, existing in enumerate(records):
            if existing.record_date <= record.record_date:
                position = idx
                break
        records.insert(position, record)
        self._records = records

    def _replace(self, record_id: str, record: FarmRecord) -> bool:
        """Swap in a confirmed record. Returns False if it is not cached."""
        for idx, existing in enumerate(self._records):
            if existing.id != record_id:
                continue
            if existing.record_date == record.record_date:
                records = list(self._records)
                records[idx] = record
                self._records = records
            else:
                # A new date moves the record into its new date group
                self._insert_in_order(record)
            return True
        return False

    @staticmethod
    def _coerce_draft(draft: DraftInput) -> DraftRecord:
        if isinstance(draft, DraftRecord):
            return draft
        try:
            return DraftRecord.model_validate(draft)
        except ValidationError as e:
            raise RecordValidationError(str(e)) from e

    @staticmethod
    def _coerce_update(updates: UpdateInput) -> RecordUpdate:
        if isinstance(updates, DraftRecord):
            payload = RecordUpdate.from_draft(updates)
        elif isinstance(updates, RecordUpdate):
            payload = updates
        else:
            try:
                payload = RecordUpdate.model_validate(updates)
            except ValidationError as e:
                raise RecordValidationError(str(e)) from e

        if payload.is_empty:
            raise RecordValidationError("No fields to update")
        return payload
