"""
Application Wiring for KasaFarm Records

Builds the record store and its collaborators from settings:
settings -> storage backend -> session -> record store, plus the export
delivery target.

The UI layer (pages, forms, tables) takes these components and drives
them; nothing here renders anything.
"""

from typing import NamedTuple, Optional

import structlog

from kasafarm.audit import AuditLogger
from kasafarm.auth import SessionContext
from kasafarm.config import Settings, get_settings
from kasafarm.services.export import DirectoryExportDelivery
from kasafarm.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsRecordStorage,
    InMemoryRecordStorage,
    RecordStorageInterface,
)
from kasafarm.store import RecordStore

logger = structlog.get_logger(__name__)


class AppComponents(NamedTuple):
    store: RecordStore
    session: SessionContext
    delivery: DirectoryExportDelivery
    audit_logger: AuditLogger


def create_storage(settings: Settings) -> RecordStorageInterface:
    """Instantiate the configured storage backend."""
    backend = settings.app.storage_backend
    if backend == "google_sheets":
        client = GoogleSheetsClient(settings.google_sheets)
        return GoogleSheetsRecordStorage(client)

    logger.warning(
        "using_memory_storage",
        detail="Records are kept in this process only and vanish on exit",
    )
    return InMemoryRecordStorage()


def create_app_components(
    settings: Optional[Settings] = None,
    storage: Optional[RecordStorageInterface] = None,
    session: Optional[SessionContext] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to build from (defaults to get_settings())
        storage: Backend override, e.g. for tests
        session: Existing session to attach the store to

    Returns:
        AppComponents(store, session, delivery, audit_logger)
    """
    settings = settings or get_settings()
    storage = storage or create_storage(settings)
    session = session or SessionContext()
    audit_logger = AuditLogger()

    store = RecordStore(storage, session, audit_logger=audit_logger)
    delivery = DirectoryExportDelivery(settings.app.export_path)

    return AppComponents(
        store=store,
        session=session,
        delivery=delivery,
        audit_logger=audit_logger,
    )
