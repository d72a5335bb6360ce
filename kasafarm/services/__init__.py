"""Services package."""

from kasafarm.services.export import (
    DirectoryExportDelivery,
    ExportDeliveryError,
    ExportDeliveryInterface,
)
from kasafarm.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsRecordStorage,
    InMemoryRecordStorage,
    NotFoundError,
    RecordStorageInterface,
    StorageConnectionError,
    StorageError,
)

__all__ = [
    # Export delivery
    "DirectoryExportDelivery",
    "ExportDeliveryError",
    "ExportDeliveryInterface",
    # Storage services
    "GoogleSheetsClient",
    "GoogleSheetsRecordStorage",
    "InMemoryRecordStorage",
    "NotFoundError",
    "RecordStorageInterface",
    "StorageConnectionError",
    "StorageError",
]
