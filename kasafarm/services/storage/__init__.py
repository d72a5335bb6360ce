"""
Storage Services Package

Provides the abstract remote-store interface and its implementations.
Google Sheets is the hosted backend; the in-memory backend serves tests
and local runs. Both are swappable behind RecordStorageInterface.
"""

from kasafarm.services.storage.interface import (
    PROTECTED_FIELDS,
    NotFoundError,
    RecordStorageInterface,
    StorageConnectionError,
    StorageError,
)
from kasafarm.services.storage.memory import InMemoryRecordStorage
from kasafarm.services.storage.google_sheets import (
    RECORD_COLUMNS,
    GoogleSheetsClient,
    GoogleSheetsRecordStorage,
)

__all__ = [
    # Interface
    "PROTECTED_FIELDS",
    "RecordStorageInterface",
    # Exceptions
    "NotFoundError",
    "StorageConnectionError",
    "StorageError",
    # Implementations
    "InMemoryRecordStorage",
    "RECORD_COLUMNS",
    "GoogleSheetsClient",
    "GoogleSheetsRecordStorage",
]
