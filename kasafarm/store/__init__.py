"""Record store package."""

from kasafarm.store.errors import (
    NotAuthenticatedError,
    RecordStoreError,
    RecordValidationError,
)
from kasafarm.store.record_store import RecordStore

__all__ = [
    "NotAuthenticatedError",
    "RecordStore",
    "RecordStoreError",
    "RecordValidationError",
]
