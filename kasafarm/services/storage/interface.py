"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for the remote record store.
This allows us to:
1. Swap Google Sheets for a hosted database later
2. Use in-memory storage for testing and local runs
3. Keep the record store's cache logic decoupled from any backend

Every operation is scoped explicitly to an owner. A backend must never
return, change or remove another owner's records.
"""

from abc import ABC, abstractmethod
from typing import Any

from kasafarm.models.record import DraftRecord, FarmRecord


class RecordStorageInterface(ABC):
    """
    Abstract interface for farm record storage.

    Any storage implementation (Google Sheets, PostgreSQL, etc.)
    must implement these methods. Failures are raised as StorageError
    subclasses.
    """

    @abstractmethod
    async def list_records(self, owner_id: str) -> list[FarmRecord]:
        """
        List every record belonging to an owner.

        Args:
            owner_id: The owning identity

        Returns:
            Records ordered by record_date descending (newest first)

        Raises:
            StorageError: If the records cannot be fetched
        """
        pass

    @abstractmethod
    async def insert_record(self, owner_id: str, draft: DraftRecord) -> FarmRecord:
        """
        Insert a new record.

        Args:
            owner_id: The owning identity, stored with the record
            draft: The record content

        Returns:
            The confirmed record with its assigned id and timestamps

        Raises:
            StorageError: If the insert fails
        """
        pass

    @abstractmethod
    async def update_record(
        self,
        owner_id: str,
        record_id: str,
        fields: dict[str, Any],
    ) -> FarmRecord:
        """
        Update some fields of an existing record.

        Args:
            owner_id: The owning identity
            record_id: The record's identifier
            fields: Field name to new value, only the fields to change

        Returns:
            The confirmed record after the update (new updated_at)

        Raises:
            NotFoundError: If the owner has no record with that id
            StorageError: If the update fails
        """
        pass

    @abstractmethod
    async def delete_record(self, owner_id: str, record_id: str) -> None:
        """
        Delete a record.

        Deleting an id the owner does not have is not an error.

        Args:
            owner_id: The owning identity
            record_id: The record's identifier

        Raises:
            StorageError: If the delete fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class StorageConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass


# Fields the client may never write; backends assign them
PROTECTED_FIELDS = frozenset({"id", "owner_id", "created_at", "updated_at"})
