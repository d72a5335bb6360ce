"""
Audit Models for KasaFarm Records

Every change the record store applies (or refuses to apply) produces an
audit event. This provides:
1. Traceability of what the cache did and why
2. Debugging information when the remote store misbehaves
3. A record of discarded stale responses after sign-in/sign-out

DESIGN DECISION: Audit events are emitted to the structured local log only.
The farm records themselves are the persisted history.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Identity
    IDENTITY_CHANGED = "identity_changed"

    # Loading
    RECORDS_LOADED = "records_loaded"
    LOAD_FAILED = "load_failed"

    # Persistence
    RECORD_CREATED = "record_created"
    RECORD_UPDATED = "record_updated"
    RECORD_DELETED = "record_deleted"
    SAVE_FAILED = "save_failed"
    STALE_RESPONSE_DISCARDED = "stale_response_discarded"

    # Export
    EXPORT_GENERATED = "export_generated"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant store action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - who and what is this about?
    owner_id: Optional[str] = Field(
        default=None,
        description="Identity the event happened under"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="Record id the event relates to"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "owner_id": self.owner_id,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.record_created(owner_id, record_id, "sale", "1200")
        event = AuditEventBuilder.load_failed(owner_id, "timeout")
    """

    @staticmethod
    def identity_changed(
        previous_owner_id: Optional[str],
        owner_id: Optional[str],
    ) -> AuditEvent:
        if owner_id is None:
            description = "Signed out"
        else:
            description = "Signed in"
        return AuditEvent(
            event_type=AuditEventType.IDENTITY_CHANGED,
            owner_id=owner_id,
            description=description,
            details={"previous_owner_id": previous_owner_id},
        )

    @staticmethod
    def records_loaded(owner_id: str, record_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORDS_LOADED,
            severity=AuditSeverity.DEBUG,
            owner_id=owner_id,
            description=f"Loaded {record_count} records",
            details={"record_count": record_count},
        )

    @staticmethod
    def load_failed(owner_id: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOAD_FAILED,
            severity=AuditSeverity.ERROR,
            owner_id=owner_id,
            description="Failed to load records, keeping previous cache",
            error_message=error_message,
        )

    @staticmethod
    def record_created(
        owner_id: str,
        record_id: str,
        category: str,
        amount: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_CREATED,
            owner_id=owner_id,
            entity_id=record_id,
            description=f"Record created: {category} {amount}",
            details={"category": category, "total_amount": amount},
        )

    @staticmethod
    def record_updated(
        owner_id: str,
        record_id: str,
        fields: list[str],
        in_cache: bool,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_UPDATED,
            owner_id=owner_id,
            entity_id=record_id,
            description=f"Record updated: {', '.join(fields)}",
            details={"fields": fields, "in_cache": in_cache},
        )

    @staticmethod
    def record_deleted(
        owner_id: str,
        record_id: str,
        in_cache: bool,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_DELETED,
            owner_id=owner_id,
            entity_id=record_id,
            description="Record deleted",
            details={"in_cache": in_cache},
        )

    @staticmethod
    def save_failed(
        operation: str,
        owner_id: Optional[str],
        error_message: str,
        record_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.WARNING,
            owner_id=owner_id,
            entity_id=record_id,
            description=f"{operation} rejected",
            details={"operation": operation},
            error_message=error_message,
        )

    @staticmethod
    def stale_response_discarded(
        operation: str,
        owner_id: Optional[str],
        record_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STALE_RESPONSE_DISCARDED,
            severity=AuditSeverity.WARNING,
            owner_id=owner_id,
            entity_id=record_id,
            description=f"Discarded {operation} response issued before identity change",
            details={"operation": operation},
        )

    @staticmethod
    def export_generated(
        owner_id: Optional[str],
        filename: str,
        record_count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPORT_GENERATED,
            owner_id=owner_id,
            description=f"Export generated: {filename}",
            details={"filename": filename, "record_count": record_count},
        )
