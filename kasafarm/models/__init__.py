"""
Data Models Package

This package contains all Pydantic models used by KasaFarm Records.
All data flowing between the store, its backends and the reports must
conform to these schemas.
"""

from kasafarm.models.record import (
    DraftRecord,
    FarmRecord,
    RecordCategory,
    RecordUpdate,
    compute_total,
)
from kasafarm.models.results import OperationResult
from kasafarm.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Record models
    "DraftRecord",
    "FarmRecord",
    "RecordCategory",
    "RecordUpdate",
    "compute_total",
    # Results
    "OperationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
