"""
Audit Logger

DESIGN DECISION: Every change the record store applies or refuses is logged.
This provides:
1. Traceability of the cache's state transitions
2. Debugging capability when the remote store rejects a write
3. Visibility into responses dropped after an identity change

The audit logger never raises: a logging failure must not turn a
successful save into a failed one.
"""

from typing import Optional

import structlog

from kasafarm.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service for the record store.

    Keeps every emitted event in memory (bounded) so callers and tests can
    inspect what happened, and writes each one to the structured log.
    """

    def __init__(self, history_size: int = 500):
        self._logger = structlog.get_logger("kasafarm.audit")
        self._history_size = history_size
        self._events: list[AuditEvent] = []

    @property
    def events(self) -> list[AuditEvent]:
        """Recent events, oldest first."""
        return list(self._events)

    def log(self, event: AuditEvent) -> None:
        """Log an audit event at its severity."""
        self._events.append(event)
        if len(self._events) > self._history_size:
            del self._events[0]

        log_dict = event.to_log_dict()
        if event.severity == AuditSeverity.ERROR:
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

    def log_identity_changed(
        self,
        previous_owner_id: Optional[str],
        owner_id: Optional[str],
    ) -> None:
        self.log(AuditEventBuilder.identity_changed(previous_owner_id, owner_id))

    def log_records_loaded(self, owner_id: str, record_count: int) -> None:
        self.log(AuditEventBuilder.records_loaded(owner_id, record_count))

    def log_load_failed(self, owner_id: str, error_message: str) -> None:
        self.log(AuditEventBuilder.load_failed(owner_id, error_message))

    def log_record_created(
        self,
        owner_id: str,
        record_id: str,
        category: str,
        amount: str,
    ) -> None:
        self.log(
            AuditEventBuilder.record_created(owner_id, record_id, category, amount)
        )

    def log_record_updated(
        self,
        owner_id: str,
        record_id: str,
        fields: list[str],
        in_cache: bool,
    ) -> None:
        self.log(
            AuditEventBuilder.record_updated(owner_id, record_id, fields, in_cache)
        )

    def log_record_deleted(
        self,
        owner_id: str,
        record_id: str,
        in_cache: bool,
    ) -> None:
        self.log(AuditEventBuilder.record_deleted(owner_id, record_id, in_cache))

    def log_save_failed(
        self,
        operation: str,
        owner_id: Optional[str],
        error_message: str,
        record_id: Optional[str] = None,
    ) -> None:
        """Log a rejected create/update/delete."""
        self.log(
            AuditEventBuilder.save_failed(
                operation=operation,
                owner_id=owner_id,
                error_message=error_message,
                record_id=record_id,
            )
        )

    def log_stale_response(
        self,
        operation: str,
        owner_id: Optional[str],
        record_id: Optional[str] = None,
    ) -> None:
        self.log(
            AuditEventBuilder.stale_response_discarded(
                operation=operation,
                owner_id=owner_id,
                record_id=record_id,
            )
        )

    def log_export_generated(
        self,
        owner_id: Optional[str],
        filename: str,
        record_count: int,
    ) -> None:
        self.log(
            AuditEventBuilder.export_generated(owner_id, filename, record_count)
        )
