"""
Audit Logger

Every mutation of the ledger, every degraded read and every export is
logged as a structured event. This provides:
1. Traceability of what happened to the collection
2. Visibility of silently degraded reads (corrupted storage)
3. Debugging capability

The audit logger never raises into the caller: a failure to log must
not turn a successful save into a failed one.
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from pocket_ledger.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


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


def configure_logging(level: str = "INFO") -> None:
    """Route structured logs through the stdlib root logger at ``level``."""
    logging.basicConfig(format="%(message)s", level=level.upper())
    logging.getLogger("pocket_ledger").setLevel(level.upper())


class AuditLogger:
    """
    Central audit logging service.

    Renders AuditEvents as JSON log lines on the ``pocket_ledger.audit``
    logger, at a level chosen from the event severity.
    """

    def __init__(self, logger: Optional[structlog.stdlib.BoundLogger] = None):
        self._logger = logger or structlog.get_logger("pocket_ledger.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False if the event could not be written.
        """
        log_dict = event.to_log_dict()

        try:
            if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            logging.getLogger(__name__).warning(
                "Failed to write audit event %s: %s", event.event_id, e
            )
            return False

        return True

    def log_transaction_saved(
        self,
        transaction_id: str,
        transaction_type: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a persisted transaction."""
        self.log(AuditEventBuilder.transaction_saved(
            transaction_id=transaction_id,
            transaction_type=transaction_type,
            amount=amount,
            correlation_id=correlation_id,
        ))

    def log_transaction_deleted(
        self,
        transaction_id: str,
        found: bool,
        remaining: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a delete request, including no-op deletes."""
        self.log(AuditEventBuilder.transaction_deleted(
            transaction_id=transaction_id,
            found=found,
            remaining=remaining,
            correlation_id=correlation_id,
        ))

    def log_collection_cleared(
        self,
        storage_key: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.collection_cleared(
            storage_key=storage_key,
            correlation_id=correlation_id,
        ))

    def log_save_failed(
        self,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a store write that did not go through."""
        self.log(AuditEventBuilder.save_failed(
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_store_read_failed(
        self,
        storage_key: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a read that fell back to an empty collection."""
        self.log(AuditEventBuilder.store_read_failed(
            storage_key=storage_key,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_records_skipped(
        self,
        storage_key: str,
        skipped: int,
        loaded: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.records_skipped(
            storage_key=storage_key,
            skipped=skipped,
            loaded=loaded,
            correlation_id=correlation_id,
        ))

    def log_validation_failed(
        self,
        field: str,
        message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log rejected form input."""
        self.log(AuditEventBuilder.validation_failed(
            field=field,
            message=message,
            correlation_id=correlation_id,
        ))

    def log_query_executed(
        self,
        criteria: dict,
        result_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.query_executed(
            criteria=criteria,
            result_count=result_count,
            correlation_id=correlation_id,
        ))

    def log_export_completed(
        self,
        path: str,
        row_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.export_completed(
            path=path,
            row_count=row_count,
            correlation_id=correlation_id,
        ))

    def log_export_skipped(
        self,
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.export_skipped(
            reason=reason,
            correlation_id=correlation_id,
        ))

    def log_external_service_error(
        self,
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a failure of a collaborator (storage, sharing sink)."""
        self.log(AuditEventBuilder.external_service_error(
            service=service,
            error_message=error_message,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action (e.g., saving a transaction)
    and pass it through all subsequent operations.
    """
    return uuid4()
