"""
Audit Models for Pocket Ledger

Every mutation of the ledger and every degraded read is recorded as a
typed audit event. Events are rendered as structured log lines; they are
never stored next to the transactions.
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
    # Persistence
    TRANSACTION_SAVED = "transaction_saved"
    TRANSACTION_DELETED = "transaction_deleted"
    COLLECTION_CLEARED = "collection_cleared"
    SAVE_FAILED = "save_failed"

    # Reads
    STORE_READ_FAILED = "store_read_failed"
    RECORDS_SKIPPED = "records_skipped"

    # Validation
    VALIDATION_FAILED = "validation_failed"

    # Queries
    QUERY_EXECUTED = "query_executed"

    # Export
    EXPORT_COMPLETED = "export_completed"
    EXPORT_SKIPPED = "export_skipped"

    # System events
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant action creates one of these.
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

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'collection', 'export')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate the events of one user action"
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

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.transaction_saved(transaction_id, "expense", "120")
        event = AuditEventBuilder.export_skipped("nothing to export")
    """

    @staticmethod
    def transaction_saved(
        transaction_id: str,
        transaction_type: str,
        amount: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_SAVED,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"Saved {transaction_type} of {amount}",
            details={
                "type": transaction_type,
                "amount": amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def transaction_deleted(
        transaction_id: str,
        found: bool,
        remaining: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=(
                f"Deleted transaction {transaction_id}"
                if found
                else f"Delete requested for unknown transaction {transaction_id}"
            ),
            details={
                "found": found,
                "remaining": remaining,
            },
            is_user_action=True,
        )

    @staticmethod
    def collection_cleared(
        storage_key: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.COLLECTION_CLEARED,
            severity=AuditSeverity.WARNING,
            entity_type="collection",
            entity_id=storage_key,
            correlation_id=correlation_id,
            description="All transactions cleared",
            is_user_action=True,
        )

    @staticmethod
    def save_failed(
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="collection",
            correlation_id=correlation_id,
            description=f"Store write failed during {operation}",
            error_message=error_message,
            details={
                "operation": operation,
            },
        )

    @staticmethod
    def store_read_failed(
        storage_key: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_READ_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="collection",
            entity_id=storage_key,
            correlation_id=correlation_id,
            description="Stored collection unreadable, showing an empty ledger",
            error_message=error_message,
        )

    @staticmethod
    def records_skipped(
        storage_key: str,
        skipped: int,
        loaded: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORDS_SKIPPED,
            severity=AuditSeverity.WARNING,
            entity_type="collection",
            entity_id=storage_key,
            correlation_id=correlation_id,
            description=f"Skipped {skipped} malformed records",
            details={
                "skipped": skipped,
                "loaded": loaded,
            },
        )

    @staticmethod
    def validation_failed(
        field: str,
        message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="transaction",
            correlation_id=correlation_id,
            description=f"Rejected transaction input: {field}",
            details={
                "field": field,
                "message": message,
            },
            is_user_action=True,
        )

    @staticmethod
    def query_executed(
        criteria: dict,
        result_count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.QUERY_EXECUTED,
            severity=AuditSeverity.DEBUG,
            entity_type="query",
            correlation_id=correlation_id,
            description=f"Query returned {result_count} transactions",
            details={
                "criteria": criteria,
                "result_count": result_count,
            },
        )

    @staticmethod
    def export_completed(
        path: str,
        row_count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPORT_COMPLETED,
            entity_type="export",
            entity_id=path,
            correlation_id=correlation_id,
            description=f"Exported {row_count} expenses",
            details={
                "path": path,
                "row_count": row_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def export_skipped(
        reason: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPORT_SKIPPED,
            severity=AuditSeverity.WARNING,
            entity_type="export",
            correlation_id=correlation_id,
            description=f"Export skipped: {reason}",
            details={
                "reason": reason,
            },
            is_user_action=True,
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={
                "service": service,
            },
            correlation_id=correlation_id,
        )
