"""
Activity Models for BizManager

Significant actions (saving a transaction, running an import, logging in)
are emitted as structured activity events. They go to the local structured
log only; there is no persisted activity trail.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from bizmanager.models.records import utc_now


class ActivityEventType(str, Enum):
    """Types of events we log."""
    # Transactions
    TRANSACTION_CREATED = "transaction_created"
    TRANSACTION_UPDATED = "transaction_updated"
    TRANSACTION_DELETED = "transaction_deleted"

    # CSV import
    IMPORT_STARTED = "import_started"
    IMPORT_COMPLETED = "import_completed"
    IMPORT_ROW_FAILED = "import_row_failed"

    # Directory
    ACCOUNT_SAVED = "account_saved"
    ACCOUNT_DELETED = "account_deleted"
    LOCATION_SAVED = "location_saved"
    LOCATION_DELETED = "location_deleted"

    # Session
    LOGIN_SUCCEEDED = "login_succeeded"
    LOGIN_FAILED = "login_failed"
    LOGOUT = "logout"

    # System events
    STORAGE_ERROR = "storage_error"


class ActivitySeverity(str, Enum):
    """Severity level for activity events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ActivityEvent(BaseModel):
    """A single activity event."""

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: ActivityEventType = Field(
        ...,
        description="Type of event"
    )
    severity: ActivitySeverity = Field(
        default=ActivitySeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'account', 'import')"
    )
    entity_id: Optional[UUID] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - ties every row event of one import together
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events"
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
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class ActivityEventBuilder:
    """
    Helper class to build activity events with common patterns.

    Usage:
        event = ActivityEventBuilder.transaction_saved(id, "20250115-001", created=True)
        event = ActivityEventBuilder.import_completed(correlation_id, 10, 2)
    """

    @staticmethod
    def transaction_saved(
        transaction_id: UUID,
        transaction_no: str,
        amount: str,
        created: bool,
        correlation_id: Optional[UUID] = None,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=(
                ActivityEventType.TRANSACTION_CREATED
                if created
                else ActivityEventType.TRANSACTION_UPDATED
            ),
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=(
                f"Transaction {'created' if created else 'updated'}: "
                f"{transaction_no} - ₹{amount}"
            ),
            details={
                "transaction_no": transaction_no,
                "amount": amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def transaction_deleted(transaction_id: UUID) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.TRANSACTION_DELETED,
            entity_type="transaction",
            entity_id=transaction_id,
            description="Transaction deleted",
            is_user_action=True,
        )

    @staticmethod
    def import_started(correlation_id: UUID, row_count: int) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.IMPORT_STARTED,
            entity_type="import",
            correlation_id=correlation_id,
            description=f"CSV import started with {row_count} rows",
            details={"row_count": row_count},
            is_user_action=True,
        )

    @staticmethod
    def import_row_failed(
        correlation_id: UUID,
        row_number: int,
        reason: str,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.IMPORT_ROW_FAILED,
            severity=ActivitySeverity.WARNING,
            entity_type="import",
            correlation_id=correlation_id,
            description=f"Row {row_number} skipped",
            details={"row_number": row_number},
            error_message=reason,
        )

    @staticmethod
    def import_completed(
        correlation_id: UUID,
        success_count: int,
        error_count: int,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.IMPORT_COMPLETED,
            severity=ActivitySeverity.WARNING if error_count else ActivitySeverity.INFO,
            entity_type="import",
            correlation_id=correlation_id,
            description=(
                f"CSV import finished: {success_count} imported, "
                f"{error_count} errors"
            ),
            details={
                "success_count": success_count,
                "error_count": error_count,
            },
        )

    @staticmethod
    def directory_saved(entity_type: str, entity_id: UUID, name: str) -> ActivityEvent:
        event_type = (
            ActivityEventType.ACCOUNT_SAVED
            if entity_type == "account"
            else ActivityEventType.LOCATION_SAVED
        )
        return ActivityEvent(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.capitalize()} saved: {name}",
            details={"name": name},
            is_user_action=True,
        )

    @staticmethod
    def directory_deleted(entity_type: str, entity_id: UUID) -> ActivityEvent:
        event_type = (
            ActivityEventType.ACCOUNT_DELETED
            if entity_type == "account"
            else ActivityEventType.LOCATION_DELETED
        )
        return ActivityEvent(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.capitalize()} deleted",
            is_user_action=True,
        )

    @staticmethod
    def login(username: str, succeeded: bool) -> ActivityEvent:
        return ActivityEvent(
            event_type=(
                ActivityEventType.LOGIN_SUCCEEDED
                if succeeded
                else ActivityEventType.LOGIN_FAILED
            ),
            severity=ActivitySeverity.INFO if succeeded else ActivitySeverity.WARNING,
            entity_type="session",
            description=f"Login {'succeeded' if succeeded else 'failed'} for {username}",
            details={"username": username},
            is_user_action=True,
        )

    @staticmethod
    def logout() -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.LOGOUT,
            entity_type="session",
            description="User logged out",
            is_user_action=True,
        )

    @staticmethod
    def storage_error(
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.STORAGE_ERROR,
            severity=ActivitySeverity.ERROR,
            entity_type="storage",
            correlation_id=correlation_id,
            description=f"Storage operation failed: {operation}",
            details={"operation": operation},
            error_message=error_message,
        )
