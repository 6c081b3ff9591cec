"""
Activity Logger

Every significant action is written to the structured local log:
transaction saves and deletes, CSV imports (including each failed row),
directory edits, logins and storage failures.

The activity logger:
- Is async so flows can await it like any other collaborator
- Never raises (a logging failure must not abort a save or an import)
- Supports correlation IDs to trace the events of one import
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from bizmanager.models.activity import ActivityEvent, ActivityEventBuilder


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


class ActivityLogger:
    """
    Central activity logging service.

    Keeps the most recent events in memory so the settings page (and tests)
    can show what just happened.
    """

    def __init__(self, keep_last: int = 100):
        self._logger = structlog.get_logger("bizmanager.activity")
        self._keep_last = keep_last
        self.recent: list[ActivityEvent] = []

    async def log(self, event: ActivityEvent) -> None:
        """Log an activity event locally."""
        log_dict = event.to_log_dict()

        if event.severity.value == "error":
            self._logger.error("activity_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("activity_event", **log_dict)
        else:
            self._logger.info("activity_event", **log_dict)

        self.recent.append(event)
        del self.recent[:-self._keep_last]

    async def log_transaction_saved(
        self,
        transaction_id: UUID,
        transaction_no: str,
        amount: str,
        created: bool,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(ActivityEventBuilder.transaction_saved(
            transaction_id=transaction_id,
            transaction_no=transaction_no,
            amount=amount,
            created=created,
            correlation_id=correlation_id,
        ))

    async def log_transaction_deleted(self, transaction_id: UUID) -> None:
        await self.log(ActivityEventBuilder.transaction_deleted(transaction_id))

    async def log_import_started(self, correlation_id: UUID, row_count: int) -> None:
        await self.log(ActivityEventBuilder.import_started(correlation_id, row_count))

    async def log_import_row_failed(
        self,
        correlation_id: UUID,
        row_number: int,
        reason: str,
    ) -> None:
        """Log one skipped import row."""
        await self.log(ActivityEventBuilder.import_row_failed(
            correlation_id=correlation_id,
            row_number=row_number,
            reason=reason,
        ))

    async def log_import_completed(
        self,
        correlation_id: UUID,
        success_count: int,
        error_count: int,
    ) -> None:
        await self.log(ActivityEventBuilder.import_completed(
            correlation_id=correlation_id,
            success_count=success_count,
            error_count=error_count,
        ))

    async def log_directory_saved(self, entity_type: str, entity_id: UUID, name: str) -> None:
        await self.log(ActivityEventBuilder.directory_saved(entity_type, entity_id, name))

    async def log_directory_deleted(self, entity_type: str, entity_id: UUID) -> None:
        await self.log(ActivityEventBuilder.directory_deleted(entity_type, entity_id))

    async def log_login(self, username: str, succeeded: bool) -> None:
        await self.log(ActivityEventBuilder.login(username, succeeded))

    async def log_logout(self) -> None:
        await self.log(ActivityEventBuilder.logout())

    async def log_storage_error(
        self,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a failed remote store call."""
        await self.log(ActivityEventBuilder.storage_error(
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action (e.g., a CSV import).
    Pass it through all subsequent operations.
    """
    return uuid4()


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output through the stdlib root logger at the given level."""
    logging.basicConfig(format="%(message)s", level=level.upper())
