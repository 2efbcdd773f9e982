"""
Audit Logger

DESIGN DECISION: Every significant engine action is logged.
This provides:
1. Traceability of which identity saw which snapshot
2. Visibility into degraded snapshots (which providers failed)
3. Debugging of overlapping aggregation runs

The audit logger:
- Is async to not block the aggregation flow
- Gracefully handles failures (never breaks a run if logging fails)
- Supports correlation IDs to trace all events of one aggregation run
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from networth.models.audit import AuditEvent, AuditEventBuilder
from networth.services.storage import AuditStorageInterface


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


def get_logger(name: Optional[str] = None):
    """Structured logger shared by the engine modules."""
    return structlog.get_logger(name or "networth")


class AuditLogger:
    """
    Central audit logging service.
    
    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage, when one is configured (Google Sheets or memory)
    """
    
    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.
        
        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = get_logger("networth.audit")
    
    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.
        
        Always logs locally. Persists to storage if available.
        
        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()
        
        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif event.severity.value == "debug":
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)
        
        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False
        
        return True
    
    async def log_identity_appeared(self, user_id: str) -> None:
        """Log a login."""
        await self.log(AuditEventBuilder.identity_appeared(user_id))
    
    async def log_identity_changed(self, old_user_id: str, new_user_id: str) -> None:
        """Log a user switch."""
        await self.log(AuditEventBuilder.identity_changed(old_user_id, new_user_id))
    
    async def log_identity_disappeared(self, old_user_id: str) -> None:
        """Log a logout."""
        await self.log(AuditEventBuilder.identity_disappeared(old_user_id))
    
    async def log_aggregation_started(
        self,
        user_id: str,
        generation: int,
        correlation_id: UUID,
    ) -> None:
        """Log the start of an aggregation run."""
        event = AuditEventBuilder.aggregation_started(
            user_id=user_id,
            generation=generation,
            correlation_id=correlation_id,
        )
        await self.log(event)
    
    async def log_provider_fetch_failed(
        self,
        category: str,
        user_id: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        """Log a failed category fetch."""
        event = AuditEventBuilder.provider_fetch_failed(
            category=category,
            user_id=user_id,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        await self.log(event)
    
    async def log_snapshot_committed(
        self,
        user_id: str,
        generation: int,
        net_worth: str,
        failed_categories: list[str],
        correlation_id: UUID,
    ) -> None:
        """Log a populated snapshot commit."""
        event = AuditEventBuilder.snapshot_committed(
            user_id=user_id,
            generation=generation,
            net_worth=net_worth,
            failed_categories=failed_categories,
            correlation_id=correlation_id,
        )
        await self.log(event)
    
    async def log_snapshot_reset(self, previous_owner: Optional[str]) -> None:
        await self.log(AuditEventBuilder.snapshot_reset(previous_owner))
    
    async def log_run_superseded(
        self,
        user_id: str,
        generation: int,
        latest_generation: int,
        correlation_id: UUID,
    ) -> None:
        """Log a discarded aggregation run."""
        event = AuditEventBuilder.run_superseded(
            user_id=user_id,
            generation=generation,
            latest_generation=latest_generation,
            correlation_id=correlation_id,
        )
        await self.log(event)
    
    async def log_goal_synced(self, user_id: str, goal_id: UUID, net_worth: str) -> None:
        await self.log(AuditEventBuilder.goal_synced(user_id, goal_id, net_worth))
    
    async def log_goal_sync_failed(self, user_id: str, error_message: str) -> None:
        await self.log(AuditEventBuilder.goal_sync_failed(user_id, error_message))
    
    async def log_record_written(
        self,
        category: str,
        operation: str,
        user_id: str,
        record_id: Optional[str] = None,
    ) -> None:
        """Log a record write delegated to a provider."""
        event = AuditEventBuilder.record_written(
            category=category,
            operation=operation,
            user_id=user_id,
            record_id=record_id,
        )
        await self.log(event)
    
    async def log_bulk_operation(
        self,
        operation: str,
        user_id: str,
        counts: dict[str, int],
    ) -> None:
        await self.log(AuditEventBuilder.bulk_operation(operation, user_id, counts))
    
    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.
    
    One is created per aggregation run and passed to every event it emits.
    """
    return uuid4()
