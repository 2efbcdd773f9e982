"""
Audit Models for the Net Worth engine

Every significant engine action is recorded as an audit event:
identity changes, aggregation runs, provider failures, snapshot commits,
goal synchronization and record writes.

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Session
    IDENTITY_APPEARED = "identity_appeared"
    IDENTITY_CHANGED = "identity_changed"
    IDENTITY_DISAPPEARED = "identity_disappeared"
    
    # Aggregation
    AGGREGATION_STARTED = "aggregation_started"
    PROVIDER_FETCH_FAILED = "provider_fetch_failed"
    SNAPSHOT_COMMITTED = "snapshot_committed"
    SNAPSHOT_RESET = "snapshot_reset"
    RUN_SUPERSEDED = "run_superseded"
    
    # Goals
    GOAL_SYNCED = "goal_synced"
    GOAL_SYNC_FAILED = "goal_sync_failed"
    
    # Writes
    RECORD_WRITTEN = "record_written"
    BULK_OPERATION = "bulk_operation"
    
    # System events
    SYSTEM_ERROR = "system_error"


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
    
    This is the core unit of our audit trail.
    """
    
    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
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
        description="Type of entity (e.g., 'identity', 'snapshot', 'goal')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )
    
    # Correlation - one aggregation run shares one correlation ID
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
    
    # Error information (if applicable)
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
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }
    
    def to_sheets_row(self) -> list:
        """
        Convert to a row suitable for Google Sheets storage.
        
        Returns columns in order:
        [event_id, timestamp, event_type, severity, entity_type, entity_id,
         correlation_id, description, details_json, error_message]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.entity_type or "",
            self.entity_id or "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details, default=str) if self.details else "",
            self.error_message or "",
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.
    
    Usage:
        event = AuditEventBuilder.aggregation_started(user_id, generation, run_id)
        event = AuditEventBuilder.provider_fetch_failed("bonds", user_id, err, run_id)
    """
    
    @staticmethod
    def identity_appeared(user_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IDENTITY_APPEARED,
            entity_type="identity",
            entity_id=user_id,
            description="User logged in",
        )
    
    @staticmethod
    def identity_changed(old_user_id: str, new_user_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IDENTITY_CHANGED,
            entity_type="identity",
            entity_id=new_user_id,
            description="Active user switched",
            details={
                "previous_user_id": old_user_id,
            },
        )
    
    @staticmethod
    def identity_disappeared(old_user_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IDENTITY_DISAPPEARED,
            entity_type="identity",
            entity_id=old_user_id,
            description="User logged out",
        )
    
    @staticmethod
    def aggregation_started(
        user_id: str,
        generation: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.AGGREGATION_STARTED,
            entity_type="snapshot",
            entity_id=user_id,
            correlation_id=correlation_id,
            description=f"Aggregation run {generation} started",
            details={
                "generation": generation,
            },
        )
    
    @staticmethod
    def provider_fetch_failed(
        category: str,
        user_id: str,
        error_message: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROVIDER_FETCH_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="provider",
            entity_id=category,
            correlation_id=correlation_id,
            description=f"Fetching {category} failed; category reported as empty",
            details={
                "category": category,
                "user_id": user_id,
            },
            error_message=error_message,
        )
    
    @staticmethod
    def snapshot_committed(
        user_id: str,
        generation: int,
        net_worth: str,
        failed_categories: list[str],
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_COMMITTED,
            severity=AuditSeverity.WARNING if failed_categories else AuditSeverity.INFO,
            entity_type="snapshot",
            entity_id=user_id,
            correlation_id=correlation_id,
            description=f"Snapshot committed: net worth {net_worth}",
            details={
                "generation": generation,
                "net_worth": net_worth,
                "failed_categories": failed_categories,
            },
        )
    
    @staticmethod
    def snapshot_reset(previous_owner: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_RESET,
            entity_type="snapshot",
            entity_id=previous_owner,
            description="Snapshot reset to zero",
        )
    
    @staticmethod
    def run_superseded(
        user_id: str,
        generation: int,
        latest_generation: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RUN_SUPERSEDED,
            severity=AuditSeverity.DEBUG,
            entity_type="snapshot",
            entity_id=user_id,
            correlation_id=correlation_id,
            description=f"Aggregation run {generation} discarded; run {latest_generation} is newer",
            details={
                "generation": generation,
                "latest_generation": latest_generation,
            },
        )
    
    @staticmethod
    def goal_synced(user_id: str, goal_id: UUID, net_worth: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_SYNCED,
            entity_type="goal",
            entity_id=str(goal_id),
            description=f"Goal updated with net worth {net_worth}",
            details={
                "user_id": user_id,
                "net_worth": net_worth,
            },
        )
    
    @staticmethod
    def goal_sync_failed(user_id: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_SYNC_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="goal",
            description="Could not update the active goal",
            details={
                "user_id": user_id,
            },
            error_message=error_message,
        )
    
    @staticmethod
    def record_written(
        category: str,
        operation: str,
        user_id: str,
        record_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_WRITTEN,
            entity_type=category,
            entity_id=record_id,
            description=f"{category} record {operation}",
            details={
                "operation": operation,
                "user_id": user_id,
            },
        )
    
    @staticmethod
    def bulk_operation(
        operation: str,
        user_id: str,
        counts: dict[str, int],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BULK_OPERATION,
            severity=AuditSeverity.WARNING if operation == "reset" else AuditSeverity.INFO,
            entity_type="identity",
            entity_id=user_id,
            description=f"Bulk {operation} of {sum(counts.values())} records",
            details={
                "operation": operation,
                "counts": counts,
            },
        )
    
    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
