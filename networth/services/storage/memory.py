"""
In-memory storage backends.

Used by the test suite and when no spreadsheet is configured.
"""

import asyncio
from typing import Optional

from networth.models.audit import AuditEvent
from networth.models.goal import Goal
from networth.services.storage.interface import (
    AuditStorageInterface,
    GoalStoreInterface,
    StorageError,
)


class InMemoryGoalStore(GoalStoreInterface):
    """Goals kept in a dict keyed by user ID."""
    
    def __init__(self, goals: Optional[dict[str, Goal]] = None):
        self._goals: dict[str, Goal] = dict(goals or {})
        self._lock = asyncio.Lock()
        self.fail_reads = False
        self.fail_writes = False
    
    async def read(self, identity_id: str) -> Optional[Goal]:
        if self.fail_reads:
            raise StorageError("Goal store unavailable")
        async with self._lock:
            return self._goals.get(identity_id)
    
    async def write(self, identity_id: str, goal: Goal) -> bool:
        if self.fail_writes:
            raise StorageError("Goal store is read-only")
        async with self._lock:
            self._goals[identity_id] = goal
        return True


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""
    
    def __init__(self):
        self._events: list[AuditEvent] = []
    
    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True
    
    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]
    
    @property
    def events(self) -> list[AuditEvent]:
        return list(self._events)
