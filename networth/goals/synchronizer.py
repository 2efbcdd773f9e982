"""
Goal Synchronizer

After every committed snapshot, pushes the fresh net worth into the
user's active goal. This is a side effect of aggregation, never part of
it: a missing goal or a storage failure is logged and audited, and the
committed snapshot is left alone.

Syncs for one user run one at a time, and a sync that is still queued
when a newer net worth arrives is skipped, so the goal always ends on
the latest value.
"""

import asyncio
from decimal import Decimal
from typing import Optional

from networth.audit import AuditLogger, get_logger
from networth.services.storage import GoalStoreInterface


logger = get_logger(__name__)


class GoalSynchronizer:
    """Keeps each user's active goal in step with their net worth."""
    
    def __init__(
        self,
        goal_store: GoalStoreInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._goal_store = goal_store
        self._audit_logger = audit_logger
        self._pending: set[asyncio.Task] = set()
        self._locks: dict[str, asyncio.Lock] = {}
        self._latest: dict[str, int] = {}
    
    async def sync(self, identity_id: str, net_worth: Decimal) -> bool:
        """
        Write net_worth into the user's active goal.
        
        Returns True if a goal was updated, False if there was no goal or
        the store failed.
        """
        try:
            goal = await self._goal_store.read(identity_id)
            if goal is None:
                logger.debug("no_active_goal", user_id=identity_id)
                return False
            
            updated = goal.with_net_worth(net_worth)
            await self._goal_store.write(identity_id, updated)
        except Exception as e:
            logger.warning("goal_sync_failed", user_id=identity_id, error=str(e))
            if self._audit_logger:
                await self._audit_logger.log_goal_sync_failed(identity_id, str(e))
            return False
        
        if self._audit_logger:
            await self._audit_logger.log_goal_synced(
                identity_id, updated.goal_id, str(net_worth)
            )
        return True
    
    def schedule(self, identity_id: str, net_worth: Decimal) -> asyncio.Task:
        """Run sync in the background without waiting for it."""
        sequence = self._latest.get(identity_id, 0) + 1
        self._latest[identity_id] = sequence
        task = asyncio.create_task(self._sync_in_order(identity_id, net_worth, sequence))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task
    
    async def _sync_in_order(self, identity_id: str, net_worth: Decimal, sequence: int) -> bool:
        lock = self._locks.setdefault(identity_id, asyncio.Lock())
        async with lock:
            if sequence != self._latest[identity_id]:
                logger.debug("goal_sync_superseded", user_id=identity_id, sequence=sequence)
                return False
            return await self.sync(identity_id, net_worth)
    
    @property
    def pending(self) -> int:
        return len(self._pending)
    
    async def drain(self) -> None:
        """Wait for every scheduled sync to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
    
    async def aclose(self) -> None:
        await self.drain()
