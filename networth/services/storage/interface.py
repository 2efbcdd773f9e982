"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for the two things the
engine persists itself: the per-user goal it keeps in sync and the audit
trail. This allows us to:
1. Keep goals in Google Sheets today and a database later
2. Use in-memory storage for testing
3. Keep engine logic decoupled from storage implementation
"""

from abc import ABC, abstractmethod
from typing import Optional

from networth.models.audit import AuditEvent
from networth.models.goal import Goal


class GoalStoreInterface(ABC):
    """
    Abstract interface for the persisted goal store.
    
    Each user has at most one active goal.
    """
    
    @abstractmethod
    async def read(self, identity_id: str) -> Optional[Goal]:
        """
        Load the active goal for a user.
        
        Args:
            identity_id: The user's ID
            
        Returns:
            The goal if one exists, None otherwise
            
        Raises:
            StorageError: If the store cannot be read
        """
        pass
    
    @abstractmethod
    async def write(self, identity_id: str, goal: Goal) -> bool:
        """
        Create or replace the active goal for a user.
        
        Args:
            identity_id: The user's ID
            goal: The goal to store
            
        Returns:
            True if written successfully
            
        Raises:
            StorageError: If write fails
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.
    
    Audit logs are append-only - we never delete or modify them.
    """
    
    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.
        
        Returns:
            True if logged successfully
        """
        pass
    
    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.
        
        Args:
            limit: Maximum number of events to return
            
        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
