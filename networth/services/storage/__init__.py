"""
Storage Services Package

Provides abstract interfaces and concrete implementations for the goal
store and the audit trail. Google Sheets is the configured backend;
in-memory implementations back the tests.
"""

from networth.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    GoalStoreInterface,
    StorageError,
)
from networth.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryGoalStore,
)
from networth.services.storage.google_sheets import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsGoalStore,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "GoalStoreInterface",
    # Exceptions
    "ConnectionError",
    "StorageError",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryGoalStore",
    # Google Sheets implementation
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsGoalStore",
]
