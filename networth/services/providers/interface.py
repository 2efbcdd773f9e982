"""
Record Provider Interface

DESIGN DECISION: Each asset/liability category is owned by its own record
service. The engine only needs to read a category's raw records for one
identity; the writable variant adds the CRUD calls the engine delegates to
when a caller records, edits or removes an item.

A provider failure MUST raise. Returning an empty list means "this user has
no records in this category", which the engine treats very differently.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from networth.models.records import Category, Identity


RawRecord = dict[str, Any]


class ProviderError(Exception):
    """A record service could not answer."""
    
    def __init__(
        self,
        category: Category,
        message: str,
        status_code: Optional[int] = None,
    ):
        self.category = category
        self.status_code = status_code
        super().__init__(f"{category.value}: {message}")


class RecordProvider(ABC):
    """Read access to one category's records."""
    
    category: Category
    
    @abstractmethod
    async def get_all(self, identity: Identity) -> list[RawRecord]:
        """
        Fetch every raw record of this category for an identity.
        
        Returns:
            JSON-compatible records in the service's own field names
            
        Raises:
            ProviderError: On transport errors or non-success responses
        """
        pass


class WritableRecordProvider(RecordProvider):
    """A record provider that also accepts writes."""
    
    @abstractmethod
    async def create(self, identity: Identity, payload: RawRecord) -> RawRecord:
        """Create a record and return it as stored."""
        pass
    
    @abstractmethod
    async def update(
        self,
        identity: Identity,
        record_id: str,
        payload: RawRecord,
    ) -> RawRecord:
        """Update a record and return it as stored."""
        pass
    
    @abstractmethod
    async def delete(self, identity: Identity, record_id: str) -> bool:
        """Delete a record. Returns True if something was deleted."""
        pass
