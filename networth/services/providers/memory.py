"""
In-memory record provider.

Keeps raw records per user in insertion order. Used by the test suite and
for running the engine without the record services.
"""

import asyncio
from copy import deepcopy
from typing import Optional
from uuid import uuid4

from networth.models.records import Category, Identity
from networth.services.providers.interface import (
    ProviderError,
    RawRecord,
    WritableRecordProvider,
)


class InMemoryRecordProvider(WritableRecordProvider):
    """
    Raw records for one category, keyed by user ID.
    
    Setting `fail_with` makes every read raise it, and `delay` holds every
    read for that many seconds; both are meant for tests.
    """
    
    def __init__(
        self,
        category: Category,
        records: Optional[dict[str, list[RawRecord]]] = None,
    ):
        self.category = category
        self._records: dict[str, list[RawRecord]] = {
            user_id: [dict(r) for r in items]
            for user_id, items in (records or {}).items()
        }
        self.fail_with: Optional[Exception] = None
        self.delay: float = 0.0
        self.calls = 0
    
    async def get_all(self, identity: Identity) -> list[RawRecord]:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_with is not None:
            raise self.fail_with
        return deepcopy(self._records.get(identity.user_id, []))
    
    async def create(self, identity: Identity, payload: RawRecord) -> RawRecord:
        record = dict(payload)
        record.setdefault("id", str(uuid4()))
        self._records.setdefault(identity.user_id, []).append(record)
        return dict(record)
    
    async def update(
        self,
        identity: Identity,
        record_id: str,
        payload: RawRecord,
    ) -> RawRecord:
        for record in self._records.get(identity.user_id, []):
            if record.get("id") == record_id:
                record.update(payload)
                record["id"] = record_id
                return dict(record)
        raise ProviderError(self.category, f"record {record_id} not found", status_code=404)
    
    async def delete(self, identity: Identity, record_id: str) -> bool:
        items = self._records.get(identity.user_id, [])
        for idx, record in enumerate(items):
            if record.get("id") == record_id:
                del items[idx]
                return True
        return False
    
    def set_records(self, user_id: str, records: list[RawRecord]) -> None:
        self._records[user_id] = [dict(r) for r in records]
