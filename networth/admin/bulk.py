"""
Administrative bulk lifecycle

Reset, export and import of one user's records, working directly on the
record providers and bypassing the aggregation engine.

Referential order: loans may reference a property, so parents are created
first and dependents are deleted first. CREATE_ORDER lists parents before
dependents; deletes walk it backwards.

None of these operations recompute the snapshot. Call
NetWorthEngine.refresh() afterwards.
"""

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Optional

from networth import __version__
from networth.audit import AuditLogger
from networth.models.records import Category, Identity
from networth.services.providers import RawRecord, WritableRecordProvider


CREATE_ORDER: tuple[Category, ...] = (
    Category.BANK_ACCOUNTS,
    Category.PROPERTY,
    Category.GOLD,
    Category.STOCKS,
    Category.BONDS,
    Category.MUTUAL_FUNDS,
    Category.LOANS,
    Category.CREDIT_CARDS,
)

DELETE_ORDER: tuple[Category, ...] = tuple(reversed(CREATE_ORDER))


class BulkLifecycle:
    """Bulk operations over every category of one user."""
    
    def __init__(
        self,
        providers: Mapping[Category, WritableRecordProvider],
        audit_logger: Optional[AuditLogger] = None,
    ):
        missing = [c.value for c in CREATE_ORDER if c not in providers]
        if missing:
            raise ValueError(f"No writable provider for: {', '.join(missing)}")
        self._providers = providers
        self._audit_logger = audit_logger
    
    async def reset_all(self, identity: Identity) -> dict[str, int]:
        """
        Delete every record of the user, dependents first.
        
        Returns the number of records deleted per category.
        """
        counts: dict[str, int] = {}
        for category in DELETE_ORDER:
            provider = self._providers[category]
            deleted = 0
            for record in await provider.get_all(identity):
                record_id = record.get("id")
                if record_id is not None and await provider.delete(identity, str(record_id)):
                    deleted += 1
            counts[category.value] = deleted
        
        if self._audit_logger:
            await self._audit_logger.log_bulk_operation("reset", identity.user_id, counts)
        return counts
    
    async def export_all(self, identity: Identity) -> dict[str, Any]:
        """Every raw record of the user, keyed by category value."""
        export: dict[str, Any] = {}
        for category in CREATE_ORDER:
            export[category.value] = await self._providers[category].get_all(identity)
        export["timestamp"] = datetime.now(timezone.utc).isoformat()
        export["version"] = __version__
        
        if self._audit_logger:
            counts = {c.value: len(export[c.value]) for c in CREATE_ORDER}
            await self._audit_logger.log_bulk_operation("export", identity.user_id, counts)
        return export
    
    async def import_all(
        self,
        identity: Identity,
        payload: Mapping[str, Any],
    ) -> dict[str, int]:
        """
        Replace the user's records with an export, parents first.
        
        Categories missing from the payload are left empty. Entries that
        are not JSON objects are skipped.
        """
        await self.reset_all(identity)
        
        counts: dict[str, int] = {}
        for category in CREATE_ORDER:
            records = payload.get(category.value) or []
            created = 0
            for record in records:
                if not isinstance(record, dict):
                    continue
                await self._providers[category].create(identity, _strip_owner(record))
                created += 1
            counts[category.value] = created
        
        if self._audit_logger:
            await self._audit_logger.log_bulk_operation("import", identity.user_id, counts)
        return counts


def _strip_owner(record: RawRecord) -> RawRecord:
    # The importing user owns the new records
    return {k: v for k, v in record.items() if k != "userId"}
