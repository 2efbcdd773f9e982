"""
Tests for the bulk reset / export / import lifecycle.
"""

from decimal import Decimal

import pytest

from conftest import ALICE, BOB, make_providers, portfolio
from networth import __version__
from networth.admin import CREATE_ORDER, DELETE_ORDER, BulkLifecycle
from networth.audit import AuditLogger
from networth.models import AuditEventType, Category
from networth.services.providers import InMemoryRecordProvider
from networth.services.storage import InMemoryAuditStorage


class LoggingProvider(InMemoryRecordProvider):
    """Records the order of write calls across categories."""
    
    def __init__(self, category, records, journal):
        super().__init__(category, records)
        self.journal = journal
    
    async def create(self, identity, payload):
        self.journal.append(("create", self.category))
        return await super().create(identity, payload)
    
    async def delete(self, identity, record_id):
        self.journal.append(("delete", self.category))
        return await super().delete(identity, record_id)


@pytest.fixture
def journal():
    return []


@pytest.fixture
def providers(journal):
    records = portfolio(ALICE.user_id)
    return {
        category: LoggingProvider(category, records.get(category), journal)
        for category in Category
    }


def categories_in_order(journal, action):
    seen = []
    for kind, category in journal:
        if kind == action and category not in seen:
            seen.append(category)
    return seen


class TestOrdering:
    """Tests for referential ordering."""
    
    def test_property_created_before_loans(self):
        assert CREATE_ORDER.index(Category.PROPERTY) < CREATE_ORDER.index(Category.LOANS)
        assert DELETE_ORDER.index(Category.LOANS) < DELETE_ORDER.index(Category.PROPERTY)
        assert set(CREATE_ORDER) == set(Category)


class TestBulkLifecycle:
    """Tests for reset, export and import."""
    
    @pytest.mark.asyncio
    async def test_reset_deletes_dependents_first(self, providers, journal):
        audit_storage = InMemoryAuditStorage()
        lifecycle = BulkLifecycle(providers, AuditLogger(audit_storage))
        
        counts = await lifecycle.reset_all(ALICE)
        
        assert counts["gold"] == 2
        assert counts["bank_accounts"] == 2
        assert categories_in_order(journal, "delete") == list(DELETE_ORDER)
        for provider in providers.values():
            assert await provider.get_all(ALICE) == []
        assert audit_storage.events[-1].event_type == AuditEventType.BULK_OPERATION
    
    @pytest.mark.asyncio
    async def test_export_contains_every_category(self, providers):
        export = await BulkLifecycle(providers).export_all(ALICE)
        
        for category in Category:
            assert category.value in export
        assert len(export["gold"]) == 2
        assert export["version"] == __version__
        assert "timestamp" in export
    
    @pytest.mark.asyncio
    async def test_import_replaces_records_parents_first(self, providers, journal):
        lifecycle = BulkLifecycle(providers)
        payload = {
            "property": [{"id": "p9", "name": "Villa", "currentValue": "9", "userId": BOB.user_id}],
            "loans": [{"id": "l9", "loanType": "p9", "outstanding": "3"}, "not-a-record"],
        }
        
        counts = await lifecycle.import_all(ALICE, payload)
        
        assert counts["property"] == 1
        assert counts["loans"] == 1
        assert counts["gold"] == 0
        
        created = categories_in_order(journal, "create")
        assert created.index(Category.PROPERTY) < created.index(Category.LOANS)
        
        [prop] = await providers[Category.PROPERTY].get_all(ALICE)
        assert "userId" not in prop
        assert await providers[Category.GOLD].get_all(ALICE) == []
    
    @pytest.mark.asyncio
    async def test_export_then_import_restores_records(self):
        source = make_providers(portfolio(ALICE.user_id))
        target = make_providers()
        
        export = await BulkLifecycle(source).export_all(ALICE)
        await BulkLifecycle(target).import_all(ALICE, export)
        
        [loan] = await target[Category.LOANS].get_all(ALICE)
        assert Decimal(loan["outstanding"]) == Decimal("250000")
    
    def test_missing_provider_rejected(self, providers):
        del providers[Category.BONDS]
        with pytest.raises(ValueError, match="bonds"):
            BulkLifecycle(providers)
