"""
Tests for the data models

Test strategy:
1. Unit tests for individual components (models, normalizer, reducer)
2. Flow tests for the orchestrator and engine (in-memory collaborators)
3. No real API calls in tests
"""

import pytest
from decimal import Decimal
from uuid import uuid4

from pydantic import ValidationError

from networth.models import (
    Assets,
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
    Bucket,
    CashBuckets,
    Category,
    Goal,
    GoldRecord,
    Identity,
    Liabilities,
    NetWorthSnapshot,
    SnapshotState,
)


class TestIdentity:
    """Tests for the Identity model."""
    
    def test_same_user_compares_user_id_only(self):
        """Test that a refreshed token does not make a different user."""
        a = Identity(user_id="u1", access_token="t1")
        b = Identity(user_id="u1", access_token="t2")
        assert a.same_user(b)
        assert not a.same_user(Identity(user_id="u2"))
        assert not a.same_user(None)
    
    def test_identity_strips_whitespace(self):
        identity = Identity(user_id="  u1  ")
        assert identity.user_id == "u1"
    
    def test_identity_requires_user_id(self):
        with pytest.raises(ValueError):
            Identity(user_id="")
    
    def test_access_token_not_in_repr(self):
        identity = Identity(user_id="u1", access_token="secret-token")
        assert "secret-token" not in repr(identity)


class TestCategory:
    """Tests for the category enum."""
    
    def test_all_categories_exist(self):
        expected = [
            "gold", "bonds", "stocks", "property", "mutual_funds",
            "bank_accounts", "loans", "credit_cards",
        ]
        for cat in expected:
            assert Category(cat) is not None
    
    def test_liability_categories(self):
        liabilities = {c for c in Category if c.is_liability}
        assert liabilities == {Category.LOANS, Category.CREDIT_CARDS}


class TestSnapshotModels:
    """Tests for buckets and snapshots."""
    
    def test_zero_snapshot(self):
        snapshot = NetWorthSnapshot.zero()
        assert snapshot.owner is None
        assert snapshot.total_assets == 0
        assert snapshot.net_worth == 0
        assert snapshot.assets.gold.items == ()
        assert snapshot.is_zero()
    
    def test_default_state_is_zero_and_not_loading(self):
        state = SnapshotState()
        assert state.snapshot.is_zero()
        assert state.is_loading is False
    
    def test_property_bucket_counts_toward_assets(self):
        assets = Assets(property=Bucket(total_value=Decimal("5")))
        
        assert assets.property.total_value == Decimal("5")
        assert assets.total_value == Decimal("5")
        assert NetWorthSnapshot.compose(assets, Liabilities(), owner="u1").net_worth == Decimal("5")
    
    def test_compose_derives_totals(self):
        gold = Bucket(
            items=(GoldRecord(id="g1", total_value=Decimal("150")),),
            total_value=Decimal("150"),
        )
        assets = Assets(
            gold=gold,
            cash=CashBuckets(
                bank_accounts=Bucket(total_value=Decimal("20")),
                wallets=Bucket(total_value=Decimal("5")),
                total_cash=Decimal("25"),
            ),
        )
        liabilities = Liabilities(loans=Bucket(total_value=Decimal("75")))
        
        snapshot = NetWorthSnapshot.compose(assets, liabilities, owner="u1")
        
        assert snapshot.total_assets == Decimal("175")
        assert snapshot.total_liabilities == Decimal("75")
        assert snapshot.net_worth == Decimal("100")
        assert snapshot.owner == "u1"
        assert not snapshot.is_zero()
    
    def test_inconsistent_totals_rejected(self):
        """Test that a snapshot whose totals don't add up cannot exist."""
        with pytest.raises(ValueError, match="Total assets do not match"):
            NetWorthSnapshot(
                assets=Assets(gold=Bucket(total_value=Decimal("10"))),
                total_assets=Decimal("11"),
                net_worth=Decimal("11"),
            )
    
    def test_net_worth_must_match(self):
        with pytest.raises(ValueError, match="Net worth must equal"):
            NetWorthSnapshot(
                assets=Assets(gold=Bucket(total_value=Decimal("10"))),
                total_assets=Decimal("10"),
                net_worth=Decimal("9"),
            )
    
    def test_cash_total_must_match(self):
        with pytest.raises(ValueError, match="Cash total"):
            CashBuckets(
                bank_accounts=Bucket(total_value=Decimal("1")),
                wallets=Bucket(total_value=Decimal("2")),
                total_cash=Decimal("4"),
            )
    
    def test_bucket_rejects_nan(self):
        with pytest.raises(ValueError):
            Bucket(total_value=Decimal("NaN"))
    
    def test_snapshot_is_immutable(self):
        snapshot = NetWorthSnapshot.zero()
        with pytest.raises(ValidationError):
            snapshot.net_worth = Decimal("5")
    
    def test_without_timestamp_ignores_last_updated(self):
        first = NetWorthSnapshot.zero()
        second = NetWorthSnapshot.zero()
        assert first.without_timestamp() == second.without_timestamp()
        assert "last_updated" not in first.without_timestamp()


class TestGoal:
    """Tests for the Goal model."""
    
    def test_with_net_worth_returns_copy(self):
        goal = Goal(name="Retire", target_amount=Decimal("1000"))
        updated = goal.with_net_worth(Decimal("250"))
        
        assert updated.current_net_worth == Decimal("250")
        assert updated.goal_id == goal.goal_id
        assert goal.current_net_worth == Decimal("0")
        assert updated.updated_at >= goal.updated_at
    
    def test_progress_is_clamped(self):
        goal = Goal(name="Retire", target_amount=Decimal("1000"))
        assert goal.with_net_worth(Decimal("500")).progress == 0.5
        assert goal.with_net_worth(Decimal("-10")).progress == 0.0
        assert goal.with_net_worth(Decimal("5000")).progress == 1.0
    
    def test_goal_rejects_negative_target(self):
        with pytest.raises(ValueError):
            Goal(name="Bad", target_amount=Decimal("-1"))


class TestAuditModels:
    """Tests for audit-related models."""
    
    def test_audit_event_creation(self):
        event = AuditEvent(
            event_type=AuditEventType.AGGREGATION_STARTED,
            description="Run started",
        )
        assert event.event_type == AuditEventType.AGGREGATION_STARTED
        assert event.severity == AuditSeverity.INFO
    
    def test_audit_event_to_log_dict(self):
        event = AuditEvent(
            event_type=AuditEventType.SNAPSHOT_COMMITTED,
            description="Snapshot committed",
            details={"net_worth": "150"},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "snapshot_committed"
        assert log_dict["details"]["net_worth"] == "150"
    
    def test_audit_event_to_sheets_row(self):
        event = AuditEvent(
            event_type=AuditEventType.GOAL_SYNCED,
            entity_id="goal-1",
            description="Goal synced",
        )
        row = event.to_sheets_row()
        assert len(row) == 10  # Expected number of columns
        assert row[2] == "goal_synced"
        assert row[5] == "goal-1"
    
    def test_provider_failure_event_is_warning(self):
        correlation_id = uuid4()
        event = AuditEventBuilder.provider_fetch_failed(
            category="bonds",
            user_id="u1",
            error_message="boom",
            correlation_id=correlation_id,
        )
        assert event.event_type == AuditEventType.PROVIDER_FETCH_FAILED
        assert event.severity == AuditSeverity.WARNING
        assert event.entity_id == "bonds"
        assert event.correlation_id == correlation_id
        assert event.error_message == "boom"
    
    def test_snapshot_committed_with_failures_is_warning(self):
        clean = AuditEventBuilder.snapshot_committed("u1", 1, "10", [], uuid4())
        degraded = AuditEventBuilder.snapshot_committed("u1", 2, "10", ["bonds"], uuid4())
        assert clean.severity == AuditSeverity.INFO
        assert degraded.severity == AuditSeverity.WARNING
        assert degraded.details["failed_categories"] == ["bonds"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
