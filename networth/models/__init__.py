"""
Data Models Package

This package contains all Pydantic models used by the Net Worth engine.
"""

from networth.models.records import (
    BankAccountRecord,
    BondRecord,
    CanonicalRecord,
    Category,
    CreditCardRecord,
    GoldRecord,
    Identity,
    LoanRecord,
    MutualFundRecord,
    PropertyRecord,
    StockRecord,
)
from networth.models.snapshot import (
    Assets,
    Bucket,
    CashBuckets,
    Liabilities,
    NetWorthSnapshot,
    SnapshotState,
)
from networth.models.goal import Goal
from networth.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Records
    "BankAccountRecord",
    "BondRecord",
    "CanonicalRecord",
    "Category",
    "CreditCardRecord",
    "GoldRecord",
    "Identity",
    "LoanRecord",
    "MutualFundRecord",
    "PropertyRecord",
    "StockRecord",
    # Snapshot
    "Assets",
    "Bucket",
    "CashBuckets",
    "Liabilities",
    "NetWorthSnapshot",
    "SnapshotState",
    # Goals
    "Goal",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
