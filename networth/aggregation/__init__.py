"""Aggregation package: bucket reduction and the snapshot store."""

from networth.aggregation.reducer import (
    VALUE_RULES,
    bond_value,
    item_value,
    partition_cash,
    reduce_bucket,
)
from networth.aggregation.store import SnapshotListener, SnapshotStore

__all__ = [
    "SnapshotListener",
    "SnapshotStore",
    "VALUE_RULES",
    "bond_value",
    "item_value",
    "partition_cash",
    "reduce_bucket",
]
