"""
Snapshot Models

A NetWorthSnapshot is the complete, consistent net worth state for one
identity at one point in time. It is the only state consumers ever see.

DESIGN DECISION: The arithmetic invariants live in model validators.
A snapshot whose totals do not add up cannot be constructed at all, so it
can never be committed.
"""

import builtins
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from networth.models.records import CanonicalRecord


ZERO = Decimal("0")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Bucket(BaseModel):
    """The records of one category plus their reduced total."""
    model_config = ConfigDict(frozen=True)
    
    items: tuple[CanonicalRecord, ...] = ()
    total_value: Decimal = ZERO
    
    @field_validator('total_value')
    @classmethod
    def must_be_finite(cls, v: Decimal) -> Decimal:
        if not v.is_finite():
            raise ValueError(f"Bucket total must be a finite number, got {v}")
        return v


class CashBuckets(BaseModel):
    """Bank accounts and wallets, both fed by the bank account provider."""
    model_config = ConfigDict(frozen=True)
    
    bank_accounts: Bucket = Field(default_factory=Bucket)
    wallets: Bucket = Field(default_factory=Bucket)
    total_cash: Decimal = ZERO
    
    @model_validator(mode='after')
    def validate_total(self) -> 'CashBuckets':
        expected = self.bank_accounts.total_value + self.wallets.total_value
        if self.total_cash != expected:
            raise ValueError(
                f"Cash total {self.total_cash} does not equal bank + wallet ({expected})"
            )
        return self


class Assets(BaseModel):
    model_config = ConfigDict(frozen=True)
    
    gold: Bucket = Field(default_factory=Bucket)
    bonds: Bucket = Field(default_factory=Bucket)
    stocks: Bucket = Field(default_factory=Bucket)
    property: Bucket = Field(default_factory=Bucket)
    mutual_funds: Bucket = Field(default_factory=Bucket)
    cash: CashBuckets = Field(default_factory=CashBuckets)
    
    # The `property` field shadows the builtin inside this class body
    @builtins.property
    def total_value(self) -> Decimal:
        return (
            self.gold.total_value
            + self.bonds.total_value
            + self.stocks.total_value
            + self.property.total_value
            + self.mutual_funds.total_value
            + self.cash.total_cash
        )


class Liabilities(BaseModel):
    model_config = ConfigDict(frozen=True)
    
    loans: Bucket = Field(default_factory=Bucket)
    credit_cards: Bucket = Field(default_factory=Bucket)
    
    @property
    def total_value(self) -> Decimal:
        return self.loans.total_value + self.credit_cards.total_value


class NetWorthSnapshot(BaseModel):
    """
    Net worth state for one identity.
    
    Invariants (checked on construction):
    - total_assets is the sum of the six asset bucket totals
    - total_liabilities is the sum of the two liability bucket totals
    - net_worth == total_assets - total_liabilities
    
    owner is None only for the zero snapshot.
    """
    model_config = ConfigDict(frozen=True)
    
    assets: Assets = Field(default_factory=Assets)
    liabilities: Liabilities = Field(default_factory=Liabilities)
    total_assets: Decimal = ZERO
    total_liabilities: Decimal = ZERO
    net_worth: Decimal = ZERO
    last_updated: datetime = Field(
        default_factory=_utcnow,
        description="When this snapshot was composed (UTC)"
    )
    owner: Optional[str] = Field(
        default=None,
        description="user_id of the identity the snapshot belongs to"
    )
    
    @model_validator(mode='after')
    def validate_totals(self) -> 'NetWorthSnapshot':
        """Validate the aggregate totals against the buckets."""
        if self.total_assets != self.assets.total_value:
            raise ValueError("Total assets do not match the asset buckets")
        
        if self.total_liabilities != self.liabilities.total_value:
            raise ValueError("Total liabilities do not match the liability buckets")
        
        if self.net_worth != self.total_assets - self.total_liabilities:
            raise ValueError("Net worth must equal total assets minus total liabilities")
        
        return self
    
    @classmethod
    def zero(cls) -> 'NetWorthSnapshot':
        """The canonical empty snapshot with no owner."""
        return cls()
    
    @classmethod
    def compose(
        cls,
        assets: Assets,
        liabilities: Liabilities,
        owner: Optional[str],
    ) -> 'NetWorthSnapshot':
        """Build a snapshot whose totals are derived from its buckets."""
        total_assets = assets.total_value
        total_liabilities = liabilities.total_value
        return cls(
            assets=assets,
            liabilities=liabilities,
            total_assets=total_assets,
            total_liabilities=total_liabilities,
            net_worth=total_assets - total_liabilities,
            owner=owner,
        )
    
    def is_zero(self) -> bool:
        """True for the zero snapshot, whatever its timestamp."""
        return self.without_timestamp() == NetWorthSnapshot.zero().without_timestamp()
    
    def without_timestamp(self) -> dict:
        """Model dump without last_updated, for comparing two runs."""
        return self.model_dump(exclude={"last_updated"})


class SnapshotState(BaseModel):
    """The current snapshot plus the loading flag."""
    model_config = ConfigDict(frozen=True)
    
    snapshot: NetWorthSnapshot = Field(default_factory=NetWorthSnapshot.zero)
    is_loading: bool = False
