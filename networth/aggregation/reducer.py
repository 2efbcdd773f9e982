"""
Bucket Reducer

Folds a category's canonical records into a bucket total using the
category's valuation rule:

| Category                | Value of one item                        |
|-------------------------|------------------------------------------|
| gold                    | stored total value                       |
| bonds                   | current value, else face value, else 0   |
| stocks                  | units x unit price                       |
| property                | current value                            |
| mutual funds            | current value                            |
| bank accounts / wallets | balance                                  |
| loans                   | outstanding balance                      |
| credit cards            | used amount                              |
"""

from decimal import Decimal
from typing import Callable, Iterable

from networth.audit import get_logger
from networth.models.records import (
    BankAccountRecord,
    BondRecord,
    CanonicalRecord,
    Category,
)
from networth.models.snapshot import Bucket, CashBuckets
from networth.normalization.normalizer import MAX_ADJUSTED_EXPONENT


logger = get_logger(__name__)

ZERO = Decimal("0")


def bond_value(record: BondRecord) -> Decimal:
    """Current value, falling back to face value when current is absent."""
    if record.current_value is not None:
        return record.current_value
    if record.face_value is not None:
        return record.face_value
    return ZERO


VALUE_RULES: dict[Category, Callable[..., Decimal]] = {
    Category.GOLD: lambda r: r.total_value,
    Category.BONDS: bond_value,
    Category.STOCKS: lambda r: r.units * r.unit_price,
    Category.PROPERTY: lambda r: r.current_value,
    Category.MUTUAL_FUNDS: lambda r: r.current_value,
    Category.BANK_ACCOUNTS: lambda r: r.balance,
    Category.LOANS: lambda r: r.outstanding_balance,
    Category.CREDIT_CARDS: lambda r: r.used_amount,
}


def item_value(record: CanonicalRecord) -> Decimal:
    """
    Value one record contributes to its bucket.
    
    A value that cannot be computed, or is not a plausible amount, is 0.
    """
    try:
        value = VALUE_RULES[record.category](record)
    except ArithmeticError as e:
        logger.warning(
            "item_value_failed",
            category=record.category.value,
            record_id=record.id,
            error=type(e).__name__,
        )
        return ZERO
    
    if not value.is_finite():
        return ZERO
    if value and value.adjusted() > 2 * MAX_ADJUSTED_EXPONENT:
        logger.warning(
            "item_value_out_of_range",
            category=record.category.value,
            record_id=record.id,
        )
        return ZERO
    return value


def reduce_bucket(records: Iterable[CanonicalRecord]) -> Bucket:
    """Sum a category's records into a bucket."""
    items = tuple(records)
    total = sum((item_value(r) for r in items), ZERO)
    return Bucket(items=items, total_value=total)


def partition_cash(
    records: Iterable[BankAccountRecord],
    wallet_account_type: str,
) -> CashBuckets:
    """Split bank account records into bank accounts and wallets."""
    bank_accounts: list[BankAccountRecord] = []
    wallets: list[BankAccountRecord] = []
    
    for record in records:
        if record.account_type == wallet_account_type:
            wallets.append(record)
        else:
            bank_accounts.append(record)
    
    bank_bucket = reduce_bucket(bank_accounts)
    wallet_bucket = reduce_bucket(wallets)
    return CashBuckets(
        bank_accounts=bank_bucket,
        wallets=wallet_bucket,
        total_cash=bank_bucket.total_value + wallet_bucket.total_value,
    )
