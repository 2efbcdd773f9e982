"""
Tests for bucket reduction and the snapshot invariants it feeds.
"""

import random
from decimal import Decimal

from networth.aggregation import bond_value, item_value, partition_cash, reduce_bucket
from networth.models import (
    Assets,
    BankAccountRecord,
    BondRecord,
    Bucket,
    CreditCardRecord,
    GoldRecord,
    Liabilities,
    LoanRecord,
    NetWorthSnapshot,
    PropertyRecord,
    StockRecord,
)


class TestValuationRules:
    """Tests for per-category item values."""
    
    def test_gold_bucket_sums_total_value(self):
        bucket = reduce_bucket([
            GoldRecord(id="g1", total_value=Decimal("100")),
            GoldRecord(id="g2", total_value=Decimal("50")),
        ])
        assert bucket.total_value == Decimal("150")
        assert len(bucket.items) == 2
    
    def test_bond_prefers_current_value(self):
        bond = BondRecord(id="b1", face_value=Decimal("1000"), current_value=Decimal("980"))
        assert bond_value(bond) == Decimal("980")
    
    def test_bond_falls_back_to_face_value(self):
        bond = BondRecord(id="b1", face_value=Decimal("1000"), current_value=None)
        assert bond_value(bond) == Decimal("1000")
    
    def test_bond_without_values_is_zero(self):
        assert bond_value(BondRecord(id="b1")) == Decimal("0")
    
    def test_bond_explicit_zero_is_kept(self):
        bond = BondRecord(id="b1", face_value=Decimal("1000"), current_value=Decimal("0"))
        assert bond_value(bond) == Decimal("0")
    
    def test_stock_value_is_units_times_price(self):
        stock = StockRecord(id="s1", units=Decimal("3"), unit_price=Decimal("2.5"))
        assert item_value(stock) == Decimal("7.5")
    
    def test_overflowing_stock_counts_as_zero(self):
        stock = StockRecord(id="s9", units=Decimal("1e999999"), unit_price=Decimal("10"))
        assert item_value(stock) == Decimal("0")
        
        bucket = reduce_bucket([
            StockRecord(id="s1", units=Decimal("3"), unit_price=Decimal("2.5")),
            stock,
            StockRecord(id="s2", units=Decimal("1e30"), unit_price=Decimal("1e30")),
        ])
        assert bucket.total_value == Decimal("7.5")
        assert len(bucket.items) == 3
    
    def test_liabilities(self):
        assert item_value(LoanRecord(id="l1", outstanding_balance=Decimal("40"))) == Decimal("40")
        assert item_value(CreditCardRecord(id="c1", used_amount=Decimal("9"))) == Decimal("9")
    
    def test_empty_bucket(self):
        bucket = reduce_bucket([])
        assert bucket.items == ()
        assert bucket.total_value == Decimal("0")


class TestCashPartition:
    """Tests for splitting bank accounts into banks and wallets."""
    
    def test_wallets_separated_by_account_type(self):
        cash = partition_cash(
            [
                BankAccountRecord(id="a1", account_type="Savings", balance=Decimal("100")),
                BankAccountRecord(id="w1", account_type="Wallet", balance=Decimal("20")),
                BankAccountRecord(id="a2", account_type=None, balance=Decimal("5")),
            ],
            wallet_account_type="Wallet",
        )
        assert [r.id for r in cash.bank_accounts.items] == ["a1", "a2"]
        assert [r.id for r in cash.wallets.items] == ["w1"]
        assert cash.bank_accounts.total_value == Decimal("105")
        assert cash.wallets.total_value == Decimal("20")
        assert cash.total_cash == Decimal("125")
    
    def test_wallet_type_match_is_exact(self):
        cash = partition_cash(
            [BankAccountRecord(id="w1", account_type="wallet", balance=Decimal("1"))],
            wallet_account_type="Wallet",
        )
        assert cash.wallets.items == ()


class TestSnapshotInvariants:
    """Randomized checks that composed snapshots always balance."""
    
    @staticmethod
    def _amount(rng: random.Random) -> Decimal:
        return Decimal(rng.randint(-10_000, 1_000_000)) / Decimal(100)
    
    def test_composed_snapshots_balance(self):
        rng = random.Random(20240601)
        
        for _ in range(200):
            gold = reduce_bucket(
                GoldRecord(id=f"g{i}", total_value=self._amount(rng))
                for i in range(rng.randint(0, 5))
            )
            bonds = reduce_bucket(
                BondRecord(
                    id=f"b{i}",
                    face_value=self._amount(rng) if rng.random() < 0.7 else None,
                    current_value=self._amount(rng) if rng.random() < 0.5 else None,
                )
                for i in range(rng.randint(0, 5))
            )
            stocks = reduce_bucket(
                StockRecord(id=f"s{i}", units=self._amount(rng), unit_price=self._amount(rng))
                for i in range(rng.randint(0, 5))
            )
            prop = reduce_bucket(
                PropertyRecord(id=f"p{i}", current_value=self._amount(rng))
                for i in range(rng.randint(0, 3))
            )
            cash = partition_cash(
                [
                    BankAccountRecord(
                        id=f"a{i}",
                        account_type=rng.choice(["Savings", "Wallet", None]),
                        balance=self._amount(rng),
                    )
                    for i in range(rng.randint(0, 5))
                ],
                wallet_account_type="Wallet",
            )
            loans = reduce_bucket(
                LoanRecord(id=f"l{i}", outstanding_balance=self._amount(rng))
                for i in range(rng.randint(0, 3))
            )
            cards = reduce_bucket(
                CreditCardRecord(id=f"c{i}", used_amount=self._amount(rng))
                for i in range(rng.randint(0, 3))
            )
            
            snapshot = NetWorthSnapshot.compose(
                Assets(gold=gold, bonds=bonds, stocks=stocks, property=prop, cash=cash),
                Liabilities(loans=loans, credit_cards=cards),
                owner="u1",
            )
            
            assert snapshot.total_assets == (
                gold.total_value + bonds.total_value + stocks.total_value
                + prop.total_value + Bucket().total_value + cash.total_cash
            )
            assert snapshot.total_liabilities == loans.total_value + cards.total_value
            assert snapshot.net_worth == snapshot.total_assets - snapshot.total_liabilities
            assert cash.total_cash == cash.bank_accounts.total_value + cash.wallets.total_value
