"""
Shared fixtures for the Net Worth engine tests.

No test talks to a real record service, session backend or spreadsheet:
everything external is an in-memory implementation or an httpx mock.
"""

from typing import Optional

import pytest

from networth.config import AppSettings, MonitorSettings
from networth.models import Category, Identity
from networth.services.providers import InMemoryRecordProvider, RawRecord


ALICE = Identity(user_id="user-a", email="alice@example.com", name="Alice", access_token="token-a")
BOB = Identity(user_id="user-b", email="bob@example.com", name="Bob", access_token="token-b")


def make_providers(
    records: Optional[dict[Category, dict[str, list[RawRecord]]]] = None,
) -> dict[Category, InMemoryRecordProvider]:
    """One in-memory provider per category, seeded per user."""
    records = records or {}
    return {
        category: InMemoryRecordProvider(category, records.get(category))
        for category in Category
    }


def portfolio(user_id: str) -> dict[Category, dict[str, list[RawRecord]]]:
    """A small record set touching every category."""
    return {
        Category.GOLD: {user_id: [
            {"id": "g1", "name": "Chain", "weightGrams": "10", "purchasePrice": "5000", "currentValue": "100"},
            {"id": "g2", "name": "Ring", "weightGrams": "5", "purchasePrice": "5000", "currentValue": "50"},
        ]},
        Category.BONDS: {user_id: [
            {"id": "b1", "name": "Gov 2030", "faceValue": "1000", "currentValue": "1020"},
        ]},
        Category.STOCKS: {user_id: [
            {"id": "s1", "name": "ACME", "exchange": "NSE", "quantity": "10", "currentPrice": "25.5"},
        ]},
        Category.PROPERTY: {user_id: [
            {"id": "p1", "name": "Flat", "location": "Pune", "purchasePrice": "500000", "currentValue": "750000"},
        ]},
        Category.MUTUAL_FUNDS: {user_id: [
            {"id": "m1", "name": "Index Fund", "units": "100", "currentNav": "12", "currentValue": "1200"},
        ]},
        Category.BANK_ACCOUNTS: {user_id: [
            {"id": "a1", "bankName": "HDFC", "accountType": "Savings", "balance": "3000"},
            {"id": "w1", "bankName": "Paytm", "accountType": "Wallet", "balance": "200"},
        ]},
        Category.LOANS: {user_id: [
            {"id": "l1", "lenderName": "SBI", "principal": "400000", "outstanding": "250000"},
        ]},
        Category.CREDIT_CARDS: {user_id: [
            {"id": "c1", "cardName": "Platinum", "creditLimit": "100000", "usedAmount": "5000"},
        ]},
    }


@pytest.fixture
def app_settings() -> AppSettings:
    return AppSettings(_env_file=None)


@pytest.fixture
def monitor_settings() -> MonitorSettings:
    return MonitorSettings(poll_interval_seconds=0.01)
