"""
Record Normalizer

Maps each record service's raw JSON shape onto the canonical record model
for its category.

DESIGN DECISION: Numeric coercion is defensive and per field.
A field that is missing or does not parse as a finite number becomes 0
(or None where the valuation rule must see absence, as for bond values).
One bad field never fails the record, and one bad record never fails the
category: items that are not JSON objects are dropped and counted.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Optional

from networth.audit import get_logger
from networth.models.records import (
    BankAccountRecord,
    BondRecord,
    CanonicalRecord,
    Category,
    CreditCardRecord,
    GoldRecord,
    LoanRecord,
    MutualFundRecord,
    PropertyRecord,
    StockRecord,
)
from networth.services.providers.interface import RawRecord


logger = get_logger(__name__)

ZERO = Decimal("0")

DEFAULT_GOLD_PURITY = "24K"

# Magnitudes beyond 10**±MAX_ADJUSTED_EXPONENT count as unparsable
MAX_ADJUSTED_EXPONENT = 18

# Bank account fields mapped onto BankAccountRecord; the rest go to `extra`
_BANK_ACCOUNT_FIELDS = {"id", "bankName", "accountName", "accountType", "balance"}


def parse_decimal(value: Any) -> Optional[Decimal]:
    """
    Parse a JSON value as a finite Decimal.
    
    Returns None for missing, boolean, non-numeric, NaN and infinite values,
    and for values too large or too small to be an amount.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        parsed = Decimal(str(value).strip())
    except (InvalidOperation, TypeError, ValueError):
        return None
    if not parsed.is_finite():
        return None
    if parsed and abs(parsed.adjusted()) > MAX_ADJUSTED_EXPONENT:
        return None
    return parsed


def coerce_decimal(value: Any) -> Decimal:
    """parse_decimal, with 0 in place of anything unparsable."""
    parsed = parse_decimal(value)
    return ZERO if parsed is None else parsed


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _gold(raw: RawRecord) -> GoldRecord:
    notes = _text(raw.get("notes"))
    purity = notes.split(" ")[0] if notes else ""
    return GoldRecord(
        id=_text(raw.get("id")) or "",
        ornament_name=_text(raw.get("name")),
        grams=coerce_decimal(raw.get("weightGrams")),
        price_per_gram=coerce_decimal(raw.get("purchasePrice")),
        total_value=coerce_decimal(raw.get("currentValue")),
        purchase_date=_text(raw.get("purchaseDate")),
        purity=purity or DEFAULT_GOLD_PURITY,
        image_url=_text(raw.get("imageUrl")),
    )


def _bond(raw: RawRecord) -> BondRecord:
    return BondRecord(
        id=_text(raw.get("id")) or "",
        name=_text(raw.get("name")),
        issuer=_text(raw.get("issuer")),
        face_value=parse_decimal(raw.get("faceValue")),
        current_value=parse_decimal(raw.get("currentValue")),
        interest_rate=coerce_decimal(raw.get("interestRate")),
        maturity_date=_text(raw.get("maturityDate")),
        notes=_text(raw.get("notes")),
    )


def _stock(raw: RawRecord) -> StockRecord:
    return StockRecord(
        id=_text(raw.get("id")) or "",
        market=_text(raw.get("exchange")),
        stock_name=_text(raw.get("name")),
        units=coerce_decimal(raw.get("quantity")),
        unit_price=coerce_decimal(raw.get("currentPrice")),
        purchase_date=_text(raw.get("createdAt")),
    )


def _property(raw: RawRecord) -> PropertyRecord:
    return PropertyRecord(
        id=_text(raw.get("id")) or "",
        property_name=_text(raw.get("name")),
        location=_text(raw.get("location")),
        address=_text(raw.get("address")) or "",
        purchase_price=coerce_decimal(raw.get("purchasePrice")),
        current_value=coerce_decimal(raw.get("currentValue")),
        property_type=_text(raw.get("propertyType")),
        purchase_date=_text(raw.get("purchaseDate")),
        area=coerce_decimal(raw.get("area")),
        image_url=_text(raw.get("imageUrl")),
    )


def _mutual_fund(raw: RawRecord) -> MutualFundRecord:
    return MutualFundRecord(
        id=_text(raw.get("id")) or "",
        name=_text(raw.get("name")),
        fund_house=_text(raw.get("fundHouse")),
        units=coerce_decimal(raw.get("units")),
        avg_nav=coerce_decimal(raw.get("avgNav")),
        current_nav=coerce_decimal(raw.get("currentNav")),
        current_value=coerce_decimal(raw.get("currentValue")),
        notes=_text(raw.get("notes")),
    )


def _bank_account(raw: RawRecord) -> BankAccountRecord:
    return BankAccountRecord(
        id=_text(raw.get("id")) or "",
        bank_name=_text(raw.get("bankName")),
        account_name=_text(raw.get("accountName")),
        account_type=_text(raw.get("accountType")),
        balance=coerce_decimal(raw.get("balance")),
        extra={k: v for k, v in raw.items() if k not in _BANK_ACCOUNT_FIELDS},
    )


def _loan(raw: RawRecord) -> LoanRecord:
    return LoanRecord(
        id=_text(raw.get("id")) or "",
        lender_name=_text(raw.get("lenderName")),
        linked_property=_text(raw.get("loanType")),
        original_amount=coerce_decimal(raw.get("principal")),
        outstanding_balance=coerce_decimal(raw.get("outstanding")),
        emi_amount=coerce_decimal(raw.get("emiAmount")),
        interest_rate=coerce_decimal(raw.get("interestRate")),
        loan_start_date=_text(raw.get("startDate")),
        loan_end_date=_text(raw.get("endDate")),
        notes=_text(raw.get("notes")) or "",
    )


def _credit_card(raw: RawRecord) -> CreditCardRecord:
    return CreditCardRecord(
        id=_text(raw.get("id")) or "",
        card_name=_text(raw.get("cardName")),
        bank_name=_text(raw.get("bankName")),
        credit_limit=coerce_decimal(raw.get("creditLimit")),
        used_amount=coerce_decimal(raw.get("usedAmount")),
        due_date=_text(raw.get("dueDate")),
        interest_rate=_text(raw.get("interestRate")),
        notes=_text(raw.get("notes")),
    )


MAPPERS: dict[Category, Callable[[RawRecord], CanonicalRecord]] = {
    Category.GOLD: _gold,
    Category.BONDS: _bond,
    Category.STOCKS: _stock,
    Category.PROPERTY: _property,
    Category.MUTUAL_FUNDS: _mutual_fund,
    Category.BANK_ACCOUNTS: _bank_account,
    Category.LOANS: _loan,
    Category.CREDIT_CARDS: _credit_card,
}


class RecordNormalizer:
    """Turns a category's raw records into canonical records."""
    
    def normalize(
        self,
        category: Category,
        raw_records: list[Any],
    ) -> list[CanonicalRecord]:
        """
        Normalize raw records, preserving their order.
        
        Items that are not JSON objects are skipped with a warning.
        """
        mapper = MAPPERS[category]
        records: list[CanonicalRecord] = []
        skipped = 0
        
        for raw in raw_records:
            if not isinstance(raw, dict):
                skipped += 1
                continue
            records.append(mapper(raw))
        
        if skipped:
            logger.warning(
                "records_skipped",
                category=category.value,
                skipped=skipped,
                kept=len(records),
            )
        
        return records
