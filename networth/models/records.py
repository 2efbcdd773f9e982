"""
Canonical Record Models

Every record service returns its own raw shape. The normalizer maps each
raw record onto one of the canonical models below, which are the only
record types the rest of the engine sees.

DESIGN DECISION: Canonical records are frozen pydantic models.
Once the normalizer has produced a record nobody can alter it, so a
committed snapshot can never be changed through one of its items.
"""

from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ENUMS
# =============================================================================

class Category(str, Enum):
    """
    Record categories, one per record provider.
    
    Bank accounts and wallets share the BANK_ACCOUNTS provider and are
    split into two buckets after normalization.
    """
    GOLD = "gold"
    BONDS = "bonds"
    STOCKS = "stocks"
    PROPERTY = "property"
    MUTUAL_FUNDS = "mutual_funds"
    BANK_ACCOUNTS = "bank_accounts"
    LOANS = "loans"
    CREDIT_CARDS = "credit_cards"
    
    @property
    def is_liability(self) -> bool:
        return self in (Category.LOANS, Category.CREDIT_CARDS)


# =============================================================================
# IDENTITY
# =============================================================================

class Identity(BaseModel):
    """
    The currently authenticated user.
    
    Only user_id takes part in change detection; the other fields are
    carried along for the record providers.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)
    
    user_id: str = Field(
        ...,
        min_length=1,
        description="Stable, opaque user identifier"
    )
    email: Optional[str] = None
    name: Optional[str] = None
    access_token: Optional[str] = Field(
        default=None,
        repr=False,
        description="Bearer token forwarded to the record services"
    )
    
    def same_user(self, other: Optional["Identity"]) -> bool:
        return other is not None and other.user_id == self.user_id


# =============================================================================
# CANONICAL RECORDS
# =============================================================================

class _CanonicalRecord(BaseModel):
    model_config = ConfigDict(frozen=True)
    
    id: str = Field(
        ...,
        description="Record ID as issued by the record service"
    )


class GoldRecord(_CanonicalRecord):
    """A gold ornament or holding."""
    
    category: Literal[Category.GOLD] = Category.GOLD
    ornament_name: Optional[str] = None
    grams: Decimal = Decimal("0")
    price_per_gram: Decimal = Decimal("0")
    total_value: Decimal = Field(
        default=Decimal("0"),
        description="Stored total value of the holding"
    )
    purchase_date: Optional[str] = None
    purity: str = "24K"
    image_url: Optional[str] = None


class BondRecord(_CanonicalRecord):
    """
    A bond holding.
    
    Both values stay None when the service omits them or sends something
    unparsable; the reducer's fallback rule needs to tell absence apart
    from zero.
    """
    
    category: Literal[Category.BONDS] = Category.BONDS
    name: Optional[str] = None
    issuer: Optional[str] = None
    face_value: Optional[Decimal] = None
    current_value: Optional[Decimal] = None
    interest_rate: Decimal = Decimal("0")
    maturity_date: Optional[str] = None
    notes: Optional[str] = None


class StockRecord(_CanonicalRecord):
    """A listed stock position."""
    
    category: Literal[Category.STOCKS] = Category.STOCKS
    market: Optional[str] = None
    stock_name: Optional[str] = None
    units: Decimal = Decimal("0")
    unit_price: Decimal = Decimal("0")
    purchase_date: Optional[str] = None
    
    @property
    def total_value(self) -> Decimal:
        return self.units * self.unit_price


class PropertyRecord(_CanonicalRecord):
    """Real estate."""
    
    category: Literal[Category.PROPERTY] = Category.PROPERTY
    property_name: Optional[str] = None
    location: Optional[str] = None
    address: str = ""
    purchase_price: Decimal = Decimal("0")
    current_value: Decimal = Decimal("0")
    property_type: Optional[str] = None
    purchase_date: Optional[str] = None
    area: Decimal = Decimal("0")
    image_url: Optional[str] = None


class MutualFundRecord(_CanonicalRecord):
    """A mutual fund folio."""
    
    category: Literal[Category.MUTUAL_FUNDS] = Category.MUTUAL_FUNDS
    name: Optional[str] = None
    fund_house: Optional[str] = None
    units: Decimal = Decimal("0")
    avg_nav: Decimal = Decimal("0")
    current_nav: Decimal = Decimal("0")
    current_value: Decimal = Decimal("0")
    notes: Optional[str] = None


class BankAccountRecord(_CanonicalRecord):
    """
    A bank account or wallet.
    
    account_type is the discriminator used to split the cash buckets.
    Fields the engine does not interpret are kept in `extra`.
    """
    
    category: Literal[Category.BANK_ACCOUNTS] = Category.BANK_ACCOUNTS
    bank_name: Optional[str] = None
    account_name: Optional[str] = None
    account_type: Optional[str] = None
    balance: Decimal = Decimal("0")
    extra: dict[str, Any] = Field(default_factory=dict)


class LoanRecord(_CanonicalRecord):
    """An outstanding loan."""
    
    category: Literal[Category.LOANS] = Category.LOANS
    lender_name: Optional[str] = None
    linked_property: Optional[str] = None
    original_amount: Decimal = Decimal("0")
    outstanding_balance: Decimal = Decimal("0")
    emi_amount: Decimal = Decimal("0")
    interest_rate: Decimal = Decimal("0")
    loan_start_date: Optional[str] = None
    loan_end_date: Optional[str] = None
    notes: str = ""
    emi_due_date: int = Field(default=1, ge=1, le=31)


class CreditCardRecord(_CanonicalRecord):
    """A credit card and its current usage."""
    
    category: Literal[Category.CREDIT_CARDS] = Category.CREDIT_CARDS
    card_name: Optional[str] = None
    bank_name: Optional[str] = None
    credit_limit: Decimal = Decimal("0")
    used_amount: Decimal = Decimal("0")
    due_date: Optional[str] = None
    interest_rate: Optional[str] = None
    notes: Optional[str] = None


CanonicalRecord = Annotated[
    Union[
        GoldRecord,
        BondRecord,
        StockRecord,
        PropertyRecord,
        MutualFundRecord,
        BankAccountRecord,
        LoanRecord,
        CreditCardRecord,
    ],
    Field(discriminator="category"),
]
