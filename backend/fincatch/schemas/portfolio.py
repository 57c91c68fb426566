# backend/fincatch/schemas/portfolio.py
"""
Pydantic schemas for portfolio holdings and coupon payments.

A portfolio entry is a tagged union discriminated on ``asset_type``:
- StockEntry: shares of a listed instrument
- GoldEntry: physical gold, quantity in a weight unit
- BondEntry: bonds, priced by present value, manually or at face value

Field names are snake_case in Python; the camelCase names used by the
client apps and the sync server (``assetType``, ``purchasePrice``, ...)
are accepted as aliases.

Usage:
    from fincatch.schemas.portfolio import parse_entries

    entries = parse_entries(payload["entries"])
"""

from typing import Annotated, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    TypeAdapter,
    field_validator,
)
from pydantic.alias_generators import to_camel

GoldUnit = Literal["gram", "mace", "tael", "ounce", "kg"]
CouponFrequency = Literal["annual", "semiannual", "quarterly", "monthly"]
BondPricingMode = Literal["calculated", "manual", "faceValue", "purchasePrice"]

DEFAULT_CURRENCY = "USD"


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# =============================================================================
# PORTFOLIO ENTRIES
# =============================================================================

class _EntryBase(_CamelModel):
    """Fields shared by every holding."""

    id: str | None = Field(default=None, description="Server-assigned identifier")
    portfolio_id: str | None = None
    symbol: str = Field(..., min_length=1, description="Ticker, gold price id or ISIN")
    quantity: float = Field(..., gt=0)
    purchase_price: float = Field(..., gt=0, description="Per-unit price in `currency`")
    currency: str = Field(default=DEFAULT_CURRENCY)
    purchase_date: int = Field(..., description="Unix seconds")
    transaction_fees: float | None = Field(default=None, ge=0)
    source: str | None = Field(default=None, description="Pricing provider identifier")
    notes: str | None = None
    tags: str | None = Field(default=None, description="JSON array encoded as a string")

    @field_validator("currency", mode="before")
    @classmethod
    def normalize_currency(cls, v: str | None) -> str:
        """Normalize currency: uppercase, default when blank."""
        if not v:
            return DEFAULT_CURRENCY
        return v.strip().upper()

    @property
    def label(self) -> str:
        """Short identifier for logs."""
        return f"{self.asset_type}:{self.symbol}" + (f"#{self.id}" if self.id else "")


class StockEntry(_EntryBase):
    asset_type: Literal["stock"] = "stock"


class GoldEntry(_EntryBase):
    asset_type: Literal["gold"] = "gold"
    unit: GoldUnit | None = Field(default=None, description="Quantity unit; tael when absent")
    gold_type: str | None = None


class BondEntry(_EntryBase):
    """
    A bond holding.

    Pricing mode is decided by which fields are present:
        calculated    - face_value, coupon_rate, ytm, maturity_date and
                        coupon_frequency all present (present-value formula)
        manual        - current_market_price > 0
        faceValue     - face_value present
        purchasePrice - nothing else available
    """

    asset_type: Literal["bond"] = "bond"
    face_value: float | None = Field(default=None, ge=0)
    coupon_rate: float | None = Field(default=None, description="Annual %, simple")
    maturity_date: int | None = Field(default=None, description="Unix seconds")
    coupon_frequency: CouponFrequency | None = None
    ytm: float | None = Field(default=None, description="Yield to maturity, %")
    current_market_price: float | None = None
    unit: str | None = None

    @property
    def has_calculation_inputs(self) -> bool:
        return bool(
            self.face_value
            and self.coupon_rate is not None
            and self.ytm is not None
            and self.maturity_date
            and self.coupon_frequency
        )

    @property
    def pricing_mode(self) -> BondPricingMode:
        if self.has_calculation_inputs:
            return "calculated"
        if self.current_market_price is not None and self.current_market_price > 0:
            return "manual"
        if self.face_value:
            return "faceValue"
        return "purchasePrice"


def _asset_type_of(value) -> str | None:
    """Read the tag from either spelling (asset_type or assetType)."""
    if isinstance(value, dict):
        return value.get("asset_type", value.get("assetType"))
    return getattr(value, "asset_type", None)


PortfolioEntry = Annotated[
    Union[
        Annotated[StockEntry, Tag("stock")],
        Annotated[GoldEntry, Tag("gold")],
        Annotated[BondEntry, Tag("bond")],
    ],
    Discriminator(_asset_type_of),
]

_entry_adapter: TypeAdapter[PortfolioEntry] = TypeAdapter(PortfolioEntry)
_entries_adapter: TypeAdapter[list[PortfolioEntry]] = TypeAdapter(list[PortfolioEntry])


def parse_entry(data: dict) -> StockEntry | GoldEntry | BondEntry:
    """Validate one raw entry dict into the matching entry model."""
    return _entry_adapter.validate_python(data)


def parse_entries(data: list[dict]) -> list[StockEntry | GoldEntry | BondEntry]:
    """Validate a list of raw entry dicts, preserving order."""
    return _entries_adapter.validate_python(data)


# =============================================================================
# COUPON PAYMENTS
# =============================================================================

class BondCouponPayment(_CamelModel):
    """A coupon actually received for one bond entry."""

    id: str | None = None
    entry_id: str
    payment_date: int = Field(..., description="Unix seconds")
    amount: float
    currency: str = Field(default=DEFAULT_CURRENCY)
    notes: str | None = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("currency", mode="before")
    @classmethod
    def normalize_currency(cls, v: str | None) -> str:
        if not v:
            return DEFAULT_CURRENCY
        return v.strip().upper()


class BondCouponPaymentCreate(_CamelModel):
    """Input for recording a new coupon payment."""

    entry_id: str = Field(..., min_length=1)
    payment_date: int
    amount: float = Field(..., gt=0)
    currency: str = Field(default=DEFAULT_CURRENCY, min_length=3, max_length=3)
    notes: str | None = Field(default=None, max_length=1000)

    @field_validator("currency")
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        return v.strip().upper()


class BondCouponPaymentUpdate(_CamelModel):
    """Partial update of a coupon payment; unset fields are left alone."""

    payment_date: int | None = None
    amount: float | None = Field(default=None, gt=0)
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    notes: str | None = Field(default=None, max_length=1000)

    @field_validator("currency")
    @classmethod
    def normalize_currency(cls, v: str | None) -> str | None:
        return v.strip().upper() if v else v
