# backend/fincatch/services/valuation/units.py
"""
Quantity and price unit normalization.

Gold is valued in taels (1 tael = 10 mace = 37.5 g) because SJC quotes bar
prices per tael. A quantity moves into taels by dividing by the unit's
size in taels; a per-unit price moves the opposite way so that
quantity × price is unchanged:

    10 mace  @ 5,000,000 / mace   ->  1 tael @ 50,000,000 / tael

Stocks (shares) and bonds (bond count) are never converted.

All functions are pure.
"""

from fincatch.services.constants import (
    DEFAULT_GOLD_UNIT,
    GOLD_BASE_UNIT,
    GRAMS_PER_UNIT,
    SJC_GOLD_SOURCE,
    SJC_TAEL_PRICE_IDS,
)
from fincatch.services.exceptions import UnsupportedUnitError


def grams_per_unit(unit: str) -> float:
    """
    Grams in one `unit`.

    Raises:
        UnsupportedUnitError: Unknown unit
    """
    try:
        return GRAMS_PER_UNIT[unit]
    except KeyError:
        raise UnsupportedUnitError(unit) from None


def convert_to_grams(quantity: float, unit: str) -> float:
    return quantity * grams_per_unit(unit)


def _base_units_per_unit(unit: str | None) -> float:
    """How many taels one `unit` is (mace -> 0.1, gram -> 1/37.5)."""
    return grams_per_unit(unit or DEFAULT_GOLD_UNIT) / GRAMS_PER_UNIT[GOLD_BASE_UNIT]


def to_base_quantity(quantity: float, unit: str | None, asset_type: str) -> float:
    """
    Express a holding quantity in the asset's base unit.

    Args:
        quantity: Quantity as entered
        unit: Unit of the quantity; None means tael for gold
        asset_type: "stock", "gold" or "bond"

    Returns:
        Quantity in taels for gold; unchanged otherwise

    Raises:
        UnsupportedUnitError: Gold entry with an unknown unit
    """
    if asset_type != "gold":
        return quantity
    unit = unit or DEFAULT_GOLD_UNIT
    if unit == GOLD_BASE_UNIT:
        return quantity
    if unit == "mace":
        return quantity / 10
    return quantity / GRAMS_PER_UNIT[GOLD_BASE_UNIT] * grams_per_unit(unit)


def to_base_price(price: float, unit: str | None, asset_type: str) -> float:
    """
    Express a per-unit price per base unit (inverse of to_base_quantity).

    A price entered per mace is multiplied by 10, per gram by 37.5.
    """
    if asset_type != "gold":
        return price
    unit = unit or DEFAULT_GOLD_UNIT
    if unit == GOLD_BASE_UNIT:
        return price
    if unit == "mace":
        return price * 10
    return price / _base_units_per_unit(unit)


def from_base_quantity(quantity: float, unit: str | None, asset_type: str) -> float:
    """Convert a base-unit quantity back to `unit`."""
    if asset_type != "gold":
        return quantity
    unit = unit or DEFAULT_GOLD_UNIT
    if unit == GOLD_BASE_UNIT:
        return quantity
    if unit == "mace":
        return quantity * 10
    return quantity / _base_units_per_unit(unit)


def gold_unit_for(gold_price_id: str, source: str | None = SJC_GOLD_SOURCE) -> str:
    """
    Unit in which a gold price series is quoted.

    SJC bar series ("1" and "2") are quoted per tael; SJC jewelry and ring
    series per mace. Series from other sources are quoted per mace.
    """
    if source == SJC_GOLD_SOURCE and gold_price_id in SJC_TAEL_PRICE_IDS:
        return GOLD_BASE_UNIT
    return "mace"
