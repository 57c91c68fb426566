# backend/tests/services/valuation/test_units.py
"""Tests for gold unit normalization."""

import pytest

from fincatch.schemas.portfolio import parse_entry
from fincatch.services.constants import DEFAULT_GOLD_UNIT
from fincatch.services.exceptions import UnsupportedUnitError
from fincatch.services.valuation.units import (
    convert_to_grams,
    from_base_quantity,
    gold_unit_for,
    grams_per_unit,
    to_base_price,
    to_base_quantity,
)


class TestToBase:
    """Quantity and price conversion into taels."""

    def test_mace_quantity_and_price(self):
        assert to_base_quantity(10, "mace", "gold") == 1
        assert to_base_price(5_000_000, "mace", "gold") == 50_000_000

    def test_tael_is_identity(self):
        assert to_base_quantity(3, "tael", "gold") == 3
        assert to_base_price(80_000_000, "tael", "gold") == 80_000_000

    def test_missing_unit_means_tael(self):
        assert to_base_quantity(2, None, "gold") == 2

    def test_gold_entry_without_unit_uses_default(self):
        entry = parse_entry({
            "symbol": "1", "assetType": "gold", "quantity": 4, "purchasePrice": 1,
            "currency": "VND", "purchaseDate": 0,
        })

        assert entry.unit is None
        assert DEFAULT_GOLD_UNIT == "tael"
        assert to_base_quantity(entry.quantity, entry.unit, "gold") == to_base_quantity(
            4, DEFAULT_GOLD_UNIT, "gold"
        )

    def test_gram(self):
        assert to_base_quantity(37.5, "gram", "gold") == pytest.approx(1.0)
        assert to_base_price(2_000_000, "gram", "gold") == pytest.approx(75_000_000)

    def test_ounce(self):
        assert to_base_quantity(1, "ounce", "gold") == pytest.approx(31.1035 / 37.5)

    def test_kg(self):
        assert to_base_quantity(1, "kg", "gold") == pytest.approx(1000 / 37.5)

    def test_value_is_preserved(self):
        """quantity × price does not change when moving to the base unit."""
        for unit in ("gram", "mace", "tael", "ounce", "kg"):
            q = to_base_quantity(4, unit, "gold")
            p = to_base_price(1_000, unit, "gold")
            assert q * p == pytest.approx(4_000)

    @pytest.mark.parametrize("asset_type", ["stock", "bond"])
    def test_non_gold_untouched(self, asset_type):
        assert to_base_quantity(10, "mace", asset_type) == 10
        assert to_base_price(100, "mace", asset_type) == 100

    def test_unknown_unit_raises(self):
        with pytest.raises(UnsupportedUnitError) as exc_info:
            to_base_quantity(1, "pound", "gold")
        assert exc_info.value.unit == "pound"


class TestHelpers:

    def test_grams_per_unit(self):
        assert grams_per_unit("mace") == 3.75
        assert convert_to_grams(2, "tael") == 75.0

    def test_grams_per_unit_unknown(self):
        with pytest.raises(UnsupportedUnitError):
            grams_per_unit("stone")

    def test_from_base_round_trips_mace(self):
        assert from_base_quantity(to_base_quantity(7, "mace", "gold"), "mace", "gold") == pytest.approx(7)

    def test_gold_unit_for_sjc_ids(self):
        assert gold_unit_for("1") == "tael"
        assert gold_unit_for("2") == "tael"
        assert gold_unit_for("49") == "mace"

    def test_gold_unit_for_other_source(self):
        assert gold_unit_for("49", source="pnj") == "mace"
        assert gold_unit_for("1", source="pnj") == "mace"
        assert gold_unit_for("1", source=None) == "mace"
