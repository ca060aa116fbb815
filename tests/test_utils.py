"""Purity normalization, clamping and identifier formatting"""

import logging
from decimal import Decimal

import pytest

from bullion.core.sequence import SequenceGenerator
from bullion.core.utils import clamped_subtract, compute_pure_weight, normalize_purity
from bullion.modules.registry.models import RegistryEntry


class TestNormalizePurity:
    """Fractions pass through, percentages are divided by 100"""

    def test_percentage_becomes_fraction(self):
        assert normalize_purity(75) == Decimal("0.75")

    def test_fraction_is_kept(self):
        assert normalize_purity(Decimal("0.75")) == Decimal("0.75")

    def test_percentage_and_fraction_give_same_pure_weight(self):
        gross = Decimal("12.4")
        assert normalize_purity(50) == normalize_purity(0.5) == Decimal("0.5")
        assert compute_pure_weight(gross, normalize_purity(50)) == compute_pure_weight(
            gross, normalize_purity(0.5)
        )

    def test_one_and_hundred_mean_pure_metal(self):
        assert normalize_purity(1) == Decimal("1")
        assert normalize_purity(100) == Decimal("1")

    def test_float_input_keeps_decimal_digits(self):
        assert normalize_purity(91.6) == Decimal("0.916")

    def test_pure_weight_is_rounded_to_column_scale(self):
        purity = normalize_purity(Decimal("91.67"))

        assert purity == Decimal("0.9167")
        assert compute_pure_weight(Decimal("12.345"), purity) == Decimal("11.3167")
        assert compute_pure_weight(Decimal("12.345"), purity).as_tuple().exponent == -4

    def test_missing_purity(self):
        assert normalize_purity(None) is None

    @pytest.mark.parametrize("value", [-1, Decimal("-0.1"), 100.5, 750])
    def test_out_of_range_is_rejected(self, value):
        with pytest.raises(ValueError):
            normalize_purity(value)


class TestClampedSubtract:

    def test_regular_subtraction(self):
        assert clamped_subtract(Decimal("10"), Decimal("2.5")) == Decimal("7.5")

    def test_underflow_floors_at_zero_and_logs(self, caplog):
        caplog.set_level(logging.WARNING)

        assert clamped_subtract(Decimal("1"), Decimal("3"), label="draft balance") == Decimal("0")
        assert "draft balance" in caplog.text


class TestIdentifierFormat:

    def test_zero_padded_to_three_digits(self):
        generator = SequenceGenerator(RegistryEntry.transaction_id, "TXN", width=3)

        assert generator.format(7) == "TXN007"
        assert generator.format(42) == "TXN042"

    def test_grows_past_padding(self):
        generator = SequenceGenerator(RegistryEntry.transaction_id, "TXN", width=3)

        assert generator.format(1000) == "TXN1000"
        assert generator.parse("TXN1000") == 1000

    def test_parse_ignores_foreign_values(self):
        generator = SequenceGenerator(RegistryEntry.transaction_id, "TXN", width=3)

        assert generator.parse("TXN012") == 12
        assert generator.parse("FTR012") is None
        assert generator.parse("TXN12A") is None
        assert generator.parse(None) is None
