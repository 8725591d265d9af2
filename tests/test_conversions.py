"""
Tests for sqrtPriceX96, 6-decimal and X96 conversions.
"""

import math

import pytest

from perpcity import (
    InvalidArgumentError,
    ScaledOverflowError,
    decimal_price_to_sqrtx96,
    sqrtx96_to_decimal_price,
    decimal_to_scaled6,
    scaled6_to_decimal,
    decimal_to_x96,
    x96_to_decimal,
    margin_ratio_to_leverage,
    leverage_to_margin_ratio,
)
from perpcity.constants import MAX_SAFE_DECIMAL, Q96


class TestDecimalPriceToSqrtX96:
    """Tests for decimal_price_to_sqrtx96 function."""

    def test_price_of_one_is_q96(self):
        """sqrt(1) = 1, so the result is exactly 2^96."""
        assert decimal_price_to_sqrtx96(1) == Q96

    def test_perfect_square(self):
        """sqrt(100) = 10 survives the 1e6 intermediate exactly."""
        assert decimal_price_to_sqrtx96(100) == 10 * Q96

    def test_fractional_price(self):
        """Prices below 1 land below Q96."""
        result = decimal_price_to_sqrtx96(0.5)
        assert 0 < result < Q96

    def test_floors_sqrt_to_six_decimals(self):
        """sqrt(2) = 1.41421356... is truncated to 1.414213 before scaling."""
        assert decimal_price_to_sqrtx96(2) == 1_414_213 * Q96 // 1_000_000

    @pytest.mark.parametrize("price", [0, -10])
    def test_rejects_non_positive_price(self, price):
        """Zero and negative prices are invalid."""
        with pytest.raises(InvalidArgumentError, match="Price must be positive"):
            decimal_price_to_sqrtx96(price)

    def test_rejects_price_too_large(self):
        """Prices above the safe decimal range are invalid."""
        with pytest.raises(InvalidArgumentError, match="Price too large"):
            decimal_price_to_sqrtx96(float(MAX_SAFE_DECIMAL) * 2)

    def test_rejects_nan_price(self):
        with pytest.raises(InvalidArgumentError, match="Price must be positive"):
            decimal_price_to_sqrtx96(math.nan)

    def test_rejects_infinite_price(self):
        with pytest.raises(InvalidArgumentError, match="Price too large"):
            decimal_price_to_sqrtx96(math.inf)

    def test_max_safe_price_is_accepted(self):
        """The largest safe price still converts, with reduced precision."""
        assert decimal_price_to_sqrtx96(MAX_SAFE_DECIMAL) > 0


class TestSqrtX96ToDecimalPrice:
    """Tests for sqrtx96_to_decimal_price function."""

    def test_sqrt_price_of_ten(self):
        """10 * 2^96 squares to a price of 100."""
        assert sqrtx96_to_decimal_price(10 * Q96) == 100

    def test_q96_is_one(self):
        assert sqrtx96_to_decimal_price(Q96) == 1

    def test_fractional_sqrt_price(self):
        """sqrt(price) = 0.5 gives price 0.25."""
        assert abs(sqrtx96_to_decimal_price(Q96 // 2) - 0.25) < 1e-6

    def test_zero(self):
        assert sqrtx96_to_decimal_price(0) == 0

    def test_string_input(self):
        """Indexers return sqrt prices as strings."""
        assert sqrtx96_to_decimal_price(str(Q96)) == 1

    def test_overflow(self):
        """A huge sqrt price squares past the safe range."""
        with pytest.raises(ScaledOverflowError):
            sqrtx96_to_decimal_price(MAX_SAFE_DECIMAL * Q96)

    def test_negative_rejected(self):
        with pytest.raises(InvalidArgumentError):
            sqrtx96_to_decimal_price(-Q96)

    @pytest.mark.parametrize("price", [0.5, 1.0, 2.5, 42.0, 100.0])
    def test_roundtrip_small_prices(self, price):
        """Small prices survive a round trip within 0.001%."""
        recovered = sqrtx96_to_decimal_price(decimal_price_to_sqrtx96(price))
        assert abs(recovered / price - 1) < 1e-5

    @pytest.mark.parametrize("price", [1000.0, 2500.75, 10000.0])
    def test_roundtrip_large_prices(self, price):
        """Large prices survive a round trip within 0.1%."""
        recovered = sqrtx96_to_decimal_price(decimal_price_to_sqrtx96(price))
        assert abs(recovered / price - 1) < 1e-3


class TestDecimalToScaled6:
    """Tests for decimal_to_scaled6 function."""

    def test_whole_amount(self):
        assert decimal_to_scaled6(100) == 100_000_000

    def test_decimal_amount(self):
        assert decimal_to_scaled6(100.5) == 100_500_000

    def test_zero(self):
        assert decimal_to_scaled6(0) == 0

    def test_smallest_unit(self):
        """0.000001 USDC is one base unit."""
        assert decimal_to_scaled6(0.000001) == 1

    def test_floors_not_rounds(self):
        """100.5555555 * 1e6 = 100555555.5 is floored."""
        assert decimal_to_scaled6(100.5555555) == 100_555_555

    def test_negative_amounts_pass_through(self):
        """Signed deltas are allowed to be negative."""
        assert decimal_to_scaled6(-100) == -100_000_000

    def test_amount_too_large(self):
        with pytest.raises(InvalidArgumentError, match="Amount too large"):
            decimal_to_scaled6(MAX_SAFE_DECIMAL)

    @pytest.mark.parametrize("amount", [math.nan, math.inf, -math.inf])
    def test_rejects_non_finite_amount(self, amount):
        with pytest.raises(InvalidArgumentError, match="Amount must be finite"):
            decimal_to_scaled6(amount)

    @pytest.mark.parametrize("amount", [0, 1, 42, 1_000_000])
    def test_integer_roundtrip(self, amount):
        """Whole amounts come back exactly."""
        assert scaled6_to_decimal(decimal_to_scaled6(amount)) == amount


class TestScaled6ToDecimal:
    """Tests for scaled6_to_decimal function."""

    def test_whole_amount(self):
        assert scaled6_to_decimal(100_000_000) == 100

    def test_fractional(self):
        assert scaled6_to_decimal(500_000) == 0.5

    def test_smallest_unit(self):
        assert scaled6_to_decimal(1) == 0.000001

    def test_string_input(self):
        assert scaled6_to_decimal("1000000") == 1


class TestX96Scaling:
    """Tests for decimal_to_x96 and x96_to_decimal."""

    def test_whole_amount_to_x96(self):
        assert decimal_to_x96(100) == 100 * Q96

    def test_one_is_q96(self):
        assert decimal_to_x96(1) == Q96

    def test_fraction_to_x96(self):
        result = decimal_to_x96(0.5)
        assert 0 < result < Q96

    def test_x96_amount_too_large(self):
        with pytest.raises(InvalidArgumentError, match="Amount too large"):
            decimal_to_x96(MAX_SAFE_DECIMAL)

    def test_x96_to_whole_amount(self):
        assert x96_to_decimal(100 * Q96) == 100

    def test_q96_to_one(self):
        assert x96_to_decimal(Q96) == 1

    def test_half(self):
        assert abs(x96_to_decimal(Q96 // 2) - 0.5) < 1e-6

    def test_zero(self):
        assert x96_to_decimal(0) == 0

    def test_value_too_large(self):
        """The range check runs on the 6-decimal intermediate."""
        with pytest.raises(ScaledOverflowError, match="Value too large"):
            x96_to_decimal(MAX_SAFE_DECIMAL * Q96)

    def test_overflow_is_an_overflow_error(self):
        with pytest.raises(OverflowError):
            x96_to_decimal(MAX_SAFE_DECIMAL * Q96)


class TestMarginRatioToLeverage:
    """Tests for margin_ratio_to_leverage and leverage_to_margin_ratio."""

    def test_ten_percent_is_10x(self):
        assert margin_ratio_to_leverage(100_000) == 10

    def test_full_margin_is_1x(self):
        assert margin_ratio_to_leverage(1_000_000) == 1

    def test_five_percent_is_20x(self):
        assert margin_ratio_to_leverage(50_000) == 20

    @pytest.mark.parametrize("ratio", [0, -100_000, math.nan])
    def test_rejects_non_positive_ratio(self, ratio):
        with pytest.raises(InvalidArgumentError, match="Margin ratio must be greater than 0"):
            margin_ratio_to_leverage(ratio)

    def test_leverage_to_ratio(self):
        assert leverage_to_margin_ratio(2) == 500_000

    def test_leverage_to_ratio_floors(self):
        assert leverage_to_margin_ratio(3) == 333_333

    @pytest.mark.parametrize("leverage", [0, math.nan])
    def test_rejects_non_positive_leverage(self, leverage):
        with pytest.raises(InvalidArgumentError, match="Leverage must be greater than 0"):
            leverage_to_margin_ratio(leverage)
