"""
Liquidity calculation functions for maker positions.

A maker deposits USDC margin and provides concentrated liquidity between two
ticks. Within the range the position holds both perp tokens and USD:

    amount0 = L * (1/sqrt(P) - 1/sqrt(pU))   [perp tokens]
    amount1 = L * (sqrt(P) - sqrt(pL))       [USD]
"""

import logging
import math

from .constants import NUMBER_1E6, Q96
from .errors import InvalidArgumentError
from .price import sqrtx96_to_decimal_price
from .tick import get_sqrt_ratio_at_tick, tick_to_decimal_price

logger = logging.getLogger(__name__)


def _check_tick_range(tick_lower: int, tick_upper: int) -> None:
    if tick_lower >= tick_upper:
        raise InvalidArgumentError(
            f"Invalid tick range: tick_lower ({tick_lower}) must be less than "
            f"tick_upper ({tick_upper})"
        )


def estimate_liquidity(tick_lower: int, tick_upper: int, usd_scaled: int) -> int:
    """
    Calculate liquidity from a 6-decimal USD amount (token1 only).

    L = amount1 * 2^96 / (sqrtUpperX96 - sqrtLowerX96)

    Args:
        tick_lower: The low tick of the range.
        tick_upper: The upper tick of the range.
        usd_scaled: USD amount scaled by 1e6.

    Returns:
        Liquidity as an integer; 0 when usd_scaled is 0.

    Examples:
        >>> estimate_liquidity(-60, 60, 0)
        0
    """
    _check_tick_range(tick_lower, tick_upper)

    if usd_scaled == 0:
        return 0

    sqrt_lower_x96 = get_sqrt_ratio_at_tick(tick_lower)
    sqrt_upper_x96 = get_sqrt_ratio_at_tick(tick_upper)
    sqrt_price_diff = sqrt_upper_x96 - sqrt_lower_x96

    if sqrt_price_diff == 0:
        raise InvalidArgumentError(
            f"Division by zero: sqrt price difference is 0 for ticks {tick_lower} to {tick_upper}"
        )

    return usd_scaled * Q96 // sqrt_price_diff


def liquidity_for_target_ratio(
    margin_scaled: int,
    tick_lower: int,
    tick_upper: int,
    current_sqrtx96: int,
    target_margin_ratio: float
) -> int:
    """
    Calculate the liquidity that puts a maker position at a target margin ratio.

    Margin ratio here is margin / debt, where debt is the USD value of the
    position's token exposure at the current price.

    Args:
        margin_scaled: Margin scaled by 1e6.
        tick_lower: The low tick of the range.
        tick_upper: The upper tick of the range.
        current_sqrtx96: Current pool price in sqrtPriceX96 format.
        target_margin_ratio: Desired margin / debt, e.g. 1.2 for 120%.

    Returns:
        Liquidity as an integer, floored.

    Raises:
        InvalidArgumentError: for an empty range, a non-positive target, or
            when the computed debt or liquidity is not positive.
    """
    _check_tick_range(tick_lower, tick_upper)

    if margin_scaled == 0:
        return 0

    if not target_margin_ratio > 0:
        raise InvalidArgumentError(
            f"Invalid target margin ratio: {target_margin_ratio} must be positive"
        )

    price_lower = tick_to_decimal_price(tick_lower)
    price_upper = tick_to_decimal_price(tick_upper)
    current_price = sqrtx96_to_decimal_price(current_sqrtx96)

    sqrt_p = math.sqrt(current_price)
    sqrt_p_lower = math.sqrt(price_lower)
    sqrt_p_upper = math.sqrt(price_upper)

    if current_price <= price_lower:
        # Below range: all perp tokens
        amount0_per_l = 1 / sqrt_p_lower - 1 / sqrt_p_upper
        debt_per_l = amount0_per_l * current_price
    elif current_price >= price_upper:
        # Above range: all USD
        debt_per_l = sqrt_p_upper - sqrt_p_lower
    else:
        amount0_per_l = 1 / sqrt_p - 1 / sqrt_p_upper
        amount1_per_l = sqrt_p - sqrt_p_lower
        debt_per_l = amount0_per_l * current_price + amount1_per_l

    if debt_per_l <= 0:
        raise InvalidArgumentError("Calculated debt per unit liquidity is zero or negative")

    margin = margin_scaled / NUMBER_1E6
    liquidity = (margin / target_margin_ratio) / debt_per_l

    if liquidity <= 0:
        raise InvalidArgumentError("Calculated liquidity is zero or negative")

    logger.debug(
        "liquidity %.6f for margin %s in ticks [%s, %s] at price %s",
        liquidity, margin, tick_lower, tick_upper, current_price
    )
    return int(math.floor(liquidity))
