"""
Scaling between human decimals and the protocol's integer encodings.

PerpCity stores USD amounts with 6 decimals (USDC precision), leverage as a
64.96 fixed-point value, and margin ratios as fractions scaled by 1e6.
"""

import logging
import math
from typing import Union

from .constants import MAX_SAFE_DECIMAL, NUMBER_1E6, Q96
from .errors import InvalidArgumentError, ScaledOverflowError

logger = logging.getLogger(__name__)


def decimal_to_scaled6(amount: float) -> int:
    """
    Scale a decimal amount to a 6-decimal integer, flooring the remainder.

    Negative amounts are accepted and produce negative integers, matching
    signed on-chain deltas.

    Args:
        amount: Amount in human units, e.g. 100.5 USDC.

    Returns:
        floor(amount * 1e6).

    Raises:
        InvalidArgumentError: if amount is NaN or infinite, or exceeds
            MAX_SAFE_DECIMAL / 1e6.

    Examples:
        >>> decimal_to_scaled6(100.5555555)
        100555555
        >>> decimal_to_scaled6(-100)
        -100000000
    """
    if isinstance(amount, float) and not math.isfinite(amount):
        logger.debug("rejecting non-finite amount %r", amount)
        raise InvalidArgumentError(f"Amount must be finite: {amount}")
    if amount > MAX_SAFE_DECIMAL / NUMBER_1E6:
        logger.debug("rejecting amount %r above safe 6-decimal range", amount)
        raise InvalidArgumentError(f"Amount too large: {amount}")

    return int(math.floor(amount * NUMBER_1E6))


def scaled6_to_decimal(value: Union[int, str]) -> float:
    """
    Convert a 6-decimal integer back to a human decimal.

    Examples:
        >>> scaled6_to_decimal(100_500_000)
        100.5
    """
    return int(value) / NUMBER_1E6


def decimal_to_x96(amount: float) -> int:
    """
    Encode a decimal (e.g. leverage) as a 64.96 fixed-point integer.

    The amount is first floored to 6 decimals, so the result carries at most
    6 decimal digits of precision. Overflow rules are those of
    decimal_to_scaled6.

    Examples:
        >>> decimal_to_x96(1) == 2 ** 96
        True
    """
    return decimal_to_scaled6(amount) * Q96 // NUMBER_1E6


def x96_to_decimal(value_x96: Union[int, str]) -> float:
    """
    Decode a 64.96 fixed-point integer to a decimal.

    The value is multiplied up to 6 decimals before the range check; Python
    integers are unbounded so the product is exact.

    Args:
        value_x96: Fixed-point value, as an int or a decimal string.

    Returns:
        (value_x96 * 1e6 // 2^96) / 1e6.

    Raises:
        ScaledOverflowError: if the 6-decimal intermediate exceeds MAX_SAFE_DECIMAL.

    Examples:
        >>> x96_to_decimal(100 * 2 ** 96)
        100.0
    """
    scaled = int(value_x96) * NUMBER_1E6 // Q96
    if scaled > MAX_SAFE_DECIMAL:
        logger.debug("x96 value %s scales to %s, above safe range", value_x96, scaled)
        raise ScaledOverflowError(f"Value too large: {value_x96}")

    return scaled / NUMBER_1E6


def margin_ratio_to_leverage(margin_ratio: Union[int, float]) -> float:
    """
    Convert a 1e6-scaled margin ratio to leverage.

    Examples:
        >>> margin_ratio_to_leverage(100_000)  # 10% margin
        10.0
    """
    if not margin_ratio > 0:
        raise InvalidArgumentError(f"Margin ratio must be greater than 0: {margin_ratio}")

    return NUMBER_1E6 / margin_ratio


def leverage_to_margin_ratio(leverage: float) -> int:
    """
    Convert leverage to the 1e6-scaled margin ratio a taker order expects.

    Rounds down, so the encoded ratio never asks for more margin than given.

    Examples:
        >>> leverage_to_margin_ratio(3)
        333333
    """
    if not leverage > 0:
        raise InvalidArgumentError(f"Leverage must be greater than 0: {leverage}")

    return int(math.floor(NUMBER_1E6 / leverage))
