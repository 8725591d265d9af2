"""
Price conversion functions for the sqrtPriceX96 format.

PerpCity pools reuse the Uniswap convention of storing prices as square roots
in 64.96 fixed-point format (64 bits integer, 96 bits fractional).
"""

import logging
import math
from typing import Union

from .constants import MAX_SAFE_DECIMAL, NUMBER_1E6, Q96
from .errors import InvalidArgumentError
from .scaling import x96_to_decimal

logger = logging.getLogger(__name__)


def decimal_price_to_sqrtx96(price: float) -> int:
    """
    Convert a human-readable price to sqrtPriceX96 format.

    Args:
        price: Positive price in USD per perp token, e.g. 50.0.

    Returns:
        floor(sqrt(price) * 1e6) * 2^96 // 1e6.

    Raises:
        InvalidArgumentError: if price is not in (0, MAX_SAFE_DECIMAL], including NaN.

    Note:
        sqrt(price) is truncated to 6 decimals before being promoted to 2^96,
        so very large prices lose precision beyond the 6th decimal of the root.

    Examples:
        >>> decimal_price_to_sqrtx96(1) == 2 ** 96
        True
        >>> decimal_price_to_sqrtx96(100) == 10 * 2 ** 96
        True
    """
    if not price > 0:
        logger.debug("rejecting non-positive price %r", price)
        raise InvalidArgumentError(f"Price must be positive: {price}")
    if not price <= MAX_SAFE_DECIMAL:
        logger.debug("rejecting price %r above safe range", price)
        raise InvalidArgumentError(f"Price too large: {price}")

    scaled_sqrt_price = math.floor(math.sqrt(price) * NUMBER_1E6)
    return int(scaled_sqrt_price) * Q96 // NUMBER_1E6


def sqrtx96_to_decimal_price(sqrtx96: Union[int, str]) -> float:
    """
    Convert sqrtPriceX96 format to a human-readable price.

    Args:
        sqrtx96: The 64.96 square root price, as an int or decimal string
            (indexers return it stringified).

    Returns:
        Decimal price. A zero sqrt price maps to 0.0.

    Raises:
        InvalidArgumentError: if sqrtx96 is negative.
        ScaledOverflowError: if the squared price does not fit the safe range.

    Examples:
        >>> sqrtx96_to_decimal_price(10 * 2 ** 96)
        100.0
    """
    sqrtx96 = int(sqrtx96)
    if sqrtx96 < 0:
        raise InvalidArgumentError(f"sqrtPriceX96 must be non-negative: {sqrtx96}")
    if sqrtx96 == 0:
        return 0.0

    price_x96 = sqrtx96 * sqrtx96 // Q96
    return x96_to_decimal(price_x96)
