"""
Tick-related conversion functions.

A tick is the exponent in price = 1.0001 ** tick. Maker ranges are expressed
in ticks and must sit on multiples of the pool's tick spacing.
"""

import logging
import math
from typing import Tuple, TypedDict

from .constants import MAX_TICK, MIN_TICK, TICK_BASE
from .errors import InvalidArgumentError

logger = logging.getLogger(__name__)


class ClosestTickResult(TypedDict):
    """Result from get_closest_tick function."""
    desired_price: float
    actual_price: float
    tick: int


def _check_price(price: float) -> None:
    # written so NaN fails the comparison
    if not price > 0:
        logger.debug("rejecting non-positive price %r", price)
        raise InvalidArgumentError(f"Price must be positive: {price}")
    if math.isinf(price):
        logger.debug("rejecting infinite price %r", price)
        raise InvalidArgumentError(f"Price must be finite: {price}")


def decimal_price_to_tick(price: float, round_down: bool) -> int:
    """
    Convert a human readable price to a tick.

    Args:
        price: Positive price.
        round_down: Floor the fractional tick when True, ceil otherwise.
            Use True for the lower bound of a range and False for the upper.

    Returns:
        The integer tick.

    Raises:
        InvalidArgumentError: if price is not a positive finite number.

    Note:
        Uses float logarithms, so prices sitting exactly on a tick boundary
        can land one tick off.

    Examples:
        >>> decimal_price_to_tick(1, round_down=True)
        0
        >>> decimal_price_to_tick(0.9999, round_down=False)
        -1
    """
    _check_price(price)

    tick = math.log(price) / math.log(TICK_BASE)
    return int(math.floor(tick)) if round_down else int(math.ceil(tick))


def tick_to_decimal_price(tick: int) -> float:
    """
    Convert a tick to a human readable price.

    Examples:
        >>> tick_to_decimal_price(0)
        1.0
    """
    return TICK_BASE ** tick


def nearest_usable_tick(tick: int, tick_spacing: int) -> int:
    """
    Round a tick to the nearest multiple of tick_spacing within the tick bounds.

    Halves round up, as in the Uniswap SDK.

    Examples:
        >>> nearest_usable_tick(95, 10)
        100
        >>> nearest_usable_tick(-95, 10)
        -90
    """
    if tick_spacing <= 0:
        raise InvalidArgumentError(f"Tick spacing must be positive: {tick_spacing}")

    rounded = int(math.floor(tick / tick_spacing + 0.5)) * tick_spacing
    if rounded < MIN_TICK:
        return rounded + tick_spacing
    if rounded > MAX_TICK:
        return rounded - tick_spacing
    return rounded


def align_tick_range(tick_lower: int, tick_upper: int, tick_spacing: int) -> Tuple[int, int]:
    """
    Widen a tick range outward onto tick_spacing multiples.

    The lower tick is floored and the upper tick ceiled, so the aligned range
    always contains the requested one.

    Examples:
        >>> align_tick_range(105, 195, 60)
        (60, 240)
    """
    if tick_spacing <= 0:
        raise InvalidArgumentError(f"Tick spacing must be positive: {tick_spacing}")

    aligned_lower = (tick_lower // tick_spacing) * tick_spacing
    aligned_upper = -((-tick_upper) // tick_spacing) * tick_spacing
    return aligned_lower, aligned_upper


def get_closest_tick(desired_price: float, tick_spacing: int = 60) -> ClosestTickResult:
    """
    Get the closest allowable tick for a desired price.

    Args:
        desired_price: Your desired price.
        tick_spacing: The pool's tick spacing. Use 1 to invert tick_to_decimal_price.

    Returns:
        A dict with desired_price (input), actual_price (price at the chosen tick), and tick.

    Raises:
        InvalidArgumentError: if desired_price is not a positive finite
            number or tick_spacing is not positive.

    Examples:
        >>> get_closest_tick(1.0, tick_spacing=60)
        {'desired_price': 1.0, 'actual_price': 1.0, 'tick': 0}
    """
    _check_price(desired_price)
    if tick_spacing <= 0:
        raise InvalidArgumentError(f"Tick spacing must be positive: {tick_spacing}")

    initial_tick = math.log(desired_price) / math.log(TICK_BASE)
    initial_tick = min(max(initial_tick, MIN_TICK), MAX_TICK)

    tick = nearest_usable_tick(initial_tick, tick_spacing)
    actual_price = tick_to_decimal_price(tick)

    return ClosestTickResult(
        desired_price=desired_price,
        actual_price=actual_price,
        tick=tick
    )


def get_sqrt_ratio_at_tick(tick: int) -> int:
    """
    Exact sqrt(1.0001^tick) * 2^96 using the concentrated-liquidity tick table.

    Unlike decimal_price_to_sqrtx96 this does no float math, so it matches the
    on-chain value for range boundaries.

    Raises:
        InvalidArgumentError: if tick is outside [MIN_TICK, MAX_TICK].

    Examples:
        >>> get_sqrt_ratio_at_tick(0) == 2 ** 96
        True
    """
    if tick < MIN_TICK or tick > MAX_TICK:
        raise InvalidArgumentError(f"Tick out of range: {tick}")

    abs_tick = abs(tick)

    ratio = 0xfffcb933bd6fad37aa2d162d1a594001 if abs_tick & 0x1 else 0x100000000000000000000000000000000
    for bit, multiplier in _TICK_MULTIPLIERS:
        if abs_tick & bit:
            ratio = (ratio * multiplier) >> 128

    if tick > 0:
        ratio = (1 << 256) // ratio

    return ratio >> 32


_TICK_MULTIPLIERS = (
    (0x2, 0xfff97272373d413259a46990580e213a),
    (0x4, 0xfff2e50f5f656932ef12357cf3c7fdcc),
    (0x8, 0xffe5caca7e10e4e61c3624eaa0941cd0),
    (0x10, 0xffcb9843d60f6159c9db58835c926644),
    (0x20, 0xff973b41fa98c081472e6896dfb254c0),
    (0x40, 0xff2ea16466c96a3843ec78b326b52861),
    (0x80, 0xfe5dee046a99a2a811c461f1969c3053),
    (0x100, 0xfcbe86c7900a88aedcffc83b479aa3a4),
    (0x200, 0xf987a7253ac413176f2b074cf7815e54),
    (0x400, 0xf3392b0822b70005940c7a398e4b70f3),
    (0x800, 0xe7159475a2c29b7443b29c7fa6e889d9),
    (0x1000, 0xd097f3bdfd2022b8845ad8f792aa5825),
    (0x2000, 0xa9f746462d870fdf8a65dc1f90e061e5),
    (0x4000, 0x70d869a156d2a1b890bb3df62baf32f7),
    (0x8000, 0x31be135f97d08fd981231505542fcfa6),
    (0x10000, 0x9aa508b5b7a84e1c677de54f3e99bc9),
    (0x20000, 0x5d6af8dedb81196699c329225ee604),
    (0x40000, 0x2216e584f5fa1ea926041bedfe98),
    (0x80000, 0x48a170391f7dc42444e8fa2),
)
