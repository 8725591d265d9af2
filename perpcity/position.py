"""
Position metrics derived from a position's on-chain entry deltas.

Core relationships for a position opened with signed deltas (perp, usd),
both scaled by 1e6 and sharing a sign (positive = long, negative = short):

    entry price = |usd| / |perp|
    size        = perp / 1e6
    value       = |size| * mark price
    leverage    = value / effective margin

Liquidation happens when equity falls to the minimum margin ratio of the
entry notional:

    buffer   = (margin - min_ratio * |size| * entry) / |size|
    long:  liq = max(0, entry - buffer)
    short: liq = entry + buffer
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, TypedDict

from .constants import NUMBER_1E6
from .errors import InvalidArgumentError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarginRatios:
    """Margin ratio bounds of a position, each scaled by 1e6 (100000 = 10%)."""
    min: int
    max: int
    liq: int = 0


@dataclass(frozen=True)
class PositionRawData:
    """Snapshot of a position's opening state as stored on-chain."""
    margin: float
    entry_perp_delta: int
    entry_usd_delta: int
    margin_ratios: MarginRatios
    perp_id: Optional[str] = None
    position_id: Optional[int] = None

    def __post_init__(self):
        if (self.entry_perp_delta == 0) != (self.entry_usd_delta == 0):
            raise InvalidArgumentError(
                "Entry deltas must both be zero or both be non-zero: "
                f"perp={self.entry_perp_delta}, usd={self.entry_usd_delta}"
            )


class PositionMetrics(TypedDict):
    """Result from position_metrics function."""
    entry_price: float
    size: float
    value: float
    leverage: float
    liquidation_price: Optional[float]


def entry_price(raw: PositionRawData) -> float:
    """
    Average entry price of a position.

    The 1e6 scaling of both deltas cancels, so no descaling is needed.

    Examples:
        >>> raw = PositionRawData(100, -2_000_000, -100_000_000, MarginRatios(100000, 500000))
        >>> entry_price(raw)
        50.0
    """
    if raw.entry_perp_delta == 0:
        return 0.0

    return abs(raw.entry_usd_delta) / abs(raw.entry_perp_delta)


def position_size(raw: PositionRawData) -> float:
    """Signed size in perp tokens: positive long, negative short, zero flat."""
    return raw.entry_perp_delta / NUMBER_1E6


def position_value(raw: PositionRawData, mark_price: float) -> float:
    """Notional value at mark_price, always non-negative."""
    return abs(position_size(raw)) * mark_price


def leverage(position_value: float, effective_margin: float) -> float:
    """
    Effective leverage of a position.

    Returns math.inf when effective_margin <= 0, which is how an insolvent
    position shows up. Callers must check for it.
    """
    if effective_margin <= 0:
        return math.inf

    return position_value / effective_margin


def liquidation_price(
    raw: PositionRawData,
    mark_price: float,
    is_long: bool
) -> Optional[float]:
    """
    Estimate the price at which a taker position becomes liquidatable.

    Args:
        raw: Position entry data.
        mark_price: Current mark price. Accepted for API stability; the
            estimate is based on entry price only.
        is_long: Direction of the position.

    Returns:
        The liquidation price, or None for a flat or unfunded position.
        Long prices are floored at 0; short prices have no upper bound.

    Examples:
        >>> raw = PositionRawData(1000, 1_000_000, 10_000_000, MarginRatios(100000, 500000))
        >>> liquidation_price(raw, mark_price=10, is_long=True)
        0.0
    """
    size = abs(position_size(raw))
    if size == 0 or raw.margin <= 0:
        return None

    entry = entry_price(raw)
    entry_notional = size * entry
    min_margin_ratio = raw.margin_ratios.min / NUMBER_1E6
    buffer = (raw.margin - min_margin_ratio * entry_notional) / size

    if is_long:
        return max(0.0, entry - buffer)
    return entry + buffer


def position_metrics(
    raw: PositionRawData,
    mark_price: float,
    effective_margin: float,
    is_long: Optional[bool] = None
) -> PositionMetrics:
    """
    Compute every derived metric for a position at once.

    Args:
        raw: Position entry data.
        mark_price: Current mark price.
        effective_margin: Margin after PnL and funding, as reported by
            the live position details.
        is_long: Direction; inferred from the sign of the entry perp delta
            when None.

    Returns:
        A dict with entry_price, size, value, leverage and liquidation_price.
    """
    if is_long is None:
        is_long = raw.entry_perp_delta > 0

    value = position_value(raw, mark_price)
    metrics = PositionMetrics(
        entry_price=entry_price(raw),
        size=position_size(raw),
        value=value,
        leverage=leverage(value, effective_margin),
        liquidation_price=liquidation_price(raw, mark_price, is_long)
    )
    logger.debug("position %s metrics: %s", raw.position_id, metrics)
    return metrics
