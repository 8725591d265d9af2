"""
Typed records for contract results and contract call arguments.

Raw contract reads arrive as loosely typed tuples of integers. The decoders
here convert them into frozen records right away so nothing downstream
handles raw tuples. The encoders go the other way, turning human inputs into
the scaled integers the PerpManager expects.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Tuple, Union

from .config import settings
from .constants import NUMBER_1E6, ZERO_PERP_ID
from .errors import InvalidArgumentError, PerpCityError
from .position import MarginRatios, PositionRawData
from .price import sqrtx96_to_decimal_price
from .scaling import (
    decimal_to_scaled6,
    leverage_to_margin_ratio,
    margin_ratio_to_leverage,
    scaled6_to_decimal,
)
from .tick import align_tick_range, decimal_price_to_tick

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LiveDetails:
    """Live PnL and margin of an open position."""
    pnl: float
    funding_payment: float
    effective_margin: float
    is_liquidatable: bool


@dataclass(frozen=True)
class Bounds:
    """Taker trading bounds of a perp."""
    min_margin: float
    min_taker_leverage: float
    max_taker_leverage: float
    liquidation_taker_ratio: float


@dataclass(frozen=True)
class Fees:
    """Fee rates of a perp as fractions of notional."""
    creator_fee: float
    insurance_fee: float
    lp_fee: float
    liquidation_fee: float

    @property
    def trading_fee(self) -> float:
        """Fee charged on a taker open, excluding the protocol fee."""
        return self.creator_fee + self.insurance_fee + self.lp_fee


@dataclass(frozen=True)
class TakerOpenParams:
    """PerpManager openTakerPos arguments, scaled for the contract."""
    is_long: bool
    margin: int
    margin_ratio: int
    unspecified_amount_limit: int


@dataclass(frozen=True)
class MakerOpenParams:
    """PerpManager openMakerPos arguments with ticks aligned to the spacing."""
    margin: int
    liquidity: int
    tick_lower: int
    tick_upper: int
    max_amt0_in: int
    max_amt1_in: int


@dataclass(frozen=True)
class ClosePositionParams:
    """PerpManager closePosition arguments with 6-decimal slippage limits."""
    position_id: int
    min_amt0_out: int
    min_amt1_out: int
    max_amt1_in: int


def _field(value: Any, name: str, index: int) -> Any:
    # struct results come back either as mappings or as positional tuples
    if isinstance(value, Mapping):
        return value[name]
    return value[index]


def decode_position_raw(position_id: int, result: Sequence[Any]) -> PositionRawData:
    """
    Decode the PerpManager ``positions(id)`` tuple.

    The tuple layout is [perpId, margin, entryPerpDelta, entryUsdDelta,
    entryCumlFundingX96, entryCumlBadDebtX96, entryCumlUtilizationX96,
    marginRatios, makerDetails]. Cumulative accumulators and maker details
    are not needed for position metrics and are dropped.

    Raises:
        PerpCityError: if the position does not exist (zero perp id).
    """
    perp_id, margin, entry_perp_delta, entry_usd_delta = result[:4]
    ratios = result[7]

    if str(perp_id).lower() == ZERO_PERP_ID:
        raise PerpCityError(f"Position {position_id} does not exist")

    return PositionRawData(
        margin=scaled6_to_decimal(margin),
        entry_perp_delta=int(entry_perp_delta),
        entry_usd_delta=int(entry_usd_delta),
        margin_ratios=MarginRatios(
            min=int(_field(ratios, "min", 0)),
            max=int(_field(ratios, "max", 1)),
            liq=int(_field(ratios, "liq", 2)),
        ),
        perp_id=perp_id,
        position_id=int(position_id),
    )


def decode_live_details(result: Sequence[Any]) -> LiveDetails:
    """Decode ``livePositionDetails`` as (pnl, fundingPayment, effectiveMargin, isLiquidatable)."""
    pnl, funding_payment, effective_margin, is_liquidatable = result[:4]
    return LiveDetails(
        pnl=scaled6_to_decimal(pnl),
        funding_payment=scaled6_to_decimal(funding_payment),
        effective_margin=scaled6_to_decimal(effective_margin),
        is_liquidatable=bool(is_liquidatable),
    )


def decode_bounds(
    min_taker_ratio: int,
    max_taker_ratio: int,
    liquidation_taker_ratio: int,
    min_margin: Optional[float] = None
) -> Bounds:
    """
    Build trading bounds from the margin ratios module.

    The largest margin ratio gives the smallest leverage and vice versa.
    min_margin is not exposed by the contracts and defaults to settings.min_margin.
    """
    if min_margin is None:
        min_margin = settings.min_margin

    return Bounds(
        min_margin=min_margin,
        min_taker_leverage=margin_ratio_to_leverage(int(max_taker_ratio)),
        max_taker_leverage=margin_ratio_to_leverage(int(min_taker_ratio)),
        liquidation_taker_ratio=int(liquidation_taker_ratio) / NUMBER_1E6,
    )


def decode_fees(creator_fee: int, insurance_fee: int, lp_fee: int, liquidation_fee: int) -> Fees:
    """Build fee rates from the fees module's 1e6-scaled uint24 values."""
    return Fees(
        creator_fee=scaled6_to_decimal(creator_fee),
        insurance_fee=scaled6_to_decimal(insurance_fee),
        lp_fee=scaled6_to_decimal(lp_fee),
        liquidation_fee=scaled6_to_decimal(liquidation_fee),
    )


def decode_mark_price(sqrtx96: Union[int, str]) -> float:
    """Mark price from the pool's current sqrtPriceX96."""
    return sqrtx96_to_decimal_price(sqrtx96)


def taker_open_params(
    is_long: bool,
    margin: float,
    leverage: float,
    unspecified_amount_limit: Union[float, int] = 0
) -> TakerOpenParams:
    """
    Encode a taker open.

    Args:
        is_long: Long when True, short otherwise.
        margin: USDC margin in human units.
        leverage: Leverage multiplier, e.g. 2 for 2x.
        unspecified_amount_limit: Slippage limit. For longs the minimum perp
            tokens to receive, for shorts the maximum to send. A float is
            scaled by 1e6; an int is taken as already raw.

    Raises:
        InvalidArgumentError: if margin or leverage is not positive.
    """
    if not margin > 0:
        raise InvalidArgumentError(f"Margin must be greater than 0: {margin}")
    if not leverage > 0:
        raise InvalidArgumentError(f"Leverage must be greater than 0: {leverage}")

    if isinstance(unspecified_amount_limit, int) and not isinstance(unspecified_amount_limit, bool):
        limit = unspecified_amount_limit
    else:
        limit = decimal_to_scaled6(unspecified_amount_limit)

    return TakerOpenParams(
        is_long=is_long,
        margin=decimal_to_scaled6(margin),
        margin_ratio=leverage_to_margin_ratio(leverage),
        unspecified_amount_limit=limit,
    )


def maker_tick_range(price_lower: float, price_upper: float, tick_spacing: int) -> Tuple[int, int]:
    """
    Convert a maker price range to ticks aligned on tick_spacing.

    The lower price rounds down and the upper price rounds up, then both are
    widened onto the spacing grid.
    """
    if price_lower >= price_upper:
        raise InvalidArgumentError(
            f"price_lower ({price_lower}) must be less than price_upper ({price_upper})"
        )

    tick_lower = decimal_price_to_tick(price_lower, round_down=True)
    tick_upper = decimal_price_to_tick(price_upper, round_down=False)
    return align_tick_range(tick_lower, tick_upper, tick_spacing)


def maker_open_params(
    margin: float,
    price_lower: float,
    price_upper: float,
    tick_spacing: int,
    liquidity: int,
    max_amt0_in: float,
    max_amt1_in: float
) -> MakerOpenParams:
    """Encode a maker open; liquidity is passed through unscaled."""
    if not margin > 0:
        raise InvalidArgumentError(f"Margin must be greater than 0: {margin}")

    tick_lower, tick_upper = maker_tick_range(price_lower, price_upper, tick_spacing)
    return MakerOpenParams(
        margin=decimal_to_scaled6(margin),
        liquidity=int(liquidity),
        tick_lower=tick_lower,
        tick_upper=tick_upper,
        max_amt0_in=decimal_to_scaled6(max_amt0_in),
        max_amt1_in=decimal_to_scaled6(max_amt1_in),
    )


def close_params(
    position_id: int,
    min_amt0_out: float = 0,
    min_amt1_out: float = 0,
    max_amt1_in: float = 0
) -> ClosePositionParams:
    """Encode a close; every limit is scaled by 1e6 and 0 means no limit."""
    return ClosePositionParams(
        position_id=int(position_id),
        min_amt0_out=decimal_to_scaled6(min_amt0_out),
        min_amt1_out=decimal_to_scaled6(min_amt1_out),
        max_amt1_in=decimal_to_scaled6(max_amt1_in),
    )


def required_taker_approval(
    margin: float,
    leverage: float,
    fees: Fees,
    protocol_fee: Optional[int] = None
) -> int:
    """
    USDC allowance (6 decimals) needed to open a taker position.

    Fees are charged on notional (margin * leverage), so the approval covers
    the margin plus every fee rate applied to the notional, rounded up.

    Args:
        margin: USDC margin in human units.
        leverage: Leverage multiplier.
        fees: Fee rates of the perp.
        protocol_fee: PerpManager protocol fee scaled by 1e6, if any.

    Examples:
        >>> fees = Fees(creator_fee=0.0, insurance_fee=0.0, lp_fee=0.005, liquidation_fee=0.01)
        >>> required_taker_approval(100, 2, fees)
        101000000
    """
    margin_scaled = decimal_to_scaled6(margin)
    margin_ratio = leverage_to_margin_ratio(leverage)
    notional = margin_scaled * NUMBER_1E6 // margin_ratio

    protocol_fee_rate = (protocol_fee or 0) / NUMBER_1E6
    total_fee_rate = fees.trading_fee + protocol_fee_rate
    total_fees = math.ceil(notional * total_fee_rate)

    logger.debug(
        "approval for margin %s at %sx: notional %s, fees %s",
        margin_scaled, leverage, notional, total_fees
    )
    return margin_scaled + total_fees
