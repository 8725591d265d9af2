"""
PerpCity fixed-point and position math.

This package provides Python implementations of the conversions between human
decimals and the PerpCity protocol's on-chain encodings (sqrtPriceX96, 6-decimal
USD, X96 leverage, ticks, margin ratios), position metric calculators, and
decoders for raw contract and indexer results.
"""

from .errors import (
    PerpCityError,
    InvalidArgumentError,
    ScaledOverflowError,
    ContractError,
    ErrorCategory,
    ErrorSource,
    format_contract_error,
    with_context,
)
from .price import decimal_price_to_sqrtx96, sqrtx96_to_decimal_price
from .scaling import (
    decimal_to_scaled6,
    scaled6_to_decimal,
    decimal_to_x96,
    x96_to_decimal,
    margin_ratio_to_leverage,
    leverage_to_margin_ratio,
)
from .tick import (
    decimal_price_to_tick,
    tick_to_decimal_price,
    nearest_usable_tick,
    align_tick_range,
    get_closest_tick,
    get_sqrt_ratio_at_tick,
)
from .liquidity import estimate_liquidity, liquidity_for_target_ratio
from .position import (
    MarginRatios,
    PositionRawData,
    entry_price,
    position_size,
    position_value,
    leverage,
    liquidation_price,
    position_metrics,
)
from .records import (
    LiveDetails,
    Bounds,
    Fees,
    decode_position_raw,
    decode_live_details,
    decode_bounds,
    decode_fees,
    decode_mark_price,
    taker_open_params,
    maker_open_params,
    close_params,
    required_taker_approval,
)
from .timeseries import perp_snapshots_frame, index_snapshots_frame, latest_snapshot, pnl_summary
from .cache import TTLCache
from .config import Settings, settings, setup_logging

__all__ = [
    "PerpCityError",
    "InvalidArgumentError",
    "ScaledOverflowError",
    "ContractError",
    "ErrorCategory",
    "ErrorSource",
    "format_contract_error",
    "with_context",
    "decimal_price_to_sqrtx96",
    "sqrtx96_to_decimal_price",
    "decimal_to_scaled6",
    "scaled6_to_decimal",
    "decimal_to_x96",
    "x96_to_decimal",
    "margin_ratio_to_leverage",
    "leverage_to_margin_ratio",
    "decimal_price_to_tick",
    "tick_to_decimal_price",
    "nearest_usable_tick",
    "align_tick_range",
    "get_closest_tick",
    "get_sqrt_ratio_at_tick",
    "estimate_liquidity",
    "liquidity_for_target_ratio",
    "MarginRatios",
    "PositionRawData",
    "entry_price",
    "position_size",
    "position_value",
    "leverage",
    "liquidation_price",
    "position_metrics",
    "LiveDetails",
    "Bounds",
    "Fees",
    "decode_position_raw",
    "decode_live_details",
    "decode_bounds",
    "decode_fees",
    "decode_mark_price",
    "taker_open_params",
    "maker_open_params",
    "close_params",
    "required_taker_approval",
    "perp_snapshots_frame",
    "index_snapshots_frame",
    "latest_snapshot",
    "pnl_summary",
    "TTLCache",
    "Settings",
    "settings",
    "setup_logging",
]
