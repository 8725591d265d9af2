"""
Indexer snapshot helpers.

The indexer returns perp and beacon snapshots as lists of dicts whose numeric
fields are stringified 6-decimal integers. These helpers turn them into
timestamp-sorted DataFrames in human units.

Expected perp snapshot keys:
    - timestamp: unix seconds
    - markPrice, takerLongNotional, takerShortNotional, fundingRate: scaled by 1e6

Expected beacon snapshot keys:
    - timestamp: unix seconds
    - indexPrice: scaled by 1e6
"""

from typing import Any, Dict, Iterable, List, Mapping, TypedDict

import pandas as pd

from .errors import PerpCityError
from .records import LiveDetails
from .scaling import scaled6_to_decimal

PERP_SNAPSHOT_FIELDS = {
    "markPrice": "mark_price",
    "takerLongNotional": "taker_long_notional",
    "takerShortNotional": "taker_short_notional",
    "fundingRate": "funding_rate",
}

BEACON_SNAPSHOT_FIELDS = {
    "indexPrice": "index_price",
}


class PnlSummary(TypedDict):
    """Result from pnl_summary function."""
    realized_pnl: float
    unrealized_pnl: float


def _snapshots_frame(
    snapshots: Iterable[Mapping[str, Any]],
    fields: Dict[str, str]
) -> pd.DataFrame:
    columns = ["timestamp"] + list(fields.values())
    rows: List[Dict[str, Any]] = []
    for snapshot in snapshots:
        row: Dict[str, Any] = {"timestamp": int(snapshot["timestamp"])}
        for source, target in fields.items():
            row[target] = scaled6_to_decimal(snapshot[source])
        rows.append(row)

    if not rows:
        frame = pd.DataFrame(columns=columns)
        frame["timestamp"] = pd.to_datetime(frame["timestamp"], unit="s", utc=True)
        return frame

    frame = pd.DataFrame(rows, columns=columns)
    frame["timestamp"] = pd.to_datetime(frame["timestamp"], unit="s", utc=True)
    return frame.sort_values("timestamp").reset_index(drop=True)


def perp_snapshots_frame(snapshots: Iterable[Mapping[str, Any]]) -> pd.DataFrame:
    """
    Build a perp time series from indexer snapshots.

    Returns:
        DataFrame with columns timestamp (UTC datetime), mark_price,
        taker_long_notional, taker_short_notional and funding_rate.

    Examples:
        >>> perp_snapshots_frame([{
        ...     'timestamp': '1700000000', 'markPrice': '50000000',
        ...     'takerLongNotional': '1000000000', 'takerShortNotional': '0',
        ...     'fundingRate': '-1500'
        ... }])
        # One row: mark_price 50.0, taker_long_notional 1000.0, funding_rate -0.0015
    """
    return _snapshots_frame(snapshots, PERP_SNAPSHOT_FIELDS)


def index_snapshots_frame(snapshots: Iterable[Mapping[str, Any]]) -> pd.DataFrame:
    """Build a beacon index price time series with columns timestamp and index_price."""
    return _snapshots_frame(snapshots, BEACON_SNAPSHOT_FIELDS)


def latest_snapshot(frame: pd.DataFrame) -> Dict[str, Any]:
    """
    Return the most recent row of a snapshot frame as a dict.

    Raises:
        PerpCityError: if the frame is empty.
    """
    if frame.empty:
        raise PerpCityError("No snapshots available")

    return frame.sort_values("timestamp").iloc[-1].to_dict()


def pnl_summary(
    closed_pnls: Iterable[float],
    live_details: Iterable[LiveDetails]
) -> PnlSummary:
    """
    Aggregate a user's realized and unrealized PnL.

    Args:
        closed_pnls: PnL at close of every closed position, in USD.
        live_details: Live details of every open position. Unrealized PnL
            nets the funding payment owed out of each position's PnL.

    Returns:
        A dict with realized_pnl and unrealized_pnl.
    """
    realized = pd.Series(list(closed_pnls), dtype=float).sum()
    open_details = pd.DataFrame(
        [(d.pnl, d.funding_payment) for d in live_details],
        columns=["pnl", "funding_payment"],
        dtype=float,
    )
    unrealized = (open_details["pnl"] - open_details["funding_payment"]).sum()

    return PnlSummary(
        realized_pnl=float(realized),
        unrealized_pnl=float(unrealized)
    )
