"""Support/resistance levels: classic pivots and recent range extremes."""

from collections.abc import Sequence

from btcsignal.indicators.models import KeyLevels, PivotLevels
from btcsignal.models import Candle

#: Candles per day / week on the default 1h timeframe.
DAY_LOOKBACK = 24
WEEK_LOOKBACK = 168


def pivot_points(high: float, low: float, close: float) -> PivotLevels:
    """Classic pivots from the prior period's high, low and close.

    pivot = (H + L + C) / 3
    R1 = 2P - L      S1 = 2P - H
    R2 = P + (H - L) S2 = P - (H - L)
    R3 = H + 2(P - L) S3 = L - 2(H - P)
    """
    pivot = (high + low + close) / 3
    return PivotLevels(
        pivot=pivot,
        r1=2 * pivot - low,
        r2=pivot + (high - low),
        r3=high + 2 * (pivot - low),
        s1=2 * pivot - high,
        s2=pivot - (high - low),
        s3=low - 2 * (high - pivot),
    )


def pivot_levels(
    candles: Sequence[Candle], lookback: int = DAY_LOOKBACK
) -> PivotLevels | None:
    """Pivots from the trailing ``lookback`` window's range and the last close."""
    if not candles or lookback < 1:
        return None

    recent = candles[-lookback:]
    return pivot_points(
        high=max(c.high for c in recent),
        low=min(c.low for c in recent),
        close=candles[-1].close,
    )


def key_levels(candles: Sequence[Candle]) -> KeyLevels | None:
    """High/low of the last day and the last week of candles."""
    if not candles:
        return None

    day = candles[-DAY_LOOKBACK:]
    week = candles[-WEEK_LOOKBACK:]
    return KeyLevels(
        day_high=max(c.high for c in day),
        day_low=min(c.low for c in day),
        week_high=max(c.high for c in week),
        week_low=min(c.low for c in week),
    )
