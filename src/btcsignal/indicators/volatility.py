"""Volatility indicators: Bollinger Bands, ATR, Keltner Channels and Supertrend."""

import math
from collections.abc import Sequence

from btcsignal.indicators.models import (
    BollingerBands,
    KeltnerChannels,
    SupertrendPoint,
    TrendDirection,
)
from btcsignal.indicators.moving_average import ema_values, to_series
from btcsignal.models import Candle, IndicatorPoint


def bollinger_bands(
    candles: Sequence[Candle], period: int = 20, std_dev: float = 2.0
) -> BollingerBands:
    """Rolling SMA ± ``std_dev`` population standard deviations of closes."""
    result = BollingerBands()
    if period < 1 or len(candles) < period:
        return result

    closes = [c.close for c in candles]
    for i in range(period - 1, len(closes)):
        window = closes[i - period + 1 : i + 1]
        mean = sum(window) / period
        variance = sum((v - mean) ** 2 for v in window) / period
        width = std_dev * math.sqrt(variance)
        time = candles[i].time

        upper = mean + width
        lower = mean - width
        result.middle.append(IndicatorPoint(time=time, value=mean))
        result.upper.append(IndicatorPoint(time=time, value=upper))
        result.lower.append(IndicatorPoint(time=time, value=lower))
        bandwidth = (upper - lower) / mean * 100 if mean > 0 else 0.0
        result.bandwidth.append(IndicatorPoint(time=time, value=bandwidth))

    return result


def true_ranges(candles: Sequence[Candle]) -> list[float]:
    """True range of every candle after the first (index ``j`` is candle ``j + 1``)."""
    return [
        max(
            cur.high - cur.low,
            abs(cur.high - prev.close),
            abs(cur.low - prev.close),
        )
        for prev, cur in zip(candles, candles[1:])
    ]


def atr_values(candles: Sequence[Candle], period: int = 14) -> list[float | None]:
    """Trailing simple average of the last ``period`` true ranges.

    First value at candle index ``period``.
    """
    result: list[float | None] = [None] * len(candles)
    if period < 1 or len(candles) < period + 1:
        return result

    tr = true_ranges(candles)
    for i in range(period, len(candles)):
        result[i] = sum(tr[i - period : i]) / period
    return result


def atr(candles: Sequence[Candle], period: int = 14) -> list[IndicatorPoint]:
    """Average True Range."""
    return to_series(candles, atr_values(candles, period))


def keltner_channels(
    candles: Sequence[Candle],
    ema_period: int = 20,
    atr_period: int = 10,
    atr_mult: float = 2.0,
) -> KeltnerChannels:
    """EMA of closes ± ``atr_mult`` ATR; starts where both inputs exist."""
    result = KeltnerChannels()
    mid = ema_values([c.close for c in candles], ema_period)
    ranges = atr_values(candles, atr_period)

    for candle, m, a in zip(candles, mid, ranges):
        if m is None or a is None:
            continue
        result.middle.append(IndicatorPoint(time=candle.time, value=m))
        result.upper.append(IndicatorPoint(time=candle.time, value=m + atr_mult * a))
        result.lower.append(IndicatorPoint(time=candle.time, value=m - atr_mult * a))
    return result


def supertrend(
    candles: Sequence[Candle], period: int = 10, multiplier: float = 3.0
) -> list[SupertrendPoint]:
    """ATR trailing-stop overlay.

    Basic bands are ``hl2 ± multiplier * ATR``. A final lower band only rises
    (unless the previous close broke below it) and a final upper band only
    falls (unless the previous close broke above it). Direction flips up when
    ``close > upper``, down when ``close < lower``, and persists otherwise;
    the series starts in an uptrend. The plotted value is the lower band in
    an uptrend and the upper band in a downtrend.
    """
    ranges = atr_values(candles, period)
    result: list[SupertrendPoint] = []
    if period < 1 or len(candles) < period + 1:
        return result

    direction = TrendDirection.UP
    prev_upper = 0.0
    prev_lower = 0.0

    for i in range(period, len(candles)):
        candle = candles[i]
        hl2 = (candle.high + candle.low) / 2
        band = multiplier * (ranges[i] or 0.0)
        upper = hl2 + band
        lower = hl2 - band

        if i > period:
            prev_close = candles[i - 1].close
            if not (lower > prev_lower or prev_close < prev_lower):
                lower = prev_lower
            if not (upper < prev_upper or prev_close > prev_upper):
                upper = prev_upper

        if candle.close > upper:
            direction = TrendDirection.UP
        elif candle.close < lower:
            direction = TrendDirection.DOWN

        result.append(
            SupertrendPoint(
                time=candle.time,
                value=lower if direction is TrendDirection.UP else upper,
                direction=direction,
                upper_band=upper,
                lower_band=lower,
            )
        )
        prev_upper = upper
        prev_lower = lower

    return result
