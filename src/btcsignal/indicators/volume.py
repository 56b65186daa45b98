"""Volume-based indicators: VWAP, OBV and volume averages."""

from collections.abc import Sequence

from btcsignal.indicators.moving_average import sma_values, to_series
from btcsignal.models import Candle, IndicatorPoint


def vwap(candles: Sequence[Candle]) -> list[IndicatorPoint]:
    """Cumulative VWAP from the first supplied candle (no session reset).

    typical price = (high + low + close) / 3. Leading candles with zero
    cumulative volume have no defined VWAP and are skipped.
    """
    result: list[IndicatorPoint] = []
    cumulative_tpv = 0.0
    cumulative_volume = 0.0
    for candle in candles:
        typical = (candle.high + candle.low + candle.close) / 3
        cumulative_tpv += typical * candle.volume
        cumulative_volume += candle.volume
        if cumulative_volume > 0:
            result.append(
                IndicatorPoint(time=candle.time, value=cumulative_tpv / cumulative_volume)
            )
    return result


def obv(candles: Sequence[Candle]) -> list[IndicatorPoint]:
    """On-Balance Volume, starting from the first candle's volume."""
    if not candles:
        return []

    total = candles[0].volume
    result = [IndicatorPoint(time=candles[0].time, value=total)]
    for prev, cur in zip(candles, candles[1:]):
        if cur.close > prev.close:
            total += cur.volume
        elif cur.close < prev.close:
            total -= cur.volume
        result.append(IndicatorPoint(time=cur.time, value=total))
    return result


def volume_sma(candles: Sequence[Candle], period: int = 20) -> list[IndicatorPoint]:
    """SMA of volume."""
    return to_series(candles, sma_values([c.volume for c in candles], period))


def volume_ratio(candles: Sequence[Candle], period: int = 20) -> list[IndicatorPoint]:
    """Volume divided by its ``period`` SMA (window includes the bar itself)."""
    averages = sma_values([c.volume for c in candles], period)
    return [
        IndicatorPoint(time=candle.time, value=candle.volume / avg)
        for candle, avg in zip(candles, averages)
        if avg is not None and avg > 0
    ]
