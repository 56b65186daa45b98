"""Moving averages over candle closes.

Value-level helpers (``*_values``) take plain float lists and return a list of
the same length with ``None`` during warm-up, so they can be chained
(MACD signal line, %K smoothing). The candle-level functions drop the warm-up
and return suffix-aligned ``IndicatorPoint`` series.
"""

from collections.abc import Sequence

from btcsignal.models import Candle, IndicatorPoint


def to_series(
    candles: Sequence[Candle], values: Sequence[float | None]
) -> list[IndicatorPoint]:
    """Pair each non-None value with the time of the candle at the same index."""
    return [
        IndicatorPoint(time=candle.time, value=value)
        for candle, value in zip(candles, values)
        if value is not None
    ]


def sma_values(values: Sequence[float], period: int) -> list[float | None]:
    """Simple moving average; first value at index ``period - 1``."""
    result: list[float | None] = [None] * len(values)
    if period < 1 or len(values) < period:
        return result

    for i in range(period - 1, len(values)):
        window = values[i - period + 1 : i + 1]
        result[i] = sum(window) / period
    return result


def ema_values(values: Sequence[float], period: int) -> list[float | None]:
    """Exponential moving average seeded with the SMA of the first ``period`` values.

    Uses the standard recursive formula:
        k = 2 / (period + 1)
        EMA_t = value_t * k + EMA_{t-1} * (1 - k)

    The first value is emitted at index ``period - 1``.
    """
    result: list[float | None] = [None] * len(values)
    if period < 1 or len(values) < period:
        return result

    k = 2 / (period + 1)
    prev = sum(values[:period]) / period
    result[period - 1] = prev
    for i in range(period, len(values)):
        prev = values[i] * k + prev * (1 - k)
        result[i] = prev
    return result


def running_ema(values: Sequence[float], span: int) -> list[float]:
    """EMA seeded with the first value, same length as the input.

    This is the quick dashboard variant (no SMA warm-up). The chart-pattern
    trend check is calibrated against it.
    """
    if not values:
        return []

    alpha = 2 / (span + 1)
    ema = [float(values[0])]
    for v in values[1:]:
        ema.append(alpha * v + (1 - alpha) * ema[-1])
    return ema


def wma_values(values: Sequence[float], period: int) -> list[float | None]:
    """Linearly weighted moving average (newest value weight ``period``)."""
    result: list[float | None] = [None] * len(values)
    if period < 1 or len(values) < period:
        return result

    denominator = period * (period + 1) / 2
    for i in range(period - 1, len(values)):
        window = values[i - period + 1 : i + 1]
        result[i] = sum(v * (j + 1) for j, v in enumerate(window)) / denominator
    return result


def sma(candles: Sequence[Candle], period: int) -> list[IndicatorPoint]:
    """SMA of closes."""
    closes = [c.close for c in candles]
    return to_series(candles, sma_values(closes, period))


def ema(candles: Sequence[Candle], period: int) -> list[IndicatorPoint]:
    """EMA of closes; ``ema(c, p)[i].time == c[i + p - 1].time``."""
    closes = [c.close for c in candles]
    return to_series(candles, ema_values(closes, period))


def wma(candles: Sequence[Candle], period: int) -> list[IndicatorPoint]:
    """WMA of closes."""
    closes = [c.close for c in candles]
    return to_series(candles, wma_values(closes, period))
