"""Momentum oscillators: RSI, MACD, Stochastic and Stochastic RSI.

Degenerate windows resolve to defined values instead of dividing by zero:
RSI is 100 when the average loss is zero, stochastics read 50 when the
window is flat.
"""

from collections.abc import Sequence

from btcsignal.indicators.models import MACDResult, StochasticResult
from btcsignal.indicators.moving_average import ema_values, sma_values, to_series
from btcsignal.models import Candle, IndicatorPoint


def _rsi_from_averages(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100 - 100 / (1 + rs)


def rsi_values(closes: Sequence[float], period: int = 14) -> list[float | None]:
    """Wilder RSI; first value at index ``period`` (needs ``period + 1`` closes)."""
    result: list[float | None] = [None] * len(closes)
    if period < 1 or len(closes) < period + 1:
        return result

    gains = 0.0
    losses = 0.0
    for i in range(1, period + 1):
        change = closes[i] - closes[i - 1]
        if change > 0:
            gains += change
        else:
            losses -= change

    avg_gain = gains / period
    avg_loss = losses / period
    result[period] = _rsi_from_averages(avg_gain, avg_loss)

    for i in range(period + 1, len(closes)):
        change = closes[i] - closes[i - 1]
        gain = change if change > 0 else 0.0
        loss = -change if change < 0 else 0.0
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period
        result[i] = _rsi_from_averages(avg_gain, avg_loss)

    return result


def rsi(candles: Sequence[Candle], period: int = 14) -> list[IndicatorPoint]:
    """Relative Strength Index of closes, bounded to [0, 100]."""
    closes = [c.close for c in candles]
    return to_series(candles, rsi_values(closes, period))


def macd(
    candles: Sequence[Candle],
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9,
) -> MACDResult:
    """MACD line (fast EMA - slow EMA), its signal EMA and histogram.

    The MACD line starts where both EMAs exist. The signal line is an EMA of
    the MACD line itself, so it starts ``signal_period - 1`` MACD points later;
    the histogram shares the signal line's timestamps.
    """
    closes = [c.close for c in candles]
    fast = ema_values(closes, fast_period)
    slow = ema_values(closes, slow_period)

    line: list[IndicatorPoint] = []
    for candle, f, s in zip(candles, fast, slow):
        if f is not None and s is not None:
            line.append(IndicatorPoint(time=candle.time, value=f - s))

    signal_vals = ema_values([p.value for p in line], signal_period)

    signal: list[IndicatorPoint] = []
    histogram: list[IndicatorPoint] = []
    for point, sig in zip(line, signal_vals):
        if sig is None:
            continue
        signal.append(IndicatorPoint(time=point.time, value=sig))
        histogram.append(IndicatorPoint(time=point.time, value=point.value - sig))

    return MACDResult(macd=line, signal=signal, histogram=histogram)


def _smooth(points: list[IndicatorPoint], period: int) -> list[IndicatorPoint]:
    """SMA over an already-aligned series, keeping its timestamps."""
    smoothed = sma_values([p.value for p in points], period)
    return [
        IndicatorPoint(time=p.time, value=v)
        for p, v in zip(points, smoothed)
        if v is not None
    ]


def stoch_rsi(
    candles: Sequence[Candle],
    rsi_period: int = 14,
    stoch_period: int = 14,
    k_smooth: int = 3,
    d_smooth: int = 3,
) -> StochasticResult:
    """Stochastic oscillator applied to the RSI line.

    raw = (RSI - min(window)) / (max(window) - min(window)) * 100, or 50 when
    the RSI window is flat. %K = SMA(raw, k_smooth), %D = SMA(%K, d_smooth).
    """
    rsi_points = rsi(candles, rsi_period)
    if stoch_period < 1 or len(rsi_points) < stoch_period:
        return StochasticResult()

    raw: list[IndicatorPoint] = []
    for i in range(stoch_period - 1, len(rsi_points)):
        window = [p.value for p in rsi_points[i - stoch_period + 1 : i + 1]]
        low = min(window)
        high = max(window)
        if high == low:
            value = 50.0
        else:
            value = (rsi_points[i].value - low) / (high - low) * 100
        raw.append(IndicatorPoint(time=rsi_points[i].time, value=value))

    k = _smooth(raw, k_smooth)
    d = _smooth(k, d_smooth)
    return StochasticResult(k=k, d=d)


def stochastic(
    candles: Sequence[Candle],
    k_period: int = 14,
    k_smooth: int = 3,
    d_period: int = 3,
) -> StochasticResult:
    """Price stochastic: close position inside the high/low range of ``k_period`` bars."""
    if k_period < 1 or len(candles) < k_period:
        return StochasticResult()

    raw: list[IndicatorPoint] = []
    for i in range(k_period - 1, len(candles)):
        window = candles[i - k_period + 1 : i + 1]
        highest_high = max(c.high for c in window)
        lowest_low = min(c.low for c in window)
        span = highest_high - lowest_low
        value = (candles[i].close - lowest_low) / span * 100 if span > 0 else 50.0
        raw.append(IndicatorPoint(time=candles[i].time, value=value))

    k = _smooth(raw, k_smooth)
    d = _smooth(k, d_period)
    return StochasticResult(k=k, d=d)
