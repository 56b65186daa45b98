"""Confluence scorer: fixed additive weights over a handful of indicators.

Starts at 50 (neutral) and applies:
    EMA alignment   price > EMA9 > EMA21 -> +15, price < EMA9 < EMA21 -> -15
    RSI             < 30 -> +10, > 70 -> -10, > 50 -> +5, otherwise -5
    MACD histogram  > 0 -> +10, otherwise -10
    Volume          last volume > 1.5x its 20-bar average -> +5

The result is clamped to [0, 100]. Thresholds and deltas are the scoring
contract; they are not tuning knobs.
"""

from collections.abc import Sequence

from btcsignal.indicators.momentum import macd, rsi
from btcsignal.indicators.moving_average import ema
from btcsignal.models import Candle, IndicatorPoint
from btcsignal.signals.models import ConfluenceScore, Direction, SignalFactor

NEUTRAL_SCORE = 50
BULLISH_THRESHOLD = 65
BEARISH_THRESHOLD = 35

EMA_ALIGNMENT_WEIGHT = 15
RSI_EXTREME_WEIGHT = 10
RSI_BIAS_WEIGHT = 5
MACD_WEIGHT = 10
VOLUME_WEIGHT = 5

RSI_OVERSOLD = 30.0
RSI_OVERBOUGHT = 70.0
RSI_MIDLINE = 50.0


def direction_for_score(score: int) -> Direction:
    """Map a 0-100 score to its directional label."""
    if score >= BULLISH_THRESHOLD:
        return Direction.BULLISH
    if score <= BEARISH_THRESHOLD:
        return Direction.BEARISH
    return Direction.NEUTRAL


def _ema_factor(
    price: float | None, ema_fast: float | None, ema_slow: float | None
) -> SignalFactor:
    if price is None or ema_fast is None or ema_slow is None:
        return SignalFactor("ema_alignment", None, 0, "unavailable")
    if price > ema_fast > ema_slow:
        return SignalFactor("ema_alignment", True, EMA_ALIGNMENT_WEIGHT, "price above rising EMAs")
    if price < ema_fast < ema_slow:
        return SignalFactor("ema_alignment", False, -EMA_ALIGNMENT_WEIGHT, "price below falling EMAs")
    return SignalFactor("ema_alignment", None, 0, "mixed")


def _rsi_factor(rsi_value: float | None) -> SignalFactor:
    if rsi_value is None:
        return SignalFactor("rsi", None, 0, "unavailable")
    if rsi_value < RSI_OVERSOLD:
        return SignalFactor("rsi", True, RSI_EXTREME_WEIGHT, "oversold")
    if rsi_value > RSI_OVERBOUGHT:
        return SignalFactor("rsi", False, -RSI_EXTREME_WEIGHT, "overbought")
    if rsi_value > RSI_MIDLINE:
        return SignalFactor("rsi", True, RSI_BIAS_WEIGHT, "above midline")
    return SignalFactor("rsi", False, -RSI_BIAS_WEIGHT, "below midline")


def _macd_factor(histogram: float | None) -> SignalFactor:
    if histogram is None:
        return SignalFactor("macd", None, 0, "unavailable")
    if histogram > 0:
        return SignalFactor("macd", True, MACD_WEIGHT, "histogram positive")
    return SignalFactor("macd", False, -MACD_WEIGHT, "histogram negative")


def _volume_factor(ratio: float | None, spike_ratio: float) -> SignalFactor:
    if ratio is None:
        return SignalFactor("volume", None, 0, "unavailable")
    if ratio > spike_ratio:
        return SignalFactor("volume", True, VOLUME_WEIGHT, "high")
    return SignalFactor("volume", None, 0, "normal")


def score_confluence(
    price: float | None,
    ema_fast: float | None,
    ema_slow: float | None,
    rsi_value: float | None,
    macd_histogram: float | None,
    volume_ratio: float | None,
    volume_spike_ratio: float = 1.5,
) -> ConfluenceScore:
    """Combine the latest indicator readings into a ConfluenceScore.

    Any input may be None; its factor is then reported as unknown and
    contributes nothing.
    """
    factors = [
        _ema_factor(price, ema_fast, ema_slow),
        _rsi_factor(rsi_value),
        _macd_factor(macd_histogram),
        _volume_factor(volume_ratio, volume_spike_ratio),
    ]
    raw = NEUTRAL_SCORE + sum(f.weight for f in factors)
    score = int(max(0, min(100, raw)))
    return ConfluenceScore(
        score=score, direction=direction_for_score(score), factors=factors
    )


def _last(series: list[IndicatorPoint]) -> float | None:
    return series[-1].value if series else None


def last_volume_ratio(candles: Sequence[Candle], period: int = 20) -> float | None:
    """Last volume over the mean of the last ``period`` volumes (inclusive)."""
    if period < 1 or len(candles) < period:
        return None
    average = sum(c.volume for c in candles[-period:]) / period
    if average <= 0:
        return None
    return candles[-1].volume / average


def compute_confluence(
    candles: Sequence[Candle],
    ema_fast_period: int = 9,
    ema_slow_period: int = 21,
    rsi_period: int = 14,
    volume_period: int = 20,
    volume_spike_ratio: float = 1.5,
) -> ConfluenceScore:
    """Score the latest candle of a series.

    Recomputed from scratch on every call; short histories leave the
    affected factors unknown instead of failing.
    """
    return score_confluence(
        price=candles[-1].close if candles else None,
        ema_fast=_last(ema(candles, ema_fast_period)),
        ema_slow=_last(ema(candles, ema_slow_period)),
        rsi_value=_last(rsi(candles, rsi_period)),
        macd_histogram=_last(macd(candles).histogram),
        volume_ratio=last_volume_ratio(candles, volume_period),
        volume_spike_ratio=volume_spike_ratio,
    )
