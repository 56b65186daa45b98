"""Chart-pattern heuristics over the recent candle window.

Slopes of highs and lows over the last ``lookback`` candles are matched
against a fixed rule list. The triangle/wedge rules overlap, so the first
match wins and the order below is part of the contract. Confidence numbers
and targets are canned, not statistically fitted.
"""

from collections.abc import Sequence

from btcsignal.indicators.moving_average import running_ema
from btcsignal.models import Candle
from btcsignal.signals.models import ChartPattern, PatternLabel, PatternReport
from btcsignal.signals.structure import (
    detect_fair_value_gaps,
    detect_order_blocks,
    detect_trendlines,
    find_peaks,
    find_resistance_levels,
    find_support_levels,
    find_valleys,
)

#: Below this many candles no pattern is reported.
MIN_PATTERN_CANDLES = 10

CONSOLIDATION_RANGE = 0.05
CHANNEL_SLOPE_TOLERANCE = 0.001
DOUBLE_EXTREME_TOLERANCE = 0.01


def _slope(values: Sequence[float]) -> float:
    return (values[-1] - values[0]) / len(values)


def _trend_is_up(closes: Sequence[float], span: int) -> bool:
    ema = running_ema(closes, span)
    reference = ema[-10] if len(ema) >= 10 else ema[0]
    return ema[-1] > reference


def _converging_pattern(
    high_slope: float, low_slope: float, trend_up: bool, max_high: float, min_low: float
) -> ChartPattern | None:
    if high_slope < 0 and low_slope > 0:
        target = max_high * 1.02 if trend_up else min_low * 0.98
        return ChartPattern.from_label(PatternLabel.SYMMETRICAL_TRIANGLE, target)
    if high_slope < 0 and low_slope >= 0:
        return ChartPattern.from_label(PatternLabel.DESCENDING_TRIANGLE, min_low * 0.97)
    if high_slope >= 0 and low_slope > 0:
        return ChartPattern.from_label(PatternLabel.ASCENDING_TRIANGLE, max_high * 1.03)
    # Shadowed by the ascending triangle rule; kept so the rule list stays intact.
    if high_slope > 0 and low_slope > 0 and high_slope > low_slope:
        return ChartPattern.from_label(PatternLabel.RISING_WEDGE, min_low * 0.95)
    if high_slope < 0 and low_slope < 0 and high_slope < low_slope:
        return ChartPattern.from_label(PatternLabel.FALLING_WEDGE, max_high * 1.05)
    return None


def _is_double(values: list[float]) -> bool:
    first, second = values[-2], values[-1]
    if first == 0:
        return False
    return abs(first - second) / first < DOUBLE_EXTREME_TOLERANCE


def detect_chart_patterns(
    candles: Sequence[Candle], lookback: int = 30, trend_span: int = 20
) -> list[ChartPattern]:
    """Classify the shape of the last ``lookback`` candles.

    Order of evaluation:
    1. one triangle/wedge label (first matching rule)
    2. horizontal channel when consolidating with parallel slopes
    3. double top, then double bottom
    4. trend continuation, only when nothing above matched

    Returns an empty list for fewer than ``MIN_PATTERN_CANDLES`` candles or a
    non-positive last close.
    """
    if len(candles) < MIN_PATTERN_CANDLES:
        return []

    current_price = candles[-1].close
    if current_price <= 0:
        return []

    recent = candles[-lookback:]
    highs = [c.high for c in recent]
    lows = [c.low for c in recent]
    max_high = max(highs)
    min_low = min(lows)

    trend_up = _trend_is_up([c.close for c in candles], trend_span)
    is_consolidating = (max_high - min_low) / current_price < CONSOLIDATION_RANGE

    high_slope = _slope(highs)
    low_slope = _slope(lows)

    patterns: list[ChartPattern] = []

    converging = _converging_pattern(high_slope, low_slope, trend_up, max_high, min_low)
    if converging is not None:
        patterns.append(converging)

    if is_consolidating and abs(high_slope - low_slope) < CHANNEL_SLOPE_TOLERANCE:
        patterns.append(
            ChartPattern.from_label(PatternLabel.HORIZONTAL_CHANNEL, current_price)
        )

    peaks = [p.price for p in find_peaks(recent)]
    if len(peaks) >= 2 and _is_double(peaks):
        patterns.append(ChartPattern.from_label(PatternLabel.DOUBLE_TOP, min_low * 0.97))

    valleys = [v.price for v in find_valleys(recent)]
    if len(valleys) >= 2 and _is_double(valleys):
        patterns.append(
            ChartPattern.from_label(PatternLabel.DOUBLE_BOTTOM, max_high * 1.03)
        )

    if not patterns:
        if trend_up:
            patterns.append(
                ChartPattern.from_label(PatternLabel.UPTREND_CONTINUATION, max_high * 1.02)
            )
        else:
            patterns.append(
                ChartPattern.from_label(PatternLabel.DOWNTREND_CONTINUATION, min_low * 0.98)
            )

    return patterns


def detect_patterns(
    candles: Sequence[Candle], lookback: int = 30, trend_span: int = 20
) -> PatternReport:
    """Run every detector over ``candles`` and bundle the results."""
    chart_patterns = detect_chart_patterns(candles, lookback, trend_span)
    return PatternReport(
        primary=chart_patterns[0] if chart_patterns else None,
        secondary=chart_patterns[1:],
        support=find_support_levels(candles),
        resistance=find_resistance_levels(candles),
        trendlines=detect_trendlines(candles),
        order_blocks=detect_order_blocks(candles),
        fair_value_gaps=detect_fair_value_gaps(candles),
    )
