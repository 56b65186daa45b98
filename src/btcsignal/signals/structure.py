"""Market-structure detectors: swing levels, trendlines, order blocks, FVGs."""

from collections.abc import Sequence

from btcsignal.models import Candle
from btcsignal.signals.models import (
    FairValueGap,
    OrderBlock,
    PriceLevel,
    SwingPoint,
    Trendline,
)

LEVEL_TOLERANCE = 0.005  # 0.5%
MAX_LEVELS = 3
MAX_RECENT = 5
ORDER_BLOCK_STRENGTH = 1.5


def find_peaks(candles: Sequence[Candle]) -> list[SwingPoint]:
    """Highs strictly above the two highs on each side."""
    peaks = []
    for i in range(2, len(candles) - 2):
        high = candles[i].high
        neighbours = (candles[i - 2], candles[i - 1], candles[i + 1], candles[i + 2])
        if all(high > c.high for c in neighbours):
            peaks.append(SwingPoint(index=i, price=high, time=candles[i].time))
    return peaks


def find_valleys(candles: Sequence[Candle]) -> list[SwingPoint]:
    """Lows strictly below the two lows on each side."""
    valleys = []
    for i in range(2, len(candles) - 2):
        low = candles[i].low
        neighbours = (candles[i - 2], candles[i - 1], candles[i + 1], candles[i + 2])
        if all(low < c.low for c in neighbours):
            valleys.append(SwingPoint(index=i, price=low, time=candles[i].time))
    return valleys


def _count_touches(prices: list[float], level: float) -> int:
    return sum(1 for p in prices if abs(p - level) / level < LEVEL_TOLERANCE)


def find_support_levels(candles: Sequence[Candle]) -> list[PriceLevel]:
    """Swing lows touched at least twice, most-touched first (top 3)."""
    lows = [c.low for c in candles]
    levels = []
    for valley in find_valleys(candles):
        if valley.price <= 0:
            continue
        touches = _count_touches(lows, valley.price)
        if touches >= 2:
            levels.append(PriceLevel(price=valley.price, touches=touches, kind="support"))
    levels.sort(key=lambda level: level.touches, reverse=True)
    return levels[:MAX_LEVELS]


def find_resistance_levels(candles: Sequence[Candle]) -> list[PriceLevel]:
    """Swing highs touched at least twice, most-touched first (top 3)."""
    highs = [c.high for c in candles]
    levels = []
    for peak in find_peaks(candles):
        if peak.price <= 0:
            continue
        touches = _count_touches(highs, peak.price)
        if touches >= 2:
            levels.append(PriceLevel(price=peak.price, touches=touches, kind="resistance"))
    levels.sort(key=lambda level: level.touches, reverse=True)
    return levels[:MAX_LEVELS]


def detect_trendlines(candles: Sequence[Candle]) -> list[Trendline]:
    """Descending line over falling swing highs, ascending over rising swing lows."""
    trendlines = []

    swing_highs = find_peaks(candles)
    if len(swing_highs) >= 2 and swing_highs[-1].price < swing_highs[0].price:
        trendlines.append(
            Trendline(
                kind="descending",
                start=swing_highs[0],
                end=swing_highs[-1],
                touches=len(swing_highs),
            )
        )

    swing_lows = find_valleys(candles)
    if len(swing_lows) >= 2 and swing_lows[-1].price > swing_lows[0].price:
        trendlines.append(
            Trendline(
                kind="ascending",
                start=swing_lows[0],
                end=swing_lows[-1],
                touches=len(swing_lows),
            )
        )

    return trendlines


def detect_order_blocks(candles: Sequence[Candle]) -> list[OrderBlock]:
    """Opposing candle followed (two bars later) by a 1.5x-bodied break of its range."""
    blocks = []
    for i in range(1, len(candles) - 1):
        prev = candles[i - 1]
        nxt = candles[i + 1]

        if (
            prev.close < prev.open
            and nxt.close > nxt.open
            and nxt.close > prev.high
            and (nxt.close - nxt.open) > (prev.open - prev.close) * ORDER_BLOCK_STRENGTH
        ):
            blocks.append(
                OrderBlock("bullish", high=prev.high, low=prev.low, time=prev.time, index=i - 1)
            )

        if (
            prev.close > prev.open
            and nxt.close < nxt.open
            and nxt.close < prev.low
            and (nxt.open - nxt.close) > (prev.close - prev.open) * ORDER_BLOCK_STRENGTH
        ):
            blocks.append(
                OrderBlock("bearish", high=prev.high, low=prev.low, time=prev.time, index=i - 1)
            )

    return blocks[-MAX_RECENT:]


def detect_fair_value_gaps(candles: Sequence[Candle]) -> list[FairValueGap]:
    """Unfilled three-candle gaps, most recent five.

    A bullish gap is filled once a later low trades back to its bottom; a
    bearish gap once a later high trades back to its top.
    """
    gaps = []
    for i in range(2, len(candles)):
        first = candles[i - 2]
        third = candles[i]
        middle = candles[i - 1]

        if third.low > first.high:
            gaps.append(
                FairValueGap("bullish", top=third.low, bottom=first.high, time=middle.time, index=i - 1)
            )
        if third.high < first.low:
            gaps.append(
                FairValueGap("bearish", top=first.low, bottom=third.high, time=middle.time, index=i - 1)
            )

    unfilled = []
    for gap in gaps:
        later = candles[gap.index + 2 :]
        if gap.kind == "bullish":
            filled = any(c.low <= gap.bottom for c in later)
        else:
            filled = any(c.high >= gap.top for c in later)
        if not filled:
            unfilled.append(gap)

    return unfilled[-MAX_RECENT:]
