"""Tests for swing points, support/resistance, trendlines, order blocks and FVGs."""

from btcsignal.models import Candle
from btcsignal.signals.structure import (
    detect_fair_value_gaps,
    detect_order_blocks,
    detect_trendlines,
    find_peaks,
    find_resistance_levels,
    find_support_levels,
    find_valleys,
)


def _bars(rows: list[tuple[float, float, float, float]]) -> list[Candle]:
    """Candles from (open, high, low, close) rows."""
    return [
        Candle(time=i * 60, open=o, high=h, low=lo, close=c, volume=1)
        for i, (o, h, lo, c) in enumerate(rows)
    ]


def _from_highs_lows(highs: list[float], lows: list[float]) -> list[Candle]:
    return _bars([((h + lo) / 2, h, lo, (h + lo) / 2) for h, lo in zip(highs, lows)])


class TestSwingPoints:
    """Tests for find_peaks / find_valleys."""

    def test_peak_needs_two_lower_bars_each_side(self) -> None:
        """Only the strict local maximum qualifies."""
        candles = _from_highs_lows([1, 2, 5, 2, 1], [0, 0, 0, 0, 0])
        peaks = find_peaks(candles)

        assert [p.index for p in peaks] == [2]
        assert peaks[0].price == 5
        assert peaks[0].time == candles[2].time

    def test_equal_neighbour_is_not_a_peak(self) -> None:
        """Plateaus are not swing highs."""
        candles = _from_highs_lows([1, 5, 5, 2, 1], [0] * 5)
        assert find_peaks(candles) == []

    def test_valley(self) -> None:
        """Strict local minimum of lows."""
        candles = _from_highs_lows([10] * 5, [5, 4, 1, 4, 5])
        assert [v.index for v in find_valleys(candles)] == [2]


class TestSupportResistance:
    """Tests for touch-counted levels."""

    def test_support_touched_twice(self) -> None:
        """Two swing lows within 0.5% make a support level."""
        lows = [105, 104, 100, 104, 105, 104, 100.2, 104, 105]
        candles = _from_highs_lows([110] * 9, lows)
        levels = find_support_levels(candles)

        assert levels
        assert levels[0].kind == "support"
        assert levels[0].touches == 2

    def test_single_touch_is_not_a_level(self) -> None:
        """A lone swing low is ignored."""
        lows = [105, 104, 100, 104, 105, 104, 103, 104, 105]
        candles = _from_highs_lows([110] * 9, lows)
        assert find_support_levels(candles) == []

    def test_resistance_capped_at_three(self) -> None:
        """At most three levels, most touched first."""
        highs = []
        for _ in range(5):
            highs += [100, 101, 110, 101, 100]
        candles = _from_highs_lows(highs, [90] * len(highs))
        levels = find_resistance_levels(candles)

        assert len(levels) <= 3
        assert all(level.kind == "resistance" for level in levels)
        assert levels[0].touches == 5


class TestTrendlines:
    """Tests for trendline detection."""

    def test_descending_over_lower_highs(self) -> None:
        """Falling swing highs give a descending line through first and last."""
        highs = [100, 101, 120, 101, 100, 101, 115, 101, 100, 101, 110, 101, 100]
        candles = _from_highs_lows(highs, [90] * len(highs))
        lines = detect_trendlines(candles)

        assert len(lines) == 1
        assert lines[0].kind == "descending"
        assert lines[0].start.price == 120
        assert lines[0].end.price == 110
        assert lines[0].touches == 3


class TestOrderBlocks:
    """Tests for order-block detection."""

    def test_bullish_order_block(self) -> None:
        """Down candle, then a strong up close above its high two bars later."""
        candles = _bars(
            [
                (100, 101, 97, 98),  # bearish, body 2
                (98, 99, 97, 98.5),
                (100, 106, 99, 105),  # bullish, body 5 > 1.5 * 2, close > 101
            ]
        )
        blocks = detect_order_blocks(candles)

        assert len(blocks) == 1
        assert blocks[0].kind == "bullish"
        assert (blocks[0].high, blocks[0].low, blocks[0].index) == (101, 97, 0)

    def test_weak_move_is_ignored(self) -> None:
        """Displacement body must exceed 1.5x the block body."""
        candles = _bars([(100, 101, 97, 98), (98, 99, 97, 98.5), (99, 102.5, 98, 101.5)])
        assert detect_order_blocks(candles) == []


class TestFairValueGaps:
    """Tests for fair-value-gap detection."""

    def test_unfilled_bullish_gap(self) -> None:
        """Third candle's low above first candle's high."""
        candles = _bars([(98, 100, 97, 99), (99, 104, 99, 103), (103, 106, 102, 105)])
        gaps = detect_fair_value_gaps(candles)

        assert len(gaps) == 1
        assert gaps[0].kind == "bullish"
        assert (gaps[0].top, gaps[0].bottom) == (102, 100)
        assert gaps[0].time == candles[1].time

    def test_filled_gap_is_dropped(self) -> None:
        """A later low back at the gap bottom fills it."""
        candles = _bars(
            [(98, 100, 97, 99), (99, 104, 99, 103), (103, 106, 102, 105), (105, 105, 99.5, 100)]
        )
        assert [g for g in detect_fair_value_gaps(candles) if g.kind == "bullish"] == []

    def test_bearish_gap(self) -> None:
        """Third candle's high below first candle's low."""
        candles = _bars([(105, 106, 104, 104.5), (104, 104, 99, 100), (100, 102, 98, 99)])
        gaps = detect_fair_value_gaps(candles)

        assert [g.kind for g in gaps] == ["bearish"]
        assert (gaps[0].top, gaps[0].bottom) == (104, 102)
