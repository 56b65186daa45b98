"""Tests for the confluence scorer.

Scores start at 50 and move by fixed deltas; see btcsignal.signals.confluence.
"""

import pytest

from btcsignal.signals.confluence import (
    compute_confluence,
    direction_for_score,
    last_volume_ratio,
    score_confluence,
)
from btcsignal.signals.models import Direction


def _factor(score, name):
    return next(f for f in score.factors if f.name == name)


class TestDirection:
    """Tests for score-to-direction thresholds."""

    @pytest.mark.parametrize(
        "score,expected",
        [
            (100, Direction.BULLISH),
            (65, Direction.BULLISH),
            (64, Direction.NEUTRAL),
            (50, Direction.NEUTRAL),
            (36, Direction.NEUTRAL),
            (35, Direction.BEARISH),
            (0, Direction.BEARISH),
        ],
    )
    def test_thresholds(self, score: int, expected: Direction) -> None:
        """>= 65 bullish, <= 35 bearish, otherwise neutral."""
        assert direction_for_score(score) is expected


class TestScoreConfluence:
    """Tests for the additive scoring rules."""

    def test_all_bullish(self) -> None:
        """50 + 15 + 10 + 10 + 5 = 90."""
        result = score_confluence(
            price=110, ema_fast=105, ema_slow=100, rsi_value=25,
            macd_histogram=3.0, volume_ratio=2.0,
        )
        assert result.score == 90
        assert result.direction is Direction.BULLISH

    def test_all_bearish(self) -> None:
        """50 - 15 - 10 - 10 = 15; low volume adds nothing."""
        result = score_confluence(
            price=90, ema_fast=95, ema_slow=100, rsi_value=80,
            macd_histogram=-3.0, volume_ratio=0.5,
        )
        assert result.score == 15
        assert result.direction is Direction.BEARISH

    def test_extreme_inputs_stay_bounded(self) -> None:
        """RSI 0 and a huge negative histogram still produce a 0-100 integer."""
        result = score_confluence(
            price=100, ema_fast=110, ema_slow=120, rsi_value=0.0,
            macd_histogram=-1e9, volume_ratio=1.0,
        )
        assert isinstance(result.score, int)
        assert 0 <= result.score <= 100
        assert result.score == 35

    def test_ema_alignment_requires_price_above_fast_above_slow(self) -> None:
        """Price between the EMAs is mixed and scores nothing."""
        result = score_confluence(
            price=102, ema_fast=105, ema_slow=100, rsi_value=None,
            macd_histogram=None, volume_ratio=None,
        )
        factor = _factor(result, "ema_alignment")
        assert factor.satisfied is None
        assert factor.weight == 0
        assert result.score == 50

    @pytest.mark.parametrize(
        "rsi_value,delta",
        [(29.9, 10), (30.0, -5), (50.0, -5), (50.1, 5), (70.0, 5), (70.1, -10)],
    )
    def test_rsi_boundaries(self, rsi_value: float, delta: int) -> None:
        """< 30 oversold, > 70 overbought, > 50 bias up, anything else bias down."""
        result = score_confluence(
            price=None, ema_fast=None, ema_slow=None, rsi_value=rsi_value,
            macd_histogram=None, volume_ratio=None,
        )
        assert result.score == 50 + delta

    def test_zero_histogram_is_bearish(self) -> None:
        """Only a strictly positive histogram counts as bullish."""
        result = score_confluence(
            price=None, ema_fast=None, ema_slow=None, rsi_value=None,
            macd_histogram=0.0, volume_ratio=None,
        )
        assert result.score == 40

    def test_volume_spike_threshold(self) -> None:
        """Exactly 1.5x is not a spike."""
        at = score_confluence(None, None, None, None, None, volume_ratio=1.5)
        above = score_confluence(None, None, None, None, None, volume_ratio=1.51)
        assert at.score == 50
        assert above.score == 55

    def test_missing_inputs_are_unknown(self) -> None:
        """Every factor is reported, unknown ones with zero weight."""
        result = score_confluence(None, None, None, None, None, None)

        assert result.score == 50
        assert result.direction is Direction.NEUTRAL
        assert [f.name for f in result.factors] == ["ema_alignment", "rsi", "macd", "volume"]
        assert all(f.satisfied is None and f.weight == 0 for f in result.factors)


class TestComputeConfluence:
    """Tests for scoring straight from candles."""

    def test_empty_candles_are_neutral(self) -> None:
        """No data scores exactly 50."""
        result = compute_confluence([])
        assert result.score == 50
        assert result.direction is Direction.NEUTRAL

    def test_rising_series_has_bullish_alignment(self, make_candles) -> None:
        """Steady advance puts price above EMA9 above EMA21."""
        candles = make_candles([100.0 + i for i in range(60)])
        result = compute_confluence(candles)

        assert _factor(result, "ema_alignment").satisfied is True
        assert _factor(result, "rsi").note == "overbought"
        assert 0 <= result.score <= 100

    def test_score_bounded_on_real_shape(self, zigzag_candles) -> None:
        """Score is an integer in [0, 100]."""
        result = compute_confluence(zigzag_candles)
        assert isinstance(result.score, int)
        assert 0 <= result.score <= 100


class TestLastVolumeRatio:
    """Tests for the volume factor input."""

    def test_includes_last_bar_in_average(self, make_candles) -> None:
        """21 over mean(19 x 1, 21) = 10.5."""
        candles = make_candles([1.0] * 20, volumes=[1.0] * 19 + [21.0])
        assert last_volume_ratio(candles, 20) == pytest.approx(10.5)

    def test_short_history_is_none(self, make_candles) -> None:
        """Fewer than ``period`` candles has no ratio."""
        assert last_volume_ratio(make_candles([1.0] * 5), 20) is None
