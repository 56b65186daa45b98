"""Tests for VWAP, OBV and volume averages."""

import pytest

from btcsignal.indicators import obv, volume_ratio, volume_sma, vwap
from btcsignal.models import Candle


class TestVwap:
    """Tests for cumulative VWAP."""

    def test_single_candle_is_typical_price(self) -> None:
        """(H + L + C) / 3 for one candle."""
        candle = Candle(time=0, open=100, high=120, low=90, close=105, volume=3)
        result = vwap([candle])
        assert result[0].value == pytest.approx((120 + 90 + 105) / 3)

    def test_volume_weighting(self) -> None:
        """Heavier candles pull VWAP toward their typical price."""
        candles = [
            Candle(time=0, open=10, high=10, low=10, close=10, volume=1),
            Candle(time=60, open=20, high=20, low=20, close=20, volume=3),
        ]
        assert vwap(candles)[-1].value == pytest.approx(17.5)

    def test_zero_volume_prefix_skipped(self) -> None:
        """No VWAP exists until some volume has traded."""
        candles = [
            Candle(time=0, open=10, high=10, low=10, close=10, volume=0),
            Candle(time=60, open=10, high=12, low=9, close=11, volume=0),
            Candle(time=120, open=11, high=11, low=11, close=11, volume=5),
        ]
        result = vwap(candles)

        assert [p.time for p in result] == [120]
        assert result[0].value == pytest.approx(11.0)

    def test_within_price_range(self, zigzag_candles) -> None:
        """VWAP stays between the lowest low and highest high seen so far."""
        low = min(c.low for c in zigzag_candles)
        high = max(c.high for c in zigzag_candles)
        assert all(low <= p.value <= high for p in vwap(zigzag_candles))

    def test_empty(self) -> None:
        """No candles, no points."""
        assert vwap([]) == []


class TestObv:
    """Tests for On-Balance Volume."""

    def test_accumulates_by_close_direction(self, make_candles) -> None:
        """Up closes add volume, down closes subtract, flat closes hold."""
        candles = make_candles([10.0, 11.0, 10.5, 10.5], volumes=[5, 2, 3, 4])
        assert [p.value for p in obv(candles)] == [5, 7, 4, 4]


class TestVolumeAverages:
    """Tests for volume SMA and ratio."""

    def test_volume_sma(self, make_candles) -> None:
        """SMA over volume, not price."""
        candles = make_candles([1.0, 1.0, 1.0], volumes=[10, 20, 30])
        assert [p.value for p in volume_sma(candles, 3)] == [20]

    def test_ratio_includes_current_bar(self, make_candles) -> None:
        """Last volume 21 over mean of (19 x 1, 21) = 2."""
        candles = make_candles([1.0] * 20, volumes=[1.0] * 19 + [21.0])
        result = volume_ratio(candles, 20)

        assert len(result) == 1
        assert result[0].value == pytest.approx(10.5)
