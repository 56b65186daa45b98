"""Tests for the indicator suite and MarketAnalyzer.

The market-data client is a mock; no exchange calls are made.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from btcsignal.config import IndicatorSettings, MarketDataSettings, SignalSettings
from btcsignal.indicators.momentum import stoch_rsi
from btcsignal.signals.engine import MarketAnalyzer, compute_indicator_suite, latest_values


@pytest.fixture
def mock_client():
    """MarketDataClient stand-in with real settings and an AsyncMock fetch."""
    client = MagicMock()
    client.settings = MarketDataSettings()
    client.fetch_candles = AsyncMock(return_value=[])
    return client


@pytest.fixture
def analyzer(mock_client) -> MarketAnalyzer:
    return MarketAnalyzer(mock_client, IndicatorSettings(), SignalSettings())


class TestIndicatorSuite:
    """Tests for compute_indicator_suite / latest_values."""

    def test_configured_ema_periods(self, zigzag_candles) -> None:
        """One EMA line per configured period; 200 is too long for 120 candles."""
        suite = compute_indicator_suite(zigzag_candles, IndicatorSettings())

        assert set(suite.ema) == {9, 21, 50, 100, 200}
        assert len(suite.ema[9]) == len(zigzag_candles) - 8
        assert suite.ema[200] == []

    def test_latest_values_null_for_empty_lines(self, zigzag_candles) -> None:
        """Missing lines read None; populated lines read their last value."""
        suite = compute_indicator_suite(zigzag_candles, IndicatorSettings())
        latest = latest_values(suite)

        assert latest["ema_200"] is None
        assert latest["ema_9"] == suite.ema[9][-1].value
        assert latest["rsi"] == suite.rsi[-1].value
        assert latest["supertrend_direction"] in ("up", "down")

    def test_stoch_rsi_window_from_settings(self, zigzag_candles) -> None:
        """stoch_rsi_period sets the stochastic window over the RSI line."""
        settings = IndicatorSettings(stoch_rsi_period=5)
        suite = compute_indicator_suite(zigzag_candles, settings)

        assert suite.stoch_rsi == stoch_rsi(zigzag_candles, 14, 5, 3, 3)
        assert len(suite.stoch_rsi.k) > len(
            compute_indicator_suite(zigzag_candles, IndicatorSettings()).stoch_rsi.k
        )
        assert "stoch_period" not in IndicatorSettings.model_fields

    def test_empty_candles(self) -> None:
        """Every line empty, every latest value None."""
        latest = latest_values(compute_indicator_suite([], IndicatorSettings()))
        assert all(value is None for value in latest.values())


class TestMarketAnalyzer:
    """Tests for the full analysis pipeline."""

    @pytest.mark.asyncio
    async def test_analyze_populates_snapshot(self, analyzer, mock_client, zigzag_candles) -> None:
        """Available data yields score, patterns and levels."""
        mock_client.fetch_candles.return_value = zigzag_candles

        analysis = await analyzer.analyze(timeframe="4h", limit=120)

        mock_client.fetch_candles.assert_awaited_once_with("BTC/USDT", "4h", 120)
        assert analysis.available is True
        assert analysis.price == zigzag_candles[-1].close
        assert analysis.candle_count == 120
        assert 0 <= analysis.confluence.score <= 100
        assert analysis.patterns.primary is not None
        assert analysis.pivots is not None
        assert analysis.key_levels is not None

    @pytest.mark.asyncio
    async def test_analyze_without_candles(self, analyzer, mock_client) -> None:
        """An empty fetch is flagged unavailable instead of raising."""
        analysis = await analyzer.analyze()

        assert analysis.available is False
        assert analysis.symbol == "BTC/USDT"
        assert analysis.timeframe == "1h"
        assert analysis.confluence is None
        assert analysis.latest == {}

    def test_score_uses_signal_settings(self, mock_client, make_candles) -> None:
        """Volume spike ratio comes from SignalSettings."""
        candles = make_candles([100.0] * 30, volumes=[1.0] * 29 + [3.0])
        strict = MarketAnalyzer(mock_client, IndicatorSettings(), SignalSettings(volume_spike_ratio=5.0))
        loose = MarketAnalyzer(mock_client, IndicatorSettings(), SignalSettings(volume_spike_ratio=1.2))

        assert loose.score(candles).score - strict.score(candles).score == 5
