"""Tests for environment-driven settings."""

from btcsignal.config import AppSettings, MarketDataSettings, RateLimitSettings, SignalSettings


class TestSettings:
    """Tests for defaults and env prefixes."""

    def test_defaults(self) -> None:
        settings = AppSettings()

        assert settings.rate_limit.limit == 30
        assert settings.rate_limit.window_ms == 60_000
        assert settings.signal.ema_fast == 9
        assert settings.signal.ema_slow == 21
        assert settings.indicators.ema_periods == [9, 21, 50, 100, 200]

    def test_env_prefix(self, monkeypatch) -> None:
        monkeypatch.setenv("MARKET_EXCHANGE_ID", "kraken")
        monkeypatch.setenv("RATELIMIT_LIMIT", "5")
        monkeypatch.setenv("SIGNAL_VOLUME_SPIKE_RATIO", "2.0")

        assert MarketDataSettings().exchange_id == "kraken"
        assert RateLimitSettings().limit == 5
        assert SignalSettings().volume_spike_ratio == 2.0

    def test_github_token_is_secret(self, app_settings) -> None:
        """The token never appears in repr output."""
        assert "test-token" not in repr(app_settings.access)
        assert app_settings.access.github_token.get_secret_value() == "test-token"
