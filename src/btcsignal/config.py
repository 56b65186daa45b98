"""Configuration system using pydantic-settings with environment variable loading."""

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class MarketDataSettings(BaseSettings):
    """Exchange connection used for candles, tickers and derivatives data."""

    model_config = SettingsConfigDict(env_prefix="MARKET_")

    exchange_id: str = "binance"
    symbol: str = "BTC/USDT"
    derivatives_symbol: str = "BTC/USDT:USDT"
    default_timeframe: str = "1h"
    default_limit: int = 200
    max_limit: int = 1000
    request_timeout_seconds: float = 10.0


class IndicatorSettings(BaseSettings):
    """Default periods for the indicator snapshot."""

    model_config = SettingsConfigDict(env_prefix="INDICATOR_")

    ema_periods: list[int] = [9, 21, 50, 100, 200]
    rsi_period: int = 14
    bollinger_period: int = 20
    bollinger_std_dev: float = 2.0
    atr_period: int = 14
    supertrend_period: int = 10
    supertrend_multiplier: float = 3.0
    macd_fast: int = 12
    macd_slow: int = 26
    macd_signal: int = 9
    stoch_rsi_period: int = 14
    stoch_k_smooth: int = 3
    stoch_d_smooth: int = 3
    ichimoku_tenkan: int = 9
    ichimoku_kijun: int = 26
    ichimoku_displacement: int = 26
    pivot_lookback: int = 24


class SignalSettings(BaseSettings):
    """Confluence scorer and pattern detector parameters.

    The thresholds and deltas are the published scoring contract; changing
    them changes every score the API has ever returned.
    """

    model_config = SettingsConfigDict(env_prefix="SIGNAL_")

    ema_fast: int = 9
    ema_slow: int = 21
    rsi_period: int = 14
    volume_period: int = 20
    volume_spike_ratio: float = 1.5
    pattern_lookback: int = 30
    pattern_trend_ema: int = 20


class RateLimitSettings(BaseSettings):
    """Fixed-window limiter for premium endpoints."""

    model_config = SettingsConfigDict(env_prefix="RATELIMIT_")

    limit: int = 30  # requests per window
    window_ms: int = 60_000
    retry_after_seconds: int = 60


class AccessSettings(BaseSettings):
    """Remote access-record store (GitHub contents API)."""

    model_config = SettingsConfigDict(env_prefix="ACCESS_")

    github_token: SecretStr = SecretStr("")
    github_repo: str = ""  # "owner/name"
    records_path: str = "data/access-records.json"
    request_timeout_seconds: float = 10.0
    cache_ttl_seconds: float = 30.0


class ServerSettings(BaseSettings):
    """HTTP server configuration."""

    model_config = SettingsConfigDict(env_prefix="SERVER_")

    host: str = "0.0.0.0"
    port: int = 8080
    cors_origins: list[str] = ["*"]


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    market: MarketDataSettings = MarketDataSettings()
    indicators: IndicatorSettings = IndicatorSettings()
    signal: SignalSettings = SignalSettings()
    rate_limit: RateLimitSettings = RateLimitSettings()
    access: AccessSettings = AccessSettings()
    server: ServerSettings = ServerSettings()
