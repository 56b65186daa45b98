"""Exchange market-data access (candles, tickers, derivatives)."""

from btcsignal.market_data.client import MarketDataClient, candles_from_ohlcv
from btcsignal.market_data.models import DerivativesSnapshot, TickerSummary

__all__ = [
    "DerivativesSnapshot",
    "MarketDataClient",
    "TickerSummary",
    "candles_from_ohlcv",
]
