"""Exchange market-data client via ccxt async.

Wraps a ccxt.async_support exchange (Binance by default) for OHLCV candles,
24h tickers and perpetual-swap derivatives data. Every upstream call is
bounded by a timeout; public fetch methods surface failures as empty/None
results and a warning log instead of raising into the HTTP layer.
"""

import asyncio
from collections.abc import Iterable
from typing import Any

import ccxt.async_support as ccxt_async

from btcsignal.config import MarketDataSettings
from btcsignal.exceptions import MarketDataUnavailable
from btcsignal.logging import get_logger
from btcsignal.market_data.models import DerivativesSnapshot, TickerSummary
from btcsignal.models import Candle

logger = get_logger(__name__)


def _to_float(value: Any) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _ms_to_seconds(value: Any) -> int | None:
    if value is None:
        return None
    try:
        return int(value) // 1000
    except (TypeError, ValueError):
        return None


def _ticker_summary(symbol: str, ticker: dict) -> TickerSummary:
    return TickerSummary(
        symbol=symbol,
        price=_to_float(ticker.get("last")),
        change_24h_pct=_to_float(ticker.get("percentage")),
        high_24h=_to_float(ticker.get("high")),
        low_24h=_to_float(ticker.get("low")),
        volume_24h=_to_float(ticker.get("quoteVolume")),
    )


def candles_from_ohlcv(rows: Iterable[list]) -> list[Candle]:
    """Convert ccxt OHLCV rows ``[ms, o, h, l, c, v]`` into ascending unique Candles.

    Rows with missing fields are dropped. When the exchange repeats a
    timestamp (the still-open candle), the last row wins.
    """
    by_time: dict[int, Candle] = {}
    for row in rows:
        if len(row) < 6 or any(v is None for v in row[:6]):
            continue
        time = int(row[0]) // 1000
        by_time[time] = Candle(
            time=time,
            open=float(row[1]),
            high=float(row[2]),
            low=float(row[3]),
            close=float(row[4]),
            volume=float(row[5]),
        )
    return [by_time[t] for t in sorted(by_time)]


class MarketDataClient:
    """Read-only exchange client used by the API routes and the analyzer."""

    def __init__(self, settings: MarketDataSettings) -> None:
        self._settings = settings
        exchange_cls = getattr(ccxt_async, settings.exchange_id)
        self._exchange = exchange_cls(
            {
                "enableRateLimit": True,
                "timeout": int(settings.request_timeout_seconds * 1000),
            }
        )

    @property
    def exchange(self) -> ccxt_async.Exchange:
        """Access the underlying ccxt exchange instance."""
        return self._exchange

    @property
    def settings(self) -> MarketDataSettings:
        return self._settings

    async def connect(self) -> None:
        """Load markets up front. A failure here is logged; ccxt retries lazily."""
        logger.info("connecting_to_exchange", exchange=self._settings.exchange_id)
        try:
            markets = await self._call("load_markets")
        except MarketDataUnavailable as e:
            logger.warning(
                "exchange_markets_unavailable",
                exchange=self._settings.exchange_id,
                error=str(e),
            )
            return
        logger.info(
            "exchange_connected",
            exchange=self._settings.exchange_id,
            market_count=len(markets or {}),
        )

    async def close(self) -> None:
        """Clean up ccxt async resources. Must be called to avoid leaking the HTTP session."""
        await self._exchange.close()
        logger.info("exchange_connection_closed", exchange=self._settings.exchange_id)

    async def _call(self, method: str, *args: Any, **kwargs: Any) -> Any:
        """Invoke a ccxt method under the configured timeout.

        Raises:
            MarketDataUnavailable: on timeout or any ccxt error.
        """
        fn = getattr(self._exchange, method)
        try:
            return await asyncio.wait_for(
                fn(*args, **kwargs), timeout=self._settings.request_timeout_seconds
            )
        except asyncio.TimeoutError as e:
            raise MarketDataUnavailable(f"{method} timed out") from e
        except ccxt_async.BaseError as e:
            raise MarketDataUnavailable(f"{method} failed: {e}") from e

    async def fetch_candles(
        self,
        symbol: str | None = None,
        timeframe: str | None = None,
        limit: int | None = None,
    ) -> list[Candle]:
        """Fetch the most recent candles, oldest first. Empty list on failure."""
        symbol = symbol or self._settings.symbol
        timeframe = timeframe or self._settings.default_timeframe
        limit = min(limit or self._settings.default_limit, self._settings.max_limit)

        try:
            rows = await self._call("fetch_ohlcv", symbol, timeframe, limit=limit)
        except MarketDataUnavailable as e:
            logger.warning(
                "candle_fetch_failed", symbol=symbol, timeframe=timeframe, error=str(e)
            )
            return []

        candles = candles_from_ohlcv(rows or [])
        logger.debug(
            "candles_fetched", symbol=symbol, timeframe=timeframe, count=len(candles)
        )
        return candles

    async def fetch_ticker_summary(self, symbol: str | None = None) -> TickerSummary | None:
        """Fetch the 24h ticker. None on failure."""
        symbol = symbol or self._settings.symbol
        try:
            ticker = await self._call("fetch_ticker", symbol)
        except MarketDataUnavailable as e:
            logger.warning("ticker_fetch_failed", symbol=symbol, error=str(e))
            return None
        return _ticker_summary(symbol, ticker)

    async def fetch_derivatives(self, symbol: str | None = None) -> DerivativesSnapshot:
        """Fetch the perp ticker, funding rate and open interest concurrently.

        The three calls are independent; one failing leaves its fields None
        while the others still populate the snapshot.
        """
        symbol = symbol or self._settings.derivatives_symbol
        ticker, funding, open_interest = await asyncio.gather(
            self._call("fetch_ticker", symbol),
            self._call("fetch_funding_rate", symbol),
            self._call("fetch_open_interest", symbol),
            return_exceptions=True,
        )

        snapshot = DerivativesSnapshot(symbol=symbol)

        if isinstance(ticker, MarketDataUnavailable):
            logger.warning("perp_ticker_fetch_failed", symbol=symbol, error=str(ticker))
        elif isinstance(ticker, BaseException):
            raise ticker
        else:
            snapshot.ticker = _ticker_summary(symbol, ticker)

        if isinstance(funding, MarketDataUnavailable):
            logger.warning("funding_rate_fetch_failed", symbol=symbol, error=str(funding))
        elif isinstance(funding, BaseException):
            raise funding
        else:
            snapshot.funding_rate = _to_float(funding.get("fundingRate"))
            snapshot.mark_price = _to_float(funding.get("markPrice"))
            snapshot.index_price = _to_float(funding.get("indexPrice"))
            snapshot.next_funding_time = _ms_to_seconds(
                funding.get("nextFundingTimestamp") or funding.get("fundingTimestamp")
            )

        if isinstance(open_interest, MarketDataUnavailable):
            logger.warning(
                "open_interest_fetch_failed", symbol=symbol, error=str(open_interest)
            )
        elif isinstance(open_interest, BaseException):
            raise open_interest
        else:
            snapshot.open_interest = _to_float(open_interest.get("openInterestAmount"))
            snapshot.open_interest_value = _to_float(
                open_interest.get("openInterestValue")
            )

        return snapshot
