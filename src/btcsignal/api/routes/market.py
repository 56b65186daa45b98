"""Free market-data endpoints: candles, indicators, levels, derivatives, health."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from btcsignal.api.serializers import to_jsonable
from btcsignal.indicators import key_levels, pivot_levels
from btcsignal.models import Candle
from btcsignal.signals.engine import compute_indicator_suite, latest_values
from btcsignal.signals.structure import find_resistance_levels, find_support_levels

router = APIRouter()

VALID_TIMEFRAMES = ("1m", "5m", "15m", "30m", "1h", "4h", "1d", "1w")


def resolve_query(
    request: Request, timeframe: str | None, limit: int | None
) -> tuple[str, int, JSONResponse | None]:
    """Apply defaults and validate ``timeframe`` / ``limit`` query params.

    Returns the resolved values and, when invalid, a 400 response to send.
    """
    market = request.app.state.settings.market
    timeframe = timeframe or market.default_timeframe
    limit = market.default_limit if limit is None else limit

    if timeframe not in VALID_TIMEFRAMES:
        return timeframe, limit, JSONResponse(
            content={
                "error": f"Invalid timeframe: {timeframe}",
                "valid": list(VALID_TIMEFRAMES),
            },
            status_code=400,
        )
    if limit < 1 or limit > market.max_limit:
        return timeframe, limit, JSONResponse(
            content={"error": f"limit must be between 1 and {market.max_limit}"},
            status_code=400,
        )
    return timeframe, limit, None


async def fetch_candles(request: Request, timeframe: str, limit: int) -> list[Candle]:
    client = request.app.state.market_client
    return await client.fetch_candles(client.settings.symbol, timeframe, limit)


@router.get("/health")
async def get_health(request: Request) -> JSONResponse:
    """Liveness check."""
    market = request.app.state.settings.market
    return JSONResponse(
        content={"status": "ok", "exchange": market.exchange_id, "symbol": market.symbol}
    )


@router.get("/candles")
async def get_candles(
    request: Request, timeframe: str | None = None, limit: int | None = None
) -> JSONResponse:
    """OHLCV candles, oldest first. Times are Unix seconds."""
    timeframe, limit, error = resolve_query(request, timeframe, limit)
    if error is not None:
        return error

    candles = await fetch_candles(request, timeframe, limit)
    return JSONResponse(
        content={
            "symbol": request.app.state.settings.market.symbol,
            "timeframe": timeframe,
            "available": bool(candles),
            "candles": to_jsonable(candles),
        }
    )


@router.get("/indicators")
async def get_indicators(
    request: Request, timeframe: str | None = None, limit: int | None = None
) -> JSONResponse:
    """Full chart-indicator suite plus the latest value of each line."""
    timeframe, limit, error = resolve_query(request, timeframe, limit)
    if error is not None:
        return error

    candles = await fetch_candles(request, timeframe, limit)
    suite = compute_indicator_suite(candles, request.app.state.settings.indicators)
    return JSONResponse(
        content={
            "symbol": request.app.state.settings.market.symbol,
            "timeframe": timeframe,
            "available": bool(candles),
            "indicators": to_jsonable(suite),
            "latest": to_jsonable(latest_values(suite)),
        }
    )


@router.get("/levels")
async def get_levels(
    request: Request, timeframe: str | None = None, limit: int | None = None
) -> JSONResponse:
    """Pivot points, day/week extremes and swing support/resistance."""
    timeframe, limit, error = resolve_query(request, timeframe, limit)
    if error is not None:
        return error

    candles = await fetch_candles(request, timeframe, limit)
    lookback = request.app.state.settings.indicators.pivot_lookback
    return JSONResponse(
        content=to_jsonable(
            {
                "timeframe": timeframe,
                "available": bool(candles),
                "price": candles[-1].close if candles else None,
                "pivots": pivot_levels(candles, lookback),
                "key_levels": key_levels(candles),
                "support": find_support_levels(candles),
                "resistance": find_resistance_levels(candles),
            }
        )
    )


@router.get("/derivatives")
async def get_derivatives(request: Request) -> JSONResponse:
    """Perp ticker, funding rate and open interest. Unavailable fields are null."""
    snapshot = await request.app.state.market_client.fetch_derivatives()
    return JSONResponse(content=to_jsonable(snapshot))
