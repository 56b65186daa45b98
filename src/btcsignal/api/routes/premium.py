"""Premium endpoints: confluence signal, chart patterns, full analysis, alerts.

Every handler runs the premium gate first and returns its rejection as-is.
"""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from btcsignal.api.auth import premium_gate
from btcsignal.api.routes.market import fetch_candles, resolve_query
from btcsignal.api.serializers import to_jsonable
from btcsignal.signals.alerts import DEFAULT_ALERTS, alert_stats, check_alerts, market_metrics


router = APIRouter()


@router.get("/signal")
async def get_signal(
    request: Request, timeframe: str | None = None, limit: int | None = None
) -> JSONResponse:
    """Confluence score, direction and the factors behind it."""
    auth, rejection = await premium_gate(request)
    if rejection is not None:
        return rejection

    timeframe, limit, error = resolve_query(request, timeframe, limit)
    if error is not None:
        return error

    candles = await fetch_candles(request, timeframe, limit)
    confluence = request.app.state.analyzer.score(candles)
    return JSONResponse(
        content={
            "timeframe": timeframe,
            "available": bool(candles),
            "price": candles[-1].close if candles else None,
            "tier": auth.tier,
            **to_jsonable(confluence),
        }
    )


@router.get("/patterns")
async def get_patterns(
    request: Request, timeframe: str | None = None, limit: int | None = None
) -> JSONResponse:
    """Chart patterns and market structure for the recent window."""
    auth, rejection = await premium_gate(request)
    if rejection is not None:
        return rejection

    timeframe, limit, error = resolve_query(request, timeframe, limit)
    if error is not None:
        return error

    candles = await fetch_candles(request, timeframe, limit)
    report = request.app.state.analyzer.patterns(candles)
    return JSONResponse(
        content={
            "timeframe": timeframe,
            "available": bool(candles),
            "tier": auth.tier,
            **to_jsonable(report),
        }
    )


@router.get("/analysis")
async def get_analysis(
    request: Request, timeframe: str | None = None, limit: int | None = None
) -> JSONResponse:
    """Everything at once: latest indicators, score, patterns and levels."""
    auth, rejection = await premium_gate(request)
    if rejection is not None:
        return rejection

    timeframe, limit, error = resolve_query(request, timeframe, limit)
    if error is not None:
        return error

    analysis = await request.app.state.analyzer.analyze(timeframe=timeframe, limit=limit)
    return JSONResponse(content={"tier": auth.tier, **to_jsonable(analysis)})


@router.get("/alerts")
async def get_alerts(
    request: Request, timeframe: str | None = None, limit: int | None = None
) -> JSONResponse:
    """Default alerts evaluated against the latest candles and derivatives."""
    auth, rejection = await premium_gate(request)
    if rejection is not None:
        return rejection

    timeframe, limit, error = resolve_query(request, timeframe, limit)
    if error is not None:
        return error

    candles = await fetch_candles(request, timeframe, limit)
    derivatives = await request.app.state.market_client.fetch_derivatives()
    metrics = market_metrics(
        candles, derivatives, request.app.state.settings.signal.rsi_period
    )
    triggered = check_alerts(DEFAULT_ALERTS, metrics)
    return JSONResponse(
        content={
            "timeframe": timeframe,
            "tier": auth.tier,
            "metrics": to_jsonable(metrics),
            "alerts": to_jsonable(triggered),
            "stats": to_jsonable(alert_stats(triggered)),
        }
    )
