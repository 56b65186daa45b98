"""FastAPI application factory for the market-data and premium signal API."""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from btcsignal.access.rate_limit import RateLimitState
from btcsignal.access.store import AccessRecordStore
from btcsignal.api.routes import market, premium, session
from btcsignal.config import AppSettings
from btcsignal.logging import bind_request_context, clear_request_context
from btcsignal.market_data.client import MarketDataClient
from btcsignal.signals.engine import MarketAnalyzer

REQUEST_ID_HEADER = "X-Request-ID"


def create_app(
    settings: AppSettings,
    client: MarketDataClient,
    access_store: AccessRecordStore,
    lifespan: Any = None,
) -> FastAPI:
    """Create and configure the API application.

    Args:
        settings: Application-wide settings.
        client: Exchange client shared by all routes.
        access_store: Source of premium access records.
        lifespan: Optional async context manager for startup/shutdown.
                  Used by main.py to open and close the exchange client.

    Returns:
        Configured FastAPI application with all routers mounted under /api.
    """
    app = FastAPI(title="BTC Signal API", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "X-Recovery-Code", "X-Session-Token"],
    )

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        request_id = bind_request_context(
            request.url.path, request.headers.get(REQUEST_ID_HEADER)
        )
        try:
            response = await call_next(request)
        finally:
            clear_request_context()
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    app.state.settings = settings
    app.state.market_client = client
    app.state.access_store = access_store
    app.state.rate_limit_state = RateLimitState()
    app.state.analyzer = MarketAnalyzer(client, settings.indicators, settings.signal)

    app.include_router(market.router, prefix="/api")
    app.include_router(premium.router, prefix="/api")
    app.include_router(session.router, prefix="/api")

    return app
