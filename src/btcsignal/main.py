"""Entry point for the BTC signal API.

Wires settings, logging, the exchange client and the access-record store,
then serves the FastAPI app through uvicorn's programmatic API. The
exchange client is opened and closed by the app lifespan so both share the
server's event loop.

Component wiring order (in _build_components):
1. AppSettings (configuration)
2. Logging setup
3. MarketDataClient (ccxt exchange wrapper)
4. Access-record store (GitHub-backed; fails open while unconfigured)
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI

from btcsignal.access.store import GitHubAccessStore
from btcsignal.api.app import create_app
from btcsignal.config import AppSettings
from btcsignal.logging import get_logger, setup_logging
from btcsignal.market_data.client import MarketDataClient


def _build_components(settings: AppSettings) -> dict[str, Any]:
    """Build the exchange client and access store from settings.

    Note: Does NOT call client.connect() -- that happens in the lifespan.
    """
    logger = get_logger("btcsignal.main")

    client = MarketDataClient(settings.market)

    access_store = GitHubAccessStore(settings.access)
    if not access_store.configured:
        logger.warning(
            "access_store_not_configured",
            note="Premium checks fail open until ACCESS_GITHUB_TOKEN and ACCESS_GITHUB_REPO are set.",
        )

    return {"market_client": client, "access_store": access_store}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the exchange client on startup and close it on shutdown."""
    logger = get_logger("btcsignal.main")
    client: MarketDataClient = app.state.market_client

    await client.connect()
    logger.info("lifespan_started", exchange=client.settings.exchange_id)

    yield

    await client.close()
    logger.info("btcsignal_stopped")


async def run() -> None:
    """Run the API server until interrupted."""
    # 1. Load settings
    settings = AppSettings()

    # 2. Setup logging
    setup_logging(settings.log_level)
    logger = get_logger("btcsignal.main")

    # 3-4. Build components
    components = _build_components(settings)

    app = create_app(
        settings,
        components["market_client"],
        components["access_store"],
        lifespan=lifespan,
    )

    logger.info(
        "starting_api",
        host=settings.server.host,
        port=settings.server.port,
        exchange=settings.market.exchange_id,
        symbol=settings.market.symbol,
    )

    config = uvicorn.Config(
        app,
        host=settings.server.host,
        port=settings.server.port,
        log_level="warning",  # Suppress uvicorn access logs
    )
    server = uvicorn.Server(config)
    await server.serve()


def main() -> None:
    """Synchronous entry point."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
