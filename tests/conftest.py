"""Shared test fixtures for the btcsignal service."""

from collections.abc import Callable, Sequence

import pytest

from btcsignal.access.models import AccessRecord
from btcsignal.config import AccessSettings, AppSettings, MarketDataSettings
from btcsignal.models import Candle

START_TIME = 1_700_000_000
HOUR = 3600


def build_candles(
    closes: Sequence[float],
    volumes: Sequence[float] | None = None,
    spread: float = 1.0,
    start: int = START_TIME,
    step: int = HOUR,
) -> list[Candle]:
    """Hourly candles opening at the previous close, wicks ``spread`` past the body."""
    candles = []
    prev_close = closes[0]
    for i, close in enumerate(closes):
        open_ = prev_close
        candles.append(
            Candle(
                time=start + i * step,
                open=open_,
                high=max(open_, close) + spread,
                low=min(open_, close) - spread,
                close=close,
                volume=volumes[i] if volumes is not None else 100.0,
            )
        )
        prev_close = close
    return candles


@pytest.fixture
def make_candles() -> Callable[..., list[Candle]]:
    """Factory for synthetic candle series."""
    return build_candles


@pytest.fixture
def zigzag_candles() -> list[Candle]:
    """120 candles oscillating around 70k with a slow upward drift."""
    wiggle = (400, -250, 80)
    closes = [70_000 + i * 15 + wiggle[i % 3] for i in range(120)]
    volumes = [100 + (i % 7) * 20 for i in range(120)]
    return build_candles(closes, volumes, spread=120.0)


@pytest.fixture
def app_settings() -> AppSettings:
    """Return AppSettings with test defaults (DEBUG logging, dummy GitHub credentials)."""
    return AppSettings(
        log_level="DEBUG",
        market=MarketDataSettings(),
        access=AccessSettings(
            github_token="test-token",  # type: ignore[arg-type]
            github_repo="owner/records",
        ),
    )


@pytest.fixture
def access_records() -> list[AccessRecord]:
    """An active monthly grant, an expired one and a lifetime one."""
    return [
        AccessRecord(
            recovery_code="ABC123",
            tier="monthly",
            active_session_token="tok1",
            expires_at="2099-01-01T00:00:00.000Z",
            last_session_update="2024-05-01T12:00:00.000Z",
        ),
        AccessRecord(
            recovery_code="OLD999",
            tier="weekly",
            active_session_token="tok-old",
            expires_at="2020-01-01T00:00:00.000Z",
        ),
        AccessRecord(
            recovery_code="LIFE42",
            tier="lifetime",
            active_session_token="tok-life",
            expires_at=None,
        ),
    ]
