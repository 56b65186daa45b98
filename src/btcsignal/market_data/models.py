"""Market snapshot models returned by the exchange client."""

from dataclasses import dataclass


@dataclass
class TickerSummary:
    """24h ticker for a spot symbol."""

    symbol: str
    price: float | None
    change_24h_pct: float | None = None
    high_24h: float | None = None
    low_24h: float | None = None
    volume_24h: float | None = None  # quote volume


@dataclass
class DerivativesSnapshot:
    """Perpetual-swap state. Each field is None when its upstream call failed."""

    symbol: str
    mark_price: float | None = None
    index_price: float | None = None
    funding_rate: float | None = None
    next_funding_time: int | None = None  # Unix seconds
    open_interest: float | None = None  # base currency
    open_interest_value: float | None = None  # quote currency
    ticker: TickerSummary | None = None
