"""Threshold alerts over a flat map of market metrics.

An ``AlertCondition`` names the metric it watches. ``check_alerts`` compares
every enabled condition against the current metrics (and, for crossings,
the previous metrics) and returns the ones that fired. Missing metrics
never fire.
"""

import time
from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from enum import Enum

from btcsignal.indicators.momentum import rsi
from btcsignal.market_data.models import DerivativesSnapshot
from btcsignal.models import Candle

# Tolerance for EQUALS, as a fraction of the threshold.
EQUALS_TOLERANCE = 0.01


class AlertCategory(str, Enum):
    PRICE = "price"
    ONCHAIN = "onchain"
    DERIVATIVES = "derivatives"
    TECHNICAL = "technical"
    PATTERN = "pattern"


class AlertOperator(str, Enum):
    ABOVE = "above"
    BELOW = "below"
    CROSSES_ABOVE = "crosses_above"
    CROSSES_BELOW = "crosses_below"
    EQUALS = "equals"


class AlertSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass(frozen=True)
class AlertCondition:
    """A watched metric with its trigger rule."""

    id: str
    name: str
    metric: str
    category: AlertCategory
    operator: AlertOperator
    threshold: float
    severity: AlertSeverity
    enabled: bool = True
    description: str = ""


@dataclass(frozen=True)
class TriggeredAlert:
    id: str
    alert_id: str
    name: str
    category: AlertCategory
    severity: AlertSeverity
    message: str
    current_value: float
    threshold: float
    timestamp: int  # Unix ms
    acknowledged: bool = False


@dataclass
class AlertStats:
    total: int = 0
    by_category: dict[str, int] = field(default_factory=dict)
    by_severity: dict[str, int] = field(default_factory=dict)
    unacknowledged: int = 0


DEFAULT_ALERTS: tuple[AlertCondition, ...] = (
    AlertCondition(
        "price_drop_5pct", "Price Drop -5% (24h)", "price_change_24h",
        AlertCategory.PRICE, AlertOperator.BELOW, -5, AlertSeverity.WARNING,
        description="Notable price decline - may signal further downside",
    ),
    AlertCondition(
        "price_drop_10pct", "Price Drop -10% (24h)", "price_change_24h",
        AlertCategory.PRICE, AlertOperator.BELOW, -10, AlertSeverity.CRITICAL,
        description="Flash crash warning - price has dropped more than 10% in 24 hours",
    ),
    AlertCondition(
        "price_pump_5pct", "Price Pump +5% (24h)", "price_change_24h",
        AlertCategory.PRICE, AlertOperator.ABOVE, 5, AlertSeverity.INFO,
        description="Notable price increase - momentum building",
    ),
    AlertCondition(
        "price_pump_10pct", "Price Pump +10% (24h)", "price_change_24h",
        AlertCategory.PRICE, AlertOperator.ABOVE, 10, AlertSeverity.WARNING,
        description="Significant price increase - possible FOMO or short squeeze",
    ),
    AlertCondition(
        "mvrv_extreme_high", "MVRV Extreme High", "mvrv",
        AlertCategory.ONCHAIN, AlertOperator.ABOVE, 3.5, AlertSeverity.CRITICAL,
        description="Market well above realized value - historical cycle top territory",
    ),
    AlertCondition(
        "mvrv_extreme_low", "MVRV Below 1", "mvrv",
        AlertCategory.ONCHAIN, AlertOperator.BELOW, 1.0, AlertSeverity.CRITICAL,
        description="Market below realized value - historical capitulation zone",
    ),
    AlertCondition(
        "nupl_euphoria", "NUPL Euphoria", "nupl",
        AlertCategory.ONCHAIN, AlertOperator.ABOVE, 0.75, AlertSeverity.WARNING,
        description="Unrealized profit at euphoric levels",
    ),
    AlertCondition(
        "nupl_capitulation", "NUPL Capitulation", "nupl",
        AlertCategory.ONCHAIN, AlertOperator.BELOW, 0, AlertSeverity.WARNING,
        description="Market in net unrealized loss",
    ),
    AlertCondition(
        "funding_rate_extreme_positive", "Funding Rate Extreme Positive", "funding_rate",
        AlertCategory.DERIVATIVES, AlertOperator.ABOVE, 0.1, AlertSeverity.WARNING,
        description="Longs paying heavily - overleveraged long positioning",
    ),
    AlertCondition(
        "funding_rate_extreme_negative", "Funding Rate Extreme Negative", "funding_rate",
        AlertCategory.DERIVATIVES, AlertOperator.BELOW, -0.05, AlertSeverity.WARNING,
        description="Shorts paying heavily - squeeze risk",
    ),
    AlertCondition(
        "rsi_overbought", "RSI Overbought", "rsi",
        AlertCategory.TECHNICAL, AlertOperator.ABOVE, 80, AlertSeverity.WARNING,
        description="Momentum stretched to the upside",
    ),
    AlertCondition(
        "rsi_oversold", "RSI Oversold", "rsi",
        AlertCategory.TECHNICAL, AlertOperator.BELOW, 20, AlertSeverity.WARNING,
        description="Momentum stretched to the downside",
    ),
)


def _evaluate(
    alert: AlertCondition,
    current: float,
    previous: float | None,
) -> str | None:
    """Return the alert message when ``alert`` fires, else None."""
    threshold = alert.threshold
    op = alert.operator

    if op is AlertOperator.ABOVE and current > threshold:
        return f"{alert.name} is {current:.4f} (above threshold of {threshold:g})"
    if op is AlertOperator.BELOW and current < threshold:
        return f"{alert.name} is {current:.4f} (below threshold of {threshold:g})"
    if op is AlertOperator.CROSSES_ABOVE:
        if previous is not None and previous <= threshold < current:
            return f"{alert.name} crossed above {threshold:g} (now {current:.4f})"
    if op is AlertOperator.CROSSES_BELOW:
        if previous is not None and previous >= threshold > current:
            return f"{alert.name} crossed below {threshold:g} (now {current:.4f})"
    if op is AlertOperator.EQUALS:
        if abs(current - threshold) <= abs(threshold) * EQUALS_TOLERANCE:
            return f"{alert.name} is approximately {threshold:g} (current: {current:.4f})"
    return None


def check_alerts(
    alerts: Iterable[AlertCondition],
    metrics: Mapping[str, float | None],
    previous: Mapping[str, float | None] | None = None,
    now_ms: int | None = None,
) -> list[TriggeredAlert]:
    """Evaluate every enabled alert against ``metrics``.

    Crossing operators need the metric in ``previous`` too; without it they
    never fire.
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    previous = previous or {}

    triggered: list[TriggeredAlert] = []
    for alert in alerts:
        if not alert.enabled:
            continue
        current = metrics.get(alert.metric)
        if current is None:
            continue

        message = _evaluate(alert, current, previous.get(alert.metric))
        if message is None:
            continue

        triggered.append(
            TriggeredAlert(
                id=f"{alert.id}-{now_ms}",
                alert_id=alert.id,
                name=alert.name,
                category=alert.category,
                severity=alert.severity,
                message=message,
                current_value=current,
                threshold=alert.threshold,
                timestamp=now_ms,
            )
        )
    return triggered


def filter_by_severity(
    alerts: Iterable[TriggeredAlert], severity: AlertSeverity
) -> list[TriggeredAlert]:
    return [a for a in alerts if a.severity == severity]


def filter_by_category(
    alerts: Iterable[TriggeredAlert], category: AlertCategory
) -> list[TriggeredAlert]:
    return [a for a in alerts if a.category == category]


def unacknowledged(alerts: Iterable[TriggeredAlert]) -> list[TriggeredAlert]:
    return [a for a in alerts if not a.acknowledged]


def acknowledge(alerts: Iterable[TriggeredAlert], triggered_id: str) -> list[TriggeredAlert]:
    """Return a new list with the matching alert marked acknowledged."""
    return [replace(a, acknowledged=True) if a.id == triggered_id else a for a in alerts]


def prune_old_alerts(
    alerts: Iterable[TriggeredAlert],
    hours_to_keep: float = 24,
    now_ms: int | None = None,
) -> list[TriggeredAlert]:
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    cutoff = now_ms - hours_to_keep * 3_600_000
    return [a for a in alerts if a.timestamp > cutoff]


def alert_stats(alerts: Sequence[TriggeredAlert]) -> AlertStats:
    return AlertStats(
        total=len(alerts),
        by_category=dict(Counter(a.category.value for a in alerts)),
        by_severity=dict(Counter(a.severity.value for a in alerts)),
        unacknowledged=sum(1 for a in alerts if not a.acknowledged),
    )


def alert_summary(alerts: Sequence[TriggeredAlert]) -> str:
    """Plain-text digest for notifications."""
    stats = alert_stats(alerts)
    lines = ["Alert Summary", f"Total: {stats.total} alerts"]
    for severity in (AlertSeverity.CRITICAL, AlertSeverity.WARNING, AlertSeverity.INFO):
        count = stats.by_severity.get(severity.value)
        if count:
            lines.append(f"{severity.value.capitalize()}: {count}")
    if stats.unacknowledged:
        lines.append(f"\n{stats.unacknowledged} unacknowledged alerts")
    return "\n".join(lines)


def market_metrics(
    candles: Sequence[Candle],
    derivatives: DerivativesSnapshot | None = None,
    rsi_period: int = 14,
) -> dict[str, float | None]:
    """Metrics the exchange data can supply, keyed the way alerts name them.

    Funding rate is expressed in percent per interval, matching the
    thresholds of the default funding alerts.
    """
    ticker = derivatives.ticker if derivatives else None
    rsi_points = rsi(candles, rsi_period)

    price = ticker.price if ticker and ticker.price is not None else None
    if price is None and candles:
        price = candles[-1].close

    funding = derivatives.funding_rate if derivatives else None
    return {
        "price": price,
        "price_change_24h": ticker.change_24h_pct if ticker else None,
        "rsi": rsi_points[-1].value if rsi_points else None,
        "funding_rate": funding * 100 if funding is not None else None,
        "open_interest": derivatives.open_interest if derivatives else None,
    }
