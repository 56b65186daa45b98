"""Signal layer: confluence scoring, chart patterns, valuation models, alerts
and the market analyzer."""

from btcsignal.signals.alerts import DEFAULT_ALERTS, AlertCondition, TriggeredAlert, check_alerts
from btcsignal.signals.confluence import (
    compute_confluence,
    direction_for_score,
    score_confluence,
)
from btcsignal.signals.engine import (
    IndicatorSuite,
    MarketAnalysis,
    MarketAnalyzer,
    compute_indicator_suite,
    latest_values,
)
from btcsignal.signals.models import (
    ChartPattern,
    ConfluenceScore,
    Direction,
    PatternLabel,
    PatternReport,
    SignalFactor,
)
from btcsignal.signals.patterns import detect_chart_patterns, detect_patterns
from btcsignal.signals.valuation import PriceModels, evaluate_price_models, overall_valuation

__all__ = [
    "DEFAULT_ALERTS",
    "AlertCondition",
    "ChartPattern",
    "ConfluenceScore",
    "Direction",
    "IndicatorSuite",
    "MarketAnalysis",
    "MarketAnalyzer",
    "PatternLabel",
    "PatternReport",
    "PriceModels",
    "SignalFactor",
    "TriggeredAlert",
    "check_alerts",
    "compute_confluence",
    "compute_indicator_suite",
    "detect_chart_patterns",
    "detect_patterns",
    "direction_for_score",
    "evaluate_price_models",
    "latest_values",
    "overall_valuation",
    "score_confluence",
]
