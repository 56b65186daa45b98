"""Result containers for multi-valued indicators.

Single-valued indicators return ``list[IndicatorPoint]``. Indicators that
produce several aligned lines return one of the dataclasses below, each line
being its own suffix-aligned series.
"""

from dataclasses import dataclass, field
from enum import Enum

from btcsignal.models import IndicatorPoint


class TrendDirection(str, Enum):
    """Supertrend regime."""

    UP = "up"
    DOWN = "down"


@dataclass
class BollingerBands:
    """SMA middle band with population-stddev envelopes."""

    upper: list[IndicatorPoint] = field(default_factory=list)
    middle: list[IndicatorPoint] = field(default_factory=list)
    lower: list[IndicatorPoint] = field(default_factory=list)
    bandwidth: list[IndicatorPoint] = field(default_factory=list)  # percent of middle


@dataclass
class MACDResult:
    """MACD line, its signal EMA and the histogram between them."""

    macd: list[IndicatorPoint] = field(default_factory=list)
    signal: list[IndicatorPoint] = field(default_factory=list)
    histogram: list[IndicatorPoint] = field(default_factory=list)


@dataclass
class StochasticResult:
    """%K and %D lines of a stochastic oscillator (price or RSI based)."""

    k: list[IndicatorPoint] = field(default_factory=list)
    d: list[IndicatorPoint] = field(default_factory=list)


@dataclass
class KeltnerChannels:
    """EMA middle line with ATR envelopes."""

    upper: list[IndicatorPoint] = field(default_factory=list)
    middle: list[IndicatorPoint] = field(default_factory=list)
    lower: list[IndicatorPoint] = field(default_factory=list)


@dataclass
class ADXResult:
    """Average Directional Index with its directional indicators."""

    adx: list[IndicatorPoint] = field(default_factory=list)
    plus_di: list[IndicatorPoint] = field(default_factory=list)
    minus_di: list[IndicatorPoint] = field(default_factory=list)


@dataclass
class IchimokuResult:
    """Tenkan-sen, Kijun-sen and the lagging Chikou span."""

    tenkan: list[IndicatorPoint] = field(default_factory=list)
    kijun: list[IndicatorPoint] = field(default_factory=list)
    chikou: list[IndicatorPoint] = field(default_factory=list)


@dataclass(frozen=True)
class SupertrendPoint:
    """Supertrend line value plus the final bands it was chosen from."""

    time: int
    value: float
    direction: TrendDirection
    upper_band: float
    lower_band: float


@dataclass(frozen=True)
class PivotLevels:
    """Classic floor-trader pivots."""

    pivot: float
    r1: float
    r2: float
    r3: float
    s1: float
    s2: float
    s3: float


@dataclass(frozen=True)
class KeyLevels:
    """Recent range extremes (24 and 168 candles back)."""

    day_high: float
    day_low: float
    week_high: float
    week_low: float
