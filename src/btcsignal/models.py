"""Shared data models for the btcsignal service.

Prices and volumes are floats: the indicator math is statistical (square
roots, ratios) and the exchange delivers floats.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Candle:
    """A single OHLCV candle.

    Series are ordered ascending by ``time`` with unique times.
    """

    time: int  # Unix seconds
    open: float
    high: float
    low: float
    close: float
    volume: float


@dataclass(frozen=True)
class IndicatorPoint:
    """One indicator value plotted at a candle's time."""

    time: int
    value: float
