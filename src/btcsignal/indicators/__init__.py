"""Technical indicator library.

Pure functions over ordered ``Candle`` sequences. Every output point's time is
an input candle's time; short input yields empty series rather than errors.
"""

from btcsignal.indicators.levels import key_levels, pivot_levels, pivot_points
from btcsignal.indicators.models import (
    ADXResult,
    BollingerBands,
    IchimokuResult,
    KeltnerChannels,
    KeyLevels,
    MACDResult,
    PivotLevels,
    StochasticResult,
    SupertrendPoint,
    TrendDirection,
)
from btcsignal.indicators.momentum import macd, rsi, rsi_values, stoch_rsi, stochastic
from btcsignal.indicators.moving_average import (
    ema,
    ema_values,
    running_ema,
    sma,
    sma_values,
    wma,
)
from btcsignal.indicators.trend import adx, crossover, crossunder, highest, ichimoku, lowest
from btcsignal.indicators.volatility import atr, bollinger_bands, keltner_channels, supertrend
from btcsignal.indicators.volume import obv, volume_ratio, volume_sma, vwap

__all__ = [
    "ADXResult",
    "BollingerBands",
    "IchimokuResult",
    "KeltnerChannels",
    "KeyLevels",
    "MACDResult",
    "PivotLevels",
    "StochasticResult",
    "SupertrendPoint",
    "TrendDirection",
    "adx",
    "atr",
    "bollinger_bands",
    "crossover",
    "crossunder",
    "ema",
    "ema_values",
    "highest",
    "ichimoku",
    "keltner_channels",
    "key_levels",
    "lowest",
    "macd",
    "obv",
    "pivot_levels",
    "pivot_points",
    "rsi",
    "rsi_values",
    "running_ema",
    "sma",
    "sma_values",
    "stoch_rsi",
    "stochastic",
    "supertrend",
    "volume_ratio",
    "volume_sma",
    "vwap",
    "wma",
]
