"""Market analyzer: one call from raw candles to the full premium snapshot.

Fetches candles through the market-data client, runs the indicator suite,
the confluence scorer and the pattern detectors, and bundles the result.
Nothing is cached; every call recomputes from the fetched candles.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

from btcsignal.config import IndicatorSettings, SignalSettings
from btcsignal.indicators import (
    BollingerBands,
    IchimokuResult,
    KeyLevels,
    MACDResult,
    PivotLevels,
    StochasticResult,
    SupertrendPoint,
    atr,
    bollinger_bands,
    ema,
    ichimoku,
    key_levels,
    macd,
    pivot_levels,
    rsi,
    stoch_rsi,
    supertrend,
    vwap,
)
from btcsignal.logging import get_logger
from btcsignal.market_data.client import MarketDataClient
from btcsignal.models import Candle, IndicatorPoint
from btcsignal.signals.confluence import compute_confluence
from btcsignal.signals.models import ConfluenceScore, PatternReport
from btcsignal.signals.patterns import detect_patterns

logger = get_logger(__name__)


@dataclass
class IndicatorSuite:
    """Every chart indicator for one candle series, keyed the way the UI draws them."""

    ema: dict[int, list[IndicatorPoint]] = field(default_factory=dict)
    rsi: list[IndicatorPoint] = field(default_factory=list)
    bollinger: BollingerBands = field(default_factory=BollingerBands)
    vwap: list[IndicatorPoint] = field(default_factory=list)
    atr: list[IndicatorPoint] = field(default_factory=list)
    supertrend: list[SupertrendPoint] = field(default_factory=list)
    macd: MACDResult = field(default_factory=MACDResult)
    stoch_rsi: StochasticResult = field(default_factory=StochasticResult)
    ichimoku: IchimokuResult = field(default_factory=IchimokuResult)


def compute_indicator_suite(
    candles: Sequence[Candle], settings: IndicatorSettings
) -> IndicatorSuite:
    """Run all indicators with the configured periods."""
    return IndicatorSuite(
        ema={period: ema(candles, period) for period in settings.ema_periods},
        rsi=rsi(candles, settings.rsi_period),
        bollinger=bollinger_bands(
            candles, settings.bollinger_period, settings.bollinger_std_dev
        ),
        vwap=vwap(candles),
        atr=atr(candles, settings.atr_period),
        supertrend=supertrend(
            candles, settings.supertrend_period, settings.supertrend_multiplier
        ),
        macd=macd(candles, settings.macd_fast, settings.macd_slow, settings.macd_signal),
        stoch_rsi=stoch_rsi(
            candles,
            settings.rsi_period,
            settings.stoch_rsi_period,
            settings.stoch_k_smooth,
            settings.stoch_d_smooth,
        ),
        ichimoku=ichimoku(
            candles,
            settings.ichimoku_tenkan,
            settings.ichimoku_kijun,
            settings.ichimoku_displacement,
        ),
    )


def _last(series: Sequence[IndicatorPoint]) -> float | None:
    return series[-1].value if series else None


def latest_values(suite: IndicatorSuite) -> dict[str, float | str | None]:
    """Most recent value of each indicator line, None where a line is empty."""
    latest: dict[str, float | str | None] = {
        f"ema_{period}": _last(points) for period, points in suite.ema.items()
    }
    latest.update(
        {
            "rsi": _last(suite.rsi),
            "bollinger_upper": _last(suite.bollinger.upper),
            "bollinger_middle": _last(suite.bollinger.middle),
            "bollinger_lower": _last(suite.bollinger.lower),
            "vwap": _last(suite.vwap),
            "atr": _last(suite.atr),
            "macd": _last(suite.macd.macd),
            "macd_signal": _last(suite.macd.signal),
            "macd_histogram": _last(suite.macd.histogram),
            "stoch_rsi_k": _last(suite.stoch_rsi.k),
            "stoch_rsi_d": _last(suite.stoch_rsi.d),
            "tenkan": _last(suite.ichimoku.tenkan),
            "kijun": _last(suite.ichimoku.kijun),
        }
    )
    if suite.supertrend:
        last = suite.supertrend[-1]
        latest["supertrend"] = last.value
        latest["supertrend_direction"] = last.direction.value
    else:
        latest["supertrend"] = None
        latest["supertrend_direction"] = None
    return latest


@dataclass
class MarketAnalysis:
    """Snapshot returned by the premium analysis endpoint."""

    symbol: str
    timeframe: str
    available: bool
    price: float | None = None
    candle_count: int = 0
    latest: dict[str, float | str | None] = field(default_factory=dict)
    confluence: ConfluenceScore | None = None
    patterns: PatternReport | None = None
    pivots: PivotLevels | None = None
    key_levels: KeyLevels | None = None


class MarketAnalyzer:
    """Fetches candles and runs every analysis stage over them."""

    def __init__(
        self,
        client: MarketDataClient,
        indicator_settings: IndicatorSettings,
        signal_settings: SignalSettings,
    ) -> None:
        self._client = client
        self._indicator_settings = indicator_settings
        self._signal_settings = signal_settings

    def score(self, candles: Sequence[Candle]) -> ConfluenceScore:
        s = self._signal_settings
        return compute_confluence(
            candles,
            ema_fast_period=s.ema_fast,
            ema_slow_period=s.ema_slow,
            rsi_period=s.rsi_period,
            volume_period=s.volume_period,
            volume_spike_ratio=s.volume_spike_ratio,
        )

    def patterns(self, candles: Sequence[Candle]) -> PatternReport:
        s = self._signal_settings
        return detect_patterns(candles, s.pattern_lookback, s.pattern_trend_ema)

    def build(self, symbol: str, timeframe: str, candles: Sequence[Candle]) -> MarketAnalysis:
        """Analyse an already-fetched candle series."""
        if not candles:
            return MarketAnalysis(symbol=symbol, timeframe=timeframe, available=False)

        suite = compute_indicator_suite(candles, self._indicator_settings)
        return MarketAnalysis(
            symbol=symbol,
            timeframe=timeframe,
            available=True,
            price=candles[-1].close,
            candle_count=len(candles),
            latest=latest_values(suite),
            confluence=self.score(candles),
            patterns=self.patterns(candles),
            pivots=pivot_levels(candles, self._indicator_settings.pivot_lookback),
            key_levels=key_levels(candles),
        )

    async def analyze(
        self,
        symbol: str | None = None,
        timeframe: str | None = None,
        limit: int | None = None,
    ) -> MarketAnalysis:
        """Fetch candles and analyse them. Unavailable data yields ``available=False``."""
        symbol = symbol or self._client.settings.symbol
        timeframe = timeframe or self._client.settings.default_timeframe

        candles = await self._client.fetch_candles(symbol, timeframe, limit)
        analysis = self.build(symbol, timeframe, candles)

        logger.info(
            "market_analyzed",
            symbol=symbol,
            timeframe=timeframe,
            candles=analysis.candle_count,
            score=analysis.confluence.score if analysis.confluence else None,
        )
        return analysis
