"""Trend indicators (Ichimoku, ADX) and series comparison helpers."""

from collections.abc import Sequence

from btcsignal.indicators.models import ADXResult, IchimokuResult
from btcsignal.models import Candle, IndicatorPoint


def _midpoint(window: Sequence[Candle]) -> float:
    return (max(c.high for c in window) + min(c.low for c in window)) / 2


def ichimoku(
    candles: Sequence[Candle],
    tenkan_period: int = 9,
    kijun_period: int = 26,
    displacement: int = 26,
) -> IchimokuResult:
    """Tenkan-sen, Kijun-sen and Chikou span.

    Tenkan/Kijun are the high-low midpoints over their trailing windows.
    Chikou is the close at bar ``i`` plotted at ``time[i - displacement]``, so
    it covers the first ``len - displacement`` candle times. Leading spans
    are omitted: they would sit at times past the last candle.
    """
    result = IchimokuResult()
    for i, candle in enumerate(candles):
        if tenkan_period >= 1 and i >= tenkan_period - 1:
            window = candles[i - tenkan_period + 1 : i + 1]
            result.tenkan.append(IndicatorPoint(time=candle.time, value=_midpoint(window)))
        if kijun_period >= 1 and i >= kijun_period - 1:
            window = candles[i - kijun_period + 1 : i + 1]
            result.kijun.append(IndicatorPoint(time=candle.time, value=_midpoint(window)))
        if displacement >= 0 and i >= displacement:
            result.chikou.append(
                IndicatorPoint(time=candles[i - displacement].time, value=candle.close)
            )
    return result


def adx(candles: Sequence[Candle], period: int = 14) -> ADXResult:
    """Average Directional Index with +DI / -DI (Wilder smoothing).

    +DI/-DI start at candle ``period``; ADX starts at candle ``2 * period - 1``.
    Needs at least ``2 * period`` candles.
    """
    result = ADXResult()
    if period < 1 or len(candles) < period * 2:
        return result

    tr: list[float] = []
    plus_dm: list[float] = []
    minus_dm: list[float] = []
    for prev, cur in zip(candles, candles[1:]):
        tr.append(
            max(cur.high - cur.low, abs(cur.high - prev.close), abs(cur.low - prev.close))
        )
        up_move = cur.high - prev.high
        down_move = prev.low - cur.low
        plus_dm.append(up_move if up_move > down_move and up_move > 0 else 0.0)
        minus_dm.append(down_move if down_move > up_move and down_move > 0 else 0.0)

    smooth_tr = sum(tr[:period])
    smooth_plus = sum(plus_dm[:period])
    smooth_minus = sum(minus_dm[:period])

    dx: list[float] = []
    for i in range(period - 1, len(tr)):
        if i > period - 1:
            smooth_tr = smooth_tr - smooth_tr / period + tr[i]
            smooth_plus = smooth_plus - smooth_plus / period + plus_dm[i]
            smooth_minus = smooth_minus - smooth_minus / period + minus_dm[i]

        pdi = smooth_plus / smooth_tr * 100 if smooth_tr > 0 else 0.0
        mdi = smooth_minus / smooth_tr * 100 if smooth_tr > 0 else 0.0
        time = candles[i + 1].time
        result.plus_di.append(IndicatorPoint(time=time, value=pdi))
        result.minus_di.append(IndicatorPoint(time=time, value=mdi))

        di_sum = pdi + mdi
        dx.append(abs(pdi - mdi) / di_sum * 100 if di_sum > 0 else 0.0)

    # dx[j] belongs to candle period + j
    adx_val = sum(dx[:period]) / period
    result.adx.append(IndicatorPoint(time=candles[2 * period - 1].time, value=adx_val))
    for j in range(period, len(dx)):
        adx_val = (adx_val * (period - 1) + dx[j]) / period
        result.adx.append(IndicatorPoint(time=candles[period + j].time, value=adx_val))

    return result


def crossover(
    prev1: float | None, curr1: float | None, prev2: float | None, curr2: float | None
) -> bool:
    """True when series 1 crosses above series 2 between two bars."""
    if prev1 is None or curr1 is None or prev2 is None or curr2 is None:
        return False
    return prev1 <= prev2 and curr1 > curr2


def crossunder(
    prev1: float | None, curr1: float | None, prev2: float | None, curr2: float | None
) -> bool:
    """True when series 1 crosses below series 2 between two bars."""
    if prev1 is None or curr1 is None or prev2 is None or curr2 is None:
        return False
    return prev1 >= prev2 and curr1 < curr2


def highest(values: Sequence[float], index: int, period: int) -> float | None:
    """Max of the ``period`` values ending at ``index``; None during warm-up."""
    if period < 1 or index < period - 1 or index >= len(values):
        return None
    return max(values[index - period + 1 : index + 1])


def lowest(values: Sequence[float], index: int, period: int) -> float | None:
    """Min of the ``period`` values ending at ``index``; None during warm-up."""
    if period < 1 or index < period - 1 or index >= len(values):
        return None
    return min(values[index - period + 1 : index + 1])
