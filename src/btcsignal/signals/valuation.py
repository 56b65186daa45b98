"""On-chain valuation models.

Each model turns one or two network-level inputs (market cap, realized cap,
MVRV, holder supply split, issuance) into a reading with a zone label and a
one-line description. ``overall_valuation`` folds the zone labels into a
single -100..100 score where negative means undervalued.

Inputs come from whatever on-chain provider the caller uses; nothing here
does I/O. Ratios with a zero or negative denominator raise ValueError.
"""

import math
from dataclasses import dataclass, field
from datetime import date

from btcsignal.signals.models import Direction

TOTAL_SUPPLY = 21_000_000
CIRCULATING_SUPPLY = 19_500_000
BLOCK_REWARD = 3.125
DAILY_ISSUANCE = 450.0  # BTC, 144 blocks * 3.125
ANNUAL_ISSUANCE = 164_250.0

LAST_HALVING = date(2024, 4, 20)
NEXT_HALVING = date(2028, 4, 17)
CURRENT_EPOCH = 4

S2F_COEFFICIENT = 0.4
S2F_POWER = 3
ESTIMATED_THERMOCAP = 50_000_000_000.0  # USD
MVRV_HISTORICAL_MEAN = 1.4
MVRV_HISTORICAL_STD = 0.5


def _round(value: float, digits: int = 0) -> float:
    """Round half up."""
    scale = 10**digits
    return math.floor(value * scale + 0.5) / scale


def _require_positive(name: str, value: float) -> None:
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")


@dataclass(frozen=True)
class HalvingInfo:
    last_halving: date
    next_halving: date
    current_reward: float
    days_until_halving: int
    current_epoch: int


def halving_info(today: date | None = None) -> HalvingInfo:
    today = today or date.today()
    return HalvingInfo(
        last_halving=LAST_HALVING,
        next_halving=NEXT_HALVING,
        current_reward=BLOCK_REWARD,
        days_until_halving=(NEXT_HALVING - today).days,
        current_epoch=CURRENT_EPOCH,
    )


@dataclass(frozen=True)
class StockToFlow:
    ratio: float
    model_price: float
    actual_price: float
    deflection: float  # percent from model
    deflection_multiple: float  # actual / model
    signal: str
    description: str
    stock: float
    flow: float
    halving: HalvingInfo


def stock_to_flow(
    current_price: float,
    circulating_supply: float = CIRCULATING_SUPPLY,
    annual_flow: float = ANNUAL_ISSUANCE,
    today: date | None = None,
) -> StockToFlow:
    """Scarcity model: ``price = 0.4 * (stock / flow) ** 3``."""
    _require_positive("annual_flow", annual_flow)
    ratio = circulating_supply / annual_flow
    model_price = S2F_COEFFICIENT * ratio**S2F_POWER
    _require_positive("model_price", model_price)

    deflection = (current_price - model_price) / model_price * 100
    multiple = current_price / model_price

    if multiple < 0.5:
        signal = "undervalued"
        description = (
            f"Price {deflection:.0f}% below S2F model. "
            "Significant undervaluation per scarcity metrics."
        )
    elif multiple < 0.8:
        signal = "fair"
        description = (
            f"Price {deflection:.0f}% below S2F model. Slightly undervalued relative to scarcity."
        )
    elif multiple <= 1.5:
        signal = "fair"
        description = f"Price within {abs(deflection):.0f}% of S2F model. Fair value per scarcity."
    elif multiple <= 2.0:
        signal = "overvalued"
        description = f"Price {deflection:.0f}% above S2F model. Overvalued relative to scarcity."
    else:
        signal = "extreme_overvalued"
        description = (
            f"Price {deflection:.0f}% above S2F model. "
            "Extreme overvaluation per scarcity metrics."
        )

    return StockToFlow(
        ratio=_round(ratio, 1),
        model_price=_round(model_price),
        actual_price=current_price,
        deflection=_round(deflection, 1),
        deflection_multiple=_round(multiple, 2),
        signal=signal,
        description=description,
        stock=circulating_supply,
        flow=annual_flow,
        halving=halving_info(today),
    )


@dataclass(frozen=True)
class Thermocap:
    estimated_thermocap: float
    market_cap: float
    multiple: float
    signal: str
    description: str


def thermocap(market_cap: float, estimated_thermocap: float = ESTIMATED_THERMOCAP) -> Thermocap:
    """Market cap as a multiple of cumulative miner revenue."""
    _require_positive("estimated_thermocap", estimated_thermocap)
    multiple = market_cap / estimated_thermocap

    if multiple < 10:
        signal = "undervalued"
        description = (
            f"Thermocap multiple {multiple:.1f}x. "
            "Deep value - market cap below cumulative miner revenue."
        )
    elif multiple < 25:
        signal = "fair"
        description = (
            f"Thermocap multiple {multiple:.1f}x. Fair valuation relative to mining economics."
        )
    elif multiple < 50:
        signal = "overheated"
        description = (
            f"Thermocap multiple {multiple:.1f}x. Market heating up relative to miner revenue."
        )
    else:
        signal = "extreme"
        description = (
            f"Thermocap multiple {multiple:.1f}x. "
            "Extreme overvaluation - historically top territory."
        )

    return Thermocap(estimated_thermocap, market_cap, _round(multiple, 1), signal, description)


@dataclass(frozen=True)
class RealizedCap:
    market_cap: float
    realized_cap: float
    mvrv: float
    signal: str
    description: str


def realized_cap(market_cap: float, mvrv: float) -> RealizedCap:
    """Realized cap backed out of market cap and MVRV."""
    _require_positive("mvrv", mvrv)
    realized = market_cap / mvrv

    if mvrv < 1.0:
        signal = "undervalued"
        description = (
            f"MVRV {mvrv:.2f}. Market trading below realized value - capitulation zone."
        )
    elif mvrv < 2.4:
        signal = "fair"
        description = (
            f"MVRV {mvrv:.2f}. Fair valuation - market near average holder cost basis."
        )
    elif mvrv < 3.5:
        signal = "overvalued"
        description = f"MVRV {mvrv:.2f}. Overvalued - market well above average cost basis."
    else:
        signal = "extreme"
        description = (
            f"MVRV {mvrv:.2f}. Extreme overvaluation - historically cycle top levels."
        )

    return RealizedCap(market_cap, _round(realized), _round(mvrv, 2), signal, description)


@dataclass(frozen=True)
class NUPL:
    value: float  # -inf..1, in practice -0.5..0.8
    zone: str
    signal: Direction
    description: str
    market_cap: float
    realized_cap: float


# (upper bound exclusive, zone, direction, copy)
NUPL_ZONES: tuple[tuple[float, str, Direction, str], ...] = (
    (0.0, "capitulation", Direction.BULLISH,
     "Capitulation - market in net loss. Strong buy zone."),
    (0.25, "hope", Direction.BULLISH,
     "Hope/Fear - early recovery phase. Accumulation zone."),
    (0.5, "optimism", Direction.NEUTRAL,
     "Optimism/Anxiety - market in moderate profit. Hold zone."),
    (0.75, "belief", Direction.NEUTRAL,
     "Belief/Denial - strong uptrend, approaching euphoria."),
    (math.inf, "euphoria", Direction.BEARISH,
     "Euphoria/Greed - extreme profit taking. Distribution zone."),
)


def nupl(market_cap: float, realized_cap_value: float) -> NUPL:
    """Net unrealized profit/loss: ``(market cap - realized cap) / market cap``."""
    _require_positive("market_cap", market_cap)
    value = (market_cap - realized_cap_value) / market_cap

    for upper, zone, direction, copy in NUPL_ZONES:
        if value < upper:
            break

    return NUPL(
        value=_round(value, 3),
        zone=zone,
        signal=direction,
        description=f"NUPL {value * 100:.1f}%. {copy}",
        market_cap=market_cap,
        realized_cap=realized_cap_value,
    )


@dataclass(frozen=True)
class PuellMultiple:
    value: float
    daily_issuance_value: float
    ma365: float
    signal: str
    description: str
    issuance_btc: float


def puell_multiple(
    current_price: float,
    historical_avg_price: float,
    daily_issuance_btc: float = DAILY_ISSUANCE,
) -> PuellMultiple:
    """Daily issuance value over its yearly average.

    The yearly average is approximated with the average price over the year,
    so an unknown history (``historical_avg_price <= 0``) reads as 1.0.
    """
    issuance_value = daily_issuance_btc * current_price
    ma365 = daily_issuance_btc * historical_avg_price
    value = issuance_value / ma365 if ma365 > 0 else 1.0

    if value < 0.5:
        signal = "buy_zone"
        description = (
            f"Puell {value:.2f}. Miner capitulation - extreme stress. Historical buy zone."
        )
    elif value < 0.8:
        signal = "buy_zone"
        description = (
            f"Puell {value:.2f}. Below average miner revenue. Accumulation opportunity."
        )
    elif value <= 1.5:
        signal = "neutral"
        description = f"Puell {value:.2f}. Normal miner revenue levels. Neutral zone."
    elif value <= 4.0:
        signal = "sell_zone"
        description = (
            f"Puell {value:.2f}. High miner revenue. Distribution/profit-taking zone."
        )
    else:
        signal = "extreme"
        description = (
            f"Puell {value:.2f}. Extreme miner profitability. Historical cycle top indicator."
        )

    return PuellMultiple(
        value=_round(value, 2),
        daily_issuance_value=_round(issuance_value),
        ma365=_round(ma365),
        signal=signal,
        description=description,
        issuance_btc=daily_issuance_btc,
    )


@dataclass(frozen=True)
class MVRVZScore:
    z_score: float
    mvrv: float
    deviation: float
    signal: str
    description: str
    market_cap: float = 0.0
    realized_cap: float = 0.0


def mvrv_z_score(
    mvrv: float,
    historical_mean: float = MVRV_HISTORICAL_MEAN,
    historical_std: float = MVRV_HISTORICAL_STD,
    market_cap: float = 0.0,
    realized_cap_value: float = 0.0,
) -> MVRVZScore:
    """How many historical standard deviations MVRV sits from its mean."""
    _require_positive("historical_std", historical_std)
    z = (mvrv - historical_mean) / historical_std

    if z < -0.5:
        signal = "bottom_zone"
        description = f"MVRV Z-Score {z:.2f}. Deep undervaluation - historical bottom zone."
    elif z < 0.5:
        signal = "accumulation"
        description = f"MVRV Z-Score {z:.2f}. Below average - accumulation opportunity."
    elif z <= 3.0:
        signal = "fair"
        description = f"MVRV Z-Score {z:.2f}. Fair value range - normal market conditions."
    elif z <= 7.0:
        signal = "distribution"
        description = f"MVRV Z-Score {z:.2f}. High - distribution zone, take profits."
    else:
        signal = "top_zone"
        description = f"MVRV Z-Score {z:.2f}. Extreme - historical cycle top zone."

    return MVRVZScore(
        z_score=_round(z, 2),
        mvrv=_round(mvrv, 2),
        deviation=_round(mvrv - historical_mean, 2),
        signal=signal,
        description=description,
        market_cap=market_cap,
        realized_cap=realized_cap_value,
    )


@dataclass(frozen=True)
class RHODLRatio:
    ratio: float
    lth_supply: float
    sth_supply: float
    signal: str
    description: str


def rhodl_ratio(lth_supply: float, sth_supply: float) -> RHODLRatio:
    """Long-term over short-term holder supply. No short-term supply reads 0."""
    ratio = lth_supply / sth_supply if sth_supply > 0 else 0.0

    if ratio > 3.0:
        signal = "accumulation"
        description = (
            f"RHODL {ratio:.2f}. Very high long-term holding. Strong accumulation phase."
        )
    elif ratio > 2.0:
        signal = "accumulation"
        description = f"RHODL {ratio:.2f}. Strong holder base. Accumulation continues."
    elif ratio > 1.0:
        signal = "neutral"
        description = f"RHODL {ratio:.2f}. Balanced holder distribution. Neutral phase."
    elif ratio > 0.5:
        signal = "distribution"
        description = f"RHODL {ratio:.2f}. High short-term speculation. Distribution phase."
    else:
        signal = "speculative_top"
        description = f"RHODL {ratio:.2f}. Extreme speculation. Potential cycle top signal."

    return RHODLRatio(_round(ratio, 2), _round(lth_supply), _round(sth_supply), signal, description)


@dataclass(frozen=True)
class DeltaCap:
    delta_cap: float
    realized_cap: float
    average_cap: float
    delta_price: float
    current_price: float
    signal: str
    description: str


def delta_cap(
    market_cap: float,
    realized_cap_value: float,
    historical_avg_market_cap: float,
    circulating_supply: float = CIRCULATING_SUPPLY,
) -> DeltaCap:
    """Realized cap minus average cap, per coin, against the current price.

    A non-positive delta price means the price sits at or below nothing, so
    it reads as extreme undervaluation.
    """
    _require_positive("circulating_supply", circulating_supply)
    delta = realized_cap_value - historical_avg_market_cap
    delta_price = delta / circulating_supply
    current_price = market_cap / circulating_supply
    ratio = current_price / delta_price if delta_price > 0 else -math.inf

    if ratio < 0.5:
        signal = "extreme_undervalued"
        description = (
            f"Price {ratio * 100:.0f}% of Delta Price. Extreme undervaluation - crisis levels."
            if delta_price > 0
            else "Delta Price is not positive. Extreme undervaluation - crisis levels."
        )
    elif ratio < 0.8:
        signal = "undervalued"
        description = f"Price {ratio * 100:.0f}% of Delta Price. Significant undervaluation."
    elif ratio <= 1.5:
        signal = "fair"
        description = "Price near Delta Price. Fair valuation relative to historical average."
    else:
        signal = "overvalued"
        description = (
            f"Price {ratio * 100:.0f}% of Delta Price. "
            "Overvalued relative to historical baseline."
        )

    return DeltaCap(
        delta_cap=_round(delta),
        realized_cap=_round(realized_cap_value),
        average_cap=_round(historical_avg_market_cap),
        delta_price=_round(delta_price),
        current_price=_round(current_price),
        signal=signal,
        description=description,
    )


# Per-model zone scores (-100 undervalued .. 100 overvalued) and weights.
MODEL_SCORES: dict[str, dict[str, int]] = {
    "S2F": {"undervalued": -60, "fair": 0, "overvalued": 60, "extreme_overvalued": 90},
    "Thermocap": {"undervalued": -70, "fair": 0, "overheated": 60, "extreme": 95},
    "MVRV": {"undervalued": -75, "fair": 0, "overvalued": 65, "extreme": 90},
    "NUPL": {"capitulation": -90, "hope": -40, "optimism": 0, "belief": 50, "euphoria": 90},
    "Puell": {"buy_zone": -70, "neutral": 0, "sell_zone": 60, "extreme": 85},
    "MVRV Z-Score": {
        "bottom_zone": -85, "accumulation": -40, "fair": 0, "distribution": 60, "top_zone": 95,
    },
    "RHODL": {"accumulation": -50, "neutral": 0, "distribution": 50, "speculative_top": 80},
    "Delta Cap": {"extreme_undervalued": -90, "undervalued": -60, "fair": 0, "overvalued": 60},
}

MODEL_WEIGHTS: dict[str, float] = {
    "S2F": 0.15,
    "Thermocap": 0.10,
    "MVRV": 0.20,
    "NUPL": 0.20,
    "Puell": 0.10,
    "MVRV Z-Score": 0.15,
    "RHODL": 0.05,
    "Delta Cap": 0.05,
}

# Models scoring beyond this magnitude count as taking a side.
AGREEMENT_BAND = 20


@dataclass
class ValuationScore:
    """Weighted blend of every model.

    ``bullish_models`` are the models reading undervalued (a buying signal);
    ``bearish_models`` the ones reading overvalued.
    """

    score: int  # -100 (max undervalued) .. 100 (max overvalued)
    rating: str
    confidence: int
    model_agreement: int  # percent of models in the largest camp
    bullish_models: list[str] = field(default_factory=list)
    bearish_models: list[str] = field(default_factory=list)
    summary: str = ""


def _rating_for_score(score: int) -> str:
    if score < -70:
        return "extreme_undervalued"
    if score < -40:
        return "undervalued"
    if score < -15:
        return "slightly_undervalued"
    if score <= 15:
        return "fair"
    if score <= 40:
        return "slightly_overvalued"
    if score <= 70:
        return "overvalued"
    return "extreme_overvalued"


def overall_valuation(
    s2f: StockToFlow,
    thermo: Thermocap,
    realized: RealizedCap,
    nupl_reading: NUPL,
    puell: PuellMultiple,
    mvrv_z: MVRVZScore,
    rhodl: RHODLRatio,
    delta: DeltaCap,
) -> ValuationScore:
    zones = {
        "S2F": s2f.signal,
        "Thermocap": thermo.signal,
        "MVRV": realized.signal,
        "NUPL": nupl_reading.zone,
        "Puell": puell.signal,
        "MVRV Z-Score": mvrv_z.signal,
        "RHODL": rhodl.signal,
        "Delta Cap": delta.signal,
    }
    scores = {model: MODEL_SCORES[model].get(zone, 0) for model, zone in zones.items()}

    weighted = sum(scores[m] * MODEL_WEIGHTS[m] for m in scores)
    total_weight = sum(MODEL_WEIGHTS[m] for m in scores)
    score = int(_round(weighted / total_weight))
    rating = _rating_for_score(score)

    undervalued = [m for m, s in scores.items() if s < -AGREEMENT_BAND]
    overvalued = [m for m, s in scores.items() if s > AGREEMENT_BAND]
    neutral_count = len(scores) - len(undervalued) - len(overvalued)

    largest = max(len(undervalued), len(overvalued), neutral_count)
    agreement = int(_round(largest / len(scores) * 100))
    confidence = min(100, agreement + 10)

    summaries = {
        "extreme_undervalued": (
            f"Extreme undervaluation across {len(undervalued)} models. "
            "Historical buying opportunity."
        ),
        "undervalued": f"Undervalued per {len(undervalued)} models. Good accumulation zone.",
        "slightly_undervalued": (
            "Slightly undervalued. Reasonable entry point for long-term holders."
        ),
        "fair": "Fair valuation. Market near equilibrium across most models.",
        "slightly_overvalued": "Slightly overvalued. Consider taking partial profits.",
        "overvalued": (
            f"Overvalued per {len(overvalued)} models. Distribution zone - reduce exposure."
        ),
        "extreme_overvalued": (
            f"Extreme overvaluation across {len(overvalued)} models. "
            "Historical cycle top levels."
        ),
    }

    return ValuationScore(
        score=score,
        rating=rating,
        confidence=confidence,
        model_agreement=agreement,
        bullish_models=undervalued,
        bearish_models=overvalued,
        summary=summaries[rating],
    )


@dataclass
class PriceModels:
    current_price: float
    stock_to_flow: StockToFlow
    thermocap: Thermocap
    realized_cap: RealizedCap
    nupl: NUPL
    puell_multiple: PuellMultiple
    mvrv_z_score: MVRVZScore
    rhodl_ratio: RHODLRatio
    delta_cap: DeltaCap
    overall: ValuationScore


def evaluate_price_models(
    current_price: float,
    mvrv: float,
    lth_supply: float,
    sth_supply: float,
    historical_avg_price: float,
    historical_avg_market_cap: float,
    circulating_supply: float = CIRCULATING_SUPPLY,
    today: date | None = None,
) -> PriceModels:
    """Run every model from one set of on-chain inputs."""
    market_cap = current_price * circulating_supply

    s2f = stock_to_flow(current_price, circulating_supply, today=today)
    thermo = thermocap(market_cap)
    realized = realized_cap(market_cap, mvrv)
    nupl_reading = nupl(market_cap, realized.realized_cap)
    puell = puell_multiple(current_price, historical_avg_price)
    mvrv_z = mvrv_z_score(mvrv, market_cap=market_cap, realized_cap_value=realized.realized_cap)
    rhodl = rhodl_ratio(lth_supply, sth_supply)
    delta = delta_cap(
        market_cap, realized.realized_cap, historical_avg_market_cap, circulating_supply
    )

    return PriceModels(
        current_price=current_price,
        stock_to_flow=s2f,
        thermocap=thermo,
        realized_cap=realized,
        nupl=nupl_reading,
        puell_multiple=puell,
        mvrv_z_score=mvrv_z,
        rhodl_ratio=rhodl,
        delta_cap=delta,
        overall=overall_valuation(s2f, thermo, realized, nupl_reading, puell, mvrv_z, rhodl, delta),
    )


@dataclass(frozen=True)
class PriceModelSignal:
    direction: Direction
    weight: float
    reason: str
    model: str


def price_model_signals(models: PriceModels) -> list[PriceModelSignal]:
    """Directional hints from the models that sit at an extreme."""
    signals: list[PriceModelSignal] = []

    s2f = models.stock_to_flow
    if s2f.deflection_multiple < 0.5:
        signals.append(PriceModelSignal(
            Direction.BULLISH, 0.6,
            f"S2F: {s2f.deflection:.0f}% below model - deep undervaluation", "s2f",
        ))
    elif s2f.deflection_multiple > 2.0:
        signals.append(PriceModelSignal(
            Direction.BEARISH, 0.7,
            f"S2F: {s2f.deflection:.0f}% above model - extreme overvaluation", "s2f",
        ))

    thermo = models.thermocap
    if thermo.multiple < 10:
        signals.append(PriceModelSignal(
            Direction.BULLISH, 0.7,
            f"Thermocap: {thermo.multiple}x - deep value vs miner revenue", "thermocap",
        ))
    elif thermo.multiple > 50:
        signals.append(PriceModelSignal(
            Direction.BEARISH, 0.8,
            f"Thermocap: {thermo.multiple}x - extreme overheating", "thermocap",
        ))

    if models.nupl.zone == "capitulation":
        signals.append(PriceModelSignal(
            Direction.BULLISH, 0.9, "NUPL: Capitulation zone - market in net loss", "nupl",
        ))
    elif models.nupl.zone == "euphoria":
        signals.append(PriceModelSignal(
            Direction.BEARISH, 0.9, "NUPL: Euphoria zone - extreme greed", "nupl",
        ))

    puell = models.puell_multiple
    if puell.value < 0.5:
        signals.append(PriceModelSignal(
            Direction.BULLISH, 0.8, f"Puell: {puell.value:.2f} - miner capitulation", "puell",
        ))
    elif puell.value > 4.0:
        signals.append(PriceModelSignal(
            Direction.BEARISH, 0.7,
            f"Puell: {puell.value:.2f} - extreme miner profit-taking", "puell",
        ))

    z = models.mvrv_z_score.z_score
    if z < -0.5:
        signals.append(PriceModelSignal(
            Direction.BULLISH, 0.8, f"MVRV Z-Score: {z:.2f} - bottom zone", "mvrv_z",
        ))
    elif z > 7.0:
        signals.append(PriceModelSignal(
            Direction.BEARISH, 0.9, f"MVRV Z-Score: {z:.2f} - top zone", "mvrv_z",
        ))

    overall = models.overall
    if overall.score < -50:
        signals.append(PriceModelSignal(
            Direction.BULLISH, 1.0, f"Overall valuation: {overall.rating} - strong buy", "overall",
        ))
    elif overall.score > 50:
        signals.append(PriceModelSignal(
            Direction.BEARISH, 1.0, f"Overall valuation: {overall.rating} - strong sell", "overall",
        ))

    return signals
