"""Signal data models: confluence score, chart patterns and market structure."""

from dataclasses import dataclass, field
from enum import Enum


class Direction(str, Enum):
    """Directional label derived from a confluence score."""

    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class SignalFactor:
    """One additive contribution to a confluence score.

    ``satisfied`` is tri-state: True when the factor reads bullish, False when
    it reads bearish, None when it is mixed or its input is unavailable.
    ``weight`` is the signed delta the factor applied to the score.
    """

    name: str
    satisfied: bool | None
    weight: float
    note: str = ""


@dataclass
class ConfluenceScore:
    """Bounded 0-100 score with direction and the factors behind it."""

    score: int
    direction: Direction
    factors: list[SignalFactor] = field(default_factory=list)


class PatternLabel(str, Enum):
    """Closed set of chart-pattern labels the heuristics can emit."""

    SYMMETRICAL_TRIANGLE = "Symmetrical Triangle"
    DESCENDING_TRIANGLE = "Descending Triangle"
    ASCENDING_TRIANGLE = "Ascending Triangle"
    RISING_WEDGE = "Rising Wedge"
    FALLING_WEDGE = "Falling Wedge"
    HORIZONTAL_CHANNEL = "Horizontal Channel"
    DOUBLE_TOP = "Double Top"
    DOUBLE_BOTTOM = "Double Bottom"
    UPTREND_CONTINUATION = "Uptrend Continuation"
    DOWNTREND_CONTINUATION = "Downtrend Continuation"


@dataclass(frozen=True)
class PatternTemplate:
    """Canned confidence and copy attached to a pattern label."""

    confidence: int  # percent
    bias: str
    description: str


PATTERN_TEMPLATES: dict[PatternLabel, PatternTemplate] = {
    PatternLabel.SYMMETRICAL_TRIANGLE: PatternTemplate(
        confidence=75,
        bias="Neutral - watch for breakout",
        description=(
            "Price is forming a symmetrical triangle with converging trendlines. "
            "This pattern typically breaks in the direction of the prior trend. "
            "Volume usually decreases as the pattern develops."
        ),
    ),
    PatternLabel.DESCENDING_TRIANGLE: PatternTemplate(
        confidence=70,
        bias="Bearish - breakdown likely",
        description=(
            "Lower highs with flat support creates a descending triangle. "
            "This pattern has bearish implications, suggesting sellers are becoming "
            "more aggressive. Watch for a breakdown below support."
        ),
    ),
    PatternLabel.ASCENDING_TRIANGLE: PatternTemplate(
        confidence=72,
        bias="Bullish - breakout likely",
        description=(
            "Higher lows with flat resistance creates an ascending triangle. "
            "This is a bullish continuation pattern, suggesting buyers are becoming "
            "more aggressive. Watch for a breakout above resistance."
        ),
    ),
    PatternLabel.RISING_WEDGE: PatternTemplate(
        confidence=68,
        bias="Bearish reversal pattern",
        description=(
            "A rising wedge with converging lines suggests momentum is weakening "
            "despite higher prices. This is typically a bearish reversal pattern. "
            "Watch for a breakdown below the lower trendline."
        ),
    ),
    PatternLabel.FALLING_WEDGE: PatternTemplate(
        confidence=70,
        bias="Bullish reversal pattern",
        description=(
            "A falling wedge with converging lines suggests selling pressure is "
            "weakening. This is typically a bullish reversal pattern. Watch for a "
            "breakout above the upper trendline."
        ),
    ),
    PatternLabel.HORIZONTAL_CHANNEL: PatternTemplate(
        confidence=65,
        bias="Range-bound - trade the levels",
        description=(
            "Price is moving within a horizontal channel between support and "
            "resistance. Trade the range by buying at support and selling at "
            "resistance, or wait for a breakout."
        ),
    ),
    PatternLabel.DOUBLE_TOP: PatternTemplate(
        confidence=72,
        bias="Bearish reversal signal",
        description=(
            "Two peaks at similar levels form a double top pattern. This is a "
            "bearish reversal signal, especially if price breaks below the neckline "
            "(the low between the two peaks)."
        ),
    ),
    PatternLabel.DOUBLE_BOTTOM: PatternTemplate(
        confidence=73,
        bias="Bullish reversal signal",
        description=(
            "Two troughs at similar levels form a double bottom pattern. This is a "
            "bullish reversal signal, especially if price breaks above the neckline "
            "(the high between the two lows)."
        ),
    ),
    PatternLabel.UPTREND_CONTINUATION: PatternTemplate(
        confidence=60,
        bias="Bullish - trend intact",
        description=(
            "Price is in an uptrend with higher highs and higher lows. The trend "
            "remains intact. Look for pullbacks to support or moving averages for "
            "entry opportunities."
        ),
    ),
    PatternLabel.DOWNTREND_CONTINUATION: PatternTemplate(
        confidence=60,
        bias="Bearish - trend intact",
        description=(
            "Price is in a downtrend with lower highs and lower lows. The trend "
            "remains intact. Look for rallies to resistance for potential short "
            "entries."
        ),
    ),
}


@dataclass(frozen=True)
class ChartPattern:
    """A detected chart pattern with its canned confidence and target price."""

    label: PatternLabel
    confidence: int
    bias: str
    description: str
    target: float

    @classmethod
    def from_label(cls, label: PatternLabel, target: float) -> "ChartPattern":
        template = PATTERN_TEMPLATES[label]
        return cls(
            label=label,
            confidence=template.confidence,
            bias=template.bias,
            description=template.description,
            target=target,
        )


@dataclass(frozen=True)
class PriceLevel:
    """A swing-point support or resistance level."""

    price: float
    touches: int
    kind: str  # "support" | "resistance"


@dataclass(frozen=True)
class SwingPoint:
    """A local extreme inside the analysed window."""

    index: int
    price: float
    time: int


@dataclass(frozen=True)
class Trendline:
    """Line through the first and last swing highs (or lows)."""

    kind: str  # "ascending" | "descending"
    start: SwingPoint
    end: SwingPoint
    touches: int


@dataclass(frozen=True)
class OrderBlock:
    """Last opposing candle before a strong displacement move."""

    kind: str  # "bullish" | "bearish"
    high: float
    low: float
    time: int
    index: int


@dataclass(frozen=True)
class FairValueGap:
    """Three-candle imbalance between candle 1 and candle 3."""

    kind: str  # "bullish" | "bearish"
    top: float
    bottom: float
    time: int
    index: int
    filled: bool = False


@dataclass
class PatternReport:
    """Everything the pattern detector found in one candle window."""

    primary: ChartPattern | None = None
    secondary: list[ChartPattern] = field(default_factory=list)
    support: list[PriceLevel] = field(default_factory=list)
    resistance: list[PriceLevel] = field(default_factory=list)
    trendlines: list[Trendline] = field(default_factory=list)
    order_blocks: list[OrderBlock] = field(default_factory=list)
    fair_value_gaps: list[FairValueGap] = field(default_factory=list)
