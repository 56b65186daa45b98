"""Tests for the on-chain valuation models."""

from datetime import date

import pytest

from btcsignal.signals.models import Direction
from btcsignal.signals.valuation import (
    PriceModels,
    delta_cap,
    evaluate_price_models,
    mvrv_z_score,
    nupl,
    overall_valuation,
    price_model_signals,
    puell_multiple,
    realized_cap,
    rhodl_ratio,
    stock_to_flow,
    thermocap,
)


@pytest.fixture
def deep_value_readings():
    """Every model in its most undervalued zone."""
    return dict(
        s2f=stock_to_flow(100, circulating_supply=1000, annual_flow=100),
        thermo=thermocap(1e11),
        realized=realized_cap(1000, 0.8),
        nupl_reading=nupl(100, 150),
        puell=puell_multiple(10_000, 60_000),
        mvrv_z=mvrv_z_score(0.5),
        rhodl=rhodl_ratio(400, 100),
        delta=delta_cap(1000, 100, 700, 10),
    )


class TestStockToFlow:
    """Tests for the scarcity model.

    With stock 1000 and flow 100 the ratio is 10 and the model price 400.
    """

    @pytest.mark.parametrize(
        "price,signal",
        [
            (100, "undervalued"),
            (300, "fair"),
            (400, "fair"),
            (700, "overvalued"),
            (900, "extreme_overvalued"),
        ],
    )
    def test_zones(self, price, signal) -> None:
        reading = stock_to_flow(price, circulating_supply=1000, annual_flow=100)

        assert reading.ratio == 10.0
        assert reading.model_price == 400
        assert reading.signal == signal

    def test_deflection(self) -> None:
        reading = stock_to_flow(700, circulating_supply=1000, annual_flow=100)

        assert reading.deflection == 75.0
        assert reading.deflection_multiple == 1.75
        assert reading.description.startswith("Price 75% above S2F model")

    def test_halving_countdown(self) -> None:
        reading = stock_to_flow(60_000, today=date(2028, 4, 7))

        assert reading.halving.days_until_halving == 10
        assert reading.halving.current_reward == 3.125

    def test_zero_flow_rejected(self) -> None:
        with pytest.raises(ValueError):
            stock_to_flow(60_000, annual_flow=0)


class TestRatioModels:
    """Tests for thermocap, realized cap, NUPL, Puell, MVRV-Z, RHODL and delta cap."""

    def test_thermocap_boundaries(self) -> None:
        """10x is already fair, 50x is already extreme."""
        assert thermocap(5e11).signal == "fair"
        assert thermocap(2.5e12).signal == "extreme"
        assert thermocap(1.2e12).multiple == 24.0

    def test_realized_cap(self) -> None:
        reading = realized_cap(1_000_000, 2.0)

        assert reading.realized_cap == 500_000
        assert reading.signal == "fair"

    def test_realized_cap_needs_positive_mvrv(self) -> None:
        with pytest.raises(ValueError):
            realized_cap(1_000_000, 0)

    def test_nupl_zones(self) -> None:
        loss = nupl(100, 150)
        hope = nupl(100, 80)
        euphoric = nupl(100, 25)

        assert (loss.zone, loss.signal) == ("capitulation", Direction.BULLISH)
        assert loss.value == -0.5
        assert hope.zone == "hope"
        assert (euphoric.zone, euphoric.signal) == ("euphoria", Direction.BEARISH)
        assert euphoric.description.startswith("NUPL 75.0%.")

    def test_nupl_needs_market_cap(self) -> None:
        with pytest.raises(ValueError):
            nupl(0, 10)

    def test_puell(self) -> None:
        """0.5 is the bottom of the second buy band; no history reads 1.0."""
        assert puell_multiple(30_000, 60_000).value == 0.5
        assert puell_multiple(30_000, 60_000).signal == "buy_zone"
        assert puell_multiple(30_000, 0).value == 1.0
        assert puell_multiple(30_000, 0).signal == "neutral"

    def test_mvrv_z_score(self) -> None:
        assert mvrv_z_score(1.4).signal == "accumulation"
        assert mvrv_z_score(0.9).z_score == -1.0
        assert mvrv_z_score(0.9).signal == "bottom_zone"
        assert mvrv_z_score(5.4).signal == "top_zone"

    def test_rhodl(self) -> None:
        assert rhodl_ratio(300, 100).signal == "accumulation"
        assert rhodl_ratio(150, 100).signal == "neutral"
        assert rhodl_ratio(100, 0).ratio == 0.0
        assert rhodl_ratio(100, 0).signal == "speculative_top"

    def test_delta_cap(self) -> None:
        over = delta_cap(1000, 600, 100, 10)
        negative = delta_cap(1000, 100, 700, 10)

        assert (over.delta_price, over.current_price) == (50, 100)
        assert over.signal == "overvalued"
        assert negative.signal == "extreme_undervalued"


class TestOverallValuation:
    """Tests for the weighted blend."""

    def test_all_fair(self) -> None:
        score = overall_valuation(
            s2f=stock_to_flow(400, circulating_supply=1000, annual_flow=100),
            thermo=thermocap(1.2e12),
            realized=realized_cap(1000, 2.0),
            nupl_reading=nupl(100, 60),
            puell=puell_multiple(1000, 1000),
            mvrv_z=mvrv_z_score(2.4),
            rhodl=rhodl_ratio(150, 100),
            delta=delta_cap(1000, 1100, 100, 10),
        )

        assert score.score == 0
        assert score.rating == "fair"
        assert score.model_agreement == 100
        assert score.confidence == 100
        assert score.bullish_models == []
        assert score.bearish_models == []

    def test_deep_value(self, deep_value_readings) -> None:
        """Undervalued models count as bullish for buyers."""
        score = overall_valuation(**deep_value_readings)

        assert score.score == -76
        assert score.rating == "extreme_undervalued"
        assert len(score.bullish_models) == 8
        assert score.summary.startswith("Extreme undervaluation across 8 models")

    def test_signals_at_extremes(self, deep_value_readings) -> None:
        r = deep_value_readings
        models = PriceModels(
            current_price=100,
            stock_to_flow=r["s2f"],
            thermocap=r["thermo"],
            realized_cap=r["realized"],
            nupl=r["nupl_reading"],
            puell_multiple=r["puell"],
            mvrv_z_score=r["mvrv_z"],
            rhodl_ratio=r["rhodl"],
            delta_cap=r["delta"],
            overall=overall_valuation(**r),
        )

        signals = price_model_signals(models)

        assert [s.model for s in signals] == [
            "s2f", "thermocap", "nupl", "puell", "mvrv_z", "overall",
        ]
        assert all(s.direction is Direction.BULLISH for s in signals)


class TestEvaluatePriceModels:
    """Tests for running every model from one input set."""

    def test_end_to_end(self) -> None:
        models = evaluate_price_models(
            current_price=60_000,
            mvrv=2.0,
            lth_supply=14_000_000,
            sth_supply=5_000_000,
            historical_avg_price=40_000,
            historical_avg_market_cap=6e11,
            today=date(2026, 1, 1),
        )

        assert models.stock_to_flow.signal == "undervalued"
        assert models.realized_cap.realized_cap == 585_000_000_000
        assert models.nupl.zone == "belief"
        assert models.puell_multiple.signal == "neutral"
        assert models.mvrv_z_score.market_cap == 1.17e12
        assert models.delta_cap.signal == "extreme_undervalued"
        assert models.overall.score == -6
        assert models.overall.rating == "fair"
        assert models.overall.model_agreement == 50
