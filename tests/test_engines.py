"""Tests for the pure calculation engines (no database)."""

import math

import pytest

from farmsim.config import ComparisonWeights, RiskThresholds
from farmsim.engines import calculators, economic, livestock, agricultural, risk, comparison, variants
from farmsim.engines.errors import ScenarioValidationError, UnknownSimulationTypeError
from farmsim.models import SimulationType, RiskLevel
from farmsim.schemas import (
    EconomicParameters, LivestockLoadParameters, MeatProductionParameters,
    PastureParameters, AgriculturalParameters,
)

from conftest import ECONOMIC_INPUTS, LOSS_INPUTS, LIVESTOCK_INPUTS


def risk_types(factors):
    return [f.type for f in factors]


class TestEconomicSimulation:
    def test_reference_example(self):
        r = economic.run_economic_simulation(EconomicParameters(**ECONOMIC_INPUTS))
        assert r["total_cost"] == 5000
        assert r["revenue"] == pytest.approx(6000)
        assert r["margin"] == pytest.approx(1000)
        assert r["margin_percent"] == pytest.approx(16.6667, abs=1e-3)
        assert r["roi_percent"] == pytest.approx(20.0)
        assert r["cost_per_kg"] == pytest.approx(2.5)
        assert r["break_even_kg"] == pytest.approx(1666.667, abs=1e-2)
        assert r["safety_margin_percent"] == pytest.approx(16.667, abs=1e-2)
        assert r["kg_per_ha"] == pytest.approx(200)
        assert r["margin_per_ha"] == pytest.approx(100)

    def test_margin_identity(self):
        r = economic.run_economic_simulation(EconomicParameters(**LOSS_INPUTS))
        assert r["revenue"] == LOSS_INPUTS["production_kg"] * LOSS_INPUTS["price_per_kg"]
        assert r["margin"] == r["revenue"] - r["total_cost"]

    def test_break_even_revenue_matches_price(self):
        be = economic.calculate_break_even(5000, 3.0, 2000)
        assert be["break_even_kg"] * 3.0 == pytest.approx(be["break_even_revenue"])

    def test_break_even_without_price(self):
        be = economic.calculate_break_even(5000, 0)
        assert math.isinf(be["break_even_kg"])
        assert math.isinf(be["break_even_revenue"])
        assert be["safety_margin_percent"] == -100

    def test_sensitivity_grid(self):
        r = economic.run_economic_simulation(EconomicParameters(**ECONOMIC_INPUTS))
        sa = r["sensitivity_analysis"]
        variations = [p["price_variation_percent"] for p in sa["scenarios"]]
        assert variations == pytest.approx([-20, -15, -10, -5, 0, 5, 10, 15, 20])
        unprofitable = [p["price_variation_percent"] for p in sa["scenarios"] if not p["is_profitable"]]
        assert unprofitable == pytest.approx([-20])
        assert sa["scenarios"][4]["margin"] == pytest.approx(1000)
        assert sa["max_margin"] == pytest.approx(2200)
        assert sa["min_margin"] == pytest.approx(-200)
        assert sa["margin_range"] == pytest.approx(2400)

    def test_price_elasticity(self):
        r = economic.run_economic_simulation(EconomicParameters(**ECONOMIC_INPUTS))
        # margin 400 → 1600 (×3 change) for a 22.2% price change
        assert r["sensitivity_analysis"]["price_elasticity"] == pytest.approx(13.5)

    def test_elasticity_zero_when_point_missing(self):
        assert economic.calculate_price_elasticity([]) == 0.0

    def test_production_alias(self):
        params = EconomicParameters.model_validate(
            {**{k: v for k, v in ECONOMIC_INPUTS.items() if k != "production_kg"},
             "total_kg_produced": 2000}
        )
        assert params.production_kg == 2000

    def test_profitability_assessment(self):
        r = economic.run_economic_simulation(EconomicParameters(**ECONOMIC_INPUTS))
        assert r["profitability"]["profitability_level"] == "FAIR"
        assert r["profitability"]["is_profitable"] is True


class TestValidation:
    def test_negative_cost_rejected(self):
        with pytest.raises(ScenarioValidationError) as exc:
            calculators.calculate("ECONOMIC", {**ECONOMIC_INPUTS, "labor_costs": -1})
        assert any("labor_costs" in e for e in exc.value.errors)

    def test_zero_price_rejected(self):
        with pytest.raises(ScenarioValidationError):
            calculators.calculate(SimulationType.ECONOMIC, {**ECONOMIC_INPUTS, "price_per_kg": 0})

    def test_missing_area_rejected(self):
        inputs = {k: v for k, v in ECONOMIC_INPUTS.items() if k != "area_hectares"}
        with pytest.raises(ScenarioValidationError) as exc:
            calculators.calculate("ECONOMIC", inputs)
        assert any("area_hectares" in e for e in exc.value.errors)

    def test_all_errors_reported(self):
        with pytest.raises(ScenarioValidationError) as exc:
            calculators.calculate("ECONOMIC", {"price_per_kg": -1})
        assert len(exc.value.errors) >= 3

    def test_unknown_simulation_type(self):
        with pytest.raises(UnknownSimulationTypeError):
            calculators.calculate("WEATHER", ECONOMIC_INPUTS)

    def test_validation_error_is_value_error(self):
        assert issubclass(ScenarioValidationError, ValueError)


class TestLivestockSimulation:
    def test_stocking_load(self):
        r = livestock.simulate_stocking_load(LivestockLoadParameters(**LIVESTOCK_INPUTS))
        assert r["load_kg_ha"] == pytest.approx(450)
        assert r["capacity_max_kg_ha"] == 400
        assert r["overgrazing_percent"] == pytest.approx(12.5)
        assert r["total_kg_produced"] == pytest.approx(100 * 0.6 * 150)
        assert r["sustainability_score"] == 50

    def test_configured_capacity(self):
        r = livestock.simulate_stocking_load(LivestockLoadParameters(**LIVESTOCK_INPUTS), 500)
        assert r["capacity_max_kg_ha"] == 500
        assert r["overgrazing_risk"] is False

    def test_meat_production_mortality(self):
        r = livestock.simulate_meat_production(MeatProductionParameters(
            animal_count=100, initial_weight_kg=200, daily_gain_kg=0.5,
            duration_days=100, price_per_kg=2, expected_mortality_percent=10,
        ))
        assert r["animals_alive"] == pytest.approx(90)
        assert r["total_kg_produced"] == pytest.approx(90 * 50)
        assert r["final_weight_kg"] == pytest.approx(250)

    def test_pasture_management(self):
        r = livestock.simulate_pasture_management(PastureParameters(
            area_hectares=10, rotation_days=30, rest_days=90,
        ))
        assert r["total_cycle_days"] == 120
        assert r["sustainability_score"] == 100
        assert r["recommendation"].startswith("EXCELLENT")


class TestAgriculturalSimulation:
    def _params(self, **overrides):
        base = dict(
            crop_type="Wheat", area_hectares=50, expected_yield_kg_ha=3000,
            price_per_kg=0.2, input_costs=10000, machinery_costs=5000, labor_costs=3000,
        )
        base.update(overrides)
        return AgriculturalParameters(**base)

    def test_production(self):
        r = agricultural.simulate_agricultural_production(self._params())
        assert r["total_production_kg"] == pytest.approx(150000)
        assert r["revenue"] == pytest.approx(30000)
        assert r["margin"] == pytest.approx(12000)

    @pytest.mark.parametrize("rainfall,factor", [(300, 0.7), (500, 0.85), (800, 1.0), (1500, 0.9)])
    def test_rainfall_factor(self, rainfall, factor):
        r = agricultural.simulate_agricultural_production(self._params(annual_rainfall_mm=rainfall))
        assert r["rainfall_factor"] == factor
        assert r["total_production_kg"] == pytest.approx(150000 * factor)

    def test_rotation_sustainability(self):
        good = agricultural.analyze_rotation_sustainability(["Wheat", "Soy", "Maize", "Sunflower"])
        bad = agricultural.analyze_rotation_sustainability(["Soy", "Soy", "Soy", "Soy"])
        assert good["sustainability_score"] == 100
        assert bad["sustainability_score"] < 50


class TestIntegralSimulation:
    def test_combines_components(self):
        r = calculators.calculate("INTEGRAL", {
            "animal_count": 50, "avg_weight_kg": 300, "daily_gain_kg": 0.5, "duration_days": 100,
            "crop_type": "Oats", "expected_yield_kg_ha": 1000,
            "area_hectares": 20, "price_per_kg": 1.5,
            "input_costs": 5000, "machinery_costs": 2000, "labor_costs": 1000,
        })
        livestock_kg = 50 * 0.5 * 100
        crop_kg = 20 * 1000
        assert r["total_kg_produced"] == pytest.approx(livestock_kg + crop_kg)
        assert r["production_kg"] == pytest.approx(livestock_kg + crop_kg)
        assert r["revenue"] == pytest.approx((livestock_kg + crop_kg) * 1.5)
        assert r["load_kg_ha"] == pytest.approx(750)
        assert set(r["details"]) == {"livestock", "agricultural", "economic"}

    def test_explicit_production_wins(self):
        r = calculators.calculate("INTEGRAL", {
            "crop_type": "Oats", "expected_yield_kg_ha": 1000,
            "area_hectares": 20, "price_per_kg": 1.5, "production_kg": 5000,
            "input_costs": 1000,
        })
        assert r["production_kg"] == 5000
        assert r["revenue"] == pytest.approx(7500)

    def test_livestock_requires_weight(self):
        with pytest.raises(ScenarioValidationError):
            calculators.calculate("INTEGRAL", {
                "animal_count": 10, "area_hectares": 5, "price_per_kg": 2,
            })


class TestRiskIdentification:
    def _risks(self, inputs, sim_type="ECONOMIC", thresholds=None):
        results = calculators.calculate(sim_type, inputs)
        return risk.identify_risks(results, inputs, thresholds)

    def test_reference_example_only_price_sensitive(self):
        factors = self._risks(ECONOMIC_INPUTS)
        assert risk_types(factors) == ["PRICE_SENSITIVE"]
        assert risk.risk_level(factors) == RiskLevel.MEDIUM

    def test_small_negative_margin_is_high(self):
        factors = risk.identify_risks({"margin": -1000})
        assert len(factors) == 1
        assert factors[0].type == "MARGIN_NEGATIVE"
        assert factors[0].severity == "HIGH"

    def test_large_negative_margin_is_critical(self):
        factors = risk.identify_risks({"margin": -60000})
        assert factors[0].severity == "CRITICAL"

    def test_rule_order(self):
        factors = self._risks(LOSS_INPUTS)
        assert risk_types(factors) == [
            "MARGIN_NEGATIVE", "BREAK_EVEN_UNREACHABLE", "PRICE_SENSITIVE",
        ]
        assert risk.risk_level(factors) == RiskLevel.HIGH

    def test_overgrazing(self):
        factors = self._risks(LIVESTOCK_INPUTS, "LIVESTOCK_LOAD")
        assert risk_types(factors) == ["OVERGRAZING"]
        assert factors[0].severity == "HIGH"

    def test_overgrazing_critical_above_twenty_percent(self):
        factors = risk.identify_risks({"load_kg_ha": 500, "capacity_max_kg_ha": 400})
        assert factors[0].severity == "CRITICAL"

    def test_cost_out_of_range(self):
        assert risk.identify_risks({"cost_per_kg": 13})[0].severity == "MEDIUM"
        assert risk.identify_risks({"cost_per_kg": 16})[0].severity == "HIGH"
        assert risk.identify_risks({"cost_per_kg": 11}) == []

    def test_injected_benchmark(self):
        factors = risk.identify_risks(
            {"cost_per_kg": 3}, thresholds=RiskThresholds(benchmark_cost_per_kg=2)
        )
        assert risk_types(factors) == ["COST_OUT_OF_RANGE"]

    def test_low_roi(self):
        assert risk_types(risk.identify_risks({"roi_percent": 5})) == ["LOW_ROI"]
        assert risk.identify_risks({"roi_percent": 0}) == []
        assert risk.identify_risks({"roi_percent": 10}) == []

    def test_small_scale(self):
        factors = risk.identify_risks({"margin": 10}, {"area_hectares": 0.5})
        assert risk_types(factors) == ["SMALL_SCALE"]

    def test_empty_results(self):
        assert risk.identify_risks(None) == []
        assert risk.identify_risks({}) == []

    @pytest.mark.parametrize("count,level", [(0, "LOW"), (1, "MEDIUM"), (2, "MEDIUM"), (3, "HIGH"), (5, "HIGH")])
    def test_risk_level(self, count, level):
        assert risk.risk_level([object()] * count) == level


class TestComparisonScores:
    def test_margin_score_monotonic(self):
        scores = [comparison.margin_score(m, 100) for m in range(-50, 80)]
        assert scores == sorted(scores)
        assert all(0 <= s <= 10 for s in scores)

    def test_roi_score_monotonic(self):
        scores = [comparison.roi_score(r) for r in range(-20, 150)]
        assert scores == sorted(scores)
        assert all(0 <= s <= 10 for s in scores)

    def test_margin_score_without_revenue(self):
        assert comparison.margin_score(100, 0) == 0

    def test_margin_score_without_margin(self):
        assert comparison.margin_score(None, 22500) == 0
        assert comparison.roi_score(None) == 0

    def test_stocking_results_earn_no_margin_points(self):
        results = livestock.simulate_stocking_load(LivestockLoadParameters(**LIVESTOCK_INPUTS))
        results["risk_factors"] = []
        results["risk_level"] = "LOW"
        assert "margin" not in results
        assert results["estimated_revenue"] > 0
        scores = comparison.scenario_scores(results, ComparisonWeights())
        assert scores["margin_score"] == 0
        assert scores["roi_score"] == 0
        assert scores["score"] == pytest.approx(10 * 0.3)

    def test_risk_score_without_results(self):
        assert comparison.risk_score(None) == 0
        assert comparison.risk_score({}) == 0

    @pytest.mark.parametrize("count,expected", [(0, 10), (1, 8), (2, 6), (3, 4), (4, 2), (7, 2)])
    def test_risk_score_by_factor_count(self, count, expected):
        assert comparison.risk_score({"risk_factors": [{}] * count}) == expected

    def test_risk_score_adjusted_by_level(self):
        assert comparison.risk_score({"risk_factors": [{}], "risk_level": "LOW"}) == 10
        assert comparison.risk_score({"risk_factors": [{}] * 3, "risk_level": "HIGH"}) == 2
        assert comparison.risk_score({"risk_factors": [{}] * 4, "risk_level": "CRITICAL"}) == 0

    def test_risk_score_neutral_without_assessment(self):
        assert comparison.risk_score({"margin": 10}) == 5


def executed(scenario_id, name, inputs):
    results = calculators.calculate("ECONOMIC", inputs)
    factors = risk.identify_risks(results, inputs)
    results["risk_factors"] = [f.model_dump() for f in factors]
    results["risk_level"] = risk.risk_level(factors).value
    return {"id": scenario_id, "name": name, "scenario_type": "CUSTOM", "results": results}


class TestCompareScenarios:
    def test_ranking_and_winner(self):
        good = executed(1, "Good", ECONOMIC_INPUTS)
        bad = executed(2, "Bad", LOSS_INPUTS)
        result = comparison.compare_scenarios([bad, good])

        assert [r["scenario_id"] for r in result["ranking"]] == [1, 2]
        assert result["winner"]["scenario_id"] == 1
        assert result["runner_up"]["scenario_id"] == 2
        # margin 6 × 0.4 + ROI 7 × 0.3 + risk 8 × 0.3
        assert result["winner_score"] == pytest.approx(6.9)
        assert result["ranking"][1]["comparison_score"] == pytest.approx(0.6)

    def test_single_scenario_wins(self):
        result = comparison.compare_scenarios([executed(1, "Only", ECONOMIC_INPUTS)])
        assert result["winner"]["scenario_id"] == 1
        assert result["runner_up"] is None

    def test_requires_a_scenario(self):
        with pytest.raises(ValueError):
            comparison.compare_scenarios([])

    def test_ties_keep_input_order(self):
        a = executed(1, "A", ECONOMIC_INPUTS)
        b = executed(2, "B", ECONOMIC_INPUTS)
        assert [r["scenario_id"] for r in comparison.compare_scenarios([b, a])["ranking"]] == [2, 1]

    def test_score_capped_at_ten(self):
        weights = ComparisonWeights(margin=1.0, roi=1.0, risk=1.0)
        result = comparison.compare_scenarios([executed(1, "A", ECONOMIC_INPUTS)], weights)
        assert result["winner_score"] == 10

    def test_unnormalized_weights_logged(self, caplog):
        weights = ComparisonWeights(margin=0.5, roi=0.5, risk=0.5)
        with caplog.at_level("WARNING", logger="farmsim.comparison"):
            comparison.compare_scenarios([executed(1, "A", ECONOMIC_INPUTS)], weights)
        assert "not 1.0" in caplog.text

    def test_unexecuted_scenario_scores_zero(self):
        draft = {"id": 3, "name": "Draft", "scenario_type": "CUSTOM", "results": None}
        result = comparison.compare_scenarios([draft, executed(1, "A", ECONOMIC_INPUTS)])
        assert result["ranking"][-1]["scenario_id"] == 3
        assert result["ranking"][-1]["comparison_score"] == 0

    def test_summary_extremes(self):
        good = executed(1, "Good", ECONOMIC_INPUTS)
        bad = executed(2, "Bad", LOSS_INPUTS)
        summary = comparison.compare_scenarios([good, bad])["analysis"]["comparison_summary"]
        assert summary["highest_margin"]["scenario_id"] == 1
        assert summary["highest_roi"]["scenario_id"] == 1
        assert summary["lowest_risk"]["scenario_id"] == 1
        assert summary["lowest_cost"]["scenario_id"] == 2

    def test_detailed_ranking(self):
        result = comparison.compare_scenarios([executed(1, "Good", ECONOMIC_INPUTS)])
        entry = result["analysis"]["detailed_ranking"][0]
        assert entry["rank"] == 1
        assert entry["margin"] == 1000
        assert entry["roi_percent"] == 20.0
        assert entry["risk_factors_count"] == 1


class TestRecommendation:
    @pytest.mark.parametrize("results,phrase", [
        ({"margin": -1, "roi_percent": 50}, "not recommended"),
        ({"margin": 1000, "roi_percent": 3}, "low return"),
        ({"margin": 1000, "roi_percent": 30, "risk_factors": [{}] * 4}, "high risk, proceed with caution"),
        ({"margin": 60000, "roi_percent": 30}, "highly recommended"),
        ({"margin": 30000, "roi_percent": 15}, "recommended"),
        ({"margin": 5000, "roi_percent": 8}, "viable, evaluate against alternatives"),
    ])
    def test_rules(self, results, phrase):
        assert comparison.recommendation("Plan", results).lower().startswith(phrase)

    def test_strengths_and_weaknesses(self):
        results = {"margin": 5000, "roi_percent": 8, "risk_factors": [{}] * 3, "cost_per_kg": 13}
        assert comparison.scenario_strengths(results) == ["Positive margin of $5,000.00"]
        weaknesses = comparison.scenario_weaknesses(results)
        assert "Very thin margin" in weaknesses
        assert len(weaknesses) == 4


class TestVariantPerturbation:
    def test_price_factors(self):
        by_label = {
            a["label"]: variants.perturb_parameters({"price_per_kg": 2.0}, a)
            for a in variants.VARIANT_ADJUSTMENTS
        }
        assert by_label["Optimistic"]["price_per_kg"] == pytest.approx(2.30)
        assert by_label["Conservative"]["price_per_kg"] == pytest.approx(1.80)
        assert by_label["Critical"]["price_per_kg"] == pytest.approx(1.50)

    def test_costs_gain_and_rainfall(self):
        critical = variants.VARIANT_ADJUSTMENTS[2]
        out = variants.perturb_parameters(
            {"daily_gain_kg": 1.0, "input_costs": 100, "other_costs": 10, "annual_rainfall_mm": 1000},
            critical,
        )
        assert out["daily_gain_kg"] == pytest.approx(0.7)
        assert out["input_costs"] == pytest.approx(120)
        assert out["other_costs"] == pytest.approx(12)
        assert out["annual_rainfall_mm"] == pytest.approx(600)

    def test_only_present_keys_touched(self):
        base = {"price_per_kg": 2.0, "crop_type": "Soy"}
        out = variants.perturb_parameters(base, variants.VARIANT_ADJUSTMENTS[1])
        assert set(out) == {"price_per_kg", "crop_type"}
        assert base["price_per_kg"] == 2.0
