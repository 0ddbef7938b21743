import pytest

from abstats import VariantObservation
from abstats.automation import (
    AutomationConfig,
    calculate_test_roi,
    generate_optimization_recommendations,
    generate_test_scenarios,
    get_pipeline_recommendations,
    should_auto_stop_test,
)
from abstats.planning import calculate_sample_size


class TestAutoStop:
    def test_waits_for_minimum_sample(self):
        decision = should_auto_stop_test(VariantObservation(400, 40), VariantObservation(400, 80))
        assert not decision.should_stop
        assert decision.winner is None
        assert "Minimum sample size" in decision.reason

    def test_stops_on_winner(self, control, winning_variant):
        decision = should_auto_stop_test(control, winning_variant)
        assert decision.should_stop
        assert decision.winner == "variant"
        assert "+30.0%" in decision.reason

    def test_stops_on_significant_loss(self, control, losing_variant):
        decision = should_auto_stop_test(control, losing_variant)
        assert decision.should_stop
        assert decision.winner == "control"

    def test_respects_disabled_flags(self, control, winning_variant, losing_variant):
        config = AutomationConfig(auto_stop_winner=False, auto_stop_significant=False)
        assert not should_auto_stop_test(control, winning_variant, config).should_stop
        assert not should_auto_stop_test(control, losing_variant, config).should_stop

    def test_keeps_running_without_signal(self, control):
        decision = should_auto_stop_test(control, VariantObservation(1000, 104))
        assert not decision.should_stop
        assert decision.reason == "Test should keep running"

    def test_stops_undecided_test_past_max_duration(self, control):
        config = AutomationConfig(max_test_duration_days=30)
        flat = VariantObservation(1000, 104)
        assert not should_auto_stop_test(control, flat, config, test_duration_days=30).should_stop
        decision = should_auto_stop_test(control, flat, config, test_duration_days=31)
        assert decision.should_stop
        assert decision.winner is None
        assert "Maximum test duration" in decision.reason

    def test_overdue_without_minimum_sample_still_stops(self):
        decision = should_auto_stop_test(
            VariantObservation(100, 10), VariantObservation(100, 12), test_duration_days=45
        )
        assert decision.should_stop
        assert decision.winner is None

    def test_significant_result_beats_duration_limit(self, control, winning_variant):
        decision = should_auto_stop_test(control, winning_variant, test_duration_days=90)
        assert decision.winner == "variant"


class TestOptimizationRecommendations:
    def test_underpowered_short_of_visitors(self):
        recs = generate_optimization_recommendations(
            daily_traffic=200,
            test_duration_days=5,
            current_power=0.4,
            sample_size_required=3000,
            total_visitors=2000,
        )
        assert [r.type for r in recs] == ["sample_size"]
        assert recs[0].action == "Run the test for at least 5 more days."

    def test_far_from_target_suggests_more_traffic(self):
        recs = generate_optimization_recommendations(200, 5, 0.4, 10000, 2000)
        assert recs[0].action == "Extend the test or bring in more traffic."

    def test_long_low_traffic_test(self):
        recs = generate_optimization_recommendations(50, 25, 0.9, 0, 6000)
        assert [r.type for r in recs] == ["traffic", "segment", "hypothesis"]

    def test_nothing_to_say(self):
        assert generate_optimization_recommendations(500, 7, 0.9, 1000, 2000) == []


def test_roi():
    roi = calculate_test_roi(
        baseline_revenue=10000, improvement=10, test_cost=2000, monthly_traffic=50000
    )
    assert roi.monthly_revenue_increase == pytest.approx(500000)
    assert roi.annual_revenue_increase == pytest.approx(6000000)
    assert roi.roi_percentage == pytest.approx((6000000 - 2000) / 2000 * 100)
    assert roi.payback_period_days == 1


def test_roi_without_cost_or_gain():
    assert calculate_test_roi(10000, 10, 0, 1000).roi_percentage == 0
    assert calculate_test_roi(10000, 0, 500, 1000).payback_period_days == 0


class TestPipeline:
    def test_draft(self):
        recs = get_pipeline_recommendations("draft", 0, 0, False)
        assert len(recs) == 3
        assert {r.stage for r in recs} == {"planning"}

    def test_running_slow_and_significant(self):
        recs = get_pipeline_recommendations("running", 10, 500, True)
        assert len(recs) == 2

    def test_paused_has_no_advice(self):
        assert get_pipeline_recommendations("paused", 10, 500, True) == []

    def test_completed(self):
        assert len(get_pipeline_recommendations("completed", 20, 9000, True)) == 3
        assert len(get_pipeline_recommendations("completed", 20, 9000, False)) == 2

    def test_unknown_status(self):
        with pytest.raises(ValueError):
            get_pipeline_recommendations("archived", 0, 0, False)


class TestScenarios:
    def test_low_rate_catalogue(self):
        scenarios = generate_test_scenarios(0.5, monthly_traffic=30000)
        assert [s.name for s in scenarios] == ["CTA optimisation", "Landing page layout"]

    def test_mid_and_high_rate_catalogues(self):
        assert len(generate_test_scenarios(2.0, 30000)) == 2
        assert [s.name for s in generate_test_scenarios(5.0, 30000)] == ["Micro-interactions"]

    def test_duration_stretched_to_traffic(self):
        (scenario,) = generate_test_scenarios(5.0, monthly_traffic=3000)
        needed = calculate_sample_size(0.05, 0.05)
        assert scenario.recommended_duration_days == -(-needed // 100)

    def test_duration_kept_with_lots_of_traffic(self):
        (scenario,) = generate_test_scenarios(5.0, monthly_traffic=300_000_000)
        assert scenario.recommended_duration_days == 14

    def test_no_traffic_keeps_catalogue_duration(self):
        assert [s.recommended_duration_days for s in generate_test_scenarios(2.0, 0)] == [10, 7]
