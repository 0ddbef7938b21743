"""Operational helpers layered on top of the analysis engine.

These turn raw numbers into decisions for whoever runs the experiment:
whether a live test can be stopped automatically, what to change about a
slow test, what a win is worth, and which experiment to run next.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import List, Literal, Optional, Tuple

from .analysis import analyze_test_results
from .models import VariantObservation
from .planning import calculate_sample_size


logger = logging.getLogger(__name__)

Impact = Literal["high", "medium", "low"]
TestStatus = Literal["draft", "running", "paused", "completed"]


@dataclass(frozen=True)
class AutomationConfig:
    auto_stop_significant: bool = True
    auto_stop_winner: bool = True
    min_sample_size: int = 1000
    max_test_duration_days: int = 30


DEFAULT_AUTOMATION_CONFIG = AutomationConfig()


@dataclass(frozen=True)
class AutoStopDecision:
    should_stop: bool
    reason: str
    winner: Optional[Literal["control", "variant"]]


@dataclass(frozen=True)
class OptimizationRecommendation:
    type: Literal["traffic", "duration", "sample_size", "hypothesis", "segment"]
    title: str
    description: str
    impact: Impact
    action: str
    estimated_improvement: Optional[float] = None


@dataclass(frozen=True)
class TestROI:
    monthly_revenue_increase: float
    annual_revenue_increase: float
    roi_percentage: float
    payback_period_days: int


@dataclass(frozen=True)
class PipelineRecommendation:
    stage: Literal["planning", "running", "analysis", "implementation"]
    action: str
    priority: Impact


@dataclass(frozen=True)
class TestVariable:
    name: str
    type: Literal["headline", "cta", "layout", "color", "image", "pricing", "form"]
    current_value: str
    proposed_value: str


@dataclass(frozen=True)
class TestScenario:
    name: str
    hypothesis: str
    variables: Tuple[TestVariable, ...]
    expected_improvement: float
    priority: Impact
    recommended_duration_days: int


def should_auto_stop_test(
    control: VariantObservation,
    variant: VariantObservation,
    config: AutomationConfig = DEFAULT_AUTOMATION_CONFIG,
    test_duration_days: Optional[int] = None,
) -> AutoStopDecision:
    """Decide whether a live test can be stopped.

    A significant result wins over the duration limit; past
    `config.max_test_duration_days` an undecided test is stopped without a
    winner.
    """
    overdue = test_duration_days is not None and test_duration_days > config.max_test_duration_days
    overdue_decision = AutoStopDecision(
        should_stop=True,
        reason=f"Maximum test duration reached ({test_duration_days}/{config.max_test_duration_days} days)",
        winner=None,
    )

    total_visitors = control.visitors + variant.visitors
    if total_visitors < config.min_sample_size:
        if overdue:
            return overdue_decision
        return AutoStopDecision(
            should_stop=False,
            reason=f"Minimum sample size not reached ({total_visitors:,}/{config.min_sample_size:,})",
            winner=None,
        )

    analysis = analyze_test_results(control, variant, confidence_level=0.95)

    if config.auto_stop_winner and analysis.is_significant and analysis.relative_improvement > 0:
        logger.info("auto-stop: significant winner at %+.1f%%", analysis.relative_improvement)
        return AutoStopDecision(
            should_stop=True,
            reason=f"Statistically significant winner detected: +{analysis.relative_improvement:.1f}%",
            winner="variant",
        )

    if config.auto_stop_significant and analysis.is_significant and analysis.relative_improvement < 0:
        logger.info("auto-stop: significant loss at %+.1f%%", analysis.relative_improvement)
        return AutoStopDecision(
            should_stop=True,
            reason=f"Statistically significant drop detected: {analysis.relative_improvement:.1f}%",
            winner="control",
        )

    if overdue:
        logger.info("auto-stop: no verdict after %s days", test_duration_days)
        return overdue_decision

    return AutoStopDecision(should_stop=False, reason="Test should keep running", winner=None)


def generate_optimization_recommendations(
    daily_traffic: float,
    test_duration_days: int,
    current_power: float,
    sample_size_required: int,
    total_visitors: int,
) -> List[OptimizationRecommendation]:
    recommendations: List[OptimizationRecommendation] = []

    if current_power < 0.8:
        visitors_needed = sample_size_required - total_visitors
        if visitors_needed > 0:
            if visitors_needed > total_visitors:
                action = "Extend the test or bring in more traffic."
            else:
                days = math.ceil(visitors_needed / (daily_traffic or 1))
                action = f"Run the test for at least {days} more days."
            recommendations.append(
                OptimizationRecommendation(
                    type="sample_size",
                    title="More data needed",
                    description=f"About {visitors_needed:,} more visitors are needed to reach significance.",
                    impact="high",
                    action=action,
                    estimated_improvement=0.0,
                )
            )

    if test_duration_days > 14 and daily_traffic < 100:
        recommendations.append(
            OptimizationRecommendation(
                type="traffic",
                title="Optimise the traffic split",
                description="Low-traffic sites benefit from a more aggressive allocation.",
                impact="medium",
                action="Consider 20% of traffic for control and 80% for the leading variant.",
            )
        )

    if total_visitors > 5000:
        recommendations.append(
            OptimizationRecommendation(
                type="segment",
                title="Run a segment analysis",
                description="Separate tests per audience often reveal effects the pooled test hides.",
                impact="medium",
                action="Consider separate tests for mobile vs desktop, new vs returning and per traffic source.",
            )
        )

    if test_duration_days > 21:
        recommendations.append(
            OptimizationRecommendation(
                type="hypothesis",
                title="Revisit the hypothesis",
                description="Tests that drag on usually start from a weak hypothesis.",
                impact="high",
                action="Sharpen the goal of the test and write a more specific hypothesis.",
            )
        )

    return recommendations


def calculate_test_roi(
    baseline_revenue: float,
    improvement: float,
    test_cost: float,
    monthly_traffic: float,
) -> TestROI:
    """Revenue impact of shipping a variant with `improvement` percent lift."""
    monthly = baseline_revenue * (improvement / 100) * (monthly_traffic / 100)
    annual = monthly * 12

    roi_percentage = ((annual - test_cost) / test_cost) * 100 if test_cost > 0 else 0.0
    payback = math.ceil((test_cost / monthly) * 30) if test_cost > 0 and monthly > 0 else 0

    return TestROI(
        monthly_revenue_increase=monthly,
        annual_revenue_increase=annual,
        roi_percentage=roi_percentage,
        payback_period_days=payback,
    )


def get_pipeline_recommendations(
    status: TestStatus,
    duration_days: int,
    total_visitors: int,
    is_significant: bool,
) -> List[PipelineRecommendation]:
    if status not in ("draft", "running", "paused", "completed"):
        raise ValueError(f"unknown test status: {status!r}")

    recs: List[PipelineRecommendation] = []

    if status == "draft":
        recs += [
            PipelineRecommendation("planning", "Clarify the hypothesis and set measurable goals.", "high"),
            PipelineRecommendation("planning", "Calculate the minimum required sample size.", "high"),
            PipelineRecommendation("planning", "Analyse your traffic sources.", "medium"),
        ]
    elif status == "running":
        if duration_days > 7 and total_visitors < 1000:
            recs.append(PipelineRecommendation("running", "Look into ways to increase traffic.", "high"))
        if is_significant:
            recs.append(
                PipelineRecommendation("running", "Early winner detected, the test can be concluded.", "high")
            )
    elif status == "completed":
        if is_significant:
            recs += [
                PipelineRecommendation("analysis", "Document the results and share them with the team.", "high"),
                PipelineRecommendation("implementation", "Roll the winning variant out to all traffic.", "high"),
                PipelineRecommendation("implementation", "Plan the next test scenarios.", "medium"),
            ]
        else:
            recs += [
                PipelineRecommendation("analysis", "Analyse why the test produced no result.", "high"),
                PipelineRecommendation("planning", "Plan a new test with a different hypothesis.", "medium"),
            ]

    return recs


_LOW_RATE_SCENARIOS = (
    TestScenario(
        name="CTA optimisation",
        hypothesis="More prominent call-to-action buttons will raise the conversion rate",
        variables=(
            TestVariable("Button colour", "cta", "Blue", "Green"),
            TestVariable("Button text", "cta", "Buy", "Get started"),
        ),
        expected_improvement=15,
        priority="high",
        recommended_duration_days=7,
    ),
    TestScenario(
        name="Landing page layout",
        hypothesis="A simplified layout makes it easier for visitors to decide",
        variables=(
            TestVariable("Form position", "layout", "Bottom", "Top"),
            TestVariable("Hero image", "image", "Product photo", "Customer testimonial"),
        ),
        expected_improvement=20,
        priority="high",
        recommended_duration_days=14,
    ),
)

_MID_RATE_SCENARIOS = (
    TestScenario(
        name="Social proof",
        hypothesis="Customer reviews and ratings will increase trust",
        variables=(
            TestVariable("Testimonial position", "layout", "Footer", "Hero section"),
            TestVariable("Logo bar", "image", "Current", "Extended"),
        ),
        expected_improvement=10,
        priority="medium",
        recommended_duration_days=10,
    ),
    TestScenario(
        name="Pricing presentation",
        hypothesis="Presenting prices more clearly will increase conversion",
        variables=(
            TestVariable("Price display", "pricing", "Monthly", "Yearly with discount"),
            TestVariable("Guarantee copy", "cta", "None", "30-day money back"),
        ),
        expected_improvement=12,
        priority="high",
        recommended_duration_days=7,
    ),
)

_HIGH_RATE_SCENARIOS = (
    TestScenario(
        name="Micro-interactions",
        hypothesis="Small interaction improvements will increase ROI",
        variables=(
            TestVariable("Hover effects", "layout", "None", "Added"),
            TestVariable("Form validation", "form", "On submit", "Inline"),
        ),
        expected_improvement=5,
        priority="low",
        recommended_duration_days=14,
    ),
)


def generate_test_scenarios(
    current_conversion_rate_pct: float,
    monthly_traffic: float,
) -> List[TestScenario]:
    """Suggest experiments for a site converting at `current_conversion_rate_pct` percent.

    Durations are stretched to what the site's traffic can actually support.
    """
    if current_conversion_rate_pct < 1:
        catalogue = _LOW_RATE_SCENARIOS
    elif current_conversion_rate_pct < 3:
        catalogue = _MID_RATE_SCENARIOS
    else:
        catalogue = _HIGH_RATE_SCENARIOS

    daily_traffic = monthly_traffic / 30
    baseline = current_conversion_rate_pct / 100

    scenarios = []
    for scenario in catalogue:
        days = scenario.recommended_duration_days
        if daily_traffic > 0:
            needed = calculate_sample_size(baseline, scenario.expected_improvement / 100)
            days = max(days, math.ceil(needed / daily_traffic))
        scenarios.append(replace(scenario, recommended_duration_days=days))
    return scenarios
