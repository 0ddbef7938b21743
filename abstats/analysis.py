from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Optional, Sequence, Tuple, Union

from .models import (
    ExperimentAnalysis,
    StatisticalResult,
    TestMetrics,
    TestRecommendation,
    VariantObservation,
    VariantResult,
)
from .planning import calculate_sample_size
from .primitives import (
    calculate_absolute_improvement,
    calculate_conversion_rate,
    calculate_relative_improvement,
    calculate_z_score,
)
from .significance import (
    apply_bonferroni_correction,
    calculate_confidence_interval,
    calculate_p_value,
    calculate_power,
)


logger = logging.getLogger(__name__)

TARGET_POWER = 0.80

CONTROL_ID = "control"
CONTROL_NAME = "Control (A)"


def analyze_test_results(
    control: VariantObservation,
    variant: VariantObservation,
    variant_id: str = "variant",
    variant_name: str = "Variant (B)",
    confidence_level: float = 0.95,
    baseline_conversion_rate: Optional[float] = None,
) -> StatisticalResult:
    """Full frequentist read-out of one variant against control."""
    control_rate = calculate_conversion_rate(control.conversions, control.visitors)
    variant_rate = calculate_conversion_rate(variant.conversions, variant.visitors)

    z_score = calculate_z_score(control.visitors, control.conversions, variant.visitors, variant.conversions)
    p_value = calculate_p_value(z_score)

    relative_improvement = calculate_relative_improvement(control_rate, variant_rate)
    absolute_improvement = calculate_absolute_improvement(control_rate, variant_rate)

    confidence_interval = calculate_confidence_interval(
        control.visitors,
        control.conversions,
        variant.visitors,
        variant.conversions,
        confidence_level,
    )

    sample_size_required = 0
    if baseline_conversion_rate and relative_improvement != 0:
        mde = abs(relative_improvement / 100)
        sample_size_required = calculate_sample_size(
            baseline_conversion_rate, mde, TARGET_POWER, confidence_level
        )

    current_power = calculate_power(control.visitors, control.conversions, variant.visitors, variant.conversions)

    is_significant = p_value < (1 - confidence_level)

    recommendation = generate_recommendation(
        is_significant,
        relative_improvement,
        current_power,
        control.visitors + variant.visitors,
        sample_size_required,
    )
    logger.debug(
        "%s vs control: z=%.3f p=%.4f power=%.3f -> %s",
        variant_id,
        z_score,
        p_value,
        current_power,
        recommendation.action,
    )

    return StatisticalResult(
        control=VariantResult(
            variant_id=CONTROL_ID,
            variant_name=CONTROL_NAME,
            visitors=control.visitors,
            conversions=control.conversions,
            conversion_rate=control_rate,
        ),
        treatment=VariantResult(
            variant_id=variant_id,
            variant_name=variant_name,
            visitors=variant.visitors,
            conversions=variant.conversions,
            conversion_rate=variant_rate,
        ),
        relative_improvement=relative_improvement,
        absolute_improvement=absolute_improvement,
        p_value=p_value,
        z_score=z_score,
        confidence_level=confidence_level * 100,
        is_significant=is_significant,
        confidence_interval=confidence_interval,
        sample_size_required=sample_size_required,
        current_power=current_power,
        recommendation=recommendation,
    )


def generate_recommendation(
    is_significant: bool,
    relative_improvement: float,
    current_power: float,
    total_visitors: int,
    sample_size_required: int,
) -> TestRecommendation:
    if is_significant and relative_improvement > 0:
        return TestRecommendation(
            action="winner",
            message=f"Winning variant found! {relative_improvement:.1f}% improvement detected.",
            confidence=min(99.0, 95 + (current_power - TARGET_POWER) * 20),
            next_steps=(
                "Roll the winning variant out to all traffic",
                "Document the results",
                "Plan the next test scenarios",
            ),
        )

    if is_significant and relative_improvement < 0:
        return TestRecommendation(
            action="stop",
            message=f"Negative result detected. Conversion dropped by {abs(relative_improvement):.1f}%.",
            confidence=95.0,
            next_steps=(
                "Stop the test",
                "Keep serving the control variant",
                "Analyse why the variant underperformed",
            ),
        )

    if current_power < TARGET_POWER:
        visitors_needed = max(0, math.ceil(sample_size_required - total_visitors))
        return TestRecommendation(
            action="continue",
            message=f"More data needed. About {visitors_needed:,} more visitors required.",
            confidence=current_power * 100,
            next_steps=(
                "Keep the test running",
                "Check your traffic sources",
                "Consider extending the test duration",
            ),
        )

    return TestRecommendation(
        action="inconclusive",
        message="Results are inconclusive. No statistically significant difference was detected.",
        confidence=(1 - current_power) * 100,
        next_steps=(
            "Run the test for longer",
            "Start a new test with a different hypothesis",
            "Revisit the target KPIs",
        ),
    )


def _parse_start_date(start_date: Union[str, datetime]) -> datetime:
    if isinstance(start_date, datetime):
        return start_date
    # fromisoformat only accepts a trailing "Z" from 3.11 on
    if start_date.endswith("Z"):
        start_date = start_date[:-1] + "+00:00"
    return datetime.fromisoformat(start_date)


def calculate_test_metrics(
    control: VariantObservation,
    variant: VariantObservation,
    start_date: Union[str, datetime],
    daily_traffic: float,
    now: Optional[datetime] = None,
) -> TestMetrics:
    total_visitors = control.visitors + variant.visitors
    total_conversions = control.conversions + variant.conversions

    start = _parse_start_date(start_date)
    if now is None:
        now = datetime.now(start.tzinfo)
    test_duration_days = max(1, math.floor((now - start).total_seconds() / 86400))

    return TestMetrics(
        total_visitors=total_visitors,
        total_conversions=total_conversions,
        overall_conversion_rate=calculate_conversion_rate(total_conversions, total_visitors),
        test_duration_days=test_duration_days,
        daily_traffic=daily_traffic,
        estimated_completion_days=math.ceil(total_visitors / daily_traffic) if daily_traffic > 0 else 0,
    )


def analyze_experiment(
    control: VariantObservation,
    variants: Sequence[Tuple[str, str, VariantObservation]],
    confidence_level: float = 0.95,
    baseline_conversion_rate: Optional[float] = None,
    family_wise_error_rate: float = 0.05,
) -> ExperimentAnalysis:
    """Analyse several treatments against one control.

    `variants` holds ``(variant_id, variant_name, observation)`` triples. Each
    comparison keeps its own uncorrected verdict; `bonferroni_significant`
    carries the family-wise corrected one in the same order.
    """
    if not variants:
        raise ValueError("at least one variant is required")

    results = tuple(
        analyze_test_results(
            control,
            observation,
            variant_id=variant_id,
            variant_name=variant_name,
            confidence_level=confidence_level,
            baseline_conversion_rate=baseline_conversion_rate,
        )
        for variant_id, variant_name, observation in variants
    )
    corrected = apply_bonferroni_correction([r.p_value for r in results], family_wise_error_rate)

    return ExperimentAnalysis(
        results=results,
        bonferroni_significant=tuple(corrected),
        family_wise_error_rate=family_wise_error_rate,
    )
