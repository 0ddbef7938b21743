from __future__ import annotations

import logging
import math
from typing import Optional, Sequence

from .models import TrafficSplitPlan
from .significance import (
    POWER_Z,
    POWER_Z_DEFAULT,
    SAMPLE_SIZE_CONFIDENCE_Z,
    SAMPLE_SIZE_CONFIDENCE_Z_DEFAULT,
    critical_value,
)


logger = logging.getLogger(__name__)


def calculate_sample_size(
    baseline_conversion: float,
    minimum_detectable_effect: float,
    power: float = 0.80,
    confidence_level: float = 0.95,
) -> int:
    """Visitors needed per variant to detect a relative lift.

    `minimum_detectable_effect` is relative to the baseline and may be given
    either as a fraction (0.2) or as a percentage (20).
    """
    mde = minimum_detectable_effect / 100 if minimum_detectable_effect > 1 else minimum_detectable_effect

    z_alpha = critical_value(SAMPLE_SIZE_CONFIDENCE_Z, confidence_level, SAMPLE_SIZE_CONFIDENCE_Z_DEFAULT)
    z_beta = critical_value(POWER_Z, power, POWER_Z_DEFAULT)

    p1 = baseline_conversion
    p2 = baseline_conversion * (1 + mde)
    p_avg = (p1 + p2) / 2

    denom = (p2 - p1) ** 2
    if denom == 0:
        logger.debug("zero effect size (baseline=%s, mde=%s), sample size is 0", baseline_conversion, mde)
        return 0

    n = math.ceil((2 * p_avg * (1 - p_avg) * (z_alpha + z_beta) ** 2) / denom)
    return int(n)


def estimate_test_duration(
    required_sample_size: int,
    daily_traffic: float,
    traffic_split: Sequence[float] = (50, 50),
) -> float:
    """Days until the variant arm alone collects `required_sample_size`.

    Returns ``math.inf`` when the variant receives no traffic.
    """
    variant_pct = traffic_split[1] if len(traffic_split) > 1 else 50
    variant_traffic = daily_traffic * (variant_pct / 100)
    if variant_traffic <= 0:
        return math.inf
    return math.ceil(required_sample_size / variant_traffic)


def planned_duration(
    required_sample_size: int,
    daily_traffic: float,
    traffic_split: Sequence[float] = (50, 50),
) -> Optional[float]:
    """Like `estimate_test_duration`, but None when there is no sample size to plan for."""
    if required_sample_size <= 0:
        return None
    return estimate_test_duration(required_sample_size, daily_traffic, traffic_split)


def optimize_traffic_split(
    baseline_conversion: float,
    minimum_detectable_effect: float,
    daily_traffic: float,
    max_test_days: int = 14,
    power: float = 0.80,
    confidence_level: float = 0.95,
) -> TrafficSplitPlan:
    """Skew traffic towards the variant when 50/50 would overrun `max_test_days`."""
    sample_size = calculate_sample_size(baseline_conversion, minimum_detectable_effect, power, confidence_level)

    if daily_traffic <= 0:
        return TrafficSplitPlan(split=(50.0, 50.0), sample_size=sample_size, estimated_days=math.inf)

    estimated_days = estimate_test_duration(sample_size, daily_traffic, (50, 50))

    if estimated_days > max_test_days:
        needed_daily_traffic = sample_size / max_test_days
        split_b = (needed_daily_traffic / daily_traffic) * 100
        logger.debug(
            "50/50 needs %s days (> %s), proposing %.1f%% to variant",
            estimated_days,
            max_test_days,
            split_b,
        )
        if split_b >= 100:
            # even all traffic on the variant cannot finish in time
            return TrafficSplitPlan(
                split=(0.0, 100.0),
                sample_size=sample_size,
                estimated_days=estimate_test_duration(sample_size, daily_traffic, (0, 100)),
            )
        return TrafficSplitPlan(
            split=(100.0 - split_b, split_b),
            sample_size=sample_size,
            estimated_days=max_test_days,
        )

    return TrafficSplitPlan(split=(50.0, 50.0), sample_size=sample_size, estimated_days=estimated_days)
