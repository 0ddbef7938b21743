from __future__ import annotations

import logging
import math
from types import MappingProxyType
from typing import List, Mapping, Sequence

from .models import ConfidenceInterval
from .primitives import calculate_z_score, normal_cdf


logger = logging.getLogger(__name__)


# Critical z-values. Lookups fall back to an explicit default rather than
# interpolating, so unusual levels behave predictably.
CONFIDENCE_Z: Mapping[float, float] = MappingProxyType({0.90: 1.645, 0.95: 1.96, 0.99: 2.576})
CONFIDENCE_Z_DEFAULT = 1.96

ALPHA_Z: Mapping[float, float] = MappingProxyType({0.05: 1.96, 0.01: 2.576})
ALPHA_Z_DEFAULT = 1.645

SAMPLE_SIZE_CONFIDENCE_Z: Mapping[float, float] = MappingProxyType({0.95: 1.96, 0.99: 2.576})
SAMPLE_SIZE_CONFIDENCE_Z_DEFAULT = 1.645

POWER_Z: Mapping[float, float] = MappingProxyType({0.80: 0.84, 0.90: 1.28})
POWER_Z_DEFAULT = 0.84


def critical_value(table: Mapping[float, float], key: float, default: float) -> float:
    value = table.get(key)
    if value is None:
        logger.debug("no critical value for %s, using default %s", key, default)
        return default
    return value


def calculate_p_value(z_score: float) -> float:
    """Two-tailed p-value for a standard normal statistic."""
    return 2 * (1 - normal_cdf(abs(z_score)))


def calculate_confidence_interval(
    control_visitors: int,
    control_conversions: int,
    variant_visitors: int,
    variant_conversions: int,
    confidence_level: float = 0.95,
) -> ConfidenceInterval:
    """Interval for the rate difference (variant - control), unpooled SE."""
    if control_visitors <= 0 or variant_visitors <= 0:
        return ConfidenceInterval(lower=0.0, upper=0.0)

    p1 = control_conversions / control_visitors
    p2 = variant_conversions / variant_visitors

    diff = p2 - p1
    se = math.sqrt((p1 * (1 - p1)) / control_visitors + (p2 * (1 - p2)) / variant_visitors)

    z = critical_value(CONFIDENCE_Z, confidence_level, CONFIDENCE_Z_DEFAULT)
    return ConfidenceInterval(lower=diff - z * se, upper=diff + z * se)


def calculate_power(
    control_visitors: int,
    control_conversions: int,
    variant_visitors: int,
    variant_conversions: int,
    alpha: float = 0.05,
) -> float:
    """Post-hoc power at the observed effect: P(Z > z_alpha - |z|)."""
    if control_visitors <= 0 or variant_visitors <= 0:
        return 0.0

    z_score = calculate_z_score(control_visitors, control_conversions, variant_visitors, variant_conversions)
    z_alpha = critical_value(ALPHA_Z, alpha, ALPHA_Z_DEFAULT)

    return 1 - normal_cdf(z_alpha - abs(z_score))


def apply_bonferroni_correction(
    p_values: Sequence[float],
    family_wise_error_rate: float = 0.05,
) -> List[bool]:
    """Flag each p-value below family_wise_error_rate / len(p_values)."""
    if not p_values:
        return []

    adjusted_alpha = family_wise_error_rate / len(p_values)
    return [p < adjusted_alpha for p in p_values]
