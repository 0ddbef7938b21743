from __future__ import annotations

import logging
import math


logger = logging.getLogger(__name__)

# Abramowitz & Stegun 7.1.26
_A1 = 0.254829592
_A2 = -0.284496736
_A3 = 1.421413741
_A4 = -1.453152027
_A5 = 1.061405429
_P = 0.3275911


def normal_cdf(x: float) -> float:
    """Standard normal CDF via the Abramowitz-Stegun erf approximation.

    Max absolute error is about 1.5e-7, plenty for p-values reported to
    four decimals.
    """
    sign = -1.0 if x < 0 else 1.0
    x = abs(x) / math.sqrt(2.0)

    t = 1.0 / (1.0 + _P * x)
    y = 1.0 - (((((_A5 * t + _A4) * t) + _A3) * t + _A2) * t + _A1) * t * math.exp(-x * x)

    return 0.5 * (1.0 + sign * y)


def calculate_conversion_rate(conversions: float, visitors: float) -> float:
    if visitors == 0:
        return 0.0
    return conversions / visitors


def calculate_z_score(
    control_visitors: int,
    control_conversions: int,
    variant_visitors: int,
    variant_conversions: int,
) -> float:
    """Pooled two-proportion z-statistic; 0 for empty arms or zero SE."""
    if control_visitors <= 0 or variant_visitors <= 0:
        logger.debug("z-score requested with an empty arm, returning 0")
        return 0.0

    p1 = control_conversions / control_visitors
    p2 = variant_conversions / variant_visitors
    pooled_p = (control_conversions + variant_conversions) / (control_visitors + variant_visitors)

    se = math.sqrt(pooled_p * (1 - pooled_p) * (1 / control_visitors + 1 / variant_visitors))
    if se == 0:
        return 0.0

    return (p2 - p1) / se


def calculate_relative_improvement(control_rate: float, variant_rate: float) -> float:
    """Lift in percent of the control rate."""
    if control_rate == 0:
        return 0.0
    return ((variant_rate - control_rate) / control_rate) * 100


def calculate_absolute_improvement(control_rate: float, variant_rate: float) -> float:
    """Lift in percentage points."""
    return (variant_rate - control_rate) * 100
