"""Monte Carlo estimates of "does the variant beat control".

`calculate_bayesian_ab` is the estimator the dashboard has always shown: it
jitters each arm's observed rate with uniform noise of +/- one normal
approximation standard error. That is a heuristic, not a posterior, and its
numbers are kept stable on purpose. `calculate_beta_posterior_ab` draws from
the conjugate Beta posteriors instead and is the one to prefer for new work.
"""

from __future__ import annotations

import logging
import math
import random
from typing import Optional, Protocol

import numpy as np

from .models import BayesianResult
from .primitives import calculate_conversion_rate


logger = logging.getLogger(__name__)

DEFAULT_SAMPLES = 10_000


class UniformSource(Protocol):
    def random(self) -> float: ...


_EMPTY_ARM_RESULT = BayesianResult(
    probability_to_beat_control=0.0,
    expected_loss=0.0,
    risk_of_choosing_wrong=1.0,
)


def calculate_bayesian_ab(
    control_visitors: int,
    control_conversions: int,
    variant_visitors: int,
    variant_conversions: int,
    samples: int = DEFAULT_SAMPLES,
    rng: Optional[UniformSource] = None,
) -> BayesianResult:
    if control_visitors <= 0 or variant_visitors <= 0 or samples <= 0:
        logger.debug("bayesian estimate requested with an empty arm or no samples")
        return _EMPTY_ARM_RESULT

    rand = rng.random if rng is not None else random.random

    control_rate = calculate_conversion_rate(control_conversions, control_visitors)
    variant_rate = calculate_conversion_rate(variant_conversions, variant_visitors)

    control_se = math.sqrt(control_rate * (1 - control_rate) / control_visitors)
    variant_se = math.sqrt(variant_rate * (1 - variant_rate) / variant_visitors)

    wins = 0
    loss_sum = 0.0
    for _ in range(samples):
        control_sample = control_rate + (rand() - 0.5) * control_se * 2
        variant_sample = variant_rate + (rand() - 0.5) * variant_se * 2

        if variant_sample > control_sample:
            wins += 1
        else:
            loss_sum += control_sample - variant_sample

    probability = wins / samples
    return BayesianResult(
        probability_to_beat_control=probability,
        expected_loss=loss_sum / samples,
        risk_of_choosing_wrong=1 - probability,
    )


def calculate_beta_posterior_ab(
    control_visitors: int,
    control_conversions: int,
    variant_visitors: int,
    variant_conversions: int,
    samples: int = DEFAULT_SAMPLES,
    prior_alpha: float = 1.0,
    prior_beta: float = 1.0,
    seed: Optional[int] = None,
) -> BayesianResult:
    """Beta-Binomial version of `calculate_bayesian_ab`.

    Each arm's rate is drawn from Beta(prior_alpha + conversions,
    prior_beta + non-conversions). Expected loss is the mean of
    max(control - variant, 0) over all draws.
    """
    if prior_alpha <= 0 or prior_beta <= 0:
        raise ValueError("prior_alpha and prior_beta must be > 0")
    if control_visitors <= 0 or variant_visitors <= 0 or samples <= 0:
        return _EMPTY_ARM_RESULT

    gen = np.random.default_rng(seed)
    control_draws = gen.beta(
        prior_alpha + control_conversions,
        prior_beta + control_visitors - control_conversions,
        size=samples,
    )
    variant_draws = gen.beta(
        prior_alpha + variant_conversions,
        prior_beta + variant_visitors - variant_conversions,
        size=samples,
    )

    probability = float(np.mean(variant_draws > control_draws))
    expected_loss = float(np.mean(np.maximum(control_draws - variant_draws, 0.0)))

    return BayesianResult(
        probability_to_beat_control=probability,
        expected_loss=expected_loss,
        risk_of_choosing_wrong=1 - probability,
    )
