"""Statistics engine for evaluating A/B tests on web traffic."""

from .models import (
    BayesianResult,
    ConfidenceInterval,
    ExperimentAnalysis,
    StatisticalResult,
    TestMetrics,
    TestRecommendation,
    TrafficSplitPlan,
    VariantObservation,
    VariantResult,
)
from .primitives import (
    normal_cdf,
    calculate_conversion_rate,
    calculate_z_score,
    calculate_relative_improvement,
    calculate_absolute_improvement,
)
from .significance import (
    calculate_p_value,
    calculate_confidence_interval,
    calculate_power,
    apply_bonferroni_correction,
)
from .planning import calculate_sample_size, estimate_test_duration, optimize_traffic_split, planned_duration
from .bayesian import calculate_bayesian_ab, calculate_beta_posterior_ab
from .analysis import (
    analyze_test_results,
    analyze_experiment,
    generate_recommendation,
    calculate_test_metrics,
)
