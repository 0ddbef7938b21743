from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Literal, Optional, Tuple


RecommendationAction = Literal["winner", "stop", "continue", "inconclusive"]


@dataclass(frozen=True)
class VariantObservation:
    """Raw counts for one arm of an experiment."""

    visitors: int
    conversions: int

    def __post_init__(self) -> None:
        if self.visitors < 0:
            raise ValueError("visitors must be >= 0")
        if self.conversions < 0:
            raise ValueError("conversions must be >= 0")
        if self.conversions > self.visitors:
            raise ValueError("conversions cannot exceed visitors")


@dataclass(frozen=True)
class VariantResult:
    variant_id: str
    variant_name: str
    visitors: int
    conversions: int
    conversion_rate: float


@dataclass(frozen=True)
class ConfidenceInterval:
    lower: float
    upper: float


@dataclass(frozen=True)
class TestRecommendation:
    action: RecommendationAction
    message: str
    confidence: float
    next_steps: Tuple[str, ...]


@dataclass(frozen=True)
class StatisticalResult:
    control: VariantResult
    treatment: VariantResult
    relative_improvement: float
    absolute_improvement: float
    p_value: float
    z_score: float
    confidence_level: float
    is_significant: bool
    confidence_interval: ConfidenceInterval
    sample_size_required: int
    current_power: float
    recommendation: TestRecommendation

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class TestMetrics:
    total_visitors: int
    total_conversions: int
    overall_conversion_rate: float
    test_duration_days: int
    daily_traffic: float
    estimated_completion_days: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class BayesianResult:
    probability_to_beat_control: float
    expected_loss: float
    risk_of_choosing_wrong: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class TrafficSplitPlan:
    split: Tuple[float, float]
    sample_size: int
    estimated_days: float


@dataclass(frozen=True)
class ExperimentAnalysis:
    """Every treatment arm compared against the shared control."""

    results: Tuple[StatisticalResult, ...]
    bonferroni_significant: Tuple[bool, ...]
    family_wise_error_rate: float

    def best_result(self) -> Optional[StatisticalResult]:
        """Highest-lift treatment that survives the Bonferroni correction."""
        survivors = [
            r
            for r, ok in zip(self.results, self.bonferroni_significant)
            if ok and r.relative_improvement > 0
        ]
        if not survivors:
            return None
        return max(survivors, key=lambda r: r.relative_improvement)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
