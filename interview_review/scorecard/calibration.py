"""Recommendation calibration and leveling.

The overall recommendation starts from a weighted average of observed
dimension scores and is then capped (never raised) by evidence-sufficiency
rules. Leveling reads the same weighted average but ignores the caps.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from interview_review.rubric import CORE_DIMENSION_KEYS
from interview_review.scorecard.models import DimensionAssessment, Level, Leveling, Recommendation

DEFAULT_ROLE = "Software Engineer"

DIMENSION_WEIGHTS: dict[str, float] = {
    "problemSolving": 0.35,
    "ownership": 0.25,
    "clarity": 0.2,
}
DEFAULT_DIMENSION_WEIGHT = 0.2

RECOMMENDATION_RANKS: dict[Recommendation, int] = {
    Recommendation.NO: 0,
    Recommendation.LEAN_NO: 1,
    Recommendation.LEAN_HIRE: 2,
    Recommendation.HIRE: 3,
    Recommendation.STRONG_HIRE: 4,
}

# (lower bound on weighted score, value), checked top-down
RECOMMENDATION_THRESHOLDS: tuple[tuple[float, Recommendation], ...] = (
    (4.5, Recommendation.STRONG_HIRE),
    (3.8, Recommendation.HIRE),
    (3.2, Recommendation.LEAN_HIRE),
    (2.5, Recommendation.LEAN_NO),
)
LEVEL_THRESHOLDS: tuple[tuple[float, Level], ...] = (
    (4.2, Level.SENIOR),
    (3.3, Level.MID),
    (2.6, Level.NEWGRAD),
)

MIN_COVERAGE_RATIO = 0.35
LOW_SCORE_MAX = 2
LOW_SCORE_COUNT_CAP = 2


@dataclass
class CalibrationResult:
    recommendation: Recommendation
    weighted_score: float
    coverage_ratio: float
    notes: list[str] = field(default_factory=list)


def weight_for_dimension(dimension_key: str) -> float:
    return DIMENSION_WEIGHTS.get(dimension_key, DEFAULT_DIMENSION_WEIGHT)


def recommendation_rank(value: Recommendation) -> int:
    return RECOMMENDATION_RANKS[value]


def cap_recommendation(value: Recommendation, max_allowed: Recommendation) -> Recommendation:
    """Lower *value* to *max_allowed* if it ranks above it."""
    if recommendation_rank(value) <= recommendation_rank(max_allowed):
        return value
    return max_allowed


def base_recommendation(weighted_score: float) -> Recommendation:
    for threshold, recommendation in RECOMMENDATION_THRESHOLDS:
        if weighted_score >= threshold:
            return recommendation
    return Recommendation.NO


def weighted_average_score(dimensions: Sequence[DimensionAssessment]) -> float:
    """Weighted mean score of observed dimensions; 0 when none are observed."""
    total = 0.0
    weights = 0.0
    for dimension in dimensions:
        if not dimension.is_observed or dimension.score is None:
            continue
        weight = weight_for_dimension(dimension.id)
        total += weight * dimension.score
        weights += weight
    return total / weights if weights > 0 else 0.0


def mean_coverage_ratio(dimensions: Sequence[DimensionAssessment]) -> float:
    """Mean cited/available ratio across all dimensions, observed or not."""
    if not dimensions:
        return 0.0
    return sum(d.evidence_coverage.ratio for d in dimensions) / len(dimensions)


def calibrate_recommendation(dimensions: Sequence[DimensionAssessment]) -> CalibrationResult:
    """Derive the overall recommendation and the notes explaining it."""
    if not any(d.is_observed for d in dimensions):
        return CalibrationResult(
            recommendation=Recommendation.LEAN_NO,
            weighted_score=0.0,
            coverage_ratio=0.0,
            notes=["No scored dimensions were observed; recommendation is capped to LeanNo."],
        )

    weighted_score = weighted_average_score(dimensions)
    coverage_ratio = mean_coverage_ratio(dimensions)
    recommendation = base_recommendation(weighted_score)
    notes = [
        f"Weighted score {weighted_score:.2f} derived from dimension importance "
        "(problem solving and ownership weighted highest).",
        f"Average evidence coverage ratio is {coverage_ratio * 100:.0f}%.",
    ]

    if any(d.id in CORE_DIMENSION_KEYS and not d.is_observed for d in dimensions):
        recommendation = cap_recommendation(recommendation, Recommendation.LEAN_HIRE)
        notes.append("At least one core dimension is not observed, so recommendation is capped at LeanHire.")

    if coverage_ratio < MIN_COVERAGE_RATIO:
        recommendation = cap_recommendation(recommendation, Recommendation.LEAN_HIRE)
        notes.append(
            f"Evidence coverage is below {MIN_COVERAGE_RATIO:.0%}, so recommendation is capped at LeanHire."
        )

    low_scores = sum(1 for d in dimensions if d.score is not None and d.score <= LOW_SCORE_MAX)
    if low_scores >= LOW_SCORE_COUNT_CAP:
        recommendation = cap_recommendation(recommendation, Recommendation.LEAN_NO)
        notes.append("Multiple dimensions scored at or below 2, so recommendation is capped at LeanNo.")

    return CalibrationResult(
        recommendation=recommendation,
        weighted_score=weighted_score,
        coverage_ratio=coverage_ratio,
        notes=notes,
    )


def derive_level(weighted_score: float) -> Level:
    for threshold, level in LEVEL_THRESHOLDS:
        if weighted_score >= threshold:
            return level
    return Level.INTERN


def derive_leveling(weighted_score: float, role: str = DEFAULT_ROLE) -> Leveling:
    return Leveling(role=role, level=derive_level(weighted_score))
