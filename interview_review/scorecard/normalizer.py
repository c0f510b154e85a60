"""Scorecard normalizer.

Every producer of a scorecard (generated output, cached entries, legacy
reports, the mock generator) ends up in :func:`normalize_report`, the one
place where dimensions are scored, the recommendation is calibrated and the
coverage map is built.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from interview_review.rubric import RubricDimension
from interview_review.scorecard.calibration import DEFAULT_ROLE, calibrate_recommendation, derive_leveling
from interview_review.scorecard.coercion import (
    as_list,
    as_record,
    ensure_min_items,
    is_record,
    to_level,
    to_normalized_string,
    to_string_array,
)
from interview_review.scorecard.coverage import create_coverage_map
from interview_review.scorecard.dimension import NormalizeContext, build_context, normalize_dimension
from interview_review.scorecard.intervals import DEFAULT_EPSILON_SECONDS
from interview_review.scorecard.legacy import PayloadShape, decode_payload, legacy_to_candidate
from interview_review.scorecard.mock import DEFAULT_QUESTION_TEXT, create_mock_from_context
from interview_review.scorecard.models import (
    REPORT_LIST_BOUNDS,
    DimensionAssessment,
    Leveling,
    Recommendation,
    Scorecard,
)
from interview_review.scorecard.templates import FallbackContext, fallback_line, fallback_lines
from interview_review.transcript.models import Segment

logger = logging.getLogger(__name__)

MAX_HIGHLIGHTED_DIMENSIONS = 3
MAX_FALLBACK_FOLLOW_UPS = 4
HIRING_RECOMMENDATIONS = frozenset({Recommendation.STRONG_HIRE, Recommendation.HIRE})


@dataclass
class NarrativeFields:
    """Top-level string arrays of a scorecard."""

    decision_rationale: list[str]
    key_strengths: list[str]
    key_risks: list[str]
    must_fix_to_hire: list[str]
    risks: list[str]
    follow_ups: list[str]


def _bounded(value: Any, fallback: Sequence[str], name: str, min_items: int | None = None) -> list[str]:
    low, high = REPORT_LIST_BOUNDS[name]
    return ensure_min_items(to_string_array(value), fallback, low if min_items is None else min_items, high)


def build_narrative_fields(
    report: Mapping[str, Any],
    dimensions: Sequence[DimensionAssessment],
    recommendation: Recommendation,
) -> NarrativeFields:
    """Keep valid narrative arrays from *report* and fill the rest from the dimensions.

    High-scoring dimensions feed the strengths, low-scoring and not-observed
    ones feed the risks, and dimension probes feed the follow-ups.
    """
    high = [d for d in dimensions if d.is_observed and d.score is not None and d.score >= 4]
    low = [d for d in dimensions if d.not_observed or (d.score is not None and d.score <= 2)]

    fallback_strengths = [
        *(fallback_line(FallbackContext.REPORT, "strength", label=d.label) for d in high[:MAX_HIGHLIGHTED_DIMENSIONS]),
        *fallback_lines(FallbackContext.REPORT, "keyStrengths"),
    ]
    fallback_risks = [
        *(
            fallback_line(
                FallbackContext.REPORT,
                "riskNotObserved" if d.not_observed else "riskLowScore",
                label=d.label,
            )
            for d in low[:MAX_HIGHLIGHTED_DIMENSIONS]
        ),
        *fallback_lines(FallbackContext.REPORT, "keyRisks"),
    ]
    fallback_follow_ups = [probe for d in dimensions for probe in d.probes][:MAX_FALLBACK_FOLLOW_UPS]
    fallback_must_fix = (
        [] if recommendation in HIRING_RECOMMENDATIONS else fallback_lines(FallbackContext.REPORT, "mustFixToHire")
    )

    key_risks = _bounded(report.get("keyRisks"), fallback_risks, "keyRisks")
    return NarrativeFields(
        decision_rationale=_bounded(
            report.get("decisionRationale"),
            fallback_lines(FallbackContext.REPORT, "decisionRationale", recommendation=recommendation.value),
            "decisionRationale",
        ),
        key_strengths=_bounded(report.get("keyStrengths"), fallback_strengths, "keyStrengths"),
        key_risks=key_risks,
        must_fix_to_hire=_bounded(
            report.get("mustFixToHire"),
            fallback_must_fix,
            "mustFixToHire",
            min_items=1 if fallback_must_fix else 0,
        ),
        risks=_bounded(report.get("risks"), key_risks, "risks"),
        follow_ups=_bounded(report.get("followUps"), fallback_follow_ups, "followUps"),
    )


def normalize_leveling(value: Any, fallback: Leveling) -> Leveling:
    if not is_record(value):
        return fallback
    return Leveling(
        role=to_normalized_string(value.get("role"), fallback.role),
        level=to_level(value.get("level")) or fallback.level,
    )


def normalize_report(
    report: Mapping[str, Any],
    context: NormalizeContext,
    *,
    epsilon: float = DEFAULT_EPSILON_SECONDS,
    role: str = DEFAULT_ROLE,
) -> Scorecard:
    """Normalize a modern or generic report object against *context*.

    Candidate dimensions are matched to rubric descriptors by id (the first
    candidate with a given id wins). The incoming ``overallRecommendation``
    is ignored and always recomputed.
    """
    source_by_id: dict[str, Mapping[str, Any]] = {}
    for candidate in as_list(report.get("dimensions")):
        if not is_record(candidate):
            continue
        candidate_id = to_normalized_string(candidate.get("id"))
        if candidate_id:
            source_by_id.setdefault(candidate_id, candidate)

    dimensions = [
        normalize_dimension(source_by_id.get(descriptor.key), descriptor, index, context)
        for index, descriptor in enumerate(context.dimensions)
    ]

    calibration = calibrate_recommendation(dimensions)
    narrative = build_narrative_fields(report, dimensions, calibration.recommendation)
    low, high = REPORT_LIST_BOUNDS["calibrationNotes"]

    return Scorecard(
        overall_summary=to_normalized_string(
            report.get("overallSummary"),
            fallback_line(FallbackContext.REPORT, "overallSummary"),
        ),
        overall_recommendation=calibration.recommendation,
        leveling=normalize_leveling(report.get("leveling"), derive_leveling(calibration.weighted_score, role)),
        calibration_notes=ensure_min_items(
            to_string_array(report.get("calibrationNotes")), calibration.notes, low, high
        ),
        dimensions=dimensions,
        decision_rationale=narrative.decision_rationale,
        key_strengths=narrative.key_strengths,
        key_risks=narrative.key_risks,
        must_fix_to_hire=narrative.must_fix_to_hire,
        risks=narrative.risks,
        follow_ups=narrative.follow_ups,
        coverage_map=create_coverage_map(dimensions, context, epsilon),
    )


def normalize_scorecard(
    payload: Any,
    rubric: Iterable[RubricDimension | Mapping[str, Any]],
    segments: Iterable[Segment | Mapping[str, Any]] | None = None,
    *,
    available_segment_count: int | None = None,
    enforce_segment_validation: bool = True,
    question_text: str = DEFAULT_QUESTION_TEXT,
    epsilon: float = DEFAULT_EPSILON_SECONDS,
    role: str = DEFAULT_ROLE,
) -> Scorecard:
    """Turn any JSON-like *payload* into a complete scorecard for *rubric*.

    Legacy reports are reshaped first, modern and generic objects go
    straight to :func:`normalize_report`, and anything that is not an
    object is replaced by the mock scorecard. The result is normalized once
    more against the same context, so the returned scorecard is a fixed
    point of this function. Never raises.
    """
    context = build_context(
        rubric,
        segments,
        available_segment_count=available_segment_count,
        enforce_segment_validation=enforce_segment_validation,
    )
    decoded = decode_payload(payload)
    logger.debug("Normalizing %s payload for %d dimensions", decoded.shape, len(context.dimensions))

    if decoded.shape is PayloadShape.INVALID:
        first_pass = create_mock_from_context(context, question_text, epsilon=epsilon, role=role)
    elif decoded.shape is PayloadShape.LEGACY:
        candidate = legacy_to_candidate(decoded.body, context)
        first_pass = normalize_report(candidate, context, epsilon=epsilon, role=role)
    else:
        first_pass = normalize_report(as_record(decoded.body), context, epsilon=epsilon, role=role)

    return normalize_report(first_pass.to_dict(), context, epsilon=epsilon, role=role)
