"""Deterministic mock scorecards.

Used when no generated content is available, when mock mode is forced, and
when a payload cannot be read at all. The output depends only on the rubric,
the segments and the question text.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from interview_review.rubric import RubricDimension
from interview_review.scorecard.calibration import DEFAULT_ROLE, calibrate_recommendation, derive_leveling
from interview_review.scorecard.coercion import clamp, ensure_min_items, strength_from_relevance, to_max_words
from interview_review.scorecard.coverage import create_coverage_map
from interview_review.scorecard.dimension import (
    NormalizeContext,
    build_context,
    infer_confidence,
    pick_fallback_evidence_segments,
)
from interview_review.scorecard.intervals import DEFAULT_EPSILON_SECONDS
from interview_review.scorecard.models import (
    MAX_QUOTE_WORDS,
    REPORT_LIST_BOUNDS,
    AnchorAlignment,
    DimensionAssessment,
    EvidenceCoverage,
    EvidenceEntry,
    Recommendation,
    Scorecard,
    WhatWouldChangeScore,
)
from interview_review.scorecard.templates import FallbackContext, default_anchors, fallback_line, fallback_lines
from interview_review.transcript.models import Segment

DEFAULT_QUESTION_TEXT = "Unknown question"

MOCK_SCORE_CYCLE: tuple[int, ...] = (4, 3, 5, 2)
MOCK_EVIDENCE_COUNT = 2
MIN_DIMENSIONS_FOR_NOT_OBSERVED = 3

MAX_MOCK_STRENGTHS = 5
MAX_MOCK_RISKS = 4
MAX_MOCK_FOLLOW_UPS = 5


def mock_score(dimension_index: int) -> int:
    return MOCK_SCORE_CYCLE[dimension_index % len(MOCK_SCORE_CYCLE)]


def not_observed_index(dimension_count: int) -> int | None:
    """The last dimension is left unobserved once the rubric has three or more."""
    if dimension_count >= MIN_DIMENSIONS_FOR_NOT_OBSERVED:
        return dimension_count - 1
    return None


def _mock_not_observed_dimension(descriptor: RubricDimension, context: NormalizeContext) -> DimensionAssessment:
    label = descriptor.label
    lines = FallbackContext.MOCK_NOT_OBSERVED
    return DimensionAssessment(
        id=descriptor.key,
        label=label,
        score=None,
        not_observed=True,
        confidence=34,
        anchors=default_anchors(label, descriptor.description),
        missing_signals=fallback_lines(lines, "missingSignals", label=label),
        observed_signals=fallback_lines(lines, "observedSignals", label=label),
        concerns=fallback_lines(lines, "concerns", label=label),
        counter_signals=fallback_lines(lines, "counterSignals"),
        observations=fallback_lines(lines, "observations", label=label),
        evidence=[],
        evidence_coverage=EvidenceCoverage(
            cited_segment_count=0,
            available_segment_count=context.available_segment_count,
        ),
        evidence_quality=0.22,
        consistency=0.31,
        probes=fallback_lines(lines, "probes", label=label),
        anchor_alignment=AnchorAlignment(
            chosen_level=2,
            why_meets=fallback_lines(lines, "whyMeets"),
            why_not_higher=fallback_lines(lines, "whyNotHigher"),
        ),
        what_would_change_score=WhatWouldChangeScore(
            up=fallback_lines(lines, "changeUp"),
            down=fallback_lines(lines, "changeDown"),
        ),
    )


def create_mock_dimension(
    descriptor: RubricDimension,
    dimension_index: int,
    context: NormalizeContext,
    force_not_observed: bool = False,
) -> DimensionAssessment:
    if force_not_observed:
        return _mock_not_observed_dimension(descriptor, context)

    label = descriptor.label
    lines = FallbackContext.MOCK_OBSERVED
    evidence: list[EvidenceEntry] = []
    for evidence_index, segment in enumerate(
        pick_fallback_evidence_segments(context, dimension_index, MOCK_EVIDENCE_COUNT)
    ):
        relevance = clamp(0.7 - evidence_index * 0.08 + dimension_index * 0.03, 0.45, 0.92)
        evidence.append(
            EvidenceEntry(
                segment_id=segment.id,
                quote=to_max_words(segment.text, MAX_QUOTE_WORDS),
                interpretation=fallback_line(lines, "interpretation", label=label),
                strength=strength_from_relevance(relevance),
                relevance=relevance,
            )
        )

    score = mock_score(dimension_index)
    coverage = EvidenceCoverage(
        cited_segment_count=len({entry.segment_id for entry in evidence}),
        available_segment_count=context.available_segment_count,
    )
    evidence_quality = clamp(sum(entry.relevance for entry in evidence) / max(1, len(evidence)), 0, 1)
    consistency = clamp(0.56 + (score - 2) * 0.08, 0, 1)

    return DimensionAssessment(
        id=descriptor.key,
        label=label,
        score=score,
        not_observed=False,
        confidence=infer_confidence(evidence_quality, consistency, coverage.ratio),
        anchors=default_anchors(label, descriptor.description),
        missing_signals=fallback_lines(lines, "missingSignals"),
        observed_signals=fallback_lines(lines, "observedSignals", label=label),
        concerns=fallback_lines(lines, "concerns"),
        counter_signals=fallback_lines(lines, "counterSignals"),
        observations=fallback_lines(lines, "observations", label=label),
        evidence=evidence,
        evidence_coverage=coverage,
        evidence_quality=evidence_quality,
        consistency=consistency,
        probes=fallback_lines(lines, "probes"),
        anchor_alignment=AnchorAlignment(
            chosen_level=score,
            why_meets=fallback_lines(lines, "whyMeets"),
            why_not_higher=fallback_lines(lines, "whyNotHigher"),
        ),
        what_would_change_score=WhatWouldChangeScore(
            up=fallback_lines(lines, "changeUp"),
            down=fallback_lines(lines, "changeDown"),
        ),
    )


def _bounded(entries: Sequence[str], fallback: Sequence[str], name: str) -> list[str]:
    low, high = REPORT_LIST_BOUNDS[name]
    return ensure_min_items(entries, fallback, low, high)


def create_mock_from_context(
    context: NormalizeContext,
    question_text: str = DEFAULT_QUESTION_TEXT,
    *,
    epsilon: float = DEFAULT_EPSILON_SECONDS,
    role: str = DEFAULT_ROLE,
) -> Scorecard:
    skipped = not_observed_index(len(context.dimensions))
    dimensions = [
        create_mock_dimension(descriptor, index, context, force_not_observed=index == skipped)
        for index, descriptor in enumerate(context.dimensions)
    ]

    calibration = calibrate_recommendation(dimensions)
    recommendation = calibration.recommendation
    report = FallbackContext.MOCK_REPORT

    strengths = [
        fallback_line(report, "strength", label=d.label)
        for d in dimensions
        if d.is_observed and d.score is not None and d.score >= 4
    ][:MAX_MOCK_STRENGTHS]
    risks = [
        fallback_line(report, "riskNotObserved" if d.not_observed else "riskLowScore", label=d.label)
        for d in dimensions
        if d.not_observed or (d.score is not None and d.score <= 2)
    ][:MAX_MOCK_RISKS]
    follow_ups = list(dict.fromkeys(probe for d in dimensions for probe in d.probes))[:MAX_MOCK_FOLLOW_UPS]

    return Scorecard(
        overall_summary=fallback_line(report, "overallSummary", question=question_text),
        overall_recommendation=recommendation,
        leveling=derive_leveling(calibration.weighted_score, role),
        calibration_notes=_bounded(calibration.notes, fallback_lines(report, "calibrationNotes"), "calibrationNotes"),
        dimensions=dimensions,
        decision_rationale=fallback_lines(report, "decisionRationale", recommendation=recommendation.value),
        key_strengths=_bounded(strengths, fallback_lines(report, "keyStrengths"), "keyStrengths"),
        key_risks=_bounded(risks, fallback_lines(report, "keyRisks"), "keyRisks"),
        must_fix_to_hire=(
            []
            if recommendation in (Recommendation.STRONG_HIRE, Recommendation.HIRE)
            else fallback_lines(report, "mustFixToHire")
        ),
        risks=_bounded(risks, fallback_lines(report, "risks"), "risks"),
        follow_ups=_bounded(follow_ups, fallback_lines(report, "followUps"), "followUps"),
        coverage_map=create_coverage_map(dimensions, context, epsilon),
    )


def create_mock_scorecard(
    rubric: Iterable[RubricDimension | Mapping[str, Any]],
    segments: Iterable[Segment | Mapping[str, Any]] | None = None,
    question_text: str = DEFAULT_QUESTION_TEXT,
    *,
    epsilon: float = DEFAULT_EPSILON_SECONDS,
    role: str = DEFAULT_ROLE,
) -> Scorecard:
    """Build the deterministic mock scorecard for *rubric* over *segments*."""
    return create_mock_from_context(build_context(rubric, segments), question_text, epsilon=epsilon, role=role)
