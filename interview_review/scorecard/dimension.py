"""Dimension normalizer: one untrusted candidate in, one complete assessment out."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from interview_review.rubric import RubricDimension, parse_rubric
from interview_review.scorecard.coercion import (
    as_record,
    clamp,
    ensure_min_items,
    is_record,
    relevance_from_strength,
    round_half_up,
    strength_from_relevance,
    to_finite_number,
    to_max_words,
    to_normalized_string,
    to_relevance,
    to_strength,
    to_string_array,
)
from interview_review.scorecard.models import (
    ALIGNMENT_LIST_BOUNDS,
    ANCHOR_LEVELS,
    CHANGE_LIST_BOUNDS,
    DIMENSION_LIST_BOUNDS,
    MAX_EVIDENCE_ENTRIES,
    MAX_QUOTE_WORDS,
    AnchorAlignment,
    DimensionAssessment,
    EvidenceCoverage,
    EvidenceEntry,
    EvidenceStrength,
    WhatWouldChangeScore,
)
from interview_review.scorecard.templates import (
    FallbackContext,
    default_anchors,
    fallback_line,
    fallback_lines,
)
from interview_review.transcript.models import Segment, index_segments, normalize_segments

logger = logging.getLogger(__name__)

MIN_SYNTHETIC_EVIDENCE = 2
SYNTHETIC_RELEVANCE = 0.64
DEFAULT_RELEVANCE_OBSERVED = 0.7
DEFAULT_RELEVANCE_NOT_OBSERVED = 0.45

# confidence = 100 * (quality, consistency, coverage) . weights
CONFIDENCE_WEIGHTS: tuple[float, float, float] = (0.45, 0.35, 0.2)


@dataclass(frozen=True)
class NormalizeContext:
    """Per-request inputs shared by every dimension of one normalization call."""

    dimensions: tuple[RubricDimension, ...]
    segments: tuple[Segment, ...]
    available_segment_count: int
    enforce_segment_validation: bool = True
    segment_by_id: Mapping[str, Segment] = field(default_factory=dict)

    @property
    def segment_ids(self) -> list[str]:
        return [s.id for s in self.segments]

    @property
    def has_timing(self) -> bool:
        return len(self.segments) > 0


def build_context(
    dimensions: Iterable[RubricDimension | Mapping[str, Any]],
    segments: Iterable[Segment | Mapping[str, Any]] | None = None,
    *,
    available_segment_count: int | None = None,
    enforce_segment_validation: bool = True,
) -> NormalizeContext:
    """Build the shared context for a normalization call.

    *available_segment_count* defaults to the number of segments; pass it
    explicitly when only a count (no timing data) is known.
    """
    normalized = tuple(normalize_segments(segments))
    count = len(normalized) if available_segment_count is None else max(0, available_segment_count)
    return NormalizeContext(
        dimensions=tuple(parse_rubric(dimensions)),
        segments=normalized,
        available_segment_count=count,
        enforce_segment_validation=enforce_segment_validation,
        segment_by_id=index_segments(normalized),
    )


def pick_fallback_evidence_segments(
    context: NormalizeContext,
    dimension_index: int,
    desired_count: int,
    exclude: Iterable[str] = (),
) -> list[Segment]:
    """Pick up to *desired_count* unused segments, cycling from *dimension_index*.

    Starting at the dimension's own offset spreads synthetic evidence across
    the transcript instead of piling every dimension onto segment 1.
    """
    total = len(context.segments)
    if total == 0 or desired_count <= 0:
        return []

    seen = set(exclude)
    picked: list[Segment] = []
    for offset in range(total):
        if len(picked) >= desired_count:
            break
        segment = context.segments[(dimension_index + offset) % total]
        if segment.id in seen:
            continue
        seen.add(segment.id)
        picked.append(segment)
    return picked


def normalize_anchors(value: Any, label: str, description: str) -> dict[str, str]:
    defaults = default_anchors(label, description)
    record = as_record(value)
    return {level: to_normalized_string(record.get(level), defaults[level]) for level in ANCHOR_LEVELS}


def normalize_evidence(
    value: Any,
    context: NormalizeContext,
    dimension_index: int,
    not_observed: bool,
    label: str,
) -> list[EvidenceEntry]:
    """Keep valid, de-duplicated citations and back-fill observed dimensions."""
    result: list[EvidenceEntry] = []
    seen: set[str] = set()

    for entry in value if isinstance(value, list) else []:
        if not is_record(entry):
            continue
        segment_id = to_normalized_string(entry.get("segmentId"))
        if not segment_id or segment_id in seen:
            continue
        known = context.segment_by_id.get(segment_id)
        if context.enforce_segment_validation and known is None:
            continue

        raw_strength = to_strength(entry.get("strength"))
        relevance = to_relevance(entry.get("relevance"))
        if relevance is None:
            relevance = to_relevance(entry.get("confidence"))
        if relevance is None and raw_strength is not None:
            relevance = relevance_from_strength(raw_strength)
        if relevance is None:
            relevance = DEFAULT_RELEVANCE_NOT_OBSERVED if not_observed else DEFAULT_RELEVANCE_OBSERVED

        fallback_quote = to_max_words(
            known.text if known is not None else fallback_line(FallbackContext.OBSERVED, "missingQuote"),
            MAX_QUOTE_WORDS,
        )
        result.append(
            EvidenceEntry(
                segment_id=segment_id,
                quote=to_max_words(to_normalized_string(entry.get("quote"), fallback_quote), MAX_QUOTE_WORDS),
                interpretation=to_normalized_string(
                    entry.get("interpretation"),
                    fallback_line(FallbackContext.OBSERVED, "interpretation", label=label),
                ),
                strength=raw_strength or strength_from_relevance(relevance),
                relevance=relevance,
            )
        )
        seen.add(segment_id)

    desired_minimum = 0 if not_observed else min(MIN_SYNTHETIC_EVIDENCE, len(context.segments))
    if len(result) < desired_minimum:
        backfill = pick_fallback_evidence_segments(context, dimension_index, desired_minimum - len(result), seen)
        logger.debug("Back-filling %d synthetic evidence entries for %s", len(backfill), label)
        for segment in backfill:
            result.append(
                EvidenceEntry(
                    segment_id=segment.id,
                    quote=to_max_words(segment.text, MAX_QUOTE_WORDS),
                    interpretation=fallback_line(FallbackContext.OBSERVED, "syntheticInterpretation", label=label),
                    strength=EvidenceStrength.MEDIUM,
                    relevance=SYNTHETIC_RELEVANCE,
                )
            )
            seen.add(segment.id)

    return result[:MAX_EVIDENCE_ENTRIES]


def normalize_anchor_alignment(value: Any, score: int | None, missing_signals: Sequence[str]) -> AnchorAlignment:
    fallback_level = score if score is not None else 3
    context = FallbackContext.NOT_OBSERVED if score is None else FallbackContext.OBSERVED
    fallback_why_meets = fallback_lines(context, "whyMeets")
    fallback_why_not_higher = (
        list(missing_signals[:2]) if missing_signals else fallback_lines(FallbackContext.OBSERVED, "whyNotHigher")
    )

    if not is_record(value):
        return AnchorAlignment(
            chosen_level=fallback_level,
            why_meets=fallback_why_meets,
            why_not_higher=fallback_why_not_higher,
        )

    raw_level = to_finite_number(value.get("chosenLevel"))
    low, high = ALIGNMENT_LIST_BOUNDS
    return AnchorAlignment(
        chosen_level=int(clamp(round_half_up(raw_level if raw_level is not None else fallback_level), 1, 5)),
        why_meets=ensure_min_items(to_string_array(value.get("whyMeets")), fallback_why_meets, low, high),
        why_not_higher=ensure_min_items(
            to_string_array(value.get("whyNotHigher")), fallback_why_not_higher, low, high
        ),
    )


def normalize_what_would_change_score(value: Any, missing_signals: Sequence[str]) -> WhatWouldChangeScore:
    fallback_up = list(missing_signals[:2]) if missing_signals else fallback_lines(FallbackContext.OBSERVED, "changeUp")
    fallback_down = fallback_lines(FallbackContext.OBSERVED, "changeDown")
    record = as_record(value)
    low, high = CHANGE_LIST_BOUNDS
    return WhatWouldChangeScore(
        up=ensure_min_items(to_string_array(record.get("up")), fallback_up, low, high),
        down=ensure_min_items(to_string_array(record.get("down")), fallback_down, low, high),
    )


def infer_confidence(evidence_quality: float, consistency: float, coverage_ratio: float) -> int:
    w_quality, w_consistency, w_coverage = CONFIDENCE_WEIGHTS
    inferred = (evidence_quality * w_quality + consistency * w_consistency + coverage_ratio * w_coverage) * 100
    return int(clamp(round_half_up(inferred), 0, 100))


def normalize_confidence(
    value: Any,
    evidence_quality: float,
    consistency: float,
    coverage_ratio: float,
) -> int:
    explicit = to_finite_number(value)
    if explicit is not None:
        return int(clamp(round_half_up(explicit), 0, 100))
    return infer_confidence(evidence_quality, consistency, coverage_ratio)


def _bounded(value: Any, fallback: Sequence[str], name: str) -> list[str]:
    low, high = DIMENSION_LIST_BOUNDS[name]
    return ensure_min_items(to_string_array(value), fallback, low, high)


def normalize_dimension(
    candidate: Any,
    descriptor: RubricDimension,
    index: int,
    context: NormalizeContext,
) -> DimensionAssessment:
    """Produce a fully populated assessment for *descriptor*.

    Every field is resolved independently: a valid candidate value is kept,
    anything missing or malformed is replaced by a deterministic default
    derived from the descriptor, the transcript and the other fields.
    Never raises.
    """
    record = as_record(candidate)
    label = descriptor.label

    raw_not_observed = record.get("notObserved")
    not_observed = raw_not_observed if isinstance(raw_not_observed, bool) else False

    raw_score = to_finite_number(record.get("score"))
    score = None if not_observed or raw_score is None else int(clamp(round_half_up(raw_score), 1, 5))

    state = FallbackContext.NOT_OBSERVED if not_observed else FallbackContext.OBSERVED
    anchors = normalize_anchors(record.get("anchors"), label, descriptor.description)
    missing_signals = _bounded(
        record.get("missingSignals"),
        fallback_lines(state, "missingSignals", label=label),
        "missingSignals",
    )

    evidence = normalize_evidence(record.get("evidence"), context, index, not_observed, label)
    cited_segment_count = len({entry.segment_id for entry in evidence})
    evidence_coverage = EvidenceCoverage(
        cited_segment_count=cited_segment_count,
        available_segment_count=context.available_segment_count,
    )
    coverage_ratio = evidence_coverage.ratio

    evidence_quality = to_relevance(record.get("evidenceQuality"))
    if evidence_quality is None:
        if evidence:
            evidence_quality = sum(entry.relevance for entry in evidence) / len(evidence)
        else:
            evidence_quality = 0.25 if not_observed else 0.5
    evidence_quality = clamp(evidence_quality, 0, 1)

    consistency = to_relevance(record.get("consistency"))
    if consistency is None:
        consistency = 0.35 if not_observed else 0.62 + min(coverage_ratio * 0.2, 0.18)
    consistency = clamp(consistency, 0, 1)

    confidence = normalize_confidence(record.get("confidence"), evidence_quality, consistency, coverage_ratio)

    observations = _bounded(
        record.get("observations"),
        fallback_lines(state, "observations", label=label, score=score if score is not None else 3),
        "observations",
    )
    observed_signals = _bounded(record.get("observedSignals"), observations, "observedSignals")
    concerns_fallback = (
        fallback_lines(FallbackContext.NOT_OBSERVED, "concerns", label=label) if not_observed else missing_signals[:2]
    )
    concerns = _bounded(record.get("concerns"), concerns_fallback, "concerns")
    counter_signals = _bounded(record.get("counterSignals"), [], "counterSignals")
    probes = _bounded(record.get("probes"), fallback_lines(state, "probes", label=label), "probes")

    return DimensionAssessment(
        id=descriptor.key,
        label=label,
        score=score,
        not_observed=not_observed,
        confidence=confidence,
        anchors=anchors,
        missing_signals=missing_signals,
        observed_signals=observed_signals,
        concerns=concerns,
        counter_signals=counter_signals,
        observations=observations,
        evidence=evidence,
        evidence_coverage=evidence_coverage,
        evidence_quality=evidence_quality,
        consistency=consistency,
        probes=probes,
        anchor_alignment=normalize_anchor_alignment(record.get("anchorAlignment"), score, missing_signals),
        what_would_change_score=normalize_what_would_change_score(record.get("whatWouldChangeScore"), missing_signals),
    )
