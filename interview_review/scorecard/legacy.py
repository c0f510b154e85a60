"""Report shape detection and the legacy report adapter.

Untrusted payloads are decoded into one of four shapes before
normalization. The legacy adapter only reshapes data into a modern
candidate; all scoring still happens in the single normalizer path.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from interview_review.scorecard.coercion import (
    as_list,
    clamp,
    is_finite_number,
    is_non_empty_string,
    is_record,
    is_string_list,
    round_half_up,
    strength_from_relevance,
    to_level,
    to_max_words,
    to_recommendation,
    to_relevance,
)
from interview_review.scorecard.dimension import NormalizeContext
from interview_review.scorecard.models import ANCHOR_LEVELS, MAX_QUOTE_WORDS, EvidenceStrength
from interview_review.scorecard.templates import FallbackContext, default_anchors, fallback_lines

LEGACY_DEFAULT_RELEVANCE = 0.65


class PayloadShape(StrEnum):
    LEGACY = "legacy"
    MODERN = "modern"
    GENERIC = "generic"
    INVALID = "invalid"


@dataclass(frozen=True)
class DecodedPayload:
    """A payload tagged with its detected shape. ``body`` is empty for INVALID."""

    shape: PayloadShape
    body: Mapping[str, Any] = field(default_factory=dict)


def _is_legacy_evidence(value: Any) -> bool:
    return (
        is_record(value)
        and is_non_empty_string(value.get("segmentId"))
        and isinstance(value.get("quote"), str)
        and is_finite_number(value.get("confidence"))
    )


def _is_legacy_item(value: Any) -> bool:
    return (
        is_record(value)
        and is_non_empty_string(value.get("dimensionKey"))
        and is_finite_number(value.get("score"))
        and isinstance(value.get("claim"), str)
        and isinstance(value.get("evidence"), list)
        and all(_is_legacy_evidence(entry) for entry in value["evidence"])
    )


def is_legacy_report(value: Any) -> bool:
    """Flat ``{summary, items: [{dimensionKey, score, claim, evidence}]}`` shape."""
    return (
        is_record(value)
        and isinstance(value.get("summary"), str)
        and isinstance(value.get("items"), list)
        and all(_is_legacy_item(item) for item in value["items"])
    )


def _is_modern_evidence(value: Any) -> bool:
    if not is_record(value):
        return False
    strength = value.get("strength")
    relevance = value.get("relevance")
    interpretation = value.get("interpretation")
    return (
        is_non_empty_string(value.get("segmentId"))
        and isinstance(value.get("quote"), str)
        and (strength is None or strength in EvidenceStrength._value2member_map_)
        and (relevance is None or is_finite_number(relevance))
        and (interpretation is None or isinstance(interpretation, str))
    )


def _is_modern_dimension(value: Any) -> bool:
    if not is_record(value):
        return False
    score = value.get("score")
    if score is not None and not (is_finite_number(score) and 1 <= score <= 5):
        return False
    anchors = value.get("anchors")
    coverage = value.get("evidenceCoverage")
    if not (
        is_non_empty_string(value.get("id"))
        and is_non_empty_string(value.get("label"))
        and isinstance(value.get("notObserved"), bool)
        and is_finite_number(value.get("confidence"))
        and is_record(anchors)
        and all(isinstance(anchors.get(level), str) for level in ANCHOR_LEVELS)
        and is_record(coverage)
        and is_finite_number(coverage.get("citedSegmentCount"))
        and is_finite_number(coverage.get("availableSegmentCount"))
        and isinstance(value.get("missingSignals"), list)
        and isinstance(value.get("evidence"), list)
    ):
        return False
    for name in ("observedSignals", "concerns", "counterSignals", "observations", "probes", "missingSignals"):
        if name in value and not is_string_list(value[name]):
            return False
    return all(_is_modern_evidence(entry) for entry in value["evidence"])


def _is_coverage_map(value: Any) -> bool:
    if not is_record(value):
        return False
    by_dimension = value.get("byDimension")
    by_segment = value.get("bySegment")
    if not is_record(by_dimension) or not is_record(by_segment):
        return False
    return all(
        is_record(entry) and is_string_list(entry.get("segmentIds")) and is_finite_number(entry.get("coveragePct"))
        for entry in by_dimension.values()
    ) and all(is_record(entry) and is_string_list(entry.get("dimensions")) for entry in by_segment.values())


def is_modern_report(value: Any) -> bool:
    """Structural check of the current scorecard wire format."""
    if not is_record(value):
        return False
    if not (
        isinstance(value.get("overallSummary"), str)
        and to_recommendation(value.get("overallRecommendation")) is not None
        and is_string_list(value.get("risks"))
        and is_string_list(value.get("followUps"))
        and isinstance(value.get("dimensions"), list)
        and all(_is_modern_dimension(d) for d in value["dimensions"])
    ):
        return False
    for name in ("decisionRationale", "calibrationNotes", "keyStrengths", "keyRisks", "mustFixToHire"):
        if name in value and not is_string_list(value[name]):
            return False
    if "coverageMap" in value and not _is_coverage_map(value["coverageMap"]):
        return False
    if "leveling" in value:
        leveling = value["leveling"]
        if not is_record(leveling) or not is_non_empty_string(leveling.get("role")):
            return False
        if to_level(leveling.get("level")) is None:
            return False
    return True


def is_report_payload(value: Any) -> bool:
    return is_legacy_report(value) or is_modern_report(value)


def decode_payload(payload: Any) -> DecodedPayload:
    """Tag *payload* as legacy, modern, generic object, or invalid. Never raises."""
    if is_legacy_report(payload):
        return DecodedPayload(PayloadShape.LEGACY, payload)
    if is_modern_report(payload):
        return DecodedPayload(PayloadShape.MODERN, payload)
    if is_record(payload):
        return DecodedPayload(PayloadShape.GENERIC, payload)
    return DecodedPayload(PayloadShape.INVALID)


def legacy_to_candidate(report: Mapping[str, Any], context: NormalizeContext) -> dict[str, Any]:
    """Rewrite a legacy report into a modern candidate, one dimension per descriptor.

    Descriptors without a matching legacy item become not-observed. When
    several items share a key, the first one is used.
    """
    items: dict[str, Mapping[str, Any]] = {}
    for item in as_list(report.get("items")):
        if _is_legacy_item(item):
            items.setdefault(item["dimensionKey"], item)

    dimensions: list[dict[str, Any]] = []
    for descriptor in context.dimensions:
        item = items.get(descriptor.key)
        label = descriptor.label
        state = FallbackContext.LEGACY_MATCHED if item is not None else FallbackContext.LEGACY_MISSING
        claim = item["claim"] if item is not None else ""

        evidence: list[dict[str, Any]] = []
        for entry in item["evidence"] if item is not None else []:
            relevance = to_relevance(entry["confidence"])
            if relevance is None:
                relevance = LEGACY_DEFAULT_RELEVANCE
            evidence.append(
                {
                    "segmentId": entry["segmentId"],
                    "quote": to_max_words(entry["quote"], MAX_QUOTE_WORDS),
                    "interpretation": fallback_lines(FallbackContext.LEGACY_MATCHED, "interpretation")[0],
                    "strength": strength_from_relevance(relevance).value,
                    "relevance": relevance,
                }
            )
        score = int(clamp(round_half_up(item["score"]), 1, 5)) if item is not None else None

        dimensions.append(
            {
                "id": descriptor.key,
                "label": label,
                "score": score,
                "notObserved": item is None,
                "confidence": 66 if item is not None else 38,
                "anchors": default_anchors(label, descriptor.description),
                "missingSignals": fallback_lines(state, "missingSignals", label=label),
                "evidence": evidence,
                "evidenceCoverage": {
                    "citedSegmentCount": len(evidence),
                    "availableSegmentCount": context.available_segment_count,
                },
                "observedSignals": fallback_lines(state, "observedSignals", label=label, claim=claim),
                "concerns": fallback_lines(state, "concerns", label=label),
                "counterSignals": [],
                "observations": fallback_lines(state, "observations", label=label, claim=claim),
                "anchorAlignment": {
                    "chosenLevel": score if score is not None else 3,
                    "whyMeets": fallback_lines(state, "whyMeets", claim=claim),
                    "whyNotHigher": fallback_lines(FallbackContext.LEGACY_MATCHED, "whyNotHigher"),
                },
                "evidenceQuality": 0.64 if item is not None else 0.3,
                "consistency": 0.6 if item is not None else 0.35,
                "probes": fallback_lines(FallbackContext.LEGACY_MATCHED, "probes"),
                "whatWouldChangeScore": {
                    "up": fallback_lines(FallbackContext.LEGACY_MATCHED, "changeUp"),
                    "down": fallback_lines(FallbackContext.LEGACY_MATCHED, "changeDown"),
                },
            }
        )

    return {"overallSummary": report.get("summary"), "dimensions": dimensions}
