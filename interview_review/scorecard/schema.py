"""JSON schema handed to the generation service as its output contract.

Enumerations and array bounds are read from the same tables the normalizer
enforces, so a value the schema allows is a value the normalizer keeps.
The schema is request specific: dimension keys, labels and segment ids are
enumerated verbatim.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from interview_review.rubric import RubricDimension, parse_rubric
from interview_review.scorecard.models import (
    ALIGNMENT_LIST_BOUNDS,
    ANCHOR_LEVELS,
    CHANGE_LIST_BOUNDS,
    DIMENSION_LIST_BOUNDS,
    MAX_EVIDENCE_ENTRIES,
    REPORT_LIST_BOUNDS,
    EvidenceStrength,
    Level,
    Recommendation,
)
from interview_review.transcript.models import Segment, normalize_segments

MAX_QUOTE_CHARACTERS = 220


def _string_array(bounds: tuple[int, int], enum: list[str] | None = None) -> dict[str, Any]:
    low, high = bounds
    items: dict[str, Any] = {"type": "string"}
    if enum is not None:
        items["enum"] = enum
    return {"type": "array", "items": items, "minItems": low, "maxItems": high}


def _closed_object(properties: dict[str, Any], required: Iterable[str] | None = None) -> dict[str, Any]:
    return {
        "type": "object",
        "additionalProperties": False,
        "properties": properties,
        "required": list(properties) if required is None else list(required),
    }


def _evidence_schema(segment_ids: list[str]) -> dict[str, Any]:
    return {
        "type": "array",
        "minItems": 0,
        "maxItems": MAX_EVIDENCE_ENTRIES,
        "items": _closed_object(
            {
                "segmentId": {"type": "string", "enum": segment_ids},
                "quote": {"type": "string", "minLength": 1, "maxLength": MAX_QUOTE_CHARACTERS},
                "interpretation": {"type": "string", "minLength": 1},
                "strength": {"type": "string", "enum": [s.value for s in EvidenceStrength]},
                "relevance": {"type": "number", "minimum": 0, "maximum": 1},
            }
        ),
    }


def _dimension_schema(keys: list[str], labels: list[str], segment_ids: list[str]) -> dict[str, Any]:
    properties: dict[str, Any] = {
        "id": {"type": "string", "enum": keys},
        "label": {"type": "string", "enum": labels},
        "score": {"type": ["integer", "null"], "minimum": 1, "maximum": 5},
        "notObserved": {"type": "boolean"},
        "confidence": {"type": "integer", "minimum": 0, "maximum": 100},
        "anchors": _closed_object({level: {"type": "string"} for level in ANCHOR_LEVELS}),
    }
    for name, bounds in DIMENSION_LIST_BOUNDS.items():
        properties[name] = _string_array(bounds)
    properties.update(
        {
            "anchorAlignment": _closed_object(
                {
                    "chosenLevel": {"type": "integer", "minimum": 1, "maximum": 5},
                    "whyMeets": _string_array(ALIGNMENT_LIST_BOUNDS),
                    "whyNotHigher": _string_array(ALIGNMENT_LIST_BOUNDS),
                }
            ),
            "evidenceQuality": {"type": "number", "minimum": 0, "maximum": 1},
            "consistency": {"type": "number", "minimum": 0, "maximum": 1},
            "whatWouldChangeScore": _closed_object(
                {"up": _string_array(CHANGE_LIST_BOUNDS), "down": _string_array(CHANGE_LIST_BOUNDS)}
            ),
            "evidence": _evidence_schema(segment_ids),
            "evidenceCoverage": _closed_object(
                {
                    "citedSegmentCount": {"type": "integer", "minimum": 0},
                    "availableSegmentCount": {"type": "integer", "minimum": 0},
                }
            ),
        }
    )
    return _closed_object(properties)


def _coverage_map_schema(keys: list[str], segment_ids: list[str]) -> dict[str, Any]:
    return _closed_object(
        {
            "byDimension": {
                "type": "object",
                "additionalProperties": _closed_object(
                    {
                        "segmentIds": {"type": "array", "items": {"type": "string", "enum": segment_ids}},
                        "coveragePct": {"type": "number", "minimum": 0, "maximum": 100},
                    }
                ),
            },
            "bySegment": {
                "type": "object",
                "additionalProperties": _closed_object(
                    {"dimensions": {"type": "array", "items": {"type": "string", "enum": keys}}}
                ),
            },
        }
    )


def create_report_json_schema(
    rubric: Iterable[RubricDimension | Mapping[str, Any]],
    segments: Iterable[Segment | Mapping[str, Any]],
) -> dict[str, Any]:
    """Build the structured-output contract for one report request."""
    dimensions = parse_rubric(rubric)
    keys = [d.key for d in dimensions]
    labels = [d.label for d in dimensions]
    segment_ids = [s.id for s in normalize_segments(segments)]

    dimension_items = _dimension_schema(keys, labels, segment_ids)
    properties: dict[str, Any] = {
        "overallSummary": {"type": "string", "minLength": 1},
        "overallRecommendation": {"type": "string", "enum": [r.value for r in Recommendation]},
        "leveling": _closed_object(
            {"role": {"type": "string"}, "level": {"type": "string", "enum": [lv.value for lv in Level]}}
        ),
    }
    for name, bounds in REPORT_LIST_BOUNDS.items():
        properties[name] = _string_array(bounds)
    properties["dimensions"] = {
        "type": "array",
        "minItems": len(keys),
        "maxItems": len(keys),
        "items": dimension_items,
    }
    properties["coverageMap"] = _coverage_map_schema(keys, segment_ids)

    return _closed_object(properties)
