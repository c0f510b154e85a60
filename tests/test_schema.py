"""Tests for the structured-output schema."""

from __future__ import annotations

from interview_review.rubric import DEFAULT_RUBRIC_DIMENSIONS
from interview_review.scorecard.models import DIMENSION_LIST_BOUNDS, REPORT_LIST_BOUNDS
from interview_review.scorecard.schema import create_report_json_schema
from interview_review.transcript.models import Segment

SEGMENTS = [Segment("s1", 0, 2, "one"), Segment("s2", 2, 4, "two")]


def _dimension_items() -> dict:
    schema = create_report_json_schema(DEFAULT_RUBRIC_DIMENSIONS, SEGMENTS)
    return schema["properties"]["dimensions"]["items"]


class TestReportSchema:
    def test_top_level_shape(self) -> None:
        schema = create_report_json_schema(DEFAULT_RUBRIC_DIMENSIONS, SEGMENTS)
        assert schema["type"] == "object"
        assert schema["additionalProperties"] is False
        assert set(schema["required"]) == set(schema["properties"])
        assert schema["properties"]["overallRecommendation"]["enum"] == [
            "StrongHire",
            "Hire",
            "LeanHire",
            "LeanNo",
            "No",
        ]
        assert schema["properties"]["leveling"]["properties"]["level"]["enum"] == [
            "intern",
            "newgrad",
            "mid",
            "senior",
        ]

    def test_report_array_bounds_match_normalizer(self) -> None:
        properties = create_report_json_schema(DEFAULT_RUBRIC_DIMENSIONS, SEGMENTS)["properties"]
        for name, (low, high) in REPORT_LIST_BOUNDS.items():
            assert (properties[name]["minItems"], properties[name]["maxItems"]) == (low, high)

    def test_dimension_enumerations_are_request_specific(self) -> None:
        items = _dimension_items()
        assert items["properties"]["id"]["enum"] == [d.key for d in DEFAULT_RUBRIC_DIMENSIONS]
        assert items["properties"]["label"]["enum"] == [d.label for d in DEFAULT_RUBRIC_DIMENSIONS]
        evidence = items["properties"]["evidence"]
        assert evidence["maxItems"] == 4
        assert evidence["items"]["properties"]["segmentId"]["enum"] == ["s1", "s2"]
        assert evidence["items"]["properties"]["strength"]["enum"] == ["weak", "medium", "strong"]

    def test_dimension_array_bounds_match_normalizer(self) -> None:
        properties = _dimension_items()["properties"]
        for name, (low, high) in DIMENSION_LIST_BOUNDS.items():
            assert (properties[name]["minItems"], properties[name]["maxItems"]) == (low, high)

    def test_dimension_count_is_fixed(self) -> None:
        dimensions = create_report_json_schema(DEFAULT_RUBRIC_DIMENSIONS, SEGMENTS)["properties"]["dimensions"]
        assert dimensions["minItems"] == dimensions["maxItems"] == len(DEFAULT_RUBRIC_DIMENSIONS)

    def test_score_is_nullable(self) -> None:
        assert _dimension_items()["properties"]["score"]["type"] == ["integer", "null"]

    def test_segment_mappings_are_accepted(self) -> None:
        schema = create_report_json_schema(
            DEFAULT_RUBRIC_DIMENSIONS[:1], [{"id": 3, "start": 0, "end": 1, "text": "x"}]
        )
        coverage = schema["properties"]["coverageMap"]["properties"]
        assert coverage["byDimension"]["additionalProperties"]["properties"]["segmentIds"]["items"]["enum"] == ["3"]
        assert coverage["bySegment"]["additionalProperties"]["properties"]["dimensions"]["items"]["enum"] == [
            "clarity"
        ]

    def test_rubric_mapping_is_accepted(self) -> None:
        schema = create_report_json_schema({"dimensions": [{"key": "grit", "label": "Grit"}]}, SEGMENTS)
        assert schema["properties"]["dimensions"]["items"]["properties"]["id"]["enum"] == ["grit"]
