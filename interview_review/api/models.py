"""Pydantic request schemas for the Interview Review API.

Request and response bodies use the camelCase wire format shared with the
review UI; fields may also be populated by their snake_case names.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from interview_review.generation.models import ReportRequest
from interview_review.rubric import DEFAULT_RUBRIC_DIMENSIONS, RubricDimension
from interview_review.transcript.models import Segment


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SegmentBody(CamelModel):
    """A transcript segment as sent by the recorder."""

    id: str = Field(min_length=1)
    start: float = Field(allow_inf_nan=False)
    end: float = Field(allow_inf_nan=False)
    text: str

    def to_segment(self) -> Segment:
        start = max(0.0, self.start)
        return Segment(id=self.id, start=start, end=max(start, self.end), text=self.text)


class RubricDimensionBody(CamelModel):
    key: str = Field(min_length=1)
    label: str = Field(min_length=1)
    description: str = ""

    def to_dimension(self) -> RubricDimension:
        return RubricDimension(key=self.key, label=self.label, description=self.description)


class RubricBody(CamelModel):
    dimensions: list[RubricDimensionBody]

    def to_dimensions(self) -> tuple[RubricDimension, ...]:
        return tuple(d.to_dimension() for d in self.dimensions)


class ReportRequestBody(CamelModel):
    """Request body for /api/report and /api/report/schema."""

    question_id: str = Field(min_length=1)
    question_text: str = Field(min_length=1)
    segments: list[SegmentBody]
    rubric: RubricBody

    def to_request(self) -> ReportRequest:
        return ReportRequest(
            question_id=self.question_id,
            question_text=self.question_text,
            segments=tuple(s.to_segment() for s in self.segments),
            rubric=self.rubric.to_dimensions(),
        )


class CoverageRequestBody(CamelModel):
    """Request body for /api/coverage.

    ``scorecard`` may be any report shape (or missing); it is normalized
    against ``rubric`` before intervals are merged. Without a rubric the
    default rubric is used.
    """

    segments: list[dict[str, Any]]
    scorecard: Any = None
    rubric: RubricBody | None = None
    active_dimension_id: str | None = None
    duration_seconds: float | None = Field(default=None, allow_inf_nan=False)

    def to_dimensions(self) -> tuple[RubricDimension, ...]:
        if self.rubric is None or not self.rubric.dimensions:
            return DEFAULT_RUBRIC_DIMENSIONS
        return self.rubric.to_dimensions()
