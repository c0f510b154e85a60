"""Data models for report generation requests and results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from interview_review.rubric import RubricDimension
from interview_review.scorecard.models import Scorecard
from interview_review.transcript.models import Segment


class ReportSource(StrEnum):
    """Where a served scorecard came from."""

    GENERATED = "generated"
    MOCK = "mock"


@dataclass(frozen=True)
class ReportRequest:
    """One answer to be scored: the question, its transcript and the rubric."""

    question_id: str
    question_text: str
    segments: tuple[Segment, ...] = field(default_factory=tuple)
    rubric: tuple[RubricDimension, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "questionId": self.question_id,
            "questionText": self.question_text,
            "rubric": {"dimensions": [d.to_dict() for d in self.rubric]},
            "segments": [s.to_dict() for s in self.segments],
        }


@dataclass
class GeneratedReport:
    scorecard: Scorecard
    source: ReportSource

    def to_dict(self) -> dict[str, Any]:
        return {**self.scorecard.to_dict(), "source": self.source.value}
