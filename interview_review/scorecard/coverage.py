"""Coverage map construction and the UI coverage model.

The scorecard's coverage map and the review UI's coverage bar are computed
independently but share :mod:`interview_review.scorecard.intervals`, so a
dimension's ``coveragePct`` equals the coverage model's percentage when the
UI filters to that dimension.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from interview_review.scorecard.coercion import clamp, round_to_tenth
from interview_review.scorecard.dimension import NormalizeContext
from interview_review.scorecard.intervals import (
    DEFAULT_EPSILON_SECONDS,
    Interval,
    coverage_percent,
    derive_duration_seconds,
    merge_intervals,
    segment_intervals,
)
from interview_review.scorecard.models import (
    CoverageMap,
    DimensionAssessment,
    DimensionCoverage,
    Scorecard,
    SegmentCoverage,
)
from interview_review.transcript.models import Segment, index_segments, normalize_segments


def _add_reverse_entries(coverage: CoverageMap, dimension_id: str, segment_ids: Iterable[str]) -> None:
    for segment_id in segment_ids:
        entry = coverage.by_segment.setdefault(segment_id, SegmentCoverage(dimensions=[]))
        if dimension_id not in entry.dimensions:
            entry.dimensions.append(dimension_id)


def create_timed_coverage_map(
    dimensions: Sequence[DimensionAssessment],
    segments: Sequence[Segment],
    epsilon: float = DEFAULT_EPSILON_SECONDS,
) -> CoverageMap:
    """Coverage from real time ranges: merged cited intervals over transcript duration."""
    segment_by_id = index_segments(segments)
    duration = derive_duration_seconds(segments)
    coverage = CoverageMap()

    for dimension in dimensions:
        segment_ids = [sid for sid in dimension.cited_segment_ids if sid in segment_by_id]
        merged = merge_intervals(segment_intervals(segment_ids, segment_by_id, duration), epsilon)
        coverage.by_dimension[dimension.id] = DimensionCoverage(
            segment_ids=segment_ids,
            coverage_pct=round_to_tenth(coverage_percent(merged, duration)),
        )
        _add_reverse_entries(coverage, dimension.id, segment_ids)

    return coverage


def create_count_coverage_map(
    dimensions: Sequence[DimensionAssessment],
    available_segment_count: int,
) -> CoverageMap:
    """Coverage without timing data: cited segments over available segments."""
    available = max(1, available_segment_count)
    coverage = CoverageMap()

    for dimension in dimensions:
        segment_ids = dimension.cited_segment_ids
        coverage.by_dimension[dimension.id] = DimensionCoverage(
            segment_ids=segment_ids,
            coverage_pct=round_to_tenth(clamp(len(segment_ids) / available * 100, 0, 100)),
        )
        _add_reverse_entries(coverage, dimension.id, segment_ids)

    return coverage


def create_coverage_map(
    dimensions: Sequence[DimensionAssessment],
    context: NormalizeContext,
    epsilon: float = DEFAULT_EPSILON_SECONDS,
) -> CoverageMap:
    if context.has_timing:
        return create_timed_coverage_map(dimensions, context.segments, epsilon)
    return create_count_coverage_map(dimensions, context.available_segment_count)


@dataclass
class CoverageModel:
    """What the review UI needs to draw one coverage bar."""

    duration_seconds: float
    intervals: list[Interval] = field(default_factory=list)
    coverage_percent: float = 0.0
    cited_segment_count: int = 0
    total_segment_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "durationSeconds": self.duration_seconds,
            "intervals": [interval.to_dict() for interval in self.intervals],
            "coveragePercent": self.coverage_percent,
            "citedSegmentCount": self.cited_segment_count,
            "totalSegmentCount": self.total_segment_count,
        }


def build_coverage_model(
    segments: Iterable[Segment | Mapping[str, Any]],
    scorecard: Scorecard,
    active_dimension_id: str | None = None,
    duration_seconds: float | None = None,
    epsilon: float = DEFAULT_EPSILON_SECONDS,
) -> CoverageModel:
    """Merge the evidence intervals of a scorecard for highlighting.

    With *active_dimension_id* only that dimension's citations count;
    otherwise every dimension contributes. Citations of unknown segments
    are ignored.
    """
    normalized = normalize_segments(segments)
    segment_by_id = index_segments(normalized)
    duration = derive_duration_seconds(normalized, duration_seconds)

    dimensions = scorecard.dimensions
    if active_dimension_id:
        dimensions = [d for d in dimensions if d.id == active_dimension_id]

    cited: dict[str, None] = {}
    for dimension in dimensions:
        for segment_id in dimension.cited_segment_ids:
            if segment_id in segment_by_id:
                cited.setdefault(segment_id, None)

    merged = merge_intervals(segment_intervals(cited, segment_by_id, duration), epsilon)
    return CoverageModel(
        duration_seconds=duration,
        intervals=merged,
        coverage_percent=coverage_percent(merged, duration),
        cited_segment_count=len(cited),
        total_segment_count=len(normalized),
    )
