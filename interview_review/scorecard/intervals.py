"""Interval merging for evidence coverage.

Both the scorecard coverage map and the UI coverage model go through
:func:`merge_intervals`, so merged ranges and percentages agree between them.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

from interview_review.scorecard.coercion import clamp
from interview_review.transcript.models import Segment

DEFAULT_EPSILON_SECONDS = 0.05
MIN_DURATION_SECONDS = 1.0


@dataclass(frozen=True)
class Interval:
    """A closed time range tagged with the ids it was built from."""

    start: float
    end: float
    tags: tuple[str, ...] = ()

    @property
    def length(self) -> float:
        return max(self.end - self.start, 0.0)

    def to_dict(self) -> dict[str, object]:
        return {"start": self.start, "end": self.end, "segmentIds": list(self.tags)}


def _union(left: tuple[str, ...], right: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys((*left, *right)))


def merge_intervals(
    intervals: Iterable[Interval],
    epsilon: float = DEFAULT_EPSILON_SECONDS,
) -> list[Interval]:
    """Merge overlapping or near-adjacent intervals in a single sweep.

    Intervals are sorted by start; the next interval joins the running one
    when ``start <= running_end + epsilon``. Tags of absorbed intervals are
    unioned in first-seen order. Zero-width intervals are kept.

    The result is sorted, non-overlapping, and a fixed point: merging it
    again returns an equal list.
    """
    ordered = sorted(intervals, key=lambda interval: interval.start)
    if not ordered:
        return []

    merged: list[Interval] = []
    running = ordered[0]
    for interval in ordered[1:]:
        if interval.start <= running.end + epsilon:
            running = Interval(
                start=running.start,
                end=max(running.end, interval.end),
                tags=_union(running.tags, interval.tags),
            )
            continue
        merged.append(running)
        running = interval
    merged.append(running)
    return merged


def covered_seconds(intervals: Iterable[Interval]) -> float:
    return sum(interval.length for interval in intervals)


def derive_duration_seconds(
    segments: Iterable[Segment],
    preferred_duration: float | None = None,
) -> float:
    """Duration basis for coverage percentages.

    A positive, finite *preferred_duration* wins; otherwise the latest
    segment end is used. Either way the basis is floored at one second.
    """
    if preferred_duration is not None and math.isfinite(preferred_duration) and preferred_duration > 0:
        basis = preferred_duration
    else:
        basis = max((s.end for s in segments), default=0.0)
    return max(basis, MIN_DURATION_SECONDS)


def segment_intervals(
    segment_ids: Iterable[str],
    segment_by_id: Mapping[str, Segment],
    duration_seconds: float,
) -> list[Interval]:
    """One interval per known segment id, clamped to ``[0, duration_seconds]``."""
    intervals: list[Interval] = []
    for segment_id in segment_ids:
        segment = segment_by_id.get(segment_id)
        if segment is None:
            continue
        start = clamp(segment.start, 0, duration_seconds)
        end = clamp(max(segment.end, start), 0, duration_seconds)
        intervals.append(Interval(start=start, end=end, tags=(segment_id,)))
    return intervals


def coverage_percent(intervals: Sequence[Interval], duration_seconds: float) -> float:
    """Share of *duration_seconds* covered by already-merged *intervals*, in [0, 100]."""
    if duration_seconds <= 0:
        return 0.0
    return clamp(covered_seconds(intervals) / duration_seconds * 100, 0, 100)
