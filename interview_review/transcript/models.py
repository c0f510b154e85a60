"""Data models for time-stamped transcripts."""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Segment:
    """One time-stamped transcript segment.

    ``start`` and ``end`` are seconds from the beginning of the recording.
    Construction validates the time range; use :func:`coerce_segment` for
    untrusted input.
    """

    id: str
    start: float
    end: float
    text: str = ""

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Segment id must be a non-empty string")
        if not math.isfinite(self.start) or not math.isfinite(self.end):
            raise ValueError(f"Segment {self.id!r} has a non-finite time range")
        if self.start < 0:
            raise ValueError(f"Segment {self.id!r} starts before 0 ({self.start})")
        if self.end < self.start:
            raise ValueError(f"Segment {self.id!r} ends before it starts ({self.end} < {self.start})")

    @property
    def duration(self) -> float:
        return self.end - self.start

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "start": self.start, "end": self.end, "text": self.text}


@dataclass
class Transcription:
    """A full transcription: flat text plus its segments."""

    transcript_text: str
    segments: list[Segment] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "transcriptText": self.transcript_text,
            "segments": [s.to_dict() for s in self.segments],
        }


def _finite(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            converted = float(value)
        except OverflowError:
            return None
        return converted if math.isfinite(converted) else None
    if isinstance(value, str) and value.strip():
        try:
            parsed = float(value)
        except ValueError:
            return None
        return parsed if math.isfinite(parsed) else None
    return None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and _finite(value) is not None


def coerce_segment(value: Segment | Mapping[str, Any], index: int = 0) -> Segment | None:
    """Repair a segment-like value into a valid :class:`Segment`.

    ``start`` is floored at 0 and ``end`` at ``start``. A missing id falls
    back to the 1-based position. Returns None for non-mapping input.
    """
    if isinstance(value, Segment):
        return value
    if not isinstance(value, Mapping):
        return None

    raw_id = value.get("id")
    if isinstance(raw_id, str) and raw_id.strip():
        seg_id = raw_id.strip()
    elif isinstance(raw_id, int) and not isinstance(raw_id, bool):
        seg_id = str(raw_id)
    else:
        seg_id = str(index + 1)

    start = max(0.0, _finite(value.get("start")) or 0.0)
    end_raw = _finite(value.get("end"))
    end = max(start, end_raw if end_raw is not None else start)
    text = value.get("text")
    return Segment(id=seg_id, start=start, end=end, text=text if isinstance(text, str) else "")


def normalize_segments(values: Iterable[Segment | Mapping[str, Any]] | None) -> list[Segment]:
    """Coerce a list of segment-like values, dropping anything unusable."""
    segments: list[Segment] = []
    for index, value in enumerate(values or []):
        segment = coerce_segment(value, index)
        if segment is not None:
            segments.append(segment)
    return segments


def index_segments(segments: Iterable[Segment]) -> dict[str, Segment]:
    """Map segment id to segment. The first occurrence of an id wins."""
    by_id: dict[str, Segment] = {}
    for segment in segments:
        by_id.setdefault(segment.id, segment)
    return by_id


def is_segment_payload(value: Any) -> bool:
    """Strict check used when reading persisted transcriptions."""
    if not isinstance(value, Mapping):
        return False
    return (
        isinstance(value.get("id"), str)
        and len(value["id"]) > 0
        and _is_number(value.get("start"))
        and _is_number(value.get("end"))
        and isinstance(value.get("text"), str)
    )
