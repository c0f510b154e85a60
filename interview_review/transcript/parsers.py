"""Parsers for transcription-service payloads."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from interview_review.transcript.models import Segment, Transcription, coerce_segment, is_segment_payload

MOCK_SEGMENTS: tuple[Segment, ...] = (
    Segment(
        id="mock-1",
        start=0.0,
        end=3.2,
        text="This is a deterministic mock transcript for the interview demo.",
    ),
    Segment(
        id="mock-2",
        start=3.2,
        end=7.4,
        text="Set ANTHROPIC_API_KEY to switch report generation to the live model.",
    ),
)


def mock_transcription() -> Transcription:
    """Return the fixed two-segment transcript used when no service is configured."""
    segments = list(MOCK_SEGMENTS)
    return Transcription(
        transcript_text=" ".join(s.text for s in segments),
        segments=segments,
    )


def parse_transcription_payload(payload: Any) -> Transcription:
    """Convert a verbose-JSON transcription response into a :class:`Transcription`.

    Handles the shape ``{"text": ..., "segments": [{"id", "start", "end", "text"}]}``:

    - numeric segment ids are stringified, missing ids become the 1-based index
    - a missing ``end`` collapses to ``start``
    - text without segments becomes one zero-length segment
    - anything else falls back to :func:`mock_transcription`
    """
    if not isinstance(payload, Mapping):
        return mock_transcription()

    raw_segments = payload.get("segments")
    segments: list[Segment] = []
    if isinstance(raw_segments, list):
        for index, raw in enumerate(raw_segments):
            segment = coerce_segment(raw if isinstance(raw, Mapping) else {}, index)
            if segment is not None:
                segments.append(segment)

    text = payload.get("text")
    transcript_text = text if isinstance(text, str) else " ".join(s.text for s in segments).strip()

    if segments:
        return Transcription(transcript_text=transcript_text, segments=segments)

    if transcript_text:
        return Transcription(
            transcript_text=transcript_text,
            segments=[Segment(id="1", start=0.0, end=0.0, text=transcript_text)],
        )

    return mock_transcription()


def parse_cached_transcription(value: Any) -> Transcription | None:
    """Strictly validate a persisted transcription; None when any part is off."""
    if not isinstance(value, Mapping):
        return None
    text = value.get("transcriptText")
    raw_segments = value.get("segments")
    if not isinstance(text, str) or not isinstance(raw_segments, list):
        return None
    if not all(is_segment_payload(raw) for raw in raw_segments):
        return None
    try:
        segments = [Segment(id=r["id"], start=float(r["start"]), end=float(r["end"]), text=r["text"]) for r in raw_segments]
    except ValueError:
        return None
    return Transcription(transcript_text=text, segments=segments)
