"""Transcript endpoints: mock transcript and transcription payload parsing."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from interview_review.transcript.parsers import mock_transcription, parse_transcription_payload

router = APIRouter()


@router.get("/api/transcript/mock")
async def transcript_mock() -> dict[str, Any]:
    return mock_transcription().to_dict()


@router.post("/api/transcript/parse")
async def transcript_parse(payload: dict[str, Any]) -> dict[str, Any]:
    """Convert a verbose-JSON transcription response into segments.

    Unusable payloads come back as the mock transcript.
    """
    return parse_transcription_payload(payload).to_dict()
