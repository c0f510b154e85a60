"""Report endpoints: generate scorecards, expose the output schema, list cached reviews."""

from __future__ import annotations

import logging
from typing import Any

from anthropic import APIStatusError
from fastapi import APIRouter, HTTPException

from interview_review.api.models import ReportRequestBody
from interview_review.generation.generator import generate_scorecard
from interview_review.generation.models import GeneratedReport, ReportRequest
from interview_review.scorecard.schema import create_report_json_schema
from interview_review.storage.review_cache import (
    ReviewCacheState,
    load_review_cache,
    question_number,
    update_review_cache,
)
from interview_review.transcript.models import Transcription

logger = logging.getLogger(__name__)

router = APIRouter()


def _validate_request(body: ReportRequestBody) -> None:
    if not body.segments:
        raise HTTPException(
            status_code=400,
            detail="segments must contain at least one transcript segment.",
        )
    if not body.rubric.dimensions:
        raise HTTPException(
            status_code=400,
            detail="rubric.dimensions must contain at least one dimension.",
        )


def _remember_review(request: ReportRequest, report: GeneratedReport) -> None:
    """Store the transcript and report in the review cache when the question id is numbered."""
    number = question_number(request.question_id)
    if number is None:
        return

    transcription = Transcription(
        transcript_text=" ".join(s.text for s in request.segments).strip(),
        segments=list(request.segments),
    )

    def remember(state: ReviewCacheState) -> None:
        state.transcriptions[number] = transcription
        state.reports[number] = report.to_dict()

    try:
        update_review_cache(remember)
    except OSError:
        logger.exception("Failed to write review cache for question %s", request.question_id)


@router.post("/api/report")
async def create_report(body: ReportRequestBody, mock: str | None = None) -> dict[str, Any]:
    """Score one answer against the rubric.

    ``?mock=1`` forces the deterministic mock scorecard. The response is
    the camelCase scorecard plus a ``source`` field (``generated`` or ``mock``).
    """
    _validate_request(body)
    request = body.to_request()

    try:
        report = generate_scorecard(request, force_mock=mock == "1")
    except APIStatusError as exc:
        # Upstream failures become 503 so the browser gets JSON with CORS headers.
        logger.exception("Report generation failed for question %s", request.question_id)
        raise HTTPException(status_code=503, detail=f"LLM unavailable: {exc.message}") from exc

    _remember_review(request, report)
    return report.to_dict()


@router.post("/api/report/schema")
async def report_schema(body: ReportRequestBody) -> dict[str, Any]:
    """Return the structured-output contract used for this request."""
    _validate_request(body)
    request = body.to_request()
    return create_report_json_schema(request.rubric, request.segments)


@router.get("/api/reviews")
async def list_reviews() -> dict[str, Any]:
    """Return the cached transcriptions and reports keyed by question number."""
    return load_review_cache().to_dict()
