"""Coverage endpoint: merged evidence intervals for the review UI."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from interview_review.api.models import CoverageRequestBody
from interview_review.config import settings
from interview_review.scorecard.coverage import build_coverage_model
from interview_review.scorecard.normalizer import normalize_scorecard
from interview_review.transcript.models import normalize_segments

router = APIRouter()


@router.post("/api/coverage")
async def coverage(body: CoverageRequestBody) -> dict[str, Any]:
    """Build the coverage bar for a scorecard, optionally filtered to one dimension.

    The scorecard is normalized first, so cached, legacy or partial reports
    are all accepted.
    """
    segments = normalize_segments(body.segments)
    scorecard = normalize_scorecard(
        body.scorecard,
        body.to_dimensions(),
        segments,
        epsilon=settings.coverage_epsilon_seconds,
        role=settings.leveling_role,
    )
    model = build_coverage_model(
        segments,
        scorecard,
        active_dimension_id=body.active_dimension_id,
        duration_seconds=body.duration_seconds,
        epsilon=settings.coverage_epsilon_seconds,
    )
    return model.to_dict()
