"""Claude-powered scorecard generation with a deterministic mock fallback."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from anthropic import Anthropic

from interview_review.config import settings
from interview_review.generation.models import GeneratedReport, ReportRequest, ReportSource
from interview_review.scorecard.coercion import as_list, as_record, to_normalized_string
from interview_review.scorecard.mock import create_mock_scorecard
from interview_review.scorecard.normalizer import normalize_scorecard
from interview_review.scorecard.schema import create_report_json_schema
from interview_review.transcript.models import Segment

logger = logging.getLogger(__name__)

REPORT_TOOL_NAME = "submit_scorecard"

SYSTEM_PROMPT = (
    "You are an interview calibration assistant. You write evidence-linked "
    "hiring scorecards for a single spoken answer, the way a recruiter or "
    "hiring manager would after a debrief.\n\n"
    f"Use the {REPORT_TOOL_NAME} tool to return the scorecard. Every field "
    "must match the tool schema exactly, and every cited segmentId must come "
    "from the transcript you were given."
)

REPORT_INSTRUCTIONS: tuple[str, ...] = (
    "Use each rubric dimension exactly once in dimensions[].",
    "Treat this as a recruiter/hiring-manager scorecard, not generic feedback.",
    "Use concrete, falsifiable language tied to transcript details.",
    "For each dimension include anchors for levels 1 through 5.",
    "A dimension can be notObserved=true with score=null when there is no clear signal.",
    "For observed dimensions, provide 2-4 evidence entries when possible using valid segmentId values.",
    "Each evidence entry must include quote (<=25 words), interpretation, and strength (weak|medium|strong).",
    "Each observedSignals bullet should be supported by at least one cited segmentId unless notObserved=true.",
    "Include concerns (1-3) and optionally counterSignals for each dimension.",
    "Provide anchorAlignment fields with chosenLevel, whyMeets, and whyNotHigher.",
    "Provide 2-4 concise observedSignals and 2-3 probes per dimension.",
    "Set evidenceQuality and consistency between 0 and 1.",
    "confidence must be 0-100 and should be explainable from evidenceCoverage, evidenceQuality, and consistency.",
    "Populate coverageMap.byDimension and coverageMap.bySegment from the cited evidence segmentIds.",
    "Set overallRecommendation to one of StrongHire, Hire, LeanHire, LeanNo, No.",
    "Include top-level decisionRationale, leveling, calibrationNotes, keyStrengths, keyRisks, and mustFixToHire.",
)


class ReportGenerationError(Exception):
    """A generated report could not be used and should be discarded."""


class UnknownSegmentCitationError(ReportGenerationError):
    """The generated report cites segment ids that are not in the transcript."""

    def __init__(self, segment_ids: list[str]) -> None:
        self.segment_ids = segment_ids
        super().__init__(f"Report cites unknown segment ids: {', '.join(segment_ids)}")


def build_report_tool(request: ReportRequest) -> dict[str, Any]:
    """Tool definition whose input schema is the per-request scorecard contract."""
    return {
        "name": REPORT_TOOL_NAME,
        "description": (
            "Submit the evidence-linked scorecard for the candidate's answer. "
            "Call this once with the complete scorecard."
        ),
        "input_schema": create_report_json_schema(request.rubric, request.segments),
    }


def build_report_prompt(request: ReportRequest) -> str:
    return json.dumps({**request.to_dict(), "instructions": list(REPORT_INSTRUCTIONS)}, indent=2)


def request_report_payload(request: ReportRequest) -> Mapping[str, Any]:
    """Ask Claude for a scorecard and return the raw tool input.

    Raises:
        anthropic.APIStatusError: The API rejected the request or is unavailable.
        ReportGenerationError: The response did not contain a usable tool call.
    """
    client = Anthropic(api_key=settings.anthropic_api_key)

    response = client.messages.create(
        model=settings.llm_model,
        max_tokens=settings.llm_max_tokens,
        system=SYSTEM_PROMPT,
        tools=[build_report_tool(request)],
        tool_choice={"type": "tool", "name": REPORT_TOOL_NAME},
        messages=[{"role": "user", "content": build_report_prompt(request)}],
    )

    return _parse_tool_response(response)


def _parse_tool_response(response: Any) -> Mapping[str, Any]:
    """Pull the scorecard tool input out of a Claude response."""
    for block in response.content:
        if block.type != "tool_use":
            continue
        if block.name != REPORT_TOOL_NAME:
            continue

        data = block.input
        if isinstance(data, str):
            try:
                data = json.loads(data)
            except json.JSONDecodeError as exc:
                raise ReportGenerationError("Scorecard tool input is not valid JSON") from exc
        if not isinstance(data, Mapping):
            raise ReportGenerationError("Scorecard tool input is not a JSON object")
        return data

    raise ReportGenerationError(f"Response did not include a {REPORT_TOOL_NAME} tool call")


def find_unknown_segment_ids(payload: Any, segments: Iterable[Segment]) -> list[str]:
    """Segment ids cited anywhere in *payload* that are not in *segments*, in first-seen order."""
    known = {segment.id for segment in segments}
    record = as_record(payload)
    cited: list[Any] = []
    for dimension in as_list(record.get("dimensions")):
        cited.extend(as_list(as_record(dimension).get("evidence")))
    for item in as_list(record.get("items")):
        cited.extend(as_list(as_record(item).get("evidence")))

    unknown: dict[str, None] = {}
    for entry in cited:
        segment_id = to_normalized_string(as_record(entry).get("segmentId"))
        if segment_id and segment_id not in known:
            unknown.setdefault(segment_id, None)
    return list(unknown)


def check_segment_citations(payload: Any, segments: Iterable[Segment]) -> None:
    unknown = find_unknown_segment_ids(payload, segments)
    if unknown:
        raise UnknownSegmentCitationError(unknown)


def _mock_report(request: ReportRequest) -> GeneratedReport:
    scorecard = create_mock_scorecard(
        request.rubric,
        request.segments,
        request.question_text,
        epsilon=settings.coverage_epsilon_seconds,
        role=settings.leveling_role,
    )
    return GeneratedReport(scorecard=scorecard, source=ReportSource.MOCK)


def generate_scorecard(request: ReportRequest, force_mock: bool = False) -> GeneratedReport:
    """Produce a scorecard for *request*.

    The mock generator is used when *force_mock* is set, when mock reports
    are forced in settings, or when no API key is configured. A generated
    report that fails the citation check is discarded in favour of the mock.

    Raises:
        anthropic.APIStatusError: Propagated from the Claude API.
    """
    if force_mock or settings.force_mock_reports or not settings.anthropic_api_key:
        return _mock_report(request)

    try:
        payload = request_report_payload(request)
        check_segment_citations(payload, request.segments)
    except ReportGenerationError as exc:
        logger.warning("Discarding generated report for question %s: %s", request.question_id, exc)
        return _mock_report(request)

    scorecard = normalize_scorecard(
        payload,
        request.rubric,
        request.segments,
        question_text=request.question_text,
        epsilon=settings.coverage_epsilon_seconds,
        role=settings.leveling_role,
    )
    logger.info(
        "Generated %s scorecard for question %s",
        scorecard.overall_recommendation,
        request.question_id,
    )
    return GeneratedReport(scorecard=scorecard, source=ReportSource.GENERATED)
