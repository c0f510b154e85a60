"""Tests for API endpoints (no external API keys required)."""

from unittest.mock import patch

import httpx
from anthropic import APIStatusError
from fastapi.testclient import TestClient

from interview_review.api.main import app

client = TestClient(app)

SEGMENTS = [
    {"id": "1", "start": 0, "end": 4, "text": "I rewrote the billing retry logic."},
    {"id": "2", "start": 4, "end": 9, "text": "Failed charges dropped by thirty percent."},
]

RUBRIC = {
    "dimensions": [
        {"key": "problemSolving", "label": "Problem Solving"},
        {"key": "ownership", "label": "Ownership"},
        {"key": "clarity", "label": "Clarity"},
    ]
}


def _report_body(**overrides):
    body = {
        "questionId": "1",
        "questionText": "Describe a bug you owned end to end.",
        "segments": SEGMENTS,
        "rubric": RUBRIC,
    }
    body.update(overrides)
    return body


def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_report_validation():
    """Missing required fields are rejected before any scoring happens."""
    response = client.post("/api/report", json={})
    assert response.status_code == 422


def test_report_rejects_blank_question_text():
    response = client.post("/api/report?mock=1", json=_report_body(questionText=""))
    assert response.status_code == 422


def test_report_rejects_non_finite_times():
    segments = [{"id": "1", "start": 0, "end": "Infinity", "text": "x"}]
    response = client.post("/api/report?mock=1", json=_report_body(segments=segments))
    assert response.status_code == 422


def test_report_requires_segments():
    response = client.post("/api/report?mock=1", json=_report_body(segments=[]))
    assert response.status_code == 400
    assert "segments" in response.json()["detail"]


def test_report_requires_rubric_dimensions():
    response = client.post("/api/report?mock=1", json=_report_body(rubric={"dimensions": []}))
    assert response.status_code == 400
    assert "rubric.dimensions" in response.json()["detail"]


def test_report_mock_flag():
    response = client.post("/api/report?mock=1", json=_report_body())
    assert response.status_code == 200
    data = response.json()
    assert data["source"] == "mock"
    assert [d["id"] for d in data["dimensions"]] == ["problemSolving", "ownership", "clarity"]
    assert data["dimensions"][-1]["notObserved"] is True
    assert data["overallRecommendation"] in {"StrongHire", "Hire", "LeanHire", "LeanNo", "No"}
    assert set(data["coverageMap"]["byDimension"]) == {"problemSolving", "ownership", "clarity"}


def test_report_is_remembered_for_numbered_questions():
    client.post("/api/report?mock=1", json=_report_body(questionId="3"))
    client.post("/api/report?mock=1", json=_report_body(questionId="intro"))

    response = client.get("/api/reviews")
    assert response.status_code == 200
    data = response.json()
    assert data["schemaVersion"] == 1
    assert list(data["reports"]) == ["3"]
    assert data["reports"]["3"]["source"] == "mock"
    assert data["transcriptions"]["3"]["segments"][0]["id"] == "1"


def test_reviews_empty_without_cache():
    response = client.get("/api/reviews")
    assert response.json() == {"schemaVersion": 1, "transcriptions": {}, "reports": {}}


def test_report_llm_failure_returns_503():
    """Upstream API errors become a 503 with the provider message."""
    error = APIStatusError(
        "overloaded",
        response=httpx.Response(529, request=httpx.Request("POST", "https://api.anthropic.com/v1/messages")),
        body=None,
    )
    with patch("interview_review.api.routes.report.generate_scorecard", side_effect=error):
        response = client.post("/api/report", json=_report_body())
    assert response.status_code == 503
    assert response.json()["detail"] == "LLM unavailable: overloaded"


def test_report_schema():
    response = client.post("/api/report/schema", json=_report_body())
    assert response.status_code == 200
    schema = response.json()
    assert schema["properties"]["dimensions"]["minItems"] == 3
    evidence = schema["properties"]["dimensions"]["items"]["properties"]["evidence"]
    assert evidence["items"]["properties"]["segmentId"]["enum"] == ["1", "2"]


def test_coverage_for_one_dimension():
    scorecard = {
        "dimensions": [
            {"id": "problemSolving", "score": 4, "evidence": [{"segmentId": "1"}, {"segmentId": "2"}]},
            {"id": "ownership", "notObserved": True},
            {"id": "clarity", "notObserved": True},
        ]
    }
    response = client.post(
        "/api/coverage",
        json={
            "segments": SEGMENTS,
            "scorecard": scorecard,
            "rubric": RUBRIC,
            "activeDimensionId": "problemSolving",
        },
    )
    assert response.status_code == 200
    data = response.json()
    assert data["intervals"] == [{"start": 0.0, "end": 9.0, "segmentIds": ["1", "2"]}]
    assert data["durationSeconds"] == 9.0
    assert data["coveragePercent"] == 100.0


def test_coverage_without_scorecard_uses_mock():
    """A missing scorecard is normalized into the mock, which cites every segment here."""
    response = client.post("/api/coverage", json={"segments": SEGMENTS})
    assert response.status_code == 200
    data = response.json()
    assert data["citedSegmentCount"] == 2
    assert data["coveragePercent"] == 100.0


def test_coverage_unobserved_dimension_is_empty():
    scorecard = {"dimensions": [{"id": "clarity", "notObserved": True}]}
    response = client.post(
        "/api/coverage",
        json={"segments": SEGMENTS, "scorecard": scorecard, "activeDimensionId": "clarity"},
    )
    data = response.json()
    assert data["intervals"] == []
    assert data["coveragePercent"] == 0


def test_transcript_mock():
    response = client.get("/api/transcript/mock")
    assert response.status_code == 200
    assert [s["id"] for s in response.json()["segments"]] == ["mock-1", "mock-2"]


def test_transcript_parse():
    payload = {"text": "hello there", "segments": [{"id": 0, "start": 0, "end": 1.5, "text": "hello there"}]}
    response = client.post("/api/transcript/parse", json=payload)
    assert response.status_code == 200
    assert response.json()["segments"] == [{"id": "0", "start": 0.0, "end": 1.5, "text": "hello there"}]


def test_transcript_parse_text_only():
    response = client.post("/api/transcript/parse", json={"text": "just words"})
    segments = response.json()["segments"]
    assert segments == [{"id": "1", "start": 0.0, "end": 0.0, "text": "just words"}]


def test_coverage_tolerates_out_of_range_integers():
    segments = [{"id": "1", "start": 10**400, "end": 4, "text": "x"}, SEGMENTS[1]]
    scorecard = {"dimensions": [{"id": "clarity", "score": 10**400, "evidence": [{"segmentId": "1"}]}]}
    response = client.post(
        "/api/coverage",
        json={"segments": segments, "scorecard": scorecard, "activeDimensionId": "clarity"},
    )
    assert response.status_code == 200
    assert response.json()["intervals"][0]["start"] == 0.0
