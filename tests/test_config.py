"""Tests for Settings and the string enums shared with the review UI."""

from __future__ import annotations

import pytest

from interview_review.config import Settings, get_settings
from interview_review.generation.models import ReportSource
from interview_review.scorecard.models import EvidenceStrength, Level, Recommendation

# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        monkeypatch.delenv("FORCE_MOCK_REPORTS", raising=False)
        monkeypatch.delenv("COVERAGE_EPSILON_SECONDS", raising=False)
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.anthropic_api_key == ""
        assert s.force_mock_reports is False
        assert s.coverage_epsilon_seconds == pytest.approx(0.05)
        assert s.leveling_role == "Software Engineer"
        assert s.api_port == 8000

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FORCE_MOCK_REPORTS", "true")
        monkeypatch.setenv("COVERAGE_EPSILON_SECONDS", "0.2")
        monkeypatch.setenv("LEVELING_ROLE", "Data Engineer")
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.force_mock_reports is True
        assert s.coverage_epsilon_seconds == pytest.approx(0.2)
        assert s.leveling_role == "Data Engineer"

    def test_get_settings_is_cached(self) -> None:
        assert get_settings() is get_settings()


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class TestRecommendation:
    def test_values(self) -> None:
        assert [r.value for r in Recommendation] == ["StrongHire", "Hire", "LeanHire", "LeanNo", "No"]

    def test_from_string(self) -> None:
        assert Recommendation("LeanNo") is Recommendation.LEAN_NO

    def test_invalid_raises(self) -> None:
        with pytest.raises(ValueError):
            Recommendation("Maybe")

    def test_is_str_subclass(self) -> None:
        """Enum values behave as plain strings for JSON serialization."""
        assert isinstance(Recommendation.HIRE, str)


class TestOtherEnums:
    def test_evidence_strength(self) -> None:
        assert [s.value for s in EvidenceStrength] == ["weak", "medium", "strong"]

    def test_level(self) -> None:
        assert [level.value for level in Level] == ["intern", "newgrad", "mid", "senior"]

    def test_report_source(self) -> None:
        assert ReportSource("mock") is ReportSource.MOCK
        assert ReportSource.GENERATED == "generated"
