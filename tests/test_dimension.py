"""Tests for the dimension normalizer and its helpers."""

from __future__ import annotations

import pytest

from interview_review.rubric import RubricDimension
from interview_review.scorecard.coercion import (
    ensure_min_items,
    relevance_from_strength,
    strength_from_relevance,
    to_finite_number,
    to_max_words,
    to_relevance,
    to_string_array,
)
from interview_review.scorecard.dimension import (
    SYNTHETIC_RELEVANCE,
    build_context,
    infer_confidence,
    normalize_dimension,
    pick_fallback_evidence_segments,
)
from interview_review.scorecard.models import ANCHOR_LEVELS, DIMENSION_LIST_BOUNDS, EvidenceStrength
from interview_review.transcript.models import Segment

CLARITY = RubricDimension(key="clarity", label="Clarity", description="Explains context and outcomes.")

SEGMENTS = [
    Segment("s1", 0.0, 2.0, "I set up the on-call rotation for the payments team."),
    Segment("s2", 2.0, 5.0, "Latency dropped by forty percent after the cache change."),
    Segment("s3", 5.0, 9.0, "We rejected the rewrite because of the migration risk."),
]


def _context(segments: list[Segment] | None = None, **kwargs: object):
    return build_context([CLARITY], SEGMENTS if segments is None else segments, **kwargs)  # type: ignore[arg-type]


class TestCoercion:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (3, 3.0),
            ("4.5", 4.5),
            ("", None),
            ("  ", None),
            (True, None),
            (float("nan"), None),
            ("x", None),
            (10**400, None),
        ],
    )
    def test_to_finite_number(self, value: object, expected: float | None) -> None:
        assert to_finite_number(value) == expected

    def test_relevance_accepts_percentages(self) -> None:
        assert to_relevance(80) == pytest.approx(0.8)
        assert to_relevance(0.3) == pytest.approx(0.3)
        assert to_relevance(1) == 1
        assert to_relevance(250) == 1
        assert to_relevance(-2) == 0

    @pytest.mark.parametrize(
        ("relevance", "strength"),
        [(0.75, EvidenceStrength.STRONG), (0.74, EvidenceStrength.MEDIUM), (0.45, EvidenceStrength.MEDIUM), (0.44, EvidenceStrength.WEAK)],
    )
    def test_strength_thresholds(self, relevance: float, strength: EvidenceStrength) -> None:
        assert strength_from_relevance(relevance) is strength

    def test_strength_relevance_mapping_is_consistent(self) -> None:
        for strength in EvidenceStrength:
            assert strength_from_relevance(relevance_from_strength(strength)) is strength

    def test_to_max_words(self) -> None:
        text = " ".join(f"w{i}" for i in range(30))
        truncated = to_max_words(text, 25)
        assert truncated.endswith("...")
        assert len(truncated[:-3].split()) == 25
        assert to_max_words("  a   b ", 25) == "a b"

    def test_string_array_dedupes_and_trims(self) -> None:
        assert to_string_array([" a ", "a", "", 3, "b"]) == ["a", "b"]
        assert to_string_array("a") == []

    def test_ensure_min_items(self) -> None:
        assert ensure_min_items(["a"], ["a", "b", "c"], 2, 4) == ["a", "b"]
        assert ensure_min_items(["a", "b", "c"], ["d"], 1, 2) == ["a", "b"]
        assert ensure_min_items([], [], 2, 4) == []


class TestFallbackEvidencePicker:
    def test_starts_at_dimension_offset(self) -> None:
        picked = pick_fallback_evidence_segments(_context(), dimension_index=1, desired_count=2)
        assert [s.id for s in picked] == ["s2", "s3"]

    def test_wraps_around(self) -> None:
        picked = pick_fallback_evidence_segments(_context(), dimension_index=2, desired_count=2)
        assert [s.id for s in picked] == ["s3", "s1"]

    def test_skips_excluded_segments(self) -> None:
        picked = pick_fallback_evidence_segments(_context(), 0, 2, exclude=["s1"])
        assert [s.id for s in picked] == ["s2", "s3"]

    def test_no_segments(self) -> None:
        assert pick_fallback_evidence_segments(_context([]), 0, 2) == []


class TestNormalizeDimension:
    def test_empty_candidate_is_fully_defaulted(self) -> None:
        dimension = normalize_dimension(None, CLARITY, 0, _context())

        assert dimension.id == "clarity"
        assert dimension.label == "Clarity"
        assert dimension.not_observed is False
        assert dimension.score is None
        assert set(dimension.anchors) == set(ANCHOR_LEVELS)
        assert all(dimension.anchors.values())
        for name, attr in [
            ("missingSignals", dimension.missing_signals),
            ("observedSignals", dimension.observed_signals),
            ("concerns", dimension.concerns),
            ("observations", dimension.observations),
            ("probes", dimension.probes),
        ]:
            low, high = DIMENSION_LIST_BOUNDS[name]
            assert low <= len(attr) <= high, name
        assert dimension.anchor_alignment.chosen_level == 3
        assert dimension.what_would_change_score.up
        assert dimension.what_would_change_score.down

    def test_observed_dimension_gets_synthetic_evidence(self) -> None:
        dimension = normalize_dimension({"score": 4}, CLARITY, 0, _context())

        assert [e.segment_id for e in dimension.evidence] == ["s1", "s2"]
        assert all(e.relevance == SYNTHETIC_RELEVANCE for e in dimension.evidence)
        assert all(e.strength is EvidenceStrength.MEDIUM for e in dimension.evidence)
        assert dimension.evidence_coverage.cited_segment_count == 2
        assert dimension.evidence_coverage.available_segment_count == 3

    def test_backfill_is_limited_by_available_segments(self) -> None:
        context = _context([SEGMENTS[0]])
        dimension = normalize_dimension({"score": 4}, CLARITY, 3, context)
        assert [e.segment_id for e in dimension.evidence] == ["s1"]

    def test_not_observed_forces_null_score_and_no_backfill(self) -> None:
        dimension = normalize_dimension({"score": 5, "notObserved": True}, CLARITY, 0, _context())
        assert dimension.score is None
        assert dimension.not_observed is True
        assert dimension.evidence == []
        assert dimension.evidence_quality == 0.25
        assert dimension.consistency == 0.35

    @pytest.mark.parametrize(("raw", "expected"), [(4.4, 4), (4.5, 5), (9, 5), (-1, 1), ("3", 3)])
    def test_score_is_rounded_and_clamped(self, raw: object, expected: int) -> None:
        assert normalize_dimension({"score": raw}, CLARITY, 0, _context()).score == expected

    def test_non_boolean_not_observed_defaults_to_false(self) -> None:
        dimension = normalize_dimension({"score": 3, "notObserved": "yes"}, CLARITY, 0, _context())
        assert dimension.not_observed is False
        assert dimension.score == 3

    def test_unknown_and_duplicate_citations_are_dropped(self) -> None:
        candidate = {
            "score": 4,
            "evidence": [
                {"segmentId": "s2", "quote": "Latency dropped", "strength": "strong"},
                {"segmentId": "s2", "quote": "again"},
                {"segmentId": "ghost", "quote": "made up"},
                "not an entry",
            ],
        }
        dimension = normalize_dimension(candidate, CLARITY, 0, _context())

        ids = [e.segment_id for e in dimension.evidence]
        assert ids[0] == "s2"
        assert "ghost" not in ids
        assert len(ids) == len(set(ids)) == 2
        assert dimension.evidence[0].strength is EvidenceStrength.STRONG
        assert dimension.evidence[0].relevance == pytest.approx(0.84)

    def test_unvalidated_citations_are_kept_when_validation_is_off(self) -> None:
        context = _context(enforce_segment_validation=False)
        candidate = {"score": 4, "evidence": [{"segmentId": "ghost", "quote": "made up"}]}
        dimension = normalize_dimension(candidate, CLARITY, 0, context)
        assert dimension.evidence[0].segment_id == "ghost"

    def test_relevance_drives_strength(self) -> None:
        candidate = {
            "score": 3,
            "evidence": [
                {"segmentId": "s1", "relevance": 0.2},
                {"segmentId": "s2", "confidence": 90},
                {"segmentId": "s3"},
            ],
        }
        evidence = normalize_dimension(candidate, CLARITY, 0, _context()).evidence
        assert [e.strength for e in evidence] == [
            EvidenceStrength.WEAK,
            EvidenceStrength.STRONG,
            EvidenceStrength.MEDIUM,
        ]
        assert evidence[2].relevance == pytest.approx(0.7)
        assert evidence[0].quote == to_max_words(SEGMENTS[0].text, 25)

    def test_evidence_is_capped_at_four(self) -> None:
        segments = [Segment(f"s{i}", i, i + 1, f"text {i}") for i in range(6)]
        candidate = {"score": 4, "evidence": [{"segmentId": f"s{i}"} for i in range(6)]}
        dimension = normalize_dimension(candidate, CLARITY, 0, _context(segments))
        assert len(dimension.evidence) == 4

    def test_confidence_is_inferred(self) -> None:
        dimension = normalize_dimension({"score": 4}, CLARITY, 0, _context())
        expected = infer_confidence(dimension.evidence_quality, dimension.consistency, 2 / 3)
        assert dimension.confidence == expected

    def test_explicit_values_are_kept(self) -> None:
        candidate = {
            "score": 2,
            "confidence": 71.6,
            "evidenceQuality": 0.9,
            "consistency": 45,
            "missingSignals": ["Needs metrics."],
            "probes": ["Probe one?", "Probe two?"],
            "anchorAlignment": {"chosenLevel": 2, "whyMeets": ["Partial."], "whyNotHigher": ["No numbers."]},
        }
        dimension = normalize_dimension(candidate, CLARITY, 0, _context())
        assert dimension.confidence == 72
        assert dimension.evidence_quality == 0.9
        assert dimension.consistency == pytest.approx(0.45)
        assert dimension.missing_signals == ["Needs metrics."]
        assert dimension.probes == ["Probe one?", "Probe two?"]
        assert dimension.anchor_alignment.why_meets == ["Partial."]

    def test_what_would_change_defaults_to_missing_signals(self) -> None:
        candidate = {"score": 3, "missingSignals": ["Quantify impact."]}
        dimension = normalize_dimension(candidate, CLARITY, 0, _context())
        assert dimension.what_would_change_score.up == ["Quantify impact."]
        assert dimension.anchor_alignment.why_not_higher == ["Quantify impact."]

    def test_observed_signals_fall_back_to_observations(self) -> None:
        candidate = {"score": 3, "observations": ["Clear framing.", "Named the tradeoff."]}
        dimension = normalize_dimension(candidate, CLARITY, 0, _context())
        assert dimension.observed_signals == ["Clear framing.", "Named the tradeoff."]

    @pytest.mark.parametrize("candidate", [42, "text", [], {"evidence": "nope", "anchors": 3}])
    def test_malformed_candidates_never_raise(self, candidate: object) -> None:
        dimension = normalize_dimension(candidate, CLARITY, 0, _context())
        assert dimension.id == "clarity"
