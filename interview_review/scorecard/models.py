"""Data models for normalized scorecards.

Field names are snake_case in Python; ``to_dict`` produces the camelCase wire
format shared with the generation service, the review cache, and the UI.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class EvidenceStrength(StrEnum):
    """Qualitative strength of one evidence citation."""

    WEAK = "weak"
    MEDIUM = "medium"
    STRONG = "strong"


class Recommendation(StrEnum):
    """Overall hiring recommendation, strongest first."""

    STRONG_HIRE = "StrongHire"
    HIRE = "Hire"
    LEAN_HIRE = "LeanHire"
    LEAN_NO = "LeanNo"
    NO = "No"


class Level(StrEnum):
    """Leveling bucket derived from the weighted score."""

    INTERN = "intern"
    NEWGRAD = "newgrad"
    MID = "mid"
    SENIOR = "senior"


ANCHOR_LEVELS: tuple[str, ...] = ("1", "2", "3", "4", "5")

MAX_EVIDENCE_ENTRIES = 4
MAX_QUOTE_WORDS = 25

# (min_items, max_items) per string-array field. The schema descriptor
# publishes the same bounds the normalizer enforces.
DIMENSION_LIST_BOUNDS: dict[str, tuple[int, int]] = {
    "missingSignals": (1, 4),
    "observedSignals": (2, 4),
    "concerns": (1, 3),
    "counterSignals": (0, 3),
    "observations": (2, 4),
    "probes": (2, 3),
}
ALIGNMENT_LIST_BOUNDS: tuple[int, int] = (1, 3)
CHANGE_LIST_BOUNDS: tuple[int, int] = (1, 3)
REPORT_LIST_BOUNDS: dict[str, tuple[int, int]] = {
    "risks": (1, 6),
    "followUps": (1, 6),
    "decisionRationale": (3, 5),
    "calibrationNotes": (2, 6),
    "keyStrengths": (3, 5),
    "keyRisks": (2, 4),
    "mustFixToHire": (0, 4),
}


@dataclass
class EvidenceEntry:
    """A citation linking a dimension score to one transcript segment."""

    segment_id: str
    quote: str
    interpretation: str
    strength: EvidenceStrength
    relevance: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "segmentId": self.segment_id,
            "quote": self.quote,
            "interpretation": self.interpretation,
            "strength": self.strength.value,
            "relevance": self.relevance,
        }


@dataclass
class EvidenceCoverage:
    cited_segment_count: int
    available_segment_count: int

    @property
    def ratio(self) -> float:
        if self.available_segment_count <= 0:
            return 0.0
        return self.cited_segment_count / self.available_segment_count

    def to_dict(self) -> dict[str, int]:
        return {
            "citedSegmentCount": self.cited_segment_count,
            "availableSegmentCount": self.available_segment_count,
        }


@dataclass
class AnchorAlignment:
    chosen_level: int
    why_meets: list[str]
    why_not_higher: list[str]

    def to_dict(self) -> dict[str, Any]:
        return {
            "chosenLevel": self.chosen_level,
            "whyMeets": list(self.why_meets),
            "whyNotHigher": list(self.why_not_higher),
        }


@dataclass
class WhatWouldChangeScore:
    up: list[str]
    down: list[str]

    def to_dict(self) -> dict[str, Any]:
        return {"up": list(self.up), "down": list(self.down)}


@dataclass
class DimensionAssessment:
    """The normalized assessment of one rubric dimension.

    ``score`` is None whenever ``not_observed`` is True. The reverse is not
    forced: an observed dimension whose candidate score was unusable keeps
    ``score=None`` with ``not_observed=False``.
    """

    id: str
    label: str
    score: int | None
    not_observed: bool
    confidence: int
    anchors: dict[str, str]
    missing_signals: list[str]
    observed_signals: list[str]
    concerns: list[str]
    counter_signals: list[str]
    observations: list[str]
    evidence: list[EvidenceEntry]
    evidence_coverage: EvidenceCoverage
    evidence_quality: float
    consistency: float
    probes: list[str]
    anchor_alignment: AnchorAlignment
    what_would_change_score: WhatWouldChangeScore

    @property
    def is_observed(self) -> bool:
        return not self.not_observed and self.score is not None

    @property
    def cited_segment_ids(self) -> list[str]:
        return list(dict.fromkeys(e.segment_id for e in self.evidence))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "score": self.score,
            "notObserved": self.not_observed,
            "confidence": self.confidence,
            "anchors": dict(self.anchors),
            "missingSignals": list(self.missing_signals),
            "observedSignals": list(self.observed_signals),
            "concerns": list(self.concerns),
            "counterSignals": list(self.counter_signals),
            "observations": list(self.observations),
            "evidence": [e.to_dict() for e in self.evidence],
            "evidenceCoverage": self.evidence_coverage.to_dict(),
            "evidenceQuality": self.evidence_quality,
            "consistency": self.consistency,
            "probes": list(self.probes),
            "anchorAlignment": self.anchor_alignment.to_dict(),
            "whatWouldChangeScore": self.what_would_change_score.to_dict(),
        }


@dataclass
class DimensionCoverage:
    segment_ids: list[str]
    coverage_pct: float

    def to_dict(self) -> dict[str, Any]:
        return {"segmentIds": list(self.segment_ids), "coveragePct": self.coverage_pct}


@dataclass
class SegmentCoverage:
    dimensions: list[str]

    def to_dict(self) -> dict[str, Any]:
        return {"dimensions": list(self.dimensions)}


@dataclass
class CoverageMap:
    """Two derived indexes over the same evidence graph."""

    by_dimension: dict[str, DimensionCoverage] = field(default_factory=dict)
    by_segment: dict[str, SegmentCoverage] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "byDimension": {k: v.to_dict() for k, v in self.by_dimension.items()},
            "bySegment": {k: v.to_dict() for k, v in self.by_segment.items()},
        }


@dataclass
class Leveling:
    role: str
    level: Level

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "level": self.level.value}


@dataclass
class Scorecard:
    """The complete normalized evaluation of one spoken answer."""

    overall_summary: str
    overall_recommendation: Recommendation
    leveling: Leveling
    calibration_notes: list[str]
    dimensions: list[DimensionAssessment]
    decision_rationale: list[str]
    key_strengths: list[str]
    key_risks: list[str]
    must_fix_to_hire: list[str]
    risks: list[str]
    follow_ups: list[str]
    coverage_map: CoverageMap

    def dimension(self, dimension_id: str) -> DimensionAssessment | None:
        for assessment in self.dimensions:
            if assessment.id == dimension_id:
                return assessment
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "overallSummary": self.overall_summary,
            "overallRecommendation": self.overall_recommendation.value,
            "leveling": self.leveling.to_dict(),
            "calibrationNotes": list(self.calibration_notes),
            "risks": list(self.risks),
            "followUps": list(self.follow_ups),
            "dimensions": [d.to_dict() for d in self.dimensions],
            "decisionRationale": list(self.decision_rationale),
            "keyStrengths": list(self.key_strengths),
            "keyRisks": list(self.key_risks),
            "mustFixToHire": list(self.must_fix_to_hire),
            "coverageMap": self.coverage_map.to_dict(),
        }
