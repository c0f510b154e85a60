"""Fallback text shared by the normalizer, the legacy adapter and the mock generator.

All defaulted prose lives in one table keyed by ``(context, field)`` so the
different producers of a scorecard cannot drift apart. Templates use
``str.format`` placeholders: ``{label}``, ``{score}``, ``{recommendation}``,
``{question}``.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class FallbackContext(StrEnum):
    OBSERVED = "observed"
    NOT_OBSERVED = "notObserved"
    LEGACY_MATCHED = "legacyMatched"
    LEGACY_MISSING = "legacyMissing"
    MOCK_OBSERVED = "mockObserved"
    MOCK_NOT_OBSERVED = "mockNotObserved"
    REPORT = "report"
    MOCK_REPORT = "mockReport"


ANCHOR_TEMPLATES: dict[str, str] = {
    "1": "Signals are largely absent for {base}; examples stay vague and do not establish {detail}.",
    "2": "Some signals appear for {base}, but evidence is inconsistent and outcomes are weakly supported.",
    "3": "Adequate {base} with at least one concrete example; reasoning is understandable but uneven in depth.",
    "4": "Strong {base} with clear reasoning, concrete tradeoffs, and credible outcomes tied to specific actions.",
    "5": "Exceptional {base}: consistently precise, high-impact examples with rigorous reasoning and measurable results.",
}

_O = FallbackContext.OBSERVED
_N = FallbackContext.NOT_OBSERVED
_LM = FallbackContext.LEGACY_MATCHED
_LX = FallbackContext.LEGACY_MISSING
_MO = FallbackContext.MOCK_OBSERVED
_MN = FallbackContext.MOCK_NOT_OBSERVED
_R = FallbackContext.REPORT
_MR = FallbackContext.MOCK_REPORT

FALLBACK_TEXT: dict[tuple[FallbackContext, str], tuple[str, ...]] = {
    # Dimension normalizer
    (_O, "missingSignals"): ("Show stronger {label} evidence tied to measurable outcomes.",),
    (_N, "missingSignals"): ("Add direct evidence for {label} via concrete actions and outcomes.",),
    (_O, "observations"): (
        "Observed signals suggest {label} at approximately level {score}.",
        "Evidence contains specific statements but could include more quantification.",
    ),
    (_N, "observations"): (
        "No concrete behavior in the transcript maps directly to {label}.",
        "Further probing is required before assigning a reliable score.",
    ),
    (_N, "concerns"): ("Cannot validate {label} from current response.",),
    (_O, "probes"): (
        "Which tradeoff did you reject and why?",
        "What metric changed after your intervention?",
    ),
    (_N, "probes"): (
        "Describe a situation that demonstrates {label} with concrete steps.",
        "What outcome changed because of your direct actions?",
    ),
    (_O, "whyMeets"): ("Observed behaviors align with the selected rubric level.",),
    (_N, "whyMeets"): ("Insufficient observable signal to map to a reliable anchor level.",),
    (_O, "whyNotHigher"): ("Additional concrete evidence would be required for a higher level.",),
    (_O, "changeUp"): ("Provide a concrete example with measurable outcome and explicit tradeoffs.",),
    (_O, "changeDown"): ("Vague statements without evidence would lower confidence in this score.",),
    (_O, "interpretation"): ("{label} signal from candidate action and stated outcome in this segment.",),
    (_O, "syntheticInterpretation"): ("{label} signal grounded in this quoted segment.",),
    (_O, "missingQuote"): ("Evidence excerpt unavailable.",),
    # Legacy adapter
    (_LM, "interpretation"): ("Legacy evidence mapped from prior report format.",),
    (_LM, "missingSignals"): ("Add stronger quantified impact and clearer tradeoff framing.",),
    (_LX, "missingSignals"): ("No direct signal observed for {label}.",),
    (_LM, "observedSignals"): ("{claim}", "Legacy score converted to scorecard signals."),
    (_LX, "observedSignals"): (
        "No signal observed in legacy report for this dimension.",
        "Needs follow-up probing.",
    ),
    (_LM, "concerns"): ("Legacy report lacked explicit concerns; added calibration-safe default.",),
    (_LX, "concerns"): ("No direct evidence available for {label}.",),
    (_LM, "observations"): ("{claim}", "Legacy report migrated into anchor-based rubric format."),
    (_LX, "observations"): (
        "Legacy report had no matching item for this dimension.",
        "Further probing required.",
    ),
    (_LM, "whyMeets"): ("{claim}",),
    (_LX, "whyMeets"): ("Not enough evidence to assign a level.",),
    (_LM, "whyNotHigher"): ("Need more specific evidence and measurable impact statements.",),
    (_LM, "probes"): (
        "What specific metric changed because of your approach?",
        "Which stakeholder tradeoff did you explicitly manage?",
    ),
    (_LM, "changeUp"): ("Add a quantified outcome and a clear decision rationale.",),
    (_LM, "changeDown"): ("Remove concrete examples or rely on unsupported claims.",),
    # Mock generator, per dimension
    (_MN, "missingSignals"): (
        "No transcript segment clearly demonstrates {label}.",
        "Need a concrete example with role, action, and measurable result.",
    ),
    (_MN, "observedSignals"): (
        "No specific statement in transcript demonstrates {label}.",
        "Candidate response did not provide enough behavioral detail for this dimension.",
    ),
    (_MN, "concerns"): (
        "Core signal for {label} is missing.",
        "Recommendation is calibrated downward until this is observed.",
    ),
    (_MN, "counterSignals"): ("Some adjacent signals appear, but they are too indirect to score.",),
    (_MN, "observations"): (
        "Current answer does not provide direct behavioral evidence for {label}.",
        "Interviewer should probe for a specific situation and outcome.",
    ),
    (_MN, "whyMeets"): ("Only partial or indirect signals were present in the response.",),
    (_MN, "whyNotHigher"): ("No concrete segment linked to this dimension was observed.",),
    (_MN, "probes"): (
        "Can you share one example that directly demonstrates {label}?",
        "What did you personally do, and what changed as a result?",
    ),
    (_MN, "changeUp"): ("Provide a specific scenario with measurable impact and clear ownership.",),
    (_MN, "changeDown"): ("Continue with abstract statements without role-specific actions.",),
    (_MO, "interpretation"): (
        "{label} is supported by concrete action and outcome language in this segment.",
    ),
    (_MO, "missingSignals"): (
        "Add one more quantified outcome to increase anchor certainty.",
        "Clarify rejected alternatives and why they were deprioritized.",
    ),
    (_MO, "observedSignals"): (
        "Provides a concrete example that demonstrates {label}.",
        "Describes tradeoffs and outcomes with enough specificity for scoring.",
        "Evidence references candidate-owned actions instead of generic team statements.",
    ),
    (_MO, "concerns"): (
        "Could include clearer baseline metrics to strengthen comparability.",
        "Would benefit from one additional example under stronger constraints.",
    ),
    (_MO, "counterSignals"): ("Some impact claims remain directional rather than fully quantified.",),
    (_MO, "observations"): (
        "{label} is demonstrated with specific actions in cited transcript segments.",
        "Reasoning is mostly coherent but could better quantify downstream impact.",
        "Decision framing is credible and tied to candidate-owned execution.",
    ),
    (_MO, "whyMeets"): (
        "Cited evidence aligns with the selected anchor level through concrete behaviors.",
        "Transcript includes explicit context, action, and outcome links.",
    ),
    (_MO, "whyNotHigher"): (
        "Evidence breadth is limited; additional scenarios would increase confidence.",
        "Some claims would be stronger with objective metrics.",
    ),
    (_MO, "probes"): (
        "What was the hardest tradeoff you made, and how did you validate it?",
        "Which metric or signal best proved your approach worked?",
        "If you repeated this now, what would you change first?",
    ),
    (_MO, "changeUp"): (
        "Show a second independent example with equal rigor and measurable impact.",
        "Quantify stakeholder outcomes and include explicit risk mitigation choices.",
    ),
    (_MO, "changeDown"): (
        "Rely on generic claims that are not tied to transcript evidence.",
        "Contradict key details across examples without reconciliation.",
    ),
    # Scorecard top level
    (_R, "overallSummary"): (
        "Interview response reviewed with anchor-based scoring and evidence-linked notes.",
    ),
    (_R, "decisionRationale"): (
        "Recommendation is {recommendation} based on observed rubric evidence.",
        "Scores emphasize anchor alignment, evidence quality, and cross-segment consistency.",
        "Confidence reflects both breadth of evidence and specificity of cited statements.",
    ),
    (_R, "strength"): ("{label}: aligned with higher rubric anchors.",),
    (_R, "keyStrengths"): (
        "Candidate communicates decision context and outcomes with interviewer-friendly structure.",
        "Evidence includes at least one concrete, role-owned action sequence.",
        "Response shows some consistency across cited segments.",
    ),
    (_R, "riskNotObserved"): ("{label}: not observed; targeted probing required.",),
    (_R, "riskLowScore"): ("{label}: current evidence does not yet support stronger anchor levels.",),
    (_R, "keyRisks"): (
        "Evidence coverage may be insufficient for high-confidence leveling.",
        "Some claims are directional and would benefit from stronger quantification.",
    ),
    (_R, "mustFixToHire"): (
        "Provide at least one concrete example with measurable outcome for the weakest dimension.",
        "Clarify decision tradeoffs and ownership boundaries in follow-up questions.",
    ),
    # Mock generator, top level
    (_MR, "overallSummary"): (
        'Mock hiring-loop summary for "{question}": anchored scoring is based on '
        "segment-linked evidence and interviewer-style rationale.",
    ),
    (_MR, "calibrationNotes"): (
        "Calibration adjusts recommendation when core signals are missing or evidence coverage is thin.",
        "NotObserved dimensions reduce confidence and cap recommendation.",
    ),
    (_MR, "strength"): ("{label}: evidence supports higher-anchor behavior.",),
    (_MR, "keyStrengths"): (
        "Candidate provides concrete behavior tied to at least one measurable outcome.",
        "Evidence includes explicit ownership and decision rationale.",
        "Communication clarity is sufficient for interviewer calibration.",
        "Response includes at least one concrete, evidence-backed decision narrative.",
    ),
    (_MR, "riskNotObserved"): ("{label}: not observed in this response; hiring risk remains unvalidated.",),
    (_MR, "riskLowScore"): ("{label}: score is currently below hiring bar due to weak evidence.",),
    (_MR, "keyRisks"): (
        "Coverage is not broad enough to remove all uncertainty for final recommendation.",
        "Some evidence is medium-strength and needs corroboration in follow-up rounds.",
        "Insufficient behavioral evidence in at least one dimension.",
    ),
    (_MR, "risks"): ("No immediate blockers identified from this single response.",),
    (_MR, "followUps"): ("What would you do differently in hindsight, and why?",),
    (_MR, "decisionRationale"): (
        "Recommendation {recommendation} is driven by weighted dimension scores and calibration rules.",
        "Confidence weights evidence quality, cross-segment consistency, and citation coverage.",
        "One dimension is intentionally marked not observed to model realistic interviewer uncertainty.",
    ),
    (_MR, "mustFixToHire"): (
        "Demonstrate the not-observed dimension with one concrete example.",
        "Increase evidence quality by adding measurable outcomes tied to actions.",
    ),
}


class _Values(dict):  # type: ignore[type-arg]
    def __missing__(self, key: str) -> str:
        return ""


def fallback_lines(context: FallbackContext, name: str, **values: Any) -> list[str]:
    """Render every template registered for ``(context, name)``."""
    params = _Values(values)
    return [template.format_map(params) for template in FALLBACK_TEXT[(context, name)]]


def fallback_line(context: FallbackContext, name: str, **values: Any) -> str:
    return fallback_lines(context, name, **values)[0]


def default_anchors(label: str, description: str) -> dict[str, str]:
    """Five canned severity sentences built from the dimension label and description."""
    base = label.strip() or "the dimension"
    detail = description.strip() or "the competency"
    return {level: template.format(base=base, detail=detail) for level, template in ANCHOR_TEMPLATES.items()}
