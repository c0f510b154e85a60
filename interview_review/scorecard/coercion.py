"""Total decode helpers for untrusted JSON-like values.

Every function here accepts any value and returns a typed result or a
caller-supplied fallback; none of them raise.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from typing import Any

from interview_review.scorecard.models import EvidenceStrength, Level, Recommendation

# strength -> relevance used when only the enum is present
_RELEVANCE_BY_STRENGTH: dict[EvidenceStrength, float] = {
    EvidenceStrength.STRONG: 0.84,
    EvidenceStrength.MEDIUM: 0.62,
    EvidenceStrength.WEAK: 0.38,
}
# relevance lower bound -> strength, checked top-down
_STRENGTH_THRESHOLDS: tuple[tuple[float, EvidenceStrength], ...] = (
    (0.75, EvidenceStrength.STRONG),
    (0.45, EvidenceStrength.MEDIUM),
)


def is_record(value: Any) -> bool:
    return isinstance(value, Mapping)


def as_record(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp *value* to ``[lower, upper]``; non-finite input maps to *lower*."""
    if not math.isfinite(value):
        return lower
    return min(upper, max(lower, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (not banker's rounding)."""
    return int(math.floor(value + 0.5))


def round_to_tenth(value: float) -> float:
    return math.floor(value * 10 + 0.5) / 10


def _finite_float(value: int | float) -> float | None:
    try:
        converted = float(value)
    except OverflowError:
        # ints beyond the float range
        return None
    return converted if math.isfinite(converted) else None


def to_finite_number(value: Any) -> float | None:
    """Numbers and numeric strings; booleans, NaN, infinities and out-of-range ints are rejected."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return _finite_float(value)
    if isinstance(value, str) and value.strip():
        try:
            parsed = float(value.strip())
        except ValueError:
            return None
        return parsed if math.isfinite(parsed) else None
    return None


def to_normalized_string(value: Any, fallback: str = "") -> str:
    if not isinstance(value, str):
        return fallback
    trimmed = value.strip()
    return trimmed if trimmed else fallback


def to_string_array(value: Any) -> list[str]:
    """Trimmed, non-empty, de-duplicated strings in their original order."""
    if not isinstance(value, list):
        return []
    unique: dict[str, None] = {}
    for entry in value:
        if isinstance(entry, str) and entry.strip():
            unique.setdefault(entry.strip(), None)
    return list(unique)


def ensure_min_items(
    entries: Iterable[str],
    fallback_entries: Iterable[str],
    min_items: int,
    max_items: int,
) -> list[str]:
    """Top *entries* up from *fallback_entries* to *min_items*, then cap at *max_items*."""
    result = list(entries)
    for fallback in fallback_entries:
        if len(result) >= min_items:
            break
        if fallback not in result:
            result.append(fallback)
    return result[:max_items]


def to_max_words(text: str, max_words: int) -> str:
    """Collapse whitespace and truncate to *max_words*, marking the cut with ``...``."""
    words = text.split()
    if len(words) <= max_words:
        return " ".join(words)
    return " ".join(words[:max_words]) + "..."


def to_relevance(value: Any) -> float | None:
    """A float in [0, 1]; values in (1, 100] are read as percentages."""
    numeric = to_finite_number(value)
    if numeric is None:
        return None
    if 1 < numeric <= 100:
        return clamp(numeric / 100, 0, 1)
    return clamp(numeric, 0, 1)


def to_strength(value: Any) -> EvidenceStrength | None:
    if isinstance(value, str) and value in EvidenceStrength._value2member_map_:
        return EvidenceStrength(value)
    return None


def strength_from_relevance(relevance: float) -> EvidenceStrength:
    for threshold, strength in _STRENGTH_THRESHOLDS:
        if relevance >= threshold:
            return strength
    return EvidenceStrength.WEAK


def relevance_from_strength(strength: EvidenceStrength) -> float:
    return _RELEVANCE_BY_STRENGTH[strength]


def to_recommendation(value: Any) -> Recommendation | None:
    if isinstance(value, str) and value in Recommendation._value2member_map_:
        return Recommendation(value)
    return None


def to_level(value: Any) -> Level | None:
    if isinstance(value, str) and value in Level._value2member_map_:
        return Level(value)
    return None


def is_string_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(entry, str) for entry in value)


def is_finite_number(value: Any) -> bool:
    """Strict numeric check (numeric strings do not count)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool) and _finite_float(value) is not None


def is_non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())
