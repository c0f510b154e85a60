"""Rubric dimension descriptors.

A rubric is an ordered sequence of :class:`RubricDimension`. It fixes the
shape of every scorecard: one assessment per descriptor, in descriptor order.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class RubricDimension:
    """One competency axis: stable key, display label, and description."""

    key: str
    label: str
    description: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"key": self.key, "label": self.label, "description": self.description}


DEFAULT_RUBRIC_DIMENSIONS: tuple[RubricDimension, ...] = (
    RubricDimension(
        key="clarity",
        label="Communication Clarity",
        description="How clearly the candidate explains context, actions, and outcomes with concrete detail.",
    ),
    RubricDimension(
        key="problemSolving",
        label="Problem Solving",
        description="How effectively the candidate frames ambiguity, evaluates options, and justifies decisions.",
    ),
    RubricDimension(
        key="ownership",
        label="Ownership",
        description=(
            "How strongly the candidate demonstrates accountability, initiative, "
            "and measurable follow-through."
        ),
    ),
    RubricDimension(
        key="collaboration",
        label="Collaboration",
        description=(
            "How well the candidate aligns stakeholders, handles disagreement, "
            "and drives execution with others."
        ),
    ),
)

# Dimensions whose absence caps the overall recommendation.
CORE_DIMENSION_KEYS: frozenset[str] = frozenset({"clarity", "problemSolving", "ownership"})


def parse_rubric(value: Any) -> list[RubricDimension]:
    """Read rubric descriptors from an iterable or a ``{"dimensions": [...]}`` mapping.

    Entries without a non-empty string ``key`` are skipped; a missing label
    falls back to the key. Duplicate keys are kept as given.
    """
    if isinstance(value, Mapping):
        value = value.get("dimensions")
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        return []

    dimensions: list[RubricDimension] = []
    for entry in value:
        if isinstance(entry, RubricDimension):
            dimensions.append(entry)
            continue
        if not isinstance(entry, Mapping):
            continue
        key = entry.get("key")
        if not isinstance(key, str) or not key.strip():
            continue
        label = entry.get("label")
        description = entry.get("description")
        dimensions.append(
            RubricDimension(
                key=key.strip(),
                label=label.strip() if isinstance(label, str) and label.strip() else key.strip(),
                description=description.strip() if isinstance(description, str) else "",
            )
        )
    return dimensions
