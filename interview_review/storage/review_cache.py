"""Local JSON cache of transcriptions and reports, keyed by question number."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TypeVar

from interview_review.config import settings
from interview_review.scorecard.coercion import to_finite_number
from interview_review.scorecard.legacy import is_report_payload
from interview_review.transcript.models import Transcription
from interview_review.transcript.parsers import parse_cached_transcription

logger = logging.getLogger(__name__)

REVIEW_CACHE_SCHEMA_VERSION = 1

T = TypeVar("T")

# Serializes read-modify-write cycles within one process.
_cache_lock = threading.Lock()


@dataclass
class ReviewCacheState:
    transcriptions: dict[int, Transcription] = field(default_factory=dict)
    reports: dict[int, dict[str, Any]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "schemaVersion": REVIEW_CACHE_SCHEMA_VERSION,
            "transcriptions": {str(k): v.to_dict() for k, v in sorted(self.transcriptions.items())},
            "reports": {str(k): v for k, v in sorted(self.reports.items())},
        }


def question_number(raw_key: Any) -> int | None:
    """Positive integer question number from a cache key or question id."""
    numeric = to_finite_number(raw_key)
    if numeric is None or not numeric.is_integer() or numeric <= 0:
        return None
    return int(numeric)


def _number_keyed(source: Any, parse: Callable[[Any], T | None]) -> dict[int, T]:
    result: dict[int, T] = {}
    if not isinstance(source, Mapping):
        return result
    for raw_key, value in source.items():
        key = question_number(raw_key)
        if key is None:
            continue
        parsed = parse(value)
        if parsed is None:
            logger.warning("Skipping invalid review cache entry %s", raw_key)
            continue
        result[key] = parsed
    return result


def _parse_report(value: Any) -> dict[str, Any] | None:
    return dict(value) if is_report_payload(value) else None


def _cache_path(path: str | Path | None) -> Path:
    return Path(path if path is not None else settings.review_cache_path)


def load_review_cache(path: str | Path | None = None) -> ReviewCacheState:
    """Read the cache file. Missing, unreadable or wrong-version files yield an empty cache."""
    cache_file = _cache_path(path)
    if not cache_file.exists():
        return ReviewCacheState()

    try:
        parsed = json.loads(cache_file.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError):
        logger.warning("Review cache at %s is unreadable; starting empty", cache_file)
        return ReviewCacheState()

    if not isinstance(parsed, Mapping) or parsed.get("schemaVersion") != REVIEW_CACHE_SCHEMA_VERSION:
        logger.warning("Review cache at %s has an unsupported schema; starting empty", cache_file)
        return ReviewCacheState()

    return ReviewCacheState(
        transcriptions=_number_keyed(parsed.get("transcriptions"), parse_cached_transcription),
        reports=_number_keyed(parsed.get("reports"), _parse_report),
    )


def save_review_cache(state: ReviewCacheState, path: str | Path | None = None) -> Path:
    """Write *state* as a version-stamped JSON file and return its path.

    The file is written next to the target and renamed into place, so readers
    never see a partially written cache.
    """
    cache_file = _cache_path(path)
    cache_file.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=cache_file.parent, prefix=f".{cache_file.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump(state.to_dict(), handle, indent=2)
        os.replace(tmp_name, cache_file)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return cache_file


def update_review_cache(
    mutate: Callable[[ReviewCacheState], None],
    path: str | Path | None = None,
) -> ReviewCacheState:
    """Load the cache, apply *mutate* and save it, holding the process-wide cache lock.

    The lock covers concurrent requests in one server process; the cache is
    not meant to be shared by several processes.
    """
    with _cache_lock:
        state = load_review_cache(path)
        mutate(state)
        save_review_cache(state, path)
    return state
