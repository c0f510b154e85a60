"""Shared fixtures: keep every test offline and away from the real review cache."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest


@pytest.fixture(autouse=True)
def review_cache_path(tmp_path: Path) -> Iterator[Path]:
    """Point the review cache at a per-test temporary file."""
    path = tmp_path / "review_cache.json"
    with patch("interview_review.storage.review_cache.settings") as mock_settings:
        mock_settings.review_cache_path = str(path)
        yield path
