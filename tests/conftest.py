"""Shared test fixtures for ninevectors tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from ninevectors.config import NineVectorsSettings
from ninevectors.store import MemoryStore
from ninevectors.survey.catalog import Lens, LensCatalog, SubLens


@pytest.fixture
def store() -> MemoryStore:
    """Provide an empty in-memory preference store."""
    return MemoryStore()


@pytest.fixture
def small_catalog() -> LensCatalog:
    """Two lenses: (3 themes, 1 theme) and (2 themes), six themes in all."""
    return LensCatalog([
        Lens(
            id=1,
            name="Market",
            category="Assets",
            sub_lenses=(
                SubLens(id="1.1", name="Competition", themes=("Share", "Landscape", "Forecast")),
                SubLens(id="1.2", name="Customer", themes=("Loyalty",)),
            ),
        ),
        Lens(
            id=2,
            name="People",
            category="Assets",
            sub_lenses=(
                SubLens(id="2.1", name="Culture", themes=("Values", "Teamwork")),
            ),
        ),
    ])


@pytest.fixture
def settings(tmp_path: Path) -> NineVectorsSettings:
    """Settings pointing at a fake API with instant retries."""
    return NineVectorsSettings(
        api_url="http://api.test/api",
        state_dir=tmp_path,
        retry_backoff_scale=0.0,
        max_retries=3,
    )
