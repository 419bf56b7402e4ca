"""Pytest configuration for test isolation.

The item-type autocomplete history persists under a client data directory
(default ``./.bundle_ledger``), and the database client keeps one shared
engine per process. Either can leak state between tests, so an autouse
fixture points the data directory at the test's own temporary directory and
drops any engine created during the test.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

import pytest
from db.client import dispose_engine


@pytest.fixture(autouse=True)
def _isolate_client_state(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Force a per-test data dir and a fresh database engine."""

    data_dir = tmp_path / "data"
    data_dir.mkdir(parents=True, exist_ok=True)
    monkeypatch.setenv("BUNDLE_LEDGER_DATA_DIR", os.fspath(data_dir))
    # Tests opt in to a database explicitly.
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("BUNDLE_LEDGER_LORRY_TYPES", raising=False)
    monkeypatch.delenv("BUNDLE_LEDGER_PAGE_SIZE", raising=False)
    dispose_engine()
    yield
    dispose_engine()
