# tests/conftest.py

"""Shared pytest fixtures for all tests."""

from collections.abc import Generator
from pathlib import Path
from unittest.mock import patch

import pytest

from wasstrip.config.settings import Settings


@pytest.fixture(autouse=True)
def isolated_paths(tmp_path: Path) -> Generator[None, None, None]:
    """Point logs, results and the database at a per-test temp dir."""
    with patch.multiple(
        Settings,
        LOGS_DIR=tmp_path / "logs",
        RESULTS_DIR=tmp_path / "results",
        DB_PATH=tmp_path / "data" / "offers.db",
    ):
        yield
