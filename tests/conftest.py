"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pytest

from layerfig.utils.logging import build_id_var


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    """Create a directory holding one configuration file per format."""
    _ = (tmp_path / "config.toml").write_text('name = "toml-app"\nworkers = 2\n\n[database]\nport = 6000\n')
    _ = (tmp_path / "config.yaml").write_text("name: yaml-app\ndebug: true\ndatabase:\n  host: db.internal\n")
    _ = (tmp_path / "config.json").write_text('{"workers": 8, "tags": ["a", "b"]}')
    return tmp_path


@pytest.fixture(autouse=True)
def reset_build_id() -> Generator[None, None, None]:
    """Ensure no build ID leaks between tests."""
    token = build_id_var.set(None)
    yield
    build_id_var.reset(token)
