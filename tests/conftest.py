"""Shared test fixtures for hvmemcalc tests."""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def _no_user_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Never pick up a config file from the developer's home directory."""
    monkeypatch.setattr(
        "hvmemcalc.config._DEFAULT_CONFIG_PATH",
        tmp_path / "nonexistent" / "config.toml",
    )


@pytest.fixture()
def write_toml(tmp_path: Path):
    """Return a helper that writes dedented TOML to a temp file."""

    def _write(content: str) -> Path:
        path = tmp_path / "config.toml"
        path.write_text(textwrap.dedent(content))
        return path

    return _write
