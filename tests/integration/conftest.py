"""Shared fixtures for integration tests.

These tests wire real components (config loader, lifespan composition
root, routers, httpx-backed providers) with HTTP mocked via respx.
"""

from __future__ import annotations

from pathlib import Path

import pytest
import respx
import yaml


@pytest.fixture()
def respx_mock() -> respx.MockRouter:
    """Explicit respx mock router for request interception."""
    with respx.mock(assert_all_called=False) as router:
        yield router


@pytest.fixture()
def write_yaml(tmp_path: Path):
    """Write a mapping to ``config.yaml`` under tmp_path and return its path."""

    def _write(data: dict) -> Path:
        path = tmp_path / "config.yaml"
        path.write_text(yaml.dump(data), encoding="utf-8")
        return path

    return _write
