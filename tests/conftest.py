"""Shared fixtures for spectr discovery tests."""

from pathlib import Path
from typing import Callable

import pytest

from spectr_discovery.config import DiscoveryConfig


@pytest.fixture(autouse=True)
def clean_discovery_env(monkeypatch):
    """Keep the developer's shell settings out of the tests."""
    monkeypatch.delenv("SPECTR_ROOT", raising=False)
    monkeypatch.delenv("SPECTR_REQUIRE_VCS", raising=False)


@pytest.fixture
def make_dirs(tmp_path) -> Callable[..., Path]:
    """Create directories relative to tmp_path; returns the last one."""

    def _make(*relative_paths: str) -> Path:
        created = tmp_path
        for relative in relative_paths:
            created = tmp_path / relative
            created.mkdir(parents=True, exist_ok=True)
        return created

    return _make


@pytest.fixture
def monorepo(make_dirs, tmp_path) -> Path:
    """mono/ with its own .git and spectr/, plus packages/auth and packages/api
    each holding their own .git and spectr/."""
    make_dirs(
        ".git",
        "spectr",
        "packages/auth/.git",
        "packages/auth/spectr",
        "packages/auth/src/lib",
        "packages/api/.git",
        "packages/api/spectr",
    )
    return tmp_path


@pytest.fixture
def lenient_config() -> DiscoveryConfig:
    """Accept spectr/ without a .git next to it."""
    return DiscoveryConfig(require_vcs_marker=False)
