"""Shared fixtures for the news pipeline tests."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from boxwall_news.core.config import Settings

FIXTURES_DIR = Path(__file__).parent / "fixtures" / "html"


@pytest.fixture
def settings() -> Settings:
    """Default settings, ignoring any local .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def run_started_at() -> datetime:
    return datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_clock(run_started_at):
    return lambda: run_started_at


@pytest.fixture
def load_fixture():
    def _load(name: str) -> bytes:
        return (FIXTURES_DIR / name).read_bytes()

    return _load
