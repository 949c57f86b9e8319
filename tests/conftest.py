"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

DATA_DIR = Path(__file__).parent / "data"


@pytest.fixture
def data_dir() -> Path:
    return DATA_DIR


@pytest.fixture
def rails_lock_text() -> str:
    """Gemfile.lock generated for a bare `gem "rails", "4.1.7"` Gemfile."""
    return (DATA_DIR / "Rails.Gemfile.lock").read_text(encoding="utf-8")


@pytest.fixture
def git_lock_text() -> str:
    return (DATA_DIR / "Git.Gemfile.lock").read_text(encoding="utf-8")
