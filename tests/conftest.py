"""Shared test fixtures for all test modules."""

from datetime import datetime

import pytest

from mdarchive.models.config import ArchiverSettings

FROZEN_NOW = datetime(2021, 1, 1, 9, 30)


@pytest.fixture
def frozen_clock():
    """Clock that always returns 2021-01-01 09:30 (a Friday, week 00 with %W)."""
    return lambda: FROZEN_NOW


@pytest.fixture
def settings():
    """Default settings: tab indentation, blank lines around headings, no dates."""
    return ArchiverSettings()


@pytest.fixture
def fake_home(tmp_path, monkeypatch):
    """Point Path.home() at a temporary directory so config and logs stay isolated."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setattr("pathlib.Path.home", lambda: home)
    for name in (
        "MDARCHIVE_ARCHIVE_HEADING",
        "MDARCHIVE_ARCHIVE_HEADING_DEPTH",
        "MDARCHIVE_USE_TAB",
        "MDARCHIVE_TAB_SIZE",
        "MDARCHIVE_USE_WEEKS",
        "MDARCHIVE_USE_DAYS",
        "MDARCHIVE_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    return home
