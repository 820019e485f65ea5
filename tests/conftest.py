"""Pytest configuration and fixtures."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from tests.factories import make_junit_document, make_ltp_v1_document, make_ltp_v2_document

if TYPE_CHECKING:
    from pathlib import Path


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--run-fuzz",
        action="store_true",
        default=False,
        help="Run fuzz tests (slower, many hypothesis examples)",
    )


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers",
        "fuzz: marks tests as fuzz tests (slower, many hypothesis examples)",
    )


def pytest_collection_modifyitems(config, items):
    """Skip fuzz tests unless explicitly enabled."""
    if config.getoption("--run-fuzz"):
        return

    skip_fuzz = pytest.mark.skip(reason="need --run-fuzz option to run")
    for item in items:
        if "fuzz" in item.keywords:
            item.add_marker(skip_fuzz)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    """Keep tests independent of RESULTFORGE_* variables and cached settings."""
    from resultforge.config import get_settings

    for var in (
        "RESULTFORGE_API_KEY",
        "RESULTFORGE_API_SECRET",
        "RESULTFORGE_CLIENT_CONFIG",
        "RESULTFORGE_LOG_LEVEL",
        "RESULTFORGE_LOG_JSON_FORMAT",
    ):
        monkeypatch.delenv(var, raising=False)
    # No .env file from the working tree leaks into settings
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def junit_report(tmp_path: Path) -> Path:
    """JUnit report with 9 suites and 166 testcases."""
    path = tmp_path / "junit-results.xml"
    path.write_text(make_junit_document(), encoding="utf-8")
    return path


@pytest.fixture
def ltp_v1_report(tmp_path: Path) -> Path:
    """LTP v1 report with 6 records."""
    path = tmp_path / "ltp_test_result_format.json"
    path.write_text(make_ltp_v1_document(), encoding="utf-8")
    return path


@pytest.fixture
def ltp_v2_report(tmp_path: Path) -> Path:
    """LTP v2 report with a shared environment."""
    path = tmp_path / "new_ltp_result_array.json"
    path.write_text(make_ltp_v2_document(), encoding="utf-8")
    return path
