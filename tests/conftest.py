# tests/conftest.py
"""
Shared test setup for project.

Every test starts from the same runtime: log level "info", no color, and
none of the PHINX_PHAR_* environment overrides a developer may have set.
"""

import os

import pytest
from pytest import Config

import phinx_phar.meta as mod_meta
import phinx_phar.runtime as mod_runtime
from tests.utils import make_trace

TRACE = make_trace("⚡️")


def pytest_report_header(config: Config) -> str:
    return f"{mod_meta.PROGRAM_DISPLAY} test suite"


@pytest.fixture(autouse=True)
def _clean_runtime(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key.startswith(f"{mod_meta.PROGRAM_ENV}_") or key == "LOG_LEVEL":
            TRACE("clearing env", key)
            monkeypatch.delenv(key)
    monkeypatch.setitem(mod_runtime.current_runtime, "log_level", "info")
    monkeypatch.setitem(mod_runtime.current_runtime, "use_color", False)
