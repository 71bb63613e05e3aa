"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from rmake.config import Settings
from rmake.runner import Runner
from rmake.sources import SCRIPTS, EmbeddedScripts

_ENV_VARS = ("RMAKE_FILE", "RMAKE_SCRIPT", "RMAKE_TRACE", "RMAKE_PROJECT_ROOT")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep developer RMAKE_* variables out of the tests."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def global_scripts():
    """Process-wide embedded script registry, emptied after the test."""
    yield SCRIPTS
    SCRIPTS.clear()


@pytest.fixture()
def scripts() -> EmbeddedScripts:
    return EmbeddedScripts()


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(project_root=tmp_path)


@pytest.fixture()
def write_rmakefile(tmp_path: Path) -> Callable[[str], Path]:
    def _write(text: str, name: str = "RMakefile.py") -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture()
def empty_runner(settings: Settings, scripts: EmbeddedScripts) -> Runner:
    """Runner with an empty registry and no collection step."""
    return Runner(settings, scripts=scripts, collect=False)
