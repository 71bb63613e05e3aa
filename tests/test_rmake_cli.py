from __future__ import annotations

import sys
from pathlib import Path

import allure
import pytest
from click.testing import CliRunner

from rmake import __version__
from rmake.main import rmake

pytestmark = [
    allure.epic("Task Graph"),
    allure.feature("CLI"),
]

_RMAKEFILE = """\
desc("Says hello.")
@task("hello")
def hello():
    print("hello")

@task({"greet": ["hello"]})
def greet():
    print("greet")

@task("fail")
def fail():
    raise RuntimeError("task failed")

task("default", ["greet"])
"""


@pytest.fixture()
def project(tmp_path: Path) -> Path:
    (tmp_path / "RMakefile.py").write_text(_RMAKEFILE, encoding="utf-8")
    return tmp_path


def test_version():
    assert __version__


def test_version_option():
    runner = CliRunner()
    result = runner.invoke(rmake, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_cli_runs_default_task(project: Path) -> None:
    result = CliRunner().invoke(rmake, ["--root", str(project)])

    assert result.exit_code == 0, result.output
    assert result.output.splitlines() == ["hello", "greet"]


def test_cli_runs_named_tasks_once(project: Path) -> None:
    result = CliRunner().invoke(rmake, ["--root", str(project), ":greet", "hello"])

    assert result.exit_code == 0, result.output
    assert result.output.splitlines() == ["hello", "greet"]


def test_cli_help_task_lists_tasks(project: Path) -> None:
    result = CliRunner().invoke(rmake, ["--root", str(project), "help", "greet"])

    assert result.exit_code == 0
    assert result.output.splitlines() == [
        "Usage: rmake [:task[, :task ...]]",
        "Tasks:",
        "  hello            Says hello.     ",
        "  greet            (undescribed)   ",
        "  fail             (undescribed)   ",
        "  default          (undescribed)   ",
    ]


def test_cli_failure_exits_non_zero(project: Path) -> None:
    result = CliRunner().invoke(rmake, ["--root", str(project), "--no-trace", "hello", "fail"])

    assert result.exit_code == 1
    assert "hello" in result.output
    assert "FAILED: RuntimeError: task failed" in result.output
    assert "(Enable tracing for more information.)" in result.output


def test_cli_unknown_task_exits_non_zero(project: Path) -> None:
    result = CliRunner().invoke(rmake, ["--root", str(project), "deploy"])

    assert result.exit_code == 1
    assert "FAILED: UnknownTaskError: Cannot invoke task: 'deploy'" in result.output


def test_cli_reports_missing_rmakefile(tmp_path: Path) -> None:
    result = CliRunner().invoke(rmake, ["--root", str(tmp_path)])

    assert result.exit_code == 1
    assert "Could not find external file 'RMakefile.py'!" in result.output
    assert "No tasks were collected." in result.output


def test_cli_file_option(project: Path) -> None:
    (project / "other.py").write_text('task("solo", action=lambda: print("solo"))\n')

    result = CliRunner().invoke(rmake, ["--root", str(project), "-f", "other.py", "solo"])

    assert result.exit_code == 0, result.output
    assert result.output.splitlines() == ["solo"]


def test_cli_embedded_script_from_imported_module(
    tmp_path: Path,
    monkeypatch,
    global_scripts,
) -> None:
    (tmp_path / "bundled_tasks.py").write_text(
        "from rmake.sources import register_script\n"
        "register_script('Bundled', 'task(\"ping\", action=lambda: print(\"pong\"))')\n",
        encoding="utf-8",
    )
    monkeypatch.syspath_prepend(str(tmp_path))
    monkeypatch.delitem(sys.modules, "bundled_tasks", raising=False)

    result = CliRunner().invoke(
        rmake,
        ["--import", "bundled_tasks", "--script", "Bundled", "ping"],
    )

    assert result.exit_code == 0, result.output
    assert result.output.splitlines() == ["pong"]


def test_cli_invalid_task_name_is_reported(project: Path) -> None:
    result = CliRunner().invoke(rmake, ["--root", str(project), ":"])

    assert result.exit_code == 1
    assert not isinstance(result.exception, ValueError)
    assert "FAILED: UnknownTaskError: Cannot invoke task: ':'" in result.output


def test_cli_failing_import_is_reported(project: Path, tmp_path: Path, monkeypatch) -> None:
    (tmp_path / "broken_tasks.py").write_text("raise RuntimeError('bad module')\n")
    monkeypatch.syspath_prepend(str(tmp_path))
    monkeypatch.delitem(sys.modules, "broken_tasks", raising=False)

    result = CliRunner().invoke(rmake, ["--root", str(project), "--import", "broken_tasks"])

    assert result.exit_code == 1
    assert "Could not import module 'broken_tasks'" in result.output
    assert "bad module" in result.output
