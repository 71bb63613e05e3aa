"""Task registry, invocation and the failure boundary around a run."""

from __future__ import annotations

import logging
import traceback
from collections.abc import Callable
from pathlib import Path
from typing import IO, TypeVar

import click

from rmake.config import Settings
from rmake.dsl import evaluate_definitions
from rmake.errors import UnknownTaskError
from rmake.sources import (
    SCRIPTS,
    DefinitionsSource,
    EmbeddedScripts,
    read_embedded_source,
    read_file_source,
)
from rmake.tasks import Task, normalize_task_name

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TASK = "default"
HELP_TASKS = frozenset({"help", "tasks"})
USAGE_HEADER = ("Usage: rmake [:task[, :task ...]]", "Tasks:")
UNDESCRIBED = "(undescribed)"

_PACKAGE_DIR = Path(__file__).resolve().parent


class Runner:
    """Owns the task registry for one session and drives invocation.

    Task definitions are collected once, at construction, from the source the
    settings point at (or from ``source`` when given explicitly).
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        source: DefinitionsSource | None = None,
        scripts: EmbeddedScripts | None = None,
        stdout: IO[str] | None = None,
        stderr: IO[str] | None = None,
        collect: bool = True,
    ) -> None:
        self.settings = settings or Settings.from_env()
        self.scripts = SCRIPTS if scripts is None else scripts
        self.tasks: dict[str, Task] = {}
        self._next_description: str | None = None
        self._stdout = stdout
        self._stderr = stderr
        if collect:
            self.collect_tasks(source)

    def collect_tasks(self, source: DefinitionsSource | None = None) -> None:
        """Evaluate the definitions source; a missing source leaves the registry empty."""

        if source is None:
            source = self._locate_source()
        if source is None:
            return
        logger.debug("Collecting tasks from %s", source.label)
        self.contain_failures(lambda: evaluate_definitions(self, source))
        logger.debug("Collected %d task(s) from %s", len(self.tasks), source.label)

    def _locate_source(self) -> DefinitionsSource | None:
        if self.settings.uses_embedded_script:
            name = self.settings.script_name
            source = read_embedded_source(name, self.scripts)
            if source is None:
                logger.warning("Embedded script %s is not registered", name)
                self._echo(f"Could not find internal script '{name}'!")
            return source

        path = self.settings.definitions_path
        source = read_file_source(path)
        if source is None:
            logger.warning("Definitions file %s does not exist", path)
            self._echo(f"Could not find external file '{self.settings.file}'!")
        return source

    def prepare_task_description(self, description: object) -> str:
        """Hold a description for the next task passed to :meth:`add_task`."""

        self._next_description = str(description)
        return self._next_description

    def add_task(self, task: Task) -> Task:
        if self._next_description is not None:
            task.describe(self._next_description)
            self._next_description = None
        if task.name in self.tasks:
            logger.debug("Task %s redefined", task.name)
        self.tasks[task.name] = task
        return task

    def invoke_task(self, name: object) -> bool:
        """Invoke a registered task (and its dependencies) by name."""

        try:
            task_name = normalize_task_name(name)
        except ValueError:
            raise UnknownTaskError(str(name).strip()) from None
        task = self.tasks.get(task_name)
        if task is None:
            raise UnknownTaskError(task_name)
        return task.invoke(self)

    def clear(self) -> dict[str, Task]:
        for task in self.tasks.values():
            task.clear()
        return self.tasks

    def print_usage(self) -> None:
        for line in USAGE_HEADER:
            self._echo(line)
        for task in self.tasks.values():
            self._echo("  %-16.16s %-16s" % (task.name, task.description or UNDESCRIBED))

    def run(self, *names: object) -> list[str] | Exception:
        """Run the named tasks in order, each after its dependencies.

        Returns the requested names that are satisfied after the run, or the
        exception that aborted it. A name counts as satisfied when its task ran
        during this call, including as a dependency of an earlier name; tasks
        left over from a previous run without ``clear()`` do not count.
        Requesting ``help`` or ``tasks`` only prints the usage table.
        """

        requested = [_requested_name(name) for name in names]
        if HELP_TASKS.intersection(requested):
            self.print_usage()
            return ["help"]
        return self.contain_failures(lambda: self._invoke_requested(requested))

    __call__ = run

    def _invoke_requested(self, requested: list[str]) -> list[str]:
        if not requested:
            requested = [DEFAULT_TASK]
        logger.info("Running tasks: %s", ", ".join(requested))
        previously_invoked = {name for name, task in self.tasks.items() if task.invoked}
        satisfied: list[str] = []
        for name in requested:
            ran_now = self.invoke_task(name)
            if ran_now or (self.tasks[name].invoked and name not in previously_invoked):
                satisfied.append(name)
        return satisfied

    def contain_failures(self, block: Callable[[], T]) -> T | Exception:
        """Call ``block``; report and return any exception instead of raising it.

        ``SystemExit`` and ``KeyboardInterrupt`` always propagate.
        """

        try:
            return block()
        except (SystemExit, KeyboardInterrupt):
            raise
        except Exception as exc:
            logger.error("Task run failed: %s: %s", type(exc).__name__, exc)
            self._echo(self.render_failure(exc), err=True)
            return exc

    def render_failure(self, exc: BaseException) -> str:
        headline = f"FAILED: {type(exc).__name__}: {exc}"
        if not self.settings.trace:
            return f"{headline}\n(Enable tracing for more information.)"
        trace = self._user_frames(exc)
        if not trace:
            return f"{headline}\nBacktrace:"
        return f"{headline}\nBacktrace:\n\t" + "\n\t".join(trace)

    def _user_frames(self, exc: BaseException) -> list[str]:
        """Frames innermost first, up to the first one inside this package."""

        lines: list[str] = []
        for frame in reversed(traceback.extract_tb(exc.__traceback__)):
            if _is_package_frame(frame.filename):
                break
            filename = self.scripts.translate(frame.filename)
            lines.append(f"{filename}:{frame.lineno}:in `{frame.name}'")
        return lines

    def _echo(self, message: str, *, err: bool = False) -> None:
        stream = self._stderr if err else self._stdout
        click.echo(message, file=stream, err=err)


def _requested_name(value: object) -> str:
    """Canonical name, or the raw text when it is not a valid task name."""

    try:
        return normalize_task_name(value)
    except ValueError:
        return str(value).strip()


def _is_package_frame(filename: str) -> bool:
    if filename.startswith("{") or filename.startswith("<"):
        return False
    try:
        return Path(filename).resolve().is_relative_to(_PACKAGE_DIR)
    except (OSError, ValueError):
        return False
