"""Declaration primitives available inside an RMakefile.

An RMakefile is plain Python executed with ``task`` and ``desc`` in scope::

    desc("Prints an example message.")
    @task("example")
    def example():
        print("This is an example task.")

    @task({"another_example": ["example"]})
    def another_example():
        print("This task has a dependency.")

    desc("Prints an example message. (default)")
    task("default", ["example"])
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Any

from rmake.tasks import Task, TaskAction

if TYPE_CHECKING:
    from rmake.config import Settings
    from rmake.runner import Runner
    from rmake.sources import DefinitionsSource

logger = logging.getLogger(__name__)


class TaskDeclaration:
    """Tasks registered without an action; call it with a function to attach one."""

    def __init__(self, runner: Runner, tasks: list[Task]) -> None:
        self._runner = runner
        self.tasks = tasks

    def __call__(self, action: Callable[[], Any]) -> Callable[[], Any]:
        self.tasks = [
            self._runner.add_task(
                Task(task.name, task.dependencies, task.description, action),
            )
            for task in self.tasks
        ]
        return action


class DSL:
    """``task`` and ``desc`` bound to one runner."""

    def __init__(self, runner: Runner) -> None:
        self.runner = runner

    def task(
        self,
        spec: object,
        dependencies: Iterable[object] = (),
        action: TaskAction | None = None,
    ) -> Task | list[Task] | TaskDeclaration:
        """Define a task, or one task per ``{name: [dependencies]}`` entry.

        With ``action`` the registered task (or list of tasks for a mapping) is
        returned. Without it the tasks are registered as pure aggregators and a
        :class:`TaskDeclaration` is returned, so ``task`` also works as a
        decorator.
        """

        if isinstance(spec, Mapping):
            pairs = list(spec.items())
        else:
            pairs = [(spec, dependencies)]

        tasks = [self.runner.add_task(Task(name, deps, action=action)) for name, deps in pairs]
        if action is None:
            return TaskDeclaration(self.runner, tasks)
        if isinstance(spec, Mapping):
            return tasks
        return tasks[0]

    def desc(self, description: object) -> str:
        """Describe the next defined task."""

        return self.runner.prepare_task_description(description)

    def namespace(self) -> dict[str, Any]:
        return {
            "__name__": "__rmakefile__",
            "task": self.task,
            "desc": self.desc,
            "runner": self.runner,
        }


def evaluate_definitions(runner: Runner, source: DefinitionsSource) -> None:
    """Execute declaration text with the DSL bound to ``runner``."""

    code = compile(source.text, source.filename, "exec")
    exec(code, DSL(runner).namespace())  # noqa: S102


def rmake(*names: object, settings: Settings | None = None, **runner_options: Any):
    """Create a new runner and run the given tasks through it.

    Returns ``None`` when no tasks could be collected, otherwise the result of
    :meth:`Runner.run`.
    """

    from rmake.runner import Runner

    runner = Runner(settings, **runner_options)
    if not runner.tasks:
        logger.warning("No tasks collected; nothing to run")
        return None
    return runner.run(*names)
