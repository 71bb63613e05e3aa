"""Task records and the invocation algorithm."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Protocol

from rmake.errors import TaskCycleError

logger = logging.getLogger(__name__)

TaskAction = Callable[[], object]


class TaskResolver(Protocol):
    """Anything able to resolve a task name and invoke it."""

    def invoke_task(self, name: object) -> bool: ...


def normalize_task_name(value: object) -> str:
    """Return the canonical key for a task name.

    ``:build``, ``" build "`` and ``build`` all name the same task.
    """

    name = str(value).strip()
    if name.startswith(":"):
        name = name[1:]
    if not name:
        raise ValueError(f"Invalid task name: {value!r}")
    return name


class Task:
    """A named unit of work with ordered prerequisites and an optional action."""

    __slots__ = ("_action", "_dependencies", "_description", "_in_progress", "_invoked", "_name")

    def __init__(
        self,
        name: object,
        dependencies: Iterable[object] = (),
        description: str | None = None,
        action: TaskAction | None = None,
    ) -> None:
        self._name = normalize_task_name(name)
        self._dependencies = tuple(normalize_task_name(dep) for dep in dependencies)
        self._description = description
        self._action = action
        self._invoked = False
        self._in_progress = False

    def __repr__(self) -> str:
        return (
            f"Task(name={self._name!r}, dependencies={list(self._dependencies)!r}, "
            f"invoked={self._invoked})"
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def dependencies(self) -> tuple[str, ...]:
        return self._dependencies

    @property
    def description(self) -> str | None:
        return self._description

    @property
    def action(self) -> TaskAction | None:
        return self._action

    @property
    def invoked(self) -> bool:
        """Whether the task already ran since the last ``clear()``."""

        return self._invoked

    @property
    def in_progress(self) -> bool:
        return self._in_progress

    def invoke(self, resolver: TaskResolver | None) -> bool:
        """Run dependencies through ``resolver``, then the action, once per run.

        Returns ``True`` when the task ran now and ``False`` when it had already
        run or there is no resolver to look dependencies up with. A task reached
        again while its own dependency chain is running raises ``TaskCycleError``.
        """

        if self._invoked or resolver is None:
            return False
        if self._in_progress:
            raise TaskCycleError(self._name)

        self._in_progress = True
        try:
            for dependency in self._dependencies:
                resolver.invoke_task(dependency)
            if self._action is not None:
                logger.debug("Running action of task %s", self._name)
                self._action()
        finally:
            self._in_progress = False

        self._invoked = True
        return True

    def describe(self, description: object) -> str:
        self._description = str(description)
        return self._description

    def clear(self) -> Task:
        """Forget the invocation status so the task can run again."""

        self._invoked = False
        self._in_progress = False
        return self
