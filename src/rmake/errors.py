"""Exception taxonomy for task collection and invocation."""

from __future__ import annotations


class RMakeError(Exception):
    """Base class for runner failures."""


class UnknownTaskError(RMakeError, LookupError):
    """Raised when a requested or depended-on task is not registered."""

    def __init__(self, task_name: str) -> None:
        super().__init__(f"Cannot invoke task: '{task_name}'")
        self.task_name = task_name


class TaskCycleError(RMakeError):
    """Raised when a task is reached again while its own chain is still running."""

    def __init__(self, task_name: str) -> None:
        super().__init__(f"Dependency cycle detected at task: '{task_name}'")
        self.task_name = task_name


class ModuleImportError(RMakeError):
    """Raised when a module requested for import before collection fails to load."""

    def __init__(self, module: str, cause: BaseException) -> None:
        super().__init__(f"Could not import module '{module}': {type(cause).__name__}: {cause}")
        self.module = module
