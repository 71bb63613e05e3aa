"""Dependency-ordered task runner."""

from rmake.errors import ModuleImportError, RMakeError, TaskCycleError, UnknownTaskError
from rmake.runner import Runner
from rmake.tasks import Task

__version__ = "1.1.0"

__all__ = [
    "ModuleImportError",
    "RMakeError",
    "Runner",
    "Task",
    "TaskCycleError",
    "UnknownTaskError",
    "__version__",
]
