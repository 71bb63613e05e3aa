"""Controller for the rmake CLI command."""

from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path

from rmake.config import INTERNAL, Settings
from rmake.errors import ModuleImportError
from rmake.runner import Runner

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RunCommand:
    """CLI inputs for a task run."""

    task_names: tuple[str, ...]
    file: str | None = None
    script_name: str | None = None
    project_root: Path | None = None
    trace: bool | None = None
    modules: tuple[str, ...] = ()


@dataclass(slots=True)
class RunOutcome:
    """Result of a CLI run: satisfied task names, or the failure that aborted it."""

    success: bool
    satisfied: list[str] = field(default_factory=list)
    error: Exception | None = None
    collected: bool = True


class RMakeCliController:
    """Coordinates settings, runner construction and result mapping."""

    def run(self, command: RunCommand) -> RunOutcome:
        for module in command.modules:
            logger.debug("Importing %s", module)
            try:
                importlib.import_module(module)
            except Exception as exc:
                raise ModuleImportError(module, exc) from exc
        settings = _effective_settings(command)
        runner = Runner(settings)
        if not runner.tasks:
            return RunOutcome(success=False, collected=False)

        result = runner.run(*command.task_names)
        if isinstance(result, Exception):
            return RunOutcome(success=False, error=result)
        return RunOutcome(success=True, satisfied=result)


def _effective_settings(command: RunCommand) -> Settings:
    settings = Settings.from_env()
    if command.script_name is not None:
        settings = replace(settings, file=INTERNAL, script_name=command.script_name)
    elif command.file is not None:
        settings = replace(settings, file=command.file)
    if command.project_root is not None:
        settings = replace(settings, project_root=command.project_root)
    if command.trace is not None:
        settings = replace(settings, trace=command.trace)
    logger.debug("Effective settings: %s", settings)
    return settings
