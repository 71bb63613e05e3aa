"""Runtime configuration for task collection and failure reporting."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

INTERNAL = ":internal"
DEFAULT_FILE = "RMakefile.py"
DEFAULT_SCRIPT_NAME = "RMakefile"


@dataclass(slots=True)
class Settings:
    """Where task definitions come from and how failures are reported.

    ``file`` is a path relative to ``project_root``; the ``INTERNAL`` value
    selects the embedded script registered under ``script_name`` instead.
    """

    file: str = DEFAULT_FILE
    script_name: str = DEFAULT_SCRIPT_NAME
    trace: bool = True
    project_root: Path = Path(".")

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment with defaults for a project-local RMakefile."""

        return cls(
            file=os.getenv("RMAKE_FILE", DEFAULT_FILE).strip() or DEFAULT_FILE,
            script_name=os.getenv("RMAKE_SCRIPT", DEFAULT_SCRIPT_NAME).strip()
            or DEFAULT_SCRIPT_NAME,
            trace=_env_bool("RMAKE_TRACE", default=True),
            project_root=Path(os.getenv("RMAKE_PROJECT_ROOT", ".")).expanduser(),
        )

    @property
    def uses_embedded_script(self) -> bool:
        return self.file == INTERNAL

    @property
    def definitions_path(self) -> Path:
        if self.uses_embedded_script:
            raise ValueError("Embedded script settings have no definitions path.")
        return self.project_root / self.file


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"Invalid boolean value for {name}: {value!r}")
