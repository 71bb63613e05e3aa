"""Readers for task definition sources: RMakefiles on disk and embedded scripts."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

_EMBEDDED_FILENAME_RE = re.compile(r"^\{(\d+)\}$")


@dataclass(slots=True)
class DefinitionsSource:
    """Raw declaration text plus the filename it is compiled under."""

    text: str
    filename: str
    label: str


class EmbeddedScripts:
    """Ordered, in-process registry of named definition scripts.

    Scripts are compiled under ``{index}`` pseudo-filenames, so tracebacks can
    be mapped back to the registered script name with :meth:`translate`.
    """

    def __init__(self) -> None:
        self._scripts: list[tuple[str, str]] = []

    def __len__(self) -> int:
        return len(self._scripts)

    def add(self, name: str, body: str) -> int:
        self._scripts.append((name, body))
        logger.debug("Registered embedded script %s at index %d", name, len(self._scripts) - 1)
        return len(self._scripts) - 1

    def find(self, name: str) -> tuple[int, str] | None:
        """Return ``(index, body)`` of the first script called ``name``."""

        for index, (script_name, body) in enumerate(self._scripts):
            if script_name == name:
                return index, body
        return None

    def name_at(self, index: int) -> str:
        return self._scripts[index][0]

    @staticmethod
    def filename_for(index: int) -> str:
        return f"{{{index}}}"

    def translate(self, filename: str) -> str:
        match = _EMBEDDED_FILENAME_RE.match(filename)
        if match is None:
            return filename
        index = int(match.group(1))
        if index >= len(self._scripts):
            return filename
        return self.name_at(index)

    def clear(self) -> None:
        self._scripts.clear()


SCRIPTS = EmbeddedScripts()


def register_script(name: str, body: str, scripts: EmbeddedScripts | None = None) -> int:
    """Register ``body`` as an embedded definitions script called ``name``."""

    return (SCRIPTS if scripts is None else scripts).add(name, body)


def read_file_source(path: Path) -> DefinitionsSource | None:
    if not path.is_file():
        return None
    return DefinitionsSource(
        text=path.read_text(encoding="utf-8"),
        filename=str(path),
        label=str(path),
    )


def read_embedded_source(name: str, scripts: EmbeddedScripts) -> DefinitionsSource | None:
    found = scripts.find(name)
    if found is None:
        return None
    index, body = found
    return DefinitionsSource(text=body, filename=scripts.filename_for(index), label=name)
