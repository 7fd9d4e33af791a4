"""Staged file writes committed together at the end of a generator run."""

from __future__ import annotations

import difflib
import json
from pathlib import Path
from typing import Any, Dict, List

from ..logging import get_logger


class ChangeSet:
    """Buffers every write of one invocation so a failure leaves the project untouched.

    Reads go through the buffer, so later steps see the staged content of
    earlier ones.
    """

    def __init__(self, root: Path) -> None:
        self.root = root
        self._staged: Dict[str, str] = {}
        self._original: Dict[str, str | None] = {}
        self.logger = get_logger("changeset")

    def exists(self, relative: str) -> bool:
        return relative in self._staged or (self.root / relative).is_file()

    def read(self, relative: str) -> str:
        if relative in self._staged:
            return self._staged[relative]
        return _read_text(self.root / relative)

    def read_json(self, relative: str) -> Any:
        return json.loads(self.read(relative))

    def stage(self, relative: str, text: str) -> None:
        if relative not in self._original:
            path = self.root / relative
            self._original[relative] = _read_text(path) if path.is_file() else None
        self._staged[relative] = text
        self.logger.debug("Staged %s", relative)

    def stage_json(self, relative: str, document: Any) -> None:
        self.stage(relative, json.dumps(document, indent=2) + "\n")

    @property
    def paths(self) -> List[str]:
        """Staged paths whose content differs from disk."""
        return [path for path, text in self._staged.items() if self._original.get(path) != text]

    def diff(self) -> str:
        chunks: List[str] = []
        for relative in self.paths:
            original = self._original.get(relative) or ""
            chunks.extend(
                difflib.unified_diff(
                    original.splitlines(keepends=True),
                    self._staged[relative].splitlines(keepends=True),
                    fromfile=f"{relative} (original)",
                    tofile=f"{relative} (updated)",
                )
            )
        return "".join(chunks)

    def commit(self) -> List[Path]:
        written: List[Path] = []
        for relative in self.paths:
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(self._staged[relative], encoding="utf-8", newline="")
            self._original[relative] = self._staged[relative]
            written.append(path)
            self.logger.info("Wrote %s", relative)
        return written


def _read_text(path: Path) -> str:
    # Line endings are kept as they are on disk.
    with path.open(encoding="utf-8", newline="") as handle:
        return handle.read()


__all__ = ["ChangeSet"]
