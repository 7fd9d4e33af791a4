"""Project options persisted by the generator in ``.yo-rc.json``."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..logging import get_logger

GENERATOR_KEY = "generator-teams"


class ProjectOptionsStore:
    """Key/value options recorded under the generator's key of ``.yo-rc.json``.

    Other top-level keys of the file are preserved when the store is saved.
    """

    def __init__(self, path: Path, *, namespace: str = GENERATOR_KEY) -> None:
        self._path = path
        self._namespace = namespace
        self._document: Dict[str, Any] = {}
        self._dirty = False
        self.logger = get_logger("options")
        self._load(path)

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str, default: Any = None) -> Any:
        return self._options().get(key, default)

    def get_str(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = self.get(key)
        return value if isinstance(value, str) and value else default

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get(key)
        return value if isinstance(value, bool) else default

    def set(self, key: str, value: Any) -> None:
        options = self._options()
        if options.get(key) == value:
            return
        options[key] = value
        self._document[self._namespace] = options
        self._dirty = True

    def append_unique(self, key: str, value: str) -> None:
        current = self.get(key)
        items: List[Any] = list(current) if isinstance(current, list) else []
        if value not in items:
            items.append(value)
            self.set(key, items)

    @property
    def dirty(self) -> bool:
        return self._dirty

    def dumps(self) -> str:
        return json.dumps(self._document, indent=2) + "\n"

    def mark_clean(self) -> None:
        self._dirty = False

    # ------------------------------------------------------------------
    # Internal helpers

    def _options(self) -> Dict[str, Any]:
        options = self._document.get(self._namespace)
        return options if isinstance(options, dict) else {}

    def _load(self, path: Path) -> None:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return
        except (OSError, json.JSONDecodeError) as exc:
            self.logger.warning("Ignoring unreadable options file %s: %s", path, exc)
            return
        if not isinstance(data, dict):
            self.logger.warning("Ignoring options file %s: expected a JSON object", path)
            return
        self._document = data
        self._dirty = False


__all__ = ["GENERATOR_KEY", "ProjectOptionsStore"]
