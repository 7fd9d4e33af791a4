"""Locates the host class a new component attaches to.

Generated bots carry a marker decorator such as::

    @BotDeclaration(
        "/api/messages",
        new MemoryStorage(),
        process.env.MICROSOFT_APP_ID,
        process.env.MICROSOFT_APP_PASSWORD)
    export class MyBot extends TeamsActivityHandler { ... }

The third argument correlates the class with the bot id registered in the
manifest.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import List, Mapping, Optional

from ..errors import HostNotFoundError, ResolutionError
from ..identifiers import is_guid, resolve_identifier
from ..logging import get_logger
from ..models import HostClassReference
from .tree_sitter import (
    SourceTree,
    TypeScriptParser,
    decorator_arguments,
    find_decorator,
    iter_classes,
    string_value,
)

_STRING_TYPES = {"string", "template_string"}


@dataclass(frozen=True)
class HostCandidate:
    """A marked class and the correlation key resolved from its decorator."""

    path: str
    class_name: str
    correlation_key: str
    argument: str

    def to_reference(self) -> HostClassReference:
        return HostClassReference(
            path=self.path,
            class_name=self.class_name,
            correlation_key=self.correlation_key,
            component_name=PurePosixPath(self.path).parent.name,
        )


class HostLocator:
    """Scans TypeScript sources for classes carrying the host marker."""

    def __init__(
        self,
        marker: str = "BotDeclaration",
        argument_index: int = 2,
        *,
        environ: Optional[Mapping[str, str]] = None,
        parser: TypeScriptParser | None = None,
    ) -> None:
        self.marker = marker
        self.argument_index = argument_index
        self.environ = environ
        self.parser = parser or TypeScriptParser()
        self.logger = get_logger("host_locator")

    def scan(self, root: Path, pattern: str) -> List[HostCandidate]:
        """Return every resolvable host candidate below ``root`` matching ``pattern``."""
        root = root.resolve()
        candidates: List[HostCandidate] = []
        paths = sorted(path for path in root.glob(pattern) if path.is_file())
        self.logger.debug("Scanning %d files matching %s", len(paths), pattern)
        for path in paths:
            rel_path = path.relative_to(root).as_posix()
            parsed = self.parser.parse(path.read_text(encoding="utf-8"), path=rel_path, strict=False)
            if parsed.root.has_error:
                self.logger.debug("%s contains syntax errors; scanning what could be parsed", rel_path)
            candidates.extend(self._scan_file(parsed, rel_path))
        return candidates

    def locate(self, root: Path, pattern: str, key: str) -> HostClassReference:
        """Return the host whose correlation key equals ``key``.

        Raises :class:`HostNotFoundError` when no candidate matches.
        """
        target = key
        try:
            target = resolve_identifier(key, self.environ)
        except ResolutionError as exc:
            self.logger.warning("Unable to find the bot id from %r: %s", key, exc.reason)

        candidates = self.scan(root, pattern)
        for candidate in candidates:
            if candidate.correlation_key == target:
                self.logger.info("Found host class %s in %s", candidate.class_name, candidate.path)
                return candidate.to_reference()

        raise HostNotFoundError(
            f"Could not locate a class decorated with @{self.marker} for bot id {target!r} "
            f"(searched {pattern} under {root}, {len(candidates)} candidate(s)). "
            f"Verify that the {self.marker} declaration uses a valid GUID or a valid environment variable."
        )

    def _scan_file(self, parsed: SourceTree, rel_path: str) -> List[HostCandidate]:
        found: List[HostCandidate] = []
        for info in iter_classes(parsed):
            decorator = find_decorator(parsed, info.decorators, self.marker)
            if decorator is None:
                continue
            arguments = decorator_arguments(decorator)
            if len(arguments) <= self.argument_index:
                self.logger.warning(
                    "Skipping %s in %s: @%s has no argument at position %d",
                    info.name,
                    rel_path,
                    self.marker,
                    self.argument_index + 1,
                )
                continue
            argument = arguments[self.argument_index]
            token = string_value(parsed, argument) if argument.type in _STRING_TYPES else parsed.text(argument)
            try:
                key = resolve_identifier(token, self.environ)
            except ResolutionError as exc:
                self.logger.warning("Skipping %s in %s: %s", info.name, rel_path, exc)
                continue
            if not is_guid(key):
                self.logger.warning(
                    "Skipping %s in %s: %s resolved to %r, which is not a GUID", info.name, rel_path, token, key
                )
                continue
            found.append(HostCandidate(path=rel_path, class_name=info.name, correlation_key=key, argument=token))
        return found


__all__ = ["HostCandidate", "HostLocator"]
