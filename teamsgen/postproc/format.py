"""Whitespace normalisation applied to TypeScript files before they are written."""

from __future__ import annotations

from typing import List, Optional, Set

from ..analyzers.tree_sitter import TypeScriptParser

# Multi-line nodes whose inner lines are content, not layout.
_VERBATIM_TYPES = {"template_string", "comment", "string"}
# A literal also owns the tail of its first line.
_LITERAL_TYPES = {"template_string", "string"}


def dominant_newline(text: str) -> str:
    """Return ``"\\r\\n"`` when most lines of ``text`` end that way, else ``"\\n"``."""
    crlf = text.count("\r\n")
    lf = text.count("\n") - crlf
    return "\r\n" if crlf > lf else "\n"


class SourceFormatter:
    """Normalises trailing whitespace, blank line runs and line endings.

    Lines inside multi-line template literals and block comments are left as
    they are. Output keeps the dominant line ending of the input unless
    ``newline`` says otherwise.
    """

    def __init__(self, parser: TypeScriptParser | None = None) -> None:
        self.parser = parser or TypeScriptParser()

    def format(self, text: str, *, newline: Optional[str] = None) -> str:
        newline = newline or dominant_newline(text)
        normalized = text.replace("\r\n", "\n").replace("\r", "\n")
        protected = self._protected_lines(normalized)
        lines = normalized.split("\n")
        cleaned: List[str] = []
        previous_blank = False

        for number, line in enumerate(lines):
            if number in protected:
                cleaned.append(line)
                previous_blank = False
                continue
            stripped = line.rstrip()
            if not stripped:
                if previous_blank or not cleaned:
                    continue
                previous_blank = True
                cleaned.append("")
                continue
            cleaned.append(stripped)
            previous_blank = False

        while cleaned and cleaned[-1] == "":
            cleaned.pop()

        return newline.join(cleaned) + newline

    def _protected_lines(self, text: str) -> Set[int]:
        parsed = self.parser.parse(text, strict=False)
        protected: Set[int] = set()
        stack = [parsed.root]
        while stack:
            node = stack.pop()
            start_row = node.start_point[0]
            end_row = node.end_point[0]
            if node.type in _VERBATIM_TYPES:
                if end_row > start_row:
                    first = start_row if node.type in _LITERAL_TYPES else start_row + 1
                    protected.update(range(first, end_row + 1))
                continue
            if end_row > start_row:
                stack.extend(node.children)
        return protected


__all__ = ["SourceFormatter", "dominant_newline"]
