"""Exception hierarchy raised by the scaffolding pipeline."""

from __future__ import annotations


class GeneratorError(RuntimeError):
    """Base class for failures that abort a generator invocation."""


class ConfigError(GeneratorError):
    """Raised when the configuration file cannot be parsed."""


class ResolutionError(GeneratorError):
    """An identifier token could not be resolved to a literal value."""

    def __init__(self, token: str, reason: str) -> None:
        super().__init__(f"Unable to resolve identifier {token!r}: {reason}")
        self.token = token
        self.reason = reason


class InvalidVersionError(GeneratorError):
    """Unknown or ambiguous manifest version."""


class ManifestError(GeneratorError):
    """The manifest document cannot take the requested change."""


class HostNotFoundError(GeneratorError):
    """No class carries the host marker with the expected correlation key."""


class MalformedHostError(GeneratorError):
    """The host class exists but lacks a member the plan expects.

    This one is reported as a warning; the remaining edits still apply.
    """


class ParseError(GeneratorError):
    """Source text could not be parsed into a syntax tree."""

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        location = path or "<source>"
        if line is not None:
            location += f":{line}"
            if column is not None:
                location += f":{column}"
        super().__init__(f"{location}: {message}")
        self.path = path
        self.line = line
        self.column = column


__all__ = [
    "ConfigError",
    "GeneratorError",
    "HostNotFoundError",
    "InvalidVersionError",
    "MalformedHostError",
    "ManifestError",
    "ParseError",
    "ResolutionError",
]
