"""Resolution of app identifiers that may point at environment variables.

Generated projects refer to the bot's Microsoft App ID either literally or
through the environment, e.g. ``{{MICROSOFT_APP_ID}}`` in the manifest and
``process.env.MICROSOFT_APP_ID`` in TypeScript decorators. Only these
pattern-matched indirections are understood; nothing is ever evaluated.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Dict, Mapping, Optional

from dotenv import dotenv_values

from .errors import ResolutionError
from .logging import get_logger

EMPTY_GUID = "00000000-0000-0000-0000-000000000000"

_GUID_PATTERN = re.compile(
    r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
)
_ENV_NAME = r"[A-Za-z_][A-Za-z0-9_]*"
_INDIRECTIONS = (
    re.compile(rf"\{{\{{\s*({_ENV_NAME})\s*\}}\}}"),
    re.compile(rf"process\.env\.({_ENV_NAME})"),
    re.compile(rf"process\.env\[\s*[\"']({_ENV_NAME})[\"']\s*\]"),
)

logger = get_logger("identifiers")


def is_guid(value: object) -> bool:
    return isinstance(value, str) and bool(_GUID_PATTERN.fullmatch(value))


def strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'", "`"}:
        return value[1:-1]
    return value


def environment_reference(token: str) -> Optional[str]:
    """Return the variable name an indirect token refers to, if it is one."""
    candidate = strip_quotes(token.strip())
    for pattern in _INDIRECTIONS:
        match = pattern.fullmatch(candidate)
        if match:
            return match.group(1)
    return None


def resolve_identifier(token: str, environ: Optional[Mapping[str, str]] = None) -> str:
    """Resolve ``token`` to a literal identifier.

    Literal GUIDs come back unchanged (surrounding quotes removed). Indirect
    references are looked up in ``environ``, which defaults to the process
    environment. Raises :class:`ResolutionError` for anything else.
    """
    if token is None:
        raise ResolutionError("None", "no identifier given")
    literal = strip_quotes(token.strip())
    if is_guid(literal):
        return literal

    name = environment_reference(literal)
    if name is None:
        raise ResolutionError(token, "not a GUID or an environment reference")

    env = os.environ if environ is None else environ
    value = env.get(name)
    if value is None:
        raise ResolutionError(token, f"environment variable {name} is not set")
    value = value.strip()
    if not value:
        raise ResolutionError(token, f"environment variable {name} is empty")
    logger.debug("Resolved %s through environment variable %s", token, name)
    return value


def load_environment(root: Path, env_file: str = ".env") -> Dict[str, str]:
    """Return the project's ``.env`` values overlaid with the process environment.

    Process values win, matching dotenv's no-override default. The process
    environment itself is left untouched.
    """
    merged: Dict[str, str] = {}
    env_path = root / env_file
    if env_path.is_file():
        for key, value in dotenv_values(env_path).items():
            if value is not None:
                merged[key] = value
        logger.debug("Loaded %d variables from %s", len(merged), env_path)
    merged.update(os.environ)
    return merged


__all__ = [
    "EMPTY_GUID",
    "environment_reference",
    "is_guid",
    "load_environment",
    "resolve_identifier",
    "strip_quotes",
]
