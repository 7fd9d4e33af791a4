"""Name derivation helpers for generated components and their files."""

from __future__ import annotations

import re
import unicodedata
from pathlib import Path
from typing import List, Mapping, Optional

MESSAGE_EXTENSION_SUFFIX = "MessageExtension"
MAX_TITLE_LENGTH = 32

# Mirrors lodash's word splitting: camel humps, acronyms and digit runs are separate words.
_WORD_PATTERN = re.compile(
    r"[A-Z]?[a-z]+(?=[^a-z]|$)"
    r"|[A-Z]+(?=[A-Z][a-z]|[^A-Za-z]|$)"
    r"|[A-Z]?[a-z]+"
    r"|[A-Z]+"
    r"|[0-9]+"
)
_PLACEHOLDER_PATTERN = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")


def words(value: str) -> List[str]:
    """Split ``value`` into words the way the JavaScript generator did."""
    folded = unicodedata.normalize("NFKD", value)
    folded = "".join(char for char in folded if not unicodedata.combining(char))
    folded = folded.replace("'", "").replace("’", "")
    return _WORD_PATTERN.findall(folded)


def camel_case(value: str) -> str:
    parts = words(value)
    if not parts:
        return ""
    head, *tail = parts
    return head.lower() + "".join(part.lower().capitalize() for part in tail)


def upper_first(value: str) -> str:
    return value[:1].upper() + value[1:]


def normalize_component_name(title: str, suffix: str = MESSAGE_EXTENSION_SUFFIX) -> str:
    """Return the camel-cased component name, always ending with ``suffix``."""
    name = camel_case(title)
    if not name.endswith(suffix):
        name += suffix
    return name


def class_name_for(name: str) -> str:
    return upper_first(name)


def host_source_path(component_name: str, class_name: str) -> str:
    """Project relative path of a generated component's implementation file."""
    return f"src/app/{component_name}/{class_name}.ts"


def validate_component_title(
    title: str,
    root: Path,
    *,
    host: str = "new",
    suffix: str = MESSAGE_EXTENSION_SUFFIX,
) -> Optional[str]:
    """Return an error message for an unusable component title, ``None`` when valid."""
    if not title or len(title) > MAX_TITLE_LENGTH:
        return f"The name must be between 1 and {MAX_TITLE_LENGTH} characters long"
    if host == "external":
        return None
    name = normalize_component_name(title, suffix)
    relative = host_source_path(name, class_name_for(name))
    if (root / relative).exists():
        return f"There's already a file with the name of {name}/{class_name_for(name)}.ts"
    return None


def fix_file_names(template: str, values: Mapping[str, str]) -> str:
    """Replace ``{placeholder}`` segments of a template path with option values.

    Unknown placeholders are left untouched so callers can spot them in logs.
    """

    def _replace(match: re.Match[str]) -> str:
        key = match.group(1)
        value = values.get(key)
        return str(value) if value is not None else match.group(0)

    return _PLACEHOLDER_PATTERN.sub(_replace, template)


__all__ = [
    "MAX_TITLE_LENGTH",
    "MESSAGE_EXTENSION_SUFFIX",
    "camel_case",
    "class_name_for",
    "fix_file_names",
    "host_source_path",
    "normalize_component_name",
    "upper_first",
    "validate_component_title",
    "words",
]
