"""TypeScript source analysis used to find where new components attach."""

from .host_locator import HostCandidate, HostLocator
from .tree_sitter import SourceTree, TypeScriptParser

__all__ = [
    "HostCandidate",
    "HostLocator",
    "SourceTree",
    "TypeScriptParser",
]
