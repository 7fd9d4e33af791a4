"""Splices new declarations into previously generated TypeScript sources."""

from .engine import SourceAugmenter
from .exports import has_export_declaration, insert_export_declaration

__all__ = [
    "SourceAugmenter",
    "has_export_declaration",
    "insert_export_declaration",
]
