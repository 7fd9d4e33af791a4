"""Persistence helpers: the project options store and staged writes."""

from .changeset import ChangeSet
from .options_store import GENERATOR_KEY, ProjectOptionsStore

__all__ = ["ChangeSet", "GENERATOR_KEY", "ProjectOptionsStore"]
