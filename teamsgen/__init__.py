"""Scaffolding helpers for Microsoft Teams app projects."""

__version__ = "0.1.0"
