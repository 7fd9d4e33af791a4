"""Post-processing applied to generated sources before they are written."""

from .format import SourceFormatter, dominant_newline

__all__ = ["SourceFormatter", "dominant_newline"]
