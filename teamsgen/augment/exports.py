"""Re-export declarations for the client-side script bundle."""

from __future__ import annotations

from typing import Optional

from ..analyzers.tree_sitter import TypeScriptParser, string_value
from ..logging import get_logger
from ..postproc.format import dominant_newline

logger = get_logger("augment.exports")


def has_export_declaration(text: str, module: str, parser: TypeScriptParser | None = None) -> bool:
    parsed = (parser or TypeScriptParser()).parse(text, strict=True)
    for child in parsed.root.children:
        if child.type != "export_statement":
            continue
        source_node = child.child_by_field_name("source")
        if source_node is not None and string_value(parsed, source_node) == module:
            return True
    return False


def insert_export_declaration(
    text: str,
    module: str,
    comment: Optional[str] = None,
    *,
    parser: TypeScriptParser | None = None,
) -> str:
    """Append ``export * from "module";`` unless the module is already exported."""
    if has_export_declaration(text, module, parser):
        logger.debug("%s is already exported", module)
        return text
    newline = dominant_newline(text)
    body = text.rstrip("\r\n")
    lines = [f"// {comment}"] if comment else []
    lines.append(f'export * from "{module}";')
    prefix = body + newline if body else ""
    logger.debug("Exporting %s", module)
    return prefix + newline.join(lines) + newline


__all__ = ["has_export_declaration", "insert_export_declaration"]
