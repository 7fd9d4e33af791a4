"""Structural augmentation of generated TypeScript host classes.

The engine never rewrites a file from its syntax tree. It parses the existing
text, computes insertions against the original byte offsets and splices them
in, so everything it does not touch stays byte-for-byte identical before the
final whitespace pass.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..analyzers.tree_sitter import (
    ClassInfo,
    ImportInfo,
    SourceTree,
    TypeScriptParser,
    class_members,
    constructors,
    field_name,
    find_decorator,
    indentation_at,
    iter_classes,
    iter_imports,
    line_start,
)
from ..errors import HostNotFoundError, MalformedHostError
from ..logging import get_logger
from ..models import AugmentationResult, FieldEdit, ImportEdit, SourceAugmentationPlan, StatementEdit
from ..postproc.format import SourceFormatter, dominant_newline

DEFAULT_INDENT = "    "


@dataclass
class _Insertion:
    offset: int
    text: str
    order: int


class SourceAugmenter:
    """Applies a :class:`SourceAugmentationPlan` to host source text."""

    def __init__(
        self,
        parser: TypeScriptParser | None = None,
        formatter: SourceFormatter | None = None,
    ) -> None:
        self.parser = parser or TypeScriptParser()
        self.formatter = formatter or SourceFormatter(self.parser)
        self.logger = get_logger("augment")

    def augment(self, text: str, plan: SourceAugmentationPlan, *, path: Optional[str] = None) -> AugmentationResult:
        """Return the smallest superset of ``text`` carrying the planned edits.

        Raises :class:`ParseError` when ``text`` is not valid TypeScript and
        :class:`HostNotFoundError` when no class carries ``plan.host_marker``.
        A missing constructor is reported through ``warnings``.
        """
        parsed = self.parser.parse(text, path=path, strict=True)
        host = self._find_host(parsed, plan, path)
        edits = _EditCollector(parsed)
        warnings: List[str] = []

        existing_field = plan.field_edit is not None and self._declares_field(parsed, host, plan.field_edit.name)
        skip_member_edits = plan.guard_rerun and existing_field
        if skip_member_edits:
            self.logger.info(
                "%s already declares %s; skipping field and constructor edits",
                host.name,
                plan.field_edit.name,  # type: ignore[union-attr]
            )

        imports = list(iter_imports(parsed))
        anchor = imports[0].node.start_byte if imports else 0
        quote = _quote_style(parsed, imports)
        for edit in plan.imports:
            if edit.named_bindings:
                self._apply_named_import(parsed, edits, imports, edit, anchor, quote)
            if edit.default_binding:
                self._apply_default_import(edits, imports, edit, anchor, quote, plan.guard_rerun)

        if plan.field_edit is not None and not skip_member_edits:
            self._apply_field(parsed, edits, host, plan.field_edit)

        if plan.statement is not None and not skip_member_edits:
            problem = self._apply_statement(parsed, edits, host, plan.statement)
            if problem is not None:
                self.logger.warning("%s", problem)
                warnings.append(str(problem))

        if not edits.insertions:
            return AugmentationResult(text=text, warnings=warnings, changed=False)

        updated = self.formatter.format(edits.render(), newline=dominant_newline(text))
        # The spliced text must still parse; never hand back something we broke.
        self.parser.parse(updated, path=path, strict=True)
        return AugmentationResult(text=updated, warnings=warnings, changed=updated != text)

    # ------------------------------------------------------------------
    # Host discovery

    @staticmethod
    def _find_host(parsed: SourceTree, plan: SourceAugmentationPlan, path: Optional[str]) -> ClassInfo:
        for info in iter_classes(parsed):
            if plan.host_class is not None and info.name != plan.host_class:
                continue
            if find_decorator(parsed, info.decorators, plan.host_marker) is not None:
                return info
        wanted = f"class {plan.host_class}" if plan.host_class else "a class"
        raise HostNotFoundError(f"Could not find {wanted} decorated with @{plan.host_marker} in {path or 'the source'}")

    @staticmethod
    def _declares_field(parsed: SourceTree, host: ClassInfo, name: str) -> bool:
        return any(field_name(parsed, member.node) == name for member in class_members(host.body))

    # ------------------------------------------------------------------
    # Imports

    def _apply_named_import(
        self,
        parsed: SourceTree,
        edits: "_EditCollector",
        imports: Sequence[ImportInfo],
        edit: ImportEdit,
        anchor: int,
        quote: str,
    ) -> None:
        matching = [info for info in imports if info.module == edit.module and not info.type_only]
        present = {name for info in matching for name in info.named_bindings}
        missing = [name for name in dict.fromkeys(edit.named_bindings) if name not in present]
        if not missing:
            self.logger.debug("Named imports from %s already present", edit.module)
            return

        target = next((info for info in matching if not info.namespace), None)
        if target is None:
            bindings = ", ".join(missing)
            edits.insert(anchor, f"import {{ {bindings} }} from {quote}{edit.module}{quote};\n")
            self.logger.debug("Added import of %s from %s", bindings, edit.module)
            return

        names = ", ".join(missing)
        if target.named_imports is not None:
            specifiers = [child for child in target.named_imports.named_children if child.type == "import_specifier"]
            if specifiers:
                edits.insert(specifiers[-1].end_byte, f", {names}")
            else:
                opening = target.named_imports.children[0]
                edits.insert(opening.end_byte, f" {names} ")
        elif target.clause is not None:
            edits.insert(target.clause.end_byte, f", {{ {names} }}")
        else:
            # Side-effect import: ``import "module";``
            keyword = target.node.children[0]
            edits.insert(keyword.end_byte, f" {{ {names} }} from")
        self.logger.debug("Extended import from %s with %s", edit.module, names)

    def _apply_default_import(
        self,
        edits: "_EditCollector",
        imports: Sequence[ImportInfo],
        edit: ImportEdit,
        anchor: int,
        quote: str,
        guard_rerun: bool,
    ) -> None:
        if guard_rerun and any(
            info.module == edit.module and info.default_binding == edit.default_binding for info in imports
        ):
            self.logger.debug("Default import %s already present", edit.default_binding)
            return
        edits.insert(anchor, f"import {edit.default_binding} from {quote}{edit.module}{quote};\n")

    # ------------------------------------------------------------------
    # Class members

    def _apply_field(self, parsed: SourceTree, edits: "_EditCollector", host: ClassInfo, edit: FieldEdit) -> None:
        source = parsed.source
        members = class_members(host.body)
        unit = _indent_unit(parsed, host, members)

        lines: List[str] = []
        if edit.docs:
            lines.append("/**")
            lines.extend(f" * {doc}" for doc in edit.docs)
            lines.append(" */")
        lines.append(f'@{edit.marker}("{edit.marker_argument}")')
        if edit.lint_comment:
            lines.append(edit.lint_comment)
        lines.append(f"{edit.visibility} {edit.name}: {edit.type_name};".lstrip())

        if len(members) >= 2 and not _same_row(source, members[0].end_byte, members[1].start_byte):
            second = members[1]
            indent = indentation_at(source, second.start_byte)
            block = "".join(f"{indent}{line}\n" for line in lines)
            offset = line_start(source, second.start_byte)
            if _follows_blank_line(source, offset):
                block += "\n"
            edits.insert(offset, block)
        else:
            class_indent = indentation_at(source, host.node.start_byte)
            opening = host.body.children[0]
            if members:
                first = members[0]
                after = first.end_byte
                if _same_row(source, opening.start_byte, first.start_byte):
                    indent = class_indent + unit
                else:
                    indent = indentation_at(source, first.start_byte)
            else:
                after = opening.end_byte
                indent = class_indent + unit
            block = "".join(f"\n{indent}{line}" for line in lines)
            if not members and _closes_on_same_line(host.body):
                block += "\n" + class_indent
            edits.insert(after, block)
            if members:
                # Whatever shares the row with the first member moves below the field.
                if len(members) >= 2:
                    following, follow_indent = members[1].start_byte, indent
                else:
                    following, follow_indent = host.body.children[-1].start_byte, class_indent
                if _same_row(source, after, following):
                    edits.insert(following, "\n" + follow_indent)
        self.logger.debug("Inserted field %s into %s", edit.name, host.name)

    def _apply_statement(
        self, parsed: SourceTree, edits: "_EditCollector", host: ClassInfo, edit: StatementEdit
    ) -> Optional[MalformedHostError]:
        found = constructors(parsed, host.body)
        if not found:
            return MalformedHostError(
                f"{host.name} has no constructor; add `{edit.text}` to it manually to finish the wiring"
            )
        constructor = found[0]
        body = constructor.child_by_field_name("body")
        source = parsed.source
        lines = ([f"// {edit.comment}"] if edit.comment else []) + [edit.text]

        opening = body.children[0]
        inner = [child for child in body.children if child.type not in {"{", "}"}]
        first = inner[0] if inner else None
        if first is not None and first.start_point[0] > opening.start_point[0]:
            indent = indentation_at(source, first.start_byte)
            edits.insert(line_start(source, first.start_byte), "".join(f"{indent}{line}\n" for line in lines))
        else:
            unit = _indent_unit(parsed, host, class_members(host.body))
            constructor_indent = indentation_at(source, constructor.start_byte)
            if _same_row(source, host.body.start_byte, constructor.start_byte):
                constructor_indent = indentation_at(source, host.node.start_byte) + unit
            indent = constructor_indent + unit
            block = "".join(f"\n{indent}{line}" for line in lines)
            if first is not None:
                # Statements sharing the brace line move below the new ones.
                edits.insert(first.start_byte, block + "\n" + indent)
            else:
                if _closes_on_same_line(body):
                    block += "\n" + constructor_indent
                edits.insert(opening.end_byte, block)
        self.logger.debug("Prepended initialiser to %s constructor", host.name)
        return None


class _EditCollector:
    """Collects insertions against the original source and splices them in order."""

    def __init__(self, parsed: SourceTree) -> None:
        self._source = parsed.source
        self.insertions: List[_Insertion] = []

    def insert(self, offset: int, text: str) -> None:
        self.insertions.append(_Insertion(offset=offset, text=text, order=len(self.insertions)))

    def render(self) -> str:
        chunks: List[bytes] = []
        cursor = 0
        for insertion in sorted(self.insertions, key=lambda item: (item.offset, item.order)):
            chunks.append(self._source[cursor : insertion.offset])
            chunks.append(insertion.text.encode("utf-8"))
            cursor = insertion.offset
        chunks.append(self._source[cursor:])
        return b"".join(chunks).decode("utf-8")


def _quote_style(parsed: SourceTree, imports: Sequence[ImportInfo]) -> str:
    for info in imports:
        source_node = info.node.child_by_field_name("source")
        if source_node is not None:
            first = parsed.source[source_node.start_byte : source_node.start_byte + 1].decode("utf-8")
            if first in {'"', "'"}:
                return first
    return '"'


def _indent_unit(parsed: SourceTree, host: ClassInfo, members) -> str:  # type: ignore[no-untyped-def]
    class_indent = indentation_at(parsed.source, host.node.start_byte)
    for member in members:
        member_indent = indentation_at(parsed.source, member.start_byte)
        if member_indent.startswith(class_indent) and len(member_indent) > len(class_indent):
            return member_indent[len(class_indent) :]
    return DEFAULT_INDENT


def _closes_on_same_line(body) -> bool:  # type: ignore[no-untyped-def]
    return body.children[-1].start_point[0] == body.children[0].start_point[0]


def _same_row(source: bytes, first: int, second: int) -> bool:
    return source.find(b"\n", first, second) == -1


def _follows_blank_line(source: bytes, offset: int) -> bool:
    if offset == 0:
        return False
    previous = line_start(source, offset - 1)
    return not source[previous : offset - 1].strip()


__all__ = ["SourceAugmenter"]
