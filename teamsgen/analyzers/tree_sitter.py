"""Tree-sitter helpers for reading generated TypeScript sources."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

import tree_sitter_typescript
from tree_sitter import Language, Node, Parser, Tree

from ..errors import ParseError

_LANGUAGES = {
    "typescript": tree_sitter_typescript.language_typescript,
    "tsx": tree_sitter_typescript.language_tsx,
}

_CLASS_TYPES = {"class_declaration", "abstract_class_declaration"}


@dataclass
class SourceTree:
    """A parsed file together with the bytes its node offsets refer to."""

    source: bytes
    tree: Tree
    path: Optional[str] = None

    @property
    def root(self) -> Node:
        return self.tree.root_node

    def text(self, node: Node) -> str:
        return self.source[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")


@dataclass
class ImportInfo:
    """An ``import ... from "module"`` statement."""

    node: Node
    module: str
    default_binding: Optional[str] = None
    named_bindings: List[str] = field(default_factory=list)
    named_imports: Optional[Node] = None
    clause: Optional[Node] = None
    namespace: bool = False
    type_only: bool = False


@dataclass
class ClassMember:
    """A class body member spanning its leading decorators and comments."""

    node: Node
    start_byte: int
    end_byte: int


@dataclass
class ClassInfo:
    """A top-level class declaration and the decorators applied to it."""

    node: Node
    name: str
    decorators: List[Node]
    body: Node


class TypeScriptParser:
    """Parses TypeScript text with cached tree-sitter parsers."""

    def __init__(self) -> None:
        self._parsers: Dict[str, Parser] = {}

    def parse(
        self,
        text: str,
        *,
        path: Optional[str] = None,
        strict: bool = True,
    ) -> SourceTree:
        """Return the syntax tree for ``text``.

        In strict mode a tree containing syntax errors raises :class:`ParseError`
        pointing at the first problem.
        """
        source = text.encode("utf-8")
        parser = self._get_parser(_language_for_path(path))
        tree = parser.parse(source)
        parsed = SourceTree(source=source, tree=tree, path=path)
        if strict and tree.root_node.has_error:
            bad = first_error(tree.root_node)
            line = column = None
            if bad is not None:
                line = bad.start_point[0] + 1
                column = bad.start_point[1] + 1
            detail = "missing token" if bad is not None and bad.is_missing else "syntax error"
            raise ParseError(f"Unable to parse TypeScript source ({detail})", path=path, line=line, column=column)
        return parsed

    def _get_parser(self, language_key: str) -> Parser:
        parser = self._parsers.get(language_key)
        if parser is None:
            parser = Parser(Language(_LANGUAGES[language_key]()))
            self._parsers[language_key] = parser
        return parser


def _language_for_path(path: Optional[str]) -> str:
    if path is not None and path.lower().endswith(".tsx"):
        return "tsx"
    return "typescript"


def first_error(node: Node) -> Optional[Node]:
    """Depth-first search for the first ERROR or MISSING node."""
    if node.is_error or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found = first_error(child)
            if found is not None:
                return found
    return None


def string_value(parsed: SourceTree, node: Node) -> str:
    """Return the contents of a string literal node without its quotes."""
    raw = parsed.text(node)
    if len(raw) >= 2 and raw[0] in {'"', "'", "`"} and raw[-1] == raw[0]:
        return raw[1:-1]
    return raw


def iter_imports(parsed: SourceTree) -> Iterator[ImportInfo]:
    """Yield the top-level import statements in source order."""
    for child in parsed.root.children:
        if child.type != "import_statement":
            continue
        source_node = child.child_by_field_name("source")
        if source_node is None:
            # ``import x = require("...")`` has no module specifier we can extend
            continue
        info = ImportInfo(node=child, module=string_value(parsed, source_node))
        info.type_only = any(token.type == "type" for token in child.children)
        for part in child.children:
            if part.type == "import_clause":
                info.clause = part
                _read_import_clause(parsed, part, info)
        yield info


def _read_import_clause(parsed: SourceTree, clause: Node, info: ImportInfo) -> None:
    for part in clause.children:
        if part.type == "identifier":
            info.default_binding = parsed.text(part)
        elif part.type == "namespace_import":
            info.namespace = True
        elif part.type == "named_imports":
            info.named_imports = part
            for specifier in part.named_children:
                if specifier.type != "import_specifier":
                    continue
                name_node = specifier.child_by_field_name("name")
                if name_node is not None:
                    info.named_bindings.append(parsed.text(name_node))


def iter_classes(parsed: SourceTree) -> Iterator[ClassInfo]:
    """Yield top-level classes, exported or not, with all their decorators."""
    for child in parsed.root.children:
        if child.type in _CLASS_TYPES:
            info = _class_info(parsed, child, [])
        elif child.type == "export_statement":
            declaration = child.child_by_field_name("declaration")
            if declaration is None or declaration.type not in _CLASS_TYPES:
                continue
            outer = [node for node in child.children if node.type == "decorator"]
            info = _class_info(parsed, declaration, outer)
        else:
            continue
        if info is not None:
            yield info


def _class_info(parsed: SourceTree, node: Node, outer_decorators: List[Node]) -> Optional[ClassInfo]:
    name_node = node.child_by_field_name("name")
    body = node.child_by_field_name("body")
    if name_node is None or body is None:
        return None
    own = [child for child in node.children if child.type == "decorator"]
    return ClassInfo(node=node, name=parsed.text(name_node), decorators=outer_decorators + own, body=body)


def decorator_name(parsed: SourceTree, decorator: Node) -> Optional[str]:
    """Return ``Name`` for ``@Name`` or ``@Name(...)`` decorators."""
    expression = _decorator_expression(decorator)
    if expression is None:
        return None
    if expression.type == "call_expression":
        expression = expression.child_by_field_name("function")
        if expression is None:
            return None
    if expression.type in {"identifier", "member_expression"}:
        return parsed.text(expression)
    return None


def decorator_arguments(decorator: Node) -> List[Node]:
    """Return the argument expressions of a decorator call, comments excluded."""
    expression = _decorator_expression(decorator)
    if expression is None or expression.type != "call_expression":
        return []
    arguments = expression.child_by_field_name("arguments")
    if arguments is None:
        return []
    return [arg for arg in arguments.named_children if arg.type != "comment"]


def _decorator_expression(decorator: Node) -> Optional[Node]:
    for child in decorator.named_children:
        if child.type != "comment":
            return child
    return None


def find_decorator(parsed: SourceTree, decorators: List[Node], name: str) -> Optional[Node]:
    for decorator in decorators:
        if decorator_name(parsed, decorator) == name:
            return decorator
    return None


def class_members(body: Node) -> List[ClassMember]:
    """Group class body children into members.

    Decorators and comments directly above a member belong to it, so inserting
    before a member never separates it from its decorators or JSDoc.
    """
    members: List[ClassMember] = []
    pending_start: Optional[int] = None
    for child in body.children:
        if child.type in {"{", "}"}:
            continue
        if child.type in {"comment", "decorator"}:
            trailing = (
                child.type == "comment"
                and pending_start is None
                and members
                and child.start_point[0] == members[-1].node.end_point[0]
            )
            if trailing:
                members[-1].end_byte = child.end_byte
                continue
            if pending_start is None:
                pending_start = child.start_byte
            continue
        if child.type in {";", ","}:
            if members and pending_start is None:
                members[-1].end_byte = child.end_byte
            continue
        start = pending_start if pending_start is not None else child.start_byte
        members.append(ClassMember(node=child, start_byte=start, end_byte=child.end_byte))
        pending_start = None
    return members


def field_name(parsed: SourceTree, member: Node) -> Optional[str]:
    if member.type != "public_field_definition":
        return None
    name_node = member.child_by_field_name("name")
    return parsed.text(name_node) if name_node is not None else None


def constructors(parsed: SourceTree, body: Node) -> List[Node]:
    """Return constructor implementations (overload signatures excluded)."""
    found: List[Node] = []
    for child in body.children:
        if child.type != "method_definition":
            continue
        name_node = child.child_by_field_name("name")
        if name_node is not None and parsed.text(name_node) == "constructor":
            if child.child_by_field_name("body") is not None:
                found.append(child)
    return found


def line_start(source: bytes, offset: int) -> int:
    return source.rfind(b"\n", 0, offset) + 1


def indentation_at(source: bytes, offset: int) -> str:
    """Return the leading whitespace of the line holding ``offset``."""
    start = line_start(source, offset)
    cursor = start
    while cursor < len(source) and source[cursor : cursor + 1] in {b" ", b"\t"}:
        cursor += 1
    return source[start:cursor].decode("utf-8")


__all__ = [
    "ClassInfo",
    "ClassMember",
    "ImportInfo",
    "SourceTree",
    "TypeScriptParser",
    "class_members",
    "constructors",
    "decorator_arguments",
    "decorator_name",
    "field_name",
    "find_decorator",
    "first_error",
    "indentation_at",
    "iter_classes",
    "iter_imports",
    "line_start",
    "string_value",
]
