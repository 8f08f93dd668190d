# File: oastypes/declarations.py
"""
oastypes - TypeScript Declaration Syntax Tree
==============================================

A deliberately small syntax tree covering exactly what the generator emits:

    DeclarationModule
    ├── InterfaceDeclaration   export interface components { ... }
    ├── TypeAliasDeclaration   export type webhooks = Record<string, never>;
    ├── EnumDeclaration        export enum Status { "a" = "a" }
    └── ConstDeclaration       export const contentHash = "...";

Type expressions (``TypeNode``) nest arbitrarily: keywords, literals,
references, arrays, unions, intersections and object type literals made of
``PropertySignature`` members.

The translator builds the tree, the flattener walks it, and ``render()``
turns it into source text. Rendering uses two-space indentation.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Set, Union

from oastypes.utils import indent_lines, ts_property_key, ts_string

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("oastypes.declarations")

_INDENT: str = "  "


# ---------------------------------------------------------------------------
# Type expressions
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class Keyword:
    """A built-in type keyword: string, number, boolean, null, unknown, never."""

    name: str


@dataclass(slots=True)
class LiteralType:
    """A literal type such as ``"open"``, ``42`` or ``true``."""

    value: Union[str, int, float, bool, None]


@dataclass(slots=True)
class TypeReference:
    """Verbatim reference text, e.g. ``components["schemas"]["Pet"]``."""

    text: str


@dataclass(slots=True)
class ArrayType:
    element: "TypeNode"


@dataclass(slots=True)
class UnionType:
    types: List["TypeNode"] = field(default_factory=list)


@dataclass(slots=True)
class IntersectionType:
    types: List["TypeNode"] = field(default_factory=list)


@dataclass(slots=True)
class PropertySignature:
    """One ``name?: type;`` member of an object type literal."""

    name: str
    type: "TypeNode"
    optional: bool = False
    doc: List[str] = field(default_factory=list)


@dataclass(slots=True)
class TypeLiteral:
    """An object type ``{ ... }`` with ordered members."""

    members: List[PropertySignature] = field(default_factory=list)
    index_signature: Optional["TypeNode"] = None

    def get_member(self, name: str) -> Optional[PropertySignature]:
        for member in self.members:
            if member.name == name:
                return member
        return None

    def member_names(self) -> List[str]:
        return [member.name for member in self.members]

    def is_empty(self) -> bool:
        return not self.members and self.index_signature is None


TypeNode = Union[
    Keyword,
    LiteralType,
    TypeReference,
    ArrayType,
    UnionType,
    IntersectionType,
    TypeLiteral,
]

NEVER: Keyword = Keyword("never")
UNKNOWN: Keyword = Keyword("unknown")
NULL: Keyword = Keyword("null")
EMPTY_RECORD: TypeReference = TypeReference("Record<string, never>")


# ---------------------------------------------------------------------------
# Type constructors that simplify trivially
# ---------------------------------------------------------------------------


def make_union(types: Sequence[TypeNode]) -> TypeNode:
    """
    Build a union, flattening nested unions and dropping exact duplicates.

    Duplicates are found by rendered text, so ``1`` and ``true`` stay
    distinct even though they compare equal in Python.
    """
    flat: List[TypeNode] = []
    seen: Set[str] = set()
    for item in types:
        members: Sequence[TypeNode] = item.types if isinstance(item, UnionType) else [item]
        for member in members:
            key: str = render_type(member)
            if key not in seen:
                seen.add(key)
                flat.append(member)
    if not flat:
        return NEVER
    if len(flat) == 1:
        return flat[0]
    return UnionType(flat)


def make_intersection(types: Sequence[TypeNode]) -> TypeNode:
    flat: List[TypeNode] = []
    for item in types:
        if isinstance(item, IntersectionType):
            flat.extend(item.types)
        else:
            flat.append(item)
    if not flat:
        return UNKNOWN
    if len(flat) == 1:
        return flat[0]
    return IntersectionType(flat)


# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class InterfaceDeclaration:
    name: str
    body: TypeLiteral = field(default_factory=TypeLiteral)
    exported: bool = True


@dataclass(slots=True)
class TypeAliasDeclaration:
    name: str
    type: TypeNode
    exported: bool = True


@dataclass(slots=True)
class EnumDeclaration:
    """A string enum whose member keys and values are the same literal."""

    name: str
    members: List[str] = field(default_factory=list)
    description: Optional[str] = None
    ambient: bool = False
    exported: bool = True


@dataclass(slots=True)
class ConstDeclaration:
    """A string constant, e.g. the embedded content hash."""

    name: str
    value: str
    ambient: bool = False
    exported: bool = True


Statement = Union[
    InterfaceDeclaration,
    TypeAliasDeclaration,
    EnumDeclaration,
    ConstDeclaration,
]


@dataclass(slots=True)
class DeclarationModule:
    """An ordered list of top-level statements plus a leading banner comment."""

    statements: List[Statement] = field(default_factory=list)
    header: List[str] = field(default_factory=list)

    def __iter__(self) -> Iterator[Statement]:
        return iter(self.statements)

    def append(self, statement: Statement) -> None:
        self.statements.append(statement)

    def find(self, name: str) -> Optional[Statement]:
        for statement in self.statements:
            if statement.name == name:
                return statement
        return None

    def top_level_names(self) -> List[str]:
        return [statement.name for statement in self.statements]

    def render(self) -> str:
        return render_module(self)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def render_doc(lines: Sequence[str], *, block: bool = False) -> List[str]:
    """Render JSDoc comment lines; one line stays on a single line unless *block*."""
    safe: List[str] = [line.replace("*/", "*\\/") for line in lines]
    if not safe:
        return []
    if len(safe) == 1 and not block:
        return [f"/** {safe[0]} */"]
    out: List[str] = ["/**"]
    out.extend(f" * {line}".rstrip() for line in safe)
    out.append(" */")
    return out


def render_literal(value: Union[str, int, float, bool, None]) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return ts_string(value)
    return json.dumps(value)


def _needs_parens(node: TypeNode, parent: str) -> bool:
    if parent == "array":
        return isinstance(node, (UnionType, IntersectionType))
    if parent == "intersection":
        return isinstance(node, UnionType)
    return False


def _render_operand(node: TypeNode, parent: str) -> str:
    text: str = render_type(node)
    if _needs_parens(node, parent):
        return f"({text})"
    return text


def render_type(node: TypeNode) -> str:
    """
    Render a type expression.

    Multi-line output (object literals) is indented relative to column 0;
    callers that nest it indent every continuation line.
    """
    if isinstance(node, Keyword):
        return node.name
    if isinstance(node, LiteralType):
        return render_literal(node.value)
    if isinstance(node, TypeReference):
        return node.text
    if isinstance(node, ArrayType):
        return f"{_render_operand(node.element, 'array')}[]"
    if isinstance(node, UnionType):
        return " | ".join(_render_operand(t, "union") for t in node.types)
    if isinstance(node, IntersectionType):
        return " & ".join(_render_operand(t, "intersection") for t in node.types)
    if isinstance(node, TypeLiteral):
        return "\n".join(_render_type_literal(node))
    raise TypeError(f"Unsupported type node: {type(node).__name__}")


def _render_type_literal(node: TypeLiteral) -> List[str]:
    if node.is_empty():
        return [EMPTY_RECORD.text]
    body: List[str] = []
    for member in node.members:
        body.extend(render_doc(member.doc))
        marker: str = "?" if member.optional else ""
        type_lines: List[str] = render_type(member.type).split("\n")
        first: str = f"{ts_property_key(member.name)}{marker}: {type_lines[0]}"
        if len(type_lines) == 1:
            body.append(f"{first};")
        else:
            body.append(first)
            body.extend(type_lines[1:-1])
            body.append(f"{type_lines[-1]};")
    if node.index_signature is not None:
        index_lines: List[str] = render_type(node.index_signature).split("\n")
        index_lines[0] = f"[key: string]: {index_lines[0]}"
        index_lines[-1] = f"{index_lines[-1]};"
        body.extend(index_lines)
    return ["{", *indent_lines(body), "}"]


def _export_prefix(exported: bool, ambient: bool = False) -> str:
    prefix: str = "export " if exported else ""
    if ambient:
        prefix += "declare "
    return prefix


def render_statement(statement: Statement) -> str:
    if isinstance(statement, InterfaceDeclaration):
        body: str = render_type(statement.body) if not statement.body.is_empty() else "{}"
        return f"{_export_prefix(statement.exported)}interface {statement.name} {body}"
    if isinstance(statement, TypeAliasDeclaration):
        return (
            f"{_export_prefix(statement.exported)}type {statement.name} = "
            f"{render_type(statement.type)};"
        )
    if isinstance(statement, EnumDeclaration):
        lines: List[str] = []
        if statement.description:
            lines.extend(render_doc(statement.description.splitlines() or [""], block=True))
        lines.append(
            f"{_export_prefix(statement.exported, statement.ambient)}"
            f"enum {statement.name} {{"
        )
        members: List[str] = [
            f"{_INDENT}{ts_string(value)} = {ts_string(value)}"
            for value in statement.members
        ]
        if members:
            lines.append(",\n".join(members))
        lines.append("}")
        return "\n".join(lines)
    if isinstance(statement, ConstDeclaration):
        return (
            f"{_export_prefix(statement.exported, statement.ambient)}"
            f"const {statement.name} = {ts_string(statement.value)};"
        )
    raise TypeError(f"Unsupported statement: {type(statement).__name__}")


def render_module(module: DeclarationModule) -> str:
    """Render a whole module; statements are separated by one blank line."""
    chunks: List[str] = []
    if module.header:
        chunks.append("\n".join(render_doc(module.header)))
    chunks.extend(render_statement(s) for s in module.statements)
    return "\n\n".join(chunks) + "\n"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "Keyword",
    "LiteralType",
    "TypeReference",
    "ArrayType",
    "UnionType",
    "IntersectionType",
    "PropertySignature",
    "TypeLiteral",
    "TypeNode",
    "NEVER",
    "UNKNOWN",
    "NULL",
    "EMPTY_RECORD",
    "make_union",
    "make_intersection",
    "InterfaceDeclaration",
    "TypeAliasDeclaration",
    "EnumDeclaration",
    "ConstDeclaration",
    "Statement",
    "DeclarationModule",
    "render_doc",
    "render_literal",
    "render_type",
    "render_statement",
    "render_module",
]

logger.debug("oastypes.declarations loaded.")
