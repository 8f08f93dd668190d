# File: oastypes/translator.py
"""
oastypes - Schema-to-Types Engine
==================================

Translates a parsed OpenAPI document into a ``DeclarationModule``:

    export interface paths       { "/pets/{id}": { get: operations["getPet"] } }
    export interface webhooks    { ... }                      (OpenAPI 3.1)
    export interface components  { schemas; responses; parameters;
                                   requestBodies; headers; pathItems }
    export type $defs = Record<string, never>;
    export interface operations  { getPet: { parameters; requestBody; responses } }

Every schema node visited is first offered to the optional ``transform``
hook (``transform(schema, TransformMetadata(path=<json pointer>))``); a
non-``None`` return value is emitted verbatim as a type reference instead of
the default translation.

Only local ``$ref`` pointers (``#/...``) are supported. The document is not
validated against the OpenAPI specification; structural problems that make
translation impossible raise ``TranslationError``.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from oastypes.declarations import (
    EMPTY_RECORD,
    NEVER,
    NULL,
    UNKNOWN,
    ArrayType,
    DeclarationModule,
    InterfaceDeclaration,
    Keyword,
    LiteralType,
    PropertySignature,
    TypeAliasDeclaration,
    TypeLiteral,
    TypeNode,
    TypeReference,
    make_intersection,
    make_union,
)
from oastypes.errors import TranslationError
from oastypes.models import TransformMetadata
from oastypes.utils import join_pointer, split_pointer, ts_string

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("oastypes.translator")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

Transform = Callable[[Mapping[str, Any], TransformMetadata], Optional[str]]

HTTP_METHODS: Tuple[str, ...] = (
    "get", "put", "post", "delete", "options", "head", "patch", "trace",
)
PARAMETER_LOCATIONS: Tuple[str, ...] = ("query", "header", "path", "cookie")
COMPONENT_SECTIONS: Tuple[str, ...] = (
    "schemas",
    "responses",
    "parameters",
    "requestBodies",
    "headers",
    "pathItems",
)
PRIMITIVE_TYPES: Dict[str, Keyword] = {
    "string": Keyword("string"),
    "integer": Keyword("number"),
    "number": Keyword("number"),
    "boolean": Keyword("boolean"),
    "null": NULL,
}
MODULE_HEADER: Tuple[str, ...] = (
    "This file was auto-generated by oastypes.",
    "Do not make direct changes to the file.",
)

_Scalar = (str, int, float, bool, type(None))


# ---------------------------------------------------------------------------
# Documentation helpers
# ---------------------------------------------------------------------------


def _json_text(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, default=str)


def schema_doc(schema: Any) -> List[str]:
    """JSDoc lines for a schema, parameter, header or response object."""
    if not isinstance(schema, Mapping):
        return []
    lines: List[str] = []
    description: Any = schema.get("description")
    if isinstance(description, str) and description.strip():
        desc_lines: List[str] = description.strip().splitlines()
        lines.append(f"@description {desc_lines[0]}")
        lines.extend(desc_lines[1:])
    if schema.get("deprecated") is True:
        lines.append("@deprecated")
    if "default" in schema:
        lines.append(f"@default {_json_text(schema['default'])}")
    fmt: Any = schema.get("format")
    if isinstance(fmt, str):
        lines.append(f"@format {fmt}")
    if "example" in schema:
        lines.append(f"@example {_json_text(schema['example'])}")
    return lines


def operation_doc(operation: Mapping[str, Any]) -> List[str]:
    lines: List[str] = []
    summary: Any = operation.get("summary")
    if isinstance(summary, str) and summary.strip():
        lines.extend(summary.strip().splitlines())
    description: Any = operation.get("description")
    if isinstance(description, str) and description.strip():
        desc_lines: List[str] = description.strip().splitlines()
        lines.append(f"@description {desc_lines[0]}")
        lines.extend(desc_lines[1:])
    if operation.get("deprecated") is True:
        lines.append("@deprecated")
    return lines


# ---------------------------------------------------------------------------
# Translator
# ---------------------------------------------------------------------------


class SchemaTranslator:
    """
    One-shot translator for a single document.

    Usage::

        module = SchemaTranslator(document, transform=hook).translate()
        print(module.render())
    """

    def __init__(
        self,
        document: Mapping[str, Any],
        *,
        transform: Optional[Transform] = None,
    ) -> None:
        if not isinstance(document, Mapping):
            raise TranslationError(
                f"OpenAPI document must be an object, got {type(document).__name__}"
            )
        self._document: Mapping[str, Any] = document
        self._transform: Optional[Transform] = transform
        self._operations: Dict[str, PropertySignature] = {}

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def translate(self) -> DeclarationModule:
        module: DeclarationModule = DeclarationModule(header=list(MODULE_HEADER))

        module.append(self._path_section("paths"))
        module.append(self._path_section("webhooks"))
        module.append(InterfaceDeclaration("components", self._components()))
        module.append(TypeAliasDeclaration("$defs", EMPTY_RECORD))

        operations: TypeLiteral = TypeLiteral(list(self._operations.values()))
        if operations.is_empty():
            module.append(TypeAliasDeclaration("operations", EMPTY_RECORD))
        else:
            module.append(InterfaceDeclaration("operations", operations))

        logger.info(
            "Translated document: %d path(s), %d operation(s).",
            len(self._mapping(self._document.get("paths"), "#/paths")),
            len(self._operations),
        )
        return module

    def schema_type(self, schema: Any, pointer: str) -> TypeNode:
        """Translate the schema found at JSON pointer *pointer*."""
        if isinstance(schema, bool):
            return UNKNOWN if schema else NEVER
        if not isinstance(schema, Mapping):
            raise TranslationError(
                f"Schema at {pointer} must be an object, got {type(schema).__name__}"
            )

        if self._transform is not None:
            token: Optional[str] = self._transform(schema, TransformMetadata(path=pointer))
            if token:
                return TypeReference(token)

        if "$ref" in schema:
            node: TypeNode = self.reference_type(schema["$ref"], pointer)
        else:
            node = self._schema_body(schema, pointer)

        if schema.get("nullable") is True:
            node = make_union([node, NULL])
        return node

    def reference_type(self, ref: Any, pointer: str) -> TypeReference:
        """``#/components/schemas/Pet`` → ``components["schemas"]["Pet"]``."""
        segments: List[str] = self._local_segments(ref, pointer)
        head: str = segments[0]
        indexed: List[str] = []
        for position, segment in enumerate(segments[1:], start=1):
            # properties of a component schema are indexed directly by name
            if segment == "properties" and position >= 3:
                continue
            indexed.append(f"[{ts_string(segment)}]")
        return TypeReference(head + "".join(indexed))

    # -----------------------------------------------------------------
    # Schemas
    # -----------------------------------------------------------------

    def _schema_body(self, schema: Mapping[str, Any], pointer: str) -> TypeNode:
        if "const" in schema:
            value: Any = schema["const"]
            return LiteralType(value) if isinstance(value, _Scalar) else UNKNOWN

        values: Any = schema.get("enum")
        if isinstance(values, list):
            literals: List[TypeNode] = [
                LiteralType(v) for v in values if isinstance(v, _Scalar)
            ]
            return make_union(literals)

        composed: List[TypeNode] = []
        all_of: List[Any] = self._list(schema.get("allOf"), join_pointer(pointer, "allOf"))
        if all_of:
            composed.append(make_intersection([
                self.schema_type(part, join_pointer(pointer, "allOf", i))
                for i, part in enumerate(all_of)
            ]))
        for keyword in ("oneOf", "anyOf"):
            variants: List[Any] = self._list(schema.get(keyword), join_pointer(pointer, keyword))
            if variants:
                composed.append(make_union([
                    self.schema_type(part, join_pointer(pointer, keyword, i))
                    for i, part in enumerate(variants)
                ]))

        base: Optional[TypeNode] = self._typed(schema, pointer)
        if composed:
            parts: List[TypeNode] = [base, *composed] if base is not None else composed
            return make_intersection(parts)
        return base if base is not None else UNKNOWN

    def _typed(self, schema: Mapping[str, Any], pointer: str) -> Optional[TypeNode]:
        declared: Any = schema.get("type")
        if isinstance(declared, list):
            return make_union([self._single_type(t, schema, pointer) for t in declared])
        if isinstance(declared, str):
            return self._single_type(declared, schema, pointer)
        if declared is not None:
            raise TranslationError(f"Invalid 'type' at {pointer}: {declared!r}")
        if any(k in schema for k in ("properties", "additionalProperties", "required")):
            return self._object(schema, pointer)
        if "items" in schema:
            return self._array(schema, pointer)
        return None

    def _single_type(self, declared: Any, schema: Mapping[str, Any], pointer: str) -> TypeNode:
        if declared == "object":
            return self._object(schema, pointer)
        if declared == "array":
            return self._array(schema, pointer)
        if isinstance(declared, str) and declared in PRIMITIVE_TYPES:
            return PRIMITIVE_TYPES[declared]
        logger.warning("Unsupported type %r at %s; emitting unknown.", declared, pointer)
        return UNKNOWN

    def _array(self, schema: Mapping[str, Any], pointer: str) -> TypeNode:
        if "items" not in schema:
            return ArrayType(UNKNOWN)
        return ArrayType(self.schema_type(schema["items"], join_pointer(pointer, "items")))

    def _object(self, schema: Mapping[str, Any], pointer: str) -> TypeLiteral:
        properties: Mapping[str, Any] = self._mapping(
            schema.get("properties"), join_pointer(pointer, "properties")
        )
        required: List[Any] = self._list(schema.get("required"), join_pointer(pointer, "required"))

        literal: TypeLiteral = TypeLiteral()
        for name, prop in properties.items():
            literal.members.append(PropertySignature(
                name=str(name),
                type=self.schema_type(prop, join_pointer(pointer, "properties", name)),
                optional=name not in required,
                doc=schema_doc(prop),
            ))

        additional: Any = schema.get("additionalProperties")
        if additional is True or (isinstance(additional, Mapping) and not additional):
            literal.index_signature = UNKNOWN
        elif isinstance(additional, Mapping):
            literal.index_signature = self.schema_type(
                additional, join_pointer(pointer, "additionalProperties")
            )
        return literal

    # -----------------------------------------------------------------
    # Components
    # -----------------------------------------------------------------

    def _components(self) -> TypeLiteral:
        components: Mapping[str, Any] = self._mapping(
            self._document.get("components"), "#/components"
        )
        literal: TypeLiteral = TypeLiteral()
        for section in COMPONENT_SECTIONS:
            base: str = join_pointer("#/components", section)
            entries: Mapping[str, Any] = self._mapping(components.get(section), base)
            body: TypeLiteral = TypeLiteral()
            for name, value in entries.items():
                pointer: str = join_pointer(base, name)
                body.members.append(PropertySignature(
                    name=str(name),
                    type=self._component_entry(section, value, pointer),
                    doc=schema_doc(value),
                ))
            literal.members.append(
                PropertySignature(section, NEVER if body.is_empty() else body)
            )
        return literal

    def _component_entry(self, section: str, value: Any, pointer: str) -> TypeNode:
        if section == "schemas":
            return self.schema_type(value, pointer)
        if isinstance(value, Mapping) and "$ref" in value:
            return self.reference_type(value["$ref"], pointer)
        if section == "responses":
            return self._response(value, pointer)
        if section == "parameters" or section == "headers":
            return self._parameter_value(value, pointer)
        if section == "requestBodies":
            return self._request_body(value, pointer)[0]
        return self._path_item(value, pointer)

    # -----------------------------------------------------------------
    # Paths & operations
    # -----------------------------------------------------------------

    def _path_section(
        self, section: str
    ) -> Union[InterfaceDeclaration, TypeAliasDeclaration]:
        base: str = f"#/{section}"
        items: Mapping[str, Any] = self._mapping(self._document.get(section), base)
        literal: TypeLiteral = TypeLiteral()
        for url, item in items.items():
            literal.members.append(PropertySignature(
                name=str(url),
                type=self._path_item(item, join_pointer(base, url)),
            ))
        if literal.is_empty():
            return TypeAliasDeclaration(section, EMPTY_RECORD)
        return InterfaceDeclaration(section, literal)

    def _path_item(self, item: Any, pointer: str) -> TypeNode:
        path_item: Mapping[str, Any] = self._mapping(item, pointer)
        if "$ref" in path_item:
            return self.reference_type(path_item["$ref"], pointer)

        shared: List[Tuple[Any, str]] = self._indexed(
            path_item.get("parameters"), join_pointer(pointer, "parameters")
        )
        literal: TypeLiteral = TypeLiteral()
        for method in HTTP_METHODS:
            if method not in path_item:
                continue
            op_pointer: str = join_pointer(pointer, method)
            operation: Mapping[str, Any] = self._mapping(path_item[method], op_pointer)
            body: TypeLiteral = self._operation(operation, op_pointer, shared)
            literal.members.append(self._register_operation(method, operation, body, op_pointer))

        params: TypeLiteral = self._parameters(shared)
        if not params.is_empty():
            literal.members.append(PropertySignature("parameters", params))
        return literal

    def _register_operation(
        self,
        method: str,
        operation: Mapping[str, Any],
        body: TypeLiteral,
        pointer: str,
    ) -> PropertySignature:
        doc: List[str] = operation_doc(operation)
        operation_id: Any = operation.get("operationId")
        if isinstance(operation_id, str) and operation_id:
            if operation_id not in self._operations:
                self._operations[operation_id] = PropertySignature(operation_id, body, doc=doc)
                return PropertySignature(
                    method, TypeReference(f"operations[{ts_string(operation_id)}]"), doc=doc
                )
            logger.warning(
                "Duplicate operationId %r at %s; inlining the operation.",
                operation_id,
                pointer,
            )
        return PropertySignature(method, body, doc=doc)

    def _operation(
        self,
        operation: Mapping[str, Any],
        pointer: str,
        shared: List[Tuple[Any, str]],
    ) -> TypeLiteral:
        literal: TypeLiteral = TypeLiteral()

        own: List[Tuple[Any, str]] = self._indexed(
            operation.get("parameters"), join_pointer(pointer, "parameters")
        )
        params: TypeLiteral = self._parameters([*shared, *own])
        if not params.is_empty():
            literal.members.append(PropertySignature("parameters", params))

        if "requestBody" in operation:
            body_pointer: str = join_pointer(pointer, "requestBody")
            request_body: Any = operation["requestBody"]
            if isinstance(request_body, Mapping) and "$ref" in request_body:
                target: Mapping[str, Any] = self._resolve_local(request_body["$ref"], body_pointer)
                literal.members.append(PropertySignature(
                    "requestBody",
                    self.reference_type(request_body["$ref"], body_pointer),
                    optional=target.get("required") is not True,
                ))
            else:
                node, required = self._request_body(request_body, body_pointer)
                literal.members.append(PropertySignature(
                    "requestBody", node, optional=not required, doc=schema_doc(request_body)
                ))

        literal.members.append(PropertySignature(
            "responses",
            self._responses(operation.get("responses"), join_pointer(pointer, "responses")),
        ))
        return literal

    def _parameters(self, entries: List[Tuple[Any, str]]) -> TypeLiteral:
        """
        Group ``(parameter, pointer)`` pairs by location. A later entry with
        the same ``(in, name)`` replaces an earlier one, so operation-level
        parameters listed after path-level ones override them.
        """
        merged: Dict[Tuple[str, str], Tuple[PropertySignature, bool]] = {}
        for param, param_pointer in entries:
            location, signature, required = self._parameter(param, param_pointer)
            merged[(location, signature.name)] = (signature, required)

        literal: TypeLiteral = TypeLiteral()
        for location in PARAMETER_LOCATIONS:
            group: TypeLiteral = TypeLiteral()
            any_required: bool = False
            for (loc, _name), (signature, required) in merged.items():
                if loc != location:
                    continue
                group.members.append(signature)
                any_required = any_required or required
            if not group.is_empty():
                literal.members.append(
                    PropertySignature(location, group, optional=not any_required)
                )
        return literal

    def _parameter(self, param: Any, pointer: str) -> Tuple[str, PropertySignature, bool]:
        param_map: Mapping[str, Any] = self._mapping(param, pointer)
        if "$ref" in param_map:
            target: Mapping[str, Any] = self._resolve_local(param_map["$ref"], pointer)
            type_node: TypeNode = self.reference_type(param_map["$ref"], pointer)
        else:
            target = param_map
            type_node = self._parameter_value(param_map, pointer)

        location: Any = target.get("in")
        name: Any = target.get("name")
        if location not in PARAMETER_LOCATIONS or not isinstance(name, str):
            raise TranslationError(
                f"Parameter at {pointer} needs a string 'name' and 'in' "
                f"of {', '.join(PARAMETER_LOCATIONS)}"
            )
        required: bool = target.get("required") is True or location == "path"
        signature: PropertySignature = PropertySignature(
            name=name, type=type_node, optional=not required, doc=schema_doc(target)
        )
        return location, signature, required

    def _parameter_value(self, value: Any, pointer: str) -> TypeNode:
        """Value type of a parameter or header object (its schema or content)."""
        param: Mapping[str, Any] = self._mapping(value, pointer)
        if "schema" in param:
            return self.schema_type(param["schema"], join_pointer(pointer, "schema"))
        if "content" in param:
            content: TypeNode = self._content(param["content"], join_pointer(pointer, "content"))
            if isinstance(content, TypeLiteral) and content.members:
                return content.members[0].type
        return UNKNOWN

    def _request_body(self, value: Any, pointer: str) -> Tuple[TypeNode, bool]:
        body: Mapping[str, Any] = self._mapping(value, pointer)
        literal: TypeLiteral = TypeLiteral([
            PropertySignature("content", self._content(body.get("content"), join_pointer(pointer, "content")))
        ])
        return literal, body.get("required") is True

    def _responses(self, responses: Any, pointer: str) -> TypeNode:
        entries: Mapping[str, Any] = self._mapping(responses, pointer)
        literal: TypeLiteral = TypeLiteral()
        for code, response in entries.items():
            response_pointer: str = join_pointer(pointer, code)
            if isinstance(response, Mapping) and "$ref" in response:
                node: TypeNode = self.reference_type(response["$ref"], response_pointer)
            else:
                node = self._response(response, response_pointer)
            literal.members.append(
                PropertySignature(str(code), node, doc=schema_doc(response))
            )
        return NEVER if literal.is_empty() else literal

    def _response(self, value: Any, pointer: str) -> TypeLiteral:
        response: Mapping[str, Any] = self._mapping(value, pointer)
        literal: TypeLiteral = TypeLiteral()

        headers: Mapping[str, Any] = self._mapping(
            response.get("headers"), join_pointer(pointer, "headers")
        )
        if headers:
            header_literal: TypeLiteral = TypeLiteral()
            for name, header in headers.items():
                header_pointer: str = join_pointer(pointer, "headers", name)
                if isinstance(header, Mapping) and "$ref" in header:
                    header_type: TypeNode = self.reference_type(header["$ref"], header_pointer)
                else:
                    header_type = self._parameter_value(header, header_pointer)
                required: bool = isinstance(header, Mapping) and header.get("required") is True
                header_literal.members.append(PropertySignature(
                    str(name), header_type, optional=not required, doc=schema_doc(header)
                ))
            header_literal.index_signature = UNKNOWN
            literal.members.append(PropertySignature("headers", header_literal))

        literal.members.append(PropertySignature(
            "content", self._content(response.get("content"), join_pointer(pointer, "content"))
        ))
        return literal

    def _content(self, content: Any, pointer: str) -> TypeNode:
        media_types: Mapping[str, Any] = self._mapping(content, pointer)
        literal: TypeLiteral = TypeLiteral()
        for mime, media in media_types.items():
            media_pointer: str = join_pointer(pointer, mime)
            media_map: Mapping[str, Any] = self._mapping(media, media_pointer)
            if "schema" in media_map:
                node: TypeNode = self.schema_type(
                    media_map["schema"], join_pointer(media_pointer, "schema")
                )
            else:
                node = UNKNOWN
            literal.members.append(PropertySignature(str(mime), node))
        return NEVER if literal.is_empty() else literal

    # -----------------------------------------------------------------
    # Structural helpers
    # -----------------------------------------------------------------

    @staticmethod
    def _mapping(value: Any, pointer: str) -> Mapping[str, Any]:
        if value is None:
            return {}
        if not isinstance(value, Mapping):
            raise TranslationError(
                f"Expected an object at {pointer}, got {type(value).__name__}"
            )
        return value

    @staticmethod
    def _list(value: Any, pointer: str) -> List[Any]:
        if value is None:
            return []
        if not isinstance(value, list):
            raise TranslationError(
                f"Expected an array at {pointer}, got {type(value).__name__}"
            )
        return value

    def _indexed(self, value: Any, pointer: str) -> List[Tuple[Any, str]]:
        """Pair each array item with its own pointer."""
        return [
            (item, join_pointer(pointer, index))
            for index, item in enumerate(self._list(value, pointer))
        ]

    def _local_segments(self, ref: Any, pointer: str) -> List[str]:
        if not isinstance(ref, str):
            raise TranslationError(f"$ref at {pointer} must be a string, got {ref!r}")
        if not ref.startswith("#"):
            raise TranslationError(
                f"External reference {ref!r} at {pointer} is not supported"
            )
        segments: List[str] = split_pointer(ref)
        if not segments:
            raise TranslationError(f"$ref at {pointer} points at the document root")
        return segments

    def _resolve_local(self, ref: Any, pointer: str) -> Mapping[str, Any]:
        node: Any = self._document
        for segment in self._local_segments(ref, pointer):
            if isinstance(node, Mapping) and segment in node:
                node = node[segment]
            elif isinstance(node, list) and segment.isdigit() and int(segment) < len(node):
                node = node[int(segment)]
            else:
                raise TranslationError(f"Unresolvable $ref {ref!r} at {pointer}")
        if not isinstance(node, Mapping):
            raise TranslationError(f"$ref {ref!r} at {pointer} does not point at an object")
        return node


# ---------------------------------------------------------------------------
# Convenience wrapper
# ---------------------------------------------------------------------------


def translate_document(
    document: Mapping[str, Any],
    *,
    transform: Optional[Transform] = None,
) -> DeclarationModule:
    """Translate *document* in one call."""
    return SchemaTranslator(document, transform=transform).translate()


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "Transform",
    "HTTP_METHODS",
    "PARAMETER_LOCATIONS",
    "COMPONENT_SECTIONS",
    "SchemaTranslator",
    "schema_doc",
    "operation_doc",
    "translate_document",
]

logger.debug("oastypes.translator loaded.")
