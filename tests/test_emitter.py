"""
tests/test_emitter.py
Unit tests for oastypes.emitter (primary artifact production).

Tests cover:
- Enum declarations and the content-hash constant appended after the tree
- Hoisted enums replacing inline unions at their use site
- Ambient rendering for declaration files
- Identifier collisions between hoisted enums and top-level names
"""

from __future__ import annotations

from typing import Any, Dict

import pytest

from oastypes.declarations import ConstDeclaration, EnumDeclaration
from oastypes.emitter import HASH_CONSTANT_NAME, DeclarationEmitter
from oastypes.errors import IdentifierCollisionError
from oastypes.hashing import compute_content_hash, extract_embedded_hash

DIGEST: str = "0123456789abcdef" * 4


class TestDeclarationEmitter:

    def test_statement_order(self, petstore: Dict[str, Any]) -> None:
        result = DeclarationEmitter().emit(petstore, DIGEST)
        names = result.module.top_level_names()
        assert names == [
            "paths", "webhooks", "components", "$defs", "operations", "PetStatus", HASH_CONSTANT_NAME,
        ]
        assert isinstance(result.module.statements[-2], EnumDeclaration)
        assert isinstance(result.module.statements[-1], ConstDeclaration)

    def test_enum_is_hoisted(self, petstore: Dict[str, Any]) -> None:
        result = DeclarationEmitter().emit(petstore, DIGEST)
        assert result.enums.names() == ["PetStatus"]
        assert "    PetStatus: PetStatus;" in result.text
        assert (
            "/**\n"
            " * Adoption status\n"
            " */\n"
            "export enum PetStatus {\n"
            '  "available" = "available",\n'
            '  "pending" = "pending",\n'
            '  "sold" = "sold"\n'
            "}\n"
        ) in result.text

    def test_hash_constant_is_last_line(self, petstore: Dict[str, Any]) -> None:
        result = DeclarationEmitter().emit(petstore, DIGEST)
        assert result.text.endswith(f'export const contentHash = "{DIGEST}";\n')
        assert extract_embedded_hash(result.text) == DIGEST

    def test_round_trip_with_real_hash(self, petstore: Dict[str, Any]) -> None:
        digest = compute_content_hash(petstore, "1.0.0")
        text = DeclarationEmitter().emit(petstore, digest).text
        assert extract_embedded_hash(text) == digest

    def test_ambient(self, petstore: Dict[str, Any]) -> None:
        text = DeclarationEmitter(ambient=True).emit(petstore, DIGEST).text
        assert "export declare enum PetStatus {" in text
        assert f'export declare const contentHash = "{DIGEST}";' in text
        assert extract_embedded_hash(text) == DIGEST

    def test_no_enums(self) -> None:
        result = DeclarationEmitter().emit({"openapi": "3.0.0"}, DIGEST)
        assert len(result.enums) == 0
        assert "enum " not in result.text

    def test_property_enum_hoisted(self) -> None:
        doc = {
            "components": {
                "schemas": {
                    "Pet": {
                        "type": "object",
                        "properties": {"kind": {"title": "kind", "enum": ["cat", "dog"]}},
                    },
                },
            },
        }
        result = DeclarationEmitter().emit(doc, DIGEST)
        assert "kind?: kind;" in result.text
        assert "export enum kind {" in result.text

    def test_enum_shadowing_top_level_name(self) -> None:
        doc = {"components": {"schemas": {"paths": {"title": "paths", "enum": ["a"]}}}}
        with pytest.raises(IdentifierCollisionError) as exc_info:
            DeclarationEmitter().emit(doc, DIGEST)
        assert exc_info.value.identifier == "paths"

    def test_enum_shadowing_hash_constant(self) -> None:
        doc = {"components": {"schemas": {"contentHash": {"title": "contentHash", "enum": ["a"]}}}}
        with pytest.raises(IdentifierCollisionError):
            DeclarationEmitter().emit(doc, DIGEST)

    def test_enums_cleaning_to_same_identifier(self) -> None:
        doc = {
            "components": {
                "schemas": {
                    "Foo-Bar": {"title": "Foo-Bar", "enum": ["a"]},
                    "Foo.Bar": {"title": "Foo.Bar", "enum": ["b"]},
                },
            },
        }
        with pytest.raises(IdentifierCollisionError) as exc_info:
            DeclarationEmitter().emit(doc, DIGEST)
        assert {exc_info.value.first, exc_info.value.second} == {"Foo-Bar", "Foo.Bar"}
