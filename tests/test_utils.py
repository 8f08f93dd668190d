"""
tests/test_utils.py
Unit tests for oastypes.utils.

Tests cover:
- Identifier cleaning (shared by enums and schema re-exports)
- TypeScript key and string rendering
- JSON pointer escaping and splitting
- Staged file writes and tolerant reads
- Line counting and the Timer context manager
"""

from __future__ import annotations

import pathlib

import pytest

from oastypes.errors import InvalidIdentifierError
from oastypes.utils import (
    Timer,
    clean_identifier,
    count_lines,
    indent_lines,
    join_pointer,
    pointer_terminal_segment,
    read_text_or_none,
    sha256_hex,
    split_pointer,
    stage_file,
    ts_property_key,
    ts_single_quoted,
    ts_string,
)


class TestCleanIdentifier:

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("Pet", "Pet"),
            ("Foo-Bar", "FooBar"),
            ("Foo.Bar", "FooBar"),
            ("v1.Page[User]", "v1PageUser"),
            ("_2Fast", "Fast"),
            ("123abc", "abc"),
            ("snake_case_name", "snake_case_name"),
            ("with space", "withspace"),
        ],
    )
    def test_cleans(self, name: str, expected: str) -> None:
        assert clean_identifier(name) == expected

    @pytest.mark.parametrize("name", ["", "123", "--", "_9"])
    def test_nothing_left_raises(self, name: str) -> None:
        with pytest.raises(InvalidIdentifierError) as exc_info:
            clean_identifier(name)
        assert exc_info.value.name == name

    @pytest.mark.parametrize("name", ["default", "delete", "enum", "string", "-object"])
    def test_reserved_word_raises(self, name: str) -> None:
        with pytest.raises(InvalidIdentifierError, match="reserved word"):
            clean_identifier(name)

    def test_reserved_word_inside_name_is_fine(self) -> None:
        assert clean_identifier("DefaultSettings") == "DefaultSettings"
        assert clean_identifier("Default") == "Default"

    def test_result_starts_with_letter(self) -> None:
        assert clean_identifier("$$__1Status")[0].isalpha()


class TestTypeScriptText:

    def test_property_key_bare_identifier(self) -> None:
        assert ts_property_key("name") == "name"
        assert ts_property_key("$ref") == "$ref"

    def test_property_key_numeric(self) -> None:
        assert ts_property_key("200") == "200"

    def test_property_key_quoted(self) -> None:
        assert ts_property_key("application/json") == '"application/json"'
        assert ts_property_key("x-rate-limit") == '"x-rate-limit"'
        assert ts_property_key("/pets/{petId}") == '"/pets/{petId}"'
        assert ts_property_key("007") == '"007"'

    def test_string_escapes(self) -> None:
        assert ts_string('say "hi"') == '"say \\"hi\\""'
        assert ts_string("café") == '"café"'

    def test_single_quoted(self) -> None:
        assert ts_single_quoted("Pet") == "'Pet'"
        assert ts_single_quoted("it's") == "'it\\'s'"


class TestJsonPointer:

    def test_join_escapes_segments(self) -> None:
        assert join_pointer("#/paths", "/pets/{id}") == "#/paths/~1pets~1{id}"
        assert join_pointer("#/components", "schemas", "a~b") == "#/components/schemas/a~0b"

    def test_join_accepts_indices(self) -> None:
        assert join_pointer("#/x", "allOf", 0) == "#/x/allOf/0"

    def test_split_unescapes(self) -> None:
        assert split_pointer("#/paths/~1pets~1{id}") == ["paths", "/pets/{id}"]
        assert split_pointer("#/components/schemas/a~1b") == ["components", "schemas", "a/b"]

    def test_split_root(self) -> None:
        assert split_pointer("#") == []
        assert split_pointer("#/") == [""]

    def test_terminal_segment(self) -> None:
        assert pointer_terminal_segment("#/components/schemas/Status") == "Status"
        assert pointer_terminal_segment("#/components/schemas/a~1b") == "a/b"
        assert pointer_terminal_segment("#") == ""


class TestFileHelpers:

    def test_stage_file_writes_next_to_target(self, tmp_path: pathlib.Path) -> None:
        target = tmp_path / "types" / "openapi.ts"
        staged = stage_file(target, "export {};\n")
        assert staged.parent == target.parent
        assert staged.name.startswith(".openapi.ts.")
        assert staged.name.endswith(".tmp")
        assert staged.read_text(encoding="utf-8") == "export {};\n"
        assert not target.exists()

    def test_read_text_or_none(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "a.ts"
        assert read_text_or_none(path) is None
        path.write_text("x", encoding="utf-8")
        assert read_text_or_none(path) == "x"

    def test_read_text_or_none_undecodable(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "bin.ts"
        path.write_bytes(b"\xff\xfe\xfa")
        assert read_text_or_none(path) is None

    def test_read_text_or_none_directory(self, tmp_path: pathlib.Path) -> None:
        assert read_text_or_none(tmp_path) is None


class TestMetrics:

    @pytest.mark.parametrize(
        "content, expected",
        [("", 0), ("a", 1), ("a\n", 1), ("a\nb", 2), ("a\nb\n", 2)],
    )
    def test_count_lines(self, content: str, expected: int) -> None:
        assert count_lines(content) == expected

    def test_sha256_hex(self) -> None:
        digest = sha256_hex("abc")
        assert digest == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"

    def test_indent_lines_keeps_blank_lines(self) -> None:
        assert indent_lines(["a", "", "b"]) == ["  a", "", "  b"]
        assert indent_lines(["a"], level=2) == ["    a"]

    def test_timer(self) -> None:
        with Timer("noop") as t:
            pass
        assert t.elapsed >= 0.0
        assert "noop" in repr(t)
