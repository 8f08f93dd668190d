"""
tests/test_sources.py
Unit tests for oastypes.sources (the schema source resolver).

Tests cover:
- JSON / YAML parsing and rejection of non-documents
- Path, command and URL sources individually
- Ordered fallback across sources and the exhaustion diagnostic
- The URL timeout bound against a server that never answers
"""

from __future__ import annotations

import logging
import pathlib
import socket
import time
from typing import Any, Dict, Iterator, List

import httpx
import pytest

from oastypes.errors import (
    SchemaInvalidError,
    SourcesExhaustedError,
    SourceUnavailableError,
)
from oastypes.models import CommandSource, PathSource, UrlSource
from oastypes.sources import SchemaSourceResolver, parse_document, resolve_schema


def _json_transport(payload: Any, status_code: int = 200) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json=payload)

    return httpx.MockTransport(handler)


# ===========================================================================
# parse_document
# ===========================================================================


class TestParseDocument:

    def test_json(self) -> None:
        assert parse_document('{"openapi": "3.0.0"}') == {"openapi": "3.0.0"}

    def test_yaml(self) -> None:
        doc = parse_document("openapi: 3.1.0\ninfo:\n  title: Demo\n")
        assert doc["info"] == {"title": "Demo"}

    def test_bytes_with_bom(self) -> None:
        raw = "\ufeff{\"openapi\": \"3.0.0\"}".encode("utf-8")
        assert parse_document(raw) == {"openapi": "3.0.0"}

    @pytest.mark.parametrize("raw", ["", "   \n", b""])
    def test_empty_is_invalid(self, raw: Any) -> None:
        with pytest.raises(SchemaInvalidError, match="empty"):
            parse_document(raw)

    @pytest.mark.parametrize("raw", ["[1, 2]", "just text", "42"])
    def test_non_mapping_is_invalid(self, raw: str) -> None:
        with pytest.raises(SchemaInvalidError, match="object at the top level"):
            parse_document(raw)

    def test_broken_yaml_is_invalid(self) -> None:
        with pytest.raises(SchemaInvalidError, match="neither JSON nor YAML"):
            parse_document("key: [unclosed")

    def test_invalid_utf8(self) -> None:
        with pytest.raises(SchemaInvalidError, match="UTF-8"):
            parse_document(b"\xff\xfe\xfa")


# ===========================================================================
# Individual sources
# ===========================================================================


class TestPathSource:

    def test_json_file(self, petstore_json_path: pathlib.Path, petstore: Dict[str, Any]) -> None:
        doc = SchemaSourceResolver([]).load(PathSource(path=petstore_json_path))
        assert doc == petstore

    def test_yaml_file(self, petstore_yaml_path: pathlib.Path) -> None:
        doc = SchemaSourceResolver([]).load(PathSource(path=petstore_yaml_path))
        assert list(doc["components"]["schemas"]) == ["Pet", "NewPet", "PetStatus", "Pet-List"]

    def test_missing_file(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(SourceUnavailableError, match="cannot read"):
            SchemaSourceResolver([]).load(PathSource(path=tmp_path / "missing.json"))

    def test_unparseable_file(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")
        with pytest.raises(SchemaInvalidError):
            SchemaSourceResolver([]).load(PathSource(path=path))


class TestCommandSource:

    def test_echo(self) -> None:
        doc = SchemaSourceResolver([]).load(CommandSource(command="echo {}"))
        assert doc == {}

    def test_runs_in_cwd(self, tmp_path: pathlib.Path) -> None:
        (tmp_path / "openapi.json").write_text('{"openapi": "3.0.0"}', encoding="utf-8")
        doc = SchemaSourceResolver([]).load(CommandSource(command="cat openapi.json", cwd=tmp_path))
        assert doc == {"openapi": "3.0.0"}

    def test_non_zero_exit(self) -> None:
        with pytest.raises(SourceUnavailableError, match="status 3"):
            SchemaSourceResolver([]).load(CommandSource(command="exit 3"))

    def test_empty_output(self) -> None:
        with pytest.raises(SchemaInvalidError, match="empty"):
            SchemaSourceResolver([]).load(CommandSource(command="true"))

    def test_missing_cwd(self, tmp_path: pathlib.Path) -> None:
        source = CommandSource(command="echo {}", cwd=tmp_path / "nope")
        with pytest.raises(SourceUnavailableError, match="cannot run command"):
            SchemaSourceResolver([]).load(source)


class TestUrlSource:

    def test_json_response(self, petstore: Dict[str, Any]) -> None:
        resolver = SchemaSourceResolver([], transport=_json_transport(petstore))
        doc = resolver.load(UrlSource(url="http://api.test/openapi.json"))
        assert doc == petstore

    def test_yaml_response(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="openapi: 3.0.0\npaths: {}\n")

        resolver = SchemaSourceResolver([], transport=httpx.MockTransport(handler))
        doc = resolver.load(UrlSource(url="https://api.test/openapi.yaml"))
        assert doc == {"openapi": "3.0.0", "paths": {}}

    def test_request_is_a_get(self) -> None:
        seen: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={})

        SchemaSourceResolver([], transport=httpx.MockTransport(handler)).load(
            UrlSource(url="http://api.test/schema")
        )
        assert [r.method for r in seen] == ["GET"]
        assert str(seen[0].url) == "http://api.test/schema"

    def test_non_2xx(self) -> None:
        resolver = SchemaSourceResolver([], transport=_json_transport({}, status_code=404))
        with pytest.raises(SourceUnavailableError, match="HTTP 404"):
            resolver.load(UrlSource(url="http://api.test/openapi.json"))

    def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        resolver = SchemaSourceResolver([], transport=httpx.MockTransport(handler))
        with pytest.raises(SourceUnavailableError, match="request failed"):
            resolver.load(UrlSource(url="http://api.test/openapi.json"))

    def test_timeout_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        resolver = SchemaSourceResolver([], transport=httpx.MockTransport(handler))
        with pytest.raises(SourceUnavailableError, match="timed out after 1500 ms"):
            resolver.load(UrlSource(url="http://api.test/openapi.json", timeout_ms=1500))


# ===========================================================================
# Never-responding server
# ===========================================================================


@pytest.fixture()
def silent_server() -> Iterator[str]:
    """A listening socket that accepts connections but never answers."""
    server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    server.bind(("127.0.0.1", 0))
    server.listen(8)
    host, port = server.getsockname()
    try:
        yield f"http://{host}:{port}/openapi.json"
    finally:
        server.close()


@pytest.fixture()
def no_proxy_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY", "http_proxy", "https_proxy", "all_proxy"):
        monkeypatch.delenv(name, raising=False)


class TestTimeout:

    @pytest.mark.usefixtures("no_proxy_env")
    def test_fails_after_configured_timeout(self, silent_server: str) -> None:
        source = UrlSource(url=silent_server, timeout_ms=250)
        start = time.perf_counter()
        with pytest.raises(SourceUnavailableError, match="timed out after 250 ms"):
            SchemaSourceResolver([]).load(source)
        elapsed = time.perf_counter() - start
        assert 0.2 <= elapsed < 5.0


# ===========================================================================
# Ordered fallback
# ===========================================================================


class TestResolver:

    def test_first_success_wins(self, petstore_json_path: pathlib.Path) -> None:
        sources = [PathSource(path=petstore_json_path), CommandSource(command="exit 1")]
        resolved = resolve_schema(sources)
        assert isinstance(resolved.source, PathSource)
        assert resolved.attempts == ()

    def test_missing_path_falls_back_to_command(self, tmp_path: pathlib.Path) -> None:
        sources = [
            PathSource(path=tmp_path / "missing.json"),
            CommandSource(command="echo {}"),
        ]
        resolved = resolve_schema(sources)
        assert resolved.document == {}
        assert isinstance(resolved.source, CommandSource)
        assert len(resolved.attempts) == 1
        assert resolved.attempts[0].label.startswith("--oas-path")

    def test_invalid_document_falls_back(self, tmp_path: pathlib.Path) -> None:
        bad = tmp_path / "bad.json"
        bad.write_text("[]", encoding="utf-8")
        resolver = SchemaSourceResolver(
            [PathSource(path=bad), UrlSource(url="http://api.test/x")],
            transport=_json_transport({"openapi": "3.0.0"}),
        )
        resolved = resolver.resolve()
        assert resolved.document == {"openapi": "3.0.0"}
        assert isinstance(resolved.source, UrlSource)

    def test_order_is_respected(self, petstore_json_path: pathlib.Path) -> None:
        resolver = SchemaSourceResolver(
            [UrlSource(url="http://api.test/x"), PathSource(path=petstore_json_path)],
            transport=_json_transport({"from": "url"}),
        )
        assert resolver.resolve().document == {"from": "url"}

    def test_exhaustion_lists_every_attempt(self, tmp_path: pathlib.Path) -> None:
        sources = [
            PathSource(path=tmp_path / "missing.json"),
            CommandSource(command="exit 2"),
            UrlSource(url="http://api.test/openapi.json"),
        ]
        resolver = SchemaSourceResolver(sources, transport=_json_transport({}, status_code=500))
        with pytest.raises(SourcesExhaustedError) as exc_info:
            resolver.resolve()

        error = exc_info.value
        assert [label for label, _ in error.attempts] == [s.describe() for s in sources]
        message = str(error)
        assert "missing.json" in message
        assert "status 2" in message
        assert "HTTP 500" in message

    def test_failures_are_logged_as_warnings(
        self, tmp_path: pathlib.Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        sources = [PathSource(path=tmp_path / "missing.json"), CommandSource(command="echo {}")]
        with caplog.at_level(logging.WARNING, logger="oastypes.sources"):
            resolve_schema(sources)
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert "missing.json" in warnings[0].getMessage()
