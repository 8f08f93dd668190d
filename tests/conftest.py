"""
tests/conftest.py
Shared fixtures for the oastypes test suite.

No external mocking libraries are used; real file I/O is performed inside
temporary directories managed by pytest's tmp_path fixtures, URL sources go
through ``httpx.MockTransport``, and ``git`` is replaced with monkeypatch.
"""

from __future__ import annotations

import copy
import json
import logging
import pathlib
from typing import Any, Callable, Dict, Iterator

import pytest
import yaml

from oastypes.models import GenerationConfig


# ---------------------------------------------------------------------------
# Reference document
# ---------------------------------------------------------------------------

PETSTORE: Dict[str, Any] = {
    "openapi": "3.0.3",
    "info": {"title": "Petstore", "version": "1.0.0"},
    "paths": {
        "/pets": {
            "get": {
                "operationId": "listPets",
                "summary": "List all pets",
                "parameters": [
                    {"name": "limit", "in": "query", "schema": {"type": "integer"}},
                ],
                "responses": {
                    "200": {
                        "description": "A list of pets",
                        "content": {
                            "application/json": {
                                "schema": {
                                    "type": "array",
                                    "items": {"$ref": "#/components/schemas/Pet"},
                                },
                            },
                        },
                    },
                },
            },
            "post": {
                "operationId": "createPet",
                "requestBody": {
                    "required": True,
                    "content": {
                        "application/json": {
                            "schema": {"$ref": "#/components/schemas/NewPet"},
                        },
                    },
                },
                "responses": {"201": {"description": "Created"}},
            },
        },
        "/pets/{petId}": {
            "parameters": [
                {
                    "name": "petId",
                    "in": "path",
                    "required": True,
                    "schema": {"type": "string"},
                },
            ],
            "get": {
                "operationId": "showPetById",
                "responses": {
                    "200": {
                        "description": "Expected response",
                        "content": {
                            "application/json": {
                                "schema": {"$ref": "#/components/schemas/Pet"},
                            },
                        },
                    },
                },
            },
        },
    },
    "components": {
        "schemas": {
            "Pet": {
                "type": "object",
                "required": ["id", "name"],
                "properties": {
                    "id": {"type": "integer", "format": "int64"},
                    "name": {"type": "string"},
                    "status": {"$ref": "#/components/schemas/PetStatus"},
                    "tag": {"type": "string", "nullable": True},
                },
            },
            "NewPet": {
                "type": "object",
                "required": ["name"],
                "properties": {"name": {"type": "string"}},
            },
            "PetStatus": {
                "title": "PetStatus",
                "type": "string",
                "description": "Adoption status",
                "enum": ["available", "pending", "sold"],
            },
            "Pet-List": {
                "type": "array",
                "items": {"$ref": "#/components/schemas/Pet"},
            },
        },
    },
}


@pytest.fixture(autouse=True)
def _reset_oastypes_logger() -> Iterator[None]:
    """Undo the handler/propagation changes the CLI makes to the logger."""
    yield
    root_logger: logging.Logger = logging.getLogger("oastypes")
    root_logger.handlers.clear()
    root_logger.propagate = True
    root_logger.setLevel(logging.NOTSET)


# ---------------------------------------------------------------------------
# Document fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def petstore() -> Dict[str, Any]:
    """Return a deep copy so each test can mutate freely."""
    return copy.deepcopy(PETSTORE)


@pytest.fixture()
def petstore_json_path(petstore: Dict[str, Any], tmp_path: pathlib.Path) -> pathlib.Path:
    path = tmp_path / "openapi.json"
    path.write_text(json.dumps(petstore, indent=2), encoding="utf-8")
    return path


@pytest.fixture()
def petstore_yaml_path(petstore: Dict[str, Any], tmp_path: pathlib.Path) -> pathlib.Path:
    path = tmp_path / "openapi.yaml"
    with open(path, "w", encoding="utf-8") as fh:
        yaml.safe_dump(petstore, fh, default_flow_style=False, sort_keys=False)
    return path


@pytest.fixture()
def write_document(tmp_path: pathlib.Path) -> Callable[[Dict[str, Any], str], pathlib.Path]:
    """Factory: write any document as JSON under tmp_path."""

    def _write(document: Dict[str, Any], name: str = "doc.json") -> pathlib.Path:
        path = tmp_path / name
        path.write_text(json.dumps(document), encoding="utf-8")
        return path

    return _write


# ---------------------------------------------------------------------------
# Configuration fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def project_root(tmp_path: pathlib.Path) -> pathlib.Path:
    return tmp_path / "src"


@pytest.fixture()
def make_config(project_root: pathlib.Path) -> Callable[..., GenerationConfig]:
    """Factory: a ``GenerationConfig`` reading *document_path*, writing under tmp_path/src."""

    def _make(document_path: pathlib.Path, **overrides: Any) -> GenerationConfig:
        values: Dict[str, Any] = {
            "project_root": project_root,
            "sources": [{"kind": "path", "path": str(document_path)}],
        }
        values.update(overrides)
        return GenerationConfig(**values)

    return _make


@pytest.fixture()
def petstore_config(
    make_config: Callable[..., GenerationConfig],
    petstore_json_path: pathlib.Path,
) -> GenerationConfig:
    return make_config(petstore_json_path)
