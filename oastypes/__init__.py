# File: oastypes/__init__.py
"""
oastypes — OpenAPI to TypeScript Declarations
==============================================

A build-step generator that turns an OpenAPI document into TypeScript
declarations (``openapi.ts``) plus a flattened re-export module
(``schemas.ts``) so application code can import ``Pet`` instead of
``components['schemas']['Pet']``. Named string enumerations become real
``export enum`` declarations, and a content hash embedded in the output
lets unchanged documents skip regeneration entirely.

Architecture overview::

    ┌──────────────┐     ┌────────────────┐     ┌──────────────────┐
    │  CLI / Entry │────▶│ TypesGenerator │────▶│ SchemaTranslator │
    │   (cli.py)   │     │ (generator.py) │     │  (translator.py) │
    └──────────────┘     └───────┬────────┘     └──────────────────┘
                                 │
           ┌───────────┬─────────┼──────────┬────────────┐
           ▼           ▼         ▼          ▼            ▼
      ┌─────────┐ ┌─────────┐ ┌────────┐ ┌──────────┐ ┌──────────┐
      │ sources │ │ hashing │ │emitter │ │flattener │ │exporters │
      └─────────┘ └─────────┘ └────────┘ └──────────┘ └──────────┘

Usage::

    # As a library
    from oastypes import GenerationConfig, TypesGenerator
    config = GenerationConfig(sources=[{"kind": "path", "path": "openapi.yaml"}])
    report = TypesGenerator(config).run()

    # From the command line
    python -m oastypes --oas-path openapi.yaml --project-root ./src/

Public API:
    - TypesGenerator        — Pipeline orchestrator
    - GenerationConfig      — Run settings model
    - SchemaSourceResolver  — Ordered-fallback document loader
    - ChangeDetector        — Content-hash short-circuit
    - EnumHoistingTransform — Named string enum promotion
    - DeclarationEmitter    — Primary artifact producer
    - DeclarationFlattener  — Re-export module producer
    - ArtifactExporter      — File-system writer
"""

from __future__ import annotations

__version__: str = "1.0.0"
__license__: str = "MIT"

# ---------------------------------------------------------------------------
# Public imports
# ---------------------------------------------------------------------------

from oastypes.errors import (
    ArtifactParseError,
    ContentHashError,
    ExportError,
    IdentifierCollisionError,
    IdentifierError,
    InvalidIdentifierError,
    OasTypesError,
    SchemaInvalidError,
    SchemaSourceError,
    SourcesExhaustedError,
    SourceUnavailableError,
    TranslationError,
)
from oastypes.models import (
    CommandSource,
    EnumCandidate,
    GenerationConfig,
    PathSource,
    SchemaSource,
    TransformMetadata,
    UrlSource,
)
from oastypes.utils import Timer, clean_identifier
from oastypes.sources import SchemaSourceResolver, parse_document, resolve_schema
from oastypes.hashing import ChangeDetector, compute_content_hash, extract_embedded_hash
from oastypes.transforms import EnumAccumulator, EnumHoistingTransform
from oastypes.translator import SchemaTranslator, translate_document
from oastypes.emitter import DeclarationEmitter, EmitResult
from oastypes.flattener import DeclarationFlattener
from oastypes.exporters import ArtifactExporter, ExportResult, FileRecord
from oastypes.generator import GenerationReport, TypesGenerator, generate_types

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    # Version info
    "__version__",
    "__license__",
    # Core orchestrator
    "TypesGenerator",
    "GenerationReport",
    "generate_types",
    # Models
    "GenerationConfig",
    "SchemaSource",
    "PathSource",
    "CommandSource",
    "UrlSource",
    "TransformMetadata",
    "EnumCandidate",
    # Pipeline stages
    "SchemaSourceResolver",
    "parse_document",
    "resolve_schema",
    "ChangeDetector",
    "compute_content_hash",
    "extract_embedded_hash",
    "EnumAccumulator",
    "EnumHoistingTransform",
    "SchemaTranslator",
    "translate_document",
    "DeclarationEmitter",
    "EmitResult",
    "DeclarationFlattener",
    "ArtifactExporter",
    "ExportResult",
    "FileRecord",
    # Errors
    "OasTypesError",
    "SchemaSourceError",
    "SourceUnavailableError",
    "SchemaInvalidError",
    "SourcesExhaustedError",
    "TranslationError",
    "ContentHashError",
    "ArtifactParseError",
    "IdentifierError",
    "IdentifierCollisionError",
    "InvalidIdentifierError",
    "ExportError",
    # Utilities
    "Timer",
    "clean_identifier",
]
