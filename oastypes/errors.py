# File: oastypes/errors.py
"""
oastypes - Error Taxonomy
==========================

Every failure the pipeline can surface derives from ``OasTypesError`` so the
CLI can map a stage to an exit code with a single ``except`` per stage::

    OasTypesError
    ├── SchemaSourceError
    │   ├── SourceUnavailableError   (recovered inside the resolver)
    │   ├── SchemaInvalidError       (recovered inside the resolver)
    │   └── SourcesExhaustedError    (fatal)
    ├── TranslationError             (fatal)
    ├── ArtifactParseError           (fatal)
    ├── IdentifierError
    │   ├── IdentifierCollisionError (fatal)
    │   └── InvalidIdentifierError   (fatal)
    └── ExportError                  (fatal)
"""

from __future__ import annotations

from typing import List, Sequence, Tuple


class OasTypesError(Exception):
    """Base class for all oastypes failures."""


# ---------------------------------------------------------------------------
# Schema acquisition
# ---------------------------------------------------------------------------


class SchemaSourceError(OasTypesError):
    """Base class for failures while acquiring the schema document."""


class SourceUnavailableError(SchemaSourceError):
    """A single source could not produce any bytes (missing file, failed
    command, network error, non-2xx response, timeout)."""


class SchemaInvalidError(SchemaSourceError):
    """The bytes a source produced do not parse as a JSON/YAML mapping."""


class SourcesExhaustedError(SchemaSourceError):
    """Every configured source was tried and none produced a document."""

    def __init__(self, attempts: Sequence[Tuple[str, str]]) -> None:
        self.attempts: List[Tuple[str, str]] = list(attempts)
        if self.attempts:
            details: str = "; ".join(
                f"{label}: {reason}" for label, reason in self.attempts
            )
        else:
            details = "no sources configured"
        super().__init__(f"Could not load OpenAPI document ({details})")


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------


class TranslationError(OasTypesError):
    """The schema-to-types engine rejected the document."""


class ContentHashError(OasTypesError):
    """The document cannot be reduced to the canonical form that is hashed."""


class ArtifactParseError(OasTypesError):
    """The emitted declarations lack the structure the flattener needs."""


class IdentifierError(OasTypesError):
    """Base class for identifier problems in generated names."""


class IdentifierCollisionError(IdentifierError):
    """Two distinct names clean to the same TypeScript identifier."""

    def __init__(self, identifier: str, first: str, second: str) -> None:
        self.identifier: str = identifier
        self.first: str = first
        self.second: str = second
        super().__init__(
            f"Names {first!r} and {second!r} both map to identifier "
            f"{identifier!r}"
        )


class InvalidIdentifierError(IdentifierError):
    """A name cleans to nothing, or to a word TypeScript reserves."""

    def __init__(self, name: str, reason: str = "does not yield a valid identifier") -> None:
        self.name: str = name
        super().__init__(f"Name {name!r} {reason}")


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


class ExportError(OasTypesError):
    """Writing or staging the generated artifacts failed."""


__all__: List[str] = [
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
]
