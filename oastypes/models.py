# File: oastypes/models.py
"""
oastypes - Core Data Models
============================
Pydantic V2 models for the generator's configuration: where the OpenAPI
document comes from (``SchemaSource``), where the artifacts go and how they
are written (``GenerationConfig``), plus the small value objects that flow
between the transform and the emitter.
"""

from __future__ import annotations

import logging
import posixpath
from pathlib import Path
from typing import Annotated, List, Literal, Optional, Tuple, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from oastypes import __version__

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("oastypes.models")

# ---------------------------------------------------------------------------
# Shared model configuration
# ---------------------------------------------------------------------------

_SHARED_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    validate_assignment=True,
    frozen=False,
    extra="forbid",
)

DEFAULT_TIMEOUT_MS: int = 30_000
PRIMARY_STEM: str = "openapi"
REEXPORT_STEM: str = "schemas"


# ---------------------------------------------------------------------------
# Schema sources
# ---------------------------------------------------------------------------


class PathSource(BaseModel):
    """Read the document from a local file."""

    model_config = _SHARED_CONFIG

    kind: Literal["path"] = "path"
    path: Path = Field(..., description="Filesystem path of the document.")

    def describe(self) -> str:
        return f"--oas-path {self.path}"


class CommandSource(BaseModel):
    """Read the document from the standard output of a shell command."""

    model_config = _SHARED_CONFIG

    kind: Literal["command"] = "command"
    command: str = Field(..., min_length=1, description="Shell command to run.")
    cwd: Optional[Path] = Field(
        default=None, description="Working directory for the command."
    )

    def describe(self) -> str:
        if self.cwd is not None:
            return f"--oas-command {self.command!r} (in {self.cwd})"
        return f"--oas-command {self.command!r}"


class UrlSource(BaseModel):
    """Download the document with an HTTP GET."""

    model_config = _SHARED_CONFIG

    kind: Literal["url"] = "url"
    url: str = Field(..., min_length=1, description="HTTP(S) URL of the document.")
    timeout_ms: int = Field(
        default=DEFAULT_TIMEOUT_MS,
        gt=0,
        description="Request timeout in milliseconds.",
    )

    @field_validator("url")
    @classmethod
    def _http_scheme(cls, v: str) -> str:
        if not v.lower().startswith(("http://", "https://")):
            raise ValueError(f"URL must use http or https: {v!r}")
        return v

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0

    def describe(self) -> str:
        return f"--oas-url {self.url}"


SchemaSource = Annotated[
    Union[PathSource, CommandSource, UrlSource],
    Field(discriminator="kind"),
]


# ---------------------------------------------------------------------------
# Generation configuration
# ---------------------------------------------------------------------------


class GenerationConfig(BaseModel):
    """
    Everything one run of the generator needs.

    ``sources`` is tried in list order; the CLI builds it in the order the
    source flags were written on the command line.
    """

    model_config = _SHARED_CONFIG

    project_root: Path = Field(
        default=Path("./src/"),
        description="Import root of the TypeScript project.",
    )
    types_dir: str = Field(
        default="types/",
        description="Directory of the generated types, relative to project_root.",
    )
    sources: List[SchemaSource] = Field(
        ...,
        min_length=1,
        description="Ordered list of places to load the document from.",
    )
    auto_add: bool = Field(
        default=False,
        description="Run `git add` on the generated files after writing them.",
    )
    extension: Literal["ts", "d.ts"] = Field(
        default="ts",
        description="File extension of both generated files.",
    )
    force: bool = Field(
        default=False,
        description="Regenerate even when the content hash is unchanged.",
    )
    generator_version: str = Field(
        default=__version__,
        min_length=1,
        description="Version tag mixed into the content hash.",
    )

    @field_validator("types_dir")
    @classmethod
    def _relative_types_dir(cls, v: str) -> str:
        if Path(v).is_absolute():
            raise ValueError("types_dir must be relative to project_root")
        return v

    @model_validator(mode="after")
    def _unique_source_kinds(self) -> "GenerationConfig":
        seen: List[str] = []
        for source in self.sources:
            if source.kind in seen:
                raise ValueError(f"Source kind {source.kind!r} configured twice")
            seen.append(source.kind)
        return self

    # -- Derived paths ------------------------------------------------------

    @property
    def output_dir(self) -> Path:
        return self.project_root / self.types_dir

    @property
    def primary_path(self) -> Path:
        return self.output_dir / f"{PRIMARY_STEM}.{self.extension}"

    @property
    def reexport_path(self) -> Path:
        return self.output_dir / f"{REEXPORT_STEM}.{self.extension}"

    @property
    def import_specifier(self) -> str:
        """Module path of the primary file, relative to the import root."""
        types_dir: str = self.types_dir.replace("\\", "/")
        return posixpath.normpath(posixpath.join(types_dir, PRIMARY_STEM))

    @property
    def ambient(self) -> bool:
        """Declaration files need ``declare`` on value-level statements."""
        return self.extension == "d.ts"

    def source_labels(self) -> Tuple[str, ...]:
        return tuple(source.describe() for source in self.sources)


# ---------------------------------------------------------------------------
# Transform value objects
# ---------------------------------------------------------------------------


class TransformMetadata(BaseModel):
    """Where in the document the node being translated lives."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="JSON pointer, e.g. '#/components/schemas/Pet'.")


class EnumCandidate(BaseModel):
    """A named string enumeration promoted to a standalone declaration."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Schema title.")
    identifier: str = Field(..., min_length=1, description="Cleaned TS identifier.")
    description: Optional[str] = None
    values: Tuple[str, ...] = Field(default_factory=tuple)

    def __repr__(self) -> str:
        return f"<EnumCandidate {self.name}: {len(self.values)} values>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "DEFAULT_TIMEOUT_MS",
    "PathSource",
    "CommandSource",
    "UrlSource",
    "SchemaSource",
    "GenerationConfig",
    "TransformMetadata",
    "EnumCandidate",
]

logger.debug("oastypes.models loaded.")
