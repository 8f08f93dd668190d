# File: oastypes/sources.py
"""
oastypes - Schema Source Resolver
==================================

Acquires the OpenAPI document from the configured sources, trying them in
order until one yields a parseable document (ordered-fallback mode):

    --oas-path     read a local file
    --oas-command  run a shell command and read its standard output
    --oas-url      HTTP GET with a bounded timeout

A source that is unavailable (missing file, failing command, network error,
non-2xx status, timeout) or that produces bytes which do not parse as a
JSON/YAML mapping is skipped with a warning. Only when every source has
failed does the resolver raise ``SourcesExhaustedError``, listing each
attempt and its failure.
"""

from __future__ import annotations

import json
import logging
import subprocess
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import httpx
import yaml

from oastypes.errors import (
    SchemaInvalidError,
    SchemaSourceError,
    SourcesExhaustedError,
    SourceUnavailableError,
)
from oastypes.models import CommandSource, PathSource, SchemaSource, UrlSource

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("oastypes.sources")


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_document(raw: Union[str, bytes], origin: str = "document") -> Dict[str, Any]:
    """
    Parse *raw* as JSON, falling back to YAML.

    Raises:
        SchemaInvalidError: If *raw* is empty, unparseable, or not a mapping.
    """
    if isinstance(raw, bytes):
        try:
            text: str = raw.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise SchemaInvalidError(f"{origin} is not valid UTF-8: {exc}") from exc
    else:
        text = raw

    if not text.strip():
        raise SchemaInvalidError(f"{origin} is empty")

    data: Any
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise SchemaInvalidError(f"{origin} is neither JSON nor YAML: {exc}") from exc

    if not isinstance(data, dict):
        raise SchemaInvalidError(
            f"{origin} must contain an object at the top level, "
            f"got {type(data).__name__}"
        )
    return data


# ---------------------------------------------------------------------------
# Result records
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SourceAttempt:
    """One failed try, kept for the final diagnostic."""

    label: str
    reason: str


@dataclass(frozen=True, slots=True)
class ResolvedSchema:
    document: Dict[str, Any]
    source: SchemaSource
    attempts: Tuple[SourceAttempt, ...] = field(default_factory=tuple)


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


class SchemaSourceResolver:
    """
    Try each source in order; return the first document that parses.

    ``transport`` is handed to ``httpx.Client`` and lets tests substitute an
    ``httpx.MockTransport`` for the network.
    """

    def __init__(
        self,
        sources: Sequence[SchemaSource],
        *,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._sources: List[SchemaSource] = list(sources)
        self._transport: Optional[httpx.BaseTransport] = transport

    def resolve(self) -> ResolvedSchema:
        attempts: List[SourceAttempt] = []
        for source in self._sources:
            label: str = source.describe()
            logger.info("Loading OpenAPI document from %s", label)
            try:
                document: Dict[str, Any] = self.load(source)
            except SchemaSourceError as exc:
                logger.warning("Skipping %s: %s", label, exc)
                attempts.append(SourceAttempt(label, str(exc)))
                continue
            logger.info("Loaded OpenAPI document from %s (%d top-level keys).", label, len(document))
            return ResolvedSchema(document=document, source=source, attempts=tuple(attempts))

        raise SourcesExhaustedError([(a.label, a.reason) for a in attempts])

    def load(self, source: SchemaSource) -> Dict[str, Any]:
        """Load a single source, raising a ``SchemaSourceError`` on failure."""
        if isinstance(source, PathSource):
            return self._load_path(source)
        if isinstance(source, CommandSource):
            return self._load_command(source)
        if isinstance(source, UrlSource):
            return self._load_url(source)
        raise SourceUnavailableError(f"Unsupported source: {source!r}")

    # -----------------------------------------------------------------
    # Individual sources
    # -----------------------------------------------------------------

    @staticmethod
    def _load_path(source: PathSource) -> Dict[str, Any]:
        try:
            raw: bytes = source.path.read_bytes()
        except OSError as exc:
            raise SourceUnavailableError(
                f"cannot read {source.path}: {exc.strerror or exc}"
            ) from exc
        return parse_document(raw, origin=str(source.path))

    @staticmethod
    def _load_command(source: CommandSource) -> Dict[str, Any]:
        try:
            completed: subprocess.CompletedProcess[bytes] = subprocess.run(
                source.command,
                shell=True,
                cwd=str(source.cwd) if source.cwd is not None else None,
                stdout=subprocess.PIPE,
                check=False,
            )
        except OSError as exc:
            raise SourceUnavailableError(f"cannot run command: {exc}") from exc

        if completed.returncode != 0:
            raise SourceUnavailableError(
                f"command exited with status {completed.returncode}"
            )
        return parse_document(completed.stdout, origin="command output")

    def _load_url(self, source: UrlSource) -> Dict[str, Any]:
        timeout: httpx.Timeout = httpx.Timeout(source.timeout_seconds)
        try:
            with httpx.Client(
                timeout=timeout,
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                response: httpx.Response = client.get(source.url)
                response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise SourceUnavailableError(
                f"timed out after {source.timeout_ms} ms"
            ) from exc
        except httpx.HTTPStatusError as exc:
            raise SourceUnavailableError(
                f"HTTP {exc.response.status_code} from {source.url}"
            ) from exc
        except httpx.HTTPError as exc:
            raise SourceUnavailableError(f"request failed: {exc}") from exc
        return parse_document(response.content, origin=f"response from {source.url}")


def resolve_schema(
    sources: Sequence[SchemaSource],
    *,
    transport: Optional[httpx.BaseTransport] = None,
) -> ResolvedSchema:
    """Convenience wrapper around :class:`SchemaSourceResolver`."""
    return SchemaSourceResolver(sources, transport=transport).resolve()


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "parse_document",
    "SourceAttempt",
    "ResolvedSchema",
    "SchemaSourceResolver",
    "resolve_schema",
]

logger.debug("oastypes.sources loaded.")
