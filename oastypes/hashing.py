# File: oastypes/hashing.py
"""
oastypes - Change Detector
===========================

Decides whether the artifacts need regenerating at all.

The content hash is SHA-256 over the canonical JSON form of the document
(keys sorted, compact separators) together with the generator version, so
reordering map keys never changes it while upgrading the generator always
does. The hash is embedded in the primary artifact as
``export const contentHash = "<hex>";`` and read back on the next run.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Mapping, Optional

from oastypes.emitter import HASH_CONSTANT_NAME
from oastypes.errors import ContentHashError
from oastypes.models import GenerationConfig
from oastypes.utils import read_text_or_none, sha256_hex

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("oastypes.hashing")

_EMBEDDED_HASH_RE: re.Pattern[str] = re.compile(
    r"^export\s+(?:declare\s+)?const\s+"
    + re.escape(HASH_CONSTANT_NAME)
    + r"\s*=\s*[\"']([0-9a-f]{64})[\"'];?\s*$",
    re.MULTILINE,
)


# ---------------------------------------------------------------------------
# Hash computation
# ---------------------------------------------------------------------------


def _normalise_keys(value: Any) -> Any:
    """Recursively stringify mapping keys (YAML yields ``200:`` as an int)."""
    if isinstance(value, Mapping):
        return {str(key): _normalise_keys(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalise_keys(item) for item in value]
    return value


def canonicalize(document: Any, generator_version: str) -> str:
    """
    Key-order independent serialization of ``(document, version)``.

    Mapping keys are compared as strings, so ``{200: ..., "default": ...}``
    sorts and hashes the same as its all-string JSON equivalent.

    Raises:
        ContentHashError: If the document cannot be serialized, e.g. a YAML
            alias that makes it self-referencing.
    """
    try:
        return json.dumps(
            {"document": _normalise_keys(document), "generator": generator_version},
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
            default=str,
        )
    except (TypeError, ValueError, RecursionError) as exc:
        raise ContentHashError(f"Cannot compute content hash: {exc}") from exc


def compute_content_hash(document: Any, generator_version: str) -> str:
    return sha256_hex(canonicalize(document, generator_version))


def extract_embedded_hash(text: str) -> Optional[str]:
    """Return the hash embedded in an artifact's text, or None."""
    match: Optional[re.Match[str]] = _EMBEDDED_HASH_RE.search(text)
    return match.group(1) if match else None


def read_previous_hash(path: Path) -> Optional[str]:
    """Hash embedded in the artifact at *path*; None if absent or malformed."""
    text: Optional[str] = read_text_or_none(path)
    if text is None:
        return None
    previous: Optional[str] = extract_embedded_hash(text)
    if previous is None:
        logger.info("No content hash found in %s; treating as changed.", path)
    return previous


# ---------------------------------------------------------------------------
# Detector
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ChangeCheck:
    content_hash: str
    previous_hash: Optional[str]
    changed: bool
    reason: str


class ChangeDetector:
    """Compare the fresh hash with the one embedded in the last output."""

    def __init__(self, config: GenerationConfig) -> None:
        self._config: GenerationConfig = config

    def check(self, document: Mapping[str, Any]) -> ChangeCheck:
        content_hash: str = compute_content_hash(document, self._config.generator_version)
        previous: Optional[str] = read_previous_hash(self._config.primary_path)

        if self._config.force:
            reason: str = "forced"
        elif previous is None:
            reason = "no previous hash"
        elif previous != content_hash:
            reason = "hash changed"
        elif not self._config.reexport_path.is_file():
            reason = f"{self._config.reexport_path.name} is missing"
        else:
            logger.info("Content hash %s unchanged; nothing to do.", content_hash[:12])
            return ChangeCheck(content_hash, previous, False, "unchanged")

        logger.info("Regenerating (%s): %s", reason, content_hash[:12])
        return ChangeCheck(content_hash, previous, True, reason)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "canonicalize",
    "compute_content_hash",
    "extract_embedded_hash",
    "read_previous_hash",
    "ChangeCheck",
    "ChangeDetector",
]

logger.debug("oastypes.hashing loaded.")
