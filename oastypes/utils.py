# File: oastypes/utils.py
"""
oastypes - Utility Functions & Helpers
=======================================
Identifier cleaning, TypeScript literal quoting, JSON-pointer helpers,
file I/O and timing utilities used throughout the generation pipeline.

- String helpers that run once per schema name are ``lru_cache``-d.
- File writes go through a temp file and an atomic rename.
"""

from __future__ import annotations

import functools
import hashlib
import json
import logging
import os
import re
import tempfile
import time
from pathlib import Path
from typing import FrozenSet, List, Optional, Sequence

from oastypes.errors import InvalidIdentifierError

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("oastypes.utils")

# ---------------------------------------------------------------------------
# Pre-compiled regex patterns (compiled once at module load)
# ---------------------------------------------------------------------------

_NON_IDENTIFIER_RE: re.Pattern[str] = re.compile(r"[^A-Za-z0-9_]")
_LEADING_NON_LETTER_RE: re.Pattern[str] = re.compile(r"^[^A-Za-z]+")
_TS_IDENTIFIER_RE: re.Pattern[str] = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")
_NUMERIC_KEY_RE: re.Pattern[str] = re.compile(r"^(0|[1-9][0-9]*)$")

# Names TypeScript rejects as a type alias or enum name: reserved words,
# strict-mode reserved words, and the predefined type names.
TS_RESERVED_NAMES: FrozenSet[str] = frozenset({
    "break", "case", "catch", "class", "const", "continue", "debugger",
    "default", "delete", "do", "else", "enum", "export", "extends", "false",
    "finally", "for", "function", "if", "import", "in", "instanceof", "new",
    "null", "return", "super", "switch", "this", "throw", "true", "try",
    "typeof", "var", "void", "while", "with",
    "implements", "interface", "let", "package", "private", "protected",
    "public", "static", "yield",
    "any", "bigint", "boolean", "never", "number", "object", "string",
    "symbol", "undefined", "unknown",
})


# ---------------------------------------------------------------------------
# Identifier helpers
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def clean_identifier(name: str) -> str:
    """
    Turn a schema name into a TypeScript identifier.

    Every character outside ``[A-Za-z0-9_]`` is removed, then the leading
    run of non-letters, so the result always starts with a letter.

    Examples:
        >>> clean_identifier("Foo-Bar")
        'FooBar'
        >>> clean_identifier("v1.Page[User]")
        'v1PageUser'
        >>> clean_identifier("_2Fast")
        'Fast'

    Raises:
        InvalidIdentifierError: If nothing is left after cleaning, or the
            result is a TypeScript reserved word such as ``default``.
    """
    cleaned: str = _NON_IDENTIFIER_RE.sub("", name)
    cleaned = _LEADING_NON_LETTER_RE.sub("", cleaned)
    if not cleaned:
        raise InvalidIdentifierError(name)
    if cleaned in TS_RESERVED_NAMES:
        raise InvalidIdentifierError(name, f"cleans to the reserved word {cleaned!r}")
    return cleaned


def is_ts_identifier(name: str) -> bool:
    """Return True if *name* can be used unquoted as a TypeScript key."""
    return bool(_TS_IDENTIFIER_RE.match(name))


def ts_string(value: str) -> str:
    """Render *value* as a double-quoted TypeScript string literal."""
    return json.dumps(value, ensure_ascii=False)


def ts_single_quoted(value: str) -> str:
    """Render *value* as a single-quoted TypeScript string literal."""
    escaped: str = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def ts_property_key(name: str) -> str:
    """Render an object key, quoting it only when it is not an identifier."""
    if is_ts_identifier(name) or _NUMERIC_KEY_RE.match(name):
        return name
    return ts_string(name)


# ---------------------------------------------------------------------------
# JSON pointer helpers
# ---------------------------------------------------------------------------


def escape_pointer_segment(segment: str) -> str:
    """Escape one JSON-pointer segment (RFC 6901)."""
    return segment.replace("~", "~0").replace("/", "~1")


def unescape_pointer_segment(segment: str) -> str:
    """Reverse :func:`escape_pointer_segment`."""
    return segment.replace("~1", "/").replace("~0", "~")


def join_pointer(base: str, *segments: str) -> str:
    """Append escaped *segments* to the JSON pointer *base*."""
    parts: List[str] = [base]
    parts.extend(escape_pointer_segment(str(s)) for s in segments)
    return "/".join(parts)


def split_pointer(pointer: str) -> List[str]:
    """
    Split a local JSON pointer (``#/a/b``) into unescaped segments.

    >>> split_pointer("#/components/schemas/a~1b")
    ['components', 'schemas', 'a/b']
    """
    body: str = pointer[1:] if pointer.startswith("#") else pointer
    if not body:
        return []
    return [unescape_pointer_segment(s) for s in body.lstrip("/").split("/")]


def pointer_terminal_segment(pointer: str) -> str:
    """Return the last unescaped segment of *pointer* ('' for the root)."""
    segments: List[str] = split_pointer(pointer)
    return segments[-1] if segments else ""


# ---------------------------------------------------------------------------
# Indentation helpers
# ---------------------------------------------------------------------------


def indent_lines(lines: Sequence[str], level: int = 1, size: int = 2) -> List[str]:
    """Indent a list of lines, returning a new list. Blank lines stay blank."""
    prefix: str = " " * (level * size)
    return [prefix + line if line.strip() else line for line in lines]


# ---------------------------------------------------------------------------
# File I/O helpers
# ---------------------------------------------------------------------------


def ensure_directory(path: Path) -> None:
    """Create directory (and parents) if it doesn't exist."""
    path.mkdir(parents=True, exist_ok=True)
    logger.debug("Ensured directory exists: %s", path)


def stage_file(path: Path, content: str) -> Path:
    """
    Write *content* to a temp file next to *path* and return the temp path.

    The caller moves it into place with :func:`os.replace`, which keeps the
    visible file either fully old or fully new.
    """
    ensure_directory(path.parent)
    fd: int
    tmp_name: str
    fd, tmp_name = tempfile.mkstemp(
        dir=str(path.parent),
        prefix=f".{path.name}.",
        suffix=".tmp",
    )
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(content.encode("utf-8"))
    except Exception:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
    return Path(tmp_name)


def read_text_or_none(path: Path) -> Optional[str]:
    """Read *path* as UTF-8, returning None if it is missing or unreadable."""
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.debug("Could not read %s: %s", path, exc)
        return None


# ---------------------------------------------------------------------------
# Checksum & metrics
# ---------------------------------------------------------------------------


def sha256_hex(content: str) -> str:
    """Return SHA-256 hex digest of a string. O(n)."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def count_lines(content: str) -> int:
    """Count the number of lines in a string. O(n)."""
    if not content:
        return 0
    return content.count("\n") + (1 if not content.endswith("\n") else 0)


# ---------------------------------------------------------------------------
# Timer context manager
# ---------------------------------------------------------------------------


class Timer:
    """
    Simple context-manager timer for profiling pipeline steps.

    Usage:
        with Timer("resolve schema") as t:
            ...
        print(t.elapsed)
    """

    __slots__ = ("label", "start_time", "end_time", "elapsed")

    def __init__(self, label: str = "operation") -> None:
        self.label: str = label
        self.start_time: float = 0.0
        self.end_time: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[object],
    ) -> None:
        self.end_time = time.perf_counter()
        self.elapsed = self.end_time - self.start_time
        logger.info(
            "Timer [%s]: %.4f seconds",
            self.label,
            self.elapsed,
        )

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed:.4f}s>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "TS_RESERVED_NAMES",
    "clean_identifier",
    "is_ts_identifier",
    "ts_string",
    "ts_single_quoted",
    "ts_property_key",
    "escape_pointer_segment",
    "unescape_pointer_segment",
    "join_pointer",
    "split_pointer",
    "pointer_terminal_segment",
    "indent_lines",
    "ensure_directory",
    "stage_file",
    "read_text_or_none",
    "sha256_hex",
    "count_lines",
    "Timer",
]

logger.debug("oastypes.utils loaded — %d public symbols.", len(__all__))
