# File: oastypes/exporters.py
"""
oastypes - Artifact Exporter (File-System Manager)
===================================================

Responsible for:
    1. Creating the types directory.
    2. Writing ``openapi.<ext>`` and ``schemas.<ext>`` as a pair: both are
       staged as temp files first and then renamed into place; if the second
       rename fails the first file is restored, so either both files are
       updated or neither is.
    3. Recording a checksum per written file.
    4. Optionally staging both files with ``git add``.
"""

from __future__ import annotations

import logging
import os
import subprocess
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from oastypes.errors import ExportError
from oastypes.models import GenerationConfig
from oastypes.utils import count_lines, ensure_directory, read_text_or_none, sha256_hex, stage_file

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("oastypes.exporters")


# ---------------------------------------------------------------------------
# Data classes for export results
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FileRecord:
    """Immutable record of a single written file."""

    path: str
    size_bytes: int
    line_count: int
    sha256: str


@dataclass(frozen=True, slots=True)
class ExportResult:
    """Final result returned by ``ArtifactExporter.export()``."""

    files: Tuple[FileRecord, ...] = field(default_factory=tuple)
    staged: bool = False
    elapsed_seconds: float = 0.0

    @property
    def total_bytes(self) -> int:
        return sum(record.size_bytes for record in self.files)


# ---------------------------------------------------------------------------
# ArtifactExporter class
# ---------------------------------------------------------------------------


class ArtifactExporter:
    """
    Writes the generated artifacts to disk.

    Usage::

        exporter = ArtifactExporter(config)
        result = exporter.export(primary_text, reexport_text)

    Thread-safety: NOT thread-safe. Concurrent runs against the same output
    directory are not coordinated.
    """

    def __init__(self, config: GenerationConfig) -> None:
        self._config: GenerationConfig = config

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def export(self, primary_text: str, reexport_text: str) -> ExportResult:
        """
        Write both artifacts and optionally ``git add`` them.

        Raises:
            ExportError: If the files cannot be written or staged.
        """
        start: float = time.perf_counter()
        targets: List[Tuple[Path, str]] = [
            (self._config.primary_path, primary_text),
            (self._config.reexport_path, reexport_text),
        ]

        try:
            ensure_directory(self._config.output_dir)
        except OSError as exc:
            raise ExportError(f"Cannot create {self._config.output_dir}: {exc}") from exc

        self._write_pair(targets)
        records: Tuple[FileRecord, ...] = tuple(
            self._record(path, content) for path, content in targets
        )
        for record in records:
            logger.info("Wrote %s (%d bytes).", record.path, record.size_bytes)

        staged: bool = False
        if self._config.auto_add:
            self.git_add([path for path, _ in targets])
            staged = True

        return ExportResult(
            files=records,
            staged=staged,
            elapsed_seconds=time.perf_counter() - start,
        )

    @staticmethod
    def git_add(paths: Sequence[Path]) -> None:
        """Stage *paths* in the enclosing git repository."""
        command: List[str] = ["git", "add", "--", *(str(p) for p in paths)]
        logger.info("Staging generated files: %s", " ".join(command))
        try:
            completed: subprocess.CompletedProcess[bytes] = subprocess.run(command, check=False)
        except OSError as exc:
            raise ExportError(f"Cannot run git: {exc}") from exc
        if completed.returncode != 0:
            raise ExportError(f"git add exited with status {completed.returncode}")

    # -----------------------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------------------

    @staticmethod
    def _write_pair(targets: Sequence[Tuple[Path, str]]) -> None:
        staged: List[Tuple[Path, Path]] = []
        try:
            for path, content in targets:
                staged.append((stage_file(path, content), path))
        except OSError as exc:
            for tmp_path, _ in staged:
                tmp_path.unlink(missing_ok=True)
            raise ExportError(f"Cannot write {path}: {exc}") from exc

        previous: List[Tuple[Path, Optional[str]]] = []
        try:
            for tmp_path, path in staged:
                prior: Optional[str] = read_text_or_none(path)
                os.replace(tmp_path, path)
                previous.append((path, prior))
        except OSError as exc:
            for tmp_path, _ in staged:
                tmp_path.unlink(missing_ok=True)
            for path, prior in previous:
                if prior is None:
                    path.unlink(missing_ok=True)
                else:
                    path.write_text(prior, encoding="utf-8")
            raise ExportError(f"Cannot replace {path}: {exc}") from exc

    @staticmethod
    def _record(path: Path, content: str) -> FileRecord:
        return FileRecord(
            path=str(path),
            size_bytes=len(content.encode("utf-8")),
            line_count=count_lines(content),
            sha256=sha256_hex(content),
        )


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "FileRecord",
    "ExportResult",
    "ArtifactExporter",
]

logger.debug("oastypes.exporters loaded.")
