# File: oastypes/generator.py
"""
oastypes - Generation Pipeline (Orchestrator)
==============================================

Connects every phase together:

    Resolve → Detect → Emit → Flatten → Export

The ``TypesGenerator`` class provides both a programmatic API and the
backend for the CLI.

Workflow::

    1. Acquire the OpenAPI document from the configured sources (sources.py).
    2. Hash it and compare with the hash embedded in the last output
       (hashing.py). Unchanged ⇒ the run ends here, successfully.
    3. Translate it with enum hoisting attached and append the enums and
       the content hash (emitter.py).
    4. Build the flattened re-export module (flattener.py).
    5. Write both files, optionally ``git add`` them (exporters.py).
    6. Return a ``GenerationReport`` with metrics and status.

Error handling strategy:
    - An unavailable or unparseable source is recovered inside the resolver;
      only exhaustion of every source reaches the report.
    - Every other failure is fatal for the run: it is recorded under the
      stage that raised it and the remaining stages are skipped.
    - The final report gives a clear pass/fail verdict.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

import httpx

from oastypes.emitter import DeclarationEmitter, EmitResult
from oastypes.errors import (
    ArtifactParseError,
    ContentHashError,
    ExportError,
    IdentifierError,
    SchemaSourceError,
    TranslationError,
)
from oastypes.exporters import ArtifactExporter, ExportResult, FileRecord
from oastypes.flattener import DeclarationFlattener, ReExportPlan
from oastypes.hashing import ChangeCheck, ChangeDetector
from oastypes.models import GenerationConfig
from oastypes.sources import ResolvedSchema, SchemaSourceResolver
from oastypes.utils import Timer

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("oastypes.generator")


# ---------------------------------------------------------------------------
# Generation report
# ---------------------------------------------------------------------------


@dataclass(frozen=False, slots=True)
class GenerationStepMetric:
    """Timing and outcome for a single pipeline step."""

    step_name: str = ""
    success: bool = True
    elapsed_seconds: float = 0.0
    detail: str = ""


@dataclass(frozen=False, slots=True)
class GenerationReport:
    """
    Report produced by ``TypesGenerator.run()``.

    ``unchanged`` is set when the document hash matched the previous output
    and nothing was written; such a run is still a success.
    """

    success: bool = False
    unchanged: bool = False
    output_directory: str = ""
    source_label: str = ""
    content_hash: str = ""

    # Metrics
    alias_count: int = 0
    enum_count: int = 0
    total_elapsed_seconds: float = 0.0

    # Sub-reports
    step_metrics: List[GenerationStepMetric] = field(default_factory=list)
    files: List[FileRecord] = field(default_factory=list)
    source_warnings: List[str] = field(default_factory=list)
    source_errors: List[str] = field(default_factory=list)
    generation_errors: List[str] = field(default_factory=list)
    export_errors: List[str] = field(default_factory=list)

    @property
    def total_bytes(self) -> int:
        return sum(record.size_bytes for record in self.files)

    def summary(self) -> str:
        """Return a human-readable summary string."""
        lines: List[str] = []
        if not self.success:
            status: str = "❌ FAILED"
        elif self.unchanged:
            status = "✅ UP TO DATE"
        else:
            status = "✅ SUCCESS"
        lines.append(f"{'='*60}")
        lines.append("  oastypes — Generation Report")
        lines.append(f"{'='*60}")
        lines.append(f"  Status:           {status}")
        lines.append(f"  Source:           {self.source_label or '-'}")
        lines.append(f"  Output:           {self.output_directory}")
        if self.content_hash:
            lines.append(f"  Content hash:     {self.content_hash[:12]}")
        lines.append(f"  Type aliases:     {self.alias_count}")
        lines.append(f"  Enums:            {self.enum_count}")
        lines.append(f"  Files written:    {len(self.files)}")
        lines.append(f"  Total bytes:      {self.total_bytes:,}")
        lines.append(f"  Total time:       {self.total_elapsed_seconds:.3f}s")
        lines.append(f"{'─'*60}")

        if self.step_metrics:
            lines.append("  Pipeline Steps:")
            for step in self.step_metrics:
                icon: str = "✓" if step.success else "✗"
                lines.append(
                    f"    {icon} {step.step_name:<28s} "
                    f"{step.elapsed_seconds:>7.3f}s  "
                    f"{step.detail}"
                )

        sections = (
            ("Skipped Sources", "⚠", self.source_warnings),
            ("Source Errors", "✗", self.source_errors),
            ("Generation Errors", "✗", self.generation_errors),
            ("Export Errors", "✗", self.export_errors),
        )
        for title, icon, messages in sections:
            if messages:
                lines.append(f"{'─'*60}")
                lines.append(f"  {title} ({len(messages)}):")
                for message in messages:
                    lines.append(f"    {icon} {message}")

        lines.append(f"{'='*60}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# TypesGenerator class
# ---------------------------------------------------------------------------


class TypesGenerator:
    """
    Pipeline orchestrator.

    Usage::

        report = TypesGenerator(config).run()
        print(report.summary())

    ``transport`` is forwarded to the URL source (tests inject
    ``httpx.MockTransport``).
    """

    def __init__(
        self,
        config: GenerationConfig,
        *,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._config: GenerationConfig = config
        self._transport: Optional[httpx.BaseTransport] = transport

        logger.debug(
            "TypesGenerator initialised: sources=%s, output=%s, extension=%s, "
            "force=%s, auto_add=%s.",
            config.source_labels(),
            config.output_dir,
            config.extension,
            config.force,
            config.auto_add,
        )

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def run(self) -> GenerationReport:
        report: GenerationReport = GenerationReport(
            output_directory=str(self._config.output_dir),
        )

        with Timer("pipeline") as total:
            self._run_pipeline(report)

        return self._finalise_report(report, total.elapsed)

    # -----------------------------------------------------------------
    # Internal: pipeline
    # -----------------------------------------------------------------

    def _run_pipeline(self, report: GenerationReport) -> None:
        resolved: Optional[ResolvedSchema] = self._step_resolve(report)
        if resolved is None:
            return

        check: Optional[ChangeCheck] = self._step_detect(resolved, report)
        if check is None:
            return
        if not check.changed:
            report.unchanged = True
            return

        emitted: Optional[EmitResult] = self._step_emit(resolved, check, report)
        if emitted is None:
            return

        reexport_text: Optional[str] = self._step_flatten(emitted, report)
        if reexport_text is None:
            return

        self._step_export(emitted.text, reexport_text, report)

    def _step_resolve(self, report: GenerationReport) -> Optional[ResolvedSchema]:
        resolver: SchemaSourceResolver = SchemaSourceResolver(
            self._config.sources, transport=self._transport
        )
        resolved: Optional[ResolvedSchema] = None
        with Timer("resolve") as t:
            try:
                resolved = resolver.resolve()
            except SchemaSourceError as exc:
                report.source_errors.append(str(exc))
                logger.error("Source stage failed: %s", exc)

        if resolved is not None:
            report.source_label = resolved.source.describe()
            report.source_warnings.extend(
                f"{attempt.label}: {attempt.reason}" for attempt in resolved.attempts
            )

        report.step_metrics.append(GenerationStepMetric(
            step_name="Resolve Schema",
            success=resolved is not None,
            elapsed_seconds=t.elapsed,
            detail=report.source_label or "all sources failed",
        ))
        return resolved

    def _step_detect(
        self,
        resolved: ResolvedSchema,
        report: GenerationReport,
    ) -> Optional[ChangeCheck]:
        check: Optional[ChangeCheck] = None
        with Timer("detect") as t:
            try:
                check = ChangeDetector(self._config).check(resolved.document)
            except ContentHashError as exc:
                report.generation_errors.append(f"detect: {exc}")
                logger.error("Detect stage failed: %s", exc)

        if check is not None:
            report.content_hash = check.content_hash

        report.step_metrics.append(GenerationStepMetric(
            step_name="Detect Changes",
            success=check is not None,
            elapsed_seconds=t.elapsed,
            detail=check.reason if check is not None else "failed",
        ))
        return check

    def _step_emit(
        self,
        resolved: ResolvedSchema,
        check: ChangeCheck,
        report: GenerationReport,
    ) -> Optional[EmitResult]:
        emitter: DeclarationEmitter = DeclarationEmitter(ambient=self._config.ambient)
        emitted: Optional[EmitResult] = None
        with Timer("emit") as t:
            try:
                emitted = emitter.emit(resolved.document, check.content_hash)
            except (TranslationError, IdentifierError) as exc:
                report.generation_errors.append(f"emit: {exc}")
                logger.error("Emit stage failed: %s", exc)

        if emitted is not None:
            report.enum_count = len(emitted.enums)

        report.step_metrics.append(GenerationStepMetric(
            step_name="Emit Declarations",
            success=emitted is not None,
            elapsed_seconds=t.elapsed,
            detail=f"{report.enum_count} enum(s)" if emitted is not None else "failed",
        ))
        return emitted

    def _step_flatten(self, emitted: EmitResult, report: GenerationReport) -> Optional[str]:
        flattener: DeclarationFlattener = DeclarationFlattener(self._config.import_specifier)
        text: Optional[str] = None
        with Timer("flatten") as t:
            try:
                plan: ReExportPlan = flattener.plan(emitted.module, emitted.enums)
                text = flattener.render(plan)
            except (ArtifactParseError, IdentifierError) as exc:
                report.generation_errors.append(f"flatten: {exc}")
                logger.error("Flatten stage failed: %s", exc)

        if text is not None:
            report.alias_count = len(plan.type_aliases)

        report.step_metrics.append(GenerationStepMetric(
            step_name="Flatten Re-exports",
            success=text is not None,
            elapsed_seconds=t.elapsed,
            detail=f"{report.alias_count} alias(es)" if text is not None else "failed",
        ))
        return text

    def _step_export(
        self,
        primary_text: str,
        reexport_text: str,
        report: GenerationReport,
    ) -> None:
        """Write both artifacts to the filesystem."""
        exporter: ArtifactExporter = ArtifactExporter(self._config)
        result: Optional[ExportResult] = None
        with Timer("export") as t:
            try:
                result = exporter.export(primary_text, reexport_text)
            except ExportError as exc:
                report.export_errors.append(str(exc))
                logger.error("Export stage failed: %s", exc)

        if result is not None:
            report.files.extend(result.files)

        report.step_metrics.append(GenerationStepMetric(
            step_name="Export to Filesystem",
            success=result is not None,
            elapsed_seconds=t.elapsed,
            detail=(
                f"{len(result.files)} files, {result.total_bytes:,} bytes"
                + (", staged" if result.staged else "")
                if result is not None
                else "failed"
            ),
        ))

    # -----------------------------------------------------------------
    # Internal: finalise report
    # -----------------------------------------------------------------

    def _finalise_report(
        self,
        report: GenerationReport,
        total_elapsed: float,
    ) -> GenerationReport:
        """Set final status and timing on the report."""
        report.total_elapsed_seconds = total_elapsed

        has_errors: bool = (
            len(report.source_errors) > 0
            or len(report.generation_errors) > 0
            or len(report.export_errors) > 0
        )

        report.success = not has_errors

        if report.unchanged:
            logger.info("Types are up to date (%s).", report.content_hash[:12])
        return report


def generate_types(
    config: GenerationConfig,
    *,
    transport: Optional[httpx.BaseTransport] = None,
) -> GenerationReport:
    """Convenience wrapper around :class:`TypesGenerator`."""
    return TypesGenerator(config, transport=transport).run()


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "TypesGenerator",
    "GenerationReport",
    "GenerationStepMetric",
    "generate_types",
]

logger.debug("oastypes.generator loaded.")
