# File: oastypes/cli.py
"""
oastypes - Command-Line Interface
==================================

CLI built with the standard-library ``argparse`` module.

Usage examples::

    # Generate from a local file
    python -m oastypes --oas-path openapi.yaml

    # Try a file first, fall back to a command that prints the document
    python -m oastypes --oas-path build/openapi.json \\
        --oas-command "python manage.py spectacular" --command-cwd ../backend

    # Download with a 10 s timeout and stage the result in git
    python -m oastypes --oas-url https://api.example.com/openapi.json \\
        --timeout 10000 --auto-add

    # Show version
    python -m oastypes --version

Sources are tried in the order their flags were written; the first one that
yields a parseable document wins.

Exit codes:
    0 — success (including "types already up to date")
    1 — source error (every source failed)
    2 — generation error
    3 — export error
    4 — input/argument error
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, NoReturn, Optional, Sequence

from pydantic import ValidationError

from oastypes.generator import GenerationReport, TypesGenerator
from oastypes.models import DEFAULT_TIMEOUT_MS, GenerationConfig

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("oastypes")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_SOURCE_ERROR: int = 1
EXIT_GENERATION_ERROR: int = 2
EXIT_EXPORT_ERROR: int = 3
EXIT_INPUT_ERROR: int = 4


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the root oastypes logger based on verbosity level.

    Args:
        verbosity: -1 = ERROR, 0 = WARNING, 1 = INFO, 2+ = DEBUG.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    elif verbosity >= 0:
        level = logging.WARNING
    else:
        level = logging.ERROR

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    fmt: str = "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s"
    datefmt: str = "%H:%M:%S"
    formatter: logging.Formatter = logging.Formatter(fmt, datefmt=datefmt)
    handler.setFormatter(formatter)

    root_logger: logging.Logger = logging.getLogger("oastypes")
    root_logger.setLevel(level)

    # Remove existing handlers to prevent duplication
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    root_logger.propagate = False


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


class _ArgumentParser(argparse.ArgumentParser):
    """Report usage errors with the input-error exit code instead of 2."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(EXIT_INPUT_ERROR, f"{self.prog}: error: {message}\n")


class _OrderedSourceAction(argparse.Action):
    """Store the value and remember the order source flags were written in."""

    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: Any,
        option_string: Optional[str] = None,
    ) -> None:
        setattr(namespace, self.dest, values)
        order: List[str] = [
            kind for kind in (getattr(namespace, "source_order", None) or [])
            if kind != self.dest
        ]
        order.append(self.dest)
        namespace.source_order = order


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    from oastypes import __version__

    parser: argparse.ArgumentParser = _ArgumentParser(
        prog="oastypes",
        description=(
            "oastypes — OpenAPI to TypeScript declarations.\n\n"
            "Generates <types-dir>/openapi.ts from an OpenAPI document and "
            "<types-dir>/schemas.ts re-exporting every component schema "
            "under its own name. Nothing is written when the document is "
            "unchanged since the last run."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s --oas-path openapi.yaml\n"
            "  %(prog)s --oas-url http://localhost:8000/openapi.json --timeout 5000\n"
            "  %(prog)s --oas-path missing.json --oas-command 'cat openapi.json'\n"
        ),
    )
    parser.set_defaults(source_order=[])

    parser.add_argument(
        "--version",
        action="version",
        version=f"oastypes v{__version__}",
    )

    # --- Sources ---
    source_group = parser.add_argument_group(
        "schema sources (tried in the order given)"
    )
    source_group.add_argument(
        "--oas-path",
        dest="path",
        action=_OrderedSourceAction,
        default=None,
        metavar="FILE",
        help="Read the OpenAPI document (JSON or YAML) from a file.",
    )
    source_group.add_argument(
        "--oas-command",
        dest="command",
        action=_OrderedSourceAction,
        default=None,
        metavar="CMD",
        help="Run a shell command and read the document from its stdout.",
    )
    source_group.add_argument(
        "--oas-url",
        dest="url",
        action=_OrderedSourceAction,
        default=None,
        metavar="URL",
        help="Download the document with an HTTP GET.",
    )
    source_group.add_argument(
        "--command-cwd",
        type=str,
        default=None,
        metavar="DIR",
        help="Working directory for --oas-command.",
    )
    source_group.add_argument(
        "--timeout",
        type=int,
        default=DEFAULT_TIMEOUT_MS,
        metavar="MS",
        help=f"Timeout for --oas-url in milliseconds (default: {DEFAULT_TIMEOUT_MS}).",
    )

    # --- Output ---
    output_group = parser.add_argument_group("output")
    output_group.add_argument(
        "--project-root",
        type=str,
        default="./src/",
        metavar="DIR",
        help="Import root of the TypeScript project (default: ./src/).",
    )
    output_group.add_argument(
        "--types-dir",
        type=str,
        default="types/",
        metavar="DIR",
        help="Types directory relative to --project-root (default: types/).",
    )
    output_group.add_argument(
        "--extension",
        type=str,
        default="ts",
        choices=["ts", "d.ts"],
        help="Extension of the generated files (default: ts).",
    )

    # --- Behaviour flags ---
    behaviour_group = parser.add_argument_group("behaviour flags")
    behaviour_group.add_argument(
        "--auto-add",
        action="store_true",
        default=False,
        help="Run `git add` on the generated files.",
    )
    behaviour_group.add_argument(
        "--force",
        action="store_true",
        default=False,
        help="Regenerate even if the document is unchanged.",
    )

    # --- Verbosity ---
    verbosity_group = parser.add_argument_group("verbosity")
    verbosity_group.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG).",
    )
    verbosity_group.add_argument(
        "-q", "--quiet",
        action="store_true",
        default=False,
        help="Suppress all output except errors.",
    )

    return parser


# ---------------------------------------------------------------------------
# Config builder
# ---------------------------------------------------------------------------


def _build_sources(args: argparse.Namespace) -> List[Dict[str, Any]]:
    """Turn the source flags into source dicts, in command-line order."""
    sources: List[Dict[str, Any]] = []
    for kind in args.source_order:
        if kind == "path":
            sources.append({"kind": "path", "path": args.path})
        elif kind == "command":
            sources.append({
                "kind": "command",
                "command": args.command,
                "cwd": args.command_cwd,
            })
        elif kind == "url":
            sources.append({
                "kind": "url",
                "url": args.url,
                "timeout_ms": args.timeout,
            })
    return sources


def _validate_args(args: argparse.Namespace) -> Optional[str]:
    """Return a diagnostic for an invalid flag combination, or None."""
    if not args.source_order:
        return "No schema source given: use --oas-path, --oas-command or --oas-url."
    if args.command_cwd is not None and args.command is None:
        return "--command-cwd requires --oas-command."
    if args.timeout <= 0:
        return f"--timeout must be a positive number of milliseconds, got {args.timeout}."
    return None


def _build_config(args: argparse.Namespace) -> GenerationConfig:
    """Build the ``GenerationConfig``; raises pydantic ``ValidationError``."""
    return GenerationConfig(
        project_root=Path(args.project_root),
        types_dir=args.types_dir,
        sources=_build_sources(args),
        auto_add=args.auto_add,
        extension=args.extension,
        force=args.force,
    )


def _format_validation_error(exc: ValidationError) -> str:
    parts: List[str] = []
    for error in exc.errors():
        location: str = ".".join(str(item) for item in error.get("loc", ()))
        parts.append(f"{location}: {error.get('msg', '')}" if location else error.get("msg", ""))
    return "; ".join(parts)


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------


def _exit_code_for(report: GenerationReport) -> int:
    if report.success:
        return EXIT_SUCCESS
    if report.source_errors:
        return EXIT_SOURCE_ERROR
    if report.export_errors:
        return EXIT_EXPORT_ERROR
    return EXIT_GENERATION_ERROR


def _run_generation(config: GenerationConfig, quiet: bool) -> int:
    """
    Run the full generation pipeline.

    Returns the appropriate exit code.
    """
    report: GenerationReport = TypesGenerator(config).run()

    if not quiet:
        print(report.summary())

    return _exit_code_for(report)


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def cli_main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """
    Main CLI entry point.

    Can be called from ``__main__.py`` or directly for testing.

    Args:
        argv: Optional argument list (defaults to sys.argv[1:]).
    """
    parser: argparse.ArgumentParser = _build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    # --- Verbosity ---
    if args.quiet:
        verbosity: int = -1
    else:
        verbosity = args.verbose

    _setup_logging(verbosity)

    # --- Argument validation ---
    problem: Optional[str] = _validate_args(args)
    if problem is not None:
        parser.error(problem)

    try:
        config: GenerationConfig = _build_config(args)
    except ValidationError as exc:
        print(
            f"oastypes: error: invalid configuration: {_format_validation_error(exc)}",
            file=sys.stderr,
        )
        sys.exit(EXIT_INPUT_ERROR)

    logger.info("Sources: %s", ", ".join(config.source_labels()))
    logger.info("Output:  %s", config.output_dir)
    logger.info("Force:   %s", config.force)

    # --- Run generation ---
    exit_code: int = _run_generation(config, args.quiet)

    if exit_code == EXIT_SUCCESS:
        logger.info("Generation completed successfully.")
    else:
        logger.error("Generation failed with exit code %d.", exit_code)

    sys.exit(exit_code)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "cli_main",
    "EXIT_SUCCESS",
    "EXIT_SOURCE_ERROR",
    "EXIT_GENERATION_ERROR",
    "EXIT_EXPORT_ERROR",
    "EXIT_INPUT_ERROR",
]

logger.debug("oastypes.cli loaded.")
