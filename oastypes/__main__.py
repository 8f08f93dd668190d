# File: oastypes/__main__.py
"""
oastypes — Module entry point.

Allows running the generator directly via::

    python -m oastypes --oas-path openapi.yaml --project-root ./src/

This module simply delegates to the CLI entry point defined in ``oastypes.cli``.
"""

from __future__ import annotations


def main() -> None:
    """Delegate to the CLI main function."""
    from oastypes.cli import cli_main
    cli_main()


if __name__ == "__main__":
    main()
