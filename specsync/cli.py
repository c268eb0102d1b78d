"""Command-line entry point: ``sdd-sync``."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional

from .models import SyncOptions
from .sync import execute_sync
from .sync_logging import setup_logging
from .workspace import find_sdd_root, resolve_project_root


EXIT_SUCCESS = 0
EXIT_GENERAL_ERROR = 1
EXIT_VALIDATION_FAILED = 2
EXIT_NOT_INITIALIZED = 3

LOG_LEVEL_ENV = "SDD_LOG_LEVEL"

logger = logging.getLogger("specsync.cli")


def parse_patterns(value: str) -> List[str]:
    """Split a comma-separated pattern list."""
    return [pattern.strip() for pattern in value.split(",") if pattern.strip()]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sdd-sync",
        description="Verify that source code and tests reference every spec requirement.",
    )
    parser.add_argument("spec_id", nargs="?", help="Only check this spec")
    output = parser.add_mutually_exclusive_group()
    output.add_argument("--json", action="store_true", help="Print the result as JSON")
    output.add_argument("--markdown", action="store_true", help="Print a markdown report")
    parser.add_argument("--ci", action="store_true", help="Fail when the sync rate is below --threshold")
    parser.add_argument("--threshold", type=int, default=100, help="Minimum sync rate in CI mode (default: 100)")
    parser.add_argument("--src", dest="src_dir", help="Source directory (default: ./src)")
    parser.add_argument("--include", type=parse_patterns, help="Comma-separated include globs")
    parser.add_argument("--exclude", type=parse_patterns, help="Comma-separated exclude globs")
    parser.add_argument("--tests", dest="test_dirs", action="append", help="Test directory (repeatable)")
    parser.add_argument("--no-color", dest="colors", action="store_false", help="Disable ANSI colors")
    parser.add_argument(
        "--count-partial",
        action="store_true",
        help="Count requirements referenced only by tests toward the sync rate",
    )
    parser.add_argument("--root", help="Project root (default: nearest directory containing .sdd/)")
    parser.add_argument(
        "--log-level",
        default=os.getenv(LOG_LEVEL_ENV, "WARNING"),
        help=f"Logging level (default: ${LOG_LEVEL_ENV} or WARNING)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level.upper())

    if args.root:
        try:
            project_root = resolve_project_root(args.root)
        except ValueError as e:
            logger.error(str(e))
            return EXIT_GENERAL_ERROR
    else:
        project_root = find_sdd_root()
        if project_root is None:
            logger.error("Not an SDD project. Run `sdd init` first.")
            return EXIT_NOT_INITIALIZED

    options = SyncOptions(
        spec_id=args.spec_id,
        src_dir=args.src_dir,
        include=args.include,
        exclude=args.exclude,
        test_dirs=args.test_dirs,
        threshold=args.threshold,
        ci=args.ci,
        json=args.json,
        markdown=args.markdown,
        colors=args.colors and sys.stdout.isatty(),
        count_partial=args.count_partial,
    )

    outcome = execute_sync(project_root, options)

    if outcome.output:
        print(outcome.output)

    if not outcome.success:
        logger.error(str(outcome.error or "Sync verification failed"))
        return EXIT_VALIDATION_FAILED

    result = outcome.result
    if result and not options.json:
        # Test-only requirements are unsynced unless --count-partial is given
        if result.missing or (result.partial and not options.count_partial):
            return EXIT_GENERAL_ERROR

    return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
