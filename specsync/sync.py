"""Sync orchestration.

Runs the stages in order: spec parsing, code scanning, test scanning,
matching and formatting, then applies the CI threshold. Each call is a
fresh scan of the filesystem; nothing is cached between runs.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .code_scanner import CodeScanner
from .matcher import SyncMatcher
from .models import SyncOptions, SyncOutcome, SyncResult
from .reporter import SyncReporter
from .spec_parser import SpecParser
from .sync_logging import (
    log_error_with_context,
    log_operation,
    observability_hooks,
)
from .test_scanner import TestScanner


logger = logging.getLogger("specsync.sync")

NO_REQUIREMENTS_MESSAGE = "No requirements found in specs."


def render(result: SyncResult, options: SyncOptions) -> str:
    """Render a result in the format selected by ``options``."""
    reporter = SyncReporter(colors=options.colors and not options.json and not options.markdown)
    if options.json:
        return reporter.format_json(result)
    if options.markdown:
        return reporter.format_markdown(result)
    return reporter.format_terminal(result)


def execute_sync(project_root: Path | str, options: Optional[SyncOptions] = None) -> SyncOutcome:
    """Verify that the project's code is in sync with its specs.

    Never raises: failures come back as ``SyncOutcome(success=False)``.
    A CI threshold failure still carries the computed result and output.
    """
    options = options or SyncOptions()

    try:
        issues = options.validate()
        if issues:
            raise ValueError("Invalid sync options: " + "; ".join(issues))

        root = Path(project_root).resolve()
        with log_operation("sync", root=str(root), spec_id=options.spec_id):
            parser = SpecParser(root)
            if options.spec_id:
                requirements = parser.parse_spec(options.spec_id)
            else:
                requirements = parser.parse_all_specs()

            if not requirements:
                logger.info("No requirements found; skipping scan")
                result = SyncResult.empty()
                output = render(result, options) if options.json else NO_REQUIREMENTS_MESSAGE
                return SyncOutcome(success=True, result=result, output=output)

            test_scanner = TestScanner(root, test_dirs=options.test_dirs)
            code_scanner = CodeScanner(
                root,
                src_dir=options.src_dir,
                include=options.include,
                exclude=options.exclude,
                skip_dirs=test_scanner.test_dirs,
            )
            code_refs = code_scanner.scan()
            test_refs = test_scanner.scan()

            matcher = SyncMatcher(count_partial=options.count_partial)
            result = matcher.match(requirements, code_refs, test_refs, parser.spec_titles)
            output = render(result, options)

        observability_hooks.log_sync_event(
            "sync_completed",
            root=str(root),
            sync_rate=result.sync_rate,
            total_requirements=result.total_requirements,
            missing=len(result.missing),
            orphans=len(result.orphans),
        )

        if options.ci and result.sync_rate < options.threshold:
            message = f"Sync rate {result.sync_rate}% is below the threshold of {options.threshold}%."
            logger.warning(message)
            return SyncOutcome(success=False, result=result, output=output, error=RuntimeError(message))

        return SyncOutcome(success=True, result=result, output=output)

    except Exception as e:
        log_error_with_context(e, {
            "operation": "sync",
            "project_root": str(project_root),
            "spec_id": options.spec_id,
        })
        observability_hooks.log_sync_event("sync_failed", root=str(project_root), error=str(e))
        return SyncOutcome(success=False, error=e)
