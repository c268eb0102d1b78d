"""Rendering of sync results as terminal text, markdown, or JSON."""

from __future__ import annotations

import json
from datetime import date
from typing import List, Optional

from .models import (
    STATUS_IMPLEMENTED,
    STATUS_PARTIAL,
    RequirementStatus,
    SyncResult,
)


ANSI_COLORS = {
    "reset": "\x1b[0m",
    "green": "\x1b[32m",
    "red": "\x1b[31m",
    "yellow": "\x1b[33m",
    "cyan": "\x1b[36m",
    "gray": "\x1b[90m",
    "bold": "\x1b[1m",
}

# Locations listed inline per implemented requirement in terminal output
MAX_INLINE_LOCATIONS = 2


class SyncReporter:
    """Format a ``SyncResult`` for people and machines."""

    def __init__(self, colors: bool = True):
        self.use_colors = colors

    # ------------------------------------------------------------------
    # Terminal
    # ------------------------------------------------------------------

    def format_terminal(self, result: SyncResult) -> str:
        lines: List[str] = []
        total = result.total_requirements

        lines.append(self._colorize("=== SDD Sync: spec/code synchronization ===", "bold"))
        lines.append("")
        lines.append(f"Specs: {len(result.specs)}, requirements: {total}")
        lines.append("")

        if result.implemented:
            lines.append(self._colorize(f"✓ Implemented ({len(result.implemented)}/{total})", "green"))
            for status in self._with_status(result, STATUS_IMPLEMENTED):
                lines.append(self._implemented_line(status))
            lines.append("")

        if result.partial:
            lines.append(self._colorize(f"◐ Tested only ({len(result.partial)}/{total})", "cyan"))
            for status in self._with_status(result, STATUS_PARTIAL):
                lines.append(self._implemented_line(status))
            lines.append("")

        if result.missing:
            lines.append(self._colorize(f"✗ Missing ({len(result.missing)}/{total})", "red"))
            for req_id in result.missing:
                lines.append(f"  - {req_id}{self._title_suffix(result.get_requirement(req_id))}")
            lines.append("")

        if result.orphans:
            lines.append(self._colorize(f"⚠ Code without spec ({len(result.orphans)})", "yellow"))
            for orphan in result.orphans:
                lines.append(f"  - {orphan.file}:{orphan.line} ({orphan.text or 'orphan'})")
            lines.append("")

        if result.sync_rate >= 80:
            rate_color = "green"
        elif result.sync_rate >= 50:
            rate_color = "yellow"
        else:
            rate_color = "red"
        lines.append(
            self._colorize(
                f"Sync rate: {result.sync_rate}% ({result.total_implemented}/{total})",
                rate_color,
            )
        )

        return "\n".join(lines)

    # ------------------------------------------------------------------
    # JSON
    # ------------------------------------------------------------------

    def format_json(self, result: SyncResult) -> str:
        """Serialize the result; ``SyncResult.from_dict(json.loads(...))`` restores it."""
        return json.dumps(result.to_dict(), indent=2, ensure_ascii=False)

    # ------------------------------------------------------------------
    # Markdown
    # ------------------------------------------------------------------

    def format_markdown(self, result: SyncResult) -> str:
        lines: List[str] = []

        lines.append("# SDD Sync Report")
        lines.append("")
        lines.append(f"> Generated: {date.today().isoformat()}")
        lines.append("")

        lines.append("## Summary")
        lines.append("")
        lines.append("| Metric | Value |")
        lines.append("|--------|-------|")
        lines.append(f"| Specs | {len(result.specs)} |")
        lines.append(f"| Requirements | {result.total_requirements} |")
        lines.append(f"| Implemented | {result.total_implemented} |")
        lines.append(f"| Tested only | {len(result.partial)} |")
        lines.append(f"| Missing | {len(result.missing)} |")
        lines.append(f"| Sync rate | {result.sync_rate}% |")
        lines.append("")

        lines.append("## Specs")
        lines.append("")
        lines.append("| Spec | Requirements | Implemented | Tested only | Missing | Sync rate |")
        lines.append("|------|--------------|-------------|-------------|---------|-----------|")
        for spec in result.specs:
            lines.append(
                f"| {spec.id} | {spec.requirement_count} | {spec.implemented_count} | "
                f"{spec.partial_count} | {spec.missing_count} | {spec.sync_rate}% |"
            )
        lines.append("")

        if result.implemented:
            lines.append("## Implemented Requirements")
            lines.append("")
            for status in self._with_status(result, STATUS_IMPLEMENTED):
                lines.extend(self._markdown_locations(status))

        if result.partial:
            lines.append("## Tested-Only Requirements")
            lines.append("")
            for status in self._with_status(result, STATUS_PARTIAL):
                lines.extend(self._markdown_locations(status))

        if result.missing:
            lines.append("## Missing Requirements")
            lines.append("")
            for req_id in result.missing:
                lines.append(f"- **{req_id}**{self._title_suffix(result.get_requirement(req_id))}")
            lines.append("")

        if result.orphans:
            lines.append("## Code Without Spec")
            lines.append("")
            lines.append("> The following locations reference requirement IDs that no spec defines.")
            lines.append("")
            for orphan in result.orphans:
                lines.append(f"- `{orphan.file}:{orphan.line}`: {orphan.text or ''}")
            lines.append("")

        return "\n".join(lines).rstrip("\n") + "\n"

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _with_status(self, result: SyncResult, status: str) -> List[RequirementStatus]:
        return [item for item in result.requirements if item.status == status]

    def _title_suffix(self, status: Optional[RequirementStatus]) -> str:
        if status and status.title:
            return f": {status.title}"
        return ""

    def _implemented_line(self, status: RequirementStatus) -> str:
        shown = status.locations[:MAX_INLINE_LOCATIONS]
        locations = ", ".join(f"{loc.file}:{loc.line}" for loc in shown)
        extra = len(status.locations) - len(shown)
        more = f" +{extra}" if extra > 0 else ""
        return f"  - {status.id}{self._title_suffix(status)} {self._colorize(f'({locations}{more})', 'gray')}"

    def _markdown_locations(self, status: RequirementStatus) -> List[str]:
        lines = [f"### {status.id}{self._title_suffix(status)}", ""]
        if status.locations:
            lines.append("**References:**")
            for loc in status.locations:
                lines.append(f"- `{loc.file}:{loc.line}` ({loc.type})")
            lines.append("")
        return lines

    def _colorize(self, text: str, color: str) -> str:
        if not self.use_colors:
            return text
        return f"{ANSI_COLORS[color]}{text}{ANSI_COLORS['reset']}"
