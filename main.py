"""MCP server exposing SpecSync spec/code synchronization tools."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP

from specsync import SpecParser, SyncOptions, execute_sync
from specsync.workspace import resolve_project_root

mcp = FastMCP("specsync")

OUTPUT_FORMATS = ("terminal", "markdown", "json")


def _options(
    spec_id: Optional[str],
    src_dir: Optional[str],
    include: Optional[List[str]],
    exclude: Optional[List[str]],
    test_dirs: Optional[List[str]],
    threshold: int,
    ci: bool,
    output_format: str,
    count_partial: bool,
) -> SyncOptions:
    if output_format not in OUTPUT_FORMATS:
        raise ValueError(f"Unknown output format '{output_format}'. Expected one of {OUTPUT_FORMATS}.")
    return SyncOptions(
        spec_id=spec_id,
        src_dir=src_dir,
        include=include,
        exclude=exclude,
        test_dirs=test_dirs,
        threshold=threshold,
        ci=ci,
        json=output_format == "json",
        markdown=output_format == "markdown",
        colors=False,
        count_partial=count_partial,
    )


@mcp.tool()
def sync_specs(
    spec_id: Optional[str] = None,
    root: Optional[str] = None,
    src_dir: Optional[str] = None,
    include: Optional[List[str]] = None,
    exclude: Optional[List[str]] = None,
    test_dirs: Optional[List[str]] = None,
    threshold: int = 100,
    ci: bool = False,
    output_format: str = "markdown",
    count_partial: bool = False,
) -> Dict[str, Any]:
    """Check which spec requirements are referenced from code (`@spec REQ-xxx`) and tests.
    Returns the sync rate, implemented/partial/missing requirement IDs, orphan references
    and a rendered report. In CI mode the call fails when the sync rate is below `threshold`."""

    project_root = resolve_project_root(root)
    options = _options(
        spec_id, src_dir, include, exclude, test_dirs, threshold, ci, output_format, count_partial
    )
    outcome = execute_sync(project_root, options)

    response = outcome.to_dict()
    response["root"] = str(project_root)
    if outcome.success:
        response["next_suggested_step"] = "done" if outcome.result.is_fully_synced() else "annotate_code"
        response["workflow_tip"] = (
            "All requirements are referenced from code."
            if outcome.result.is_fully_synced()
            else "Add `@spec REQ-xxx` annotations next to the code implementing the missing requirements."
        )
    return response


@mcp.tool()
def list_specs(root: Optional[str] = None) -> Dict[str, Any]:
    """Enumerate the specs found under `.sdd/specs/` with their requirement counts."""

    project_root = resolve_project_root(root)
    parser = SpecParser(project_root)
    specs = []
    for spec_id in parser.list_specs():
        requirements = parser.parse_spec(spec_id)
        specs.append(
            {
                "spec_id": spec_id,
                "title": parser.spec_titles.get(spec_id),
                "requirement_count": len(requirements),
                "requirement_ids": [req.id for req in requirements],
            }
        )
    return {"root": str(project_root), "specs": specs, "count": len(specs)}


@mcp.resource("specsync://report")
def resource_report():
    """Terminal sync report for the auto-detected project root."""

    try:
        project_root = resolve_project_root(None)
    except ValueError:
        return "No project root detected. Launch tools with a 'root' argument or set SDD_PROJECT_ROOT."

    outcome = execute_sync(project_root, SyncOptions(colors=False))
    if outcome.output:
        return outcome.output
    return f"Sync failed: {outcome.error}"


if __name__ == "__main__":
    mcp.run(transport="stdio")
