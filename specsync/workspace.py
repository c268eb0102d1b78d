"""Project root discovery for SDD workspaces."""

from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional


PROJECT_MARKER_DIRECTORY = ".sdd"
PROJECT_ROOT_ENV = "SDD_PROJECT_ROOT"


def _candidate_bases(start: Path) -> List[Path]:
    start = start.resolve()
    return [start, *start.parents]


def find_sdd_root(start: Optional[Path | str] = None) -> Optional[Path]:
    """Return the nearest directory at or above ``start`` holding ``.sdd/``."""
    base = Path(start) if start else Path.cwd()
    for candidate in _candidate_bases(base):
        if (candidate / PROJECT_MARKER_DIRECTORY).is_dir():
            return candidate
    return None


def resolve_project_root(root: Optional[str] = None) -> Path:
    """Resolve the project root from an argument, the environment, or the cwd."""
    if root:
        resolved = Path(root).expanduser().resolve()
        if not resolved.exists():
            raise ValueError(f"Provided root '{root}' does not exist.")
        return resolved

    env_root = os.getenv(PROJECT_ROOT_ENV)
    if env_root:
        env_path = Path(env_root).expanduser().resolve()
        if not env_path.exists():
            raise ValueError(
                f"Environment variable {PROJECT_ROOT_ENV} points to '{env_root}', which does not exist."
            )
        return env_path

    detected_root = find_sdd_root()
    if detected_root:
        return detected_root

    raise ValueError(
        "Unable to determine project root automatically. Pass a root explicitly, "
        f"set {PROJECT_ROOT_ENV}, or run inside a project containing '{PROJECT_MARKER_DIRECTORY}/'."
    )
