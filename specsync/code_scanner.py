"""Source scanning for ``@spec`` annotations.

Recognised forms::

    @spec REQ-001
    @spec: REQ-001
    @spec REQ-001, REQ-002
"""

from __future__ import annotations

import logging
import os
import re
from fnmatch import fnmatch
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from .models import CodeReference
from .sync_logging import log_performance


logger = logging.getLogger("specsync.scanner")

SPEC_ANNOTATION_PATTERN = re.compile(r"@spec:?\s+(REQ-\d+(?:\s*,\s*REQ-\d+)*)", re.IGNORECASE)
REQ_ID_PATTERN = re.compile(r"REQ-\d+", re.IGNORECASE)

SOURCE_EXTENSIONS = (
    "ts", "tsx", "js", "jsx", "mjs", "cjs",
    "py", "go", "java", "kt", "rs", "rb", "php", "cs", "swift",
    "c", "h", "cpp", "hpp",
)

DEFAULT_INCLUDE = [f"**/*.{ext}" for ext in SOURCE_EXTENSIONS]

DEPENDENCY_EXCLUDE = [
    "**/node_modules/**",
    "**/dist/**",
    "**/build/**",
    "**/.git/**",
    "**/coverage/**",
    "**/__pycache__/**",
    "**/.venv/**",
    "**/venv/**",
]

# Test files belong to the test scanner
TEST_FILE_EXCLUDE = [
    "**/*.test.*",
    "**/*.spec.*",
    "**/test_*.py",
    "**/*_test.py",
    "**/*_test.go",
    "**/__tests__/**",
]

DEFAULT_EXCLUDE = DEPENDENCY_EXCLUDE + TEST_FILE_EXCLUDE


def matches_any(relative: str, patterns: Iterable[str]) -> bool:
    """Match a POSIX relative path against glob patterns.

    A leading ``**/`` also matches at the top level, so ``**/dist/**``
    excludes ``dist/app.js`` as well as ``packages/a/dist/app.js``.
    """
    for pattern in patterns:
        if fnmatch(relative, pattern):
            return True
        if pattern.startswith("**/") and fnmatch(relative, pattern[3:]):
            return True
    return False


def find_files(base_dir: Path, include: Sequence[str], exclude: Sequence[str]) -> List[Path]:
    """Enumerate files under ``base_dir`` matching include minus exclude, sorted."""
    if not base_dir.is_dir():
        return []

    found = set()
    for pattern in include:
        for path in base_dir.glob(pattern):
            if not path.is_file():
                continue
            relative = path.relative_to(base_dir).as_posix()
            if matches_any(relative, exclude):
                continue
            found.add(path)
    return sorted(found)


def relative_path(project_root: Path, file_path: Path) -> str:
    """Path of ``file_path`` relative to the project root, in POSIX form."""
    return Path(os.path.relpath(file_path, project_root)).as_posix()


def annotation_ids(line: str) -> List[str]:
    """Uppercased IDs from every ``@spec`` annotation on a line."""
    ids: List[str] = []
    for match in SPEC_ANNOTATION_PATTERN.finditer(line):
        ids.extend(req.upper() for req in REQ_ID_PATTERN.findall(match.group(1)))
    return ids


def read_lines(file_path: Path) -> Optional[List[str]]:
    """Read a file as lines, or ``None`` when it cannot be read."""
    try:
        content = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Skipping unreadable file {file_path}: {e}")
        return None
    return content.splitlines()


class CodeScanner:
    """Scan a source tree for ``@spec`` annotations."""

    def __init__(
        self,
        project_root: Path | str,
        *,
        src_dir: Optional[Path | str] = None,
        include: Optional[Sequence[str]] = None,
        exclude: Optional[Sequence[str]] = None,
        skip_dirs: Optional[Sequence[Path | str]] = None,
    ):
        self.project_root = Path(project_root).resolve()
        self.src_dir = (self.project_root / src_dir).resolve() if src_dir else self.project_root / "src"
        self.include = list(include) if include else list(DEFAULT_INCLUDE)
        self.exclude = list(exclude) if exclude else list(DEFAULT_EXCLUDE)
        # Test directories belong to the test scanner even inside src_dir
        self.skip_dirs = [Path(directory).resolve() for directory in skip_dirs or []]

    def exists(self) -> bool:
        """Check whether the source directory exists."""
        return self.src_dir.is_dir()

    @log_performance("scan_code")
    def scan(self) -> List[CodeReference]:
        """Scan every matching source file."""
        files = [
            path for path in find_files(self.src_dir, self.include, self.exclude)
            if not self._in_skip_dir(path)
        ]
        references: List[CodeReference] = []
        for file_path in files:
            references.extend(self.scan_file(file_path))
        logger.info(f"Found {len(references)} code references in {len(files)} files under {self.src_dir}")
        return references

    def scan_file(self, file_path: Path | str) -> List[CodeReference]:
        """Scan a single file; unreadable files yield no references."""
        file_path = Path(file_path)
        lines = read_lines(file_path)
        if lines is None:
            return []

        relative = relative_path(self.project_root, file_path.resolve())
        references: List[CodeReference] = []
        for index, line in enumerate(lines):
            for req_id in annotation_ids(line):
                references.append(
                    CodeReference(
                        req_id=req_id,
                        file=relative,
                        line=index + 1,
                        type="code",
                        context=line.strip(),
                    )
                )
        return references

    def _in_skip_dir(self, file_path: Path) -> bool:
        resolved = file_path.resolve()
        return any(resolved.is_relative_to(directory) for directory in self.skip_dirs)
