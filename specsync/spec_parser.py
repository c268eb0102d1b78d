"""Requirement extraction from SDD spec files.

Specs live at ``<root>/.sdd/specs/<spec_id>/spec.md``: YAML frontmatter
followed by a markdown body. A requirement is declared either by a
heading such as ``### REQ-001: Login`` or by any other ``REQ-NNN``
mention in the body. The first declaration of an ID wins.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .models import ExtractedRequirement
from .sync_logging import log_performance


logger = logging.getLogger("specsync.parser")

REQ_ID_PATTERN = re.compile(r"\b(REQ-\d+)\b", re.IGNORECASE)
REQ_HEADER_PATTERN = re.compile(r"^#{2,4}\s*(REQ-\d+):\s*(.+)$", re.IGNORECASE)

# Negated forms come first so "SHALL NOT" is not read as "SHALL".
RFC_KEYWORD_PAREN_PATTERN = re.compile(
    r"\(\s*(SHALL\s+NOT|MUST\s+NOT|SHALL|MUST|SHOULD|MAY)\s*\)", re.IGNORECASE
)
RFC_KEYWORD_BARE_PATTERN = re.compile(r"\b(SHALL\s+NOT|MUST\s+NOT|SHALL|MUST|SHOULD|MAY)\b")

TITLE_PATTERN = re.compile(r"^#\s+(.+)$")

# Lines after a requirement heading searched for its keyword
KEYWORD_LOOKAHEAD = 5


class SpecNotFoundError(ValueError):
    """Raised when a requested spec directory does not exist."""

    def __init__(self, spec_id: str, path: Path):
        super().__init__(f"Spec '{spec_id}' not found at {path}")
        self.spec_id = spec_id
        self.path = path


def split_frontmatter(content: str) -> Tuple[Optional[str], str, int]:
    """Return ``(frontmatter, body, body_offset)``.

    ``body_offset`` is the number of file lines preceding the body so
    that body line numbers can be mapped back onto the file.
    """
    lines = content.split("\n")
    if not lines or lines[0].strip() != "---":
        return None, content, 0
    for index in range(1, len(lines)):
        if lines[index].strip() in ("---", "..."):
            frontmatter = "\n".join(lines[1:index])
            body = "\n".join(lines[index + 1:])
            return frontmatter, body, index + 1
    return None, content, 0


def normalize_keyword(raw: str) -> str:
    return " ".join(raw.upper().split())


def find_keyword(line: str) -> Optional[str]:
    """Find an RFC 2119 keyword on a line.

    Parenthesised markers such as ``(SHALL)`` are accepted in any case;
    bare words only when written in capitals.
    """
    match = RFC_KEYWORD_PAREN_PATTERN.search(line) or RFC_KEYWORD_BARE_PATTERN.search(line)
    if match:
        return normalize_keyword(match.group(1))
    return None


class SpecParser:
    """Extract requirements from the specs of an SDD project."""

    def __init__(self, project_root: Path | str):
        self.project_root = Path(project_root).resolve()
        self.specs_dir = self.project_root / ".sdd" / "specs"
        self.spec_titles: Dict[str, str] = {}

    def exists(self) -> bool:
        """Check whether the specs directory exists."""
        return self.specs_dir.is_dir()

    def list_specs(self) -> List[str]:
        """List spec IDs (directory names) in sorted order."""
        if not self.exists():
            return []
        try:
            return sorted(path.name for path in self.specs_dir.iterdir() if path.is_dir())
        except OSError as e:
            logger.warning(f"Could not list specs in {self.specs_dir}: {e}")
            return []

    def parse_spec(self, spec_id: str) -> List[ExtractedRequirement]:
        """Extract requirements from a single spec.

        Falls back to every markdown file in the spec directory when it has
        no ``spec.md``. Raises ``SpecNotFoundError`` for an unknown spec.
        """
        spec_dir = self.specs_dir / spec_id
        if not spec_dir.is_dir():
            raise SpecNotFoundError(spec_id, spec_dir)

        spec_path = spec_dir / "spec.md"
        if spec_path.is_file():
            return self._parse_file(spec_path, spec_id)

        requirements: List[ExtractedRequirement] = []
        seen = set()
        for path in sorted(spec_dir.glob("*.md")):
            for requirement in self._parse_file(path, spec_id):
                if requirement.id not in seen:
                    seen.add(requirement.id)
                    requirements.append(requirement)
        return requirements

    @log_performance("parse_all_specs")
    def parse_all_specs(self) -> List[ExtractedRequirement]:
        """Extract requirements from every spec in the project."""
        requirements: List[ExtractedRequirement] = []
        for spec_id in self.list_specs():
            try:
                requirements.extend(self.parse_spec(spec_id))
            except SpecNotFoundError as e:
                logger.warning(f"Skipping spec removed during the scan: {e}")
        return requirements

    def _parse_file(self, path: Path, spec_id: str) -> List[ExtractedRequirement]:
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Skipping unreadable spec file {path}: {e}")
            return []

        raw_frontmatter, body, offset = split_frontmatter(content)
        try:
            metadata = self._load_frontmatter(raw_frontmatter)
        except yaml.YAMLError as e:
            logger.warning(f"Skipping spec file {path} with invalid frontmatter: {e}")
            return []

        self._record_title(spec_id, metadata, body)
        requirements = self.extract_requirements(body, spec_id, line_offset=offset)
        logger.debug(f"Extracted {len(requirements)} requirements from {path}")
        return requirements

    def _load_frontmatter(self, raw: Optional[str]) -> Dict[str, Any]:
        if not raw or not raw.strip():
            return {}
        data = yaml.safe_load(raw)
        return data if isinstance(data, dict) else {}

    def _record_title(self, spec_id: str, metadata: Dict[str, Any], body: str) -> None:
        if spec_id in self.spec_titles:
            return
        title = metadata.get("title")
        if not title:
            for line in body.split("\n"):
                match = TITLE_PATTERN.match(line.strip())
                if match:
                    title = match.group(1).strip()
                    break
        if title:
            self.spec_titles[spec_id] = str(title)

    def extract_requirements(
        self,
        body: str,
        spec_id: str,
        *,
        line_offset: int = 0,
    ) -> List[ExtractedRequirement]:
        """Extract requirements from a markdown body."""
        lines = body.split("\n")
        requirements: List[ExtractedRequirement] = []
        seen_ids = set()

        for index, line in enumerate(lines):
            line_number = index + 1 + line_offset

            header = REQ_HEADER_PATTERN.match(line.strip())
            if header:
                req_id = header.group(1).upper()
                if req_id not in seen_ids:
                    seen_ids.add(req_id)
                    requirements.append(
                        ExtractedRequirement(
                            id=req_id,
                            spec_id=spec_id,
                            line=line_number,
                            title=header.group(2).strip(),
                            keyword=self._keyword_near(lines, index),
                        )
                    )
                continue

            for match in REQ_ID_PATTERN.finditer(line):
                req_id = match.group(1).upper()
                if req_id in seen_ids:
                    continue
                seen_ids.add(req_id)
                requirements.append(
                    ExtractedRequirement(
                        id=req_id,
                        spec_id=spec_id,
                        line=line_number,
                        description=line.strip(),
                        keyword=find_keyword(line),
                    )
                )

        return requirements

    def _keyword_near(self, lines: List[str], header_index: int) -> Optional[str]:
        window = lines[header_index:header_index + KEYWORD_LOOKAHEAD]
        for position, line in enumerate(window):
            if position > 0 and REQ_HEADER_PATTERN.match(line.strip()):
                break
            keyword = find_keyword(line)
            if keyword:
                return keyword
        return None
