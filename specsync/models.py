"""Data models for SpecSync.

This module contains the records passed between the sync stages:
requirements extracted from specs, annotation references found in code
and tests, and the per-requirement and per-spec verdicts of a sync run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


RFC2119_KEYWORDS = ("SHALL NOT", "MUST NOT", "SHALL", "MUST", "SHOULD", "MAY")

REFERENCE_TYPES = ("code", "test")

STATUS_IMPLEMENTED = "implemented"
STATUS_PARTIAL = "partial"
STATUS_MISSING = "missing"
REQUIREMENT_STATUSES = (STATUS_IMPLEMENTED, STATUS_PARTIAL, STATUS_MISSING)


@dataclass(slots=True)
class ExtractedRequirement:
    """A single requirement declared in a spec file."""

    id: str
    spec_id: str
    line: int
    title: Optional[str] = None
    description: Optional[str] = None
    keyword: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "spec_id": self.spec_id,
            "line": self.line,
            "title": self.title,
            "description": self.description,
            "keyword": self.keyword,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExtractedRequirement":
        """Create from dictionary representation."""
        return cls(
            id=data["id"],
            spec_id=data["spec_id"],
            line=data["line"],
            title=data.get("title"),
            description=data.get("description"),
            keyword=data.get("keyword"),
        )

    def validate(self) -> List[str]:
        """Validate the requirement and return any issues."""
        issues = []

        if not self.id:
            issues.append("Requirement ID is required")
        if not self.spec_id:
            issues.append("Spec ID is required")
        if self.line < 1:
            issues.append(f"Line must be 1 or greater, got: {self.line}")
        if self.keyword is not None and self.keyword not in RFC2119_KEYWORDS:
            issues.append(f"Invalid RFC 2119 keyword: {self.keyword}")

        return issues


@dataclass(slots=True)
class CodeReference:
    """One `REQ-xxx` occurrence found by a scanner."""

    req_id: str
    file: str
    line: int
    type: str  # 'code' or 'test'
    context: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "req_id": self.req_id,
            "file": self.file,
            "line": self.line,
            "type": self.type,
            "context": self.context,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CodeReference":
        """Create from dictionary representation."""
        return cls(
            req_id=data["req_id"],
            file=data["file"],
            line=data["line"],
            type=data["type"],
            context=data.get("context"),
        )

    def to_location(self) -> "CodeLocation":
        """Project the reference onto a location record."""
        return CodeLocation(
            file=self.file,
            line=self.line,
            type=self.type,
            text=self.context,
            req_id=self.req_id,
        )


@dataclass(slots=True)
class CodeLocation:
    """A place in the source or test tree tied to a requirement."""

    file: str
    line: int
    type: str
    text: Optional[str] = None
    req_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "file": self.file,
            "line": self.line,
            "type": self.type,
            "text": self.text,
            "req_id": self.req_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CodeLocation":
        """Create from dictionary representation."""
        return cls(
            file=data["file"],
            line=data["line"],
            type=data["type"],
            text=data.get("text"),
            req_id=data.get("req_id"),
        )


@dataclass(slots=True)
class RequirementStatus:
    """Matcher verdict for one requirement."""

    id: str
    spec_id: str
    status: str  # 'implemented', 'partial', 'missing'
    locations: List[CodeLocation] = field(default_factory=list)
    title: Optional[str] = None
    keyword: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "spec_id": self.spec_id,
            "status": self.status,
            "locations": [location.to_dict() for location in self.locations],
            "title": self.title,
            "keyword": self.keyword,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RequirementStatus":
        """Create from dictionary representation."""
        return cls(
            id=data["id"],
            spec_id=data["spec_id"],
            status=data["status"],
            locations=[CodeLocation.from_dict(item) for item in data.get("locations", [])],
            title=data.get("title"),
            keyword=data.get("keyword"),
        )

    def has_code(self) -> bool:
        return any(location.type == "code" for location in self.locations)

    def has_tests(self) -> bool:
        return any(location.type == "test" for location in self.locations)


@dataclass(slots=True)
class SpecSummary:
    """Per-spec rollup of requirement statuses."""

    id: str
    requirement_count: int = 0
    implemented_count: int = 0
    partial_count: int = 0
    missing_count: int = 0
    sync_rate: int = 100
    title: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "title": self.title,
            "requirement_count": self.requirement_count,
            "implemented_count": self.implemented_count,
            "partial_count": self.partial_count,
            "missing_count": self.missing_count,
            "sync_rate": self.sync_rate,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SpecSummary":
        """Create from dictionary representation."""
        return cls(
            id=data["id"],
            title=data.get("title"),
            requirement_count=data.get("requirement_count", 0),
            implemented_count=data.get("implemented_count", 0),
            partial_count=data.get("partial_count", 0),
            missing_count=data.get("missing_count", 0),
            sync_rate=data.get("sync_rate", 100),
        )


@dataclass(slots=True)
class SyncResult:
    """Complete output of one sync run."""

    specs: List[SpecSummary] = field(default_factory=list)
    requirements: List[RequirementStatus] = field(default_factory=list)
    sync_rate: int = 100
    implemented: List[str] = field(default_factory=list)
    partial: List[str] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)
    orphans: List[CodeLocation] = field(default_factory=list)
    total_requirements: int = 0
    total_implemented: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "specs": [spec.to_dict() for spec in self.specs],
            "requirements": [status.to_dict() for status in self.requirements],
            "sync_rate": self.sync_rate,
            "implemented": list(self.implemented),
            "partial": list(self.partial),
            "missing": list(self.missing),
            "orphans": [orphan.to_dict() for orphan in self.orphans],
            "total_requirements": self.total_requirements,
            "total_implemented": self.total_implemented,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SyncResult":
        """Create from dictionary representation."""
        return cls(
            specs=[SpecSummary.from_dict(item) for item in data.get("specs", [])],
            requirements=[RequirementStatus.from_dict(item) for item in data.get("requirements", [])],
            sync_rate=data.get("sync_rate", 100),
            implemented=list(data.get("implemented", [])),
            partial=list(data.get("partial", [])),
            missing=list(data.get("missing", [])),
            orphans=[CodeLocation.from_dict(item) for item in data.get("orphans", [])],
            total_requirements=data.get("total_requirements", 0),
            total_implemented=data.get("total_implemented", 0),
        )

    @classmethod
    def empty(cls) -> "SyncResult":
        """Result for a project without any requirements."""
        return cls()

    def get_requirement(self, req_id: str) -> Optional[RequirementStatus]:
        """Look up a requirement verdict by ID."""
        for status in self.requirements:
            if status.id == req_id:
                return status
        return None

    def is_fully_synced(self) -> bool:
        return not self.missing and not self.partial


@dataclass(slots=True)
class SyncOptions:
    """Options for a sync run.

    ``None`` for ``src_dir``, ``include``, ``exclude`` and ``test_dirs``
    selects the scanner defaults (``<root>/src``, common source
    extensions, dependency/build/test exclusions, and the conventional
    test directories).
    """

    spec_id: Optional[str] = None
    src_dir: Optional[str] = None
    include: Optional[List[str]] = None
    exclude: Optional[List[str]] = None
    test_dirs: Optional[List[str]] = None
    threshold: int = 100
    ci: bool = False
    json: bool = False
    markdown: bool = False
    colors: bool = True
    count_partial: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "spec_id": self.spec_id,
            "src_dir": self.src_dir,
            "include": list(self.include) if self.include is not None else None,
            "exclude": list(self.exclude) if self.exclude is not None else None,
            "test_dirs": list(self.test_dirs) if self.test_dirs is not None else None,
            "threshold": self.threshold,
            "ci": self.ci,
            "json": self.json,
            "markdown": self.markdown,
            "colors": self.colors,
            "count_partial": self.count_partial,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SyncOptions":
        """Create from dictionary representation."""
        threshold = data.get("threshold")
        return cls(
            spec_id=data.get("spec_id"),
            src_dir=data.get("src_dir"),
            include=data.get("include"),
            exclude=data.get("exclude"),
            test_dirs=data.get("test_dirs"),
            threshold=100 if threshold is None else threshold,
            ci=data.get("ci", False),
            json=data.get("json", False),
            markdown=data.get("markdown", False),
            colors=data.get("colors", True),
            count_partial=data.get("count_partial", False),
        )

    def validate(self) -> List[str]:
        """Validate the options and return any issues."""
        issues = []

        if isinstance(self.threshold, bool) or not isinstance(self.threshold, (int, float)):
            issues.append(f"Threshold must be a number, got: {self.threshold!r}")
        elif not 0 <= self.threshold <= 100:
            issues.append(f"Threshold must be 0-100, got: {self.threshold}")
        if self.json and self.markdown:
            issues.append("Choose either JSON or markdown output, not both")
        if self.spec_id is not None and not self.spec_id.strip():
            issues.append("Spec ID cannot be blank")

        return issues


@dataclass(slots=True)
class SyncOutcome:
    """Result envelope returned by ``execute_sync``."""

    success: bool
    result: Optional[SyncResult] = None
    output: Optional[str] = None
    error: Optional[Exception] = None

    @property
    def data(self) -> Optional[Dict[str, Any]]:
        if self.result is None:
            return None
        return {"result": self.result, "output": self.output}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "success": self.success,
            "result": self.result.to_dict() if self.result else None,
            "output": self.output,
            "error": str(self.error) if self.error else None,
        }
