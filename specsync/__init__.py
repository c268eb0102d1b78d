"""SpecSync - spec/code synchronization checks for SDD projects."""

from .code_scanner import CodeScanner
from .matcher import SyncMatcher, sync_percentage
from .models import (
    CodeLocation,
    CodeReference,
    ExtractedRequirement,
    RequirementStatus,
    SpecSummary,
    SyncOptions,
    SyncOutcome,
    SyncResult,
)
from .reporter import SyncReporter
from .spec_parser import SpecNotFoundError, SpecParser
from .sync import execute_sync
from .test_scanner import TestScanner

__all__ = [
    "CodeLocation",
    "CodeReference",
    "CodeScanner",
    "ExtractedRequirement",
    "RequirementStatus",
    "SpecNotFoundError",
    "SpecParser",
    "SpecSummary",
    "SyncMatcher",
    "SyncOptions",
    "SyncOutcome",
    "SyncReporter",
    "SyncResult",
    "TestScanner",
    "execute_sync",
    "sync_percentage",
]
