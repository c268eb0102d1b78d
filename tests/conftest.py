"""Shared fixtures for SpecSync tests."""

import logging
import textwrap
from pathlib import Path

import pytest


class SddProject:
    """Throwaway SDD project layout rooted at a temporary directory."""

    def __init__(self, root: Path):
        self.root = root
        self.specs_dir = root / ".sdd" / "specs"
        self.src_dir = root / "src"
        self.tests_dir = root / "tests"
        self.specs_dir.mkdir(parents=True)
        self.src_dir.mkdir()
        self.tests_dir.mkdir()

    def write_spec(self, spec_id: str, content: str, filename: str = "spec.md") -> Path:
        spec_dir = self.specs_dir / spec_id
        spec_dir.mkdir(parents=True, exist_ok=True)
        path = spec_dir / filename
        path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")
        return path

    def write_source(self, relative: str, content: str) -> Path:
        return self._write(self.src_dir / relative, content)

    def write_test(self, relative: str, content: str) -> Path:
        return self._write(self.tests_dir / relative, content)

    def _write(self, path: Path, content: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")
        return path


@pytest.fixture
def sdd_project(tmp_path):
    """Create an empty SDD project with .sdd/specs, src and tests."""
    return SddProject(tmp_path)


AUTH_SPEC = """
---
id: auth
title: Authentication
---

# Authentication

### REQ-001: Login

The system SHALL let users log in.

### REQ-002: Logout

The system MUST let users log out.
"""


@pytest.fixture
def auth_spec(sdd_project):
    """Project with an `auth` spec declaring REQ-001 (SHALL) and REQ-002 (MUST)."""
    sdd_project.write_spec("auth", AUTH_SPEC)
    return sdd_project


@pytest.fixture(autouse=True)
def reset_specsync_logger():
    """Restore the specsync logger after each test."""
    logger = logging.getLogger("specsync")
    level = logger.level
    yield
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.setLevel(level)
