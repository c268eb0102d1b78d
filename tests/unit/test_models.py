"""Unit tests for SpecSync models.

This module tests the data records, their serialization,
and their validation methods.
"""

import pytest

from specsync.models import (
    CodeLocation,
    CodeReference,
    ExtractedRequirement,
    RequirementStatus,
    SpecSummary,
    SyncOptions,
    SyncOutcome,
    SyncResult,
)


class TestExtractedRequirement:
    """Test cases for ExtractedRequirement."""

    def test_from_dict_restores_requirement(self):
        """Test creating a requirement from its dictionary form."""
        requirement = ExtractedRequirement(
            id="REQ-001", spec_id="auth", line=3, title="Login", keyword="SHALL"
        )

        assert ExtractedRequirement.from_dict(requirement.to_dict()) == requirement

    def test_validate_valid(self):
        """Test validating a well-formed requirement."""
        requirement = ExtractedRequirement(id="REQ-001", spec_id="auth", line=1, keyword="MUST NOT")

        assert requirement.validate() == []

    def test_validate_invalid(self):
        """Test validating a malformed requirement."""
        requirement = ExtractedRequirement(id="", spec_id="", line=0, keyword="OUGHT")

        issues = requirement.validate()

        assert "Requirement ID is required" in issues
        assert "Spec ID is required" in issues
        assert any("Line must be" in issue for issue in issues)
        assert any("Invalid RFC 2119 keyword" in issue for issue in issues)


class TestCodeReference:
    """Test cases for CodeReference."""

    def test_to_location(self):
        """Test projecting a reference onto a location."""
        ref = CodeReference(req_id="REQ-007", file="src/a.ts", line=12, type="code", context="// @spec REQ-007")

        location = ref.to_location()

        assert location == CodeLocation(
            file="src/a.ts", line=12, type="code", text="// @spec REQ-007", req_id="REQ-007"
        )

    def test_round_trip_dict(self):
        """Test dictionary conversion of a reference."""
        ref = CodeReference(req_id="REQ-001", file="tests/a.test.ts", line=1, type="test")

        data = ref.to_dict()

        assert data["req_id"] == "REQ-001"
        assert data["context"] is None
        assert CodeReference.from_dict(data) == ref


class TestRequirementStatus:
    """Test cases for RequirementStatus."""

    def test_has_code_and_tests(self):
        """Test location type helpers."""
        status = RequirementStatus(
            id="REQ-001",
            spec_id="auth",
            status="implemented",
            locations=[
                CodeLocation(file="src/a.ts", line=1, type="code"),
                CodeLocation(file="tests/a.test.ts", line=2, type="test"),
            ],
        )

        assert status.has_code()
        assert status.has_tests()

    def test_missing_has_no_locations(self):
        """Test a status without locations."""
        status = RequirementStatus(id="REQ-002", spec_id="auth", status="missing")

        assert status.locations == []
        assert not status.has_code()
        assert not status.has_tests()


class TestSyncResult:
    """Test cases for SyncResult."""

    def test_empty_result(self):
        """Test the result used when no requirements exist."""
        result = SyncResult.empty()

        assert result.sync_rate == 100
        assert result.total_requirements == 0
        assert result.specs == []
        assert result.is_fully_synced()

    def test_from_dict_restores_nested_records(self):
        """Test that nested records survive dictionary conversion."""
        result = SyncResult(
            specs=[SpecSummary(id="auth", requirement_count=2, implemented_count=1, missing_count=1, sync_rate=50)],
            requirements=[
                RequirementStatus(
                    id="REQ-001",
                    spec_id="auth",
                    status="implemented",
                    locations=[CodeLocation(file="src/a.ts", line=1, type="code", text="@spec REQ-001")],
                    title="Login",
                    keyword="SHALL",
                ),
                RequirementStatus(id="REQ-002", spec_id="auth", status="missing"),
            ],
            sync_rate=50,
            implemented=["REQ-001"],
            missing=["REQ-002"],
            orphans=[CodeLocation(file="src/b.ts", line=4, type="code", text="REQ-099: x", req_id="REQ-099")],
            total_requirements=2,
            total_implemented=1,
        )

        assert SyncResult.from_dict(result.to_dict()) == result

    def test_get_requirement(self):
        """Test looking up a requirement verdict."""
        result = SyncResult(requirements=[RequirementStatus(id="REQ-001", spec_id="auth", status="missing")])

        assert result.get_requirement("REQ-001").spec_id == "auth"
        assert result.get_requirement("REQ-404") is None


class TestSyncOptions:
    """Test cases for SyncOptions."""

    def test_defaults(self):
        """Test documented defaults."""
        options = SyncOptions()

        assert options.threshold == 100
        assert options.ci is False
        assert options.src_dir is None
        assert options.colors is True
        assert options.count_partial is False
        assert options.validate() == []

    def test_from_dict_defaults_threshold(self):
        """Test that a missing threshold falls back to 100."""
        options = SyncOptions.from_dict({"ci": True, "threshold": None})

        assert options.threshold == 100
        assert options.ci is True

    @pytest.mark.parametrize("threshold", [-1, 101, "90", True])
    def test_validate_rejects_bad_threshold(self, threshold):
        """Test threshold validation."""
        options = SyncOptions(threshold=threshold)

        assert any("Threshold" in issue for issue in options.validate())

    def test_validate_rejects_two_formats(self):
        """Test that JSON and markdown output are exclusive."""
        options = SyncOptions(json=True, markdown=True)

        assert "Choose either JSON or markdown output, not both" in options.validate()


class TestSyncOutcome:
    """Test cases for SyncOutcome."""

    def test_data_is_none_without_result(self):
        """Test failed outcomes without a result."""
        outcome = SyncOutcome(success=False, error=ValueError("boom"))

        assert outcome.data is None
        assert outcome.to_dict()["error"] == "boom"

    def test_data_carries_result_and_output(self):
        """Test the data view of a successful outcome."""
        result = SyncResult.empty()
        outcome = SyncOutcome(success=True, result=result, output="ok")

        assert outcome.data == {"result": result, "output": "ok"}
        assert outcome.to_dict()["result"]["sync_rate"] == 100
