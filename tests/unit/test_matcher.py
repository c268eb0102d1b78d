"""Unit tests for requirement/reference matching."""

import pytest

from specsync.matcher import SyncMatcher, sync_percentage
from specsync.models import CodeReference, ExtractedRequirement


def req(req_id, spec_id="auth", title=None, keyword="SHALL"):
    return ExtractedRequirement(id=req_id, spec_id=spec_id, line=1, title=title, keyword=keyword)


def code(req_id, file="src/a.ts", line=1):
    return CodeReference(req_id=req_id, file=file, line=line, type="code", context=f"// @spec {req_id}")


def tested(req_id, file="tests/a.test.ts", line=1):
    return CodeReference(req_id=req_id, file=file, line=line, type="test", context=f"{req_id}: works")


class TestSyncPercentage:
    """Test cases for the sync rate arithmetic."""

    @pytest.mark.parametrize(
        "synced, total, expected",
        [(0, 0, 100), (0, 3, 0), (1, 2, 50), (1, 3, 33), (2, 3, 67), (1, 8, 13), (3, 3, 100)],
    )
    def test_rounding(self, synced, total, expected):
        """Test half-up rounding to an integer percentage."""
        assert sync_percentage(synced, total) == expected


class TestStatuses:
    """Test cases for per-requirement status."""

    def test_code_reference_means_implemented(self):
        """Test that any code reference implements a requirement."""
        result = SyncMatcher().match([req("REQ-001")], [code("REQ-001")], [])

        assert result.requirements[0].status == "implemented"
        assert result.implemented == ["REQ-001"]

    def test_test_only_means_partial(self):
        """Test that test-only references leave a requirement partial."""
        result = SyncMatcher().match([req("REQ-001")], [], [tested("REQ-001")])

        assert result.requirements[0].status == "partial"
        assert result.partial == ["REQ-001"]
        assert result.implemented == []
        assert result.missing == []
        assert result.total_implemented == 0
        assert result.sync_rate == 0

    def test_no_reference_means_missing(self):
        """Test that unreferenced requirements are missing."""
        result = SyncMatcher().match([req("REQ-001")], [code("REQ-002")], [])

        assert result.requirements[0].status == "missing"
        assert result.missing == ["REQ-001"]

    def test_locations_aggregate_code_and_tests(self):
        """Test that locations list every matching reference, code first."""
        result = SyncMatcher().match(
            [req("REQ-001", title="Login", keyword="MUST")],
            [code("REQ-001", line=3), code("REQ-001", file="src/b.ts", line=9)],
            [tested("REQ-001", line=5)],
        )

        status = result.requirements[0]
        assert [(loc.file, loc.line, loc.type) for loc in status.locations] == [
            ("src/a.ts", 3, "code"),
            ("src/b.ts", 9, "code"),
            ("tests/a.test.ts", 5, "test"),
        ]
        assert status.title == "Login"
        assert status.keyword == "MUST"


class TestRates:
    """Test cases for global and per-spec rates."""

    def test_empty_requirements(self):
        """Test that no requirements means a 100% rate."""
        result = SyncMatcher().match([], [code("REQ-001")], [])

        assert result.sync_rate == 100
        assert result.total_requirements == 0
        assert len(result.orphans) == 1

    def test_count_partial(self):
        """Test counting partial requirements toward the rate."""
        requirements = [req("REQ-001"), req("REQ-002"), req("REQ-003")]

        result = SyncMatcher(count_partial=True).match(
            requirements, [code("REQ-001")], [tested("REQ-002")]
        )

        assert result.sync_rate == 67
        assert result.total_implemented == 1
        assert result.partial == ["REQ-002"]
        assert result.specs[0].sync_rate == 67

    def test_spec_summaries(self):
        """Test per-spec rollups in first-seen order."""
        requirements = [
            req("REQ-001", spec_id="auth"),
            req("REQ-002", spec_id="auth"),
            req("REQ-010", spec_id="billing"),
            req("REQ-011", spec_id="billing"),
            req("REQ-012", spec_id="billing"),
        ]

        result = SyncMatcher().match(
            requirements,
            [code("REQ-001"), code("REQ-002"), code("REQ-010")],
            [tested("REQ-011")],
            {"auth": "Authentication"},
        )

        auth, billing = result.specs
        assert (auth.id, auth.title, auth.requirement_count, auth.implemented_count, auth.sync_rate) == (
            "auth", "Authentication", 2, 2, 100,
        )
        assert (billing.id, billing.title) == ("billing", None)
        assert (billing.implemented_count, billing.partial_count, billing.missing_count) == (1, 1, 1)
        assert billing.sync_rate == 33
        assert result.sync_rate == 60

    def test_status_lists_partition_requirements(self):
        """Test that status lists agree with per-requirement statuses."""
        requirements = [req(f"REQ-{n:03d}") for n in range(1, 7)]

        result = SyncMatcher().match(
            requirements,
            [code("REQ-001"), code("REQ-004")],
            [tested("REQ-002"), tested("REQ-004")],
        )

        for status_name, ids in (
            ("implemented", result.implemented),
            ("partial", result.partial),
            ("missing", result.missing),
        ):
            assert ids == [s.id for s in result.requirements if s.status == status_name]
        assert len(result.implemented) + len(result.partial) + len(result.missing) == result.total_requirements
        assert 0 <= result.sync_rate <= 100
        assert isinstance(result.sync_rate, int)


class TestOrphans:
    """Test cases for orphan references."""

    def test_orphans_are_unknown_ids_only(self):
        """Test that only references to unknown IDs are orphans."""
        result = SyncMatcher().match(
            [req("REQ-001")],
            [code("REQ-001"), code("REQ-099", file="src/file.ts", line=4)],
            [tested("REQ-098")],
        )

        assert [(o.req_id, o.file, o.line, o.type) for o in result.orphans] == [
            ("REQ-099", "src/file.ts", 4, "code"),
            ("REQ-098", "tests/a.test.ts", 1, "test"),
        ]
        assert result.orphans[0].text == "REQ-099: // @spec REQ-099"

    def test_every_occurrence_is_reported(self):
        """Test that repeated orphan references are not deduplicated."""
        result = SyncMatcher().match(
            [req("REQ-001")],
            [code("REQ-099", line=1), code("REQ-099", line=1), code("REQ-099", line=2)],
            [],
        )

        assert len(result.orphans) == 3

    def test_match_is_deterministic(self):
        """Test that matching the same inputs twice gives equal results."""
        args = ([req("REQ-001"), req("REQ-002")], [code("REQ-001"), code("REQ-404")], [tested("REQ-002")])

        assert SyncMatcher().match(*args) == SyncMatcher().match(*args)
