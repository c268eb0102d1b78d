"""Matching of requirements against code and test references."""

from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Sequence

from .models import (
    STATUS_IMPLEMENTED,
    STATUS_MISSING,
    STATUS_PARTIAL,
    CodeLocation,
    CodeReference,
    ExtractedRequirement,
    RequirementStatus,
    SpecSummary,
    SyncResult,
)


def sync_percentage(synced: int, total: int) -> int:
    """Integer percentage rounded half up; 100 when there is nothing to sync."""
    if total <= 0:
        return 100
    return (200 * synced + total) // (2 * total)


class SyncMatcher:
    """Join requirements with the references that mention them.

    A requirement with at least one code reference is implemented; one
    referenced only from tests is partial; anything else is missing.
    Partial requirements never count toward ``total_implemented``. With
    ``count_partial`` they do count toward the sync rates.
    """

    def __init__(self, count_partial: bool = False):
        self.count_partial = count_partial

    def match(
        self,
        requirements: Sequence[ExtractedRequirement],
        code_refs: Sequence[CodeReference],
        test_refs: Sequence[CodeReference],
        spec_titles: Optional[Mapping[str, str]] = None,
    ) -> SyncResult:
        all_refs = list(code_refs) + list(test_refs)

        by_id: Dict[str, List[CodeReference]] = {}
        for ref in all_refs:
            by_id.setdefault(ref.req_id, []).append(ref)

        statuses = [self._status_for(req, by_id.get(req.id, [])) for req in requirements]

        implemented = [s.id for s in statuses if s.status == STATUS_IMPLEMENTED]
        partial = [s.id for s in statuses if s.status == STATUS_PARTIAL]
        missing = [s.id for s in statuses if s.status == STATUS_MISSING]

        return SyncResult(
            specs=self._summaries(statuses, spec_titles or {}),
            requirements=statuses,
            sync_rate=sync_percentage(self._synced(len(implemented), len(partial)), len(statuses)),
            implemented=implemented,
            partial=partial,
            missing=missing,
            orphans=self._orphans(requirements, all_refs),
            total_requirements=len(statuses),
            total_implemented=len(implemented),
        )

    def _synced(self, implemented: int, partial: int) -> int:
        return implemented + partial if self.count_partial else implemented

    def _status_for(self, requirement: ExtractedRequirement, refs: List[CodeReference]) -> RequirementStatus:
        if any(ref.type == "code" for ref in refs):
            status = STATUS_IMPLEMENTED
        elif refs:
            status = STATUS_PARTIAL
        else:
            status = STATUS_MISSING

        return RequirementStatus(
            id=requirement.id,
            spec_id=requirement.spec_id,
            status=status,
            locations=[ref.to_location() for ref in refs],
            title=requirement.title,
            keyword=requirement.keyword,
        )

    def _summaries(
        self,
        statuses: List[RequirementStatus],
        spec_titles: Mapping[str, str],
    ) -> List[SpecSummary]:
        summaries: Dict[str, SpecSummary] = {}
        for status in statuses:
            summary = summaries.get(status.spec_id)
            if summary is None:
                summary = SpecSummary(id=status.spec_id, title=spec_titles.get(status.spec_id))
                summaries[status.spec_id] = summary
            summary.requirement_count += 1
            if status.status == STATUS_IMPLEMENTED:
                summary.implemented_count += 1
            elif status.status == STATUS_PARTIAL:
                summary.partial_count += 1
            else:
                summary.missing_count += 1

        for summary in summaries.values():
            summary.sync_rate = sync_percentage(
                self._synced(summary.implemented_count, summary.partial_count),
                summary.requirement_count,
            )
        return list(summaries.values())

    def _orphans(
        self,
        requirements: Sequence[ExtractedRequirement],
        refs: List[CodeReference],
    ) -> List[CodeLocation]:
        # Every occurrence is reported; no deduplication by file or line
        known_ids = {req.id for req in requirements}
        return [
            CodeLocation(
                file=ref.file,
                line=ref.line,
                type=ref.type,
                text=f"{ref.req_id}: {ref.context or ''}",
                req_id=ref.req_id,
            )
            for ref in refs
            if ref.req_id not in known_ids
        ]
