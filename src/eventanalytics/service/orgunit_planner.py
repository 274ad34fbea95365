"""Splits an org-unit distribution query into one sub-query per hierarchy level."""

from __future__ import annotations

from collections import defaultdict

from eventanalytics.models.metadata import OrganisationUnit
from eventanalytics.models.query import OrgUnitQueryParams


class OrgUnitQueryPlanner:
    def plan_query(self, params: OrgUnitQueryParams) -> list[OrgUnitQueryParams]:
        """One query per org-unit level, ascending by level; org unit order is kept."""
        by_level: dict[int, list[OrganisationUnit]] = defaultdict(list)
        for org_unit in params.org_units:
            by_level[org_unit.level].append(org_unit)
        return [params.with_org_units(by_level[level]) for level in sorted(by_level)]
