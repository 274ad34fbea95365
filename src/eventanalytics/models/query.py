"""Org-unit distribution query parameters."""

from __future__ import annotations

from pydantic import BaseModel, Field

from eventanalytics.models.metadata import OrganisationUnit, OrganisationUnitGroupSet


class OrgUnitQueryParams(BaseModel):
    """Org units to report on and the group sets to break their counts down by."""

    org_units: list[OrganisationUnit] = Field(default=[], alias="orgUnits")
    org_unit_group_sets: list[OrganisationUnitGroupSet] = Field(
        default=[], alias="orgUnitGroupSets"
    )

    model_config = {"populate_by_name": True}

    def with_org_units(self, org_units: list[OrganisationUnit]) -> OrgUnitQueryParams:
        return self.model_copy(update={"org_units": org_units})

    @property
    def org_unit_levels(self) -> list[int]:
        """Distinct hierarchy levels of the requested org units, ascending."""
        return sorted({ou.level for ou in self.org_units})
