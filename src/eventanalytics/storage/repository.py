"""Abstract interfaces for the read-only metadata a table build consumes."""

from __future__ import annotations

from abc import ABC, abstractmethod

from eventanalytics.models.metadata import (
    CategoryOptionGroupSet,
    OrganisationUnit,
    OrganisationUnitGroupSet,
    OrganisationUnitLevel,
    PeriodType,
    Program,
)


class MetadataStore(ABC):
    @abstractmethod
    def get_programs(self) -> list[Program]: ...

    @abstractmethod
    def get_filled_organisation_unit_levels(self) -> list[OrganisationUnitLevel]:
        """One entry per hierarchy level that has org units, ascending by level."""

    @abstractmethod
    def get_data_dimension_org_unit_group_sets(self) -> list[OrganisationUnitGroupSet]: ...

    @abstractmethod
    def get_attribute_category_option_group_sets(self) -> list[CategoryOptionGroupSet]: ...

    @abstractmethod
    def get_available_period_types(self) -> list[PeriodType]: ...

    @abstractmethod
    def get_organisation_units(self, uids: list[str]) -> list[OrganisationUnit]:
        """Org units with the given uids, in request order; unknown uids are skipped."""

    @abstractmethod
    def get_org_unit_group_sets(self, uids: list[str]) -> list[OrganisationUnitGroupSet]:
        """Group sets with the given uids, in request order; unknown uids are skipped."""
