"""In-memory metadata store backed by a MetadataSnapshot."""

from __future__ import annotations

from eventanalytics.models.metadata import (
    CategoryOptionGroupSet,
    MetadataSnapshot,
    OrganisationUnit,
    OrganisationUnitGroupSet,
    OrganisationUnitLevel,
    PeriodType,
    Program,
)
from eventanalytics.storage.repository import MetadataStore


class InMemoryMetadataStore(MetadataStore):
    """Serves metadata from a snapshot loaded once at build start."""

    def __init__(self, snapshot: MetadataSnapshot | None = None) -> None:
        self._snapshot = snapshot or MetadataSnapshot()
        self._org_units = {ou.uid: ou for ou in self._snapshot.organisation_units}
        self._group_sets = {gs.uid: gs for gs in self._snapshot.organisation_unit_group_sets}

    @property
    def snapshot(self) -> MetadataSnapshot:
        return self._snapshot

    def get_programs(self) -> list[Program]:
        return list(self._snapshot.programs)

    def get_filled_organisation_unit_levels(self) -> list[OrganisationUnitLevel]:
        levels = {lvl.level: lvl for lvl in self._snapshot.organisation_unit_levels}
        # Levels without explicit metadata still get a column when org units use them
        for ou in self._snapshot.organisation_units:
            if ou.level not in levels:
                levels[ou.level] = OrganisationUnitLevel(
                    uid=f"level{ou.level}", name=f"Level {ou.level}", level=ou.level
                )
        return [levels[k] for k in sorted(levels)]

    def get_data_dimension_org_unit_group_sets(self) -> list[OrganisationUnitGroupSet]:
        return [gs for gs in self._snapshot.organisation_unit_group_sets if gs.data_dimension]

    def get_attribute_category_option_group_sets(self) -> list[CategoryOptionGroupSet]:
        return [gs for gs in self._snapshot.category_option_group_sets if gs.data_dimension]

    def get_available_period_types(self) -> list[PeriodType]:
        return list(self._snapshot.period_types)

    def get_organisation_units(self, uids: list[str]) -> list[OrganisationUnit]:
        return [self._org_units[uid] for uid in uids if uid in self._org_units]

    def get_org_unit_group_sets(self, uids: list[str]) -> list[OrganisationUnitGroupSet]:
        return [self._group_sets[uid] for uid in uids if uid in self._group_sets]
