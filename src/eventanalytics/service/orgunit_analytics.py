"""Org-unit distribution service: request parsing, validation and grid assembly."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from eventanalytics.models.errors import IllegalQueryError
from eventanalytics.models.grid import Grid, GridHeader, MetadataItem
from eventanalytics.models.metadata import ValueType
from eventanalytics.models.query import OrgUnitQueryParams
from eventanalytics.service.orgunit_manager import OrgUnitAnalyticsManager
from eventanalytics.service.orgunit_planner import OrgUnitQueryPlanner
from eventanalytics.storage.repository import MetadataStore

logger = logging.getLogger("eventanalytics.service")


def _split_options(value: str | None) -> list[str]:
    """Comma-delimited option list; blanks are dropped."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


class OrgUnitAnalyticsService:
    """Answers org-unit distribution requests: org unit × group set counts.

    Sub-queries produced by the planner run concurrently; rows are merged into
    the grid only once every sub-query has completed.
    """

    def __init__(
        self,
        metadata: MetadataStore,
        manager: OrgUnitAnalyticsManager,
        planner: OrgUnitQueryPlanner | None = None,
        max_workers: int = 4,
    ) -> None:
        self._metadata = metadata
        self._manager = manager
        self._planner = planner or OrgUnitQueryPlanner()
        self._max_workers = max_workers

    def get_params(
        self, org_units: str | None, org_unit_group_sets: str | None
    ) -> OrgUnitQueryParams:
        return OrgUnitQueryParams(
            org_units=self._metadata.get_organisation_units(_split_options(org_units)),
            org_unit_group_sets=self._metadata.get_org_unit_group_sets(
                _split_options(org_unit_group_sets)
            ),
        )

    def validate(self, params: OrgUnitQueryParams | None) -> OrgUnitQueryParams:
        """Return ``params`` if they describe an answerable query."""
        if params is None:
            raise IllegalQueryError("Query cannot be null")
        if not params.org_units:
            raise IllegalQueryError("At least one org unit must be specified")
        if not params.org_unit_group_sets:
            raise IllegalQueryError("At least one org unit group set must be specified")
        return params

    def get_org_unit_distribution(self, params: OrgUnitQueryParams | None) -> Grid:
        params = self.validate(params)
        queries = self._planner.plan_query(params)
        logger.info(
            "Org unit distribution for %d org units split into %d queries",
            len(params.org_units),
            len(queries),
        )

        grid = Grid()
        self._add_headers(params, grid)
        self._add_metadata(params, grid)

        with ThreadPoolExecutor(
            max_workers=self._max_workers, thread_name_prefix="orgunit-query"
        ) as pool:
            results = list(pool.map(self._manager.get_org_unit_distribution, queries))

        for rows in results:
            for row in rows:
                grid.add_row(row)
        return grid

    def _add_headers(self, params: OrgUnitQueryParams, grid: Grid) -> None:
        grid.add_header(GridHeader(name="orgunit", column="Organisation unit", meta=True))
        for group_set in params.org_unit_group_sets:
            grid.add_header(GridHeader(name=group_set.uid, column=group_set.display_name, meta=True))
        grid.add_header(GridHeader(name="count", column="Count", value_type=ValueType.INTEGER))

    def _add_metadata(self, params: OrgUnitQueryParams, grid: Grid) -> None:
        items: dict[str, MetadataItem] = {}
        for org_unit in params.org_units:
            items[org_unit.uid] = MetadataItem(name=org_unit.display_name)
        for group_set in params.org_unit_group_sets:
            for group in group_set.organisation_unit_groups:
                items[group.uid] = MetadataItem(name=group.display_name)
        metadata: dict[str, Any] = {"items": items}
        grid.set_metadata(metadata)
