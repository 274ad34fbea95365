"""Runs one org-unit distribution sub-query against the org-unit structure tables."""

from __future__ import annotations

import logging
from typing import Any

from eventanalytics.ast.builder import QueryBuilder, alias, col, eq, func, lit
from eventanalytics.ast.nodes import InList, Select
from eventanalytics.dialect.base import Dialect
from eventanalytics.models.query import OrgUnitQueryParams
from eventanalytics.storage.executor import QueryExecutor
from eventanalytics.tables import sql

logger = logging.getLogger("eventanalytics.service")


class OrgUnitAnalyticsManager:
    """Counts org units per org-unit group, rolled up to the requested org units."""

    def __init__(self, executor: QueryExecutor, dialect: Dialect) -> None:
        self._executor = executor
        self._dialect = dialect

    def build_query(self, params: OrgUnitQueryParams) -> Select:
        """Distribution query for org units that all share one hierarchy level."""
        levels = params.org_unit_levels
        if len(levels) != 1:
            raise ValueError(f"Org units of a sub-query must share one level, got {levels}")
        level_column = col(sql.org_unit_level_column(levels[0]), sql.ORG_UNIT_STRUCTURE)
        group_set_columns = [
            col(gs.uid, sql.ORG_UNIT_GROUP_SET_STRUCTURE) for gs in params.org_unit_group_sets
        ]
        qb = (
            QueryBuilder()
            .select(alias(level_column, "orgunit"), *group_set_columns)
            .select_aliased(
                func("count", col("organisationunitid", sql.ORG_UNIT_GROUP_SET_STRUCTURE)),
                "count",
            )
            .from_("_orgunitstructure", alias=sql.ORG_UNIT_STRUCTURE)
            .inner_join(
                "_organisationunitgroupsetstructure",
                on=eq(
                    col("organisationunitid", sql.ORG_UNIT_STRUCTURE),
                    col("organisationunitid", sql.ORG_UNIT_GROUP_SET_STRUCTURE),
                ),
                alias=sql.ORG_UNIT_GROUP_SET_STRUCTURE,
            )
            .where(InList(expr=level_column, values=[lit(ou.uid) for ou in params.org_units]))
            .group_by(level_column, *group_set_columns)
        )
        return qb.build()

    def get_org_unit_distribution(self, params: OrgUnitQueryParams) -> list[list[Any]]:
        """Rows of ``[org unit uid, group uid per group set..., count]``."""
        query = self.build_query(params)
        sql.validate_identifiers(query)
        rendered = self._dialect.compile(query)
        logger.debug("Org unit distribution SQL: %s", rendered)
        return [list(row) for row in self._executor.query_for_rows(rendered)]
