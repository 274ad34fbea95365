"""Builds and runs the population query that fills one staging partition."""

from __future__ import annotations

import logging
import time

from eventanalytics.ast.builder import (
    QueryBuilder,
    and_,
    col,
    eq,
    func,
    gte,
    lit,
    lt,
    lte,
    or_,
)
from eventanalytics.ast.nodes import Cast, Expr, Insert, IsNull
from eventanalytics.dialect.base import Dialect
from eventanalytics.models.errors import PartitionLoadError, QueryExecutionError
from eventanalytics.models.table import AnalyticsTablePartition, AnalyticsTableUpdateParams
from eventanalytics.storage.executor import QueryExecutor
from eventanalytics.tables import sql
from eventanalytics.tables.validator import validate_sql

logger = logging.getLogger("eventanalytics.tables")

_YEARLY_COLUMN = "yearly"


def _join_key(left: str, right: str, key: str, right_key: str | None = None) -> Expr:
    return eq(col(key, left), col(right_key or key, right))


class PartitionPopulator:
    """Generates ``INSERT INTO <staging partition> SELECT ...`` for a partition and runs it."""

    def __init__(self, executor: QueryExecutor, dialect: Dialect) -> None:
        self._executor = executor
        self._dialect = dialect

    def build_populate_statement(
        self, partition: AnalyticsTablePartition, params: AnalyticsTableUpdateParams
    ) -> Insert:
        table = partition.master_table
        executiondate = col("executiondate", sql.EVENT)
        qb = QueryBuilder().select(*(c.expression for c in table.columns))
        qb.from_("programstageinstance", alias=sql.EVENT)
        qb.inner_join(
            "programinstance",
            on=and_(
                _join_key(sql.EVENT, sql.ENROLLMENT, "programinstanceid"),
                sql.not_deleted(sql.ENROLLMENT),
            ),
            alias=sql.ENROLLMENT,
        )
        qb.inner_join(
            "programstage",
            on=_join_key(sql.EVENT, sql.PROGRAM_STAGE, "programstageid"),
            alias=sql.PROGRAM_STAGE,
        )
        qb.inner_join(
            "program",
            on=and_(
                _join_key(sql.ENROLLMENT, sql.PROGRAM, "programid"),
                sql.not_deleted(sql.PROGRAM),
            ),
            alias=sql.PROGRAM,
        )
        qb.inner_join(
            "categoryoptioncombo",
            on=_join_key(
                sql.EVENT,
                sql.ATTRIBUTE_OPTION_COMBO,
                "attributeoptioncomboid",
                "categoryoptioncomboid",
            ),
            alias=sql.ATTRIBUTE_OPTION_COMBO,
        )
        qb.join(
            "trackedentityinstance",
            on=and_(
                _join_key(sql.ENROLLMENT, sql.TRACKED_ENTITY_INSTANCE, "trackedentityinstanceid"),
                sql.not_deleted(sql.TRACKED_ENTITY_INSTANCE),
            ),
            alias=sql.TRACKED_ENTITY_INSTANCE,
        )
        qb.inner_join(
            "organisationunit",
            on=_join_key(sql.EVENT, sql.ORG_UNIT, "organisationunitid"),
            alias=sql.ORG_UNIT,
        )
        qb.join(
            "_orgunitstructure",
            on=_join_key(sql.EVENT, sql.ORG_UNIT_STRUCTURE, "organisationunitid"),
            alias=sql.ORG_UNIT_STRUCTURE,
        )
        month_start = Cast(expr=func("date_trunc", lit("month"), executiondate), type_name="date")
        start_date = col("startdate", sql.ORG_UNIT_GROUP_SET_STRUCTURE)
        qb.join(
            "_organisationunitgroupsetstructure",
            on=and_(
                _join_key(sql.EVENT, sql.ORG_UNIT_GROUP_SET_STRUCTURE, "organisationunitid"),
                or_(eq(month_start, start_date), IsNull(expr=start_date)),
            ),
            alias=sql.ORG_UNIT_GROUP_SET_STRUCTURE,
        )
        qb.inner_join(
            "_categorystructure",
            on=_join_key(
                sql.EVENT, sql.CATEGORY_STRUCTURE, "attributeoptioncomboid", "categoryoptioncomboid"
            ),
            alias=sql.CATEGORY_STRUCTURE,
        )
        qb.join(
            "_dateperiodstructure",
            on=eq(
                Cast(expr=executiondate, type_name="date"),
                col("dateperiod", sql.DATE_PERIOD_STRUCTURE),
            ),
            alias=sql.DATE_PERIOD_STRUCTURE,
        )
        qb.where(gte(executiondate, lit(sql.medium_date(partition.start_date))))
        qb.where(lt(executiondate, lit(sql.medium_date(partition.end_date))))
        qb.where(lte(col("lastupdated", sql.EVENT), lit(sql.long_date(params.start_time))))
        qb.where(eq(col("programid", sql.PROGRAM), lit(table.program.id)))
        qb.where(IsNull(expr=col("organisationunitid", sql.EVENT), negated=True))
        qb.where(IsNull(expr=executiondate, negated=True))
        qb.where(sql.not_deleted(sql.EVENT))
        return qb.build_insert(partition.temp_table_name, table.column_names)

    def render_populate_statement(
        self, partition: AnalyticsTablePartition, params: AnalyticsTableUpdateParams
    ) -> str:
        """Render the population SQL after validating every interpolated identifier."""
        statement = self.build_populate_statement(partition, params)
        sql.validate_identifiers(statement)
        rendered = self._dialect.compile(statement)
        for warning in validate_sql(rendered, self._dialect.name):
            logger.warning("SQL validation for '%s': %s", partition.temp_table_name, warning)
        return rendered

    def populate(
        self, partition: AnalyticsTablePartition, params: AnalyticsTableUpdateParams
    ) -> int:
        """Fill the staging partition; returns the number of rows inserted."""
        rendered = self.render_populate_statement(partition, params)
        start = time.monotonic()
        try:
            rows = self._executor.update(rendered)
        except QueryExecutionError as exc:
            raise PartitionLoadError(partition, exc) from exc
        logger.info(
            "Populated '%s' with %d rows in %.1f s",
            partition.temp_table_name,
            rows,
            time.monotonic() - start,
        )
        return rows

    def partition_check_expressions(self, partition: AnalyticsTablePartition) -> list[Expr]:
        """CHECK constraints bounding a partition to its year."""
        executiondate = col("executiondate")
        checks: list[Expr] = []
        if _YEARLY_COLUMN in partition.master_table.column_names:
            checks.append(eq(col(_YEARLY_COLUMN), lit(str(partition.year))))
        checks.append(gte(executiondate, lit(sql.medium_date(partition.start_date))))
        checks.append(lt(executiondate, lit(sql.medium_date(partition.end_date))))
        return checks

    def get_partition_checks(self, partition: AnalyticsTablePartition) -> str:
        """The partition's CHECK constraints joined into one boolean clause."""
        return self._dialect.compile_expr(and_(*self.partition_check_expressions(partition)))
