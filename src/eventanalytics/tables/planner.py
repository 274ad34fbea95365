"""Discovers the data years of a program and plans its table and yearly partitions."""

from __future__ import annotations

import logging
from datetime import date

from eventanalytics.ast.builder import QueryBuilder, col, eq, gte, lit
from eventanalytics.ast.nodes import Extract, IsNull, Select
from eventanalytics.calendar.base import Calendar
from eventanalytics.dialect.base import Dialect
from eventanalytics.models.metadata import Program
from eventanalytics.models.table import AnalyticsTable, AnalyticsTableType
from eventanalytics.storage.executor import QueryExecutor
from eventanalytics.tables import sql
from eventanalytics.tables.catalog import DimensionCatalog, validate_dimension_columns

logger = logging.getLogger("eventanalytics.tables")


class TablePartitionPlanner:
    """Plans one analytics table per program, with one partition per data year."""

    def __init__(
        self,
        executor: QueryExecutor,
        catalog: DimensionCatalog,
        calendar: Calendar,
        dialect: Dialect,
    ) -> None:
        self._executor = executor
        self._catalog = catalog
        self._calendar = calendar
        self._dialect = dialect

    def build_years_query(self, program: Program, earliest: date | None = None) -> Select:
        executiondate = col("executiondate", sql.EVENT)
        qb = (
            QueryBuilder()
            .select(Extract(field="year", expr=executiondate))
            .distinct()
            .from_("programstageinstance", alias=sql.EVENT)
            .inner_join(
                "programinstance",
                on=eq(
                    col("programinstanceid", sql.EVENT), col("programinstanceid", sql.ENROLLMENT)
                ),
                alias=sql.ENROLLMENT,
            )
            .where(eq(col("programid", sql.ENROLLMENT), lit(program.id)))
            .where(IsNull(expr=executiondate, negated=True))
            .where(sql.not_deleted(sql.EVENT))
        )
        if earliest is not None:
            qb.where(gte(executiondate, lit(sql.medium_date(earliest))))
        return qb.build()

    def get_data_years(self, program: Program, earliest: date | None = None) -> list[int]:
        """Calendar years holding events of ``program``, strictly ascending.

        The database reports ISO years; under a non-ISO calendar every calendar
        year overlapping a reported ISO year is included.
        """
        query = self.build_years_query(program, earliest)
        sql.validate_identifiers(query)
        iso_years = self._executor.query_for_list(self._dialect.compile(query))
        years: set[int] = set()
        for iso_year in iso_years:
            if iso_year is None:
                continue
            years.update(self._calendar.years_overlapping_iso_year(int(iso_year)))
        return sorted(years)

    def plan(self, program: Program, earliest: date | None = None) -> AnalyticsTable | None:
        """Plan the table of ``program``, or None when it has no data years.

        Duplicate columns raise ``SchemaInconsistencyError`` before any query runs.
        """
        columns = self._catalog.get_dimension_columns(program)
        table = AnalyticsTable(
            table_type=AnalyticsTableType.EVENT, columns=columns, program=program
        )
        validate_dimension_columns(table.table_name, columns)
        for column in columns:
            sql.validate_identifier(column.name)

        years = self.get_data_years(program, earliest)
        for year in years:
            table.add_partition(
                year, self._calendar.year_start(year), self._calendar.year_end(year)
            )
        if not table.has_partitions:
            logger.info("Program '%s' has no data years, skipping", program.uid)
            return None
        logger.info(
            "Planned table '%s' with %d columns and partitions %s",
            table.table_name,
            len(columns),
            years,
        )
        return table
