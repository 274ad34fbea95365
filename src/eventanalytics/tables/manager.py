"""Event analytics table manager: the entry point a build orchestrator talks to."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date

from eventanalytics.ast.builder import QueryBuilder, col, eq, lit
from eventanalytics.ast.nodes import BinaryOp, Expr
from eventanalytics.dialect.base import Dialect
from eventanalytics.models.errors import SchemaInconsistencyError
from eventanalytics.models.metadata import Program
from eventanalytics.models.table import (
    AnalyticsTable,
    AnalyticsTablePartition,
    AnalyticsTableType,
    AnalyticsTableUpdateParams,
)
from eventanalytics.storage.executor import QueryExecutor
from eventanalytics.storage.repository import MetadataStore
from eventanalytics.tables.planner import TablePartitionPlanner
from eventanalytics.tables.population import PartitionPopulator

logger = logging.getLogger("eventanalytics.tables")


class EventAnalyticsTableManager:
    """Plans and populates the event analytics tables of every program.

    Programs are planned in parallel on a fixed-size thread pool. Each worker
    returns its own result; results are merged in program order.
    """

    def __init__(
        self,
        metadata: MetadataStore,
        executor: QueryExecutor,
        planner: TablePartitionPlanner,
        populator: PartitionPopulator,
        dialect: Dialect,
        max_workers: int = 4,
    ) -> None:
        self._metadata = metadata
        self._executor = executor
        self._planner = planner
        self._populator = populator
        self._dialect = dialect
        self._max_workers = max_workers

    @property
    def analytics_table_type(self) -> AnalyticsTableType:
        return AnalyticsTableType.EVENT

    def _plan_program(self, program: Program, earliest: date | None) -> AnalyticsTable | None:
        try:
            return self._planner.plan(program, earliest)
        except SchemaInconsistencyError as exc:
            logger.error("Skipping program '%s': %s", program.uid, exc)
            return None

    def get_analytics_tables(
        self, earliest: date | None = None, skip_programs: set[str] | None = None
    ) -> list[AnalyticsTable]:
        """One planned table per program that has data; programs without data are left out."""
        skip = skip_programs or set()
        programs = [p for p in self._metadata.get_programs() if p.uid not in skip]
        logger.info("Planning analytics tables for %d programs", len(programs))
        with ThreadPoolExecutor(
            max_workers=self._max_workers, thread_name_prefix="table-planner"
        ) as pool:
            results = list(pool.map(lambda p: self._plan_program(p, earliest), programs))
        return [table for table in results if table is not None]

    def get_existing_database_tables(self) -> set[str]:
        """Names of the event analytics tables and partitions already in the database."""
        pattern = f"{self.analytics_table_type.value}%"
        query = (
            QueryBuilder()
            .select(col("table_name"))
            .from_("information_schema.tables")
            .where(eq(col("table_schema"), lit("public")))
            .where(BinaryOp(left=col("table_name"), op="LIKE", right=lit(pattern)))
            .build()
        )
        return {str(name) for name in self._executor.query_for_list(self._dialect.compile(query))}

    def get_partition_checks(self, partition: AnalyticsTablePartition) -> str:
        return self._populator.get_partition_checks(partition)

    def get_partition_check_expressions(
        self, partition: AnalyticsTablePartition
    ) -> list[Expr]:
        return self._populator.partition_check_expressions(partition)

    def populate_table(
        self, params: AnalyticsTableUpdateParams, partition: AnalyticsTablePartition
    ) -> int:
        return self._populator.populate(partition, params)

    def get_populate_sql(
        self, params: AnalyticsTableUpdateParams, partition: AnalyticsTablePartition
    ) -> str:
        """The population statement ``populate_table`` would run, rendered but not executed."""
        return self._populator.render_populate_statement(partition, params)
