"""Physical table lifecycle: staging tables, indexes, commit by rename, drop on failure."""

from __future__ import annotations

import logging
import uuid

from eventanalytics.ast.nodes import (
    Analyze,
    ColumnDef,
    CreateIndex,
    CreateTable,
    DropTable,
    Expr,
    RenameTable,
    SetInherit,
    Statement,
)
from eventanalytics.dialect.base import Dialect
from eventanalytics.models.table import AnalyticsTable, AnalyticsTablePartition
from eventanalytics.storage.executor import QueryExecutor

logger = logging.getLogger("eventanalytics.storage")

# PostgreSQL truncates identifiers beyond this length.
_MAX_IDENTIFIER_LENGTH = 63


def _column_defs(table: AnalyticsTable) -> list[ColumnDef]:
    return [
        ColumnDef(name=c.name, type_name=c.data_type.value, not_null=c.not_null)
        for c in table.columns
    ]


def index_name(table_name: str, column: str) -> str:
    """Return a schema-wide unique index name for ``column`` of ``table_name``.

    Renamed tables keep their index names. The random suffix is appended after
    truncation and keeps names distinct across partitions and rebuilds.
    """
    suffix = uuid.uuid4().hex[:8]
    stem = f"in_{column}_{table_name}"[: _MAX_IDENTIFIER_LENGTH - len(suffix) - 1]
    return f"{stem}_{suffix}"


class TableLifecycle:
    """Creates, commits and drops the staging tables of one analytics table.

    The staging master table is empty; each partition is a child table with
    CHECK constraints bounding its year so the planner can skip partitions.
    """

    def __init__(self, executor: QueryExecutor, dialect: Dialect) -> None:
        self._executor = executor
        self._dialect = dialect

    def _run(self, statement: Statement) -> None:
        self._executor.execute(self._dialect.compile(statement))

    def create_temp_master_table(self, table: AnalyticsTable) -> None:
        self._run(DropTable(name=table.temp_table_name))
        self._run(CreateTable(name=table.temp_table_name, columns=_column_defs(table)))

    def create_temp_partition_table(
        self, partition: AnalyticsTablePartition, checks: list[Expr]
    ) -> None:
        table = partition.master_table
        self._run(DropTable(name=partition.temp_table_name))
        self._run(
            CreateTable(
                name=partition.temp_table_name,
                checks=checks,
                inherits=table.temp_table_name,
            )
        )

    def create_indexes(self, partition: AnalyticsTablePartition) -> int:
        """Index every column not flagged ``skip_index``; returns the index count."""
        count = 0
        for column in partition.master_table.columns:
            if column.skip_index:
                continue
            self._run(
                CreateIndex(
                    name=index_name(partition.temp_table_name, column.name),
                    table=partition.temp_table_name,
                    column=column.name,
                    method=column.index_type.value,
                )
            )
            count += 1
        return count

    def analyze(self, partition: AnalyticsTablePartition) -> None:
        self._run(Analyze(table=partition.temp_table_name))

    def drop_temp_partition(self, partition: AnalyticsTablePartition) -> None:
        logger.info("Dropping staging partition '%s'", partition.temp_table_name)
        self._run(DropTable(name=partition.temp_table_name))

    def swap_table(
        self,
        table: AnalyticsTable,
        committed: list[AnalyticsTablePartition],
        partial: bool = False,
    ) -> None:
        """Make the staging table and its committed partitions live.

        A full swap replaces the live table. A partial swap keeps the live
        table and only exchanges the committed partitions, re-parenting them
        onto the live table before the staging master is dropped.
        """
        if not partial:
            self._run(DropTable(name=table.table_name))
            self._run(RenameTable(name=table.temp_table_name, new_name=table.table_name))
        for partition in committed:
            self._run(DropTable(name=partition.table_name))
            self._run(RenameTable(name=partition.temp_table_name, new_name=partition.table_name))
            if partial:
                self._run(
                    SetInherit(name=partition.table_name, parent=table.temp_table_name, inherit=False)
                )
                self._run(SetInherit(name=partition.table_name, parent=table.table_name))
        if partial:
            self._run(DropTable(name=table.temp_table_name))
        logger.info(
            "Swapped table '%s' with %d partitions (partial=%s)",
            table.table_name,
            len(committed),
            partial,
        )

    def drop_temp_table(self, table: AnalyticsTable) -> None:
        self._run(DropTable(name=table.temp_table_name))
