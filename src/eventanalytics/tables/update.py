"""Table update orchestration: plan, stage, populate, index and swap every program table."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from eventanalytics.models.errors import PartitionLoadError, QueryExecutionError
from eventanalytics.models.table import (
    AnalyticsTable,
    AnalyticsTablePartition,
    AnalyticsTableUpdateParams,
)
from eventanalytics.storage.lifecycle import TableLifecycle
from eventanalytics.tables.manager import EventAnalyticsTableManager

logger = logging.getLogger("eventanalytics.tables")


@dataclass
class TableUpdateResult:
    """Outcome of updating one analytics table."""

    table_name: str
    committed_years: list[int] = field(default_factory=list)
    failed_years: list[int] = field(default_factory=list)
    rows: int = 0
    partial: bool = False
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and not self.failed_years


@dataclass
class UpdateResult:
    """Summary of one update run across all programs."""

    tables: list[TableUpdateResult] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def rows(self) -> int:
        return sum(t.rows for t in self.tables)


class AnalyticsTableUpdateService:
    """Runs a full or partial (``last_years``) update of the event analytics tables.

    Partitions of one table are populated concurrently into distinct staging
    tables. A failed partition is logged, its staging table dropped, and it is
    left out of the swap; other partitions and programs carry on.
    """

    def __init__(
        self,
        manager: EventAnalyticsTableManager,
        lifecycle: TableLifecycle,
        max_workers: int = 4,
    ) -> None:
        self._manager = manager
        self._lifecycle = lifecycle
        self._max_workers = max_workers

    def update_tables(self, params: AnalyticsTableUpdateParams) -> UpdateResult:
        start = time.monotonic()
        logger.info(
            "Starting event analytics table update (as of %s, last years: %s)",
            params.start_time,
            params.last_years,
        )
        existing = self._manager.get_existing_database_tables()
        tables = self._manager.get_analytics_tables(params.from_date, params.skip_programs)
        result = UpdateResult()
        for table in tables:
            partial = params.last_years is not None and table.table_name in existing
            result.tables.append(self.update_table(table, params, partial=partial))
        result.duration_seconds = time.monotonic() - start
        logger.info(
            "Updated %d tables with %d rows in %.1f s",
            len(result.tables),
            result.rows,
            result.duration_seconds,
        )
        return result

    def update_table(
        self, table: AnalyticsTable, params: AnalyticsTableUpdateParams, partial: bool = False
    ) -> TableUpdateResult:
        result = TableUpdateResult(table_name=table.table_name, partial=partial)
        try:
            self._lifecycle.create_temp_master_table(table)
            for partition in table.partitions:
                checks = self._manager.get_partition_check_expressions(partition)
                self._lifecycle.create_temp_partition_table(partition, checks)
        except QueryExecutionError as exc:
            logger.error("Failed to create staging tables for '%s': %s", table.table_name, exc)
            self._lifecycle.drop_temp_table(table)
            result.error = str(exc)
            return result

        with ThreadPoolExecutor(
            max_workers=self._max_workers, thread_name_prefix="partition-loader"
        ) as pool:
            loaded = list(pool.map(lambda p: self._load_partition(p, params), table.partitions))

        committed: list[AnalyticsTablePartition] = []
        for partition, rows in zip(table.partitions, loaded, strict=True):
            if rows is None:
                result.failed_years.append(partition.year)
            else:
                committed.append(partition)
                result.committed_years.append(partition.year)
                result.rows += rows

        if not committed:
            logger.error("No partitions of '%s' were loaded, keeping live table", table.table_name)
            self._lifecycle.drop_temp_table(table)
            result.error = "no partitions loaded"
            return result

        self._lifecycle.swap_table(table, committed, partial=partial)
        return result

    def _load_partition(
        self, partition: AnalyticsTablePartition, params: AnalyticsTableUpdateParams
    ) -> int | None:
        """Populate, index and analyze one staging partition; None on failure."""
        try:
            rows = self._manager.populate_table(params, partition)
            self._lifecycle.create_indexes(partition)
            self._lifecycle.analyze(partition)
        except (PartitionLoadError, QueryExecutionError) as exc:
            logger.error("Partition '%s' failed: %s", partition.temp_table_name, exc)
            self._lifecycle.drop_temp_partition(partition)
            return None
        return rows
