"""Tests for the event analytics table manager."""

from __future__ import annotations

from datetime import date, datetime

from eventanalytics.calendar.base import Calendar
from eventanalytics.dialect.postgres import PostgresDialect
from eventanalytics.models.metadata import Category, CategoryCombo, MetadataSnapshot, Program
from eventanalytics.models.table import AnalyticsTableType, AnalyticsTableUpdateParams
from eventanalytics.storage.memory import InMemoryMetadataStore
from eventanalytics.tables.catalog import DimensionCatalog
from eventanalytics.tables.manager import EventAnalyticsTableManager
from eventanalytics.tables.planner import TablePartitionPlanner
from eventanalytics.tables.population import PartitionPopulator
from tests.conftest import RecordingExecutor


class TestGetAnalyticsTables:
    def test_table_type(self, table_manager: EventAnalyticsTableManager) -> None:
        assert table_manager.analytics_table_type == AnalyticsTableType.EVENT

    def test_one_table_per_program_in_program_order(
        self, table_manager: EventAnalyticsTableManager, executor: RecordingExecutor
    ) -> None:
        executor.respond("EXTRACT(year FROM", [2023])
        tables = table_manager.get_analytics_tables()
        assert [t.table_name for t in tables] == [
            "analytics_event_programante",
            "analytics_event_programevnt",
        ]

    def test_programs_without_data_are_left_out(
        self, table_manager: EventAnalyticsTableManager, executor: RecordingExecutor
    ) -> None:
        executor.respond("EXTRACT(year FROM", lambda sql: [2022] if "= 102)" in sql else [])
        tables = table_manager.get_analytics_tables()
        assert [t.program.uid for t in tables] == ["ProgramEvnt"]

    def test_skip_programs(
        self, table_manager: EventAnalyticsTableManager, executor: RecordingExecutor
    ) -> None:
        executor.respond("EXTRACT(year FROM", [2023])
        tables = table_manager.get_analytics_tables(skip_programs={"ProgramAnte"})
        assert [t.program.uid for t in tables] == ["ProgramEvnt"]
        assert all("= 101)" not in s for s in executor.statements)

    def test_earliest_passed_to_year_discovery(
        self, table_manager: EventAnalyticsTableManager, executor: RecordingExecutor
    ) -> None:
        table_manager.get_analytics_tables(earliest=date(2021, 1, 1))
        years_sql = executor.matching("EXTRACT(year FROM")
        assert len(years_sql) == 2
        assert all("'2021-01-01'" in s for s in years_sql)

    def test_inconsistent_program_is_skipped(
        self,
        executor: RecordingExecutor,
        calendar: Calendar,
        populator: PartitionPopulator,
        dialect: PostgresDialect,
    ) -> None:
        broken = Program(
            id=9,
            uid="ProgramDupl",
            registration=False,
            category_combo=CategoryCombo(uid="CatComboDup", categories=[Category(uid="ou")]),
        )
        healthy = Program(id=10, uid="ProgramGood", registration=False)
        metadata = InMemoryMetadataStore(MetadataSnapshot(programs=[broken, healthy]))
        planner_for_store = TablePartitionPlanner(
            executor, DimensionCatalog(metadata), calendar, dialect
        )
        manager = EventAnalyticsTableManager(
            metadata, executor, planner_for_store, populator, dialect, max_workers=2
        )
        executor.respond("EXTRACT(year FROM", [2024])
        tables = manager.get_analytics_tables()
        assert [t.program.uid for t in tables] == ["ProgramGood"]


class TestExistingTables:
    def test_query_and_result(
        self, table_manager: EventAnalyticsTableManager, executor: RecordingExecutor
    ) -> None:
        executor.respond(
            "information_schema.tables",
            ["analytics_event_programante", "analytics_event_programante_2023"],
        )
        existing = table_manager.get_existing_database_tables()
        assert existing == {"analytics_event_programante", "analytics_event_programante_2023"}
        sql = executor.statements[0]
        assert "FROM information_schema.tables" in sql
        assert "(\"table_schema\" = 'public')" in sql
        assert "(\"table_name\" LIKE 'analytics_event%')" in sql


class TestPopulateDelegation:
    def test_populate_sql_matches_populated_statement(
        self, table_manager: EventAnalyticsTableManager, executor: RecordingExecutor
    ) -> None:
        executor.respond("EXTRACT(year FROM", [2023])
        table = table_manager.get_analytics_tables()[0]
        partition = table.partitions[0]
        params = AnalyticsTableUpdateParams(start_time=datetime(2024, 1, 1))
        sql = table_manager.get_populate_sql(params, partition)
        assert table_manager.populate_table(params, partition) == 10
        assert executor.statements[-1] == sql
        assert table_manager.get_partition_checks(partition).startswith("(((\"yearly\" = '2023')")
