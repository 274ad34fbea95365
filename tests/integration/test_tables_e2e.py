"""End-to-end: metadata snapshot to planned, populated and swapped tables."""

from __future__ import annotations

from datetime import datetime

import pytest

from eventanalytics.context import AnalyticsContext, build_context
from eventanalytics.models.table import AnalyticsTableUpdateParams
from eventanalytics.settings import Settings
from eventanalytics.storage.loader import SnapshotLoader
from eventanalytics.storage.memory import InMemoryMetadataStore
from tests.conftest import RecordingExecutor

PROGRAM_YAML = """\
programs:
  - id: 7
    uid: ProgramP
    name: Program P
    registration: false
    dataElements:
      - uid: A
        name: Numeric A
        valueType: NUMBER
        legendSets:
          - id: 3
            uid: L
            name: Legend L
            legends:
              - {uid: Mid, name: Five to ten, startValue: 5, endValue: 10}
      - {uid: B, name: Text B, valueType: TEXT}
"""

BUILD_TIME = datetime(2024, 6, 1, 8, 0, 0)


@pytest.fixture
def e2e_executor() -> RecordingExecutor:
    # Events in 2023-03 and 2024-01
    return RecordingExecutor(update_rows=1).respond("EXTRACT(year FROM", [2023, 2024])


@pytest.fixture
def context(e2e_executor: RecordingExecutor) -> AnalyticsContext:
    metadata = InMemoryMetadataStore(SnapshotLoader().loads(PROGRAM_YAML))
    return build_context(Settings(), metadata=metadata, executor=e2e_executor)


class TestEndToEnd:
    def test_plan(self, context: AnalyticsContext) -> None:
        tables = context.table_manager.get_analytics_tables()
        assert len(tables) == 1
        table = tables[0]
        assert table.table_name == "analytics_event_programp"
        names = table.column_names
        for name in ("A", "B", "A__L", "psi", "executiondate", "ou", "ouname"):
            assert names.count(name) == 1
        assert names.index("B") < names.index("A__L") < names.index("psi")
        assert "tei" not in names
        assert [p.year for p in table.partitions] == [2023, 2024]

    def test_population_filter_of_first_partition(self, context: AnalyticsContext) -> None:
        partition = context.table_manager.get_analytics_tables()[0].partitions[0]
        sql = context.table_manager.get_populate_sql(
            AnalyticsTableUpdateParams(start_time=BUILD_TIME), partition
        )
        assert "(\"psi\".\"executiondate\" >= '2023-01-01')" in sql
        assert "(\"psi\".\"executiondate\" < '2024-01-01')" in sql
        assert "(\"psi\".\"lastupdated\" <= '2024-06-01 08:00:00')" in sql
        assert '("l"."maplegendsetid" = 3)' in sql

    def test_update(
        self, context: AnalyticsContext, e2e_executor: RecordingExecutor
    ) -> None:
        result = context.update_service.update_tables(
            AnalyticsTableUpdateParams(start_time=BUILD_TIME)
        )
        [table] = result.tables
        assert table.ok
        assert table.committed_years == [2023, 2024]
        assert result.rows == 2
        renames = e2e_executor.matching("RENAME TO")
        assert renames == [
            'ALTER TABLE "analytics_temp_event_programp" RENAME TO "analytics_event_programp"',
            'ALTER TABLE "analytics_temp_event_programp_2023" '
            'RENAME TO "analytics_event_programp_2023"',
            'ALTER TABLE "analytics_temp_event_programp_2024" '
            'RENAME TO "analytics_event_programp_2024"',
        ]
