"""Shared test fixtures for event analytics tables."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any

import pytest

from eventanalytics.calendar import CalendarRegistry
from eventanalytics.calendar.base import Calendar
from eventanalytics.dialect.postgres import PostgresDialect
from eventanalytics.models.errors import QueryExecutionError
from eventanalytics.models.metadata import MetadataSnapshot, Program
from eventanalytics.storage.executor import QueryExecutor
from eventanalytics.storage.loader import SnapshotLoader
from eventanalytics.storage.memory import InMemoryMetadataStore
from eventanalytics.tables.catalog import DimensionCatalog
from eventanalytics.tables.manager import EventAnalyticsTableManager
from eventanalytics.tables.planner import TablePartitionPlanner
from eventanalytics.tables.population import PartitionPopulator

Response = list[Any] | Callable[[str], list[Any]]


class RecordingExecutor(QueryExecutor):
    """In-memory QueryExecutor: records every statement, answers by SQL substring.

    ``fail_on`` substrings make any matching statement raise ``QueryExecutionError``.
    """

    def __init__(self, update_rows: int = 10) -> None:
        self.statements: list[str] = []
        self.update_rows = update_rows
        self.fail_on: list[str] = []
        self._responses: list[tuple[str, Response]] = []
        self._lock = threading.Lock()

    def respond(self, fragment: str, response: Response) -> RecordingExecutor:
        self._responses.append((fragment, response))
        return self

    def _record(self, sql: str) -> None:
        with self._lock:
            self.statements.append(sql)
        for fragment in self.fail_on:
            if fragment in sql:
                raise QueryExecutionError(f"relation failure near '{fragment}'", sql=sql)

    def _answer(self, sql: str) -> list[Any]:
        for fragment, response in self._responses:
            if fragment in sql:
                return response(sql) if callable(response) else list(response)
        return []

    def query_for_list(self, sql: str) -> list[Any]:
        self._record(sql)
        return self._answer(sql)

    def query_for_rows(self, sql: str) -> list[tuple[Any, ...]]:
        self._record(sql)
        return [tuple(row) for row in self._answer(sql)]

    def update(self, sql: str) -> int:
        self._record(sql)
        return self.update_rows

    def execute(self, sql: str) -> None:
        self._record(sql)

    def matching(self, fragment: str) -> list[str]:
        return [s for s in self.statements if fragment in s]


SAMPLE_SNAPSHOT_YAML = """\
organisationUnitLevels:
  - {uid: LevelNation, name: National, level: 1}
  - {uid: LevelDistri, name: District, level: 2}

organisationUnits:
  - {id: 1, uid: OrgUnitSL01, name: Sierra Leone, level: 1, path: /OrgUnitSL01}
  - {id: 2, uid: OrgUnitBo02, name: Bo, level: 2, path: /OrgUnitSL01/OrgUnitBo02}
  - id: 3
    uid: OrgUnitKe03
    name: Kenema
    displayName: Kenema District
    level: 2
    path: /OrgUnitSL01/OrgUnitKe03

organisationUnitGroupSets:
  - uid: GroupSetTyp
    name: Facility Type
    organisationUnitGroups:
      - {uid: GroupClinic, name: Clinic}
      - {uid: GroupHospit, name: Hospital}
  - uid: GroupSetOwn
    name: Facility Ownership
    dataDimension: false
    organisationUnitGroups:
      - {uid: GroupPublic, name: Public}

categoryOptionGroupSets:
  - {uid: CogsFunding, name: Funding Mechanism}

programs:
  - id: 101
    uid: ProgramAnte
    name: Antenatal care
    registration: true
    categoryCombo:
      uid: CatComboAnc
      name: Location and age
      categories:
        - {uid: CategoryLoc, name: Location}
        - {uid: CategoryAge, name: Age group}
        - {uid: CategoryHid, name: Hidden, dataDimension: false}
    dataElements:
      - uid: DataElemHb1
        name: Hemoglobin
        valueType: NUMBER
        legendSets:
          - id: 7
            uid: LegendHbLvl
            name: Hemoglobin levels
            legends:
              - {uid: LegendLow01, name: Low, startValue: 0, endValue: 9}
              - {uid: LegendNorm1, name: Normal, startValue: 9, endValue: 20}
      - {uid: DataElemNot, name: Notes, valueType: TEXT}
      - uid: DataElemRsk
        name: Risk
        valueType: TEXT
        optionSet: {uid: OptSetRisk1, name: Risk levels}
      - {uid: DataElemDue, name: Due date, valueType: DATE}
      - {uid: DataElemFlg, name: Smoker, valueType: BOOLEAN}
      - {uid: DataElemGps, name: Home location, valueType: COORDINATE}
    trackedEntityAttributes:
      - id: 55
        uid: AttrAgeYrs1
        name: Age in years
        valueType: INTEGER
        legendSets:
          - {id: 8, uid: LegendAgeGr, name: Age groups}
      - {id: 56, uid: AttrNational, name: National id, valueType: TEXT, confidential: true}
      - {id: 57, uid: AttrFirstNm, name: First name, valueType: TEXT}
  - id: 102
    uid: ProgramEvnt
    name: Inpatient morbidity
    registration: false
    dataElements:
      - {uid: DataElemDia, name: Diagnosis, valueType: TEXT}
"""


@pytest.fixture
def snapshot() -> MetadataSnapshot:
    return SnapshotLoader().loads(SAMPLE_SNAPSHOT_YAML)


@pytest.fixture
def metadata(snapshot: MetadataSnapshot) -> InMemoryMetadataStore:
    return InMemoryMetadataStore(snapshot)


@pytest.fixture
def anc_program(snapshot: MetadataSnapshot) -> Program:
    return snapshot.programs[0]


@pytest.fixture
def event_program(snapshot: MetadataSnapshot) -> Program:
    return snapshot.programs[1]


@pytest.fixture
def dialect() -> PostgresDialect:
    return PostgresDialect()


@pytest.fixture
def calendar() -> Calendar:
    return CalendarRegistry.get("iso8601")


@pytest.fixture
def executor() -> RecordingExecutor:
    return RecordingExecutor()


@pytest.fixture
def catalog(metadata: InMemoryMetadataStore) -> DimensionCatalog:
    return DimensionCatalog(metadata, spatial_support=True)


@pytest.fixture
def planner(
    executor: RecordingExecutor,
    catalog: DimensionCatalog,
    calendar: Calendar,
    dialect: PostgresDialect,
) -> TablePartitionPlanner:
    return TablePartitionPlanner(executor, catalog, calendar, dialect)


@pytest.fixture
def populator(executor: RecordingExecutor, dialect: PostgresDialect) -> PartitionPopulator:
    return PartitionPopulator(executor, dialect)


@pytest.fixture
def table_manager(
    metadata: InMemoryMetadataStore,
    executor: RecordingExecutor,
    planner: TablePartitionPlanner,
    populator: PartitionPopulator,
    dialect: PostgresDialect,
) -> EventAnalyticsTableManager:
    return EventAnalyticsTableManager(
        metadata, executor, planner, populator, dialect, max_workers=2
    )
