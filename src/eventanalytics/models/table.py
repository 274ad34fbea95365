"""Analytics table, column and partition definitions produced by the planner."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from enum import StrEnum

from eventanalytics.ast.nodes import Expr
from eventanalytics.models.metadata import Program


class ColumnDataType(StrEnum):
    CHARACTER_11 = "character(11)"
    CHARACTER_50 = "character varying(50)"
    TEXT = "text"
    DOUBLE = "double precision"
    BIGINT = "bigint"
    INTEGER = "integer"
    TIMESTAMP = "timestamp"
    DATE = "date"
    GEOMETRY = "geometry"
    GEOMETRY_POINT = "geometry(Point, 4326)"

    @property
    def is_geometry(self) -> bool:
        return self in (ColumnDataType.GEOMETRY, ColumnDataType.GEOMETRY_POINT)


class IndexType(StrEnum):
    BTREE = "btree"
    GIST = "gist"


class AnalyticsTableType(StrEnum):
    EVENT = "analytics_event"

    @property
    def temp_base_name(self) -> str:
        return self.value.replace("analytics_", "analytics_temp_", 1)


@dataclass(frozen=True)
class AnalyticsTableColumn:
    """One dimension column: name, storage type and the expression that fills it."""

    name: str
    data_type: ColumnDataType
    expression: Expr
    not_null: bool = False
    skip_index: bool = False
    index_type: IndexType = IndexType.BTREE
    created: datetime | None = None


@dataclass
class AnalyticsTablePartition:
    """A calendar-year slice of an analytics table, ``[start_date, end_date)``."""

    master_table: AnalyticsTable = field(repr=False, compare=False)
    year: int
    start_date: date
    end_date: date

    @property
    def table_name(self) -> str:
        return f"{self.master_table.table_name}_{self.year}"

    @property
    def temp_table_name(self) -> str:
        return f"{self.master_table.temp_table_name}_{self.year}"


@dataclass
class AnalyticsTable:
    """The planned analytics table of one program."""

    table_type: AnalyticsTableType
    columns: list[AnalyticsTableColumn]
    program: Program
    partitions: list[AnalyticsTablePartition] = field(default_factory=list)

    @property
    def table_name(self) -> str:
        return f"{self.table_type.value}_{self.program.uid.lower()}"

    @property
    def temp_table_name(self) -> str:
        return f"{self.table_type.temp_base_name}_{self.program.uid.lower()}"

    @property
    def has_partitions(self) -> bool:
        return bool(self.partitions)

    @property
    def column_names(self) -> list[str]:
        return [c.name for c in self.columns]

    def add_partition(self, year: int, start_date: date, end_date: date) -> AnalyticsTablePartition:
        partition = AnalyticsTablePartition(
            master_table=self, year=year, start_date=start_date, end_date=end_date
        )
        self.partitions.append(partition)
        return partition


@dataclass
class AnalyticsTableUpdateParams:
    """Parameters of one table update run.

    ``start_time`` is the as-of cutoff: only events last updated at or before
    it are loaded. ``last_years`` restricts the run to the most recent years.
    """

    start_time: datetime = field(default_factory=lambda: datetime.now(UTC).replace(tzinfo=None))
    last_years: int | None = None
    skip_programs: set[str] = field(default_factory=set)

    @property
    def from_date(self) -> date | None:
        """1 January of the earliest year included, or None for all years."""
        if self.last_years is None:
            return None
        return date(self.start_time.year - self.last_years + 1, 1, 1)
