"""API request/response Pydantic schemas."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel

from eventanalytics.models.table import AnalyticsTable


class ColumnResponse(BaseModel):
    """One planned dimension column."""

    name: str
    data_type: str
    not_null: bool = False
    skip_index: bool = False
    index_type: str = "btree"


class PartitionResponse(BaseModel):
    """One planned yearly partition."""

    year: int
    table_name: str
    start_date: date
    end_date: date
    checks: str = ""


class TableResponse(BaseModel):
    """A planned analytics table."""

    table_name: str
    program: str
    columns: list[ColumnResponse] = []
    partitions: list[PartitionResponse] = []

    @classmethod
    def from_table(cls, table: AnalyticsTable, checks: dict[int, str]) -> TableResponse:
        return cls(
            table_name=table.table_name,
            program=table.program.uid,
            columns=[
                ColumnResponse(
                    name=c.name,
                    data_type=c.data_type.value,
                    not_null=c.not_null,
                    skip_index=c.skip_index,
                    index_type=c.index_type.value,
                )
                for c in table.columns
            ],
            partitions=[
                PartitionResponse(
                    year=p.year,
                    table_name=p.table_name,
                    start_date=p.start_date,
                    end_date=p.end_date,
                    checks=checks.get(p.year, ""),
                )
                for p in table.partitions
            ],
        )


class TableListResponse(BaseModel):
    """Response for GET /analytics/tables."""

    tables: list[TableResponse] = []


class ExistingTablesResponse(BaseModel):
    """Response for GET /analytics/tables/existing."""

    tables: list[str] = []


class DialectInfo(BaseModel):
    """Information about a supported dialect."""

    name: str
    capabilities: dict[str, bool] = {}


class DialectListResponse(BaseModel):
    """Response for GET /dialects."""

    dialects: list[DialectInfo] = []


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str = ""
