"""Analytics table planning endpoints: GET /analytics/tables, GET /analytics/tables/existing."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from starlette.concurrency import run_in_threadpool

from eventanalytics.api.deps import get_table_manager
from eventanalytics.api.schemas import ExistingTablesResponse, TableListResponse, TableResponse
from eventanalytics.models.errors import QueryExecutionError
from eventanalytics.tables import EventAnalyticsTableManager

router = APIRouter()


@router.get("/tables", response_model=TableListResponse)
async def list_tables(
    earliest: date | None = Query(None, description="Only plan years from this date on"),
    manager: EventAnalyticsTableManager = Depends(get_table_manager),  # noqa: B008
) -> TableListResponse:
    """Plan the analytics table of every program with data, without populating it."""
    try:
        tables = await run_in_threadpool(manager.get_analytics_tables, earliest)
    except QueryExecutionError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from None
    return TableListResponse(
        tables=[
            TableResponse.from_table(
                table, {p.year: manager.get_partition_checks(p) for p in table.partitions}
            )
            for table in tables
        ]
    )


@router.get("/tables/existing", response_model=ExistingTablesResponse)
async def list_existing_tables(
    manager: EventAnalyticsTableManager = Depends(get_table_manager),  # noqa: B008
) -> ExistingTablesResponse:
    """Event analytics tables and partitions present in the database."""
    try:
        names = await run_in_threadpool(manager.get_existing_database_tables)
    except QueryExecutionError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from None
    return ExistingTablesResponse(tables=sorted(names))
