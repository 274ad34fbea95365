"""Org-unit distribution endpoint: GET /analytics/orgUnitAnalytics."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from starlette.concurrency import run_in_threadpool

from eventanalytics.api.deps import get_org_unit_service
from eventanalytics.models.errors import IllegalQueryError, QueryExecutionError
from eventanalytics.models.grid import Grid
from eventanalytics.service import OrgUnitAnalyticsService

router = APIRouter()


@router.get("/orgUnitAnalytics", response_model=Grid)
async def get_org_unit_analytics(
    ou: str | None = Query(None, description="Comma-separated org unit uids"),
    ougs: str | None = Query(None, description="Comma-separated org unit group set uids"),
    service: OrgUnitAnalyticsService = Depends(get_org_unit_service),  # noqa: B008
) -> Grid:
    """Count org units per group of each requested group set."""
    params = service.get_params(ou, ougs)
    try:
        return await run_in_threadpool(service.get_org_unit_distribution, params)
    except IllegalQueryError as exc:
        raise HTTPException(status_code=400, detail=exc.message) from None
    except QueryExecutionError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from None
