"""
FastAPI router for the FRED and BLS statistical data sources.

Endpoints:
- GET  /data-sources/status    Which sources are configured
- POST /data-sources/refresh   Fetch the latest observations from configured sources
"""

import logging

from fastapi import APIRouter, HTTPException

from labor_insights.api.dependencies import FetchersDep, MetricStoreDep
from labor_insights.core.exceptions import StoreUnavailable
from labor_insights.models import DataSourceStatusResponse, RefreshResponse
from labor_insights.services.fetchers import data_source_statuses, refresh_observations

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/data-sources", tags=["data-sources"])


@router.get("/status", response_model=DataSourceStatusResponse)
async def get_data_source_status(fetchers: FetchersDep) -> DataSourceStatusResponse:
    return DataSourceStatusResponse(data=data_source_statuses(fetchers))


@router.post("/refresh", response_model=RefreshResponse)
async def refresh_data_sources(
    fetchers: FetchersDep,
    store: MetricStoreDep,
) -> RefreshResponse:
    """
    Refresh observations from every configured source.

    A failing source is reported under errors while the others still refresh;
    success is false only if every configured source failed.

    Raises:
        HTTPException 503: If fetched observations cannot be stored.
    """
    try:
        counts, errors = await refresh_observations(store, fetchers)
    except StoreUnavailable as e:
        raise HTTPException(status_code=503, detail=f"Observation store unavailable: {e}")

    return RefreshResponse(
        success=bool(counts) or not errors,
        data=counts,
        errors=errors,
    )
