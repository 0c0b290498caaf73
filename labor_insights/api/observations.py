"""
FastAPI router for metric observation ingestion.

Endpoints:
- POST /observations          JSON array of observations
- POST /observations/upload   Multipart CSV upload (metric,value,region,function,timestamp)

Both return an IngestionResult. A CSV that fails validation is rejected with
400 and nothing is written; a store failure is a 503.
"""

import logging
from typing import List

from fastapi import APIRouter, File, HTTPException, UploadFile

from labor_insights.api.dependencies import MetricStoreDep
from labor_insights.models import IngestionResult, MetricObservation
from labor_insights.services.ingestion import ingest_csv, ingest_observations

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/observations", tags=["observations"])


def _raise_for_store_failure(result: IngestionResult) -> None:
    if not result.success and any(error.field == 'store' for error in result.errors):
        raise HTTPException(status_code=503, detail=result.model_dump())


@router.post("", response_model=IngestionResult)
async def create_observations(
    observations: List[MetricObservation],
    store: MetricStoreDep,
) -> IngestionResult:
    """
    Store a batch of observations.

    The body is validated by pydantic before anything is written, so a
    malformed item rejects the whole batch with 422.
    """
    result = await ingest_observations(store, observations)
    _raise_for_store_failure(result)
    return result


@router.post("/upload", response_model=IngestionResult)
async def upload_observations(
    store: MetricStoreDep,
    file: UploadFile = File(..., description="CSV file of observations"),
) -> IngestionResult:
    """
    Validate and store a CSV file of observations.

    Raises:
        HTTPException 400: If the file is not a CSV or fails validation.
        HTTPException 503: If the observations cannot be written.
    """
    if file.filename and not file.filename.lower().endswith('.csv'):
        raise HTTPException(status_code=400, detail="Invalid file type. Please upload a CSV file.")

    result = await ingest_csv(store, file.file)
    _raise_for_store_failure(result)
    if not result.success:
        logger.warning(f"Rejected observation upload {file.filename}: {len(result.errors)} errors")
        raise HTTPException(status_code=400, detail=result.model_dump())

    return result
