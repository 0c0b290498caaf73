"""
Labor Insights API package.

Router modules, mounted under /api by main.py:
- insights: Stored and generated insights, filters, statistics, rule catalog
- observations: JSON and CSV observation ingestion
- data_sources: FRED/BLS status and refresh
"""

from fastapi import APIRouter

from labor_insights.api.insights import router as insights_router
from labor_insights.api.observations import router as observations_router
from labor_insights.api.data_sources import router as data_sources_router

api_router = APIRouter()

api_router.include_router(insights_router)
api_router.include_router(observations_router)
api_router.include_router(data_sources_router)

__all__ = [
    "api_router",
    "insights_router",
    "observations_router",
    "data_sources_router",
]
