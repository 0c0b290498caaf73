"""
FastAPI router for insight endpoints.

Endpoints:
- GET  /insights            Stored insights, with engine-generated ones prepended
- GET  /insights/{id}       One stored insight
- POST /insights/generate   Run the rule engine for a scope, optionally persisting
- GET  /filters             Distinct filter values for the dashboard
- GET  /stats               Counts by category and region, average confidence
- GET  /rules               The active rule catalog

Stored and generated insights fail independently: if generation fails (store
or rule catalog) the stored list is still served, and a stored-insight failure
is a 503 whether or not generation worked.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query

from labor_insights.api.dependencies import (
    InsightGeneratorDep,
    InsightRepositoryDep,
    MetricStoreDep,
    RuleCatalogDep,
    get_insight_generator,
)
from labor_insights.core.dependencies import SettingsDep
from labor_insights.core.exceptions import CatalogError, StoreUnavailable
from labor_insights.models import (
    FilterOptionsResponse,
    GenerateInsightsRequest,
    Insight,
    InsightCategory,
    InsightListResponse,
    InsightQuery,
    InsightResponse,
    InsightStatsResponse,
    RuleListResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["insights"])


def _store_unavailable(e: StoreUnavailable) -> HTTPException:
    return HTTPException(status_code=503, detail=f"Insight store unavailable: {e}")


# =============================================================================
# Insights
# =============================================================================


@router.get("/insights", response_model=InsightListResponse)
async def list_insights(
    repository: InsightRepositoryDep,
    store: MetricStoreDep,
    settings: SettingsDep,
    company: Optional[str] = Query(default=None),
    function: Optional[str] = Query(default=None),
    region: Optional[str] = Query(default=None),
    initiative: Optional[str] = Query(default=None),
    category: Optional[InsightCategory] = Query(default=None),
    includeGenerated: bool = Query(default=True, description="Prepend rule engine insights for the region"),
) -> InsightListResponse:
    """
    List stored insights matching the filters, newest first.

    When includeGenerated is set and a region is given, insights generated for
    (company or DEFAULT_COMPANY, region, function or DEFAULT_FUNCTION) are
    prepended. Generated insights carry no initiative, so an initiative filter
    excludes them; a category filter applies to them as well.

    Raises:
        HTTPException 503: If stored insights cannot be read.
    """
    query = InsightQuery(
        company=company,
        function=function,
        region=region,
        initiative=initiative,
        category=category,
    )

    try:
        stored = await repository.list_insights(query)
    except StoreUnavailable as e:
        raise _store_unavailable(e)

    generated: List[Insight] = []
    if includeGenerated and region and not initiative:
        try:
            generator = get_insight_generator(store, settings)
            generated = await generator.generate(
                company or settings.default_company,
                region,
                function or settings.default_function,
            )
        except (CatalogError, StoreUnavailable) as e:
            logger.error(f"Insight generation failed, serving stored insights only: {e}")
        if category is not None:
            generated = [insight for insight in generated if insight.category == category]

    insights = generated + stored
    return InsightListResponse(
        data=insights,
        count=len(insights),
        generatedEnabled=includeGenerated,
    )


@router.post("/insights/generate", response_model=InsightListResponse)
async def generate_insights(
    request: GenerateInsightsRequest,
    repository: InsightRepositoryDep,
    generator: InsightGeneratorDep,
    settings: SettingsDep,
) -> InsightListResponse:
    """
    Run one generation pass for a scope.

    Raises:
        HTTPException 503: If observations cannot be read or, with persist,
            the insights cannot be saved.
    """
    try:
        insights = await generator.generate(
            request.company or settings.default_company,
            request.region,
            request.function or settings.default_function,
        )
        if request.persist:
            await repository.save_insights(insights)
    except StoreUnavailable as e:
        raise _store_unavailable(e)

    return InsightListResponse(data=insights, count=len(insights), generatedEnabled=True)


@router.get("/insights/{insight_id}", response_model=InsightResponse)
async def get_insight(insight_id: str, repository: InsightRepositoryDep) -> InsightResponse:
    try:
        insight = await repository.get_insight(insight_id)
    except StoreUnavailable as e:
        raise _store_unavailable(e)

    if insight is None:
        logger.warning(f"Insight not found: id={insight_id}")
        raise HTTPException(status_code=404, detail="Insight not found")

    return InsightResponse(data=insight)


# =============================================================================
# Filters and Statistics
# =============================================================================


@router.get("/filters", response_model=FilterOptionsResponse)
async def get_filters(repository: InsightRepositoryDep) -> FilterOptionsResponse:
    try:
        options = await repository.get_filter_options()
    except StoreUnavailable as e:
        raise _store_unavailable(e)
    return FilterOptionsResponse(data=options)


@router.get("/stats", response_model=InsightStatsResponse)
async def get_stats(repository: InsightRepositoryDep) -> InsightStatsResponse:
    try:
        stats = await repository.get_stats()
    except StoreUnavailable as e:
        raise _store_unavailable(e)
    return InsightStatsResponse(data=stats)


# =============================================================================
# Rule Catalog
# =============================================================================


@router.get("/rules", response_model=RuleListResponse)
async def list_rules(catalog: RuleCatalogDep) -> RuleListResponse:
    """The active rule catalog, in evaluation order."""
    rules = list(catalog.rules)
    return RuleListResponse(data=rules, count=len(rules), version=catalog.version)
