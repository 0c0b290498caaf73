"""
Service dependencies for the API routers.

Builds the rule catalog, stores, generator and fetchers from Settings and the
shared pool. The catalog is loaded once per catalog path, first by
main.lifespan so that a bad catalog stops startup. Everything else is cheap
and built per request.

Tests replace any of these through app.dependency_overrides, e.g.

    app.dependency_overrides[get_metric_store] = lambda: InMemoryMetricStore(obs)
"""

from functools import lru_cache
from typing import Annotated, List, Optional, Union

from fastapi import Depends

from labor_insights.core.dependencies import DBPoolDep, SettingsDep
from labor_insights.services.fetchers import BlsClient, FredClient
from labor_insights.services.insight_generator import InsightGenerator
from labor_insights.services.insight_repository import InsightRepository
from labor_insights.services.metric_store import MetricStore, PostgresMetricStore
from labor_insights.services.rule_catalog import RuleCatalog, load_rule_catalog


@lru_cache()
def _cached_rule_catalog(path: Optional[str]) -> RuleCatalog:
    return load_rule_catalog(path)


def get_rule_catalog(settings: SettingsDep) -> RuleCatalog:
    return _cached_rule_catalog(settings.rule_catalog_path)


def get_metric_store(pool: DBPoolDep, settings: SettingsDep) -> MetricStore:
    return PostgresMetricStore(pool, settings.global_region)


def get_insight_repository(pool: DBPoolDep) -> InsightRepository:
    return InsightRepository(pool)


RuleCatalogDep = Annotated[RuleCatalog, Depends(get_rule_catalog)]
MetricStoreDep = Annotated[MetricStore, Depends(get_metric_store)]
InsightRepositoryDep = Annotated[InsightRepository, Depends(get_insight_repository)]


def get_insight_generator(store: MetricStoreDep, settings: SettingsDep) -> InsightGenerator:
    """
    Raises:
        CatalogError: If the configured rule catalog cannot be loaded
    """
    return InsightGenerator(store, get_rule_catalog(settings), evidence_scope=settings.evidence_scope)


def get_fetchers(settings: SettingsDep) -> List[Union[FredClient, BlsClient]]:
    """FRED and BLS clients, configured or not."""
    return [
        FredClient(settings.fred_api_key, timeout=settings.http_timeout_seconds),
        BlsClient(settings.bls_api_key, timeout=settings.http_timeout_seconds),
    ]


InsightGeneratorDep = Annotated[InsightGenerator, Depends(get_insight_generator)]
FetchersDep = Annotated[List[Union[FredClient, BlsClient]], Depends(get_fetchers)]
