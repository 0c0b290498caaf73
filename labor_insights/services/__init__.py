"""
Labor Insights Services Module

Business logic of the labor-market insight engine. Services hold no request
state and read or write data only through a MetricStore or InsightRepository.

Services:
- conditions: Single-condition evaluation (scope filter, latest observation, comparison)
- matching: Rule matching and evidence collection
- scoring: Confidence scoring and category source attribution
- rule_catalog: Versioned, validated rule catalog (built-in or JSON file)
- metric_store: In-memory and PostgreSQL observation stores
- insight_generator: Rule engine orchestration for one company/region/function scope
- insight_repository: Stored insight listing, filters and statistics
- ingestion: CSV and JSON observation ingestion with validation
- fetchers: FRED and BLS statistical API clients
- seed: Development seed data
"""

# =============================================================================
# Rule Engine
# =============================================================================

from labor_insights.services.conditions import (
    OPERATORS,
    compare,
    in_scope,
    relevant_observations,
    select_latest,
    evaluate_condition,
)

from labor_insights.services.matching import (
    collect_evidence,
    match_rule,
)

from labor_insights.services.scoring import (
    CONFIDENCE_TIERS,
    BASE_CONFIDENCE,
    CATEGORY_SOURCES,
    FALLBACK_SOURCES,
    score_confidence,
    attribute_sources,
)

from labor_insights.services.rule_catalog import (
    DEFAULT_CATALOG_VERSION,
    DEFAULT_RULE_DEFINITIONS,
    RuleCatalog,
    validate_rules,
    default_rule_catalog,
    load_rule_catalog,
)

from labor_insights.services.insight_generator import (
    InsightGenerator,
    format_signal,
    format_value,
)

# =============================================================================
# Persistence
# =============================================================================

from labor_insights.services.metric_store import (
    DEFAULT_GLOBAL_REGION,
    MetricStore,
    InMemoryMetricStore,
    PostgresMetricStore,
)

from labor_insights.services.insight_repository import InsightRepository

# =============================================================================
# Ingestion and Data Sources
# =============================================================================

from labor_insights.services.ingestion import (
    OBSERVATION_REQUIRED_COLUMNS,
    parse_observation_csv,
    dataframe_to_observations,
    ingest_observations,
    ingest_csv,
)

from labor_insights.services.fetchers import (
    FredClient,
    BlsClient,
    refresh_observations,
    data_source_statuses,
)

from labor_insights.services.seed import (
    SEED_OBSERVATIONS,
    SEED_INSIGHTS,
    seed_database,
    seed_postgres,
)

__all__ = [
    # Rule engine
    'OPERATORS',
    'compare',
    'in_scope',
    'relevant_observations',
    'select_latest',
    'evaluate_condition',
    'collect_evidence',
    'match_rule',
    'CONFIDENCE_TIERS',
    'BASE_CONFIDENCE',
    'CATEGORY_SOURCES',
    'FALLBACK_SOURCES',
    'score_confidence',
    'attribute_sources',
    'DEFAULT_CATALOG_VERSION',
    'DEFAULT_RULE_DEFINITIONS',
    'RuleCatalog',
    'validate_rules',
    'default_rule_catalog',
    'load_rule_catalog',
    'InsightGenerator',
    'format_signal',
    'format_value',
    # Persistence
    'DEFAULT_GLOBAL_REGION',
    'MetricStore',
    'InMemoryMetricStore',
    'PostgresMetricStore',
    'InsightRepository',
    # Ingestion and data sources
    'OBSERVATION_REQUIRED_COLUMNS',
    'parse_observation_csv',
    'dataframe_to_observations',
    'ingest_observations',
    'ingest_csv',
    'FredClient',
    'BlsClient',
    'refresh_observations',
    'data_source_statuses',
    'SEED_OBSERVATIONS',
    'SEED_INSIGHTS',
    'seed_database',
    'seed_postgres',
]
