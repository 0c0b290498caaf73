"""
Package initialization file for labor_insights models.

Re-exports all Pydantic schemas and enumerations from schemas.py and enums.py,
making them importable from labor_insights.models directly.

Usage:
    from labor_insights.models import (
        InsightCategory,
        MetricObservation,
        InsightRule,
        Insight,
    )
"""

# =============================================================================
# Enums
# =============================================================================

from labor_insights.models.enums import (
    InsightCategory,
    ComparisonOperator,
    EvidenceScope,
    DataSourceName,
)

# =============================================================================
# Schemas
# =============================================================================

from labor_insights.models.schemas import (
    ANY_REGION,
    # Rule engine
    MetricObservation,
    Condition,
    RuleOutput,
    InsightRule,
    MatchResult,
    Insight,
    # API contracts
    InsightQuery,
    GenerateInsightsRequest,
    InsightListResponse,
    InsightResponse,
    FilterOptions,
    FilterOptionsResponse,
    GroupCount,
    InsightStats,
    InsightStatsResponse,
    RuleListResponse,
    # Ingestion
    ValidationError,
    IngestionResult,
    # Data sources
    DataSourceStatus,
    DataSourceStatusResponse,
    RefreshResponse,
)

__all__ = [
    # Enums
    'InsightCategory',
    'ComparisonOperator',
    'EvidenceScope',
    'DataSourceName',
    # Rule engine
    'ANY_REGION',
    'MetricObservation',
    'Condition',
    'RuleOutput',
    'InsightRule',
    'MatchResult',
    'Insight',
    # API contracts
    'InsightQuery',
    'GenerateInsightsRequest',
    'InsightListResponse',
    'InsightResponse',
    'FilterOptions',
    'FilterOptionsResponse',
    'GroupCount',
    'InsightStats',
    'InsightStatsResponse',
    'RuleListResponse',
    # Ingestion
    'ValidationError',
    'IngestionResult',
    # Data sources
    'DataSourceStatus',
    'DataSourceStatusResponse',
    'RefreshResponse',
]
