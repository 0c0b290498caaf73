"""
Pydantic models for the Labor Insights backend.

Covers the rule engine data model (observations, conditions, rules,
insights), the API request/response contracts and the ingestion results.

Field names follow the dashboard's JSON contract (camelCase where the
frontend expects it, e.g. createdAt). Engine models are frozen: once an
observation, rule or insight is built it never changes.

All models use Pydantic v2 syntax.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from labor_insights.models.enums import (
    ComparisonOperator,
    DataSourceName,
    InsightCategory,
)


# Condition region value that matches observations from any region
ANY_REGION = "any"


def _ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so observations from mixed sources compare."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# =============================================================================
# Rule Engine Models
# =============================================================================


class MetricObservation(BaseModel):
    """
    One data point for one metric at one instant.

    Optionally scoped to a functional area (e.g. 'AI', 'Ads'). Observations
    are produced by ingestion or the statistical fetchers and never mutated.
    """
    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "metric": "inflation_rate",
                "value": 7.2,
                "region": "EMEA",
                "function": None,
                "timestamp": "2024-11-01T00:00:00Z",
            }
        },
    )

    metric: str = Field(..., min_length=1, description="Metric name, e.g. inflation_rate")
    value: float = Field(..., description="Observed value")
    region: str = Field(..., min_length=1, description="Region code (NA, EMEA, APAC, LATAM, Global)")
    function: Optional[str] = Field(default=None, description="Functional area, if scoped")
    timestamp: datetime = Field(..., description="When the value was observed")

    @field_validator("timestamp")
    @classmethod
    def normalize_timestamp(cls, value: datetime) -> datetime:
        return _ensure_utc(value)


class Condition(BaseModel):
    """
    A single threshold predicate over a metric, optionally scoped.

    `region` of None or 'any' matches every region; `function` of None
    matches every function.
    """
    model_config = ConfigDict(frozen=True)

    metric: str = Field(..., min_length=1)
    operator: ComparisonOperator
    value: float
    region: Optional[str] = None
    function: Optional[str] = None


class RuleOutput(BaseModel):
    """Text and category emitted when a rule fires."""
    model_config = ConfigDict(frozen=True)

    signal: str = Field(..., min_length=1, description="Signal template (headline)")
    interpretation: str = Field(..., min_length=1)
    recommendation: str = Field(..., min_length=1)
    category: InsightCategory


class InsightRule(BaseModel):
    """
    A declarative insight rule: a conjunction of conditions and an output.

    Rules are independent of each other; every rule whose conditions all hold
    produces its own insight.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    conditions: Tuple[Condition, ...] = Field(..., min_length=1)
    output: RuleOutput


class MatchResult(BaseModel):
    """Outcome of matching one rule against a set of observations."""
    model_config = ConfigDict(frozen=True)

    fired: bool
    evidence: Tuple[MetricObservation, ...] = ()


class Insight(BaseModel):
    """
    A structured insight shown on the dashboard.

    Both engine-generated and database-seeded insights use this shape.
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": "9f1c2a7e0d4b4c1f8a3e5b6d7c8e9f01",
                "signal": "High inflation with stagnant wage growth detected "
                          "(inflation_rate: 7.2, wage_growth: 2.5, executive_mobility: 75)",
                "interpretation": "Real wages declining, creating retention risk for executives",
                "recommendation": "Implement FX-adjusted compensation policy and consider retention bonuses",
                "sources": ["Levels.fyi", "Payscale", "Bureau of Labor Statistics"],
                "confidence": 0.85,
                "company": "Netflix",
                "function": "All",
                "region": "EMEA",
                "initiative": None,
                "category": "Wage Pressures & Inflation",
                "createdAt": "2024-11-20T10:00:00Z",
            }
        },
    )

    id: str
    signal: str
    interpretation: str
    recommendation: str
    sources: List[str] = Field(default_factory=list)
    confidence: float = Field(..., ge=0.0, le=1.0)
    company: str
    function: str
    region: str
    initiative: Optional[str] = None
    category: InsightCategory
    createdAt: datetime

    @field_validator("createdAt")
    @classmethod
    def normalize_created_at(cls, value: datetime) -> datetime:
        return _ensure_utc(value)


# =============================================================================
# API Request / Response Models
# =============================================================================


class InsightQuery(BaseModel):
    """Optional filters for the stored insight listing."""
    company: Optional[str] = None
    function: Optional[str] = None
    region: Optional[str] = None
    initiative: Optional[str] = None
    category: Optional[InsightCategory] = None


class GenerateInsightsRequest(BaseModel):
    """Body of POST /api/insights/generate."""
    model_config = ConfigDict(str_strip_whitespace=True)

    company: Optional[str] = Field(default=None, description="Defaults to DEFAULT_COMPANY")
    region: str = Field(..., min_length=1)
    function: Optional[str] = Field(default=None, description="Defaults to DEFAULT_FUNCTION")
    persist: bool = Field(default=False, description="Save generated insights to the insights table")


class InsightListResponse(BaseModel):
    success: bool = True
    data: List[Insight]
    count: int
    generatedEnabled: bool = False


class InsightResponse(BaseModel):
    success: bool = True
    data: Insight


class FilterOptions(BaseModel):
    """Distinct filter values for the dashboard filter bar."""
    companies: List[str] = Field(default_factory=list)
    functions: List[str] = Field(default_factory=list)
    regions: List[str] = Field(default_factory=list)
    initiatives: List[str] = Field(default_factory=list)
    categories: List[InsightCategory] = Field(default_factory=lambda: list(InsightCategory))


class FilterOptionsResponse(BaseModel):
    success: bool = True
    data: FilterOptions


class GroupCount(BaseModel):
    key: str
    count: int


class InsightStats(BaseModel):
    """Aggregate statistics over the stored insights."""
    total: int = 0
    byCategory: List[GroupCount] = Field(default_factory=list)
    byRegion: List[GroupCount] = Field(default_factory=list)
    averageConfidence: Optional[float] = None


class InsightStatsResponse(BaseModel):
    success: bool = True
    data: InsightStats


class RuleListResponse(BaseModel):
    success: bool = True
    data: List[InsightRule]
    count: int
    version: str


# =============================================================================
# Ingestion Models
# =============================================================================


class ValidationError(BaseModel):
    """A single validation problem found while ingesting observations."""
    field: str
    message: str
    rowNumber: Optional[int] = None


class IngestionResult(BaseModel):
    """Outcome of an observation ingestion request."""
    success: bool
    rowsProcessed: int = 0
    rowsAffected: int = 0
    errors: List[ValidationError] = Field(default_factory=list)


# =============================================================================
# Data Source Models
# =============================================================================


class DataSourceStatus(BaseModel):
    name: DataSourceName
    configured: bool
    active: bool
    attribution: str
    portalUrl: str


class DataSourceStatusResponse(BaseModel):
    success: bool = True
    data: List[DataSourceStatus]


class RefreshResponse(BaseModel):
    success: bool = True
    data: Dict[str, int] = Field(default_factory=dict)
    errors: Dict[str, Any] = Field(default_factory=dict)
