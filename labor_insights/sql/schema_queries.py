"""
Schema DDL for the labor insights tables.

Two tables:
- insights: curated and persisted generated insights (sources stored as JSON text)
- data_points: metric observations read by the rule engine

Statements are idempotent (IF NOT EXISTS) and run at startup by
labor_insights.core.database.init_schema().
"""

from typing import Tuple


CREATE_INSIGHTS_TABLE: str = """
    CREATE TABLE IF NOT EXISTS insights (
        id TEXT PRIMARY KEY,
        signal TEXT NOT NULL,
        interpretation TEXT NOT NULL,
        recommendation TEXT NOT NULL,
        sources TEXT NOT NULL,
        confidence DOUBLE PRECISION NOT NULL,
        company TEXT NOT NULL,
        function TEXT NOT NULL,
        region TEXT NOT NULL,
        initiative TEXT,
        category TEXT NOT NULL,
        created_at TIMESTAMPTZ NOT NULL
    )
"""

CREATE_DATA_POINTS_TABLE: str = """
    CREATE TABLE IF NOT EXISTS data_points (
        id BIGSERIAL PRIMARY KEY,
        metric TEXT NOT NULL,
        value DOUBLE PRECISION NOT NULL,
        region TEXT NOT NULL,
        function TEXT,
        timestamp TIMESTAMPTZ NOT NULL
    )
"""

CREATE_INDEXES: Tuple[str, ...] = (
    "CREATE INDEX IF NOT EXISTS idx_insights_company ON insights(company)",
    "CREATE INDEX IF NOT EXISTS idx_insights_function ON insights(function)",
    "CREATE INDEX IF NOT EXISTS idx_insights_region ON insights(region)",
    "CREATE INDEX IF NOT EXISTS idx_insights_category ON insights(category)",
    "CREATE INDEX IF NOT EXISTS idx_data_points_metric ON data_points(metric)",
    "CREATE INDEX IF NOT EXISTS idx_data_points_region ON data_points(region)",
)

SCHEMA_STATEMENTS: Tuple[str, ...] = (
    CREATE_INSIGHTS_TABLE,
    CREATE_DATA_POINTS_TABLE,
) + CREATE_INDEXES
