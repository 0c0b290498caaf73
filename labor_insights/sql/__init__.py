"""
SQL Query Module for the Labor Insights backend.

Provides parameterized SQL for:
- Table and index creation (schema_queries)
- Metric observations in data_points (observation_queries)
- Stored insights, filters and statistics (insight_queries)

Follows the Repository Pattern: services build no SQL of their own.

Example usage:
    from labor_insights.sql import (
        get_observations_by_region_query,
        build_insight_list_query,
    )

    rows = await conn.fetch(get_observations_by_region_query(), 'EMEA', 'Global')
"""

# =============================================================================
# SCHEMA
# =============================================================================

from labor_insights.sql.schema_queries import SCHEMA_STATEMENTS

# =============================================================================
# OBSERVATION QUERIES
# =============================================================================

from labor_insights.sql.observation_queries import (
    get_observations_by_region_query,
    get_insert_observation_query,
    get_delete_all_observations_query,
)

# =============================================================================
# INSIGHT QUERIES
# =============================================================================

from labor_insights.sql.insight_queries import (
    build_insight_list_query,
    get_insight_by_id_query,
    get_distinct_values_query,
    get_insight_count_query,
    get_insight_group_count_query,
    get_upsert_insight_query,
    get_delete_all_insights_query,
    DISTINCT_COLUMNS,
)

__all__ = [
    'SCHEMA_STATEMENTS',
    'get_observations_by_region_query',
    'get_insert_observation_query',
    'get_delete_all_observations_query',
    'build_insight_list_query',
    'get_insight_by_id_query',
    'get_distinct_values_query',
    'get_insight_count_query',
    'get_insight_group_count_query',
    'get_upsert_insight_query',
    'get_delete_all_insights_query',
    'DISTINCT_COLUMNS',
]
