"""
Insight Queries Module.

Parameterized PostgreSQL queries over the insights table: filtered listing,
lookup by id, distinct filter values, aggregate statistics and upsert.

Filter values are always passed as query parameters; only the set of
filtered column names (a fixed whitelist) is spliced into the SQL text.
"""

from typing import Any, List, Tuple

from labor_insights.models import InsightQuery


# Columns selectable for the listing and lookup, mapped to the Insight fields
INSIGHT_COLUMNS: str = """
    id, signal, interpretation, recommendation, sources, confidence,
    company, function, region, initiative, category, created_at
"""

# Filterable InsightQuery attribute -> column name
FILTER_COLUMNS: Tuple[Tuple[str, str], ...] = (
    ('company', 'company'),
    ('function', 'function'),
    ('region', 'region'),
    ('initiative', 'initiative'),
    ('category', 'category'),
)

# Columns exposed by the filter options endpoint
DISTINCT_COLUMNS: Tuple[str, ...] = ('company', 'function', 'region', 'initiative')


def build_insight_list_query(query: InsightQuery) -> Tuple[str, List[Any]]:
    """
    Build the filtered insight listing query.

    Args:
        query: Optional filters; unset filters are ignored.

    Returns:
        Tuple of (SQL string, positional parameters), newest insights first.

    Example:
        >>> sql, params = build_insight_list_query(InsightQuery(region='EMEA'))
        >>> params
        ['EMEA']
    """
    clauses: List[str] = []
    params: List[Any] = []

    for attribute, column in FILTER_COLUMNS:
        value = getattr(query, attribute)
        if value is None:
            continue
        params.append(value.value if hasattr(value, 'value') else value)
        clauses.append(f"{column} = ${len(params)}")

    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

    sql = f"""
        SELECT {INSIGHT_COLUMNS}
        FROM insights
        {where}
        ORDER BY created_at DESC
    """
    return sql, params


def get_insight_by_id_query() -> str:
    """SQL to fetch a single insight. Parameters: $1 insight id."""
    return f"""
        SELECT {INSIGHT_COLUMNS}
        FROM insights
        WHERE id = $1
    """


def get_distinct_values_query(column: str) -> str:
    """
    SQL to list the distinct non-null values of a filterable column.

    Raises:
        ValueError: If column is not one of DISTINCT_COLUMNS
    """
    if column not in DISTINCT_COLUMNS:
        raise ValueError(f"Unknown filter column: {column}")
    return f"""
        SELECT DISTINCT {column} AS value
        FROM insights
        WHERE {column} IS NOT NULL
        ORDER BY {column}
    """


def get_insight_count_query() -> str:
    return "SELECT COUNT(*) AS count, AVG(confidence) AS avg_confidence FROM insights"


def get_insight_group_count_query(column: str) -> str:
    """
    SQL counting insights per category or region.

    Raises:
        ValueError: If column is not 'category' or 'region'
    """
    if column not in ('category', 'region'):
        raise ValueError(f"Cannot group insights by: {column}")
    return f"""
        SELECT {column} AS key, COUNT(*) AS count
        FROM insights
        GROUP BY {column}
        ORDER BY count DESC, {column}
    """


def get_upsert_insight_query() -> str:
    """
    SQL to insert or replace an insight by id; used with executemany.

    Parameters follow INSIGHT_COLUMNS order ($1 id ... $12 created_at).
    """
    return """
        INSERT INTO insights (
            id, signal, interpretation, recommendation, sources, confidence,
            company, function, region, initiative, category, created_at
        ) VALUES (
            $1, $2, $3, $4, $5, $6,
            $7, $8, $9, $10, $11, $12
        )
        ON CONFLICT (id)
        DO UPDATE SET
            signal = EXCLUDED.signal,
            interpretation = EXCLUDED.interpretation,
            recommendation = EXCLUDED.recommendation,
            sources = EXCLUDED.sources,
            confidence = EXCLUDED.confidence,
            company = EXCLUDED.company,
            function = EXCLUDED.function,
            region = EXCLUDED.region,
            initiative = EXCLUDED.initiative,
            category = EXCLUDED.category,
            created_at = EXCLUDED.created_at
    """


def get_delete_all_insights_query() -> str:
    """SQL to clear the insights table (used by the seed routine)."""
    return "DELETE FROM insights"
