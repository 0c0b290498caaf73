"""
Insight Repository

Data access for stored insights (curated seed insights and persisted
generated ones) in the insights table. Stored insights are independent from
engine-generated ones: a failure generating new insights never prevents
serving the stored list, and vice versa.

Sources are stored as a JSON array in a TEXT column.
"""

import json
import logging
from typing import List, Optional, Sequence

from asyncpg import Pool, Record

from labor_insights.core.database import DATABASE_ERRORS
from labor_insights.core.exceptions import StoreUnavailable
from labor_insights.models import (
    FilterOptions,
    GroupCount,
    Insight,
    InsightCategory,
    InsightQuery,
    InsightStats,
)
from labor_insights.sql import (
    DISTINCT_COLUMNS,
    build_insight_list_query,
    get_delete_all_insights_query,
    get_distinct_values_query,
    get_insight_by_id_query,
    get_insight_count_query,
    get_insight_group_count_query,
    get_upsert_insight_query,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Row Mapping
# =============================================================================


def _parse_sources(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    try:
        sources = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning(f"Stored insight sources are not valid JSON: {raw!r}")
        return [raw]
    if isinstance(sources, list):
        return [str(source) for source in sources]
    return [str(sources)]


def _parse_category(raw: str) -> InsightCategory:
    """Accept a stored category by display label or by enum name."""
    if raw in InsightCategory.__members__:
        return InsightCategory[raw]
    return InsightCategory(raw)


def insight_from_record(row: Record) -> Insight:
    """
    Convert an insights row into an Insight.

    Raises:
        ValueError: If the stored category is not a known InsightCategory
    """
    return Insight(
        id=row['id'],
        signal=row['signal'],
        interpretation=row['interpretation'],
        recommendation=row['recommendation'],
        sources=_parse_sources(row['sources']),
        confidence=float(row['confidence']),
        company=row['company'],
        function=row['function'],
        region=row['region'],
        initiative=row['initiative'],
        category=_parse_category(row['category']),
        createdAt=row['created_at'],
    )


def _readable_insight(row: Record) -> Optional[Insight]:
    """Rows that do not validate (e.g. an unknown category) are logged and skipped."""
    try:
        return insight_from_record(row)
    except ValueError as e:
        logger.warning(f"Skipping stored insight {row['id']}: {e}")
        return None


def insight_to_record(insight: Insight) -> tuple:
    """Convert an Insight into upsert parameters (INSIGHT_COLUMNS order)."""
    return (
        insight.id,
        insight.signal,
        insight.interpretation,
        insight.recommendation,
        json.dumps(insight.sources),
        insight.confidence,
        insight.company,
        insight.function,
        insight.region,
        insight.initiative,
        insight.category.value,
        insight.createdAt,
    )


# =============================================================================
# Repository
# =============================================================================


class InsightRepository:
    """
    Stored insight access over an asyncpg pool.

    Every method raises StoreUnavailable when the database cannot serve the
    request.
    """

    def __init__(self, pool: Pool):
        self._pool = pool

    async def list_insights(self, query: Optional[InsightQuery] = None) -> List[Insight]:
        """List stored insights matching the filters, newest first."""
        sql, params = build_insight_list_query(query or InsightQuery())
        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(sql, *params)
        except DATABASE_ERRORS as e:
            logger.error(f"Insight listing failed: {e}")
            raise StoreUnavailable("Cannot read insights") from e
        insights = [_readable_insight(row) for row in rows]
        return [insight for insight in insights if insight is not None]

    async def get_insight(self, insight_id: str) -> Optional[Insight]:
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(get_insight_by_id_query(), insight_id)
        except DATABASE_ERRORS as e:
            logger.error(f"Insight lookup failed for {insight_id}: {e}")
            raise StoreUnavailable(f"Cannot read insight {insight_id}") from e
        return _readable_insight(row) if row else None

    async def get_filter_options(self) -> FilterOptions:
        """
        Distinct companies, functions, regions and initiatives of stored
        insights, plus every category of the enum.
        """
        values = {}
        try:
            async with self._pool.acquire() as conn:
                for column in DISTINCT_COLUMNS:
                    rows = await conn.fetch(get_distinct_values_query(column))
                    values[column] = [row['value'] for row in rows]
        except DATABASE_ERRORS as e:
            logger.error(f"Filter options query failed: {e}")
            raise StoreUnavailable("Cannot read filter options") from e

        return FilterOptions(
            companies=values['company'],
            functions=values['function'],
            regions=values['region'],
            initiatives=values['initiative'],
            categories=list(InsightCategory),
        )

    async def get_stats(self) -> InsightStats:
        """Total, per-category and per-region counts and average confidence."""
        try:
            async with self._pool.acquire() as conn:
                totals = await conn.fetchrow(get_insight_count_query())
                by_category = await conn.fetch(get_insight_group_count_query('category'))
                by_region = await conn.fetch(get_insight_group_count_query('region'))
        except DATABASE_ERRORS as e:
            logger.error(f"Insight stats query failed: {e}")
            raise StoreUnavailable("Cannot read insight statistics") from e

        average = totals['avg_confidence'] if totals else None
        return InsightStats(
            total=int(totals['count']) if totals else 0,
            byCategory=[GroupCount(key=row['key'], count=int(row['count'])) for row in by_category],
            byRegion=[GroupCount(key=row['key'], count=int(row['count'])) for row in by_region],
            averageConfidence=float(average) if average is not None else None,
        )

    async def save_insights(self, insights: Sequence[Insight]) -> int:
        """Insert or replace insights by id. Returns the number written."""
        if not insights:
            return 0

        records = [insight_to_record(insight) for insight in insights]
        try:
            async with self._pool.acquire() as conn:
                await conn.executemany(get_upsert_insight_query(), records)
        except DATABASE_ERRORS as e:
            logger.error(f"Insight upsert failed: {e}")
            raise StoreUnavailable("Cannot write insights") from e

        logger.info(f"Saved {len(records)} insights")
        return len(records)

    async def clear(self) -> None:
        try:
            async with self._pool.acquire() as conn:
                await conn.execute(get_delete_all_insights_query())
        except DATABASE_ERRORS as e:
            raise StoreUnavailable("Cannot clear insights") from e
