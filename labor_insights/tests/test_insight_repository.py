"""
Tests for stored insight access: SQL building, row mapping and the
InsightRepository over a mocked asyncpg pool.
"""

import json
from datetime import datetime, timezone
from typing import Any, Dict

import pytest

from labor_insights.core.exceptions import StoreUnavailable
from labor_insights.models import Insight, InsightCategory, InsightQuery
from labor_insights.services.insight_repository import (
    InsightRepository,
    insight_from_record,
    insight_to_record,
)
from labor_insights.sql import (
    build_insight_list_query,
    get_distinct_values_query,
    get_insight_group_count_query,
)


def _row(**overrides: Any) -> Dict[str, Any]:
    row = {
        'id': 'seed-01',
        'signal': 'AI executive compensation growing 28% YoY in APAC region',
        'interpretation': 'Sourcing costs rising',
        'recommendation': 'Explore nearshore hiring',
        'sources': json.dumps(['Levels.fyi', 'Payscale']),
        'confidence': 0.92,
        'company': 'Netflix',
        'function': 'AI',
        'region': 'APAC',
        'initiative': 'AI Expansion',
        'category': 'Wage Pressures & Inflation',
        'created_at': datetime(2024, 11, 20, 10, 0, tzinfo=timezone.utc),
    }
    row.update(overrides)
    return row


# =============================================================================
# SQL Building
# =============================================================================


class TestInsightListQuery:

    def test_no_filters(self):
        sql, params = build_insight_list_query(InsightQuery())

        assert 'WHERE' not in sql
        assert 'ORDER BY created_at DESC' in sql
        assert params == []

    def test_filters_are_parameterized_in_order(self):
        sql, params = build_insight_list_query(InsightQuery(
            company='Netflix',
            region='EMEA',
            category=InsightCategory.TALENT_SUPPLY,
        ))

        assert 'company = $1 AND region = $2 AND category = $3' in sql
        assert params == ['Netflix', 'EMEA', 'Talent Supply Shifts']

    def test_filter_values_never_reach_sql_text(self):
        sql, _ = build_insight_list_query(InsightQuery(company="x'; DROP TABLE insights; --"))
        assert 'DROP TABLE' not in sql

    def test_unknown_distinct_column_rejected(self):
        with pytest.raises(ValueError):
            get_distinct_values_query('signal')

    def test_unknown_group_column_rejected(self):
        with pytest.raises(ValueError):
            get_insight_group_count_query('company')


# =============================================================================
# Row Mapping
# =============================================================================


class TestRowMapping:

    def test_from_record(self):
        insight = insight_from_record(_row())

        assert insight.sources == ['Levels.fyi', 'Payscale']
        assert insight.category == InsightCategory.WAGE_PRESSURE
        assert insight.createdAt.year == 2024

    def test_invalid_sources_json_kept_as_single_source(self):
        insight = insight_from_record(_row(sources='Levels.fyi'))
        assert insight.sources == ['Levels.fyi']

    def test_to_record_serializes_sources_and_category(self):
        insight = insight_from_record(_row())

        record = insight_to_record(insight)

        assert record[0] == 'seed-01'
        assert json.loads(record[4]) == ['Levels.fyi', 'Payscale']
        assert record[10] == 'Wage Pressures & Inflation'
        assert len(record) == 12


# =============================================================================
# Repository
# =============================================================================


@pytest.mark.asyncio
class TestInsightRepository:

    async def test_list_insights_maps_rows(self, mock_db_pool, mock_connection):
        mock_connection.fetch.return_value = [_row(), _row(id='seed-02')]
        repository = InsightRepository(mock_db_pool)

        insights = await repository.list_insights(InsightQuery(region='APAC'))

        assert [insight.id for insight in insights] == ['seed-01', 'seed-02']
        assert mock_connection.fetch.call_args.args[1:] == ('APAC',)

    async def test_list_insights_skips_unknown_category(self, mock_db_pool, mock_connection):
        mock_connection.fetch.return_value = [
            _row(),
            _row(id='legacy-01', category='Compensation Trends'),
            _row(id='seed-03', category='TALENT_SUPPLY'),
        ]

        insights = await InsightRepository(mock_db_pool).list_insights()

        assert [insight.id for insight in insights] == ['seed-01', 'seed-03']
        assert insights[1].category == InsightCategory.TALENT_SUPPLY

    async def test_get_insight_missing(self, mock_db_pool):
        assert await InsightRepository(mock_db_pool).get_insight('absent') is None

    async def test_get_insight_found(self, mock_db_pool, mock_connection):
        mock_connection.fetchrow.return_value = _row()

        insight = await InsightRepository(mock_db_pool).get_insight('seed-01')

        assert isinstance(insight, Insight)
        assert mock_connection.fetchrow.call_args.args[1] == 'seed-01'

    async def test_filter_options(self, mock_db_pool, mock_connection):
        mock_connection.fetch.side_effect = [
            [{'value': 'Netflix'}],
            [{'value': 'AI'}, {'value': 'Ads'}],
            [{'value': 'APAC'}],
            [{'value': 'AI Expansion'}],
        ]

        options = await InsightRepository(mock_db_pool).get_filter_options()

        assert options.companies == ['Netflix']
        assert options.functions == ['AI', 'Ads']
        assert options.regions == ['APAC']
        assert options.initiatives == ['AI Expansion']
        assert options.categories == list(InsightCategory)

    async def test_stats(self, mock_db_pool, mock_connection):
        mock_connection.fetchrow.return_value = {'count': 3, 'avg_confidence': 0.9}
        mock_connection.fetch.side_effect = [
            [{'key': 'Talent Supply Shifts', 'count': 2}, {'key': 'Macroeconomic Signals', 'count': 1}],
            [{'key': 'APAC', 'count': 3}],
        ]

        stats = await InsightRepository(mock_db_pool).get_stats()

        assert stats.total == 3
        assert stats.averageConfidence == pytest.approx(0.9)
        assert stats.byCategory[0].key == 'Talent Supply Shifts'
        assert stats.byRegion[0].count == 3

    async def test_stats_on_empty_table(self, mock_db_pool, mock_connection):
        mock_connection.fetchrow.return_value = {'count': 0, 'avg_confidence': None}

        stats = await InsightRepository(mock_db_pool).get_stats()

        assert stats.total == 0
        assert stats.averageConfidence is None

    async def test_save_insights_upserts(self, mock_db_pool, mock_connection):
        insight = insight_from_record(_row())

        written = await InsightRepository(mock_db_pool).save_insights([insight])

        assert written == 1
        query, records = mock_connection.executemany.call_args.args
        assert 'ON CONFLICT (id)' in query
        assert records == [insight_to_record(insight)]

    async def test_save_nothing(self, mock_db_pool):
        assert await InsightRepository(mock_db_pool).save_insights([]) == 0

    async def test_database_failure_raises_store_unavailable(self, mock_db_pool, mock_connection):
        mock_connection.fetch.side_effect = OSError('connection reset')

        with pytest.raises(StoreUnavailable):
            await InsightRepository(mock_db_pool).list_insights()
