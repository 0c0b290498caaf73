"""
Tests for the in-memory and PostgreSQL metric stores.
"""

from datetime import datetime, timezone

import asyncpg
import pytest

from labor_insights.core.exceptions import StoreUnavailable
from labor_insights.services.metric_store import (
    InMemoryMetricStore,
    PostgresMetricStore,
    observation_from_record,
)

pytestmark = pytest.mark.asyncio


class TestInMemoryMetricStore:

    async def test_query_returns_region_and_global(self, make_observation):
        emea = make_observation('inflation_rate', 7.2, region='EMEA')
        na = make_observation('inflation_rate', 5.8, region='NA')
        global_obs = make_observation('fx_volatility', 12, region='Global')
        store = InMemoryMetricStore([emea, na, global_obs])

        assert await store.query('EMEA') == [emea, global_obs]

    async def test_custom_global_region(self, make_observation):
        world = make_observation('fx_volatility', 12, region='World')
        store = InMemoryMetricStore([world], global_region='World')

        assert await store.query('APAC') == [world]

    async def test_unknown_region_is_empty(self):
        assert await InMemoryMetricStore().query('EMEA') == []

    async def test_insert_and_clear(self, make_observation):
        store = InMemoryMetricStore()

        written = await store.insert([make_observation('org_changes', 8), make_observation('org_changes', 9)])
        assert written == 2
        assert len(store) == 2

        await store.clear()
        assert len(store) == 0


class TestPostgresMetricStore:

    async def test_query_passes_region_and_global(self, mock_db_pool, mock_connection):
        mock_connection.fetch.return_value = [{
            'metric': 'inflation_rate',
            'value': 7.2,
            'region': 'EMEA',
            'function': None,
            'timestamp': datetime(2024, 11, 1, tzinfo=timezone.utc),
        }]
        store = PostgresMetricStore(mock_db_pool, global_region='Global')

        observations = await store.query('EMEA')

        args = mock_connection.fetch.call_args.args
        assert args[1:] == ('EMEA', 'Global')
        assert observations[0].metric == 'inflation_rate'
        assert observations[0].value == pytest.approx(7.2)

    async def test_query_failure_raises_store_unavailable(self, mock_db_pool, mock_connection):
        mock_connection.fetch.side_effect = asyncpg.InterfaceError('connection is closed')
        store = PostgresMetricStore(mock_db_pool)

        with pytest.raises(StoreUnavailable):
            await store.query('EMEA')

    async def test_connection_refused_raises_store_unavailable(self, mock_db_pool, mock_connection):
        mock_connection.fetch.side_effect = ConnectionRefusedError()

        with pytest.raises(StoreUnavailable):
            await PostgresMetricStore(mock_db_pool).query('EMEA')

    async def test_insert_uses_executemany(self, mock_db_pool, mock_connection, make_observation):
        store = PostgresMetricStore(mock_db_pool)
        obs = make_observation('ai_wage_growth', 28, region='APAC', function='AI')

        assert await store.insert([obs]) == 1

        records = mock_connection.executemany.call_args.args[1]
        assert records == [('ai_wage_growth', 28.0, 'APAC', 'AI', obs.timestamp)]

    async def test_insert_nothing_skips_database(self, mock_db_pool):
        assert await PostgresMetricStore(mock_db_pool).insert([]) == 0
        mock_db_pool.acquire.assert_not_called()

    async def test_insert_failure_raises_store_unavailable(self, mock_db_pool, mock_connection, make_observation):
        mock_connection.executemany.side_effect = OSError('network down')

        with pytest.raises(StoreUnavailable):
            await PostgresMetricStore(mock_db_pool).insert([make_observation('org_changes', 8)])


class TestObservationFromRecord:

    async def test_naive_timestamp_becomes_utc(self):
        obs = observation_from_record({
            'metric': 'wage_growth',
            'value': 3,
            'region': 'NA',
            'function': None,
            'timestamp': datetime(2024, 11, 1),
        })

        assert obs.timestamp.tzinfo is not None
        assert obs.value == 3.0
