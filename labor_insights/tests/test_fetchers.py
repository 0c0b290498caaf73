"""
Tests for the FRED and BLS fetchers, using httpx.MockTransport in place of
the real APIs, and for refresh_observations.
"""

import json
from datetime import datetime, timezone
from typing import Dict, List

import httpx
import pytest

from labor_insights.core.exceptions import FetcherError, FetcherNotConfigured
from labor_insights.models import DataSourceName, InsightCategory
from labor_insights.services.fetchers import (
    BlsClient,
    FredClient,
    data_source_statuses,
    refresh_observations,
)
from labor_insights.services.insight_generator import InsightGenerator
from labor_insights.services.metric_store import InMemoryMetricStore

pytestmark = pytest.mark.asyncio


FRED_SERIES: Dict[str, List[Dict[str, str]]] = {
    'ECIWAG': [
        {'date': '2024-07-01', 'value': '160.0'},
        {'date': '2024-04-01', 'value': '158.0'},
        {'date': '2024-01-01', 'value': '156.0'},
        {'date': '2023-10-01', 'value': '153.0'},
        {'date': '2023-07-01', 'value': '150.0'},
    ],
    'CES6054000001': [
        {'date': '2024-10-01', 'value': '23150.5'},
    ],
}

BLS_SERIES: Dict[str, List[Dict[str, str]]] = {
    'LNS14000000': [
        {'year': '2024', 'period': 'M09', 'value': '4.1'},
        {'year': '2024', 'period': 'M10', 'value': '4.1'},
        {'year': '2024', 'period': 'M08', 'value': '4.2'},
    ],
    'LNU04032231': [
        {'year': '2024', 'period': 'M10', 'value': '2.0'},
    ],
}


def fred_handler(request: httpx.Request) -> httpx.Response:
    series_id = request.url.params['series_id']
    assert request.url.params['api_key'] == 'fred-key'
    assert request.url.params['sort_order'] == 'desc'
    return httpx.Response(200, json={'observations': FRED_SERIES[series_id]})


def bls_handler(request: httpx.Request) -> httpx.Response:
    body = json.loads(request.content)
    assert body['registrationkey'] == 'bls-key'
    series_id = body['seriesid'][0]
    return httpx.Response(200, json={
        'status': 'REQUEST_SUCCEEDED',
        'Results': {'series': [{'seriesID': series_id, 'data': BLS_SERIES[series_id]}]},
    })


def make_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


# =============================================================================
# FRED
# =============================================================================


class TestFredClient:

    async def test_fetch_series_newest_first(self):
        client = FredClient('fred-key', http_client=make_client(fred_handler))

        points = await client.fetch_series('ECIWAG', limit=5)

        assert [point.value for point in points] == [160.0, 158.0, 156.0, 153.0, 150.0]
        assert points[0].date == datetime(2024, 7, 1, tzinfo=timezone.utc)

    async def test_missing_values_are_skipped(self):
        def handler(request):
            return httpx.Response(200, json={'observations': [
                {'date': '2024-10-01', 'value': '.'},
                {'date': '2024-09-01', 'value': '23100'},
            ]})
        client = FredClient('fred-key', http_client=make_client(handler))

        points = await client.fetch_series('CES6054000001')

        assert [point.value for point in points] == [23100.0]

    async def test_observations(self):
        client = FredClient('fred-key', http_client=make_client(fred_handler))

        observations = await client.fetch_observations()

        by_metric = {obs.metric: obs for obs in observations}
        assert by_metric['wage_growth'].value == pytest.approx(6.67)
        assert by_metric['wage_growth'].region == 'NA'
        assert by_metric['professional_services_employment'].value == pytest.approx(23150.5)

    async def test_wage_growth_needs_a_full_year(self):
        def handler(request):
            return httpx.Response(200, json={'observations': FRED_SERIES['ECIWAG'][:3]})
        client = FredClient('fred-key', http_client=make_client(handler))

        assert await client.fetch_wage_growth() is None

    async def test_wage_growth_matches_year_ago_by_date(self):
        def handler(request):
            return httpx.Response(200, json={'observations': [
                {'date': '2024-07-01', 'value': '160.0'},
                {'date': '2024-04-01', 'value': '.'},
                {'date': '2024-01-01', 'value': '156.0'},
                {'date': '2023-10-01', 'value': '153.0'},
                {'date': '2023-07-01', 'value': '150.0'},
                {'date': '2023-04-01', 'value': '140.0'},
            ]})
        client = FredClient('fred-key', http_client=make_client(handler))

        observation = await client.fetch_wage_growth()

        assert observation.value == pytest.approx(6.67)

    async def test_wage_growth_missing_year_ago_quarter(self):
        def handler(request):
            return httpx.Response(200, json={'observations': [
                {'date': '2024-07-01', 'value': '160.0'},
                {'date': '2023-07-01', 'value': '.'},
                {'date': '2023-04-01', 'value': '140.0'},
            ]})
        client = FredClient('fred-key', http_client=make_client(handler))

        assert await client.fetch_wage_growth() is None

    async def test_not_configured(self):
        client = FredClient(None)

        assert client.is_configured() is False
        with pytest.raises(FetcherNotConfigured):
            await client.fetch_series('ECIWAG')

    async def test_http_error(self):
        client = FredClient('fred-key', http_client=make_client(lambda request: httpx.Response(500)))

        with pytest.raises(FetcherError):
            await client.fetch_series('ECIWAG')

    async def test_unexpected_payload(self):
        client = FredClient('fred-key', http_client=make_client(
            lambda request: httpx.Response(200, json={'error_message': 'Bad Request'})
        ))

        with pytest.raises(FetcherError):
            await client.fetch_series('ECIWAG')


# =============================================================================
# BLS
# =============================================================================


class TestBlsClient:

    async def test_fetch_series_sorted_newest_first(self):
        client = BlsClient('bls-key', http_client=make_client(bls_handler))

        points = await client.fetch_series('LNS14000000')

        assert [point.date.month for point in points] == [10, 9, 8]

    async def test_observations(self):
        client = BlsClient('bls-key', http_client=make_client(bls_handler))

        observations = await client.fetch_observations()

        assert [(obs.metric, obs.value) for obs in observations] == [
            ('unemployment_rate', 4.1),
            ('advanced_degree_unemployment', 2.0),
        ]
        assert observations[0].timestamp == datetime(2024, 10, 1, tzinfo=timezone.utc)

    async def test_failed_request_status(self):
        client = BlsClient('bls-key', http_client=make_client(lambda request: httpx.Response(200, json={
            'status': 'REQUEST_NOT_PROCESSED',
            'message': ['Daily threshold reached'],
        })))

        with pytest.raises(FetcherError, match='Daily threshold'):
            await client.fetch_series('LNS14000000')

    async def test_not_configured(self):
        with pytest.raises(FetcherNotConfigured):
            await BlsClient('').fetch_series('LNS14000000')


# =============================================================================
# Refresh
# =============================================================================


class TestRefreshObservations:

    async def test_stores_observations_from_configured_sources(self):
        store = InMemoryMetricStore()
        fetchers = [
            FredClient('fred-key', http_client=make_client(fred_handler)),
            BlsClient(None),
        ]

        counts, errors = await refresh_observations(store, fetchers)

        assert counts == {'fred': 2}
        assert errors == {}
        assert len(await store.query('NA')) == 2

    async def test_failing_source_is_skipped(self):
        store = InMemoryMetricStore()
        fetchers = [
            FredClient('fred-key', http_client=make_client(lambda request: httpx.Response(503))),
            BlsClient('bls-key', http_client=make_client(bls_handler)),
        ]

        counts, errors = await refresh_observations(store, fetchers)

        assert counts == {'bls': 2}
        assert 'fred' in errors
        assert len(store) == 2

    async def test_refreshed_observations_generate_insights(self, rule_catalog):
        store = InMemoryMetricStore()
        fetchers = [
            FredClient('fred-key', http_client=make_client(fred_handler)),
            BlsClient('bls-key', http_client=make_client(bls_handler)),
        ]
        await refresh_observations(store, fetchers)

        insights = await InsightGenerator(store, rule_catalog).generate('Acme', 'NA', 'All')

        assert [insight.category for insight in insights] == [
            InsightCategory.WAGE_PRESSURE,
            InsightCategory.TALENT_SUPPLY,
            InsightCategory.EXECUTIVE_TALENT,
        ]
        assert insights[0].signal.endswith('(wage_growth: 6.67)')
        assert all(insight.region == 'NA' for insight in insights)

    async def test_statuses(self):
        statuses = data_source_statuses([FredClient('fred-key'), BlsClient(None)])

        assert [status.name for status in statuses] == [DataSourceName.FRED, DataSourceName.BLS]
        assert [status.configured for status in statuses] == [True, False]
