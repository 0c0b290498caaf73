"""
Statistical Data Source Fetchers

Clients for the public FRED and BLS APIs. Each client turns a few series
into MetricObservation batches that the rule engine can evaluate; neither
builds insights itself.

FRED (https://fred.stlouisfed.org/docs/api/fred/):
- ECIWAG: Employment Cost Index, wages and salaries, private industry.
  Quarterly; year-over-year % change becomes the 'wage_growth' metric.
- CES6054000001: All employees, professional, scientific and technical
  services. Latest value becomes 'professional_services_employment'.

BLS (https://www.bls.gov/developers/):
- LNS14000000: Unemployment rate, seasonally adjusted -> 'unemployment_rate'
- LNU04032231: Unemployment rate, advanced degree holders ->
  'advanced_degree_unemployment'

Both sources describe the US labor market, so observations are filed under
region 'NA'.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import httpx

from labor_insights.core.exceptions import FetcherError, FetcherNotConfigured
from labor_insights.models import DataSourceName, DataSourceStatus, MetricObservation
from labor_insights.services.metric_store import MetricStore

logger = logging.getLogger(__name__)


US_REGION: str = "NA"

DEFAULT_TIMEOUT_SECONDS: float = 30.0


@dataclass(frozen=True)
class SeriesPoint:
    """One observation of a statistical series, newest first in lists."""
    series_id: str
    value: float
    date: datetime


# =============================================================================
# FRED
# =============================================================================


class FredClient:
    """Client for the FRED series observations API."""

    name = DataSourceName.FRED
    base_url = "https://api.stlouisfed.org/fred"
    attribution = "Federal Reserve Bank of St. Louis - FRED Economic Data"
    portal_url = "https://fred.stlouisfed.org/"

    # ECIWAG is quarterly; two years of points leaves room for missing quarters
    WAGE_SERIES = "ECIWAG"
    WAGE_HISTORY_LIMIT = 8
    EMPLOYMENT_SERIES = "CES6054000001"

    def __init__(
        self,
        api_key: Optional[str],
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self._api_key = api_key
        self._http_client = http_client
        self._timeout = timeout

    def is_configured(self) -> bool:
        return bool(self._api_key)

    def status(self) -> DataSourceStatus:
        return DataSourceStatus(
            name=self.name,
            configured=self.is_configured(),
            active=self.is_configured(),
            attribution=self.attribution,
            portalUrl=self.portal_url,
        )

    async def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            if self._http_client is not None:
                resp = await self._http_client.get(url, params=params)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    resp = await client.get(url, params=params)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPError as e:
            raise FetcherError(f"FRED request failed: {e}") from e
        except ValueError as e:
            raise FetcherError(f"FRED returned invalid JSON: {e}") from e

    async def fetch_series(self, series_id: str, limit: int = 1) -> List[SeriesPoint]:
        """
        Fetch the most recent observations of a series, newest first.

        Missing values (reported by FRED as '.') are skipped.

        Raises:
            FetcherNotConfigured: If no API key is set
            FetcherError: On HTTP errors or an unexpected payload
        """
        if not self.is_configured():
            raise FetcherNotConfigured("FRED API key is not configured")

        payload = await self._get("/series/observations", {
            "series_id": series_id,
            "api_key": self._api_key,
            "file_type": "json",
            "sort_order": "desc",
            "limit": limit,
        })

        try:
            raw_observations = payload["observations"]
            points = [
                SeriesPoint(
                    series_id=series_id,
                    value=float(obs["value"]),
                    date=datetime.strptime(obs["date"], "%Y-%m-%d").replace(tzinfo=timezone.utc),
                )
                for obs in raw_observations
                if obs.get("value") != "."
            ]
        except (KeyError, TypeError, ValueError) as e:
            raise FetcherError(f"Unexpected FRED payload for {series_id}: {e}") from e

        return points

    async def fetch_wage_growth(self) -> Optional[MetricObservation]:
        """
        Year-over-year % change of the Employment Cost Index.

        The year-ago point is matched by date, so a missing quarter never
        shifts the comparison. No matching point means no observation.
        """
        points = await self.fetch_series(self.WAGE_SERIES, limit=self.WAGE_HISTORY_LIMIT)
        if not points:
            logger.warning(f"No data to calculate YoY change for {self.WAGE_SERIES}")
            return None

        current = points[0]
        year_ago_date = current.date.replace(year=current.date.year - 1)
        year_ago = next((point for point in points if point.date == year_ago_date), None)
        if year_ago is None:
            logger.warning(f"No {year_ago_date:%Y-%m-%d} value to calculate YoY change for {self.WAGE_SERIES}")
            return None
        if year_ago.value == 0:
            return None

        yoy_percent = (current.value - year_ago.value) / year_ago.value * 100
        return MetricObservation(
            metric="wage_growth",
            value=round(yoy_percent, 2),
            region=US_REGION,
            timestamp=current.date,
        )

    async def fetch_professional_services_employment(self) -> Optional[MetricObservation]:
        points = await self.fetch_series(self.EMPLOYMENT_SERIES, limit=1)
        if not points:
            return None
        return MetricObservation(
            metric="professional_services_employment",
            value=points[0].value,
            region=US_REGION,
            timestamp=points[0].date,
        )

    async def fetch_observations(self) -> List[MetricObservation]:
        results = [
            await self.fetch_wage_growth(),
            await self.fetch_professional_services_employment(),
        ]
        return [obs for obs in results if obs is not None]


# =============================================================================
# BLS
# =============================================================================


class BlsClient:
    """Client for the BLS public timeseries API (v2)."""

    name = DataSourceName.BLS
    base_url = "https://api.bls.gov/publicAPI/v2/timeseries/data/"
    attribution = "U.S. Bureau of Labor Statistics (BLS)"
    portal_url = "https://www.bls.gov/cps/data.htm"

    # series id -> metric name
    SERIES_METRICS: Mapping[str, str] = {
        "LNS14000000": "unemployment_rate",
        "LNU04032231": "advanced_degree_unemployment",
    }

    def __init__(
        self,
        api_key: Optional[str],
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self._api_key = api_key
        self._http_client = http_client
        self._timeout = timeout

    def is_configured(self) -> bool:
        return bool(self._api_key)

    def status(self) -> DataSourceStatus:
        return DataSourceStatus(
            name=self.name,
            configured=self.is_configured(),
            active=self.is_configured(),
            attribution=self.attribution,
            portalUrl=self.portal_url,
        )

    async def _post(self, body: Dict[str, Any]) -> Dict[str, Any]:
        try:
            if self._http_client is not None:
                resp = await self._http_client.post(self.base_url, json=body)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    resp = await client.post(self.base_url, json=body)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPError as e:
            raise FetcherError(f"BLS request failed: {e}") from e
        except ValueError as e:
            raise FetcherError(f"BLS returned invalid JSON: {e}") from e

    @staticmethod
    def _period_date(year: str, period: str) -> datetime:
        # Monthly periods are M01..M12; M13 (annual average) and others map to January
        month = int(period[1:]) if period.startswith("M") and period[1:].isdigit() else 1
        if not 1 <= month <= 12:
            month = 1
        return datetime(int(year), month, 1, tzinfo=timezone.utc)

    async def fetch_series(
        self,
        series_id: str,
        years: int = 1,
        today: Optional[datetime] = None,
    ) -> List[SeriesPoint]:
        """
        Fetch a series for the last `years` calendar years, newest first.

        Raises:
            FetcherNotConfigured: If no API key is set
            FetcherError: On HTTP errors, a failed request status or an
                unexpected payload
        """
        if not self.is_configured():
            raise FetcherNotConfigured("BLS API key is not configured")

        end_year = (today or datetime.now(timezone.utc)).year
        start_year = end_year - years + 1

        payload = await self._post({
            "seriesid": [series_id],
            "startyear": str(start_year),
            "endyear": str(end_year),
            "registrationkey": self._api_key,
        })

        if payload.get("status") != "REQUEST_SUCCEEDED":
            messages = ", ".join(payload.get("message") or []) or "unknown error"
            raise FetcherError(f"BLS API error: {messages}")

        try:
            series = payload["Results"]["series"][0]
            points = [
                SeriesPoint(
                    series_id=series_id,
                    value=float(point["value"]),
                    date=self._period_date(point["year"], point["period"]),
                )
                for point in series["data"]
                if point.get("value") not in (None, "", "-")
            ]
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise FetcherError(f"Unexpected BLS payload for {series_id}: {e}") from e

        return sorted(points, key=lambda point: point.date, reverse=True)

    async def fetch_observations(self) -> List[MetricObservation]:
        observations: List[MetricObservation] = []
        for series_id, metric in self.SERIES_METRICS.items():
            points = await self.fetch_series(series_id, years=1)
            if not points:
                logger.warning(f"BLS series {series_id} returned no data")
                continue
            observations.append(MetricObservation(
                metric=metric,
                value=points[0].value,
                region=US_REGION,
                timestamp=points[0].date,
            ))
        return observations


# =============================================================================
# Refresh
# =============================================================================


async def refresh_observations(
    store: MetricStore,
    fetchers: Sequence[Any],
) -> Tuple[Dict[str, int], Dict[str, str]]:
    """
    Fetch observations from every configured source and store them.

    A source that fails is logged and skipped; the others still refresh.

    Args:
        store: Destination MetricStore
        fetchers: FredClient / BlsClient instances

    Returns:
        Tuple of (source name -> observations stored, source name -> error
        message). Unconfigured sources appear in neither.

    Raises:
        StoreUnavailable: If fetched observations cannot be written
    """
    counts: Dict[str, int] = {}
    errors: Dict[str, str] = {}
    for fetcher in fetchers:
        source = fetcher.name.value
        if not fetcher.is_configured():
            logger.info(f"Skipping {source}: not configured")
            continue

        try:
            observations = await fetcher.fetch_observations()
        except FetcherError as e:
            logger.warning(f"Skipping {source}: {e}")
            errors[source] = str(e)
            continue

        counts[source] = await store.insert(observations)
        logger.info(f"Stored {counts[source]} observations from {source}")

    return counts, errors


def data_source_statuses(fetchers: Sequence[Any]) -> List[DataSourceStatus]:
    """Configuration status of every statistical source."""
    return [fetcher.status() for fetcher in fetchers]
