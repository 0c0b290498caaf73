"""
Metric observation stores.

The rule engine reads observations through the MetricStore interface and
never touches SQL. Two implementations:

- InMemoryMetricStore: list-backed, for tests and embedding
- PostgresMetricStore: asyncpg-backed, over the data_points table

A region query returns the region's observations plus those of the global
region. Database failures surface as StoreUnavailable; the store never
fabricates or silently drops data.
"""

import logging
from typing import Iterable, List, Protocol, Sequence

from asyncpg import Pool, Record

from labor_insights.core.database import DATABASE_ERRORS
from labor_insights.core.exceptions import StoreUnavailable
from labor_insights.models import MetricObservation
from labor_insights.sql import (
    get_delete_all_observations_query,
    get_insert_observation_query,
    get_observations_by_region_query,
)

logger = logging.getLogger(__name__)


DEFAULT_GLOBAL_REGION: str = "Global"


class MetricStore(Protocol):
    """Read/write access to metric observations."""

    async def query(self, region: str) -> List[MetricObservation]:
        """Observations for a region, including global-region observations."""
        ...

    async def insert(self, observations: Sequence[MetricObservation]) -> int:
        """Store observations; returns the number written."""
        ...

    async def clear(self) -> None:
        """Remove every observation."""
        ...


# =============================================================================
# In-Memory Store
# =============================================================================


class InMemoryMetricStore:
    """List-backed MetricStore. Query results keep insertion order."""

    def __init__(
        self,
        observations: Iterable[MetricObservation] = (),
        global_region: str = DEFAULT_GLOBAL_REGION,
    ):
        self._observations: List[MetricObservation] = list(observations)
        self._global_region = global_region

    async def query(self, region: str) -> List[MetricObservation]:
        return [
            obs for obs in self._observations
            if obs.region == region or obs.region == self._global_region
        ]

    async def insert(self, observations: Sequence[MetricObservation]) -> int:
        self._observations.extend(observations)
        return len(observations)

    async def clear(self) -> None:
        self._observations.clear()

    def __len__(self) -> int:
        return len(self._observations)


# =============================================================================
# PostgreSQL Store
# =============================================================================


def observation_from_record(row: Record) -> MetricObservation:
    """Convert a data_points row into a MetricObservation."""
    return MetricObservation(
        metric=row['metric'],
        value=float(row['value']),
        region=row['region'],
        function=row['function'],
        timestamp=row['timestamp'],
    )


def observation_to_record(observation: MetricObservation) -> tuple:
    """Convert a MetricObservation into insert parameters."""
    return (
        observation.metric,
        observation.value,
        observation.region,
        observation.function,
        observation.timestamp,
    )


class PostgresMetricStore:
    """MetricStore over the data_points table."""

    def __init__(self, pool: Pool, global_region: str = DEFAULT_GLOBAL_REGION):
        self._pool = pool
        self._global_region = global_region

    async def query(self, region: str) -> List[MetricObservation]:
        """
        Fetch observations for a region plus the global region.

        Raises:
            StoreUnavailable: If the database cannot be reached or the query fails
        """
        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(
                    get_observations_by_region_query(),
                    region,
                    self._global_region,
                )
        except DATABASE_ERRORS as e:
            logger.error(f"Observation query failed for region {region}: {e}")
            raise StoreUnavailable(f"Cannot read observations for region {region}") from e

        return [observation_from_record(row) for row in rows]

    async def insert(self, observations: Sequence[MetricObservation]) -> int:
        """
        Insert observations in one batch.

        Raises:
            StoreUnavailable: If the batch cannot be written
        """
        if not observations:
            return 0

        records = [observation_to_record(obs) for obs in observations]

        try:
            async with self._pool.acquire() as conn:
                await conn.executemany(get_insert_observation_query(), records)
        except DATABASE_ERRORS as e:
            logger.error(f"Observation insert failed: {e}")
            raise StoreUnavailable("Cannot write observations") from e

        logger.info(f"Inserted {len(records)} observations into data_points")
        return len(records)

    async def clear(self) -> None:
        try:
            async with self._pool.acquire() as conn:
                await conn.execute(get_delete_all_observations_query())
        except DATABASE_ERRORS as e:
            raise StoreUnavailable("Cannot clear observations") from e
