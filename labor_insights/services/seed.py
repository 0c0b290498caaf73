"""
Development seed data.

Loads a fixed set of metric observations and curated insights so the API has
something to serve locally. Seeding replaces existing data in both tables; the
command-line entry point does so in one transaction.

Run against the configured DATABASE_URL with:

    python -m labor_insights.services.seed
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Tuple

from asyncpg import Pool

from labor_insights.core.database import DATABASE_ERRORS, close_db, init_db, init_schema
from labor_insights.core.exceptions import StoreUnavailable
from labor_insights.models import Insight, InsightCategory, MetricObservation
from labor_insights.services.insight_repository import InsightRepository, insight_to_record
from labor_insights.services.metric_store import MetricStore, observation_to_record
from labor_insights.sql import (
    get_delete_all_insights_query,
    get_delete_all_observations_query,
    get_insert_observation_query,
    get_upsert_insight_query,
)

logger = logging.getLogger(__name__)


def _ts(value: str) -> datetime:
    return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)


_NOV_2024 = _ts("2024-11-01T00:00:00")
_OCT_2024 = _ts("2024-10-01T00:00:00")


# =============================================================================
# Observations
# =============================================================================

SEED_OBSERVATIONS: Tuple[MetricObservation, ...] = (
    MetricObservation(metric="inflation_rate", value=7.2, region="EMEA", timestamp=_NOV_2024),
    MetricObservation(metric="wage_growth", value=2.5, region="EMEA", timestamp=_NOV_2024),
    MetricObservation(metric="executive_mobility", value=75, region="EMEA", timestamp=_NOV_2024),

    MetricObservation(metric="ai_wage_growth", value=28, region="APAC", function="AI", timestamp=_NOV_2024),
    MetricObservation(metric="ai_wage_growth", value=22, region="NA", function="AI", timestamp=_NOV_2024),

    MetricObservation(metric="exec_job_postings", value=-25, region="EMEA", timestamp=_NOV_2024),
    MetricObservation(metric="exec_job_postings", value=-15, region="NA", timestamp=_NOV_2024),

    MetricObservation(metric="fx_volatility", value=18, region="LATAM", timestamp=_NOV_2024),
    MetricObservation(metric="fx_volatility", value=12, region="EMEA", timestamp=_NOV_2024),

    MetricObservation(metric="tech_layoffs", value=12000, region="NA", timestamp=_OCT_2024),
    MetricObservation(metric="tech_layoffs", value=3500, region="EMEA", timestamp=_OCT_2024),

    MetricObservation(metric="exec_hiring_growth", value=35, region="APAC", timestamp=_NOV_2024),
    MetricObservation(metric="exec_hiring_growth", value=42, region="LATAM", timestamp=_NOV_2024),

    MetricObservation(metric="org_changes", value=15, region="NA", timestamp=_NOV_2024),
    MetricObservation(metric="org_changes", value=8, region="EMEA", timestamp=_NOV_2024),

    MetricObservation(metric="ads_exec_postings", value=-30, region="EMEA", function="Ads", timestamp=_NOV_2024),
    MetricObservation(metric="ads_exec_postings", value=-22, region="APAC", function="Ads", timestamp=_NOV_2024),

    MetricObservation(metric="inflation_rate", value=5.8, region="NA", timestamp=_NOV_2024),
    MetricObservation(metric="inflation_rate", value=6.5, region="LATAM", timestamp=_NOV_2024),
    MetricObservation(metric="wage_growth", value=3.2, region="NA", timestamp=_NOV_2024),
    MetricObservation(metric="wage_growth", value=2.8, region="LATAM", timestamp=_NOV_2024),
)


# =============================================================================
# Curated Insights
# =============================================================================

_SEED_INSIGHT_ROWS: Tuple[Dict[str, Any], ...] = (
    {
        "signal": "AI executive compensation growing 28% YoY in APAC region",
        "interpretation": "Sourcing costs rising significantly in AI leadership roles as demand outpaces supply",
        "recommendation": "Explore nearshore hiring options in Southeast Asia or accelerate internal AI leadership development programs",
        "sources": ["Levels.fyi", "Payscale", "LinkedIn Talent Insights"],
        "confidence": 0.92,
        "function": "AI",
        "region": "APAC",
        "initiative": "AI Expansion",
        "category": InsightCategory.WAGE_PRESSURE,
        "createdAt": "2024-11-20T10:00:00",
    },
    {
        "signal": "Executive job postings declined 25% across major streaming competitors in EMEA",
        "interpretation": "Reduced competition for senior talent acquisition during market consolidation phase",
        "recommendation": "Accelerate executive recruiting efforts while market is favorable, particularly for Content and Product leadership",
        "sources": ["LinkedIn", "Crunchbase", "PitchBook"],
        "confidence": 0.88,
        "function": "Product",
        "region": "EMEA",
        "initiative": None,
        "category": InsightCategory.EXECUTIVE_TALENT,
        "createdAt": "2024-11-19T14:30:00",
    },
    {
        "signal": "LATAM foreign exchange volatility reached 18%, highest in 3 years",
        "interpretation": "Currency fluctuations creating 12-15% variance in real compensation values for executives",
        "recommendation": "Implement quarterly FX-adjusted compensation reviews and consider USD-denominated contracts for VP+ roles",
        "sources": ["OECD", "Trading Economics", "World Bank"],
        "confidence": 0.95,
        "function": "Content Ops",
        "region": "LATAM",
        "initiative": None,
        "category": InsightCategory.MACRO_ECONOMIC,
        "createdAt": "2024-11-18T09:15:00",
    },
    {
        "signal": "12,000+ tech executives displaced in North America due to recent layoff wave",
        "interpretation": "Unprecedented availability of senior executive talent with streaming, ads, and AI experience",
        "recommendation": "Activate proactive outreach campaigns for strategic VP and C-suite roles, focusing on former Disney+, Hulu, and Prime Video leaders",
        "sources": ["Layoffs.fyi", "TechCrunch", "LinkedIn"],
        "confidence": 0.90,
        "function": "Ads",
        "region": "NA",
        "initiative": "Ad-tier Expansion",
        "category": InsightCategory.TALENT_SUPPLY,
        "createdAt": "2024-11-17T16:45:00",
    },
    {
        "signal": "Executive hiring activity growing 42% in LATAM, outpacing all other regions",
        "interpretation": "LATAM emerging as new executive talent hub with strong technical and business leadership pipeline",
        "recommendation": "Consider establishing São Paulo and Mexico City as regional executive recruiting hubs with dedicated talent teams",
        "sources": ["LinkedIn Talent Insights", "Crunchbase", "PitchBook"],
        "confidence": 0.86,
        "function": "Product",
        "region": "LATAM",
        "initiative": "Global Expansion",
        "category": InsightCategory.TALENT_SUPPLY,
        "createdAt": "2024-11-16T11:20:00",
    },
    {
        "signal": "EMEA inflation at 7.2% with wage growth lagging at 2.5% and executive mobility index at 75/100",
        "interpretation": "Real wages declining 4.7% creating significant retention risk for senior executives in key markets",
        "recommendation": "Implement emergency FX-adjusted compensation policy for UK, Germany, and Netherlands executives. Consider retention bonuses for critical roles.",
        "sources": ["OECD", "Bureau of Labor Statistics", "LinkedIn"],
        "confidence": 0.93,
        "function": "Content Ops",
        "region": "EMEA",
        "initiative": None,
        "category": InsightCategory.WAGE_PRESSURE,
        "createdAt": "2024-11-15T13:00:00",
    },
    {
        "signal": "15 major organizational restructures announced by streaming competitors in Q4",
        "interpretation": "Significant talent displacement expected with potential strategic pivots away from certain content verticals",
        "recommendation": "Monitor affected executives at Disney, Paramount, and Warner Bros Discovery for recruitment opportunities in Q1 2025",
        "sources": ["Crunchbase", "TechCrunch", "The Information"],
        "confidence": 0.85,
        "function": "Content Ops",
        "region": "NA",
        "initiative": None,
        "category": InsightCategory.EXECUTIVE_TALENT,
        "createdAt": "2024-11-14T15:30:00",
    },
    {
        "signal": "Ads executive job postings down 30% in EMEA despite industry growth",
        "interpretation": "Limited market competition for senior Ads leadership talent as competitors scale back",
        "recommendation": "Activate targeted EMEA executive outreach for Ads roles, particularly in UK and Germany where ad-tier adoption is accelerating",
        "sources": ["LinkedIn", "PitchBook", "eMarketer"],
        "confidence": 0.89,
        "function": "Ads",
        "region": "EMEA",
        "initiative": "Ad-tier Expansion",
        "category": InsightCategory.EXECUTIVE_TALENT,
        "createdAt": "2024-11-13T10:45:00",
    },
    {
        "signal": "APAC tech executive compensation grew 35% YoY, driven by AI and streaming investments",
        "interpretation": "Intense competition for senior tech leadership in Asia-Pacific region",
        "recommendation": "Develop APAC-specific retention packages and accelerate equity vesting for critical AI and Product executives",
        "sources": ["Levels.fyi", "LinkedIn Talent Insights", "Mercer"],
        "confidence": 0.91,
        "function": "AI",
        "region": "APAC",
        "initiative": "AI Expansion",
        "category": InsightCategory.WAGE_PRESSURE,
        "createdAt": "2024-11-12T14:15:00",
    },
    {
        "signal": "Product executive talent pool expanded 25% in APAC following tech sector adjustments",
        "interpretation": "Increased availability of senior product leaders with streaming, social, and e-commerce experience",
        "recommendation": "Prioritize APAC product executive recruitment for subscriber growth and localization initiatives",
        "sources": ["LinkedIn", "Crunchbase", "TechInAsia"],
        "confidence": 0.87,
        "function": "Product",
        "region": "APAC",
        "initiative": "Global Expansion",
        "category": InsightCategory.TALENT_SUPPLY,
        "createdAt": "2024-11-11T09:30:00",
    },
)


def build_seed_insights(company: str = "Netflix") -> List[Insight]:
    """Curated insights with stable ids (seed-01 .. seed-10)."""
    return [
        Insight(
            id=f"seed-{position:02d}",
            company=company,
            **{**row, "createdAt": _ts(row["createdAt"])},
        )
        for position, row in enumerate(_SEED_INSIGHT_ROWS, start=1)
    ]


SEED_INSIGHTS: Tuple[Insight, ...] = tuple(build_seed_insights())


async def seed_database(store: MetricStore, repository: InsightRepository) -> Tuple[int, int]:
    """
    Replace all observations and insights with the seed set.

    Each step commits on its own, so a failure part way leaves the tables
    partly seeded. Use seed_postgres for an atomic reseed of the database.

    Returns:
        Tuple of (observations written, insights written)

    Raises:
        StoreUnavailable: If either table cannot be written
    """
    await store.clear()
    await repository.clear()

    observation_count = await store.insert(SEED_OBSERVATIONS)
    insight_count = await repository.save_insights(SEED_INSIGHTS)

    logger.info(f"Seeded {observation_count} observations and {insight_count} insights")
    return observation_count, insight_count


async def seed_postgres(pool: Pool) -> Tuple[int, int]:
    """
    Replace both tables with the seed set in one transaction.

    On failure the transaction rolls back and the previous data stays.

    Returns:
        Tuple of (observations written, insights written)

    Raises:
        StoreUnavailable: If the database cannot be reached or a statement fails
    """
    observation_records = [observation_to_record(obs) for obs in SEED_OBSERVATIONS]
    insight_records = [insight_to_record(insight) for insight in SEED_INSIGHTS]

    try:
        async with pool.acquire() as conn:
            async with conn.transaction():
                await conn.execute(get_delete_all_observations_query())
                await conn.execute(get_delete_all_insights_query())
                await conn.executemany(get_insert_observation_query(), observation_records)
                await conn.executemany(get_upsert_insight_query(), insight_records)
    except DATABASE_ERRORS as e:
        logger.error(f"Seeding failed, previous data kept: {e}")
        raise StoreUnavailable("Cannot seed the database") from e

    logger.info(f"Seeded {len(observation_records)} observations and {len(insight_records)} insights")
    return len(observation_records), len(insight_records)


async def main() -> None:
    pool = await init_db()
    try:
        await init_schema(pool)
        await seed_postgres(pool)
    finally:
        await close_db()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    asyncio.run(main())
