"""
FastAPI dependency injection module for the Labor Insights backend.

Provides reusable dependencies for configuration and database access. Service
level dependencies (rule catalog, stores, generator, fetchers) live in
labor_insights.api.dependencies and are built on top of these.

Key Dependencies Provided:
- get_settings_dependency: Returns the cached Settings singleton
- get_db_pool_dependency: Returns the shared asyncpg pool
- SettingsDep: Type alias for injecting Settings into endpoints
- DBPoolDep: Type alias for injecting the pool into endpoints

Every dependency can be replaced in tests through app.dependency_overrides:

    app.dependency_overrides[get_settings_dependency] = lambda: test_settings
"""

from typing import Annotated

from asyncpg import Pool
from fastapi import Depends

from labor_insights.core.config import Settings, get_settings
from labor_insights.core.database import get_db_pool


# =============================================================================
# Settings Dependency
# =============================================================================

def get_settings_dependency() -> Settings:
    """
    Return the Settings singleton instance.

    A thin wrapper around get_settings() so FastAPI's dependency override
    mechanism can swap it in tests.
    """
    return get_settings()


# =============================================================================
# Database Dependency
# =============================================================================

async def get_db_pool_dependency() -> Pool:
    """
    Return the shared connection pool.

    Repositories acquire and release their own connections, so endpoints
    receive the pool rather than a single connection.

    Raises:
        asyncpg.PostgresError: If the pool must be created and connecting fails.
        OSError: If the database host is unreachable.
    """
    return await get_db_pool()


# =============================================================================
# Type Aliases for Dependency Injection
# =============================================================================

# Usage: async def endpoint(settings: SettingsDep)
SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]

# Usage: async def endpoint(pool: DBPoolDep)
DBPoolDep = Annotated[Pool, Depends(get_db_pool_dependency)]
