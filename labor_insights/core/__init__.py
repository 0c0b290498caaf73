"""
Core infrastructure package for the Labor Insights backend.

Provides:
- Configuration management via pydantic-settings
- Async PostgreSQL database connectivity via asyncpg
- The exception hierarchy shared by services and the API layer
- FastAPI dependency injection utilities

Re-exports key components so other modules can write:

    from labor_insights.core import get_settings, get_db_pool, StoreUnavailable
"""

# =============================================================================
# Re-exports from labor_insights.core.config
# =============================================================================
from labor_insights.core.config import Settings, get_settings

# =============================================================================
# Re-exports from labor_insights.core.database
# =============================================================================
from labor_insights.core.database import (
    DATABASE_ERRORS,
    init_db,
    close_db,
    get_db_pool,
    init_schema,
)

# =============================================================================
# Re-exports from labor_insights.core.exceptions
# =============================================================================
from labor_insights.core.exceptions import (
    LaborInsightsError,
    StoreUnavailable,
    CatalogError,
    UnsupportedOperator,
    MalformedRule,
    FetcherError,
    FetcherNotConfigured,
)

# =============================================================================
# Re-exports from labor_insights.core.dependencies
# =============================================================================
from labor_insights.core.dependencies import (
    get_settings_dependency,
    get_db_pool_dependency,
    SettingsDep,
    DBPoolDep,
)

__all__ = [
    # Configuration management (from config.py)
    'Settings',
    'get_settings',
    # Database pool lifecycle (from database.py)
    'DATABASE_ERRORS',
    'init_db',
    'close_db',
    'get_db_pool',
    'init_schema',
    # Exceptions (from exceptions.py)
    'LaborInsightsError',
    'StoreUnavailable',
    'CatalogError',
    'UnsupportedOperator',
    'MalformedRule',
    'FetcherError',
    'FetcherNotConfigured',
    # FastAPI dependency injection (from dependencies.py)
    'get_settings_dependency',
    'get_db_pool_dependency',
    'SettingsDep',
    'DBPoolDep',
]
