"""
FastAPI application entry point for the Labor Insights API.

Configures logging, CORS and the /api routers, and manages the database pool
over the application lifespan. Run locally with:

    python -m labor_insights.main
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from labor_insights import __version__
from labor_insights.api import api_router
from labor_insights.api.dependencies import get_rule_catalog
from labor_insights.core.config import get_settings
from labor_insights.core.database import DATABASE_ERRORS, close_db, init_db, init_schema

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    On startup, load the rule catalog, open the pool and create missing
    tables. On shutdown, close the pool.

    A bad rule catalog stops startup (CatalogError). The API still starts
    when the database is down: stored-insight endpoints answer 503 until it
    comes back.
    """
    logger.info("Labor Insights API starting")
    catalog = get_rule_catalog(get_settings())
    logger.info(f"Rule catalog v{catalog.version} ready with {len(catalog)} rules")

    try:
        pool = await init_db()
        await init_schema(pool)
        logger.info("Database connection pool initialized")
    except DATABASE_ERRORS as e:
        logger.error(f"Failed to initialize database: {e}")

    yield

    logger.info("Labor Insights API shutting down")
    await close_db()
    logger.info("Database connection pool closed")


app = FastAPI(
    title="Labor Insights API",
    version=__version__,
    description=(
        "Labor-market insight engine. Evaluates declarative rules against "
        "regional metric observations and serves curated and generated insights."
    ),
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api")


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring and load balancer probes."""
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.get("/")
async def root():
    return {
        "name": "Labor Insights API",
        "version": __version__,
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "labor_insights.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
