"""
Labor Insights Backend Package.

FastAPI service layer for the labor-market insights dashboard.
Aggregates metric observations from statistical sources and evaluates
threshold rules to produce human-readable insights.

Subpackages:
    - api: FastAPI route handlers
    - core: Configuration, database, dependencies and exceptions
    - models: Pydantic schemas and enums
    - services: Rule engine, metric store, ingestion and fetchers
    - sql: Parameterized SQL queries
"""

__version__ = "1.0.0"
