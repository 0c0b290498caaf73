"""
Enumeration definitions for the Labor Insights backend.

All enums inherit from both `str` and `Enum` to ensure JSON serialization
compatibility with Pydantic models, enabling automatic serialization and
deserialization in API responses and database rows.
"""

from enum import Enum


class InsightCategory(str, Enum):
    """
    Closed set of insight categories shown on the dashboard.

    The enum value is the display label; it is what gets stored in the
    insights table and returned over HTTP. Each category has a fixed list of
    citation sources (see services/scoring.py).
    """
    EXECUTIVE_TALENT = "Executive Talent Trends"
    WAGE_PRESSURE = "Wage Pressures & Inflation"
    MACRO_ECONOMIC = "Macroeconomic Signals"
    TALENT_SUPPLY = "Talent Supply Shifts"


class ComparisonOperator(str, Enum):
    """
    Threshold operators a rule condition may use.

    Applied as `observed_value <op> threshold`.
    """
    GT = ">"
    LT = "<"
    EQ = "="
    GTE = ">="
    LTE = "<="
    NE = "!="


class EvidenceScope(str, Enum):
    """
    How evidence is collected for a fired rule.

    - condition: observations that pass at least one condition's metric,
      region and function filter (each observation cited once)
    - metric: every observation whose metric name appears in any condition,
      regardless of region or function
    """
    CONDITION = "condition"
    METRIC = "metric"


class DataSourceName(str, Enum):
    """External statistical sources that can refresh metric observations."""
    FRED = "fred"
    BLS = "bls"
