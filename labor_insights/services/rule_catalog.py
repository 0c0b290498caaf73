"""
Insight Rule Catalog

The catalog is the domain knowledge of the dashboard: an ordered, immutable
list of threshold rules. Rules are plain data. Adding a rule means adding a
record to DEFAULT_RULE_DEFINITIONS (or to a JSON catalog file referenced by
RULE_CATALOG_PATH); the matcher never changes.

Validation happens once, when the catalog is built:
- an operator outside the supported set raises UnsupportedOperator
- a rule without conditions, with an incomplete output, with a duplicate id
  or with otherwise invalid fields raises MalformedRule

JSON catalog format:
    {
        "version": "2025.01",
        "rules": [
            {
                "id": "rule_1",
                "name": "High Inflation Retention Risk",
                "conditions": [{"metric": "inflation_rate", "operator": ">", "value": 6}],
                "output": {
                    "signal": "...",
                    "interpretation": "...",
                    "recommendation": "...",
                    "category": "WAGE_PRESSURE"
                }
            }
        ]
    }

A bare list of rules is accepted too. Categories may be given by enum name
(WAGE_PRESSURE) or display label (Wage Pressures & Inflation).
"""

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from labor_insights.core.exceptions import MalformedRule, UnsupportedOperator
from labor_insights.models import ComparisonOperator, InsightCategory, InsightRule
from labor_insights.services.conditions import OPERATORS

logger = logging.getLogger(__name__)


DEFAULT_CATALOG_VERSION: str = "2024.12"

REQUIRED_OUTPUT_FIELDS: Tuple[str, ...] = ('signal', 'interpretation', 'recommendation', 'category')

_OPERATOR_SYMBOLS = frozenset(op.value for op in ComparisonOperator)


# =============================================================================
# Built-in Rule Definitions
# =============================================================================

DEFAULT_RULE_DEFINITIONS: Tuple[Dict[str, Any], ...] = (
    {
        'id': 'rule_1',
        'name': 'High Inflation Retention Risk',
        'conditions': [
            {'metric': 'inflation_rate', 'operator': '>', 'value': 6, 'region': 'any'},
            {'metric': 'wage_growth', 'operator': '<', 'value': 3, 'region': 'any'},
            {'metric': 'executive_mobility', 'operator': '>', 'value': 70, 'region': 'any'},
        ],
        'output': {
            'signal': 'High inflation with stagnant wage growth detected',
            'interpretation': 'Real wages declining, creating retention risk for executives',
            'recommendation': 'Implement FX-adjusted compensation policy and consider retention bonuses',
            'category': InsightCategory.WAGE_PRESSURE,
        },
    },
    {
        'id': 'rule_2',
        'name': 'AI Talent Wage Surge',
        'conditions': [
            {'metric': 'ai_wage_growth', 'operator': '>', 'value': 20, 'function': 'AI'},
        ],
        'output': {
            'signal': 'AI executive compensation growing rapidly',
            'interpretation': 'Sourcing costs rising significantly in AI leadership roles',
            'recommendation': 'Explore nearshore hiring options or accelerate internal AI leadership development',
            'category': InsightCategory.WAGE_PRESSURE,
        },
    },
    {
        'id': 'rule_3',
        'name': 'Executive Hiring Freeze Opportunity',
        'conditions': [
            {'metric': 'exec_job_postings', 'operator': '<', 'value': -20},
        ],
        'output': {
            'signal': 'Executive hiring activity declining at competitors',
            'interpretation': 'Reduced competition for senior talent acquisition',
            'recommendation': 'Accelerate executive recruiting efforts while market is favorable',
            'category': InsightCategory.EXECUTIVE_TALENT,
        },
    },
    {
        'id': 'rule_4',
        'name': 'FX Volatility Impact',
        'conditions': [
            {'metric': 'fx_volatility', 'operator': '>', 'value': 15},
        ],
        'output': {
            'signal': 'High foreign exchange volatility detected',
            'interpretation': 'Currency fluctuations impacting real compensation values',
            'recommendation': 'Review and adjust compensation bands to account for FX changes',
            'category': InsightCategory.MACRO_ECONOMIC,
        },
    },
    {
        'id': 'rule_5',
        'name': 'Layoff Wave Talent Availability',
        'conditions': [
            {'metric': 'tech_layoffs', 'operator': '>', 'value': 5000},
        ],
        'output': {
            'signal': 'Major layoff wave in tech sector detected',
            'interpretation': 'Increased availability of senior executive talent',
            'recommendation': 'Activate proactive outreach campaigns for strategic roles',
            'category': InsightCategory.TALENT_SUPPLY,
        },
    },
    {
        'id': 'rule_6',
        'name': 'Emerging Market Executive Hub',
        'conditions': [
            {'metric': 'exec_hiring_growth', 'operator': '>', 'value': 30},
        ],
        'output': {
            'signal': 'Rapid growth in executive hiring detected',
            'interpretation': 'Region emerging as new executive talent hub',
            'recommendation': 'Consider establishing regional presence and recruiting operations',
            'category': InsightCategory.TALENT_SUPPLY,
        },
    },
    {
        'id': 'rule_7',
        'name': 'Competitor Org Restructure',
        'conditions': [
            {'metric': 'org_changes', 'operator': '>', 'value': 10},
        ],
        'output': {
            'signal': 'Significant organizational changes at competitors',
            'interpretation': 'Potential talent displacement and strategic shifts',
            'recommendation': 'Monitor affected executives for recruitment opportunities',
            'category': InsightCategory.EXECUTIVE_TALENT,
        },
    },
    {
        'id': 'rule_8',
        'name': 'Ads Talent Shortage',
        'conditions': [
            {'metric': 'ads_exec_postings', 'operator': '<', 'value': -25, 'function': 'Ads'},
        ],
        'output': {
            'signal': 'Decline in Ads executive job postings',
            'interpretation': 'Limited market competition for Ads leadership talent',
            'recommendation': 'Activate targeted EMEA/APAC executive outreach for Ads roles',
            'category': InsightCategory.EXECUTIVE_TALENT,
        },
    },
    # Rules over the FRED and BLS series, which are filed under region NA
    {
        'id': 'rule_9',
        'name': 'US Wage Growth Acceleration',
        'conditions': [
            {'metric': 'wage_growth', 'operator': '>', 'value': 4, 'region': 'NA'},
        ],
        'output': {
            'signal': 'Employment Cost Index growing faster than 4% year-over-year',
            'interpretation': 'Strong wage pressure and high demand for talent in the US market',
            'recommendation': 'Benchmark executive compensation packages against market data and adjust proactively',
            'category': InsightCategory.WAGE_PRESSURE,
        },
    },
    {
        'id': 'rule_10',
        'name': 'Professional Services Talent Pool',
        'conditions': [
            {'metric': 'professional_services_employment', 'operator': '>', 'value': 0, 'region': 'NA'},
        ],
        'output': {
            'signal': 'Professional services employment reported',
            'interpretation': 'Current size of the US professional, scientific and technical services talent pool',
            'recommendation': 'Track this figure monthly; a rising count means more competition for talent',
            'category': InsightCategory.TALENT_SUPPLY,
        },
    },
    {
        'id': 'rule_11',
        'name': 'Tight Advanced-Degree Labor Market',
        'conditions': [
            {'metric': 'advanced_degree_unemployment', 'operator': '<', 'value': 2.5, 'region': 'NA'},
            {'metric': 'unemployment_rate', 'operator': '<', 'value': 4.5, 'region': 'NA'},
        ],
        'output': {
            'signal': 'Low unemployment among advanced-degree workers',
            'interpretation': 'Few senior candidates are actively looking, so searches will run longer',
            'recommendation': 'Start executive searches early and budget for passive-candidate outreach',
            'category': InsightCategory.EXECUTIVE_TALENT,
        },
    },
)


# =============================================================================
# Validation Helpers
# =============================================================================


def _normalize_category(value: Any) -> Any:
    """Accept a category by enum name as well as by display label."""
    if isinstance(value, str) and value in InsightCategory.__members__:
        return InsightCategory[value]
    return value


def _check_definition(definition: Any, position: int) -> str:
    """
    Structural checks on a raw rule record before model validation.

    Returns:
        The rule id (or a positional label when the id is missing)
    """
    if not isinstance(definition, Mapping):
        raise MalformedRule(f"Rule at position {position} is not an object")

    rule_id = definition.get('id') or f"#{position}"

    conditions = definition.get('conditions')
    if not conditions:
        raise MalformedRule(f"Rule '{rule_id}' has no conditions")
    if not isinstance(conditions, (list, tuple)):
        raise MalformedRule(f"Rule '{rule_id}' conditions must be a list")

    for condition in conditions:
        if not isinstance(condition, Mapping):
            raise MalformedRule(f"Rule '{rule_id}' has a condition that is not an object")
        op = condition.get('operator')
        if isinstance(op, ComparisonOperator):
            continue
        if not isinstance(op, str) or op not in _OPERATOR_SYMBOLS:
            raise UnsupportedOperator(op, rule_id)

    output = definition.get('output')
    if not isinstance(output, Mapping):
        raise MalformedRule(f"Rule '{rule_id}' has no output")
    missing = [name for name in REQUIRED_OUTPUT_FIELDS if not output.get(name)]
    if missing:
        raise MalformedRule(f"Rule '{rule_id}' output is missing: {', '.join(missing)}")

    return rule_id


def validate_rules(rules: Iterable[InsightRule]) -> None:
    """
    Validate already-built rules.

    Model validation covers most of this, but rules can also be created with
    model_construct(), which skips it.

    Raises:
        MalformedRule: empty conditions, missing output or duplicate ids
        UnsupportedOperator: operator not in the operator table
    """
    seen = set()
    for rule in rules:
        if rule.id in seen:
            raise MalformedRule(f"Duplicate rule id '{rule.id}'")
        seen.add(rule.id)

        if not rule.conditions:
            raise MalformedRule(f"Rule '{rule.id}' has no conditions")
        for condition in rule.conditions:
            if condition.operator not in OPERATORS:
                raise UnsupportedOperator(condition.operator, rule.id)

        output = rule.output
        if output is None or any(not getattr(output, name, None) for name in REQUIRED_OUTPUT_FIELDS):
            raise MalformedRule(f"Rule '{rule.id}' has an incomplete output")


# =============================================================================
# Rule Catalog
# =============================================================================


class RuleCatalog:
    """
    Immutable, ordered collection of validated insight rules.

    Build one explicitly and pass it to the InsightGenerator; nothing in the
    engine reads a module-level catalog.
    """

    def __init__(self, rules: Iterable[InsightRule], version: str = DEFAULT_CATALOG_VERSION):
        rules = tuple(rules)
        validate_rules(rules)
        self._rules: Tuple[InsightRule, ...] = rules
        self._by_id: Mapping[str, InsightRule] = MappingProxyType({rule.id: rule for rule in rules})
        self._version = version

    @classmethod
    def from_definitions(
        cls,
        definitions: Iterable[Mapping[str, Any]],
        version: str = DEFAULT_CATALOG_VERSION,
    ) -> "RuleCatalog":
        """
        Build a catalog from raw rule records.

        Args:
            definitions: Rule records (dicts parsed from code or JSON)
            version: Catalog version label

        Returns:
            Validated RuleCatalog

        Raises:
            UnsupportedOperator: If a condition uses an unknown operator
            MalformedRule: If a record is incomplete or invalid
        """
        rules: List[InsightRule] = []
        for position, definition in enumerate(definitions):
            rule_id = _check_definition(definition, position)
            record = dict(definition)
            record['output'] = dict(record['output'])
            record['output']['category'] = _normalize_category(record['output']['category'])
            try:
                rules.append(InsightRule.model_validate(record))
            except PydanticValidationError as e:
                raise MalformedRule(f"Rule '{rule_id}' is invalid: {e}") from e
        return cls(rules, version=version)

    @property
    def rules(self) -> Tuple[InsightRule, ...]:
        return self._rules

    @property
    def version(self) -> str:
        return self._version

    def get(self, rule_id: str) -> Optional[InsightRule]:
        return self._by_id.get(rule_id)

    def __iter__(self) -> Iterator[InsightRule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"RuleCatalog(version={self._version!r}, rules={len(self._rules)})"


def default_rule_catalog() -> RuleCatalog:
    """Build the catalog from the built-in rule definitions."""
    return RuleCatalog.from_definitions(DEFAULT_RULE_DEFINITIONS)


def load_rule_catalog(path: Optional[str] = None) -> RuleCatalog:
    """
    Load the rule catalog from a JSON file, or the built-in one.

    Args:
        path: Path to a JSON catalog file. None selects the built-in rules.

    Returns:
        Validated RuleCatalog

    Raises:
        MalformedRule: If the file cannot be read or parsed, or a rule is invalid
        UnsupportedOperator: If a rule uses an unknown operator
    """
    if path is None:
        catalog = default_rule_catalog()
        logger.info(f"Loaded built-in rule catalog v{catalog.version} with {len(catalog)} rules")
        return catalog

    try:
        payload = json.loads(Path(path).read_text(encoding='utf-8'))
    except (OSError, json.JSONDecodeError) as e:
        raise MalformedRule(f"Cannot load rule catalog from {path}: {e}") from e

    if isinstance(payload, Mapping):
        definitions = payload.get('rules')
        version = str(payload.get('version', DEFAULT_CATALOG_VERSION))
    else:
        definitions = payload
        version = DEFAULT_CATALOG_VERSION

    if not isinstance(definitions, list):
        raise MalformedRule(f"Rule catalog {path} must contain a list of rules")

    catalog = RuleCatalog.from_definitions(definitions, version=version)
    logger.info(f"Loaded rule catalog v{catalog.version} with {len(catalog)} rules from {path}")
    return catalog
