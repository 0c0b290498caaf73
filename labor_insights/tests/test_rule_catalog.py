"""
Tests for the rule catalog: built-in definitions, load-time validation and
JSON catalog files.
"""

import json
from typing import Any, Dict

import pytest
from pydantic import ValidationError

from labor_insights.core.exceptions import CatalogError, MalformedRule, UnsupportedOperator
from labor_insights.models import ComparisonOperator, InsightCategory, InsightRule
from labor_insights.services.rule_catalog import (
    DEFAULT_CATALOG_VERSION,
    DEFAULT_RULE_DEFINITIONS,
    RuleCatalog,
    default_rule_catalog,
    load_rule_catalog,
)


def _definition(**overrides: Any) -> Dict[str, Any]:
    definition = {
        'id': 'custom_1',
        'name': 'Custom',
        'conditions': [{'metric': 'fx_volatility', 'operator': '>', 'value': 15}],
        'output': {
            'signal': 'FX volatility detected',
            'interpretation': 'Currency swings',
            'recommendation': 'Review bands',
            'category': InsightCategory.MACRO_ECONOMIC.value,
        },
    }
    definition.update(overrides)
    return definition


class TestDefaultCatalog:

    def test_builtin_rules_in_order(self, rule_catalog: RuleCatalog):
        assert len(rule_catalog) == 11
        assert [rule.id for rule in rule_catalog] == [f'rule_{n}' for n in range(1, 12)]
        assert rule_catalog.version == DEFAULT_CATALOG_VERSION

    def test_first_rule_is_retention_risk(self, rule_catalog: RuleCatalog):
        rule = rule_catalog.get('rule_1')

        assert rule.name == 'High Inflation Retention Risk'
        assert len(rule.conditions) == 3
        assert rule.output.category == InsightCategory.WAGE_PRESSURE
        assert rule.conditions[1].operator == ComparisonOperator.LT

    def test_get_unknown_rule(self, rule_catalog: RuleCatalog):
        assert rule_catalog.get('missing') is None

    def test_built_from_definitions(self):
        assert len(default_rule_catalog()) == len(DEFAULT_RULE_DEFINITIONS)

    def test_rules_are_immutable(self, rule_catalog: RuleCatalog):
        with pytest.raises(ValidationError):
            rule_catalog.rules[0].name = 'changed'


class TestCatalogValidation:

    def test_unsupported_operator_rejected(self):
        bad = _definition(conditions=[{'metric': 'fx_volatility', 'operator': '=>', 'value': 15}])

        with pytest.raises(UnsupportedOperator) as exc_info:
            RuleCatalog.from_definitions([bad])

        assert exc_info.value.rule_id == 'custom_1'
        assert exc_info.value.operator == '=>'

    def test_empty_conditions_rejected(self):
        with pytest.raises(MalformedRule):
            RuleCatalog.from_definitions([_definition(conditions=[])])

    def test_missing_output_field_rejected(self):
        definition = _definition()
        del definition['output']['recommendation']

        with pytest.raises(MalformedRule, match='recommendation'):
            RuleCatalog.from_definitions([definition])

    def test_unknown_category_rejected(self):
        definition = _definition()
        definition['output']['category'] = 'Weather'

        with pytest.raises(MalformedRule):
            RuleCatalog.from_definitions([definition])

    def test_duplicate_ids_rejected(self):
        with pytest.raises(MalformedRule, match='Duplicate'):
            RuleCatalog.from_definitions([_definition(), _definition()])

    def test_category_accepted_by_enum_name(self):
        definition = _definition()
        definition['output']['category'] = 'MACRO_ECONOMIC'

        catalog = RuleCatalog.from_definitions([definition])

        assert catalog.get('custom_1').output.category == InsightCategory.MACRO_ECONOMIC

    def test_catalog_errors_share_base(self):
        assert issubclass(UnsupportedOperator, CatalogError)
        assert issubclass(MalformedRule, CatalogError)

    def test_constructed_rule_without_conditions_rejected(self):
        rule = InsightRule.model_construct(
            id='raw', name='Raw', conditions=(), output=None,
        )
        with pytest.raises(MalformedRule):
            RuleCatalog([rule])


class TestLoadRuleCatalog:

    def test_none_loads_builtin(self):
        assert len(load_rule_catalog(None)) == 11

    def test_loads_versioned_file(self, tmp_path):
        path = tmp_path / 'rules.json'
        path.write_text(json.dumps({'version': '2025.01', 'rules': [_definition()]}), encoding='utf-8')

        catalog = load_rule_catalog(str(path))

        assert catalog.version == '2025.01'
        assert [rule.id for rule in catalog] == ['custom_1']

    def test_loads_bare_list(self, tmp_path):
        path = tmp_path / 'rules.json'
        path.write_text(json.dumps([_definition()]), encoding='utf-8')

        assert load_rule_catalog(str(path)).version == DEFAULT_CATALOG_VERSION

    def test_invalid_json_is_malformed(self, tmp_path):
        path = tmp_path / 'rules.json'
        path.write_text('{not json', encoding='utf-8')

        with pytest.raises(MalformedRule):
            load_rule_catalog(str(path))

    def test_missing_file_is_malformed(self, tmp_path):
        with pytest.raises(MalformedRule):
            load_rule_catalog(str(tmp_path / 'absent.json'))

    def test_rules_must_be_a_list(self, tmp_path):
        path = tmp_path / 'rules.json'
        path.write_text(json.dumps({'rules': {'id': 'x'}}), encoding='utf-8')

        with pytest.raises(MalformedRule):
            load_rule_catalog(str(path))
