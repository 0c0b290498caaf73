'''
Labor Insights Test Suite

Test Modules:
-------------
- test_conditions.py: Operator table, scope filtering, latest-value selection
- test_matching.py: Rule conjunction and evidence scope modes
- test_scoring.py: Confidence tiers and category source attribution
- test_rule_catalog.py: Built-in rules, load-time validation, JSON catalogs
- test_insight_generator.py: End-to-end generation passes
- test_metric_store.py: In-memory and PostgreSQL observation stores
- test_insight_repository.py: Insight SQL, row mapping and repository
- test_ingestion.py: CSV validation and observation ingestion
- test_fetchers.py: FRED/BLS clients over httpx.MockTransport
- test_api.py: HTTP contract with overridden dependencies

Running Tests:
--------------
    pip install -e ".[test]"
    pytest labor_insights/tests -v
'''

__all__ = []
