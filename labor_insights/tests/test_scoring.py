"""
Tests for confidence scoring and source attribution.
"""

import pytest

from labor_insights.models import InsightCategory
from labor_insights.services.scoring import (
    BASE_CONFIDENCE,
    CATEGORY_SOURCES,
    attribute_sources,
    score_confidence,
)


class TestScoreConfidence:

    @pytest.mark.parametrize('count, expected', [
        (0, 0.65),
        (1, 0.65),
        (2, 0.75),
        (3, 0.85),
        (4, 0.85),
        (5, 0.95),
        (50, 0.95),
    ])
    def test_tiers(self, count, expected):
        assert score_confidence(count) == pytest.approx(expected)

    def test_monotonic(self):
        scores = [score_confidence(n) for n in range(0, 12)]
        assert scores == sorted(scores)
        assert min(scores) == BASE_CONFIDENCE

    def test_negative_count_rejected(self):
        with pytest.raises(ValueError):
            score_confidence(-1)


class TestAttributeSources:

    @pytest.mark.parametrize('category', list(InsightCategory))
    def test_non_empty_and_stable(self, category):
        first = attribute_sources(category)
        second = attribute_sources(category)

        assert first
        assert first == second
        assert first == list(CATEGORY_SOURCES[category])

    def test_returns_fresh_list(self):
        sources = attribute_sources(InsightCategory.WAGE_PRESSURE)
        sources.append('Mutated')

        assert 'Mutated' not in attribute_sources(InsightCategory.WAGE_PRESSURE)

    def test_wage_pressure_sources(self):
        assert attribute_sources(InsightCategory.WAGE_PRESSURE) == [
            'Levels.fyi', 'Payscale', 'Bureau of Labor Statistics',
        ]

    def test_unknown_category_falls_back(self):
        assert attribute_sources('Unknown') == ['Internal Research']
