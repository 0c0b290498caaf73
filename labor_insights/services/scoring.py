"""
Confidence scoring and source attribution for generated insights.

Confidence is a corroboration heuristic, not a probability: the more
observations back a fired rule, the higher the score.

    evidence count | confidence
    ---------------|-----------
    >= 5           | 0.95
    3-4            | 0.85
    2              | 0.75
    0-1            | 0.65

Sources are a fixed citation list per insight category.
"""

from typing import Dict, List, Tuple

from labor_insights.models import InsightCategory


# =============================================================================
# CONSTANTS
# =============================================================================

# (minimum evidence count, confidence), highest tier first
CONFIDENCE_TIERS: Tuple[Tuple[int, float], ...] = (
    (5, 0.95),
    (3, 0.85),
    (2, 0.75),
)

BASE_CONFIDENCE: float = 0.65

CATEGORY_SOURCES: Dict[InsightCategory, Tuple[str, ...]] = {
    InsightCategory.EXECUTIVE_TALENT: ('LinkedIn Talent Insights', 'Crunchbase', 'PitchBook'),
    InsightCategory.WAGE_PRESSURE: ('Levels.fyi', 'Payscale', 'Bureau of Labor Statistics'),
    InsightCategory.MACRO_ECONOMIC: ('OECD', 'World Bank', 'Trading Economics', 'IMF'),
    InsightCategory.TALENT_SUPPLY: ('LinkedIn', 'Layoffs.fyi', 'TechCrunch', 'Crunchbase'),
}

FALLBACK_SOURCES: Tuple[str, ...] = ('Internal Research',)


def score_confidence(evidence_count: int) -> float:
    """
    Map the number of corroborating observations to a confidence value.

    Args:
        evidence_count: Number of evidence observations for a fired rule

    Returns:
        Confidence in [0.65, 0.95]

    Raises:
        ValueError: If evidence_count is negative
    """
    if evidence_count < 0:
        raise ValueError(f"evidence_count must be non-negative, got {evidence_count}")

    for minimum, confidence in CONFIDENCE_TIERS:
        if evidence_count >= minimum:
            return confidence
    return BASE_CONFIDENCE


def attribute_sources(category: InsightCategory) -> List[str]:
    """
    Return the citation labels for an insight category.

    A new list is returned on every call, in a fixed order. Unknown categories
    fall back to ['Internal Research'].
    """
    return list(CATEGORY_SOURCES.get(category, FALLBACK_SOURCES))
