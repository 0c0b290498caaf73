"""
Insight Generator - rule engine orchestration.

For one organizational scope (company, region, function) a generation pass:

1. Reads the region's observations (plus global ones) from the MetricStore
2. Matches every rule of the RuleCatalog, in catalog order
3. Builds one Insight per fired rule:
   - signal: rule signal followed by the evidence, e.g.
     "High inflation ... detected (inflation_rate: 7.2, wage_growth: 2.5)"
   - interpretation, recommendation, category: copied from the rule
   - sources: fixed citation list for the category
   - confidence: from the evidence count
   - company, function, region: the requested scope
   - id: random UUID hex, createdAt: now (UTC)

Insights come back in catalog order; callers merging them with stored
insights sort by createdAt themselves. No firing rule is an empty list, not
an error. StoreUnavailable from the store propagates to the caller.

The generator holds no per-call state, so one instance can serve concurrent
requests.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence

from labor_insights.models import (
    EvidenceScope,
    Insight,
    InsightRule,
    MetricObservation,
)
from labor_insights.services.matching import match_rule
from labor_insights.services.metric_store import MetricStore
from labor_insights.services.rule_catalog import RuleCatalog
from labor_insights.services.scoring import attribute_sources, score_confidence

logger = logging.getLogger(__name__)


def format_value(value: float) -> str:
    """Render a metric value without a trailing '.0' for whole numbers."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def format_signal(template: str, evidence: Sequence[MetricObservation]) -> str:
    """
    Append the evidence to a rule's signal template.

    Example:
        >>> format_signal("FX volatility detected", [obs])  # obs: fx_volatility=18.0
        'FX volatility detected (fx_volatility: 18)'
    """
    if not evidence:
        return template
    context = ", ".join(f"{obs.metric}: {format_value(obs.value)}" for obs in evidence)
    return f"{template} ({context})"


def _new_insight_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InsightGenerator:
    """
    Generates insights by matching a rule catalog against stored observations.

    Args:
        store: Source of metric observations
        catalog: Validated rule catalog
        evidence_scope: How evidence is collected for fired rules
        id_factory: Produces insight ids (defaults to uuid4 hex)
        clock: Produces createdAt timestamps (defaults to now, UTC)
    """

    def __init__(
        self,
        store: MetricStore,
        catalog: RuleCatalog,
        evidence_scope: EvidenceScope = EvidenceScope.CONDITION,
        id_factory: Optional[Callable[[], str]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._store = store
        self._catalog = catalog
        self._evidence_scope = evidence_scope
        self._id_factory = id_factory or _new_insight_id
        self._clock = clock or _utcnow

    @property
    def catalog(self) -> RuleCatalog:
        return self._catalog

    @property
    def evidence_scope(self) -> EvidenceScope:
        return self._evidence_scope

    async def generate(self, company: str, region: str, function: str) -> List[Insight]:
        """
        Run one generation pass for a scope.

        Args:
            company: Company the insights are generated for
            region: Region whose observations are evaluated
            function: Functional area recorded on the insights

        Returns:
            Insights for every fired rule, in catalog order

        Raises:
            StoreUnavailable: If observations cannot be read
        """
        observations = await self._store.query(region)
        insights = self.generate_from_observations(observations, company, region, function)

        logger.info(
            f"Generated {len(insights)} insights from {len(observations)} observations "
            f"for company={company} region={region} function={function}"
        )
        return insights

    def generate_from_observations(
        self,
        observations: Sequence[MetricObservation],
        company: str,
        region: str,
        function: str,
    ) -> List[Insight]:
        """Match the catalog against an already-fetched observation set."""
        insights: List[Insight] = []
        for rule in self._catalog:
            result = match_rule(rule, observations, self._evidence_scope)
            if result.fired:
                insights.append(
                    self._build_insight(rule, result.evidence, company, region, function)
                )
        return insights

    def _build_insight(
        self,
        rule: InsightRule,
        evidence: Sequence[MetricObservation],
        company: str,
        region: str,
        function: str,
    ) -> Insight:
        output = rule.output
        logger.debug(f"Rule {rule.id} ({rule.name}) fired with {len(evidence)} evidence observations")

        return Insight(
            id=self._id_factory(),
            signal=format_signal(output.signal, evidence),
            interpretation=output.interpretation,
            recommendation=output.recommendation,
            sources=attribute_sources(output.category),
            confidence=score_confidence(len(evidence)),
            company=company,
            function=function,
            region=region,
            initiative=None,
            category=output.category,
            createdAt=self._clock(),
        )
