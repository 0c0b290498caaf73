"""
Rule matching: conjunction of conditions plus evidence collection.

A rule fires only when every one of its conditions holds. Evaluation walks
the conditions in order and stops at the first failure; evaluation has no
side effects, so stopping early never changes the outcome.

Evidence is what a fired rule cites in its signal and what its confidence
is scored on. Two collection modes exist (see EvidenceScope):

- CONDITION: observations inside at least one condition's scope, each cited
  once. A condition scoped to 'AI' does not pull in 'Ads' observations of the
  same metric.
- METRIC: every observation whose metric name appears in any condition,
  across all regions and functions, duplicates kept. Matches the evidence
  lists shown by earlier dashboard releases.
"""

from typing import List, Sequence

from labor_insights.models import EvidenceScope, InsightRule, MatchResult, MetricObservation
from labor_insights.services.conditions import evaluate_condition, in_scope


def collect_evidence(
    rule: InsightRule,
    observations: Sequence[MetricObservation],
    evidence_scope: EvidenceScope = EvidenceScope.CONDITION,
) -> List[MetricObservation]:
    """
    Collect the observations cited by a rule, in input order.

    Args:
        rule: The rule whose conditions define relevance
        observations: All observations available to the generation pass
        evidence_scope: Collection mode

    Returns:
        Evidence observations (may be empty)
    """
    if evidence_scope == EvidenceScope.METRIC:
        metrics = {condition.metric for condition in rule.conditions}
        return [obs for obs in observations if obs.metric in metrics]

    return [
        obs for obs in observations
        if any(in_scope(condition, obs) for condition in rule.conditions)
    ]


def match_rule(
    rule: InsightRule,
    observations: Sequence[MetricObservation],
    evidence_scope: EvidenceScope = EvidenceScope.CONDITION,
) -> MatchResult:
    """
    Match one rule against a set of observations.

    Args:
        rule: Rule to evaluate
        observations: Observations visible to this generation pass
        evidence_scope: How evidence is collected when the rule fires

    Returns:
        MatchResult with fired=True and the evidence if all conditions hold,
        otherwise fired=False and no evidence
    """
    fired = all(evaluate_condition(condition, observations) for condition in rule.conditions)
    if not fired:
        return MatchResult(fired=False)

    return MatchResult(
        fired=True,
        evidence=tuple(collect_evidence(rule, observations, evidence_scope)),
    )
