"""
Condition evaluation for insight rules.

A condition is satisfied when the most recent observation in its scope
compares true against the threshold:

1. Keep observations with the condition's metric, and its region (unless the
   condition region is absent or 'any') and its function (if present).
2. No observations left: not satisfied. Missing data never satisfies a
   threshold, whatever the operator.
3. Otherwise take the observation with the latest timestamp (first one wins
   on ties) and apply the operator to (observed value, threshold).

There is no averaging or windowing: latest value wins.
"""

import operator
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from labor_insights.core.exceptions import UnsupportedOperator
from labor_insights.models import ANY_REGION, ComparisonOperator, Condition, MetricObservation


# =============================================================================
# Operator Table
# =============================================================================

OPERATORS: Dict[ComparisonOperator, Callable[[float, float], bool]] = {
    ComparisonOperator.GT: operator.gt,
    ComparisonOperator.LT: operator.lt,
    ComparisonOperator.EQ: operator.eq,
    ComparisonOperator.GTE: operator.ge,
    ComparisonOperator.LTE: operator.le,
    ComparisonOperator.NE: operator.ne,
}


def compare(op: ComparisonOperator, observed: float, threshold: float) -> bool:
    """
    Apply a comparison operator to an observed value and a threshold.

    Args:
        op: One of the supported comparison operators
        observed: Value taken from the latest observation
        threshold: Value from the rule condition

    Returns:
        Result of `observed <op> threshold`

    Raises:
        UnsupportedOperator: If op is not in the operator table. Catalog
            validation rejects such rules, so reaching this is a bug.
    """
    try:
        func = OPERATORS[op]
    except (KeyError, TypeError):
        raise UnsupportedOperator(op) from None
    return func(observed, threshold)


# =============================================================================
# Scope Filtering
# =============================================================================


def in_scope(condition: Condition, observation: MetricObservation) -> bool:
    """Check whether an observation is relevant to a condition."""
    if observation.metric != condition.metric:
        return False
    if condition.region and condition.region != ANY_REGION and observation.region != condition.region:
        return False
    if condition.function and observation.function != condition.function:
        return False
    return True


def relevant_observations(
    condition: Condition,
    observations: Iterable[MetricObservation],
) -> List[MetricObservation]:
    """Return the observations in the condition's scope, preserving input order."""
    return [obs for obs in observations if in_scope(condition, obs)]


def select_latest(observations: Sequence[MetricObservation]) -> Optional[MetricObservation]:
    """
    Select the observation with the most recent timestamp.

    Ties resolve to the first observation encountered.

    Returns:
        The latest observation, or None for an empty sequence
    """
    latest: Optional[MetricObservation] = None
    for obs in observations:
        if latest is None or obs.timestamp > latest.timestamp:
            latest = obs
    return latest


# =============================================================================
# Evaluation
# =============================================================================


def evaluate_condition(
    condition: Condition,
    observations: Iterable[MetricObservation],
) -> bool:
    """
    Decide whether a condition holds for a set of observations.

    Args:
        condition: The threshold predicate to evaluate
        observations: Candidate observations (any metrics, any scope)

    Returns:
        True if the latest in-scope observation satisfies the threshold,
        False if it does not or if no observation is in scope
    """
    latest = select_latest(relevant_observations(condition, observations))
    if latest is None:
        return False
    return compare(condition.operator, latest.value, condition.value)
