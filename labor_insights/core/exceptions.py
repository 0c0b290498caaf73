"""
Custom exceptions for the labor insights backend.

A condition with no matching observations is not an error: it simply
evaluates false. Everything below is a real failure.
"""


class LaborInsightsError(Exception):
    """Base exception for the labor insights backend."""
    pass


class StoreUnavailable(LaborInsightsError):
    """Raised when observations or insights cannot be read from or written to the store."""
    pass


class CatalogError(LaborInsightsError):
    """Base exception for rule catalog problems detected at load time."""
    pass


class UnsupportedOperator(CatalogError):
    """Raised when a condition uses an operator outside the supported set."""

    def __init__(self, operator: object, rule_id: str = None):
        self.operator = operator
        self.rule_id = rule_id
        location = f" in rule '{rule_id}'" if rule_id else ""
        super().__init__(f"Unsupported operator {operator!r}{location}")


class MalformedRule(CatalogError):
    """Raised when a rule definition has no conditions or an incomplete output."""
    pass


class FetcherError(LaborInsightsError):
    """Raised when a statistical data source returns an error or unusable payload."""
    pass


class FetcherNotConfigured(FetcherError):
    """Raised when a fetcher is used without its API key."""
    pass
