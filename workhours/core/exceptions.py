"""
Failure taxonomy of the rule engine.

Compliance breaches are never raised; they come back as data on the
validation results. Everything here aborts the current call.
"""


class WorkRuleError(Exception):
    """Base class for all engine failures."""


class ConfigurationError(WorkRuleError):
    """The worker has no effective rule set; the worker setup must be fixed."""


class DependencyUnavailable(WorkRuleError):
    """A backing store failed or timed out. Retryable, never a pass."""

    def __init__(self, dependency: str, detail: str = ""):
        self.dependency = dependency
        self.detail = detail
        message = f"{dependency} unavailable"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class InvariantViolation(WorkRuleError, ValueError):
    """A rule configuration breaks one of its structural invariants."""


class InvalidInterval(WorkRuleError, ValueError):
    """Clock-in/clock-out/break values that cannot describe real work."""


class InvalidStateTransition(WorkRuleError):
    def __init__(self, entity: str, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Invalid {entity} status change: {current} → {requested}")


class NotFound(WorkRuleError):
    pass
