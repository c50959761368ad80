from __future__ import annotations


class ConfigurationError(ValueError):
    """Malformed rule definition; fatal to the whole evaluation run."""

    def __init__(self, message: str, *, rule_id: str | None = None):
        self.rule_id = rule_id
        if rule_id:
            message = f"Rule '{rule_id}': {message}"
        super().__init__(message)


class ConditionError(ValueError):
    """A condition could not be evaluated; the owning rule does not fire."""


class RenderFailure(RuntimeError):
    """Unexpected failure while building or serializing the report."""
