"""Declarative rule evaluation over a parsed tabular model.

This package intentionally contains only domain logic:
- Inputs are a ruleset, a sheet/column addressable model and the lookup scopes.
- No host runtime, storage or file watching lives here.
"""

from .config import EmptySheetPolicy, EvaluatorConfig
from .context import EvaluationContext, Sheet, TabularModel
from .errors import ConditionError, ConfigurationError, RenderFailure
from .loader import load_rules, load_rules_file
from .models import (
    Condition,
    Level,
    LevelCounts,
    LogEntry,
    RuleDefinition,
    ValidationResult,
)
from .runner import RulesRunner, evaluate

# Import built-in rule types so they self-register with the global registry.
from . import rules as _builtin_rules  # noqa: F401
