"""
Validation rule engine for tokenized search.

Rules inspect a token sequence and report violations; the planner turns
violations into delete/mark/clear actions for the host.
"""

from .context import RuleFn, ValidationContext, ValidationRule
from .planner import apply_plan, build_plan
from .presets import (
    DuplicateGroup,
    MaxCount,
    RequireEnum,
    RequirePattern,
    RuleResult,
    SimpleToken,
    StrategyResult,
    Unique,
    create_field_rule,
    create_rule,
)
from .runner import ValidationResult, run_validation, validate_tokens
from .snapshot import collect_tokens, compute_editing_token_ids, reconcile_token_ids
from .strategy_helpers import (
    EditStatePartition,
    build_targets,
    create_delete_violation,
    create_mark_violation,
    create_violation,
    split_by_edit_state,
)

__all__ = [
    # Contract
    "RuleFn",
    "ValidationContext",
    "ValidationRule",
    # Presets
    "DuplicateGroup",
    "MaxCount",
    "RequireEnum",
    "RequirePattern",
    "RuleResult",
    "SimpleToken",
    "StrategyResult",
    "Unique",
    "create_field_rule",
    "create_rule",
    # Engine
    "ValidationResult",
    "apply_plan",
    "build_plan",
    "run_validation",
    "validate_tokens",
    # Freshness
    "collect_tokens",
    "compute_editing_token_ids",
    "reconcile_token_ids",
    # Strategy helpers
    "EditStatePartition",
    "build_targets",
    "create_delete_violation",
    "create_mark_violation",
    "create_violation",
    "split_by_edit_state",
]
