"""
Validation runner.

Runs every rule against one context, isolates misbehaving rules and applies
per-field rule overrides. ``validate_tokens`` adds the action planner on top
for hosts that want a single call.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from tokenized_search.core.ir import (
    FieldDefinition,
    Token,
    ValidationPlan,
    Violation,
    find_field,
)

from .context import ValidationContext, ValidationRule, rule_priority
from .planner import build_plan

logger = logging.getLogger(__name__)


def validation_tokens(tokens: Iterable[Token]) -> list[Token]:
    """Tokens rules get to see: filters and free text, never plaintext."""
    return [t for t in tokens if not t.is_plaintext]


def sort_rules(rules: Iterable[ValidationRule]) -> list[ValidationRule]:
    """Higher priority first; equal priorities keep declaration order."""
    return sorted(rules, key=rule_priority, reverse=True)


def apply_field_overrides(
    violations: Iterable[Violation],
    tokens: Sequence[Token],
    fields: Sequence[FieldDefinition],
) -> list[Violation]:
    """
    Drop targets whose field disables the violating rule.

    A violation left with no targets is dropped entirely.
    """
    field_by_id = {t.id: find_field(list(fields), t.key) for t in tokens}
    result: list[Violation] = []

    for violation in violations:
        targets = [
            target
            for target in violation.targets
            if not (
                (fdef := field_by_id.get(target.token_id)) is not None
                and fdef.is_rule_disabled(violation.rule_id)
            )
        ]
        if not targets:
            continue
        if len(targets) == len(violation.targets):
            result.append(violation)
        else:
            result.append(violation.model_copy(update={"targets": targets}))

    return result


def run_validation(
    tokens: Iterable[Token],
    fields: Sequence[FieldDefinition],
    rules: Iterable[ValidationRule],
    editing_token_ids: Iterable[str] = (),
) -> list[Violation]:
    """
    Run all rules and collect their violations.

    Rules run in descending priority. A rule that raises is logged and
    skipped; the others still run and their violations are kept.

    Args:
        tokens: Current token sequence (plaintext tokens are ignored)
        fields: Field catalogue
        rules: Rules for this pass
        editing_token_ids: Ids the host considers new or modified this pass

    Returns:
        Violations in rule order, after per-field overrides
    """
    ctx = ValidationContext(
        tokens=validation_tokens(tokens),
        fields=tuple(fields),
        editing_token_ids=frozenset(editing_token_ids),
    )

    violations: list[Violation] = []
    for rule in sort_rules(rules):
        try:
            violations.extend(rule.validate(ctx))
        except Exception:
            logger.warning(
                "Validation rule %r raised and was skipped",
                getattr(rule, "id", rule),
                exc_info=True,
            )

    return apply_field_overrides(violations, ctx.tokens, ctx.fields)


@dataclass(frozen=True)
class ValidationResult:
    """Violations of one pass and the plan derived from them."""

    violations: list[Violation] = field(default_factory=list)
    plan: ValidationPlan = field(default_factory=ValidationPlan)

    @property
    def is_valid(self) -> bool:
        return not self.violations


def validate_tokens(
    tokens: Sequence[Token],
    fields: Sequence[FieldDefinition],
    rules: Iterable[ValidationRule],
    editing_token_ids: Iterable[str] = (),
    *,
    prune_empty: bool = False,
) -> ValidationResult:
    """Run validation and plan the resulting actions in one call."""
    editing = frozenset(editing_token_ids)
    violations = run_validation(tokens, fields, rules, editing)
    plan = build_plan(tokens, violations, editing_token_ids=editing, prune_empty=prune_empty)
    return ValidationResult(violations=violations, plan=plan)
