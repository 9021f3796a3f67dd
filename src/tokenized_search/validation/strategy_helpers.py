"""
Building blocks for custom validation strategies.

The built-in presets use these helpers; they are public so that hosts can
write strategies with the same editing/untouched semantics.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import NamedTuple

from tokenized_search.core.ir import Token, ValidationAction, Violation, ViolationTarget

from .context import ValidationContext


class EditStatePartition(NamedTuple):
    """Tokens split by whether the current operation touched them."""

    editing: list[Token]
    untouched: list[Token]


def split_by_edit_state(tokens: Iterable[Token], ctx: ValidationContext) -> EditStatePartition:
    """Partition tokens into editing and untouched, preserving order."""
    editing: list[Token] = []
    untouched: list[Token] = []
    for token in tokens:
        (editing if ctx.is_editing(token) else untouched).append(token)
    return EditStatePartition(editing, untouched)


def build_targets(tokens: Iterable[Token]) -> list[ViolationTarget]:
    return [ViolationTarget(token_id=t.id, pos=t.pos) for t in tokens]


def create_violation(
    tokens: list[Token],
    action: ValidationAction,
    *,
    rule_id: str,
    reason: str = "custom",
    message: str | None = None,
) -> Violation | None:
    """Create a violation over the given tokens, or None if there are none."""
    if not tokens:
        return None
    return Violation(
        rule_id=rule_id,
        reason=reason,
        message=message,
        action=action,
        targets=build_targets(tokens),
    )


def create_delete_violation(
    tokens: list[Token], *, rule_id: str, reason: str = "custom", message: str | None = None
) -> Violation | None:
    return create_violation(
        tokens, ValidationAction.DELETE, rule_id=rule_id, reason=reason, message=message
    )


def create_mark_violation(
    tokens: list[Token], *, rule_id: str, reason: str = "custom", message: str | None = None
) -> Violation | None:
    return create_violation(
        tokens, ValidationAction.MARK, rule_id=rule_id, reason=reason, message=message
    )
