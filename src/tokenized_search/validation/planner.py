"""
Action planner.

Merges the violations of one pass into per-token instructions. A token
targeted by any delete violation is deleted, whatever other rules said about
it; otherwise any mark violation marks it. Tokens that are flagged invalid
but no longer violate anything are cleared.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from tokenized_search.core.ir import (
    Token,
    TokenAction,
    TokenActionType,
    ValidationAction,
    ValidationPlan,
    Violation,
)

logger = logging.getLogger(__name__)

EMPTY_REASON = "empty"


def build_plan(
    tokens: Sequence[Token],
    violations: Iterable[Violation],
    *,
    editing_token_ids: Iterable[str] = (),
    prune_empty: bool = False,
) -> ValidationPlan:
    """
    Build the ordered action list for a token sequence.

    Deletes come first, then marks and clears, each in document order.
    Targets naming ids that are not in ``tokens`` are ignored.

    Args:
        tokens: The host's current tokens
        violations: Output of ``run_validation``
        editing_token_ids: Tokens still being edited; never pruned
        prune_empty: Also delete filter tokens left without a value that
            are not being edited (abandoned under construction)
    """
    violations = list(violations)
    editing = frozenset(editing_token_ids)

    deleted: dict[str, str] = {}  # token id -> reason
    marks: dict[str, Violation] = {}

    if prune_empty:
        for token in tokens:
            if token.is_filter and token.under_construction and token.id not in editing:
                deleted[token.id] = EMPTY_REASON

    for violation in violations:
        for token_id in violation.token_ids:
            if violation.action == ValidationAction.DELETE:
                deleted.setdefault(token_id, violation.reason)
            else:
                marks.setdefault(token_id, violation)

    delete_actions: list[TokenAction] = []
    other_actions: list[TokenAction] = []
    for token in tokens:
        if token.id in deleted:
            delete_actions.append(
                TokenAction(
                    type=TokenActionType.DELETE,
                    token_id=token.id,
                    pos=token.pos,
                    reason=deleted[token.id],
                )
            )
        elif token.id in marks:
            violation = marks[token.id]
            other_actions.append(
                TokenAction(
                    type=TokenActionType.MARK,
                    token_id=token.id,
                    pos=token.pos,
                    reason=violation.reason,
                    message=violation.message,
                )
            )
        elif token.invalid:
            other_actions.append(
                TokenAction(type=TokenActionType.CLEAR, token_id=token.id, pos=token.pos)
            )

    logger.debug(
        "Planned %d delete(s) and %d mark/clear action(s) for %d token(s)",
        len(delete_actions),
        len(other_actions),
        len(tokens),
    )
    return ValidationPlan(actions=delete_actions + other_actions)


def apply_plan(tokens: Iterable[Token], plan: ValidationPlan) -> list[Token]:
    """
    Apply a plan to a token list the way a host applies it to its document.

    Deleted tokens are removed, marked tokens get their invalid flag and
    reason, cleared tokens lose them. Order and ``pos`` are left alone.
    """
    by_id = {action.token_id: action for action in plan.actions}
    result: list[Token] = []

    for token in tokens:
        action = by_id.get(token.id)
        if action is None:
            result.append(token)
        elif action.type == TokenActionType.DELETE:
            continue
        elif action.type == TokenActionType.MARK:
            result.append(
                token.model_copy(
                    update={
                        "invalid": True,
                        "invalid_reason": action.reason,
                        "invalid_message": action.message,
                    }
                )
            )
        else:
            result.append(
                token.model_copy(
                    update={"invalid": False, "invalid_reason": None, "invalid_message": None}
                )
            )

    return result
