"""
Built-in validation rules.

Each preset pairs a rule factory with pluggable strategies deciding which
tokens of a conflict survive, get marked invalid, or get deleted:

    Unique.rule("key")                          # mark duplicates
    Unique.rule("key", Unique.replace)          # newest wins
    Unique.rule("key", Unique.reject)           # existing wins
    MaxCount.rule("tag", 3, MaxCount.reject)    # delete tags over the limit
    RequirePattern.rule("email", r"^[^@\\s]+@[^@\\s]+$")
    RequireEnum.rule(RequireEnum.reject)

Strategies are position independent: which token is "new" comes only from
the host's editing set, never from document order, except where a group is
entirely editing or entirely untouched and order is the tiebreak.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Literal, NamedTuple, get_args

from tokenized_search.core.enum_values import is_enum_member
from tokenized_search.core.errors import make_rule_error
from tokenized_search.core.ir import Token, ValidationAction, Violation, ViolationTarget

from .context import ValidationContext, ValidationRule
from .strategy_helpers import (
    create_delete_violation,
    create_mark_violation,
    split_by_edit_state,
)

# =============================================================================
# Shared types
# =============================================================================


class StrategyResult(NamedTuple):
    """Tokens a strategy wants deleted and tokens it wants marked."""

    delete: list[Token]
    mark: list[Token]


def _check_strategy(strategy: Any, rule_id: str) -> None:
    if not callable(strategy):
        raise make_rule_error(f"strategy must be callable, got {strategy!r}", rule_id)


def _violations(result: StrategyResult, *, rule_id: str, reason: str, message: str) -> list[Violation]:
    violations: list[Violation] = []
    deleted = create_delete_violation(result.delete, rule_id=rule_id, reason=reason, message=message)
    if deleted:
        violations.append(deleted)
    marked = create_mark_violation(result.mark, rule_id=rule_id, reason=reason, message=message)
    if marked:
        violations.append(marked)
    return violations


# =============================================================================
# Uniqueness
# =============================================================================

UniqueConstraint = Literal["key", "key-operator", "exact"]
UNIQUE_CONSTRAINTS: tuple[str, ...] = get_args(UniqueConstraint)


@dataclass
class DuplicateGroup:
    """Tokens sharing a signature under a uniqueness constraint."""

    signature: str
    key: str
    tokens: list[Token] = field(default_factory=list)


UniqueStrategy = Callable[[DuplicateGroup, ValidationContext], StrategyResult]


def token_signature(token: Token, constraint: str) -> str:
    """
    Grouping key for duplicate detection.

    Free-text tokens all share one signature unless the constraint is
    ``exact``, in which case their values must match too.
    """
    if token.is_free_text:
        if constraint == "exact":
            return f"freetext:{token.value}"
        return "freetext:"

    if constraint == "key":
        return f"filter:{token.key}"
    if constraint == "key-operator":
        return f"filter:{token.key}:{token.operator}"
    return f"filter:{token.key}:{token.operator}:{token.value}"


def build_duplicate_groups(tokens: Sequence[Token], constraint: str) -> list[DuplicateGroup]:
    """Group tokens by signature, groups and members in document order."""
    groups: dict[str, DuplicateGroup] = {}
    for token in tokens:
        sig = token_signature(token, constraint)
        if sig not in groups:
            groups[sig] = DuplicateGroup(signature=sig, key=token.key)
        groups[sig].tokens.append(token)
    return list(groups.values())


_DUPLICATE_MESSAGES: dict[str, Callable[[str], str]] = {
    "key": lambda key: f'Only one "{key}" filter is allowed',
    "key-operator": lambda key: f'Duplicate "{key}" filter with same operator',
    "exact": lambda key: "Duplicate filter",
}


def unique_mark(group: DuplicateGroup, ctx: ValidationContext) -> StrategyResult:
    """First occurrence stays valid, every later one is marked."""
    return StrategyResult(delete=[], mark=group.tokens[1:])


def unique_reject(group: DuplicateGroup, ctx: ValidationContext) -> StrategyResult:
    """Keep existing tokens, discard new ones."""
    editing, untouched = split_by_edit_state(group.tokens, ctx)

    # Bulk paste/load with no pre-existing member: first occurrence wins
    if not untouched:
        return StrategyResult(delete=editing[1:], mark=[])

    # Nothing is being edited (e.g. history replay): only flag
    if not editing:
        return unique_mark(group, ctx)

    return StrategyResult(delete=editing, mark=[])


def unique_replace(group: DuplicateGroup, ctx: ValidationContext) -> StrategyResult:
    """Keep the newest token, discard the rest."""
    editing, untouched = split_by_edit_state(group.tokens, ctx)

    if not editing:
        return StrategyResult(delete=group.tokens[:-1], mark=[])

    return StrategyResult(delete=untouched + editing[:-1], mark=[])


class Unique:
    """Uniqueness strategies and rule factory."""

    mark = staticmethod(unique_mark)
    reject = staticmethod(unique_reject)
    replace = staticmethod(unique_replace)

    @staticmethod
    def rule(
        constraint: UniqueConstraint = "key",
        strategy: UniqueStrategy = unique_mark,
        *,
        priority: int | None = None,
    ) -> ValidationRule:
        """
        Create a uniqueness rule.

        Args:
            constraint: What makes two tokens duplicates: same ``key``, same
                ``key-operator``, or the ``exact`` same filter
            strategy: How to resolve a duplicate group (default: mark)
            priority: Higher priorities run first
        """
        rule_id = f"unique-{constraint}"
        if constraint not in UNIQUE_CONSTRAINTS:
            raise make_rule_error(
                f"unknown constraint {constraint!r}, expected one of {UNIQUE_CONSTRAINTS}",
                rule_id,
            )
        _check_strategy(strategy, rule_id)
        message_for = _DUPLICATE_MESSAGES[constraint]

        def validate(ctx: ValidationContext) -> list[Violation]:
            violations: list[Violation] = []
            for group in build_duplicate_groups(ctx.tokens, constraint):
                if len(group.tokens) <= 1:
                    continue
                result = strategy(group, ctx)
                violations.extend(
                    _violations(
                        result, rule_id=rule_id, reason="duplicate", message=message_for(group.key)
                    )
                )
            return violations

        return ValidationRule(id=rule_id, validate=validate, priority=priority)


# =============================================================================
# Count limits
# =============================================================================

MaxCountStrategy = Callable[[list[Token], int, ValidationContext], StrategyResult]

ALL_FIELDS = "*"


def max_count_mark(tokens: list[Token], excess: int, ctx: ValidationContext) -> StrategyResult:
    """Mark the last ``excess`` tokens; the earliest stay valid."""
    return StrategyResult(delete=[], mark=tokens[len(tokens) - excess :])


def max_count_reject(tokens: list[Token], excess: int, ctx: ValidationContext) -> StrategyResult:
    """Delete editing tokens first, then untouched ones from the tail."""
    editing, untouched = split_by_edit_state(tokens, ctx)

    if len(editing) >= excess:
        return StrategyResult(delete=editing[:excess], mark=[])

    remaining = excess - len(editing)
    return StrategyResult(delete=editing + untouched[len(untouched) - remaining :], mark=[])


class MaxCount:
    """Count limit strategies and rule factory."""

    mark = staticmethod(max_count_mark)
    reject = staticmethod(max_count_reject)

    @staticmethod
    def rule(
        field_key: str,
        max_count: int,
        strategy: MaxCountStrategy = max_count_mark,
        *,
        priority: int | None = None,
        message: str | None = None,
    ) -> ValidationRule:
        """
        Create a rule limiting how many tokens a field may have.

        Args:
            field_key: Field to count, or ``"*"`` to count every token
            max_count: Maximum allowed; negative values count as 0
            strategy: How to resolve the excess (default: mark)
            priority: Higher priorities run first
            message: Replaces the default message
        """
        rule_id = "max-count-total" if field_key == ALL_FIELDS else f"max-count-{field_key}"
        _check_strategy(strategy, rule_id)
        limit = max(0, max_count)

        if field_key == ALL_FIELDS:
            default_message = f"Maximum {limit} filters allowed"
        else:
            default_message = f'Maximum {limit} "{field_key}" filters allowed'
        text = message if message is not None else default_message

        def validate(ctx: ValidationContext) -> list[Violation]:
            if field_key == ALL_FIELDS:
                relevant = list(ctx.tokens)
            else:
                relevant = [t for t in ctx.tokens if t.key == field_key]

            if len(relevant) <= limit:
                return []

            result = strategy(relevant, len(relevant) - limit, ctx)
            return _violations(result, rule_id=rule_id, reason="max-exceeded", message=text)

        return ValidationRule(id=rule_id, validate=validate, priority=priority)


# =============================================================================
# Value checks
# =============================================================================

InvalidValueStrategy = Callable[[Token, ValidationContext], ValidationAction]


def invalid_value_mark(token: Token, ctx: ValidationContext) -> ValidationAction:
    return ValidationAction.MARK


def invalid_value_reject(token: Token, ctx: ValidationContext) -> ValidationAction:
    """Delete while the user is editing the token; never silently drop an untouched one."""
    return ValidationAction.DELETE if ctx.is_editing(token) else ValidationAction.MARK


def _single_target(
    token: Token, action: ValidationAction, *, rule_id: str, reason: str, message: str | None
) -> Violation:
    return Violation(
        rule_id=rule_id,
        reason=reason,
        message=message,
        action=action,
        targets=[ViolationTarget(token_id=token.id, pos=token.pos)],
    )


class RequirePattern:
    """Regex strategies and rule factory."""

    mark = staticmethod(invalid_value_mark)
    reject = staticmethod(invalid_value_reject)

    @staticmethod
    def rule(
        field_key: str,
        pattern: str | re.Pattern[str],
        strategy: InvalidValueStrategy = invalid_value_mark,
        *,
        priority: int | None = None,
        message: str | None = None,
    ) -> ValidationRule:
        """
        Create a rule requiring a field's values to match a regex.

        The pattern is searched (not anchored) in the value; anchor it with
        ``^``/``$`` for full matches. Tokens without a value are skipped.
        """
        rule_id = f"pattern-{field_key}"
        _check_strategy(strategy, rule_id)
        if isinstance(pattern, str):
            try:
                regex = re.compile(pattern)
            except re.error as e:
                raise make_rule_error(f"invalid pattern {pattern!r}: {e}", rule_id) from e
        else:
            regex = pattern
        text = message if message is not None else f'Invalid format for "{field_key}"'

        def validate(ctx: ValidationContext) -> list[Violation]:
            violations: list[Violation] = []
            for token in ctx.tokens:
                if token.key != field_key or not token.value:
                    continue
                if regex.search(token.value) is None:
                    violations.append(
                        _single_target(
                            token,
                            strategy(token, ctx),
                            rule_id=rule_id,
                            reason="pattern",
                            message=text,
                        )
                    )
            return violations

        return ValidationRule(id=rule_id, validate=validate, priority=priority)


class RequireEnum:
    """Enum membership strategies and rule factory."""

    mark = staticmethod(invalid_value_mark)
    reject = staticmethod(invalid_value_reject)

    @staticmethod
    def rule(
        strategy: InvalidValueStrategy = invalid_value_mark,
        *,
        priority: int | None = None,
        message: str | None = None,
    ) -> ValidationRule:
        """
        Create a rule requiring enum field values to be one of the options.

        Matching uses the field's resolver (case-insensitive value or label
        by default). Non-enum fields and empty values are skipped.
        """
        rule_id = "enum-value"
        _check_strategy(strategy, rule_id)

        def validate(ctx: ValidationContext) -> list[Violation]:
            violations: list[Violation] = []
            for token in ctx.tokens:
                fdef = ctx.field_for(token.key)
                if fdef is None or not fdef.is_enum or not fdef.enum_values:
                    continue
                if not token.value:
                    continue
                if is_enum_member(fdef.enum_values, token.value, fdef.value_resolver):
                    continue
                violations.append(
                    _single_target(
                        token,
                        strategy(token, ctx),
                        rule_id=rule_id,
                        reason="invalid-enum-value",
                        message=(
                            message if message is not None else f'Invalid value for "{fdef.label}"'
                        ),
                    )
                )
            return violations

        return ValidationRule(id=rule_id, validate=validate, priority=priority)


# =============================================================================
# Custom rules
# =============================================================================


class SimpleToken(NamedTuple):
    """The view of a token custom rule functions receive."""

    key: str
    operator: str
    value: str


@dataclass(frozen=True)
class RuleResult:
    """
    Richer custom rule outcome.

    ``delete_target_indices`` index into the token list passed to the rule
    function; a result without indices but with a message marks the token.
    """

    message: str | None = None
    delete_target_indices: Sequence[int] = ()


SimpleRuleReturn = str | RuleResult | Mapping[str, Any] | None
SimpleRuleFn = Callable[[SimpleToken, list[SimpleToken], int], SimpleRuleReturn]


def _unpack_result(result: RuleResult | Mapping[str, Any]) -> tuple[str | None, Sequence[int]]:
    if isinstance(result, RuleResult):
        return result.message, result.delete_target_indices
    if isinstance(result, Mapping):
        return result.get("message"), result.get("delete_target_indices") or ()
    raise TypeError(f"Unsupported rule result {result!r}")


def _valid_index(idx: Any, size: int) -> bool:
    return isinstance(idx, int) and not isinstance(idx, bool) and 0 <= idx < size


def create_rule(
    fn: SimpleRuleFn,
    *,
    rule_id: str = "custom-rule",
    priority: int | None = None,
) -> ValidationRule:
    """
    Wrap a per-token function as a validation rule.

    ``fn(token, all_tokens, index)`` returns:
    - None: no violation
    - a string: mark the token with that message
    - RuleResult / mapping with ``delete_target_indices``: delete those tokens
      (out-of-range indices are ignored; none left means no violation)
    - RuleResult / mapping with only ``message``: mark the token

    Example:
        create_rule(
            lambda tok, all_tokens, i: "Too short" if len(tok.value) < 3 else None,
            rule_id="min-length",
        )
    """

    def validate(ctx: ValidationContext) -> list[Violation]:
        tokens = list(ctx.tokens)
        simple = [SimpleToken(t.key, t.operator, t.value) for t in tokens]
        violations: list[Violation] = []

        for index, token in enumerate(tokens):
            result = fn(simple[index], simple, index)
            if result is None:
                continue

            if isinstance(result, str):
                violations.append(
                    _single_target(
                        token, ValidationAction.MARK, rule_id=rule_id, reason="custom", message=result
                    )
                )
                continue

            message, indices = _unpack_result(result)
            if indices:
                targets = [tokens[i] for i in indices if _valid_index(i, len(tokens))]
                deleted = create_delete_violation(
                    targets, rule_id=rule_id, reason="custom", message=message
                )
                if deleted:
                    violations.append(deleted)
            elif message:
                violations.append(
                    _single_target(
                        token, ValidationAction.MARK, rule_id=rule_id, reason="custom", message=message
                    )
                )

        return violations

    return ValidationRule(id=rule_id, validate=validate, priority=priority)


def create_field_rule(
    field_key: str,
    fn: Callable[[str, list[SimpleToken], str], SimpleRuleReturn],
    *,
    rule_id: str | None = None,
    priority: int | None = None,
) -> ValidationRule:
    """
    Wrap a per-value function that only runs for one field.

    ``fn(value, all_tokens, operator)`` follows the ``create_rule`` return
    conventions.
    """

    def per_token(token: SimpleToken, all_tokens: list[SimpleToken], index: int) -> SimpleRuleReturn:
        if token.key != field_key:
            return None
        return fn(token.value, all_tokens, token.operator)

    return create_rule(per_token, rule_id=rule_id or f"field-rule-{field_key}", priority=priority)
