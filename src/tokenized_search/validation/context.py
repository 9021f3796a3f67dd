"""
Validation context and rule contract.

A rule is any object with an ``id``, an optional ``priority`` and a
``validate(ctx)`` callable returning violations. Rules are supplied fresh for
every pass and keep no state between passes.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from tokenized_search.core.ir import FieldDefinition, Token, Violation, find_field


@dataclass(frozen=True)
class ValidationContext:
    """
    Everything a rule may look at during one pass.

    Attributes:
        tokens: Ordered tokens under validation (plaintext excluded)
        fields: Field catalogue
        editing_token_ids: Ids the host considers freshly created or modified
            in the current operation; the only freshness signal rules get
    """

    tokens: Sequence[Token]
    fields: Sequence[FieldDefinition] = ()
    editing_token_ids: frozenset[str] = field(default_factory=frozenset)

    def is_editing(self, token: Token) -> bool:
        return token.id in self.editing_token_ids

    def field_for(self, key: str) -> FieldDefinition | None:
        return find_field(list(self.fields), key)


RuleFn = Callable[[ValidationContext], list[Violation]]


@dataclass(frozen=True)
class ValidationRule:
    """A named, optionally prioritised validation function (higher runs first)."""

    id: str
    validate: RuleFn
    priority: int | None = None


def rule_priority(rule: object) -> int:
    """Sort priority of any rule-shaped object; missing or non-integer counts as 0."""
    priority = getattr(rule, "priority", None)
    return priority if isinstance(priority, int) else 0
