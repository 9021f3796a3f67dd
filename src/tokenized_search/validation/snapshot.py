"""
Freshness diffing.

Hosts decide which tokens count as "editing" for a validation pass. These
helpers compute that set from the previous and current token lists the same
way an editor integration does after each transaction.
"""

from __future__ import annotations

from collections import defaultdict, deque
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from tokenized_search.core.ir import Token, TokenType
from tokenized_search.core.token_ids import ensure_token_id


def collect_tokens(records: Iterable[Mapping[str, Any]]) -> list[Token]:
    """
    Build validation tokens from host document records.

    Records are mappings with ``type`` (``filter`` or ``freeText``), ``id``,
    ``key``, ``operator``, ``value`` and an optional ``pos`` (defaults to
    the record index). Other record types are skipped. Records saved before
    ids existed get a fresh id; filters without an operator get ``is``.
    """
    tokens: list[Token] = []
    for index, record in enumerate(records):
        kind = record.get("type")
        value = str(record.get("value") or "")
        pos = record.get("pos", index)

        if kind == TokenType.FILTER.value:
            tokens.append(
                Token(
                    id=ensure_token_id(record.get("id")),
                    type=TokenType.FILTER,
                    key=record.get("key") or "",
                    operator=record.get("operator") or "is",
                    value=value,
                    raw_value=value,
                    pos=pos,
                    invalid=bool(record.get("invalid", False)),
                )
            )
        elif kind == TokenType.FREE_TEXT.value:
            tokens.append(
                Token(
                    id=ensure_token_id(record.get("id")),
                    type=TokenType.FREE_TEXT,
                    value=value,
                    raw_value=value,
                    pos=pos,
                    invalid=bool(record.get("invalid", False)),
                )
            )
    return tokens


def _content_changed(old: Token, new: Token) -> bool:
    return old.key != new.key or old.operator != new.operator or old.value != new.value


def new_token_ids(previous: Iterable[Token], current: Iterable[Token]) -> set[str]:
    """Ids present now that were not present before."""
    known = {t.id for t in previous}
    return {t.id for t in current if t.id not in known}


def modified_token_ids(previous: Iterable[Token], current: Iterable[Token]) -> set[str]:
    """Ids kept across the change whose key, operator or value changed."""
    old_by_id = {t.id: t for t in previous}
    return {
        t.id
        for t in current
        if (old := old_by_id.get(t.id)) is not None and _content_changed(old, t)
    }


def compute_editing_token_ids(
    previous: Sequence[Token],
    current: Sequence[Token],
    *,
    force_check: bool = False,
    is_history_operation: bool = False,
    focused_token_ids: Iterable[str] = (),
) -> frozenset[str]:
    """
    Compute the editing set for one validation pass.

    editing = new ids + modified ids + focused ids still present. An
    undo/redo pass contributes no new or modified ids, so restored tokens
    are treated as pre-existing. A forced pass (initial load, paste, bulk
    replace) with no detected change treats every token as editing.

    Args:
        previous: Tokens as last committed
        current: Tokens now
        force_check: Host requested a full check
        is_history_operation: The change came from undo/redo
        focused_token_ids: Tokens with (or just losing) focus in the host
    """
    if is_history_operation:
        new: set[str] = set()
        modified: set[str] = set()
    else:
        new = new_token_ids(previous, current)
        modified = modified_token_ids(previous, current)

    if force_check and not new and not modified and current:
        return frozenset(t.id for t in current)

    current_ids = {t.id for t in current}
    focused = {token_id for token_id in focused_token_ids if token_id in current_ids}
    return frozenset(new | modified | focused)


def _structure(token: Token) -> tuple[str, str, str, str]:
    return (token.type.value, token.key, token.operator, token.value)


def reconcile_token_ids(previous: Iterable[Token], current: Iterable[Token]) -> list[Token]:
    """
    Give freshly parsed tokens the ids of their structural twins.

    Two independent parses of similar text produce unrelated ids. Tokens of
    ``current`` that match a ``previous`` token by type, key, operator and
    value (in document order, each previous token used once) take over its
    id, so ``compute_editing_token_ids`` sees only real changes.
    """
    available: dict[tuple[str, str, str, str], deque[str]] = defaultdict(deque)
    for token in previous:
        available[_structure(token)].append(token.id)

    result: list[Token] = []
    for token in current:
        ids = available.get(_structure(token))
        if ids:
            result.append(token.model_copy(update={"id": ids.popleft()}))
        else:
            result.append(token)
    return result
