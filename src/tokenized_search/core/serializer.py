"""
Serializer for tokenized search queries.

The exact inverse of the lexer: renders a token sequence back to canonical
query text. Quoting is minimal, so ``status:is:"a,b,c"`` comes back as
``status:is:a,b,c`` while ``assignee:is:"John Doe"`` keeps its quotes.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from .ir import (
    DEFAULT_TOKEN_DELIMITER,
    QuerySnapshot,
    QuerySnapshotSegment,
    Token,
    TokenType,
)
from .quoting import QUOTE, escape_for_quotes, quote_if_needed

_WHITESPACE_RE = re.compile(r"\s+")


def serialize_token(token: Token, delimiter: str = DEFAULT_TOKEN_DELIMITER) -> str:
    """
    Render a single token; tokens with nothing to render give an empty string.

    Examples:
        - filter status/is/active → "status:is:active"
        - quoted free text 'say "hi"' → '"say \\"hi\\""'
    """
    if token.type == TokenType.FILTER:
        if not token.value:
            return ""
        value = quote_if_needed(token.value)
        return f"{token.key}{delimiter}{token.operator}{delimiter}{value}"

    if token.type == TokenType.FREE_TEXT:
        if not token.value:
            return ""
        if token.quoted:
            return f"{QUOTE}{escape_for_quotes(token.value)}{QUOTE}"
        return token.value

    return token.value.strip()


def serialize_tokens(tokens: Iterable[Token], delimiter: str = DEFAULT_TOKEN_DELIMITER) -> str:
    """
    Render a token sequence as canonical query text.

    Parts are joined with single spaces; any run of whitespace in the result
    is collapsed to one space and the result is trimmed.
    """
    parts = [part for part in (serialize_token(t, delimiter) for t in tokens) if part]
    return _WHITESPACE_RE.sub(" ", " ".join(parts)).strip()


def create_query_snapshot(
    tokens: Iterable[Token], delimiter: str = DEFAULT_TOKEN_DELIMITER
) -> QuerySnapshot:
    """
    Build the callback payload for a token sequence.

    Filters without a value and blank free text are left out of the
    segments, matching what serialization emits.
    """
    tokens = list(tokens)
    segments: list[QuerySnapshotSegment] = []

    for token in tokens:
        if token.type == TokenType.FILTER:
            if not token.value:
                continue
            segments.append(
                QuerySnapshotSegment(
                    type=TokenType.FILTER,
                    id=token.id,
                    key=token.key,
                    operator=token.operator or "is",
                    value=token.value,
                    invalid=token.invalid or None,
                    invalid_reason=token.invalid_reason or None,
                )
            )
        elif token.type == TokenType.FREE_TEXT:
            if token.value.strip():
                segments.append(
                    QuerySnapshotSegment(type=TokenType.FREE_TEXT, id=token.id, value=token.value)
                )
        elif token.value:
            segments.append(QuerySnapshotSegment(type=TokenType.PLAINTEXT, value=token.value))

    return QuerySnapshot(segments=segments, text=serialize_tokens(tokens, delimiter))
