"""
Token types for tokenized search IR.

A token is one parsed unit of a query: a structured ``key:operator:value``
filter, a free-text term, or untokenized plain text. Tokens are immutable;
hosts derive updated tokens with ``model_copy(update=...)``.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Default separator between field key, operator and value: ``status:is:active``
DEFAULT_TOKEN_DELIMITER = ":"


class TokenType(str, Enum):
    """Kinds of token produced by the lexer."""

    FILTER = "filter"
    FREE_TEXT = "freeText"
    PLAINTEXT = "plaintext"  # untokenized raw text, never validated


class FreeTextMode(str, Enum):
    """
    How free text (anything that is not a filter) is kept.

    | Mode       | Result                                      |
    |------------|---------------------------------------------|
    | none       | free text dropped, filters only              |
    | plain      | free text kept as plaintext tokens           |
    | tokenize   | free text kept as discrete freeText tokens   |
    """

    NONE = "none"
    PLAIN = "plain"
    TOKENIZE = "tokenize"


class Token(BaseModel):
    """
    A single query token.

    ``key``/``operator``/``value`` are populated for filters; free-text tokens
    only carry ``value``. ``pos`` is an opaque host handle that the core only
    echoes back in violation targets.

    Examples:
        - status:is:active → Token(type=FILTER, key="status", operator="is", value="active")
        - "hello world" → Token(type=FREE_TEXT, value="hello world", quoted=True)
    """

    id: str
    type: TokenType
    key: str = ""
    operator: str = ""
    value: str = ""
    raw_value: str = ""  # value before enum/label resolution
    quoted: bool = False  # free text that was written inside quotes
    raw_text: str | None = None  # source text for quoted free text, escapes included
    pos: Any = None
    invalid: bool = False
    invalid_reason: str | None = None
    invalid_message: str | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def is_filter(self) -> bool:
        return self.type == TokenType.FILTER

    @property
    def is_free_text(self) -> bool:
        return self.type == TokenType.FREE_TEXT

    @property
    def is_plaintext(self) -> bool:
        return self.type == TokenType.PLAINTEXT

    @property
    def under_construction(self) -> bool:
        """A token with no value yet (still being typed by the user)."""
        return not self.value


class ParseResult(BaseModel):
    """Result of lexing a query string."""

    tokens: list[Token] = Field(default_factory=list)
    has_incomplete_quote: bool = False
    incomplete_quote_value: str | None = None

    model_config = ConfigDict(frozen=True)
