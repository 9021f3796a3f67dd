"""Core tokenized search functionality: IR, quoting, lexer, serializer, enum lookup."""

from . import ir
from .enum_values import get_enum_label, get_enum_value, is_enum_member, resolve_enum_value
from .errors import ConfigError, ErrorContext, RuleError, TokenizedSearchError
from .lexer import parse_query_string, parse_query_to_tokens, parse_token_text
from .operators import DEFAULT_OPERATORS, operator_display_label, operator_select_label
from .quoting import (
    ATOM_BOUNDARY,
    escape_for_quotes,
    find_last_word_boundary,
    is_inside_quotes,
    parse_quoted_string,
    quote_if_needed,
    scan_quoted_string,
)
from .serializer import create_query_snapshot, serialize_token, serialize_tokens
from .token_ids import ensure_token_id, generate_token_id

__all__ = [
    "ir",
    "TokenizedSearchError",
    "ConfigError",
    "RuleError",
    "ErrorContext",
    "ATOM_BOUNDARY",
    "scan_quoted_string",
    "is_inside_quotes",
    "find_last_word_boundary",
    "parse_quoted_string",
    "escape_for_quotes",
    "quote_if_needed",
    "parse_token_text",
    "parse_query_string",
    "parse_query_to_tokens",
    "serialize_token",
    "serialize_tokens",
    "create_query_snapshot",
    "get_enum_value",
    "get_enum_label",
    "resolve_enum_value",
    "is_enum_member",
    "DEFAULT_OPERATORS",
    "operator_display_label",
    "operator_select_label",
    "generate_token_id",
    "ensure_token_id",
]
