"""
Lexer/Parser for tokenized search queries.

Converts raw query text such as ``status:is:active "search term" priority:gt:high``
into an ordered token sequence. Lexing never fails: anything that does not
form a filter becomes free text, and an unterminated quote is reported as
incomplete rather than raised so a host can keep accepting keystrokes.

Grammar (informal):
    query            → token (SP+ token)*
    token            → quoted_free_text | word
    quoted_free_text → '"' (escaped_char | [^"])* '"'?
    word             → field_key DELIM [operator DELIM] value | plain_text
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import NamedTuple

from .enum_values import resolve_enum_value
from .errors import make_config_error
from .ir import (
    DEFAULT_TOKEN_DELIMITER,
    FieldDefinition,
    FreeTextMode,
    ParseResult,
    Token,
    TokenType,
    find_field,
)
from .operators import DEFAULT_UNKNOWN_FIELD_OPERATORS
from .quoting import ESCAPE, QUOTE, escape_for_quotes, parse_quoted_string, unescape_char
from .token_ids import generate_token_id


class ParsedFilter(NamedTuple):
    """Key, operator and value recognised in a single word."""

    key: str
    operator: str
    value: str
    raw_value: str  # unquoted value before enum resolution


def check_delimiter(delimiter: str) -> str:
    """
    Validate a delimiter taken from user options.

    Delimiters must be exactly one character. Parsing itself never raises, so
    option layers validate the delimiter once before parsing.
    """
    if len(delimiter) != 1:
        raise make_config_error(f"Delimiter must be a single character, got {delimiter!r}")
    return delimiter


def parse_token_text(
    text: str,
    fields: Sequence[FieldDefinition],
    *,
    allow_unknown_fields: bool = False,
    unknown_field_operators: Sequence[str] | None = None,
    delimiter: str = DEFAULT_TOKEN_DELIMITER,
) -> ParsedFilter | None:
    """
    Recognise a single word as a filter.

    Two shapes are accepted: ``key:operator:value`` when the second part is
    one of the field's operators (the value may itself contain delimiters),
    and ``key:value`` which takes the field's default operator. A quoted
    value is unquoted; enum values are resolved through the field's options.

    Returns:
        ParsedFilter, or None when the word is not a filter for a known
        field (or an unknown one when ``allow_unknown_fields`` is set)

    Examples:
        >>> parse_token_text("status:is:active", fields)
        ParsedFilter(key='status', operator='is', value='active', raw_value='active')
        >>> parse_token_text("created:lt:2024-01-01:00:00", fields).value
        '2024-01-01:00:00'
        >>> parse_token_text("hello", fields) is None
        True
    """
    if not text or not delimiter:
        return None
    if text.startswith(QUOTE) and text.endswith(QUOTE):
        return None

    parts = text.split(delimiter)
    if len(parts) < 2:
        return None

    field_key, *rest = parts
    if not field_key:
        return None

    field = find_field(list(fields), field_key)
    if field is not None:
        operators: Sequence[str] = field.operators
    elif allow_unknown_fields:
        operators = unknown_field_operators or DEFAULT_UNKNOWN_FIELD_OPERATORS
    else:
        return None

    if len(rest) >= 2 and rest[0] in operators:
        operator = rest[0]
        raw = delimiter.join(rest[1:])
    else:
        operator = operators[0]
        raw = delimiter.join(rest)

    unquoted = parse_quoted_string(raw)
    raw_value = unquoted.value if unquoted.was_quoted else raw

    value = raw_value
    if field is not None and field.is_enum and field.enum_values:
        value = resolve_enum_value(field.enum_values, raw_value, field.value_resolver)

    return ParsedFilter(key=field_key, operator=operator, value=value, raw_value=raw_value)


def _scan_quoted(query: str, i: int) -> tuple[int, str, bool]:
    """
    Read quoted free text starting just after the opening quote.

    Returns:
        (index after the closing quote, unescaped value, closed)
    """
    chars: list[str] = []
    escaped = False
    n = len(query)

    while i < n:
        c = query[i]
        i += 1
        if escaped:
            chars.append(unescape_char(c))
            escaped = False
        elif c == ESCAPE:
            escaped = True
        elif c == QUOTE:
            return i, "".join(chars), True
        else:
            chars.append(c)

    return i, "".join(chars), False


def _scan_word(query: str, i: int) -> int:
    """
    Read a space-delimited word, copying nested quoted runs verbatim.

    A quote inside a word (``assignee:is:"John Doe"``) opens a run that may
    contain spaces and ends at the next unescaped quote.

    Returns:
        Index just past the word
    """
    n = len(query)

    while i < n and query[i] != " ":
        c = query[i]
        i += 1
        if c != QUOTE:
            continue

        escaped = False
        while i < n:
            inner = query[i]
            i += 1
            if escaped:
                escaped = False
            elif inner == ESCAPE:
                escaped = True
            elif inner == QUOTE:
                break

    return i


def parse_query_string(
    query: str,
    fields: Sequence[FieldDefinition],
    *,
    allow_unknown_fields: bool = False,
    unknown_field_operators: Sequence[str] | None = None,
    delimiter: str = DEFAULT_TOKEN_DELIMITER,
) -> ParseResult:
    """
    Lex a query string into filter and free-text tokens.

    Every token gets a fresh id and ``pos`` set to its index in the result.
    A word that parses as a filter with an empty value (``status:``) stays
    free text.

    Returns:
        ParseResult with tokens, and the partial value of an unterminated
        quoted run if there is one
    """
    tokens: list[Token] = []
    has_incomplete_quote = False
    incomplete_quote_value: str | None = None
    i = 0
    n = len(query)

    while i < n:
        while i < n and query[i] == " ":
            i += 1
        if i >= n:
            break

        start = i
        if query[i] == QUOTE:
            i, value, closed = _scan_quoted(query, i + 1)
            if not closed:
                has_incomplete_quote = True
                incomplete_quote_value = value
            tokens.append(
                Token(
                    id=generate_token_id(),
                    type=TokenType.FREE_TEXT,
                    value=value,
                    raw_value=value,
                    quoted=True,
                    raw_text=query[start:i],
                    pos=len(tokens),
                )
            )
            continue

        i = _scan_word(query, i)
        word = query[start:i]
        parsed = parse_token_text(
            word,
            fields,
            allow_unknown_fields=allow_unknown_fields,
            unknown_field_operators=unknown_field_operators,
            delimiter=delimiter,
        )

        if parsed is not None and parsed.value:
            tokens.append(
                Token(
                    id=generate_token_id(),
                    type=TokenType.FILTER,
                    key=parsed.key,
                    operator=parsed.operator,
                    value=parsed.value,
                    raw_value=parsed.raw_value,
                    pos=len(tokens),
                )
            )
        else:
            tokens.append(
                Token(
                    id=generate_token_id(),
                    type=TokenType.FREE_TEXT,
                    value=word,
                    raw_value=word,
                    pos=len(tokens),
                )
            )

    return ParseResult(
        tokens=tokens,
        has_incomplete_quote=has_incomplete_quote,
        incomplete_quote_value=incomplete_quote_value,
    )


def parse_query_to_tokens(
    query: str,
    fields: Sequence[FieldDefinition],
    *,
    free_text_mode: FreeTextMode | str = FreeTextMode.PLAIN,
    allow_unknown_fields: bool = False,
    unknown_field_operators: Sequence[str] | None = None,
    delimiter: str = DEFAULT_TOKEN_DELIMITER,
) -> list[Token]:
    """
    Lex a query and shape free text for the host document.

    - ``tokenize``: free text stays as discrete freeText tokens
    - ``plain``: free text becomes plaintext, quoted runs keep their quotes
    - ``none``: free text is dropped

    Blank free text is always dropped. ``pos`` is renumbered over the result.
    """
    mode = FreeTextMode(free_text_mode)
    result = parse_query_string(
        query,
        fields,
        allow_unknown_fields=allow_unknown_fields,
        unknown_field_operators=unknown_field_operators,
        delimiter=delimiter,
    )

    kept: list[Token] = []
    for token in result.tokens:
        if token.is_filter:
            kept.append(token)
        elif not token.value.strip() or mode == FreeTextMode.NONE:
            continue
        elif mode == FreeTextMode.TOKENIZE:
            kept.append(token)
        else:
            text = f"{QUOTE}{escape_for_quotes(token.value)}{QUOTE}" if token.quoted else token.value
            kept.append(Token(id=token.id, type=TokenType.PLAINTEXT, value=text, raw_value=text))

    return [token.model_copy(update={"pos": index}) for index, token in enumerate(kept)]
