"""
Unit tests for the query lexer.

Tests filter recognition, quoted free text, enum resolution and the
free-text modes used to build host tokens.
"""

import pytest

from tokenized_search.core.errors import ConfigError
from tokenized_search.core.ir import EnumOption, FieldDefinition, FieldType, TokenType
from tokenized_search.core.lexer import (
    ParsedFilter,
    check_delimiter,
    parse_query_string,
    parse_query_to_tokens,
    parse_token_text,
)


class TestParseTokenText:
    """Tests for single-word filter recognition."""

    def test_key_operator_value(self, fields: list[FieldDefinition]) -> None:
        assert parse_token_text("priority:gt:high", fields) == ParsedFilter(
            key="priority", operator="gt", value="high", raw_value="high"
        )

    def test_key_value_uses_default_operator(self, fields: list[FieldDefinition]) -> None:
        parsed = parse_token_text("priority:high", fields)
        assert parsed is not None
        assert parsed.operator == "is"
        assert parsed.value == "high"

    def test_value_may_contain_delimiter(self, fields: list[FieldDefinition]) -> None:
        parsed = parse_token_text("created:lt:2024-01-01:00:00", fields)
        assert parsed is not None
        assert parsed.operator == "lt"
        assert parsed.value == "2024-01-01:00:00"

    def test_unknown_operator_becomes_part_of_value(self, fields: list[FieldDefinition]) -> None:
        parsed = parse_token_text("priority:near:high", fields)
        assert parsed is not None
        assert parsed.operator == "is"
        assert parsed.value == "near:high"

    def test_quoted_value_is_unquoted(self, fields: list[FieldDefinition]) -> None:
        parsed = parse_token_text('assignee:is:"John Doe"', fields)
        assert parsed is not None
        assert parsed.value == "John Doe"

    @pytest.mark.parametrize("word", ["hello", '"status:is:active"', "", ":is:x"])
    def test_not_a_filter(self, fields: list[FieldDefinition], word: str) -> None:
        assert parse_token_text(word, fields) is None

    def test_unknown_field_rejected_by_default(self, fields: list[FieldDefinition]) -> None:
        assert parse_token_text("color:is:red", fields) is None

    def test_unknown_field_allowed(self, fields: list[FieldDefinition]) -> None:
        parsed = parse_token_text("color:is:red", fields, allow_unknown_fields=True)
        assert parsed == ParsedFilter(key="color", operator="is", value="red", raw_value="red")

    def test_unknown_field_default_operators(self, fields: list[FieldDefinition]) -> None:
        # Only "is" is known for unknown fields, so "gt" stays in the value
        parsed = parse_token_text("color:gt:red", fields, allow_unknown_fields=True)
        assert parsed is not None
        assert parsed.operator == "is"
        assert parsed.value == "gt:red"

    def test_unknown_field_custom_operators(self, fields: list[FieldDefinition]) -> None:
        parsed = parse_token_text(
            "color:gt:red",
            fields,
            allow_unknown_fields=True,
            unknown_field_operators=["is", "gt"],
        )
        assert parsed is not None
        assert parsed.operator == "gt"
        assert parsed.value == "red"

    def test_custom_delimiter(self, fields: list[FieldDefinition]) -> None:
        parsed = parse_token_text("priority=gt=high", fields, delimiter="=")
        assert parsed is not None
        assert (parsed.key, parsed.operator, parsed.value) == ("priority", "gt", "high")

    def test_multi_character_delimiter_rejected_by_check(self) -> None:
        with pytest.raises(ConfigError):
            check_delimiter("::")
        assert check_delimiter("=") == "="

    @pytest.mark.parametrize("delimiter", ["::", ""])
    def test_parsing_never_raises_on_odd_delimiter(
        self, fields: list[FieldDefinition], delimiter: str
    ) -> None:
        parse_token_text("priority::high", fields, delimiter=delimiter)
        result = parse_query_string("priority::high words", fields, delimiter=delimiter)
        assert len(result.tokens) == 2


class TestEnumResolution:
    """Tests for enum value lookup during parsing."""

    @pytest.mark.parametrize(
        ("word", "expected"),
        [
            ("status:is:ACTIVE", "active"),
            ("status:is:Inactive", "inactive"),
            ("status:is:waiting", "pending"),
            ("status:is:unknown", "unknown"),
        ],
    )
    def test_case_insensitive_value_or_label(
        self, fields: list[FieldDefinition], word: str, expected: str
    ) -> None:
        parsed = parse_token_text(word, fields)
        assert parsed is not None
        assert parsed.value == expected

    def test_raw_value_keeps_user_input(self, fields: list[FieldDefinition]) -> None:
        parsed = parse_token_text("status:is:ACTIVE", fields)
        assert parsed is not None
        assert parsed.raw_value == "ACTIVE"

    def test_field_resolver_overrides_default(self) -> None:
        field = FieldDefinition(
            key="level",
            label="Level",
            type=FieldType.ENUM,
            operators=["is"],
            enum_values=[EnumOption(value="1", label="Low")],
            value_resolver=lambda ctx: ctx.option.value if ctx.query == ctx.option.label else None,
        )
        assert parse_token_text("level:is:Low", [field]).value == "1"
        assert parse_token_text("level:is:low", [field]).value == "low"


class TestParseQueryString:
    """Tests for full query lexing."""

    def test_filters_and_free_text(self, fields: list[FieldDefinition]) -> None:
        result = parse_query_string("status:is:active hello priority:gt:high", fields)

        assert [t.type for t in result.tokens] == [
            TokenType.FILTER,
            TokenType.FREE_TEXT,
            TokenType.FILTER,
        ]
        assert result.tokens[1].value == "hello"
        assert not result.has_incomplete_quote

    def test_positions_and_unique_ids(self, fields: list[FieldDefinition]) -> None:
        result = parse_query_string("a b c", fields)
        assert [t.pos for t in result.tokens] == [0, 1, 2]
        assert len({t.id for t in result.tokens}) == 3

    def test_extra_spaces_are_skipped(self, fields: list[FieldDefinition]) -> None:
        result = parse_query_string("   status:is:active    hello  ", fields)
        assert [t.value for t in result.tokens] == ["active", "hello"]

    def test_empty_query(self, fields: list[FieldDefinition]) -> None:
        result = parse_query_string("", fields)
        assert result.tokens == []
        assert not result.has_incomplete_quote

    def test_quoted_free_text(self, fields: list[FieldDefinition]) -> None:
        result = parse_query_string('"search term" status:is:active', fields)
        token = result.tokens[0]

        assert token.type == TokenType.FREE_TEXT
        assert token.value == "search term"
        assert token.quoted
        assert token.raw_text == '"search term"'

    def test_quoted_free_text_unescapes(self, fields: list[FieldDefinition]) -> None:
        result = parse_query_string('"say \\"hi\\""', fields)
        assert result.tokens[0].value == 'say "hi"'

    def test_incomplete_quote(self, fields: list[FieldDefinition]) -> None:
        result = parse_query_string('status:is:active "unfinished te', fields)

        assert result.has_incomplete_quote
        assert result.incomplete_quote_value == "unfinished te"
        assert result.tokens[-1].value == "unfinished te"

    def test_nested_quoted_value_may_contain_spaces(self, fields: list[FieldDefinition]) -> None:
        result = parse_query_string('assignee:is:"John Doe" status:is:active', fields)

        assert len(result.tokens) == 2
        assert result.tokens[0].type == TokenType.FILTER
        assert result.tokens[0].value == "John Doe"

    def test_empty_value_falls_back_to_free_text(self, fields: list[FieldDefinition]) -> None:
        result = parse_query_string("status:", fields)

        assert len(result.tokens) == 1
        assert result.tokens[0].type == TokenType.FREE_TEXT
        assert result.tokens[0].value == "status:"

    def test_unknown_field_is_free_text(self, fields: list[FieldDefinition]) -> None:
        result = parse_query_string("color:is:red", fields)
        assert result.tokens[0].type == TokenType.FREE_TEXT
        assert result.tokens[0].value == "color:is:red"


class TestParseQueryToTokens:
    """Tests for building host tokens with free-text modes."""

    QUERY = 'status:is:active hello "big deal"'

    def test_tokenize_mode(self, fields: list[FieldDefinition]) -> None:
        tokens = parse_query_to_tokens(self.QUERY, fields, free_text_mode="tokenize")
        assert [t.type for t in tokens] == [
            TokenType.FILTER,
            TokenType.FREE_TEXT,
            TokenType.FREE_TEXT,
        ]

    def test_plain_mode_keeps_quotes(self, fields: list[FieldDefinition]) -> None:
        tokens = parse_query_to_tokens(self.QUERY, fields)

        assert tokens[1].type == TokenType.PLAINTEXT
        assert tokens[1].value == "hello"
        assert tokens[2].value == '"big deal"'

    def test_none_mode_drops_free_text(self, fields: list[FieldDefinition]) -> None:
        tokens = parse_query_to_tokens(self.QUERY, fields, free_text_mode="none")
        assert [t.key for t in tokens] == ["status"]

    def test_positions_are_renumbered(self, fields: list[FieldDefinition]) -> None:
        tokens = parse_query_to_tokens('hello "" status:is:active', fields, free_text_mode="none")
        assert [t.pos for t in tokens] == [0]

    def test_blank_quoted_free_text_is_dropped(self, fields: list[FieldDefinition]) -> None:
        tokens = parse_query_to_tokens('"  " status:is:active', fields, free_text_mode="tokenize")
        assert [t.type for t in tokens] == [TokenType.FILTER]
        assert tokens[0].pos == 0

    def test_invalid_mode(self, fields: list[FieldDefinition]) -> None:
        with pytest.raises(ValueError):
            parse_query_to_tokens("x", fields, free_text_mode="shout")
