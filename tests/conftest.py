"""Shared pytest fixtures for tokenized-search tests."""

from collections.abc import Callable
from pathlib import Path

import pytest

from tokenized_search.core.ir import EnumOption, FieldDefinition, FieldType, Token, TokenType


@pytest.fixture
def fields() -> list[FieldDefinition]:
    """Return a small field catalogue covering string, enum and date fields."""
    return [
        FieldDefinition(
            key="status",
            label="Status",
            type=FieldType.ENUM,
            operators=["is", "is_not"],
            enum_values=[
                "active",
                EnumOption(value="inactive", label="Inactive"),
                EnumOption(value="pending", label="Waiting"),
            ],
        ),
        FieldDefinition(
            key="priority",
            label="Priority",
            operators=["is", "gt", "lt"],
        ),
        FieldDefinition(
            key="assignee",
            label="Assignee",
            operators=["is", "is_not"],
            allow_spaces=True,
        ),
        FieldDefinition(
            key="created",
            label="Created",
            type=FieldType.DATE,
            operators=["lt", "gt"],
        ),
        FieldDefinition(
            key="tag",
            label="Tag",
            operators=["is"],
        ),
    ]


@pytest.fixture
def make_filter() -> Callable[..., Token]:
    """Return a factory for filter tokens with predictable ids."""

    def factory(key: str, value: str, operator: str = "is", *, id: str | None = None, pos=None) -> Token:
        token_id = id or f"{key}-{value}"
        return Token(
            id=token_id,
            type=TokenType.FILTER,
            key=key,
            operator=operator,
            value=value,
            raw_value=value,
            pos=pos,
        )

    return factory


@pytest.fixture
def search_toml(tmp_path: Path) -> Path:
    """Create a search.toml with fields and declarative rules."""
    path = tmp_path / "search.toml"
    path.write_text(
        """
[query]
delimiter = ":"
allow_unknown_fields = false
free_text_mode = "tokenize"

[[fields]]
key = "status"
label = "Status"
type = "enum"
operators = ["is", "is_not"]
enum_values = ["active", { value = "inactive", label = "Inactive" }]

[[fields]]
key = "email"
label = "Email"
operators = ["is"]

[[fields]]
key = "tag"
label = "Tag"
operators = ["is"]
validation = { "unique-key" = false }

[[rules]]
kind = "unique"
constraint = "key"
strategy = "reject"
priority = 10

[[rules]]
kind = "pattern"
field = "email"
pattern = "^[^@\\\\s]+@[^@\\\\s]+$"

[[rules]]
kind = "enum"
""",
        encoding="utf-8",
    )
    return path
