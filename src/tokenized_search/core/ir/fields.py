"""
Field catalogue definitions for tokenized search IR.

Fields are supplied by the host. The lexer uses them to recognise filter
keys, operators and enum values; validation rules use them for enum
membership and per-field rule overrides.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FieldType(str, Enum):
    """Value types a field can hold."""

    STRING = "string"
    ENUM = "enum"
    DATE = "date"
    DATETIME = "datetime"


class EnumOption(BaseModel):
    """An enum value with a display label (and optional icon name)."""

    value: str
    label: str
    icon: str | None = None

    model_config = ConfigDict(frozen=True)


EnumValue = str | EnumOption


class OperatorLabel(BaseModel):
    """Different operator labels for the token display and the selection list."""

    display: str
    select: str

    model_config = ConfigDict(frozen=True)


@dataclass(frozen=True)
class EnumResolverContext:
    """Input handed to an enum value resolver for one candidate option."""

    query: str
    option: EnumOption


# Returns the resolved internal value, or None to keep searching
EnumValueResolver = Callable[[EnumResolverContext], str | None]

# Returns True when valid, False or an error message when not
ValuePredicate = Callable[[str], bool | str]


class FieldDefinition(BaseModel):
    """
    A searchable field.

    The first entry of ``operators`` is the default operator used when a
    query omits it (``status:active`` → ``status:is:active``).

    ``category``, ``allow_spaces`` and ``immutable`` are carried for the host
    (grouping in a field picker, free-form value input, read-only tokens);
    parsing and validation never read them.

    Examples:
        - FieldDefinition(key="assignee", label="Assignee", operators=["is", "is_not"])
        - FieldDefinition(key="status", label="Status", type=FieldType.ENUM,
                          operators=["is"], enum_values=["open", "closed"])
    """

    key: str = Field(min_length=1)
    label: str
    type: FieldType = FieldType.STRING
    operators: list[str] = Field(min_length=1)
    enum_values: list[EnumValue] | None = None
    value_resolver: EnumValueResolver | None = None
    validate_value: ValuePredicate | None = None
    # Per-rule overrides, e.g. {"unique-key": False} disables uniqueness here
    validation: dict[str, bool] = Field(default_factory=dict)
    operator_labels: dict[str, str | OperatorLabel] = Field(default_factory=dict)
    category: str | None = None
    allow_spaces: bool = False
    immutable: bool = False

    model_config = ConfigDict(frozen=True)

    @field_validator("operators")
    @classmethod
    def validate_operators(cls, v: list[str]) -> list[str]:
        """Operators must be non-empty strings."""
        for op in v:
            if not op:
                raise ValueError("Operator names must not be empty")
        return v

    @property
    def default_operator(self) -> str:
        return self.operators[0]

    @property
    def is_enum(self) -> bool:
        return self.type == FieldType.ENUM

    def is_rule_disabled(self, rule_id: str) -> bool:
        """True when this field opts out of the given rule."""
        return self.validation.get(rule_id, True) is False

    def accepts_value(self, value: str) -> bool:
        """Run ``validate_value``; anything but ``True`` (e.g. an error string) rejects."""
        if self.validate_value is None or not value:
            return True
        return self.validate_value(value) is True


def find_field(fields: list[FieldDefinition], key: str) -> FieldDefinition | None:
    """Return the first field with the given key, or None."""
    for f in fields:
        if f.key == key:
            return f
    return None
