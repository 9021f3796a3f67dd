"""
Tokenized search intermediate representation (IR) types.

All types are re-exported from this package.
"""

# Fields
from .fields import (
    EnumOption,
    EnumResolverContext,
    EnumValue,
    EnumValueResolver,
    FieldDefinition,
    FieldType,
    OperatorLabel,
    ValuePredicate,
    find_field,
)

# Snapshots
from .snapshot import QuerySnapshot, QuerySnapshotSegment

# Tokens
from .tokens import (
    DEFAULT_TOKEN_DELIMITER,
    FreeTextMode,
    ParseResult,
    Token,
    TokenType,
)

# Violations and plans
from .violations import (
    TokenAction,
    TokenActionType,
    ValidationAction,
    ValidationPlan,
    Violation,
    ViolationTarget,
)

__all__ = [
    # Fields
    "EnumOption",
    "EnumResolverContext",
    "EnumValue",
    "EnumValueResolver",
    "FieldDefinition",
    "FieldType",
    "OperatorLabel",
    "ValuePredicate",
    "find_field",
    # Snapshots
    "QuerySnapshot",
    "QuerySnapshotSegment",
    # Tokens
    "DEFAULT_TOKEN_DELIMITER",
    "FreeTextMode",
    "ParseResult",
    "Token",
    "TokenType",
    # Violations
    "TokenAction",
    "TokenActionType",
    "ValidationAction",
    "ValidationPlan",
    "Violation",
    "ViolationTarget",
]
