"""
Built-in filter operators and their labels.

Fields may use any operator names; these are the defaults offered when a
field or configuration does not list its own.
"""

from __future__ import annotations

from collections.abc import Mapping

from .ir import OperatorLabel

DEFAULT_OPERATORS: tuple[str, ...] = (
    "is",
    "is_not",
    "contains",
    "not_contains",
    "starts_with",
    "ends_with",
    "gt",
    "lt",
    "gte",
    "lte",
)

DEFAULT_OPERATOR_LABELS: dict[str, str] = {
    "is": "is",
    "is_not": "is not",
    "contains": "contains",
    "not_contains": "not contains",
    "starts_with": "starts with",
    "ends_with": "ends with",
    "gt": ">",
    "lt": "<",
    "gte": ">=",
    "lte": "<=",
}

# Operators accepted for fields missing from the catalogue
DEFAULT_UNKNOWN_FIELD_OPERATORS: tuple[str, ...] = ("is",)


def operator_display_label(labels: Mapping[str, str | OperatorLabel], operator: str) -> str:
    """Label shown inside a rendered token; falls back to the operator itself."""
    config = labels.get(operator)
    if not config:
        return operator
    return config if isinstance(config, str) else config.display


def operator_select_label(labels: Mapping[str, str | OperatorLabel], operator: str) -> str:
    """Label shown in an operator selection list."""
    config = labels.get(operator)
    if not config:
        return operator
    return config if isinstance(config, str) else config.select
