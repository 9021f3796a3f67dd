"""
Validation outcome types for tokenized search IR.

Rules report violations with explicit targets; the action planner merges
them into a plan of per-token actions the host applies to its document.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ValidationAction(str, Enum):
    """What should happen to a violating token."""

    MARK = "mark"  # keep, flag invalid
    DELETE = "delete"  # remove from the document


class ViolationTarget(BaseModel):
    """A token referenced by a violation."""

    token_id: str
    pos: Any = None

    model_config = ConfigDict(frozen=True)


class Violation(BaseModel):
    """A rule's report that some tokens must be marked invalid or deleted."""

    rule_id: str
    reason: str
    message: str | None = None
    action: ValidationAction
    targets: list[ViolationTarget] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @property
    def token_ids(self) -> list[str]:
        return [t.token_id for t in self.targets]


class TokenActionType(str, Enum):
    """Instructions in a validation plan."""

    DELETE = "delete"
    MARK = "mark"
    CLEAR = "clear"  # previously invalid token is valid again


class TokenAction(BaseModel):
    """One instruction for the host."""

    type: TokenActionType
    token_id: str
    pos: Any = None
    reason: str | None = None
    message: str | None = None

    model_config = ConfigDict(frozen=True)


class ValidationPlan(BaseModel):
    """Merged delete/mark/clear instructions for one validation pass."""

    actions: list[TokenAction] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    def _ids(self, kind: TokenActionType) -> list[str]:
        return [a.token_id for a in self.actions if a.type == kind]

    @property
    def deleted_ids(self) -> list[str]:
        return self._ids(TokenActionType.DELETE)

    @property
    def marked_ids(self) -> list[str]:
        return self._ids(TokenActionType.MARK)

    @property
    def cleared_ids(self) -> list[str]:
        return self._ids(TokenActionType.CLEAR)

    @property
    def is_empty(self) -> bool:
        return not self.actions
