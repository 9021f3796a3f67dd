"""
Query snapshot types.

A snapshot is the stable payload a host hands to change/submit callbacks:
the serialized text plus one segment per surviving token.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .tokens import TokenType


class QuerySnapshotSegment(BaseModel):
    """
    One segment of a snapshot.

    Filter and free-text segments carry the token id; plaintext segments
    have no id because they are not discrete tokens.
    """

    type: TokenType
    id: str | None = None
    key: str | None = None
    operator: str | None = None
    value: str
    invalid: bool | None = None
    invalid_reason: str | None = None

    model_config = ConfigDict(frozen=True)


class QuerySnapshot(BaseModel):
    """Serialized query text plus its segments."""

    segments: list[QuerySnapshotSegment] = Field(default_factory=list)
    text: str = ""

    model_config = ConfigDict(frozen=True)
