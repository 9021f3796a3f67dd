"""Token id generation."""

from __future__ import annotations

import logging
import uuid

logger = logging.getLogger(__name__)


def generate_token_id() -> str:
    """Return a fresh, never reused token id."""
    return str(uuid.uuid4())


def ensure_token_id(token_id: str | None) -> str:
    """Return the given id, or a new one if it is missing or empty."""
    if token_id:
        return token_id

    if token_id is None:
        logger.warning("Token missing id, generating a new one; stored tokens may predate ids")
    return generate_token_id()
