"""
Server-side tag suggestions for Aer.

Asks the Aer API which tags describe a piece of text. Used to steer the
relevance filter; never required for an upload.
"""

import logging
from typing import Any

import httpx
from pydantic import BaseModel, Field, ValidationError

from aer.config import Settings
from aer.errors import AerError
from aer.transport import post_json

logger = logging.getLogger(__name__)

TAGS_PATH = "/api/tags"
MAX_TAG_INPUT = 6000


class TagResponse(BaseModel):
    """Schema for the tags endpoint output."""

    tags: list[str] = Field(default_factory=list, description="Suggested tags")


def _parse_tags(data: Any) -> list[str]:
    """Accept either a bare list or {"tags": [...]}."""
    if isinstance(data, list):
        return [t for t in data if isinstance(t, str)]
    try:
        return TagResponse.model_validate(data).tags
    except ValidationError:
        return []


async def fetch_tags(
    text: str,
    title: str,
    settings: Settings,
    client: httpx.AsyncClient | None = None,
) -> list[str]:
    """
    Fetch suggested tags for text.

    Falls back to an empty list on any failure: no token, transport error,
    non-success status, or a body that is not JSON.
    """
    body = {
        "content": (text or "")[:MAX_TAG_INPUT],
        "title": title or "",
        "totalContexts": 1,
    }

    try:
        response = await post_json(settings, settings.endpoint(TAGS_PATH), body, client=client)
    except AerError as e:
        logger.warning(f"Tag request failed: {e}")
        return []

    if not response.is_success:
        logger.info(f"Tag request returned {response.status_code}")
        return []

    try:
        return _parse_tags(response.json())
    except ValueError:
        return []
