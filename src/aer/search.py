"""
Semantic search and client-side re-ranking for Aer.

The server returns candidates for a query; results are then re-scored with
cheap heuristics over title, tags, URL and any plaintext preview, added to
whatever score the server supplied.
"""

import logging
import re
from typing import Any

import httpx

from aer.config import Settings
from aer.crypto import PLAIN_NONCE
from aer.errors import AerError, SearchFailedError, UnauthenticatedError
from aer.transport import post_json

logger = logging.getLogger(__name__)

SEARCH_PATHS = ("/api/search", "/api/context/search")

ASSIST_MIN_QUERY = 3
ASSIST_LIMIT = 30
ASSIST_TOP = 15

# Heuristic weights. Tunable: nothing calibrates them against the server score.
WEIGHTS = {
    "title_phrase": 20,
    "title_token": 3,
    "tag_token": 5,
    "code_host": 2,
    "docs_host": 2,
    "preview_phrase": 15,
    "preview_token": 2,
    "preview_token_cap": 5,
    "has_summary": 1,
}

QUERY_SPLIT = re.compile(r"[^a-z0-9]+")


def normalize_text(value: Any) -> str:
    return ("" if value is None else str(value)).lower()


def query_tokens(query: str) -> set[str]:
    """Distinct lowercase alphanumeric runs of a query."""
    return {t for t in QUERY_SPLIT.split(normalize_text(query)) if t}


def plain_preview(item: dict[str, Any]) -> str:
    """Server-provided plaintext preview, if the item carries one."""
    preview = item.get("previewPlain")
    if isinstance(preview, dict) and preview.get("nonce") == PLAIN_NONCE:
        return normalize_text(preview.get("ciphertext"))
    return ""


def relevance_score(query: str, item: dict[str, Any]) -> float:
    """Composite heuristic score of one search result for a query."""
    q = normalize_text(query)
    tokens = query_tokens(query)
    title = normalize_text(item.get("title"))
    url = normalize_text(item.get("url"))
    raw_tags = item.get("tags")
    tags = [normalize_text(t) for t in raw_tags] if isinstance(raw_tags, list) else []
    preview = plain_preview(item)

    score: float = 0
    if title:
        if q in title:
            score += WEIGHTS["title_phrase"]
        score += WEIGHTS["title_token"] * sum(1 for t in tokens if t in title)

    score += WEIGHTS["tag_token"] * sum(1 for t in tags if t in tokens)

    if "github" in url and ("code" in q or "repo" in q):
        score += WEIGHTS["code_host"]
    if "docs" in url and "docs" in q:
        score += WEIGHTS["docs_host"]

    if preview:
        if q in preview:
            score += WEIGHTS["preview_phrase"]
        else:
            hits = sum(1 for t in tokens if t in preview)
            score += WEIGHTS["preview_token"] * min(hits, WEIGHTS["preview_token_cap"])

    if item.get("encryptedSummary"):
        score += WEIGHTS["has_summary"]

    server_score = item.get("score")
    if isinstance(server_score, (int, float)) and not isinstance(server_score, bool):
        score += server_score

    return score


def rank_by_relevance(query: str, items: list[dict[str, Any]] | None) -> list[dict[str, Any]]:
    """
    Score and sort results, best first.

    Each result is copied with a `_score` field; inputs are not modified.
    Equal scores keep their original order.
    """
    scored = [{**item, "_score": relevance_score(query, item)} for item in (items or [])]
    return sorted(scored, key=lambda r: r["_score"], reverse=True)


def _accepts(data: Any) -> bool:
    return isinstance(data, dict) and (bool(data.get("success")) or isinstance(data.get("results"), list))


async def semantic_search(
    query: str,
    settings: Settings,
    limit: int = 20,
    client: httpx.AsyncClient | None = None,
) -> dict[str, Any]:
    """
    Query the search endpoints in order until one answers.

    Returns:
        {"success": True, "results": [...]}

    Raises:
        UnauthenticatedError: no token configured
        SearchFailedError: every endpoint failed; carries the last error
    """
    if not settings.auth_token:
        raise UnauthenticatedError()

    body = {"query": query, "limit": limit}
    last_error: Exception | None = None

    for path in SEARCH_PATHS:
        url = settings.endpoint(path)
        try:
            response = await post_json(settings, url, body, client=client)
        except AerError as e:
            logger.warning(f"Search endpoint {url} failed: {e}")
            last_error = e
            continue

        try:
            data = response.json()
        except ValueError:
            data = {"success": False}

        if response.is_success and _accepts(data):
            results = data.get("results")
            return {"success": True, "results": results if isinstance(results, list) else []}

        message = data.get("error") if isinstance(data, dict) else None
        last_error = SearchFailedError(message or f"HTTP {response.status_code}")
        logger.warning(f"Search endpoint {url} rejected query: {last_error}")

    raise SearchFailedError(last_error)


async def assist_search(
    query: str,
    settings: Settings,
    client: httpx.AsyncClient | None = None,
) -> list[dict[str, Any]]:
    """Search for prompt assistance: ranked top results, empty for short queries."""
    query = (query or "").strip()
    if len(query) < ASSIST_MIN_QUERY:
        return []

    found = await semantic_search(query, settings, limit=ASSIST_LIMIT, client=client)
    return rank_by_relevance(query, found["results"])[:ASSIST_TOP]
