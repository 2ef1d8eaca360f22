"""
HTTP transport for the Aer API.

Thin wrapper over httpx. Callers may pass a shared AsyncClient; otherwise a
client is opened for the single request. Timeouts are the transport's
concern and come from Settings.
"""

from typing import Any

import httpx

from aer.config import Settings
from aer.errors import NetworkError, UnauthenticatedError


def auth_headers(settings: Settings) -> dict[str, str]:
    """Bearer headers for an authenticated JSON request."""
    if not settings.auth_token:
        raise UnauthenticatedError()
    return {
        "Authorization": f"Bearer {settings.auth_token}",
        "Content-Type": "application/json",
    }


async def post_json(
    settings: Settings,
    url: str,
    body: dict[str, Any],
    client: httpx.AsyncClient | None = None,
) -> httpx.Response:
    """
    POST a JSON body with bearer auth.

    Raises:
        UnauthenticatedError: no token in settings
        NetworkError: connection, timeout or protocol failure
    """
    headers = auth_headers(settings)
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=settings.timeout) as own_client:
                return await own_client.post(url, json=body, headers=headers)
        return await client.post(url, json=body, headers=headers)
    except httpx.HTTPError as e:
        raise NetworkError(f"Request to {url} failed: {e}") from e


async def probe(settings: Settings, url: str, client: httpx.AsyncClient | None = None) -> int:
    """Send an OPTIONS request and return the status code."""
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=settings.timeout) as own_client:
                response = await own_client.options(url)
        else:
            response = await client.options(url)
    except httpx.HTTPError as e:
        raise NetworkError(f"Request to {url} failed: {e}") from e
    return response.status_code
