"""
Health check module for Aer.

Reports configuration and API status.
"""

import httpx

from aer.config import Settings, get_config_path
from aer.crypto import user_id_from_token
from aer.errors import InvalidTokenFormatError, NetworkError
from aer.transport import probe
from aer.upload import UPLOAD_PATH


def check_config() -> tuple[str, str]:
    """Check config file status."""
    config_path = get_config_path()
    if not config_path.exists():
        return "-", "Not found (using defaults and environment)"
    return "✓", f"OK ({config_path})"


def check_token(settings: Settings) -> tuple[str, str]:
    """Check the auth token is present and well formed."""
    if not settings.auth_token:
        return "✗", "No token. Set AER_TOKEN or add token to config.toml"
    try:
        user_id_from_token(settings.auth_token)
    except InvalidTokenFormatError as e:
        return "✗", str(e)
    return "✓", "OK"


async def check_api(settings: Settings, client: httpx.AsyncClient | None = None) -> tuple[str, str]:
    """Check the upload endpoint answers."""
    try:
        status = await probe(settings, settings.endpoint(UPLOAD_PATH), client=client)
    except NetworkError as e:
        return "✗", f"Unreachable: {e}"
    if status >= 500:
        return "!", f"{settings.api_base_url} answered {status}"
    return "✓", f"OK ({settings.api_base_url})"


async def run_health_check(
    settings: Settings,
    client: httpx.AsyncClient | None = None,
) -> dict[str, tuple[str, str]]:
    """Run all health checks."""
    return {
        "Config": check_config(),
        "Token": check_token(settings),
        "API": await check_api(settings, client=client),
    }


def format_health_report(checks: dict[str, tuple[str, str]]) -> str:
    """Format health check results."""
    lines = ["Aer Health Check", "-" * 40]

    for name, (status, message) in checks.items():
        lines.append(f"{status} {name}: {message}")

    return "\n".join(lines)
