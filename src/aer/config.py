"""
Configuration management for Aer.

Uses XDG base directories:
- Config: ~/.config/aer/config.toml

Settings are resolved per call and passed explicitly into the upload and
search pipelines. Nothing here is cached at module level.
"""

from pathlib import Path
from typing import Any
import os

from pydantic import BaseModel, Field, field_validator

# XDG defaults
DEFAULT_CONFIG_HOME = Path.home() / ".config"

DEFAULT_API_BASE = "https://honorable-porpoise-222.convex.site"
TOKEN_PREFIX = "aer_"


class Settings(BaseModel):
    """Read-only settings consumed by the upload and search pipelines."""

    model_config = {"frozen": True}

    auth_token: str | None = Field(default=None, description="Bearer token, aer_{userId}")
    api_base_url: str = Field(default=DEFAULT_API_BASE, description="Aer API base URL")
    timeout: float = Field(default=30.0, gt=0, description="HTTP timeout in seconds")

    @field_validator("api_base_url")
    @classmethod
    def _check_api_base_url(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith("http"):
            raise ValueError("API URL must start with http or https.")
        return value.rstrip("/")

    @field_validator("auth_token")
    @classmethod
    def _strip_token(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None

    def endpoint(self, path: str) -> str:
        """Join an API path onto the base URL."""
        return f"{self.api_base_url}/{path.lstrip('/')}"


def get_config_dir() -> Path:
    """Get the config directory (XDG_CONFIG_HOME/aer)."""
    base = Path(os.environ.get("XDG_CONFIG_HOME", DEFAULT_CONFIG_HOME))
    return base / "aer"


def get_config_path() -> Path:
    """Get the path to config.toml."""
    return get_config_dir() / "config.toml"


def load_config() -> dict[str, Any]:
    """
    Load configuration from config.toml.

    Returns default config if file doesn't exist.
    """
    config_path = get_config_path()

    if not config_path.exists():
        return get_default_config()

    # Lazy import tomli only when needed
    import tomli

    with open(config_path, "rb") as f:
        return tomli.load(f)


def get_default_config() -> dict[str, Any]:
    """Return default configuration."""
    return {
        "aer": {
            "api_url": DEFAULT_API_BASE,
            "timeout": 30.0,
        },
    }


def settings_from_config(config: dict[str, Any]) -> Settings:
    """
    Build Settings from a config dict plus environment overrides.

    Accepts the legacy key names `auth_token` and `api_base_url` next to
    `token` and `api_url`. AER_TOKEN and AER_API_URL win over the file.
    """
    aer_config = config.get("aer", {})

    token = (
        os.environ.get("AER_TOKEN")
        or aer_config.get("token")
        or aer_config.get("auth_token")
    )
    api_url = (
        os.environ.get("AER_API_URL")
        or aer_config.get("api_url")
        or aer_config.get("api_base_url")
        or DEFAULT_API_BASE
    )

    return Settings(
        auth_token=token,
        api_base_url=api_url,
        timeout=aer_config.get("timeout", 30.0),
    )


def load_settings() -> Settings:
    """Load a fresh Settings value from config.toml and the environment."""
    return settings_from_config(load_config())
