# Settings and profile loading.
# Created: 2026-10-18
#
# Every setting can be overridden with an OAUTHFLOW_* environment variable
# (or a .env file in the working directory).

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from oauthflow.errors import ConfigurationError
from oauthflow.providers import PROVIDERS, Endpoint, Profile, Provider

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """oauthflow configuration."""

    model_config = SettingsConfigDict(
        env_prefix="OAUTHFLOW_",
        env_file=".env",
        extra="ignore",
    )

    # Routes
    login_path: str = "/login/{name}"
    authorized_path: str = "/login/{name}/authorized"
    logout_path: str = "/logout/{name}"
    redirect_to: str = "/"

    # External address used in redirect URIs
    host: str = "localhost:3000"
    secure: bool | None = Field(
        default=None,
        description="Force https (True) or http (False); unset guesses from host",
    )

    # Profiles and stores
    profiles_file: Path | None = None
    token_dir: Path = Field(default_factory=lambda: Path.home() / ".oauthflow" / "tokens")
    state_ttl: int = 600
    http_timeout: float = 15.0

    log_level: str = "INFO"

    # Built-in provider credentials
    github_client_id: str | None = None
    github_client_secret: str | None = None
    google_client_id: str | None = None
    google_client_secret: str | None = None
    spotify_client_id: str | None = None
    spotify_client_secret: str | None = None
    discord_client_id: str | None = None
    discord_client_secret: str | None = None
    gitlab_client_id: str | None = None
    gitlab_client_secret: str | None = None
    azure_client_id: str | None = None
    azure_client_secret: str | None = None

    @classmethod
    def load(cls) -> Settings:
        """Load settings from the environment and ``.env``."""
        return cls()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.load()


def _parse_endpoint(raw: Any, where: str) -> Endpoint:
    if isinstance(raw, str):
        return Endpoint(raw)
    if not isinstance(raw, dict) or not isinstance(raw.get("url"), str):
        raise ConfigurationError(f"{where}: expected a URL or {{'url': ..., 'params': {{...}}}}")
    params = raw.get("params") or {}
    if not isinstance(params, dict):
        raise ConfigurationError(f"{where}.params: expected an object")
    return Endpoint(raw["url"], params)


def _parse_provider(raw: Any, where: str) -> Provider:
    if isinstance(raw, str):
        raw = {"name": raw}
    if not isinstance(raw, dict):
        raise ConfigurationError(f"{where}: expected a provider name or object")

    if "name" in raw:
        factory = PROVIDERS.get(raw["name"])
        if factory is None:
            raise ConfigurationError(f"{where}: unknown provider '{raw['name']}'")
        kwargs = {k: v for k, v in raw.items() if k != "name"}
        try:
            return factory(**kwargs)
        except TypeError as e:
            raise ConfigurationError(f"{where}: {e}") from e

    missing = [k for k in ("auth", "token", "client_id", "client_secret") if k not in raw]
    if missing:
        raise ConfigurationError(f"{where}: missing {', '.join(missing)}")
    return Provider(
        auth=_parse_endpoint(raw["auth"], f"{where}.auth"),
        token=_parse_endpoint(raw["token"], f"{where}.token"),
        client_id=str(raw["client_id"]),
        client_secret=str(raw["client_secret"]),
    )


def parse_profiles(data: Any) -> dict[str, Profile]:
    """Build profiles from a JSON-like mapping.

    Format::

        {
          "github": {"provider": "github", "scope": ["user"]},
          "demo": {
            "provider": {
              "auth": {"url": "https://p/authorize", "params": {}},
              "token": {"url": "https://p/token"},
              "client_id": "cid",
              "client_secret": "csec"
            },
            "scope": ["read"]
          }
        }

    A provider given by name uses the built-in definition; its credentials
    come from the entry (``{"name": "github", "client_id": ...}``) or from
    the ``OAUTHFLOW_<NAME>_CLIENT_ID/SECRET`` settings.
    """
    if not isinstance(data, dict):
        raise ConfigurationError("profiles: expected an object keyed by profile name")

    profiles: dict[str, Profile] = {}
    for name, entry in data.items():
        if not isinstance(entry, dict) or "provider" not in entry:
            raise ConfigurationError(f"profiles.{name}: expected an object with a provider")
        scope = entry.get("scope", [])
        if not isinstance(scope, list) or not all(isinstance(s, str) for s in scope):
            raise ConfigurationError(f"profiles.{name}.scope: expected a list of strings")
        profiles[name] = Profile(
            provider=_parse_provider(entry["provider"], f"profiles.{name}.provider"),
            scope=scope,
        )
    return profiles


def load_profiles(path: Path) -> dict[str, Profile]:
    """Read profiles from a JSON file (see :func:`parse_profiles`)."""
    try:
        data = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot read profiles from {path}: {e}") from e

    profiles = parse_profiles(data)
    logger.info("Loaded %d OAuth2 profile(s) from %s", len(profiles), path)
    return profiles


def validate_settings() -> Settings:
    """Load settings, turning validation errors into ConfigurationError."""
    try:
        return Settings.load()
    except ValidationError as e:
        raise ConfigurationError(str(e)) from e
