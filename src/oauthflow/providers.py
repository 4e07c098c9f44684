# OAuth2 provider and profile records, plus built-in provider definitions.
# Created: 2026-10-18

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from oauthflow.errors import ConfigurationError
from oauthflow.urls import UrlParams


@dataclass(frozen=True)
class Endpoint:
    """A provider URL plus provider-specific extra query/form parameters."""

    url: str
    params: UrlParams = field(default_factory=dict)


@dataclass(frozen=True)
class Provider:
    """Remote authorization server endpoints and this client's credentials.

    New providers are new instances of this record, not subclasses.
    """

    auth: Endpoint
    token: Endpoint
    client_id: str
    client_secret: str

    def __repr__(self) -> str:
        return (
            f"Provider(auth={self.auth.url!r}, token={self.token.url!r}, "
            f"client_id={self.client_id!r}, client_secret='***')"
        )


@dataclass(frozen=True)
class Profile:
    """A named client configuration: provider plus requested scopes."""

    provider: Provider
    scope: list[str] = field(default_factory=list)


def _credentials(name: str, client_id: str | None, client_secret: str | None) -> tuple[str, str]:
    """Resolve credentials, falling back to ``OAUTHFLOW_<NAME>_CLIENT_ID/SECRET``."""
    if client_id is None or client_secret is None:
        from oauthflow.config import get_settings

        settings = get_settings()
        client_id = client_id or getattr(settings, f"{name}_client_id", None)
        client_secret = client_secret or getattr(settings, f"{name}_client_secret", None)

    if not client_id or not client_secret:
        raise ConfigurationError(
            f"{name} provider needs a client id and secret. "
            f"Set OAUTHFLOW_{name.upper()}_CLIENT_ID and OAUTHFLOW_{name.upper()}_CLIENT_SECRET."
        )
    return client_id, client_secret


def github(client_id: str | None = None, client_secret: str | None = None) -> Provider:
    client_id, client_secret = _credentials("github", client_id, client_secret)
    return Provider(
        auth=Endpoint("https://github.com/login/oauth/authorize"),
        token=Endpoint("https://github.com/login/oauth/access_token"),
        client_id=client_id,
        client_secret=client_secret,
    )


def google(client_id: str | None = None, client_secret: str | None = None) -> Provider:
    client_id, client_secret = _credentials("google", client_id, client_secret)
    return Provider(
        auth=Endpoint(
            "https://accounts.google.com/o/oauth2/v2/auth",
            {"include_granted_scopes": True},
        ),
        token=Endpoint("https://oauth2.googleapis.com/token"),
        client_id=client_id,
        client_secret=client_secret,
    )


def spotify(client_id: str | None = None, client_secret: str | None = None) -> Provider:
    client_id, client_secret = _credentials("spotify", client_id, client_secret)
    return Provider(
        auth=Endpoint("https://accounts.spotify.com/authorize"),
        token=Endpoint("https://accounts.spotify.com/api/token"),
        client_id=client_id,
        client_secret=client_secret,
    )


def discord(client_id: str | None = None, client_secret: str | None = None) -> Provider:
    client_id, client_secret = _credentials("discord", client_id, client_secret)
    return Provider(
        auth=Endpoint("https://discord.com/oauth2/authorize"),
        token=Endpoint("https://discord.com/api/oauth2/token"),
        client_id=client_id,
        client_secret=client_secret,
    )


def gitlab(client_id: str | None = None, client_secret: str | None = None) -> Provider:
    client_id, client_secret = _credentials("gitlab", client_id, client_secret)
    return Provider(
        auth=Endpoint("https://gitlab.com/oauth/authorize"),
        token=Endpoint("https://gitlab.com/oauth/token"),
        client_id=client_id,
        client_secret=client_secret,
    )


def azure(
    tenant: str = "common",
    client_id: str | None = None,
    client_secret: str | None = None,
) -> Provider:
    """Microsoft identity platform (v2.0 endpoints) for *tenant*."""
    client_id, client_secret = _credentials("azure", client_id, client_secret)
    base = f"https://login.microsoftonline.com/{tenant}/oauth2/v2.0"
    return Provider(
        auth=Endpoint(f"{base}/authorize"),
        token=Endpoint(f"{base}/token"),
        client_id=client_id,
        client_secret=client_secret,
    )


# Provider name -> factory, used when loading profiles from config files.
PROVIDERS: dict[str, Callable[..., Provider]] = {
    "github": github,
    "google": google,
    "spotify": spotify,
    "discord": discord,
    "gitlab": gitlab,
    "azure": azure,
}
