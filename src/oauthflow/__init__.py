"""oauthflow - provider-agnostic OAuth2 authorization code flow for FastAPI."""

from oauthflow.context import OAuth2Context
from oauthflow.engine import OAuth2Flow
from oauthflow.errors import (
    AuthenticationError,
    AuthorizationDeniedError,
    ConfigurationError,
    MalformedTokenResponseError,
    OAuth2Error,
    StateMismatchError,
    TokenExchangeError,
)
from oauthflow.providers import Endpoint, Profile, Provider
from oauthflow.state import InMemoryStateStore, StateStore
from oauthflow.storage import FileTokenStorage, InMemoryTokenStorage, TokenStorage
from oauthflow.tokens import AccessToken, is_token_valid
from oauthflow.urls import build_url

__all__ = [
    "AccessToken",
    "AuthenticationError",
    "AuthorizationDeniedError",
    "ConfigurationError",
    "Endpoint",
    "FileTokenStorage",
    "InMemoryStateStore",
    "InMemoryTokenStorage",
    "MalformedTokenResponseError",
    "OAuth2Context",
    "OAuth2Error",
    "OAuth2Flow",
    "Profile",
    "Provider",
    "StateMismatchError",
    "StateStore",
    "TokenExchangeError",
    "TokenStorage",
    "build_url",
    "is_token_valid",
]
