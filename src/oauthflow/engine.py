# OAuth2 authorization code flow engine.
# Created: 2026-10-18
#
# Three phases per profile, each a GET route:
#   login       -> redirect to the provider with a fresh CSRF state
#   authorized  -> check state, exchange code for a token, store it
#   logout      -> delete the stored token
# Errors raised here are not caught; they reach the app's exception handlers.

from __future__ import annotations

import inspect
import urllib.parse
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

import httpx
from fastapi import APIRouter, Request
from fastapi.responses import RedirectResponse, Response

from oauthflow.context import OAuth2Context
from oauthflow.errors import (
    AuthorizationDeniedError,
    MalformedTokenResponseError,
    StateMismatchError,
    TokenExchangeError,
)
from oauthflow.providers import Profile
from oauthflow.state import StateStore
from oauthflow.storage import TokenStorage
from oauthflow.tokens import AccessToken
from oauthflow.urls import build_url

DEFAULT_LOGIN_PATH = "/login/{name}"
DEFAULT_AUTHORIZED_PATH = "/login/{name}/authorized"
DEFAULT_LOGOUT_PATH = "/logout/{name}"
DEFAULT_HOST = "localhost:3000"
DEFAULT_REDIRECT_TO = "/"

LOOPBACK_HOSTS = frozenset({"localhost", "127.0.0.1", "::1"})


def is_loopback_host(host: str) -> bool:
    """True if *host* (``name[:port]``) names the local loopback interface.

    Compares the host name exactly: ``localhost.example.com`` is not loopback.
    """
    hostname = urllib.parse.urlsplit(f"//{host}").hostname
    return hostname in LOOPBACK_HOSTS


def _normalize_template(template: str) -> str:
    # Accept Express-style ":name" templates as well as "{name}"
    return template.replace(":name", "{name}")


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class OAuth2Flow:
    """Authorization code flow for a fixed set of named profiles.

    Args:
        profiles: Profile name -> :class:`Profile`. Fixed for the engine's lifetime.
        state: CSRF state store.
        storage: Token store.
        login_path: Login route template with a ``{name}`` placeholder.
        authorized_path: Callback route template (the provider's redirect URI).
        logout_path: Logout route template.
        host: External host (``domain[:port]``) used in absolute URIs.
        redirect_to: Path to redirect to after login and logout.
        secure: Use ``https`` in absolute URIs. ``None`` guesses from *host*:
            ``http`` for loopback hosts, ``https`` otherwise. The guess is a
            heuristic; set it explicitly behind proxies or custom local names.
        http_client: Client for the token request. A short-lived client is
            created per exchange when omitted.
        http_timeout: Timeout for the short-lived client.
    """

    def __init__(
        self,
        profiles: Mapping[str, Profile],
        state: StateStore,
        storage: TokenStorage,
        login_path: str = DEFAULT_LOGIN_PATH,
        authorized_path: str = DEFAULT_AUTHORIZED_PATH,
        logout_path: str = DEFAULT_LOGOUT_PATH,
        host: str = DEFAULT_HOST,
        redirect_to: str = DEFAULT_REDIRECT_TO,
        secure: bool | None = None,
        http_client: httpx.AsyncClient | None = None,
        http_timeout: float = 15.0,
    ):
        self._profiles = MappingProxyType(dict(profiles))
        self.state = state
        self.storage = storage
        self.login_path = _normalize_template(login_path)
        self.authorized_path = _normalize_template(authorized_path)
        self.logout_path = _normalize_template(logout_path)
        self.host = host
        self.redirect_to = redirect_to
        self.secure = not is_loopback_host(host) if secure is None else secure
        self._http_client = http_client
        self._http_timeout = http_timeout

    @property
    def profiles(self) -> Mapping[str, Profile]:
        return self._profiles

    @property
    def protocol(self) -> str:
        return "https" if self.secure else "http"

    # ------------------------------------------------------------------
    # URIs
    # ------------------------------------------------------------------

    def build_uri(self, template: str, name: str, external: bool = True) -> str:
        uri = template.replace("{name}", urllib.parse.quote(name, safe=""))
        return f"{self.protocol}://{self.host}{uri}" if external else uri

    def build_login_uri(self, name: str, external: bool = True) -> str:
        return self.build_uri(self.login_path, name, external)

    def build_logout_uri(self, name: str, external: bool = True) -> str:
        return self.build_uri(self.logout_path, name, external)

    def build_callback_uri(self, name: str, external: bool = True) -> str:
        """The ``redirect_uri`` registered with the provider for *name*."""
        return self.build_uri(self.authorized_path, name, external)

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    def resolve_profile(self, name: str) -> Profile | Response:
        """Return the configured profile, or a 404 response for unknown names."""
        profile = self._profiles.get(name)
        if profile is None:
            return Response(status_code=404)
        return profile

    def build_authorization_url(self, name: str, state: str) -> str:
        profile = self._profiles[name]
        provider = profile.provider
        params = {
            "client_id": provider.client_id,
            "client_secret": provider.client_secret,
            "redirect_uri": self.build_callback_uri(name),
            "response_type": "code",
            "response_mode": "query",
            "state": state,
            **provider.auth.params,
        }
        return build_url(provider.auth.url, params, profile.scope)

    async def login(self, request: Request, name: str) -> Response:
        """Redirect the browser to the provider's authorization endpoint."""
        profile = self.resolve_profile(name)
        if isinstance(profile, Response):
            return profile

        state = await _resolve(self.state.generate(request, name))
        return RedirectResponse(self.build_authorization_url(name, state), status_code=302)

    async def authorized(self, request: Request, name: str) -> Response:
        """Provider callback: verify state, exchange the code, store the token.

        Raises:
            StateMismatchError: ``state`` is absent or was not issued here.
            AuthorizationDeniedError: The provider sent an error or no code.
            TokenExchangeError: The token endpoint rejected the exchange.
        """
        profile = self.resolve_profile(name)
        if isinstance(profile, Response):
            return profile

        query = request.query_params
        callback_state = query.get("state", "")
        # Always consume the pending state, even when the callback has none
        valid = await _resolve(self.state.check(request, name, callback_state))
        if not callback_state or not valid:
            raise StateMismatchError(name)

        if "error" in query:
            raise AuthorizationDeniedError(name, query["error"], query.get("error_description"))

        code = query.get("code")
        if not code:
            raise AuthorizationDeniedError(name, "invalid_request", "code is missing")

        token = await self.exchange_code(name, code)
        await _resolve(self.storage.set(request, name, token))
        return RedirectResponse(self.redirect_to, status_code=302)

    async def logout(self, request: Request, name: str) -> Response:
        """Delete the stored token and redirect, whether or not one existed."""
        profile = self.resolve_profile(name)
        if isinstance(profile, Response):
            return profile

        await _resolve(self.storage.delete(request, name))
        return RedirectResponse(self.redirect_to, status_code=302)

    # ------------------------------------------------------------------
    # Token exchange
    # ------------------------------------------------------------------

    async def exchange_code(self, name: str, code: str) -> AccessToken:
        """POST the authorization code to the token endpoint (RFC 6749 §4.1.3).

        No retries. ``created_at`` of the returned token is the local time.
        """
        provider = self._profiles[name].provider
        data = {
            "client_id": provider.client_id,
            "client_secret": provider.client_secret,
            "redirect_uri": self.build_callback_uri(name),
            "grant_type": "authorization_code",
            "code": code,
            **provider.token.params,
        }
        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "Accept": "application/json",
        }

        if self._http_client is not None:
            resp = await self._http_client.post(provider.token.url, data=data, headers=headers)
        else:
            async with httpx.AsyncClient(timeout=self._http_timeout) as client:
                resp = await client.post(provider.token.url, data=data, headers=headers)

        content_type = resp.headers.get("content-type", "")
        if not resp.is_success or not content_type.startswith("application/json"):
            raise TokenExchangeError(resp.status_code, resp.reason_phrase, resp.text)

        try:
            payload = resp.json()
        except ValueError:
            raise MalformedTokenResponseError(
                "body is not valid JSON", resp.status_code, resp.reason_phrase
            ) from None
        try:
            return AccessToken.from_response(payload)
        except MalformedTokenResponseError as e:
            raise MalformedTokenResponseError(
                e.detail, resp.status_code, resp.reason_phrase
            ) from None

    # ------------------------------------------------------------------
    # Framework glue
    # ------------------------------------------------------------------

    async def load_token(self, request: Request, name: str) -> AccessToken | None:
        return await _resolve(self.storage.get(request, name))

    def context(self, request: Request) -> OAuth2Context:
        return OAuth2Context(flow=self, request=request)

    async def dependency(self, request: Request) -> OAuth2Context:
        """FastAPI dependency: ``oauth: OAuth2Context = Depends(flow.dependency)``."""
        return self.context(request)

    def router(self) -> APIRouter:
        """APIRouter with the login, authorized and logout routes."""
        router = APIRouter(tags=["OAuth2"])
        router.add_api_route(self.login_path, self.login, methods=["GET"], name="oauth2_login")
        router.add_api_route(
            self.authorized_path, self.authorized, methods=["GET"], name="oauth2_authorized"
        )
        router.add_api_route(self.logout_path, self.logout, methods=["GET"], name="oauth2_logout")
        return router
