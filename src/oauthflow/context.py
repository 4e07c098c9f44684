# Per-request OAuth2 capabilities handed to route handlers.
# Created: 2026-10-18

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from fastapi import Request

from oauthflow.tokens import is_token_valid

if TYPE_CHECKING:
    from oauthflow.engine import OAuth2Flow


@dataclass(frozen=True)
class OAuth2Context:
    """Read access to the OAuth2 state of the current request.

    Built by :meth:`OAuth2Flow.context` for every request; never shared.

    Example::

        @app.get("/me")
        async def me(oauth: OAuth2Context = Depends(flow.dependency)):
            if await oauth.authorized("github"):
                headers = await oauth.token_headers("github")
                ...
    """

    flow: OAuth2Flow
    request: Request

    async def authorized(self, *profiles: str) -> bool:
        """True if every named profile has a stored, unexpired token.

        Stops at the first profile without a valid token. Profiles must be
        named explicitly; with no arguments this is vacuously True.
        """
        for profile in profiles:
            token = await self.flow.load_token(self.request, profile)
            if not is_token_valid(token):
                return False
        return True

    def profiles(self, *profiles: str) -> dict[str, dict[str, str]]:
        """Login and logout URIs of the named profiles (all profiles if none given)."""
        names = profiles or tuple(self.flow.profiles)
        return {
            name: {
                "login": self.flow.build_login_uri(name),
                "logout": self.flow.build_logout_uri(name),
            }
            for name in names
        }

    async def token_headers(self, profile: str) -> dict[str, str]:
        """Authorization header with the stored bearer token.

        The token is not checked for validity; call :meth:`authorized` first.
        Without a stored token the header reads ``Bearer None``.
        """
        token = await self.flow.load_token(self.request, profile)
        access_token = token.access_token if token is not None else None
        return {"Authorization": f"Bearer {access_token}"}
