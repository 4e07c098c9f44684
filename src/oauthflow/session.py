"""Browser session identity for the token and state stores.

Stores are keyed by (session id, profile name). The session id lives in an
HTTP-only cookie. It is ``SameSite=Lax`` rather than ``Strict``: the
provider's redirect back to the callback is a cross-site top-level
navigation, and a strict cookie would not be sent with it.
"""

from __future__ import annotations

import secrets

from fastapi import Request

__all__ = ["SESSION_COOKIE", "session_id", "session_cookie_middleware"]

SESSION_COOKIE = "oauthflow_session"
SESSION_MAX_AGE = 30 * 24 * 3600


def session_id(request: Request) -> str:
    """Return the caller's session id, issuing a new one if needed.

    A freshly issued id is remembered on ``request.state`` so repeated calls
    within one request agree, and so the middleware can set the cookie.
    """
    existing = request.cookies.get(SESSION_COOKIE)
    if existing:
        return existing

    issued = getattr(request.state, "oauthflow_session", None)
    if issued is None:
        issued = secrets.token_urlsafe(32)
        request.state.oauthflow_session = issued
    return issued


def session_cookie_middleware(secure: bool = False):
    """Build an ``app.middleware("http")`` function that persists new session ids.

    Usage::

        app.middleware("http")(session_cookie_middleware(secure=True))
    """

    async def _middleware(request: Request, call_next):
        response = await call_next(request)
        issued = getattr(request.state, "oauthflow_session", None)
        if issued is not None and SESSION_COOKIE not in request.cookies:
            response.set_cookie(
                key=SESSION_COOKIE,
                value=issued,
                httponly=True,
                samesite="lax",
                secure=secure,
                path="/",
                max_age=SESSION_MAX_AGE,
            )
        return response

    return _middleware
