"""Demo FastAPI application hosting an :class:`OAuth2Flow`.

Shows how a host app wires the engine in: session cookie middleware, the
three flow routes, and an exception handler turning authentication
failures into 401 responses. ``GET /`` lists every profile with its login
and logout URIs and whether the caller is currently authorized.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

import httpx
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from oauthflow.config import Settings, load_profiles
from oauthflow.context import OAuth2Context
from oauthflow.engine import OAuth2Flow
from oauthflow.errors import AuthenticationError, TokenExchangeError
from oauthflow.providers import Profile
from oauthflow.session import session_cookie_middleware
from oauthflow.state import InMemoryStateStore, StateStore
from oauthflow.storage import FileTokenStorage, TokenStorage

logger = logging.getLogger(__name__)


def create_flow(
    settings: Settings,
    profiles: Mapping[str, Profile] | None = None,
    storage: TokenStorage | None = None,
    state: StateStore | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> OAuth2Flow:
    """Build an engine from *settings*, loading profiles from ``profiles_file`` if needed."""
    if profiles is None:
        profiles = load_profiles(settings.profiles_file) if settings.profiles_file else {}
        if not profiles:
            logger.warning("No OAuth2 profiles configured (set OAUTHFLOW_PROFILES_FILE)")

    return OAuth2Flow(
        profiles=profiles,
        state=state if state is not None else InMemoryStateStore(ttl=settings.state_ttl),
        storage=storage if storage is not None else FileTokenStorage(settings.token_dir),
        login_path=settings.login_path,
        authorized_path=settings.authorized_path,
        logout_path=settings.logout_path,
        host=settings.host,
        redirect_to=settings.redirect_to,
        secure=settings.secure,
        http_client=http_client,
        http_timeout=settings.http_timeout,
    )


def create_app(settings: Settings | None = None, flow: OAuth2Flow | None = None) -> FastAPI:
    """Build the demo application."""
    if settings is None:
        settings = Settings.load()
    if flow is None:
        flow = create_flow(settings)

    app = FastAPI(
        title="oauthflow",
        description="OAuth2 authorization code flow demo.",
        version="1.0.0",
    )
    app.state.oauth2 = flow

    app.middleware("http")(session_cookie_middleware(secure=flow.secure))

    @app.exception_handler(AuthenticationError)
    async def authentication_error_handler(request: Request, exc: AuthenticationError):
        # TokenExchangeError messages carry the provider body; keep them out of logs
        if isinstance(exc, TokenExchangeError):
            logger.warning(
                "Token exchange failed for %s: HTTP %s", request.url.path, exc.status_code
            )
        else:
            logger.warning("Authentication failed for %s: %s", request.url.path, exc)
        return JSONResponse(status_code=401, content={"detail": str(exc)})

    app.include_router(flow.router())

    @app.get("/")
    async def index(oauth: OAuth2Context = Depends(flow.dependency)):
        """Profiles with login/logout URIs and current authorization status."""
        urls = oauth.profiles()
        return {
            "profiles": {
                name: {**uris, "authorized": await oauth.authorized(name)}
                for name, uris in urls.items()
            }
        }

    @app.get("/profiles/{name}")
    async def profile_status(name: str, oauth: OAuth2Context = Depends(flow.dependency)):
        """Status of one profile. The token itself is never returned."""
        resolved = flow.resolve_profile(name)
        if not isinstance(resolved, Profile):
            return resolved
        return {
            "name": name,
            **oauth.profiles(name)[name],
            "scope": resolved.scope,
            "authorized": await oauth.authorized(name),
        }

    return app


def run_server(settings: Settings, host: str = "127.0.0.1", port: int = 3000) -> None:
    """Serve the demo app with uvicorn."""
    import uvicorn

    app = create_app(settings)
    flow: OAuth2Flow = app.state.oauth2
    for name in flow.profiles:
        logger.info("Profile %s: login at %s", name, flow.build_login_uri(name))
    uvicorn.run(app, host=host, port=port, log_config=None)
