# Token storage - protocol plus in-memory and file-backed backends.
# Created: 2026-10-18
#
# Tokens are keyed by (session id, profile name). Caching is left to the
# backend; the flow engine calls each method at most once per phase.

from __future__ import annotations

import hashlib
import json
import logging
import os
import stat
import threading
from pathlib import Path
from typing import Protocol, runtime_checkable

from fastapi import Request

from oauthflow.session import session_id
from oauthflow.tokens import AccessToken

logger = logging.getLogger(__name__)


@runtime_checkable
class TokenStorage(Protocol):
    """Protocol for (secure) access token storage backends.

    Implement this to keep tokens in Redis, a database, an encrypted cookie...
    Methods may be plain or ``async``; the flow engine awaits when needed.
    """

    async def set(self, request: Request, name: str, token: AccessToken) -> None:
        """Write a token (most likely a login)."""
        ...

    async def get(self, request: Request, name: str) -> AccessToken | None:
        """Get the stored token, or None."""
        ...

    async def delete(self, request: Request, name: str) -> None:
        """Delete the stored token (most likely a logout). Missing is not an error."""
        ...


class InMemoryTokenStorage:
    """Process-local token storage. Tokens are lost on restart."""

    def __init__(self) -> None:
        self._tokens: dict[tuple[str, str], AccessToken] = {}
        self._lock = threading.Lock()

    async def set(self, request: Request, name: str, token: AccessToken) -> None:
        with self._lock:
            self._tokens[(session_id(request), name)] = token
        logger.debug("Stored token for profile %s", name)

    async def get(self, request: Request, name: str) -> AccessToken | None:
        with self._lock:
            return self._tokens.get((session_id(request), name))

    async def delete(self, request: Request, name: str) -> None:
        with self._lock:
            self._tokens.pop((session_id(request), name), None)

    def __len__(self) -> int:
        return len(self._tokens)


def _default_token_dir() -> Path:
    from oauthflow.config import get_settings

    return get_settings().token_dir


class FileTokenStorage:
    """File-based token storage at ``{token_dir}/{session}/{profile}.json``.

    The session directory name is a SHA-256 of the session id so the cookie
    value never appears on disk. Files are chmod 0600 (owner-only read/write).
    """

    def __init__(self, token_dir: Path | None = None):
        self._token_dir = token_dir

    def _get_dir(self, request: Request) -> Path:
        base = self._token_dir if self._token_dir is not None else _default_token_dir()
        digest = hashlib.sha256(session_id(request).encode()).hexdigest()
        return base / digest

    def _get_path(self, request: Request, name: str) -> Path:
        return self._get_dir(request) / f"{name}.json"

    async def set(self, request: Request, name: str, token: AccessToken) -> None:
        d = self._get_dir(request)
        d.mkdir(parents=True, exist_ok=True)
        path = d / f"{name}.json"
        path.write_text(json.dumps(token.to_dict(), indent=2))
        os.chmod(path, stat.S_IRUSR | stat.S_IWUSR)
        logger.info("Saved OAuth token for profile %s", name)

    async def get(self, request: Request, name: str) -> AccessToken | None:
        path = self._get_path(request, name)
        if not path.exists():
            return None

        try:
            return AccessToken.from_dict(json.loads(path.read_text()))
        except (OSError, ValueError) as e:
            logger.warning("Failed to load token for profile %s: %s", name, e)
            return None

    async def delete(self, request: Request, name: str) -> None:
        path = self._get_path(request, name)
        if path.exists():
            path.unlink()
            logger.info("Deleted OAuth token for profile %s", name)
