# CSRF state storage for the authorization redirect.
# Created: 2026-10-18
#
# See RFC 6749 §10.12. A state is generated at login, bound to the browser
# session and the profile, and consumed by the first check at callback time.

from __future__ import annotations

import hmac
import logging
import secrets
import threading
import time
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from fastapi import Request

from oauthflow.session import session_id

logger = logging.getLogger(__name__)

# Pending logins older than this are discarded (10 min).
STATE_TTL = 600


@runtime_checkable
class StateStore(Protocol):
    """Temporary state storage used to prevent cross-site request forgery."""

    def generate(self, request: Request, name: str) -> str:
        """Generate a new unique state."""
        ...

    def check(self, request: Request, name: str, state: str) -> bool:
        """Check the state and invalidate it. A state validates at most once."""
        ...


@dataclass
class _PendingState:
    value: str
    created_at: float

    def expired(self, ttl: float, now: float) -> bool:
        return (now - self.created_at) > ttl


class InMemoryStateStore:
    """Process-local, single-use state store.

    One pending state per (session, profile): a second login before the
    callback replaces the first.
    """

    def __init__(self, ttl: float = STATE_TTL):
        self.ttl = ttl
        self._pending: dict[tuple[str, str], _PendingState] = {}
        self._lock = threading.Lock()

    def generate(self, request: Request, name: str) -> str:
        value = secrets.token_urlsafe(32)
        now = time.monotonic()
        with self._lock:
            self._clean_expired(now)
            self._pending[(session_id(request), name)] = _PendingState(value, now)
        return value

    def check(self, request: Request, name: str, state: str) -> bool:
        with self._lock:
            pending = self._pending.pop((session_id(request), name), None)
        if not state:
            return False
        if pending is None:
            logger.warning("No pending login for profile %s", name)
            return False
        if pending.expired(self.ttl, time.monotonic()):
            logger.warning("Expired login state for profile %s", name)
            return False
        return hmac.compare_digest(pending.value.encode(), state.encode())

    def _clean_expired(self, now: float) -> None:
        expired = [k for k, v in self._pending.items() if v.expired(self.ttl, now)]
        for k in expired:
            del self._pending[k]

    def __len__(self) -> int:
        return len(self._pending)
