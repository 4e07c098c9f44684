# Shared fixtures for oauthflow tests.
# Created: 2026-10-18

from __future__ import annotations

import pytest
from starlette.requests import Request

from oauthflow.engine import OAuth2Flow
from oauthflow.providers import Endpoint, Profile, Provider
from oauthflow.session import SESSION_COOKIE


def _make_request(session: str | None = "session-1", query: str = "", path: str = "/") -> Request:
    """Build a bare Starlette request carrying a session cookie."""
    headers = []
    if session is not None:
        headers.append((b"cookie", f"{SESSION_COOKIE}={session}".encode()))
    return Request(
        {
            "type": "http",
            "method": "GET",
            "scheme": "http",
            "server": ("testserver", 80),
            "path": path,
            "query_string": query.encode(),
            "headers": headers,
        }
    )


class RecordingStateStore:
    """State store that hands out a fixed state and records every call."""

    def __init__(self, valid: bool = True, state: str = "S"):
        self.valid = valid
        self.state = state
        self.calls: list[tuple] = []

    def generate(self, request, name):
        self.calls.append(("generate", name))
        return self.state

    def check(self, request, name, state):
        self.calls.append(("check", name, state))
        return self.valid


class RecordingStorage:
    """Dict-backed async token store that records every call."""

    def __init__(self, tokens=None):
        self.tokens = dict(tokens or {})
        self.calls: list[tuple[str, str]] = []

    async def set(self, request, name, token):
        self.calls.append(("set", name))
        self.tokens[name] = token

    async def get(self, request, name):
        self.calls.append(("get", name))
        return self.tokens.get(name)

    async def delete(self, request, name):
        self.calls.append(("delete", name))
        self.tokens.pop(name, None)


@pytest.fixture
def demo_provider():
    return Provider(
        auth=Endpoint("https://p/authorize", {}),
        token=Endpoint("https://p/token", {}),
        client_id="cid",
        client_secret="csec",
    )


@pytest.fixture
def demo_profiles(demo_provider):
    return {
        "demo": Profile(provider=demo_provider, scope=["read"]),
        "other": Profile(provider=demo_provider, scope=[]),
    }


@pytest.fixture
def state_store():
    return RecordingStateStore()


@pytest.fixture
def storage():
    return RecordingStorage()


@pytest.fixture
def flow(demo_profiles, state_store, storage):
    return OAuth2Flow(profiles=demo_profiles, state=state_store, storage=storage)


@pytest.fixture
def make_request():
    return _make_request
