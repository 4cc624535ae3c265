# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - FakeService: an httpx.MockTransport handler that routes requests by
#   (method, path), records them and replays scripted responses
# - FakeClock: a settable epoch clock for expiry tests
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("API_URL", "https://api.test.local/api")
os.environ.setdefault("ANALYTICS_ENDPOINT", "https://api.test.local/api/analytics/track")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import inspect
from typing import Any, Callable

import httpx
import pytest
from jose import jwt

from core.models.credential import Credential
from lib.auth_client import AuthClient
from lib.remote_client import RemoteClient
from lib.session_store import SessionStore
from lib.storage import MemoryStorage

SERVICE_URL = "https://test-project.supabase.co"
ANON_KEY = "test-anon-key"
START_TIME = 1_700_000_000.0


# =============================================================================
# Helpers
# =============================================================================

class FakeClock:
    """Epoch-seconds clock the test moves by hand."""

    def __init__(self, now: float = START_TIME):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeService:
    """
    Scripted stand-in for the hosted service.

    Each route holds a list of responses consumed in order; the last one
    repeats. A response may be an httpx.Response, an exception to raise, or
    a (possibly async) callable taking the request.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.routes: dict[tuple[str, str], list[Any]] = {}

    def on(self, method: str, path: str, *responses: Any) -> None:
        self.routes[(method.upper(), path)] = list(responses)

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"message": f"no route for {request.url.path}"})

        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, Exception):
            raise item
        if callable(item):
            result = item(request)
            if inspect.isawaitable(result):
                result = await result
            return result
        return item

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method.upper() and r.url.path == path]


def make_token(sub: str = "user-1", exp: float | None = None) -> str:
    claims: dict[str, Any] = {"sub": sub, "aud": "authenticated"}
    if exp is not None:
        claims["exp"] = int(exp)
    return jwt.encode(claims, "test-secret", algorithm="HS256")


def token_body(
    access_token: str = "access-1",
    refresh_token: str = "refresh-1",
    expires_at: float = START_TIME + 3600,
) -> dict[str, Any]:
    return {
        "access_token": access_token,
        "refresh_token": refresh_token,
        "expires_at": expires_at,
        "token_type": "bearer",
        "user": {"id": "user-1", "email": "admin@example.com"},
    }


def make_credential(
    access_token: str = "access-1",
    refresh_token: str = "refresh-1",
    expires_at: float = START_TIME + 3600,
) -> Credential:
    return Credential(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_at=expires_at,
    )


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def service() -> FakeService:
    return FakeService()


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def remote(service) -> RemoteClient:
    # MockTransport holds no connections, so the client needs no closing
    return RemoteClient(SERVICE_URL, {"apikey": ANON_KEY}, transport=service.transport)


@pytest.fixture
def auth(remote, clock) -> AuthClient:
    return AuthClient(remote, clock=clock)


@pytest.fixture
def session_store(auth, storage, clock) -> SessionStore:
    return SessionStore(
        auth,
        storage=storage,
        storage_key="sb-test-project-auth-token",
        refresh_margin=60,
        clock=clock,
    )


@pytest.fixture
def signed_in(session_store) -> Credential:
    """Put a credential valid for one hour into the session store."""
    credential = make_credential()
    session_store.persist(credential)
    return credential


@pytest.fixture
def json_response() -> Callable[..., httpx.Response]:
    def build(status_code: int = 200, body: Any = None, **kwargs) -> httpx.Response:
        return httpx.Response(status_code, json=body, **kwargs)
    return build
