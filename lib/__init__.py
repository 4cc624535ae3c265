# =============================================================================
# lib/ - Data, Session and Telemetry Clients
# =============================================================================
# This package contains the client stack every application package uses:
# - remote_client.py: Async HTTP transport with error translation
# - auth_client.py: Hosted auth endpoints (sign in, refresh, sign out)
# - storage.py: Persistence slot for the session credential
# - session_store.py: Credential lifecycle and proactive refresh
# - data_access.py: DataAccess façade (select/select_one/insert/update/delete)
# - backend_api.py: Client for the application's own backend API
# - tracker.py: Fire-and-forget page-view tracking
# - testing.py: Scripted DataAccess double for tests
# - errors.py / utils.py: Error taxonomy and shared helpers
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.data_access import DataAccess, LiveDataAccess, Record
from lib.errors import (
    AuthError,
    ConfigError,
    NotFoundError,
    RemoteError,
    SessionExpiredError,
    TransportError,
    UnauthenticatedError,
)
from lib.remote_client import RemoteClient, RemoteResponse
from lib.session_store import SessionStore
from lib.tracker import PageViewTracker
from lib.utils import ApplicationError

__all__ = [
    # Data access
    "DataAccess",
    "LiveDataAccess",
    "Record",
    # Transport
    "RemoteClient",
    "RemoteResponse",
    # Session / telemetry
    "SessionStore",
    "PageViewTracker",
    # Errors
    "ApplicationError",
    "AuthError",
    "ConfigError",
    "NotFoundError",
    "RemoteError",
    "SessionExpiredError",
    "TransportError",
    "UnauthenticatedError",
]
