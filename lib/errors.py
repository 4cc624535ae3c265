# =============================================================================
# lib/errors.py - Error Taxonomy
# =============================================================================
# Every failure a caller of the data/auth stack can observe:
#
#   ConfigError          - fatal, raised while loading settings at startup
#   AuthError            - recoverable by prompting the user to sign in again
#     UnauthenticatedError - no usable credential, or the service rejected it twice
#     SessionExpiredError  - the refresh token was rejected; session cleared
#   TransportError       - network unreachable / timeout, never retried here
#   RemoteError          - the service answered with a 4xx/5xx status
#   NotFoundError        - caller asked for a record that must exist
# =============================================================================

from typing import Any

from lib.utils import ApplicationError


class ConfigError(ApplicationError):
    """Raised when required configuration is missing or invalid."""

    status_code = 500

    def __init__(self, message: str, missing: list[str] | None = None):
        super().__init__(
            message=message,
            code="CONFIG_ERROR",
            suggestion="Set the listed variables in the environment or the .env file",
            details={"missing": missing or []},
        )
        self.missing = missing or []


# =============================================================================
# Auth Errors
# =============================================================================

class AuthError(ApplicationError):
    """Base class for authentication failures."""

    status_code = 401


class UnauthenticatedError(AuthError):
    """No valid credential is available for a call that needs one."""

    def __init__(self, message: str = "Not authenticated", **details: Any):
        super().__init__(
            message=message,
            code="UNAUTHENTICATED",
            suggestion="Sign in again to obtain a new session",
            details=details,
        )


class SessionExpiredError(AuthError):
    """The session could not be refreshed and has been cleared."""

    def __init__(self, message: str = "Session expired", **details: Any):
        super().__init__(
            message=message,
            code="SESSION_EXPIRED",
            suggestion="Sign in again; the refresh token is no longer valid",
            details=details,
        )


# =============================================================================
# Remote Errors
# =============================================================================

class TransportError(ApplicationError):
    """The request never produced an HTTP response (timeout, reset, DNS)."""

    status_code = 503

    def __init__(self, message: str, method: str | None = None, url: str | None = None):
        super().__init__(
            message=message,
            code="TRANSPORT_ERROR",
            suggestion="Check network connectivity; retrying is the caller's decision",
            details={"method": method, "url": url},
        )
        self.method = method
        self.url = url


class RemoteError(ApplicationError):
    """
    The remote service rejected a request.

    Carries the status code and response body verbatim so callers can tell
    client problems (4xx) from service problems (5xx) without re-parsing.
    """

    def __init__(self, status_code: int, body: Any = None, method: str | None = None, url: str | None = None):
        super().__init__(
            message=f"Remote service returned {status_code}",
            code="REMOTE_ERROR",
            details={"status_code": status_code, "body": body, "method": method, "url": url},
        )
        self.status_code = status_code
        self.body = body

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status_code < 500

    @property
    def is_server_error(self) -> bool:
        return self.status_code >= 500


class NotFoundError(ApplicationError):
    """Raised when a record requested with must-exist semantics is missing."""

    status_code = 404

    def __init__(self, collection: str, query: Any = None):
        super().__init__(
            message=f"No record found in {collection}",
            code="NOT_FOUND",
            suggestion="Check the filter values; the record may have been deleted",
            details={"collection": collection, "query": str(query) if query is not None else None},
        )
        self.collection = collection
        self.query = query
