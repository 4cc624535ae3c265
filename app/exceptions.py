# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Maps the error taxonomy (lib.errors) onto HTTP responses for the backend
# API. Following the principle: "Errors should tell HOW to fix, not just
# WHAT failed."
# =============================================================================

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from lib.errors import AuthError, RemoteError, TransportError
from lib.utils import ApplicationError

logger = logging.getLogger(__name__)


def status_for(exc: ApplicationError) -> int:
    """
    HTTP status for an application error.

    Upstream failures become gateway errors so they are not confused with
    errors in the request itself.
    """
    if isinstance(exc, RemoteError):
        return 502 if exc.is_server_error else exc.status_code
    if isinstance(exc, TransportError):
        return 504
    return exc.status_code


async def application_exception_handler(
    request: Request,
    exc: ApplicationError
) -> JSONResponse:
    """
    Convert ApplicationError to JSON response.

    Returns structured error with:
    - success: always False
    - error: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    """
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")

    content = {
        "success": False,
        "error": exc.message,
        "code": exc.code,
    }
    if exc.suggestion:
        content["suggestion"] = exc.suggestion

    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthError) else None
    return JSONResponse(status_code=status_code, content=content, headers=headers)
