# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Provides dependency injection for authentication.
#
# Bearer tokens are verified by asking the hosted auth service who they
# belong to (GET /auth/v1/user), so revoked sessions are rejected too.
#
# Usage:
#   from app.auth import get_current_user, require_role, AuthUser
#
#   @router.get("/protected")
#   async def protected(user: AuthUser = Depends(get_current_user)):
#       return {"user_id": user.id}
#
#   @router.get("/admin-only", dependencies=[Depends(require_role("admin"))])
#   async def admin_only(): ...
# =============================================================================

import logging
from typing import Callable, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.auth.models import AuthUser
from app.dependencies import ContextDep
from lib.errors import RemoteError

logger = logging.getLogger(__name__)

# HTTP Bearer token extractor
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    context: ContextDep,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> AuthUser:
    """
    Resolve the user behind the request's bearer token.

    Raises:
        HTTPException: 401 if the token is missing, invalid or expired
        TransportError: If the auth service is unreachable (mapped to 504)
    """
    if credentials is None:
        raise _unauthorized("Access denied. No token provided.")

    try:
        payload = await context.auth.get_user(credentials.credentials)
    except RemoteError as e:
        if e.is_client_error:
            logger.warning(f"Token rejected by auth service ({e.status_code})")
            raise _unauthorized("Invalid token.")
        raise

    if not payload.get("id"):
        logger.warning("Auth service returned a user without an id")
        raise _unauthorized("Invalid token.")

    user = AuthUser.from_auth_user(payload)
    logger.debug(f"Authenticated user: {user.id}")
    return user


def require_role(*roles: str) -> Callable:
    """
    Dependency factory restricting a route to the given roles.

    Returns:
        A dependency yielding the AuthUser, or raising 403
    """

    async def dependency(user: AuthUser = Depends(get_current_user)) -> AuthUser:
        if user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access denied. Insufficient permissions.",
            )
        return user

    return dependency
