# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

DEFAULT_ROLE = "admin"


class AuthUser(BaseModel):
    """
    User resolved from a bearer token by the hosted auth service.

    Name and role come from the user's metadata; accounts created before
    roles existed have none and count as admins.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    email: Optional[str] = None
    name: Optional[str] = None
    role: str = DEFAULT_ROLE

    @classmethod
    def from_auth_user(cls, payload: dict[str, Any]) -> "AuthUser":
        metadata = payload.get("user_metadata") or {}
        email = payload.get("email")
        return cls(
            id=str(payload["id"]),
            email=email,
            name=metadata.get("name") or email,
            role=metadata.get("role") or DEFAULT_ROLE,
        )


class UserResponse(BaseModel):
    """User payload returned by the auth endpoints."""
    success: bool = True
    user: AuthUser
