# =============================================================================
# core/models/credential.py - Credential Schema
# =============================================================================
# The access/refresh token pair that represents a signed-in session.
#
# A Credential is owned by the SessionStore; other components only ever see
# the access token it hands out for a single request.
# =============================================================================

import math
from typing import Any

from jose import jwt, JWTError
from pydantic import BaseModel, ConfigDict, Field


class Credential(BaseModel):
    """
    Authenticated session tokens.

    Immutable: a refresh produces a new Credential rather than mutating
    the existing one.

    Example:
        {
            "access_token": "eyJhbGciOi...",
            "refresh_token": "v1.MRjT...",
            "expires_at": 1730000000,
            "user": {"id": "550e8400-...", "email": "admin@example.com"}
        }
    """

    model_config = ConfigDict(frozen=True)

    access_token: str = Field(..., min_length=1)
    refresh_token: str = Field(..., min_length=1)

    # Epoch seconds
    expires_at: float = Field(..., description="Access token expiry as epoch seconds")

    token_type: str = "bearer"
    user: dict[str, Any] | None = None

    def seconds_remaining(self, now: float) -> float:
        """Seconds of validity left at time `now` (negative once expired)."""
        return self.expires_at - now

    def is_expired(self, now: float) -> bool:
        return self.seconds_remaining(now) <= 0

    def needs_refresh(self, now: float, margin: float) -> bool:
        """True once remaining validity drops below the safety margin."""
        return self.seconds_remaining(now) < margin

    @property
    def authorization_header(self) -> str:
        return f"Bearer {self.access_token}"

    @classmethod
    def from_token_response(cls, payload: dict[str, Any], now: float) -> "Credential":
        """
        Build a Credential from an auth token response.

        Expiry resolution order: `expires_at`, then `now + expires_in`,
        then the access token's `exp` claim.

        Raises:
            ValueError: If the payload lacks the tokens or a usable expiry
        """
        if not isinstance(payload, dict):
            raise ValueError("Token response is not a JSON object")
        if not payload.get("access_token") or not payload.get("refresh_token"):
            raise ValueError("Token response is missing access_token or refresh_token")

        expires_at = payload.get("expires_at")
        if expires_at is None and payload.get("expires_in") is not None:
            expires_at = now + float(payload["expires_in"])
        if expires_at is None:
            expires_at = _expiry_from_claims(payload["access_token"])
        if expires_at is None:
            raise ValueError("Token response has no expiry")

        return cls(
            access_token=payload["access_token"],
            refresh_token=payload["refresh_token"],
            expires_at=float(expires_at),
            token_type=payload.get("token_type") or "bearer",
            user=payload.get("user"),
        )


def _expiry_from_claims(access_token: str) -> float | None:
    """Read the `exp` claim without verifying the signature."""
    if not access_token:
        return None
    try:
        claims = jwt.get_unverified_claims(access_token)
    except JWTError:
        return None
    exp = claims.get("exp")
    if isinstance(exp, (int, float)) and math.isfinite(exp):
        return float(exp)
    return None
