# =============================================================================
# lib/auth_client.py - Auth Gateway
# =============================================================================
# Calls the hosted auth endpoints (Supabase GoTrue) through a RemoteClient:
#   POST /auth/v1/token?grant_type=password       -> sign in
#   POST /auth/v1/token?grant_type=refresh_token  -> refresh
#   POST /auth/v1/logout                          -> revoke refresh token
#   GET  /auth/v1/user                            -> resolve a token's user
#
# The gateway is stateless; the SessionStore decides what to do with the
# tokens it returns.
# =============================================================================

import logging
from typing import Any, Callable

from core.models.credential import Credential
from lib.remote_client import RemoteClient
from lib.utils import epoch_seconds

logger = logging.getLogger(__name__)

TOKEN_PATH = "/auth/v1/token"
LOGOUT_PATH = "/auth/v1/logout"
USER_PATH = "/auth/v1/user"


class AuthClient:
    """
    Token endpoints of the hosted auth service.

    Args:
        client: RemoteClient bound to the service URL (sends the apikey header)
        clock: Returns epoch seconds; used to compute absolute expiry
    """

    def __init__(self, client: RemoteClient, clock: Callable[[], float] = epoch_seconds):
        self._client = client
        self._clock = clock

    async def sign_in_with_password(self, email: str, password: str) -> Credential:
        """
        Exchange email/password for a Credential.

        Raises:
            RemoteError: 400 on bad credentials
            TransportError: If the service is unreachable
        """
        response = await self._client.send(
            "POST",
            TOKEN_PATH,
            params={"grant_type": "password"},
            body={"email": email, "password": password},
        )
        logger.info(f"Signed in as {email}")
        return Credential.from_token_response(response.body or {}, now=self._clock())

    async def refresh(self, refresh_token: str) -> Credential:
        """Exchange a refresh token for a new Credential."""
        response = await self._client.send(
            "POST",
            TOKEN_PATH,
            params={"grant_type": "refresh_token"},
            body={"refresh_token": refresh_token},
        )
        return Credential.from_token_response(response.body or {}, now=self._clock())

    async def sign_out(self, access_token: str) -> None:
        await self._client.send(
            "POST",
            LOGOUT_PATH,
            headers={"Authorization": f"Bearer {access_token}"},
        )

    async def get_user(self, access_token: str) -> dict[str, Any]:
        """
        Resolve the user an access token belongs to.

        Raises:
            RemoteError: 401/403 if the token is invalid or expired
        """
        response = await self._client.send(
            "GET",
            USER_PATH,
            headers={"Authorization": f"Bearer {access_token}"},
        )
        return response.body or {}
