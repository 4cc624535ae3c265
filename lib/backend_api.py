# =============================================================================
# lib/backend_api.py - Backend API Client
# =============================================================================
# Direct calls to the application's own backend, which wraps its payloads in
# a `{"success": bool, "data": ...}` envelope.
# =============================================================================

import logging
from typing import Any

from lib.errors import RemoteError, TransportError
from lib.remote_client import RemoteClient
from lib.session_store import SessionStore

logger = logging.getLogger(__name__)

MAINTENANCE_FLAG = "maintenance"


class BackendApi:
    """
    Client for the backend API.

    The bearer token of the current session is attached when one exists;
    backend endpoints decide for themselves whether they need it.
    """

    def __init__(self, client: RemoteClient, session: SessionStore | None = None):
        self._client = client
        self._session = session

    def _auth_headers(self) -> dict[str, str]:
        credential = self._session.get_credential() if self._session else None
        return {"Authorization": credential.authorization_header} if credential else {}

    async def get(self, path: str, params: dict[str, str] | None = None) -> Any:
        """GET a path and unwrap the `data` member of the envelope."""
        response = await self._client.send(
            "GET",
            path,
            headers=self._auth_headers(),
            params=params,
        )
        body = response.body
        if isinstance(body, dict) and "data" in body:
            return body["data"]
        return body

    async def list_resource(self, name: str) -> list[dict[str, Any]]:
        """
        Fetch a resource listing, e.g. "projects", "blog", "work-history".

        Raises:
            TransportError / RemoteError: Propagated for the caller to handle
        """
        data = await self.get(f"/{name.strip('/')}")
        return list(data or [])

    async def maintenance_mode(self) -> bool:
        """
        Whether the site is in maintenance mode.

        The flag defaults to off when it cannot be read, so a backend outage
        never locks visitors out.
        """
        try:
            response = await self._client.send("GET", f"/feature-flags/{MAINTENANCE_FLAG}")
        except (TransportError, RemoteError) as e:
            logger.warning(f"Could not read maintenance flag, assuming off: {e}")
            return False
        body = response.body if isinstance(response.body, dict) else {}
        return bool(body.get("maintenance_mode", False))
