# =============================================================================
# lib/remote_client.py - Remote Invocation Client
# =============================================================================
# Thin async HTTP transport shared by the data façade, the auth gateway, the
# backend API client and the page-view tracker.
#
# Base URL, default headers and timeout are fixed at construction; send()
# keeps no state between calls. Failures are translated into the error
# taxonomy:
#   - no response at all (timeout, reset, DNS) -> TransportError
#   - HTTP status >= 400                        -> RemoteError(status, body)
#
# Usage:
#   async with RemoteClient("https://xxx.supabase.co", {"apikey": key}) as client:
#       response = await client.send("GET", "/rest/v1/projects", params=[("select", "*")])
#       rows = response.body
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

import httpx

from lib.errors import RemoteError, TransportError

logger = logging.getLogger(__name__)

QueryParams = Sequence[tuple[str, str]] | Mapping[str, str]


@dataclass(frozen=True)
class RemoteResponse:
    """Decoded response: JSON body when the service sent JSON, else text."""

    status_code: int
    body: Any = None
    headers: Mapping[str, str] = field(default_factory=dict)


class RemoteClient:
    """
    Async HTTP client bound to one base URL.

    Args:
        base_url: Service root, e.g. https://xxx.supabase.co
        default_headers: Headers sent with every request (API key, etc.)
        timeout: Per-request timeout in seconds
        transport: Optional httpx transport (tests pass httpx.MockTransport)
    """

    def __init__(
        self,
        base_url: str,
        default_headers: Mapping[str, str] | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=dict(default_headers or {}),
            timeout=timeout,
            transport=transport,
        )

    async def send(
        self,
        method: str,
        path: str,
        *,
        headers: Mapping[str, str] | None = None,
        body: Any = None,
        params: QueryParams | None = None,
    ) -> RemoteResponse:
        """
        Issue one request.

        Args:
            method: HTTP verb
            path: Path relative to the base URL (an absolute URL is used as-is)
            headers: Per-call headers, merged over the defaults
            body: JSON-serializable request body
            params: Query parameters; a list of pairs allows repeated keys

        Returns:
            RemoteResponse with the decoded body

        Raises:
            TransportError: If no response was received
            RemoteError: If the service answered with status >= 400
        """
        url = path if path.startswith(("http://", "https://")) else f"/{path.lstrip('/')}"

        try:
            response = await self._client.request(
                method,
                url,
                headers=headers,
                json=body,
                params=params,
            )
        except httpx.TimeoutException as e:
            logger.warning(f"{method} {url} timed out: {e}")
            raise TransportError(f"Request timed out: {e}", method=method, url=url) from e
        except httpx.RequestError as e:
            logger.warning(f"{method} {url} failed: {e}")
            raise TransportError(f"Request failed: {e}", method=method, url=url) from e

        payload = _decode(response)

        if response.status_code >= 400:
            logger.debug(f"{method} {url} -> {response.status_code}")
            raise RemoteError(response.status_code, payload, method=method, url=url)

        logger.debug(f"{method} {url} -> {response.status_code}")
        return RemoteResponse(
            status_code=response.status_code,
            body=payload,
            headers=dict(response.headers),
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> RemoteClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


def _decode(response: httpx.Response) -> Any:
    if not response.content:
        return None
    if "json" in response.headers.get("content-type", ""):
        try:
            return response.json()
        except ValueError:
            pass
    return response.text
