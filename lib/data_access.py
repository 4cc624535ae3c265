# =============================================================================
# lib/data_access.py - Data Access Façade
# =============================================================================
# The one abstraction every package uses to read and write remote records.
#
# Five verbs over named collections:
#   select(collection, query)              -> list of records ([] on no match)
#   select_one(collection, query, must_exist) -> record | None | NotFoundError
#   insert(collection, record)             -> record as stored by the service
#   update(collection, query, changes)     -> number of rows updated
#   delete(collection, query)              -> number of rows deleted
#
# Callers depend on the DataAccess protocol; LiveDataAccess talks to the
# hosted REST endpoint, lib.testing.ScriptedDataAccess is the test double.
#
# Auth rules (LiveDataAccess):
# - The credential is resolved before the request is sent.
# - Collections outside `public_collections` need a session; without one
#   the verb raises UnauthenticatedError and nothing is sent.
# - A 401 on an authenticated call triggers one session refresh and one
#   retry. A second 401 raises UnauthenticatedError.
# - Transport and other remote errors propagate unchanged; insert is not
#   idempotent, so blind retries are the caller's call.
# =============================================================================

import logging
from typing import Any, Iterable, Protocol, runtime_checkable

from core.models.credential import Credential
from core.models.query import Query
from lib.errors import NotFoundError, RemoteError, UnauthenticatedError
from lib.remote_client import RemoteClient, RemoteResponse
from lib.session_store import SessionStore

logger = logging.getLogger(__name__)

Record = dict[str, Any]

REST_PREFIX = "/rest/v1"


@runtime_checkable
class DataAccess(Protocol):
    """Uniform CRUD verbs over remote collections."""

    async def select(self, collection: str, query: Query | None = None) -> list[Record]: ...

    async def select_one(
        self,
        collection: str,
        query: Query | None = None,
        *,
        must_exist: bool = False,
    ) -> Record | None: ...

    async def insert(self, collection: str, record: Record) -> Record: ...

    async def update(self, collection: str, query: Query, changes: Record) -> int: ...

    async def delete(self, collection: str, query: Query) -> int: ...


class LiveDataAccess:
    """
    DataAccess backed by the hosted REST endpoint.

    Args:
        client: RemoteClient bound to the service URL
        session: SessionStore providing the credential
        anon_key: Public key used as bearer for anonymous reads
        public_collections: Collections that may be used without a session

    Example:
        rows = await data.select("blog_posts", Query().eq("published", True))
        post = await data.select_one("blog_posts", Query().eq("slug", slug), must_exist=True)
    """

    def __init__(
        self,
        client: RemoteClient,
        session: SessionStore,
        anon_key: str,
        public_collections: Iterable[str] = (),
    ):
        self._client = client
        self._session = session
        self._anon_key = anon_key
        self.public_collections = frozenset(public_collections)

    # -------------------------------------------------------------------------
    # Verbs
    # -------------------------------------------------------------------------

    async def select(self, collection: str, query: Query | None = None) -> list[Record]:
        query = query or Query()
        response = await self._dispatch(collection, "GET", params=query.to_params())
        rows = response.body or []
        logger.debug(f"Selected {len(rows)} rows from {collection}")
        return list(rows)

    async def select_one(
        self,
        collection: str,
        query: Query | None = None,
        *,
        must_exist: bool = False,
    ) -> Record | None:
        """
        Fetch the first matching record.

        Raises:
            NotFoundError: If nothing matches and `must_exist` is set
        """
        query = (query or Query()).limit_to(1)
        rows = await self.select(collection, query)
        if rows:
            return rows[0]
        if must_exist:
            raise NotFoundError(collection, query)
        return None

    async def insert(self, collection: str, record: Record) -> Record:
        """Insert one record; returns it with server-assigned fields populated."""
        response = await self._dispatch(
            collection,
            "POST",
            params=[("select", "*")],
            body=record,
            prefer="return=representation",
        )
        rows = response.body or []
        if isinstance(rows, list):
            # Row-level policies may hide the inserted row from the caller
            return rows[0] if rows else dict(record)
        return rows

    async def update(self, collection: str, query: Query, changes: Record) -> int:
        response = await self._dispatch(
            collection,
            "PATCH",
            params=_filter_params(query),
            body=changes,
            prefer="return=representation",
        )
        count = _row_count(response)
        logger.debug(f"Updated {count} rows in {collection}")
        return count

    async def delete(self, collection: str, query: Query) -> int:
        response = await self._dispatch(
            collection,
            "DELETE",
            params=_filter_params(query),
            prefer="return=representation",
        )
        count = _row_count(response)
        logger.debug(f"Deleted {count} rows from {collection}")
        return count

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def requires_auth(self, collection: str) -> bool:
        return collection not in self.public_collections

    async def _resolve_credential(self, collection: str) -> Credential | None:
        if not self.requires_auth(collection) and self._session.get_credential() is None:
            return None
        try:
            return await self._session.refresh_if_needed()
        except UnauthenticatedError:
            if self.requires_auth(collection):
                logger.debug(f"No session for authenticated collection {collection}")
                raise
            return None

    async def _dispatch(
        self,
        collection: str,
        method: str,
        *,
        params: list[tuple[str, str]] | None = None,
        body: Any = None,
        prefer: str | None = None,
    ) -> RemoteResponse:
        credential = await self._resolve_credential(collection)

        try:
            return await self._send(collection, method, credential, params, body, prefer)
        except RemoteError as e:
            if e.status_code != 401 or credential is None:
                raise
            logger.info(f"{method} {collection} rejected (401); refreshing session and retrying once")

        credential = await self._session.refresh(stale=credential)

        try:
            return await self._send(collection, method, credential, params, body, prefer)
        except RemoteError as e:
            if e.status_code == 401:
                raise UnauthenticatedError(
                    "Request rejected after session refresh",
                    collection=collection,
                ) from e
            raise

    async def _send(
        self,
        collection: str,
        method: str,
        credential: Credential | None,
        params: list[tuple[str, str]] | None,
        body: Any,
        prefer: str | None,
    ) -> RemoteResponse:
        headers = {
            "Authorization": (
                credential.authorization_header if credential else f"Bearer {self._anon_key}"
            ),
        }
        if prefer:
            headers["Prefer"] = prefer
        return await self._client.send(
            method,
            f"{REST_PREFIX}/{collection}",
            headers=headers,
            body=body,
            params=params,
        )


def _filter_params(query: Query) -> list[tuple[str, str]]:
    return [f.render() for f in query.filters]


def _row_count(response: RemoteResponse) -> int:
    if isinstance(response.body, list):
        return len(response.body)
    # return=minimal with count=exact reports the total in Content-Range ("*/3")
    content_range = response.headers.get("content-range", "")
    total = content_range.rpartition("/")[2]
    return int(total) if total.isdigit() else 0
