# =============================================================================
# lib/session_store.py - Session Store
# =============================================================================
# Owns the single live Credential of an application instance.
#
# Responsibilities:
# - hand out the current Credential, refreshing it proactively once its
#   remaining validity drops below a safety margin
# - collapse concurrent refreshes into one in-flight attempt whose outcome
#   (new Credential or error) every waiter observes
# - persist the Credential to a storage slot so it survives restarts
# - clear the session when the refresh token is rejected
#
# State machine (see core.models.session.SessionStatus):
#   UNAUTHENTICATED -> AUTHENTICATED            sign_in / restore
#   AUTHENTICATED -> REFRESHING -> AUTHENTICATED refresh
#   AUTHENTICATED | REFRESHING -> UNAUTHENTICATED sign_out / clear / refresh rejected
#
# Sign-out while a refresh is in flight: the refresh result is discarded and
# its waiters get UnauthenticatedError. A generation counter, bumped on every
# sign-in and clear, detects this. Sign-in or sign-out also detaches the old
# refresh, so calls made afterwards never join it.
# =============================================================================

import asyncio
import logging
from typing import Callable

from core.models.credential import Credential
from core.models.session import SessionStatus
from lib.auth_client import AuthClient
from lib.errors import RemoteError, SessionExpiredError, TransportError, UnauthenticatedError
from lib.storage import CredentialStorage, MemoryStorage
from lib.utils import epoch_seconds, redact

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_MARGIN = 60.0


class SessionStore:
    """
    Holds, persists and refreshes the session Credential.

    Args:
        auth: Gateway to the hosted auth endpoints
        storage: Persistence slot (defaults to in-memory)
        storage_key: Key of the slot entry, e.g. "sb-<ref>-auth-token"
        refresh_margin: Seconds before expiry at which to refresh
        clock: Returns epoch seconds; injectable for tests

    Example:
        store = SessionStore(auth, FileStorage("~/.portfolio/session.json"), "sb-abc-auth-token")
        store.restore()
        credential = await store.refresh_if_needed()
    """

    def __init__(
        self,
        auth: AuthClient,
        storage: CredentialStorage | None = None,
        storage_key: str = "auth-token",
        refresh_margin: float = DEFAULT_REFRESH_MARGIN,
        clock: Callable[[], float] = epoch_seconds,
    ):
        self._auth = auth
        self._storage = storage if storage is not None else MemoryStorage()
        self._storage_key = storage_key
        self._margin = refresh_margin
        self._clock = clock

        self._credential: Credential | None = None
        self._refresh_task: asyncio.Task | None = None
        self._generation = 0

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def status(self) -> SessionStatus:
        if self._refresh_task is not None and not self._refresh_task.done():
            return SessionStatus.REFRESHING
        if self._credential is not None:
            return SessionStatus.AUTHENTICATED
        return SessionStatus.UNAUTHENTICATED

    @property
    def refresh_margin(self) -> float:
        return self._margin

    def get_credential(self) -> Credential | None:
        """Current Credential, or None when signed out. Never refreshes."""
        return self._credential

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def persist(self, credential: Credential) -> None:
        """Replace the live Credential and write it to the storage slot."""
        self._credential = credential
        self._storage.set_item(self._storage_key, credential.model_dump_json())
        logger.debug(f"Persisted credential {redact(credential.access_token)}")

    def _start_generation(self) -> None:
        # Detach any in-flight refresh: its current waiters still get its
        # outcome, new callers start from the new session.
        self._generation += 1
        self._refresh_task = None

    def clear(self) -> None:
        """Drop the Credential locally and from storage."""
        self._start_generation()
        self._credential = None
        self._storage.remove_item(self._storage_key)
        logger.debug("Cleared session credential")

    def restore(self) -> Credential | None:
        """
        Load a previously persisted Credential.

        An unreadable entry is removed and treated as signed out. An expired
        entry is still restored; the next call refreshes it (or reports
        SessionExpiredError if the refresh token is no longer valid).
        """
        raw = self._storage.get_item(self._storage_key)
        if not raw:
            return None
        try:
            credential = Credential.model_validate_json(raw)
        except ValueError as e:
            logger.warning(f"Discarding corrupt persisted session: {e}")
            self._storage.remove_item(self._storage_key)
            return None

        self._credential = credential
        logger.info("Restored persisted session")
        return credential

    # -------------------------------------------------------------------------
    # Sign in / out
    # -------------------------------------------------------------------------

    async def sign_in(self, email: str, password: str) -> Credential:
        """
        Authenticate with email/password and store the new Credential.

        Raises:
            RemoteError: If the service rejects the credentials
            TransportError: If the service is unreachable
            UnauthenticatedError: If the token response is unusable
        """
        try:
            credential = await self._auth.sign_in_with_password(email, password)
        except ValueError as e:
            logger.error(f"Sign-in returned an unusable token response: {e}")
            raise UnauthenticatedError("Sign-in returned an unusable token response") from e
        self._start_generation()
        self.persist(credential)
        return credential

    async def sign_out(self) -> None:
        """
        Revoke the session remotely (best effort) and always clear it locally.
        """
        credential = self._credential
        try:
            if credential is not None:
                await self._auth.sign_out(credential.access_token)
        except (RemoteError, TransportError) as e:
            logger.warning(f"Remote sign-out failed, clearing local session anyway: {e}")
        finally:
            self.clear()

    # -------------------------------------------------------------------------
    # Refresh
    # -------------------------------------------------------------------------

    async def refresh_if_needed(self) -> Credential:
        """
        Return a Credential that is valid for at least the refresh margin.

        Waits for an in-flight refresh rather than handing out the old token.

        Raises:
            UnauthenticatedError: If there is no session
            SessionExpiredError: If a needed refresh was rejected
        """
        if self._refresh_task is not None:
            return await self._join_refresh()

        credential = self._credential
        if credential is None:
            raise UnauthenticatedError()

        if not credential.needs_refresh(self._clock(), self._margin):
            return credential

        logger.debug(
            f"Credential expires in {credential.seconds_remaining(self._clock()):.0f}s, refreshing"
        )
        return await self.refresh()

    async def refresh(self, stale: Credential | None = None) -> Credential:
        """
        Refresh the Credential, sharing one attempt among concurrent callers.

        Args:
            stale: The Credential the caller saw rejected. If the store already
                holds a different one, it is returned without a new refresh.

        Raises:
            UnauthenticatedError: If there is no session (or it was signed out
                while the refresh was in flight)
            SessionExpiredError: If the refresh token was rejected
            TransportError: If the auth service is unreachable
        """
        if self._refresh_task is not None:
            return await self._join_refresh()

        credential = self._credential
        if credential is None:
            raise UnauthenticatedError("No session to refresh")
        if stale is not None and credential != stale:
            return credential

        task = asyncio.create_task(self._run_refresh(credential, self._generation))
        task.add_done_callback(self._on_refresh_done)
        self._refresh_task = task
        return await self._join_refresh()

    async def _join_refresh(self) -> Credential:
        # shield: a cancelled caller must not cancel the refresh other callers wait on
        return await asyncio.shield(self._refresh_task)

    def _on_refresh_done(self, task: asyncio.Task) -> None:
        if self._refresh_task is task:
            self._refresh_task = None
        if not task.cancelled():
            # Mark the exception retrieved even if every waiter was cancelled
            task.exception()

    async def _run_refresh(self, credential: Credential, generation: int) -> Credential:
        try:
            new_credential = await self._auth.refresh(credential.refresh_token)
        except RemoteError as e:
            if not e.is_client_error:
                raise
            logger.warning(f"Refresh token rejected ({e.status_code}); session cleared")
            if generation == self._generation:
                self.clear()
            raise SessionExpiredError(status_code=e.status_code) from e
        except ValueError as e:
            logger.warning(f"Refresh returned an unusable token response; session cleared: {e}")
            if generation == self._generation:
                self.clear()
            raise SessionExpiredError("Refresh returned an unusable token response") from e

        if generation != self._generation:
            logger.info("Session changed during refresh; discarding refreshed credential")
            raise UnauthenticatedError("Session was signed out during refresh")

        self.persist(new_credential)
        logger.info("Session refreshed")
        return new_credential
