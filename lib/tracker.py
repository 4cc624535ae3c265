# =============================================================================
# lib/tracker.py - Page-View Tracker
# =============================================================================
# Forwards navigation events to the analytics collector.
#
# - on_navigate() never blocks and never raises: the POST is scheduled on
#   the running event loop and failures are logged and dropped.
# - A navigation to the path already being viewed (a re-render) is ignored,
#   so each distinct navigation produces at most one event.
# - on_leave() reports time-on-page for visits longer than a few seconds.
# =============================================================================

import asyncio
import logging
import time
import uuid
from typing import Callable

from core.models.page_view import PageViewEvent
from lib.errors import RemoteError, TransportError
from lib.remote_client import RemoteClient

logger = logging.getLogger(__name__)

MIN_VISIT_SECONDS = 5


def new_session_id() -> str:
    """Analytics session id, e.g. 'session_1718000000000_3f9a1c2b7'."""
    return f"session_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


class PageViewTracker:
    """
    Fire-and-forget page-view reporting.

    Args:
        client: RemoteClient used for the POST
        endpoint: Collector URL (absolute, or relative to the client's base URL)
        session_id: Analytics session id; generated when omitted
        clock: Monotonic seconds, for visit durations
        min_visit_seconds: Shorter visits send no duration event

    Example:
        tracker.on_navigate("/blog")
        tracker.on_navigate("/blog")       # re-render, ignored
        tracker.on_navigate("/projects")
        await tracker.flush()
    """

    def __init__(
        self,
        client: RemoteClient,
        endpoint: str,
        session_id: str | None = None,
        clock: Callable[[], float] = time.monotonic,
        min_visit_seconds: float = MIN_VISIT_SECONDS,
    ):
        self._client = client
        self._endpoint = endpoint
        self.session_id = session_id or new_session_id()
        self._clock = clock
        self._min_visit = min_visit_seconds

        self._current_path: str | None = None
        self._entered_at: float | None = None
        self._pending: set[asyncio.Task] = set()

    @property
    def current_path(self) -> str | None:
        return self._current_path

    def on_navigate(self, path: str, title: str | None = None, referrer: str | None = None) -> None:
        """Record a navigation. Returns immediately; never raises."""
        if not path or path == self._current_path:
            return

        self._current_path = path
        self._entered_at = self._clock()
        self._emit(
            PageViewEvent(
                path=path,
                session_id=self.session_id,
                title=title,
                referrer=referrer,
            )
        )

    def on_leave(self) -> None:
        """Report time spent on the current page (tab hidden / app closing)."""
        if self._current_path is None or self._entered_at is None:
            return

        duration = round(self._clock() - self._entered_at)
        self._entered_at = self._clock()
        if duration <= self._min_visit:
            return

        self._emit(
            PageViewEvent(
                path=self._current_path,
                session_id=self.session_id,
                visit_duration=duration,
            )
        )

    async def flush(self) -> None:
        """Wait for every scheduled send to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _emit(self, event: PageViewEvent) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(f"No running event loop; page view for {event.path} dropped")
            return

        task = loop.create_task(self._send(event))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _send(self, event: PageViewEvent) -> None:
        try:
            await self._client.send("POST", self._endpoint, body=event.to_payload())
            logger.debug(f"Tracked page view {event.path}")
        except (TransportError, RemoteError) as e:
            logger.debug(f"Analytics tracking failed for {event.path}: {e}")
        except Exception as e:
            logger.warning(f"Unexpected analytics error for {event.path}: {e}")
