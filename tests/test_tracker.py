# =============================================================================
# tests/test_tracker.py - Page-View Tracker Tests
# =============================================================================

import asyncio
import json
import re

import httpx
import pytest

from lib.remote_client import RemoteClient
from lib.tracker import PageViewTracker, new_session_id
from tests.conftest import FakeClock

TRACK_PATH = "/api/analytics/track"


@pytest.fixture
def collector_client(service) -> RemoteClient:
    return RemoteClient("https://api.test.local", transport=service.transport)


@pytest.fixture
def monotonic() -> FakeClock:
    return FakeClock(100.0)


@pytest.fixture
def tracker(collector_client, monotonic) -> PageViewTracker:
    return PageViewTracker(
        collector_client,
        TRACK_PATH,
        session_id="session_1_test",
        clock=monotonic,
    )


def sent_payloads(service) -> list[dict]:
    return [json.loads(r.content) for r in service.calls("POST", TRACK_PATH)]


class TestOnNavigate:
    """Test navigation tracking."""

    @pytest.mark.asyncio
    async def test_navigation_is_sent(self, tracker, service):
        service.on("POST", TRACK_PATH, httpx.Response(200, json={"success": True}))

        tracker.on_navigate("/blog", title="Blog", referrer="https://example.com")
        await tracker.flush()

        [payload] = sent_payloads(service)
        assert payload["page_path"] == "/blog"
        assert payload["page_title"] == "Blog"
        assert payload["referrer"] == "https://example.com"
        assert payload["session_id"] == "session_1_test"
        assert "timestamp" in payload

    @pytest.mark.asyncio
    async def test_rerender_does_not_fire_twice(self, tracker, service):
        """Test repeated notifications for the same path produce one event."""
        service.on("POST", TRACK_PATH, httpx.Response(200))

        tracker.on_navigate("/projects")
        tracker.on_navigate("/projects")
        tracker.on_navigate("/projects")
        await tracker.flush()

        assert len(sent_payloads(service)) == 1

    @pytest.mark.asyncio
    async def test_returning_to_a_page_is_a_new_navigation(self, tracker, service):
        service.on("POST", TRACK_PATH, httpx.Response(200))

        for path in ("/", "/blog", "/"):
            tracker.on_navigate(path)
        await tracker.flush()

        assert [p["page_path"] for p in sent_payloads(service)] == ["/", "/blog", "/"]

    @pytest.mark.asyncio
    async def test_collector_unreachable_is_swallowed(self, tracker, service):
        """Test failures neither raise nor stop later navigations."""
        service.on(
            "POST",
            TRACK_PATH,
            httpx.ConnectError("collector down"),
            httpx.Response(500, json={"error": "boom"}),
            httpx.Response(200),
        )

        tracker.on_navigate("/a")
        await tracker.flush()
        tracker.on_navigate("/b")
        await tracker.flush()
        tracker.on_navigate("/c")
        await tracker.flush()

        assert len(service.calls("POST", TRACK_PATH)) == 3

    @pytest.mark.asyncio
    async def test_does_not_block_on_slow_collector(self, tracker, service):
        release = asyncio.Event()

        async def slow(request):
            await release.wait()
            return httpx.Response(200)

        service.on("POST", TRACK_PATH, slow)

        assert tracker.on_navigate("/slow") is None
        tracker.on_navigate("/next")
        assert tracker.current_path == "/next"

        release.set()
        await tracker.flush()
        assert len(service.calls("POST", TRACK_PATH)) == 2

    def test_without_event_loop_is_dropped(self, tracker, service):
        tracker.on_navigate("/offline")

        assert service.requests == []
        assert tracker.current_path == "/offline"

    @pytest.mark.asyncio
    async def test_empty_path_ignored(self, tracker, service):
        tracker.on_navigate("")
        await tracker.flush()

        assert service.requests == []


class TestOnLeave:
    """Test time-on-page events."""

    @pytest.mark.asyncio
    async def test_long_visit_reports_duration(self, tracker, service, monotonic):
        service.on("POST", TRACK_PATH, httpx.Response(200))

        tracker.on_navigate("/blog/post-1")
        monotonic.advance(42)
        tracker.on_leave()
        await tracker.flush()

        payloads = sent_payloads(service)
        assert len(payloads) == 2
        assert payloads[1]["page_path"] == "/blog/post-1"
        assert payloads[1]["visit_duration"] == 42

    @pytest.mark.asyncio
    async def test_short_visit_not_reported(self, tracker, service, monotonic):
        service.on("POST", TRACK_PATH, httpx.Response(200))

        tracker.on_navigate("/")
        monotonic.advance(3)
        tracker.on_leave()
        await tracker.flush()

        assert len(sent_payloads(service)) == 1

    def test_leave_before_navigation_is_noop(self, tracker, service):
        tracker.on_leave()

        assert service.requests == []


def test_session_id_format():
    assert re.fullmatch(r"session_\d+_[0-9a-f]{9}", new_session_id())
