# =============================================================================
# core/models/page_view.py - Page-View Event
# =============================================================================
# One navigation observed by the PageViewTracker. Created, sent once, and
# dropped; nothing is persisted locally.
# =============================================================================

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PageViewEvent(BaseModel):
    """
    Payload POSTed to the analytics collector.

    `visit_duration` is only set for the time-on-page event sent when the
    user leaves a page.
    """

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., min_length=1)
    session_id: str = Field(..., min_length=1)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    title: str | None = None
    referrer: str | None = None
    visit_duration: int | None = Field(default=None, ge=0)

    def to_payload(self) -> dict[str, Any]:
        """Collector wire format (snake_case keys, ISO timestamp)."""
        payload: dict[str, Any] = {
            "page_path": self.path,
            "session_id": self.session_id,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.title:
            payload["page_title"] = self.title
        if self.referrer:
            payload["referrer"] = self.referrer
        if self.visit_duration is not None:
            payload["visit_duration"] = self.visit_duration
        return payload
