# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application.
# =============================================================================

import time
from typing import Any
from urllib.parse import urlparse


# =============================================================================
# Time / URL Utilities
# =============================================================================

def epoch_seconds() -> float:
    """Current wall-clock time as epoch seconds (the clock used for expiry)."""
    return time.time()


def project_ref(supabase_url: str) -> str:
    """
    Extract the project reference from a Supabase project URL.

    Example:
        project_ref("https://abcd1234.supabase.co")  # "abcd1234"
        project_ref("http://localhost:54321")        # "localhost"
    """
    host = urlparse(supabase_url).hostname or supabase_url
    return host.split(".")[0]


def redact(token: str | None, keep: int = 6) -> str:
    """Shorten a token for log output."""
    if not token:
        return "<none>"
    return f"{token[:keep]}..." if len(token) > keep else "***"


# =============================================================================
# Base Error Class
# =============================================================================

class ApplicationError(Exception):
    """
    Base error class for application-specific errors.

    Provides actionable error messages following the principle:
    "Errors should tell HOW to fix, not just WHAT failed."

    Attributes:
        code: Error code for categorization
        message: Human-readable error message
        suggestion: Actionable suggestion for fixing the error
        details: Additional context for debugging
        status_code: HTTP status used when the error reaches the API layer

    Example:
        class MyServiceError(ApplicationError):
            def __init__(self, message: str, **kwargs):
                super().__init__(message, code="MY_SERVICE_ERROR", **kwargs)
    """

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "APPLICATION_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f"\n  Suggestion: {self.suggestion}"
        return result

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for API responses."""
        return {
            "code": self.code,
            "message": self.message,
            "suggestion": self.suggestion,
            "details": self.details,
        }
