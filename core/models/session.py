# =============================================================================
# core/models/session.py - Session Status
# =============================================================================
# The SessionStore is a small state machine over these values.
# =============================================================================

from enum import Enum


class SessionStatus(str, Enum):
    """
    Possible states of the authenticated session.

    - unauthenticated: no credential (initial and resting state)
    - authenticated: a credential is available for outgoing calls
    - refreshing: a token refresh is in flight; callers wait for it

    Flow: unauthenticated -> authenticated -> refreshing -> authenticated
          authenticated | refreshing -> unauthenticated (sign-out / refresh failure)
    """
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    REFRESHING = "refreshing"
