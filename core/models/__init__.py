# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# - credential.py: Access/refresh token pair owned by the SessionStore
# - query.py: Immutable query descriptor (filters, order, pagination)
# - page_view.py: Navigation event sent to the analytics collector
# - session.py: Session state machine values
# =============================================================================

from .credential import Credential
from .page_view import PageViewEvent
from .query import Filter, FilterOp, Order, Query
from .session import SessionStatus

__all__ = [
    "Credential",
    "PageViewEvent",
    "Filter",
    "FilterOp",
    "Order",
    "Query",
    "SessionStatus",
]
