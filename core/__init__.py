# =============================================================================
# core/ - Domain Package
# =============================================================================
# This package contains framework-agnostic domain types:
# - models/: Pydantic schemas (Credential, Query, PageViewEvent, SessionStatus)
#
# Code in this package should NOT import from FastAPI or do any I/O.
# =============================================================================
