# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# FastAPI routers organized by feature:
# - health.py: Health, readiness and keep-alive endpoints
#
# Auth routes live in app/auth/routes.py. Each router is mounted in main.py
# with a URL prefix.
# =============================================================================

from . import health

__all__ = [
    "health",
]
