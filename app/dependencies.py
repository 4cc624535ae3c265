# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for the per-instance AppContext built in the
# application lifespan. Tests override `get_context` with their own context.
# =============================================================================

from typing import Annotated

from fastapi import Depends, Request

from app.context import AppContext
from lib.data_access import DataAccess


def get_context(request: Request) -> AppContext:
    """Return the AppContext stored on the application at startup."""
    return request.app.state.context


# Type alias for dependency injection
ContextDep = Annotated[AppContext, Depends(get_context)]


def get_data_access(context: ContextDep) -> DataAccess:
    """The data façade of the running context."""
    return context.data


DataAccessDep = Annotated[DataAccess, Depends(get_data_access)]
