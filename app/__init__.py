# =============================================================================
# app/ - Application Package
# =============================================================================
# This package wires the application together:
# - config.py: Environment variable loading and settings
# - context.py: AppContext, the per-instance service container
# - main.py: FastAPI entry point, middleware setup, error handlers
# - auth/: Bearer-token verification for the backend API
# - routers/: API endpoint definitions organized by feature
#
# The app layer is thin - it handles configuration and HTTP concerns and
# delegates data and session work to the lib/ package.
# =============================================================================
