# =============================================================================
# tests/ - Test Suite
# =============================================================================
# - test_models.py: Credential, Query, PageViewEvent and Settings
# - test_remote_client.py: Transport error translation
# - test_session_store.py: Refresh policy, refresh collapsing, persistence
# - test_data_access.py: Façade verbs, auth rules, refresh-and-retry
# - test_tracker.py: Page-view tracking
# - test_testing.py: The scripted DataAccess double
# - test_api.py: Backend API endpoints
#
# Run tests with: pytest
# =============================================================================
