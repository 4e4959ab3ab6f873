# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Transformo API:
# - test_models.py / test_exceptions.py: schemas and error responses
# - test_content_status.py, test_file_validation.py, ...: lib/ helpers
# - test_*_service.py, test_callback.py: service logic on a fake Supabase
# - test_tasks.py: Celery tasks run in-process
# - test_routes.py: HTTP endpoints through TestClient
#
# Run tests with: pytest
# =============================================================================
