# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the ERP Gateway:
# - fake_erp.py: In-memory Frappe site served through httpx.MockTransport
# - test_erp_client.py / test_error_mapping.py / test_handler.py: plumbing
# - test_document_service.py / test_hydration.py / test_reporting.py: services
# - test_mappers.py / test_config.py: pure helpers
# - test_routes_*.py: Endpoint tests through FastAPI's TestClient
#
# Run tests with: pytest
# =============================================================================
