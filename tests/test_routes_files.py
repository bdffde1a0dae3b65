# =============================================================================
# tests/test_routes_files.py - File Upload Endpoint Tests
# =============================================================================
# Run with: pytest tests/test_routes_files.py -v
# =============================================================================

import pytest
from fastapi import Request
from fastapi.testclient import TestClient

from app.config import get_settings
from app.dependencies import RequestContext, get_request_context
from app.main import app

PDF = ("receipt.pdf", b"%PDF-1.4 receipt", "application/pdf")


@pytest.fixture
def small_limit_client(erp_client):
    """TestClient for a gateway that accepts uploads of at most 1MB."""
    settings = get_settings().model_copy(update={"MAX_UPLOAD_SIZE_MB": 1})

    def override(request: Request) -> RequestContext:
        return RequestContext(settings=settings, client=erp_client, endpoint=request.url.path)

    app.dependency_overrides[get_request_context] = override
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestUpload:
    def test_upload_and_attach(self, api_client, fake_erp):
        # Act
        response = api_client.post(
            "/api/files",
            files={"file": PDF},
            data={"doctype": "Sales Invoice", "docname": "SINV-1", "is_private": "true"},
        )

        # Assert
        stored = response.json()["data"]["file"]
        assert response.status_code == 200
        assert stored["file_url"] == "/private/files/receipt.pdf"
        assert stored["attached_to_doctype"] == "Sales Invoice"
        assert stored["attached_to_name"] == "SINV-1"
        assert len(fake_erp.calls_to("upload_file")) == 1

    def test_public_unattached_upload(self, api_client):
        response = api_client.post("/api/files", files={"file": PDF})

        stored = response.json()["data"]["file"]
        assert stored["file_url"] == "/files/receipt.pdf"
        assert stored["is_private"] == 0

    def test_doctype_without_docname(self, api_client, fake_erp):
        response = api_client.post("/api/files", files={"file": PDF}, data={"doctype": "Sales Invoice"})

        assert response.status_code == 400
        assert fake_erp.calls_to("upload_file") == []

    def test_missing_file(self, api_client):
        response = api_client.post("/api/files", data={"doctype": "Sales Invoice", "docname": "SINV-1"})

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_too_large(self, small_limit_client, fake_erp):
        big = ("scan.png", b"0" * (1024 * 1024 + 1), "image/png")

        response = small_limit_client.post("/api/files", files={"file": big})

        body = response.json()
        assert response.status_code == 413
        assert body["details"]["max_size_mb"] == 1
        assert fake_erp.calls_to("upload_file") == []
