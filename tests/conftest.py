# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - An in-memory ERP (tests/fake_erp.py) behind httpx.MockTransport
# - A TestClient whose routes talk to that fake ERP
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("ERP_API_URL", "https://erp.test")
os.environ.setdefault("ERP_API_KEY", "test-key")
os.environ.setdefault("ERP_API_SECRET", "test-secret")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import httpx
import pytest
from fastapi import Request
from fastapi.testclient import TestClient

from app.config import Settings, get_settings
from app.dependencies import RequestContext, get_request_context
from app.main import app
from lib.erp_client import ERPClient
from tests.fake_erp import FakeERP

TEST_ERP_URL = "https://erp.test"


# =============================================================================
# ERP Fixtures
# =============================================================================

@pytest.fixture
def fake_erp():
    """Empty in-memory ERP with a logged-in Administrator."""
    return FakeERP()


@pytest.fixture
def erp_client(fake_erp):
    """ERPClient wired to the fake ERP."""
    return ERPClient(
        base_url=TEST_ERP_URL,
        api_key="test-key",
        api_secret="test-secret",
        transport=httpx.MockTransport(fake_erp.handler),
    )


# =============================================================================
# API Fixtures
# =============================================================================

def _override_context(settings: Settings, client: ERPClient | None):
    def override(request: Request) -> RequestContext:
        return RequestContext(
            settings=settings,
            client=client,
            endpoint=f"{request.method} {request.url.path}",
        )

    return override


@pytest.fixture
def api_client(erp_client):
    """TestClient whose routes use the fake ERP."""
    app.dependency_overrides[get_request_context] = _override_context(get_settings(), erp_client)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def unconfigured_client():
    """TestClient for a gateway started without any ERP variables."""
    settings = Settings(_env_file=None, ERP_API_URL="", ERP_API_KEY="", ERP_API_SECRET="")
    app.dependency_overrides[get_request_context] = _override_context(settings, None)
    yield TestClient(app)
    app.dependency_overrides.clear()


# =============================================================================
# Sample Documents
# =============================================================================

@pytest.fixture
def sample_invoice_payload():
    """Sales invoice request with one line of 2 x 50."""
    return {
        "customer": "Abebe Bakery",
        "company": "Test Company",
        "posting_date": "2024-01-15",
        "items": [{"item_code": "bread", "qty": 2, "rate": 50}],
    }


@pytest.fixture
def sample_customer_doc():
    return {
        "name": "Abebe Bakery",
        "customer_name": "Abebe Bakery",
        "customer_type": "Company",
        "customer_group": "Commercial",
        "territory": "Addis Ababa",
        "default_currency": "ETB",
        "credit_limit": 5000,
        "email_id": None,
    }
