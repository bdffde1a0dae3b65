# =============================================================================
# tests/test_erp_client.py - ERP Client Tests
# =============================================================================
# Error body parsing, query encoding and the request shapes the client sends
# to a Frappe site (checked against the in-memory ERP).
#
# Run with: pytest tests/test_erp_client.py -v
# =============================================================================

import asyncio
import json

import httpx
import pytest

from app.config import Settings
from app.exceptions import ConfigurationError
from lib.erp_client import ERPClient, ERPClientError, _encode_params, _parse_server_messages


# =============================================================================
# Error Parsing
# =============================================================================

class TestERPClientError:
    """Tests for ERPClientError.from_response()."""

    def test_server_messages_preferred(self):
        """The first decoded _server_messages entry becomes the message."""
        # Arrange: Frappe double-encodes _server_messages
        response = httpx.Response(417, json={
            "exc_type": "MandatoryError",
            "exception": "frappe.exceptions.MandatoryError: [Customer]: customer_name",
            "_server_messages": json.dumps([json.dumps({"message": "Customer Name is required"})]),
        })

        # Act
        error = ERPClientError.from_response(response)

        # Assert
        assert error.message == "Customer Name is required"
        assert error.http_status == 417
        assert error.exc_type == "MandatoryError"
        assert str(error) == "[417] Customer Name is required"

    def test_exception_text_fallback(self):
        response = httpx.Response(404, json={
            "exc_type": "DoesNotExistError",
            "exception": "frappe.exceptions.DoesNotExistError: Item x not found",
        })

        error = ERPClientError.from_response(response)

        assert error.message == "Item x not found"

    def test_html_body(self):
        """A proxy error page still produces a usable error."""
        response = httpx.Response(502, text="<html>Bad Gateway</html>")

        error = ERPClientError.from_response(response)

        assert error.http_status == 502
        assert error.message == "Bad Gateway"
        assert error.exc_type is None

    def test_to_cause_drops_empty_values(self):
        error = ERPClientError("x", http_status=404, exc_type="DoesNotExistError")

        assert error.to_cause() == {"httpStatus": 404, "excType": "DoesNotExistError"}

    def test_parse_server_messages_variants(self):
        assert _parse_server_messages(None) == []
        assert _parse_server_messages('["plain text"]') == ["plain text"]
        assert _parse_server_messages("not json") == ["not json"]


class TestEncodeParams:
    def test_encoding(self):
        encoded = _encode_params({
            "fields": ["name", "status"],
            "filters": {"name": "X"},
            "limit_page_length": 0,
            "order_by": None,
            "as_dict": True,
        })

        assert encoded == {
            "fields": '["name", "status"]',
            "filters": '{"name": "X"}',
            "limit_page_length": 0,
            "as_dict": 1,
        }


# =============================================================================
# Client Construction
# =============================================================================

class TestConstruction:
    def test_missing_settings(self):
        """Every missing variable is named."""
        with pytest.raises(ConfigurationError) as exc_info:
            ERPClient(base_url="https://erp.test", api_key="", api_secret="")

        assert exc_info.value.details["missing"] == ["ERP_API_KEY", "ERP_API_SECRET"]

    def test_from_settings(self):
        settings = Settings(
            _env_file=None,
            ERP_API_URL="https://erp.test/",
            ERP_API_KEY="k",
            ERP_API_SECRET="s",
        )

        client = ERPClient.from_settings(settings)

        assert client.base_url == "https://erp.test"
        assert client._http.headers["Authorization"] == "token k:s"
        asyncio.run(client.aclose())


# =============================================================================
# Requests
# =============================================================================

class TestRequests:
    """Request shapes, checked against the fake ERP."""

    def test_get_doc_quotes_names(self, fake_erp, erp_client):
        """Doctype and name are path-quoted (spaces, slashes)."""
        fake_erp.add("Sales Invoice", {"name": "SINV/2024/001", "customer": "C"})

        doc = asyncio.run(erp_client.db.get_doc("Sales Invoice", "SINV/2024/001"))

        assert doc["customer"] == "C"
        assert fake_erp.requests[0].url.raw_path.startswith(b"/api/resource/Sales%20Invoice/SINV%2F2024%2F001")

    def test_get_doc_list_params(self, fake_erp, erp_client):
        fake_erp.add("Lead", {"name": "L-1", "status": "Open"})
        fake_erp.add("Lead", {"name": "L-2", "status": "Converted"})

        rows = asyncio.run(erp_client.db.get_doc_list(
            "Lead", fields=["name", "status"], filters=[["status", "=", "Open"]], limit=10
        ))

        assert rows == [{"name": "L-1", "status": "Open"}]
        params = fake_erp.requests[0].url.params
        assert json.loads(params["filters"]) == [["status", "=", "Open"]]
        assert params["limit_page_length"] == "10"
        assert "order_by" not in params

    def test_error_raises_client_error(self, erp_client):
        with pytest.raises(ERPClientError) as exc_info:
            asyncio.run(erp_client.db.get_doc("Customer", "missing"))

        assert exc_info.value.http_status == 404
        assert exc_info.value.exc_type == "DoesNotExistError"

    def test_get_count(self, fake_erp, erp_client):
        fake_erp.add("Lead", {"status": "Open"})
        fake_erp.add("Lead", {"status": "Converted"})

        total = asyncio.run(erp_client.db.get_count("Lead"))
        converted = asyncio.run(erp_client.db.get_count("Lead", [["status", "=", "Converted"]]))

        assert (total, converted) == (2, 1)

    def test_logged_in_user(self, fake_erp, erp_client):
        assert asyncio.run(erp_client.auth.get_logged_in_user()) == "Administrator"

        fake_erp.user = None
        assert asyncio.run(erp_client.auth.get_logged_in_user()) is None

    def test_cancel_posts_json(self, fake_erp, erp_client):
        fake_erp.add("Sales Invoice", {"name": "SINV-1", "docstatus": 1})

        asyncio.run(erp_client.db.cancel("Sales Invoice", "SINV-1"))

        request = fake_erp.requests[0]
        assert request.method == "POST"
        assert json.loads(request.content) == {"doctype": "Sales Invoice", "name": "SINV-1"}
        assert fake_erp.get("Sales Invoice", "SINV-1")["docstatus"] == 2

    def test_upload_file(self, fake_erp, erp_client):
        stored = asyncio.run(erp_client.file.upload_file(
            b"%PDF-1.4", "receipt.pdf", doctype="Expense Claim", docname="EC-1", is_private=True
        ))

        assert stored["file_url"] == "/private/files/receipt.pdf"
        assert stored["attached_to_doctype"] == "Expense Claim"
        assert stored["attached_to_name"] == "EC-1"
