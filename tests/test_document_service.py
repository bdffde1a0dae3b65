# =============================================================================
# tests/test_document_service.py - Document Service Tests
# =============================================================================
# Pure helpers (missing-field checks, filters, merge, line arithmetic) and
# the insert/update/delete patterns against the in-memory ERP.
#
# Run with: pytest tests/test_document_service.py -v
# =============================================================================

import asyncio
import json

import pytest

from app.exceptions import ApplicationError, DocumentNotFoundError, MissingFieldsError
from core.services.document_service import (
    DocumentService,
    build_filters,
    date_range_filters,
    document_totals,
    is_missing,
    merge_partial,
    price_lines,
    require_fields,
    with_priced_items,
)
from lib.erp_client import ERPClientError


# =============================================================================
# Input Helpers
# =============================================================================

class TestRequireFields:
    @pytest.mark.parametrize("value", [None, "", "   ", [], {}])
    def test_missing_values(self, value):
        assert is_missing(value)

    @pytest.mark.parametrize("value", [0, 0.0, False, "x", [{}]])
    def test_present_values(self, value):
        """Zero and False are real values."""
        assert not is_missing(value)

    def test_lists_every_missing_field_in_order(self):
        with pytest.raises(MissingFieldsError) as exc_info:
            require_fields({"customer": "", "posting_date": "2024-01-01"}, ["customer", "items", "posting_date"])

        assert exc_info.value.fields == ["customer", "items"]
        assert exc_info.value.message == "Missing required fields: customer, items"


class TestFilters:
    def test_build_filters_skips_empty_and_all(self):
        filters = build_filters(status="Open", territory=None, customer_group="", source="all")

        assert filters == [["status", "=", "Open"]]

    def test_date_range_both_bounds(self):
        assert date_range_filters("posting_date", "2024-01-01", "2024-01-31") == [
            ["posting_date", ">=", "2024-01-01"],
            ["posting_date", "<=", "2024-01-31"],
        ]

    def test_date_range_open_ended(self):
        assert date_range_filters("posting_date", None, "2024-01-31") == [["posting_date", "<=", "2024-01-31"]]
        assert date_range_filters("posting_date", None, None) == []


class TestMergePartial:
    def test_present_values_win(self):
        current = {"name": "L-1", "status": "Open", "source": "Website", "notes": "x"}

        merged = merge_partial(current, {"status": "Replied", "source": None, "notes": ""})

        assert merged == {"name": "L-1", "status": "Replied", "source": "Website", "notes": ""}

    def test_zero_overrides(self):
        assert merge_partial({"credit_limit": 500}, {"credit_limit": 0}) == {"credit_limit": 0}

    def test_idempotent(self):
        current = {"status": "Open", "probability": 10}
        changes = {"probability": 50}

        once = merge_partial(current, changes)

        assert merge_partial(once, changes) == once

    def test_does_not_mutate_current(self):
        current = {"status": "Open"}
        merge_partial(current, {"status": "Closed"})
        assert current == {"status": "Open"}


class TestLineArithmetic:
    def test_amount_is_qty_times_rate(self):
        lines = price_lines([{"item_code": "bread", "qty": "2", "rate": 50, "amount": 999}])

        assert lines == [{"item_code": "bread", "qty": 2.0, "rate": 50.0, "amount": 100.0}]

    def test_unparseable_numbers_count_as_zero(self):
        lines = price_lines([{"qty": "two", "rate": None}])

        assert lines[0]["amount"] == 0

    def test_totals(self):
        totals = document_totals([{"amount": 100}, {"amount": 25.5}])

        assert totals["grand_total"] == totals["total"] == totals["net_total"] == 125.5

    def test_with_priced_items_without_items(self):
        payload = {"status": "Draft"}

        priced = with_priced_items(payload)

        assert priced == payload
        assert priced is not payload

    def test_with_priced_items(self):
        priced = with_priced_items({"items": [{"qty": 3, "rate": 10}, {"qty": 1, "rate": 5}]})

        assert [line["amount"] for line in priced["items"]] == [30, 5]
        assert priced["grand_total"] == 35


# =============================================================================
# Document Service
# =============================================================================

class TestDocumentService:
    """Insert / fetch / update / delete against the fake ERP."""

    def test_insert_refetches_stored_document(self, fake_erp, erp_client):
        created = asyncio.run(DocumentService.insert_document(erp_client, "Lead", {"lead_name": "Sara"}))

        assert created["name"].startswith("L-")
        assert created["owner"] == "Administrator"
        methods = [request.method for request in fake_erp.requests]
        assert methods == ["POST", "GET"]

    def test_insert_via_rpc(self, fake_erp, erp_client):
        created = asyncio.run(DocumentService.insert_via_rpc(
            erp_client, "Location", {"location_name": "Head Office"}
        ))

        assert created["name"] == "Head Office"
        assert fake_erp.calls_to("frappe.client.insert")

    def test_insert_via_rpc_without_name(self, monkeypatch, erp_client):
        async def empty_post(method, params=None):
            return {"message": {}}

        monkeypatch.setattr(erp_client.call, "post", empty_post)

        with pytest.raises(ApplicationError) as exc_info:
            asyncio.run(DocumentService.insert_via_rpc(erp_client, "Asset", {"asset_name": "PC"}))

        assert exc_info.value.message == "Failed to create Asset"
        assert exc_info.value.status_code == 500

    def test_fetch_empty_document_is_not_found(self, monkeypatch, erp_client):
        async def empty_doc(doctype, name):
            return {}

        monkeypatch.setattr(erp_client.db, "get_doc", empty_doc)

        with pytest.raises(DocumentNotFoundError):
            asyncio.run(DocumentService.fetch_document(erp_client, "Customer", "C-1"))

    def test_update_sends_only_changed_fields(self, fake_erp, erp_client):
        fake_erp.add("Lead", {"name": "L-1", "lead_name": "Sara", "status": "Open", "source": "Website"})

        saved = asyncio.run(DocumentService.update_document(
            erp_client, "Lead", "L-1", {"status": "Replied", "source": None, "lead_name": "Sara"}
        ))

        put = [request for request in fake_erp.requests if request.method == "PUT"]
        assert len(put) == 1
        assert json.loads(put[0].content) == {"status": "Replied"}
        assert saved["status"] == "Replied"
        assert saved["source"] == "Website"

    def test_empty_update_does_not_save(self, fake_erp, erp_client):
        fake_erp.add("Lead", {"name": "L-1", "status": "Open"})

        result = asyncio.run(DocumentService.update_document(erp_client, "Lead", "L-1", {}))

        assert result["status"] == "Open"
        assert fake_erp.writes == []

    def test_repeated_update_saves_once(self, fake_erp, erp_client):
        fake_erp.add("Lead", {"name": "L-1", "status": "Open"})

        asyncio.run(DocumentService.update_document(erp_client, "Lead", "L-1", {"status": "Replied"}))
        asyncio.run(DocumentService.update_document(erp_client, "Lead", "L-1", {"status": "Replied"}))

        assert len(fake_erp.writes) == 1

    def test_update_missing_document(self, erp_client):
        with pytest.raises(ERPClientError):
            asyncio.run(DocumentService.update_document(erp_client, "Lead", "nope", {"status": "Open"}))

    def test_delete(self, fake_erp, erp_client):
        fake_erp.add("Lead", {"name": "L-1"})

        asyncio.run(DocumentService.delete_document(erp_client, "Lead", "L-1"))

        assert fake_erp.get("Lead", "L-1") is None

    def test_get_value(self, fake_erp, erp_client):
        fake_erp.add("Account", {"name": "Cash - TC", "account_name": "Cash"})

        assert asyncio.run(DocumentService.get_value(erp_client, "Account", "Cash - TC", "account_name")) == "Cash"
        assert asyncio.run(DocumentService.get_value(erp_client, "Account", "Nope", "account_name")) is None

    def test_list_names_newest_first(self, fake_erp, erp_client):
        fake_erp.add("Lead", {"name": "L-1", "modified": "2024-01-01"})
        fake_erp.add("Lead", {"name": "L-2", "modified": "2024-02-01"})

        names = asyncio.run(DocumentService.list_names(erp_client, "Lead"))

        assert names == ["L-2", "L-1"]
