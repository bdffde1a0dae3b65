# =============================================================================
# tests/test_routes_stock.py - Item and Inventory Endpoint Tests
# =============================================================================
# Item master, stock entries, delivery notes and the read-only stock views.
#
# Run with: pytest tests/test_routes_stock.py -v
# =============================================================================

import json

import pytest


# =============================================================================
# Items
# =============================================================================

class TestItems:
    def test_create_derives_item_code(self, api_client, fake_erp):
        response = api_client.post("/api/items", json={"item_name": "Whole Wheat Bread", "stock_uom": "Nos"})

        item = response.json()["data"]["item"]
        assert item["item_code"] == "whole-wheat-bread"
        assert item["is_stock_item"] == 1
        assert fake_erp.get("Item", "whole-wheat-bread") is not None

    def test_create_keeps_given_code(self, api_client):
        response = api_client.post("/api/items", json={
            "item_name": "Cake", "item_code": "CAKE-01", "stock_uom": "Nos", "is_stock_item": 0,
        })

        item = response.json()["data"]["item"]
        assert (item["item_code"], item["is_stock_item"]) == ("CAKE-01", 0)

    def test_get_by_code(self, api_client, fake_erp):
        fake_erp.add("Item", {"item_code": "bread", "item_name": "Bread", "stock_uom": "Nos"})

        response = api_client.get("/api/items/bread")

        assert response.json()["data"]["item"]["item_name"] == "Bread"

    def test_get_unknown_code(self, api_client):
        response = api_client.get("/api/items/nothing")

        body = response.json()
        assert response.status_code == 404
        assert body["error"] == "Item not found: nothing"

    def test_update_cannot_change_code(self, api_client, fake_erp):
        fake_erp.add("Item", {"item_code": "bread", "item_name": "Bread"})

        response = api_client.put("/api/items/bread", json={"item_code": "other", "item_name": "Brown Bread"})

        item = response.json()["data"]["item"]
        assert (item["item_code"], item["item_name"]) == ("bread", "Brown Bread")

    @pytest.mark.parametrize("action, key", [("get-item-groups", "item_groups"), ("get-uoms", "uoms")])
    def test_actions(self, api_client, fake_erp, action, key):
        fake_erp.add("Item Group", {"name": "Breads"})
        fake_erp.add("UOM", {"name": "Nos"})

        response = api_client.get("/api/items", params={"action": action})

        assert list(response.json()["data"]) == [key]

    def test_unknown_action(self, api_client):
        response = api_client.get("/api/items", params={"action": "drop-table"})

        assert response.status_code == 400


# =============================================================================
# Stock Entries
# =============================================================================

class TestStockEntries:
    RECEIPT = {
        "stock_entry_type": "Material Receipt",
        "purpose": "Material Receipt",
        "posting_date": "2024-01-15",
        "to_warehouse": "Stores - TC",
        "items": [{"item_code": "flour", "qty": 50, "t_warehouse": "Stores - TC"}],
    }

    def test_create_receipt(self, api_client, fake_erp):
        response = api_client.post("/api/stock-entries", json=self.RECEIPT)

        entry = response.json()["data"]["stockEntry"]
        assert entry["name"].startswith("STE-MR-")
        stored = fake_erp.get("Stock Entry", entry["name"])
        assert stored["items"][0]["allow_zero_valuation_rate"] == 1

    def test_issue_needs_source_warehouse(self, api_client, fake_erp):
        payload = {**self.RECEIPT, "stock_entry_type": "Material Issue", "purpose": "Material Issue"}

        response = api_client.post("/api/stock-entries", json=payload)

        assert response.status_code == 400
        assert response.json()["error"] == "From Warehouse is required for Material Issue"
        assert fake_erp.writes == []

    def test_filter(self, api_client, fake_erp):
        fake_erp.add("Stock Entry", {"stock_entry_type": "Material Receipt", "docstatus": 1})
        fake_erp.add("Stock Entry", {"stock_entry_type": "Material Issue", "docstatus": 0})

        response = api_client.get("/api/stock-entries", params={"action": "filter", "docstatus": "1"})

        entries = response.json()["data"]["stockEntries"]
        assert [e["stock_entry_type"] for e in entries] == ["Material Receipt"]

    def test_invalid_docstatus(self, api_client):
        response = api_client.get("/api/stock-entries", params={"action": "filter", "docstatus": "draft"})

        assert response.json()["error"] == "Invalid docstatus: draft"

    def test_entry_types(self, api_client, fake_erp):
        for entry_type in ("Material Receipt", "Material Receipt", "Manufacture"):
            fake_erp.add("Stock Entry", {"stock_entry_type": entry_type})

        response = api_client.get("/api/stock-entries", params={"action": "get-stock-entry-types"})

        assert sorted(response.json()["data"]["stock_entry_types"]) == ["Manufacture", "Material Receipt"]

    def test_options(self, api_client, fake_erp):
        fake_erp.add("Warehouse", {"warehouse_name": "Stores - TC"})
        fake_erp.add("Stock Entry", {"stock_entry_type": "Receive Flour", "purpose": "Material Receipt"})
        fake_erp.add("Item", {"item_code": "flour", "item_name": "Flour", "valuation_rate": 30})

        response = api_client.get("/api/stock-entries/options")

        data = response.json()["data"]
        assert data["warehouses"] == ["Stores - TC"]
        assert data["stockEntryTypes"] == ["Receive Flour"]
        assert data["purposes"] == ["Material Receipt"]
        assert data["items"][0]["valuation_rate"] == 30

    def test_delete_uses_resource_api(self, api_client, fake_erp):
        fake_erp.add("Stock Entry", {"name": "STE-MR-1"})

        api_client.delete("/api/stock-entries/STE-MR-1")

        assert fake_erp.writes[-1].method == "DELETE"
        assert fake_erp.get("Stock Entry", "STE-MR-1") is None


# =============================================================================
# Delivery Notes
# =============================================================================

class TestDeliveryNotes:
    NOTE = {
        "customer": "Abebe Bakery",
        "posting_date": "2024-01-16",
        "set_warehouse": "Stores - TC",
        "items": [{"item_code": "bread", "qty": 20, "rate": 10}],
    }

    def test_create(self, api_client, fake_erp):
        response = api_client.post("/api/delivery-notes", json=self.NOTE)

        note = response.json()["data"]["deliveryNote"]
        assert note["customer"] == "Abebe Bakery"
        request = [r for r in fake_erp.writes if r.method == "POST"][0]
        assert json.loads(request.content)["items"][0]["allow_zero_valuation_rate"] == 1

    def test_create_needs_warehouse(self, api_client):
        response = api_client.post("/api/delivery-notes", json={**self.NOTE, "set_warehouse": ""})

        assert response.json()["error"] == "Warehouse is required for Delivery Note"

    def test_get_reads_items_separately(self, api_client, fake_erp):
        """A note returned without its item table gets its lines from Delivery Note Item."""
        fake_erp.add("Delivery Note", {"name": "DN-1", "customer": "Abebe Bakery"})
        fake_erp.add("Delivery Note Item", {"parent": "DN-1", "idx": 2, "item_code": "cake", "qty": 1})
        fake_erp.add("Delivery Note Item", {"parent": "DN-1", "idx": 1, "item_code": "bread", "qty": 5})
        fake_erp.add("Delivery Note Item", {"parent": "DN-2", "idx": 1, "item_code": "juice", "qty": 9})

        response = api_client.get("/api/delivery-notes/DN-1")

        items = response.json()["data"]["deliveryNote"]["items"]
        assert [line["item_code"] for line in items] == ["bread", "cake"]

    def test_get_survives_item_lookup_failure(self, api_client, fake_erp):
        fake_erp.add("Delivery Note", {"name": "DN-1", "customer": "Abebe Bakery"})
        fake_erp.fail_list("Delivery Note Item", status=403, exc_type="PermissionError", message="Not permitted")

        response = api_client.get("/api/delivery-notes/DN-1")

        assert response.status_code == 200
        assert response.json()["data"]["deliveryNote"]["items"] == []

    def test_customer_and_territory_actions(self, api_client, fake_erp):
        fake_erp.add("Customer", {"customer_name": "Abebe Bakery"})
        fake_erp.add("Territory", {"name": "Addis Ababa"})

        customers = api_client.get("/api/delivery-notes", params={"action": "get-customers"})
        territories = api_client.get("/api/delivery-notes", params={"action": "get-territories"})

        assert customers.json()["data"] == {"customers": ["Abebe Bakery"]}
        assert territories.json()["data"] == {"territories": ["Addis Ababa"]}


# =============================================================================
# Stock Views
# =============================================================================

class TestStockViews:
    def test_balance_with_item_names(self, api_client, fake_erp):
        fake_erp.add("Item", {"item_code": "bread", "item_name": "Bread"})
        fake_erp.add("Bin", {"item_code": "bread", "warehouse": "Stores", "actual_qty": 4})
        fake_erp.add("Bin", {"item_code": "flour", "warehouse": "Stores", "actual_qty": 40})

        response = api_client.get("/api/stock-balance", params={"show_low_stock": "true"})

        rows = response.json()["data"]["stockBalance"]
        assert rows == [{
            "item_code": "bread", "item_name": "Bread", "warehouse": "Stores", "actual_qty": 4.0,
            "reserved_qty": 0.0, "ordered_qty": 0.0, "projected_qty": 0.0, "stock_uom": "",
            "valuation_rate": 0.0, "stock_value": 0.0,
        }]

    def test_ledger_newest_first(self, api_client, fake_erp):
        fake_erp.add("Stock Ledger Entry", {"item_code": "bread", "posting_date": "2024-01-01", "warehouse": "Stores"})
        fake_erp.add("Stock Ledger Entry", {"item_code": "bread", "posting_date": "2024-01-09", "warehouse": "Stores"})
        fake_erp.add("Stock Ledger Entry", {"item_code": "bread", "posting_date": "2024-01-05", "warehouse": "Shop"})

        response = api_client.get("/api/stock-ledger", params={"warehouse": "Stores"})

        entries = response.json()["data"]["ledgerEntries"]
        assert [e["posting_date"] for e in entries] == ["2024-01-09", "2024-01-01"]

    def test_summary(self, api_client, fake_erp):
        fake_erp.add("Bin", {"item_code": "bread", "actual_qty": 0, "stock_value": 0})

        response = api_client.get("/api/stock-summary")

        summary = response.json()["data"]["summary"]
        assert summary["out_of_stock_items"] == 1
        assert summary["total_stock_value"] == 0
