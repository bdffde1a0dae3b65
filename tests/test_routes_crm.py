# =============================================================================
# tests/test_routes_crm.py - CRM and Selling Endpoint Tests
# =============================================================================
# Customers, contacts, addresses, leads, opportunities, activities,
# communications, quotations, sales orders, the dashboard and the option
# lists, through FastAPI's TestClient against the in-memory ERP.
#
# Run with: pytest tests/test_routes_crm.py -v
# =============================================================================

import pytest


# =============================================================================
# Gateway Behaviour
# =============================================================================

class TestGatewayChecks:
    """Configuration and session checks shared by every ERP route."""

    @pytest.mark.parametrize("method, path", [
        ("GET", "/api/crm/customers"),
        ("POST", "/api/crm/customers"),
        ("GET", "/api/crm/leads/L-1"),
        ("GET", "/api/crm/dashboard"),
        ("GET", "/api/accounting/sales"),
        ("GET", "/api/stock-entries"),
        ("GET", "/api/asset/assets"),
        ("GET", "/api/pos"),
    ])
    def test_unconfigured_gateway(self, unconfigured_client, method, path):
        """Without ERP variables every route answers CONFIGURATION_MISSING."""
        response = unconfigured_client.request(method, path, json={} if method == "POST" else None)

        body = response.json()
        assert response.status_code == 500
        assert body["success"] is False
        assert body["kind"] == "CONFIGURATION_MISSING"
        assert body["statusCode"] == 500

    @pytest.mark.parametrize("method, path, request_args", [
        ("POST", "/api/crm/customers", {}),
        ("PUT", "/api/crm/leads/L-1", {"content": b"{not json", "headers": {"Content-Type": "application/json"}}),
        ("GET", "/api/crm/customers?limit=0", {}),
    ])
    def test_unconfigured_gateway_with_invalid_request(self, unconfigured_client, method, path, request_args):
        """A request FastAPI rejects still reports the missing configuration first."""
        response = unconfigured_client.request(method, path, **request_args)

        assert response.status_code == 500
        assert response.json()["kind"] == "CONFIGURATION_MISSING"

    def test_invalid_request_when_configured(self, api_client):
        response = api_client.get("/api/crm/customers", params={"limit": 0})

        body = response.json()
        assert response.status_code == 400
        assert body["kind"] == "APPLICATION_ERROR"
        assert body["error"] == "Invalid request"

    def test_write_without_session_touches_nothing(self, api_client, fake_erp):
        """No logged-in user: 401 and no write request reaches the ERP."""
        # Arrange
        fake_erp.user = None

        # Act
        response = api_client.post("/api/crm/customers", json={"customer_name": "Abebe Bakery"})

        # Assert
        assert response.status_code == 401
        assert response.json()["kind"] == "AUTHENTICATION_REQUIRED"
        assert fake_erp.writes == []
        assert fake_erp.docs["Customer"] == {}

    def test_missing_fields_before_any_write(self, api_client, fake_erp):
        response = api_client.post("/api/crm/customers", json={"customer_type": "Company"})

        body = response.json()
        assert response.status_code == 400
        assert body["error"] == "Missing required fields: customer_name"
        assert body["details"] == {"fields": ["customer_name"]}
        assert fake_erp.writes == []

    def test_non_object_body(self, api_client):
        response = api_client.post("/api/crm/customers", json=["not", "an", "object"])

        assert response.status_code == 400
        assert response.json()["kind"] == "APPLICATION_ERROR"


# =============================================================================
# Customers
# =============================================================================

class TestCustomers:
    def test_create_then_get(self, api_client, fake_erp):
        """A created customer reads back with the same fields plus defaults."""
        # Act
        created = api_client.post("/api/crm/customers", json={
            "customer_name": "Abebe Bakery",
            "customer_type": "Company",
            "mobile_no": "+251911000000",
        })
        fetched = api_client.get("/api/crm/customers/Abebe Bakery")

        # Assert
        assert created.status_code == 200
        customer = created.json()["data"]["customer"]
        assert customer["name"] == "Abebe Bakery"
        assert customer["customer_type"] == "Company"
        assert customer["customer_group"] == "All Customer Groups"
        assert customer["default_currency"] == "ETB"
        assert fetched.json()["data"]["customer"] == customer

    def test_list_reports_customer_with_bad_value(self, api_client, fake_erp):
        fake_erp.add("Customer", {"customer_name": "Abebe Bakery", "credit_limit": 5000})
        fake_erp.add("Customer", {"customer_name": "Broken Books", "credit_limit": "n/a"})

        response = api_client.get("/api/crm/customers")

        data = response.json()["data"]
        assert response.status_code == 200
        assert [customer["name"] for customer in data["customers"]] == ["Abebe Bakery"]
        assert [error["name"] for error in data["errors"]] == ["Broken Books"]

    def test_get_missing_customer(self, api_client):
        response = api_client.get("/api/crm/customers/Nobody")

        body = response.json()
        assert response.status_code == 404
        assert body["kind"] == "UPSTREAM_NOT_FOUND"
        assert body["details"] == "Customer Nobody not found"

    def test_duplicate_customer(self, api_client, fake_erp):
        fake_erp.add("Customer", {"customer_name": "Abebe Bakery"})

        response = api_client.post("/api/crm/customers", json={"customer_name": "Abebe Bakery"})

        assert response.status_code == 409
        assert response.json()["kind"] == "UPSTREAM_DUPLICATE"

    def test_list_with_filters(self, api_client, fake_erp, sample_customer_doc):
        fake_erp.add("Customer", sample_customer_doc)
        fake_erp.add("Customer", {"customer_name": "Hana Cafe", "territory": "Adama"})

        response = api_client.get("/api/crm/customers", params={"territory": "Addis Ababa"})

        data = response.json()["data"]
        assert [c["name"] for c in data["customers"]] == ["Abebe Bakery"]
        assert data["errors"] == []

    def test_list_reports_unreadable_customer(self, api_client, fake_erp):
        """One failed lookup gives N-1 customers and one error entry."""
        for name in ("A", "B", "C"):
            fake_erp.add("Customer", {"customer_name": name})
        fake_erp.fail("Customer", "B", status=403, exc_type="PermissionError", message="Not permitted")

        response = api_client.get("/api/crm/customers")

        data = response.json()["data"]
        assert response.status_code == 200
        assert sorted(c["name"] for c in data["customers"]) == ["A", "C"]
        assert [e["name"] for e in data["errors"]] == ["B"]

    def test_partial_update_keeps_other_fields(self, api_client, fake_erp, sample_customer_doc):
        fake_erp.add("Customer", sample_customer_doc)

        response = api_client.put("/api/crm/customers/Abebe Bakery", json={"credit_limit": 0, "territory": None})

        customer = response.json()["data"]["customer"]
        assert customer["credit_limit"] == 0
        assert customer["territory"] == "Addis Ababa"
        assert customer["customer_group"] == "Commercial"

    def test_empty_update_is_a_no_op(self, api_client, fake_erp, sample_customer_doc):
        fake_erp.add("Customer", sample_customer_doc)

        response = api_client.put("/api/crm/customers/Abebe Bakery")

        assert response.status_code == 200
        assert response.json()["data"]["customer"]["territory"] == "Addis Ababa"
        assert [r.method for r in fake_erp.writes] == []

    def test_update_twice_same_result(self, api_client, fake_erp, sample_customer_doc):
        fake_erp.add("Customer", sample_customer_doc)

        first = api_client.put("/api/crm/customers/Abebe Bakery", json={"territory": "Adama"})
        second = api_client.put("/api/crm/customers/Abebe Bakery", json={"territory": "Adama"})

        assert first.json()["data"] == second.json()["data"]
        assert len([r for r in fake_erp.writes if r.method == "PUT"]) == 1

    def test_delete(self, api_client, fake_erp, sample_customer_doc):
        fake_erp.add("Customer", sample_customer_doc)

        response = api_client.delete("/api/crm/customers/Abebe Bakery")

        assert response.json()["data"] == {"message": "Customer Abebe Bakery deleted successfully"}
        assert fake_erp.get("Customer", "Abebe Bakery") is None


class TestCustomerLinks:
    def test_contact_round_trip(self, api_client, fake_erp, sample_customer_doc):
        fake_erp.add("Customer", sample_customer_doc)
        fake_erp.add("Contact", {"first_name": "Other", "links": [{"link_doctype": "Customer", "link_name": "Else"}]})

        created = api_client.post("/api/crm/customers/Abebe Bakery/contacts", json={
            "first_name": "Sara",
            "email_id": "sara@abebe.et",
        })
        listed = api_client.get("/api/crm/customers/Abebe Bakery/contacts")

        contact = created.json()["data"]["contact"]
        assert contact["customer"] == "Abebe Bakery"
        stored = fake_erp.get("Contact", contact["name"])
        assert stored["email_ids"] == [{"email_id": "sara@abebe.et", "is_primary": 1}]
        assert [c["first_name"] for c in listed.json()["data"]["contacts"]] == ["Sara"]

    def test_address_requires_fields(self, api_client):
        response = api_client.post("/api/crm/customers/Abebe Bakery/addresses", json={"city": "Addis Ababa"})

        assert response.json()["details"] == {"fields": ["address_line1", "country"]}

    def test_address_links_customer(self, api_client):
        response = api_client.post("/api/crm/customers/Abebe Bakery/addresses", json={
            "address_line1": "Bole Road",
            "city": "Addis Ababa",
            "country": "Ethiopia",
        })

        address = response.json()["data"]["address"]
        assert address["customer"] == "Abebe Bakery"
        assert address["address_type"] == "Billing"


# =============================================================================
# Leads / Opportunities
# =============================================================================

class TestLeadsAndOpportunities:
    def test_lead_defaults_to_open(self, api_client):
        response = api_client.post("/api/crm/leads", json={"lead_name": "Meron"})

        assert response.json()["data"]["lead"]["status"] == "Open"

    def test_lead_filters(self, api_client, fake_erp):
        fake_erp.add("Lead", {"lead_name": "A", "status": "Open", "source": "Website"})
        fake_erp.add("Lead", {"lead_name": "B", "status": "Converted", "source": "Website"})

        response = api_client.get("/api/crm/leads", params={"status": "Converted", "source": "all"})

        assert [lead["lead_name"] for lead in response.json()["data"]["leads"]] == ["B"]

    def test_opportunity_for_customer(self, api_client, fake_erp):
        response = api_client.post("/api/crm/opportunities", json={
            "opportunity_from": "Customer",
            "opportunity_type": "Sales",
            "customer": "Abebe Bakery",
            "opportunity_amount": 15000,
        })

        opportunity = response.json()["data"]["opportunity"]
        assert opportunity["customer"] == "Abebe Bakery"
        assert opportunity["lead"] == ""
        assert opportunity["sales_stage"] == "Qualification"
        stored = fake_erp.get("Opportunity", opportunity["name"])
        assert stored["party_name"] == "Abebe Bakery"
        assert "customer" not in stored

    def test_opportunity_requires_matching_party(self, api_client):
        response = api_client.post("/api/crm/opportunities", json={
            "opportunity_from": "Lead",
            "opportunity_type": "Sales",
            "customer": "Abebe Bakery",
        })

        assert response.json()["error"] == "Missing required fields: lead"

    def test_opportunity_customer_filter(self, api_client, fake_erp):
        fake_erp.add("Opportunity", {"opportunity_from": "Customer", "party_name": "Abebe Bakery"})
        fake_erp.add("Opportunity", {"opportunity_from": "Lead", "party_name": "Abebe Bakery"})

        response = api_client.get("/api/crm/opportunities", params={"customer": "Abebe Bakery"})

        opportunities = response.json()["data"]["opportunities"]
        assert len(opportunities) == 1
        assert opportunities[0]["customer"] == "Abebe Bakery"


# =============================================================================
# Activities / Communications
# =============================================================================

class TestActivities:
    def test_create_stores_todo_fields(self, api_client, fake_erp):
        # Arrange
        fake_erp.add("User", {"name": "jane@example.com"})
        fake_erp.add("Lead", {"name": "LEAD-1", "lead_name": "Abebe"})

        # Act
        response = api_client.post("/api/crm/activities", json={
            "subject": "Call back about catering",
            "assigned_to": "jane@example.com",
            "due_date": "2024-03-05",
            "reference_doctype": "Lead",
            "reference_name": "LEAD-1",
        })

        # Assert
        activity = response.json()["data"]["activity"]
        assert response.status_code == 200
        assert activity["subject"] == "Call back about catering"
        assert activity["assigned_to"] == "jane@example.com"
        assert activity["reference_doctype"] == "Lead"
        assert (activity["status"], activity["priority"], activity["activity_type"]) == ("Open", "Medium", "Task")

        stored = fake_erp.get("ToDo", activity["name"])
        assert stored["description"] == "Call back about catering"
        assert stored["allocated_to"] == "jane@example.com"
        assert stored["date"] == "2024-03-05"
        assert stored["reference_type"] == "Lead"

    def test_unknown_assignee_dropped(self, api_client, fake_erp):
        response = api_client.post("/api/crm/activities", json={"subject": "Follow up", "assigned_to": "ghost"})

        activity = response.json()["data"]["activity"]
        assert activity["assigned_to"] == ""
        assert "allocated_to" not in fake_erp.get("ToDo", activity["name"])

    def test_reference_name_needs_doctype(self, api_client, fake_erp):
        response = api_client.post("/api/crm/activities", json={"subject": "Follow up", "reference_name": "LEAD-1"})

        assert response.status_code == 400
        assert fake_erp.writes == []

    def test_missing_reference_document(self, api_client, fake_erp):
        response = api_client.post("/api/crm/activities", json={
            "subject": "Follow up", "reference_doctype": "Lead", "reference_name": "LEAD-404",
        })

        assert response.status_code == 404
        assert fake_erp.writes == []

    def test_by_reference(self, api_client, fake_erp):
        fake_erp.add("ToDo", {"description": "Send menu", "reference_type": "Lead", "reference_name": "LEAD-1"})
        fake_erp.add("ToDo", {"description": "Other", "reference_type": "Lead", "reference_name": "LEAD-2"})

        response = api_client.get("/api/crm/activities/by-reference", params={"doctype": "Lead", "name": "LEAD-1"})

        activities = response.json()["data"]["activities"]
        assert [activity["subject"] for activity in activities] == ["Send menu"]

    @pytest.mark.parametrize("params", [{}, {"doctype": "Lead"}, {"name": "LEAD-1"}])
    def test_by_reference_needs_doctype_and_name(self, api_client, params):
        response = api_client.get("/api/crm/activities/by-reference", params=params)

        assert response.status_code == 400
        assert response.json()["error"] == "Both doctype and name are required"

    def test_update_renames_fields(self, api_client, fake_erp):
        fake_erp.add("ToDo", {"name": "TD-1", "description": "Old", "status": "Open"})

        response = api_client.put("/api/crm/activities/TD-1", json={"subject": "New", "status": "Closed"})

        assert response.json()["data"]["activity"]["subject"] == "New"
        assert fake_erp.get("ToDo", "TD-1")["description"] == "New"


class TestCommunications:
    def test_create_with_defaults(self, api_client, fake_erp):
        response = api_client.post("/api/crm/communications", json={"subject": "Quote sent", "content": "See attached"})

        communication = response.json()["data"]["communication"]
        assert response.status_code == 200
        assert communication["communication_type"] == "Communication"
        assert communication["status"] == "Open"

    def test_requires_subject_and_content(self, api_client, fake_erp):
        response = api_client.post("/api/crm/communications", json={})

        assert response.json()["details"] == {"fields": ["subject", "content"]}
        assert fake_erp.writes == []

    def test_create_by_reference(self, api_client, fake_erp):
        fake_erp.add("Customer", {"customer_name": "Abebe"})

        response = api_client.post(
            "/api/crm/communications/by-reference",
            params={"doctype": "Customer", "name": "Abebe"},
            json={"subject": "Thanks", "content": "Thank you for your order"},
        )

        communication = response.json()["data"]["communication"]
        assert (communication["reference_doctype"], communication["reference_name"]) == ("Customer", "Abebe")


# =============================================================================
# Quotations / Sales Orders
# =============================================================================

class TestSellingDocuments:
    def test_quotation_totals(self, api_client):
        response = api_client.post("/api/crm/quotations", json={
            "customer": "Abebe Bakery",
            "items": [{"item_code": "bread", "qty": 2, "rate": 50}],
        })

        quotation = response.json()["data"]["quotation"]
        assert quotation["customer"] == "Abebe Bakery"
        assert quotation["grand_total"] == 100
        assert quotation["items"][0]["amount"] == 100
        assert quotation["status"] == "Draft"

    def test_quotation_update_recomputes(self, api_client, fake_erp):
        fake_erp.add("Quotation", {
            "name": "QTN-1",
            "party_name": "Abebe Bakery",
            "items": [{"item_code": "bread", "qty": 1, "rate": 50, "amount": 50}],
            "grand_total": 50,
        })

        response = api_client.put("/api/crm/quotations/QTN-1", json={
            "items": [{"item_code": "bread", "qty": 3, "rate": 50}],
        })

        assert response.json()["data"]["quotation"]["grand_total"] == 150

    def test_sales_order_delivery_date(self, api_client):
        response = api_client.post("/api/crm/sales-orders", json={
            "customer": "Abebe Bakery",
            "transaction_date": "2024-02-01",
            "items": [{"item_code": "cake", "qty": 1, "rate": 400}],
        })

        order = response.json()["data"]["salesOrder"]
        assert order["delivery_date"] == "2024-02-01"
        assert order["grand_total"] == 400

    def test_sales_orders_by_date(self, api_client, fake_erp):
        fake_erp.add("Sales Order", {"customer": "A", "transaction_date": "2024-01-05"})
        fake_erp.add("Sales Order", {"customer": "A", "transaction_date": "2024-03-05"})

        response = api_client.get("/api/crm/sales-orders", params={"date_from": "2024-01-01", "date_to": "2024-01-31"})

        orders = response.json()["data"]["salesOrders"]
        assert [o["transaction_date"] for o in orders] == ["2024-01-05"]


# =============================================================================
# Dashboard / Options
# =============================================================================

class TestDashboardAndOptions:
    def test_dashboard(self, api_client, fake_erp):
        fake_erp.add("Lead", {"status": "Converted"})
        fake_erp.add("Lead", {"status": "Open"})

        response = api_client.get("/api/crm/dashboard")

        data = response.json()["data"]
        assert data["total_leads"] == 2
        assert data["leadConversionRate"] == 50.0

    def test_options(self, api_client, fake_erp):
        fake_erp.add("Territory", {"name": "Addis Ababa"})
        fake_erp.add("Sales Person", {"name": "SP-1", "sales_person_name": "Dawit"})
        fake_erp.add("Customer", {"customer_name": "Active", "disabled": 0})
        fake_erp.add("Customer", {"customer_name": "Gone", "disabled": 1})

        response = api_client.get("/api/crm/options")

        data = response.json()["data"]
        assert data["territories"] == ["Addis Ababa"]
        assert data["sales_persons"] == [{"name": "SP-1", "label": "Dawit"}]
        assert data["customers"] == [{"name": "Active", "label": "Active"}]
        assert data["lead_sources"] == []
