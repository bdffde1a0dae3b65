# =============================================================================
# tests/test_hydration.py - List Hydration Tests
# =============================================================================
# One failing lookup must not fail the whole list: the other documents are
# returned in order and the failure is reported per name.
#
# Run with: pytest tests/test_hydration.py -v
# =============================================================================

import asyncio

import pytest

from core.services.document_service import DocumentService
from core.services.hydration import HydrationResult, hydrate
from lib.erp_client import ERPClientError


class TestHydrate:
    def test_partial_failure(self):
        """N names with one failure give N-1 items and one error."""
        # Arrange
        async def fetch(name):
            if name == "B":
                raise ERPClientError("Customer B not found", http_status=404, exc_type="DoesNotExistError")
            return {"name": name}

        # Act
        result = asyncio.run(hydrate(["A", "B", "C"], fetch))

        # Assert
        assert [item["name"] for item in result.items] == ["A", "C"]
        assert result.errors == [{
            "name": "B",
            "error": "The requested resource was not found",
            "details": "Customer B not found",
        }]

    def test_keeps_request_order(self):
        """Results follow the name order even when fetches finish out of order."""
        async def fetch(name):
            await asyncio.sleep(0.01 * (3 - int(name)))
            return name

        result = asyncio.run(hydrate(["1", "2", "3"], fetch))

        assert result.items == ["1", "2", "3"]

    def test_empty(self):
        async def fetch(name):
            raise AssertionError("not called")

        result = asyncio.run(hydrate([], fetch))

        assert result.items == [] and result.errors == []

    def test_cancellation_propagates(self):
        async def fetch(name):
            raise asyncio.CancelledError()

        with pytest.raises(asyncio.CancelledError):
            asyncio.run(hydrate(["A"], fetch))


class TestHydrationResult:
    def test_map_and_payload(self):
        result = HydrationResult(items=[1, 2], errors=[{"name": "x"}])

        payload = result.map(lambda n: n * 10).as_payload("numbers")

        assert payload == {"numbers": [10, 20], "errors": [{"name": "x"}]}

    def test_map_moves_rejected_items_to_errors(self):
        """A document the mapper cannot convert is reported instead of failing the list."""
        def to_amount(doc):
            return float(doc["amount"])

        result = HydrationResult(items=[{"name": "A", "amount": "5"}, {"name": "B", "amount": "n/a"}])

        mapped = result.map(to_amount)

        assert mapped.items == [5.0]
        assert [error["name"] for error in mapped.errors] == ["B"]
        assert mapped.errors[0]["error"] == "Unknown Error"


class TestHydrateList:
    def test_hydrates_against_erp(self, fake_erp, erp_client):
        """Names come from the list call; one unreadable document is reported."""
        fake_erp.add("Customer", {"customer_name": "Alpha", "modified": "2024-01-03"})
        fake_erp.add("Customer", {"customer_name": "Beta", "modified": "2024-01-02"})
        fake_erp.add("Customer", {"customer_name": "Gamma", "modified": "2024-01-01"})
        fake_erp.fail("Customer", "Beta", status=403, exc_type="PermissionError", message="No permission for Beta")

        result = asyncio.run(DocumentService.hydrate_list(erp_client, "Customer"))

        assert [doc["name"] for doc in result.items] == ["Alpha", "Gamma"]
        assert len(result.errors) == 1
        assert result.errors[0]["name"] == "Beta"
        assert result.errors[0]["error"] == "You do not have permission to perform this action"
