# =============================================================================
# core/services/document_service.py - Generic Document Operations
# =============================================================================
# The handful of ERP document patterns every resource endpoint is built from:
# list names, hydrate, fetch one, insert-then-refetch, merge-then-save,
# delete. Also the small pure helpers shared by the routers: required-field
# checks, filter building and line/total arithmetic.
# =============================================================================

import logging
from typing import Any, Iterable

from app.exceptions import ApplicationError, DocumentNotFoundError, MissingFieldsError
from core.services.hydration import HydrationResult, hydrate
from lib.erp_client import ERPClient

logger = logging.getLogger(__name__)

DEFAULT_ORDER = "modified desc"


# =============================================================================
# Input Helpers
# =============================================================================

def is_missing(value: Any) -> bool:
    """None, blank strings and empty collections count as missing; 0 does not."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


def require_fields(payload: dict[str, Any], fields: Iterable[str]) -> None:
    """
    Check that every field is present in the request payload.

    Raises:
        MissingFieldsError: Listing every missing field, in the given order
    """
    missing = [name for name in fields if is_missing(payload.get(name))]
    if missing:
        raise MissingFieldsError(missing)


def build_filters(**conditions: Any) -> list[list[Any]]:
    """
    Build Frappe equality filters from optional query parameters.

    Empty values and the UI's "all" placeholder are skipped.

    Example:
        build_filters(status="Open", territory=None) -> [["status", "=", "Open"]]
    """
    return [
        [field, "=", value]
        for field, value in conditions.items()
        if not is_missing(value) and value != "all"
    ]


def date_range_filters(field: str, date_from: str | None, date_to: str | None) -> list[list[Any]]:
    """Inclusive date bounds on one field."""
    filters = []
    if date_from:
        filters.append([field, ">=", date_from])
    if date_to:
        filters.append([field, "<=", date_to])
    return filters


def merge_partial(current: dict[str, Any], changes: dict[str, Any]) -> dict[str, Any]:
    """
    Overlay a partial update on the current document.

    Keys present in `changes` with a non-null value win (including 0 and
    ""); absent or null keys keep the stored value. Merging the same
    changes twice gives the same document.
    """
    merged = dict(current)
    for key, value in changes.items():
        if value is not None:
            merged[key] = value
    return merged


# =============================================================================
# Line Arithmetic
# =============================================================================

def _number(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def price_lines(items: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    """
    Copy each line with qty and rate as numbers and amount = qty * rate.
    """
    priced = []
    for item in items:
        qty = _number(item.get("qty"))
        rate = _number(item.get("rate"))
        priced.append({**item, "qty": qty, "rate": rate, "amount": qty * rate})
    return priced


def document_totals(lines: Iterable[dict[str, Any]]) -> dict[str, float]:
    """Header totals of a selling/buying document: the sum of line amounts."""
    total = sum(_number(line.get("amount")) for line in lines)
    return {
        "total": total,
        "base_total": total,
        "net_total": total,
        "base_net_total": total,
        "grand_total": total,
        "base_grand_total": total,
    }


def with_priced_items(payload: dict[str, Any]) -> dict[str, Any]:
    """
    Recompute line amounts and header totals when the payload carries items.

    Payloads without items are returned as a plain copy.
    """
    if payload.get("items") is None:
        return dict(payload)
    lines = price_lines(payload["items"])
    return {**payload, "items": lines, **document_totals(lines)}


# =============================================================================
# Document Service
# =============================================================================

class DocumentService:
    """
    Document operations shared by every resource router.

    All methods take the ERP client explicitly; nothing is cached.
    """

    @staticmethod
    async def list_names(
        client: ERPClient,
        doctype: str,
        filters: list[list[Any]] | None = None,
        order_by: str = DEFAULT_ORDER,
        limit: int | None = None,
    ) -> list[str]:
        """Names of the documents matching filters, newest first."""
        rows = await client.db.get_doc_list(
            doctype,
            fields=["name"],
            filters=filters,
            order_by=order_by,
            limit=limit,
        )
        return [row["name"] for row in rows if row.get("name")]

    @staticmethod
    async def list_documents(
        client: ERPClient,
        doctype: str,
        fields: list[str],
        filters: list[list[Any]] | None = None,
        order_by: str = DEFAULT_ORDER,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Partial documents (only `fields`) in one list call."""
        return await client.db.get_doc_list(
            doctype,
            fields=fields,
            filters=filters,
            order_by=order_by,
            limit=limit,
        )

    @staticmethod
    async def fetch_document(client: ERPClient, doctype: str, name: str) -> dict[str, Any]:
        """
        Fetch one full document.

        Raises:
            DocumentNotFoundError: If the ERP answers with an empty document
            ERPClientError: On any upstream failure
        """
        doc = await client.db.get_doc(doctype, name)
        if not doc:
            raise DocumentNotFoundError(doctype, name)
        return doc

    @staticmethod
    async def hydrate_list(
        client: ERPClient,
        doctype: str,
        filters: list[list[Any]] | None = None,
        order_by: str = DEFAULT_ORDER,
        limit: int | None = None,
    ) -> HydrationResult[dict[str, Any]]:
        """
        List matching names, then fetch every full document concurrently.

        Failed lookups are reported in the result's errors list.
        """
        names = await DocumentService.list_names(
            client, doctype, filters=filters, order_by=order_by, limit=limit
        )
        logger.debug(f"Hydrating {len(names)} {doctype} documents")
        return await hydrate(
            names,
            lambda name: DocumentService.fetch_document(client, doctype, name),
        )

    @staticmethod
    async def insert_document(client: ERPClient, doctype: str, doc: dict[str, Any]) -> dict[str, Any]:
        """
        Insert a document and return the stored version.

        The stored document is re-read so defaults and child rows filled in
        by the ERP are part of the answer.
        """
        created = await client.db.create_doc(doctype, doc)
        name = created.get("name")
        logger.info(f"Created {doctype}: {name}")
        if not name:
            return created
        return await DocumentService.fetch_document(client, doctype, name)

    @staticmethod
    async def insert_via_rpc(client: ERPClient, doctype: str, doc: dict[str, Any]) -> dict[str, Any]:
        """
        Insert through frappe.client.insert and return the stored version.

        Used for doctypes whose child tables must be validated together with
        the parent in one insert.

        Raises:
            ApplicationError: If the ERP answers without a document name
        """
        body = await client.call.post("frappe.client.insert", {"doc": {"doctype": doctype, **doc}})
        created = body.get("message") or {}
        name = created.get("name") if isinstance(created, dict) else None
        if not name:
            raise ApplicationError(f"Failed to create {doctype}", status_code=500)
        logger.info(f"Created {doctype}: {name}")
        return await DocumentService.fetch_document(client, doctype, name)

    @staticmethod
    async def update_document(
        client: ERPClient,
        doctype: str,
        name: str,
        changes: dict[str, Any],
    ) -> dict[str, Any]:
        """
        Merge a partial update over the current document and save it.

        Only fields that actually change are sent; an update that changes
        nothing does not call save at all.

        Raises:
            DocumentNotFoundError: If the document does not exist
        """
        current = await DocumentService.fetch_document(client, doctype, name)
        merged = merge_partial(current, changes)
        changed = {key: value for key, value in merged.items() if current.get(key) != value}

        if not changed:
            logger.debug(f"No changes for {doctype} {name}")
            return current

        saved = await client.db.update_doc(doctype, name, changed)
        logger.info(f"Updated {doctype} {name}: {sorted(changed)}")
        return saved or merged

    @staticmethod
    async def delete_document(client: ERPClient, doctype: str, name: str) -> None:
        """Delete a document through frappe.client.delete."""
        await client.call.post("frappe.client.delete", {"doctype": doctype, "name": name})
        logger.info(f"Deleted {doctype} {name}")

    @staticmethod
    async def get_value(
        client: ERPClient,
        doctype: str,
        name: str,
        fieldname: str,
    ) -> Any:
        """Read one field of one document (None when absent or unreadable)."""
        body = await client.call.get(
            "frappe.client.get_value",
            {"doctype": doctype, "filters": {"name": name}, "fieldname": fieldname},
        )
        message = body.get("message") or {}
        return message.get(fieldname) if isinstance(message, dict) else None

    @staticmethod
    async def list_values(
        client: ERPClient,
        doctype: str,
        fields: list[str],
        filters: list[list[Any]] | None = None,
        order_by: str | None = None,
        limit: int = 0,
    ) -> list[dict[str, Any]]:
        """
        Rows through frappe.client.get_list (limit 0 = no limit).

        Used for option lists and reports where only a few columns matter.
        """
        body = await client.call.get(
            "frappe.client.get_list",
            {
                "doctype": doctype,
                "fields": fields,
                "filters": filters or None,
                "order_by": order_by,
                "limit_page_length": limit,
            },
        )
        return body.get("message") or []
