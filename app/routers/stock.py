# =============================================================================
# app/routers/stock.py - Inventory Endpoints
# =============================================================================
# Stock entries, delivery notes and the read-only stock views. Mounted under
# /api, so the paths below are the full resource names.
#
# Every stock line is sent with allow_zero_valuation_rate = 1 so items
# without a valuation rate can still be moved.
# =============================================================================

import asyncio
import logging
import time
from typing import Annotated, Any, Literal

from fastapi import APIRouter, Query

from app.dependencies import ApiContext, JsonBody
from app.exceptions import ApplicationError
from app.handler import handle_api_request
from core.mappers.base import pluck
from core.mappers.stock import (
    to_delivery_note,
    to_item,
    to_ledger_entry,
    to_stock_balance,
    to_stock_entry,
)
from core.services.document_service import (
    DocumentService,
    build_filters,
    date_range_filters,
    require_fields,
)
from core.services.reporting_service import LOW_STOCK_THRESHOLD, ReportingService
from lib.erp_client import ERPClient, ERPClientError

logger = logging.getLogger(__name__)

router = APIRouter()

PageLimit = Annotated[int, Query(ge=1, description="Maximum number of records")]

OPTION_LIMIT = 1000
LEDGER_LIMIT = 200

STOCK_ENTRY_FIELDS = [
    "name",
    "stock_entry_type",
    "posting_date",
    "posting_time",
    "purpose",
    "docstatus",
    "company",
    "from_warehouse",
    "to_warehouse",
    "modified",
]

DELIVERY_NOTE_FIELDS = [
    "name",
    "customer",
    "customer_name",
    "posting_date",
    "posting_time",
    "set_warehouse",
    "territory",
    "docstatus",
    "company",
    "modified",
]

DELIVERY_NOTE_ITEM_FIELDS = [
    "item_code",
    "item_name",
    "qty",
    "uom",
    "rate",
    "amount",
    "warehouse",
    "batch_no",
    "serial_no",
    "against_sales_order",
]

BIN_FIELDS = [
    "item_code",
    "warehouse",
    "actual_qty",
    "reserved_qty",
    "ordered_qty",
    "projected_qty",
    "valuation_rate",
    "stock_value",
    "stock_uom",
]

LEDGER_FIELDS = [
    "name",
    "item_code",
    "warehouse",
    "posting_date",
    "posting_time",
    "voucher_type",
    "voucher_no",
    "actual_qty",
    "qty_after_transaction",
    "incoming_rate",
    "outgoing_rate",
    "valuation_rate",
    "stock_value",
    "stock_uom",
    "batch_no",
    "serial_no",
]

ITEM_OPTION_FIELDS = ["item_code", "item_name", "stock_uom", "valuation_rate"]


# =============================================================================
# Helpers
# =============================================================================

def with_zero_valuation(payload: dict[str, Any]) -> dict[str, Any]:
    """Copy of the payload with allow_zero_valuation_rate set on every line."""
    if payload.get("items") is None:
        return dict(payload)
    lines = [{**line, "allow_zero_valuation_rate": 1} for line in payload["items"]]
    return {**payload, "items": lines}


def docstatus_filter(docstatus: str | None) -> list[list[Any]]:
    if not docstatus or docstatus == "all":
        return []
    try:
        return [["docstatus", "=", int(docstatus)]]
    except ValueError:
        raise ApplicationError(f"Invalid docstatus: {docstatus}")


def validate_stock_entry(payload: dict[str, Any]) -> None:
    """
    Check the fields a stock entry needs for its purpose.

    Raises:
        MissingFieldsError: stock_entry_type, posting_date or items missing
        ApplicationError: A purpose-specific warehouse or line is missing
    """
    require_fields(payload, ["stock_entry_type", "posting_date", "items"])

    purpose = payload.get("purpose")
    if purpose == "Material Issue" and not payload.get("from_warehouse"):
        raise ApplicationError("From Warehouse is required for Material Issue")
    if purpose == "Material Receipt" and not payload.get("to_warehouse"):
        raise ApplicationError("To Warehouse is required for Material Receipt")
    if purpose == "Manufacture":
        if not payload.get("to_warehouse"):
            raise ApplicationError("To Warehouse is required for Manufacturing")
        items = payload["items"]
        if not any(not line.get("is_finished_item") for line in items):
            raise ApplicationError("At least one raw material is required for Manufacturing")
        if not any(line.get("is_finished_item") for line in items):
            raise ApplicationError("At least one finished good is required for Manufacturing")


def stock_entry_name(purpose: str | None, now_ms: int | None = None) -> str:
    """Generated entry name: STE-MI-<ms> for issues, STE-MR-<ms> otherwise."""
    prefix = "STE-MI" if purpose == "Material Issue" else "STE-MR"
    return f"{prefix}-{now_ms if now_ms is not None else int(time.time() * 1000)}"


async def item_name_map(client: ERPClient, item_codes: list[str]) -> dict[str, str]:
    """item_code -> item_name for the given codes (one list call)."""
    codes = sorted(set(code for code in item_codes if code))
    if not codes:
        return {}
    items = await DocumentService.list_documents(
        client,
        "Item",
        ["item_code", "item_name"],
        filters=[["item_code", "in", codes]],
        limit=OPTION_LIMIT,
    )
    return {row["item_code"]: row.get("item_name") or "" for row in items if row.get("item_code")}


async def _names(client: ERPClient, doctype: str) -> list[str]:
    rows = await DocumentService.list_documents(client, doctype, ["name"], order_by="name asc", limit=OPTION_LIMIT)
    return pluck(rows)


def _distinct(rows: list[dict[str, Any]], field: str) -> list[str]:
    return list(dict.fromkeys(pluck(rows, field)))


# =============================================================================
# Stock Entries
# =============================================================================

@router.get("/stock-entries")
async def list_stock_entries(
    ctx: ApiContext,
    action: Literal["get-stock-entry-types", "filter"] | None = None,
    stock_entry_type: str | None = None,
    purpose: str | None = None,
    from_warehouse: str | None = None,
    to_warehouse: str | None = None,
    posting_date_from: str | None = None,
    posting_date_to: str | None = None,
    docstatus: str | None = None,
    limit: PageLimit = 100,
):
    """
    List stock entries.

    action=get-stock-entry-types returns the distinct entry types in use;
    action=filter applies the filter parameters ("all" means no filter).
    """
    async def produce():
        if action == "get-stock-entry-types":
            rows = await DocumentService.list_documents(
                ctx.erp, "Stock Entry", ["stock_entry_type"], limit=OPTION_LIMIT
            )
            return {"stock_entry_types": _distinct(rows, "stock_entry_type")}

        filters: list[list[Any]] = []
        if action == "filter":
            filters = build_filters(
                stock_entry_type=stock_entry_type,
                purpose=purpose,
                from_warehouse=from_warehouse,
                to_warehouse=to_warehouse,
            )
            filters += date_range_filters("posting_date", posting_date_from, posting_date_to)
            filters += docstatus_filter(docstatus)

        rows = await DocumentService.list_documents(
            ctx.erp, "Stock Entry", STOCK_ENTRY_FIELDS, filters=filters, limit=limit
        )
        return {"stockEntries": [to_stock_entry(row) for row in rows]}

    return await handle_api_request(ctx, produce)


@router.post("/stock-entries")
async def create_stock_entry(ctx: ApiContext, payload: JsonBody):
    """
    Create a draft stock entry.

    Requires stock_entry_type, posting_date and items. Material Issue needs
    from_warehouse, Material Receipt needs to_warehouse, and Manufacture
    needs to_warehouse plus at least one raw and one finished line.
    """
    async def produce():
        validate_stock_entry(payload)
        doc = with_zero_valuation({key: value for key, value in payload.items() if value is not None})
        doc.setdefault("name", stock_entry_name(payload.get("purpose")))

        created = await DocumentService.insert_document(ctx.erp, "Stock Entry", doc)
        return {"stockEntry": to_stock_entry(created)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.get("/stock-entries/options")
async def stock_entry_options(ctx: ApiContext):
    """Companies, warehouses, entry types, purposes, UOMs and items for the entry form."""
    async def produce():
        client = ctx.erp
        companies, warehouses, entries, uoms, items = await asyncio.gather(
            _names(client, "Company"),
            _names(client, "Warehouse"),
            DocumentService.list_documents(
                client, "Stock Entry", ["stock_entry_type", "purpose"], limit=OPTION_LIMIT
            ),
            _names(client, "UOM"),
            DocumentService.list_documents(client, "Item", ITEM_OPTION_FIELDS, limit=OPTION_LIMIT),
        )
        return {
            "companies": companies,
            "warehouses": warehouses,
            "stockEntryTypes": _distinct(entries, "stock_entry_type"),
            "purposes": _distinct(entries, "purpose"),
            "uoms": uoms,
            "items": [to_item(row) for row in items],
        }

    return await handle_api_request(ctx, produce)


@router.get("/stock-entries/{name}")
async def get_stock_entry(name: str, ctx: ApiContext):
    """Get one stock entry with its lines."""
    async def produce():
        doc = await DocumentService.fetch_document(ctx.erp, "Stock Entry", name)
        return {"stockEntry": to_stock_entry(doc)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.put("/stock-entries/{name}")
async def update_stock_entry(name: str, ctx: ApiContext, payload: JsonBody = {}):
    async def produce():
        doc = await DocumentService.update_document(
            ctx.erp, "Stock Entry", name, with_zero_valuation(payload)
        )
        return {"stockEntry": to_stock_entry(doc)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.delete("/stock-entries/{name}")
async def delete_stock_entry(name: str, ctx: ApiContext):
    async def produce():
        await ctx.erp.db.delete_doc("Stock Entry", name)
        return {"message": f"Stock Entry {name} deleted successfully"}

    return await handle_api_request(ctx, produce, require_auth=True)


# =============================================================================
# Delivery Notes
# =============================================================================

@router.get("/delivery-notes")
async def list_delivery_notes(
    ctx: ApiContext,
    action: Literal["get-customers", "get-territories", "filter"] | None = None,
    customer: str | None = None,
    territory: str | None = None,
    posting_date_from: str | None = None,
    posting_date_to: str | None = None,
    docstatus: str | None = None,
    limit: PageLimit = 100,
):
    """
    List delivery notes.

    action=get-customers and action=get-territories return name lists;
    action=filter applies customer, territory, posting date and docstatus.
    """
    async def produce():
        if action == "get-customers":
            return {"customers": await _names(ctx.erp, "Customer")}
        if action == "get-territories":
            return {"territories": await _names(ctx.erp, "Territory")}

        filters: list[list[Any]] = []
        if action == "filter":
            filters = build_filters(customer=customer, territory=territory)
            filters += date_range_filters("posting_date", posting_date_from, posting_date_to)
            filters += docstatus_filter(docstatus)

        rows = await DocumentService.list_documents(
            ctx.erp, "Delivery Note", DELIVERY_NOTE_FIELDS, filters=filters, limit=limit
        )
        return {"deliveryNotes": [to_delivery_note(row) for row in rows]}

    return await handle_api_request(ctx, produce)


@router.post("/delivery-notes")
async def create_delivery_note(ctx: ApiContext, payload: JsonBody):
    """
    Create a draft delivery note.

    Requires customer, posting_date, items and set_warehouse.
    """
    async def produce():
        require_fields(payload, ["customer", "posting_date", "items"])
        if not payload.get("set_warehouse"):
            raise ApplicationError("Warehouse is required for Delivery Note")

        doc = with_zero_valuation({key: value for key, value in payload.items() if value is not None})
        created = await DocumentService.insert_document(ctx.erp, "Delivery Note", doc)
        return {"deliveryNote": to_delivery_note(created)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.get("/delivery-notes/options")
async def delivery_note_options(ctx: ApiContext):
    """Customers, companies, warehouses, territories, items and UOMs for the note form."""
    async def produce():
        client = ctx.erp
        customers, companies, warehouses, territories, items, uoms = await asyncio.gather(
            _names(client, "Customer"),
            _names(client, "Company"),
            _names(client, "Warehouse"),
            _names(client, "Territory"),
            DocumentService.list_documents(client, "Item", ITEM_OPTION_FIELDS, limit=OPTION_LIMIT),
            _names(client, "UOM"),
        )
        return {
            "customers": customers,
            "companies": companies,
            "warehouses": warehouses,
            "territories": territories,
            "items": [to_item(row) for row in items],
            "uoms": uoms,
        }

    return await handle_api_request(ctx, produce)


@router.get("/delivery-notes/{name}")
async def get_delivery_note(name: str, ctx: ApiContext):
    """
    Get one delivery note with its lines.

    When the document comes back without its item table the lines are read
    from Delivery Note Item directly; if that fails too the note is
    returned with no lines.
    """
    async def produce():
        doc = await DocumentService.fetch_document(ctx.erp, "Delivery Note", name)
        if not isinstance(doc.get("items"), list):
            try:
                items = await DocumentService.list_documents(
                    ctx.erp,
                    "Delivery Note Item",
                    DELIVERY_NOTE_ITEM_FIELDS,
                    filters=[["parent", "=", name]],
                    order_by="idx asc",
                )
            except ERPClientError as e:
                logger.warning(f"Could not read items of Delivery Note {name}: {e}")
                items = []
            doc = {**doc, "items": items}
        return {"deliveryNote": to_delivery_note(doc)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.put("/delivery-notes/{name}")
async def update_delivery_note(name: str, ctx: ApiContext, payload: JsonBody = {}):
    async def produce():
        doc = await DocumentService.update_document(
            ctx.erp, "Delivery Note", name, with_zero_valuation(payload)
        )
        return {"deliveryNote": to_delivery_note(doc)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.delete("/delivery-notes/{name}")
async def delete_delivery_note(name: str, ctx: ApiContext):
    async def produce():
        await ctx.erp.db.delete_doc("Delivery Note", name)
        return {"message": f"Delivery Note {name} deleted successfully"}

    return await handle_api_request(ctx, produce, require_auth=True)


# =============================================================================
# Stock Views
# =============================================================================

@router.get("/stock-balance")
async def stock_balance(
    ctx: ApiContext,
    warehouse: str | None = None,
    item_group: str | None = None,
    show_low_stock: bool = False,
    show_out_of_stock: bool = False,
):
    """Bin quantities per item and warehouse, with item names."""
    async def produce():
        filters = build_filters(warehouse=warehouse, item_group=item_group)
        if show_low_stock:
            filters += [["actual_qty", ">", 0], ["actual_qty", "<", LOW_STOCK_THRESHOLD]]
        if show_out_of_stock:
            filters.append(["actual_qty", "=", 0])

        rows = await DocumentService.list_documents(
            ctx.erp, "Bin", BIN_FIELDS, filters=filters, limit=OPTION_LIMIT
        )
        names = await item_name_map(ctx.erp, pluck(rows, "item_code"))
        return {"stockBalance": [to_stock_balance(row, names) for row in rows]}

    return await handle_api_request(ctx, produce)


@router.get("/stock-ledger")
async def stock_ledger(
    ctx: ApiContext,
    warehouse: str | None = None,
    date_from: str | None = None,
    date_to: str | None = None,
):
    """The latest stock ledger entries, newest posting date first."""
    async def produce():
        filters = build_filters(warehouse=warehouse)
        filters += date_range_filters("posting_date", date_from, date_to)

        rows = await DocumentService.list_documents(
            ctx.erp,
            "Stock Ledger Entry",
            LEDGER_FIELDS,
            filters=filters,
            order_by="posting_date desc",
            limit=LEDGER_LIMIT,
        )
        names = await item_name_map(ctx.erp, pluck(rows, "item_code"))
        return {"ledgerEntries": [to_ledger_entry(row, names) for row in rows]}

    return await handle_api_request(ctx, produce)


@router.get("/stock-summary")
async def stock_summary(ctx: ApiContext):
    async def produce():
        return {"summary": await ReportingService.stock_summary(ctx.erp)}

    return await handle_api_request(ctx, produce)
