# =============================================================================
# app/routers/pos.py - Point of Sale Endpoints
# =============================================================================
# The POS screen loads everything it needs in one GET (profile, customers,
# the finished-goods catalog with stock) and posts each order as a submitted
# sales invoice that updates stock immediately.
# =============================================================================

import asyncio
import logging
import time
from datetime import datetime
from typing import Any

from fastapi import APIRouter

from app.dependencies import ApiContext, JsonBody
from app.exceptions import ApplicationError
from app.handler import handle_api_request
from core.mappers.accounting import to_sales_invoice
from core.mappers.base import pluck, project_document
from core.mappers.pos import build_catalog, to_stock_check
from core.models.pos import POSCatalog, POSProfile
from core.services.document_service import DocumentService, price_lines, require_fields
from lib.erp_client import ERPClientError

logger = logging.getLogger(__name__)

router = APIRouter()

FINISHED_GOODS_GROUP = "Finished Goods"
CUSTOMER_LIMIT = 100
ITEM_LIMIT = 1000
BIN_LIMIT = 10000

# Retry once when the ERP reports a timestamp clash on submit
MODIFIED_CONFLICT = "Document has been modified"
RETRY_DELAY_SECONDS = 1.0

PROFILE_FIELDS = [
    "name",
    "company",
    "customer",
    "warehouse",
    "currency",
    "write_off_account",
    "expense_account",
    "income_account",
]

POS_ITEM_FIELDS = [
    "item_code",
    "item_name",
    "description",
    "stock_uom",
    "image",
    "standard_rate",
    "is_stock_item",
    "item_group",
]


def pos_invoice(order: dict[str, Any]) -> dict[str, Any]:
    """
    Sales Invoice document for a POS order.

    The invoice is created submitted (docstatus 1) with update_stock set,
    and every line is taken from the order's warehouse.
    """
    warehouse = order.get("warehouse")
    lines = price_lines(
        {
            "item_code": item.get("item_code"),
            "item_name": item.get("item_name"),
            "qty": item.get("qty"),
            "rate": item.get("rate"),
            "uom": item.get("uom"),
            "warehouse": warehouse,
            "allow_zero_valuation_rate": 1,
        }
        for item in order["items"]
    )
    doc = {
        "customer": order["customer"],
        "posting_date": order.get("posting_date"),
        "posting_time": order.get("posting_time"),
        "company": order.get("company"),
        "set_warehouse": warehouse,
        "docstatus": 1,
        "is_pos": 1,
        "update_stock": 1,
        "items": [{key: value for key, value in line.items() if value is not None} for line in lines],
        "payments": order.get("payments"),
    }
    return {key: value for key, value in doc.items() if value is not None}


@router.get("")
async def load_pos(ctx: ApiContext):
    """
    Load the POS screen.

    Returns the first POS profile, active customers, and the finished-goods
    items grouped into categories with their stock in the profile warehouse.

    Raises (as envelopes):
        400: No POS profile, or no "Finished Goods" item group
    """
    async def produce():
        client = ctx.erp
        profiles = await DocumentService.list_documents(client, "POS Profile", PROFILE_FIELDS, limit=1)
        if not profiles:
            raise ApplicationError("No POS profile found")
        profile = project_document(POSProfile, profiles[0])

        customers, parent_groups = await asyncio.gather(
            DocumentService.list_documents(
                client,
                "Customer",
                ["name", "customer_name"],
                filters=[["disabled", "=", 0]],
                order_by="customer_name asc",
                limit=CUSTOMER_LIMIT,
            ),
            DocumentService.list_documents(
                client,
                "Item Group",
                ["name"],
                filters=[["name", "=", FINISHED_GOODS_GROUP]],
                limit=1,
            ),
        )
        if not parent_groups:
            raise ApplicationError(f"{FINISHED_GOODS_GROUP} item group not found")
        parent_group = parent_groups[0]["name"]

        child_groups = pluck(await DocumentService.list_documents(
            client,
            "Item Group",
            ["name"],
            filters=[["parent_item_group", "=", parent_group]],
            order_by="name asc",
            limit=CUSTOMER_LIMIT,
        ))
        items = await DocumentService.list_documents(
            client,
            "Item",
            POS_ITEM_FIELDS,
            filters=[
                ["disabled", "=", 0],
                ["is_stock_item", "=", 1],
                ["item_group", "in", [parent_group, *child_groups]],
            ],
            order_by="item_name asc",
            limit=ITEM_LIMIT,
        )

        stock: dict[str, float] = {}
        item_codes = pluck(items, "item_code")
        if item_codes and profile.warehouse:
            bins = await DocumentService.list_documents(
                client,
                "Bin",
                ["item_code", "actual_qty"],
                filters=[["item_code", "in", item_codes], ["warehouse", "=", profile.warehouse]],
                limit=BIN_LIMIT,
            )
            stock = {row["item_code"]: row.get("actual_qty") or 0 for row in bins}
        elif not profile.warehouse:
            logger.warning(f"POS profile {profile.name} has no warehouse; stock shown as 0")

        return POSCatalog(
            profile=profile,
            customers=pluck(customers),
            categories=build_catalog(items, child_groups or [parent_group], stock),
        )

    return await handle_api_request(ctx, produce)


@router.post("")
async def create_pos_order(ctx: ApiContext, payload: JsonBody):
    """
    Record a POS sale as a submitted sales invoice.

    Requires customer and items. If the ERP rejects the submit because the
    document was modified meanwhile, the invoice is sent once more under a
    fresh name and posting time.
    """
    async def produce():
        require_fields(payload, ["customer", "items"])
        doc = pos_invoice(payload)
        try:
            created = await DocumentService.insert_document(ctx.erp, "Sales Invoice", doc)
        except ERPClientError as e:
            if MODIFIED_CONFLICT not in e.message:
                raise
            logger.warning(f"POS invoice conflict, retrying: {e}")
            await asyncio.sleep(RETRY_DELAY_SECONDS)
            retry = {
                **doc,
                "name": f"POS-{int(time.time() * 1000)}",
                "posting_time": datetime.now().strftime("%H:%M:%S"),
            }
            created = await DocumentService.insert_document(ctx.erp, "Sales Invoice", retry)
        return {"salesInvoice": to_sales_invoice(created)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.get("/stock-check")
async def stock_check(ctx: ApiContext, item_codes: str = "", warehouse: str = ""):
    """
    Stock of the given items in one warehouse.

    item_codes is comma separated. Items without a bin in the warehouse are
    reported with zero quantity.
    """
    async def produce():
        codes = [code.strip() for code in item_codes.split(",") if code.strip()]
        if not codes or not warehouse:
            raise ApplicationError("Item codes and warehouse are required")

        bins, items = await asyncio.gather(
            DocumentService.list_documents(
                ctx.erp,
                "Bin",
                ["item_code", "warehouse", "actual_qty", "projected_qty", "stock_uom"],
                filters=[["item_code", "in", codes], ["warehouse", "=", warehouse]],
                limit=ITEM_LIMIT,
            ),
            DocumentService.list_documents(
                ctx.erp,
                "Item",
                ["item_code", "item_name", "is_stock_item", "stock_uom"],
                filters=[["item_code", "in", codes]],
                limit=ITEM_LIMIT,
            ),
        )
        bins_by_code = {row["item_code"]: row for row in bins}
        return {
            "stock": [
                to_stock_check(bins_by_code.get(item.get("item_code")), item, warehouse)
                for item in items
            ]
        }

    return await handle_api_request(ctx, produce)
