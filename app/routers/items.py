# =============================================================================
# app/routers/items.py - Item Master Endpoints
# =============================================================================
# Items are addressed by item_code, which is also their document name.
# =============================================================================

import re
from typing import Annotated, Literal

from fastapi import APIRouter, Query

from app.dependencies import ApiContext, JsonBody
from app.exceptions import DocumentNotFoundError
from app.handler import handle_api_request
from core.mappers.base import pluck
from core.mappers.stock import to_item
from core.services.document_service import DocumentService, require_fields

router = APIRouter()

ITEM_LIST_FIELDS = [
    "name",
    "item_code",
    "item_name",
    "stock_uom",
    "item_group",
    "brand",
    "is_stock_item",
    "is_fixed_asset",
    "disabled",
    "modified",
]

ITEM_DETAIL_FIELDS = ITEM_LIST_FIELDS + ["description", "valuation_rate", "standard_rate", "creation", "owner"]


def slugify_item_code(item_name: str) -> str:
    """
    Derive an item code from an item name.

    Example:
        slugify_item_code("Chocolate Croissant (Large)") -> "chocolate-croissant-large"
    """
    code = re.sub(r"\s+", "-", item_name.strip().lower())
    return re.sub(r"[^a-z0-9-]", "", code)


@router.get("")
async def list_items(
    ctx: ApiContext,
    action: Literal["get-item-groups", "get-uoms"] | None = None,
    limit: Annotated[int, Query(ge=1)] = 100,
):
    """
    List items.

    With action=get-item-groups or action=get-uoms returns the item group
    or unit of measure names instead.
    """
    async def produce():
        if action == "get-item-groups":
            groups = await DocumentService.list_values(ctx.erp, "Item Group", ["name"], order_by="name asc")
            return {"item_groups": pluck(groups)}
        if action == "get-uoms":
            uoms = await DocumentService.list_values(ctx.erp, "UOM", ["name"], order_by="name asc")
            return {"uoms": pluck(uoms)}

        rows = await DocumentService.list_documents(ctx.erp, "Item", ITEM_LIST_FIELDS, limit=limit)
        return {"items": [to_item(row) for row in rows]}

    return await handle_api_request(ctx, produce)


@router.post("")
async def create_item(ctx: ApiContext, payload: JsonBody):
    """
    Create an item.

    Requires item_name and stock_uom. item_code is derived from the name
    when absent; is_stock_item defaults to 1.
    """
    async def produce():
        require_fields(payload, ["item_name", "stock_uom"])
        doc = {key: value for key, value in payload.items() if value is not None}
        doc.setdefault("item_code", slugify_item_code(payload["item_name"]))
        if not doc["item_code"]:
            doc["item_code"] = slugify_item_code(payload["item_name"])
        doc.setdefault("is_stock_item", 1)

        created = await DocumentService.insert_document(ctx.erp, "Item", doc)
        return {"item": to_item(created)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.get("/{code}")
async def get_item(code: str, ctx: ApiContext):
    """Get one item by item code."""
    async def produce():
        rows = await DocumentService.list_documents(
            ctx.erp,
            "Item",
            ITEM_DETAIL_FIELDS,
            filters=[["item_code", "=", code]],
            limit=1,
        )
        if not rows:
            raise DocumentNotFoundError("Item", code)
        return {"item": to_item(rows[0])}

    return await handle_api_request(ctx, produce)


@router.put("/{code}")
async def update_item(code: str, ctx: ApiContext, payload: JsonBody = {}):
    """Update an item; item_code itself cannot be changed."""
    async def produce():
        changes = {key: value for key, value in payload.items() if key not in ("item_code", "name")}
        doc = await DocumentService.update_document(ctx.erp, "Item", code, changes)
        return {"item": to_item(doc)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.delete("/{code}")
async def delete_item(code: str, ctx: ApiContext):
    async def produce():
        await DocumentService.delete_document(ctx.erp, "Item", code)
        return {"message": f"Item {code} deleted successfully"}

    return await handle_api_request(ctx, produce, require_auth=True)
