# =============================================================================
# app/routers/selling.py - Quotation and Sales Order Endpoints
# =============================================================================
# Mounted under /api/crm next to the CRM router.
#
# Line amounts are qty * rate and the document totals are the sum of the
# line amounts; both are recomputed whenever items are sent.
# =============================================================================

from datetime import date
from typing import Annotated, Any

from fastapi import APIRouter, Query

from app.dependencies import ApiContext, JsonBody
from app.handler import handle_api_request
from core.mappers.crm import to_quotation, to_sales_order
from core.services.document_service import (
    DocumentService,
    build_filters,
    date_range_filters,
    require_fields,
    with_priced_items,
)

router = APIRouter()

ListLimit = Annotated[int | None, Query(ge=1, description="Maximum number of records")]


def _list_filters(
    status: str | None,
    customer_field: str,
    customer: str | None,
    date_from: str | None,
    date_to: str | None,
) -> list[list[Any]]:
    filters = build_filters(status=status, **{customer_field: customer})
    return filters + date_range_filters("transaction_date", date_from, date_to)


# =============================================================================
# Quotations
# =============================================================================

@router.get("/quotations")
async def list_quotations(
    ctx: ApiContext,
    status: str | None = None,
    customer: str | None = None,
    date_from: str | None = None,
    date_to: str | None = None,
    limit: ListLimit = None,
):
    """List quotations, optionally by status, customer and transaction date range."""
    async def produce():
        result = await DocumentService.hydrate_list(
            ctx.erp,
            "Quotation",
            filters=_list_filters(status, "party_name", customer, date_from, date_to),
            limit=limit or ctx.settings.LIST_LIMIT,
        )
        return result.map(to_quotation).as_payload("quotations")

    return await handle_api_request(ctx, produce)


@router.post("/quotations")
async def create_quotation(ctx: ApiContext, payload: JsonBody):
    """
    Create a draft quotation for a customer.

    Requires customer and items; transaction_date defaults to today.
    """
    async def produce():
        require_fields(payload, ["customer", "items"])
        body = {key: value for key, value in payload.items() if key != "customer" and value is not None}
        doc = with_priced_items({
            "quotation_to": "Customer",
            "party_name": payload["customer"],
            "transaction_date": date.today().isoformat(),
            "currency": ctx.settings.DEFAULT_CURRENCY,
            "status": "Draft",
            **body,
        })
        created = await DocumentService.insert_document(ctx.erp, "Quotation", doc)
        return {"quotation": to_quotation(created)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.get("/quotations/{name}")
async def get_quotation(name: str, ctx: ApiContext):
    async def produce():
        doc = await DocumentService.fetch_document(ctx.erp, "Quotation", name)
        return {"quotation": to_quotation(doc)}

    return await handle_api_request(ctx, produce)


@router.put("/quotations/{name}")
async def update_quotation(name: str, ctx: ApiContext, payload: JsonBody = {}):
    """Update a quotation; sending items replaces them and recomputes totals."""
    async def produce():
        changes = with_priced_items(payload)
        if changes.get("customer"):
            changes["party_name"] = changes.pop("customer")
        doc = await DocumentService.update_document(ctx.erp, "Quotation", name, changes)
        return {"quotation": to_quotation(doc)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.delete("/quotations/{name}")
async def delete_quotation(name: str, ctx: ApiContext):
    async def produce():
        await DocumentService.delete_document(ctx.erp, "Quotation", name)
        return {"message": f"Quotation {name} deleted successfully"}

    return await handle_api_request(ctx, produce, require_auth=True)


# =============================================================================
# Sales Orders
# =============================================================================

@router.get("/sales-orders")
async def list_sales_orders(
    ctx: ApiContext,
    status: str | None = None,
    customer: str | None = None,
    date_from: str | None = None,
    date_to: str | None = None,
    limit: ListLimit = None,
):
    """List sales orders, optionally by status, customer and transaction date range."""
    async def produce():
        result = await DocumentService.hydrate_list(
            ctx.erp,
            "Sales Order",
            filters=_list_filters(status, "customer", customer, date_from, date_to),
            limit=limit or ctx.settings.LIST_LIMIT,
        )
        return result.map(to_sales_order).as_payload("salesOrders")

    return await handle_api_request(ctx, produce)


@router.post("/sales-orders")
async def create_sales_order(ctx: ApiContext, payload: JsonBody):
    """
    Create a draft sales order.

    Requires customer and items; transaction_date defaults to today and
    delivery_date to the transaction date.
    """
    async def produce():
        require_fields(payload, ["customer", "items"])
        transaction_date = payload.get("transaction_date") or date.today().isoformat()
        doc = with_priced_items({
            "transaction_date": transaction_date,
            "delivery_date": transaction_date,
            "currency": ctx.settings.DEFAULT_CURRENCY,
            "status": "Draft",
            **{key: value for key, value in payload.items() if value is not None},
        })
        created = await DocumentService.insert_document(ctx.erp, "Sales Order", doc)
        return {"salesOrder": to_sales_order(created)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.get("/sales-orders/{name}")
async def get_sales_order(name: str, ctx: ApiContext):
    async def produce():
        doc = await DocumentService.fetch_document(ctx.erp, "Sales Order", name)
        return {"salesOrder": to_sales_order(doc)}

    return await handle_api_request(ctx, produce)


@router.put("/sales-orders/{name}")
async def update_sales_order(name: str, ctx: ApiContext, payload: JsonBody = {}):
    async def produce():
        doc = await DocumentService.update_document(
            ctx.erp, "Sales Order", name, with_priced_items(payload)
        )
        return {"salesOrder": to_sales_order(doc)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.delete("/sales-orders/{name}")
async def delete_sales_order(name: str, ctx: ApiContext):
    async def produce():
        await DocumentService.delete_document(ctx.erp, "Sales Order", name)
        return {"message": f"Sales Order {name} deleted successfully"}

    return await handle_api_request(ctx, produce, require_auth=True)
