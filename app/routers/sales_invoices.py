# =============================================================================
# app/routers/sales_invoices.py - Sales Invoice Maintenance
# =============================================================================
# Single-invoice operations. DELETE does not remove the invoice: submitted
# invoices cannot be deleted in the ERP, so it cancels them instead.
# =============================================================================

from fastapi import APIRouter

from app.dependencies import ApiContext, JsonBody
from app.handler import handle_api_request
from core.mappers.accounting import to_sales_invoice
from core.services.document_service import DocumentService, with_priced_items

router = APIRouter()


@router.get("/{name}")
async def get_sales_invoice(name: str, ctx: ApiContext):
    """Get one sales invoice with its items."""
    async def produce():
        doc = await DocumentService.fetch_document(ctx.erp, "Sales Invoice", name)
        return {"salesInvoice": to_sales_invoice(doc)}

    return await handle_api_request(ctx, produce)


@router.put("/{name}")
async def update_sales_invoice(name: str, ctx: ApiContext, payload: JsonBody = {}):
    """
    Update a draft sales invoice.

    The invoice is re-read after saving so recalculated totals and items
    come back as the ERP stored them.
    """
    async def produce():
        await DocumentService.update_document(ctx.erp, "Sales Invoice", name, with_priced_items(payload))
        doc = await DocumentService.fetch_document(ctx.erp, "Sales Invoice", name)
        return {"salesInvoice": to_sales_invoice(doc)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.delete("/{name}")
async def cancel_sales_invoice(name: str, ctx: ApiContext):
    """Cancel a submitted sales invoice."""
    async def produce():
        await ctx.erp.db.cancel("Sales Invoice", name)
        return {"message": f"Sales Invoice {name} cancelled successfully"}

    return await handle_api_request(ctx, produce, require_auth=True)
