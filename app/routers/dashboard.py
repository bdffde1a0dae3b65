# =============================================================================
# app/routers/dashboard.py - Business Dashboard Endpoints
# =============================================================================
# One company-wide view over sales, purchasing, payments, expenses and stock,
# plus the filter choices the dashboard screen offers.
# =============================================================================

from fastapi import APIRouter

from app.dependencies import ApiContext
from app.handler import handle_api_request
from core.services.reporting_service import ReportingService

router = APIRouter()


@router.get("")
async def business_dashboard(
    ctx: ApiContext,
    company: str | None = None,
    date_from: str | None = None,
    date_to: str | None = None,
):
    """
    Business dashboard for a period.

    The period defaults to the last 30 days up to today; without company
    every company's documents are included.
    """
    async def produce():
        return await ReportingService.business_dashboard(
            ctx.erp, company=company, from_date=date_from, to_date=date_to
        )

    return await handle_api_request(ctx, produce)


@router.get("/options")
async def dashboard_options(ctx: ApiContext):
    async def produce():
        return await ReportingService.dashboard_options(ctx.erp)

    return await handle_api_request(ctx, produce)
