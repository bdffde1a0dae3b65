# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the ERP Gateway API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
#   python -m app.main   (host, port and reload from settings)
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.exceptions import (
    ConfigurationError,
    GatewayException,
    gateway_exception_handler,
    unhandled_exception_handler,
)
from app.handler import validation_exception_handler
from app.routers import (
    accounting,
    assets,
    crm,
    dashboard,
    files,
    health,
    items,
    pos,
    sales_invoices,
    selling,
    stock,
)
from lib.erp_client import ERPClient

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    - Startup: Build the single ERP client shared by every request
    - Shutdown: Close its connection pool

    Missing ERP settings do not stop the server: the client is left unset
    and every ERP route answers with a configuration error instead.
    """
    logger.info(f"Starting ERP Gateway in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")

    try:
        app.state.erp_client = ERPClient.from_settings(settings)
        logger.info(f"ERP client ready for {app.state.erp_client.base_url}")
    except ConfigurationError as e:
        app.state.erp_client = None
        missing = ", ".join(e.details.get("missing", []))
        logger.warning(f"ERP client not configured: {e.message} ({missing})")

    yield

    logger.info("Shutting down ERP Gateway")
    if app.state.erp_client is not None:
        await app.state.erp_client.aclose()


# Create FastAPI application
app = FastAPI(
    title="ERP Gateway API",
    description="""
## Frappe/ERPNext Gateway

A stateless proxy in front of a Frappe/ERPNext site. Every route forwards
one or more calls to the ERP and answers with a uniform envelope.

### Envelope

| Outcome | Body |
|---------|------|
| Success | `{"success": true, "data": ..., "message": "..."}` |
| Failure | `{"success": false, "error": "...", "details": ..., "statusCode": 4xx/5xx, ...}` |

### Configuration

Set `ERP_API_URL`, `ERP_API_KEY` and `ERP_API_SECRET`. Use
`GET /api/test-env` to see which are set and `GET /api/test-api` to check
the credentials against the ERP.
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Health", "description": "Health checks and connection diagnostics"},
        {"name": "CRM", "description": "Customers, contacts, leads, opportunities, activities, communications, dashboard"},
        {"name": "Selling", "description": "Quotations and sales orders"},
        {"name": "Accounting", "description": "Invoices, purchases, payments, expenses, accounts, reports"},
        {"name": "Sales Invoices", "description": "Update and cancel single sales invoices"},
        {"name": "Items", "description": "Item master"},
        {"name": "Stock", "description": "Stock entries, delivery notes, balances and ledger"},
        {"name": "Assets", "description": "Assets, locations, maintenance, repairs, movements, revaluations, dashboard"},
        {"name": "POS", "description": "Point of sale catalog and orders"},
        {"name": "Files", "description": "File uploads and attachments"},
        {"name": "Dashboard", "description": "Company-wide business dashboard and its filter options"},
    ],
)


# =============================================================================
# Middleware
# =============================================================================

# CORS middleware - allows cross-origin requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

app.add_exception_handler(GatewayException, gateway_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)


# =============================================================================
# Routers
# =============================================================================

# Health and diagnostics
app.include_router(health.router, prefix="/api", tags=["Health"])

# CRM and selling share the /api/crm prefix
app.include_router(crm.router, prefix="/api/crm", tags=["CRM"])
app.include_router(selling.router, prefix="/api/crm", tags=["Selling"])

app.include_router(accounting.router, prefix="/api/accounting", tags=["Accounting"])
app.include_router(sales_invoices.router, prefix="/api/sales-invoices", tags=["Sales Invoices"])
app.include_router(items.router, prefix="/api/items", tags=["Items"])

# Stock resources sit directly under /api (stock-entries, delivery-notes, ...)
app.include_router(stock.router, prefix="/api", tags=["Stock"])

app.include_router(assets.router, prefix="/api/asset", tags=["Assets"])
app.include_router(pos.router, prefix="/api/pos", tags=["POS"])
app.include_router(files.router, prefix="/api/files", tags=["Files"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["Dashboard"])


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "ERP Gateway API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/health",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.is_development,
    )
