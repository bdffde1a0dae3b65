# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by ERP area:
# - health.py: Health checks and connection diagnostics (/api/test-env, /api/test-api)
# - crm.py: Customers, contacts, addresses, leads, opportunities, activities,
#   communications, dashboard
# - selling.py: Quotations and sales orders
# - accounting.py: Sales/purchase invoices, payments, expenses, accounts, summary,
#   financial reports, recent transactions
# - sales_invoices.py: Update and cancel of a single sales invoice
# - items.py: Item master
# - stock.py: Stock entries, delivery notes, stock balance/ledger/summary
# - assets.py: Assets, categories, locations, maintenance, repairs, movements,
#   value adjustments, asset dashboard
# - pos.py: Point of sale catalog, orders and stock check
# - files.py: File uploads
# - dashboard.py: Business dashboard and its filter options
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import accounting
from . import assets
from . import crm
from . import dashboard
from . import files
from . import health
from . import items
from . import pos
from . import sales_invoices
from . import selling
from . import stock

__all__ = [
    "accounting",
    "assets",
    "crm",
    "dashboard",
    "files",
    "health",
    "items",
    "pos",
    "sales_invoices",
    "selling",
    "stock",
]
