# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas:
# - envelope.py: Success/failure response envelope and ErrorKind
# - common.py: DTO base class and shared line-item row
# - crm.py / accounting.py / stock.py / assets.py / pos.py: resource DTOs
# - dashboard.py: company-wide dashboard aggregate
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# Envelope
# -----------------------------------------------------------------------------
from .envelope import (
    SUCCESS_MESSAGE,
    ErrorEnvelope,
    ErrorKind,
    SuccessEnvelope,
)

# -----------------------------------------------------------------------------
# Resource DTOs
# -----------------------------------------------------------------------------
from .common import DocumentModel, LineItem, NamedOption
from .crm import (
    Activity,
    Address,
    Communication,
    Contact,
    CRMDashboard,
    Customer,
    Lead,
    Opportunity,
    Quotation,
    SalesOrder,
    SalesPersonSummary,
    StageSummary,
)
from .accounting import (
    AccountingSummary,
    ChartOfAccount,
    ExpenseRecord,
    FinancialReport,
    PaymentEntry,
    PurchaseRecord,
    RecentTransaction,
    SalesInvoice,
)
from .stock import (
    DeliveryNote,
    DeliveryNoteItem,
    Item,
    StockBalance,
    StockEntry,
    StockEntryItem,
    StockLedgerEntry,
    StockSummary,
)
from .assets import (
    Asset,
    AssetCategory,
    AssetDashboard,
    AssetLocation,
    AssetMaintenance,
    AssetMovement,
    AssetRepair,
    AssetValueAdjustment,
)
from .pos import POSCatalog, POSCategory, POSItem, POSProfile, StockCheck
from .dashboard import BusinessDashboard, DashboardOptions

__all__ = [
    # Envelope
    "SUCCESS_MESSAGE",
    "ErrorEnvelope",
    "ErrorKind",
    "SuccessEnvelope",
    # Common
    "DocumentModel",
    "LineItem",
    "NamedOption",
    # CRM
    "Activity",
    "Address",
    "Communication",
    "Contact",
    "CRMDashboard",
    "Customer",
    "Lead",
    "Opportunity",
    "Quotation",
    "SalesOrder",
    "SalesPersonSummary",
    "StageSummary",
    # Accounting
    "AccountingSummary",
    "ChartOfAccount",
    "ExpenseRecord",
    "FinancialReport",
    "PaymentEntry",
    "PurchaseRecord",
    "RecentTransaction",
    "SalesInvoice",
    # Stock
    "DeliveryNote",
    "DeliveryNoteItem",
    "Item",
    "StockBalance",
    "StockEntry",
    "StockEntryItem",
    "StockLedgerEntry",
    "StockSummary",
    # Assets
    "Asset",
    "AssetCategory",
    "AssetDashboard",
    "AssetLocation",
    "AssetMaintenance",
    "AssetMovement",
    "AssetRepair",
    "AssetValueAdjustment",
    # POS
    "POSCatalog",
    "POSCategory",
    "POSItem",
    "POSProfile",
    "StockCheck",
    # Dashboard
    "BusinessDashboard",
    "DashboardOptions",
]
