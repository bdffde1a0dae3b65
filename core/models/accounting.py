# =============================================================================
# core/models/accounting.py - Accounting Schemas
# =============================================================================
# Sales and purchase invoices, payments, expense claims, the chart of
# accounts and the accounting summary.
#
# docstatus follows Frappe: 0 = Draft, 1 = Submitted, 2 = Cancelled.
# =============================================================================

from typing import Any

from pydantic import BaseModel, Field

from .common import DocumentModel, LineItem


class SalesInvoice(DocumentModel):
    customer: str = ""
    customer_name: str = ""
    posting_date: str = ""
    due_date: str = ""
    company: str = ""
    currency: str = ""
    total: float = 0
    grand_total: float = 0
    outstanding_amount: float = 0
    status: str = ""
    docstatus: int = 0
    is_pos: int = 0
    items: list[LineItem] = Field(default_factory=list)


class PurchaseRecord(DocumentModel):
    supplier: str = ""
    supplier_name: str = ""
    posting_date: str = ""
    due_date: str = ""
    total_amount: float = 0
    total_tax: float = 0
    grand_total: float = 0
    status: str = ""
    docstatus: int = 0
    currency: str = ""
    company: str = ""
    items: list[LineItem] = Field(default_factory=list)


class PaymentEntry(DocumentModel):
    """
    A Payment Entry.

    payment_method mirrors the ERP's mode_of_payment; the *_account_name and
    party_name fields are display names resolved on single-document reads.
    """
    payment_type: str = ""
    party_type: str = ""
    party: str = ""
    party_name: str = ""
    posting_date: str = ""
    amount: float = 0
    paid_amount: float = 0
    received_amount: float = 0
    reference_no: str = ""
    reference_date: str = ""
    status: str = ""
    payment_method: str = ""
    mode_of_payment: str = ""
    company: str = ""
    currency: str = ""
    paid_from: str = ""
    paid_to: str = ""
    paid_from_account_name: str = ""
    paid_to_account_name: str = ""
    docstatus: int = 0


class ExpenseRecord(DocumentModel):
    expense_type: str = ""
    posting_date: str = ""
    amount: float = 0
    tax_amount: float = 0
    total_amount: float = 0
    description: str = ""
    paid_by: str = ""
    employee: str = ""
    company: str = ""
    currency: str = ""
    status: str = ""
    approval_status: str = ""
    remark: str = ""
    docstatus: int = 0


class ChartOfAccount(DocumentModel):
    account_name: str = ""
    account_type: str = ""
    parent_account: str = ""
    is_group: int = 0
    company: str = ""
    root_type: str = ""
    tax_rate: float = 0
    docstatus: int = 0


class AccountingSummary(BaseModel):
    """Totals of submitted documents for one company and period."""
    company: str = ""
    from_date: str = ""
    to_date: str = ""
    total_revenue: float = 0
    total_expenses: float = 0
    net_profit: float = 0
    pending_receivables: float = 0
    overdue_receivables: float = 0
    pending_invoices: int = 0
    overdue_invoices: int = 0


class RecentTransaction(BaseModel):
    """One line of a recent-activity feed across the accounting doctypes."""
    id: str
    type: str = Field(description='"sale", "purchase", "expense" or "payment"')
    date: str = ""
    description: str = ""
    amount: float = 0
    status: str = ""


class FinancialReport(BaseModel):
    """
    Income statement, cash flow or balance sheet totals.

    details is only filled by the detailed variant: one row per source
    document (or per account for the balance sheet), tagged with the
    category it was summed into.
    """
    report_type: str
    from_date: str = ""
    to_date: str = ""
    company: str = ""
    data: dict[str, float] = Field(default_factory=dict)
    details: list[dict[str, Any]] | None = None
