# =============================================================================
# core/mappers/accounting.py - Accounting Document Mappers
# =============================================================================
# The ERP and the API disagree on a few names (grand_total vs total_amount,
# mode_of_payment vs payment_method, expense claim totals); the renames all
# live here.
# =============================================================================

from typing import Any, Mapping

from core.mappers.base import project_document
from core.models.accounting import (
    ChartOfAccount,
    ExpenseRecord,
    PaymentEntry,
    PurchaseRecord,
    SalesInvoice,
)

# Query-string status spellings accepted by the purchase/expense lists
STATUS_ALIASES = {
    "draft": "Draft",
    "drafts": "Draft",
    "submitted": "Submitted",
    "paid": "Paid",
    "unpaid": "Unpaid",
    "overdue": "Overdue",
    "cancelled": "Cancelled",
}


def normalize_status(status: str | None) -> str | None:
    """Map a loosely spelled status filter onto the ERP's value."""
    if not status:
        return None
    return STATUS_ALIASES.get(status.strip().lower(), status)


def to_sales_invoice(doc: Mapping[str, Any]) -> SalesInvoice:
    return project_document(SalesInvoice, doc)


def to_purchase(doc: Mapping[str, Any]) -> PurchaseRecord:
    return project_document(
        PurchaseRecord,
        doc,
        total_amount=doc.get("grand_total"),
        total_tax=doc.get("total_taxes_and_charges"),
    )


def to_payment(
    doc: Mapping[str, Any],
    display_names: Mapping[str, str] | None = None,
) -> PaymentEntry:
    """
    Map a Payment Entry.

    Args:
        doc: The Payment Entry document
        display_names: Optional resolved names with keys party_name,
            paid_from_account_name and paid_to_account_name
    """
    names = dict(display_names or {})
    return project_document(
        PaymentEntry,
        doc,
        payment_method=doc.get("mode_of_payment"),
        amount=doc.get("paid_amount"),
        **names,
    )


def to_expense(doc: Mapping[str, Any]) -> ExpenseRecord:
    """Map an Expense Claim, reading the type from its first expense row when needed."""
    rows = doc.get("expenses") or []
    first_row = rows[0] if rows else {}
    return project_document(
        ExpenseRecord,
        doc,
        expense_type=doc.get("expense_type") or first_row.get("expense_type"),
        amount=doc.get("total_claimed_amount", doc.get("amount")),
        tax_amount=doc.get("total_taxes_and_charges"),
        total_amount=doc.get("total_sanctioned_amount"),
        description=doc.get("description") or first_row.get("description"),
    )


def to_account(doc: Mapping[str, Any]) -> ChartOfAccount:
    return project_document(ChartOfAccount, doc)
