# =============================================================================
# app/routers/accounting.py - Accounting Endpoints
# =============================================================================
# Sales invoices, purchase invoices, payments, expense claims, the chart of
# accounts, the accounting summary, financial reports, the recent transaction
# feed and the option lists for accounting forms.
# Maintenance of a single sales invoice (update, cancel) lives in
# app/routers/sales_invoices.py.
# =============================================================================

import asyncio
from datetime import date
from typing import Annotated, Any

from fastapi import APIRouter, Query

from app.dependencies import ApiContext, JsonBody
from app.exceptions import ApplicationError, MissingFieldsError
from app.handler import handle_api_request
from core.mappers.accounting import (
    normalize_status,
    to_account,
    to_expense,
    to_payment,
    to_purchase,
    to_sales_invoice,
)
from core.mappers.base import pluck
from core.services.document_service import (
    DocumentService,
    build_filters,
    date_range_filters,
    document_totals,
    price_lines,
    require_fields,
)
from core.services.reporting_service import REPORT_TYPES, ReportingService
from lib.erp_client import ERPClient

router = APIRouter()

ListLimit = Annotated[int | None, Query(ge=1, description="Maximum number of records")]

BY_POSTING_DATE = "posting_date desc"


def _present(payload: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in payload.items() if value is not None}


# =============================================================================
# Sales
# =============================================================================

@router.get("/sales")
async def list_sales(
    ctx: ApiContext,
    customer: str | None = None,
    status: str | None = None,
    date_from: str | None = None,
    date_to: str | None = None,
    limit: ListLimit = None,
):
    """List sales invoices with their items."""
    async def produce():
        filters = build_filters(customer=customer, status=normalize_status(status))
        filters += date_range_filters("posting_date", date_from, date_to)
        result = await DocumentService.hydrate_list(
            ctx.erp,
            "Sales Invoice",
            filters=filters,
            order_by=BY_POSTING_DATE,
            limit=limit or ctx.settings.LIST_LIMIT,
        )
        return result.map(to_sales_invoice).as_payload("sales")

    return await handle_api_request(ctx, produce)


@router.post("/sales")
async def create_sale(ctx: ApiContext, payload: JsonBody):
    """
    Create a draft sales invoice.

    Requires customer and items. Each line's amount is qty * rate and the
    invoice totals are the sum of the lines.
    """
    async def produce():
        require_fields(payload, ["customer", "items"])
        lines = price_lines(payload["items"])
        totals = document_totals(lines)
        posting_date = payload.get("posting_date") or date.today().isoformat()
        doc = {
            "posting_date": posting_date,
            "due_date": posting_date,
            "currency": ctx.settings.DEFAULT_CURRENCY,
            "conversion_rate": 1,
            "update_stock": 1,
            **_present(payload),
            "items": lines,
            **totals,
            "outstanding_amount": totals["grand_total"],
            "docstatus": 0,
        }
        created = await DocumentService.insert_document(ctx.erp, "Sales Invoice", doc)
        return {"salesInvoice": to_sales_invoice(created)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.get("/sales/{name}")
async def get_sale(name: str, ctx: ApiContext):
    async def produce():
        doc = await DocumentService.fetch_document(ctx.erp, "Sales Invoice", name)
        return {"salesInvoice": to_sales_invoice(doc)}

    return await handle_api_request(ctx, produce)


# =============================================================================
# Purchases
# =============================================================================

@router.get("/purchases")
async def list_purchases(
    ctx: ApiContext,
    status: str | None = None,
    supplier: str | None = None,
    limit: ListLimit = None,
):
    """List purchase invoices; status accepts loose spellings ("drafts", "paid", ...)."""
    async def produce():
        result = await DocumentService.hydrate_list(
            ctx.erp,
            "Purchase Invoice",
            filters=build_filters(status=normalize_status(status), supplier=supplier),
            order_by=BY_POSTING_DATE,
            limit=limit or ctx.settings.LIST_LIMIT,
        )
        return result.map(to_purchase).as_payload("purchases")

    return await handle_api_request(ctx, produce, require_auth=True)


@router.post("/purchases")
async def create_purchase(ctx: ApiContext, payload: JsonBody):
    """Create a draft purchase invoice. Requires supplier, posting_date, company and items."""
    async def produce():
        require_fields(payload, ["supplier", "posting_date", "company", "items"])
        lines = price_lines(payload["items"])
        totals = document_totals(lines)
        doc = {
            "currency": ctx.settings.DEFAULT_CURRENCY,
            "conversion_rate": 1,
            **_present(payload),
            "items": lines,
            **totals,
            "outstanding_amount": totals["grand_total"],
            "docstatus": 0,
            "update_stock": 0,
            "is_return": 0,
        }
        created = await DocumentService.insert_document(ctx.erp, "Purchase Invoice", doc)
        return {"purchase": to_purchase(created)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.get("/purchases/{name}")
async def get_purchase(name: str, ctx: ApiContext):
    async def produce():
        doc = await DocumentService.fetch_document(ctx.erp, "Purchase Invoice", name)
        return {"purchase": to_purchase(doc)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.delete("/purchases/{name}")
async def delete_purchase(name: str, ctx: ApiContext):
    async def produce():
        await DocumentService.delete_document(ctx.erp, "Purchase Invoice", name)
        return {"message": f"Purchase Invoice {name} deleted successfully"}

    return await handle_api_request(ctx, produce, require_auth=True)


# =============================================================================
# Payments
# =============================================================================

PAYMENT_LIST_FIELDS = [
    "name",
    "payment_type",
    "party_type",
    "party",
    "party_name",
    "posting_date",
    "paid_amount",
    "received_amount",
    "reference_no",
    "reference_date",
    "status",
    "mode_of_payment",
    "company",
    "paid_from",
    "paid_to",
    "docstatus",
]

PAYMENT_REQUIRED = [
    "payment_type",
    "party_type",
    "party",
    "posting_date",
    "amount",
    "company",
    "paid_from",
    "paid_to",
]

PARTY_NAME_FIELDS = {
    "Customer": "customer_name",
    "Supplier": "supplier_name",
    "Employee": "employee_name",
}


def _payment_doc(payload: dict[str, Any]) -> dict[str, Any]:
    """API payment fields -> Payment Entry fields (amount, payment_method)."""
    doc = {key: value for key, value in _present(payload).items() if key not in ("amount", "payment_method")}
    if payload.get("amount") is not None:
        doc["paid_amount"] = payload["amount"]
        doc["received_amount"] = payload["amount"]
    if payload.get("payment_method"):
        doc["mode_of_payment"] = payload["payment_method"]
    return doc


async def _payment_display_names(client: ERPClient, doc: dict[str, Any]) -> dict[str, str]:
    """Resolve account and party display names, falling back to the raw names."""
    async def lookup(doctype: str, name: str | None, field: str) -> str:
        if not name:
            return ""
        value = await DocumentService.get_value(client, doctype, name, field)
        return value or name

    async def party_name() -> str:
        field = PARTY_NAME_FIELDS.get(doc.get("party_type") or "")
        if not field:
            return doc.get("party") or ""
        return await lookup(doc["party_type"], doc.get("party"), field)

    paid_from, paid_to, party = await asyncio.gather(
        lookup("Account", doc.get("paid_from"), "account_name"),
        lookup("Account", doc.get("paid_to"), "account_name"),
        party_name(),
    )
    return {
        "paid_from_account_name": paid_from,
        "paid_to_account_name": paid_to,
        "party_name": party,
    }


@router.get("/payments")
async def list_payments(
    ctx: ApiContext,
    payment_type: str | None = None,
    party_type: str | None = None,
    party: str | None = None,
    date_from: str | None = None,
    date_to: str | None = None,
    limit: ListLimit = None,
):
    """List payment entries (list fields only, no hydration)."""
    async def produce():
        filters = build_filters(payment_type=payment_type, party_type=party_type, party=party)
        filters += date_range_filters("posting_date", date_from, date_to)
        rows = await DocumentService.list_documents(
            ctx.erp,
            "Payment Entry",
            PAYMENT_LIST_FIELDS,
            filters=filters,
            order_by=BY_POSTING_DATE,
            limit=limit or ctx.settings.LIST_LIMIT,
        )
        return {"payments": [to_payment(row) for row in rows]}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.post("/payments")
async def create_payment(ctx: ApiContext, payload: JsonBody):
    """Create a draft payment entry."""
    async def produce():
        require_fields(payload, PAYMENT_REQUIRED)
        doc = {"docstatus": 0, **_payment_doc(payload)}
        created = await DocumentService.insert_document(ctx.erp, "Payment Entry", doc)
        return {"payment": to_payment(created)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.get("/payments/{name}")
async def get_payment(name: str, ctx: ApiContext):
    """Get one payment entry with account and party display names."""
    async def produce():
        doc = await DocumentService.fetch_document(ctx.erp, "Payment Entry", name)
        names = await _payment_display_names(ctx.erp, doc)
        return {"payment": to_payment(doc, names)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.put("/payments/{name}")
async def update_payment(name: str, ctx: ApiContext, payload: JsonBody = {}):
    async def produce():
        doc = await DocumentService.update_document(ctx.erp, "Payment Entry", name, _payment_doc(payload))
        return {"payment": to_payment(doc)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.delete("/payments/{name}")
async def delete_payment(name: str, ctx: ApiContext):
    async def produce():
        await DocumentService.delete_document(ctx.erp, "Payment Entry", name)
        return {"message": f"Payment Entry {name} deleted successfully"}

    return await handle_api_request(ctx, produce, require_auth=True)


# =============================================================================
# Expenses
# =============================================================================

@router.get("/expenses")
async def list_expenses(
    ctx: ApiContext,
    status: str | None = None,
    limit: ListLimit = None,
):
    """List expense claims."""
    async def produce():
        result = await DocumentService.hydrate_list(
            ctx.erp,
            "Expense Claim",
            filters=build_filters(status=normalize_status(status)),
            order_by=BY_POSTING_DATE,
            limit=limit or ctx.settings.LIST_LIMIT,
        )
        return result.map(to_expense).as_payload("expenses")

    return await handle_api_request(ctx, produce)


@router.post("/expenses")
async def create_expense(ctx: ApiContext, payload: JsonBody):
    """
    Create a draft expense claim.

    Requires expense_type, posting_date, amount and paid_by. A single
    expense row is built from those fields unless expenses are given.
    """
    async def produce():
        require_fields(payload, ["expense_type", "posting_date", "amount", "paid_by"])
        rows = payload.get("expenses") or [{
            "expense_type": payload["expense_type"],
            "expense_date": payload["posting_date"],
            "amount": payload["amount"],
            "sanctioned_amount": payload["amount"],
            "description": payload.get("description") or "",
        }]
        doc = {
            "currency": ctx.settings.DEFAULT_CURRENCY,
            **_present(payload),
            "expenses": rows,
            "total_claimed_amount": payload["amount"],
            "status": "Draft",
            "docstatus": 0,
        }
        expense = await DocumentService.insert_via_rpc(ctx.erp, "Expense Claim", doc)
        return {"expense": to_expense(expense)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.get("/expenses/{name}")
async def get_expense(name: str, ctx: ApiContext):
    async def produce():
        doc = await DocumentService.fetch_document(ctx.erp, "Expense Claim", name)
        return {"expense": to_expense(doc)}

    return await handle_api_request(ctx, produce)


@router.put("/expenses/{name}")
async def update_expense(name: str, ctx: ApiContext, payload: JsonBody = {}):
    async def produce():
        doc = await DocumentService.update_document(ctx.erp, "Expense Claim", name, payload)
        return {"expense": to_expense(doc)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.delete("/expenses/{name}")
async def delete_expense(name: str, ctx: ApiContext):
    async def produce():
        await DocumentService.delete_document(ctx.erp, "Expense Claim", name)
        return {"message": f"Expense claim {name} deleted successfully"}

    return await handle_api_request(ctx, produce, require_auth=True)


# =============================================================================
# Chart of Accounts
# =============================================================================

ACCOUNT_FIELDS = [
    "name",
    "account_name",
    "account_type",
    "parent_account",
    "is_group",
    "company",
    "root_type",
    "tax_rate",
    "docstatus",
]


@router.get("/chart-of-accounts")
async def list_accounts(ctx: ApiContext, company: str | None = None):
    """List the accounts of one company (company is required)."""
    async def produce():
        if not company:
            raise MissingFieldsError(["company"])
        rows = await DocumentService.list_documents(
            ctx.erp,
            "Account",
            ACCOUNT_FIELDS,
            filters=build_filters(company=company),
            order_by="name asc",
            limit=ctx.settings.LIST_LIMIT,
        )
        return {"accounts": [to_account(row) for row in rows]}

    return await handle_api_request(ctx, produce)


@router.post("/chart-of-accounts")
async def create_account(ctx: ApiContext, payload: JsonBody):
    """Create an account. Requires account_name, account_type, company and root_type."""
    async def produce():
        require_fields(payload, ["account_name", "account_type", "company", "root_type"])
        doc = {"is_group": 0, **_present(payload)}
        created = await DocumentService.insert_document(ctx.erp, "Account", doc)
        return {"account": to_account(created)}

    return await handle_api_request(ctx, produce, require_auth=True)


# =============================================================================
# Summary / Options
# =============================================================================

@router.get("/summary")
async def accounting_summary(
    ctx: ApiContext,
    company: str | None = None,
    from_date: str | None = None,
    to_date: str | None = None,
):
    """Revenue, expenses, net profit and receivables for a period."""
    async def produce():
        return await ReportingService.accounting_summary(
            ctx.erp, company=company, from_date=from_date, to_date=to_date
        )

    return await handle_api_request(ctx, produce)


def _report_params(**params: str | None) -> None:
    missing = [name for name, value in params.items() if not value]
    if missing:
        raise MissingFieldsError(missing)
    if params["report_type"] not in REPORT_TYPES:
        raise ApplicationError(
            f"Invalid report type: {params['report_type']}",
            details={"report_types": list(REPORT_TYPES)},
        )


@router.get("/reports")
async def financial_report(
    ctx: ApiContext,
    report_type: str | None = None,
    company: str | None = None,
    date_from: str | None = None,
    date_to: str | None = None,
):
    """
    Totals of an income statement, cash flow or balance sheet.

    report_type is Income, CashFlow or Balance; every parameter is required.
    """
    async def produce():
        _report_params(report_type=report_type, company=company, date_from=date_from, date_to=date_to)
        report = await ReportingService.financial_report(ctx.erp, report_type, company, date_from, date_to)
        return report.model_dump(exclude_none=True)

    return await handle_api_request(ctx, produce)


@router.get("/reports/detailed")
async def detailed_financial_report(
    ctx: ApiContext,
    report_type: str | None = None,
    company: str | None = None,
    from_date: str | None = None,
    to_date: str | None = None,
):
    """The same totals as /reports plus the document (or account) rows behind each one."""
    async def produce():
        _report_params(report_type=report_type, company=company, from_date=from_date, to_date=to_date)
        return await ReportingService.financial_report(
            ctx.erp, report_type, company, from_date, to_date, detailed=True
        )

    return await handle_api_request(ctx, produce)


@router.get("/transactions/recent")
async def recent_transactions(
    ctx: ApiContext,
    company: str | None = None,
    limit: Annotated[int, Query(ge=1)] = 10,
):
    """The latest submitted sales, purchases, payments and expense claims, newest first."""
    async def produce():
        if not company:
            raise MissingFieldsError(["company"])
        transactions = await ReportingService.recent_transactions(ctx.erp, company, limit=limit)
        return {"transactions": transactions}

    return await handle_api_request(ctx, produce)


@router.get("/options")
async def accounting_options(ctx: ApiContext, company: str | None = None):
    """Companies, suppliers, customers, leaf accounts and modes of payment."""
    async def produce():
        client = ctx.erp
        account_filters = [["is_group", "=", 0]] + build_filters(company=company)
        companies, suppliers, customers, accounts, modes = await asyncio.gather(
            DocumentService.list_values(client, "Company", ["name"], order_by="name asc"),
            DocumentService.list_values(client, "Supplier", ["name"], filters=[["disabled", "=", 0]], order_by="name asc"),
            DocumentService.list_values(client, "Customer", ["name"], filters=[["disabled", "=", 0]], order_by="name asc"),
            DocumentService.list_values(client, "Account", ["name"], filters=account_filters, order_by="name asc"),
            DocumentService.list_values(client, "Mode of Payment", ["name"], order_by="name asc"),
        )
        return {
            "companies": pluck(companies),
            "suppliers": pluck(suppliers),
            "customers": pluck(customers),
            "accounts": pluck(accounts),
            "modes_of_payment": pluck(modes),
        }

    return await handle_api_request(ctx, produce)
