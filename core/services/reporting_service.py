# =============================================================================
# core/services/reporting_service.py - Dashboard and Summary Aggregates
# =============================================================================
# Read-only figures built from ERP counts and narrow list queries. The
# fetching lives in ReportingService; the arithmetic lives in the plain
# functions below it so it can be tested without an ERP.
# =============================================================================

import asyncio
import logging
from collections import defaultdict
from datetime import date, timedelta
from typing import Any, Iterable

from core.mappers.accounting import to_expense, to_sales_invoice
from core.mappers.assets import to_asset_maintenance, to_asset_repair
from core.models.accounting import (
    AccountingSummary,
    ExpenseRecord,
    FinancialReport,
    RecentTransaction,
    SalesInvoice,
)
from core.models.assets import (
    AssetActivity,
    AssetDashboard,
    AssetGroupValue,
    AssetMaintenance,
    AssetRepair,
    MaintenanceDue,
)
from core.models.common import NamedOption
from core.models.crm import CRMDashboard, SalesPersonSummary, StageSummary
from core.models.dashboard import (
    BusinessDashboard,
    CategorySales,
    DashboardOptions,
    DashboardSummary,
    ExpenseBreakdown,
    InventoryAlert,
    PartyMetric,
    SalesTrend,
    TopItem,
    ValueOption,
)
from core.models.stock import StockSummary
from core.services.document_service import DocumentService, date_range_filters
from lib.erp_client import ERPClient

logger = logging.getLogger(__name__)

TOP_SALES_PERSONS = 5
LOW_STOCK_THRESHOLD = 10
RECENT_DAYS = 7

TOP_ROWS = 10
RECENT_ASSET_RECORDS = 5
MAINTENANCE_SCAN_LIMIT = 100
ATTENTION_DAYS = 30
DASHBOARD_DAYS = 30
OPTION_LIMIT = 100

REPORT_TYPES = ("Income", "CashFlow", "Balance")
BALANCE_CATEGORIES = {"Asset": "Assets", "Liability": "Liabilities", "Equity": "Equity"}
DOCUMENT_STATUS = {0: "Draft", 1: "Submitted", 2: "Cancelled"}

DATE_RANGES = [
    ValueOption(value="today", label="Today"),
    ValueOption(value="yesterday", label="Yesterday"),
    ValueOption(value="this_week", label="This Week"),
    ValueOption(value="last_week", label="Last Week"),
    ValueOption(value="this_month", label="This Month"),
    ValueOption(value="last_month", label="Last Month"),
    ValueOption(value="this_quarter", label="This Quarter"),
    ValueOption(value="last_quarter", label="Last Quarter"),
    ValueOption(value="this_year", label="This Year"),
    ValueOption(value="last_year", label="Last Year"),
    ValueOption(value="custom", label="Custom Range"),
]
DASHBOARD_REPORT_TYPES = [
    ValueOption(value="sales", label="Sales Report"),
    ValueOption(value="purchase", label="Purchase Report"),
    ValueOption(value="inventory", label="Inventory Report"),
    ValueOption(value="financial", label="Financial Statement"),
    ValueOption(value="tax", label="Tax Report"),
]


# =============================================================================
# Pure aggregation
# =============================================================================

def _amount(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def conversion_rate(converted: int, total: int) -> float:
    """Percentage of converted leads, two decimals (0 when there are no leads)."""
    if total <= 0:
        return 0.0
    return round(converted / total * 100, 2)


def summarize_stages(opportunities: Iterable[dict[str, Any]]) -> list[StageSummary]:
    """Count and amount of opportunities per sales stage, largest count first."""
    counts: dict[str, int] = defaultdict(int)
    amounts: dict[str, float] = defaultdict(float)
    for row in opportunities:
        stage = row.get("sales_stage") or "Unassigned"
        counts[stage] += 1
        amounts[stage] += _amount(row.get("opportunity_amount"))

    stages = [StageSummary(stage=stage, count=counts[stage], amount=amounts[stage]) for stage in counts]
    return sorted(stages, key=lambda summary: (-summary.count, summary.stage))


def summarize_owners(
    opportunities: Iterable[dict[str, Any]],
    limit: int = TOP_SALES_PERSONS,
) -> list[SalesPersonSummary]:
    """Opportunity owners ranked by total opportunity amount."""
    counts: dict[str, int] = defaultdict(int)
    amounts: dict[str, float] = defaultdict(float)
    for row in opportunities:
        owner = row.get("opportunity_owner")
        if not owner:
            continue
        counts[owner] += 1
        amounts[owner] += _amount(row.get("opportunity_amount"))

    ranked = sorted(counts, key=lambda owner: (-amounts[owner], owner))
    return [
        SalesPersonSummary(name=owner, opportunities=counts[owner], amount=amounts[owner])
        for owner in ranked[:limit]
    ]


def summarize_accounts(
    invoices: Iterable[dict[str, Any]],
    purchases: Iterable[dict[str, Any]],
    expenses: Iterable[dict[str, Any]],
    today: str,
) -> dict[str, Any]:
    """
    Revenue, expenses and receivables from submitted documents.

    Args:
        invoices: Sales Invoice rows (grand_total, outstanding_amount, due_date)
        purchases: Purchase Invoice rows (grand_total)
        expenses: Expense Claim rows (total_sanctioned_amount)
        today: ISO date used to decide what is overdue

    Returns:
        Fields of AccountingSummary except company and period
    """
    invoices = list(invoices)
    revenue = sum(_amount(row.get("grand_total")) for row in invoices)
    spent = sum(_amount(row.get("grand_total")) for row in purchases)
    spent += sum(_amount(row.get("total_sanctioned_amount")) for row in expenses)

    pending = [row for row in invoices if _amount(row.get("outstanding_amount")) > 0]
    overdue = [row for row in pending if row.get("due_date") and str(row["due_date"]) < today]

    return {
        "total_revenue": revenue,
        "total_expenses": spent,
        "net_profit": revenue - spent,
        "pending_receivables": sum(_amount(row.get("outstanding_amount")) for row in pending),
        "overdue_receivables": sum(_amount(row.get("outstanding_amount")) for row in overdue),
        "pending_invoices": len(pending),
        "overdue_invoices": len(overdue),
    }


def _day(value: Any) -> str:
    return str(value or "")[:10]


def asset_value(row: dict[str, Any]) -> float:
    """Purchase amount less opening depreciation, never below zero."""
    return max(0.0, _amount(row.get("gross_purchase_amount")) - _amount(row.get("opening_accumulated_depreciation")))


def group_assets(assets: Iterable[dict[str, Any]], key: str, fallback: str) -> list[AssetGroupValue]:
    """Count and book value of assets per category or location, largest value first."""
    counts: dict[str, int] = defaultdict(int)
    values: dict[str, float] = defaultdict(float)
    for row in assets:
        group = row.get(key) or fallback
        counts[group] += 1
        values[group] += asset_value(row)

    groups = [AssetGroupValue(group=group, count=counts[group], value=values[group]) for group in counts]
    return sorted(groups, key=lambda entry: (-entry.value, entry.group))


def maintenance_schedule(
    maintenance: Iterable[AssetMaintenance],
    today: date,
    limit: int = TOP_ROWS,
) -> tuple[int, list[MaintenanceDue]]:
    """
    Scheduled maintenance ordered by due day.

    Returns:
        (number due within ATTENTION_DAYS from today, first `limit` entries)
    """
    due = []
    for record in maintenance:
        if record.status != "Scheduled" or not record.next_maintenance_date:
            continue
        try:
            day = date.fromisoformat(_day(record.next_maintenance_date))
        except ValueError:
            logger.warning(f"Skipping {record.name}: bad next maintenance date {record.next_maintenance_date!r}")
            continue
        due.append(MaintenanceDue(
            asset=record.asset_name or record.asset,
            due_date=day.isoformat(),
            days_remaining=(day - today).days,
            status=record.status,
        ))

    attention = sum(1 for entry in due if 0 <= entry.days_remaining <= ATTENTION_DAYS)
    due.sort(key=lambda entry: entry.days_remaining)
    return attention, due[:limit]


def asset_activities(
    maintenance: Iterable[AssetMaintenance],
    repairs: Iterable[AssetRepair],
    movements: Iterable[dict[str, Any]],
    limit: int = TOP_ROWS,
) -> list[AssetActivity]:
    """Maintenance, repairs and movements merged newest first, cancelled and undated ones left out."""
    activities = [
        AssetActivity(
            type="maintenance",
            asset=record.asset_name or record.asset,
            date=_day(record.maintenance_date),
            description=record.description or f"{record.maintenance_type or 'Asset'} maintenance",
            status=record.status,
        )
        for record in maintenance
    ]
    activities += [
        AssetActivity(
            type="repair",
            asset=record.asset_name or record.asset,
            date=_day(record.completion_date or record.repair_date or record.failure_date),
            description=record.description or record.repair_details or "Asset repair",
            status=record.status,
        )
        for record in repairs
    ]
    activities += [
        AssetActivity(
            type="movement",
            asset="Multiple Assets",
            date=_day(row.get("movement_date")),
            description=f"{row.get('purpose') or 'Asset'} movement",
            status=DOCUMENT_STATUS.get(row.get("docstatus") or 0, ""),
        )
        for row in movements
    ]

    kept = [activity for activity in activities if activity.date and activity.status != "Cancelled"]
    kept.sort(key=lambda activity: activity.date, reverse=True)
    return kept[:limit]


def income_statement(
    invoices: Iterable[dict[str, Any]],
    purchases: Iterable[dict[str, Any]],
    expenses: Iterable[ExpenseRecord],
) -> tuple[dict[str, float], list[dict[str, Any]]]:
    """
    Income statement over submitted documents.

    Revenue is the invoices' grand total and tax their taxes and charges;
    purchases count as cost of goods sold and sanctioned expense claims as
    operating expenses.

    Returns:
        (totals by line, one detail row per document)
    """
    details = []
    revenue = tax = 0.0
    for row in invoices:
        amount = _amount(row.get("grand_total"))
        revenue += amount
        tax += _amount(row.get("total_taxes_and_charges"))
        details.append({"category": "Revenue", "name": row.get("name"), "party": row.get("customer") or "",
                        "date": _day(row.get("posting_date")), "amount": amount})

    cost = 0.0
    for row in purchases:
        amount = _amount(row.get("grand_total"))
        cost += amount
        details.append({"category": "Cost of Goods Sold", "name": row.get("name"), "party": row.get("supplier") or "",
                        "date": _day(row.get("posting_date")), "amount": amount})

    operating = 0.0
    for record in expenses:
        amount = record.total_amount or record.amount
        operating += amount
        details.append({"category": "Operating Expenses", "name": record.name, "party": record.employee,
                        "date": _day(record.posting_date), "amount": amount})

    gross_profit = revenue - cost
    operating_income = gross_profit - operating
    totals = {
        "Revenue": revenue,
        "Cost of Goods Sold": cost,
        "Gross Profit": gross_profit,
        "Operating Expenses": operating,
        "Operating Income": operating_income,
        "Tax": tax,
        "Net Income": operating_income - tax,
    }
    return totals, details


def payment_amount(row: dict[str, Any]) -> float:
    """Received amount of an incoming payment, paid amount of any other."""
    if row.get("payment_type") == "Receive":
        return _amount(row.get("received_amount") or row.get("paid_amount"))
    return _amount(row.get("paid_amount") or row.get("received_amount"))


def cash_flow(payments: Iterable[dict[str, Any]]) -> tuple[dict[str, float], list[dict[str, Any]]]:
    """Inflow from Receive payment entries, outflow from every other payment type."""
    details = []
    inflow = outflow = 0.0
    for row in payments:
        amount = payment_amount(row)
        if row.get("payment_type") == "Receive":
            inflow += amount
            category = "Cash Inflow"
        else:
            outflow += amount
            category = "Cash Outflow"
        details.append({"category": category, "name": row.get("name"), "party": row.get("party") or "",
                        "date": _day(row.get("posting_date")), "amount": amount})

    totals = {"Cash Inflow": inflow, "Cash Outflow": outflow, "Net Cash Flow": inflow - outflow}
    return totals, details


def balance_sheet(
    gl_entries: Iterable[dict[str, Any]],
    accounts: Iterable[dict[str, Any]],
) -> tuple[dict[str, float], list[dict[str, Any]]]:
    """
    Account balances grouped by root type.

    Asset balances are debit minus credit; liability and equity balances
    are reported as credit minus debit. Accounts without entries are
    left out of the details.
    """
    balances: dict[str, float] = defaultdict(float)
    for row in gl_entries:
        balances[row.get("account")] += _amount(row.get("debit")) - _amount(row.get("credit"))

    totals = {category: 0.0 for category in BALANCE_CATEGORIES.values()}
    details = []
    for account in accounts:
        category = BALANCE_CATEGORIES.get(account.get("root_type"))
        name = account.get("name")
        if category is None or name not in balances:
            continue
        balance = balances[name] if category == "Assets" else -balances[name]
        totals[category] += balance
        details.append({"category": category, "name": name,
                        "account_name": account.get("account_name") or name, "amount": balance})
    return totals, details


def merge_recent(
    invoices: Iterable[dict[str, Any]],
    purchases: Iterable[dict[str, Any]],
    payments: Iterable[dict[str, Any]],
    expenses: Iterable[ExpenseRecord],
    limit: int = TOP_ROWS,
) -> list[RecentTransaction]:
    """Sales, purchases, payments and expense claims as one feed, newest first."""
    feed = [
        RecentTransaction(id=row["name"], type="sale", date=_day(row.get("posting_date")),
                          description=f"Sale to {row.get('customer') or 'customer'}",
                          amount=_amount(row.get("grand_total")), status=row.get("status") or "")
        for row in invoices
    ]
    feed += [
        RecentTransaction(id=row["name"], type="purchase", date=_day(row.get("posting_date")),
                          description=f"Purchase from {row.get('supplier') or 'supplier'}",
                          amount=_amount(row.get("grand_total")), status=row.get("status") or "")
        for row in purchases
    ]
    for row in payments:
        direction = "from" if row.get("payment_type") == "Receive" else "to"
        feed.append(RecentTransaction(
            id=row["name"], type="payment", date=_day(row.get("posting_date")),
            description=f"Payment {direction} {row.get('party') or 'party'}",
            amount=payment_amount(row), status=row.get("status") or "",
        ))
    feed += [
        RecentTransaction(id=record.name, type="expense", date=_day(record.posting_date),
                          description=record.expense_type or record.description or "Expense claim",
                          amount=record.total_amount or record.amount, status=record.status)
        for record in expenses
    ]

    feed.sort(key=lambda entry: entry.date, reverse=True)
    return feed[:limit]


def top_items(invoices: Iterable[SalesInvoice], limit: int = TOP_ROWS) -> list[TopItem]:
    """Invoiced items ranked by amount."""
    ranked: dict[str, TopItem] = {}
    for invoice in invoices:
        for line in invoice.items:
            entry = ranked.setdefault(line.item_code, TopItem(item_code=line.item_code, item_name=line.item_name))
            entry.quantity += line.qty
            entry.amount += line.amount
    return sorted(ranked.values(), key=lambda entry: (-entry.amount, entry.item_code))[:limit]


def sales_by_category(invoices: Iterable[SalesInvoice], item_groups: dict[str, str]) -> list[CategorySales]:
    amounts: dict[str, float] = defaultdict(float)
    for invoice in invoices:
        for line in invoice.items:
            amounts[item_groups.get(line.item_code) or "Uncategorized"] += line.amount
    categories = [CategorySales(category=category, amount=amount) for category, amount in amounts.items()]
    return sorted(categories, key=lambda entry: (-entry.amount, entry.category))


def party_metrics(entries: Iterable[tuple[str, str, float]], limit: int = TOP_ROWS) -> list[PartyMetric]:
    """
    Rank parties by total amount.

    Args:
        entries: (party, posting date, amount) per document
    """
    metrics: dict[str, PartyMetric] = {}
    for party, day, amount in entries:
        if not party:
            continue
        metric = metrics.setdefault(party, PartyMetric(name=party))
        metric.total_purchases += amount
        metric.last_purchase_date = max(metric.last_purchase_date, day)
    return sorted(metrics.values(), key=lambda metric: (-metric.total_purchases, metric.name))[:limit]


def inventory_alerts(
    items: Iterable[dict[str, Any]],
    bins: Iterable[dict[str, Any]],
    threshold: float = LOW_STOCK_THRESHOLD,
    limit: int = TOP_ROWS,
) -> list[InventoryAlert]:
    """Stock items at or below the threshold across all warehouses, out-of-stock ones first."""
    stock: dict[str, float] = defaultdict(float)
    for row in bins:
        stock[row.get("item_code")] += _amount(row.get("actual_qty"))

    alerts = []
    for item in items:
        if not item.get("is_stock_item"):
            continue
        code = item["name"]
        qty = stock.get(code, 0.0)
        if qty > threshold:
            continue
        alerts.append(InventoryAlert(
            item_code=code,
            item_name=item.get("item_name") or code,
            current_stock=qty,
            reorder_level=threshold,
            status="out" if qty <= 0 else "low",
        ))

    alerts.sort(key=lambda alert: (alert.status != "out", alert.current_stock, alert.item_code))
    return alerts[:limit]


def expense_breakdown(expenses: Iterable[ExpenseRecord]) -> list[ExpenseBreakdown]:
    amounts: dict[str, float] = defaultdict(float)
    for record in expenses:
        amounts[record.expense_type or "Other"] += record.total_amount or record.amount

    total = sum(amounts.values())
    breakdown = [
        ExpenseBreakdown(
            category=category,
            amount=amount,
            percentage=round(amount / total * 100, 2) if total else 0.0,
        )
        for category, amount in amounts.items()
    ]
    return sorted(breakdown, key=lambda entry: (-entry.amount, entry.category))


def sales_trends(invoices: Iterable[SalesInvoice], purchases: Iterable[dict[str, Any]]) -> list[SalesTrend]:
    """Revenue, purchase spend and their difference per posting day, oldest first."""
    revenue: dict[str, float] = defaultdict(float)
    spent: dict[str, float] = defaultdict(float)
    for invoice in invoices:
        revenue[_day(invoice.posting_date)] += invoice.grand_total
    for row in purchases:
        spent[_day(row.get("posting_date"))] += _amount(row.get("grand_total"))

    days = sorted(day for day in set(revenue) | set(spent) if day)
    return [
        SalesTrend(date=day, revenue=revenue[day], expenses=spent[day], profit=revenue[day] - spent[day])
        for day in days
    ]


# =============================================================================
# Reporting Service
# =============================================================================

class ReportingService:
    """Dashboard and summary queries."""

    @staticmethod
    async def crm_dashboard(client: ERPClient) -> CRMDashboard:
        """Headline CRM figures from counts plus open opportunities."""
        total_leads, converted_leads, open_opportunities, open_quotations = await asyncio.gather(
            client.db.get_count("Lead"),
            client.db.get_count("Lead", [["status", "=", "Converted"]]),
            client.db.get_count("Opportunity", [["status", "=", "Open"]]),
            client.db.get_count("Quotation", [["status", "=", "Open"]]),
        )
        opportunities = await DocumentService.list_values(
            client,
            "Opportunity",
            ["name", "sales_stage", "opportunity_amount", "opportunity_owner"],
            filters=[["status", "=", "Open"]],
        )

        return CRMDashboard(
            total_leads=total_leads,
            open_opportunities=open_opportunities,
            quotations_to_follow_up=open_quotations,
            lead_conversion_rate=conversion_rate(converted_leads, total_leads),
            opportunities_by_stage=summarize_stages(opportunities),
            top_sales_persons=summarize_owners(opportunities),
        )

    @staticmethod
    async def accounting_summary(
        client: ERPClient,
        company: str | None = None,
        from_date: str | None = None,
        to_date: str | None = None,
    ) -> AccountingSummary:
        """
        Accounting totals over submitted documents.

        Args:
            client: ERP client
            company: Restrict to one company (all companies when None)
            from_date: First posting date included
            to_date: Last posting date included
        """
        base = [["docstatus", "=", 1]]
        if company:
            base.append(["company", "=", company])
        base += date_range_filters("posting_date", from_date, to_date)

        invoices, purchases, expenses = await asyncio.gather(
            DocumentService.list_values(
                client, "Sales Invoice", ["name", "grand_total", "outstanding_amount", "due_date"], filters=base
            ),
            DocumentService.list_values(client, "Purchase Invoice", ["name", "grand_total"], filters=base),
            DocumentService.list_values(client, "Expense Claim", ["name", "total_sanctioned_amount"], filters=base),
        )
        logger.debug(
            f"Summary over {len(invoices)} invoices, {len(purchases)} purchases, {len(expenses)} expense claims"
        )

        totals = summarize_accounts(invoices, purchases, expenses, today=date.today().isoformat())
        return AccountingSummary(
            company=company or "",
            from_date=from_date or "",
            to_date=to_date or "",
            **totals,
        )

    @staticmethod
    async def stock_summary(client: ERPClient, today: date | None = None) -> StockSummary:
        """
        Inventory counts plus the total stock value over all bins.

        Args:
            client: ERP client
            today: Reference day for the seven-day transaction window
        """
        since = ((today or date.today()) - timedelta(days=RECENT_DAYS)).isoformat()
        items, warehouses, low_stock, out_of_stock, recent, bins = await asyncio.gather(
            client.db.get_count("Item", [["is_stock_item", "=", 1]]),
            client.db.get_count("Warehouse"),
            client.db.get_count("Bin", [["actual_qty", ">", 0], ["actual_qty", "<", LOW_STOCK_THRESHOLD]]),
            client.db.get_count("Bin", [["actual_qty", "=", 0]]),
            client.db.get_count("Stock Ledger Entry", [["posting_date", ">=", since]]),
            DocumentService.list_documents(client, "Bin", ["stock_value"], limit=1000),
        )
        return StockSummary(
            total_items=items,
            total_warehouses=warehouses,
            total_stock_value=sum(_amount(row.get("stock_value")) for row in bins),
            low_stock_items=low_stock,
            out_of_stock_items=out_of_stock,
            recent_transactions=recent,
        )

    @staticmethod
    async def asset_dashboard(client: ERPClient, today: date | None = None) -> AssetDashboard:
        """
        Asset counts, book value per category and location, upcoming
        maintenance and the latest maintenance, repair and movement records.
        """
        today = today or date.today()
        total, under_maintenance, assets, movements, maintenance, repairs = await asyncio.gather(
            client.db.get_count("Asset"),
            client.db.get_count("Asset", [["status", "=", "Under Maintenance"]]),
            DocumentService.list_values(
                client,
                "Asset",
                ["name", "asset_category", "location", "gross_purchase_amount", "opening_accumulated_depreciation"],
            ),
            DocumentService.list_values(
                client,
                "Asset Movement",
                ["name", "purpose", "movement_date", "docstatus"],
                order_by="modified desc",
                limit=RECENT_ASSET_RECORDS,
            ),
            DocumentService.hydrate_list(client, "Asset Maintenance", limit=MAINTENANCE_SCAN_LIMIT),
            DocumentService.hydrate_list(client, "Asset Repair", limit=RECENT_ASSET_RECORDS),
        )
        maintenance = maintenance.map(to_asset_maintenance)
        repairs = repairs.map(to_asset_repair)
        attention, due = maintenance_schedule(maintenance.items, today)

        return AssetDashboard(
            total_assets=total,
            assets_under_maintenance=under_maintenance,
            assets_requiring_attention=attention,
            assets_by_category=group_assets(assets, "asset_category", "Uncategorized"),
            assets_by_location=group_assets(assets, "location", "Unspecified"),
            recent_activities=asset_activities(maintenance.items[:RECENT_ASSET_RECORDS], repairs.items, movements),
            maintenance_due=due,
            errors=maintenance.errors + repairs.errors,
        )

    @staticmethod
    async def financial_report(
        client: ERPClient,
        report_type: str,
        company: str,
        from_date: str,
        to_date: str,
        detailed: bool = False,
    ) -> FinancialReport:
        """
        Income statement, cash flow or balance sheet for one company.

        Args:
            client: ERP client
            report_type: One of REPORT_TYPES
            company: Company the documents belong to
            from_date: First posting date included (ignored by the balance sheet)
            to_date: Last posting date included
            detailed: Also return the rows each total was summed from
        """
        submitted = [["docstatus", "=", 1], ["company", "=", company]]
        period = submitted + date_range_filters("posting_date", from_date, to_date)

        if report_type == "Income":
            invoices, purchases, claims = await asyncio.gather(
                DocumentService.list_values(
                    client,
                    "Sales Invoice",
                    ["name", "customer", "posting_date", "grand_total", "total_taxes_and_charges"],
                    filters=period,
                ),
                DocumentService.list_values(
                    client, "Purchase Invoice", ["name", "supplier", "posting_date", "grand_total"], filters=period
                ),
                DocumentService.list_values(
                    client,
                    "Expense Claim",
                    ["name", "employee", "posting_date", "total_claimed_amount", "total_sanctioned_amount"],
                    filters=period,
                ),
            )
            totals, details = income_statement(invoices, purchases, [to_expense(row) for row in claims])
        elif report_type == "CashFlow":
            payments = await DocumentService.list_values(
                client,
                "Payment Entry",
                ["name", "payment_type", "party", "posting_date", "paid_amount", "received_amount"],
                filters=period,
            )
            totals, details = cash_flow(payments)
        else:
            entries, accounts = await asyncio.gather(
                DocumentService.list_values(
                    client,
                    "GL Entry",
                    ["account", "debit", "credit"],
                    filters=submitted + date_range_filters("posting_date", None, to_date),
                ),
                DocumentService.list_values(
                    client,
                    "Account",
                    ["name", "account_name", "root_type"],
                    filters=[["company", "=", company], ["is_group", "=", 0]],
                ),
            )
            totals, details = balance_sheet(entries, accounts)

        logger.debug(f"{report_type} report for {company}: {len(details)} source rows")
        return FinancialReport(
            report_type=report_type,
            from_date=from_date,
            to_date=to_date,
            company=company,
            data=totals,
            details=details if detailed else None,
        )

    @staticmethod
    async def recent_transactions(client: ERPClient, company: str, limit: int = TOP_ROWS) -> list[RecentTransaction]:
        """The latest submitted sales, purchases, payments and expense claims of a company."""
        submitted = [["docstatus", "=", 1], ["company", "=", company]]
        newest = {"filters": submitted, "order_by": "posting_date desc", "limit": limit}

        invoices, purchases, payments, claims = await asyncio.gather(
            DocumentService.list_values(
                client, "Sales Invoice", ["name", "customer", "posting_date", "grand_total", "status"], **newest
            ),
            DocumentService.list_values(
                client, "Purchase Invoice", ["name", "supplier", "posting_date", "grand_total", "status"], **newest
            ),
            DocumentService.list_values(
                client,
                "Payment Entry",
                ["name", "payment_type", "party", "posting_date", "paid_amount", "received_amount", "status"],
                **newest,
            ),
            DocumentService.list_values(
                client,
                "Expense Claim",
                ["name", "posting_date", "total_claimed_amount", "total_sanctioned_amount", "status"],
                **newest,
            ),
        )
        return merge_recent(invoices, purchases, payments, [to_expense(row) for row in claims], limit)

    @staticmethod
    async def business_dashboard(
        client: ERPClient,
        company: str | None = None,
        from_date: str | None = None,
        to_date: str | None = None,
        today: date | None = None,
    ) -> BusinessDashboard:
        """
        Company-wide figures for one period (the last DASHBOARD_DAYS days by default).

        Invoices and expense claims are fetched in full for their item and
        expense rows; documents that fail to load are listed under errors.
        """
        today = today or date.today()
        to_date = to_date or today.isoformat()
        from_date = from_date or (today - timedelta(days=DASHBOARD_DAYS)).isoformat()

        owned = [["company", "=", company]] if company else []
        period = [["docstatus", "=", 1]] + owned + date_range_filters("posting_date", from_date, to_date)

        invoices, purchases, payments, claims, cash_accounts, bins, items, customers, suppliers = await asyncio.gather(
            DocumentService.hydrate_list(client, "Sales Invoice", filters=period),
            DocumentService.list_values(
                client, "Purchase Invoice", ["name", "supplier", "posting_date", "grand_total", "status"], filters=period
            ),
            DocumentService.list_values(
                client,
                "Payment Entry",
                ["name", "payment_type", "party", "posting_date", "paid_amount", "received_amount", "status"],
                filters=period,
            ),
            DocumentService.hydrate_list(client, "Expense Claim", filters=period),
            DocumentService.list_values(
                client, "Account", ["name"], filters=owned + [["account_type", "=", "Cash"], ["is_group", "=", 0]]
            ),
            DocumentService.list_values(client, "Bin", ["item_code", "actual_qty", "stock_value"]),
            DocumentService.list_values(
                client, "Item", ["name", "item_name", "item_group", "is_stock_item"], filters=[["disabled", "=", 0]]
            ),
            client.db.get_count("Customer"),
            client.db.get_count("Supplier"),
        )

        cash_balance = 0.0
        cash_names = [row["name"] for row in cash_accounts]
        if cash_names:
            entries = await DocumentService.list_values(
                client,
                "GL Entry",
                ["debit", "credit"],
                filters=[["account", "in", cash_names], ["docstatus", "=", 1], ["posting_date", "<=", to_date]],
            )
            cash_balance = sum(_amount(row.get("debit")) - _amount(row.get("credit")) for row in entries)

        invoices = invoices.map(to_sales_invoice)
        claims = claims.map(to_expense)
        revenue = sum(invoice.grand_total for invoice in invoices.items)
        spent = sum(_amount(row.get("grand_total")) for row in purchases)

        summary = DashboardSummary(
            total_revenue=revenue,
            total_expenses=spent,
            net_profit=revenue - spent,
            cash_balance=cash_balance,
            pending_payments=sum(invoice.outstanding_amount for invoice in invoices.items),
            overdue_payments=sum(
                invoice.outstanding_amount for invoice in invoices.items if invoice.status == "Overdue"
            ),
            sales_count=len(invoices.items),
            purchase_count=len(purchases),
            inventory_value=sum(_amount(row.get("stock_value")) for row in bins),
            customer_count=customers,
            supplier_count=suppliers,
        )
        sales_rows = [
            {"name": invoice.name, "customer": invoice.customer_name or invoice.customer,
             "posting_date": invoice.posting_date, "grand_total": invoice.grand_total, "status": invoice.status}
            for invoice in invoices.items
        ]

        return BusinessDashboard(
            summary=summary,
            recent_transactions=merge_recent(sales_rows, purchases, payments, claims.items),
            top_selling_items=top_items(invoices.items),
            sales_by_category=sales_by_category(invoices.items, {row["name"]: row.get("item_group") for row in items}),
            customer_metrics=party_metrics(
                (row["customer"], _day(row["posting_date"]), row["grand_total"]) for row in sales_rows
            ),
            supplier_metrics=party_metrics(
                (row.get("supplier"), _day(row.get("posting_date")), _amount(row.get("grand_total")))
                for row in purchases
            ),
            inventory_alerts=inventory_alerts(items, bins),
            expense_breakdown=expense_breakdown(claims.items),
            sales_trends=sales_trends(invoices.items, purchases),
            errors=invoices.errors + claims.errors,
        )

    @staticmethod
    async def dashboard_options(client: ERPClient) -> DashboardOptions:
        """Companies, warehouses and item groups for the dashboard filters, plus the fixed choices."""
        companies, warehouses, item_groups = await asyncio.gather(
            DocumentService.list_values(client, "Company", ["name", "company_name"], limit=OPTION_LIMIT),
            DocumentService.list_values(
                client, "Warehouse", ["name", "warehouse_name"], filters=[["is_group", "=", 0]], limit=OPTION_LIMIT
            ),
            DocumentService.list_values(
                client,
                "Item Group",
                ["name", "item_group_name"],
                filters=[["parent_item_group", "=", "All Item Groups"], ["is_group", "=", 1]],
                limit=OPTION_LIMIT,
            ),
        )
        return DashboardOptions(
            companies=[NamedOption(name=row["name"], label=row.get("company_name") or row["name"]) for row in companies],
            warehouses=[
                NamedOption(name=row["name"], label=row.get("warehouse_name") or row["name"]) for row in warehouses
            ],
            date_ranges=DATE_RANGES,
            report_types=DASHBOARD_REPORT_TYPES,
            item_groups=[
                NamedOption(name=row["name"], label=row.get("item_group_name") or row["name"]) for row in item_groups
            ],
        )
