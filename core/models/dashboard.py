# =============================================================================
# core/models/dashboard.py - Business Dashboard Schemas
# =============================================================================
# The company-wide dashboard combining sales, purchasing, payments, expenses
# and stock for one period. Keys are serialized in camelCase.
# =============================================================================

from typing import Any

from pydantic import AliasGenerator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .accounting import RecentTransaction
from .common import NamedOption


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=AliasGenerator(serialization_alias=to_camel))


class DashboardSummary(CamelModel):
    total_revenue: float = 0
    total_expenses: float = 0
    net_profit: float = 0
    cash_balance: float = 0
    pending_payments: float = 0
    overdue_payments: float = 0
    sales_count: int = 0
    purchase_count: int = 0
    inventory_value: float = 0
    customer_count: int = 0
    supplier_count: int = 0


class TopItem(BaseModel):
    item_code: str
    item_name: str = ""
    quantity: float = 0
    amount: float = 0


class CategorySales(BaseModel):
    category: str
    amount: float = 0


class PartyMetric(BaseModel):
    """Purchase volume of one customer (or supplier) in the period."""
    name: str
    total_purchases: float = 0
    last_purchase_date: str = ""


class InventoryAlert(BaseModel):
    item_code: str
    item_name: str = ""
    current_stock: float = 0
    reorder_level: float = 0
    status: str = Field(description='"out" or "low"')


class ExpenseBreakdown(BaseModel):
    category: str
    amount: float = 0
    percentage: float = 0


class SalesTrend(BaseModel):
    date: str
    revenue: float = 0
    expenses: float = 0
    profit: float = 0


class BusinessDashboard(CamelModel):
    summary: DashboardSummary = Field(default_factory=DashboardSummary)
    recent_transactions: list[RecentTransaction] = Field(default_factory=list)
    top_selling_items: list[TopItem] = Field(default_factory=list)
    sales_by_category: list[CategorySales] = Field(default_factory=list)
    customer_metrics: list[PartyMetric] = Field(default_factory=list)
    supplier_metrics: list[PartyMetric] = Field(default_factory=list)
    inventory_alerts: list[InventoryAlert] = Field(default_factory=list)
    expense_breakdown: list[ExpenseBreakdown] = Field(default_factory=list)
    sales_trends: list[SalesTrend] = Field(default_factory=list)
    errors: list[dict[str, Any]] = Field(default_factory=list)


class ValueOption(BaseModel):
    value: str
    label: str


class DashboardOptions(CamelModel):
    companies: list[NamedOption] = Field(default_factory=list)
    warehouses: list[NamedOption] = Field(default_factory=list)
    date_ranges: list[ValueOption] = Field(default_factory=list)
    report_types: list[ValueOption] = Field(default_factory=list)
    item_groups: list[NamedOption] = Field(default_factory=list)
