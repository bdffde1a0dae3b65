# =============================================================================
# core/models/stock.py - Inventory Schemas
# =============================================================================
# Items, stock entries, delivery notes and the read-only stock views
# (balances per bin, ledger entries, summary counts).
# =============================================================================

from pydantic import BaseModel, ConfigDict, Field

from .common import DocumentModel, LineItem


class Item(DocumentModel):
    item_code: str = ""
    item_name: str = ""
    item_group: str = ""
    stock_uom: str = ""
    is_stock_item: int = 0
    is_fixed_asset: int = 0
    valuation_rate: float = 0
    standard_rate: float = 0
    brand: str = ""
    disabled: int = 0
    description: str = ""
    docstatus: int = 0


class StockEntryItem(LineItem):
    s_warehouse: str = ""
    t_warehouse: str = ""
    basic_rate: float = 0
    valuation_rate: float = 0
    batch_no: str = ""
    serial_no: str = ""
    is_finished_item: int = 0


class StockEntry(DocumentModel):
    stock_entry_type: str = ""
    purpose: str = ""
    posting_date: str = ""
    posting_time: str = ""
    company: str = ""
    from_warehouse: str = ""
    to_warehouse: str = ""
    work_order: str = ""
    docstatus: int = 0
    items: list[StockEntryItem] = Field(default_factory=list)


class DeliveryNoteItem(LineItem):
    against_sales_order: str = ""
    batch_no: str = ""
    serial_no: str = ""


class DeliveryNote(DocumentModel):
    customer: str = ""
    customer_name: str = ""
    posting_date: str = ""
    posting_time: str = ""
    company: str = ""
    set_warehouse: str = ""
    territory: str = ""
    customer_address: str = ""
    contact_person: str = ""
    grand_total: float = 0
    status: str = ""
    docstatus: int = 0
    items: list[DeliveryNoteItem] = Field(default_factory=list)


class StockBalance(BaseModel):
    """Quantities of one item in one warehouse (an ERP Bin)."""
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    item_code: str = ""
    item_name: str = ""
    warehouse: str = ""
    actual_qty: float = 0
    reserved_qty: float = 0
    ordered_qty: float = 0
    projected_qty: float = 0
    stock_uom: str = ""
    valuation_rate: float = 0
    stock_value: float = 0


class StockLedgerEntry(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    name: str = ""
    item_code: str = ""
    item_name: str = ""
    warehouse: str = ""
    posting_date: str = ""
    posting_time: str = ""
    actual_qty: float = 0
    qty_after_transaction: float = 0
    valuation_rate: float = 0
    stock_value: float = 0
    voucher_type: str = ""
    voucher_no: str = ""


class StockSummary(BaseModel):
    """Headline inventory figures; "low stock" means 0 < actual_qty < 10 in a bin."""
    total_items: int = 0
    total_warehouses: int = 0
    total_stock_value: float = 0
    low_stock_items: int = 0
    out_of_stock_items: int = 0
    recent_transactions: int = 0
