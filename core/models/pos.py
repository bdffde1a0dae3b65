# =============================================================================
# core/models/pos.py - Point of Sale Schemas
# =============================================================================

from pydantic import BaseModel, ConfigDict, Field


class POSProfile(BaseModel):
    """The POS profile the terminal sells under (first one found)."""
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    name: str = ""
    company: str = ""
    customer: str = ""
    warehouse: str = ""
    currency: str = ""
    write_off_account: str = ""
    expense_account: str = ""
    income_account: str = ""


class POSItem(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    item_code: str = ""
    item_name: str = ""
    description: str = ""
    stock_uom: str = ""
    image: str = ""
    standard_rate: float = 0
    is_stock_item: int = 0
    item_group: str = ""
    actual_qty: float = 0


class POSCategory(BaseModel):
    name: str
    items: list[POSItem] = Field(default_factory=list)


class POSCatalog(BaseModel):
    profile: POSProfile
    customers: list[str] = Field(default_factory=list)
    categories: list[POSCategory] = Field(default_factory=list)


class StockCheck(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    item_code: str = ""
    item_name: str = ""
    warehouse: str = ""
    actual_qty: float = 0
    projected_qty: float = 0
    stock_uom: str = ""
    is_stock_item: int = 0
