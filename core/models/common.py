# =============================================================================
# core/models/common.py - Shared DTO Building Blocks
# =============================================================================
# Resource DTOs are flat projections of ERP documents. Every field has a
# default ("" / 0 / []) so a document missing optional values still maps to
# a complete object. Unknown ERP fields are ignored.
# =============================================================================

from pydantic import BaseModel, ConfigDict, Field


class DocumentModel(BaseModel):
    """
    Base class for every resource DTO.

    Carries the bookkeeping fields all Frappe documents share.
    """
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    name: str = ""
    creation: str = ""
    modified: str = ""
    owner: str = ""


class LineItem(BaseModel):
    """One row of a selling/buying/stock document's items table."""
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    item_code: str = ""
    item_name: str = ""
    description: str = ""
    qty: float = 0
    rate: float = 0
    amount: float = 0
    uom: str = ""
    warehouse: str = ""


class NamedOption(BaseModel):
    """Entry of an options list: the document name plus a display label."""
    name: str
    label: str = Field(default="", description="Human-readable title")
