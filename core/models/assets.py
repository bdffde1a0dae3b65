# =============================================================================
# core/models/assets.py - Asset Management Schemas
# =============================================================================

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .common import DocumentModel


class Asset(DocumentModel):
    asset_name: str = ""
    asset_category: str = ""
    item_code: str = ""
    serial_no: str = ""
    purchase_date: str = ""
    purchase_value: float = 0
    current_value: float = 0
    location: str = ""
    status: str = ""
    warranty_expiry_date: str = ""
    assigned_to: str = ""
    company: str = ""


class AssetCategory(DocumentModel):
    asset_category_name: str = ""
    company: str = ""
    parent_category: str = ""
    is_group: int = 0
    fixed_asset_account: str = ""


class AssetLocation(DocumentModel):
    location_name: str = ""
    parent_location: str = ""
    is_group: int = 0
    address: str = ""


class AssetMaintenance(DocumentModel):
    asset: str = ""
    asset_name: str = ""
    maintenance_type: str = ""
    maintenance_date: str = ""
    next_maintenance_date: str = ""
    description: str = ""
    cost: float = 0
    maintenance_team: str = ""
    status: str = ""
    asset_maintenance_tasks: list[dict[str, Any]] = Field(default_factory=list)


class AssetRepair(DocumentModel):
    asset: str = ""
    asset_name: str = ""
    repair_type: str = ""
    repair_date: str = ""
    technician: str = ""
    repair_details: str = ""
    failure_date: str = ""
    completion_date: str = ""
    description: str = ""
    cause_of_failure: str = ""
    actions_performed: str = ""
    cost: float = 0
    downtime: float = 0
    company: str = ""
    status: str = ""


class AssetMovementRow(BaseModel):
    """One asset of a movement, with the API's from/to naming."""
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    asset: str = ""
    asset_name: str = ""
    from_location: str = ""
    to_location: str = ""
    from_employee: str = ""
    to_employee: str = ""


class AssetMovement(DocumentModel):
    """
    An Asset Movement (Issue, Receipt or Transfer).

    The top-level asset and from/to fields repeat the first row of assets.
    """
    asset: str = ""
    assets: list[AssetMovementRow] = Field(default_factory=list)
    from_location: str = ""
    to_location: str = ""
    from_employee: str = ""
    to_employee: str = ""
    movement_date: str = ""
    purpose: str = ""
    status: str = ""
    company: str = ""
    reference_doctype: str = ""
    reference_name: str = ""


class AssetValueAdjustment(DocumentModel):
    asset: str = ""
    adjustment_date: str = ""
    current_value: float = 0
    new_value: float = 0
    difference_amount: float = 0
    difference_account: str = ""
    reason: str = ""
    approved_by: str = ""
    company: str = ""


# =============================================================================
# Dashboard
# =============================================================================

class AssetGroupValue(BaseModel):
    """Count and book value of the assets in one category or location."""
    group: str
    count: int = 0
    value: float = 0


class AssetActivity(BaseModel):
    type: str
    asset: str = ""
    date: str = ""
    description: str = ""
    status: str = ""


class MaintenanceDue(BaseModel):
    asset: str = ""
    due_date: str = ""
    days_remaining: int = 0
    status: str = ""


class AssetDashboard(BaseModel):
    total_assets: int = 0
    assets_under_maintenance: int = 0
    assets_requiring_attention: int = 0
    assets_by_category: list[AssetGroupValue] = Field(default_factory=list)
    assets_by_location: list[AssetGroupValue] = Field(default_factory=list)
    recent_activities: list[AssetActivity] = Field(default_factory=list)
    maintenance_due: list[MaintenanceDue] = Field(default_factory=list)
    errors: list[dict[str, Any]] = Field(default_factory=list)
