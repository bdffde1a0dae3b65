# =============================================================================
# core/mappers/assets.py - Asset Document Mappers
# =============================================================================

from typing import Any, Mapping

from core.mappers.base import project_document
from core.models.assets import (
    Asset,
    AssetCategory,
    AssetLocation,
    AssetMaintenance,
    AssetMovement,
    AssetMovementRow,
    AssetRepair,
    AssetValueAdjustment,
)


def to_asset(doc: Mapping[str, Any]) -> Asset:
    return project_document(
        Asset,
        doc,
        purchase_value=doc.get("gross_purchase_amount", doc.get("purchase_value")),
        current_value=doc.get("value_after_depreciation", doc.get("current_value")),
        assigned_to=doc.get("custodian", doc.get("assigned_to")),
    )


def to_asset_category(doc: Mapping[str, Any]) -> AssetCategory:
    accounts = doc.get("accounts") or []
    return project_document(
        AssetCategory,
        doc,
        company=doc.get("company") or (accounts[0].get("company_name") if accounts else None),
        fixed_asset_account=accounts[0].get("fixed_asset_account") if accounts else None,
    )


def to_asset_location(doc: Mapping[str, Any]) -> AssetLocation:
    return project_document(AssetLocation, doc)


def to_asset_maintenance(doc: Mapping[str, Any]) -> AssetMaintenance:
    return project_document(AssetMaintenance, doc)


def to_asset_repair(doc: Mapping[str, Any]) -> AssetRepair:
    return project_document(
        AssetRepair,
        doc,
        cost=doc.get("repair_cost", doc.get("cost")),
        status=doc.get("repair_status", doc.get("status")),
    )


# -----------------------------------------------------------------------------
# Movements / value adjustments
# -----------------------------------------------------------------------------

def to_movement_row(row: Mapping[str, Any]) -> AssetMovementRow:
    """Asset Movement Item row; the ERP names the locations source/target."""
    return project_document(
        AssetMovementRow,
        row,
        from_location=row.get("source_location", row.get("from_location")),
        to_location=row.get("target_location", row.get("to_location")),
    )


def movement_rows_for_erp(rows: list[Mapping[str, Any]]) -> list[dict[str, Any]]:
    return [
        {
            "asset": row.get("asset"),
            "asset_name": row.get("asset_name") or "",
            "source_location": row.get("from_location") or "",
            "target_location": row.get("to_location") or "",
            "from_employee": row.get("from_employee") or "",
            "to_employee": row.get("to_employee") or "",
        }
        for row in rows
    ]


def to_asset_movement(doc: Mapping[str, Any]) -> AssetMovement:
    rows = [to_movement_row(row) for row in doc.get("assets") or []]
    first = rows[0] if rows else AssetMovementRow()
    return project_document(
        AssetMovement,
        doc,
        assets=[row.model_dump() for row in rows],
        asset=first.asset,
        from_location=first.from_location,
        to_location=first.to_location,
        from_employee=first.from_employee,
        to_employee=first.to_employee,
    )


def to_asset_value_adjustment(doc: Mapping[str, Any]) -> AssetValueAdjustment:
    return project_document(
        AssetValueAdjustment,
        doc,
        adjustment_date=doc.get("date", doc.get("adjustment_date")),
        current_value=doc.get("current_asset_value", doc.get("current_value")),
        new_value=doc.get("new_asset_value", doc.get("new_value")),
    )
