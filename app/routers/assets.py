# =============================================================================
# app/routers/assets.py - Asset Management Endpoints
# =============================================================================
# Assets, asset categories, locations, maintenance and repair records,
# movements, value adjustments and the asset dashboard.
#
# Asset documents validate their child tables together with the parent, so
# creates go through frappe.client.insert rather than the resource API.
# =============================================================================

import asyncio
from datetime import date, timedelta
from typing import Any

from fastapi import APIRouter

from app.dependencies import ApiContext, JsonBody
from app.exceptions import ApplicationError
from app.handler import handle_api_request
from core.mappers.assets import (
    movement_rows_for_erp,
    to_asset,
    to_asset_category,
    to_asset_location,
    to_asset_maintenance,
    to_asset_movement,
    to_asset_repair,
    to_asset_value_adjustment,
)
from core.models.common import NamedOption
from core.services.document_service import (
    DocumentService,
    build_filters,
    date_range_filters,
    require_fields,
)
from core.services.reporting_service import ReportingService

router = APIRouter()

BY_CREATION = "creation desc"
ASSET_LIST_LIMIT = 1000
OPTION_LIMIT = 100

ASSET_STATUSES = ["Available", "In Use", "Under Maintenance", "Scrapped"]
DEFAULT_MAINTENANCE_TEAM = "PC Maintainers"
DEFAULT_MAINTENANCE_TASK = "General Maintenance"
SCHEDULED_TASK_DAYS = 30
MOVEMENT_PURPOSES = ("Issue", "Receipt", "Transfer")

# Request field -> Asset Value Adjustment field
ADJUSTMENT_FIELDS = {
    "current_value": "current_asset_value",
    "new_value": "new_asset_value",
}

CATEGORY_ACCOUNT_FIELDS = (
    "fixed_asset_account",
    "accumulated_depreciation_account",
    "depreciation_expense_account",
    "capital_work_in_progress_account",
)


def _present(payload: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in payload.items() if value is not None}


def maintenance_task_end_date(payload: dict[str, Any]) -> str:
    """
    End date of the default maintenance task.

    Completed work ends the day after the maintenance date; scheduled work
    ends on next_maintenance_date, or 30 days after the maintenance date.
    """
    start = date.fromisoformat(str(payload["maintenance_date"])[:10])
    if payload.get("status") == "Completed":
        return (start + timedelta(days=1)).isoformat()
    if payload.get("next_maintenance_date"):
        return str(payload["next_maintenance_date"])
    return (start + timedelta(days=SCHEDULED_TASK_DAYS)).isoformat()


def category_accounts(payload: dict[str, Any]) -> list[dict[str, Any]]:
    """The single company account row an Asset Category must carry."""
    given = (payload.get("accounts") or [{}])[0]
    row = {"company_name": payload["company"]}
    for field in CATEGORY_ACCOUNT_FIELDS:
        if given.get(field):
            row[field] = given[field]
    return [row]


# =============================================================================
# Assets
# =============================================================================

@router.get("/assets")
async def list_assets(
    ctx: ApiContext,
    asset_category: str | None = None,
    location: str | None = None,
    status: str | None = None,
    assigned_to: str | None = None,
):
    """List assets, newest first, optionally filtered by category, location, status or custodian."""
    async def produce():
        filters = build_filters(
            asset_category=asset_category,
            location=location,
            status=status,
            custodian=assigned_to,
        )
        result = await DocumentService.hydrate_list(
            ctx.erp, "Asset", filters=filters, order_by=BY_CREATION, limit=ASSET_LIST_LIMIT
        )
        return result.map(to_asset).as_payload("assets")

    return await handle_api_request(ctx, produce)


@router.post("/assets")
async def create_asset(ctx: ApiContext, payload: JsonBody):
    """
    Register an asset.

    Requires asset_name, asset_category, purchase_date and purchase_value.
    The current value starts at the purchase value; status defaults to
    Available.
    """
    async def produce():
        require_fields(payload, ["asset_name", "asset_category", "purchase_date", "purchase_value"])
        purchase_value = payload["purchase_value"]
        doc = {
            **_present(payload),
            "gross_purchase_amount": payload.get("gross_purchase_amount") or purchase_value,
            "current_value": purchase_value,
            "status": payload.get("status") or "Available",
        }
        if payload.get("assigned_to"):
            doc["custodian"] = doc.pop("assigned_to")

        created = await DocumentService.insert_via_rpc(ctx.erp, "Asset", doc)
        return {"asset": to_asset(created)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.get("/assets/{name}")
async def get_asset(name: str, ctx: ApiContext):
    async def produce():
        doc = await DocumentService.fetch_document(ctx.erp, "Asset", name)
        return {"asset": to_asset(doc)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.put("/assets/{name}")
async def update_asset(name: str, ctx: ApiContext, payload: JsonBody = {}):
    """Update an asset; fields left out keep their stored values."""
    async def produce():
        changes = dict(payload)
        if "assigned_to" in changes:
            changes["custodian"] = changes.pop("assigned_to")
        if "purchase_value" in changes:
            changes["gross_purchase_amount"] = changes["purchase_value"]
        doc = await DocumentService.update_document(ctx.erp, "Asset", name, changes)
        return {"asset": to_asset(doc)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.delete("/assets/{name}")
async def delete_asset(name: str, ctx: ApiContext):
    async def produce():
        await DocumentService.delete_document(ctx.erp, "Asset", name)
        return {"message": f"Asset {name} deleted successfully"}

    return await handle_api_request(ctx, produce, require_auth=True)


# =============================================================================
# Categories
# =============================================================================

@router.get("/categories")
async def list_categories(ctx: ApiContext):
    async def produce():
        result = await DocumentService.hydrate_list(
            ctx.erp, "Asset Category", order_by="name asc", limit=ASSET_LIST_LIMIT
        )
        return result.map(to_asset_category).as_payload("categories")

    return await handle_api_request(ctx, produce)


@router.post("/categories")
async def create_category(ctx: ApiContext, payload: JsonBody):
    """
    Create an asset category.

    Requires asset_category_name and company; the company's account row is
    built from the first entry of accounts when given.
    """
    async def produce():
        require_fields(payload, ["asset_category_name", "company"])
        doc = {
            "asset_category_name": payload["asset_category_name"],
            "parent_category": payload.get("parent_category") or "",
            "is_group": payload.get("is_group") or 0,
            "accounts": category_accounts(payload),
        }
        created = await DocumentService.insert_via_rpc(ctx.erp, "Asset Category", doc)
        return {"category": to_asset_category(created)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.get("/categories/{name}")
async def get_category(name: str, ctx: ApiContext):
    async def produce():
        doc = await DocumentService.fetch_document(ctx.erp, "Asset Category", name)
        return {"category": to_asset_category(doc)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.put("/categories/{name}")
async def update_category(name: str, ctx: ApiContext, payload: JsonBody = {}):
    async def produce():
        changes = {key: value for key, value in payload.items() if key != "company"}
        if payload.get("company"):
            changes["accounts"] = category_accounts(payload)
        doc = await DocumentService.update_document(ctx.erp, "Asset Category", name, changes)
        return {"category": to_asset_category(doc)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.delete("/categories/{name}")
async def delete_category(name: str, ctx: ApiContext):
    async def produce():
        await DocumentService.delete_document(ctx.erp, "Asset Category", name)
        return {"message": f"Asset Category {name} deleted successfully"}

    return await handle_api_request(ctx, produce, require_auth=True)


# =============================================================================
# Locations
# =============================================================================

@router.get("/locations")
async def list_locations(ctx: ApiContext):
    async def produce():
        result = await DocumentService.hydrate_list(
            ctx.erp, "Location", order_by="location_name asc", limit=ASSET_LIST_LIMIT
        )
        return result.map(to_asset_location).as_payload("locations")

    return await handle_api_request(ctx, produce)


@router.post("/locations")
async def create_location(ctx: ApiContext, payload: JsonBody):
    """Create a location. Requires location_name."""
    async def produce():
        require_fields(payload, ["location_name"])
        doc = {
            "location_name": payload["location_name"],
            "parent_location": payload.get("parent_location") or "",
            "is_group": payload.get("is_group") or 0,
            "address": payload.get("address") or "",
        }
        created = await DocumentService.insert_via_rpc(ctx.erp, "Location", doc)
        return {"location": to_asset_location(created)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.get("/locations/{name}")
async def get_location(name: str, ctx: ApiContext):
    async def produce():
        doc = await DocumentService.fetch_document(ctx.erp, "Location", name)
        return {"location": to_asset_location(doc)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.put("/locations/{name}")
async def update_location(name: str, ctx: ApiContext, payload: JsonBody = {}):
    async def produce():
        doc = await DocumentService.update_document(ctx.erp, "Location", name, payload)
        return {"location": to_asset_location(doc)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.delete("/locations/{name}")
async def delete_location(name: str, ctx: ApiContext):
    async def produce():
        await DocumentService.delete_document(ctx.erp, "Location", name)
        return {"message": f"Location {name} deleted successfully"}

    return await handle_api_request(ctx, produce, require_auth=True)


# =============================================================================
# Maintenance
# =============================================================================

@router.get("/maintenance")
async def list_maintenance(
    ctx: ApiContext,
    asset: str | None = None,
    status: str | None = None,
    date_from: str | None = None,
    date_to: str | None = None,
):
    """Maintenance records, optionally by asset, status and maintenance date range."""
    async def produce():
        filters = build_filters(asset=asset, status=status)
        filters += date_range_filters("maintenance_date", date_from, date_to)
        result = await DocumentService.hydrate_list(
            ctx.erp, "Asset Maintenance", filters=filters, order_by=BY_CREATION, limit=ASSET_LIST_LIMIT
        )
        return result.map(to_asset_maintenance).as_payload("maintenance")

    return await handle_api_request(ctx, produce)


@router.post("/maintenance")
async def create_maintenance(ctx: ApiContext, payload: JsonBody):
    """
    Record maintenance of an asset.

    Requires asset and maintenance_date. Unless asset_maintenance_tasks is
    given, one task is created spanning the maintenance date to the task
    end date (see maintenance_task_end_date).
    """
    async def produce():
        require_fields(payload, ["asset", "maintenance_date"])
        try:
            end_date = maintenance_task_end_date(payload)
        except ValueError:
            raise ApplicationError(f"Invalid maintenance_date: {payload['maintenance_date']}")

        completed = payload.get("status") == "Completed"
        task = {
            "maintenance_task": payload.get("maintenance_task") or DEFAULT_MAINTENANCE_TASK,
            "maintenance_status": "Completed" if completed else "Planned",
            "start_date": payload["maintenance_date"],
            "end_date": end_date,
            "assign_to": payload.get("assign_to") or "",
            "periodicity": payload.get("periodicity"),
        }
        doc = {
            "cost": 0,
            **_present(payload),
            "status": payload.get("status") or "Scheduled",
            "maintenance_team": payload.get("maintenance_team") or DEFAULT_MAINTENANCE_TEAM,
            "asset_maintenance_tasks": payload.get("asset_maintenance_tasks") or [_present(task)],
        }
        created = await DocumentService.insert_via_rpc(ctx.erp, "Asset Maintenance", doc)
        return {"maintenance": to_asset_maintenance(created)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.get("/maintenance/{name}")
async def get_maintenance(name: str, ctx: ApiContext):
    async def produce():
        doc = await DocumentService.fetch_document(ctx.erp, "Asset Maintenance", name)
        return {"maintenance": to_asset_maintenance(doc)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.put("/maintenance/{name}")
async def update_maintenance(name: str, ctx: ApiContext, payload: JsonBody = {}):
    async def produce():
        doc = await DocumentService.update_document(ctx.erp, "Asset Maintenance", name, payload)
        return {"maintenance": to_asset_maintenance(doc)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.delete("/maintenance/{name}")
async def delete_maintenance(name: str, ctx: ApiContext):
    async def produce():
        await DocumentService.delete_document(ctx.erp, "Asset Maintenance", name)
        return {"message": f"Asset Maintenance {name} deleted successfully"}

    return await handle_api_request(ctx, produce, require_auth=True)


# =============================================================================
# Repairs
# =============================================================================

@router.get("/repairs")
async def list_repairs(
    ctx: ApiContext,
    asset: str | None = None,
    status: str | None = None,
    date_from: str | None = None,
    date_to: str | None = None,
):
    async def produce():
        filters = build_filters(asset=asset, repair_status=status)
        filters += date_range_filters("repair_date", date_from, date_to)
        result = await DocumentService.hydrate_list(
            ctx.erp, "Asset Repair", filters=filters, order_by=BY_CREATION, limit=ASSET_LIST_LIMIT
        )
        return result.map(to_asset_repair).as_payload("repairs")

    return await handle_api_request(ctx, produce)


@router.post("/repairs")
async def create_repair(ctx: ApiContext, payload: JsonBody):
    """
    Record a repair.

    Requires asset, repair_date and failure_date. Status defaults to
    Reported; a Completed repair without completion_date completes on the
    repair date.
    """
    async def produce():
        require_fields(payload, ["asset", "repair_date", "failure_date"])
        status = payload.get("status") or "Reported"
        doc = {
            "downtime": 0,
            **_present(payload),
            "repair_status": status,
            "repair_cost": payload.get("cost") or 0,
        }
        doc.pop("status", None)
        doc.pop("cost", None)
        if status == "Completed" and not payload.get("completion_date"):
            doc["completion_date"] = payload["repair_date"]

        created = await DocumentService.insert_via_rpc(ctx.erp, "Asset Repair", doc)
        return {"repair": to_asset_repair(created)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.get("/repairs/{name}")
async def get_repair(name: str, ctx: ApiContext):
    async def produce():
        doc = await DocumentService.fetch_document(ctx.erp, "Asset Repair", name)
        return {"repair": to_asset_repair(doc)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.put("/repairs/{name}")
async def update_repair(name: str, ctx: ApiContext, payload: JsonBody = {}):
    async def produce():
        changes = dict(payload)
        if "status" in changes:
            changes["repair_status"] = changes.pop("status")
        if "cost" in changes:
            changes["repair_cost"] = changes.pop("cost")
        doc = await DocumentService.update_document(ctx.erp, "Asset Repair", name, changes)
        return {"repair": to_asset_repair(doc)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.delete("/repairs/{name}")
async def delete_repair(name: str, ctx: ApiContext):
    async def produce():
        await DocumentService.delete_document(ctx.erp, "Asset Repair", name)
        return {"message": f"Asset Repair {name} deleted successfully"}

    return await handle_api_request(ctx, produce, require_auth=True)


# =============================================================================
# Movements
# =============================================================================

def movement_problems(purpose: str, rows: list[dict[str, Any]]) -> list[str]:
    """
    Check asset rows against the movement purpose.

    Issue moves from a location to an employee, Receipt from an employee to
    a location and Transfer between two locations.

    Returns:
        One message per problem (empty when the rows are valid)
    """
    if purpose not in MOVEMENT_PURPOSES:
        return [f"purpose must be one of {', '.join(MOVEMENT_PURPOSES)}"]
    if not isinstance(rows, list) or not rows:
        return ["At least one asset is required"]
    if not all(isinstance(row, dict) for row in rows):
        return ["Every asset row must be an object"]

    problems = []
    for index, row in enumerate(rows, start=1):
        if not row.get("asset"):
            problems.append(f"Row {index}: asset is required")
        if purpose == "Issue":
            if not row.get("from_location"):
                problems.append(f"Row {index}: from_location is required for Issue")
            if not row.get("to_employee"):
                problems.append(f"Row {index}: to_employee is required for Issue")
            if row.get("to_location"):
                problems.append(f"Row {index}: to_location is not allowed for Issue")
        elif purpose == "Receipt":
            if not row.get("from_employee"):
                problems.append(f"Row {index}: from_employee is required for Receipt")
            if not row.get("to_location"):
                problems.append(f"Row {index}: to_location is required for Receipt")
            if row.get("from_location"):
                problems.append(f"Row {index}: from_location is not allowed for Receipt")
        else:
            if not row.get("from_location") or not row.get("to_location"):
                problems.append(f"Row {index}: from_location and to_location are required for Transfer")
            if row.get("from_employee") or row.get("to_employee"):
                problems.append(f"Row {index}: employees are not allowed for Transfer")
    return problems


def check_movement(purpose: str, rows: list[dict[str, Any]]) -> None:
    problems = movement_problems(purpose, rows)
    if problems:
        raise ApplicationError("Invalid asset movement", details={"errors": problems})


@router.get("/movements")
async def list_movements(
    ctx: ApiContext,
    asset: str | None = None,
    status: str | None = None,
    date_from: str | None = None,
    date_to: str | None = None,
):
    """Asset movements, newest first; asset matches any row of the movement."""
    async def produce():
        filters = build_filters(status=status)
        if asset:
            filters.append(["Asset Movement Item", "asset", "=", asset])
        filters += date_range_filters("movement_date", date_from, date_to)
        result = await DocumentService.hydrate_list(
            ctx.erp, "Asset Movement", filters=filters, order_by=BY_CREATION, limit=ASSET_LIST_LIMIT
        )
        return result.map(to_asset_movement).as_payload("movements")

    return await handle_api_request(ctx, produce)


@router.post("/movements")
async def create_movement(ctx: ApiContext, payload: JsonBody):
    """
    Move assets between locations and employees.

    Requires movement_date, purpose and assets (rows of asset,
    from_location, to_location, from_employee, to_employee). Every asset
    must exist; company defaults to the first asset's company and the
    movement is saved as a draft.
    """
    async def produce():
        require_fields(payload, ["movement_date", "purpose", "assets"])
        rows = payload["assets"]
        check_movement(payload["purpose"], rows)

        assets = await asyncio.gather(
            *(DocumentService.fetch_document(ctx.erp, "Asset", row["asset"]) for row in rows)
        )
        for row, asset in zip(rows, assets):
            row.setdefault("asset_name", asset.get("asset_name") or "")

        doc = {
            **_present(payload),
            "company": payload.get("company") or assets[0].get("company") or "",
            "status": payload.get("status") or "Draft",
            "assets": movement_rows_for_erp(rows),
        }
        created = await DocumentService.insert_via_rpc(ctx.erp, "Asset Movement", doc)
        return {"movement": to_asset_movement(created)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.get("/movements/{name}")
async def get_movement(name: str, ctx: ApiContext):
    async def produce():
        doc = await DocumentService.fetch_document(ctx.erp, "Asset Movement", name)
        return {"movement": to_asset_movement(doc)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.put("/movements/{name}")
async def update_movement(name: str, ctx: ApiContext, payload: JsonBody = {}):
    """Update a movement; the purpose and rows are checked again after merging."""
    async def produce():
        current = to_asset_movement(await DocumentService.fetch_document(ctx.erp, "Asset Movement", name))
        purpose = payload.get("purpose") or current.purpose
        rows = payload.get("assets") or [row.model_dump() for row in current.assets]
        check_movement(purpose, rows)

        changes = dict(payload)
        if "assets" in changes:
            changes["assets"] = movement_rows_for_erp(rows)
        doc = await DocumentService.update_document(ctx.erp, "Asset Movement", name, changes)
        return {"movement": to_asset_movement(doc)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.delete("/movements/{name}")
async def delete_movement(name: str, ctx: ApiContext):
    async def produce():
        await DocumentService.delete_document(ctx.erp, "Asset Movement", name)
        return {"message": f"Asset Movement {name} deleted successfully"}

    return await handle_api_request(ctx, produce, require_auth=True)


# =============================================================================
# Value adjustments
# =============================================================================

def value_difference(new_value: Any, current_value: Any) -> float:
    try:
        return float(new_value or 0) - float(current_value or 0)
    except (TypeError, ValueError):
        raise ApplicationError(
            "Asset values must be numbers",
            details={"new_asset_value": new_value, "current_asset_value": current_value},
        )


def adjustment_fields(payload: dict[str, Any]) -> dict[str, Any]:
    """
    ERP fields of an Asset Value Adjustment from the request names.

    difference_amount is always the new value less the current value.
    """
    doc = {key: value for key, value in _present(payload).items() if key not in ADJUSTMENT_FIELDS}
    for name, erp_name in ADJUSTMENT_FIELDS.items():
        if payload.get(name) is not None:
            doc[erp_name] = payload[name]
    doc.setdefault("current_asset_value", 0)
    doc["difference_amount"] = value_difference(doc.get("new_asset_value"), doc["current_asset_value"])
    return doc


async def create_adjustment(ctx: ApiContext, payload: dict[str, Any]) -> dict[str, Any]:
    require_fields(payload, ["asset", "date", "new_asset_value"])
    doc = adjustment_fields(payload)
    if not doc.get("company"):
        doc["company"] = await DocumentService.get_value(ctx.erp, "Asset", payload["asset"], "company") or ""
    if not doc.get("difference_account"):
        doc.pop("difference_account", None)

    created = await DocumentService.insert_via_rpc(ctx.erp, "Asset Value Adjustment", doc)
    return {"adjustment": to_asset_value_adjustment(created)}


async def adjustments_of(ctx: ApiContext, filters: list[list[Any]]) -> dict[str, Any]:
    result = await DocumentService.hydrate_list(
        ctx.erp, "Asset Value Adjustment", filters=filters, order_by=BY_CREATION, limit=ASSET_LIST_LIMIT
    )
    return result.map(to_asset_value_adjustment).as_payload("adjustments")


@router.get("/value-adjustments")
async def list_value_adjustments(
    ctx: ApiContext,
    asset: str | None = None,
    date_from: str | None = None,
    date_to: str | None = None,
):
    async def produce():
        filters = build_filters(asset=asset) + date_range_filters("date", date_from, date_to)
        return await adjustments_of(ctx, filters)

    return await handle_api_request(ctx, produce)


@router.post("/value-adjustments")
async def create_value_adjustment(ctx: ApiContext, payload: JsonBody):
    """
    Revalue an asset.

    Requires asset, date and new_asset_value; current_asset_value defaults
    to 0 and company to the asset's company.
    """
    async def produce():
        return await create_adjustment(ctx, payload)

    return await handle_api_request(ctx, produce, require_auth=True)


@router.get("/value-adjustments/asset/{asset_name}")
async def list_asset_value_adjustments(asset_name: str, ctx: ApiContext):
    async def produce():
        return await adjustments_of(ctx, [["asset", "=", asset_name]])

    return await handle_api_request(ctx, produce)


@router.post("/value-adjustments/asset/{asset_name}")
async def create_asset_value_adjustment(asset_name: str, ctx: ApiContext, payload: JsonBody):
    """Revalue the asset named in the path (overrides any asset in the body)."""
    async def produce():
        return await create_adjustment(ctx, {**payload, "asset": asset_name})

    return await handle_api_request(ctx, produce, require_auth=True)


@router.get("/value-adjustments/{name}")
async def get_value_adjustment(name: str, ctx: ApiContext):
    async def produce():
        doc = await DocumentService.fetch_document(ctx.erp, "Asset Value Adjustment", name)
        return {"adjustment": to_asset_value_adjustment(doc)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.put("/value-adjustments/{name}")
async def update_value_adjustment(name: str, ctx: ApiContext, payload: JsonBody = {}):
    """Update an adjustment; difference_amount follows the merged values."""
    async def produce():
        current = await DocumentService.fetch_document(ctx.erp, "Asset Value Adjustment", name)
        changes = {key: value for key, value in payload.items() if key not in ADJUSTMENT_FIELDS}
        for field, erp_name in ADJUSTMENT_FIELDS.items():
            if payload.get(field) is not None:
                changes[erp_name] = payload[field]
        new_value = changes.get("new_asset_value", current.get("new_asset_value"))
        current_value = changes.get("current_asset_value", current.get("current_asset_value"))
        changes["difference_amount"] = value_difference(new_value, current_value)

        doc = await DocumentService.update_document(ctx.erp, "Asset Value Adjustment", name, changes)
        return {"adjustment": to_asset_value_adjustment(doc)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.delete("/value-adjustments/{name}")
async def delete_value_adjustment(name: str, ctx: ApiContext):
    async def produce():
        await DocumentService.delete_document(ctx.erp, "Asset Value Adjustment", name)
        return {"message": f"Asset Value Adjustment {name} deleted successfully"}

    return await handle_api_request(ctx, produce, require_auth=True)


# =============================================================================
# Dashboard
# =============================================================================

@router.get("/dashboard")
async def asset_dashboard(ctx: ApiContext):
    """Asset totals, value by category and location, due maintenance and recent activity."""
    async def produce():
        return {"dashboard": await ReportingService.asset_dashboard(ctx.erp)}

    return await handle_api_request(ctx, produce)


# =============================================================================
# Options
# =============================================================================

@router.get("/options")
async def asset_options(ctx: ApiContext):
    """Categories, locations and asset statuses for the asset forms."""
    async def produce():
        categories, locations = await asyncio.gather(
            DocumentService.list_values(
                ctx.erp, "Asset Category", ["name", "asset_category_name"], limit=OPTION_LIMIT
            ),
            DocumentService.list_values(
                ctx.erp, "Location", ["name", "location_name"], limit=OPTION_LIMIT
            ),
        )
        return {
            "options": {
                "categories": [
                    NamedOption(name=row["name"], label=row.get("asset_category_name") or row["name"])
                    for row in categories
                ],
                "locations": [
                    NamedOption(name=row["name"], label=row.get("location_name") or row["name"])
                    for row in locations
                ],
                "statuses": ASSET_STATUSES,
            }
        }

    return await handle_api_request(ctx, produce)
