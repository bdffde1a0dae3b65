# =============================================================================
# app/routers/crm.py - CRM Endpoints
# =============================================================================
# Customers (with their contacts and addresses), leads, opportunities,
# activities, communications, the CRM dashboard and the option lists used by
# CRM forms.
# Quotations and sales orders live in app/routers/selling.py under the same
# /api/crm prefix.
#
# List endpoints hydrate every matching document and answer
# {"<resources>": [...], "errors": [...]}; writes require an ERP session.
# =============================================================================

import asyncio
import logging
from datetime import date
from typing import Annotated, Any

from fastapi import APIRouter, Query

from app.dependencies import ApiContext, JsonBody
from app.exceptions import ApplicationError
from app.handler import handle_api_request
from core.mappers.base import pluck
from core.mappers.crm import (
    activity_to_todo,
    to_activity,
    to_address,
    to_communication,
    to_contact,
    to_customer,
    to_lead,
    to_opportunity,
)
from core.models.common import NamedOption
from core.services.document_service import DocumentService, build_filters, date_range_filters, require_fields
from core.services.reporting_service import ReportingService

router = APIRouter()
logger = logging.getLogger(__name__)

ListLimit = Annotated[int | None, Query(ge=1, description="Maximum number of records")]


def _without(payload: dict[str, Any], *keys: str) -> dict[str, Any]:
    return {key: value for key, value in payload.items() if key not in keys}


def _present(payload: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in payload.items() if value is not None}


# =============================================================================
# Customers
# =============================================================================

CUSTOMER_DEFAULTS = {
    "customer_type": "Individual",
    "customer_group": "All Customer Groups",
    "territory": "All Territories",
    "credit_limit": 0,
}


@router.get("/customers")
async def list_customers(
    ctx: ApiContext,
    customer_type: str | None = None,
    customer_group: str | None = None,
    territory: str | None = None,
    limit: ListLimit = None,
):
    """List customers, optionally filtered by type, group and territory."""
    async def produce():
        result = await DocumentService.hydrate_list(
            ctx.erp,
            "Customer",
            filters=build_filters(
                customer_type=customer_type,
                customer_group=customer_group,
                territory=territory,
            ),
            limit=limit or ctx.settings.LIST_LIMIT,
        )
        return result.map(to_customer).as_payload("customers")

    return await handle_api_request(ctx, produce)


@router.post("/customers")
async def create_customer(ctx: ApiContext, payload: JsonBody):
    """
    Create a customer.

    Requires customer_name. Type, group, territory, currency and credit
    limit fall back to the gateway defaults.
    """
    async def produce():
        require_fields(payload, ["customer_name"])
        doc = {
            **CUSTOMER_DEFAULTS,
            "default_currency": ctx.settings.DEFAULT_CURRENCY,
            **{key: value for key, value in payload.items() if value is not None},
        }
        created = await DocumentService.insert_document(ctx.erp, "Customer", doc)
        return {"customer": to_customer(created)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.get("/customers/{name}")
async def get_customer(name: str, ctx: ApiContext):
    """Get one customer."""
    async def produce():
        doc = await DocumentService.fetch_document(ctx.erp, "Customer", name)
        return {"customer": to_customer(doc)}

    return await handle_api_request(ctx, produce)


@router.put("/customers/{name}")
async def update_customer(name: str, ctx: ApiContext, payload: JsonBody = {}):
    """Update a customer; omitted fields keep their stored values."""
    async def produce():
        doc = await DocumentService.update_document(ctx.erp, "Customer", name, payload)
        return {"customer": to_customer(doc)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.delete("/customers/{name}")
async def delete_customer(name: str, ctx: ApiContext):
    """Delete a customer."""
    async def produce():
        await DocumentService.delete_document(ctx.erp, "Customer", name)
        return {"message": f"Customer {name} deleted successfully"}

    return await handle_api_request(ctx, produce, require_auth=True)


# -----------------------------------------------------------------------------
# Customer contacts / addresses
# -----------------------------------------------------------------------------

def _customer_link_filters(customer: str) -> list[list[Any]]:
    # Child-table filters on the Dynamic Link rows
    return [
        ["Dynamic Link", "link_doctype", "=", "Customer"],
        ["Dynamic Link", "link_name", "=", customer],
    ]


@router.get("/customers/{name}/contacts")
async def list_customer_contacts(name: str, ctx: ApiContext):
    """List the contacts linked to a customer."""
    async def produce():
        result = await DocumentService.hydrate_list(
            ctx.erp,
            "Contact",
            filters=_customer_link_filters(name),
            limit=ctx.settings.LIST_LIMIT,
        )
        return result.map(to_contact).as_payload("contacts")

    return await handle_api_request(ctx, produce)


@router.post("/customers/{name}/contacts")
async def create_customer_contact(name: str, ctx: ApiContext, payload: JsonBody):
    """Create a contact linked to the customer. Requires first_name."""
    async def produce():
        require_fields(payload, ["first_name"])
        doc = {
            **_without(payload, "customer", "links"),
            "links": [{"link_doctype": "Customer", "link_name": name}],
        }
        if payload.get("email_id"):
            doc["email_ids"] = [{"email_id": payload["email_id"], "is_primary": 1}]
        if payload.get("mobile_no"):
            doc["phone_nos"] = [{"phone": payload["mobile_no"], "is_primary_mobile_no": 1}]

        created = await DocumentService.insert_document(ctx.erp, "Contact", doc)
        return {"contact": to_contact(created)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.get("/customers/{name}/addresses")
async def list_customer_addresses(name: str, ctx: ApiContext):
    """List the addresses linked to a customer."""
    async def produce():
        result = await DocumentService.hydrate_list(
            ctx.erp,
            "Address",
            filters=_customer_link_filters(name),
            limit=ctx.settings.LIST_LIMIT,
        )
        return result.map(to_address).as_payload("addresses")

    return await handle_api_request(ctx, produce)


@router.post("/customers/{name}/addresses")
async def create_customer_address(name: str, ctx: ApiContext, payload: JsonBody):
    """Create an address linked to the customer. Requires address_line1, city and country."""
    async def produce():
        require_fields(payload, ["address_line1", "city", "country"])
        doc = {
            "address_title": name,
            "address_type": "Billing",
            **_without(payload, "customer", "links"),
            "links": [{"link_doctype": "Customer", "link_name": name}],
        }
        created = await DocumentService.insert_document(ctx.erp, "Address", doc)
        return {"address": to_address(created)}

    return await handle_api_request(ctx, produce, require_auth=True)


# =============================================================================
# Leads
# =============================================================================

@router.get("/leads")
async def list_leads(
    ctx: ApiContext,
    status: str | None = None,
    source: str | None = None,
    territory: str | None = None,
    limit: ListLimit = None,
):
    """List leads, optionally filtered by status, source and territory."""
    async def produce():
        result = await DocumentService.hydrate_list(
            ctx.erp,
            "Lead",
            filters=build_filters(status=status, source=source, territory=territory),
            limit=limit or ctx.settings.LIST_LIMIT,
        )
        return result.map(to_lead).as_payload("leads")

    return await handle_api_request(ctx, produce)


@router.post("/leads")
async def create_lead(ctx: ApiContext, payload: JsonBody):
    """Create a lead. Requires lead_name; status defaults to Open."""
    async def produce():
        require_fields(payload, ["lead_name"])
        doc = {"status": "Open", **{k: v for k, v in payload.items() if v is not None}}
        created = await DocumentService.insert_document(ctx.erp, "Lead", doc)
        return {"lead": to_lead(created)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.get("/leads/{name}")
async def get_lead(name: str, ctx: ApiContext):
    async def produce():
        doc = await DocumentService.fetch_document(ctx.erp, "Lead", name)
        return {"lead": to_lead(doc)}

    return await handle_api_request(ctx, produce)


@router.put("/leads/{name}")
async def update_lead(name: str, ctx: ApiContext, payload: JsonBody = {}):
    async def produce():
        doc = await DocumentService.update_document(ctx.erp, "Lead", name, payload)
        return {"lead": to_lead(doc)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.delete("/leads/{name}")
async def delete_lead(name: str, ctx: ApiContext):
    async def produce():
        await DocumentService.delete_document(ctx.erp, "Lead", name)
        return {"message": f"Lead {name} deleted successfully"}

    return await handle_api_request(ctx, produce, require_auth=True)


# =============================================================================
# Opportunities
# =============================================================================

OPPORTUNITY_DEFAULTS = {
    "status": "Open",
    "probability": 0,
    "sales_stage": "Qualification",
}


def _opportunity_party(payload: dict[str, Any]) -> dict[str, Any]:
    """
    Translate the API's customer/lead fields into the ERP's party_name.

    Returns the payload without customer/lead, with party_name set when the
    matching field was given.
    """
    source = payload.get("opportunity_from")
    party = payload.get("customer") if source == "Customer" else payload.get("lead") if source == "Lead" else None
    doc = _without(payload, "customer", "lead")
    if party:
        doc["party_name"] = party
    return doc


@router.get("/opportunities")
async def list_opportunities(
    ctx: ApiContext,
    status: str | None = None,
    opportunity_type: str | None = None,
    sales_stage: str | None = None,
    customer: str | None = None,
    lead: str | None = None,
    limit: ListLimit = None,
):
    """List opportunities; customer/lead filter on the opportunity's party."""
    async def produce():
        filters = build_filters(
            status=status,
            opportunity_type=opportunity_type,
            sales_stage=sales_stage,
        )
        if customer:
            filters += build_filters(opportunity_from="Customer", party_name=customer)
        elif lead:
            filters += build_filters(opportunity_from="Lead", party_name=lead)

        result = await DocumentService.hydrate_list(
            ctx.erp,
            "Opportunity",
            filters=filters,
            limit=limit or ctx.settings.LIST_LIMIT,
        )
        return result.map(to_opportunity).as_payload("opportunities")

    return await handle_api_request(ctx, produce)


@router.post("/opportunities")
async def create_opportunity(ctx: ApiContext, payload: JsonBody):
    """
    Create an opportunity.

    Requires opportunity_from ("Customer" or "Lead"), opportunity_type and
    the matching customer or lead.
    """
    async def produce():
        require_fields(payload, ["opportunity_from", "opportunity_type"])
        party_field = "customer" if payload["opportunity_from"] == "Customer" else "lead"
        require_fields(payload, [party_field])

        doc = {**OPPORTUNITY_DEFAULTS, **_opportunity_party(payload)}
        created = await DocumentService.insert_document(ctx.erp, "Opportunity", doc)
        return {"opportunity": to_opportunity(created)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.get("/opportunities/{name}")
async def get_opportunity(name: str, ctx: ApiContext):
    async def produce():
        doc = await DocumentService.fetch_document(ctx.erp, "Opportunity", name)
        return {"opportunity": to_opportunity(doc)}

    return await handle_api_request(ctx, produce)


@router.put("/opportunities/{name}")
async def update_opportunity(name: str, ctx: ApiContext, payload: JsonBody = {}):
    async def produce():
        doc = await DocumentService.update_document(
            ctx.erp, "Opportunity", name, _opportunity_party(payload)
        )
        return {"opportunity": to_opportunity(doc)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.delete("/opportunities/{name}")
async def delete_opportunity(name: str, ctx: ApiContext):
    async def produce():
        await DocumentService.delete_document(ctx.erp, "Opportunity", name)
        return {"message": f"Opportunity {name} deleted successfully"}

    return await handle_api_request(ctx, produce, require_auth=True)


# =============================================================================
# Activities
# =============================================================================
# Activities are stored as ToDo documents; see core/mappers/crm.py for the
# field renames.

ACTIVITY_DEFAULTS = {
    "activity_type": "Task",
    "status": "Open",
    "priority": "Medium",
}


async def _check_reference(ctx: ApiContext, doctype: str | None, name: str | None) -> None:
    """A reference needs its doctype, and a full reference must point at an existing document."""
    if name and not doctype:
        raise ApplicationError("reference_doctype is required when reference_name is given")
    if doctype and name:
        await DocumentService.fetch_document(ctx.erp, doctype, name)


async def create_activity(ctx: ApiContext, payload: dict[str, Any]) -> dict[str, Any]:
    require_fields(payload, ["subject"])
    await _check_reference(ctx, payload.get("reference_doctype"), payload.get("reference_name"))

    fields = {**ACTIVITY_DEFAULTS, "due_date": date.today().isoformat(), **_present(payload)}
    assignee = fields.get("assigned_to")
    if assignee and not await DocumentService.get_value(ctx.erp, "User", assignee, "name"):
        logger.warning(f"User {assignee} not found; activity left unassigned")
        fields.pop("assigned_to")

    created = await DocumentService.insert_document(ctx.erp, "ToDo", activity_to_todo(fields))
    return {"activity": to_activity(created)}


def _reference(doctype: str | None, name: str | None) -> tuple[str, str]:
    if not doctype or not name:
        raise ApplicationError("Both doctype and name are required")
    return doctype, name


@router.get("/activities")
async def list_activities(
    ctx: ApiContext,
    activity_type: str | None = None,
    status: str | None = None,
    priority: str | None = None,
    assigned_to: str | None = None,
    reference_doctype: str | None = None,
    reference_name: str | None = None,
    date_from: str | None = None,
    date_to: str | None = None,
    limit: ListLimit = None,
):
    """List activities, optionally filtered by type, status, priority, assignee, reference and due date."""
    async def produce():
        filters = build_filters(
            activity_type=activity_type,
            status=status,
            priority=priority,
            allocated_to=assigned_to,
            reference_type=reference_doctype,
            reference_name=reference_name,
        )
        filters += date_range_filters("date", date_from, date_to)
        result = await DocumentService.hydrate_list(
            ctx.erp, "ToDo", filters=filters, limit=limit or ctx.settings.LIST_LIMIT
        )
        return result.map(to_activity).as_payload("activities")

    return await handle_api_request(ctx, produce)


@router.post("/activities")
async def create_activity_route(ctx: ApiContext, payload: JsonBody):
    """
    Create an activity.

    Requires subject. Status defaults to Open, priority to Medium and the
    due date to today. An assignee who is not a known user is dropped.
    """
    async def produce():
        return await create_activity(ctx, payload)

    return await handle_api_request(ctx, produce, require_auth=True)


@router.get("/activities/by-reference")
async def list_reference_activities(ctx: ApiContext, doctype: str | None = None, name: str | None = None):
    """Activities attached to one document."""
    async def produce():
        reference_type, reference_name = _reference(doctype, name)
        result = await DocumentService.hydrate_list(
            ctx.erp,
            "ToDo",
            filters=[["reference_type", "=", reference_type], ["reference_name", "=", reference_name]],
            limit=ctx.settings.LIST_LIMIT,
        )
        return result.map(to_activity).as_payload("activities")

    return await handle_api_request(ctx, produce)


@router.post("/activities/by-reference")
async def create_reference_activity(
    ctx: ApiContext,
    payload: JsonBody,
    doctype: str | None = None,
    name: str | None = None,
):
    """Create an activity attached to the document named in the query."""
    async def produce():
        reference_type, reference_name = _reference(doctype, name)
        return await create_activity(
            ctx, {**payload, "reference_doctype": reference_type, "reference_name": reference_name}
        )

    return await handle_api_request(ctx, produce, require_auth=True)


@router.get("/activities/{name}")
async def get_activity(name: str, ctx: ApiContext):
    async def produce():
        doc = await DocumentService.fetch_document(ctx.erp, "ToDo", name)
        return {"activity": to_activity(doc)}

    return await handle_api_request(ctx, produce)


@router.put("/activities/{name}")
async def update_activity(name: str, ctx: ApiContext, payload: JsonBody = {}):
    async def produce():
        doc = await DocumentService.update_document(ctx.erp, "ToDo", name, activity_to_todo(payload))
        return {"activity": to_activity(doc)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.delete("/activities/{name}")
async def delete_activity(name: str, ctx: ApiContext):
    async def produce():
        await DocumentService.delete_document(ctx.erp, "ToDo", name)
        return {"message": f"Activity {name} deleted successfully"}

    return await handle_api_request(ctx, produce, require_auth=True)


# =============================================================================
# Communications
# =============================================================================

COMMUNICATION_DEFAULTS = {
    "communication_type": "Communication",
    "status": "Open",
}


async def create_communication(ctx: ApiContext, payload: dict[str, Any]) -> dict[str, Any]:
    require_fields(payload, ["subject", "content"])
    await _check_reference(ctx, payload.get("reference_doctype"), payload.get("reference_name"))
    doc = {**COMMUNICATION_DEFAULTS, **_present(payload)}
    created = await DocumentService.insert_document(ctx.erp, "Communication", doc)
    return {"communication": to_communication(created)}


@router.get("/communications")
async def list_communications(
    ctx: ApiContext,
    communication_type: str | None = None,
    status: str | None = None,
    reference_doctype: str | None = None,
    reference_name: str | None = None,
    date_from: str | None = None,
    date_to: str | None = None,
    limit: ListLimit = None,
):
    async def produce():
        filters = build_filters(
            communication_type=communication_type,
            status=status,
            reference_doctype=reference_doctype,
            reference_name=reference_name,
        )
        filters += date_range_filters("creation", date_from, date_to)
        result = await DocumentService.hydrate_list(
            ctx.erp, "Communication", filters=filters, limit=limit or ctx.settings.LIST_LIMIT
        )
        return result.map(to_communication).as_payload("communications")

    return await handle_api_request(ctx, produce)


@router.post("/communications")
async def create_communication_route(ctx: ApiContext, payload: JsonBody):
    """Record a communication. Requires subject and content."""
    async def produce():
        return await create_communication(ctx, payload)

    return await handle_api_request(ctx, produce, require_auth=True)


@router.get("/communications/by-reference")
async def list_reference_communications(ctx: ApiContext, doctype: str | None = None, name: str | None = None):
    async def produce():
        reference_doctype, reference_name = _reference(doctype, name)
        result = await DocumentService.hydrate_list(
            ctx.erp,
            "Communication",
            filters=[["reference_doctype", "=", reference_doctype], ["reference_name", "=", reference_name]],
            limit=ctx.settings.LIST_LIMIT,
        )
        return result.map(to_communication).as_payload("communications")

    return await handle_api_request(ctx, produce)


@router.post("/communications/by-reference")
async def create_reference_communication(
    ctx: ApiContext,
    payload: JsonBody,
    doctype: str | None = None,
    name: str | None = None,
):
    async def produce():
        reference_doctype, reference_name = _reference(doctype, name)
        return await create_communication(
            ctx, {**payload, "reference_doctype": reference_doctype, "reference_name": reference_name}
        )

    return await handle_api_request(ctx, produce, require_auth=True)


@router.get("/communications/{name}")
async def get_communication(name: str, ctx: ApiContext):
    async def produce():
        doc = await DocumentService.fetch_document(ctx.erp, "Communication", name)
        return {"communication": to_communication(doc)}

    return await handle_api_request(ctx, produce)


@router.put("/communications/{name}")
async def update_communication(name: str, ctx: ApiContext, payload: JsonBody = {}):
    async def produce():
        doc = await DocumentService.update_document(ctx.erp, "Communication", name, payload)
        return {"communication": to_communication(doc)}

    return await handle_api_request(ctx, produce, require_auth=True)


@router.delete("/communications/{name}")
async def delete_communication(name: str, ctx: ApiContext):
    async def produce():
        await DocumentService.delete_document(ctx.erp, "Communication", name)
        return {"message": f"Communication {name} deleted successfully"}

    return await handle_api_request(ctx, produce, require_auth=True)


# =============================================================================
# Dashboard / Options
# =============================================================================

@router.get("/dashboard")
async def crm_dashboard(ctx: ApiContext):
    """Lead, opportunity and quotation figures for the CRM dashboard."""
    async def produce():
        return await ReportingService.crm_dashboard(ctx.erp)

    return await handle_api_request(ctx, produce)


def _options(rows: list[dict[str, Any]], label_field: str) -> list[NamedOption]:
    return [NamedOption(name=row["name"], label=row.get(label_field) or row["name"]) for row in rows]


@router.get("/options")
async def crm_options(ctx: ApiContext):
    """Territories, customer groups, sales persons, lead sources, customers and items."""
    async def produce():
        client = ctx.erp
        territories, groups, persons, sources, customers, items = await asyncio.gather(
            DocumentService.list_values(client, "Territory", ["name"], order_by="name asc"),
            DocumentService.list_values(client, "Customer Group", ["name"], order_by="name asc"),
            DocumentService.list_values(client, "Sales Person", ["name", "sales_person_name"], order_by="name asc"),
            DocumentService.list_values(client, "Lead Source", ["name"], order_by="name asc"),
            DocumentService.list_values(
                client, "Customer", ["name", "customer_name"],
                filters=[["disabled", "=", 0]], order_by="customer_name asc",
            ),
            DocumentService.list_values(
                client, "Item", ["name", "item_name"],
                filters=[["disabled", "=", 0]], order_by="item_name asc",
            ),
        )
        return {
            "territories": pluck(territories),
            "customer_groups": pluck(groups),
            "sales_persons": _options(persons, "sales_person_name"),
            "lead_sources": pluck(sources),
            "customers": _options(customers, "customer_name"),
            "items": _options(items, "item_name"),
        }

    return await handle_api_request(ctx, produce)
