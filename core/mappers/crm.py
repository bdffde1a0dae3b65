# =============================================================================
# core/mappers/crm.py - CRM Document Mappers
# =============================================================================

from typing import Any, Mapping

from core.mappers.base import linked_name, project_document
from core.models.crm import (
    Activity,
    Address,
    Communication,
    Contact,
    Customer,
    Lead,
    Opportunity,
    Quotation,
    SalesOrder,
)


def to_customer(doc: Mapping[str, Any]) -> Customer:
    return project_document(Customer, doc)


def to_contact(doc: Mapping[str, Any]) -> Contact:
    return project_document(Contact, doc, customer=linked_name(doc, "Customer"))


def to_address(doc: Mapping[str, Any]) -> Address:
    return project_document(Address, doc, customer=linked_name(doc, "Customer"))


def to_lead(doc: Mapping[str, Any]) -> Lead:
    return project_document(Lead, doc)


def to_opportunity(doc: Mapping[str, Any]) -> Opportunity:
    """Split party_name into customer/lead according to opportunity_from."""
    source = doc.get("opportunity_from")
    party = doc.get("party_name")
    return project_document(
        Opportunity,
        doc,
        customer=party if source == "Customer" else None,
        lead=party if source == "Lead" else None,
    )


def to_quotation(doc: Mapping[str, Any]) -> Quotation:
    # Quotations address a party; for customer quotations that is the customer
    customer = doc.get("party_name") if doc.get("quotation_to", "Customer") == "Customer" else None
    return project_document(Quotation, doc, customer=doc.get("customer") or customer)


def to_sales_order(doc: Mapping[str, Any]) -> SalesOrder:
    return project_document(SalesOrder, doc)


# -----------------------------------------------------------------------------
# Activities (ToDo) / Communications
# -----------------------------------------------------------------------------

# API field -> ToDo field
ACTIVITY_FIELDS = {
    "subject": "description",
    "due_date": "date",
    "assigned_to": "allocated_to",
    "reference_doctype": "reference_type",
}


def activity_to_todo(payload: Mapping[str, Any]) -> dict[str, Any]:
    """
    Rename the API's activity fields to the ToDo fields that store them.

    subject wins over description when both are given.
    """
    todo = {key: value for key, value in payload.items() if key not in ACTIVITY_FIELDS}
    for field, todo_field in ACTIVITY_FIELDS.items():
        if field in payload:
            todo[todo_field] = payload[field]
    return todo


def to_activity(doc: Mapping[str, Any]) -> Activity:
    return project_document(
        Activity,
        doc,
        subject=doc.get("description"),
        due_date=doc.get("date"),
        assigned_to=doc.get("allocated_to"),
        reference_doctype=doc.get("reference_type"),
        activity_type=doc.get("activity_type") or "Task",
    )


def to_communication(doc: Mapping[str, Any]) -> Communication:
    return project_document(Communication, doc)
