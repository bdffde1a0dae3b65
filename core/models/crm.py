# =============================================================================
# core/models/crm.py - CRM Schemas
# =============================================================================
# Customers and their contacts/addresses, the lead -> opportunity ->
# quotation -> sales order pipeline, and the CRM dashboard aggregate.
# =============================================================================

from pydantic import BaseModel, Field

from .common import DocumentModel, LineItem


class Customer(DocumentModel):
    customer_name: str = ""
    customer_type: str = ""
    customer_group: str = ""
    territory: str = ""
    default_currency: str = ""
    credit_limit: float = 0
    email_id: str = ""
    mobile_no: str = ""
    disabled: int = 0


class Contact(DocumentModel):
    first_name: str = ""
    last_name: str = ""
    email_id: str = ""
    mobile_no: str = ""
    is_primary_contact: int = 0
    # Customer linked through the contact's Dynamic Link rows
    customer: str = ""


class Address(DocumentModel):
    address_title: str = ""
    address_type: str = ""
    address_line1: str = ""
    address_line2: str = ""
    city: str = ""
    state: str = ""
    country: str = ""
    pincode: str = ""
    is_primary_address: int = 0
    customer: str = ""


class Lead(DocumentModel):
    lead_name: str = ""
    company_name: str = ""
    email_id: str = ""
    mobile_no: str = ""
    status: str = ""
    source: str = ""
    territory: str = ""
    contact_by: str = ""


class Opportunity(DocumentModel):
    """
    A sales opportunity.

    The ERP stores the party in party_name; `customer` and `lead` are
    derived from it according to opportunity_from.
    """
    opportunity_from: str = ""
    party_name: str = ""
    opportunity_type: str = ""
    status: str = ""
    probability: float = 0
    expected_closing: str = ""
    opportunity_amount: float = 0
    sales_stage: str = ""
    customer: str = ""
    lead: str = ""
    territory: str = ""


class Quotation(DocumentModel):
    customer: str = ""
    party_name: str = ""
    customer_name: str = ""
    transaction_date: str = ""
    valid_till: str = ""
    currency: str = ""
    total: float = 0
    grand_total: float = 0
    status: str = ""
    docstatus: int = 0
    items: list[LineItem] = Field(default_factory=list)


class SalesOrder(DocumentModel):
    customer: str = ""
    customer_name: str = ""
    transaction_date: str = ""
    delivery_date: str = ""
    currency: str = ""
    total: float = 0
    grand_total: float = 0
    status: str = ""
    docstatus: int = 0
    items: list[LineItem] = Field(default_factory=list)



# -----------------------------------------------------------------------------
# Activities / Communications
# -----------------------------------------------------------------------------

class Activity(DocumentModel):
    """
    A CRM activity, stored in the ERP as a ToDo.

    subject and description both carry the ToDo description; due_date,
    assigned_to and reference_doctype map to date, allocated_to and
    reference_type.
    """
    activity_type: str = "Task"
    subject: str = ""
    description: str = ""
    status: str = ""
    priority: str = ""
    due_date: str = ""
    assigned_to: str = ""
    reference_doctype: str = ""
    reference_name: str = ""


class Communication(DocumentModel):
    communication_type: str = ""
    subject: str = ""
    content: str = ""
    status: str = ""
    reference_doctype: str = ""
    reference_name: str = ""

# -----------------------------------------------------------------------------
# Dashboard
# -----------------------------------------------------------------------------

class StageSummary(BaseModel):
    """Open opportunities grouped by sales stage."""
    stage: str
    count: int = 0
    amount: float = 0


class SalesPersonSummary(BaseModel):
    name: str
    opportunities: int = 0
    amount: float = 0


class CRMDashboard(BaseModel):
    """Headline CRM figures."""
    total_leads: int = 0
    open_opportunities: int = 0
    quotations_to_follow_up: int = 0
    lead_conversion_rate: float = Field(default=0, serialization_alias="leadConversionRate")
    opportunities_by_stage: list[StageSummary] = Field(default_factory=list)
    top_sales_persons: list[SalesPersonSummary] = Field(default_factory=list)
