# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains framework-agnostic business logic:
# - models/: Pydantic DTOs and the response envelope
# - mappers/: ERP document -> DTO projections
# - services/: Document operations, hydration, error classification
#
# Code in this package never builds HTTP responses; routers in app/ do.
# =============================================================================
