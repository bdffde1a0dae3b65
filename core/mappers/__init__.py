# =============================================================================
# core/mappers/ - ERP Document -> DTO Mappers
# =============================================================================
# One pure function per resource, shared by single-get, list-hydrate,
# create and update endpoints:
# - base.py: project_document() and Dynamic Link helpers
# - crm.py / accounting.py / stock.py / assets.py: resource mappers
# - pos.py: POS catalog grouping and stock checks
#
# Nothing here talks to the ERP.
# =============================================================================

from .base import linked_name, pluck, project_document

__all__ = [
    "linked_name",
    "pluck",
    "project_document",
]
