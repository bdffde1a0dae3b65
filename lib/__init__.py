# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - erp_client.py: Async Frappe/ERPNext client (db, call, auth, file)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.erp_client import ERPClient, ERPClientError

__all__ = [
    "ERPClient",
    "ERPClientError",
]
