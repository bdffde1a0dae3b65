# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .document_service import DocumentService
from .error_mapping import ClassifiedError, classify_error
from .hydration import HydrationResult, hydrate

__all__ = [
    "DocumentService",
    "ClassifiedError",
    "classify_error",
    "HydrationResult",
    "hydrate",
]
