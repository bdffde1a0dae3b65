# =============================================================================
# core/services/hydration.py - Concurrent Document Hydration
# =============================================================================
# List endpoints first ask the ERP for the matching names, then fetch every
# full document concurrently ("hydration"). One failed lookup does not fail
# the request: the surviving documents are returned in list order together
# with an explicit error entry per failed name.
# =============================================================================

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Generic, Sequence, TypeVar

from core.services.error_mapping import classify_error

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _error_entry(name: Any, exc: Exception) -> dict[str, Any]:
    failure = classify_error(exc)
    logger.warning(f"Failed to hydrate {name}: {failure.error} ({failure.details})")
    return {"name": name, "error": failure.error, "details": failure.details}


@dataclass
class HydrationResult(Generic[T]):
    """
    Outcome of a hydration pass.

    Attributes:
        items: Fetched documents, in the order of the requested names
        errors: One {"name", "error", "details"} entry per failed lookup
    """
    items: list[T] = field(default_factory=list)
    errors: list[dict[str, Any]] = field(default_factory=list)

    def map(self, mapper: Callable[[T], Any]) -> "HydrationResult[Any]":
        """
        Apply a mapper to every item, keeping the error list.

        A document the mapper rejects (a value the response model cannot
        hold) moves to the error list like a failed lookup.
        """
        mapped: HydrationResult[Any] = HydrationResult(errors=list(self.errors))
        for item in self.items:
            try:
                mapped.items.append(mapper(item))
            except Exception as e:
                name = item.get("name") if isinstance(item, dict) else str(item)
                mapped.errors.append(_error_entry(name, e))
        return mapped

    def as_payload(self, key: str) -> dict[str, Any]:
        """Shape used by list endpoints: {key: items, "errors": errors}."""
        return {key: self.items, "errors": self.errors}


async def hydrate(
    names: Sequence[str],
    fetch: Callable[[str], Awaitable[T]],
) -> HydrationResult[T]:
    """
    Fetch every name concurrently, collecting failures instead of raising.

    Args:
        names: Document names to fetch
        fetch: Coroutine function fetching one document by name

    Returns:
        HydrationResult with len(items) + len(errors) == len(names)
    """
    results = await asyncio.gather(
        *(fetch(name) for name in names),
        return_exceptions=True,
    )

    hydrated: HydrationResult[T] = HydrationResult()
    for name, result in zip(names, results):
        if isinstance(result, Exception):
            hydrated.errors.append(_error_entry(name, result))
        elif isinstance(result, BaseException):
            # Cancellation and interpreter exits are not per-item failures
            raise result
        else:
            hydrated.items.append(result)

    if hydrated.errors:
        logger.info(f"Hydrated {len(hydrated.items)}/{len(names)} documents")
    return hydrated
