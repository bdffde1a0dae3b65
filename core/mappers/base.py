# =============================================================================
# core/mappers/base.py - Document Projection
# =============================================================================
# project_document() is the single place where an ERP document becomes a
# DTO: unknown fields are dropped, nulls are replaced by the DTO defaults,
# nested child tables are projected the same way.
# =============================================================================

from typing import Any, Iterable, Mapping, TypeVar

from pydantic import BaseModel

M = TypeVar("M", bound=BaseModel)


def _drop_nulls(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _drop_nulls(item) for key, item in value.items() if item is not None}
    if isinstance(value, list):
        return [_drop_nulls(item) for item in value if item is not None]
    return value


def project_document(model: type[M], doc: Mapping[str, Any] | None, **overrides: Any) -> M:
    """
    Project an ERP document onto a DTO.

    Args:
        model: DTO class (all fields defaulted)
        doc: Document as returned by the ERP (None maps to all defaults)
        **overrides: Derived values; None overrides are ignored

    Returns:
        The DTO instance

    Example:
        project_document(Customer, {"name": "C-1", "territory": None})
        -> Customer(name="C-1", territory="", ...)
    """
    source = dict(doc or {})
    source.update({key: value for key, value in overrides.items() if value is not None})
    values = {
        key: _drop_nulls(value)
        for key, value in source.items()
        if key in model.model_fields and value is not None
    }
    return model.model_validate(values)


def linked_name(doc: Mapping[str, Any], link_doctype: str) -> str | None:
    """
    First link_name of a Dynamic Link row pointing at link_doctype.

    Contacts and addresses reference their customer this way.
    """
    for link in doc.get("links") or []:
        if link.get("link_doctype") == link_doctype:
            return link.get("link_name")
    return None


def pluck(rows: Iterable[Mapping[str, Any]], field: str = "name") -> list[Any]:
    """Non-empty values of one field, in row order."""
    return [row[field] for row in rows if row.get(field)]
