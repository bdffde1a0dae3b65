# =============================================================================
# core/mappers/stock.py - Inventory Document Mappers
# =============================================================================

from typing import Any, Mapping

from core.mappers.base import project_document
from core.models.stock import (
    DeliveryNote,
    Item,
    StockBalance,
    StockEntry,
    StockLedgerEntry,
)


def to_item(doc: Mapping[str, Any]) -> Item:
    return project_document(Item, doc, item_code=doc.get("item_code") or doc.get("name"))


def to_stock_entry(doc: Mapping[str, Any]) -> StockEntry:
    return project_document(StockEntry, doc)


def to_delivery_note(doc: Mapping[str, Any]) -> DeliveryNote:
    return project_document(DeliveryNote, doc)


def to_stock_balance(row: Mapping[str, Any], item_names: Mapping[str, str]) -> StockBalance:
    """A Bin row, with the item name looked up by code."""
    return project_document(StockBalance, row, item_name=item_names.get(row.get("item_code", "")))


def to_ledger_entry(row: Mapping[str, Any], item_names: Mapping[str, str]) -> StockLedgerEntry:
    return project_document(StockLedgerEntry, row, item_name=item_names.get(row.get("item_code", "")))
