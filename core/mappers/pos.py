# =============================================================================
# core/mappers/pos.py - Point of Sale Catalog
# =============================================================================
# Groups sellable items into the categories shown on the POS screen.
#
# An item lands in a category when it belongs to that item group or when
# the category's keyword (singular, lower-case: "Breads" -> "bread",
# "Pastries" -> "pastry") appears in its name. Items matching no category
# go to the catch-all category, which is listed first. Empty categories are
# dropped.
# =============================================================================

from typing import Any, Iterable, Mapping

from core.mappers.base import project_document
from core.models.pos import POSCategory, POSItem, StockCheck

ALL_ITEMS_CATEGORY = "All Finished Goods"


def category_keyword(category: str) -> str:
    """Singular lower-case keyword of a category name."""
    word = category.strip().lower()
    if word.endswith("ies"):
        return word[:-3] + "y"
    if word.endswith("s") and not word.endswith("ss"):
        return word[:-1]
    return word


def build_catalog(
    items: Iterable[Mapping[str, Any]],
    categories: list[str],
    stock: Mapping[str, float],
) -> list[POSCategory]:
    """
    Build the POS categories with per-item stock.

    Args:
        items: Item rows (item_code, item_name, item_group, ...)
        categories: Category (child item group) names, in display order
        stock: actual_qty per item_code in the POS warehouse

    Returns:
        Non-empty categories, catch-all first
    """
    buckets: dict[str, list[POSItem]] = {ALL_ITEMS_CATEGORY: []}
    for category in categories:
        buckets.setdefault(category, [])

    for row in items:
        item = project_document(POSItem, row, actual_qty=stock.get(row.get("item_code", ""), 0))
        name = item.item_name.lower()
        matched = [
            category for category in categories
            if item.item_group == category or category_keyword(category) in name
        ]
        for category in matched or [ALL_ITEMS_CATEGORY]:
            buckets[category].append(item)

    return [
        POSCategory(name=category, items=bucket)
        for category, bucket in buckets.items()
        if bucket
    ]


def to_stock_check(
    bin_row: Mapping[str, Any] | None,
    item: Mapping[str, Any],
    warehouse: str,
) -> StockCheck:
    """Stock of one item in one warehouse; no bin means zero stock."""
    return project_document(
        StockCheck,
        {**item, **(bin_row or {})},
        warehouse=warehouse,
        item_code=item.get("item_code") or item.get("name"),
    )
