import logging
import re
from typing import Iterable, Mapping, Optional

from .health import classify_local, size_label, units
from .schemas import LocalStatus, NormalizedRecord, SizeBreakdown, StoreComparison

logger = logging.getLogger(__name__)

MESSAGE_TEMPLATES = {
    LocalStatus.COMPLETE: "All sizes sufficient (2 or more units).",
    LocalStatus.SHORTAGE: "Shortage on sizes: {sizes}.",
    LocalStatus.LOW: "Low stock (1 unit) on sizes: {sizes}.",
}


def _natural_key(text: str):
    """'2' < '10', 'S' < 'XL'; digits compare as numbers."""
    return [(0, int(part), "") if part.isdigit() else (1, 0, part.lower())
            for part in re.split(r"(\d+)", text) if part]


def bucket_by_store(
    records: Iterable[NormalizedRecord], base_sku: Optional[str] = None
) -> dict[str, list[NormalizedRecord]]:
    """Store display name -> records, optionally limited to one product family."""
    target = base_sku.lower() if base_sku else None
    stores: dict[str, list[NormalizedRecord]] = {}
    for record in records:
        if target and record.base_sku != target:
            continue
        stores.setdefault(record.store_name, []).append(record)
    return stores


def compare_store(
    store: str,
    records: list[NormalizedRecord],
    size_map: dict[str, str],
    base_sku: Optional[str] = None,
) -> StoreComparison:
    stock_by_size = [(size_label(r, size_map), units(r.stock)) for r in records]
    status, flagged = classify_local(stock_by_size)

    sizes = sorted(
        (SizeBreakdown(size=size, stock=stock) for size, stock in stock_by_size),
        key=lambda item: _natural_key(item.size),
    )
    return StoreComparison(
        store=store,
        base_sku=base_sku,
        status=status,
        message=MESSAGE_TEMPLATES[status].format(sizes=", ".join(flagged)),
        sizes=sizes,
    )


def compare_stores(
    stores: Mapping[str, list[NormalizedRecord]],
    size_map: Optional[dict[str, str]] = None,
    base_sku: Optional[str] = None,
) -> list[StoreComparison]:
    """
    Classifies each store bucket on local stock only and builds its message.
    Rows are ordered alphabetically by store name.
    """
    size_map = size_map or {}
    rows = [compare_store(store, records, size_map, base_sku) for store, records in stores.items()]
    rows.sort(key=lambda row: row.store)
    logger.info(f"🔎 Compared {len(rows)} stores.")
    return rows
