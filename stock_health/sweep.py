import logging
from typing import Iterable, Optional

from .health import size_label, units
from .schemas import NormalizedRecord, ReplenishmentDraft
from .utils import normalize_label

logger = logging.getLogger(__name__)


def is_requestable(record: NormalizedRecord) -> bool:
    """
    A size worth requesting from the DC: under 2 units locally, nothing in
    transit, units in the DC, and assigned to automatic replenishment
    (a known RA figure).
    """
    return (
        units(record.stock) < 2
        and units(record.stock_cd) > 0
        and units(record.transit) == 0
        and record.ra is not None
    )


def sweep_replenishment(
    records: Iterable[NormalizedRecord],
    size_map: Optional[dict[str, str]] = None,
    store: Optional[str] = None,
) -> list[ReplenishmentDraft]:
    """
    Collects requestable sizes into one draft per (product family, store).
    `store` limits the scan to one store, matched by id or display name.
    """
    size_map = size_map or {}
    target = normalize_label(store) if store else None

    drafts: dict[tuple[str, str], ReplenishmentDraft] = {}
    found = 0
    for record in records:
        if target and target not in (
            normalize_label(record.store_id),
            normalize_label(record.store_name),
        ):
            continue
        if not is_requestable(record):
            continue

        key = (record.base_sku, record.store_name)
        draft = drafts.get(key)
        if draft is None:
            draft = drafts[key] = ReplenishmentDraft(
                base_sku=record.base_sku,
                store_name=record.store_name,
                area=record.area or "General",
                description=record.description,
            )
        draft.sizes.append(size_label(record, size_map))
        found += 1

    if found:
        logger.info(f"🧹 Sweep found {found} critical sizes in {len(drafts)} products.")
    else:
        logger.info("🧹 Sweep found no urgent sizes.")
    return list(drafts.values())
