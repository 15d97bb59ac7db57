import logging
from typing import Iterable, Optional

from . import settings
from .health import SizeBucket, bucket_size, classify_health, size_label, units
from .schemas import GroupedProduct, NormalizedRecord

logger = logging.getLogger(__name__)

SUMMED_FIELDS = ("stock", "transit", "stock_cd", "sales_2w", "ra")


class _ProductGroup:
    """Mutable accumulator, only alive while grouping."""

    def __init__(self, record: NormalizedRecord, breakdown: bool):
        self.base_sku = record.base_sku
        self.reference_sku = record.sku
        self.description = record.description
        self.store_id = record.store_id if breakdown else None
        self.store_name = record.store_name if breakdown else None
        self.totals = dict.fromkeys(SUMMED_FIELDS, 0.0)
        self.sizes = {bucket: [] for bucket in SizeBucket}

    def add(self, record: NormalizedRecord, size_map: dict[str, str]):
        for field in SUMMED_FIELDS:
            self.totals[field] += units(getattr(record, field))

        if not self.description:
            self.description = record.description

        bucket = bucket_size(record.stock, record.transit, record.stock_cd)
        if bucket is not None:
            self.sizes[bucket].append(size_label(record, size_map))

    def build(self, product_dictionary: dict[str, str]) -> GroupedProduct:
        dictionary_name = product_dictionary.get(self.base_sku)
        coming = self.sizes[SizeBucket.IN_TRANSIT]
        request = self.sizes[SizeBucket.REQUESTABLE]
        dead = self.sizes[SizeBucket.DEAD]

        return GroupedProduct(
            base_sku=self.base_sku,
            # Priority: dictionary > row description > fallback
            name=dictionary_name or self.description or settings.UNNAMED_PRODUCT,
            from_dictionary=bool(dictionary_name),
            reference_sku=self.reference_sku,
            store_id=self.store_id,
            store_name=self.store_name,
            **self.totals,
            in_transit_sizes=list(coming),
            requestable_sizes=list(request),
            dead_sizes=list(dead),
            health=classify_health(coming, request, dead),
        )


def group_key(record: NormalizedRecord, breakdown: bool = False) -> tuple[str, Optional[str]]:
    return (record.base_sku, record.store_id if breakdown else None)


def group_records(
    records: Iterable[NormalizedRecord],
    product_dictionary: Optional[dict[str, str]] = None,
    size_map: Optional[dict[str, str]] = None,
    breakdown: bool = False,
) -> list[GroupedProduct]:
    """
    Groups records by product family (and by store in breakdown mode), sums
    their metrics and classifies the health of each group.

    Groups come out in order of first appearance, and size lists keep the
    order rows were scanned in. In breakdown mode, groups with no local and
    no transit stock are left out.
    """
    product_dictionary = product_dictionary or {}
    size_map = size_map or {}

    groups: dict[tuple[str, Optional[str]], _ProductGroup] = {}
    for record in records:
        key = group_key(record, breakdown)
        group = groups.get(key)
        if group is None:
            group = groups[key] = _ProductGroup(record, breakdown)
        group.add(record, size_map)

    products = [group.build(product_dictionary) for group in groups.values()]

    if breakdown:
        before = len(products)
        products = [p for p in products if p.stock > 0 or p.transit > 0]
        logger.debug(f"Breakdown filter removed {before - len(products)} inactive store groups.")

    logger.info(f"📦 Grouped {len(products)} products.")
    return products
