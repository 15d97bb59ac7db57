from typing import Iterable

from .schemas import NormalizedRecord
from .utils import normalize_label


def filter_records(records: Iterable[NormalizedRecord], term: str) -> list[NormalizedRecord]:
    """Records whose SKU or description contains `term` (case and accent insensitive)."""
    needle = normalize_label(term)
    if not needle:
        return list(records)
    return [
        record
        for record in records
        if needle in normalize_label(record.sku) or needle in normalize_label(record.description)
    ]


def store_count(records: Iterable[NormalizedRecord]) -> int:
    return len({record.store_id for record in records})
