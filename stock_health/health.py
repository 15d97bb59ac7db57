"""
Inventory health classification.

A size needs attention when it has at most LOW_STOCK_UNITS locally. Each such
size falls in exactly one bucket, checked in order:
  in transit  -> something is already on its way
  requestable -> nothing on its way, but the DC has units
  dead        -> nothing anywhere

A product's status is the first non-empty bucket in that same order, or
STOCK_OK when no size needs attention. The local-only view used for store
comparisons is the same per-size evidence with transit and DC ignored.
"""

from enum import Enum
from typing import Optional

from .schemas import HealthStatus, LocalStatus, NormalizedRecord, StockHealth

LOW_STOCK_UNITS = 1


class SizeBucket(str, Enum):
    IN_TRANSIT = "in_transit"
    REQUESTABLE = "requestable"
    DEAD = "dead"


def units(value: Optional[float]) -> float:
    """Unknown counts as zero units."""
    return value or 0.0


def size_label(record: NormalizedRecord, size_map: dict[str, str]) -> str:
    token = record.size_token
    return size_map.get(token, token)


def needs_attention(stock: Optional[float]) -> bool:
    return units(stock) <= LOW_STOCK_UNITS


def bucket_size(
    stock: Optional[float], transit: Optional[float], stock_cd: Optional[float]
) -> SizeBucket | None:
    if not needs_attention(stock):
        return None
    if units(transit) > 0:
        return SizeBucket.IN_TRANSIT
    if units(stock_cd) > 0:
        return SizeBucket.REQUESTABLE
    return SizeBucket.DEAD


def classify_health(coming: list[str], request: list[str], dead: list[str]) -> StockHealth:
    """First non-empty list wins; the returned size list is never empty unless STOCK_OK."""
    if coming:
        status, sizes = HealthStatus.IN_TRANSIT, coming
    elif request:
        status, sizes = HealthStatus.REQUEST_FROM_DC, request
    elif dead:
        status, sizes = HealthStatus.NO_STOCK_ANYWHERE, dead
    else:
        status, sizes = HealthStatus.STOCK_OK, []

    return StockHealth(
        status=status,
        severity=status.severity,
        label=status.label,
        sizes=list(sizes),
        coming=list(coming),
        request=list(request),
        dead=list(dead),
    )


def classify_local(stock_by_size: list[tuple[str, float]]) -> tuple[LocalStatus, list[str]]:
    """
    Local-stock-only status for one store: any size with nothing on the shelf
    is a SHORTAGE, else any size with some stock but at most LOW_STOCK_UNITS
    is LOW (fractions included), else COMPLETE.
    Returns the status and the sizes that triggered it.
    """
    attention = [(size, units(stock)) for size, stock in stock_by_size if needs_attention(stock)]
    empty = [size for size, stock in attention if stock <= 0]
    low = [size for size, stock in attention if stock > 0]

    if empty:
        return LocalStatus.SHORTAGE, empty
    if low:
        return LocalStatus.LOW, low
    return LocalStatus.COMPLETE, []
