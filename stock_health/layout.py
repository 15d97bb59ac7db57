"""
Structural discovery over a raw stock export grid.

Expected shape (first three rows are structural):
  row 0: store names, each one opening a block of columns
  row 1: free-form grouping labels (ignored)
  row 2: column labels ("SKU", "Stock tienda", "Tránsito", ...)
"""

import logging
from typing import Iterable

from . import settings
from .exceptions import StructuralError
from .schemas import GridLayout, StoreBlock
from .utils import normalize_label

logger = logging.getLogger(__name__)

# Aliases shorter than this only match exactly ("ra" must not hit "transito").
MIN_SUBSTRING_ALIAS = 3


def matches_alias(header: str, aliases: Iterable[str]) -> bool:
    """Exact or substring match of an already-normalized header against aliases."""
    if not header:
        return False
    for alias in aliases:
        alias = normalize_label(alias)
        if header == alias or header == alias.rstrip("."):
            return True
        if len(alias) >= MIN_SUBSTRING_ALIAS and alias in header:
            return True
    return False


def sanitize_store_id(name: str) -> str:
    store_id = "".join(ch for ch in normalize_label(name) if ch.isalnum())
    return store_id or settings.UNKNOWN_STORE_ID


def sanitize_store_name(name: str) -> str:
    display = " ".join(str(name or "").split()).upper()
    return display or settings.UNKNOWN_STORE_NAME


def is_store_label(value: str) -> bool:
    label = normalize_label(value)
    return bool(label) and label not in settings.STORE_BLACKLIST


def find_static_columns(labels: list[str]) -> dict[str, int]:
    """First (leftmost) matching column per row-global field."""
    found = {}
    for field, aliases in settings.STATIC_COLUMNS.items():
        for index, header in enumerate(labels):
            if matches_alias(header, aliases):
                found[field] = index
                break
    return found


def find_metric_columns(labels: list[str], start: int, end: int) -> dict[str, int]:
    """Per-store metric columns, searching only inside [start, end]."""
    found = {}
    for field, aliases in settings.METRIC_COLUMNS.items():
        for index in range(start, min(end, len(labels) - 1) + 1):
            if matches_alias(labels[index], aliases):
                found[field] = index
                break
    return found


def find_store_blocks(store_row: list[str], labels: list[str]) -> tuple[list[StoreBlock], int]:
    """
    Opens a block at every non-blacklisted cell of the store row and closes it
    one column before the next one. Blocks without metric columns are dropped.
    Returns the kept blocks and the number dropped.
    """
    width = max(len(store_row), len(labels))
    starts = [
        (index, value.strip())
        for index, value in enumerate(store_row)
        if is_store_label(value)
    ]

    blocks = []
    dropped = 0
    for position, (start, raw_name) in enumerate(starts):
        end = starts[position + 1][0] - 1 if position + 1 < len(starts) else width - 1
        metric_columns = find_metric_columns(labels, start, end)
        if not metric_columns:
            logger.debug(f"Dropping block '{raw_name}' (cols {start}-{end}): no metric columns.")
            dropped += 1
            continue
        blocks.append(
            StoreBlock(
                name=sanitize_store_name(raw_name),
                store_id=sanitize_store_id(raw_name),
                start_column=start,
                end_column=end,
                metric_columns=metric_columns,
            )
        )
    return blocks, dropped


def locate_layout(grid: list[list[str]], header_rows: int | None = None) -> tuple[GridLayout, int]:
    """
    Finds store blocks and the fixed columns of the grid.
    Returns the layout and the number of dropped (metric-less) blocks.

    Raises StructuralError when the header is too short, there is no SKU
    column, or no usable store block is left.
    """
    header_rows = header_rows or settings.HEADER_ROW_COUNT
    if header_rows < 3:
        raise StructuralError(f"At least 3 header rows are required, configured {header_rows}.")
    if len(grid) < header_rows:
        raise StructuralError(
            f"The file has {len(grid)} rows; expected at least {header_rows} header rows."
        )

    store_row = [str(value or "") for value in grid[0]]
    labels = [normalize_label(value) for value in grid[2]]

    static_columns = find_static_columns(labels)
    if "sku" not in static_columns:
        raise StructuralError("No SKU column found in the third header row.")

    blocks, dropped = find_store_blocks(store_row, labels)
    if not blocks:
        raise StructuralError("No store blocks detected in the first header row.")

    logger.info(f"🏢 Stores detected: {len(blocks)} ({', '.join(b.name for b in blocks)})")

    layout = GridLayout(
        store_blocks=blocks,
        sku_column=static_columns["sku"],
        description_column=static_columns.get("description"),
        brand_column=static_columns.get("brand"),
        area_column=static_columns.get("area"),
        category_column=static_columns.get("category"),
        stock_cd_column=static_columns.get("stock_cd"),
        first_data_row=header_rows,
    )
    return layout, dropped
