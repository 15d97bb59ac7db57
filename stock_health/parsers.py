import logging
import math
import re
from typing import Optional

import pandas as pd

from . import settings
from .layout import locate_layout
from .schemas import (
    GridLayout,
    NormalizedRecord,
    NumericConvention,
    ParseDiagnostics,
    StoreBlock,
)
from .utils import cell, normalize_label

logger = logging.getLogger(__name__)

METRIC_FIELDS = ("stock", "transit", "sales_2w", "ra")
_NOISE = re.compile(r"[,\s $€£]")


class MetricSanitizer:
    """
    Turns raw cell text into a non-negative float, or None under the
    UNKNOWN convention. Counts every cell that had to be defaulted.
    """

    def __init__(self, convention: NumericConvention, diagnostics: ParseDiagnostics):
        self.convention = convention
        self.diagnostics = diagnostics

    @property
    def fallback(self) -> Optional[float]:
        return None if self.convention == NumericConvention.UNKNOWN else 0.0

    def missing(self) -> Optional[float]:
        """Value for a metric whose column does not exist in the block."""
        return self.fallback

    def clean(self, raw) -> Optional[float]:
        text = _NOISE.sub("", str(raw or ""))
        if not text:
            return self.fallback
        try:
            value = float(text)
        except ValueError:
            value = None
        if value is None or not math.isfinite(value):
            self.diagnostics.cells_defaulted += 1
            return self.fallback
        if value < 0:
            self.diagnostics.cells_defaulted += 1
            return 0.0
        return value


def clean_number(raw, convention: NumericConvention = NumericConvention.ZERO) -> Optional[float]:
    """Standalone sanitizer for a single cell."""
    return MetricSanitizer(convention, ParseDiagnostics()).clean(raw)


def is_skippable_sku(sku: str) -> bool:
    return not sku or normalize_label(sku) in settings.TOTAL_ROW_SENTINELS


def _record_is_empty(values: dict[str, Optional[float]]) -> bool:
    return all(not values.get(field) for field in METRIC_FIELDS)


def extract_row(
    row: list[str],
    layout: GridLayout,
    sanitizer: MetricSanitizer,
    suppress_empty: bool = False,
) -> list[NormalizedRecord]:
    """
    One record per store block for a data row. The row identity and the
    DC stock (row-global) are read once and shared by every block.
    """
    sku = cell(row, layout.sku_column)
    if is_skippable_sku(sku):
        sanitizer.diagnostics.rows_skipped += 1
        return []

    identity = {
        "sku": sku,
        "description": cell(row, layout.description_column),
        "brand": cell(row, layout.brand_column),
        "area": cell(row, layout.area_column),
        "category": cell(row, layout.category_column),
    }
    if layout.stock_cd_column is None:
        stock_cd = sanitizer.missing()
    else:
        stock_cd = sanitizer.clean(cell(row, layout.stock_cd_column))

    records = []
    for block in layout.store_blocks:
        values = _block_metrics(row, block, sanitizer)
        if suppress_empty and _record_is_empty(values):
            sanitizer.diagnostics.records_suppressed += 1
            continue
        records.append(
            NormalizedRecord(
                **identity,
                store_id=block.store_id,
                store_name=block.name,
                stock_cd=stock_cd,
                **values,
            )
        )
    return records


def _block_metrics(
    row: list[str], block: StoreBlock, sanitizer: MetricSanitizer
) -> dict[str, Optional[float]]:
    values = {}
    for field in METRIC_FIELDS:
        column = block.metric_columns.get(field)
        values[field] = sanitizer.missing() if column is None else sanitizer.clean(cell(row, column))
    return values


def parse_grid(
    grid: list[list[str]],
    convention: NumericConvention | str | None = None,
    suppress_empty: bool | None = None,
    header_rows: int | None = None,
) -> tuple[list[NormalizedRecord], ParseDiagnostics]:
    """
    Converts a raw export grid into NormalizedRecords.
    Structure is discovered once; each data row is then read once.
    Raises StructuralError (via locate_layout) on a malformed header.
    """
    convention = NumericConvention(convention or settings.NUMERIC_CONVENTION)
    if suppress_empty is None:
        suppress_empty = settings.SUPPRESS_EMPTY_RECORDS

    layout, dropped = locate_layout(grid, header_rows)
    diagnostics = ParseDiagnostics(blocks_dropped=dropped)
    sanitizer = MetricSanitizer(convention, diagnostics)

    records: list[NormalizedRecord] = []
    for row in grid[layout.first_data_row :]:
        diagnostics.rows_scanned += 1
        records.extend(extract_row(row, layout, sanitizer, suppress_empty))

    logger.info(
        f"✅ Parsing complete. Records generated: {len(records)} "
        f"(rows skipped: {diagnostics.rows_skipped}, cells defaulted: {diagnostics.cells_defaulted})"
    )
    return records, diagnostics


# --- Lookup dictionaries ---


def _pick_column(df: pd.DataFrame, aliases: list[str], fallback: int) -> str:
    normalized = {normalize_label(col): col for col in df.columns}
    for alias in aliases:
        if alias in normalized:
            return normalized[alias]
    return df.columns[fallback]


def parse_product_dictionary(df: pd.DataFrame) -> dict[str, str]:
    """
    Two-column export (SKU, name) -> {lowercase base sku: friendly name}.
    Falls back to the first two columns when the headers are unfamiliar.
    """
    if df is None or df.empty or len(df.columns) < 2:
        return {}

    sku_col = _pick_column(df, ["sku", "base sku", "codigo"], 0)
    name_col = _pick_column(df, ["name", "nombre", "descripcion", "description"], 1)

    temp_df = pd.DataFrame()
    temp_df["sku"] = df[sku_col].astype(str).str.strip().str.lower()
    temp_df["name"] = df[name_col].astype(str).str.strip()
    temp_df = temp_df[(temp_df["sku"] != "") & (temp_df["name"] != "")]
    # Last definition wins, like a keyed document store
    temp_df = temp_df.drop_duplicates(subset="sku", keep="last")

    logger.info(f"📘 Product dictionary loaded: {len(temp_df)} entries.")
    return dict(zip(temp_df["sku"], temp_df["name"]))


def parse_size_dictionary(df: pd.DataFrame) -> dict[str, str]:
    """Two-column export (code, label) -> {raw size token: friendly label}."""
    if df is None or df.empty or len(df.columns) < 2:
        return {}

    code_col = _pick_column(df, ["code", "codigo", "size code", "talla"], 0)
    label_col = _pick_column(df, ["label", "etiqueta", "size", "nombre"], 1)

    temp_df = pd.DataFrame()
    temp_df["code"] = df[code_col].astype(str).str.strip()
    temp_df["label"] = df[label_col].astype(str).str.strip()
    temp_df = temp_df[(temp_df["code"] != "") & (temp_df["label"] != "")]
    temp_df = temp_df.drop_duplicates(subset="code", keep="last")

    logger.info(f"📏 Size map loaded: {len(temp_df)} entries.")
    return dict(zip(temp_df["code"], temp_df["label"]))
