"""
Test Configuration — in-memory export grids.

build_grid() lays out a grid the way the store export does:
  row 0: store names over each block
  row 1: grouping labels (ignored by the parser)
  row 2: column labels
  rows 3+: one row per SKU (style_color_size)
"""

import pytest

from stock_health import settings

HEADER_LABELS = ["SKU", "Descripción", "Marca", "Área", "Categoría", "Stock CD"]
METRIC_LABELS = ["Stock tienda", "Tránsito", "Venta 2W", "RA."]
BLANK_METRICS = ("", "", "", "")


def build_grid(stores, rows, store_labels=None):
    """
    stores: store names, one block of METRIC_LABELS each.
    rows: dicts with sku, description, stock_cd and
          "stores": {store: (stock, transit, sales_2w, ra)}.
    store_labels: override for the cell written above each block.
    """
    store_labels = store_labels or stores
    store_row = [""] * len(HEADER_LABELS)
    group_row = ["Producto"] + [""] * (len(HEADER_LABELS) - 1)
    label_row = list(HEADER_LABELS)
    for label in store_labels:
        store_row += [label, "", "", ""]
        group_row += ["Tienda", "", "", ""]
        label_row += METRIC_LABELS

    grid = [store_row, group_row, label_row]
    for row in rows:
        line = [
            row["sku"],
            row.get("description", ""),
            row.get("brand", "GAP"),
            row.get("area", "Mujer"),
            row.get("category", "Poleras"),
            str(row.get("stock_cd", "")),
        ]
        metrics = row.get("stores", {})
        for store in stores:
            line += [str(value) for value in metrics.get(store, BLANK_METRICS)]
        grid.append(line)
    return grid


@pytest.fixture
def grid_factory():
    return build_grid


@pytest.fixture(autouse=True)
def default_parsing_policy(monkeypatch):
    """Pin parsing settings so a local .env cannot change test results."""
    monkeypatch.setattr(settings, "NUMERIC_CONVENTION", "zero")
    monkeypatch.setattr(settings, "SUPPRESS_EMPTY_RECORDS", False)
    monkeypatch.setattr(settings, "HEADER_ROW_COUNT", 3)
    monkeypatch.setattr(settings, "WEBHOOK_URL", None)
    monkeypatch.setattr(settings, "SAVE_JSON_OUTPUT", False)


@pytest.fixture
def two_store_grid():
    """Three sizes of one polo in two stores, plus a total line."""
    return build_grid(
        ["Mall Plaza", "Costanera"],
        [
            {
                "sku": "999000_GP00_S",
                "description": "Polo Logo",
                "stock_cd": 4,
                "stores": {"Mall Plaza": (0, 0, 3, 2), "Costanera": (5, 0, 1, 2)},
            },
            {
                "sku": "999000_GP00_M",
                "description": "Polo Logo",
                "stock_cd": 0,
                "stores": {"Mall Plaza": (1, 2, 4, 2), "Costanera": (3, 0, 0, 2)},
            },
            {
                "sku": "999000_GP00_L",
                "description": "Polo Logo",
                "stock_cd": 0,
                "stores": {"Mall Plaza": (6, 0, 2, 2), "Costanera": (0, 0, 0, 2)},
            },
            {"sku": "Total", "stock_cd": 4, "stores": {"Mall Plaza": (7, 2, 9, 6)}},
        ],
    )
