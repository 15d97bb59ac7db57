"""
Tests for row extraction and value sanitizing.

Covers:
  - Numeric cleaning under both conventions
  - One record per valid row per store block
  - Skipped rows (empty SKU, total lines)
  - Row-global DC stock
  - Empty-record suppression and diagnostics
  - Lookup dictionary parsing
"""

import pandas as pd
import pytest

from stock_health.exceptions import StructuralError
from stock_health.parsers import (
    clean_number,
    parse_grid,
    parse_product_dictionary,
    parse_size_dictionary,
)
from stock_health.schemas import NumericConvention

from conftest import build_grid

UNKNOWN = NumericConvention.UNKNOWN

# ── Numeric Cleaning ───────────────────────────────────────────────────


class TestCleanNumber:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("7", 7.0),
            (" 7 ", 7.0),
            ("1,234", 1234.0),
            ("$1,500", 1500.0),
            ("2.5", 2.5),
            (" 12", 12.0),
            (3, 3.0),
        ],
    )
    def test_parses_numbers(self, raw, expected):
        assert clean_number(raw) == expected

    @pytest.mark.parametrize("raw", ["", None, "abc", "N/A", "nan"])
    def test_unreadable_defaults_to_zero(self, raw):
        assert clean_number(raw) == 0.0

    @pytest.mark.parametrize("raw", ["", None, "abc", "N/A"])
    def test_unreadable_is_unknown_under_unknown_convention(self, raw):
        assert clean_number(raw, UNKNOWN) is None

    def test_negative_clamps_to_zero(self):
        assert clean_number("-3") == 0.0
        assert clean_number("-3", UNKNOWN) == 0.0

    def test_real_zero_stays_zero_under_unknown_convention(self):
        assert clean_number("0", UNKNOWN) == 0.0


# ── Record Extraction ──────────────────────────────────────────────────


class TestParseGrid:
    def test_one_record_per_row_per_store(self, two_store_grid):
        records, _ = parse_grid(two_store_grid)
        # 3 product rows x 2 stores, the total line is skipped
        assert len(records) == 6

    def test_records_follow_row_then_block_order(self, two_store_grid):
        records, _ = parse_grid(two_store_grid)
        assert [(r.sku, r.store_name) for r in records[:2]] == [
            ("999000_GP00_S", "MALL PLAZA"),
            ("999000_GP00_S", "COSTANERA"),
        ]

    def test_identity_and_metrics(self, two_store_grid):
        records, _ = parse_grid(two_store_grid)
        record = records[2]
        assert record.sku == "999000_GP00_M"
        assert record.description == "Polo Logo"
        assert record.brand == "GAP"
        assert record.area == "Mujer"
        assert record.category == "Poleras"
        assert record.store_id == "mallplaza"
        assert (record.stock, record.transit, record.sales_2w, record.ra) == (1, 2, 4, 2)

    def test_dc_stock_is_row_global(self, two_store_grid):
        records, _ = parse_grid(two_store_grid)
        small = [r for r in records if r.sku == "999000_GP00_S"]
        assert [r.stock_cd for r in small] == [4, 4]

    def test_total_row_produces_no_records(self, grid_factory):
        grid = grid_factory(
            ["Mall Plaza"], [{"sku": "TOTAL", "stock_cd": 9, "stores": {"Mall Plaza": (9, 9, 9, 9)}}]
        )
        records, diagnostics = parse_grid(grid)
        assert records == []
        assert diagnostics.rows_skipped == 1

    def test_empty_sku_row_is_skipped(self, grid_factory):
        grid = grid_factory(
            ["Mall Plaza"],
            [
                {"sku": "", "stores": {"Mall Plaza": (1, 0, 0, 0)}},
                {"sku": "ABC_RED_S", "stores": {"Mall Plaza": (1, 0, 0, 0)}},
            ],
        )
        records, diagnostics = parse_grid(grid)
        assert [r.sku for r in records] == ["ABC_RED_S"]
        assert diagnostics.rows_scanned == 2
        assert diagnostics.rows_skipped == 1

    def test_n_times_m_records(self, grid_factory):
        stores = ["A", "B", "C"]
        rows = [
            {"sku": f"STY{i}_BLK_{size}", "stores": {s: (i, 0, 0, 0) for s in stores}}
            for i in range(4)
            for size in ("S", "M")
        ]
        records, _ = parse_grid(grid_factory(stores, rows))
        assert len(records) == len(stores) * len(rows)

    def test_deterministic(self, two_store_grid):
        first, first_diag = parse_grid(two_store_grid)
        second, second_diag = parse_grid(two_store_grid)
        assert first == second
        assert first_diag == second_diag

    def test_structural_error_propagates(self, two_store_grid):
        with pytest.raises(StructuralError):
            parse_grid(two_store_grid[:2])


# ── Numeric Conventions ────────────────────────────────────────────────


class TestConventions:
    def _blank_grid(self, grid_factory):
        return grid_factory(
            ["Mall Plaza"],
            [{"sku": "ABC_RED_S", "stock_cd": "", "stores": {"Mall Plaza": ("2", "", "", "")}}],
        )

    def test_zero_convention_fills_blanks(self, grid_factory):
        records, _ = parse_grid(self._blank_grid(grid_factory))
        record = records[0]
        assert (record.stock, record.transit, record.stock_cd, record.ra) == (2, 0, 0, 0)

    def test_unknown_convention_keeps_blanks_unknown(self, grid_factory):
        records, _ = parse_grid(self._blank_grid(grid_factory), convention="unknown")
        record = records[0]
        assert record.stock == 2
        assert record.transit is None
        assert record.stock_cd is None
        assert record.ra is None

    def test_missing_metric_column(self, grid_factory):
        grid = grid_factory(["Mall Plaza"], [{"sku": "ABC_RED_S", "stores": {"Mall Plaza": (1, 1, 1, 1)}}])
        grid[2][9] = "Notas"  # RA. column renamed away
        zero, _ = parse_grid(grid)
        unknown, _ = parse_grid(grid, convention=UNKNOWN)
        assert zero[0].ra == 0
        assert unknown[0].ra is None

    def test_unreadable_cells_are_counted(self, grid_factory):
        grid = grid_factory(
            ["Mall Plaza"],
            [{"sku": "ABC_RED_S", "stock_cd": "x", "stores": {"Mall Plaza": ("abc", "-2", "", "1")}}],
        )
        records, diagnostics = parse_grid(grid)
        assert records[0].stock == 0
        assert records[0].transit == 0
        assert diagnostics.cells_defaulted == 3


# ── Suppression ────────────────────────────────────────────────────────


class TestSuppressEmpty:
    @pytest.fixture
    def grid(self, grid_factory):
        return grid_factory(
            ["Mall Plaza", "Costanera"],
            [
                {
                    "sku": "ABC_RED_S",
                    "stock_cd": 5,
                    "stores": {"Mall Plaza": (0, 0, 0, 0), "Costanera": (1, 0, 0, 0)},
                }
            ],
        )

    def test_off_by_default(self, grid):
        records, diagnostics = parse_grid(grid)
        assert len(records) == 2
        assert diagnostics.records_suppressed == 0

    def test_drops_inert_records(self, grid):
        records, diagnostics = parse_grid(grid, suppress_empty=True)
        assert [r.store_name for r in records] == ["COSTANERA"]
        assert diagnostics.records_suppressed == 1


# ── Dictionaries ───────────────────────────────────────────────────────


class TestDictionaries:
    def test_product_dictionary_keys_are_lowercase(self):
        df = pd.DataFrame({"SKU": ["999000_GP00", " ABC_RED "], "Nombre": ["Polo Logo Clásico", "Polera"]})
        assert parse_product_dictionary(df) == {
            "999000_gp00": "Polo Logo Clásico",
            "abc_red": "Polera",
        }

    def test_product_dictionary_skips_blank_names(self):
        df = pd.DataFrame({"sku": ["abc_red", "abc_blu"], "name": ["Polera", ""]})
        assert parse_product_dictionary(df) == {"abc_red": "Polera"}

    def test_size_dictionary(self):
        df = pd.DataFrame({"code": ["M030001", "M030002"], "label": ["S", "M"]})
        assert parse_size_dictionary(df) == {"M030001": "S", "M030002": "M"}

    def test_unfamiliar_headers_use_first_two_columns(self):
        df = pd.DataFrame({"x": ["M040028"], "y": ["28"]})
        assert parse_size_dictionary(df) == {"M040028": "28"}

    def test_missing_dictionary_is_empty(self):
        assert parse_product_dictionary(None) == {}
        assert parse_size_dictionary(pd.DataFrame()) == {}
