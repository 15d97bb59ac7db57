"""
Tests for the per-store comparison view.

Covers:
  - Store bucketing for one product family
  - Local-only status and message templates
  - Ordering of stores and sizes
"""

from stock_health.comparison import bucket_by_store, compare_stores
from stock_health.parsers import parse_grid
from stock_health.schemas import LocalStatus


def comparisons_for(grid, base_sku, size_map=None):
    records, _ = parse_grid(grid)
    return compare_stores(bucket_by_store(records, base_sku), size_map, base_sku)


# ── Bucketing ──────────────────────────────────────────────────────────


class TestBucketByStore:
    def test_buckets_by_display_name(self, two_store_grid):
        records, _ = parse_grid(two_store_grid)
        stores = bucket_by_store(records, "999000_GP00")
        assert list(stores) == ["MALL PLAZA", "COSTANERA"]
        assert [r.sku for r in stores["COSTANERA"]] == [
            "999000_GP00_S",
            "999000_GP00_M",
            "999000_GP00_L",
        ]

    def test_other_families_are_left_out(self, grid_factory):
        grid = grid_factory(
            ["Mall Plaza"],
            [
                {"sku": "ABC_RED_S", "stores": {"Mall Plaza": (1, 0, 0, 0)}},
                {"sku": "ABC_BLU_S", "stores": {"Mall Plaza": (1, 0, 0, 0)}},
            ],
        )
        records, _ = parse_grid(grid)
        stores = bucket_by_store(records, "abc_red")
        assert [r.sku for r in stores["MALL PLAZA"]] == ["ABC_RED_S"]


# ── Status and Messages ────────────────────────────────────────────────


class TestCompareStores:
    def test_sorted_by_store_name(self, two_store_grid):
        rows = comparisons_for(two_store_grid, "999000_gp00")
        assert [row.store for row in rows] == ["COSTANERA", "MALL PLAZA"]
        assert all(row.base_sku == "999000_gp00" for row in rows)

    def test_shortage_names_empty_sizes(self, two_store_grid):
        costanera, mall = comparisons_for(two_store_grid, "999000_gp00")
        assert costanera.status == LocalStatus.SHORTAGE
        assert costanera.message == "Shortage on sizes: L."
        # a size at 0 outranks the size at 1
        assert mall.status == LocalStatus.SHORTAGE
        assert mall.message == "Shortage on sizes: S."

    def test_low(self, grid_factory):
        grid = grid_factory(
            ["Mall Plaza"],
            [
                {"sku": "ABC_RED_S", "stores": {"Mall Plaza": (1, 0, 0, 0)}},
                {"sku": "ABC_RED_M", "stores": {"Mall Plaza": (4, 0, 0, 0)}},
                {"sku": "ABC_RED_L", "stores": {"Mall Plaza": (1, 0, 0, 0)}},
            ],
        )
        (row,) = comparisons_for(grid, "abc_red")
        assert row.status == LocalStatus.LOW
        assert row.message == "Low stock (1 unit) on sizes: S, L."

    def test_complete(self, grid_factory):
        grid = grid_factory(
            ["Mall Plaza"],
            [{"sku": f"ABC_RED_{s}", "stores": {"Mall Plaza": (2, 0, 0, 0)}} for s in "SM"],
        )
        (row,) = comparisons_for(grid, "abc_red")
        assert row.status == LocalStatus.COMPLETE
        assert row.message == "All sizes sufficient (2 or more units)."

    def test_size_breakdown_in_natural_order(self, grid_factory):
        grid = grid_factory(
            ["Mall Plaza"],
            [
                {"sku": f"JEAN_IND_{size}", "stores": {"Mall Plaza": (3, 0, 0, 0)}}
                for size in ("32", "28", "30", "4")
            ],
        )
        (row,) = comparisons_for(grid, "jean_ind")
        assert [item.size for item in row.sizes] == ["4", "28", "30", "32"]

    def test_size_map_applies(self, grid_factory):
        grid = grid_factory(
            ["Mall Plaza"], [{"sku": "ABC_RED_M030001", "stores": {"Mall Plaza": (0, 0, 0, 0)}}]
        )
        (row,) = comparisons_for(grid, "abc_red", {"M030001": "S"})
        assert row.message == "Shortage on sizes: S."
        assert row.sizes[0].size == "S"
        assert row.sizes[0].stock == 0

    def test_empty_input(self):
        assert compare_stores({}) == []
