import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from stock_health.aggregation import group_records
from stock_health.comparison import bucket_by_store, compare_stores
from stock_health.exceptions import StructuralError
from stock_health.parsers import parse_grid
from stock_health.pipeline import DataPipeline
from stock_health.schemas import GroupedProduct, NumericConvention, StoreComparison
from stock_health.search import filter_records, store_count

logger = logging.getLogger(__name__)


class StoreComparisonPipeline(DataPipeline):
    """
    Cross-store view for one search term: per-store groups for the matching
    products, plus a local-stock comparison per store for each product family.
    """

    def __init__(
        self,
        term: str,
        input_path: Optional[Path] = None,
        output_dir: Optional[Path] = None,
        convention: NumericConvention | str | None = None,
        test_mode: bool = False,
    ):
        super().__init__("comparison", input_path, output_dir, test_mode)
        self.term = term
        self.convention = convention
        self.breakdown: list[GroupedProduct] = []

    def transform(self, grid: list[list[str]]) -> list[StoreComparison] | None:
        logger.info(f"\n--- Comparing Stores for '{self.term}' ---")
        try:
            records, _ = parse_grid(grid, convention=self.convention, suppress_empty=False)
            matches = filter_records(records, self.term)
            if not matches:
                logger.warning(f"⚠️ No products match '{self.term}'.")
                return []

            # Per-store detail only makes sense with more than one store
            multi_store = store_count(matches) > 1
            self.breakdown = group_records(
                matches, self.product_dictionary, self.size_map, breakdown=multi_store
            )

            comparisons: list[StoreComparison] = []
            base_skus = list(dict.fromkeys(record.base_sku for record in matches))
            for base_sku in base_skus:
                stores = bucket_by_store(matches, base_sku)
                comparisons.extend(compare_stores(stores, self.size_map, base_sku))
        except StructuralError as e:
            logger.error(f"❌ Invalid file structure: {e}")
            return None
        except ValidationError as e:
            logger.error("❌ Data validation failed!")
            logger.error(e)
            return None

        self.extra_outputs["breakdown"] = self.breakdown
        self.status_summary["term"] = self.term
        self.status_summary["products"] = len(base_skus)
        self.status_summary["stores"] = store_count(matches)
        return comparisons
