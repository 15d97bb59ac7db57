import logging
from collections import Counter
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from stock_health.engine import process_grid
from stock_health.exceptions import StructuralError
from stock_health.pipeline import DataPipeline
from stock_health.schemas import GroupedProduct, NumericConvention, StockReport
from stock_health.sweep import sweep_replenishment

logger = logging.getLogger(__name__)


class StockReportPipeline(DataPipeline):
    """Grouped health report: one row per product family (or per family and store)."""

    def __init__(
        self,
        input_path: Optional[Path] = None,
        output_dir: Optional[Path] = None,
        convention: NumericConvention | str | None = None,
        suppress_empty: bool | None = None,
        breakdown: bool = False,
        test_mode: bool = False,
    ):
        super().__init__("stock", input_path, output_dir, test_mode)
        self.convention = convention
        self.suppress_empty = suppress_empty
        self.breakdown = breakdown
        self.report: Optional[StockReport] = None

    def transform(self, grid: list[list[str]]) -> list[GroupedProduct] | None:
        logger.info("\n--- Normalizing and Grouping Stock ---")
        try:
            self.report = process_grid(
                grid,
                self.product_dictionary,
                self.size_map,
                breakdown=self.breakdown,
                convention=self.convention,
                suppress_empty=self.suppress_empty,
            )
            drafts = sweep_replenishment(self.report.records, self.size_map)
            logger.info("✅ Data validation successful.")
        except StructuralError as e:
            logger.error(f"❌ Invalid file structure: {e}")
            return None
        except ValidationError as e:
            logger.error("❌ Data validation failed!")
            logger.error(e)
            return None

        diagnostics = self.report.diagnostics
        self.status_summary["records"] = len(self.report.records)
        self.status_summary["products"] = len(self.report.products)
        self.status_summary["breakdown"] = self.breakdown
        self.status_summary["diagnostics"] = diagnostics.model_dump()

        counts = Counter(product.health.status.value for product in self.report.products)
        self.status_summary["health"] = dict(counts)
        for status, count in counts.most_common():
            logger.info(f"  > {status}: {count}")

        self.status_summary["replenishment_drafts"] = len(drafts)
        self.extra_outputs["sweep"] = drafts

        return self.report.products
