import logging
from abc import ABC, abstractmethod
from datetime import date
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel

from stock_health import data_handler, settings, utils
from stock_health.parsers import parse_product_dictionary, parse_size_dictionary

logger = logging.getLogger(__name__)


class DataPipeline(ABC):
    """
    Abstract base class for stock report pipelines.
    Follows an Extract -> Transform -> Load (ETL) pattern. Only extract and
    load touch files or the network; transform is the pure core.
    """

    def __init__(
        self,
        report_type: str,
        input_path: Optional[Path] = None,
        output_dir: Optional[Path] = None,
        test_mode: bool = False,
    ):
        self.report_type = report_type
        self.input_path = input_path
        self.output_dir = output_dir
        self.test_mode = test_mode
        self.product_dictionary: dict[str, str] = {}
        self.size_map: dict[str, str] = {}
        # Run metadata sent along with the report
        self.status_summary: dict[str, Any] = {"source": None, "report_date": None}
        # Secondary result sets saved and posted next to the main report
        self.extra_outputs: dict[str, list[BaseModel]] = {}

    def run(self) -> Optional[list[BaseModel]]:
        """
        Orchestrates the pipeline execution.
        """
        logger.info(f"🚀 STEP: {self.report_type.upper()} REPORT")
        logger.info("-" * 30)

        # --- 1. EXTRACT ---
        grid = self.extract()
        if not grid:
            logger.warning(f"⚠️ No data extracted for {self.report_type}.")
            return None

        # --- 2. TRANSFORM ---
        validated_data = self.transform(grid)
        if validated_data is None:
            logger.error(f"❌ Transformation failed for {self.report_type}.")
            return None

        # --- 3. LOAD ---
        self.load(validated_data)

        logger.info(f"✅ {self.report_type.capitalize()} Pipeline Finished.\n")
        logger.info("=" * 60)
        return validated_data

    def extract(self) -> Optional[list[list[str]]]:
        """
        Finds the stock export (explicit path or newest file in INPUT_DIR),
        loads it as a raw grid and loads both lookup dictionaries.
        """
        path = self.input_path
        report_date: Optional[date] = None
        if path is None:
            found = utils.find_latest_report(settings.INPUT_DIR, settings.STOCK_FILENAME_PREFIX)
            if not found:
                logger.error(
                    f"  > ERROR: No file with prefix '{settings.STOCK_FILENAME_PREFIX}' in {settings.INPUT_DIR}."
                )
                return None
            path, report_date = found
        logger.info(f"  > Found stock export: {path.name}")

        self.status_summary["source"] = path.name
        self.status_summary["report_date"] = (report_date or date.today()).isoformat()

        dictionary_dir = path.parent
        self.product_dictionary = parse_product_dictionary(
            utils.load_table(dictionary_dir / settings.PRODUCT_DICTIONARY_FILENAME)
        )
        self.size_map = parse_size_dictionary(
            utils.load_table(dictionary_dir / settings.SIZE_DICTIONARY_FILENAME)
        )

        return utils.load_grid(path)

    @abstractmethod
    def transform(self, grid: list[list[str]]) -> Optional[list[BaseModel]]:
        """
        Runs the core over the grid and returns validated models.
        Returns None when the grid cannot be processed.
        """
        pass

    def load(self, validated_data: list[BaseModel]):
        """
        Saves data to disk and posts to webhook.
        """
        logger.info("\n--- Final Status Summary ---")
        for key, value in self.status_summary.items():
            logger.info(f"{key}: {value if value is not None else 'No data'}")

        if validated_data:
            data_handler.save_outputs(
                validated_data, f"{settings.REPORT_FILENAME_BASE}_{self.report_type}", self.output_dir
            )
        else:
            logger.warning("No data to save to disk.")

        for name, models in self.extra_outputs.items():
            if models:
                data_handler.save_outputs(
                    models, f"{settings.REPORT_FILENAME_BASE}_{name}", self.output_dir
                )

        if not self.test_mode:
            data_handler.post_to_webhook(
                validated_data=validated_data,
                metadata=self.status_summary,
                report_type=self.report_type,
                extra_data=self.extra_outputs,
            )
        else:
            logger.info("🧪 Test Mode: Skipping webhook post.")
