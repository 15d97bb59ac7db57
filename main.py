import argparse
import logging
from pathlib import Path

from stock_health import settings
from stock_health.logger import setup_logger
from stock_health.pipelines.comparison import StoreComparisonPipeline
from stock_health.pipelines.stock import StockReportPipeline
from stock_health.schemas import NumericConvention

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Turn a store stock export into per-product health reports."
    )
    parser.add_argument(
        "--input",
        type=Path,
        default=None,
        help="Stock export (.csv/.xlsx). Defaults to the newest file in INPUT_DIR.",
    )
    parser.add_argument("--output-dir", type=Path, default=None)
    parser.add_argument(
        "--unknown-as-null",
        action="store_true",
        help="Keep blank metric cells as unknown instead of 0.",
    )
    parser.add_argument("--test", action="store_true", help="Skip the webhook post.")
    parser.add_argument("--verbose", action="store_true")

    commands = parser.add_subparsers(dest="command", required=True)

    report = commands.add_parser("report", help="Grouped health report for every product.")
    report.add_argument(
        "--suppress-empty",
        action="store_true",
        help="Drop records whose store metrics are all zero/unknown.",
    )
    report.add_argument(
        "--breakdown",
        action="store_true",
        help="One group per product family and store instead of per family.",
    )

    compare = commands.add_parser("compare", help="Compare stores for one search term.")
    compare.add_argument("term", help="SKU or description fragment.")
    return parser


def run_process(argv=None) -> int:
    """Main orchestration function to run the selected report."""
    args = build_parser().parse_args(argv)
    setup_logger(
        log_level=logging.DEBUG if args.verbose else logging.INFO, log_dir=settings.LOG_DIR
    )

    convention = NumericConvention.UNKNOWN if args.unknown_as_null else None

    if args.command == "report":
        pipeline = StockReportPipeline(
            input_path=args.input,
            output_dir=args.output_dir,
            convention=convention,
            suppress_empty=args.suppress_empty or None,
            breakdown=args.breakdown,
            test_mode=args.test,
        )
    else:
        pipeline = StoreComparisonPipeline(
            args.term,
            input_path=args.input,
            output_dir=args.output_dir,
            convention=convention,
            test_mode=args.test,
        )

    result = pipeline.run()
    if result is None:
        logger.error("\n--- Process Finished With Errors ---")
        return 1

    logger.info("\n--- Process Finished Successfully ---")
    return 0


if __name__ == "__main__":
    raise SystemExit(run_process())
