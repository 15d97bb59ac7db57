from typing import Optional

from .aggregation import group_records
from .parsers import parse_grid
from .schemas import NumericConvention, StockReport


def process_grid(
    grid: list[list[str]],
    product_dictionary: Optional[dict[str, str]] = None,
    size_map: Optional[dict[str, str]] = None,
    breakdown: bool = False,
    convention: NumericConvention | str | None = None,
    suppress_empty: bool | None = None,
    header_rows: int | None = None,
) -> StockReport:
    """
    Grid in, typed records and classified products out.

    Pure: no files, no network, and both lookup dictionaries come from the
    caller. Raises StructuralError on a malformed header, with no partial
    result.
    """
    records, diagnostics = parse_grid(
        grid,
        convention=convention,
        suppress_empty=suppress_empty,
        header_rows=header_rows,
    )
    products = group_records(records, product_dictionary, size_map, breakdown=breakdown)
    return StockReport(records=records, products=products, diagnostics=diagnostics)
