import csv
import logging
import re
import unicodedata
from datetime import date, datetime
from pathlib import Path

import pandas as pd

from . import settings

logger = logging.getLogger(__name__)

_DATE_IN_NAME = re.compile(r"(\d{4}-\d{2}-\d{2})")


def get_date_suffix_for_filename() -> str:
    """Returns the current date as a YYYY-MM-DD string for filenames."""
    return datetime.now().strftime("%Y-%m-%d")


def strip_accents(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_label(value) -> str:
    """
    Lowercases, trims and removes accents so 'Tránsito', ' TRANSITO ' and
    'transito' compare equal. Underscores count as spaces.
    """
    if value is None:
        return ""
    text = strip_accents(str(value)).lower().replace("_", " ")
    return " ".join(text.split())


def cell(row: list[str], index: int | None) -> str:
    """Safe positional read for ragged rows."""
    if index is None or index >= len(row):
        return ""
    value = row[index]
    return "" if value is None else str(value).strip()


def _frame_to_grid(df: pd.DataFrame) -> list[list[str]]:
    df = df.fillna("").astype(str)
    grid = [list(row) for row in df.itertuples(index=False, name=None)]
    # Structural rows keep their position even when blank (row 1 is often empty).
    # Blank data lines are dropped like the export viewers do.
    header_rows = settings.HEADER_ROW_COUNT
    return grid[:header_rows] + [
        row for row in grid[header_rows:] if any(value.strip() for value in row)
    ]


def _csv_width(file_path: Path, encoding: str) -> int:
    """Widest line in the file; exporters trim trailing empty cells per line."""
    with open(file_path, newline="", encoding=encoding) as f:
        return max((len(row) for row in csv.reader(f)), default=0)


def _read_csv_grid(file_path: Path, encoding: str, read_opts: dict) -> list[list[str]]:
    width = _csv_width(file_path, encoding)
    if width == 0:
        return []
    # Explicit names make pandas pad short rows instead of failing on them
    df = pd.read_csv(
        file_path,
        encoding=encoding,
        names=list(range(width)),
        skip_blank_lines=False,
        **read_opts,
    )
    return _frame_to_grid(df)


def load_grid(file_path: Path) -> list[list[str]] | None:
    """
    Loads a stock export as a raw grid of strings (no header inference).
    CSV files are read as UTF-8 with BOM support first, then Latin-1.
    Short (ragged) CSV lines are padded to the widest line.
    Excel files (.xlsx/.xls) are read from their first sheet.
    """
    read_opts = dict(header=None, dtype=str, keep_default_na=False)
    try:
        if file_path.suffix.lower() in (".xlsx", ".xls"):
            return _frame_to_grid(pd.read_excel(file_path, sheet_name=0, **read_opts))
        return _read_csv_grid(file_path, "utf-8-sig", read_opts)

    except UnicodeDecodeError:
        logger.info(
            f"INFO: UTF-8 decoding failed for {file_path.name}. Retrying with 'latin-1'."
        )
        try:
            return _read_csv_grid(file_path, "latin-1", read_opts)
        except Exception as e_latin1:
            logger.error(
                f"ERROR: Could not read {file_path.name} even with latin-1. Reason: {e_latin1}"
            )
            return None

    except FileNotFoundError:
        logger.info(f"INFO: Report not found at {file_path}, skipping.")
        return None

    except Exception as e_general:
        logger.error(
            f"ERROR: An unexpected error occurred while reading {file_path.name}. Reason: {e_general}"
        )
        return None


def load_table(file_path: Path) -> pd.DataFrame | None:
    """Loads a small headed table (dictionaries) with the same encoding fallback."""
    read_opts = dict(dtype=str, keep_default_na=False)
    try:
        if file_path.suffix.lower() in (".xlsx", ".xls"):
            return pd.read_excel(file_path, sheet_name=0, **read_opts)
        try:
            return pd.read_csv(file_path, encoding="utf-8-sig", **read_opts)
        except UnicodeDecodeError:
            return pd.read_csv(file_path, encoding="latin-1", **read_opts)
    except FileNotFoundError:
        logger.info(f"INFO: Dictionary not found at {file_path}, skipping.")
        return None
    except Exception as e:
        logger.error(f"ERROR: Could not read {file_path.name}. Reason: {e}")
        return None


def find_latest_report(directory: Path, prefix: str) -> tuple[Path, date] | None:
    """
    Returns the newest file in `directory` whose name starts with `prefix`,
    with its report date. The date comes from a YYYY-MM-DD stamp in the
    filename when present, otherwise from the file's modification time.
    """
    if not directory.exists():
        return None

    candidates = []
    for path in directory.iterdir():
        if not path.is_file() or not path.name.startswith(prefix):
            continue
        if path.suffix.lower() not in (".csv", ".xlsx", ".xls"):
            continue
        match = _DATE_IN_NAME.search(path.name)
        if match:
            report_date = datetime.strptime(match.group(1), "%Y-%m-%d").date()
        else:
            report_date = datetime.fromtimestamp(path.stat().st_mtime).date()
        candidates.append((report_date, path.name, path))

    if not candidates:
        return None

    report_date, _, path = max(candidates)
    return path, report_date
