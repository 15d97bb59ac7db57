import os
from pathlib import Path
from dotenv import load_dotenv

# --- Base Directory ---
BASE_DIR = Path(__file__).resolve().parent.parent

# --- Load Environment Variables ---
load_dotenv(BASE_DIR / ".env")


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# --- Path Configuration ---
INPUT_DIR = BASE_DIR / os.getenv("INPUT_DIR", "input")
OUTPUT_DIR = BASE_DIR / os.getenv("OUTPUT_DIR", "output")
LOG_DIR = BASE_DIR / os.getenv("LOG_DIR", "logs")

# --- Filename Configuration ---
STOCK_FILENAME_PREFIX = os.getenv("STOCK_FILENAME_PREFIX", "stock_report_")
PRODUCT_DICTIONARY_FILENAME = os.getenv(
    "PRODUCT_DICTIONARY_FILENAME", "product_dictionary.csv"
)
SIZE_DICTIONARY_FILENAME = os.getenv("SIZE_DICTIONARY_FILENAME", "size_dictionary.csv")
REPORT_FILENAME_BASE = os.getenv("REPORT_FILENAME", "stock_health")

# --- Output / Webhook ---
WEBHOOK_URL = os.getenv("WEBHOOK_URL")
SAVE_JSON_OUTPUT = _env_flag("SAVE_JSON_OUTPUT")

# --- Parsing Policy ---
# "zero": blank or unreadable metric cells become 0.
# "unknown": they stay None so they can be told apart from a real 0.
NUMERIC_CONVENTION = os.getenv("NUMERIC_CONVENTION", "zero").strip().lower()
# Drop records whose four per-store metrics are all zero/unknown.
SUPPRESS_EMPTY_RECORDS = _env_flag("SUPPRESS_EMPTY_RECORDS")
HEADER_ROW_COUNT = int(os.getenv("HEADER_ROW_COUNT", "3"))

# --- Shared Business Logic ---
SKU_DELIMITER = "_"
ONE_SIZE_LABEL = "UNICA"

# SKU cells that mark a summary line instead of a product.
TOTAL_ROW_SENTINELS = {"total", "totales", "total general", "grand total", "subtotal"}

# Generic labels that can sit on the store-name row without being a store.
# Compared lowercased, trimmed and without accents.
STORE_BLACKLIST = {
    "total",
    "totales",
    "stock",
    "stock tienda",
    "stock cd",
    "transito",
    "transit",
    "sku",
    "descripcion",
    "description",
    "marca",
    "area",
    "categoria",
    "venta 2w",
    "ra",
    "ra.",
}

# Columns that appear once per row (third header row).
# Field on NormalizedRecord -> accepted header labels.
STATIC_COLUMNS = {
    "sku": ["sku"],
    "description": ["descripcion", "description"],
    "brand": ["marca", "brand"],
    "area": ["area"],
    "category": ["categoria", "category"],
    "stock_cd": ["stock cd", "stock dc"],
}

# Columns repeated inside every store block.
METRIC_COLUMNS = {
    "stock": ["stock tienda", "stock local"],
    "transit": ["transito", "transit"],
    "sales_2w": ["venta 2w", "sales 2w"],
    "ra": ["ra."],
}

# --- Fallback Labels ---
UNKNOWN_STORE_ID = "unknown-store"
UNKNOWN_STORE_NAME = "UNKNOWN STORE"
UNNAMED_PRODUCT = "UNNAMED PRODUCT"
