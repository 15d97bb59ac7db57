from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from . import settings


class NumericConvention(str, Enum):
    """How a blank or unreadable metric cell is represented."""

    ZERO = "zero"
    UNKNOWN = "unknown"


class NormalizedRecord(BaseModel):
    """
    Defines the data contract for one product-size variant at one store.
    This "long" format is what every downstream step consumes.
    None in a metric means "unknown", never a blank string.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    sku: str = Field(..., alias="SKU")
    description: str = Field(default="", alias="Descripcion")
    brand: str = Field(default="", alias="Marca")
    area: str = Field(default="", alias="Area")
    category: str = Field(default="", alias="Categoria")
    store_id: str = Field(..., alias="Store ID")
    store_name: str = Field(..., alias="Tienda")

    stock: Optional[float] = Field(default=0, ge=0, alias="Stock tienda")
    transit: Optional[float] = Field(default=0, ge=0, alias="Transito")
    stock_cd: Optional[float] = Field(default=0, ge=0, alias="Stock CD")
    sales_2w: Optional[float] = Field(default=0, ge=0, alias="Venta 2W")
    ra: Optional[float] = Field(default=0, ge=0, alias="RA")

    @property
    def tokens(self) -> list[str]:
        return self.sku.split(settings.SKU_DELIMITER)

    @property
    def base_sku(self) -> str:
        """Style + color, lowercased. The whole SKU when it has fewer than two parts."""
        parts = self.tokens
        if len(parts) >= 2:
            return settings.SKU_DELIMITER.join(parts[:2]).lower()
        return self.sku.lower()

    @property
    def size_token(self) -> str:
        parts = self.tokens
        return parts[-1] if len(parts) > 2 else settings.ONE_SIZE_LABEL


class StoreBlock(BaseModel):
    """A contiguous column range holding one store's metrics."""

    name: str
    store_id: str
    start_column: int
    end_column: int
    # NormalizedRecord field -> column index, only for metrics found in the block
    metric_columns: dict[str, int] = Field(default_factory=dict)


class GridLayout(BaseModel):
    store_blocks: list[StoreBlock]
    sku_column: int
    description_column: Optional[int] = None
    brand_column: Optional[int] = None
    area_column: Optional[int] = None
    category_column: Optional[int] = None
    stock_cd_column: Optional[int] = None
    first_data_row: int = 3


class HealthStatus(str, Enum):
    IN_TRANSIT = "IN_TRANSIT"
    REQUEST_FROM_DC = "REQUEST_FROM_DC"
    NO_STOCK_ANYWHERE = "NO_STOCK_ANYWHERE"
    STOCK_OK = "STOCK_OK"

    @property
    def severity(self) -> str:
        return _SEVERITY[self]

    @property
    def label(self) -> str:
        return _LABELS[self]


_SEVERITY = {
    HealthStatus.IN_TRANSIT: "orange",
    HealthStatus.REQUEST_FROM_DC: "yellow",
    HealthStatus.NO_STOCK_ANYWHERE: "red",
    HealthStatus.STOCK_OK: "green",
}

_LABELS = {
    HealthStatus.IN_TRANSIT: "IN TRANSIT",
    HealthStatus.REQUEST_FROM_DC: "REQUEST FROM DC",
    HealthStatus.NO_STOCK_ANYWHERE: "NOTHING IN DC",
    HealthStatus.STOCK_OK: "STOCK OK",
}


class StockHealth(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: HealthStatus
    severity: str
    label: str
    # sizes that justify the status; empty only for STOCK_OK
    sizes: list[str] = Field(default_factory=list)
    coming: list[str] = Field(default_factory=list)
    request: list[str] = Field(default_factory=list)
    dead: list[str] = Field(default_factory=list)


class GroupedProduct(BaseModel):
    """One product family (style + color), optionally scoped to one store."""

    model_config = ConfigDict(frozen=True)

    base_sku: str
    name: str
    from_dictionary: bool = False
    reference_sku: str
    store_id: Optional[str] = None
    store_name: Optional[str] = None

    stock: float = 0
    transit: float = 0
    stock_cd: float = 0
    sales_2w: float = 0
    ra: float = 0

    in_transit_sizes: list[str] = Field(default_factory=list)
    requestable_sizes: list[str] = Field(default_factory=list)
    dead_sizes: list[str] = Field(default_factory=list)

    health: StockHealth


class LocalStatus(str, Enum):
    """Local-stock-only view used when comparing stores side by side."""

    COMPLETE = "COMPLETE"
    LOW = "LOW"
    SHORTAGE = "SHORTAGE"


class SizeBreakdown(BaseModel):
    size: str
    stock: float


class StoreComparison(BaseModel):
    store: str
    base_sku: Optional[str] = None
    status: LocalStatus
    message: str
    sizes: list[SizeBreakdown] = Field(default_factory=list)


class ReplenishmentDraft(BaseModel):
    """Suggested DC request for one product family at one store."""

    base_sku: str
    store_name: str
    sizes: list[str] = Field(default_factory=list)
    area: str = ""
    description: str = ""


class ParseDiagnostics(BaseModel):
    rows_scanned: int = 0
    rows_skipped: int = 0
    cells_defaulted: int = 0
    blocks_dropped: int = 0
    records_suppressed: int = 0


class StockReport(BaseModel):
    records: list[NormalizedRecord] = Field(default_factory=list)
    products: list[GroupedProduct] = Field(default_factory=list)
    diagnostics: ParseDiagnostics = Field(default_factory=ParseDiagnostics)
