from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field


class SourceYear(str, Enum):
    """Which comparison extract a record was read from."""

    PY = "PY"
    CY = "CY"


class SeasonType(str, Enum):
    """Season type, taken from the trailing letter of a season code."""

    FW = "FW"
    S = "S"
    ACC = "ACC"
    OTHER = "OTHER"


class YearBucket(str, Enum):
    """How many fiscal years past its selling season a FW record is."""

    IN_SEASON = "InSeason"
    Y1 = "Y1"
    Y2 = "Y2"
    Y3_PLUS = "Y3Plus"


class CategoryType(str, Enum):
    """Standardized reporting category."""

    INNER = "INNER"
    OUTER = "OUTER"
    BOTTOM = "BOTTOM"
    WEAR_ETC = "WEAR_ETC"


class SeasonInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    season_code: str = ""
    season_type: SeasonType = SeasonType.OTHER
    season_year: int | None = None
    year_bucket: YearBucket = YearBucket.IN_SEASON


class InventoryRecordRaw(BaseModel):
    """
    One row of a merged inventory extract, before normalization.
    Aliases are the exact source column names; numeric fields default to 0
    and text fields to "" when the cell is absent or unparseable.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    period: str = Field(default="", alias="period")
    country: str = Field(default="", alias="Country")
    ex_rate: float = Field(default=0.0, alias="Ex-rate")

    item_code: str = Field(default="", alias="ITEM CODE")
    item_desc1: str = Field(default="", alias="ITEM DESC1")
    item_desc2: str = Field(default="", alias="ITEM DESC2")

    store_code: str = Field(default="", alias="STORE")
    store_name: str = Field(default="", alias="STORE NAME")

    sales_div: str = Field(default="", alias="SALES DIV")
    season: str = Field(default="", alias="SEASON")

    brand: str = Field(default="", alias="BRAND")
    brand_name: str = Field(default="", alias="BRAND NAME")
    category: str = Field(default="", alias="CATEGORY")
    category_name: str = Field(default="", alias="CATEGORY NAME")
    subcategory: str = Field(default="", alias="SUBCATEGORY")
    subcategory_name: str = Field(default="", alias="SUBCATEGORY NAME")

    sales_qty: float = Field(default=0.0, alias="Sales (Qty)")
    ac_sales_qty: float = Field(default=0.0, alias="AC Sales (Qty)")
    stock_qty: float = Field(default=0.0, alias="Stock (Qty)")

    net_acp_c: float = Field(default=0.0, alias="Net AcP.C")
    net_acp_p: float = Field(default=0.0, alias="Net AcP.P")

    ac_sales_cost: float = Field(default=0.0, alias="AC Sales (Cost)")
    ac_sales_net_amount: float = Field(default=0.0, alias="AC Sales (Net Amount)")
    ac_sales_gross: float = Field(default=0.0, alias="AC Sales (Gross Sales)")

    gross_sales_month: float = Field(default=0.0, alias="Gross Sales ($)")
    net_sales_month: float = Field(default=0.0, alias="Net Sales ($)")
    cogs_month: float = Field(default=0.0, alias="COGS ($)")

    stock_cost: float = Field(default=0.0, alias="Stock Cost ($)")
    stock_price_tag: float = Field(default=0.0, alias="Stock Price ($)")

    source_year: SourceYear


class InventoryRow(InventoryRecordRaw):
    """An inventory record converted to the reporting currency and classified by season."""

    fx_rate: float
    gross_sales_fx: float
    net_sales_fx: float
    stock_price_fx: float
    stock_cost_fx: float
    ac_sales_gross_fx: float
    net_acp_p_fx: float
    ac_sales_cost_fx: float
    ac_sales_net_amount_fx: float
    cogs_fx: float
    discount_rate_month: float | None = None
    season_info: SeasonInfo
    mapped_category: CategoryType = CategoryType.WEAR_ETC


class GraphRecordRaw(BaseModel):
    """One row of the wide-range time-series extract (store/period/country/category)."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    period: str = Field(default="", alias="Period")
    year_label: str = Field(default="", alias="Year")
    season_code: str = Field(default="", alias="Season_Code")
    gross_sales: float = Field(default=0.0, alias="Gross_Sales")
    net_sales: float = Field(default=0.0, alias="Net_Sales")
    stock_price: float = Field(default=0.0, alias="Stock_Price")
    stock_cost: float = Field(default=0.0, alias="Stock_Cost")
    country: str = Field(default="", alias="Country")
    category: str = Field(default="", alias="Category")


class GraphRow(GraphRecordRaw):
    year: int
    source_year: SourceYear
    fx_rate: float
    gross_sales_fx: float
    net_sales_fx: float
    stock_price_fx: float
    stock_cost_fx: float
    discount_rate: float | None = None
    season_info: SeasonInfo
    mapped_category: CategoryType = CategoryType.WEAR_ETC


class TargetRecordRaw(BaseModel):
    """
    One planning row of the past-season target file. Both the single AMOUNT
    layout and the TAG_SALES / NET_SALES / DISCOUNT_RATE layout are accepted.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    period: str = Field(default="", alias="PERIOD")
    season_name: str = Field(default="", alias="SEASON_NAME")
    season: str = Field(default="", alias="SEASON")
    category: str = Field(default="", alias="CATEGORY")
    amount: float = Field(default=0.0, alias="AMOUNT")
    tag_sales: float = Field(default=0.0, alias="TAG_SALES")
    net_sales: float = Field(default=0.0, alias="NET_SALES")
    discount_rate: float = Field(default=0.0, alias="DISCOUNT_RATE")


class TargetRow(TargetRecordRaw):
    period_month: str
    mapped_category: CategoryType = CategoryType.WEAR_ETC
    season_info: SeasonInfo


@dataclass(frozen=True)
class RowFailure:
    """A source row that could not be decoded or normalized."""

    source: str
    index: int
    reason: str
    row: dict[str, Any] = field(default_factory=dict)


T = TypeVar("T")


@dataclass
class BatchResult(Generic[T]):
    """Successfully normalized records plus diagnostics for every skipped row."""

    records: list[T] = field(default_factory=list)
    failures: list[RowFailure] = field(default_factory=list)

    @property
    def skipped(self) -> int:
        return len(self.failures)

    def __len__(self) -> int:
        return len(self.records)

    def merge(self, other: "BatchResult[T]") -> "BatchResult[T]":
        return BatchResult(
            records=[*self.records, *other.records],
            failures=[*self.failures, *other.failures],
        )


@dataclass
class ReportData:
    """The three normalized collections handed to reporting."""

    inventory: BatchResult[InventoryRow] = field(default_factory=BatchResult)
    graph: BatchResult[GraphRow] = field(default_factory=BatchResult)
    target: BatchResult[TargetRow] = field(default_factory=BatchResult)
