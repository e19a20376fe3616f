"""Report parameter and report body schemas.

Every report kind has one parameter model that lists each parameter with its
default, and one report model tagged by ``report_type``. The ``Report`` union
over the four report models is what the CSV formatter and the export
endpoint dispatch on."""
from pydantic import BaseModel, Field
from typing import Annotated, Any, Dict, List, Literal, Optional, Union
import datetime

from ..inventory.schemas import Category

ReportType = Literal["inventory-status", "consumption-trends", "expiry", "location-utilization"]
ReportFormat = Literal["json", "csv"]
StockStatus = Literal["normal", "low", "critical"]
ExpiryStatus = Literal["expired", "critical", "warning"]
GroupBy = Literal["day", "week", "month", "category", "user"]


# --- Parameters ---
class InventoryStatusParams(BaseModel):
    category: Optional[Category] = None
    location_id: Optional[str] = None
    status: Literal["all", "normal", "low", "critical"] = "all"


class ConsumptionTrendsParams(BaseModel):
    start_date: Optional[datetime.datetime] = Field(None, description="Defaults to 30 days before end_date")
    end_date: Optional[datetime.datetime] = Field(None, description="Defaults to now")
    group_by: GroupBy = "month"
    category: Optional[Category] = None
    user_id: Optional[str] = None


class ExpiryParams(BaseModel):
    category: Optional[Category] = None
    days_until_expiry: int = Field(30, description="Look-ahead window in days")


class LocationUtilizationParams(BaseModel):
    location_id: Optional[str] = None
    include_empty: bool = False


# --- Inventory status ---
class InventoryStatusItem(BaseModel):
    id: str
    name: str
    category: str
    location_id: Optional[str] = None
    current_quantity: float
    original_amount: float
    minimum_quantity: float
    unit: str
    stock_percentage: int
    status: StockStatus
    last_updated: Optional[datetime.datetime] = None


class InventoryStatusSummary(BaseModel):
    total_items: int
    low_stock_items: int
    critical_stock_items: int
    average_stock_level: int


class InventoryStatusReport(BaseModel):
    report_type: Literal["inventory-status"] = "inventory-status"
    generated_at: datetime.datetime
    parameters: InventoryStatusParams
    summary: InventoryStatusSummary
    items: List[InventoryStatusItem]


# --- Consumption trends ---
class TrendTotals(BaseModel):
    total_quantity: float = 0.0
    consumption_count: int = 0


class DayTrend(TrendTotals):
    date: str


class WeekTrend(TrendTotals):
    week_start: str


class MonthTrend(TrendTotals):
    month: str


class CategoryTrend(TrendTotals):
    category: str


class UserTrend(TrendTotals):
    user_id: str
    user_name: str


Trend = Union[DayTrend, WeekTrend, MonthTrend, CategoryTrend, UserTrend]


class ReportPeriod(BaseModel):
    start_date: datetime.datetime
    end_date: datetime.datetime


class ConsumptionTrendsSummary(BaseModel):
    total_consumption: float
    total_records: int
    average_per_record: float


class ConsumptionTrendsReport(BaseModel):
    report_type: Literal["consumption-trends"] = "consumption-trends"
    generated_at: datetime.datetime
    parameters: ConsumptionTrendsParams
    period: ReportPeriod
    summary: ConsumptionTrendsSummary
    trends: List[Trend]


# --- Expiry ---
class ExpiryItem(BaseModel):
    id: str
    name: str
    category: str
    location_id: Optional[str] = None
    current_quantity: float
    unit: str
    expiry_date: datetime.date
    days_remaining: int
    status: ExpiryStatus


class ExpirySummary(BaseModel):
    total_expiring_items: int
    expired_items: int
    critical_items: int
    warning_items: int


class ExpiryReport(BaseModel):
    report_type: Literal["expiry"] = "expiry"
    generated_at: datetime.datetime
    parameters: ExpiryParams
    summary: ExpirySummary
    items: List[ExpiryItem]


# --- Location utilization ---
class CategoryBreakdown(BaseModel):
    category: str
    item_count: int
    total_quantity: float


class LocationUtilization(BaseModel):
    location_id: str
    location_name: str
    location_type: str
    total_items: int
    total_quantity: float
    categories: List[CategoryBreakdown]


class LocationUtilizationSummary(BaseModel):
    total_locations: int
    total_items: int
    average_items_per_location: int


class LocationUtilizationReport(BaseModel):
    report_type: Literal["location-utilization"] = "location-utilization"
    generated_at: datetime.datetime
    parameters: LocationUtilizationParams
    summary: LocationUtilizationSummary
    locations: List[LocationUtilization]


Report = Annotated[
    Union[InventoryStatusReport, ConsumptionTrendsReport, ExpiryReport, LocationUtilizationReport],
    Field(discriminator="report_type"),
]


# --- Export ---
class ReportExportRequest(BaseModel):
    report_type: ReportType
    parameters: Dict[str, Any] = Field(default_factory=dict)
    format: ReportFormat = "csv"
