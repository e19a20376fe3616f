from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal, Optional
import datetime


class ConsumptionCreate(BaseModel):
    inventory_item_id: str = Field(..., description="Item the quantity is drawn from")
    quantity: float = Field(..., gt=0, description="Amount consumed")
    unit: Optional[str] = Field(None, min_length=1, max_length=50, description="Defaults to the item's unit")
    notes: Optional[str] = Field(None, max_length=1000)
    recorded_at: Optional[datetime.datetime] = Field(None, description="Defaults to now")


class ConsumptionResponse(BaseModel):
    id: str
    inventory_item_id: str
    user_id: str
    quantity: float
    unit: str
    notes: Optional[str] = None
    recorded_at: datetime.datetime
    remaining_quantity: Optional[float] = Field(None, description="Item balance after this record, when just created")

    model_config = ConfigDict(from_attributes=True)


class ConsumptionListQuery(BaseModel):
    inventory_item_id: Optional[str] = None
    user_id: Optional[str] = None
    start_date: Optional[datetime.datetime] = None
    end_date: Optional[datetime.datetime] = None
    limit: int = Field(50, ge=1, le=500)
    offset: int = Field(0, ge=0)


class ConsumptionSummaryQuery(BaseModel):
    start_date: Optional[datetime.datetime] = None
    end_date: Optional[datetime.datetime] = None
    summary_type: Literal["item", "user"] = "item"


class ConsumptionSummaryEntry(BaseModel):
    key: str
    label: str
    total_quantity: float
    consumption_count: int


class ConsumptionPeriod(BaseModel):
    start_date: datetime.datetime
    end_date: datetime.datetime


class ConsumptionSummaryResponse(BaseModel):
    summary_type: Literal["item", "user"]
    period: ConsumptionPeriod
    summary: List[ConsumptionSummaryEntry]


class ConsumptionRow(BaseModel):
    """Read-only snapshot of a consumption record as seen by reports."""

    id: str
    inventory_item_id: str
    user_id: str
    quantity: float
    unit: str
    recorded_at: datetime.datetime
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True, frozen=True)
