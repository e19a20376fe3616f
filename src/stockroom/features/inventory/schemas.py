from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal, Optional
import datetime

Category = Literal["Sealant", "Paint", "Oil", "Grease"]


# --- Location Schemas (defined first as items reference locations) ---
class LocationBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, description="Name of the location")
    type: str = Field("storage", min_length=1, max_length=100, description="Free-text kind of location, e.g. shelf or hangar")
    description: Optional[str] = Field(None, max_length=1000)
    parent_id: Optional[str] = Field(None, description="ID of the enclosing location")

class LocationCreate(LocationBase):
    pass

class LocationResponse(LocationBase):
    id: str = Field(..., description="Unique identifier for the location (KSUID)")
    is_active: bool
    created_at: datetime.datetime
    updated_at: datetime.datetime

    model_config = ConfigDict(
        from_attributes=True,
        protected_namespaces=(),
    )


# --- Inventory Schemas ---
class InventoryItemBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, description="Name of the inventory item")
    description: Optional[str] = Field(None, max_length=1000)
    category: Category = Field(..., description="Kind of consumable")
    location_id: Optional[str] = Field(None, description="ID of the location holding the item")
    current_quantity: float = Field(..., ge=0, description="Current balance")
    original_amount: float = Field(..., gt=0, description="Balance when the item was stocked")
    minimum_quantity: float = Field(0.0, ge=0, description="Restock threshold")
    unit: str = Field(..., min_length=1, max_length=50)
    expiry_date: Optional[datetime.date] = None

class InventoryItemCreate(InventoryItemBase):
    pass

class InventoryItemUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    category: Optional[Category] = None
    location_id: Optional[str] = None
    current_quantity: Optional[float] = Field(None, ge=0)
    original_amount: Optional[float] = Field(None, gt=0)
    minimum_quantity: Optional[float] = Field(None, ge=0)
    unit: Optional[str] = Field(None, min_length=1, max_length=50)
    expiry_date: Optional[datetime.date] = None

class InventoryItemResponse(InventoryItemBase):
    id: str = Field(..., description="Unique identifier for the item (KSUID)")
    category: str
    last_consumed_at: Optional[datetime.datetime] = None
    created_at: datetime.datetime
    updated_at: datetime.datetime

    model_config = ConfigDict(
        from_attributes=True,
        protected_namespaces=(),
    )

class PaginatedInventoryResponse(BaseModel):
    items: List[InventoryItemResponse]
    total: int
    page: int
    size: int


# --- Read-only snapshots handed to the report engine ---
class InventoryItemRow(BaseModel):
    id: str
    name: str
    category: str
    location_id: Optional[str] = None
    current_quantity: float
    original_amount: float
    minimum_quantity: float = 0.0
    unit: str
    expiry_date: Optional[datetime.date] = None
    created_at: Optional[datetime.datetime] = None
    updated_at: Optional[datetime.datetime] = None

    model_config = ConfigDict(from_attributes=True, frozen=True)

class LocationRow(BaseModel):
    id: str
    name: str
    type: str
    parent_id: Optional[str] = None

    model_config = ConfigDict(from_attributes=True, frozen=True)
