"""API routes for managing inventory items and storage locations."""
from fastapi import APIRouter, status, Query, Depends
from typing import Optional, List

from .schemas import (
    Category,
    InventoryItemCreate,
    InventoryItemUpdate,
    InventoryItemResponse,
    PaginatedInventoryResponse,
    LocationCreate,
    LocationResponse,
)
from . import service
from ..auth import permissions
from ..auth.security import require_permission

router = APIRouter(
    prefix="/inventory",
    tags=["Inventory"],
    responses={404: {"description": "Not found"}},
)

locations_router = APIRouter(
    prefix="/locations",
    tags=["Locations"],
    responses={404: {"description": "Not found"}},
)


@router.post(
    "/items",
    response_model=InventoryItemResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new inventory item",
    dependencies=[Depends(require_permission(permissions.INVENTORY_CREATE))],
)
async def create_inventory_item(item_in: InventoryItemCreate):
    return await service.create_inventory_item(item_in)


@router.get(
    "/items",
    response_model=PaginatedInventoryResponse,
    summary="List inventory items",
    dependencies=[Depends(require_permission(permissions.INVENTORY_READ))],
)
async def list_inventory_items(
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(10, ge=1, le=100, description="Number of items per page"),
    category: Optional[Category] = Query(None, description="Category to filter by"),
    location_id: Optional[str] = Query(None, description="Location to filter by"),
):
    return await service.list_inventory_items(page, size, category, location_id)


@router.get(
    "/items/{item_id}",
    response_model=InventoryItemResponse,
    summary="Get a specific inventory item",
    dependencies=[Depends(require_permission(permissions.INVENTORY_READ))],
)
async def get_inventory_item(item_id: str):
    return await service.get_inventory_item(item_id)


@router.put(
    "/items/{item_id}",
    response_model=InventoryItemResponse,
    summary="Update an inventory item",
    dependencies=[Depends(require_permission(permissions.INVENTORY_UPDATE))],
)
async def update_inventory_item(item_id: str, item_in: InventoryItemUpdate):
    return await service.update_inventory_item(item_id, item_in)


@router.delete(
    "/items/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an inventory item",
    dependencies=[Depends(require_permission(permissions.INVENTORY_DELETE))],
)
async def delete_inventory_item(item_id: str):
    await service.delete_inventory_item(item_id)
    return None


# --- Location Endpoints ---
@locations_router.post(
    "",
    response_model=LocationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new location",
    dependencies=[Depends(require_permission(permissions.LOCATION_CREATE))],
)
async def create_location(location_in: LocationCreate):
    return await service.create_location(location_in)


@locations_router.get(
    "",
    response_model=List[LocationResponse],
    summary="List all locations",
    dependencies=[Depends(require_permission(permissions.LOCATION_READ))],
)
async def list_locations():
    return await service.list_locations()


@locations_router.get(
    "/{location_id}",
    response_model=LocationResponse,
    summary="Get a specific location",
    dependencies=[Depends(require_permission(permissions.LOCATION_READ))],
)
async def get_location(location_id: str):
    return await service.get_location(location_id)
