import logging
from typing import Optional, List
from fastapi import HTTPException, status
from tortoise.exceptions import IntegrityError
from .models import InventoryItem, Location
from .schemas import (
    InventoryItemCreate,
    InventoryItemUpdate,
    InventoryItemResponse,
    PaginatedInventoryResponse,
    LocationCreate,
    LocationResponse,
)

logger = logging.getLogger(__name__)


def _to_inventory_response(inventory_item: InventoryItem) -> InventoryItemResponse:
    """Converts an InventoryItem model instance to an InventoryItemResponse schema."""
    return InventoryItemResponse.model_validate(inventory_item)


async def _ensure_location(location_id: Optional[str]) -> None:
    if location_id and not await Location.exists(id=location_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Location {location_id} not found",
        )


async def create_inventory_item(item_in: InventoryItemCreate) -> InventoryItemResponse:
    """
    Creates a new inventory item.

    Args:
        item_in: The data for the new inventory item.

    Returns:
        The created inventory item.
    """
    await _ensure_location(item_in.location_id)
    try:
        inventory_item = await InventoryItem.create(**item_in.model_dump())
    except IntegrityError as e:
        logger.error(f"Error creating inventory item: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Failed to create inventory item.",
        )
    logger.info(f"Created inventory item {inventory_item.id} ({inventory_item.name})")
    return _to_inventory_response(inventory_item)


async def list_inventory_items(
    page: int,
    size: int,
    category: Optional[str] = None,
    location_id: Optional[str] = None,
) -> PaginatedInventoryResponse:
    """
    Lists inventory items, optionally narrowed to a category or location.

    Args:
        page: The page number.
        size: The number of items per page.
        category: Category to filter by.
        location_id: Location to filter by.

    Returns:
        A paginated list of inventory items.
    """
    offset = (page - 1) * size
    filters = {}
    if category:
        filters["category"] = category
    if location_id:
        filters["location_id"] = location_id

    items_db = (
        await InventoryItem.filter(**filters)
        .order_by("name")
        .offset(offset)
        .limit(size)
    )
    total = await InventoryItem.filter(**filters).count()
    response_items = [_to_inventory_response(item) for item in items_db]
    return PaginatedInventoryResponse(
        items=response_items, total=total, page=page, size=size
    )


async def get_inventory_item(item_id: str) -> InventoryItemResponse:
    """
    Gets a specific inventory item.

    Args:
        item_id: The ID of the inventory item.

    Returns:
        The inventory item.
    """
    inventory_item = await InventoryItem.get_or_none(id=item_id)
    if not inventory_item:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Item not found"
        )
    return _to_inventory_response(inventory_item)


async def update_inventory_item(
    item_id: str, item_in: InventoryItemUpdate
) -> InventoryItemResponse:
    """
    Updates an inventory item.

    Args:
        item_id: The ID of the inventory item to update.
        item_in: The new data for the inventory item.

    Returns:
        The updated inventory item.
    """
    inventory_item = await InventoryItem.get_or_none(id=item_id)
    if not inventory_item:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Item not found"
        )

    update_data = item_in.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="No fields for update"
        )
    if "location_id" in update_data:
        await _ensure_location(update_data["location_id"])

    for key, value in update_data.items():
        setattr(inventory_item, key, value)
    await inventory_item.save()
    return _to_inventory_response(inventory_item)


async def delete_inventory_item(item_id: str):
    """
    Deletes an inventory item.

    Items with recorded consumption cannot be deleted; their history stays intact.

    Args:
        item_id: The ID of the inventory item to delete.
    """
    inventory_item = await InventoryItem.get_or_none(id=item_id)
    if not inventory_item:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Item not found"
        )
    try:
        await inventory_item.delete()
    except IntegrityError as e:
        logger.warning(f"Refused to delete item {item_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Item has consumption records and cannot be deleted.",
        )
    return None


def _to_location_response(location: Location) -> LocationResponse:
    """Converts a Location model instance to a LocationResponse schema."""
    return LocationResponse.model_validate(location)


async def create_location(location_in: LocationCreate) -> LocationResponse:
    """
    Creates a new location.

    Args:
        location_in: The data for the new location.

    Returns:
        The created location.
    """
    if location_in.parent_id:
        await _ensure_location(location_in.parent_id)
    if await Location.exists(name=location_in.name):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Location name '{location_in.name}' already exists.",
        )
    location = await Location.create(**location_in.model_dump())
    return _to_location_response(location)


async def list_locations() -> List[LocationResponse]:
    """
    Lists all locations.

    Returns:
        A list of all locations ordered by name.
    """
    locations = await Location.all().order_by("name")
    return [_to_location_response(location) for location in locations]


async def get_location(location_id: str) -> LocationResponse:
    location = await Location.get_or_none(id=location_id)
    if not location:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Location not found"
        )
    return _to_location_response(location)
