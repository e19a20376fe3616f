import pytest_asyncio
from stockroom.features.inventory.models import InventoryItem, Location


@pytest_asyncio.fixture
async def default_location(initialize_test_db) -> Location:
    """A default location that can be used in tests."""
    return await Location.create(name="Main Store", type="warehouse")


@pytest_asyncio.fixture
async def another_location(initialize_test_db) -> Location:
    """Another location that can be used in tests."""
    return await Location.create(name="Hangar 2", type="hangar")


@pytest_asyncio.fixture
async def inventory_item_factory(default_location: Location):
    """A factory to create inventory items."""

    async def _factory(
        name: str,
        category: str = "Sealant",
        current_quantity: float = 50.0,
        original_amount: float = 100.0,
        minimum_quantity: float = 10.0,
        location: Location = default_location,
        **extra,
    ) -> InventoryItem:
        return await InventoryItem.create(
            name=name,
            category=category,
            current_quantity=current_quantity,
            original_amount=original_amount,
            minimum_quantity=minimum_quantity,
            unit="ml",
            location=location,
            **extra,
        )

    return _factory
