import datetime

import pytest
import pytest_asyncio
from fastapi import HTTPException
from stockroom.features.consumption.models import ConsumptionRecord
from stockroom.features.consumption.repository import ConsumptionRecordRepository
from stockroom.features.consumption.schemas import (
    ConsumptionCreate,
    ConsumptionListQuery,
    ConsumptionSummaryQuery,
)
from stockroom.features.consumption.service import (
    list_consumption,
    record_consumption,
    summarize_consumption,
)
from stockroom.features.inventory.models import InventoryItem, Location

UTC = datetime.timezone.utc


@pytest_asyncio.fixture
async def paint(initialize_test_db) -> InventoryItem:
    location = await Location.create(name="Paint Store")
    return await InventoryItem.create(
        name="Primer", category="Paint", current_quantity=100, original_amount=100,
        minimum_quantity=10, unit="ml", location=location,
    )


@pytest_asyncio.fixture
async def oil(initialize_test_db) -> InventoryItem:
    return await InventoryItem.create(
        name="Turbine Oil", category="Oil", current_quantity=40, original_amount=50, unit="l",
    )


@pytest.mark.asyncio
async def test_record_consumption_decrements_balance(paint, user_factory):
    """Test recording consumption against an item's balance."""
    user = await user_factory()
    response = await record_consumption(ConsumptionCreate(inventory_item_id=paint.id, quantity=30), user)
    assert response.quantity == 30
    assert response.unit == "ml"  # inherited from the item
    assert response.remaining_quantity == 70
    assert response.user_id == user.id

    item = await InventoryItem.get(id=paint.id)
    assert item.current_quantity == 70
    assert item.last_consumed_at is not None
    assert await ConsumptionRecord.filter(inventory_item_id=paint.id).count() == 1


@pytest.mark.asyncio
async def test_record_consumption_rejects_overdraw(paint, user_factory):
    user = await user_factory()
    with pytest.raises(HTTPException) as exc_info:
        await record_consumption(ConsumptionCreate(inventory_item_id=paint.id, quantity=101), user)
    assert exc_info.value.status_code == 400
    item = await InventoryItem.get(id=paint.id)
    assert item.current_quantity == 100
    assert await ConsumptionRecord.all().count() == 0


@pytest.mark.asyncio
async def test_record_consumption_unknown_item(initialize_test_db, user_factory):
    user = await user_factory()
    with pytest.raises(HTTPException) as exc_info:
        await record_consumption(ConsumptionCreate(inventory_item_id="missing", quantity=1), user)
    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_list_consumption_filters(paint, oil, user_factory):
    alice = await user_factory(first_name="Alice")
    bob = await user_factory(first_name="Bob")
    await record_consumption(ConsumptionCreate(inventory_item_id=paint.id, quantity=5), alice)
    await record_consumption(ConsumptionCreate(inventory_item_id=oil.id, quantity=2), bob)
    await record_consumption(ConsumptionCreate(inventory_item_id=paint.id, quantity=1), bob)

    by_item = await list_consumption(ConsumptionListQuery(inventory_item_id=paint.id))
    assert sorted(record.quantity for record in by_item) == [1, 5]

    by_user = await list_consumption(ConsumptionListQuery(user_id=bob.id))
    assert {record.inventory_item_id for record in by_user} == {paint.id, oil.id}


@pytest.mark.asyncio
async def test_find_by_date_range_is_inclusive(paint, user_factory):
    user = await user_factory()
    start = datetime.datetime(2024, 3, 1, tzinfo=UTC)
    end = datetime.datetime(2024, 3, 31, tzinfo=UTC)
    for recorded_at in (start, end, end + datetime.timedelta(seconds=1)):
        await ConsumptionRecord.create(
            inventory_item=paint, user=user, quantity=1, unit="ml", recorded_at=recorded_at
        )

    rows = await ConsumptionRecordRepository().find_by_date_range(start, end)
    assert [row.recorded_at for row in rows] == [end, start]


@pytest.mark.asyncio
async def test_summarize_consumption_by_user(paint, oil, user_factory):
    alice = await user_factory(first_name="Alice", last_name="Smith")
    bob = await user_factory(first_name="Bob", last_name="Jones")
    await record_consumption(ConsumptionCreate(inventory_item_id=paint.id, quantity=5), alice)
    await record_consumption(ConsumptionCreate(inventory_item_id=oil.id, quantity=20), bob)
    await record_consumption(ConsumptionCreate(inventory_item_id=paint.id, quantity=1), bob)

    summary = await summarize_consumption(
        ConsumptionSummaryQuery(summary_type="user"), ConsumptionRecordRepository()
    )
    assert summary.summary_type == "user"
    assert [(entry.label, entry.total_quantity, entry.consumption_count) for entry in summary.summary] == [
        ("Bob Jones", 21, 2),
        ("Alice Smith", 5, 1),
    ]
    assert summary.period.end_date - summary.period.start_date == datetime.timedelta(days=30)


@pytest.mark.asyncio
async def test_consumption_api(client, paint, user_headers, manager_headers):
    response = await client.post(
        "/api/v1/consumption",
        json={"inventory_item_id": paint.id, "quantity": 12.5, "notes": "hangar touch-up"},
        headers=user_headers,
    )
    assert response.status_code == 201
    assert response.json()["remaining_quantity"] == 87.5

    response = await client.get("/api/v1/consumption", headers=manager_headers)
    assert response.status_code == 200
    assert len(response.json()) == 1

    response = await client.get("/api/v1/consumption/summary?summary_type=item", headers=user_headers)
    assert response.status_code == 200
    assert response.json()["summary"][0]["label"] == "Primer"


@pytest.mark.asyncio
async def test_consumption_api_rejects_non_positive_quantity(client, paint, user_headers):
    response = await client.post(
        "/api/v1/consumption",
        json={"inventory_item_id": paint.id, "quantity": 0},
        headers=user_headers,
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_get_consumption_record_api(client, paint, user_headers):
    response = await client.post(
        "/api/v1/consumption", json={"inventory_item_id": paint.id, "quantity": 4}, headers=user_headers
    )
    record_id = response.json()["id"]

    response = await client.get(f"/api/v1/consumption/{record_id}", headers=user_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["id"] == record_id
    assert body["inventory_item_id"] == paint.id
    assert body["quantity"] == 4
    assert body["remaining_quantity"] is None

    response = await client.get("/api/v1/consumption/missing", headers=user_headers)
    assert response.status_code == 404
    assert response.json()["detail"] == "Consumption record not found"

    response = await client.get(f"/api/v1/consumption/{record_id}")
    assert response.status_code == 401
