import datetime

import pytest
import pytest_asyncio

from stockroom.features.consumption.models import ConsumptionRecord
from stockroom.features.inventory.models import InventoryItem, Location
from stockroom.features.reports.service import ReportService
from .fakes import NOW, BrokenRepository, FakeConsumptionRecords, FakeRepository


@pytest_asyncio.fixture
async def stocked_db(initialize_test_db, user_factory):
    bay = await Location.create(name="Bay 1", type="bay")
    await Location.create(name="Empty Shelf", type="shelf")
    sealant = await InventoryItem.create(
        name="Sealant, grey", category="Sealant", current_quantity=5, original_amount=100,
        minimum_quantity=10, unit="ml", location=bay,
        expiry_date=datetime.datetime.now(datetime.timezone.utc).date() + datetime.timedelta(days=3),
    )
    await InventoryItem.create(
        name="Engine Oil", category="Oil", current_quantity=40, original_amount=50,
        minimum_quantity=5, unit="l", location=bay,
    )
    worker = await user_factory(first_name="Wendy", last_name="Worker")
    await ConsumptionRecord.create(inventory_item=sealant, user=worker, quantity=3, unit="ml")
    return bay


@pytest.mark.asyncio
async def test_inventory_status_json(client, stocked_db, user_headers):
    response = await client.get("/api/v1/reports/inventory-status", headers=user_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["report_type"] == "inventory-status"
    assert body["parameters"]["status"] == "all"
    assert body["summary"]["total_items"] == 2
    assert body["summary"]["low_stock_items"] == 1
    assert [item["name"] for item in body["items"]] == ["Engine Oil", "Sealant, grey"]


@pytest.mark.asyncio
async def test_inventory_status_csv(client, stocked_db, user_headers):
    response = await client.get(
        "/api/v1/reports/inventory-status", params={"format": "csv"}, headers=user_headers
    )
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert response.headers["content-disposition"] == 'attachment; filename="inventory-status-report.csv"'
    lines = response.text.splitlines()
    assert lines[0].startswith("ID,Name,Category,Current Quantity")
    assert '"Sealant, grey"' in lines[2]
    assert ",5%,low," in lines[2]


@pytest.mark.asyncio
async def test_consumption_trends_by_user(client, stocked_db, manager_headers):
    response = await client.get(
        "/api/v1/reports/consumption-trends", params={"group_by": "user"}, headers=manager_headers
    )
    assert response.status_code == 200
    body = response.json()
    assert body["trends"][0]["user_name"] == "Wendy Worker"
    assert body["summary"]["total_consumption"] == 3
    assert "period" in body


@pytest.mark.asyncio
async def test_expiry_report(client, stocked_db, user_headers):
    response = await client.get("/api/v1/reports/expiry", headers=user_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["summary"]["total_expiring_items"] == 1
    assert body["items"][0]["status"] == "critical"


@pytest.mark.asyncio
async def test_location_utilization_include_empty(client, stocked_db, user_headers):
    response = await client.get("/api/v1/reports/location-utilization", headers=user_headers)
    assert response.json()["summary"]["total_locations"] == 1

    response = await client.get(
        "/api/v1/reports/location-utilization", params={"include_empty": "true"}, headers=user_headers
    )
    assert response.json()["summary"]["total_locations"] == 2


@pytest.mark.asyncio
async def test_invalid_query_is_rejected(client, user_headers):
    response = await client.get(
        "/api/v1/reports/consumption-trends", params={"group_by": "year"}, headers=user_headers
    )
    assert response.status_code == 422
    assert "detail" in response.json()

    response = await client.get(
        "/api/v1/reports/expiry", params={"format": "xlsx"}, headers=user_headers
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_reports_require_authentication(client):
    response = await client.get("/api/v1/reports/inventory-status")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_export_csv(client, stocked_db, manager_headers):
    response = await client.post(
        "/api/v1/reports/export",
        json={"report_type": "location-utilization", "parameters": {"include_empty": True}},
        headers=manager_headers,
    )
    assert response.status_code == 200
    assert response.headers["content-disposition"] == 'attachment; filename="location-utilization-report.csv"'
    assert response.text.splitlines()[0] == "Location ID,Location Name,Location Type,Total Items,Total Quantity"
    assert len(response.text.splitlines()) == 3


@pytest.mark.asyncio
async def test_export_json(client, stocked_db, admin_headers):
    response = await client.post(
        "/api/v1/reports/export",
        json={"report_type": "expiry", "parameters": {"days_until_expiry": 10}, "format": "json"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["parameters"]["days_until_expiry"] == 10


@pytest.mark.asyncio
async def test_export_requires_export_permission(client, user_headers):
    response = await client.post(
        "/api/v1/reports/export", json={"report_type": "expiry"}, headers=user_headers
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_export_rejects_bad_input(client, manager_headers):
    response = await client.post(
        "/api/v1/reports/export", json={"report_type": "sales"}, headers=manager_headers
    )
    assert response.status_code == 422

    response = await client.post(
        "/api/v1/reports/export",
        json={"report_type": "consumption-trends", "parameters": {"group_by": "year"}},
        headers=manager_headers,
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_store_failure_maps_to_500(client, test_app, user_headers):
    test_app.state.report_service = ReportService(
        inventory_items=BrokenRepository(),
        consumption_records=FakeConsumptionRecords(),
        locations=FakeRepository(),
        users=FakeRepository(),
        clock=lambda: NOW,
    )
    response = await client.get("/api/v1/reports/inventory-status", headers=user_headers)
    assert response.status_code == 500
    assert response.json()["detail"] == "store unreachable"
