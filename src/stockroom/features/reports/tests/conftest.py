import pytest

from stockroom.features.reports.service import ReportService
from .fakes import NOW, FakeConsumptionRecords, FakeInventoryItems, FakeRepository


@pytest.fixture
def inventory_items() -> FakeInventoryItems:
    return FakeInventoryItems(default_order="name")


@pytest.fixture
def consumption_records() -> FakeConsumptionRecords:
    return FakeConsumptionRecords(default_order="recorded_at")


@pytest.fixture
def locations() -> FakeRepository:
    return FakeRepository(default_order="name")


@pytest.fixture
def users() -> FakeRepository:
    return FakeRepository(default_order="last_name")


@pytest.fixture
def report_service(inventory_items, consumption_records, locations, users) -> ReportService:
    return ReportService(
        inventory_items=inventory_items,
        consumption_records=consumption_records,
        locations=locations,
        users=users,
        clock=lambda: NOW,
    )
