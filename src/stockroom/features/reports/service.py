"""
Report Aggregation Service

This module computes the four stockroom reports from repository snapshots:
inventory status, consumption trends, expiry and location utilization.

The service performs no writes and no caching. Each call reads a fresh,
bounded set of rows through the injected repositories and aggregates them
in memory. Store errors propagate to the caller unchanged.
"""

import datetime
import logging
import math
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Sequence, Tuple, Type

from pydantic import BaseModel

from ...common.models import utc_now
from ...common.repository import QueryOptions
from ...core.config import REPORT_ROW_LIMIT, REPORT_WINDOW_DAYS
from ..auth.repository import UserRepository
from ..consumption.repository import ConsumptionRecordRepository
from ..consumption.schemas import ConsumptionRow
from ..inventory.repository import InventoryItemRepository, LocationRepository
from ..inventory.schemas import InventoryItemRow
from .schemas import (
    CategoryBreakdown,
    CategoryTrend,
    ConsumptionTrendsParams,
    ConsumptionTrendsReport,
    ConsumptionTrendsSummary,
    DayTrend,
    ExpiryItem,
    ExpiryParams,
    ExpiryReport,
    ExpirySummary,
    InventoryStatusItem,
    InventoryStatusParams,
    InventoryStatusReport,
    InventoryStatusSummary,
    LocationUtilization,
    LocationUtilizationParams,
    LocationUtilizationReport,
    LocationUtilizationSummary,
    MonthTrend,
    ReportPeriod,
    Trend,
    TrendTotals,
    UserTrend,
    WeekTrend,
)

logger = logging.getLogger(__name__)

CRITICAL_STOCK_PERCENTAGE = 10
CRITICAL_EXPIRY_DAYS = 7
SECONDS_PER_DAY = 86400
UNKNOWN_CATEGORY = "Unknown"
UNKNOWN_USER = "Unknown User"


def round_half_up(value: float, digits: int = 0) -> float:
    """Rounds halves upwards (``2.5 -> 3``, ``-2.5 -> -2``) unlike the builtin ``round``."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def raw_stock_percentage(item: InventoryItemRow) -> float:
    # An item without an original amount has no meaningful fill level
    if not item.original_amount:
        return 0.0
    return item.current_quantity / item.original_amount * 100


def stock_status(item: InventoryItemRow) -> str:
    """Classifies an item; the restock threshold wins over the percentage check."""
    if item.current_quantity <= item.minimum_quantity:
        return "low"
    if raw_stock_percentage(item) < CRITICAL_STOCK_PERCENTAGE:
        return "critical"
    return "normal"


def expiry_status(days_remaining: int) -> str:
    if days_remaining <= 0:
        return "expired"
    if days_remaining <= CRITICAL_EXPIRY_DAYS:
        return "critical"
    return "warning"


def as_utc(value: datetime.datetime) -> datetime.datetime:
    """Treats naive datetimes as UTC and converts aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=datetime.timezone.utc)
    return value.astimezone(datetime.timezone.utc)


def week_start(value: datetime.datetime) -> datetime.date:
    """The Sunday on or before ``value``'s UTC date."""
    day = as_utc(value).date()
    return day - datetime.timedelta(days=(day.weekday() + 1) % 7)


def _accumulate(
    records: Sequence[ConsumptionRow],
    key_for: Callable[[ConsumptionRow], str],
    make_entry: Callable[[str], TrendTotals],
) -> Dict[str, TrendTotals]:
    groups: Dict[str, TrendTotals] = {}
    for record in records:
        key = key_for(record)
        entry = groups.get(key)
        if entry is None:
            entry = groups[key] = make_entry(key)
        entry.total_quantity += record.quantity
        entry.consumption_count += 1
    return groups


def _chronological(groups: Mapping[str, TrendTotals]) -> List[TrendTotals]:
    return [groups[key] for key in sorted(groups)]


def _largest_first(groups: Mapping[str, TrendTotals]) -> List[TrendTotals]:
    return sorted(groups.values(), key=lambda entry: entry.total_quantity, reverse=True)


class ReportService:
    """
    Builds reports from injected repositories.

    Args:
        inventory_items: Source of inventory item rows.
        consumption_records: Source of consumption rows.
        locations: Source of location rows.
        users: Source of user rows, used to label per-user trends.
        clock: Returns the current aware UTC time; reports use it for
            ``generated_at``, default windows and expiry arithmetic.
        row_limit: Upper bound on item rows listed by the inventory-status
            and expiry reports. Location totals are never capped.
    """

    def __init__(
        self,
        inventory_items: InventoryItemRepository,
        consumption_records: ConsumptionRecordRepository,
        locations: LocationRepository,
        users: UserRepository,
        clock: Callable[[], datetime.datetime] = utc_now,
        row_limit: int = REPORT_ROW_LIMIT,
    ):
        self.inventory_items = inventory_items
        self.consumption_records = consumption_records
        self.locations = locations
        self.users = users
        self.clock = clock
        self.row_limit = row_limit
        self._trend_builders: Dict[str, Callable[[Sequence[ConsumptionRow]], Awaitable[List[Trend]]]] = {
            "day": self._trends_by_day,
            "week": self._trends_by_week,
            "month": self._trends_by_month,
            "category": self._trends_by_category,
            "user": self._trends_by_user,
        }
        self._generators: Dict[str, Tuple[Type[BaseModel], Callable[[Any], Awaitable[BaseModel]]]] = {
            "inventory-status": (InventoryStatusParams, self.generate_inventory_status_report),
            "consumption-trends": (ConsumptionTrendsParams, self.generate_consumption_trends_report),
            "expiry": (ExpiryParams, self.generate_expiry_report),
            "location-utilization": (LocationUtilizationParams, self.generate_location_utilization_report),
        }

    def parse_parameters(self, report_type: str, parameters: Mapping[str, Any]) -> BaseModel:
        """
        Validates raw ``parameters`` against the parameter model of ``report_type``.

        Raises:
            KeyError: If ``report_type`` is not one of the four report kinds.
            pydantic.ValidationError: If the parameters do not validate.
        """
        params_model, _ = self._generators[report_type]
        return params_model.model_validate(dict(parameters))

    async def generate(self, report_type: str, params: BaseModel) -> BaseModel:
        """Builds the ``report_type`` report from already parsed ``params``."""
        _, generator = self._generators[report_type]
        return await generator(params)

    async def generate_inventory_status_report(
        self, params: InventoryStatusParams
    ) -> InventoryStatusReport:
        """
        Lists items with their fill level and stock status.

        ``status="low"`` reads through the restock lookup. ``status="critical"``
        keeps every fetched item under the percentage threshold, including
        items that are also at their restock threshold and therefore carry
        ``status="low"``. ``status="normal"`` keeps items whose derived status
        is normal.
        """
        filters: Dict[str, Any] = {}
        if params.category:
            filters["category"] = params.category
        if params.location_id:
            filters["location_id"] = params.location_id
        options = QueryOptions(limit=self.row_limit, order_by="name")

        if params.status == "low":
            rows = await self.inventory_items.find_needing_restock(filters, options)
        else:
            rows = await self.inventory_items.find_by(filters, options)
            if params.status == "critical":
                rows = [row for row in rows if raw_stock_percentage(row) < CRITICAL_STOCK_PERCENTAGE]
            elif params.status == "normal":
                rows = [row for row in rows if stock_status(row) == "normal"]

        items = [
            InventoryStatusItem(
                id=row.id,
                name=row.name,
                category=row.category,
                location_id=row.location_id,
                current_quantity=row.current_quantity,
                original_amount=row.original_amount,
                minimum_quantity=row.minimum_quantity,
                unit=row.unit,
                stock_percentage=int(round_half_up(raw_stock_percentage(row))),
                status=stock_status(row),
                last_updated=row.updated_at or row.created_at,
            )
            for row in rows
        ]
        average = (
            int(round_half_up(sum(raw_stock_percentage(row) for row in rows) / len(rows)))
            if rows
            else 0
        )
        summary = InventoryStatusSummary(
            total_items=len(items),
            low_stock_items=sum(1 for item in items if item.status == "low"),
            critical_stock_items=sum(1 for item in items if item.status == "critical"),
            average_stock_level=average,
        )
        logger.info(f"Inventory status report: {len(items)} items (status={params.status})")
        return InventoryStatusReport(
            generated_at=self.clock(), parameters=params, summary=summary, items=items
        )

    async def generate_consumption_trends_report(
        self, params: ConsumptionTrendsParams
    ) -> ConsumptionTrendsReport:
        """Groups consumption inside a date window by time bucket, category or user."""
        end_date = as_utc(params.end_date) if params.end_date else self.clock()
        start_date = (
            as_utc(params.start_date)
            if params.start_date
            else end_date - datetime.timedelta(days=REPORT_WINDOW_DAYS)
        )
        records = await self.consumption_records.find_by_date_range(start_date, end_date)

        if params.category:
            category_items = await self.inventory_items.find_by({"category": params.category})
            item_ids = {item.id for item in category_items}
            records = [record for record in records if record.inventory_item_id in item_ids]
        if params.user_id:
            records = [record for record in records if record.user_id == params.user_id]

        trends = await self._trend_builders[params.group_by](records)

        total_consumption = sum(record.quantity for record in records)
        total_records = len(records)
        summary = ConsumptionTrendsSummary(
            total_consumption=total_consumption,
            total_records=total_records,
            average_per_record=(
                round_half_up(total_consumption / total_records, 2) if total_records else 0
            ),
        )
        logger.info(
            f"Consumption trends report: {total_records} records in {len(trends)} "
            f"{params.group_by} groups"
        )
        return ConsumptionTrendsReport(
            generated_at=self.clock(),
            parameters=params,
            period=ReportPeriod(start_date=start_date, end_date=end_date),
            summary=summary,
            trends=trends,
        )

    async def _trends_by_day(self, records: Sequence[ConsumptionRow]) -> List[Trend]:
        groups = _accumulate(
            records,
            lambda record: as_utc(record.recorded_at).date().isoformat(),
            lambda key: DayTrend(date=key),
        )
        return _chronological(groups)

    async def _trends_by_week(self, records: Sequence[ConsumptionRow]) -> List[Trend]:
        groups = _accumulate(
            records,
            lambda record: week_start(record.recorded_at).isoformat(),
            lambda key: WeekTrend(week_start=key),
        )
        return _chronological(groups)

    async def _trends_by_month(self, records: Sequence[ConsumptionRow]) -> List[Trend]:
        groups = _accumulate(
            records,
            lambda record: as_utc(record.recorded_at).strftime("%Y-%m"),
            lambda key: MonthTrend(month=key),
        )
        return _chronological(groups)

    async def _trends_by_category(self, records: Sequence[ConsumptionRow]) -> List[Trend]:
        item_ids = list(dict.fromkeys(record.inventory_item_id for record in records))
        categories: Dict[str, str] = {}
        if item_ids:
            items = await self.inventory_items.find_by({"id__in": item_ids})
            categories = {item.id: item.category for item in items}

        groups = _accumulate(
            records,
            lambda record: categories.get(record.inventory_item_id, UNKNOWN_CATEGORY),
            lambda key: CategoryTrend(category=key),
        )
        return _largest_first(groups)

    async def _trends_by_user(self, records: Sequence[ConsumptionRow]) -> List[Trend]:
        user_ids = list(dict.fromkeys(record.user_id for record in records))
        names: Dict[str, str] = {}
        if user_ids:
            users = await self.users.find_by({"id__in": user_ids})
            names = {user.id: f"{user.first_name} {user.last_name}" for user in users}

        groups = _accumulate(
            records,
            lambda record: record.user_id,
            lambda key: UserTrend(user_id=key, user_name=names.get(key, UNKNOWN_USER)),
        )
        return _largest_first(groups)

    async def generate_expiry_report(self, params: ExpiryParams) -> ExpiryReport:
        """
        Lists items whose expiry date falls before ``now + days_until_expiry``.

        Expiry dates are read as midnight UTC at the start of that day, so
        ``days_remaining`` is the number of started days until then.
        """
        now = self.clock()
        threshold = now + datetime.timedelta(days=params.days_until_expiry)
        filters: Dict[str, Any] = {"expiry_date__isnull": False}
        if params.category:
            filters["category"] = params.category
        rows = await self.inventory_items.find_by(
            filters, QueryOptions(limit=self.row_limit, order_by="expiry_date")
        )

        items: List[ExpiryItem] = []
        for row in rows:
            if row.expiry_date is None:
                continue
            expires_at = datetime.datetime.combine(
                row.expiry_date, datetime.time.min, tzinfo=datetime.timezone.utc
            )
            if expires_at > threshold:
                continue
            days_remaining = math.ceil((expires_at - now).total_seconds() / SECONDS_PER_DAY)
            items.append(
                ExpiryItem(
                    id=row.id,
                    name=row.name,
                    category=row.category,
                    location_id=row.location_id,
                    current_quantity=row.current_quantity,
                    unit=row.unit,
                    expiry_date=row.expiry_date,
                    days_remaining=days_remaining,
                    status=expiry_status(days_remaining),
                )
            )

        summary = ExpirySummary(
            total_expiring_items=len(items),
            expired_items=sum(1 for item in items if item.status == "expired"),
            critical_items=sum(1 for item in items if item.status == "critical"),
            warning_items=sum(1 for item in items if item.status == "warning"),
        )
        logger.info(
            f"Expiry report: {len(items)} items within {params.days_until_expiry} days"
        )
        return ExpiryReport(generated_at=now, parameters=params, summary=summary, items=items)

    async def generate_location_utilization_report(
        self, params: LocationUtilizationParams
    ) -> LocationUtilizationReport:
        """Per-location item counts and quantities, broken down by category."""
        if params.location_id:
            location = await self.locations.find_by_id(params.location_id)
            locations = [location] if location else []
        else:
            locations = await self.locations.find_all()
        # Totals must cover every item at the reported locations, so no row cap here
        rows = (
            await self.inventory_items.find_by({"location_id__in": [location.id for location in locations]})
            if locations
            else []
        )

        items_by_location: Dict[str, List[InventoryItemRow]] = {}
        for row in rows:
            if row.location_id is not None:
                items_by_location.setdefault(row.location_id, []).append(row)

        utilization: List[LocationUtilization] = []
        for location in locations:
            location_items = items_by_location.get(location.id, [])
            if not location_items and not params.include_empty:
                continue

            breakdown: Dict[str, CategoryBreakdown] = {}
            for item in location_items:
                entry = breakdown.get(item.category)
                if entry is None:
                    entry = breakdown[item.category] = CategoryBreakdown(
                        category=item.category, item_count=0, total_quantity=0.0
                    )
                entry.item_count += 1
                entry.total_quantity += item.current_quantity

            utilization.append(
                LocationUtilization(
                    location_id=location.id,
                    location_name=location.name,
                    location_type=location.type,
                    total_items=len(location_items),
                    total_quantity=sum(item.current_quantity for item in location_items),
                    categories=list(breakdown.values()),
                )
            )

        total_items = sum(entry.total_items for entry in utilization)
        summary = LocationUtilizationSummary(
            total_locations=len(utilization),
            total_items=total_items,
            average_items_per_location=(
                int(round_half_up(total_items / len(utilization))) if utilization else 0
            ),
        )
        logger.info(f"Location utilization report: {len(utilization)} locations")
        return LocationUtilizationReport(
            generated_at=self.clock(), parameters=params, summary=summary, locations=utilization
        )
