"""Recording consumption against item balances and reading it back."""

import datetime
import logging
from typing import Dict, List

from fastapi import HTTPException, status
from tortoise.transactions import in_transaction

from ...common.models import utc_now
from ...core.config import REPORT_WINDOW_DAYS
from ..auth.models import User as AuthUser
from ..inventory.models import InventoryItem
from .models import ConsumptionRecord
from .repository import ConsumptionRecordRepository
from .schemas import (
    ConsumptionCreate,
    ConsumptionListQuery,
    ConsumptionPeriod,
    ConsumptionResponse,
    ConsumptionSummaryEntry,
    ConsumptionSummaryQuery,
    ConsumptionSummaryResponse,
)

logger = logging.getLogger(__name__)


async def record_consumption(
    record_in: ConsumptionCreate, current_user: AuthUser
) -> ConsumptionResponse:
    """
    Draws ``record_in.quantity`` from an item's balance and stores the event.

    The balance update and the record insert share one transaction, and the
    item row is locked for the duration so concurrent consumers cannot both
    spend the same stock.

    Raises:
        HTTPException: 404 if the item does not exist, 400 if the balance is
            smaller than the requested quantity.
    """
    async with in_transaction() as conn:
        item = await InventoryItem.get_or_none(
            id=record_in.inventory_item_id, using_db=conn
        ).select_for_update()
        if not item:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Item {record_in.inventory_item_id} not found.",
            )
        if item.current_quantity < record_in.quantity:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Not enough stock for {item.name}: {item.current_quantity:g} {item.unit} left.",
            )

        recorded_at = record_in.recorded_at or utc_now()
        item.current_quantity -= record_in.quantity
        item.last_consumed_at = recorded_at
        await item.save(using_db=conn, update_fields=["current_quantity", "last_consumed_at", "updated_at"])

        record = await ConsumptionRecord.create(
            inventory_item_id=item.id,
            user_id=current_user.id,
            quantity=record_in.quantity,
            unit=record_in.unit or item.unit,
            notes=record_in.notes,
            recorded_at=recorded_at,
            using_db=conn,
        )

    logger.info(
        f"User {current_user.id} consumed {record_in.quantity:g} {record.unit} of {item.id}; "
        f"{item.current_quantity:g} left"
    )
    response = ConsumptionResponse.model_validate(record)
    response.remaining_quantity = item.current_quantity
    return response


async def list_consumption(query: ConsumptionListQuery) -> List[ConsumptionResponse]:
    filters = {}
    if query.inventory_item_id:
        filters["inventory_item_id"] = query.inventory_item_id
    if query.user_id:
        filters["user_id"] = query.user_id
    if query.start_date:
        filters["recorded_at__gte"] = query.start_date
    if query.end_date:
        filters["recorded_at__lte"] = query.end_date

    records = (
        await ConsumptionRecord.filter(**filters)
        .order_by("-recorded_at")
        .offset(query.offset)
        .limit(query.limit)
    )
    return [ConsumptionResponse.model_validate(record) for record in records]


async def get_consumption_record(record_id: str) -> ConsumptionResponse:
    record = await ConsumptionRecord.get_or_none(id=record_id)
    if not record:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Consumption record not found"
        )
    return ConsumptionResponse.model_validate(record)


async def summarize_consumption(
    query: ConsumptionSummaryQuery, repository: ConsumptionRecordRepository
) -> ConsumptionSummaryResponse:
    """Totals consumption per item or per user over a window (default: trailing 30 days)."""
    end_date = query.end_date or utc_now()
    start_date = query.start_date or end_date - datetime.timedelta(days=REPORT_WINDOW_DAYS)
    records = await repository.find_by_date_range(start_date, end_date)

    totals: Dict[str, Dict] = {}
    for record in records:
        key = record.inventory_item_id if query.summary_type == "item" else record.user_id
        entry = totals.setdefault(key, {"total_quantity": 0.0, "consumption_count": 0})
        entry["total_quantity"] += record.quantity
        entry["consumption_count"] += 1

    if query.summary_type == "item":
        items = await InventoryItem.filter(id__in=list(totals)).values("id", "name")
        labels = {item["id"]: item["name"] for item in items}
    else:
        users = await AuthUser.filter(id__in=list(totals)).values("id", "first_name", "last_name")
        labels = {user["id"]: f"{user['first_name']} {user['last_name']}" for user in users}

    summary = [
        ConsumptionSummaryEntry(key=key, label=labels.get(key, "Unknown"), **data)
        for key, data in totals.items()
    ]
    summary.sort(key=lambda entry: entry.total_quantity, reverse=True)
    return ConsumptionSummaryResponse(
        summary_type=query.summary_type,
        period=ConsumptionPeriod(start_date=start_date, end_date=end_date),
        summary=summary,
    )
