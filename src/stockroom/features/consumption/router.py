"""API routes for recording and reviewing consumption."""
import datetime
from fastapi import APIRouter, Depends, Query, Request, status
from typing import Annotated, List, Optional

from ..auth import permissions
from ..auth.models import User as AuthUser
from ..auth.security import require_permission
from .schemas import (
    ConsumptionCreate,
    ConsumptionListQuery,
    ConsumptionResponse,
    ConsumptionSummaryQuery,
    ConsumptionSummaryResponse,
)
from . import service

router = APIRouter(
    prefix="/consumption",
    tags=["Consumption"],
)


@router.post("", response_model=ConsumptionResponse, status_code=status.HTTP_201_CREATED)
async def record_consumption(
    record_in: ConsumptionCreate,
    current_user: Annotated[AuthUser, Depends(require_permission(permissions.CONSUMPTION_CREATE))],
):
    return await service.record_consumption(record_in, current_user)


@router.get(
    "",
    response_model=List[ConsumptionResponse],
    dependencies=[Depends(require_permission(permissions.CONSUMPTION_READ))],
)
async def list_consumption(
    inventory_item_id: Optional[str] = Query(None, description="Item to filter by"),
    user_id: Optional[str] = Query(None, description="User to filter by"),
    start_date: Optional[datetime.datetime] = Query(None),
    end_date: Optional[datetime.datetime] = Query(None),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
):
    query = ConsumptionListQuery(
        inventory_item_id=inventory_item_id, user_id=user_id,
        start_date=start_date, end_date=end_date, limit=limit, offset=offset,
    )
    return await service.list_consumption(query)


@router.get(
    "/summary",
    response_model=ConsumptionSummaryResponse,
    dependencies=[Depends(require_permission(permissions.CONSUMPTION_READ))],
)
async def summarize_consumption(request: Request, query: ConsumptionSummaryQuery = Depends()):
    return await service.summarize_consumption(
        query, request.app.state.repositories.consumption_records
    )


@router.get(
    "/{record_id}",
    response_model=ConsumptionResponse,
    responses={404: {"description": "Not found"}},
    dependencies=[Depends(require_permission(permissions.CONSUMPTION_READ))],
)
async def get_consumption_record(record_id: str):
    return await service.get_consumption_record(record_id)
