"""Reporting API endpoints for stockroom

Each report endpoint validates its query string against the report's
parameter model, runs the report service and answers with the report as
JSON, or as a CSV attachment when ``format=csv`` is requested.

Any authenticated role holding ``report:generate`` may read reports.
The export endpoint, which accepts the report type and parameters as a
JSON body, additionally requires ``report:export``."""
import logging
from typing import Awaitable, Union

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import Response
from pydantic import BaseModel, ValidationError

from ..auth import permissions
from ..auth.security import require_permission
from .csv_export import report_to_csv
from .dependencies import ReportServiceDep
from .schemas import (
    ConsumptionTrendsParams,
    ConsumptionTrendsReport,
    ExpiryParams,
    ExpiryReport,
    InventoryStatusParams,
    InventoryStatusReport,
    LocationUtilizationParams,
    LocationUtilizationReport,
    Report,
    ReportExportRequest,
    ReportFormat,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/reports",
    tags=["Reports"],
    responses={401: {"description": "Not authenticated"}, 403: {"description": "Missing permission"}},
)

CSV_RESPONSE = {200: {"content": {"text/csv": {}}, "description": "Report as JSON or CSV"}}


def csv_response(report: BaseModel, report_type: str) -> Response:
    return Response(
        content=report_to_csv(report),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{report_type}-report.csv"'},
    )


async def build_report(pending: Awaitable[BaseModel], report_type: str) -> BaseModel:
    try:
        return await pending
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error generating {report_type} report: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e) or f"Failed to generate {report_type} report.",
        )


def render(report: BaseModel, report_type: str, output_format: ReportFormat) -> Union[BaseModel, Response]:
    if output_format == "csv":
        return csv_response(report, report_type)
    return report


@router.get(
    "/inventory-status",
    response_model=InventoryStatusReport,
    responses=CSV_RESPONSE,
    dependencies=[Depends(require_permission(permissions.REPORT_GENERATE))],
)
async def get_inventory_status_report(
    report_service: ReportServiceDep,
    params: InventoryStatusParams = Depends(),
    output_format: ReportFormat = Query("json", alias="format"),
):
    report = await build_report(
        report_service.generate_inventory_status_report(params), "inventory-status"
    )
    return render(report, "inventory-status", output_format)


@router.get(
    "/consumption-trends",
    response_model=ConsumptionTrendsReport,
    responses=CSV_RESPONSE,
    dependencies=[Depends(require_permission(permissions.REPORT_GENERATE))],
)
async def get_consumption_trends_report(
    report_service: ReportServiceDep,
    params: ConsumptionTrendsParams = Depends(),
    output_format: ReportFormat = Query("json", alias="format"),
):
    report = await build_report(
        report_service.generate_consumption_trends_report(params), "consumption-trends"
    )
    return render(report, "consumption-trends", output_format)


@router.get(
    "/expiry",
    response_model=ExpiryReport,
    responses=CSV_RESPONSE,
    dependencies=[Depends(require_permission(permissions.REPORT_GENERATE))],
)
async def get_expiry_report(
    report_service: ReportServiceDep,
    params: ExpiryParams = Depends(),
    output_format: ReportFormat = Query("json", alias="format"),
):
    report = await build_report(report_service.generate_expiry_report(params), "expiry")
    return render(report, "expiry", output_format)


@router.get(
    "/location-utilization",
    response_model=LocationUtilizationReport,
    responses=CSV_RESPONSE,
    dependencies=[Depends(require_permission(permissions.REPORT_GENERATE))],
)
async def get_location_utilization_report(
    report_service: ReportServiceDep,
    params: LocationUtilizationParams = Depends(),
    output_format: ReportFormat = Query("json", alias="format"),
):
    report = await build_report(
        report_service.generate_location_utilization_report(params), "location-utilization"
    )
    return render(report, "location-utilization", output_format)


@router.post(
    "/export",
    response_model=Report,
    responses=CSV_RESPONSE,
    dependencies=[Depends(require_permission(permissions.REPORT_EXPORT))],
)
async def export_report(export_in: ReportExportRequest, report_service: ReportServiceDep):
    try:
        params = report_service.parse_parameters(export_in.report_type, export_in.parameters)
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False))
    report = await build_report(
        report_service.generate(export_in.report_type, params), export_in.report_type
    )
    return render(report, export_in.report_type, export_in.format)
