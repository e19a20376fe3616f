"""Flattening of reports into CSV text.

``report_to_csv`` dispatches on the report model; every member of the
``Report`` union registers its own formatter with a fixed column set.
"""
import csv
import datetime
import io
from functools import singledispatch
from typing import Any, Iterable, List, Sequence

from pydantic import BaseModel

from .schemas import (
    ConsumptionTrendsReport,
    ExpiryReport,
    InventoryStatusReport,
    LocationUtilizationReport,
)

INVENTORY_STATUS_HEADER = [
    "ID", "Name", "Category", "Current Quantity", "Original Amount",
    "Minimum Quantity", "Unit", "Stock Percentage", "Status", "Last Updated",
]
EXPIRY_HEADER = [
    "ID", "Name", "Category", "Current Quantity", "Unit",
    "Expiry Date", "Days Remaining", "Status",
]
LOCATION_UTILIZATION_HEADER = [
    "Location ID", "Location Name", "Location Type", "Total Items", "Total Quantity",
]

# group_by -> (header, trend attributes)
TREND_COLUMNS = {
    "day": (["Date", "Total Quantity", "Consumption Count"], ["date", "total_quantity", "consumption_count"]),
    "week": (["Week Start", "Total Quantity", "Consumption Count"], ["week_start", "total_quantity", "consumption_count"]),
    "month": (["Month", "Total Quantity", "Consumption Count"], ["month", "total_quantity", "consumption_count"]),
    "category": (["Category", "Total Quantity", "Consumption Count"], ["category", "total_quantity", "consumption_count"]),
    "user": (
        ["User ID", "User Name", "Total Quantity", "Consumption Count"],
        ["user_id", "user_name", "total_quantity", "consumption_count"],
    ),
}


def format_cell(value: Any) -> str:
    """Renders one value the way report consumers expect it in a cell."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    return str(value)


def _write(header: Sequence[str], rows: Iterable[Sequence[Any]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(header)
    writer.writerows([format_cell(value) for value in row] for row in rows)
    return buffer.getvalue()


@singledispatch
def report_to_csv(report: Any) -> str:
    """
    Converts a report to CSV text.

    Objects without a registered formatter fall back to a generic
    conversion: a non-empty list of mappings (or models) becomes a table
    whose header is the first element's keys. Anything else yields ``""``.
    """
    if not isinstance(report, list) or not report:
        return ""
    records: List[dict] = [
        entry.model_dump() if isinstance(entry, BaseModel) else dict(entry) for entry in report
    ]
    header = list(records[0].keys())
    return _write(header, ([record.get(key) for key in header] for record in records))


@report_to_csv.register
def _(report: InventoryStatusReport) -> str:
    return _write(
        INVENTORY_STATUS_HEADER,
        (
            [
                item.id, item.name, item.category, item.current_quantity,
                item.original_amount, item.minimum_quantity, item.unit,
                f"{item.stock_percentage}%", item.status, item.last_updated,
            ]
            for item in report.items
        ),
    )


@report_to_csv.register
def _(report: ConsumptionTrendsReport) -> str:
    header, attributes = TREND_COLUMNS[report.parameters.group_by]
    return _write(
        header,
        ([getattr(trend, attribute, None) for attribute in attributes] for trend in report.trends),
    )


@report_to_csv.register
def _(report: ExpiryReport) -> str:
    return _write(
        EXPIRY_HEADER,
        (
            [
                item.id, item.name, item.category, item.current_quantity, item.unit,
                item.expiry_date, item.days_remaining, item.status,
            ]
            for item in report.items
        ),
    )


@report_to_csv.register
def _(report: LocationUtilizationReport) -> str:
    return _write(
        LOCATION_UTILIZATION_HEADER,
        (
            [
                location.location_id, location.location_name, location.location_type,
                location.total_items, location.total_quantity,
            ]
            for location in report.locations
        ),
    )
