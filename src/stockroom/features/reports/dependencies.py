from typing import Annotated

from fastapi import Depends, Request

from .service import ReportService


def get_report_service(request: Request) -> ReportService:
    """The process-wide service built by ``create_app``."""
    return request.app.state.report_service


ReportServiceDep = Annotated[ReportService, Depends(get_report_service)]
