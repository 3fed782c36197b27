"""Download endpoint for report tables as CSV or XLSX."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from cutwork.db.dependencies import get_db_session
from cutwork.services.reporting_service import ExportFilePayload, ReportingService

router = APIRouter(prefix="/exports", tags=["exports"])


def _download(exported: ExportFilePayload) -> Response:
    return Response(
        content=exported.content,
        media_type=exported.media_type,
        headers={"Content-Disposition": f'attachment; filename="{exported.filename}"'},
    )


@router.get("/{report_key}")
def export_report(
    report_key: str,
    format: str = Query(default="xlsx", description="csv or xlsx"),
    role: str | None = Query(default=None, description="matrix: department filter, 'all' for everyone"),
    employee_id: str | None = Query(default=None, description="employee-history and daily-breakdown"),
    day: date | None = Query(default=None, description="daily-breakdown: calendar day"),
    db: Session = Depends(get_db_session),
) -> Response:
    """Export ``matrix``, ``employee-history`` or ``daily-breakdown``."""

    exported = ReportingService(db).export_report(
        report_key=report_key,
        format_name=format,
        role=role,
        employee_id=employee_id,
        day=day,
    )
    return _download(exported)
