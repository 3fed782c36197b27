"""Production and payroll report endpoints."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from cutwork.db.dependencies import get_db_session
from cutwork.services.reporting_service import ReportingService

router = APIRouter(prefix="/reports", tags=["reports"])


def _service(db: Session) -> ReportingService:
    return ReportingService(db)


@router.get("/matrix")
def report_production_matrix(
    role: str | None = None,
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    return _service(db).production_matrix(role=role)


@router.get("/employees/{employee_id}/history")
def report_employee_history(employee_id: str, db: Session = Depends(get_db_session)) -> dict[str, object]:
    return _service(db).employee_history(employee_id=employee_id)


@router.get("/employees/{employee_id}/days/{day}")
def report_daily_breakdown(
    employee_id: str,
    day: date,
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    return _service(db).daily_breakdown(employee_id=employee_id, day=day)
