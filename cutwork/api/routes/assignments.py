"""Assignment entry endpoints."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from cutwork.db.dependencies import get_db_session
from cutwork.services.reporting_service import ReportingService
from cutwork.services.workshop_service import AssignmentData, WorkshopService

router = APIRouter(prefix="/assignments", tags=["assignments"])


class AssignmentPayload(BaseModel):
    employee_id: str = Field(min_length=1)
    cut_id: str = Field(min_length=1)
    operation_id: str = Field(min_length=1)
    bundle_id: str = Field(min_length=1)
    start_piece: int = Field(ge=1)
    end_piece: int = Field(ge=1)
    assigned_on: date


def _service(db: Session) -> WorkshopService:
    return WorkshopService(db)


def _assignment_data(payload: AssignmentPayload) -> AssignmentData:
    return AssignmentData(
        employee_id=payload.employee_id,
        cut_id=payload.cut_id,
        operation_id=payload.operation_id,
        bundle_id=payload.bundle_id,
        start_piece=payload.start_piece,
        end_piece=payload.end_piece,
        assigned_on=payload.assigned_on,
    )


@router.get("")
def list_assignments(db: Session = Depends(get_db_session)) -> dict[str, list[object]]:
    service = _service(db)
    return {"items": [service.serialize_assignment(item) for item in service.list_assignments()]}


@router.get("/log")
def assignment_log(db: Session = Depends(get_db_session)) -> dict[str, list[object]]:
    return {"items": ReportingService(db).assignment_log()}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_assignment(payload: AssignmentPayload, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _service(db)
    return service.serialize_assignment(service.create_assignment(_assignment_data(payload)))


@router.get("/{assignment_id}")
def get_assignment(assignment_id: str, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _service(db)
    return service.serialize_assignment(service.get_assignment(assignment_id))


@router.put("/{assignment_id}")
def update_assignment(
    assignment_id: str,
    payload: AssignmentPayload,
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _service(db)
    return service.serialize_assignment(service.update_assignment(assignment_id, _assignment_data(payload)))


@router.delete("/{assignment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_assignment(assignment_id: str, db: Session = Depends(get_db_session)) -> Response:
    _service(db).delete_assignment(assignment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
