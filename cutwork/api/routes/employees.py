"""Employee management endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from cutwork.db.dependencies import get_db_session
from cutwork.services.workshop_service import EmployeeData, WorkshopService

router = APIRouter(prefix="/employees", tags=["employees"])


class EmployeePayload(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    role: str | None = Field(default=None, max_length=128)


def _service(db: Session) -> WorkshopService:
    return WorkshopService(db)


@router.get("")
def list_employees(db: Session = Depends(get_db_session)) -> dict[str, list[object]]:
    service = _service(db)
    return {"items": [service.serialize_employee(employee) for employee in service.list_employees()]}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_employee(payload: EmployeePayload, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _service(db)
    employee = service.create_employee(EmployeeData(name=payload.name, role=payload.role))
    return service.serialize_employee(employee)


@router.get("/{employee_id}")
def get_employee(employee_id: str, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _service(db)
    return service.serialize_employee(service.get_employee(employee_id))


@router.put("/{employee_id}")
def update_employee(
    employee_id: str,
    payload: EmployeePayload,
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _service(db)
    employee = service.update_employee(employee_id, EmployeeData(name=payload.name, role=payload.role))
    return service.serialize_employee(employee)


@router.delete("/{employee_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_employee(employee_id: str, db: Session = Depends(get_db_session)) -> Response:
    _service(db).delete_employee(employee_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
