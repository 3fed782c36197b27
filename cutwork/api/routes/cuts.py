"""Cut setup endpoints, including bundle availability for assignment entry."""

from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from cutwork.db.dependencies import get_db_session
from cutwork.services.workshop_service import CutData, WorkshopService

router = APIRouter(prefix="/cuts", tags=["cuts"])


class CutPayload(BaseModel):
    cut_number: str = Field(min_length=1, max_length=64)
    cut_name: str | None = Field(default=None, max_length=255)
    total_pieces: int = Field(gt=0)
    bundle_size: int | None = Field(default=None, gt=0)
    # Department name -> per-piece rate; rates of zero are ignored.
    rates: dict[str, Decimal] = Field(default_factory=dict)


def _service(db: Session) -> WorkshopService:
    return WorkshopService(db)


def _cut_data(payload: CutPayload) -> CutData:
    return CutData(
        cut_number=payload.cut_number,
        cut_name=payload.cut_name,
        total_pieces=payload.total_pieces,
        bundle_size=payload.bundle_size,
        rates=dict(payload.rates),
    )


@router.get("")
def list_cuts(db: Session = Depends(get_db_session)) -> dict[str, list[object]]:
    service = _service(db)
    return {"items": [service.serialize_cut(cut) for cut in service.list_cuts()]}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_cut(payload: CutPayload, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _service(db)
    return service.serialize_cut(service.create_cut(_cut_data(payload)))


@router.get("/{cut_id}")
def get_cut(cut_id: str, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _service(db)
    return service.serialize_cut(service.get_cut(cut_id))


@router.put("/{cut_id}")
def update_cut(cut_id: str, payload: CutPayload, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _service(db)
    return service.serialize_cut(service.update_cut(cut_id, _cut_data(payload)))


@router.delete("/{cut_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_cut(cut_id: str, db: Session = Depends(get_db_session)) -> Response:
    _service(db).delete_cut(cut_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{cut_id}/operations/{operation_id}/available-bundles")
def list_available_bundles(
    cut_id: str,
    operation_id: str,
    exclude_assignment_id: str | None = None,
    db: Session = Depends(get_db_session),
) -> dict[str, list[object]]:
    service = _service(db)
    bundles = service.list_available_bundles(cut_id, operation_id, exclude_assignment_id)
    return {"items": [service.serialize_bundle(bundle) for bundle in bundles]}


@router.get("/{cut_id}/operations/{operation_id}/eligible-employees")
def list_eligible_employees(
    cut_id: str,
    operation_id: str,
    db: Session = Depends(get_db_session),
) -> dict[str, list[object]]:
    service = _service(db)
    employees = service.list_eligible_employees(cut_id, operation_id)
    return {"items": [service.serialize_employee(employee) for employee in employees]}
