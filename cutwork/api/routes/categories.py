"""Department category endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from cutwork.db.dependencies import get_db_session
from cutwork.services.workshop_service import WorkshopService

router = APIRouter(prefix="/categories", tags=["categories"])


class CategoryCreatePayload(BaseModel):
    name: str = Field(min_length=1, max_length=128)


def _service(db: Session) -> WorkshopService:
    return WorkshopService(db)


@router.get("")
def list_categories(db: Session = Depends(get_db_session)) -> dict[str, list[str]]:
    return {"items": _service(db).list_categories()}


@router.post("", status_code=status.HTTP_201_CREATED)
def add_category(payload: CategoryCreatePayload, db: Session = Depends(get_db_session)) -> dict[str, str]:
    return {"name": _service(db).add_category(payload.name)}


@router.delete("/{name}", status_code=status.HTTP_204_NO_CONTENT)
def remove_category(name: str, db: Session = Depends(get_db_session)) -> Response:
    _service(db).remove_category(name)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
