"""Liveness and storage checks for the local backend."""

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from cutwork.core.config import get_settings
from cutwork.db.dependencies import get_db_session
from cutwork.models.entities import StoredCollection

router = APIRouter()


@router.get("/health")
def health(db: Session = Depends(get_db_session)) -> dict[str, object]:
    """Report liveness plus which shop collections have been saved so far."""

    stored = sorted(db.scalars(select(StoredCollection.key)))
    return {
        "status": "ok",
        "report_timezone": get_settings().report_timezone,
        "stored_collections": stored,
    }
