"""Repository helpers backed by whole-collection JSON storage."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.orm import Session

from cutwork.models.entities import Assignment, Cut, Employee, StoredCollection

EMPLOYEES_KEY = "cwt_employees"
CUTS_KEY = "cwt_cuts"
ASSIGNMENTS_KEY = "cwt_assignments"
CATEGORIES_KEY = "cwt_categories"

EntityT = TypeVar("EntityT", Employee, Cut, Assignment)


class CollectionStore:
    """Load/save contract for one JSON collection.

    ``load`` returns an empty list when nothing was stored yet; ``save``
    replaces the whole collection.
    """

    def __init__(self, db: Session, key: str) -> None:
        self.db = db
        self.key = key

    def _row(self) -> StoredCollection | None:
        return self.db.scalar(select(StoredCollection).where(StoredCollection.key == self.key))

    def load(self) -> list[Any]:
        row = self._row()
        if row is None or row.payload is None:
            return []
        return list(row.payload)

    def save(self, items: list[Any]) -> None:
        row = self._row()
        if row is None:
            row = StoredCollection(key=self.key, payload=list(items), updated_at=datetime.utcnow())
            self.db.add(row)
        else:
            row.payload = list(items)
            row.updated_at = datetime.utcnow()
        self.db.flush()


class EntityRepository(Generic[EntityT]):
    """list/get/add/update/remove over one entity collection."""

    def __init__(self, store: CollectionStore, decode: Callable[[dict[str, Any]], EntityT]) -> None:
        self.store = store
        self.decode = decode

    def list(self) -> list[EntityT]:
        return [self.decode(item) for item in self.store.load()]

    def get(self, entity_id: str) -> EntityT | None:
        return next((item for item in self.list() if item.id == entity_id), None)

    def add(self, entity: EntityT, *, first: bool = False) -> EntityT:
        items = self.list()
        if first:
            items.insert(0, entity)
        else:
            items.append(entity)
        self._save(items)
        return entity

    def update(self, entity: EntityT) -> EntityT | None:
        items = self.list()
        for index, item in enumerate(items):
            if item.id == entity.id:
                items[index] = entity
                self._save(items)
                return entity
        return None

    def remove(self, entity_id: str) -> bool:
        items = self.list()
        kept = [item for item in items if item.id != entity_id]
        if len(kept) == len(items):
            return False
        self._save(kept)
        return True

    def _save(self, items: list[EntityT]) -> None:
        self.store.save([item.to_dict() for item in items])


class CategoryRepository:
    """Department names, kept in insertion order."""

    def __init__(self, store: CollectionStore) -> None:
        self.store = store

    def list(self) -> list[str]:
        return [str(item) for item in self.store.load()]

    def add(self, name: str) -> str:
        self.store.save([*self.list(), name])
        return name

    def remove(self, name: str) -> bool:
        items = self.list()
        if name not in items:
            return False
        self.store.save([item for item in items if item != name])
        return True


class WorkshopRepository:
    """Persistence operations used by entry workflows and reports."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.employees: EntityRepository[Employee] = EntityRepository(
            CollectionStore(db, EMPLOYEES_KEY), Employee.from_dict
        )
        self.cuts: EntityRepository[Cut] = EntityRepository(CollectionStore(db, CUTS_KEY), Cut.from_dict)
        self.assignments: EntityRepository[Assignment] = EntityRepository(
            CollectionStore(db, ASSIGNMENTS_KEY), Assignment.from_dict
        )
        self.categories = CategoryRepository(CollectionStore(db, CATEGORIES_KEY))
