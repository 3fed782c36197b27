from __future__ import annotations

from dataclasses import replace
from decimal import Decimal

from sqlalchemy.orm import Session

from cutwork.models.entities import Cut, Employee, Operation, StoredCollection
from cutwork.repositories.workshop_repository import CollectionStore, WorkshopRepository
from cutwork.services.workshop_service import generate_bundles


def test_load_returns_empty_list_without_stored_state(db_session: Session) -> None:
    store = CollectionStore(db_session, "cwt_employees")

    assert store.load() == []
    assert db_session.get(StoredCollection, "cwt_employees") is None


def test_save_replaces_whole_collection(db_session: Session) -> None:
    store = CollectionStore(db_session, "cwt_categories")

    store.save(["Cutting", "Stitching"])
    store.save(["Pocket"])
    store.save(["Pocket"])
    db_session.commit()

    assert store.load() == ["Pocket"]
    assert db_session.query(StoredCollection).count() == 1


def test_entity_repository_crud(db_session: Session) -> None:
    repo = WorkshopRepository(db_session)
    asha = Employee(id="e1", name="Asha", role="Cutting")
    bala = Employee(id="e2", name="Bala", role="Stitching")

    repo.employees.add(asha)
    repo.employees.add(bala)
    assert [e.id for e in repo.employees.list()] == ["e1", "e2"]

    updated = repo.employees.update(replace(asha, role="Pocket"))
    assert updated is not None
    assert repo.employees.get("e1").role == "Pocket"
    assert repo.employees.update(Employee(id="missing", name="X", role="Y")) is None

    assert repo.employees.remove("e2") is True
    assert repo.employees.remove("e2") is False
    assert [e.id for e in repo.employees.list()] == ["e1"]


def test_add_first_puts_newest_on_top(db_session: Session) -> None:
    repo = WorkshopRepository(db_session)
    for number in ("1", "2"):
        repo.cuts.add(
            Cut(
                id=f"c{number}",
                cut_number=number,
                cut_name="Shirt",
                operations=(Operation(id=f"o{number}", name="Cutting", price=Decimal("1.75")),),
                total_pieces=60,
                bundles=tuple(generate_bundles(60, 50)),
                created_at=0,
            ),
            first=True,
        )
    db_session.commit()

    cuts = repo.cuts.list()
    assert [c.id for c in cuts] == ["c2", "c1"]
    assert cuts[0].operations[0].price == Decimal("1.75")
    assert len(cuts[0].bundles) == 2


def test_category_repository(db_session: Session) -> None:
    repo = WorkshopRepository(db_session)

    repo.categories.add("Cutting")
    repo.categories.add("Stitching")

    assert repo.categories.list() == ["Cutting", "Stitching"]
    assert repo.categories.remove("Cutting") is True
    assert repo.categories.remove("Cutting") is False
    assert repo.categories.list() == ["Stitching"]
