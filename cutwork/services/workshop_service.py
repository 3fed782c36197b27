"""Application service for shop entities and the assignment entry workflow."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time, timezone, tzinfo
from decimal import Decimal
from zoneinfo import ZoneInfo

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from cutwork.core.config import get_settings
from cutwork.models.entities import Assignment, Bundle, Cut, Employee, Operation, new_id
from cutwork.repositories.workshop_repository import WorkshopRepository
from cutwork.services.availability import available_bundles, covered_pieces, eligible_employees

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class EmployeeData:
    name: str
    role: str | None = None


@dataclass(slots=True)
class CutData:
    cut_number: str
    total_pieces: int
    rates: dict[str, Decimal] = field(default_factory=dict)
    cut_name: str | None = None
    bundle_size: int | None = None


@dataclass(slots=True)
class AssignmentData:
    employee_id: str
    cut_id: str
    operation_id: str
    bundle_id: str
    start_piece: int
    end_piece: int
    assigned_on: date


def generate_bundles(total_pieces: int, bundle_size: int) -> list[Bundle]:
    """Split pieces ``1..total_pieces`` into consecutive bundles of ``bundle_size``.

    The last bundle takes the remainder and may be shorter.
    """
    if total_pieces <= 0 or bundle_size <= 0:
        return []
    count = math.ceil(total_pieces / bundle_size)
    return [
        Bundle(
            id=new_id(),
            bundle_number=index + 1,
            start=index * bundle_size + 1,
            end=min((index + 1) * bundle_size, total_pieces),
        )
        for index in range(count)
    ]


def day_to_epoch_ms(value: date, tz: tzinfo = timezone.utc) -> int:
    """Epoch milliseconds of midnight of ``value`` in ``tz``."""

    return int(datetime.combine(value, time.min, tzinfo=tz).timestamp() * 1000)


def now_epoch_ms() -> int:
    return int(datetime.now(tz=timezone.utc).timestamp() * 1000)


def _unprocessable(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)


def _not_found(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class WorkshopService:
    """Entry workflows for categories, employees, cuts and assignments."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.repo = WorkshopRepository(db)
        self.settings = get_settings()
        # Entry dates are stored as midnight in the zone reports group days by.
        self.tz = ZoneInfo(self.settings.report_timezone)

    # ---------- Serialization ----------
    @staticmethod
    def serialize_employee(employee: Employee) -> dict[str, object]:
        return employee.to_dict()

    @staticmethod
    def serialize_cut(cut: Cut) -> dict[str, object]:
        return {
            "id": cut.id,
            "cut_number": cut.cut_number,
            "cut_name": cut.cut_name,
            "total_pieces": cut.total_pieces,
            "created_at": cut.created_at,
            "operations": [
                {"id": op.id, "name": op.name, "price": str(op.price)} for op in cut.operations
            ],
            "bundles": [
                {"id": b.id, "bundle_number": b.bundle_number, "start": b.start, "end": b.end}
                for b in cut.bundles
            ],
        }

    @staticmethod
    def serialize_bundle(bundle: Bundle) -> dict[str, object]:
        return {"id": bundle.id, "bundle_number": bundle.bundle_number, "start": bundle.start, "end": bundle.end}

    @staticmethod
    def serialize_assignment(assignment: Assignment) -> dict[str, object]:
        return {
            "id": assignment.id,
            "employee_id": assignment.employee_id,
            "cut_id": assignment.cut_id,
            "operation_id": assignment.operation_id,
            "bundle_id": assignment.bundle_id,
            "start_piece": assignment.start_piece,
            "end_piece": assignment.end_piece,
            "assigned_at": assignment.assigned_at,
        }

    # ---------- Categories ----------
    def list_categories(self) -> list[str]:
        return self.repo.categories.list()

    def add_category(self, name: str) -> str:
        normalized = name.strip()
        if not normalized:
            raise _unprocessable("Category name must not be empty.")
        if normalized in self.repo.categories.list():
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Category already exists.")
        self.repo.categories.add(normalized)
        self.db.commit()
        logger.info("Category added: %s", normalized)
        return normalized

    def remove_category(self, name: str) -> None:
        if not self.repo.categories.remove(name):
            raise _not_found("Category not found.")
        self.db.commit()
        logger.info("Category removed: %s", name)

    # ---------- Employees ----------
    def list_employees(self) -> list[Employee]:
        return self.repo.employees.list()

    def get_employee(self, employee_id: str) -> Employee:
        employee = self.repo.employees.get(employee_id)
        if employee is None:
            raise _not_found("Employee not found.")
        return employee

    def _resolve_role(self, role: str | None) -> str:
        normalized = (role or "").strip()
        if normalized:
            return normalized
        categories = self.repo.categories.list()
        if not categories:
            raise _unprocessable("Employee role is required when no categories exist.")
        return categories[0]

    def create_employee(self, data: EmployeeData) -> Employee:
        name = data.name.strip()
        if not name:
            raise _unprocessable("Employee name must not be empty.")
        employee = Employee(id=new_id(), name=name, role=self._resolve_role(data.role))
        self.repo.employees.add(employee)
        self.db.commit()
        logger.info("Employee created: %s (%s)", employee.id, employee.role)
        return employee

    def update_employee(self, employee_id: str, data: EmployeeData) -> Employee:
        current = self.get_employee(employee_id)
        name = data.name.strip()
        if not name:
            raise _unprocessable("Employee name must not be empty.")
        updated = replace(current, name=name, role=self._resolve_role(data.role))
        self.repo.employees.update(updated)
        self.db.commit()
        logger.info("Employee updated: %s", employee_id)
        return updated

    def delete_employee(self, employee_id: str) -> None:
        # Assignments keep pointing at the removed id and render as deleted.
        if not self.repo.employees.remove(employee_id):
            raise _not_found("Employee not found.")
        self.db.commit()
        logger.info("Employee deleted: %s", employee_id)

    # ---------- Cuts ----------
    def list_cuts(self) -> list[Cut]:
        return self.repo.cuts.list()

    def get_cut(self, cut_id: str) -> Cut:
        cut = self.repo.cuts.get(cut_id)
        if cut is None:
            raise _not_found("Cut not found.")
        return cut

    def _bundle_size(self, value: int | None) -> int:
        size = value if value is not None else self.settings.default_bundle_size
        if size <= 0:
            raise _unprocessable("bundle_size must be greater than zero.")
        return size

    @staticmethod
    def _operations(rates: dict[str, Decimal], existing: tuple[Operation, ...] = ()) -> tuple[Operation, ...]:
        by_name = {op.name: op for op in existing}
        operations: list[Operation] = []
        for name, price in rates.items():
            normalized = name.strip()
            if not normalized or price <= 0:
                continue
            previous = by_name.get(normalized)
            operation_id = previous.id if previous is not None else new_id()
            operations.append(Operation(id=operation_id, name=normalized, price=price))
        return tuple(operations)

    def _validate_cut(self, data: CutData, operations: tuple[Operation, ...]) -> None:
        if not data.cut_number.strip():
            raise _unprocessable("cut_number must not be empty.")
        if data.total_pieces <= 0:
            raise _unprocessable("total_pieces must be greater than zero.")
        if not operations:
            raise _unprocessable("At least one operation rate greater than zero is required.")

    def create_cut(self, data: CutData) -> Cut:
        operations = self._operations(data.rates)
        self._validate_cut(data, operations)
        cut = Cut(
            id=new_id(),
            cut_number=data.cut_number.strip(),
            cut_name=(data.cut_name or "").strip(),
            operations=operations,
            total_pieces=data.total_pieces,
            bundles=tuple(generate_bundles(data.total_pieces, self._bundle_size(data.bundle_size))),
            created_at=now_epoch_ms(),
        )
        self.repo.cuts.add(cut, first=True)
        self.db.commit()
        logger.info("Cut created: %s with %d bundles", cut.cut_number, len(cut.bundles))
        return cut

    def update_cut(self, cut_id: str, data: CutData) -> Cut:
        current = self.get_cut(cut_id)
        operations = self._operations(data.rates, current.operations)
        self._validate_cut(data, operations)

        bundles = current.bundles
        if data.total_pieces != current.total_pieces:
            # Assignments on the old bundles stay, with an unknown bundle number.
            bundles = tuple(generate_bundles(data.total_pieces, self._bundle_size(data.bundle_size)))
            logger.info("Cut %s bundles regenerated for %d pieces", cut_id, data.total_pieces)

        updated = replace(
            current,
            cut_number=data.cut_number.strip(),
            cut_name=(data.cut_name or "").strip(),
            operations=operations,
            total_pieces=data.total_pieces,
            bundles=bundles,
        )
        self.repo.cuts.update(updated)
        self.db.commit()
        logger.info("Cut updated: %s", cut_id)
        return updated

    def delete_cut(self, cut_id: str) -> None:
        if not self.repo.cuts.remove(cut_id):
            raise _not_found("Cut not found.")
        self.db.commit()
        logger.info("Cut deleted: %s", cut_id)

    def _cut_operation(self, cut_id: str, operation_id: str) -> tuple[Cut, Operation]:
        cut = self.get_cut(cut_id)
        operation = cut.operation(operation_id)
        if operation is None:
            raise _not_found("Operation not found on cut.")
        return cut, operation

    def list_available_bundles(
        self,
        cut_id: str,
        operation_id: str,
        exclude_assignment_id: str | None = None,
    ) -> list[Bundle]:
        cut, operation = self._cut_operation(cut_id, operation_id)
        return available_bundles(cut, operation.id, self.repo.assignments.list(), exclude_assignment_id)

    def list_eligible_employees(self, cut_id: str, operation_id: str) -> list[Employee]:
        _, operation = self._cut_operation(cut_id, operation_id)
        return eligible_employees(self.repo.employees.list(), operation)

    # ---------- Assignments ----------
    def list_assignments(self) -> list[Assignment]:
        return self.repo.assignments.list()

    def get_assignment(self, assignment_id: str) -> Assignment:
        assignment = self.repo.assignments.get(assignment_id)
        if assignment is None:
            raise _not_found("Assignment not found.")
        return assignment

    def _validate_assignment(self, data: AssignmentData, exclude_assignment_id: str | None = None) -> None:
        cut = self.repo.cuts.get(data.cut_id)
        if cut is None:
            raise _unprocessable("cut_id must reference an existing cut.")
        operation = cut.operation(data.operation_id)
        if operation is None:
            raise _unprocessable("operation_id must reference an operation of the cut.")
        employee = self.repo.employees.get(data.employee_id)
        if employee is None:
            raise _unprocessable("employee_id must reference an existing employee.")
        if not eligible_employees([employee], operation):
            raise _unprocessable("Employee role does not match the operation department.")
        bundle = cut.bundle(data.bundle_id)
        if bundle is None:
            raise _unprocessable("bundle_id must reference a bundle of the cut.")
        if data.start_piece > data.end_piece:
            raise _unprocessable("start_piece must be less than or equal to end_piece.")
        if data.start_piece < bundle.start or data.end_piece > bundle.end:
            raise _unprocessable(f"Piece range must lie within bundle {bundle.start}-{bundle.end}.")

        assignments = self.repo.assignments.list()
        if bundle not in available_bundles(cut, operation.id, assignments, exclude_assignment_id):
            raise _unprocessable("Bundle is fully assigned for this operation.")
        covered = covered_pieces(cut.id, operation.id, assignments, exclude_assignment_id)
        if any(piece in covered for piece in range(data.start_piece, data.end_piece + 1)):
            raise _unprocessable("Piece range overlaps pieces already assigned for this operation.")

    def create_assignment(self, data: AssignmentData) -> Assignment:
        self._validate_assignment(data)
        assignment = Assignment(
            id=new_id(),
            employee_id=data.employee_id,
            cut_id=data.cut_id,
            operation_id=data.operation_id,
            bundle_id=data.bundle_id,
            start_piece=data.start_piece,
            end_piece=data.end_piece,
            assigned_at=day_to_epoch_ms(data.assigned_on, self.tz),
        )
        self.repo.assignments.add(assignment, first=True)
        self.db.commit()
        logger.info(
            "Assignment created: %s pieces %d-%d for employee %s",
            assignment.id,
            assignment.start_piece,
            assignment.end_piece,
            assignment.employee_id,
        )
        return assignment

    def update_assignment(self, assignment_id: str, data: AssignmentData) -> Assignment:
        current = self.get_assignment(assignment_id)
        self._validate_assignment(data, exclude_assignment_id=assignment_id)
        updated = replace(
            current,
            employee_id=data.employee_id,
            cut_id=data.cut_id,
            operation_id=data.operation_id,
            bundle_id=data.bundle_id,
            start_piece=data.start_piece,
            end_piece=data.end_piece,
            assigned_at=day_to_epoch_ms(data.assigned_on, self.tz),
        )
        self.repo.assignments.update(updated)
        self.db.commit()
        logger.info("Assignment updated: %s", assignment_id)
        return updated

    def delete_assignment(self, assignment_id: str) -> None:
        if not self.repo.assignments.remove(assignment_id):
            raise _not_found("Assignment not found.")
        self.db.commit()
        logger.info("Assignment deleted: %s", assignment_id)
