"""Domain entities for the cutting shop and the ORM row that stores them."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from cutwork.db.base import Base


def new_id() -> str:
    """Opaque random identifier assigned at creation time."""

    return str(uuid.uuid4())


def to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps 2.5 as Decimal("2.5") instead of the binary float expansion.
    return Decimal(str(value))


def _json_number(value: Decimal) -> int | float:
    if value == value.to_integral_value():
        return int(value)
    return float(value)


class _Entity:
    """Identity semantics shared by all entities: equal when ids match."""

    __slots__ = ()

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.id == other.id  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.id))  # type: ignore[attr-defined]


@dataclass(frozen=True, slots=True, eq=False)
class Employee(_Entity):
    id: str
    name: str
    # Free-text department label, expected to match a category.
    role: str

    def to_dict(self) -> dict[str, object]:
        return {"id": self.id, "name": self.name, "role": self.role}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Employee:
        return cls(id=str(data["id"]), name=str(data["name"]), role=str(data.get("role", "")))


@dataclass(frozen=True, slots=True, eq=False)
class Operation(_Entity):
    id: str
    name: str
    price: Decimal

    def to_dict(self) -> dict[str, object]:
        return {"id": self.id, "name": self.name, "price": _json_number(self.price)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Operation:
        return cls(id=str(data["id"]), name=str(data["name"]), price=to_decimal(data["price"]))


@dataclass(frozen=True, slots=True, eq=False)
class Bundle(_Entity):
    id: str
    bundle_number: int
    start: int
    end: int

    @property
    def piece_count(self) -> int:
        return self.end - self.start + 1

    def to_dict(self) -> dict[str, object]:
        return {"id": self.id, "bundleNumber": self.bundle_number, "start": self.start, "end": self.end}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Bundle:
        return cls(
            id=str(data["id"]),
            bundle_number=int(data["bundleNumber"]),
            start=int(data["start"]),
            end=int(data["end"]),
        )


@dataclass(frozen=True, slots=True, eq=False)
class Cut(_Entity):
    id: str
    cut_number: str
    total_pieces: int
    created_at: int
    cut_name: str | None = None
    operations: tuple[Operation, ...] = field(default_factory=tuple)
    bundles: tuple[Bundle, ...] = field(default_factory=tuple)

    def operation(self, operation_id: str) -> Operation | None:
        return next((op for op in self.operations if op.id == operation_id), None)

    def bundle(self, bundle_id: str) -> Bundle | None:
        return next((b for b in self.bundles if b.id == bundle_id), None)

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "cutNumber": self.cut_number,
            "cutName": self.cut_name,
            "operations": [op.to_dict() for op in self.operations],
            "totalPieces": self.total_pieces,
            "bundles": [b.to_dict() for b in self.bundles],
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Cut:
        return cls(
            id=str(data["id"]),
            cut_number=str(data["cutNumber"]),
            cut_name=data.get("cutName"),
            operations=tuple(Operation.from_dict(op) for op in data.get("operations", [])),
            total_pieces=int(data["totalPieces"]),
            bundles=tuple(Bundle.from_dict(b) for b in data.get("bundles", [])),
            created_at=int(data.get("createdAt", 0)),
        )


@dataclass(frozen=True, slots=True, eq=False)
class Assignment(_Entity):
    """One worker completing pieces ``start_piece..end_piece`` (inclusive) of a bundle."""

    id: str
    employee_id: str
    cut_id: str
    operation_id: str
    bundle_id: str
    start_piece: int
    end_piece: int
    # Epoch milliseconds.
    assigned_at: int

    @property
    def piece_count(self) -> int:
        # Literal count; negative when the range is inverted.
        return self.end_piece - self.start_piece + 1

    @property
    def is_inverted(self) -> bool:
        return self.end_piece < self.start_piece

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "employeeId": self.employee_id,
            "cutId": self.cut_id,
            "operationId": self.operation_id,
            "bundleId": self.bundle_id,
            "startPiece": self.start_piece,
            "endPiece": self.end_piece,
            "assignedAt": self.assigned_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Assignment:
        return cls(
            id=str(data["id"]),
            employee_id=str(data["employeeId"]),
            cut_id=str(data["cutId"]),
            operation_id=str(data["operationId"]),
            bundle_id=str(data["bundleId"]),
            start_piece=int(data["startPiece"]),
            end_piece=int(data["endPiece"]),
            assigned_at=int(data["assignedAt"]),
        )


class StoredCollection(Base):
    """Whole-collection JSON payload stored under a fixed key."""

    __tablename__ = "stored_collections"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    payload: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
