"""Domain and ORM model package."""

from cutwork.models.entities import (
    Assignment,
    Bundle,
    Cut,
    Employee,
    Operation,
    StoredCollection,
    new_id,
)

__all__ = [
    "Assignment",
    "Bundle",
    "Cut",
    "Employee",
    "Operation",
    "StoredCollection",
    "new_id",
]
