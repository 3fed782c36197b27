"""Bundle availability and operation eligibility for new assignments.

Both functions are pure and cheap enough to run on every selection change of
the entry form, so nothing is indexed ahead of time.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from cutwork.models.entities import Assignment, Bundle, Cut, Employee, Operation


def covered_pieces(
    cut_id: str,
    operation_id: str,
    assignments: Iterable[Assignment],
    exclude_assignment_id: str | None = None,
) -> set[int]:
    """Piece numbers already assigned for one cut and operation."""

    covered: set[int] = set()
    for assignment in assignments:
        if assignment.cut_id != cut_id or assignment.operation_id != operation_id:
            continue
        if exclude_assignment_id is not None and assignment.id == exclude_assignment_id:
            continue
        # Inverted ranges cover nothing.
        covered.update(range(assignment.start_piece, assignment.end_piece + 1))
    return covered


def available_bundles(
    cut: Cut,
    operation_id: str,
    assignments: Iterable[Assignment],
    exclude_assignment_id: str | None = None,
) -> list[Bundle]:
    """Bundles of ``cut`` that still have at least one unassigned piece.

    A partially covered bundle is returned in full; keeping new ranges clear
    of covered pieces is up to the caller. ``exclude_assignment_id`` lets an
    assignment being edited release its own range.
    """
    covered = covered_pieces(cut.id, operation_id, assignments, exclude_assignment_id)
    available: list[Bundle] = []
    for bundle in cut.bundles:
        taken = sum(1 for piece in range(bundle.start, bundle.end + 1) if piece in covered)
        if taken < bundle.piece_count:
            available.append(bundle)
    return available


def eligible_employees(employees: Sequence[Employee], operation: Operation) -> list[Employee]:
    """Employees whose role names the operation's department.

    Comparison ignores surrounding whitespace and case. Report role filters
    compare exactly; the two are intentionally not unified.
    """
    department = operation.name.strip().lower()
    return [employee for employee in employees if employee.role.strip().lower() == department]
