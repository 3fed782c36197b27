"""Assignment aggregation engine.

Folds the flat assignment list into the three report views:

* production matrix: employee x (cut name, operation, price)
* employee daily history: one employee, calendar day x (cut name, operation, price)
* daily breakdown: one employee and day, product -> cut number -> line items

Every view applies the same join. An assignment whose employee, cut or
operation cannot be resolved is left out of all totals; a missing bundle only
blanks the bundle number. Views are recomputed from scratch on each call.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timezone, tzinfo
from decimal import Decimal
from typing import NamedTuple

from cutwork.models.entities import Assignment, Bundle, Cut, Employee, Operation

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
NOT_NAMED = "N/A"
UNNAMED_PRODUCT = "Unnamed Product"
UNKNOWN_CUT_NUMBER = "Unknown"
DAY_LABEL_FORMAT = "%d %b %Y"


class ColumnKey(NamedTuple):
    """Report column identity: same name at a different price is a different column."""

    cut_name: str
    operation_name: str
    price: Decimal

    @property
    def label(self) -> str:
        return f"{self.cut_name} / {self.operation_name} @ {self.price}"


def column_key(cut: Cut, operation: Operation) -> ColumnKey:
    return ColumnKey(cut.cut_name or NOT_NAMED, operation.name, operation.price)


def day_of(assigned_at: int, tz: tzinfo = timezone.utc) -> date:
    """Calendar day of an epoch-millisecond timestamp in ``tz``."""

    return datetime.fromtimestamp(assigned_at / 1000, tz=tz).date()


def day_label(day: date) -> str:
    return day.strftime(DAY_LABEL_FORMAT)


@dataclass(frozen=True, slots=True)
class ResolvedAssignment:
    assignment: Assignment
    cut: Cut
    operation: Operation
    employee: Employee | None
    bundle: Bundle | None

    @property
    def pieces(self) -> int:
        return self.assignment.piece_count

    @property
    def pay(self) -> Decimal:
        return self.pieces * self.operation.price

    @property
    def column(self) -> ColumnKey:
        return column_key(self.cut, self.operation)


@dataclass(frozen=True, slots=True)
class ReferenceIndex:
    """Id lookups built once per aggregation call."""

    employees: dict[str, Employee]
    cuts: dict[str, Cut]

    @classmethod
    def build(cls, employees: Iterable[Employee] | None, cuts: Iterable[Cut]) -> ReferenceIndex:
        return cls(
            employees={employee.id: employee for employee in employees or ()},
            cuts={cut.id: cut for cut in cuts},
        )

    def resolve(self, assignment: Assignment, *, require_employee: bool = True) -> ResolvedAssignment | None:
        employee = self.employees.get(assignment.employee_id)
        if require_employee and employee is None:
            logger.debug("Assignment %s skipped: employee %s not found", assignment.id, assignment.employee_id)
            return None
        cut = self.cuts.get(assignment.cut_id)
        if cut is None:
            logger.debug("Assignment %s skipped: cut %s not found", assignment.id, assignment.cut_id)
            return None
        operation = cut.operation(assignment.operation_id)
        if operation is None:
            logger.debug("Assignment %s skipped: operation %s not found", assignment.id, assignment.operation_id)
            return None
        return ResolvedAssignment(
            assignment=assignment,
            cut=cut,
            operation=operation,
            employee=employee,
            bundle=cut.bundle(assignment.bundle_id),
        )


def _note_inverted(resolved: ResolvedAssignment, inverted: list[str]) -> None:
    if resolved.assignment.is_inverted:
        logger.warning(
            "Assignment %s has inverted piece range %s-%s; counted as %s pieces",
            resolved.assignment.id,
            resolved.assignment.start_piece,
            resolved.assignment.end_piece,
            resolved.pieces,
        )
        inverted.append(resolved.assignment.id)


# ---------- Production matrix ----------
@dataclass(slots=True)
class MatrixRow:
    employee: Employee
    cells: dict[ColumnKey, int] = field(default_factory=dict)
    total_pieces: int = 0
    total_pay: Decimal = ZERO


@dataclass(slots=True)
class ProductionMatrix:
    columns: list[ColumnKey]
    rows: list[MatrixRow]
    grand_total_pieces: int
    grand_total_pay: Decimal
    inverted_assignment_ids: list[str] = field(default_factory=list)


def _employee_sort_key(employee: Employee) -> tuple[str, str, str]:
    return (employee.name.casefold(), employee.name, employee.id)


def aggregate_matrix(
    employees: Sequence[Employee],
    assignments: Iterable[Assignment],
    cuts: Sequence[Cut],
    role_filter: str | None = None,
) -> ProductionMatrix:
    """Pivot pieces per employee and column, with row and grand totals.

    ``role_filter`` keeps only employees whose role equals it exactly.
    """
    index = ReferenceIndex.build(employees, cuts)
    columns: dict[ColumnKey, None] = {}
    rows: dict[str, MatrixRow] = {}
    inverted: list[str] = []

    for assignment in assignments:
        resolved = index.resolve(assignment)
        if resolved is None or resolved.employee is None:
            continue
        employee = resolved.employee
        if role_filter is not None and employee.role != role_filter:
            continue

        _note_inverted(resolved, inverted)
        key = resolved.column
        columns.setdefault(key, None)
        row = rows.get(employee.id)
        if row is None:
            row = rows[employee.id] = MatrixRow(employee=employee)
        row.cells[key] = row.cells.get(key, 0) + resolved.pieces
        row.total_pieces += resolved.pieces
        row.total_pay += resolved.pay

    sorted_rows = sorted(rows.values(), key=lambda row: _employee_sort_key(row.employee))
    return ProductionMatrix(
        columns=list(columns),
        rows=sorted_rows,
        grand_total_pieces=sum((row.total_pieces for row in sorted_rows), 0),
        grand_total_pay=sum((row.total_pay for row in sorted_rows), ZERO),
        inverted_assignment_ids=inverted,
    )


# ---------- Employee daily history ----------
@dataclass(slots=True)
class CellTotal:
    pieces: int = 0
    pay: Decimal = ZERO


@dataclass(slots=True)
class HistoryDay:
    day: date
    cells: dict[ColumnKey, CellTotal] = field(default_factory=dict)
    total_pieces: int = 0
    total_pay: Decimal = ZERO

    @property
    def label(self) -> str:
        return day_label(self.day)


@dataclass(slots=True)
class EmployeeHistory:
    employee_id: str
    employee: Employee | None
    columns: list[ColumnKey]
    dates: list[HistoryDay]
    total_pieces: int
    total_pay: Decimal
    inverted_assignment_ids: list[str] = field(default_factory=list)


def aggregate_employee_history(
    employee_id: str,
    assignments: Iterable[Assignment],
    cuts: Sequence[Cut],
    employees: Sequence[Employee] | None = None,
    *,
    tz: tzinfo = timezone.utc,
) -> EmployeeHistory:
    """Per-day totals for one employee, most recent day first.

    When ``employees`` is given and ``employee_id`` is not among them the
    history is empty, matching the matrix which drops unknown employees.
    """
    index = ReferenceIndex.build(employees, cuts)
    employee = index.employees.get(employee_id)
    if employees is not None and employee is None:
        return EmployeeHistory(employee_id, None, [], [], 0, ZERO)

    columns: dict[ColumnKey, None] = {}
    days: dict[date, HistoryDay] = {}
    inverted: list[str] = []

    for assignment in assignments:
        if assignment.employee_id != employee_id:
            continue
        resolved = index.resolve(assignment, require_employee=False)
        if resolved is None:
            continue

        _note_inverted(resolved, inverted)
        key = resolved.column
        columns.setdefault(key, None)
        day = day_of(assignment.assigned_at, tz)
        history_day = days.get(day)
        if history_day is None:
            history_day = days[day] = HistoryDay(day=day)
        cell = history_day.cells.setdefault(key, CellTotal())
        cell.pieces += resolved.pieces
        cell.pay += resolved.pay
        history_day.total_pieces += resolved.pieces
        history_day.total_pay += resolved.pay

    ordered = sorted(days.values(), key=lambda item: item.day, reverse=True)
    return EmployeeHistory(
        employee_id=employee_id,
        employee=employee,
        columns=list(columns),
        dates=ordered,
        total_pieces=sum((item.total_pieces for item in ordered), 0),
        total_pay=sum((item.total_pay for item in ordered), ZERO),
        inverted_assignment_ids=inverted,
    )


# ---------- Daily breakdown ----------
@dataclass(frozen=True, slots=True)
class BreakdownLine:
    assignment_id: str
    operation_name: str
    bundle_number: int | None
    start_piece: int
    end_piece: int
    pieces: int
    rate: Decimal
    amount: Decimal

    @property
    def range_label(self) -> str:
        return f"{self.start_piece} - {self.end_piece}"


@dataclass(slots=True)
class CutNumberGroup:
    cut_number: str
    lines: list[BreakdownLine] = field(default_factory=list)
    total_pieces: int = 0
    total_amount: Decimal = ZERO


@dataclass(slots=True)
class ProductGroup:
    product_name: str
    cuts: dict[str, CutNumberGroup] = field(default_factory=dict)
    total_pieces: int = 0
    total_amount: Decimal = ZERO


@dataclass(slots=True)
class DailyBreakdown:
    employee_id: str
    day: date
    products: list[ProductGroup]
    total_pieces: int
    total_amount: Decimal
    inverted_assignment_ids: list[str] = field(default_factory=list)

    @property
    def label(self) -> str:
        return day_label(self.day)

    @property
    def is_empty(self) -> bool:
        return not self.products


def breakdown_for_day(
    employee_id: str,
    day: date,
    assignments: Iterable[Assignment],
    cuts: Sequence[Cut],
    employees: Sequence[Employee] | None = None,
    *,
    tz: tzinfo = timezone.utc,
) -> DailyBreakdown:
    """Line items of one employee on one day, grouped by product then cut number.

    Cut numbers are kept so totals can be checked against bundle tags.
    """
    index = ReferenceIndex.build(employees, cuts)
    if employees is not None and employee_id not in index.employees:
        return DailyBreakdown(employee_id, day, [], 0, ZERO)

    products: dict[str, ProductGroup] = {}
    inverted: list[str] = []
    for assignment in assignments:
        if assignment.employee_id != employee_id or day_of(assignment.assigned_at, tz) != day:
            continue
        resolved = index.resolve(assignment, require_employee=False)
        if resolved is None:
            continue

        _note_inverted(resolved, inverted)
        line = BreakdownLine(
            assignment_id=assignment.id,
            operation_name=resolved.operation.name,
            bundle_number=resolved.bundle.bundle_number if resolved.bundle is not None else None,
            start_piece=assignment.start_piece,
            end_piece=assignment.end_piece,
            pieces=resolved.pieces,
            rate=resolved.operation.price,
            amount=resolved.pay,
        )
        product_name = resolved.cut.cut_name or UNNAMED_PRODUCT
        product = products.get(product_name)
        if product is None:
            product = products[product_name] = ProductGroup(product_name=product_name)
        cut_number = resolved.cut.cut_number or UNKNOWN_CUT_NUMBER
        group = product.cuts.get(cut_number)
        if group is None:
            group = product.cuts[cut_number] = CutNumberGroup(cut_number=cut_number)

        group.lines.append(line)
        group.total_pieces += line.pieces
        group.total_amount += line.amount
        product.total_pieces += line.pieces
        product.total_amount += line.amount

    groups = list(products.values())
    return DailyBreakdown(
        employee_id=employee_id,
        day=day,
        products=groups,
        total_pieces=sum((group.total_pieces for group in groups), 0),
        total_amount=sum((group.total_amount for group in groups), ZERO),
        inverted_assignment_ids=inverted,
    )
