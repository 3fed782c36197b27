"""Display projection of aggregated report views.

Pure formatting: values are rendered, never recomputed. Money is shown with two
decimals and cells with no assignments get the no-data marker, so an absent
cell never reads as a real zero.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import timezone, tzinfo
from decimal import ROUND_HALF_UP, Decimal

from cutwork.models.entities import Assignment, Cut, Employee
from cutwork.services.aggregation import (
    ColumnKey,
    DailyBreakdown,
    EmployeeHistory,
    ProductionMatrix,
    day_label,
    day_of,
)

Q2 = Decimal("0.01")
DEFAULT_NO_DATA = "-"

DELETED_EMPLOYEE = "Deleted employee"
UNKNOWN_CUT = "Unknown cut"
UNKNOWN_OPERATION = "Unknown operation"
UNKNOWN_BUNDLE = "??"


def format_money(value: Decimal) -> str:
    return str(value.quantize(Q2, rounding=ROUND_HALF_UP))


def format_rate(value: Decimal, currency_label: str) -> str:
    return f"{currency_label} {format_money(value)}".strip()


def format_bundle_number(bundle_number: int | None) -> str:
    return UNKNOWN_BUNDLE if bundle_number is None else f"#{bundle_number}"


def _column(key: ColumnKey, currency_label: str) -> dict[str, str]:
    return {
        "cut_name": key.cut_name,
        "operation_name": key.operation_name,
        "rate": format_money(key.price),
        "label": f"{key.cut_name} / {key.operation_name} ({format_rate(key.price, currency_label)})",
    }


def project_matrix(
    matrix: ProductionMatrix,
    *,
    currency_label: str = "",
    no_data: str = DEFAULT_NO_DATA,
) -> dict[str, object]:
    return {
        "currency": currency_label,
        "columns": [_column(key, currency_label) for key in matrix.columns],
        "rows": [
            {
                "employee_id": row.employee.id,
                "employee_name": row.employee.name,
                "role": row.employee.role,
                "cells": [
                    str(row.cells[key]) if key in row.cells else no_data for key in matrix.columns
                ],
                "total_pieces": row.total_pieces,
                "total_pay": format_money(row.total_pay),
            }
            for row in matrix.rows
        ],
        "grand_total_pieces": matrix.grand_total_pieces,
        "grand_total_pay": format_money(matrix.grand_total_pay),
        "inverted_assignment_ids": list(matrix.inverted_assignment_ids),
    }


def project_history(
    history: EmployeeHistory,
    *,
    currency_label: str = "",
    no_data: str = DEFAULT_NO_DATA,
) -> dict[str, object]:
    dates: list[dict[str, object]] = []
    for history_day in history.dates:
        cells: list[dict[str, str]] = []
        for key in history.columns:
            cell = history_day.cells.get(key)
            if cell is None:
                cells.append({"pieces": no_data, "pay": no_data})
            else:
                cells.append({"pieces": str(cell.pieces), "pay": format_money(cell.pay)})
        dates.append(
            {
                "date": history_day.day.isoformat(),
                "label": history_day.label,
                "cells": cells,
                "total_pieces": history_day.total_pieces,
                "total_pay": format_money(history_day.total_pay),
            }
        )

    return {
        "employee_id": history.employee_id,
        "employee_name": history.employee.name if history.employee is not None else DELETED_EMPLOYEE,
        "currency": currency_label,
        "columns": [_column(key, currency_label) for key in history.columns],
        "dates": dates,
        "total_pieces": history.total_pieces,
        "total_pay": format_money(history.total_pay),
        "inverted_assignment_ids": list(history.inverted_assignment_ids),
    }


def project_breakdown(breakdown: DailyBreakdown, *, currency_label: str = "") -> dict[str, object]:
    return {
        "employee_id": breakdown.employee_id,
        "date": breakdown.day.isoformat(),
        "label": breakdown.label,
        "currency": currency_label,
        "products": [
            {
                "product_name": product.product_name,
                "total_pieces": product.total_pieces,
                "total_amount": format_money(product.total_amount),
                "cuts": [
                    {
                        "cut_number": group.cut_number,
                        "total_pieces": group.total_pieces,
                        "total_amount": format_money(group.total_amount),
                        "lines": [
                            {
                                "assignment_id": line.assignment_id,
                                "operation_name": line.operation_name,
                                "bundle": format_bundle_number(line.bundle_number),
                                "range": line.range_label,
                                "pieces": line.pieces,
                                "rate": format_money(line.rate),
                                "amount": format_money(line.amount),
                            }
                            for line in group.lines
                        ],
                    }
                    for group in product.cuts.values()
                ],
            }
            for product in breakdown.products
        ],
        "total_pieces": breakdown.total_pieces,
        "total_amount": format_money(breakdown.total_amount),
        "inverted_assignment_ids": list(breakdown.inverted_assignment_ids),
    }


def project_assignment_log(
    assignments: Sequence[Assignment],
    employees: Sequence[Employee],
    cuts: Sequence[Cut],
    *,
    tz: tzinfo = timezone.utc,
) -> list[dict[str, object]]:
    """Recorded assignments with placeholders for anything since deleted."""

    employee_lookup = {employee.id: employee for employee in employees}
    cut_lookup = {cut.id: cut for cut in cuts}
    rows: list[dict[str, object]] = []
    for assignment in assignments:
        employee = employee_lookup.get(assignment.employee_id)
        cut = cut_lookup.get(assignment.cut_id)
        operation = cut.operation(assignment.operation_id) if cut is not None else None
        bundle = cut.bundle(assignment.bundle_id) if cut is not None else None
        rows.append(
            {
                "id": assignment.id,
                "date": day_label(day_of(assignment.assigned_at, tz)),
                "employee_name": employee.name if employee is not None else DELETED_EMPLOYEE,
                "cut_number": cut.cut_number if cut is not None else UNKNOWN_CUT,
                "cut_name": (cut.cut_name or "") if cut is not None else "",
                "operation_name": operation.name if operation is not None else UNKNOWN_OPERATION,
                "bundle": format_bundle_number(bundle.bundle_number if bundle is not None else None),
                "range": f"{assignment.start_piece} - {assignment.end_piece}",
                "pieces": assignment.piece_count,
            }
        )
    return rows


@dataclass(slots=True)
class ExportTable:
    """Header row plus positional data rows; cells line up by index, not by label."""

    headers: list[str]
    rows: list[list[object]]


def _unique_headers(labels: Sequence[str]) -> list[str]:
    # Distinct columns can render to the same label; number the repeats.
    seen: dict[str, int] = {}
    headers: list[str] = []
    for label in labels:
        count = seen.get(label, 0) + 1
        seen[label] = count
        headers.append(label if count == 1 else f"{label} [{count}]")
    return headers


def flatten_matrix(projected: dict[str, object]) -> ExportTable:
    labels = [column["label"] for column in projected["columns"]]  # type: ignore[union-attr]
    headers = _unique_headers(["employee", "role", *labels, "total_pieces", "total_pay"])
    rows: list[list[object]] = [
        [row["employee_name"], row["role"], *row["cells"], row["total_pieces"], row["total_pay"]]
        for row in projected["rows"]  # type: ignore[union-attr]
    ]
    rows.append(
        ["TOTAL", "", *([""] * len(labels)), projected["grand_total_pieces"], projected["grand_total_pay"]]
    )
    return ExportTable(headers=headers, rows=rows)


def flatten_history(projected: dict[str, object]) -> ExportTable:
    labels = [column["label"] for column in projected["columns"]]  # type: ignore[union-attr]
    headers = _unique_headers(["date", *labels, "total_pieces", "total_pay"])
    rows: list[list[object]] = [
        [
            history_day["label"],
            *(cell["pieces"] for cell in history_day["cells"]),
            history_day["total_pieces"],
            history_day["total_pay"],
        ]
        for history_day in projected["dates"]  # type: ignore[union-attr]
    ]
    rows.append(["TOTAL", *([""] * len(labels)), projected["total_pieces"], projected["total_pay"]])
    return ExportTable(headers=headers, rows=rows)


BREAKDOWN_HEADERS = ["product", "cut_number", "operation", "bundle", "range", "pieces", "rate", "amount"]


def flatten_breakdown(projected: dict[str, object]) -> ExportTable:
    rows: list[list[object]] = []
    for product in projected["products"]:  # type: ignore[union-attr]
        for group in product["cuts"]:
            for line in group["lines"]:
                rows.append(
                    [
                        product["product_name"],
                        group["cut_number"],
                        line["operation_name"],
                        line["bundle"],
                        line["range"],
                        line["pieces"],
                        line["rate"],
                        line["amount"],
                    ]
                )
    rows.append(["TOTAL", "", "", "", "", projected["total_pieces"], "", projected["total_amount"]])
    return ExportTable(headers=list(BREAKDOWN_HEADERS), rows=rows)
