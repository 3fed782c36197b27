"""Production and payroll reporting service layer."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from io import BytesIO
from zoneinfo import ZoneInfo

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from cutwork.core.config import get_settings
from cutwork.models.entities import Assignment, Cut, Employee
from cutwork.repositories.workshop_repository import WorkshopRepository
from cutwork.services.aggregation import aggregate_employee_history, aggregate_matrix, breakdown_for_day
from cutwork.services.projection import (
    flatten_breakdown,
    flatten_history,
    flatten_matrix,
    project_assignment_log,
    project_breakdown,
    project_history,
    project_matrix,
)

logger = logging.getLogger(__name__)

ALL_ROLES = "all"


@dataclass(slots=True)
class ExportFilePayload:
    media_type: str
    filename: str
    content: bytes


@dataclass(slots=True)
class ShopSnapshot:
    employees: list[Employee]
    cuts: list[Cut]
    assignments: list[Assignment]


class ReportingService:
    """Report views recomputed from the stored collections on every call."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.repo = WorkshopRepository(db)
        self.settings = get_settings()
        self.tz = ZoneInfo(self.settings.report_timezone)

    def _snapshot(self) -> ShopSnapshot:
        return ShopSnapshot(
            employees=self.repo.employees.list(),
            cuts=self.repo.cuts.list(),
            assignments=self.repo.assignments.list(),
        )

    @staticmethod
    def _role_filter(role: str | None) -> str | None:
        if role is None or role == ALL_ROLES:
            return None
        return role

    def production_matrix(self, *, role: str | None = None) -> dict[str, object]:
        snapshot = self._snapshot()
        matrix = aggregate_matrix(snapshot.employees, snapshot.assignments, snapshot.cuts, self._role_filter(role))
        logger.debug(
            "Matrix built: %d columns, %d rows, %d pieces",
            len(matrix.columns),
            len(matrix.rows),
            matrix.grand_total_pieces,
        )
        return project_matrix(
            matrix,
            currency_label=self.settings.currency_label,
            no_data=self.settings.no_data_marker,
        )

    def employee_history(self, *, employee_id: str) -> dict[str, object]:
        snapshot = self._snapshot()
        history = aggregate_employee_history(
            employee_id,
            snapshot.assignments,
            snapshot.cuts,
            snapshot.employees,
            tz=self.tz,
        )
        return project_history(
            history,
            currency_label=self.settings.currency_label,
            no_data=self.settings.no_data_marker,
        )

    def daily_breakdown(self, *, employee_id: str, day: date) -> dict[str, object]:
        snapshot = self._snapshot()
        breakdown = breakdown_for_day(
            employee_id,
            day,
            snapshot.assignments,
            snapshot.cuts,
            snapshot.employees,
            tz=self.tz,
        )
        return project_breakdown(breakdown, currency_label=self.settings.currency_label)

    def assignment_log(self) -> list[dict[str, object]]:
        snapshot = self._snapshot()
        return project_assignment_log(snapshot.assignments, snapshot.employees, snapshot.cuts, tz=self.tz)

    # ---------- Export ----------
    def export_report(
        self,
        *,
        report_key: str,
        format_name: str,
        role: str | None = None,
        employee_id: str | None = None,
        day: date | None = None,
    ) -> ExportFilePayload:
        normalized_key = report_key.strip().lower()
        normalized_format = format_name.strip().lower()
        if normalized_format not in {"csv", "xlsx"}:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="format must be one of: csv, xlsx.",
            )

        if normalized_key == "matrix":
            table = flatten_matrix(self.production_matrix(role=role))
            base_filename = "production-matrix"
        elif normalized_key == "employee-history":
            if employee_id is None:
                raise HTTPException(
                    status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                    detail="employee_id is required for employee-history export.",
                )
            table = flatten_history(self.employee_history(employee_id=employee_id))
            base_filename = f"employee-history-{employee_id}"
        elif normalized_key == "daily-breakdown":
            if employee_id is None or day is None:
                raise HTTPException(
                    status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                    detail="employee_id and day are required for daily-breakdown export.",
                )
            table = flatten_breakdown(self.daily_breakdown(employee_id=employee_id, day=day))
            base_filename = f"daily-breakdown-{employee_id}-{day.isoformat()}"
        else:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Unknown report_key for export.",
            )

        logger.info("Exporting %s as %s (%d rows)", normalized_key, normalized_format, len(table.rows))

        if normalized_format == "csv":
            import csv
            import io

            sio = io.StringIO()
            writer = csv.writer(sio)
            writer.writerow(table.headers)
            writer.writerows(table.rows)
            return ExportFilePayload(
                media_type="text/csv; charset=utf-8",
                filename=f"{base_filename}.csv",
                content=sio.getvalue().encode("utf-8"),
            )

        # XLSX
        from openpyxl import Workbook

        workbook = Workbook()
        sheet = workbook.active
        sheet.title = "report"
        sheet.append(table.headers)
        for row in table.rows:
            sheet.append(row)

        output = BytesIO()
        workbook.save(output)
        return ExportFilePayload(
            media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            filename=f"{base_filename}.xlsx",
            content=output.getvalue(),
        )
