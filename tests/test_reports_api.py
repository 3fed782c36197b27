from __future__ import annotations

import csv
import io
import logging
from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from openpyxl import load_workbook

from cutwork.core.config import get_settings

API = "/api/v1"


@pytest.fixture()
def shop(client: TestClient) -> dict[str, object]:
    """Asha cut 50 pieces and Bala stitched 20 on 10 Jan; Asha cut 10 more on 11 Jan."""

    asha = client.post(f"{API}/employees", json={"name": "Asha", "role": "Cutting"}).json()
    bala = client.post(f"{API}/employees", json={"name": "Bala", "role": "Stitching"}).json()
    cut = client.post(
        f"{API}/cuts",
        json={
            "cut_number": "A-101",
            "cut_name": "Shirt",
            "total_pieces": 120,
            "bundle_size": 50,
            "rates": {"Cutting": "2.5", "Stitching": "1.25"},
        },
    ).json()
    cutting, stitching = cut["operations"]
    bundle_1, bundle_2 = cut["bundles"][:2]

    for employee, operation, bundle, start, end, day in (
        (asha, cutting, bundle_1, 1, 50, "2024-01-10"),
        (bala, stitching, bundle_1, 1, 20, "2024-01-10"),
        (asha, cutting, bundle_2, 51, 60, "2024-01-11"),
    ):
        response = client.post(
            f"{API}/assignments",
            json={
                "employee_id": employee["id"],
                "cut_id": cut["id"],
                "operation_id": operation["id"],
                "bundle_id": bundle["id"],
                "start_piece": start,
                "end_piece": end,
                "assigned_on": day,
            },
        )
        assert response.status_code == 201

    return {"asha": asha, "bala": bala, "cut": cut}


def test_matrix_report(client: TestClient, shop: dict[str, object]) -> None:
    report = client.get(f"{API}/reports/matrix").json()

    assert [column["label"] for column in report["columns"]] == [
        "Shirt / Cutting (Rs 2.50)",
        "Shirt / Stitching (Rs 1.25)",
    ]
    rows = {row["employee_name"]: row for row in report["rows"]}
    assert rows["Asha"]["cells"] == ["60", "-"]
    assert rows["Asha"]["total_pay"] == "150.00"
    assert rows["Bala"]["cells"] == ["-", "20"]
    assert rows["Bala"]["total_pay"] == "25.00"
    assert report["grand_total_pieces"] == 80
    assert report["grand_total_pay"] == "175.00"


def test_matrix_report_role_filter(client: TestClient, shop: dict[str, object]) -> None:
    filtered = client.get(f"{API}/reports/matrix", params={"role": "Stitching"}).json()
    everyone = client.get(f"{API}/reports/matrix", params={"role": "all"}).json()

    assert [row["employee_name"] for row in filtered["rows"]] == ["Bala"]
    assert [column["operation_name"] for column in filtered["columns"]] == ["Stitching"]
    assert len(everyone["rows"]) == 2


def test_employee_history_report(client: TestClient, shop: dict[str, object]) -> None:
    asha = shop["asha"]

    report = client.get(f"{API}/reports/employees/{asha['id']}/history").json()

    assert report["employee_name"] == "Asha"
    assert [day["label"] for day in report["dates"]] == ["11 Jan 2024", "10 Jan 2024"]
    assert [day["total_pay"] for day in report["dates"]] == ["25.00", "125.00"]
    assert report["total_pieces"] == 60


def test_daily_breakdown_report(client: TestClient, shop: dict[str, object]) -> None:
    asha = shop["asha"]

    report = client.get(f"{API}/reports/employees/{asha['id']}/days/2024-01-10").json()

    assert report["label"] == "10 Jan 2024"
    product = report["products"][0]
    assert product["product_name"] == "Shirt"
    line = product["cuts"][0]["lines"][0]
    assert (line["bundle"], line["range"], line["amount"]) == ("#1", "1 - 50", "125.00")
    assert report["total_amount"] == "125.00"

    empty = client.get(f"{API}/reports/employees/{asha['id']}/days/2024-02-01").json()
    assert empty["products"] == []
    assert empty["total_pieces"] == 0


def test_deleted_employee_leaves_reports(client: TestClient, shop: dict[str, object]) -> None:
    asha = shop["asha"]
    client.delete(f"{API}/employees/{asha['id']}")

    matrix = client.get(f"{API}/reports/matrix").json()
    history = client.get(f"{API}/reports/employees/{asha['id']}/history").json()
    log = client.get(f"{API}/assignments/log").json()["items"]

    assert [row["employee_name"] for row in matrix["rows"]] == ["Bala"]
    assert matrix["grand_total_pay"] == "25.00"
    assert history["dates"] == []
    assert history["employee_name"] == "Deleted employee"
    assert sum(1 for row in log if row["employee_name"] == "Deleted employee") == 2


def test_edited_cut_shows_unknown_bundle(client: TestClient, shop: dict[str, object]) -> None:
    asha, cut = shop["asha"], shop["cut"]
    client.put(
        f"{API}/cuts/{cut['id']}",
        json={"cut_number": "A-101", "cut_name": "Shirt", "total_pieces": 100, "rates": {"Cutting": "2.5", "Stitching": "1.25"}},
    )

    report = client.get(f"{API}/reports/employees/{asha['id']}/days/2024-01-11").json()

    assert report["products"][0]["cuts"][0]["lines"][0]["bundle"] == "??"
    assert report["total_amount"] == "25.00"


def test_csv_export(client: TestClient, shop: dict[str, object]) -> None:
    response = client.get(f"{API}/exports/matrix", params={"format": "csv"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert 'filename="production-matrix.csv"' in response.headers["content-disposition"]
    rows = list(csv.DictReader(io.StringIO(response.text)))
    assert rows[0]["employee"] == "Asha"
    assert rows[0]["Shirt / Cutting (Rs 2.50)"] == "60"
    assert rows[-1]["employee"] == "TOTAL"
    assert rows[-1]["total_pay"] == "175.00"


def test_xlsx_export(client: TestClient, shop: dict[str, object]) -> None:
    asha = shop["asha"]

    response = client.get(
        f"{API}/exports/daily-breakdown",
        params={"format": "xlsx", "employee_id": asha["id"], "day": "2024-01-10"},
    )

    assert response.status_code == 200
    sheet = load_workbook(io.BytesIO(response.content)).active
    values = list(sheet.values)
    assert values[0][:3] == ("product", "cut_number", "operation")
    assert values[1][0] == "Shirt"
    assert values[-1][0] == "TOTAL"


def test_export_errors(client: TestClient, shop: dict[str, object]) -> None:
    assert client.get(f"{API}/exports/unknown").status_code == 404
    assert client.get(f"{API}/exports/matrix", params={"format": "pdf"}).status_code == 422
    assert client.get(f"{API}/exports/employee-history", params={"format": "csv"}).status_code == 422


@pytest.fixture()
def new_york_reports(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    monkeypatch.setenv("REPORT_TIMEZONE", "America/New_York")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_entered_day_survives_report_timezone(new_york_reports: None, client: TestClient) -> None:
    asha = client.post(f"{API}/employees", json={"name": "Asha", "role": "Cutting"}).json()
    cut = client.post(
        f"{API}/cuts",
        json={"cut_number": "A-101", "total_pieces": 50, "rates": {"Cutting": "2.5"}},
    ).json()

    created = client.post(
        f"{API}/assignments",
        json={
            "employee_id": asha["id"],
            "cut_id": cut["id"],
            "operation_id": cut["operations"][0]["id"],
            "bundle_id": cut["bundles"][0]["id"],
            "start_piece": 1,
            "end_piece": 50,
            "assigned_on": "2024-01-10",
        },
    ).json()
    history = client.get(f"{API}/reports/employees/{asha['id']}/history").json()
    breakdown = client.get(f"{API}/reports/employees/{asha['id']}/days/2024-01-10").json()

    # Midnight in New York is 05:00 UTC.
    assert created["assigned_at"] == 1704862800000
    assert [day["date"] for day in history["dates"]] == ["2024-01-10"]
    assert breakdown["total_pieces"] == 50
    assert breakdown["total_amount"] == "125.00"


@pytest.mark.parametrize("format_name", ["csv", "xlsx"])
def test_export_is_logged_for_every_format(
    client: TestClient, shop: dict[str, object], caplog: pytest.LogCaptureFixture, format_name: str
) -> None:
    with caplog.at_level(logging.INFO, logger="cutwork"):
        response = client.get(f"{API}/exports/matrix", params={"format": format_name})

    assert response.status_code == 200
    assert f"Exporting matrix as {format_name} (3 rows)" in caplog.text
