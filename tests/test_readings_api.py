"""
tests/test_readings_api.py

HTTP-level tests for the readings router. The database dependency is
overridden with the in-memory test session; the lifespan checks are not run.
"""

from __future__ import annotations

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.main import app
from app.services.reading_import_service import ReadingImportService, get_reading_import_service
from db.session import get_db

LINKY_CSV = "Date;Heure;Valeur (en Wh)\n01/03/2024;14:30;500\n01/03/2024;15:30;750"


@pytest.fixture()
def client(
    db_session: Session,
    import_service: ReadingImportService,
) -> Generator[TestClient, None, None]:
    def _override_db() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[get_db] = _override_db
    app.dependency_overrides[get_reading_import_service] = lambda: import_service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_supported_formats(client: TestClient) -> None:
    response = client.get("/readings/formats")

    assert response.status_code == 200
    body = response.json()
    assert body["formats"] == ["linky", "enedis", "totalenergies", "edf", "edf_detail", "generic"]
    assert body["defaultFormat"] == "linky"


def test_import_pasted_csv(client: TestClient) -> None:
    response = client.post("/readings/import", json={"data": LINKY_CSV, "format": "linky"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "2 readings imported from LINKY"
    assert body["count"] == 2
    assert body["totalKwh"] == 1.25
    assert body["avgDailyKwh"] == 1.25
    assert body["dateRange"]["days"] == 1
    assert body["dateRange"]["from"].startswith("2024-03-01T14:30:00")
    assert body["dateRange"]["to"].startswith("2024-03-01T15:30:00")
    assert body["insertedCount"] == 2
    assert "warnings" not in body


def test_import_uses_default_format(client: TestClient) -> None:
    response = client.post("/readings/import", json={"data": LINKY_CSV})

    assert response.status_code == 200
    assert response.json()["format"] == "linky"


def test_import_reports_row_warnings(client: TestClient) -> None:
    raw = "date,value\n2024-03-01T00:00:00,1\nnot-a-date,2\n"

    response = client.post("/readings/import", json={"data": raw, "format": "generic"})

    assert response.status_code == 200
    body = response.json()
    assert body["rowsFailed"] == 1
    assert body["warnings"] == ['Row 2: Invalid date "not-a-date"']


def test_dry_run_returns_readings_without_storing(client: TestClient) -> None:
    response = client.post(
        "/readings/import",
        params={"dry_run": "true"},
        json={"data": LINKY_CSV, "format": "linky"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 2
    assert [item["value"] for item in body["readings"]] == [0.5, 0.75]
    assert client.get("/readings").json()["meta"]["count"] == 0


def test_unknown_format_is_bad_request(client: TestClient) -> None:
    response = client.post("/readings/import", json={"data": LINKY_CSV, "format": "gazpar"})

    assert response.status_code == 400
    assert response.json()["detail"].startswith("Unknown format: gazpar. Supported: linky")


def test_no_valid_rows_is_bad_request(client: TestClient) -> None:
    raw = "date,value\n,1\n,2\n"

    response = client.post("/readings/import", json={"data": raw, "format": "generic"})

    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["message"].startswith("No valid readings could be extracted.")
    assert [error["code"] for error in detail["errors"]] == ["missing_date", "missing_date"]


def test_empty_body_is_rejected(client: TestClient) -> None:
    response = client.post("/readings/import", json={"data": "", "format": "linky"})

    assert response.status_code == 422


def test_upload_csv_file(client: TestClient) -> None:
    payload = LINKY_CSV.encode("cp1252")

    response = client.post(
        "/readings/import/upload",
        params={"format": "linky"},
        files={"file": ("conso.csv", payload, "text/csv")},
    )

    assert response.status_code == 200
    assert response.json()["insertedCount"] == 2


def test_upload_rejects_non_csv(client: TestClient) -> None:
    response = client.post(
        "/readings/import/upload",
        files={"file": ("conso.pdf", b"%PDF", "application/pdf")},
    )

    assert response.status_code == 400


def test_list_and_delete_readings(client: TestClient) -> None:
    client.post("/readings/import", json={"data": LINKY_CSV, "format": "linky"})

    listing = client.get("/readings", params={"source": "linky"}).json()
    assert listing["meta"]["count"] == 2
    assert listing["meta"]["totalKwh"] == 1.25
    assert [item["value"] for item in listing["data"]] == [0.75, 0.5]

    deleted = client.delete("/readings", params={"source": "linky"}).json()
    assert deleted["deleted"] == 2
    assert client.get("/readings").json()["data"] == []


def test_delete_without_filter_is_bad_request(client: TestClient) -> None:
    assert client.delete("/readings").status_code == 400


def test_stats_rejects_unknown_period(client: TestClient) -> None:
    assert client.get("/readings/stats", params={"period": "year"}).status_code == 400


def test_add_single_reading_uses_manual_defaults(client: TestClient) -> None:
    response = client.post("/readings", json={"timestamp": "2024-03-01T10:00:00Z", "value": 1.5})

    assert response.status_code == 200
    body = response.json()
    assert body == {"success": True, "message": "1 reading(s) added", "count": 1, "insertedCount": 1}

    stored = client.get("/readings").json()["data"]
    assert len(stored) == 1
    assert stored[0]["type"] == "electricity"
    assert stored[0]["unit"] == "kWh"
    assert stored[0]["source"] == "manual"
    assert stored[0]["timestamp"].startswith("2024-03-01T10:00:00")


def test_add_reading_list_in_one_request(client: TestClient) -> None:
    payload = [
        {"timestamp": "2024-03-01T10:00:00Z", "value": 1.0},
        {"timestamp": "2024-03-01T11:00:00Z", "value": 2.0, "type": "gas", "source": "meter"},
    ]

    response = client.post("/readings", json=payload)

    assert response.status_code == 200
    assert response.json()["count"] == 2
    assert client.get("/readings", params={"type": "gas"}).json()["meta"]["count"] == 1


def test_add_reading_without_timestamp_defaults_to_now(client: TestClient) -> None:
    response = client.post("/readings", json={"value": 0.8})

    assert response.status_code == 200
    assert client.get("/readings").json()["meta"]["count"] == 1


def test_add_readings_rejects_invalid_entries(client: TestClient) -> None:
    assert client.post("/readings", json=[]).status_code == 400
    assert client.post("/readings", json={"value": -1}).status_code == 422
    assert client.post("/readings", json={"value": 1, "unit": "Wh"}).status_code == 422
    assert client.get("/readings").json()["meta"]["count"] == 0
