from __future__ import annotations

from datetime import date

import pytest

from src.attendance_reconciler.attendance_reconciler.attendance.model import AttendanceRecord
from src.attendance_reconciler.attendance_reconciler.container import build_services
from src.attendance_reconciler.attendance_reconciler.core.enums import AttendanceStatus, MovementKind
from src.attendance_reconciler.attendance_reconciler.core.exceptions import PersistenceUnavailableError
from src.attendance_reconciler.attendance_reconciler.main import create_app

YESTERDAY = date(2025, 3, 9)


@pytest.fixture
def container(punches_repo, attendance_repo, store, rules_provider):
    return build_services(
        punches_repo=punches_repo,
        attendance_repo=attendance_repo,
        store=store,
        rules=rules_provider,
    )


@pytest.fixture
def client(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container)
    app.config["TESTING"] = True
    return app.test_client()


def test_reconcile_endpoint(client, punch, punches_repo):
    punches_repo.add(punch("08:00", work_date=YESTERDAY), punch("17:00", MovementKind.EXIT, work_date=YESTERDAY))

    resp = client.post("/api/reconcile", json={"start_date": "2025-03-09", "end_date": "2025-03-09"})

    body = resp.get_json()
    assert resp.status_code == 200
    assert body["success"] is True
    assert body["summary"]["CREATED"] == 1
    assert body["groups"][0]["status"] == "COMPLETE"


def test_reconcile_endpoint_validates_dates(client):
    assert client.post("/api/reconcile", json={"start_date": "2025-03-09"}).status_code == 400
    assert client.post("/api/reconcile", json={"start_date": "09/03/2025", "end_date": "2025-03-09"}).status_code == 400
    resp = client.post("/api/reconcile", json={"start_date": "2025-03-10", "end_date": "2025-03-09"})
    assert resp.status_code == 400
    assert resp.get_json()["success"] is False


def test_reconcile_endpoint_reports_outage(client, punch, punches_repo, store):
    punches_repo.add(punch("08:00", work_date=YESTERDAY))
    store.fail_with[(7, YESTERDAY)] = PersistenceUnavailableError("down")

    resp = client.post("/api/reconcile", json={"start_date": "2025-03-09", "end_date": "2025-03-09"})

    assert resp.status_code == 503
    groups = resp.get_json()["groups"]
    assert [(g["employee_id"], g["outcome"], g["reason"]) for g in groups] == [(7, "FAILED", "down")]


def test_device_gaps_endpoint(client, punch, punches_repo):
    punches_repo.add(punch("08:00", device_id="GATE", work_date=YESTERDAY), punch("08:30", device_id="GATE", work_date=YESTERDAY))

    resp = client.get("/api/devices/GATE/gaps?date=2025-03-09")

    body = resp.get_json()
    assert resp.status_code == 200
    assert body["has_gaps"] is True
    assert body["gaps"][0]["duration_minutes"] == 30


def test_attendance_records_and_status_change(client, attendance_repo):
    rec = attendance_repo.put(
        AttendanceRecord(attendance_id=None, employee_id=7, work_date=YESTERDAY, status=AttendanceStatus.INCONSISTENT)
    )

    listing = client.get("/api/attendance/7?start_date=2025-03-01&end_date=2025-03-31")
    assert listing.status_code == 200
    assert [r["status"] for r in listing.get_json()["records"]] == ["INCONSISTENT"]

    changed = client.post(
        f"/api/attendance/{rec.attendance_id}/status", json={"status": "complete", "modified_by": 42}
    )
    assert changed.status_code == 200
    assert changed.get_json()["manual_override"] is True

    rejected = client.post(f"/api/attendance/{rec.attendance_id}/status", json={"status": "PENDING", "modified_by": 42})
    assert rejected.status_code == 400
    assert client.post(f"/api/attendance/{rec.attendance_id}/status", json={"status": "ABSENT"}).status_code == 400


def test_audit_endpoint(client, attendance_repo):
    attendance_repo.put(
        AttendanceRecord(attendance_id=None, employee_id=7, work_date=YESTERDAY, status=AttendanceStatus.ABSENT)
    )

    resp = client.get("/api/attendance/audit?start_date=2025-03-01&end_date=2025-03-31")

    body = resp.get_json()
    assert resp.status_code == 200
    assert body["records_checked"] == 1
    assert body["counts"]["NO_EXIT"] == 0
