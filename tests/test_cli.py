from __future__ import annotations

import json
from datetime import date

import pytest

from src.attendance_reconciler.attendance_reconciler import cli
from src.attendance_reconciler.attendance_reconciler.container import build_services
from src.attendance_reconciler.attendance_reconciler.core.enums import MovementKind
from src.attendance_reconciler.attendance_reconciler.core.exceptions import PersistenceUnavailableError

YESTERDAY = date(2025, 3, 9)


@pytest.fixture
def container(punches_repo, attendance_repo, store, rules_provider, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    return build_services(punches_repo=punches_repo, attendance_repo=attendance_repo, store=store, rules=rules_provider)


def test_cli_runs_batch_and_prints_json(container, punch, punches_repo, capsys):
    punches_repo.add(punch("08:00", work_date=YESTERDAY), punch("17:00", MovementKind.EXIT, work_date=YESTERDAY))

    code = cli.main(["--start", "2025-03-09", "--end", "2025-03-09", "--json"], container=container)

    out = json.loads(capsys.readouterr().out)
    assert code == 0
    assert out["summary"]["CREATED"] == 1


def test_cli_failed_group_exit_code(container, punch, punches_repo, store, capsys):
    punches_repo.add(punch("08:00", work_date=YESTERDAY))
    store.fail_with[(7, YESTERDAY)] = RuntimeError("boom")

    code = cli.main(["--start", "2025-03-09", "--end", "2025-03-09"], container=container)

    assert code == 1
    assert "FAILED=1" in capsys.readouterr().out


def test_cli_outage_and_bad_dates(container, punch, punches_repo, store):
    punches_repo.add(punch("08:00", work_date=YESTERDAY))
    store.fail_with[(7, YESTERDAY)] = PersistenceUnavailableError("down")

    assert cli.main(["--start", "2025-03-09", "--end", "2025-03-09"], container=container) == 2
    assert cli.main(["--start", "yesterday"], container=container) == 2
    assert cli.main(["--start", "2025-03-10", "--end", "2025-03-01"], container=container) == 2
