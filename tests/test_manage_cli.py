from __future__ import annotations

import datetime as dt

import pytest

from core.db import reset_engine
from core.settings import reset_settings_cache


@pytest.fixture()
def seeded_db(tmp_path, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'cli.db'}")
    monkeypatch.setenv("SECRET_KEY", "cli-secret")
    reset_settings_cache()
    reset_engine()
    from scripts import dev_seed

    dev_seed.main()
    yield
    reset_engine()
    reset_settings_cache()


def _last_month() -> dt.date:
    first = dt.date.today().replace(day=1)
    return (first - dt.timedelta(days=1)).replace(day=1)


def test_coverage_command_prints_statuses(seeded_db, capsys):
    from scripts.manage import main

    start = _last_month()
    rc = main(["coverage", "--start", start.isoformat(), "--end", start.isoformat()])

    out = capsys.readouterr().out
    assert rc == 0
    assert f"months: {start:%Y-%m}" in out
    assert "EMP001\tPaid" in out
    assert "EMP003\tPending" in out


def test_coverage_command_rejects_reversed_range(seeded_db, capsys):
    from scripts.manage import main

    rc = main(["coverage", "--start", "2024-03-01", "--end", "2024-02-01"])

    assert rc == 2
    assert "End date cannot be before the start date." in capsys.readouterr().err


def test_coverage_command_rejects_bad_dates(seeded_db, capsys):
    from scripts.manage import main

    assert main(["coverage", "--start", "soon", "--end", "2024-02-01"]) == 2


def test_stats_and_employee_token(seeded_db, capsys):
    from core.auth import verify_employee_token
    from scripts.manage import main

    assert main(["stats"]) == 0
    assert "employees: 3" in capsys.readouterr().out

    assert main(["employee-token", "EMP002"]) == 0
    token = capsys.readouterr().out.strip()
    assert verify_employee_token("cli-secret", token)["eid"] == "EMP002"

    assert main(["employee-token", "NOPE"]) == 1


def test_employee_token_refused_for_inactive_employee(seeded_db, capsys):
    from core.db import session_scope
    from core.repositories import employees as employees_repo
    from scripts.manage import main

    with session_scope() as session:
        employees_repo.get_by_employee_id(session, "EMP002").is_active = False
    capsys.readouterr()

    assert main(["employee-token", "EMP002"]) == 1
    captured = capsys.readouterr()
    assert "Employee is inactive" in captured.err
    assert captured.out.strip() == ""
