from __future__ import annotations

import argparse
import subprocess
import sys

from sqlalchemy import text

from core.db import init_database, session_scope
from core.models import Employee, Paystub
from core.repositories import employees as employees_repo
from core.services.auth import issue_admin_token, issue_employee_token
from core.services.coverage import InvalidRange
from core.services.payroll import payroll_overview
from core.utils.dates import parse_date_flex


def _run(cmd: list[str]) -> int:
    print("$", " ".join(cmd))
    return subprocess.call(cmd)


def cmd_migrate(_: argparse.Namespace) -> int:
    return _run(["alembic", "upgrade", "head"])


def cmd_downgrade(args: argparse.Namespace) -> int:
    target = args.to or "base"
    return _run(["alembic", "downgrade", target])


def cmd_seed_demo(_: argparse.Namespace) -> int:
    from scripts import dev_seed

    dev_seed.main()
    return 0


def cmd_db_check(_: argparse.Namespace) -> int:
    engine = init_database()
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    print("DB OK")
    return 0


def cmd_admin_token(_: argparse.Namespace) -> int:
    print(issue_admin_token())
    return 0


def cmd_employee_token(args: argparse.Namespace) -> int:
    with session_scope() as session:
        employee = employees_repo.get_by_employee_id(session, args.employee_id)
        if employee is None:
            print("Employee not found", file=sys.stderr)
            return 1
        if not employee.is_active:
            print("Employee is inactive", file=sys.stderr)
            return 1
        print(issue_employee_token(employee))
    return 0


def cmd_stats(_: argparse.Namespace) -> int:
    init_database()
    with session_scope() as session:
        stats = {
            "employees": session.query(Employee).count(),
            "paystubs": session.query(Paystub).count(),
            "paystubs_missing_emp_id": session.query(Paystub).filter(Paystub.emp_id.is_(None)).count(),
            "paystubs_missing_period_start": session.query(Paystub).filter(Paystub.period_start.is_(None)).count(),
        }
        for k, v in stats.items():
            print(f"{k}: {v}")
    return 0


def cmd_coverage(args: argparse.Namespace) -> int:
    start = parse_date_flex(args.start)
    end = parse_date_flex(args.end)
    if start is None or end is None:
        print("--start and --end must be dates (YYYY-MM-DD)", file=sys.stderr)
        return 2
    init_database()
    with session_scope() as session:
        try:
            overview = payroll_overview(session, start, end)
        except InvalidRange as exc:
            print(str(exc), file=sys.stderr)
            return 2
        print("months:", " ".join(str(m) for m in overview.required_months))
        for row in overview.rows:
            print(f"{row.employee_id}\t{row.status.value}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="manage", description="Paystub portal management CLI")
    sub = parser.add_subparsers(dest="cmd", required=True)

    sub.add_parser("migrate", help="Upgrade DB to head").set_defaults(func=cmd_migrate)

    p_down = sub.add_parser("downgrade", help="Downgrade DB to target (default base)")
    p_down.add_argument("to", nargs="?", default="base")
    p_down.set_defaults(func=cmd_downgrade)

    sub.add_parser("seed-demo", help="Create demo employees and paystubs").set_defaults(func=cmd_seed_demo)
    sub.add_parser("db-check", help="Run a simple DB connectivity check").set_defaults(func=cmd_db_check)
    sub.add_parser("stats", help="Print table counts").set_defaults(func=cmd_stats)
    sub.add_parser("admin-token", help="Issue an HR admin token").set_defaults(func=cmd_admin_token)

    p_emp = sub.add_parser("employee-token", help="Issue a self-service token for an employee")
    p_emp.add_argument("employee_id")
    p_emp.set_defaults(func=cmd_employee_token)

    p_cov = sub.add_parser("coverage", help="Print pay status per employee for a pay period")
    p_cov.add_argument("--start", required=True)
    p_cov.add_argument("--end", required=True)
    p_cov.set_defaults(func=cmd_coverage)

    args = parser.parse_args(argv)
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
