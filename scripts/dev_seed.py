from __future__ import annotations

import datetime as dt
from decimal import Decimal

from sqlalchemy.orm import Session

from core.db import init_database, session_scope
from core.models import Employee, Paystub

DEMO_EMPLOYEES = [
    ("EMP001", "Ava Thompson", "ava.thompson@example.com", "Engineering", "Developer"),
    ("EMP002", "Noah Patel", "noah.patel@example.com", "Finance", "Analyst"),
    ("EMP003", "Mia Chen", "mia.chen@example.com", "People", "HR Generalist"),
]


def main() -> None:
    init_database(auto_apply_ddl=True)
    with session_scope() as session:
        _seed_employees(session)
        _seed_paystubs(session)


def _seed_employees(session: Session) -> None:
    for employee_id, name, email, department, position in DEMO_EMPLOYEES:
        if session.query(Employee).filter(Employee.employee_id == employee_id).first():
            print(f"Employee already exists: {employee_id}")
            continue
        session.add(
            Employee(
                employee_id=employee_id,
                name=name,
                email=email,
                department=department,
                position=position,
            )
        )
        print(f"Created employee: {employee_id} ({name})")
    session.flush()


def _seed_paystubs(session: Session) -> None:
    if session.query(Paystub).count():
        print("Paystubs already seeded")
        return
    today = dt.date.today()
    # Last three full months; EMP003 is missing the most recent one.
    months = []
    year, month = today.year, today.month
    for _ in range(3):
        month -= 1
        if month == 0:
            year, month = year - 1, 12
        months.append((year, month))
    for employee_id, name, email, department, _ in DEMO_EMPLOYEES:
        for idx, (y, m) in enumerate(months):
            if employee_id == "EMP003" and idx == 0:
                continue
            start = dt.date(y, m, 1)
            end = (dt.date(y + (m == 12), m % 12 + 1, 1) - dt.timedelta(days=1))
            session.add(
                Paystub(
                    emp_id=employee_id,
                    period_start=start,
                    period_end=end,
                    name=name,
                    email=email,
                    department=department,
                    base_rate=Decimal("32.50"),
                    hours_worked=Decimal("160"),
                    bonus=Decimal("250.00"),
                    overtime=Decimal("120.00"),
                    deductions=Decimal("980.00"),
                    net_pay=Decimal("4590.00"),
                )
            )
    print(f"Seeded paystubs for {len(months)} month(s)")


if __name__ == "__main__":
    main()
