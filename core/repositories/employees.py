from __future__ import annotations

from sqlalchemy.orm import Session

from core.models import Employee


def get_by_employee_id(session: Session, employee_id: str) -> Employee | None:
    return session.query(Employee).filter(Employee.employee_id == employee_id).first()


def list_employees(session: Session) -> list[Employee]:
    return session.query(Employee).order_by(Employee.employee_id.asc()).all()
