from __future__ import annotations

import datetime as dt

from sqlalchemy.orm import Session

from core.models import Paystub


def list_started_between(session: Session, start: dt.date, end: dt.date) -> list[Paystub]:
    """Paystubs whose period starts within ``[start, end]`` (inclusive)."""
    return (
        session.query(Paystub)
        .filter(Paystub.period_start >= start, Paystub.period_start <= end)
        .order_by(Paystub.emp_id.asc(), Paystub.period_start.asc(), Paystub.id.asc())
        .all()
    )


def list_for_employee(session: Session, emp_id: str) -> list[Paystub]:
    return (
        session.query(Paystub)
        .filter(Paystub.emp_id == emp_id)
        .order_by(Paystub.id.asc())
        .all()
    )
