from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, Date, DateTime, Index, Integer, Numeric, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class Employee(Base):
    __tablename__ = "employees"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    # Identity-provider user id; not what paystubs reference
    uid: Mapped[Optional[str]] = mapped_column(String(128), unique=True, index=True)
    employee_id: Mapped[str] = mapped_column(String(40), nullable=False, unique=True, index=True)
    name: Mapped[str] = mapped_column(String(200), default="")
    email: Mapped[str] = mapped_column(String(255), default="")
    department: Mapped[str] = mapped_column(String(120), default="")
    position: Mapped[str] = mapped_column(String(120), default="")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=utc_now)


class Paystub(Base):
    __tablename__ = "paystubs"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    # Business key of the employee (Employee.employee_id). Nullable: legacy rows may lack it.
    emp_id: Mapped[Optional[str]] = mapped_column(String(40), index=True)
    period_start: Mapped[Optional[dt.date]] = mapped_column(Date)
    period_end: Mapped[Optional[dt.date]] = mapped_column(Date)
    name: Mapped[str] = mapped_column(String(200), default="")
    department: Mapped[str] = mapped_column(String(120), default="")
    email: Mapped[str] = mapped_column(String(255), default="")
    base_rate: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    hours_worked: Mapped[Decimal] = mapped_column(Numeric(8, 2), default=Decimal("0"))
    bonus: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    overtime: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    deductions: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    net_pay: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=utc_now)

    __table_args__ = (
        Index("ix_paystubs_period_start", "period_start"),
        Index("ix_paystubs_emp_period", "emp_id", "period_start"),
    )


__all__ = ["Base", "Employee", "Paystub", "utc_now"]
