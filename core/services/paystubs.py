from __future__ import annotations

import calendar
import datetime as dt
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional

from sqlalchemy.orm import Session

from core.models import Paystub
from core.repositories import employees as employees_repo
from core.repositories import paystubs as paystubs_repo
from core.utils.dates import parse_date_flex

UNKNOWN_MONTH = "Unknown"
_CENT = Decimal("0.01")


def _money(value) -> Decimal:
    if value in (None, ""):
        return Decimal("0.00")
    try:
        return Decimal(str(value).replace(",", "").strip()).quantize(_CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return Decimal("0.00")


def month_label(period_end) -> str:
    """``March 2024`` style label taken from the period end; ``Unknown`` when absent."""
    end = parse_date_flex(period_end)
    if end is None:
        return UNKNOWN_MONTH
    return f"{calendar.month_name[end.month]} {end.year}"


@dataclass(frozen=True)
class EarningsBreakdown:
    base_pay: Decimal
    bonus: Decimal
    overtime: Decimal
    total_earnings: Decimal
    total_deductions: Decimal
    net_pay: Decimal


def earnings_breakdown(stub) -> EarningsBreakdown:
    base_pay = (_money(getattr(stub, "base_rate", 0)) * _money(getattr(stub, "hours_worked", 0))).quantize(
        _CENT, rounding=ROUND_HALF_UP
    )
    bonus = _money(getattr(stub, "bonus", 0))
    overtime = _money(getattr(stub, "overtime", 0))
    total_earnings = base_pay + bonus + overtime
    total_deductions = _money(getattr(stub, "deductions", 0))
    return EarningsBreakdown(
        base_pay=base_pay,
        bonus=bonus,
        overtime=overtime,
        total_earnings=total_earnings,
        total_deductions=total_deductions,
        net_pay=total_earnings - total_deductions,
    )


@dataclass(frozen=True)
class PaystubSummary:
    id: int
    month: str
    period_start: Optional[dt.date]
    period_end: Optional[dt.date]
    hours_worked: Decimal
    base_rate: Decimal
    breakdown: EarningsBreakdown


@dataclass(frozen=True)
class PaystubView:
    employee_id: str
    name: str
    stubs: list[PaystubSummary]
    months: list[str]
    chart: list[tuple[str, Decimal]]
    current: Optional[PaystubSummary]


def _summarize(stub: Paystub) -> PaystubSummary:
    return PaystubSummary(
        id=stub.id,
        month=month_label(stub.period_end),
        period_start=stub.period_start,
        period_end=stub.period_end,
        hours_worked=_money(stub.hours_worked),
        base_rate=_money(stub.base_rate),
        breakdown=earnings_breakdown(stub),
    )


def _newest_first(stubs: list[Paystub]) -> list[Paystub]:
    # Missing period ends sort as the oldest possible date.
    return sorted(stubs, key=lambda s: (parse_date_flex(s.period_end) or dt.date.min, s.id), reverse=True)


def paystub_view(session: Session, employee_id: str, month: Optional[str] = None) -> PaystubView:
    employee = employees_repo.get_by_employee_id(session, employee_id)
    if employee is None:
        raise LookupError(f"employee {employee_id!r} not found")

    summaries = [_summarize(s) for s in _newest_first(paystubs_repo.list_for_employee(session, employee_id))]

    months: list[str] = []
    for item in summaries:
        if item.month not in months:
            months.append(item.month)

    current: Optional[PaystubSummary] = None
    wanted = (month or "").strip()
    if wanted:
        # A month with no stub selects nothing
        current = next((s for s in summaries if s.month == wanted), None)
    elif summaries:
        current = summaries[0]

    return PaystubView(
        employee_id=employee.employee_id,
        name=employee.name or "",
        stubs=summaries,
        months=months,
        chart=[(s.month, s.breakdown.net_pay) for s in summaries],
        current=current,
    )
