from __future__ import annotations

import datetime as dt
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy.orm import Session

from core.metrics import observe_coverage_run
from core.models import Employee
from core.repositories import employees as employees_repo
from core.repositories import paystubs as paystubs_repo

from .coverage import (
    InvalidRange,
    MonthKey,
    PayStatus,
    covered_months,
    expand_months,
    reconcile,
    unknown_statuses,
    validate_range,
)

logger = logging.getLogger("paystub_portal.payroll")


@dataclass(frozen=True)
class OverviewRow:
    employee_id: str
    name: str
    email: str
    department: str
    position: str
    is_active: bool
    status: PayStatus


@dataclass(frozen=True)
class PayrollOverview:
    start: Optional[dt.date]
    end: Optional[dt.date]
    required_months: tuple[MonthKey, ...]
    rows: list[OverviewRow] = field(default_factory=list)
    # employee_id -> required months that have an issued paystub
    covered: dict[str, frozenset[MonthKey]] = field(default_factory=dict)

    @property
    def period_selected(self) -> bool:
        return self.start is not None and self.end is not None

    @property
    def statuses(self) -> dict[str, PayStatus]:
        return {row.employee_id: row.status for row in self.rows}

    @property
    def counts(self) -> dict[str, int]:
        tally = Counter(row.status.value for row in self.rows)
        return {status.value: int(tally.get(status.value, 0)) for status in PayStatus}


def _row(employee: Employee, status: PayStatus) -> OverviewRow:
    return OverviewRow(
        employee_id=employee.employee_id,
        name=employee.name or "",
        email=employee.email or "",
        department=employee.department or "",
        position=employee.position or "",
        is_active=bool(employee.is_active),
        status=status,
    )


def payroll_overview(
    session: Session,
    start: Optional[dt.date],
    end: Optional[dt.date],
) -> PayrollOverview:
    """Build the HR pay-status overview for ``[start, end]``.

    A missing bound reports every employee as ``Unknown`` without querying
    paystubs. A reversed range raises :class:`InvalidRange` before anything
    is fetched.
    """
    if start is not None and end is not None:
        try:
            validate_range(start, end)
        except InvalidRange:
            observe_coverage_run("invalid_range")
            raise

    employees = employees_repo.list_employees(session)

    if start is None or end is None:
        statuses = unknown_statuses(employees)
        observe_coverage_run("no_period", {PayStatus.UNKNOWN.value: len(statuses)})
        return PayrollOverview(
            start=start,
            end=end,
            required_months=(),
            rows=[_row(e, statuses[e.employee_id]) for e in employees],
        )

    required = expand_months(start, end)
    stubs = paystubs_repo.list_started_between(session, start, end)
    statuses = reconcile(required, employees, stubs)
    required_set = frozenset(required)
    overview = PayrollOverview(
        start=start,
        end=end,
        required_months=required,
        rows=[_row(e, statuses[e.employee_id]) for e in employees],
        covered={emp: months & required_set for emp, months in covered_months(stubs).items()},
    )
    counts = overview.counts
    observe_coverage_run("computed", counts)
    logger.info(
        "coverage %s..%s: %d month(s), %d paid, %d pending",
        start.isoformat(),
        end.isoformat(),
        len(required),
        counts[PayStatus.PAID.value],
        counts[PayStatus.PENDING.value],
    )
    return overview
