"""Pay-period coverage: month expansion and per-employee reconciliation.

Both entry points are pure functions over in-memory snapshots. They never
touch the database and never mutate their inputs, so they can be called
from request handlers, the CLI and tests alike.
"""
from __future__ import annotations

import datetime as dt
import enum
import logging
from dataclasses import dataclass
from typing import Iterable, NamedTuple, Optional, Sequence, Union

from core.utils.dates import parse_date_flex, to_utc_date

logger = logging.getLogger("paystub_portal.coverage")

INVALID_RANGE_MESSAGE = "End date cannot be before the start date."


class PayStatus(str, enum.Enum):
    PAID = "Paid"
    PENDING = "Pending"
    UNKNOWN = "Unknown"


class MonthKey(NamedTuple):
    year: int
    month: int

    @classmethod
    def of(cls, value: dt.date) -> "MonthKey":
        if isinstance(value, dt.datetime):
            value = to_utc_date(value)
        return cls(value.year, value.month)

    def next(self) -> "MonthKey":
        if self.month == 12:
            return MonthKey(self.year + 1, 1)
        return MonthKey(self.year, self.month + 1)

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


class InvalidRange(ValueError):
    """Raised when a coverage request has ``start > end``."""

    code = "invalid_range"

    def __init__(self, start: dt.date, end: dt.date):
        super().__init__(INVALID_RANGE_MESSAGE)
        self.start = start
        self.end = end


@dataclass(frozen=True)
class PaystubRecord:
    """Reconciler view of one issued paystub."""

    emp_id: Optional[str]
    period_start: Union[dt.date, str, None]


def _as_date(value: dt.date) -> dt.date:
    if isinstance(value, dt.datetime):
        return to_utc_date(value)
    return value


def validate_range(start: dt.date, end: dt.date) -> None:
    if _as_date(start) > _as_date(end):
        raise InvalidRange(start, end)


def expand_months(start: dt.date, end: dt.date) -> tuple[MonthKey, ...]:
    """Return every calendar month touched by ``[start, end]``, ascending.

    A reversed range yields ``()``; callers run :func:`validate_range` first
    so that an empty result is never mistaken for "nothing required".
    """
    start_d, end_d = _as_date(start), _as_date(end)
    if start_d > end_d:
        return ()
    current = MonthKey.of(start_d)
    last = MonthKey.of(end_d)
    keys: list[MonthKey] = []
    while current <= last:
        keys.append(current)
        current = current.next()
    return tuple(keys)


def _employee_key(employee) -> Optional[str]:
    if isinstance(employee, str):
        raw = employee
    else:
        raw = getattr(employee, "employee_id", None)
    return None if raw is None else str(raw)


def _record_fields(record) -> tuple[Optional[str], object]:
    if isinstance(record, dict):
        return record.get("emp_id"), record.get("period_start")
    return getattr(record, "emp_id", None), getattr(record, "period_start", None)


def covered_months(paystubs: Iterable) -> dict[str, frozenset[MonthKey]]:
    """Group paystubs into ``{emp_id: {MonthKey, ...}}``.

    Records without an employee id or a readable period start are skipped.
    """
    grouped: dict[str, set[MonthKey]] = {}
    skipped = 0
    for record in paystubs:
        raw_emp, raw_start = _record_fields(record)
        emp_id = "" if raw_emp is None else str(raw_emp)
        start = parse_date_flex(raw_start)
        if not emp_id or start is None:
            skipped += 1
            continue
        grouped.setdefault(emp_id, set()).add(MonthKey.of(start))
    if skipped:
        logger.debug("skipped %d malformed paystub record(s)", skipped)
    return {emp_id: frozenset(months) for emp_id, months in grouped.items()}


def reconcile(
    required_months: Sequence[MonthKey],
    employees: Iterable,
    paystubs: Iterable,
) -> dict[str, PayStatus]:
    """Classify each employee as ``Paid`` or ``Pending`` for the required months.

    ``Paid`` needs a non-empty requirement fully covered by the employee's
    paystubs; anything else is ``Pending``. Employees are matched by business
    key (``employee_id``), not by internal row id.
    """
    required = frozenset(required_months)
    by_employee = covered_months(paystubs)
    statuses: dict[str, PayStatus] = {}
    for employee in employees:
        key = _employee_key(employee)
        if key is None:
            continue
        have = by_employee.get(key, frozenset())
        paid = bool(required) and required <= have
        statuses[key] = PayStatus.PAID if paid else PayStatus.PENDING
    return statuses


def unknown_statuses(employees: Iterable) -> dict[str, PayStatus]:
    """Status map for a request without a complete period."""
    statuses: dict[str, PayStatus] = {}
    for employee in employees:
        key = _employee_key(employee)
        if key is not None:
            statuses[key] = PayStatus.UNKNOWN
    return statuses
