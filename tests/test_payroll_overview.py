from __future__ import annotations

import datetime as dt

import pytest

from core.metrics import export_prometheus, reset_metrics
from core.services.coverage import InvalidRange, MonthKey, PayStatus
from core.services.payroll import payroll_overview


@pytest.fixture
def roster(make_employee):
    make_employee("E2", "Noah")
    make_employee("E1", "Ava")


def test_overview_classifies_each_employee(session, roster, make_paystub):
    make_paystub("E1", dt.date(2024, 2, 5), dt.date(2024, 2, 29))

    overview = payroll_overview(session, dt.date(2024, 2, 1), dt.date(2024, 2, 28))

    assert overview.period_selected is True
    assert overview.required_months == (MonthKey(2024, 2),)
    assert overview.statuses == {"E1": PayStatus.PAID, "E2": PayStatus.PENDING}
    # Rows follow employee id order
    assert [r.employee_id for r in overview.rows] == ["E1", "E2"]
    assert overview.rows[0].name == "Ava"
    assert overview.counts == {"Paid": 1, "Pending": 1, "Unknown": 0}
    assert overview.covered == {"E1": frozenset({MonthKey(2024, 2)})}


def test_missing_bound_reports_unknown_without_computing(session, roster, make_paystub):
    make_paystub("E1", dt.date(2024, 2, 5))

    overview = payroll_overview(session, dt.date(2024, 2, 1), None)

    assert overview.period_selected is False
    assert overview.required_months == ()
    assert overview.statuses == {"E1": PayStatus.UNKNOWN, "E2": PayStatus.UNKNOWN}


def test_reversed_range_raises_before_fetching(session, roster):
    with pytest.raises(InvalidRange):
        payroll_overview(session, dt.date(2024, 3, 1), dt.date(2024, 2, 1))


def test_stub_starting_after_range_end_is_not_counted(session, roster, make_paystub):
    # Starts in February but after the selected end day, so it is outside the query window
    make_paystub("E1", dt.date(2024, 2, 20))

    overview = payroll_overview(session, dt.date(2024, 2, 1), dt.date(2024, 2, 10))

    assert overview.statuses["E1"] is PayStatus.PENDING


def test_malformed_rows_do_not_block_other_employees(session, roster, make_paystub):
    make_paystub(None, dt.date(2024, 2, 1))
    make_paystub("E2", None)
    make_paystub("E2", dt.date(2024, 2, 12))

    overview = payroll_overview(session, dt.date(2024, 2, 1), dt.date(2024, 2, 29))

    assert overview.statuses == {"E1": PayStatus.PENDING, "E2": PayStatus.PAID}


def test_multi_month_range_needs_every_month(session, roster, make_paystub):
    for month in (1, 2, 3):
        make_paystub("E1", dt.date(2024, month, 1))
    make_paystub("E2", dt.date(2024, 1, 1))
    make_paystub("E2", dt.date(2024, 3, 1))

    overview = payroll_overview(session, dt.date(2024, 1, 1), dt.date(2024, 3, 31))

    assert overview.statuses == {"E1": PayStatus.PAID, "E2": PayStatus.PENDING}
    assert overview.covered["E2"] == frozenset({MonthKey(2024, 1), MonthKey(2024, 3)})


def test_recomputation_reflects_new_paystubs(session, roster, make_paystub):
    start, end = dt.date(2024, 2, 1), dt.date(2024, 2, 29)
    assert payroll_overview(session, start, end).statuses["E2"] is PayStatus.PENDING

    make_paystub("E2", dt.date(2024, 2, 1))

    assert payroll_overview(session, start, end).statuses["E2"] is PayStatus.PAID


def test_coverage_runs_are_counted(session, roster):
    reset_metrics()
    payroll_overview(session, dt.date(2024, 2, 1), dt.date(2024, 2, 29))
    payroll_overview(session, None, None)
    with pytest.raises(InvalidRange):
        payroll_overview(session, dt.date(2024, 3, 1), dt.date(2024, 2, 1))

    text = export_prometheus()
    assert 'portal_coverage_runs_total{outcome="computed"} 1' in text
    assert 'portal_coverage_runs_total{outcome="no_period"} 1' in text
    assert 'portal_coverage_runs_total{outcome="invalid_range"} 1' in text
    assert 'portal_coverage_employees_total{status="Pending"} 2' in text


def test_padded_and_blank_ids_stay_on_the_report(session, make_employee, make_paystub):
    make_employee("E1 ", "Padded")
    make_employee("E2")
    make_employee("", "Blank")
    make_paystub("E1 ", dt.date(2024, 2, 3))

    overview = payroll_overview(session, dt.date(2024, 2, 1), dt.date(2024, 2, 29))

    assert len(overview.rows) == 3
    assert overview.statuses == {"": PayStatus.PENDING, "E1 ": PayStatus.PAID, "E2": PayStatus.PENDING}
    assert len(payroll_overview(session, None, None).rows) == 3
