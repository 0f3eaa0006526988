from __future__ import annotations

import datetime as dt
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from core.exporter import build_coverage_workbook
from core.repositories import employees as employees_repo
from core.services.auth import issue_employee_token
from core.services.payroll import PayrollOverview, payroll_overview
from core.services.paystubs import paystub_view
from core.settings import get_settings
from core.utils.dates import parse_date_flex

from .database import get_db
from .deps import require_admin
from .schemas import (
    CoverageResponse,
    CoverageRow,
    EmployeeSummary,
    EmployeesResponse,
    EmployeeTokenResponse,
    ErrorResponse,
    PaystubViewResponse,
)
from .serializers import paystub_view_payload

router = APIRouter(
    prefix="/hr",
    tags=["hr"],
    dependencies=[Depends(require_admin)],
    responses={403: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)

logger = logging.getLogger("paystub_portal.api.hr")


def _parse_bound(name: str, raw: Optional[str]) -> Optional[dt.date]:
    if raw is None or not str(raw).strip():
        return None
    parsed = parse_date_flex(raw)
    if parsed is None:
        raise HTTPException(status_code=422, detail={"error": f"invalid {name} date", "code": "invalid_date"})
    return parsed


def _overview_payload(overview: PayrollOverview) -> CoverageResponse:
    rows = [
        CoverageRow(
            employee_id=r.employee_id,
            name=r.name,
            email=r.email,
            department=r.department,
            position=r.position,
            is_active=r.is_active,
            status=r.status.value,
            covered_months=[str(m) for m in sorted(overview.covered.get(r.employee_id, frozenset()))],
        )
        for r in overview.rows
    ]
    return CoverageResponse(
        start=overview.start.isoformat() if overview.start else None,
        end=overview.end.isoformat() if overview.end else None,
        period_selected=overview.period_selected,
        required_months=[str(m) for m in overview.required_months],
        statuses={k: v.value for k, v in overview.statuses.items()},
        counts=overview.counts,
        rows=rows,
    )


@router.get("/employees", response_model=EmployeesResponse)
def hr_employees(db: Session = Depends(get_db)):
    employees = employees_repo.list_employees(db)
    return {
        "ok": True,
        "employees": [
            EmployeeSummary(
                employee_id=e.employee_id,
                name=e.name or "",
                email=e.email or "",
                department=e.department or "",
                position=e.position or "",
                is_active=bool(e.is_active),
            )
            for e in employees
        ],
    }


@router.get("/payroll/coverage", response_model=CoverageResponse)
def hr_payroll_coverage(
    start: Optional[str] = Query(None, description="Pay period start (YYYY-MM-DD)"),
    end: Optional[str] = Query(None, description="Pay period end (YYYY-MM-DD)"),
    db: Session = Depends(get_db),
):
    overview = payroll_overview(db, _parse_bound("start", start), _parse_bound("end", end))
    return _overview_payload(overview)


@router.get("/payroll/coverage/export")
def hr_payroll_coverage_export(
    start: Optional[str] = Query(None),
    end: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    overview = payroll_overview(db, _parse_bound("start", start), _parse_bound("end", end))
    bio = build_coverage_workbook(overview)
    if overview.period_selected:
        fname = f"pay_status_{overview.start.isoformat()}_{overview.end.isoformat()}.xlsx"
    else:
        fname = "pay_status.xlsx"
    return StreamingResponse(
        bio,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f'attachment; filename="{fname}"'},
    )


@router.get("/employees/{employee_id}/paystubs", response_model=PaystubViewResponse)
def hr_employee_paystubs(
    employee_id: str,
    month: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    try:
        view = paystub_view(db, employee_id, month)
    except LookupError:
        raise HTTPException(status_code=404, detail="employee not found")
    return paystub_view_payload(view)


@router.post("/employees/{employee_id}/token", response_model=EmployeeTokenResponse)
def hr_issue_employee_token(employee_id: str, db: Session = Depends(get_db)):
    employee = employees_repo.get_by_employee_id(db, employee_id)
    if employee is None:
        raise HTTPException(status_code=404, detail="employee not found")
    if not employee.is_active:
        raise HTTPException(status_code=409, detail={"error": "employee inactive", "code": "employee_inactive"})
    ttl = get_settings().employee_token_ttl
    token = issue_employee_token(employee, ttl_seconds=ttl)
    logger.info("issued employee token", extra={"employee_id": employee.employee_id})
    return {"ok": True, "employee_id": employee.employee_id, "token": token, "ttl": ttl}
