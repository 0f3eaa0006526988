from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    ok: bool
    status: Optional[str] = None
    error: Optional[str] = None


class SimpleOkResponse(BaseModel):
    ok: bool = True


class ErrorResponse(BaseModel):
    ok: bool = False
    error: str
    code: Optional[str] = None
    request_id: Optional[str] = None
    details: Optional[Any] = None


class MetaResponse(BaseModel):
    app_version: str
    git_sha: str = ""
    build_ts: str = ""


class AdminLoginResponse(BaseModel):
    ok: bool = True
    token: str
    ttl: int


class EmployeeSummary(BaseModel):
    employee_id: str
    name: str = ""
    email: str = ""
    department: str = ""
    position: str = ""
    is_active: bool = True


class EmployeesResponse(BaseModel):
    ok: bool = True
    employees: list[EmployeeSummary]


class CoverageRow(EmployeeSummary):
    status: str
    covered_months: list[str] = Field(default_factory=list)


class CoverageResponse(BaseModel):
    ok: bool = True
    start: Optional[str] = None
    end: Optional[str] = None
    period_selected: bool
    required_months: list[str]
    statuses: dict[str, str]
    counts: dict[str, int]
    rows: list[CoverageRow]


class EarningsBreakdownOut(BaseModel):
    base_pay: Decimal
    bonus: Decimal
    overtime: Decimal
    total_earnings: Decimal
    total_deductions: Decimal
    net_pay: Decimal


class PaystubOut(BaseModel):
    id: int
    month: str
    period_start: Optional[str] = None
    period_end: Optional[str] = None
    hours_worked: Decimal
    base_rate: Decimal
    breakdown: EarningsBreakdownOut


class ChartPoint(BaseModel):
    label: str
    net: Decimal


class PaystubViewResponse(BaseModel):
    ok: bool = True
    employee_id: str
    name: str = ""
    months: list[str]
    chart: list[ChartPoint]
    current: Optional[PaystubOut] = None
    paystubs: list[PaystubOut]


class EmployeeTokenResponse(BaseModel):
    ok: bool = True
    employee_id: str
    token: str
    ttl: int
