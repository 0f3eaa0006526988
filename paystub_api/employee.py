from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from core.models import Employee
from core.services.paystubs import paystub_view

from .database import get_db
from .deps import require_employee
from .schemas import PaystubViewResponse
from .serializers import paystub_view_payload

router = APIRouter(prefix="/employee", tags=["employee"])


@router.get("/paystubs", response_model=PaystubViewResponse)
def employee_paystubs(
    month: Optional[str] = Query(None, description="Month label, e.g. 'March 2024'"),
    employee: Employee = Depends(require_employee),
    db: Session = Depends(get_db),
):
    try:
        view = paystub_view(db, employee.employee_id, month)
    except LookupError:
        raise HTTPException(status_code=404, detail="employee profile not found")
    return paystub_view_payload(view)
