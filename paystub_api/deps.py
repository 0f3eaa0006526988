from __future__ import annotations

from typing import Optional

from fastapi import Cookie, Depends, Header, HTTPException, Query
from sqlalchemy.orm import Session

from core.models import Employee
from core.services.auth import authenticate_admin, authenticate_employee, extract_token, token_roles

from .database import get_db

ADMIN_COOKIE_NAME = "admin_token"
EMPLOYEE_COOKIE_NAME = "employee_token"

HR_ROLES = {"hr_admin"}


def require_admin(
    authorization: Optional[str] = Header(None),
    x_admin_token: Optional[str] = Header(None),
    admin_cookie: Optional[str] = Cookie(None, alias=ADMIN_COOKIE_NAME),
) -> None:
    tok = extract_token(authorization, x_admin_token, None, admin_cookie)
    if not tok or not authenticate_admin(tok):
        raise HTTPException(status_code=403, detail="forbidden")
    roles = set(token_roles(tok, is_admin=True))
    if roles and roles.isdisjoint(HR_ROLES):
        raise HTTPException(status_code=403, detail="forbidden")


def require_employee(
    db: Session = Depends(get_db),
    authorization: Optional[str] = Header(None),
    x_employee_token: Optional[str] = Header(None),
    token: Optional[str] = Query(None),
    employee_cookie: Optional[str] = Cookie(None, alias=EMPLOYEE_COOKIE_NAME),
) -> Employee:
    tok = extract_token(authorization, x_employee_token, token, employee_cookie)
    if not tok:
        raise HTTPException(status_code=403, detail="missing token")
    employee = authenticate_employee(db, tok)
    if employee is None:
        raise HTTPException(status_code=403, detail="invalid token")
    return employee
