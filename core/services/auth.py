from __future__ import annotations

import secrets

from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash

from core.auth import make_admin_token, make_employee_token, verify_admin_token, verify_employee_token
from core.models import Employee
from core.repositories import employees as employees_repo
from core.settings import get_settings


def extract_token(
    authorization: str | None,
    header_token: str | None,
    query_token: str | None,
    cookie_token: str | None = None,
) -> str | None:
    """Normalize token retrieval across cookies/query params/headers."""

    for candidate in (cookie_token, query_token, header_token):
        if candidate:
            token = str(candidate).strip()
            if token:
                return token
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization.split(" ", 1)[1].strip()
        if token:
            return token
    return None


def verify_admin_password(password: str) -> bool:
    candidate = (password or "").strip()
    expected = (get_settings().admin_password or "").strip()
    if not expected or not candidate:
        return False
    # werkzeug hashes read "method$salt$hash"; anything else is a plain password
    if expected.count("$") == 2:
        return check_password_hash(expected, candidate)
    return secrets.compare_digest(candidate.encode(), expected.encode())


def issue_admin_token(*, ttl_seconds: int | None = None) -> str:
    settings = get_settings()
    ttl = ttl_seconds if ttl_seconds is not None else settings.admin_token_ttl
    return make_admin_token(settings.secret_key, ttl_seconds=ttl)


def authenticate_admin(token: str) -> bool:
    return verify_admin_token(get_settings().secret_key, token) is not None


def issue_employee_token(employee: Employee, *, ttl_seconds: int | None = None) -> str:
    settings = get_settings()
    ttl = ttl_seconds if ttl_seconds is not None else settings.employee_token_ttl
    return make_employee_token(settings.secret_key, employee.employee_id, ttl_seconds=ttl)


def authenticate_employee(session: Session, token: str) -> Employee | None:
    payload = verify_employee_token(get_settings().secret_key, token)
    if not payload:
        return None
    employee = employees_repo.get_by_employee_id(session, str(payload["eid"]))
    if employee is None or not employee.is_active:
        return None
    return employee


def token_roles(token: str, *, is_admin: bool = False) -> list[str]:
    secret = get_settings().secret_key
    payload = verify_admin_token(secret, token) if is_admin else verify_employee_token(secret, token)
    if not payload:
        return []
    roles = payload.get("roles") or []
    if not isinstance(roles, list):
        return []
    return [str(r) for r in roles]
