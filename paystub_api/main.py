from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from http import HTTPStatus
from typing import Optional

from dotenv import load_dotenv
from fastapi import APIRouter, Depends, FastAPI, Form, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.alembic_utils import ensure_up_to_date
from core.db import get_engine
from core.models import Base
from core.services.auth import issue_admin_token, verify_admin_password
from core.services.coverage import InvalidRange
from core.settings import get_settings

from .database import get_db
from .deps import ADMIN_COOKIE_NAME
from .employee import router as employee_router
from .hr import router as hr_router
from .schemas import AdminLoginResponse, HealthResponse, MetaResponse, SimpleOkResponse

load_dotenv()

logger = logging.getLogger("paystub_portal.api")


@asynccontextmanager
async def lifespan(_: FastAPI):
    settings = get_settings()
    if settings.auto_apply_ddl:
        # Create tables if missing; production deployments run Alembic instead.
        Base.metadata.create_all(bind=get_engine())
    else:
        logger.info("PORTAL_AUTO_APPLY_DDL=0: skipping automatic DDL. Ensure Alembic migrations have been applied.")
    if settings.enforce_alembic_migrations:
        if settings.auto_apply_ddl:
            logger.warning("PORTAL_ENFORCE_ALEMBIC=1 while PORTAL_AUTO_APPLY_DDL=1; skipping migration check.")
        else:
            ensure_up_to_date(get_engine())
    yield


router = APIRouter()


def _cookie_secure() -> bool:
    return os.environ.get("COOKIE_SECURE", "").strip().lower() in {"1", "true", "yes", "on"}


def _format_error_payload(detail: object, code: Optional[str] = None) -> dict:
    if isinstance(detail, dict):
        message = detail.get("error") or detail.get("detail") or str(detail)
        code = code or detail.get("code")
    else:
        message = str(detail or "")
    payload = {"ok": False, "error": message or "error"}
    if code:
        payload["code"] = str(code)
    return payload


def register_exception_handlers(target) -> None:
    def _wants_problem_json(request: Request) -> bool:
        accept = (request.headers.get("accept") or "").lower()
        return "application/problem+json" in accept

    def _problem_payload(request: Request, status: int, detail: str | dict | None = None, code: str | None = None):
        rid = request.headers.get("x-request-id") or ""
        try:
            title = HTTPStatus(status).phrase
        except ValueError:
            title = "Error"
        if isinstance(detail, dict):
            det = detail.get("detail") or detail.get("error") or detail
            code = code or detail.get("code")
        else:
            det = detail or ""
        payload = {
            "type": "about:blank",
            "title": title,
            "status": status,
            "detail": det,
            "instance": str(request.url.path),
            "request_id": rid,
        }
        if code:
            payload["code"] = code
        return payload

    def _respond(request: Request, status: int, detail, code: str | None = None):
        if _wants_problem_json(request):
            content = _problem_payload(request, status, detail, code)
            return JSONResponse(status_code=status, content=content, media_type="application/problem+json")
        payload = _format_error_payload(detail, code)
        payload["request_id"] = request.headers.get("x-request-id") or ""
        return JSONResponse(status_code=status, content=payload)

    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _respond(request, exc.status_code, exc.detail)

    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        if _wants_problem_json(request):
            content = _problem_payload(request, 422, {"detail": exc.errors()}, "validation_error")
            return JSONResponse(status_code=422, content=content, media_type="application/problem+json")
        payload = {
            "ok": False,
            "error": "validation_error",
            "code": "validation_error",
            "details": exc.errors(),
            "request_id": request.headers.get("x-request-id") or "",
        }
        return JSONResponse(status_code=422, content=payload)

    async def invalid_range_handler(request: Request, exc: InvalidRange):
        logger.info("rejected coverage range %s > %s", exc.start, exc.end)
        return _respond(request, 400, str(exc), InvalidRange.code)

    async def sa_integrity_error_handler(request: Request, exc: IntegrityError):
        return _respond(request, 400, "constraint_violation", "constraint_violation")

    target.add_exception_handler(StarletteHTTPException, http_exception_handler)
    target.add_exception_handler(RequestValidationError, validation_exception_handler)
    target.add_exception_handler(InvalidRange, invalid_range_handler)
    target.add_exception_handler(IntegrityError, sa_integrity_error_handler)


@router.get("/healthz", response_model=HealthResponse)
def healthz(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
        return {"ok": True, "status": "healthy"}
    except SQLAlchemyError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/livez", response_model=SimpleOkResponse)
def livez():
    return SimpleOkResponse()


@router.get("/readyz", response_model=HealthResponse)
def readyz(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
        return {"ok": True}
    except SQLAlchemyError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/meta", response_model=MetaResponse)
def meta():
    settings = get_settings()
    return {
        "app_version": settings.app_version,
        "git_sha": settings.git_sha or "",
        "build_ts": settings.build_ts or "",
    }


@router.post("/admin/login", response_model=AdminLoginResponse)
def admin_login_api(request: Request, password: str = Form(...)):
    if not verify_admin_password(password):
        ip = getattr(request.client, "host", None) or "unknown"
        logger.warning("admin login failed from %s", ip)
        raise HTTPException(status_code=403, detail="invalid password")
    ttl = get_settings().admin_token_ttl
    tok = issue_admin_token(ttl_seconds=ttl)
    response = JSONResponse({"ok": True, "token": tok, "ttl": ttl})
    response.set_cookie(
        key=ADMIN_COOKIE_NAME,
        value=tok,
        httponly=True,
        samesite="lax",
        secure=_cookie_secure(),
        max_age=ttl,
    )
    return response


router.include_router(hr_router)
router.include_router(employee_router)

