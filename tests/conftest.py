from __future__ import annotations

import sys
from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Ensure project root is importable as a module path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from core.models import Base, Employee, Paystub
from core.settings import reset_settings_cache


@pytest.fixture()
def engine():
    eng = create_engine(
        "sqlite://",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def session(engine):
    """Provide an in-memory SQLite session for isolated tests."""

    SessionLocal = sessionmaker(bind=engine, future=True)
    with SessionLocal() as session:
        yield session


@pytest.fixture()
def settings_env(monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("ADMIN_PASSWORD", "letmein")
    monkeypatch.setenv("PORTAL_AUTO_APPLY_DDL", "0")
    reset_settings_cache()
    yield
    reset_settings_cache()


@pytest.fixture()
def client(engine, settings_env):
    """TestClient over the host app, wired to the in-memory database."""
    from fastapi.testclient import TestClient

    from app.main import create_app
    from paystub_api.database import get_db

    SessionLocal = sessionmaker(bind=engine, future=True)

    def _override_get_db():
        db = SessionLocal()
        try:
            yield db
        finally:
            db.close()

    application = create_app()
    application.dependency_overrides[get_db] = _override_get_db
    return TestClient(application)


@pytest.fixture()
def admin_headers(settings_env):
    from core.services.auth import issue_admin_token

    return {"Authorization": f"Bearer {issue_admin_token()}"}


@pytest.fixture()
def make_employee(session):
    def _make(employee_id: str, name: str = "", **extra) -> Employee:
        emp = Employee(
            employee_id=employee_id,
            name=name or employee_id,
            email=extra.pop("email", f"{employee_id.lower()}@example.com"),
            department=extra.pop("department", "Engineering"),
            position=extra.pop("position", "Developer"),
            **extra,
        )
        session.add(emp)
        session.commit()
        return emp

    return _make


@pytest.fixture()
def make_paystub(session):
    def _make(emp_id, start, end=None, **figures) -> Paystub:
        stub = Paystub(
            emp_id=emp_id,
            period_start=start,
            period_end=end,
            base_rate=figures.pop("base_rate", Decimal("20.00")),
            hours_worked=figures.pop("hours_worked", Decimal("160")),
            bonus=figures.pop("bonus", Decimal("0")),
            overtime=figures.pop("overtime", Decimal("0")),
            deductions=figures.pop("deductions", Decimal("0")),
            **figures,
        )
        session.add(stub)
        session.commit()
        return stub

    return _make
