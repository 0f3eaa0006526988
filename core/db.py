from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from .alembic_utils import ensure_up_to_date
from .models import Base
from .settings import get_settings

_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None


logger = logging.getLogger("paystub_portal.db")


def _resolve_database_url() -> str:
    settings = get_settings()
    if settings.database_url:
        return settings.database_url
    root = Path(__file__).resolve().parents[1]
    db_path = (root / "var" / "portal.db").resolve()
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{db_path}"


def get_engine() -> Engine:
    """Return a singleton SQLAlchemy engine."""
    global _engine
    if _engine is None:
        database_url = _resolve_database_url()
        url = make_url(database_url)
        connect_args = {}
        if url.get_backend_name() == "sqlite":
            connect_args = {"check_same_thread": False}
            logger.warning("Using the SQLite backend; prefer PostgreSQL outside local development.")
        _engine = create_engine(database_url, future=True, connect_args=connect_args)
        if url.get_backend_name() == "sqlite":
            @event.listens_for(_engine, "connect")
            def _set_sqlite_pragma(dbapi_connection, connection_record):  # type: ignore[unused-argument]
                cursor = dbapi_connection.cursor()
                try:
                    cursor.execute("PRAGMA journal_mode=WAL;")
                    cursor.execute("PRAGMA synchronous=NORMAL;")
                finally:
                    cursor.close()
    return _engine


def get_sessionmaker() -> sessionmaker:
    """Return the global sessionmaker instance."""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=get_engine(), future=True)
    return _SessionLocal


def reset_engine() -> None:
    """Dispose the cached engine so the next call re-reads DATABASE_URL."""
    global _engine, _SessionLocal
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """Provide a transactional scope around a series of operations."""
    session = get_sessionmaker()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def fastapi_session() -> Generator[Session, None, None]:
    """FastAPI dependency that yields a database session."""
    session = get_sessionmaker()()
    try:
        yield session
    finally:
        session.close()


def init_database(auto_apply_ddl: Optional[bool] = None, enforce_alembic: Optional[bool] = None) -> Engine:
    """Ensure the database is ready and return the engine."""
    engine = get_engine()
    settings = get_settings()

    auto = settings.auto_apply_ddl if auto_apply_ddl is None else auto_apply_ddl
    enforce = settings.enforce_alembic_migrations if enforce_alembic is None else enforce_alembic

    if auto:
        Base.metadata.create_all(bind=engine)
    elif enforce:
        ensure_up_to_date(engine)

    return engine
