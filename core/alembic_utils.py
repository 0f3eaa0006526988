from __future__ import annotations

from pathlib import Path

from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory

ALEMBIC_INI = Path(__file__).resolve().parent.parent / "alembic.ini"


def expected_heads(cfg_path: Path = ALEMBIC_INI) -> set[str]:
    if not cfg_path.exists():
        raise RuntimeError(f"Alembic config not found at {cfg_path}")
    cfg = Config(str(cfg_path))
    cfg.set_main_option("script_location", str(cfg_path.parent / "alembic"))
    return set(ScriptDirectory.from_config(cfg).get_heads())


def ensure_up_to_date(engine) -> None:
    """Raise if the database revision is behind the latest Alembic head."""
    expected = expected_heads()
    with engine.connect() as conn:
        current = set(MigrationContext.configure(conn).get_current_heads() or [])

    if not current:
        raise RuntimeError(
            "Database has no Alembic revision. Run 'alembic upgrade head' before starting the portal."
        )
    if current != expected:
        raise RuntimeError(
            f"Alembic migration mismatch. Database heads={current}, expected={expected}. "
            "Apply pending migrations with 'alembic upgrade head'."
        )
