from __future__ import annotations

import pytest
from sqlalchemy import create_engine, inspect

from core.alembic_utils import ALEMBIC_INI, ensure_up_to_date, expected_heads
from core.settings import reset_settings_cache


def test_single_head():
    assert expected_heads() == {"0001_initial"}


def test_upgrade_creates_schema_and_passes_check(tmp_path, monkeypatch):
    from alembic import command
    from alembic.config import Config

    url = f"sqlite:///{tmp_path / 'mig.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    reset_settings_cache()
    engine = create_engine(url, future=True)
    try:
        with pytest.raises(RuntimeError):
            ensure_up_to_date(engine)

        cfg = Config(str(ALEMBIC_INI))
        cfg.set_main_option("script_location", str(ALEMBIC_INI.parent / "alembic"))
        command.upgrade(cfg, "head")

        tables = set(inspect(engine).get_table_names())
        assert {"employees", "paystubs"} <= tables
        ensure_up_to_date(engine)
    finally:
        engine.dispose()
        reset_settings_cache()
