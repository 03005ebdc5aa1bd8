"""Integration tests: alembic migrations build the schema the SQL storage expects."""
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect
from sqlalchemy.orm import sessionmaker

from conftest import make_vehicle
from storage.sql import SqlVehicleStorage

pytestmark = pytest.mark.integration

BACKEND_DIR = Path(__file__).resolve().parents[2]


def _alembic_config(url: str) -> Config:
    cfg = Config()
    cfg.set_main_option("script_location", str(BACKEND_DIR / "alembic"))
    cfg.set_main_option("sqlalchemy.url", url)
    return cfg


def test_upgrade_head_creates_tables_used_by_storage(tmp_path):
    url = f"sqlite:///{tmp_path / 'test_migrations.db'}"
    command.upgrade(_alembic_config(url), "head")

    engine = create_engine(url)
    try:
        inspector = inspect(engine)
        assert {"vehicle", "job", "alembic_version"} <= set(inspector.get_table_names())
        assert "current_job_id" in {c["name"] for c in inspector.get_columns("vehicle")}

        vehicles = SqlVehicleStorage(sessionmaker(bind=engine, expire_on_commit=False))
        vehicles.create_vehicle(make_vehicle("v1", battery_level=64.5))
        assert vehicles.get_vehicle("v1").battery_level == 64.5
    finally:
        engine.dispose()


def test_downgrade_base_drops_tables(tmp_path):
    url = f"sqlite:///{tmp_path / 'test_migrations.db'}"
    cfg = _alembic_config(url)
    command.upgrade(cfg, "head")
    command.downgrade(cfg, "base")

    engine = create_engine(url)
    try:
        tables = set(inspect(engine).get_table_names())
        assert "vehicle" not in tables
        assert "job" not in tables
    finally:
        engine.dispose()
