"""Database engine and session for the SQL storage backend (SQLite dev / PostgreSQL prod)."""
import os

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from utils.config import DATABASE_URL

# Runtime safety: when TESTING=true, never use production DB.
if os.environ.get("TESTING") == "true":
    url = DATABASE_URL
    if "fleet.db" in url or (":memory:" not in url and "test" not in url.lower().split("?")[0]):
        raise RuntimeError(
            "Tests must not run against production. Set TESTING_DATABASE_URL to sqlite:///:memory: "
            "(or another test URL containing :memory: or 'test')."
        )


def build_engine(database_url: str):
    """Create an engine; in-memory SQLite uses one shared connection so all sessions see the same DB."""
    connect_args = {"check_same_thread": False} if "sqlite" in database_url else {}
    engine_kw = {"connect_args": connect_args, "echo": False}
    if "sqlite" in database_url and (":memory:" in database_url or database_url == "sqlite://"):
        engine_kw["poolclass"] = StaticPool
    engine = create_engine(database_url, **engine_kw)

    if "sqlite" in database_url:

        @event.listens_for(engine, "connect")
        def _sqlite_fk(dbapi_conn, connection_record):
            dbapi_conn.execute("PRAGMA foreign_keys=ON")

    return engine


_engine = build_engine(DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=_engine)


def init_db(engine=None) -> None:
    """Create vehicle and job tables directly, for in-memory test databases. Deployed databases are migrated with alembic."""
    from models import Base
    from models.job import Job  # noqa: F401 - register with Base
    from models.vehicle import Vehicle  # noqa: F401

    Base.metadata.create_all(engine if engine is not None else _engine)
