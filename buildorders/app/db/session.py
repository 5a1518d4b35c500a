from __future__ import annotations

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from buildorders.app.core.config import settings


def _enable_sqlite_locking(engine: Engine) -> None:
    """
    SQLite (tests, dev local) : pas de SELECT ... FOR UPDATE.

    On ouvre chaque transaction en BEGIN IMMEDIATE, ce qui prend le verrou
    d'écriture dès le début : les créations concurrentes sont sérialisées
    comme avec le verrou de ligne PostgreSQL. FK activées au passage.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # désactive la gestion de transaction de pysqlite
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def make_engine(url: str, **kwargs) -> Engine:
    if url.startswith("sqlite"):
        kwargs.setdefault(
            "connect_args",
            {"timeout": settings.lock_timeout_ms / 1000, "check_same_thread": False},
        )
        engine = create_engine(url, **kwargs)
        _enable_sqlite_locking(engine)
        return engine
    return create_engine(url, pool_pre_ping=True, **kwargs)


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


engine = make_engine(settings.database_url, echo=settings.sql_echo)
SessionLocal = make_session_factory(engine)
