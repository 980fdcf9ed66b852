from __future__ import annotations

import os
from typing import Final

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from .records import Base

_DATABASE_URL_ENV_VAR: Final[str] = "GITHUB_IMPORTER_DATABASE_URL"
DEFAULT_DATABASE_URL: Final[str] = "sqlite:///importer.db"


def get_database_url(url: str | None = None) -> str:
    """Database URL from the argument, env var GITHUB_IMPORTER_DATABASE_URL, or the SQLite default."""
    return url or os.environ.get(_DATABASE_URL_ENV_VAR) or DEFAULT_DATABASE_URL


def _configure_sqlite_connection(dbapi_connection, _connection_record) -> None:  # noqa: ANN001
    # Let SQLAlchemy emit BEGIN itself so SAVEPOINTs behave under pysqlite.
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _begin_sqlite_transaction(connection) -> None:  # noqa: ANN001
    connection.exec_driver_sql("BEGIN")


def create_db_engine(url: str, *, echo: bool = False) -> Engine:
    """Create an engine and make sure all tables exist."""
    engine = create_engine(url, echo=echo, future=True)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _configure_sqlite_connection)
        event.listen(engine, "begin", _begin_sqlite_transaction)
    Base.metadata.create_all(engine)
    return engine


def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(engine, expire_on_commit=False)
