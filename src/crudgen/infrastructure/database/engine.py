"""Database engine setup.

Any SQLAlchemy URL is accepted. For SQLite, foreign keys are switched on
for every new DBAPI connection so that relationship constraints surface as
save errors the same way they do on server databases.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import MetaData, create_engine, event
from sqlalchemy.engine import Engine


def create_db_engine(url: str, *, echo: bool = False) -> Engine:
    """Create an engine for *url*, enabling SQLite foreign keys."""
    engine = create_engine(url, echo=echo)

    if engine.dialect.name == "sqlite":

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def init_database(url: str, metadata: MetaData, *, echo: bool = False) -> Engine:
    """Create an engine and all tables described by *metadata*.

    Idempotent; existing tables are left alone.
    """
    engine = create_db_engine(url, echo=echo)
    metadata.create_all(engine)
    return engine
