"""Shared pytest fixtures and test helpers for crudgen tests."""

from __future__ import annotations

import logging
from collections.abc import Generator
from pathlib import Path

import pytest
import structlog
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from crudgen.infrastructure.context import DbContext
from crudgen.infrastructure.database.engine import init_database
from crudgen.services.telemetry import disable_telemetry
from tests.models import Author, Base, Book, Edition, Shelf


@pytest.fixture
def db_engine(tmp_path: Path) -> Generator[Engine]:
    """File-backed SQLite engine with every test table created."""
    engine = init_database(f"sqlite:///{tmp_path / 'crudgen.db'}", Base.metadata)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def db(db_engine: Engine) -> Generator[DbContext]:
    """One unit of work on the test database."""
    context = DbContext(db_engine)
    try:
        yield context
    finally:
        context.close()


@pytest.fixture
def seeded(db_engine: Engine) -> dict[str, int]:
    """Two authors, two books, one edition and two same-label shelves.

    Returns the generated ids by name.
    """
    with Session(db_engine) as session:
        herbert = Author(name="Frank Herbert")
        le_guin = Author(name="Ursula K. Le Guin")
        session.add_all([herbert, le_guin])
        session.flush()
        dune = Book(title="Dune", author_id=herbert.id)
        earthsea = Book(title="A Wizard of Earthsea", author_id=le_guin.id)
        session.add_all([dune, earthsea])
        session.flush()
        session.add(Edition(book_id=dune.id, number=1, year=1965))
        session.add_all([Shelf(label="fiction"), Shelf(label="fiction")])
        session.commit()
        return {
            "herbert": herbert.id,
            "le_guin": le_guin.id,
            "dune": dune.id,
            "earthsea": earthsea.id,
        }


@pytest.fixture
def restore_logging() -> Generator[None]:
    """Restore every logger configure_logging touches, and structlog."""
    saved: dict[str, tuple[list[logging.Handler], int, bool]] = {}
    for name in ("", "crudgen", "sqlalchemy.engine"):
        logger = logging.getLogger(name)
        saved[name] = (logger.handlers[:], logger.level, logger.propagate)
    yield
    for name, (handlers, level, propagate) in saved.items():
        logger = logging.getLogger(name)
        logger.handlers = handlers
        logger.setLevel(level)
        logger.propagate = propagate
    structlog.reset_defaults()


@pytest.fixture(autouse=True)
def _reset_telemetry() -> Generator[None]:
    yield
    disable_telemetry()
