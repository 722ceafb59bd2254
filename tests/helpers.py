"""Test helpers that read the store through a fresh session."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from tests.models import Book


def count_rows(engine: Engine, entity_cls: type) -> int:
    """Rows of *entity_cls* as seen by a fresh session."""
    with Session(engine) as session:
        return session.scalar(select(func.count()).select_from(entity_cls)) or 0


def load_book(engine: Engine, book_id: int) -> Book | None:
    with Session(engine) as session:
        return session.get(Book, book_id)
