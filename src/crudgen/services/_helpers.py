"""Shared service-layer helper functions."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from crudgen.infrastructure.database.filters import build_filter
from crudgen.services.result import SuccessOrErrors

if TYPE_CHECKING:
    from sqlalchemy.sql.elements import ColumnElement

    from crudgen.infrastructure.context import DbContext


def realise_single[TEntity](
    db: DbContext,
    entity_cls: type[TEntity],
    criteria: Sequence[ColumnElement[bool]],
    *,
    tracked: bool,
    item_name: str | None = None,
) -> SuccessOrErrors[TEntity]:
    """Run *criteria* and insist on exactly one row.

    Zero rows and several rows are both business errors; the first of
    several rows is never picked.
    """
    name = item_name or entity_cls.__name__
    status: SuccessOrErrors[TEntity] = SuccessOrErrors()
    rows = db.set(entity_cls).query(*criteria, tracked=tracked)
    if not rows:
        return status.add_single_error(
            "We could not find the {0} you asked for. Has it been deleted by someone else?",
            name,
        )
    if len(rows) > 1:
        return status.add_single_error(
            "The lookup found {0} entries of {1} where exactly one was expected.",
            len(rows),
            name,
        )
    status.result = rows[0]
    return status


def key_filter(db: DbContext, entity_cls: type, keys: Sequence[Any]) -> ColumnElement[bool]:
    """Equality filter over *entity_cls*'s primary key, values in key order."""
    return build_filter(entity_cls, db.get_key_properties(entity_cls), keys)


def find_by_keys[TEntity](
    db: DbContext,
    entity_cls: type[TEntity],
    keys: Sequence[Any],
    *,
    tracked: bool,
    item_name: str | None = None,
) -> SuccessOrErrors[TEntity]:
    """Exactly one row of *entity_cls* whose primary key equals *keys*."""
    return realise_single(
        db,
        entity_cls,
        [key_filter(db, entity_cls, keys)],
        tracked=tracked,
        item_name=item_name,
    )
