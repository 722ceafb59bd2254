"""Key metadata and key-based filters for mapped entity classes."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sqlalchemy import and_
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Mapper
from sqlalchemy.sql.elements import ColumnElement

from crudgen.errors import ConfigurationError


def _mapper_for(entity_cls: Any) -> Mapper[Any] | None:
    if not isinstance(entity_cls, type):
        return None
    insp = sa_inspect(entity_cls, raiseerr=False)
    return insp if isinstance(insp, Mapper) else None


def is_mapped_class(candidate: Any) -> bool:
    """True if *candidate* is a class mapped by the SQLAlchemy ORM."""
    return _mapper_for(candidate) is not None


def key_properties(entity_cls: type) -> list[str]:
    """Primary-key attribute names of *entity_cls*, in mapper order."""
    mapper = _mapper_for(entity_cls)
    if mapper is None:
        msg = f"{entity_cls!r} is not a mapped entity class, so it has no key properties."
        raise ConfigurationError(msg, offending=entity_cls)
    return [mapper.get_property_by_column(col).key for col in mapper.primary_key]


def build_filter(
    entity_cls: type,
    key_names: Sequence[str],
    key_values: Sequence[Any],
) -> ColumnElement[bool]:
    """Build ``k1 == v1 AND k2 == v2 ...`` over *entity_cls*.

    *key_values* must be given in the same order as *key_names*.

    Raises:
        ConfigurationError: If the lengths differ, no keys are given, or a
            name is not a column attribute of *entity_cls*.
    """
    mapper = _mapper_for(entity_cls)
    if mapper is None:
        msg = f"Cannot build a key filter for {entity_cls!r}: it is not a mapped entity class."
        raise ConfigurationError(msg, offending=entity_cls)
    if not key_names:
        msg = f"Cannot build a key filter for {entity_cls.__name__}: no key properties given."
        raise ConfigurationError(msg, offending=entity_cls)
    if len(key_names) != len(key_values):
        msg = (
            f"{entity_cls.__name__} has {len(key_names)} key properties "
            f"({', '.join(key_names)}) but {len(key_values)} key values were given."
        )
        raise ConfigurationError(msg, offending=tuple(key_values))

    column_names = set(mapper.column_attrs.keys())
    clauses: list[ColumnElement[bool]] = []
    for name, value in zip(key_names, key_values, strict=True):
        if name not in column_names:
            msg = f"{entity_cls.__name__} has no column property named {name!r}."
            raise ConfigurationError(msg, offending=name)
        clauses.append(getattr(entity_cls, name) == value)
    return and_(*clauses)


def column_properties(entity_cls: type) -> set[str]:
    """Names of the column attributes mapped on *entity_cls*."""
    mapper = _mapper_for(entity_cls)
    if mapper is None:
        msg = f"{entity_cls!r} is not a mapped entity class."
        raise ConfigurationError(msg, offending=entity_cls)
    return set(mapper.column_attrs.keys())
