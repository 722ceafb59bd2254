"""SQLAlchemy engine setup and key-based filter building."""

from crudgen.infrastructure.database.engine import create_db_engine, init_database
from crudgen.infrastructure.database.filters import (
    build_filter,
    column_properties,
    is_mapped_class,
    key_properties,
)

__all__ = [
    "build_filter",
    "column_properties",
    "create_db_engine",
    "init_database",
    "is_mapped_class",
    "key_properties",
]
