"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, crudgen.toml only contains overrides.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

# Substrings of DBAPI error text mapped to messages fit for a form.
# Matching is case-insensitive and the first hit wins.
DEFAULT_SQL_ERROR_MESSAGES: dict[str, str] = {
    "unique constraint": (
        "One of the properties is marked as unique and there is already an entry with that value."
    ),
    "duplicate key": (
        "One of the properties is marked as unique and there is already an entry with that value."
    ),
    "foreign key constraint": (
        "This operation failed because another data entry uses this entry."
    ),
    "not null constraint": "A required value was missing when saving.",
}


class DatabaseConfig(BaseModel):
    """[database] section."""

    model_config = {"frozen": True}

    url: str = "sqlite://"
    echo: bool = False


class SaveConfig(BaseModel):
    """[save] section."""

    model_config = {"frozen": True}

    validate_entities: bool = True
    sql_error_messages: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_SQL_ERROR_MESSAGES)
    )

    def describe_sql_error(self, error_text: str) -> str | None:
        """Return the configured message for *error_text*, or None."""
        lowered = error_text.lower()
        for fragment, message in self.sql_error_messages.items():
            if fragment.lower() in lowered:
                return message
        return None


class CrudgenConfig(BaseModel):
    """Root model for a crudgen.toml file."""

    model_config = {"frozen": True}

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    save: SaveConfig = Field(default_factory=SaveConfig)
