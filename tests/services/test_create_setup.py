"""Tests for CreateSetupService."""

from __future__ import annotations

import pytest
from sqlalchemy.engine import Engine

from crudgen.errors import ConfigurationError
from crudgen.infrastructure.context import DbContext
from crudgen.services.create import CreateService
from crudgen.services.create_setup import CreateSetupService
from tests.helpers import count_rows
from tests.models import Book, BookDto, NoSetupBookDto, ReadOnlyBookDto


class TestCreateSetup:
    def test_blank_dto_with_secondary_data(self, db: DbContext, seeded: dict[str, int]) -> None:
        result = CreateSetupService(db).get_dto(BookDto)
        assert result.is_valid
        assert isinstance(result.result, BookDto)
        assert result.result.id is None
        assert result.result.title is None
        assert result.result.author_names == ["Frank Herbert", "Ursula K. Le Guin"]

    def test_no_setup(self, db: DbContext) -> None:
        result = CreateSetupService(db).get_dto(NoSetupBookDto)
        assert result.result.setup_count == 0

    def test_create_not_supported(self, db: DbContext) -> None:
        result = CreateSetupService(db).get_dto(ReadOnlyBookDto)
        assert not result.is_valid
        assert result.result is None

    def test_entities_are_rejected(self, db: DbContext) -> None:
        with pytest.raises(ConfigurationError):
            CreateSetupService(db).get_dto(Book)  # type: ignore[arg-type]


class TestBlankDtoIntoCreate:
    def test_filled_blank_dto_creates(self, db: DbContext, db_engine: Engine) -> None:
        dto = CreateSetupService(db).get_dto(BookDto).result
        dto.title = "Dune"
        result = CreateService(db).create(dto)
        assert result.is_valid, result.error_messages
        assert count_rows(db_engine, Book) == 1

    def test_untouched_blank_dto_is_a_business_error(
        self, db: DbContext, db_engine: Engine, seeded: dict[str, int]
    ) -> None:
        dto = CreateSetupService(db).get_dto(BookDto).result
        result = CreateService(db).create(dto)
        assert result.error_messages == ["A book needs a title."]
        assert dto.setup_count == 2
        assert count_rows(db_engine, Book) == 2
