"""Tests for UpdateSetupService."""

from __future__ import annotations

import pytest
from sqlalchemy.engine import Engine

from crudgen.errors import ConfigurationError
from crudgen.infrastructure.context import DbContext
from crudgen.services.create import CreateService
from crudgen.services.dto import EntityDto
from crudgen.services.update_setup import UpdateSetupService
from tests.helpers import load_book
from tests.models import Book, BookDto, Edition, EditionDto, NoSetupBookDto, ReadOnlyBookDto, Shelf


class ShoutingBookDto(EntityDto[Book]):
    """Projection that writes to the entity it reads."""

    id: int | None = None
    title: str

    @classmethod
    def copy_entity_to_dto(cls, db: DbContext, entity: Book) -> ShoutingBookDto:
        entity.title = entity.title.upper()
        return super().copy_entity_to_dto(db, entity)


class TestGetOriginalEntity:
    def test_found_by_key(self, db: DbContext, seeded: dict[str, int]) -> None:
        result = UpdateSetupService(db).get_original(Book, seeded["dune"])
        assert result.is_valid
        assert result.result.title == "Dune"

    def test_entity_is_untracked(self, db: DbContext, seeded: dict[str, int]) -> None:
        result = UpdateSetupService(db).get_original(Book, seeded["dune"])
        assert result.result not in db.session

    def test_read_keeps_callers_tracked_instance(
        self, db: DbContext, db_engine: Engine
    ) -> None:
        book = Book(title="Dune")
        assert CreateService(db).create(book).is_valid
        result = UpdateSetupService(db).get_original(Book, book.id)
        assert result.result is book
        assert book in db.session
        book.title = "Dune Messiah"
        assert db.save_changes_with_validation().is_valid
        assert load_book(db_engine, book.id).title == "Dune Messiah"

    def test_composite_key_in_mapper_order(self, db: DbContext, seeded: dict[str, int]) -> None:
        result = UpdateSetupService(db).get_original(Edition, seeded["dune"], 1)
        assert result.is_valid
        assert result.result.year == 1965

    def test_not_found(self, db: DbContext, seeded: dict[str, int]) -> None:
        result = UpdateSetupService(db).get_original(Book, 999)
        assert not result.is_valid
        assert result.result is None
        assert result.error_messages == [
            "We could not find the Book you asked for. Has it been deleted by someone else?"
        ]

    def test_wrong_number_of_keys_is_fatal(self, db: DbContext) -> None:
        with pytest.raises(ConfigurationError, match="1 key properties"):
            UpdateSetupService(db).get_original(Book, 1, 2)

    def test_using_where(self, db: DbContext, seeded: dict[str, int]) -> None:
        result = UpdateSetupService(db).get_original_using_where(
            Book, Book.title == "A Wizard of Earthsea"
        )
        assert result.result.id == seeded["earthsea"]

    def test_ambiguous_match_is_an_error(self, db: DbContext, seeded: dict[str, int]) -> None:
        result = UpdateSetupService(db).get_original_using_where(Shelf, Shelf.label == "fiction")
        assert not result.is_valid
        assert result.error_messages == [
            "The lookup found 2 entries of Shelf where exactly one was expected."
        ]


class TestGetOriginalDto:
    def test_projects_and_sets_up(self, db: DbContext, seeded: dict[str, int]) -> None:
        result = UpdateSetupService(db).get_original(BookDto, seeded["dune"])
        assert result.is_valid
        dto = result.result
        assert isinstance(dto, BookDto)
        assert (dto.id, dto.title, dto.author_id) == (seeded["dune"], "Dune", seeded["herbert"])
        assert dto.author_names == ["Frank Herbert", "Ursula K. Le Guin"]
        assert dto.setup_count == 1

    def test_nothing_left_tracked(self, db: DbContext, seeded: dict[str, int]) -> None:
        assert UpdateSetupService(db).get_original(BookDto, seeded["dune"]).is_valid
        assert list(db.session) == []

    def test_projection_changes_are_never_saved(
        self, db: DbContext, db_engine: Engine, seeded: dict[str, int]
    ) -> None:
        result = UpdateSetupService(db).get_original(ShoutingBookDto, seeded["dune"])
        assert result.result.title == "DUNE"
        assert db.save_changes_with_validation().is_valid
        assert load_book(db_engine, seeded["dune"]).title == "Dune"

    def test_no_setup_when_declared(self, db: DbContext, seeded: dict[str, int]) -> None:
        result = UpdateSetupService(db).get_original(NoSetupBookDto, seeded["dune"])
        assert result.result.setup_count == 0

    def test_composite_key(self, db: DbContext, seeded: dict[str, int]) -> None:
        result = UpdateSetupService(db).get_original(EditionDto, seeded["dune"], 1)
        assert result.result == EditionDto(book_id=seeded["dune"], number=1, year=1965)

    def test_not_found(self, db: DbContext, seeded: dict[str, int]) -> None:
        result = UpdateSetupService(db).get_original(BookDto, 999)
        assert not result.is_valid
        assert result.result is None

    def test_update_not_supported(self, db: DbContext, seeded: dict[str, int]) -> None:
        result = UpdateSetupService(db).get_original(ReadOnlyBookDto, seeded["dune"])
        assert not result.is_valid
        assert result.error_messages == [
            "Update of an existing read-only book is not supported in this mode."
        ]

    def test_no_success_message(self, db: DbContext, seeded: dict[str, int]) -> None:
        result = UpdateSetupService(db).get_original(BookDto, seeded["dune"])
        assert result.success_message is None
