"""ListService: every item of a type, optionally filtered."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from crudgen.domain.functions import ServiceFunctions, WhatItShouldBe
from crudgen.services.base import DtoService, EntityService, ServiceFacade
from crudgen.services.dto import EntityDto
from crudgen.services.result import SuccessOrErrors
from crudgen.services.telemetry import traced

if TYPE_CHECKING:
    from sqlalchemy.sql.elements import ColumnElement


class EntityListService[TEntity](EntityService[TEntity]):
    @traced
    def get_all(self, *criteria: ColumnElement[bool]) -> SuccessOrErrors[list[TEntity]]:
        """Untracked rows matching all *criteria* (every row if none)."""
        rows = self._db.set(self._entity_cls).query(*criteria, tracked=False)
        return SuccessOrErrors(result=rows)


class DtoListService[TEntity, TDto: EntityDto[Any]](DtoService[TEntity, TDto]):
    @traced
    def get_all(self, *criteria: ColumnElement[bool]) -> SuccessOrErrors[list[TDto]]:
        """Rows matching *criteria*, each projected into a DTO."""
        status: SuccessOrErrors[list[TDto]] = self._dto_cls.check_supported(
            ServiceFunctions.LIST
        )
        if not status.is_valid:
            return status
        with self._db.untracked():
            rows = self._db.set(self._entity_cls).query(*criteria, tracked=True)
            status.result = [self._dto_cls.copy_entity_to_dto(self._db, row) for row in rows]
        return status


class ListService(ServiceFacade):
    entity_service = EntityListService
    dto_service = DtoListService

    def get_all(self, type_arg: type, *criteria: ColumnElement[bool]) -> SuccessOrErrors[Any]:
        return self._resolve(type_arg, WhatItShouldBe.ENTITY_OR_DTO).get_all(*criteria)
