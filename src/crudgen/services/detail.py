"""DetailService: read one item for display.

Unlike update setup, no secondary data is set up: a detail view shows
the stored values only.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from crudgen.domain.functions import ServiceFunctions, WhatItShouldBe
from crudgen.services._helpers import key_filter, realise_single
from crudgen.services.base import DtoService, EntityService, ServiceFacade
from crudgen.services.dto import EntityDto
from crudgen.services.result import SuccessOrErrors
from crudgen.services.telemetry import traced

if TYPE_CHECKING:
    from sqlalchemy.sql.elements import ColumnElement


class EntityDetailService[TEntity](EntityService[TEntity]):
    @traced
    def get_detail(self, *keys: Any) -> SuccessOrErrors[TEntity]:
        criteria = key_filter(self._db, self._entity_cls, keys)
        return realise_single(self._db, self._entity_cls, [criteria], tracked=False)

    @traced
    def get_detail_using_where(self, *criteria: ColumnElement[bool]) -> SuccessOrErrors[TEntity]:
        return realise_single(self._db, self._entity_cls, criteria, tracked=False)


class DtoDetailService[TEntity, TDto: EntityDto[Any]](DtoService[TEntity, TDto]):
    @traced
    def get_detail(self, *keys: Any) -> SuccessOrErrors[TDto]:
        return self.get_detail_using_where(key_filter(self._db, self._entity_cls, keys))

    @traced
    def get_detail_using_where(self, *criteria: ColumnElement[bool]) -> SuccessOrErrors[TDto]:
        status: SuccessOrErrors[TDto] = self._dto_cls.check_supported(ServiceFunctions.DETAIL)
        if not status.is_valid:
            return status

        with self._db.untracked():
            found = realise_single(
                self._db, self._entity_cls, criteria, tracked=True, item_name=self.item_name
            )
            if not found.is_valid:
                return status.combine_errors(found)
            status.result = self._dto_cls.copy_entity_to_dto(self._db, found.result)
        return status


class DetailService(ServiceFacade):
    entity_service = EntityDetailService
    dto_service = DtoDetailService

    def get_detail(self, type_arg: type, *keys: Any) -> SuccessOrErrors[Any]:
        return self._resolve(type_arg, WhatItShouldBe.ENTITY_OR_DTO).get_detail(*keys)

    def get_detail_using_where(
        self, type_arg: type, *criteria: ColumnElement[bool]
    ) -> SuccessOrErrors[Any]:
        service = self._resolve(type_arg, WhatItShouldBe.ENTITY_OR_DTO)
        return service.get_detail_using_where(*criteria)
