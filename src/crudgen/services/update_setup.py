"""UpdateSetupService: load the original item that an edit form starts from.

Keys must be given in the order the mapper declares the primary key.
Entities come back untracked; DTOs come back projected from the entity
with their secondary data set up.
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


class EntityUpdateSetupService[TEntity](EntityService[TEntity]):
    @traced
    def get_original(self, *keys: Any) -> SuccessOrErrors[TEntity]:
        return self.get_original_using_where(key_filter(self._db, self._entity_cls, keys))

    @traced
    def get_original_using_where(
        self, *criteria: ColumnElement[bool]
    ) -> SuccessOrErrors[TEntity]:
        """The single untracked entity matching *criteria*."""
        return realise_single(self._db, self._entity_cls, criteria, tracked=False)


class DtoUpdateSetupService[TEntity, TDto: EntityDto[Any]](DtoService[TEntity, TDto]):
    @traced
    def get_original(self, *keys: Any) -> SuccessOrErrors[TDto]:
        return self.get_original_using_where(key_filter(self._db, self._entity_cls, keys))

    @traced
    def get_original_using_where(self, *criteria: ColumnElement[bool]) -> SuccessOrErrors[TDto]:
        """Project the single entity matching *criteria* into a DTO.

        The DTO's secondary data is set up unless it declares
        DOES_NOT_NEED_SETUP.
        """
        status: SuccessOrErrors[TDto] = self._dto_cls.check_supported(ServiceFunctions.UPDATE)
        if not status.is_valid:
            return status

        with self._db.untracked():
            found = realise_single(
                self._db, self._entity_cls, criteria, tracked=True, item_name=self.item_name
            )
            if not found.is_valid:
                return status.combine_errors(found)
            dto = self._dto_cls.copy_entity_to_dto(self._db, found.result)
            self._setup_if_needed(dto)
        status.result = dto
        return status


class UpdateSetupService(ServiceFacade):
    """Update-setup façade: the type decides entity or DTO flavour."""

    entity_service = EntityUpdateSetupService
    dto_service = DtoUpdateSetupService

    def get_original(self, type_arg: type, *keys: Any) -> SuccessOrErrors[Any]:
        """The item of *type_arg* whose primary key equals *keys*."""
        return self._resolve(type_arg, WhatItShouldBe.ENTITY_OR_DTO).get_original(*keys)

    def get_original_using_where(
        self, type_arg: type, *criteria: ColumnElement[bool]
    ) -> SuccessOrErrors[Any]:
        service = self._resolve(type_arg, WhatItShouldBe.ENTITY_OR_DTO)
        return service.get_original_using_where(*criteria)
