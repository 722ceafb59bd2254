"""CreateService: add a new entity, directly or through a DTO.

DTO pipeline: CHECK FLAG → NEW ENTITY → COPY → ADD → SAVE → RESPOND.
On failure after the flag check the DTO's secondary data is set up again
so the form can be redisplayed with its errors.
"""

from __future__ import annotations

from typing import Any

from crudgen.domain.functions import ServiceFunctions, WhatItShouldBe
from crudgen.services.base import DtoService, EntityService, ServiceFacade
from crudgen.services.dto import EntityDto
from crudgen.services.result import SuccessOrErrors
from crudgen.services.telemetry import trace_span, traced


class EntityCreateService[TEntity](EntityService[TEntity]):
    """Creates a bare entity."""

    @traced
    def create(self, new_item: TEntity) -> SuccessOrErrors[TEntity]:
        self._db.set(self._entity_cls).add(new_item)
        status: SuccessOrErrors[TEntity] = self._db.save_changes_with_validation()
        if status.is_valid:
            status.set_success_with_result(new_item, "Successfully created {0}.", self.item_name)
        return status


class DtoCreateService[TEntity, TDto: EntityDto[Any]](DtoService[TEntity, TDto]):
    """Creates an entity from a DTO."""

    @traced
    def create(self, dto: TDto) -> SuccessOrErrors[TEntity]:
        """Create the entity described by *dto*.

        If anything fails, nothing is added to the store and the DTO's
        secondary data is reset unless it declares DOES_NOT_NEED_SETUP.
        """
        status: SuccessOrErrors[TEntity] = self._dto_cls.check_supported(ServiceFunctions.CREATE)
        if not status.is_valid:
            return status

        entity = self._entity_cls()
        with trace_span("copy_dto_to_entity"):
            status = dto.copy_dto_to_entity(self._db, entity)
        if status.is_valid:
            self._db.set(self._entity_cls).add(entity)
            with trace_span("save"):
                status = self._db.save_changes_with_validation()
            if status.is_valid:
                return status.set_success_with_result(
                    entity, "Successfully created {0}.", self.item_name
                )

        self._setup_if_needed(dto)
        return status


class CreateService(ServiceFacade):
    """Create façade: picks the entity or DTO service from the item's type."""

    entity_service = EntityCreateService
    dto_service = DtoCreateService

    def create(self, new_item: Any) -> SuccessOrErrors[Any]:
        """Create *new_item*, an entity instance or a bound DTO."""
        return self._resolve(type(new_item), WhatItShouldBe.ENTITY_OR_DTO).create(new_item)

    def reset_dto(self, dto: EntityDto[Any]) -> EntityDto[Any]:
        """Reset *dto*'s secondary data after a failed create."""
        return self._resolve(type(dto), WhatItShouldBe.DTO_ONLY).reset_dto(dto)
