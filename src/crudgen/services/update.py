"""UpdateService: write an edited item back to the store.

DTO pipeline: CHECK FLAG → LOAD TRACKED → COPY → SAVE → RESPOND.
As with create, a failure after the flag check resets the DTO's secondary
data so the edit form can be shown again.
"""

from __future__ import annotations

from typing import Any

from crudgen.domain.functions import ServiceFunctions, WhatItShouldBe
from crudgen.services._helpers import find_by_keys
from crudgen.services.base import DtoService, EntityService, ServiceFacade
from crudgen.services.dto import EntityDto
from crudgen.services.result import SuccessOrErrors
from crudgen.services.telemetry import trace_span, traced


class EntityUpdateService[TEntity](EntityService[TEntity]):
    """Updates an entity that was edited outside the session."""

    @traced
    def update(self, item: TEntity) -> SuccessOrErrors[TEntity]:
        """Overwrite the stored row that has *item*'s key with *item*'s state."""
        keys = [getattr(item, name) for name in self._db.get_key_properties(self._entity_cls)]
        found = find_by_keys(self._db, self._entity_cls, keys, tracked=True)
        if not found.is_valid:
            return found

        item = self._db.set(self._entity_cls).attach_modified(item)
        status: SuccessOrErrors[TEntity] = self._db.save_changes_with_validation()
        if status.is_valid:
            status.set_success_with_result(item, "Successfully updated {0}.", self.item_name)
        return status


class DtoUpdateService[TEntity, TDto: EntityDto[Any]](DtoService[TEntity, TDto]):
    """Updates an entity from an edited DTO."""

    @traced
    def update(self, dto: TDto) -> SuccessOrErrors[TEntity]:
        status: SuccessOrErrors[TEntity] = self._dto_cls.check_supported(ServiceFunctions.UPDATE)
        if not status.is_valid:
            return status

        found = find_by_keys(
            self._db,
            self._entity_cls,
            dto.key_values(self._db),
            tracked=True,
            item_name=self.item_name,
        )
        if not found.is_valid:
            status = found
        else:
            entity = found.result
            with trace_span("copy_dto_to_entity"):
                status = dto.copy_dto_to_entity(self._db, entity)
            if status.is_valid:
                with trace_span("save"):
                    status = self._db.save_changes_with_validation()
                if status.is_valid:
                    return status.set_success_with_result(
                        entity, "Successfully updated {0}.", self.item_name
                    )
            else:
                # Copy may have half-applied changes to the tracked entity
                self._db.discard_changes()

        self._setup_if_needed(dto)
        return status


class UpdateService(ServiceFacade):
    """Update façade: picks the entity or DTO service from the item's type."""

    entity_service = EntityUpdateService
    dto_service = DtoUpdateService

    def update(self, item: Any) -> SuccessOrErrors[Any]:
        return self._resolve(type(item), WhatItShouldBe.ENTITY_OR_DTO).update(item)

    def reset_dto(self, dto: EntityDto[Any]) -> EntityDto[Any]:
        return self._resolve(type(dto), WhatItShouldBe.DTO_ONLY).reset_dto(dto)
