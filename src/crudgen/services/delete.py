"""DeleteService: remove an item found by its primary key.

An optional relationship hook runs on the tracked entity before it is
removed, for dependents the store will not cascade on its own. If the
hook reports errors the delete stops there and its result is returned.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

from crudgen.domain.functions import ServiceFunctions, WhatItShouldBe
from crudgen.services._helpers import find_by_keys
from crudgen.services.base import DtoService, EntityService, ServiceFacade
from crudgen.services.dto import EntityDto
from crudgen.services.result import SuccessOrErrors
from crudgen.services.telemetry import traced

if TYPE_CHECKING:
    from crudgen.infrastructure.context import DbContext

type RemoveRelationships = Callable[[DbContext, Any], SuccessOrErrors[Any]]


def _delete(
    db: DbContext,
    entity_cls: type,
    item_name: str,
    keys: Sequence[Any],
    remove_relationships: RemoveRelationships | None,
) -> SuccessOrErrors[Any]:
    found = find_by_keys(db, entity_cls, keys, tracked=True, item_name=item_name)
    if not found.is_valid:
        return found
    entity = found.result

    if remove_relationships is not None:
        related = remove_relationships(db, entity)
        if not related.is_valid:
            db.discard_changes()
            return related

    db.set(entity_cls).remove(entity)
    status = db.save_changes_with_validation()
    if status.is_valid:
        status.set_success_message("Successfully deleted {0}.", item_name)
    return status


class EntityDeleteService[TEntity](EntityService[TEntity]):
    @traced
    def delete(self, *keys: Any) -> SuccessOrErrors[Any]:
        return _delete(self._db, self._entity_cls, self.item_name, keys, None)

    @traced
    def delete_with_relationships(
        self, remove_relationships: RemoveRelationships, *keys: Any
    ) -> SuccessOrErrors[Any]:
        return _delete(self._db, self._entity_cls, self.item_name, keys, remove_relationships)


class DtoDeleteService[TEntity, TDto: EntityDto[Any]](DtoService[TEntity, TDto]):
    """Deletes the entity behind a DTO type, if the DTO allows deletes."""

    @traced
    def delete(self, *keys: Any) -> SuccessOrErrors[Any]:
        status = self._dto_cls.check_supported(ServiceFunctions.DELETE)
        if not status.is_valid:
            return status
        return _delete(self._db, self._entity_cls, self.item_name, keys, None)

    @traced
    def delete_with_relationships(
        self, remove_relationships: RemoveRelationships, *keys: Any
    ) -> SuccessOrErrors[Any]:
        status = self._dto_cls.check_supported(ServiceFunctions.DELETE)
        if not status.is_valid:
            return status
        return _delete(self._db, self._entity_cls, self.item_name, keys, remove_relationships)


class DeleteService(ServiceFacade):
    """Delete façade: the type decides entity or DTO flavour."""

    entity_service = EntityDeleteService
    dto_service = DtoDeleteService

    def delete(self, type_arg: type, *keys: Any) -> SuccessOrErrors[Any]:
        """Delete the *type_arg* item whose primary key equals *keys*."""
        return self._resolve(type_arg, WhatItShouldBe.ENTITY_OR_DTO).delete(*keys)

    def delete_with_relationships(
        self,
        type_arg: type,
        remove_relationships: RemoveRelationships,
        *keys: Any,
    ) -> SuccessOrErrors[Any]:
        service = self._resolve(type_arg, WhatItShouldBe.ENTITY_OR_DTO)
        return service.delete_with_relationships(remove_relationships, *keys)
