"""BaseService: abstract foundation for all crudgen services.

Every service receives a :class:`DbContext` at construction time. The
context provides typed collections, key metadata and the validating save.
Concrete services are additionally parameterized by the entity class, and
by the DTO class for the DTO flavour. Façades hold no entity type; they
pick the concrete service from the type they are called with.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from crudgen.services.decode import decode_to_service

if TYPE_CHECKING:
    from crudgen.domain.functions import WhatItShouldBe
    from crudgen.infrastructure.context import DbContext
    from crudgen.services.dto import EntityDto


class BaseService:
    """Abstract base for all service-layer classes."""

    def __init__(self, db: DbContext) -> None:
        self._db = db


class ServiceFacade(BaseService):
    """Base for the type-dispatching façades.

    Subclasses set :attr:`entity_service` and :attr:`dto_service` to the
    concrete classes that :meth:`_resolve` picks between.

    Usage::

        class CreateService(ServiceFacade):
            entity_service = EntityCreateService
            dto_service = DtoCreateService

            def create(self, new_item: Any) -> SuccessOrErrors[Any]:
                return self._resolve(type(new_item), WhatItShouldBe.ENTITY_OR_DTO).create(new_item)
    """

    entity_service: ClassVar[type[EntityService[Any]] | None] = None
    dto_service: ClassVar[type[DtoService[Any, Any]] | None] = None

    def _resolve(self, type_arg: Any, what: WhatItShouldBe) -> Any:
        """Concrete service for *type_arg*, cached in the unit of work."""
        return decode_to_service(type(self), type_arg, what, self._db)


class EntityService[TEntity](BaseService):
    """Base for services that work directly on a mapped entity class."""

    def __init__(self, db: DbContext, entity_cls: type[TEntity]) -> None:
        super().__init__(db)
        self._entity_cls = entity_cls

    @property
    def entity_cls(self) -> type[TEntity]:
        return self._entity_cls

    @property
    def item_name(self) -> str:
        return self._entity_cls.__name__


class DtoService[TEntity, TDto: EntityDto[Any]](BaseService):
    """Base for services that work through a DTO bound to an entity."""

    def __init__(self, db: DbContext, entity_cls: type[TEntity], dto_cls: type[TDto]) -> None:
        super().__init__(db)
        self._entity_cls = entity_cls
        self._dto_cls = dto_cls

    @property
    def entity_cls(self) -> type[TEntity]:
        return self._entity_cls

    @property
    def dto_cls(self) -> type[TDto]:
        return self._dto_cls

    @property
    def item_name(self) -> str:
        return self._dto_cls.data_item_name()

    def _setup_if_needed(self, dto: TDto) -> None:
        if self._dto_cls.needs_setup():
            dto.setup_secondary_data(self._db)

    def reset_dto(self, dto: TDto) -> TDto:
        """Re-run secondary data setup so a failed form can be shown again."""
        self._setup_if_needed(dto)
        return dto
