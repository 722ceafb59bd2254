"""EntityDto: the contract every DTO implements.

A DTO is a pydantic model bound to exactly one mapped entity class through
its generic base::

    class BookDto(EntityDto[Book]):
        supported_functions = ServiceFunctions.ALL_CRUD
        id: int | None = None
        title: str
        author_names: Annotated[list[str], DoNotCopyBack()] = []

        def setup_secondary_data(self, db: DbContext) -> None:
            self.author_names = [a.name for a in db.set(Author).all()]

The binding is read from the class declaration at resolution time, so a new
DTO needs no registration anywhere.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar, Generic, Self, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.fields import FieldInfo

from crudgen.domain.functions import ServiceFunctions
from crudgen.errors import ConfigurationError
from crudgen.infrastructure.database.filters import column_properties
from crudgen.services.result import SuccessOrErrors

if TYPE_CHECKING:
    from crudgen.infrastructure.context import DbContext

TEntity = TypeVar("TEntity")

_NOT_SUPPORTED: dict[ServiceFunctions, str] = {
    ServiceFunctions.CREATE: "Create of a new {0} is not supported in this mode.",
    ServiceFunctions.UPDATE: "Update of an existing {0} is not supported in this mode.",
    ServiceFunctions.DELETE: "Delete of an existing {0} is not supported in this mode.",
    ServiceFunctions.DETAIL: "Detail of an existing {0} is not supported in this mode.",
    ServiceFunctions.LIST: "List of {0} is not supported in this mode.",
}


class DoNotCopyBack:
    """``Annotated`` marker for DTO fields that are never written to the entity."""

    def __repr__(self) -> str:
        return "DoNotCopyBack()"


def _copies_back(field: FieldInfo) -> bool:
    return not any(isinstance(m, DoNotCopyBack) for m in field.metadata)


class EntityDto(BaseModel, Generic[TEntity]):  # noqa: UP046
    """Base class for DTOs bound to the entity class ``TEntity``.

    Class attributes:
        supported_functions: Operations this DTO allows, plus setup hints.
        item_name: Display name used in messages. Defaults to the entity
            class name.
    """

    model_config = ConfigDict(from_attributes=True)

    supported_functions: ClassVar[ServiceFunctions] = ServiceFunctions.ALL_CRUD
    item_name: ClassVar[str | None] = None

    # ------------------------------------------------------------------
    # Declaration
    # ------------------------------------------------------------------

    @classmethod
    def bound_entity(cls) -> type | None:
        """The entity class this DTO is bound to, or None if unbound.

        Walks the MRO for a parametrized ``EntityDto`` (or generic subclass)
        whose first type argument is a concrete class.
        """
        for klass in cls.__mro__:
            meta = getattr(klass, "__pydantic_generic_metadata__", None)
            if not meta:
                continue
            origin = meta.get("origin")
            args = meta.get("args") or ()
            if origin is None or not args:
                continue
            if not (isinstance(origin, type) and issubclass(origin, EntityDto)):
                continue
            if isinstance(args[0], type):
                return args[0]
        return None

    @classmethod
    def data_item_name(cls) -> str:
        if cls.item_name:
            return cls.item_name
        entity = cls.bound_entity()
        return entity.__name__ if entity is not None else cls.__name__

    @classmethod
    def supports(cls, function: ServiceFunctions) -> bool:
        return function in cls.supported_functions

    @classmethod
    def needs_setup(cls) -> bool:
        return ServiceFunctions.DOES_NOT_NEED_SETUP not in cls.supported_functions

    @classmethod
    def check_supported(cls, function: ServiceFunctions) -> SuccessOrErrors[Any]:
        """A fresh result, invalid when *function* is not supported."""
        status: SuccessOrErrors[Any] = SuccessOrErrors()
        if not cls.supports(function):
            status.add_single_error(_NOT_SUPPORTED[function], cls.data_item_name())
        return status

    # ------------------------------------------------------------------
    # Copy and setup protocol
    # ------------------------------------------------------------------

    @classmethod
    def copy_entity_to_dto(cls, db: DbContext, entity: TEntity) -> Self:
        """Project *entity* onto a new DTO. Override to add computed fields."""
        return cls.model_validate(entity, from_attributes=True)

    def copy_dto_to_entity(self, db: DbContext, entity: TEntity) -> SuccessOrErrors[Any]:
        """Validate and copy this DTO's fields onto *entity*.

        Fields that name a mapped column are copied unless annotated with
        :class:`DoNotCopyBack`. Key fields holding None are skipped so the
        store can generate them. Never saves.
        """
        status: SuccessOrErrors[Any] = SuccessOrErrors()
        entity_cls = type(entity)
        writable = column_properties(entity_cls)
        keys = set(db.get_key_properties(entity_cls))
        for name, field in type(self).model_fields.items():
            if name not in writable or not _copies_back(field):
                continue
            value = getattr(self, name)
            if name in keys and value is None:
                continue
            setattr(entity, name, value)
        return status

    def setup_secondary_data(self, db: DbContext) -> None:
        """Fill non-persisted display data. Must be idempotent."""

    def key_values(self, db: DbContext) -> list[Any]:
        """This DTO's values for the bound entity's keys, in key order."""
        entity_cls = self.bound_entity()
        if entity_cls is None:
            msg = f"{type(self).__name__} is not bound to an entity class."
            raise ConfigurationError(msg, offending=type(self))
        values = []
        for name in db.get_key_properties(entity_cls):
            if name not in type(self).model_fields:
                msg = f"{type(self).__name__} must declare the key property {name!r}."
                raise ConfigurationError(msg, offending=type(self))
            values.append(getattr(self, name))
        return values

    @classmethod
    def create_dto(cls, db: DbContext) -> Self:
        """A blank DTO for a create form, with secondary data set up.

        Fields without a default start as None, so the DTO can be read and
        handed straight to a create call.
        """
        blanks = {name: None for name, field in cls.model_fields.items() if field.is_required()}
        dto = cls.model_construct(**blanks)
        if cls.needs_setup():
            dto.setup_secondary_data(db)
        return dto
