"""Decode a type argument to the concrete service that handles it.

A façade such as ``CreateService`` is called with a type known only at the
call boundary. :func:`decode_to_service` inspects that type's declaration:

1. A mapped SQLAlchemy class gets ``facade.entity_service(db, T)``.
2. An :class:`EntityDto` subclass bound to a mapped class ``E`` gets
   ``facade.dto_service(db, E, T)``.
3. Anything else is a wiring defect and raises :class:`ConfigurationError`.

Resolution is structural, never a lookup in a list of known types. Built
services are cached on the :class:`DbContext` per ``(façade, type)``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from crudgen.domain.functions import WhatItShouldBe
from crudgen.errors import ConfigurationError
from crudgen.infrastructure.database.filters import is_mapped_class
from crudgen.services.dto import EntityDto
from crudgen.services.telemetry import trace_span

if TYPE_CHECKING:
    from crudgen.infrastructure.context import DbContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedType:
    """What a type argument turned out to be."""

    shape: WhatItShouldBe
    entity_cls: type
    dto_cls: type[EntityDto[Any]] | None = None


def _type_name(type_arg: Any) -> str:
    return getattr(type_arg, "__qualname__", None) or repr(type_arg)


def resolve_type(type_arg: Any) -> ResolvedType:
    """Classify *type_arg* as an entity or a bound DTO.

    Raises:
        ConfigurationError: If it is neither, or is a DTO whose binding is
            missing or points at an unmapped class.
    """
    if is_mapped_class(type_arg):
        return ResolvedType(shape=WhatItShouldBe.ENTITY, entity_cls=type_arg)

    if isinstance(type_arg, type) and issubclass(type_arg, EntityDto):
        entity_cls = type_arg.bound_entity()
        name = _type_name(type_arg)
        if entity_cls is None:
            msg = (
                f"{name} derives from EntityDto but does not bind an entity class. "
                f"Declare it as class {name}(EntityDto[YourEntity])."
            )
            raise ConfigurationError(msg, offending=type_arg)
        if not is_mapped_class(entity_cls):
            msg = (
                f"{name} is bound to {_type_name(entity_cls)}, "
                "which is not a mapped entity class."
            )
            raise ConfigurationError(msg, offending=type_arg)
        return ResolvedType(
            shape=WhatItShouldBe.SPECIFIC_DTO,
            entity_cls=entity_cls,
            dto_cls=type_arg,
        )

    msg = (
        f"{_type_name(type_arg)} is neither a mapped entity class nor an EntityDto "
        "bound to one, so no service can handle it."
    )
    raise ConfigurationError(msg, offending=type_arg)


def _check_expectation(
    facade_cls: type,
    type_arg: Any,
    resolved: ResolvedType,
    what: WhatItShouldBe,
) -> None:
    if resolved.shape not in what:
        msg = (
            f"{facade_cls.__name__} was given {_type_name(type_arg)}, but this call "
            f"only accepts {what.describe()}."
        )
        raise ConfigurationError(msg, offending=type_arg)


def _construct(facade_cls: type, type_arg: Any, resolved: ResolvedType, db: DbContext) -> Any:
    if resolved.shape is WhatItShouldBe.ENTITY:
        service_cls = getattr(facade_cls, "entity_service", None)
        args: tuple[Any, ...] = (db, resolved.entity_cls)
    else:
        service_cls = getattr(facade_cls, "dto_service", None)
        args = (db, resolved.entity_cls, resolved.dto_cls)
    if service_cls is None:
        msg = f"{facade_cls.__name__} has no service for {_type_name(type_arg)}."
        raise ConfigurationError(msg, offending=type_arg)
    return service_cls(*args)


def decode_to_service(
    facade_cls: type,
    type_arg: Any,
    what: WhatItShouldBe,
    db: DbContext,
) -> Any:
    """Return the concrete service of *facade_cls* for *type_arg*.

    The expectation *what* is checked on every call, cached or not, so a
    type accepted at one call site is still rejected at a narrower one.
    """
    if not isinstance(type_arg, type):
        # Only classes can resolve; this raises before any cache lookup.
        resolve_type(type_arg)
    key = (facade_cls, type_arg)
    cached = db.service_cache.get(key)
    if cached is not None:
        resolved, service = cached
        _check_expectation(facade_cls, type_arg, resolved, what)
        return service

    with trace_span("decode_to_service") as span:
        resolved = resolve_type(type_arg)
        _check_expectation(facade_cls, type_arg, resolved, what)
        service = _construct(facade_cls, type_arg, resolved, db)
        if span is not None:
            span.annotate("type", _type_name(type_arg))

    db.service_cache[key] = (resolved, service)
    logger.debug(
        "Resolved %s[%s] to %s",
        facade_cls.__name__,
        _type_name(type_arg),
        type(service).__name__,
    )
    return service


def entity_type_of(type_arg: Any) -> type:
    """The entity class behind *type_arg*, itself if it is an entity."""
    return resolve_type(type_arg).entity_cls
