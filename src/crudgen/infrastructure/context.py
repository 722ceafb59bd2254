"""DbContext: the persistence context for one unit of work.

The DbContext is the single dependency injected into every service. It
wraps one SQLAlchemy ORM :class:`Session` and exposes the narrow contract
the services need:

- **Typed collections**: ``db.set(Book)`` adds, removes and queries books.
- **Key metadata**: ``db.get_key_properties(Book)`` lists primary-key
  attribute names in mapper order.
- **Validating save**: ``db.save_changes_with_validation()`` runs entity
  self-validation, commits, and reports every failure as a
  :class:`SuccessOrErrors` instead of raising.

A DbContext also owns the cache of resolved services, so resolution work
is shared by every call in the same unit of work and discarded with it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from contextlib import AbstractContextManager, contextmanager
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from sqlalchemy import inspect as sa_inspect
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from crudgen.config.models import SaveConfig
from crudgen.infrastructure.database.filters import key_properties
from crudgen.services.result import SuccessOrErrors, ValidationError

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine
    from sqlalchemy.sql.elements import ColumnElement

    from crudgen.config.settings import CrudgenSettings

logger = logging.getLogger(__name__)


@contextmanager
def _detach_loaded(session: Session) -> Iterator[None]:
    """Detach every instance the block loads into *session*.

    Instances the session held before the block, pending or persistent,
    stay attached even when the block reads them again.
    """
    held = {id(obj): obj for obj in session}
    try:
        yield
    finally:
        for obj in list(session.identity_map.values()):
            if id(obj) not in held:
                session.expunge(obj)


@runtime_checkable
class SelfValidatingEntity(Protocol):
    """An entity that checks its own state before it is saved."""

    def validate_entity(self) -> Iterable[ValidationError | str]: ...


# ---------------------------------------------------------------------------
# EntitySet: typed collection returned by DbContext.set()
# ---------------------------------------------------------------------------


class EntitySet[TEntity]:
    """Add, remove and query one mapped entity class."""

    def __init__(self, session: Session, entity_cls: type[TEntity]) -> None:
        self._session = session
        self.entity_cls = entity_cls

    def add(self, entity: TEntity) -> None:
        self._session.add(entity)

    def remove(self, entity: TEntity) -> None:
        self._session.delete(entity)

    def attach_modified(self, entity: TEntity) -> TEntity:
        """Track *entity*'s state as a change to its stored row.

        Returns the tracked instance, which is *entity* itself when it is
        already in the session.
        """
        state = sa_inspect(entity)
        if state.detached or state.transient:
            return self._session.merge(entity)
        return entity

    def query(self, *criteria: ColumnElement[bool], tracked: bool = True) -> list[TEntity]:
        """Return every row matching all *criteria*.

        Untracked rows are detached from the session, so later changes to
        them are never saved by accident. A row the session already held
        is returned as that same, still attached, instance.
        """
        stmt = select(self.entity_cls)
        if criteria:
            stmt = stmt.where(*criteria)
        if tracked:
            return list(self._session.scalars(stmt).all())
        with _detach_loaded(self._session):
            return list(self._session.scalars(stmt).all())

    def all(self, *, tracked: bool = False) -> list[TEntity]:
        return self.query(tracked=tracked)


# ---------------------------------------------------------------------------
# DbContext
# ---------------------------------------------------------------------------


class DbContext:
    """Persistence context scoped to one unit of work.

    Construct from an :class:`Engine` (the context owns and closes its
    session) or from an existing :class:`Session` (the caller owns it).

    Usage::

        with DbContext(engine) as db:
            status = CreateService(db).create(BookDto(title="Dune"))
    """

    def __init__(
        self,
        bind: Engine | Session,
        settings: CrudgenSettings | None = None,
    ) -> None:
        if isinstance(bind, Session):
            self._session = bind
            self._owns_session = False
        else:
            self._session = Session(bind, expire_on_commit=False)
            self._owns_session = True
        self._settings = settings
        self._save_config: SaveConfig = settings.save if settings is not None else SaveConfig()
        self.service_cache: dict[tuple[type, type], Any] = {}

    @property
    def session(self) -> Session:
        """The underlying ORM session (for direct access when needed)."""
        return self._session

    @property
    def settings(self) -> CrudgenSettings | None:
        return self._settings

    def set[TEntity](self, entity_cls: type[TEntity]) -> EntitySet[TEntity]:
        """Typed collection for *entity_cls*."""
        return EntitySet(self._session, entity_cls)

    def get_key_properties(self, entity_cls: type) -> list[str]:
        """Primary-key attribute names of *entity_cls*, in key order."""
        return key_properties(entity_cls)

    def untracked(self) -> AbstractContextManager[None]:
        """Detach, on exit, every entity first loaded inside the block.

        Wrap reads that project entities into DTOs so that nothing the
        projection or secondary-data setup touches is saved later.
        """
        return _detach_loaded(self._session)

    # ------------------------------------------------------------------
    # Saving
    # ------------------------------------------------------------------

    def discard_changes(self) -> None:
        """Roll back everything pending in this unit of work."""
        self._session.rollback()

    def save_changes_with_validation(self) -> SuccessOrErrors[None]:
        """Validate pending entities, then commit.

        On any failure the session is rolled back, so nothing pending in
        this unit of work reaches the store, and the errors are returned.
        """
        status: SuccessOrErrors[None] = SuccessOrErrors()

        if self._save_config.validate_entities:
            for entity in (*self._session.new, *self._session.dirty):
                if isinstance(entity, SelfValidatingEntity):
                    status.add_validation_errors(entity.validate_entity())
            if not status.is_valid:
                self._session.rollback()
                logger.debug("Save rejected by entity validation: %s", status.error_messages)
                return status

        try:
            self._session.commit()
        except IntegrityError as exc:
            self._session.rollback()
            message = self._save_config.describe_sql_error(str(exc.orig))
            logger.debug("Save failed with integrity error: %s", exc.orig)
            return status.add_single_error(
                message or "The save failed because it broke a database constraint: {0}",
                exc.orig,
            )
        except SQLAlchemyError as exc:
            self._session.rollback()
            logger.warning("Save failed: %s", exc.__class__.__name__, exc_info=True)
            message = self._save_config.describe_sql_error(str(exc))
            return status.add_single_error(
                message or "There was a database error while saving: {0}",
                exc.__class__.__name__,
            )
        return status

    # ------------------------------------------------------------------
    # Lifetime
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Discard the service cache and close an owned session."""
        self.service_cache.clear()
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> DbContext:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
