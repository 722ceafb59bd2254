"""Application wiring: settings, logging, telemetry and the engine.

Called once at startup by the embedding application. Each unit of work then
opens its own :class:`DbContext` on the returned engine.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from crudgen.config.logging import configure_logging
from crudgen.config.settings import CrudgenSettings
from crudgen.infrastructure.context import DbContext
from crudgen.infrastructure.database.engine import create_db_engine, init_database
from crudgen.services.telemetry import disable_telemetry, enable_telemetry

if TYPE_CHECKING:
    from sqlalchemy import MetaData
    from sqlalchemy.engine import Engine


class AppContext:
    """Resolved settings plus the engine shared by every unit of work.

    Usage::

        app = AppContext(CrudgenSettings.load(), metadata=Base.metadata)
        with app.unit_of_work() as db:
            CreateService(db).create(BookDto(title="Dune"))
    """

    def __init__(
        self,
        settings: CrudgenSettings | None = None,
        *,
        metadata: MetaData | None = None,
    ) -> None:
        self.settings = settings if settings is not None else CrudgenSettings.load()

        db_config = self.settings.database
        # SQL echo is routed through crudgen's handler; the engine never echoes itself
        configure_logging(
            verbose=self.settings.verbose,
            log_json=self.settings.log_json,
            echo_sql=db_config.echo,
        )
        if self.settings.telemetry:
            enable_telemetry()
        else:
            disable_telemetry()

        if metadata is not None:
            self.engine: Engine = init_database(db_config.url, metadata)
        else:
            self.engine = create_db_engine(db_config.url)

    def unit_of_work(self) -> DbContext:
        """A fresh persistence context with its own service cache."""
        return DbContext(self.engine, self.settings)

    def dispose(self) -> None:
        self.engine.dispose()
