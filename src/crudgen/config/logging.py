"""structlog configuration for the loggers crudgen owns.

crudgen is embedded in someone else's application, so it never touches the
root logger. :func:`configure_logging` installs one stderr handler on the
``crudgen`` logger and, when SQL echo is wanted, on ``sqlalchemy.engine``.
Records rendered there do not propagate, so they are not printed twice by
the application's own handlers.
"""

from __future__ import annotations

import logging
import sys

import structlog

_HANDLER_NAME = "crudgen.structlog"

_SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
]


def _build_handler(*, log_json: bool) -> logging.Handler:
    if log_json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_SHARED_PROCESSORS,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )
    return handler


def _release(logger: logging.Logger) -> bool:
    """Remove crudgen's handler from *logger*; True if it had one."""
    kept = [h for h in logger.handlers if h.get_name() != _HANDLER_NAME]
    if len(kept) == len(logger.handlers):
        return False
    logger.handlers = kept
    logger.propagate = True
    return True


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
    echo_sql: bool = False,
) -> None:
    """Route crudgen's log records through structlog.

    Safe to call repeatedly; each call replaces the previous handler. An
    application that already configured structlog keeps its configuration.

    Args:
        verbose: DEBUG for the ``crudgen`` tree. When False, only WARNING+.
        log_json: Use the JSON renderer instead of the console renderer.
        echo_sql: Log every statement through ``sqlalchemy.engine`` at INFO.
    """
    if not structlog.is_configured():
        structlog.configure(
            processors=[
                *_SHARED_PROCESSORS,
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=False,
        )

    handler = _build_handler(log_json=log_json)

    crudgen_logger = logging.getLogger("crudgen")
    _release(crudgen_logger)
    crudgen_logger.addHandler(handler)
    crudgen_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    crudgen_logger.propagate = False

    sql_logger = logging.getLogger("sqlalchemy.engine")
    if _release(sql_logger) and not echo_sql:
        sql_logger.setLevel(logging.NOTSET)
    if echo_sql:
        sql_logger.addHandler(handler)
        sql_logger.setLevel(logging.INFO)
        sql_logger.propagate = False
