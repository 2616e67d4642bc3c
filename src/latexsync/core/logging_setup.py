import logging
import sys
from typing import Any

import structlog

PACKAGE_LOGGER = "latexsync"

# Applied to every record reaching the latexsync handler, whether it came from
# a plain ``logging.getLogger(__name__)`` call or a bound ``get_logger`` logger.
_PRE_CHAIN = [
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.ExtraAdder(),
    structlog.processors.TimeStamper(fmt="iso"),
]


def configure_logging(log_level: str = "INFO", json_logs: bool = False) -> logging.Handler:
    """
    Render all ``latexsync.*`` records through structlog on stdout.

    Returns the installed handler; calling again replaces it.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_PRE_CHAIN,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.handlers = [handler]
    package_logger.setLevel(level)
    package_logger.propagate = False

    logging.captureWarnings(True)
    return handler


def configure_from_settings(config=None) -> logging.Handler:
    """Apply ``log_level``/``json_logs`` from a ``Settings`` instance."""
    if config is None:
        from ..config import settings as config
    return configure_logging(config.log_level, json_logs=config.json_logs)


def get_logger(name: str, **context: Any):
    """
    Bound logger for ``name`` carrying ``context`` (session, engine, ...).

    Events are handed to the stdlib logger of the same name with the bound
    values as ``extra``, so level filtering and handlers follow stdlib
    configuration whether or not ``configure_logging`` ran.
    """
    logger = structlog.wrap_logger(
        logging.getLogger(name),
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.render_to_log_kwargs,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
    )
    return logger.bind(**context)
