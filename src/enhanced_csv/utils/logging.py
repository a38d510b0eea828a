"""
Structured logging for the reader.

Loggers returned by ``get_logger`` are structlog front ends over stdlib
loggers under the ``enhanced_csv`` namespace. Events become ordinary
``logging`` records whose extra attributes carry the bound key-value pairs,
so reading a file as a library prints nothing unless the application
attaches a handler. ``configure_logging`` is the CLI's way of doing that.
"""

import logging
import sys
from typing import Any

import structlog

PACKAGE_LOGGER = "enhanced_csv"
HANDLER_NAME = "enhanced_csv.console"

logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())

# Runs at the call site, before stdlib logging sees the event
_LOGGER_PROCESSORS: list[structlog.types.Processor] = [
    structlog.stdlib.filter_by_level,
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.stdlib.render_to_log_kwargs,
]


class _StderrHandler(logging.StreamHandler):
    """StreamHandler that looks up ``sys.stderr`` on every write."""

    @property
    def stream(self) -> Any:
        return sys.stderr

    @stream.setter
    def stream(self, value: Any) -> None:
        pass


def _renderer(json_output: bool) -> structlog.types.Processor:
    if json_output:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(
    level: str = "WARNING",
    json_output: bool = False,
) -> None:
    """
    Render reader events on stderr.

    Installs one handler on the ``enhanced_csv`` logger; calling this again
    replaces it, so repeated CLI invocations in one process do not duplicate
    output. The extra attributes of each record (source, column, unit, ...)
    are folded back into the structlog event before rendering.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_output: If True, render each event as one JSON object.
    """
    log_level = getattr(logging, level.upper(), logging.WARNING)

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[
            structlog.stdlib.ExtraAdder(),
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
        ],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _renderer(json_output),
        ],
    )

    handler = _StderrHandler()
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(formatter)

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for existing in list(package_logger.handlers):
        if existing.get_name() == HANDLER_NAME:
            package_logger.removeHandler(existing)
    package_logger.addHandler(handler)
    package_logger.setLevel(log_level)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Get a logger for a reader module.

    Args:
        name: Logger name, typically ``__name__``; defaults to the package
            logger.

    Returns:
        Bound logger emitting through stdlib logging.
    """
    return structlog.wrap_logger(
        logging.getLogger(name or PACKAGE_LOGGER),
        processors=_LOGGER_PROCESSORS,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
    )


def log_context(**kwargs: Any) -> structlog.contextvars.bound_contextvars:
    """
    Bind values to every event logged inside the block.

    Example:
        with log_context(source="gaia.ecsv"):
            log.info("Tokenized rows")  # record carries source=gaia.ecsv
    """
    return structlog.contextvars.bound_contextvars(**kwargs)
