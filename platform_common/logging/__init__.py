"""Structured logging for platform_common and the services importing it.

structlog renders events; stdlib logging decides what gets through. Every
component logs to the stdlib logger "platform_common.<component>", so
levels can be tuned per component:

    configure_logging("INFO", component_levels={"pg": "DEBUG"})

Components receive a LoggerProtocol through their constructor. Code without
one falls back to the logger bound to the current context.
"""

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Iterator, Mapping, Optional

import structlog

from platform_common.protocols import LoggerProtocol

ROOT_LOGGER_NAME = "platform_common"

# Third-party loggers kept at WARNING unless overridden
QUIET_LOGGERS = ("asyncpg", "grpc", "urllib3")

_configured = False

_current_logger: ContextVar[Optional[LoggerProtocol]] = ContextVar("current_logger", default=None)


def logger_name(component: Optional[str]) -> str:
    """stdlib logger name used for a component."""
    if not component:
        return ROOT_LOGGER_NAME
    return f"{ROOT_LOGGER_NAME}.{component}"


class Logger:
    """LoggerProtocol over a structlog logger.

    The bound "component" field selects the stdlib logger, and with it the
    level that applies.
    """

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        self._context = dict(context or {})
        self._logger = structlog.get_logger(logger_name(self._context.get("component")))
        if self._context:
            self._logger = self._logger.bind(**self._context)

    @property
    def name(self) -> str:
        return logger_name(self._context.get("component"))

    def debug(self, msg: str, **kwargs: Any) -> None:
        self._logger.debug(msg, **kwargs)

    def info(self, msg: str, **kwargs: Any) -> None:
        self._logger.info(msg, **kwargs)

    def warning(self, msg: str, **kwargs: Any) -> None:
        self._logger.warning(msg, **kwargs)

    def error(self, msg: str, **kwargs: Any) -> None:
        self._logger.error(msg, **kwargs)

    def exception(self, msg: str, **kwargs: Any) -> None:
        self._logger.exception(msg, **kwargs)

    def bind(self, **kwargs: Any) -> "Logger":
        return Logger({**self._context, **kwargs})


def _level(name: str, fallback: int) -> int:
    value = logging.getLevelName(name.upper())
    return value if isinstance(value, int) else fallback


def configure_logging(
    level: str = "INFO",
    *,
    json_output: bool = True,
    component_levels: Optional[Mapping[str, str]] = None,
    force: bool = False,
) -> None:
    """Route structlog through stdlib logging and set levels.

    Call once at startup. Later calls are ignored unless force is set.

    Args:
        level: Level for platform_common and the root logger
        json_output: JSON lines if True, colored console output otherwise
        component_levels: Per-component overrides, e.g. {"pg": "DEBUG"}.
            A name containing a dot is taken as a full stdlib logger name.
        force: Reconfigure even if already configured
    """
    global _configured

    if _configured and not force:
        return

    default = _level(level, logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=default,
        force=True,
    )
    logging.getLogger(ROOT_LOGGER_NAME).setLevel(default)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    for component, component_level in (component_levels or {}).items():
        name = component if "." in component else logger_name(component)
        logging.getLogger(name).setLevel(_level(component_level, default))

    if json_output:
        renderer: Any = structlog.processors.JSONRenderer(sort_keys=True)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _configured = True


def create_logger(component: str, **context: Any) -> LoggerProtocol:
    """Logger for a component, for constructor injection."""
    return Logger({"component": component, **context})


def get_current_logger() -> LoggerProtocol:
    logger = _current_logger.get()
    if logger is None:
        return Logger()
    return logger


def set_current_logger(logger: LoggerProtocol) -> None:
    _current_logger.set(logger)


def get_component_logger(
    component: str,
    logger: Optional[LoggerProtocol] = None,
) -> LoggerProtocol:
    """Bind component to the injected logger, or to the context logger."""
    return (logger or get_current_logger()).bind(component=component)


@contextmanager
def bind_logger_context(**kwargs: Any) -> Iterator[LoggerProtocol]:
    """Bind fields to the current logger for the duration of the block.

    Usage:
        with bind_logger_context(request_id="req-123"):
            get_current_logger().info("handling_request")
    """
    bound = get_current_logger().bind(**kwargs)
    token = _current_logger.set(bound)
    try:
        yield bound
    finally:
        _current_logger.reset(token)


__all__ = [
    "ROOT_LOGGER_NAME",
    "Logger",
    "bind_logger_context",
    "configure_logging",
    "create_logger",
    "get_component_logger",
    "get_current_logger",
    "logger_name",
    "set_current_logger",
]
