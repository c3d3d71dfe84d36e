import logging
import sys
from contextvars import ContextVar
from types import TracebackType
from typing import Any, Optional, Type, Union

from .enum import DateFormat, LogFormat, LogLevel
from .formatter import color_formatter, json_handler, rich_formatter


LOG_LEVEL: ContextVar = ContextVar("LOG_LEVEL", default=logging.INFO)
LOG_FORMAT: ContextVar = ContextVar(
    "LOG_FORMAT", default=LogFormat.default(),
)


DEFAULT_FORMAT = "%(levelname)s:%(name)s:%(message)s"


def create_logging_handler(
    log_format: LogFormat = LogFormat.color,
    date_format: Optional[str] = None, **kwargs: Any,
) -> logging.Handler:
    LOG_FORMAT.set(log_format)

    if log_format == LogFormat.stream:
        handler: logging.Handler = logging.StreamHandler(
            kwargs.get("stream"),
        )
        if date_format:
            formatter = logging.Formatter(
                "%(asctime)s " + DEFAULT_FORMAT, datefmt=date_format,
            )
        else:
            formatter = logging.Formatter(DEFAULT_FORMAT)
        handler.setFormatter(formatter)
        return handler
    elif log_format == LogFormat.plain:
        handler = logging.StreamHandler(kwargs.get("stream"))
        handler.setFormatter(logging.Formatter("%(message)s"))
        return handler
    elif log_format == LogFormat.json:
        return json_handler(date_format=date_format, **kwargs)
    elif log_format == LogFormat.color:
        return color_formatter(date_format=date_format, **kwargs)
    elif log_format == LogFormat.rich:
        return rich_formatter(date_format=date_format, **kwargs)
    elif log_format == LogFormat.rich_tb:
        return rich_formatter(
            date_format=date_format, rich_tracebacks=True, **kwargs
        )

    raise NotImplementedError(log_format)


class UnhandledHook:
    """ Logs exceptions which reached ``sys.excepthook`` """

    logger_name: str = "unhandled"
    message: str = "Unhandled exception"

    def __init__(self) -> None:
        self.logger = logging.getLogger().getChild(self.logger_name)
        self.logger.propagate = False
        self.logger.handlers.clear()

    def add_handler(self, handler: logging.Handler) -> None:
        self.logger.handlers.append(handler)

    def __call__(
        self,
        exc_type: Type[BaseException],
        exc_value: BaseException,
        exc_traceback: Optional[TracebackType],
    ) -> None:
        self.logger.exception(
            self.message, exc_info=(exc_type, exc_value, exc_traceback),
        )


def basic_config(
    level: Union[int, str] = LogLevel.info,
    log_format: Union[str, LogFormat] = LogFormat.color,
    **kwargs: Any,
) -> None:
    level = LogLevel.parse(level)
    log_format = LogFormat.parse(log_format)

    unhandled_hook = UnhandledHook()
    sys.excepthook = unhandled_hook

    handler = create_logging_handler(log_format, **kwargs)

    LOG_LEVEL.set(level)

    logging.basicConfig(
        level=int(level),
        handlers=[handler],
        force=True,
    )

    unhandled_hook.add_handler(handler)


__all__ = (
    "DateFormat",
    "LOG_FORMAT",
    "LOG_LEVEL",
    "LogFormat",
    "LogLevel",
    "basic_config",
    "create_logging_handler",
)
