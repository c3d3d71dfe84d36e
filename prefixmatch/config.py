import os
from dataclasses import dataclass, replace
from typing import Any, Callable, Mapping, Optional, TypeVar

from prefixmatch_log import LogFormat, LogLevel

from .exceptions import ConfigurationError
from .matcher import MatchStrategy
from .thread_pool import BatchExecutor


T = TypeVar("T")
ENV_PREFIX = "PREFIXMATCH_"


def _get_env(environ: Mapping[str, str], name: str) -> Optional[str]:
    value = environ.get(ENV_PREFIX + name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _get_env_convert(
    environ: Mapping[str, str], name: str,
    converter: Callable[[str], T], default: T,
) -> T:
    value = _get_env(environ, name)
    if value is None:
        return default

    try:
        return converter(value)
    except ValueError as e:
        raise ConfigurationError(
            "Invalid value %r for %s%s" % (value, ENV_PREFIX, name),
        ) from e


def _positive(converter: Callable[[str], T]) -> Callable[[str], T]:
    def convert(value: str) -> T:
        result = converter(value)
        if result <= 0:     # type: ignore
            raise ValueError(value)
        return result
    return convert


def _choice(*choices: str) -> Callable[[str], str]:
    def convert(value: str) -> str:
        value = value.lower()
        if value not in choices:
            raise ValueError(value)
        return value
    return convert


@dataclass(frozen=True)
class Config:
    prefix_file: Optional[str] = None
    strategy: str = MatchStrategy.default()
    pool_size: Optional[int] = None
    shutdown_timeout: float = BatchExecutor.SHUTDOWN_TIMEOUT
    log_level: str = LogLevel.default()
    log_format: str = LogFormat.default()

    def __post_init__(self) -> None:
        if self.pool_size is not None and self.pool_size <= 0:
            raise ConfigurationError(
                "Pool size must be positive, got %r" % (self.pool_size,),
            )
        if self.shutdown_timeout <= 0:
            raise ConfigurationError(
                "Shutdown timeout must be positive, got %r" % (
                    self.shutdown_timeout,
                ),
            )

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None,
    ) -> "Config":
        """
        Reads ``PREFIXMATCH_*`` environment variables, e.g.
        ``PREFIXMATCH_PREFIX_FILE`` or ``PREFIXMATCH_POOL_SIZE``.
        """
        environ = os.environ if environ is None else environ

        return cls(
            prefix_file=_get_env(environ, "PREFIX_FILE"),
            strategy=_get_env_convert(
                environ, "STRATEGY",
                _choice(*MatchStrategy.choices()), cls.strategy,
            ),
            pool_size=_get_env_convert(
                environ, "POOL_SIZE", _positive(int), None,
            ),
            shutdown_timeout=_get_env_convert(
                environ, "SHUTDOWN_TIMEOUT", _positive(float),
                cls.shutdown_timeout,
            ),
            log_level=_get_env_convert(
                environ, "LOG_LEVEL",
                _choice(*LogLevel.choices()), cls.log_level,
            ),
            log_format=_get_env_convert(
                environ, "LOG_FORMAT",
                _choice(*LogFormat.choices()), cls.log_format,
            ),
        )

    def override(self, **kwargs: Any) -> "Config":
        """ Returns a copy with every non-``None`` keyword applied """
        return replace(
            self, **{k: v for k, v in kwargs.items() if v is not None}
        )


__all__ = ("Config", "ENV_PREFIX")
