import logging
import sys
from enum import Enum, IntEnum, unique
from importlib.util import find_spec
from typing import IO, Optional, Tuple, Type, TypeVar, Union


RICH_INSTALLED = find_spec("rich") is not None

E = TypeVar("E", bound="NamedChoice")


class NamedChoice(IntEnum):
    """
    Integer enum selected by member name, the way it is spelled in
    command line flags and ``PREFIXMATCH_*`` variables.
    """

    @classmethod
    def choices(cls) -> Tuple[str, ...]:
        return tuple(cls.__members__)

    @classmethod
    def parse(cls: Type[E], value: Union[str, int]) -> E:
        if isinstance(value, cls):
            return value

        if not isinstance(value, str):
            return cls(value)

        try:
            return cls[value.strip().lower()]
        except KeyError:
            raise ValueError(
                "%r is not one of: %s" % (value, ", ".join(cls.choices())),
            ) from None


@unique
class LogFormat(NamedChoice):
    stream = 0
    color = 1
    json = 2
    plain = 3
    rich = 4
    rich_tb = 5

    @classmethod
    def default(cls, stream: Optional[IO[str]] = None) -> str:
        """ ``plain`` unless ``stream`` (stderr) is a terminal """
        stream = sys.stderr if stream is None else stream
        isatty = getattr(stream, "isatty", None)

        if isatty is None or not isatty():
            return cls.plain.name

        return (cls.rich if RICH_INSTALLED else cls.color).name


class LogLevel(NamedChoice):
    critical = logging.CRITICAL
    error = logging.ERROR
    warning = logging.WARNING
    info = logging.INFO
    debug = logging.DEBUG
    notset = logging.NOTSET

    @classmethod
    def default(cls) -> str:
        return cls.info.name


class DateFormat(Enum):
    color = "%Y-%m-%d %H:%M:%S"
    rich = "[%X]"
