import logging
from pathlib import Path
from typing import Iterable, Iterator, List, Union

from .exceptions import PrefixSourceError


PathType = Union[str, Path]
log = logging.getLogger(__name__)


def parse_prefixes(lines: Iterable[str]) -> Iterator[str]:
    """ Strips lines and drops blank and ``#`` comment lines """
    line_iter = (line.strip() for line in lines)
    return (line for line in line_iter if line and line[0] != "#")


def load_prefixes(path: PathType, encoding: str = "utf-8") -> List[str]:
    """ Loads prefix list from a plain text file, one prefix per line """
    path = Path(path)

    try:
        with path.open(encoding=encoding) as fp:
            prefixes = list(parse_prefixes(fp))
    except (OSError, UnicodeDecodeError) as e:
        raise PrefixSourceError(
            "Failed to load prefixes from %r: %s" % (str(path), e),
        ) from e

    log.info("Loaded %d prefixes from %s", len(prefixes), path)
    return prefixes


__all__ = ("load_prefixes", "parse_prefixes")
