import logging
import sys
from typing import IO, Any, Optional

from ..enum import DateFormat


def rich_formatter(
    date_format: Optional[str] = None, stream: Optional[IO[str]] = None,
    rich_tracebacks: bool = False, **kwargs: Any,
) -> logging.Handler:
    """
    Renders records with ``rich`` into ``stream`` (stderr by default).
    Each handler gets its own console, the global ``rich`` console is
    not reconfigured.
    """
    try:
        from rich.console import Console
        from rich.logging import RichHandler
    except ImportError as e:
        raise ImportError(
            "Log format 'rich' requires the optional \"rich\" package, "
            "e.g. pip install prefixmatch[rich]",
        ) from e

    kwargs.setdefault("show_path", False)
    kwargs.setdefault("log_time_format", date_format or DateFormat.rich.value)

    handler = RichHandler(
        console=Console(file=stream or sys.stderr),
        rich_tracebacks=rich_tracebacks,
        **kwargs,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    return handler
