import json
import logging
import sys
import traceback
from types import MappingProxyType
from typing import IO, Any, Callable, Dict, Optional, Union


JSONObjType = Dict[str, Any]
DumpsType = Callable[[JSONObjType], str]


def _dump_json(obj: JSONObjType) -> str:
    return json.dumps(obj, default=repr, ensure_ascii=False)


class JSONLogFormatter(logging.Formatter):
    LEVELS = MappingProxyType({
        logging.CRITICAL: "crit",
        logging.ERROR: "error",
        logging.WARNING: "warn",
        logging.INFO: "info",
        logging.DEBUG: "debug",
        logging.NOTSET: None,
    })

    # LogRecord attribute -> (output key, type)
    FIELD_MAPPING = MappingProxyType({
        "funcName": ("code_func", str),
        "lineno": ("code_line", int),
        "module": ("code_module", str),
        "name": ("identifier", str),
        "msg": ("message_raw", str),
        "process": ("pid", int),
        "threadName": ("thread_name", str),
    })

    # Standard attributes which are not interesting in the output
    SKIP_FIELDS = frozenset((
        "args", "created", "exc_info", "exc_text", "filename", "levelname",
        "levelno", "msecs", "pathname", "processName", "relativeCreated",
        "stack_info", "taskName", "thread",
    ))

    def __init__(
        self, fmt: Optional[str] = None, datefmt: Optional[str] = None,
        style: str = "%", dumps: DumpsType = _dump_json,
    ):
        super().__init__(fmt=fmt, datefmt=datefmt, style=style)  # type: ignore
        self.dumps = dumps

    def format(self, record: logging.LogRecord) -> str:
        fields: JSONObjType = {"errno": 0 if not record.exc_info else 255}

        for attr, (key, kind) in self.FIELD_MAPPING.items():
            value = getattr(record, attr, None)
            fields[key] = value if isinstance(value, kind) else kind(value)

        for attr, value in record.__dict__.items():
            if (
                attr in self.FIELD_MAPPING or attr in self.SKIP_FIELDS or
                attr.startswith("_") or value is None
            ):
                continue
            fields[attr] = value

        for idx, arg in enumerate(record.args or ()):
            fields["argument_%d" % idx] = str(arg)

        payload: JSONObjType = {
            "@fields": fields,
            "msg": record.getMessage(),
            "level": self.LEVELS.get(record.levelno, record.levelname),
        }

        if self.datefmt:
            payload["@timestamp"] = self.formatTime(record, self.datefmt)

        if record.exc_info:
            payload["stackTrace"] = "\n".join(
                traceback.format_exception(*record.exc_info),
            )

        return self.dumps(payload)

    def formatTime(     # type: ignore
        self, record: logging.LogRecord, datefmt: Optional[str] = None,
    ) -> Union[float, str]:
        if datefmt == "%s":
            return record.created
        return super().formatTime(record, datefmt=datefmt)


def json_handler(
    stream: Optional[IO[str]] = None,
    date_format: Optional[str] = None,
    **kwargs: Any
) -> logging.Handler:
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JSONLogFormatter(datefmt=date_format, **kwargs))
    return handler
