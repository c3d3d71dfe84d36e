from .color import color_formatter
from .json import json_handler
from .rich import rich_formatter


__all__ = ("color_formatter", "json_handler", "rich_formatter")
