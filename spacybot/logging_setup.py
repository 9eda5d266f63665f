"""Process-wide logging configuration."""

from __future__ import annotations

import logging
import sys

from rich.console import Console
from rich.logging import RichHandler

from spacybot.config import Settings

_PLAIN_FORMAT = "%(levelname)s %(name)s: %(message)s"
_PLAIN_FORMAT_WITH_TIME = "%(asctime)s " + _PLAIN_FORMAT


def build_handler(settings: Settings) -> logging.Handler:
    """Return a stderr handler honouring the color and timestamp switches."""

    if settings.log_no_color:
        handler: logging.Handler = logging.StreamHandler(sys.stderr)
        fmt = _PLAIN_FORMAT if settings.log_no_time else _PLAIN_FORMAT_WITH_TIME
        handler.setFormatter(logging.Formatter(fmt))
        return handler

    handler = RichHandler(
        console=Console(stderr=True),
        show_time=not settings.log_no_time,
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    return handler


def configure_logging(settings: Settings) -> None:
    """Install a single stderr handler on the root logger."""

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(build_handler(settings))
    root.setLevel(settings.log_level)
    # httpx logs every request at INFO, including the token-bearing URL.
    logging.getLogger("httpx").setLevel(max(logging.WARNING, root.level))
