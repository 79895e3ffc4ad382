"""Structured logging configuration for the UniFi client.

The library itself only calls ``structlog.get_logger``; applications (and the
bundled CLI) decide how log lines are rendered by calling
:func:`configure_logging` once at startup.
"""

from __future__ import annotations

import logging
import sys
from typing import List, Literal, Optional, TextIO

import structlog

LogFormat = Literal["json", "text"]


def _render_chain(log_format: LogFormat, stream: TextIO) -> List[structlog.typing.Processor]:
    if log_format == "json":
        return [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer(colors=stream.isatty())]


def configure_logging(
    log_format: LogFormat = "json",
    log_level: str = "INFO",
    stream: Optional[TextIO] = None,
) -> None:
    """Route structlog (and stdlib logging) output to ``stream``.

    Args:
        log_format: ``json`` emits one object per line; ``text`` is the
            human-readable console renderer, colored only on a terminal.
        log_level: Minimum level name. Unknown names fall back to INFO.
        stream: Destination for log lines. Defaults to stderr so command
            output on stdout stays machine-readable.
    """
    out = sys.stderr if stream is None else stream
    threshold = logging.getLevelName(log_level.upper())
    if not isinstance(threshold, int):
        threshold = logging.INFO

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            *_render_chain(log_format, out),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(threshold),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=out),
        cache_logger_on_first_use=False,
    )

    # tenacity reports retry attempts through stdlib logging
    logging.basicConfig(format="%(message)s", stream=out, level=threshold)


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger, optionally bound to ``name``."""
    return structlog.get_logger(name)
