"""structlog loggers for blobgit components.

Loggers are built with `structlog.wrap_logger` and never touch the global
structlog configuration, so the CLI, the repository service, and tests can
each hold loggers with different sinks and thresholds side by side.
"""

import logging
import sys
from os import getenv
from pathlib import Path
from typing import TYPE_CHECKING, Final, Literal, TextIO, cast

import structlog

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger, Processor

LogFormatType = Literal["json", "text"]

DEBUG_ENV: Final = "BLOBGIT_DEBUG"

_LEVELS: Final = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def _threshold(level: str) -> int:
    if getenv(DEBUG_ENV):
        return logging.DEBUG
    return _LEVELS.get(level.lower(), logging.INFO)


def _sink(log_file: str) -> TextIO:
    if not log_file:
        return sys.stderr
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    return path.open("a", encoding="utf-8")


def _processors(log_format: LogFormatType) -> list["Processor"]:
    chain: list[Processor] = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if log_format == "text":
        chain.append(structlog.dev.ConsoleRenderer(colors=False))
    else:
        chain.extend([structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()])
    return chain


def create_logger(
    *,
    level: str = "info",
    log_format: LogFormatType = "json",
    log_file: str = "",
    component: str = "",
) -> "FilteringBoundLogger":
    """Build a standalone logger.

    Setting BLOBGIT_DEBUG lowers the threshold to debug whatever `level` says.

    Args:
        level: Threshold name (debug, info, warning, error).
        log_format: "json" for one JSON object per line, "text" for
            "timestamp [level] event key=value".
        log_file: File to append to, parents created. Empty writes to stderr.
        component: Bound as `component` on every entry when given.
    """
    logger = cast(
        "FilteringBoundLogger",
        structlog.wrap_logger(
            structlog.WriteLogger(_sink(log_file)),
            processors=_processors(log_format),
            wrapper_class=structlog.make_filtering_bound_logger(_threshold(level)),
            context_class=dict,
        ),
    )
    return logger.bind(component=component) if component else logger


def create_null_logger() -> "FilteringBoundLogger":
    """A logger that drops everything; the default for injected loggers."""
    return cast(
        "FilteringBoundLogger",
        structlog.wrap_logger(
            structlog.ReturnLogger(),
            processors=[],
            wrapper_class=structlog.make_filtering_bound_logger(logging.CRITICAL),
            context_class=dict,
        ),
    )
