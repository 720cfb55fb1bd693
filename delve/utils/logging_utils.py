"""structlog setup shared by the CLI and anything embedding the generators.

Events from structlog and from plain ``logging`` loggers go through the same
processor chain and are rendered by one stdlib handler on stderr, so stdout
stays free for the printed level.
"""

import logging
import sys
from typing import Final, Optional, Union

import structlog
from structlog.stdlib import ProcessorFormatter, add_log_level, add_logger_name

HANDLER_NAME: Final[str] = "delve"
LOG_FORMATS: Final[tuple[str, ...]] = ("console", "json")

_SHARED_PROCESSORS: Final[list] = [
    structlog.contextvars.merge_contextvars,
    add_logger_name,
    add_log_level,
    structlog.processors.TimeStamper(fmt="iso", utc=False),
]


def resolve_level(level: Union[int, str]) -> int:
    """Accepts ``logging`` constants or names such as ``"debug"``."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def make_formatter(
    log_format: str = "console", colors: bool = False
) -> ProcessorFormatter:
    """Stdlib formatter rendering both structlog and foreign records."""
    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    elif log_format == "console":
        renderer = structlog.dev.ConsoleRenderer(colors=colors)
    else:
        raise ValueError(
            f"Unknown log format: {log_format!r}; "
            f"expected one of {', '.join(LOG_FORMATS)}"
        )
    return ProcessorFormatter(
        foreign_pre_chain=_SHARED_PROCESSORS,
        processors=[ProcessorFormatter.remove_processors_meta, renderer],
    )


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_format: str = "console",
    colors: Optional[bool] = None,
) -> None:
    """Configure structlog and standard logging with the given level.

    ``colors`` defaults to whether stderr is a terminal. If the host process
    already put its own handlers on the root logger they are left alone and
    only the level changes.
    """
    level = resolve_level(level)
    if colors is None:
        colors = sys.stderr.isatty()
    formatter = make_formatter(log_format, colors)

    root = logging.getLogger()
    handler = next((h for h in root.handlers if h.get_name() == HANDLER_NAME), None)
    if handler is None and not root.handlers:
        handler = logging.StreamHandler()
        handler.set_name(HANDLER_NAME)
        root.addHandler(handler)
    if handler is not None:
        handler.setFormatter(formatter)
    root.setLevel(level)

    structlog.configure(
        processors=_SHARED_PROCESSORS + [ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


__all__ = ["LOG_FORMATS", "make_formatter", "resolve_level", "setup_logging"]
