"""
Package-level logging configuration.

* Rich console output with timestamps.
* Rotating **JSON** log file when ``$SCPOMATIC_LOG_DIR`` is set.
* Optional plain-text mirror controlled via ``--save-logfile`` on the CLI.

structlog only enriches the event dict; each stdlib handler renders it with
its own :class:`structlog.stdlib.ProcessorFormatter`, so the JSON file keeps
every key/value field while the console stays human-readable.

``storescp`` writes straight to the inherited stdout/stderr, so its own
output is interleaved with these records but never passes through them.
"""

from __future__ import annotations

import atexit
import logging
import logging.handlers
import os
from pathlib import Path
from typing import Optional

import structlog
from rich.logging import RichHandler
from structlog.dev import ConsoleRenderer as StructlogConsoleRenderer
from structlog.stdlib import LoggerFactory, ProcessorFormatter

__all__ = ["setup_logging"]

# Applied to structlog events and to records from plain ``logging`` callers.
_SHARED_PROCESSORS = [
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
]


def _drop_rich_columns(_logger, _name, event_dict):
    """Remove the fields RichHandler already prints in its own columns."""
    event_dict.pop("level", None)
    event_dict.pop("timestamp", None)
    return event_dict


def _formatter(*processors) -> ProcessorFormatter:
    return ProcessorFormatter(
        processors=[ProcessorFormatter.remove_processors_meta, *processors],
        foreign_pre_chain=_SHARED_PROCESSORS,
    )


# --------------------------------------------------------------------------- #
# Internal helpers – file-based handlers                                      #
# --------------------------------------------------------------------------- #
def _json_file_handler(level: int) -> logging.Handler | None:
    """Return a rotating file handler under ``$SCPOMATIC_LOG_DIR``, if set."""
    env_dir = os.environ.get("SCPOMATIC_LOG_DIR")
    if not env_dir:
        return None

    logdir = Path(env_dir).expanduser()
    logdir.mkdir(parents=True, exist_ok=True)

    handler = logging.handlers.RotatingFileHandler(
        filename=logdir / "scpomatic.log",
        maxBytes=5_000_000,  # ~5 MB before rollover
        backupCount=3,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(_formatter(structlog.processors.JSONRenderer()))
    return handler


def _plain_text_file_handler(
    path: Optional[Path], level: int
) -> logging.Handler | None:
    """Return a plain-text file handler or *None* when *path* is *None*.

    Args:
        path: Destination file.
        level: Log-level for the handler.
    """
    if path is None:
        return None

    path = path.expanduser().resolve()
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(path, encoding="utf-8", mode="a")
    handler.setLevel(level)
    handler.setFormatter(_formatter(StructlogConsoleRenderer(colors=False)))
    atexit.register(handler.close)
    return handler


# --------------------------------------------------------------------------- #
# Public API                                                                  #
# --------------------------------------------------------------------------- #
def setup_logging(
    *,
    debug: bool = False,
    extra_text_log: Optional[Path] = None,
) -> None:
    """Configure rich console logging and optional file mirrors.

    Args:
        debug: Emit DEBUG-level messages (signal bookkeeping, cancellation).
            The console otherwise stays at INFO so the supervisor's
            lifecycle messages are always visible.
        extra_text_log: Optional path for a plain-text mirror of console
            output.
    """
    console_lvl = logging.DEBUG if debug else logging.INFO

    console = RichHandler(
        level=console_lvl,
        rich_tracebacks=True,
        tracebacks_show_locals=False,
        show_path=debug,
        log_time_format="[%X.%f]",
    )
    console.setFormatter(
        _formatter(_drop_rich_columns, StructlogConsoleRenderer(colors=False))
    )
    handlers: list[logging.Handler] = [console]

    json_handler = _json_file_handler(console_lvl)
    if json_handler:
        handlers.append(json_handler)

    txt_handler = _plain_text_file_handler(extra_text_log, console_lvl)
    if txt_handler:
        handlers.append(txt_handler)

    # force: a second call (or a host that already configured logging) must
    # not leave these handlers out.
    logging.basicConfig(
        level=logging.DEBUG,  # root logger stays at DEBUG
        handlers=handlers,
        force=True,
    )

    structlog.configure(
        processors=[
            *_SHARED_PROCESSORS,
            ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(console_lvl),
        logger_factory=LoggerFactory(),
        cache_logger_on_first_use=False,
    )
