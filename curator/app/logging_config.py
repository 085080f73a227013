from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TextIO

import structlog
from structlog.typing import EventDict, Processor

from curator.app.config import AppSettings

ROOT_LOGGER_NAME = "curator"
LOG_FILE_NAME = "curator.log"

# Records from plain `logging.getLogger("curator.*")` calls get the same keys
# as records emitted through structlog.
_FOREIGN_PRE_CHAIN: tuple[Processor, ...] = (
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
)


def configure_application_logging(settings: AppSettings) -> Path | None:
    """Route `curator.*` loggers through structlog formatters.

    The console handler writes to stderr so that command output on stdout stays
    clean. A JSON file handler is added only when `log_dir` is configured.
    Calling this again replaces the handlers installed by a previous call.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(logging.DEBUG)
    root.propagate = False
    for stale in list(root.handlers):
        root.removeHandler(stale)
        stale.close()

    root.addHandler(_console_handler(sys.stderr, settings.log_level))

    log_file: Path | None = None
    if settings.log_dir is not None:
        settings.log_dir.mkdir(parents=True, exist_ok=True)
        log_file = settings.log_dir / LOG_FILE_NAME
        root.addHandler(_json_file_handler(log_file))

    root.debug("logging configured console_level=%s path=%s", settings.log_level, log_file)
    return log_file


def _console_handler(stream: TextIO, level_name: str) -> logging.Handler:
    handler = logging.StreamHandler(stream=stream)
    level = logging.getLevelName(level_name.strip().upper())
    handler.setLevel(level if isinstance(level, int) else logging.WARNING)
    handler.setFormatter(_formatter(structlog.dev.ConsoleRenderer(colors=_is_tty(stream))))
    return handler


def _json_file_handler(path: Path) -> logging.Handler:
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(
        _formatter(
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(sort_keys=True),
            before_meta_removal=(_add_call_site,),
        )
    )
    return handler


def _formatter(
    *renderers: Processor,
    before_meta_removal: tuple[Processor, ...] = (),
) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=list(_FOREIGN_PRE_CHAIN),
        processors=[
            *before_meta_removal,
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            *renderers,
        ],
    )


def _add_call_site(_logger: logging.Logger, _method_name: str, event_dict: EventDict) -> EventDict:
    record = event_dict.get("_record")
    if isinstance(record, logging.LogRecord):
        event_dict.update(module=record.module, lineno=record.lineno, func_name=record.funcName)
    return event_dict


def _is_tty(stream: object) -> bool:
    isatty = getattr(stream, "isatty", None)
    if not callable(isatty):
        return False
    try:
        return bool(isatty())
    except ValueError:
        # Closed streams raise instead of answering.
        return False
