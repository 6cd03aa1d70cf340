# flowaudit/utils/logger.py
from __future__ import annotations

import logging
import os
import sys
import time
from contextlib import contextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Iterator, MutableMapping, Optional, TextIO, Tuple

ROOT_LOGGER = "flowaudit"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_COLORS = (
    (logging.ERROR, "\033[91m"),    # red
    (logging.WARNING, "\033[93m"),  # yellow
    (logging.INFO, "\033[92m"),     # green
)


def _env_level(default: str = "INFO") -> int:
    """LOG_LEVEL from env; unknown names fall back to INFO."""
    level = logging.getLevelName(os.getenv("LOG_LEVEL", default).upper())
    return level if isinstance(level, int) else logging.INFO


class _ColorFormatter(logging.Formatter):
    def __init__(self, stream: TextIO):
        super().__init__(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
        self._tty = hasattr(stream, "isatty") and stream.isatty()

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        if not self._tty:
            return text
        for threshold, color in _COLORS:
            if record.levelno >= threshold:
                return f"{color}{text}\033[0m"
        return text


def init_logger(
    level: Optional[int] = None,
    log_dir: Optional[str | Path] = None,
    stream: Optional[TextIO] = None,
    file_name: str = "flowaudit.log",
    file_max_mb: int = 5,
    file_backup: int = 3,
) -> logging.Logger:
    """
    Configure the `flowaudit` logger:
      - colored handler on `stream` (stderr by default, so reports on stdout stay clean)
      - rotating file handler under `log_dir` or $FLOWAUDIT_LOG_DIR, if either is set
    Calling it again replaces the handlers.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.handlers.clear()
    logger.propagate = False
    logger.setLevel(level if level is not None else _env_level())

    stream = stream or sys.stderr
    sh = logging.StreamHandler(stream)
    sh.setFormatter(_ColorFormatter(stream))
    logger.addHandler(sh)

    log_dir = log_dir or os.getenv("FLOWAUDIT_LOG_DIR")
    if log_dir:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = RotatingFileHandler(
            filename=str(log_dir / file_name),
            maxBytes=file_max_mb * 1024 * 1024,
            backupCount=file_backup,
            encoding="utf-8",
        )
        fh.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(fh)

    return logger


def get_logger(child: str) -> logging.Logger:
    """Child logger under `flowaudit`, e.g. flowaudit.quality."""
    return logging.getLogger(ROOT_LOGGER).getChild(child)


class WorkflowLogAdapter(logging.LoggerAdapter):
    """Prefixes every message with the workflow being processed."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        return f"[wf={self.extra['workflow_id']}] {msg}", kwargs


def workflow_logger(logger: logging.Logger, workflow_id: Any) -> WorkflowLogAdapter:
    return WorkflowLogAdapter(logger, {"workflow_id": workflow_id if workflow_id is not None else "-"})


@contextmanager
def timed(logger: logging.Logger | logging.LoggerAdapter, label: str) -> Iterator[None]:
    """Log the wall time of a block at debug level."""
    start = time.perf_counter()
    try:
        yield
    finally:
        logger.debug("%s took %.1f ms", label, (time.perf_counter() - start) * 1000)
