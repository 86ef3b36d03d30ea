"""Logging setup for PGSAC.

Modules log through `logging.getLogger(__name__)`; this module only
installs the handler on the package logger.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Optional

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_HANDLER_NAME = "pgsac"


class JsonFormatter(logging.Formatter):
    """Render each record as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record, DEFAULT_DATE_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> logging.Logger:
    """Install a stderr handler on the `pgsac` logger.

    Calling it again replaces the previous handler rather than stacking
    a second one.

    Args:
        level: Level name; defaults to PGSAC_LOG_LEVEL
        fmt: "text" or "json"; defaults to PGSAC_LOG_FORMAT

    Returns:
        The configured package logger
    """
    from pgsac.core.config import config

    level = (level or config.log_level).upper()
    fmt = fmt or config.log_format

    logger = logging.getLogger("pgsac")
    for handler in list(logger.handlers):
        if handler.get_name() == _HANDLER_NAME:
            logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(DEFAULT_FORMAT, DEFAULT_DATE_FORMAT))

    logger.addHandler(handler)
    logger.setLevel(level)
    return logger
