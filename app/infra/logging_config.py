"""
Logging setup shared by the API process and background tasks.

LoggingConfig configures the root logger once; get_logger returns loggers
namespaced under ``moodlink``.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

from pythonjsonlogger import jsonlogger

from app.config import get_settings

ROOT_LOGGER_NAME = "moodlink"
TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


class LoggingConfig:
    _configured = False

    def __init__(
        self, level: Optional[str] = None, json_output: Optional[bool] = None
    ) -> None:
        settings = get_settings()
        self.level = (level or settings.log_level).upper()
        self.json_output = settings.log_json if json_output is None else json_output
        if not LoggingConfig._configured:
            self.configure()

    def configure(self) -> None:
        handler = logging.StreamHandler(sys.stdout)
        if self.json_output:
            handler.setFormatter(jsonlogger.JsonFormatter(JSON_FORMAT))
        else:
            handler.setFormatter(logging.Formatter(TEXT_FORMAT))

        root = logging.getLogger()
        root.handlers = [handler]
        root.setLevel(self.level)

        for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
            uvicorn_logger = logging.getLogger(name)
            uvicorn_logger.handlers = [handler]
            uvicorn_logger.propagate = False

        LoggingConfig._configured = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger under the application namespace."""
    if not name:
        return logging.getLogger(ROOT_LOGGER_NAME)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
