"""Process-wide logging setup shared by the API and Celery workers."""

from __future__ import annotations

import logging
import sys
from typing import Optional

from app.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
ROOT_LOGGER_NAME = "gateway"


class LoggingConfig:
    """Configure the root logger once; later instantiations only adjust the level."""

    _configured = False

    def __init__(self, level: Optional[str] = None) -> None:
        settings = get_settings()
        self.level = (level or settings.log_level or "INFO").upper()
        self._configure()

    def _configure(self) -> None:
        root = logging.getLogger()
        root.setLevel(self.level)
        if LoggingConfig._configured:
            return
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        # Access logs are noisy at INFO; request outcomes are logged by the app.
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
        LoggingConfig._configured = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger namespaced under the gateway root logger."""
    if not name:
        return logging.getLogger(ROOT_LOGGER_NAME)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
