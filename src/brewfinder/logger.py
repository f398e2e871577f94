# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Logging setup shared by the whole application."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone

from brewfinder import config


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data)


def setup_logger(name: str = "brewfinder") -> logging.Logger:
    """Configure the application logger once: stdout plus an optional file."""
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, config.LOG_LEVEL.upper(), logging.INFO))

    if logger.handlers:
        return logger

    console_format = logging.Formatter(
        fmt="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(console_format)
    logger.addHandler(console_handler)

    if config.LOG_FILE:
        try:
            file_handler = logging.FileHandler(config.LOG_FILE, encoding="utf-8")
        except OSError as e:
            logger.error("Failed to create file handler for %s: %s", config.LOG_FILE, e)
        else:
            if config.LOG_FORMAT == "json":
                file_handler.setFormatter(JSONFormatter())
            else:
                file_handler.setFormatter(console_format)
            logger.addHandler(file_handler)

    return logger


logger = setup_logger()


def get_logger(name: str) -> logging.Logger:
    """Child logger under the application namespace (e.g. brewfinder.auth)."""
    return logger.getChild(name)
