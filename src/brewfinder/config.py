# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Runtime configuration read from environment variables."""

from __future__ import annotations

import os
from pathlib import Path

# Anchor default data paths to the project root, not the working directory.
BASE_DIR = Path(__file__).resolve().parents[2]


_TRUTHY = {"1", "true", "yes", "y"}


def parse_flag(value: object, default: bool = False) -> bool:
    """Booleans from env vars or hand-edited files: "false", "0", "" are False."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    return str(value).strip().lower() in _TRUTHY


def _flag(name: str, default: str = "false") -> bool:
    return parse_flag(os.getenv(name, default))


DATA_DIR = Path(os.getenv("BREW_DATA_DIR", str(BASE_DIR / "data"))).resolve()
USERS_PATH = Path(os.getenv("BREW_USERS_PATH", str(DATA_DIR / "users.json"))).resolve()

API_BASE = os.getenv("BREW_API_BASE", "https://api.openbrewerydb.org/v1/breweries")
API_CONNECT_TIMEOUT = float(os.getenv("BREW_API_CONNECT_TIMEOUT", "5"))
API_READ_TIMEOUT = float(os.getenv("BREW_API_READ_TIMEOUT", "10"))
API_USER_AGENT = os.getenv("BREW_API_USER_AGENT", "BrewFinder/1.0")

COOKIE_NAME = os.getenv("BREW_COOKIE_NAME", "brew_session")
COOKIE_SECURE = _flag("BREW_COOKIE_SECURE")
SESSION_MAX_AGE_SECONDS = int(os.getenv("BREW_SESSION_MAX_AGE", "28800"))  # 8 hours
SESSION_SALT = os.getenv("BREW_SESSION_SALT", "brewfinder.session.v1")

LOG_LEVEL = os.getenv("BREW_LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("BREW_LOG_FILE", "")
LOG_FORMAT = os.getenv("BREW_LOG_FORMAT", "text")

HOST = os.getenv("BREW_HOST", "0.0.0.0")
PORT = int(os.getenv("BREW_PORT", "8000"))
RELOAD = _flag("BREW_RELOAD")


def secret_key() -> str:
    return os.getenv("SECRET_KEY") or os.getenv("BREW_SECRET_KEY") or ""
