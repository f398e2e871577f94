# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import secrets
import threading
import time
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from itsdangerous import BadSignature, BadTimeSignature, URLSafeTimedSerializer

from brewfinder import config
from brewfinder.logger import get_logger

log = get_logger("auth.session")

COOKIE_NAME = config.COOKIE_NAME
DEFAULT_MAX_AGE_SECONDS = config.SESSION_MAX_AGE_SECONDS

_FALLBACK_SECRET = ""


def _secret() -> str:
    global _FALLBACK_SECRET
    secret = config.secret_key()
    if secret:
        return secret
    if not _FALLBACK_SECRET:
        log.warning("SECRET_KEY (or BREW_SECRET_KEY) not set; using a per-process random key")
        _FALLBACK_SECRET = secrets.token_urlsafe(32)
    return _FALLBACK_SECRET


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(secret_key=_secret(), salt=config.SESSION_SALT)


@dataclass(frozen=True)
class SessionData:
    """Copy of the user fields taken at login time."""

    id: str
    username: str
    email: str
    created_at: str


def sign_session_id(session_id: str) -> str:
    return _serializer().dumps({"sid": session_id})


def unsign_session_id(token: str, *, max_age: int = DEFAULT_MAX_AGE_SECONDS) -> Optional[str]:
    if not token:
        return None
    try:
        data = _serializer().loads(token, max_age=max_age)
    except (BadSignature, BadTimeSignature):
        return None
    sid = str((data or {}).get("sid") or "").strip() if isinstance(data, dict) else ""
    return sid or None


class SessionRegistry:
    """In-memory server-side sessions keyed by a random id."""

    def __init__(self, max_age: int = DEFAULT_MAX_AGE_SECONDS):
        self.max_age = max_age
        self._lock = threading.Lock()
        self._sessions: Dict[str, Tuple[float, SessionData]] = {}

    def _prune_locked(self, now: float) -> None:
        expired = [sid for sid, (started, _) in self._sessions.items() if now - started > self.max_age]
        for sid in expired:
            del self._sessions[sid]

    def create(self, data: SessionData) -> str:
        """Store a new session; abandoned sessions past max_age are dropped first."""
        sid = secrets.token_urlsafe(32)
        now = time.monotonic()
        with self._lock:
            self._prune_locked(now)
            self._sessions[sid] = (now, data)
        return sid

    def get(self, session_id: Optional[str]) -> Optional[SessionData]:
        if not session_id:
            return None
        with self._lock:
            entry = self._sessions.get(session_id)
            if entry is None:
                return None
            started, data = entry
            if time.monotonic() - started > self.max_age:
                del self._sessions[session_id]
                return None
            return data

    def destroy(self, session_id: Optional[str]) -> None:
        if not session_id:
            return
        with self._lock:
            self._sessions.pop(session_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
