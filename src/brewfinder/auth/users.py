# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import json
import os
import tempfile
import threading
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from brewfinder import config
from brewfinder.logger import get_logger

log = get_logger("auth.users")

DEFAULT_USERS_PATH = config.USERS_PATH


@dataclass(frozen=True)
class UserRecord:
    id: str
    username: str
    email: str
    password_hash: str
    created_at: str
    last_login: Optional[str] = None
    is_active: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> Optional["UserRecord"]:
        """Build a record from a file entry. Returns None for unusable entries."""
        uid = str(raw.get("id") or "").strip()
        username = str(raw.get("username") or "").strip()
        if not uid or not username:
            return None
        last_login = raw.get("last_login")
        return cls(
            id=uid,
            username=username,
            email=str(raw.get("email") or "").strip(),
            password_hash=str(raw.get("password_hash") or "").strip(),
            created_at=str(raw.get("created_at") or ""),
            last_login=str(last_login) if last_login else None,
            is_active=config.parse_flag(raw.get("is_active"), default=True),
        )


# Serialises read-modify-write cycles inside one process. Separate worker
# processes sharing the file can still overwrite each other (last writer wins).
_LOCK = threading.RLock()


class CredentialStore:
    """Flat JSON array of user records kept in a single file."""

    def __init__(self, path: Path = DEFAULT_USERS_PATH):
        self.path = Path(path)

    def _ensure_file(self) -> None:
        if self.path.exists():
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text("[]", encoding="utf-8")
        except OSError:
            log.exception("Failed to initialise users file %s", self.path)

    def load(self) -> List[UserRecord]:
        """All user records; any read problem yields an empty list."""
        self._ensure_file()
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError:
            log.exception("Failed to read users file %s", self.path)
            return []
        if not text.strip():
            return []
        try:
            raw = json.loads(text)
        except ValueError:
            log.error("Users file %s is not valid JSON; treating as empty", self.path)
            return []
        if not isinstance(raw, list):
            log.error("Users file %s does not hold a JSON array; treating as empty", self.path)
            return []

        out: List[UserRecord] = []
        for entry in raw:
            if not isinstance(entry, dict):
                continue
            rec = UserRecord.from_dict(entry)
            if rec is not None:
                out.append(rec)
        return out

    def save(self, users: Sequence[UserRecord]) -> bool:
        """Overwrite the file with ``users``. Returns False if the write failed."""
        payload = json.dumps([u.to_dict() for u in users], indent=4, ensure_ascii=False)
        tmp_name = ""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=".users-", suffix=".tmp", dir=str(self.path.parent))
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.replace(tmp_name, self.path)
        except OSError:
            log.exception("Failed to write users file %s", self.path)
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            return False
        return True

    def update(self, mutator: Callable[[List[UserRecord]], Optional[List[UserRecord]]]) -> bool:
        """Locked read-modify-write.

        ``mutator`` receives the current records and returns the new list, or
        None to leave the file untouched (reported as False).
        """
        with _LOCK:
            users = self.load()
            new_users = mutator(list(users))
            if new_users is None:
                return False
            return self.save(new_users)
