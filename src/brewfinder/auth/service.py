# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Registration, login and session lifecycle.

Every operation takes the caller's ``AuthContext`` and returns an
``AuthResult`` holding the context to use from then on; nothing here touches
request globals.
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from typing import List, Optional

from email_validator import EmailNotValidError, validate_email

from brewfinder.auth.passwords import hash_password, is_strong_password, verify_password
from brewfinder.auth.session import SessionData, SessionRegistry
from brewfinder.auth.users import CredentialStore, UserRecord
from brewfinder.logger import get_logger

log = get_logger("auth.service")

USERNAME_MIN_LENGTH = 3
_USERNAME_RE = re.compile(r"[A-Za-z0-9_]+")

MSG_USERNAME_TAKEN = "Username already exists"
MSG_EMAIL_TAKEN = "Email already registered"
MSG_USERNAME_SHORT = "Username must be at least 3 characters long"
MSG_USERNAME_CHARSET = "Username can only contain letters, numbers, and underscores"
MSG_WEAK_PASSWORD = (
    "Password must be at least 8 characters with uppercase letters, "
    "lowercase letters, numbers, and symbols."
)
MSG_REGISTERED = "Registration successful! Welcome to BrewFinder!"
MSG_SAVE_FAILED = "Failed to save user data."
MSG_AUTO_LOGIN_FAILED = "Registration successful but auto-login failed. Please login manually."
MSG_LOGGED_IN = "Login successful! Welcome back!"
MSG_BAD_CREDENTIALS = "Invalid username or password"
MSG_LOGGED_OUT = "Logged out successfully"
MSG_FIELDS_REQUIRED = "All fields are required"
MSG_INVALID_EMAIL = "Invalid email address"
MSG_PASSWORD_MISMATCH = "Passwords do not match"
MSG_LOGIN_FIELDS_REQUIRED = "Username and password are required"


def _now() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


@dataclass(frozen=True)
class AuthContext:
    session_id: Optional[str] = None
    user: Optional[SessionData] = None

    @property
    def is_logged_in(self) -> bool:
        return self.user is not None


ANONYMOUS = AuthContext()


@dataclass(frozen=True)
class AuthResult:
    success: bool
    message: str
    context: AuthContext = ANONYMOUS


def validate_registration_form(username: str, email: str, password: str, confirm_password: str) -> Optional[str]:
    """Form-level checks run before ``register``. Returns an error message or None."""
    if not username or not email or not password:
        return MSG_FIELDS_REQUIRED
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return MSG_INVALID_EMAIL
    if password != confirm_password:
        return MSG_PASSWORD_MISMATCH
    return None


def validate_login_form(username: str, password: str) -> Optional[str]:
    if not username or not password:
        return MSG_LOGIN_FIELDS_REQUIRED
    return None


class AuthService:
    def __init__(self, store: CredentialStore, sessions: SessionRegistry):
        self.store = store
        self.sessions = sessions

    def _check_new_user(self, users: List[UserRecord], username: str, email: str, password: str) -> Optional[str]:
        for u in users:
            if u.username == username:
                return MSG_USERNAME_TAKEN
            if u.email == email:
                return MSG_EMAIL_TAKEN
        if len(username) < USERNAME_MIN_LENGTH:
            return MSG_USERNAME_SHORT
        if not _USERNAME_RE.fullmatch(username):
            return MSG_USERNAME_CHARSET
        if not is_strong_password(password):
            return MSG_WEAK_PASSWORD
        return None

    def register(self, username: str, email: str, password: str) -> AuthResult:
        rejected: List[str] = []

        def _append(users: List[UserRecord]) -> Optional[List[UserRecord]]:
            err = self._check_new_user(users, username, email, password)
            if err:
                rejected.append(err)
                return None
            record = UserRecord(
                id=uuid.uuid4().hex,
                username=username,
                email=email,
                password_hash=hash_password(password),
                created_at=_now(),
            )
            return users + [record]

        if self.store.update(_append):
            log.info("Registered user %s", username)
            return AuthResult(True, MSG_REGISTERED)
        if rejected:
            return AuthResult(False, rejected[0])
        return AuthResult(False, MSG_SAVE_FAILED)

    def login(self, ctx: AuthContext, username_or_email: str, password: str) -> AuthResult:
        matched: Optional[UserRecord] = None
        for u in self.store.load():
            if not u.is_active:
                continue
            if u.username != username_or_email and u.email != username_or_email:
                continue
            if verify_password(u.password_hash, password):
                matched = u
                break

        if matched is None:
            log.info("Failed login attempt")
            return AuthResult(False, MSG_BAD_CREDENTIALS, ctx)

        stamp = _now()

        def _touch(users: List[UserRecord]) -> List[UserRecord]:
            return [replace(u, last_login=stamp) if u.id == matched.id else u for u in users]

        if not self.store.update(_touch):
            log.warning("Could not record last login for user %s", matched.username)

        self.sessions.destroy(ctx.session_id)
        snapshot = SessionData(
            id=matched.id,
            username=matched.username,
            email=matched.email,
            created_at=matched.created_at,
        )
        sid = self.sessions.create(snapshot)
        log.info("User %s logged in", matched.username)
        return AuthResult(True, MSG_LOGGED_IN, AuthContext(session_id=sid, user=snapshot))

    def register_and_login(self, ctx: AuthContext, username: str, email: str, password: str) -> AuthResult:
        """Register, then log the new user in. Not atomic: a failed login
        still reports a successful registration."""
        result = self.register(username, email, password)
        if not result.success:
            return replace(result, context=ctx)
        login = self.login(ctx, username, password)
        if not login.success:
            return AuthResult(True, MSG_AUTO_LOGIN_FAILED, ctx)
        return AuthResult(True, MSG_REGISTERED, login.context)

    def logout(self, ctx: AuthContext) -> AuthResult:
        self.sessions.destroy(ctx.session_id)
        return AuthResult(True, MSG_LOGGED_OUT, ANONYMOUS)

    def context_for(self, session_id: Optional[str]) -> AuthContext:
        user = self.sessions.get(session_id)
        if user is None:
            return ANONYMOUS
        return AuthContext(session_id=session_id, user=user)

    def is_logged_in(self, ctx: AuthContext) -> bool:
        return self.sessions.get(ctx.session_id) is not None

    def current_user(self, ctx: AuthContext) -> Optional[SessionData]:
        if not self.is_logged_in(ctx):
            return None
        return ctx.user
