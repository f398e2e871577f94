# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import re

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

_PH = PasswordHasher()

PASSWORD_MIN_LENGTH = 8
PASSWORD_SYMBOLS = "!@#$%^&*()-_=+{};:,<.>"

_STRENGTH_RULES = (
    re.compile(r"[A-Z]"),
    re.compile(r"[a-z]"),
    re.compile(r"[0-9]"),
    re.compile("[" + re.escape(PASSWORD_SYMBOLS) + "]"),
)


def hash_password(plain: str) -> str:
    if not plain:
        raise ValueError("Empty password")
    return _PH.hash(plain)


def verify_password(hash_value: str, plain: str) -> bool:
    if not hash_value or not plain:
        return False
    try:
        return _PH.verify(hash_value, plain)
    except (VerificationError, InvalidHashError):
        return False


def is_strong_password(plain: str) -> bool:
    """At least 8 chars with upper, lower, digit and one of PASSWORD_SYMBOLS."""
    if len(plain or "") < PASSWORD_MIN_LENGTH:
        return False
    return all(rule.search(plain) for rule in _STRENGTH_RULES)
