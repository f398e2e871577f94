# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Authentication for BrewFinder.

This package provides:
- Password hashing/verification and strength rules (argon2)
- The JSON credential store (data/users.json)
- Server-side sessions referenced by a signed cookie (itsdangerous)
- The auth service tying them together
"""
