#!/usr/bin/env python3
from __future__ import annotations

from getpass import getpass

from brewfinder.auth.service import AuthService, validate_registration_form
from brewfinder.auth.session import SessionRegistry
from brewfinder.auth.users import DEFAULT_USERS_PATH, CredentialStore

USERS_PATH = DEFAULT_USERS_PATH


def main() -> None:
    username = input("Username: ").strip()
    email = input("Email: ").strip()

    pw1 = getpass("Password: ")
    pw2 = getpass("Repeat password: ")
    error = validate_registration_form(username, email, pw1, pw2)
    if error:
        raise SystemExit(error)

    auth = AuthService(CredentialStore(USERS_PATH), SessionRegistry())
    result = auth.register(username, email, pw1)
    if not result.success:
        raise SystemExit(result.message)
    print(f"OK -> {USERS_PATH}")


if __name__ == "__main__":
    main()
