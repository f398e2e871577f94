# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from fastapi import Request, Response

from brewfinder import config
from brewfinder.auth.service import ANONYMOUS, AuthContext, AuthService
from brewfinder.auth.session import COOKIE_NAME, sign_session_id, unsign_session_id


def load_context_from_request(request: Request, auth: AuthService) -> AuthContext:
    token = request.cookies.get(COOKIE_NAME, "")
    sid = unsign_session_id(token)
    if not sid:
        return ANONYMOUS
    return auth.context_for(sid)


def current_context(request: Request) -> AuthContext:
    ctx = getattr(request.state, "auth", None)
    if isinstance(ctx, AuthContext):
        return ctx
    return ANONYMOUS


def cookie_settings() -> dict:
    return {"httponly": True, "samesite": "strict", "secure": config.COOKIE_SECURE}


def apply_context(response: Response, before: AuthContext, after: AuthContext, *, had_cookie: bool = False) -> None:
    """Sync the session cookie with the context an auth operation returned.

    A cookie whose server-side session is gone (expired, restart) is cleared too.
    """
    if after.session_id:
        if after.session_id != before.session_id:
            response.set_cookie(COOKIE_NAME, sign_session_id(after.session_id), **cookie_settings())
        return
    if before.session_id or had_cookie:
        response.delete_cookie(COOKIE_NAME, **cookie_settings())
