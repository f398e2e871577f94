# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP middleware: security headers and request logging."""

from __future__ import annotations

import time

from fastapi import Request
from fastapi.responses import PlainTextResponse

from brewfinder.logger import get_logger

log = get_logger("http")

SECURITY_HEADERS = {
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


async def security_headers_middleware(request: Request, call_next):
    """Outermost middleware: unhandled errors become a 500 that still carries the headers."""
    try:
        response = await call_next(request)
    except Exception:
        log.exception("Unhandled error on %s %s", request.method, request.url.path)
        response = PlainTextResponse("Internal Server Error", status_code=500)
    for name, value in SECURITY_HEADERS.items():
        response.headers[name] = value
    return response


async def request_logging_middleware(request: Request, call_next):
    start = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        log.exception("%s %s failed after %.3fs", request.method, request.url.path, time.perf_counter() - start)
        raise
    log.info(
        "%s %s -> %s (%.3fs)",
        request.method,
        request.url.path,
        response.status_code,
        time.perf_counter() - start,
    )
    return response
