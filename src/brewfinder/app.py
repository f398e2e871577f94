# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

from fastapi import FastAPI, Form, Request
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from brewfinder import config
from brewfinder.auth.service import (
    AuthContext,
    AuthResult,
    AuthService,
    validate_login_form,
    validate_registration_form,
)
from brewfinder.auth.session import COOKIE_NAME, SessionRegistry
from brewfinder.auth.users import CredentialStore
from brewfinder.context import apply_context, current_context, load_context_from_request
from brewfinder.core.breweries import BREWERY_TYPES, BreweryRecord, InvalidSearch, SearchQuery
from brewfinder.logger import get_logger
from brewfinder.middleware import request_logging_middleware, security_headers_middleware
from brewfinder.services.search_service import BrewerySearchClient

log = get_logger("app")

PAGES = ("home", "breweries", "types", "about")
HOME_SAMPLE_SIZE = 8
MSG_NO_RESULTS = "No breweries found matching your search criteria. Try different search terms."

STORE = CredentialStore(config.USERS_PATH)
SESSIONS = SessionRegistry(max_age=config.SESSION_MAX_AGE_SECONDS)
AUTH = AuthService(STORE, SESSIONS)
SEARCH = BrewerySearchClient(base_url=config.API_BASE)

app = FastAPI(title="BrewFinder")


@app.middleware("http")
async def _auth_middleware(request: Request, call_next):
    request.state.auth = load_context_from_request(request, AUTH)
    return await call_next(request)


app.middleware("http")(request_logging_middleware)
app.middleware("http")(security_headers_middleware)

BASE_DIR = Path(__file__).resolve().parent

app.mount("/static", StaticFiles(directory=str(BASE_DIR / "static")), name="static")
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))


def _page(raw: str) -> str:
    p = (raw or "").strip().lower()
    return p if p in PAGES else "home"


def _render(request: Request, page: str, ctx: AuthContext, extra: Dict[str, Any]) -> HTMLResponse:
    """Render the login view for anonymous users, the requested page otherwise."""
    base_ctx = {
        "page": page,
        "current_user": AUTH.current_user(ctx),
        "brewery_types": BREWERY_TYPES,
        "auth_message": "",
        "auth_success": False,
    }
    merged = {**base_ctx, **(extra or {})}
    template_name = f"{page}.html" if merged["current_user"] else "auth.html"
    return templates.TemplateResponse(request, template_name, merged)


def _page_data(page: str, ctx: AuthContext, selected_type: str = "") -> Dict[str, Any]:
    """Data each page needs on a plain (non-search) render."""
    if not AUTH.is_logged_in(ctx):
        return {}
    data: Dict[str, Any] = {}
    if page == "home":
        data["sample_breweries"] = SEARCH.random_sample(HOME_SAMPLE_SIZE)
    elif page == "breweries":
        data["search"] = SearchQuery(type=selected_type if selected_type in BREWERY_TYPES else "")
    return data


def _handle_action(action: str, ctx: AuthContext, form: Dict[str, str]) -> AuthResult:
    if action == "register":
        username = form["username"].strip()
        email = form["email"].strip()
        error = validate_registration_form(username, email, form["password"], form["confirm_password"])
        if error:
            return AuthResult(False, error, ctx)
        return AUTH.register_and_login(ctx, username, email, form["password"])
    if action == "login":
        username = form["username"].strip()
        error = validate_login_form(username, form["password"])
        if error:
            return AuthResult(False, error, ctx)
        return AUTH.login(ctx, username, form["password"])
    if action == "logout":
        return AUTH.logout(ctx)
    return AuthResult(False, "", ctx)


def _handle_search(query: SearchQuery) -> Dict[str, Any]:
    breweries: List[BreweryRecord] = []
    error = ""
    try:
        breweries = SEARCH.search_query(query)
    except InvalidSearch as e:
        error = str(e)
    else:
        if not breweries:
            error = MSG_NO_RESULTS
    return {"search": query, "searched": True, "breweries": breweries, "error": error}


# ------------------ Routes ------------------


@app.get("/", response_class=HTMLResponse)
def index(request: Request, page: str = "home", type: str = ""):
    ctx = current_context(request)
    p = _page(page)
    resp = _render(request, p, ctx, _page_data(p, ctx, selected_type=type.strip()))
    apply_context(resp, ctx, ctx, had_cookie=COOKIE_NAME in request.cookies)
    return resp


@app.post("/", response_class=HTMLResponse)
def index_post(
    request: Request,
    page: str = "home",
    action: str = Form(""),
    username: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    confirm_password: str = Form(""),
    search: str = Form(""),
    name: str = Form(""),
    city: str = Form(""),
    state: str = Form(""),
    type: str = Form(""),
):
    ctx = current_context(request)
    p = _page(page)
    extra: Dict[str, Any] = {}
    new_ctx = ctx

    if action:
        result = _handle_action(
            action,
            ctx,
            {
                "username": username,
                "email": email,
                "password": password,
                "confirm_password": confirm_password,
            },
        )
        new_ctx = result.context
        extra.update({"auth_message": result.message, "auth_success": result.success})

    if p == "breweries" and search and AUTH.is_logged_in(new_ctx):
        extra.update(_handle_search(SearchQuery.from_form(name=name, city=city, state=state, type=type)))
    else:
        extra = {**_page_data(p, new_ctx), **extra}

    resp = _render(request, p, new_ctx, extra)
    apply_context(resp, ctx, new_ctx, had_cookie=COOKIE_NAME in request.cookies)
    return resp


@app.get("/healthz")
def healthz():
    return JSONResponse({"status": "ok"})
