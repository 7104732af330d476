# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Session middleware in two stages.

1. identify: resolve the ``remember_token`` cookie to a user and attach it to
   ``request.state.user``. Never fails the request.
2. require: ``require_user`` dependency, redirecting anonymous visitors to /login.
"""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import quote

from fastapi import FastAPI, HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool

from lenslocked.auth.session import REMEMBER_COOKIE
from lenslocked.core.errors import ModelError
from lenslocked.infra.models import User

logger = logging.getLogger(__name__)

# Static assets and images never need the user lookup.
STATIC_PREFIXES = ("/assets/", "/images/")


def load_user_from_request(request: Request) -> Optional[User]:
    token = request.cookies.get(REMEMBER_COOKIE, "")
    if not token:
        return None
    services = request.app.state.services
    try:
        return services.user.by_remember(token)
    except ModelError as exc:
        logger.debug("Remember token rejected: %s", exc)
        return None
    except SQLAlchemyError:
        logger.warning("User lookup failed, continuing unauthenticated", exc_info=True)
        return None


def register_user_middleware(app: FastAPI) -> None:
    @app.middleware("http")
    async def identify_user(request: Request, call_next):
        request.state.user = None
        if not request.url.path.startswith(STATIC_PREFIXES):
            request.state.user = await run_in_threadpool(load_user_from_request, request)
        return await call_next(request)


def current_user_optional(request: Request) -> Optional[User]:
    return getattr(request.state, "user", None)


def require_user(request: Request) -> User:
    u = current_user_optional(request)
    if u:
        return u
    next_url = str(request.url.path)
    if request.url.query:
        next_url += "?" + request.url.query
    loc = f"/login?next={quote(next_url, safe='/')}"
    raise HTTPException(status_code=303, headers={"Location": loc})


def safe_next(next_url: str, default: str = "/galleries") -> str:
    """Only allow local redirect targets."""
    n = (next_url or "").strip()
    if not n.startswith("/") or n.startswith("//") or "\\" in n:
        return default
    return n
