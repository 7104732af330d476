# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import hmac
from typing import Optional

from fastapi import Form, HTTPException, Request
from itsdangerous import BadSignature, URLSafeSerializer

from lenslocked.auth.tokens import random_string

REMEMBER_COOKIE = "remember_token"
CSRF_COOKIE = "csrf_token"
CSRF_FIELD = "csrf_token"


def cookie_settings(*, secure: bool = False) -> dict:
    return {"httponly": True, "samesite": "lax", "secure": secure}


class CSRF:
    """Double-submit CSRF tokens: same signed value in a cookie and a hidden form field."""

    def __init__(self, secret: str, *, secure: bool = False) -> None:
        if not secret:
            raise RuntimeError("Falta la clave CSRF (csrf_key)")
        self._serializer = URLSafeSerializer(secret_key=secret, salt="lenslocked.csrf.v1")
        self.secure = secure

    def new_token(self) -> str:
        return self._serializer.dumps(random_string(16))

    def is_valid(self, token: str) -> bool:
        if not token:
            return False
        try:
            self._serializer.loads(token)
        except BadSignature:
            return False
        return True

    def check(self, cookie_value: Optional[str], form_value: Optional[str]) -> bool:
        if not cookie_value or not form_value:
            return False
        if not hmac.compare_digest(cookie_value, form_value):
            return False
        return self.is_valid(form_value)


def verify_csrf(request: Request, csrf_token: str = Form("")) -> None:
    """FastAPI dependency for every form POST."""
    csrf: CSRF = request.app.state.csrf
    if not csrf.check(request.cookies.get(CSRF_COOKIE), csrf_token):
        raise HTTPException(status_code=403, detail="Invalid CSRF token")
