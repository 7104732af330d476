# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import base64
import binascii
import secrets

from lenslocked.core.errors import ErrorCode, ModelError

REMEMBER_TOKEN_BYTES = 32


def random_bytes(n: int) -> bytes:
    try:
        return secrets.token_bytes(n)
    except OSError as exc:
        raise ModelError(ErrorCode.RANDOM_FAILED) from exc


def random_string(n: int) -> str:
    """URL-safe base64 of ``n`` random bytes."""
    return base64.urlsafe_b64encode(random_bytes(n)).decode("ascii")


def remember_token() -> str:
    return random_string(REMEMBER_TOKEN_BYTES)


def n_bytes(token: str) -> int:
    """Number of raw bytes behind a URL-safe base64 token."""
    try:
        return len(base64.urlsafe_b64decode(token.encode("ascii")))
    except (binascii.Error, UnicodeEncodeError, ValueError) as exc:
        raise ModelError(ErrorCode.REMEMBER_INVALID) from exc
