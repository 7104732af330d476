# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy shared by the validation pipeline, the gateways and the web layer.

Every failure the core raises is a ``ModelError`` carrying an ``ErrorCode``.
The code knows its ``ErrorKind``, which decides what the web layer may show:

- NOT_FOUND: a lookup missed.
- VALIDATION: safe to show to the user (required field, format, length, uniqueness).
- INTERNAL: logged, shown as a generic message.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    INTERNAL = "internal"


class ErrorCode(Enum):
    NOT_FOUND = (ErrorKind.NOT_FOUND, "models: resource not found")
    INVALID_EMAIL = (ErrorKind.VALIDATION, "models: incorrect email provided")
    PASSWORD_INCORRECT = (ErrorKind.VALIDATION, "models: incorrect password provided")
    EMAIL_REQUIRED = (ErrorKind.VALIDATION, "models: email address is required")
    EMAIL_INVALID = (ErrorKind.VALIDATION, "models: email address is not valid")
    EMAIL_TAKEN = (ErrorKind.VALIDATION, "models: email address is already taken")
    PASSWORD_TOO_SHORT = (ErrorKind.VALIDATION, "models: password must be at least 8 characters")
    PASSWORD_REQUIRED = (ErrorKind.VALIDATION, "models: password is required")
    TITLE_REQUIRED = (ErrorKind.VALIDATION, "models: title is required")
    ID_INVALID = (ErrorKind.INTERNAL, "models: ID provided was invalid")
    REMEMBER_TOO_SHORT = (ErrorKind.INTERNAL, "models: remember token must be at least 32 bytes")
    REMEMBER_REQUIRED = (ErrorKind.INTERNAL, "models: remember token hash is required")
    REMEMBER_INVALID = (ErrorKind.INTERNAL, "models: remember token is not valid base64")
    USER_ID_REQUIRED = (ErrorKind.INTERNAL, "models: user ID is required")
    HASHING_FAILED = (ErrorKind.INTERNAL, "models: password hashing failed")
    RANDOM_FAILED = (ErrorKind.INTERNAL, "models: secure random source failed")

    def __init__(self, kind: ErrorKind, message: str) -> None:
        self.kind = kind
        self.message = message


class ModelError(Exception):
    """Typed failure raised by the core. ``str(err)`` is the internal message."""

    def __init__(self, code: ErrorCode) -> None:
        self.code = code
        super().__init__(code.message)

    @property
    def kind(self) -> ErrorKind:
        return self.code.kind

    @property
    def is_public(self) -> bool:
        return self.code.kind is ErrorKind.VALIDATION

    def public(self) -> str:
        """User-facing text: drop the ``models: `` prefix and capitalise the first word."""
        s = self.code.message.replace("models: ", "", 1)
        words = s.split(" ")
        words[0] = words[0][:1].upper() + words[0][1:]
        return " ".join(words)


def is_not_found(exc: BaseException) -> bool:
    return isinstance(exc, ModelError) and exc.code is ErrorCode.NOT_FOUND
