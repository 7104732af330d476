# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""User validation pipeline and the authentication service on top of it.

Layers, outermost first:
  UserService    -> authenticate + delegation
  UserValidator  -> ordered validator chains (normalise, hash, sign, check)
  UserStore      -> persistence (lenslocked.infra.users_repo.UserGateway)
"""

from __future__ import annotations

import logging
import re
from typing import Protocol

from lenslocked.auth import tokens
from lenslocked.auth.passwords import hash_password, verify_password
from lenslocked.auth.signing import TokenSigner
from lenslocked.core.errors import ErrorCode, ModelError, is_not_found
from lenslocked.core.validation import run_validators
from lenslocked.infra.models import User

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[a-z0-9._%+\-]+@[a-z0-9.\-]+\.[a-z]{2,16}$")
MIN_PASSWORD_LENGTH = 8


class UserStore(Protocol):
    def by_id(self, user_id: int) -> User: ...
    def by_email(self, email: str) -> User: ...
    def by_remember(self, remember_hash: str) -> User: ...
    def create(self, user: User) -> None: ...
    def update(self, user: User) -> None: ...
    def delete(self, user_id: int) -> None: ...


def normalize_email(email: str) -> str:
    return (email or "").lower().strip()


class UserValidator:
    """Runs the validator chain for each operation, then delegates to the store."""

    def __init__(self, store: UserStore, signer: TokenSigner, pepper: str) -> None:
        self.store = store
        self.signer = signer
        self.pepper = pepper

    # -- lookups --

    def by_id(self, user_id: int) -> User:
        return self.store.by_id(user_id)

    def by_email(self, email: str) -> User:
        user = run_validators(User(email=email), self.normalize_email)
        return self.store.by_email(user.email)

    def by_remember(self, token: str) -> User:
        user = User()
        user.remember = token
        run_validators(user, self.hmac_remember)
        return self.store.by_remember(user.remember_hash)

    # -- mutations --

    def create(self, user: User) -> None:
        run_validators(
            user,
            self.password_required,
            self.password_min_length,
            self.hash_password,
            self.password_hash_required,
            self.set_remember_if_unset,
            self.remember_min_bytes,
            self.hmac_remember,
            self.remember_hash_required,
            self.normalize_email,
            self.require_email,
            self.email_format,
            self.email_is_available,
        )
        self.store.create(user)

    def update(self, user: User) -> None:
        run_validators(
            user,
            self.password_min_length,
            self.hash_password,
            self.password_hash_required,
            self.remember_min_bytes,
            self.hmac_remember,
            self.remember_hash_required,
            self.normalize_email,
            self.require_email,
            self.email_format,
            self.email_is_available,
        )
        self.store.update(user)

    def delete(self, user_id: int) -> None:
        user = User()
        user.id = user_id
        run_validators(user, self.id_greater_than_zero)
        self.store.delete(user_id)

    # -- validators --

    def password_required(self, user: User) -> None:
        if not user.password:
            raise ModelError(ErrorCode.PASSWORD_REQUIRED)

    def password_min_length(self, user: User) -> None:
        if not user.password:
            return
        if len(user.password.encode("utf-8")) < MIN_PASSWORD_LENGTH:
            raise ModelError(ErrorCode.PASSWORD_TOO_SHORT)

    def hash_password(self, user: User) -> None:
        if not user.password:
            return
        user.password_hash = hash_password(user.password, self.pepper)
        user.password = ""

    def password_hash_required(self, user: User) -> None:
        if not user.password_hash:
            raise ModelError(ErrorCode.PASSWORD_REQUIRED)

    def set_remember_if_unset(self, user: User) -> None:
        if user.remember:
            return
        user.remember = tokens.remember_token()

    def remember_min_bytes(self, user: User) -> None:
        if not user.remember:
            return
        if tokens.n_bytes(user.remember) < tokens.REMEMBER_TOKEN_BYTES:
            raise ModelError(ErrorCode.REMEMBER_TOO_SHORT)

    def hmac_remember(self, user: User) -> None:
        if not user.remember:
            return
        user.remember_hash = self.signer.hash(user.remember)

    def remember_hash_required(self, user: User) -> None:
        if not user.remember_hash:
            raise ModelError(ErrorCode.REMEMBER_REQUIRED)

    def id_greater_than_zero(self, user: User) -> None:
        if not user.id or user.id <= 0:
            raise ModelError(ErrorCode.ID_INVALID)

    def normalize_email(self, user: User) -> None:
        user.email = normalize_email(user.email)

    def require_email(self, user: User) -> None:
        if not user.email:
            raise ModelError(ErrorCode.EMAIL_REQUIRED)

    def email_format(self, user: User) -> None:
        if not EMAIL_RE.match(user.email):
            raise ModelError(ErrorCode.EMAIL_INVALID)

    def email_is_available(self, user: User) -> None:
        try:
            existing = self.by_email(user.email)
        except ModelError as exc:
            if is_not_found(exc):
                return
            raise
        # Same record means this is an update of that user.
        if user.id != existing.id:
            raise ModelError(ErrorCode.EMAIL_TAKEN)


class UserService:
    def __init__(self, users: UserValidator, pepper: str) -> None:
        self.users = users
        self.pepper = pepper

    def by_id(self, user_id: int) -> User:
        return self.users.by_id(user_id)

    def by_email(self, email: str) -> User:
        return self.users.by_email(email)

    def by_remember(self, token: str) -> User:
        return self.users.by_remember(token)

    def create(self, user: User) -> None:
        self.users.create(user)

    def update(self, user: User) -> None:
        self.users.update(user)

    def delete(self, user_id: int) -> None:
        self.users.delete(user_id)

    def authenticate(self, email: str, password: str) -> User:
        """Return the user for ``email`` if ``password`` matches.

        Raises NOT_FOUND for an unknown email and PASSWORD_INCORRECT on mismatch.
        """
        found = self.users.by_email(email)
        if not verify_password(found.password_hash, password, self.pepper):
            logger.info("Password mismatch for user %s", found.id)
            raise ModelError(ErrorCode.PASSWORD_INCORRECT)
        return found

    def rotate_remember(self, user: User) -> str:
        """Issue a fresh remember token for ``user`` and persist its hash."""
        token = tokens.remember_token()
        user.remember = token
        self.users.update(user)
        return token
