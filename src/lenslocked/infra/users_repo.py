# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Relational storage for users.

Lookups raise ModelError(NOT_FOUND) on a miss. Any other storage error
(IntegrityError from the unique indexes included) propagates unchanged.
Soft-deleted rows are invisible to every lookup.
"""

from __future__ import annotations

from sqlalchemy import select, update

from lenslocked.infra.db import Database, first
from lenslocked.infra.models import User, utcnow


class UserGateway:
    def __init__(self, db: Database) -> None:
        self._db = db

    def _live(self):
        return select(User).where(User.deleted_at.is_(None))

    def by_id(self, user_id: int) -> User:
        with self._db.session() as s:
            return first(s, self._live().where(User.id == user_id))

    def by_email(self, email: str) -> User:
        with self._db.session() as s:
            return first(s, self._live().where(User.email == email))

    def by_remember(self, remember_hash: str) -> User:
        with self._db.session() as s:
            return first(s, self._live().where(User.remember_hash == remember_hash))

    def create(self, user: User) -> None:
        with self._db.session() as s:
            s.add(user)
            s.commit()

    def update(self, user: User) -> None:
        """Save every column of ``user``."""
        with self._db.session() as s:
            s.merge(user)
            s.commit()

    def delete(self, user_id: int) -> None:
        with self._db.session() as s:
            s.execute(
                update(User)
                .where(User.id == user_id, User.deleted_at.is_(None))
                .values(deleted_at=utcnow())
            )
            s.commit()
