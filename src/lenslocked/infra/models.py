# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String

from lenslocked.infra.db import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Model(Base):
    """Fields shared by every persisted entity. ``deleted_at`` marks a soft delete."""

    __abstract__ = True

    id = Column(Integer, primary_key=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)


class User(Model):
    __tablename__ = "users"

    name = Column(String(255), nullable=False, default="")
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    remember_hash = Column(String(255), nullable=False, unique=True, index=True)

    # Plaintext, never persisted.
    password = ""
    remember = ""

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r}>"


class Gallery(Model):
    __tablename__ = "galleries"

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)

    # Filled from the image store when a gallery is displayed.
    images = ()

    def __repr__(self) -> str:
        return f"<Gallery id={self.id} user_id={self.user_id} title={self.title!r}>"
