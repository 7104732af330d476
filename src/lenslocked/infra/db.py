# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from typing import Optional, TypeVar

from sqlalchemy import Select, create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from lenslocked.core.errors import ErrorCode, ModelError

logger = logging.getLogger(__name__)

Base = declarative_base()

T = TypeVar("T")


class Database:
    """Pooled engine plus the session factory every gateway draws from."""

    def __init__(self, url: str, *, echo: bool = False) -> None:
        connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
        self.engine = create_engine(url, echo=echo, connect_args=connect_args, pool_pre_ping=True)
        self._sessions = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)

    def session(self) -> Session:
        return self._sessions()

    def auto_migrate(self) -> None:
        """Create any missing tables."""
        # Entities must be imported so they are registered on Base.metadata.
        from lenslocked.infra import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def destructive_reset(self) -> None:
        """Drop every table and rebuild the schema. Test/bootstrap only."""
        from lenslocked.infra import models  # noqa: F401

        logger.warning("Destructive reset of %s", self.engine.url.render_as_string(hide_password=True))
        Base.metadata.drop_all(bind=self.engine)
        self.auto_migrate()

    def close(self) -> None:
        self.engine.dispose()


def first(session: Session, stmt: Select) -> T:
    """First row of ``stmt`` or ModelError(NOT_FOUND)."""
    obj: Optional[T] = session.scalars(stmt.limit(1)).first()
    if obj is None:
        raise ModelError(ErrorCode.NOT_FOUND)
    return obj
