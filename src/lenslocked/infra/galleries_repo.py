# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from typing import List

from sqlalchemy import select, update

from lenslocked.infra.db import Database, first
from lenslocked.infra.models import Gallery, utcnow


class GalleryGateway:
    def __init__(self, db: Database) -> None:
        self._db = db

    def _live(self):
        return select(Gallery).where(Gallery.deleted_at.is_(None))

    def by_id(self, gallery_id: int) -> Gallery:
        with self._db.session() as s:
            return first(s, self._live().where(Gallery.id == gallery_id))

    def by_user_id(self, user_id: int) -> List[Gallery]:
        with self._db.session() as s:
            return list(s.scalars(self._live().where(Gallery.user_id == user_id).order_by(Gallery.id)))

    def create(self, gallery: Gallery) -> None:
        with self._db.session() as s:
            s.add(gallery)
            s.commit()

    def update(self, gallery: Gallery) -> None:
        with self._db.session() as s:
            s.merge(gallery)
            s.commit()

    def delete(self, gallery_id: int) -> None:
        with self._db.session() as s:
            s.execute(
                update(Gallery)
                .where(Gallery.id == gallery_id, Gallery.deleted_at.is_(None))
                .values(deleted_at=utcnow())
            )
            s.commit()
