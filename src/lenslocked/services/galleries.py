# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from typing import List, Protocol

from lenslocked.core.errors import ErrorCode, ModelError
from lenslocked.core.validation import run_validators
from lenslocked.infra.models import Gallery


class GalleryStore(Protocol):
    def by_id(self, gallery_id: int) -> Gallery: ...
    def by_user_id(self, user_id: int) -> List[Gallery]: ...
    def create(self, gallery: Gallery) -> None: ...
    def update(self, gallery: Gallery) -> None: ...
    def delete(self, gallery_id: int) -> None: ...


def user_id_required(gallery: Gallery) -> None:
    if not gallery.user_id or gallery.user_id <= 0:
        raise ModelError(ErrorCode.USER_ID_REQUIRED)


def title_required(gallery: Gallery) -> None:
    if not (gallery.title or "").strip():
        raise ModelError(ErrorCode.TITLE_REQUIRED)


def id_greater_than_zero(gallery: Gallery) -> None:
    if not gallery.id or gallery.id <= 0:
        raise ModelError(ErrorCode.ID_INVALID)


class GalleryService:
    def __init__(self, store: GalleryStore) -> None:
        self.store = store

    def by_id(self, gallery_id: int) -> Gallery:
        return self.store.by_id(gallery_id)

    def by_user_id(self, user_id: int) -> List[Gallery]:
        return self.store.by_user_id(user_id)

    def create(self, gallery: Gallery) -> None:
        run_validators(gallery, user_id_required, title_required)
        self.store.create(gallery)

    def update(self, gallery: Gallery) -> None:
        run_validators(gallery, user_id_required, title_required)
        self.store.update(gallery)

    def delete(self, gallery_id: int) -> None:
        run_validators(Gallery(id=gallery_id), id_greater_than_zero)
        self.store.delete(gallery_id)
