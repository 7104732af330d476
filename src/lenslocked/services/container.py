# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from lenslocked.auth.signing import TokenSigner
from lenslocked.config import Config
from lenslocked.infra.db import Database
from lenslocked.infra.galleries_repo import GalleryGateway
from lenslocked.infra.image_store import ImageService
from lenslocked.infra.users_repo import UserGateway
from lenslocked.services.galleries import GalleryService
from lenslocked.services.users import UserService, UserValidator


@dataclass
class Services:
    db: Database
    user: UserService
    gallery: GalleryService
    image: ImageService

    @classmethod
    def from_config(cls, config: Config) -> "Services":
        """Wire every collaborator once, at process start."""
        db = Database(config.database_url, echo=not config.is_prod)
        validator = UserValidator(UserGateway(db), TokenSigner(config.hmac_key), config.pepper)
        return cls(
            db=db,
            user=UserService(validator, config.pepper),
            gallery=GalleryService(GalleryGateway(db)),
            image=ImageService(Path(config.images_dir)),
        )

    def auto_migrate(self) -> None:
        self.db.auto_migrate()

    def destructive_reset(self) -> None:
        self.db.destructive_reset()

    def close(self) -> None:
        self.db.close()
