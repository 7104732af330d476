# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Filesystem storage for gallery images.

There is no database row behind an image: the layout
``<root>/galleries/<gallery_id>/<filename>`` is the only record.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, List
from urllib.parse import quote

from lenslocked.core.errors import ErrorCode, ModelError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Image:
    gallery_id: int
    filename: str

    @property
    def relative_path(self) -> str:
        return f"images/galleries/{self.gallery_id}/{self.filename}"

    @property
    def path(self) -> str:
        """URL the image is served from."""
        return "/" + quote(self.relative_path)


def safe_filename(filename: str) -> str:
    name = Path(str(filename or "").replace("\\", "/")).name
    if name in ("", ".", ".."):
        raise ValueError("Nombre de fichero no válido")
    return name


class ImageService:
    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def _gallery_dir(self, gallery_id: int) -> Path:
        return self.root / "galleries" / str(int(gallery_id))

    def create(self, gallery_id: int, src: BinaryIO, filename: str) -> Image:
        """Stream ``src`` to disk. A failure mid-copy leaves the partial file behind."""
        name = safe_filename(filename)
        folder = self._gallery_dir(gallery_id)
        folder.mkdir(parents=True, exist_ok=True)
        with open(folder / name, "wb") as dst:
            shutil.copyfileobj(src, dst)
        logger.info("Stored image %s for gallery %s", name, gallery_id)
        return Image(gallery_id=int(gallery_id), filename=name)

    def by_gallery_id(self, gallery_id: int) -> List[Image]:
        folder = self._gallery_dir(gallery_id)
        if not folder.is_dir():
            return []
        return [
            Image(gallery_id=int(gallery_id), filename=p.name)
            for p in sorted(folder.iterdir())
            if p.is_file()
        ]

    def delete(self, image: Image) -> None:
        target = self._gallery_dir(image.gallery_id) / safe_filename(image.filename)
        try:
            target.unlink()
        except FileNotFoundError as exc:
            raise ModelError(ErrorCode.NOT_FOUND) from exc
