# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Process configuration.

Sources, lowest precedence first:
  1. built-in development defaults
  2. optional YAML file (LENSLOCKED_CONFIG, default ``.config.yml``)
  3. LENSLOCKED_* environment variables
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_CONFIG_PATH = Path(os.getenv("LENSLOCKED_CONFIG", ".config.yml"))


@dataclass(frozen=True)
class Config:
    port: int = 8000
    host: str = "127.0.0.1"
    env: str = "dev"
    pepper: str = "secret-random-string-this-project"
    hmac_key: str = "secret-hmac-key"
    csrf_key: str = "secret-csrf-key"
    database_url: str = "sqlite:///./lenslocked_dev.db"
    images_dir: str = "images"
    log_level: str = "INFO"

    @property
    def is_prod(self) -> bool:
        return self.env == "prod"


_INT_FIELDS = {"port"}


def _coerce(values: Dict[str, Any]) -> Dict[str, Any]:
    known = {f.name for f in fields(Config)}
    out: Dict[str, Any] = {}
    for key, value in values.items():
        k = str(key).strip().lower()
        if k not in known or value is None:
            continue
        out[k] = int(value) if k in _INT_FIELDS else str(value)
    return out


def _load_file(path: Path) -> Dict[str, Any]:
    raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise RuntimeError(f"Configuración inválida en {path}: se esperaba un mapa")
    return _coerce(raw)


def _load_env() -> Dict[str, Any]:
    values = {}
    for f in fields(Config):
        v = os.getenv(f"LENSLOCKED_{f.name.upper()}")
        if v is not None and v != "":
            values[f.name] = v
    return _coerce(values)


def load_config(path: Optional[Path] = None, *, required: bool = False) -> Config:
    p = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    cfg = Config()
    if p.exists():
        cfg = replace(cfg, **_load_file(p))
    elif required:
        raise RuntimeError(f"Falta el fichero de configuración {p}")
    return replace(cfg, **_load_env())


def configure_logging(config: Config) -> None:
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def prod_requested() -> bool:
    """LENSLOCKED_PROD=1 makes the config file mandatory."""
    return os.getenv("LENSLOCKED_PROD", "false").lower() in {"1", "true", "yes", "y"}
