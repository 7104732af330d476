# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from dataclasses import dataclass

from lenslocked.core.errors import ModelError

logger = logging.getLogger(__name__)

ALERT_LVL_ERROR = "danger"
ALERT_LVL_SUCCESS = "success"

ALERT_MSG_GENERIC = "Something went wrong. Please try again and contact us if the problem persists"


@dataclass(frozen=True)
class Alert:
    level: str
    message: str


def alert_for(exc: Exception) -> Alert:
    """Alert for a failed operation. Only validation errors reach the user verbatim."""
    if isinstance(exc, ModelError) and exc.is_public:
        return Alert(level=ALERT_LVL_ERROR, message=exc.public())
    logger.error("Request failed: %s", exc, exc_info=exc)
    return Alert(level=ALERT_LVL_ERROR, message=ALERT_MSG_GENERIC)


def success(message: str) -> Alert:
    return Alert(level=ALERT_LVL_SUCCESS, message=message)
