# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Driver for ordered validator chains.

A validator takes the in-progress record and either mutates it (normalising,
hashing) or raises ``ModelError``. The first failure stops the chain.
"""

from __future__ import annotations

from typing import Callable, TypeVar

T = TypeVar("T")

Validator = Callable[[T], None]


def run_validators(record: T, *validators: Validator) -> T:
    for fn in validators:
        fn(record)
    return record
