# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from argon2 import PasswordHasher
from argon2.exceptions import HashingError, InvalidHashError, VerificationError, VerifyMismatchError

from lenslocked.core.errors import ErrorCode, ModelError

# Fixed cost parameters so hashes stay comparable across deployments.
_PH = PasswordHasher(time_cost=3, memory_cost=65536, parallelism=4, hash_len=32, salt_len=16)


def hash_password(plain: str, pepper: str) -> str:
    if not plain:
        raise ModelError(ErrorCode.PASSWORD_REQUIRED)
    try:
        return _PH.hash(plain + pepper)
    except HashingError as exc:
        raise ModelError(ErrorCode.HASHING_FAILED) from exc


def verify_password(hash_value: str, plain: str, pepper: str) -> bool:
    """True on match, False on mismatch. Corrupt hashes raise HASHING_FAILED."""
    if not hash_value or not plain:
        return False
    try:
        return _PH.verify(hash_value, plain + pepper)
    except VerifyMismatchError:
        return False
    except (VerificationError, InvalidHashError) as exc:
        raise ModelError(ErrorCode.HASHING_FAILED) from exc
