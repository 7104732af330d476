# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import hashlib

from itsdangerous import Signer


class TokenSigner:
    """Deterministic HMAC-SHA256 of a string, keyed by a server secret.

    Used to turn a plaintext remember token into the lookup key stored in the
    database. Output is URL-safe base64.
    """

    def __init__(self, secret: str) -> None:
        if not secret:
            raise RuntimeError("Falta la clave HMAC (hmac_key)")
        self._signer = Signer(secret, key_derivation="none", digest_method=hashlib.sha256)

    def hash(self, value: str) -> str:
        return self._signer.get_signature(value).decode("ascii")
