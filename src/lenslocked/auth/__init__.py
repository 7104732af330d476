# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Authentication helpers.

This package provides:
- Password hashing/verification with a pepper (argon2)
- Remember token generation (secure random, URL-safe base64)
- Remember token signing (HMAC-SHA256 via itsdangerous)
- Cookie names/settings and CSRF tokens (itsdangerous)
"""
