# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""lenslocked: photo galleries with signup/login and remember-me sessions."""

__version__ = "0.1.0"
