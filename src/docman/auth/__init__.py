# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Authentication helpers.

This package provides:
- Password hashing/verification (argon2)
- The credential store (users.yml, or in memory for tests)
- Signed session cookies carrying the username and flash messages (itsdangerous)
"""
