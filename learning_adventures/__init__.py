"""Learning Adventures Backend.

Gamified learning platform providing course catalogs, progress tracking,
parent-managed child accounts and an AI-assisted content studio.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
