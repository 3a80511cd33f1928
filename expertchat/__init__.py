# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Expert Chat: route questions to experts and moderate the chat that follows."""

__version__ = "1.0.0"
