# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database infrastructure: async engine, sessions, models, migrations."""

from expertchat.infrastructure.database.connection import (
    DatabaseError,
    check_database_connection,
    close_database,
    create_engine_from_settings,
    create_sessionmaker,
    get_engine,
    get_session,
    get_sessionmaker,
    init_database,
    insert_ignore,
    session_scope,
)

__all__ = [
    "DatabaseError",
    "init_database",
    "close_database",
    "create_engine_from_settings",
    "create_sessionmaker",
    "get_engine",
    "get_sessionmaker",
    "get_session",
    "session_scope",
    "check_database_connection",
    "insert_ignore",
]
