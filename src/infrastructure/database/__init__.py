# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database infrastructure for the feedback store.

This package provides the SQLAlchemy async connection to the feedback
store and the read models the analytics repository queries.

Example:
    from src.infrastructure.database import get_session, FeedbackSnapshot

    async with get_session() as session:
        result = await session.execute(select(FeedbackSnapshot))
"""

from src.infrastructure.database.connection import (
    DatabaseError,
    check_database_connection,
    close_database,
    get_engine,
    get_session,
    get_sessionmaker,
    init_database,
)
from src.infrastructure.database.models import (
    AcademicYear,
    Base,
    Division,
    Faculty,
    FeedbackSnapshot,
    Subject,
)

__all__ = [
    # Connection
    "DatabaseError",
    "check_database_connection",
    "close_database",
    "get_engine",
    "get_session",
    "get_sessionmaker",
    "init_database",
    # Models
    "Base",
    "FeedbackSnapshot",
    "Subject",
    "Faculty",
    "Division",
    "AcademicYear",
]
