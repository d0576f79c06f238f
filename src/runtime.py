# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Process wiring for the feedback analytics engine.

This module connects configuration, logging and the feedback store to
the analytics service:
- startup() / shutdown(): configure logging and manage the connection pool
- analytics_service(): a service bound to one database session, with the
  operation name bound to the logging context

Example:
    from src.runtime import analytics_service, shutdown, startup

    await startup()

    async with analytics_service("get_analytics_overview") as service:
        overview = await service.get_analytics_overview()

    await shutdown()
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from src.core.config import Settings, get_settings
from src.domains.analytics.repository import SqlAlchemyFeedbackRepository
from src.domains.analytics.service import AnalyticsService
from src.infrastructure.database.connection import (
    close_database,
    get_session,
    init_database,
)
from src.utils.logging import get_logger, log_context, setup_logging

logger = get_logger(__name__)


async def startup(settings: Settings | None = None) -> None:
    """Configure logging and open the feedback store pool.

    Args:
        settings: Application settings. Defaults to get_settings().

    Raises:
        DatabaseError: If the connection pool cannot be created.
    """
    settings = settings or get_settings()

    setup_logging(settings)
    await init_database(settings)

    logger.info(
        "Feedback analytics started",
        environment=settings.environment,
        database_host=settings.database.host,
    )


async def shutdown() -> None:
    """Close the feedback store pool."""
    await close_database()
    logger.info("Feedback analytics stopped")


@asynccontextmanager
async def analytics_service(
    operation: str,
    settings: Settings | None = None,
    **context: object,
) -> AsyncIterator[AnalyticsService]:
    """Open a session and yield an AnalyticsService bound to it.

    The operation name and any extra *context* are bound to the logging
    context for the duration of the block. The session commits when the
    block exits cleanly and rolls back otherwise.

    Args:
        operation: Name of the report being produced, for log context.
        settings: Application settings. Defaults to get_settings().
        **context: Extra log context, such as an academic year id.

    Yields:
        AnalyticsService reading through the session.

    Raises:
        DatabaseError: If the store is not initialized or a query fails
            outside the service's own error handling.
    """
    with log_context(operation=operation, **context):
        async with get_session() as db:
            repository = SqlAlchemyFeedbackRepository(db)
            yield AnalyticsService(repository, settings=settings)
