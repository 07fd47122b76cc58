"""
Database utility functions.

Provides a retry decorator for transient database errors.
"""

import asyncio
import logging

from sqlalchemy.exc import (
    OperationalError,
    InterfaceError,
    DisconnectionError,
)
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log,
)

logger = logging.getLogger(__name__)

# Errors worth retrying; everything else propagates immediately
RETRYABLE_EXCEPTIONS = (
    OperationalError,
    InterfaceError,
    DisconnectionError,
    asyncio.TimeoutError,
    ConnectionRefusedError,
    ConnectionResetError,
)


def create_db_retry(
    max_attempts: int = 3,
    min_wait: float = 0.5,
    max_wait: float = 5,
):
    """
    Create a tenacity retry decorator for entry reads and writes.

    A retried write re-sends the same full document, so it is idempotent.

    Args:
        max_attempts: Maximum number of attempts
        min_wait: Minimum wait time between attempts (seconds)
        max_wait: Maximum wait time between attempts (seconds)

    Returns:
        Configured retry decorator
    """
    return retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=1, min=min_wait, max=max_wait),
        retry=retry_if_exception_type(RETRYABLE_EXCEPTIONS),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )


db_retry = create_db_retry()
