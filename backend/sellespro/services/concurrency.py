# Overview: Retry helper for snapshot writes; encapsulates database contention handling.

from __future__ import annotations

import logging
import time

from sqlalchemy.exc import OperationalError

from ..extensions import db

logger = logging.getLogger(__name__)


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Run a database write, retrying while the database reports contention.

    SQLite answers "database is locked" with OperationalError when another
    process holds the file; the session is rolled back and the write retried
    with exponential backoff. The last failure propagates.
    """
    for attempt in range(1, attempts + 1):
        try:
            return func()
        except OperationalError:
            db.session.rollback()
            if attempt == attempts:
                raise
            delay = backoff_base * (2 ** (attempt - 1))
            logger.warning("Database busy (attempt %d/%d); retrying in %.2fs", attempt, attempts, delay)
            time.sleep(delay)
