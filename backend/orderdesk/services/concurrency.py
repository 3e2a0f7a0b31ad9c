# Overview: Row locking and retry helpers for workflow transactions.

from __future__ import annotations

import logging
import time

from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

logger = logging.getLogger(__name__)


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE; use begin_immediate there.
    """
    return query.with_for_update()


def begin_immediate(session) -> bool:
    """
    Take the SQLite write lock before the first read of a transaction.

    Works with plain and scoped sessions. Skipped when the driver connection
    already has a write transaction open; returns whether the lock was taken.
    Other dialects return False and rely on row locks.
    """
    if session.get_bind().dialect.name != "sqlite":
        return False
    dbapi_connection = session.connection().connection.dbapi_connection
    if dbapi_connection.in_transaction:
        return False
    session.execute(text("BEGIN IMMEDIATE"))
    return True


def run_with_retry(func, *, session, attempts: int = 3, backoff_base: float = 0.1):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, locks) and StaleDataError
    (optimistic locking conflicts).
    """
    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError) as exc:
            session.rollback()
            if attempt >= attempts - 1:
                raise
            logger.warning("Retrying after concurrency failure (attempt %d): %s", attempt + 1, exc)
            time.sleep(backoff_base * (2 ** attempt))
