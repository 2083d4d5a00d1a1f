# Overview: Transaction scoping and retry helpers shared by the lifecycle services.

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Callable, Iterator, TypeVar

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from .errors import StorageError

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_ERRORS = (OperationalError, StaleDataError)


@contextmanager
def unit_of_work(session: Session) -> Iterator[Session]:
    """
    Scope one atomic lifecycle mutation.

    Commits on clean exit. Any exception rolls back every write made inside
    the block and is re-raised unchanged.
    """
    try:
        yield session
        session.commit()
    except BaseException:
        session.rollback()
        raise


def run_with_retry(
    session: Session,
    func: Callable[[], T],
    *,
    attempts: int = 3,
    backoff_base: float = 0.05,
    retry_on: tuple[type[BaseException], ...] = (),
) -> T:
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (locks, deadlocks), StaleDataError
    (optimistic locking conflicts) and anything in retry_on. Exhausted
    retries and any other SQLAlchemyError surface as StorageError.
    """
    retryable = RETRYABLE_ERRORS + tuple(retry_on)
    for attempt in range(attempts):
        try:
            return func()
        except retryable as exc:
            session.rollback()
            if attempt >= attempts - 1:
                logger.error("giving up after %d attempts: %s", attempts, exc.__class__.__name__)
                raise StorageError("Storage temporarily unavailable") from exc
            logger.warning(
                "retrying after %s (attempt %d/%d)", exc.__class__.__name__, attempt + 1, attempts
            )
            time.sleep(backoff_base * (2 ** attempt))
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception("storage failure")
            raise StorageError("Storage temporarily unavailable") from exc
    raise StorageError("Storage temporarily unavailable")


UNIQUE_RACE_ERRORS = (IntegrityError,)
