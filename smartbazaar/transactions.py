# smartbazaar/transactions.py
"""Optimistic transactions with bounded retry.

A unit of work is a callable taking a fresh `Session`. The runner commits it;
if the commit loses a race (a versioned row changed since it was read,
surfaced by SQLAlchemy as `StaleDataError`, or the database refused a lock)
the session is rolled back and the whole unit of work is run again. Any other
exception rolls back and propagates untouched.
"""
from typing import Callable, TypeVar
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from . import config
from .exceptions import TransactionConflict
from .utils import logger, retry

T = TypeVar("T")

# driver messages for lock contention (sqlite busy, postgres deadlock / serialization)
LOCK_MARKERS = ("database is locked", "deadlock detected", "could not serialize")


def is_lock_conflict(exc: OperationalError) -> bool:
    text = str(exc.orig or exc).lower()
    return any(marker in text for marker in LOCK_MARKERS)


class TransactionRunner:
    def __init__(self, session_factory, attempts: int = config.TX_MAX_ATTEMPTS,
                 delay: float = config.TX_RETRY_DELAY, backoff: float = 2):
        if attempts < 1:
            raise ValueError("attempts must be at least 1")
        self.session_factory = session_factory
        self.attempts = attempts
        self.delay = delay
        self.backoff = backoff

    def _attempt(self, work: Callable[[Session], T]) -> T:
        db = self.session_factory()
        try:
            result = work(db)
            db.commit()
            return result
        except OperationalError as e:
            db.rollback()
            if is_lock_conflict(e):
                raise StaleDataError(f"lock conflict: {e.orig}") from e
            raise
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def run(self, work: Callable[[Session], T]) -> T:
        attempt = retry(StaleDataError, tries=self.attempts, delay=self.delay,
                        backoff=self.backoff, logger=logger)(self._attempt)
        try:
            return attempt(work)
        except StaleDataError as e:
            logger.warning("Transaction conflict after %d attempts: %s", self.attempts, e)
            raise TransactionConflict("the item was updated by someone else, please try again") from e
