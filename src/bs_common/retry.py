"""Transient-conflict detection and bounded retry of a unit of work.

PostgreSQL reports lost races through SQLSTATE codes. Those three are safe to
retry from scratch because the failed transaction has been rolled back:
  40001 serialization_failure
  40P01 deadlock_detected
  55P03 lock_not_available (lock_timeout expired)
"""

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from src.bs_common.errors import ConflictError, DataOutOfRangeError

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_SQLSTATES = frozenset({"40001", "40P01", "55P03"})

# Class 22 (data exception), e.g. 22003 numeric_value_out_of_range.
DATA_EXCEPTION_CLASS = "22"


def sqlstate_of(exc: DBAPIError) -> str | None:
    """Extract the SQLSTATE from a driver error wrapped by SQLAlchemy."""
    orig = exc.orig
    for attr in ("sqlstate", "pgcode"):
        code = getattr(orig, attr, None)
        if isinstance(code, str):
            return code
    cause = getattr(orig, "__cause__", None)
    code = getattr(cause, "sqlstate", None)
    return code if isinstance(code, str) else None


def is_data_exception(exc: BaseException) -> bool:
    if not isinstance(exc, DBAPIError):
        return False
    code = sqlstate_of(exc)
    return code is not None and code.startswith(DATA_EXCEPTION_CLASS)


def is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, ConflictError):
        return exc.retryable
    return isinstance(exc, DBAPIError) and sqlstate_of(exc) in RETRYABLE_SQLSTATES


async def run_in_transaction(
    db: AsyncSession,
    work: Callable[[], Awaitable[T]],
    *,
    max_retries: int,
    label: str,
) -> T:
    """Run `work` and commit; roll back on any error.

    Retryable conflicts are re-run up to `max_retries` extra times and then
    surface as ConflictError. Database data exceptions (out-of-range numerics)
    become DataOutOfRangeError. Every other error propagates unchanged.
    """
    attempt = 0
    while True:
        try:
            result = await work()
            await db.commit()
            return result
        except Exception as exc:
            await _rollback_quietly(db, label)
            if is_data_exception(exc):
                raise DataOutOfRangeError() from exc
            if not is_retryable(exc):
                raise
            if attempt >= max_retries:
                logger.error("%s: conflict persisted after %d retries", label, max_retries)
                if isinstance(exc, ConflictError):
                    raise
                raise ConflictError() from exc
            attempt += 1
            logger.warning("%s: conflict, retrying (%d/%d)", label, attempt, max_retries)


async def _rollback_quietly(db: AsyncSession, label: str) -> None:
    """Roll back without masking the error that caused the rollback."""
    try:
        await db.rollback()
    except Exception:
        logger.exception("%s: rollback failed", label)
