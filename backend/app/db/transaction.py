from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import AppError, IntegrityConflictError, TransientError

logger = logging.getLogger(__name__)


@contextmanager
def atomic(
    db: Session,
    operation: str,
    *,
    school_id: str,
    integrity_message: str = "The change conflicts with related records.",
) -> Iterator[Session]:
    """Commit the session's work on success and roll it back on any failure.

    Domain errors raised inside the block propagate unchanged after the rollback.
    Store failures are logged with the operation context and re-raised as
    IntegrityConflictError or TransientError.
    """
    try:
        yield db
        db.commit()
    except AppError:
        db.rollback()
        raise
    except IntegrityError as exc:
        db.rollback()
        logger.warning(
            "INTEGRITY VIOLATION | operation=%s | school_id=%s | error=%s",
            operation,
            school_id,
            exc.orig,
        )
        raise IntegrityConflictError(integrity_message, details={"operation": operation}) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("STORE FAILURE | operation=%s | school_id=%s", operation, school_id)
        raise TransientError() from exc
    except Exception:
        db.rollback()
        raise
