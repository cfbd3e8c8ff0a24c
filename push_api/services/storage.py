from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from push_api.core.errors import StorageError

logger = logging.getLogger(__name__)


@contextmanager
def storage_errors(db: Session, operation: str, **context: Any) -> Iterator[None]:
    """
    Roll back and re-raise any SQLAlchemy failure as ``StorageError``.
    """
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Storage failure during %s", operation)
        raise StorageError(f"Storage failure during {operation}.", **context) from exc
