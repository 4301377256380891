"""Shared plumbing for the store classes."""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import PersistenceError

log = logging.getLogger(__name__)


class BaseStore:
    """Base for stores bound to one SQLAlchemy session.

    Stores flush but never commit: the caller owns the transaction, so several
    writes from different stores can be committed (or rolled back) together.
    """

    def __init__(self, db: Session):
        """Initialize store with database session.

        Args:
            db: SQLAlchemy session
        """
        self.db = db

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        """Re-raise database failures as PersistenceError."""
        try:
            yield
        except SQLAlchemyError as e:
            log.error(f"Database error during {operation}: {e}")
            raise PersistenceError(f"Database error during {operation}") from e
