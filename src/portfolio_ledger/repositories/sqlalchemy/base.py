"""Shared plumbing for SQLAlchemy repositories."""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from portfolio_ledger.core.exceptions import ConcurrencyError, PersistenceError


class SqlAlchemyRepository:
    """
    Base for repositories bound to one session.

    In standalone mode (autocommit=True) every write commits on its own.
    Inside a unit of work (autocommit=False) writes are only flushed, so the
    owning unit of work decides whether they become durable.
    """

    def __init__(
        self,
        db: Session,
        autocommit: bool = True,
        logger: Optional[logging.Logger] = None,
    ):
        self._db = db
        self._autocommit = autocommit
        self._logger = logger or logging.getLogger(self.__class__.__module__)

    def _persist(self, resource: str, identifier: object) -> None:
        """Commit or flush pending changes, translating storage errors."""
        try:
            if self._autocommit:
                self._db.commit()
            else:
                self._db.flush()
        except StaleDataError as exc:
            self._discard()
            self._logger.error("Concurrent modification of %s %s", resource, identifier)
            raise ConcurrencyError(resource, identifier) from exc
        except SQLAlchemyError as exc:
            self._discard()
            self._logger.error("Failed to persist %s %s: %s", resource, identifier, exc)
            raise PersistenceError(f"Failed to persist {resource} {identifier}") from exc

    def _discard(self) -> None:
        # A unit of work rolls back in its own __exit__
        if self._autocommit:
            self._db.rollback()
