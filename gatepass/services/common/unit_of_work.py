# gatepass/services/common/unit_of_work.py
"""
Unit of Work pattern implementation.

Provides the transaction boundary and repository coordination used by
the bundled document store and identity provider.
"""
from __future__ import annotations

import logging
from contextlib import AbstractContextManager
from typing import Any, Callable, Optional, Type, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gatepass.repositories.base import BaseRepository

from .errors import RemoteError

logger = logging.getLogger(__name__)

TRepository = TypeVar("TRepository", bound=BaseRepository)


class TransactionError(RemoteError):
    """Raised when a database transaction fails."""


class UnitOfWork(AbstractContextManager["UnitOfWork"]):
    """
    Unit of Work pattern for managing database transactions.

    Coordinates repositories and ensures atomic commits/rollbacks.

    Usage:
        >>> with UnitOfWork(session_factory) as uow:
        ...     repo = uow.get_repo(DocumentRepository)
        ...     repo.insert("users", user_id, payload)
        ...     # Commits on __exit__ if no exception
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        """
        Initialize Unit of Work.

        Args:
            session_factory: Factory function that returns a new Session
        """
        self._session_factory = session_factory
        self.session: Optional[Session] = None
        self._repo_cache: dict[Type[BaseRepository], BaseRepository] = {}

    # ------------------------------------------------------------------ #
    # Context manager protocol
    # ------------------------------------------------------------------ #

    def __enter__(self) -> "UnitOfWork":
        if self.session is not None:
            raise RuntimeError("UnitOfWork context already entered")

        self.session = self._session_factory()
        self._repo_cache.clear()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> bool:
        if self.session is None:
            return False

        try:
            if exc_type is None:
                self._commit()
            else:
                self.session.rollback()
                logger.debug(f"UnitOfWork rolled back due to {exc_type.__name__}")
        finally:
            self.session.close()
            self.session = None
            self._repo_cache.clear()

        # Propagate any exception
        return False

    def _commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            logger.error(f"Commit failed: {exc}")
            self.session.rollback()
            raise TransactionError("Failed to commit transaction", exc) from exc

    # ------------------------------------------------------------------ #
    # Repository factory
    # ------------------------------------------------------------------ #

    def get_repo(self, repo_cls: Type[TRepository]) -> TRepository:
        """
        Get or create a repository instance bound to this UnitOfWork's session.

        Repositories are cached per UnitOfWork instance for consistency.

        Raises:
            RuntimeError: If called outside of context
        """
        if self.session is None:
            raise RuntimeError("UnitOfWork.get_repo() called outside of context")

        if repo_cls in self._repo_cache:
            return self._repo_cache[repo_cls]  # type: ignore

        repo_instance = repo_cls(self.session)
        self._repo_cache[repo_cls] = repo_instance
        return repo_instance  # type: ignore
