"""
Base repository bound to a single SQLAlchemy session.

Repositories never commit; the surrounding UnitOfWork owns the
transaction.
"""

from typing import Any, Generic, Optional, Type, TypeVar

from sqlalchemy.orm import Session

from gatepass.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Common session-bound operations for a single model.
    """

    model: Type[ModelType]

    def __init__(self, session: Session):
        self.session = session

    def get(self, ident: Any) -> Optional[ModelType]:
        """Fetch by primary key."""
        return self.session.get(self.model, ident)

    def add(self, entity: ModelType) -> ModelType:
        """Add entity and flush so generated values are populated."""
        self.session.add(entity)
        self.session.flush()
        return entity
