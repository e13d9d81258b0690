"""
Generic repository with the CRUD operations every entity shares.
"""

from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from repositories.database import Base

T = TypeVar("T", bound=Base)  # type: ignore[type-arg]


class BaseRepository(Generic[T]):
    """
    Common data access for one SQLAlchemy model.

    Subclasses bind the model in their constructor and add the queries
    specific to their entity. Methods named create/update/delete commit;
    add/add_all/flush leave the transaction open for the service to
    commit once.
    """

    def __init__(self, model: type[T], db: Session):
        self.model = model
        self.db = db

    def get_by_id(self, id: int) -> T | None:
        """Return the entity with the given primary key, if any."""
        return self.db.get(self.model, id)

    def get_all(self, skip: int = 0, limit: int = 100) -> list[T]:
        """Return a page of entities ordered by primary key."""
        return (
            self.db.query(self.model)
            .order_by(self.model.id)
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count(self) -> int:
        """Return the total number of rows."""
        return self.db.query(self.model).count()

    def add(self, entity: T) -> None:
        """Stage an entity without committing."""
        self.db.add(entity)

    def add_all(self, entities: list[T]) -> None:
        """Stage several entities without committing."""
        self.db.add_all(entities)

    def create(self, entity: T) -> T:
        """
        Insert and commit an entity.

        Args:
            entity: New, transient entity

        Returns:
            The persisted entity, refreshed with database defaults
        """
        self.db.add(entity)
        self.db.commit()
        self.db.refresh(entity)
        return entity

    def update(self, entity: T) -> T:
        """Commit pending changes on an entity and refresh it."""
        self.db.commit()
        self.db.refresh(entity)
        return entity

    def delete(self, entity: T) -> None:
        """Delete an entity and commit."""
        self.db.delete(entity)
        self.db.commit()

    def commit(self) -> None:
        """Commit the current transaction."""
        self.db.commit()

    def flush(self) -> None:
        """Flush pending changes without committing."""
        self.db.flush()

    def rollback(self) -> None:
        """Rollback the current transaction."""
        self.db.rollback()

    def refresh(self, entity: T) -> None:
        """Reload an entity's attributes from the database."""
        self.db.refresh(entity)
