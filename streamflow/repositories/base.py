"""
Base Repository - Shared persistence helpers for the activity and user tables.

Specialised repositories add their own single-statement queries on top;
the base only covers what every aggregate needs: insert, primary-key
lookup and attribute updates.
"""

from typing import Any, Dict, Generic, Optional, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from streamflow.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Generic repository bound to one model and the request's session.

    Every write commits immediately; callers never hold a transaction
    open across repository calls.
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db

    async def create(self, obj_data: Dict[str, Any]) -> ModelType:
        """
        Insert a row and return it with server defaults (timestamps) loaded.

        Raises:
            IntegrityError: When a unique or check constraint rejects the row
        """
        db_obj = self.model(**obj_data)
        self.db.add(db_obj)
        await self.db.commit()
        await self.db.refresh(db_obj)
        return db_obj

    async def get(self, id: int) -> Optional[ModelType]:
        result = await self.db.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def update(self, id: int, obj_data: Dict[str, Any]) -> Optional[ModelType]:
        """
        Apply `obj_data` to the row with this id.

        Keys that are not model attributes are ignored.

        Returns:
            The refreshed instance, or None if the row is gone
        """
        db_obj = await self.get(id)
        if not db_obj:
            return None

        for field, value in obj_data.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        await self.db.commit()
        await self.db.refresh(db_obj)
        return db_obj
