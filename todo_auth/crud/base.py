# todo_auth_api/todo_auth/crud/base.py
from typing import Any, Generic, Optional, Type, TypeVar
from sqlalchemy.ext.asyncio import AsyncSession

from todo_auth.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class CRUDBase(Generic[ModelType]):
    def __init__(self, model: Type[ModelType]):
        self.model = model

    async def get(self, db: AsyncSession, id: Any) -> Optional[ModelType]:
        return await db.get(self.model, id)
