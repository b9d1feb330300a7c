# todo_auth_api/todo_auth/crud/crud_user.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select
from typing import Optional
from loguru import logger

from todo_auth.crud.base import CRUDBase
from todo_auth.models.user import User
from todo_auth.schemas.user import UserCreate
from todo_auth.core.security import get_password_hash
from todo_auth.core.exceptions import EmailAlreadyRegistered


class CRUDUser(CRUDBase[User]):
    async def get_by_email(self, db: AsyncSession, *, email: str) -> Optional[User]:
        stmt = select(User).where(User.email == email)
        result = await db.execute(stmt)
        return result.scalars().first()

    async def create(self, db: AsyncSession, *, obj_in: UserCreate) -> User:
        db_obj = User(
            email=obj_in.email,
            username=obj_in.username,
            hashed_password=get_password_hash(obj_in.password),
        )
        db.add(db_obj)
        try:
            await db.commit()
        except IntegrityError:
            # Corrida entre dois registros com o mesmo email
            await db.rollback()
            logger.warning(f"Registro duplicado para email: {obj_in.email}")
            raise EmailAlreadyRegistered(obj_in.email)
        await db.refresh(db_obj)
        logger.info(f"Usuário criado: ID {db_obj.id}")
        return db_obj

user = CRUDUser(User)
