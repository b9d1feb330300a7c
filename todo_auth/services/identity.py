# todo_auth_api/todo_auth/services/identity.py
"""
Identity store: a capability the token core consumes without owning.

The token service only needs ``find_by_id``; the HTTP layer uses the rest
for register/login. ``SqlIdentityStore`` is the concrete adapter over the
``users`` table and passlib.
"""
from typing import Optional, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from todo_auth.core.security import verify_password
from todo_auth.crud.crud_user import user as crud_user
from todo_auth.models.user import User
from todo_auth.schemas.user import UserCreate


class IdentityStore(Protocol):
    async def find_by_email(self, email: str) -> Optional[User]: ...

    async def find_by_id(self, user_id: int) -> Optional[User]: ...

    def verify_password(self, user: User, password: str) -> bool: ...

    async def create(self, user_in: UserCreate) -> User: ...


class SqlIdentityStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_email(self, email: str) -> Optional[User]:
        return await crud_user.get_by_email(self.db, email=email)

    async def find_by_id(self, user_id: int) -> Optional[User]:
        return await crud_user.get(self.db, id=user_id)

    def verify_password(self, user: User, password: str) -> bool:
        return verify_password(password, user.hashed_password)

    async def create(self, user_in: UserCreate) -> User:
        return await crud_user.create(self.db, obj_in=user_in)
