# todo_auth_api/todo_auth/db/base.py
from sqlalchemy.orm import DeclarativeBase

class Base(DeclarativeBase):
    """
    Base declarativa dos modelos ORM (users, refresh_tokens).
    """
    pass
