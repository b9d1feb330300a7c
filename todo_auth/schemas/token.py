# todo_auth_api/todo_auth/schemas/token.py
from pydantic import BaseModel, Field
from typing import List, Optional


class AuthResult(BaseModel):
    """Corpo de resposta de register/login/refresh-token."""
    token: Optional[str] = None
    refresh_token: Optional[str] = Field(default=None, alias="refreshToken")
    success: bool
    errors: Optional[List[str]] = None

    class Config:
        populate_by_name = True


class TokenRequest(BaseModel):
    token: str
    refresh_token: str = Field(..., alias="refreshToken")

    class Config:
        populate_by_name = True


class LogoutRequest(BaseModel):
    refresh_token: str = Field(..., alias="refreshToken")

    class Config:
        populate_by_name = True
