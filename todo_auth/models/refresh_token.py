# todo_auth_api/todo_auth/models/refresh_token.py
from sqlalchemy import String, DateTime, ForeignKey, Boolean, Index
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime

from todo_auth.db.base import Base

class RefreshToken(Base):
    __tablename__ = "refresh_tokens"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    # Armazena um HASH do token opaco, não o token em si
    token_hash: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)
    # jti do access token emitido junto com este refresh token
    jwt_id: Mapped[str] = mapped_column(String(64), nullable=False)
    # Datas em UTC naive
    added_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    # is_used nunca volta para False depois da rotação
    is_used: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_revoked: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    __table_args__ = (Index("ix_refresh_tokens_user_revoked", "user_id", "is_revoked"),)
