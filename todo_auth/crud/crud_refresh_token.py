# todo_auth_api/todo_auth/crud/crud_refresh_token.py
import hashlib
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from loguru import logger

from todo_auth.models.refresh_token import RefreshToken
from todo_auth.core.exceptions import StoreFailure


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


async def create_refresh_token(
    db: AsyncSession,
    *,
    user_id: int,
    token: str,
    jwt_id: str,
    added_at: datetime,
    expires_at: datetime,
) -> RefreshToken:
    """Persiste o hash de um novo refresh token. Um registro por emissão."""
    db_token = RefreshToken(
        user_id=user_id,
        token_hash=hash_token(token),
        jwt_id=jwt_id,
        added_at=added_at,
        expires_at=expires_at,
        is_used=False,
        is_revoked=False,
    )
    db.add(db_token)
    try:
        await db.commit()
        await db.refresh(db_token)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Error creating refresh token for user ID {user_id}: {e}")
        raise StoreFailure("Could not persist refresh token") from e
    return db_token


async def get_refresh_token(db: AsyncSession, *, token: str) -> RefreshToken | None:
    """Busca pelo valor opaco (via hash), sem filtrar estado: quem chama decide o motivo da falha."""
    stmt = select(RefreshToken).where(RefreshToken.token_hash == hash_token(token))
    result = await db.execute(stmt)
    return result.scalars().first()


async def mark_refresh_token_used(db: AsyncSession, *, token: str) -> bool:
    """
    Compare-and-set de is_used: False -> True.

    Retorna False se outra requisição já consumiu o token. Duas rotações
    concorrentes do mesmo token nunca recebem True ao mesmo tempo.
    """
    stmt = (
        update(RefreshToken)
        .where(
            RefreshToken.token_hash == hash_token(token),
            RefreshToken.is_used == False,  # noqa: E712
        )
        .values(is_used=True)
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(stmt)
    await db.commit()
    return result.rowcount == 1


async def revoke_refresh_token(db: AsyncSession, *, token: str) -> bool:
    """Marca um refresh token como revogado. False se não existe ou já estava revogado."""
    stmt = (
        update(RefreshToken)
        .where(
            RefreshToken.token_hash == hash_token(token),
            RefreshToken.is_revoked == False,  # noqa: E712
        )
        .values(is_revoked=True)
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(stmt)
    await db.commit()
    return result.rowcount == 1


async def revoke_all_refresh_tokens_for_user(db: AsyncSession, *, user_id: int) -> int:
    """Revoga todos os refresh tokens ainda válidos de um usuário (ex: logout global)."""
    stmt = (
        update(RefreshToken)
        .where(RefreshToken.user_id == user_id, RefreshToken.is_revoked == False)  # noqa: E712
        .values(is_revoked=True)
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(stmt)
    await db.commit()
    return result.rowcount
