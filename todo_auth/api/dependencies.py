# todo_auth_api/todo_auth/api/dependencies.py
from datetime import timedelta
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from todo_auth.core.config import settings
from todo_auth.core.exceptions import InvalidTokenError
from todo_auth.core.security import TokenCodec
from todo_auth.db.session import get_db
from todo_auth.models.user import User as UserModel
from todo_auth.services.identity import IdentityStore, SqlIdentityStore
from todo_auth.services.token_service import TokenService

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")


def get_token_codec() -> TokenCodec:
    return TokenCodec(
        secret_key=settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
        issuer=settings.JWT_ISSUER,
        audience=settings.JWT_AUDIENCE,
    )


def get_identity_store(db: AsyncSession = Depends(get_db)) -> IdentityStore:
    return SqlIdentityStore(db)


def get_token_service(
    db: AsyncSession = Depends(get_db),
    codec: TokenCodec = Depends(get_token_codec),
    users: IdentityStore = Depends(get_identity_store),
) -> TokenService:
    return TokenService(
        db=db,
        codec=codec,
        users=users,
        access_token_ttl=timedelta(seconds=settings.ACCESS_TOKEN_EXPIRE_SECONDS),
        refresh_token_ttl=timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    )


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    codec: TokenCodec = Depends(get_token_codec),
    db: AsyncSession = Depends(get_db),
    users: IdentityStore = Depends(get_identity_store),
) -> UserModel:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = codec.decode_active(token)
    except InvalidTokenError:
        raise credentials_exception

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise credentials_exception

    user = await users.find_by_id(user_id)
    # Fecha a transação de leitura (expire_on_commit=False mantém o user carregado)
    await db.commit()
    if user is None:
        raise credentials_exception
    return user
